"""
Integrations with external systems: an SMTP relay and DNS.
"""
