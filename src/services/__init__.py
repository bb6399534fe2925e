"""
Delivery services for rendered mail messages.

This package contains the raw message assembly shared by transports and the
Amazon SES transport.
"""

__all__ = ['raw_message', 'ses']
