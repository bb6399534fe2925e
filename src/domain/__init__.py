"""
Domain layer for mail composition.

This layer contains:
- Address validation (pure syntax rules, optional DNS capability)
- Recipients and recipient lists
- Headers and header lists
- Mail messages (rendering and dispatch through a Transport)
- Result types (explicit success/failure handling)
"""
