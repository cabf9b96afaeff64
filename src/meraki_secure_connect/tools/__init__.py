"""Tool functions wrapping SecureConnectClient; server.py binds them to a client."""
