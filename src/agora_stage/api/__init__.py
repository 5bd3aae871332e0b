"""HTTP presentation helpers shared by the ASGI application."""
