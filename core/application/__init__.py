"""Application layer - services, step functions and use cases."""
