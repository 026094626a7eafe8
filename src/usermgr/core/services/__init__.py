"""Core services: database access, local user store, directory and façade."""
