"""Identity entities and their database tables."""
