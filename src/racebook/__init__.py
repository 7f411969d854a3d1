"""Racing and sports events service backed by SQLite."""
