"""Database-backed services for the realm simulation."""
