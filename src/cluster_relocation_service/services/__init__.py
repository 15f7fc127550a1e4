"""Service layer for cluster API access."""
