"""Domain services behind the API routes."""
