"""HTTP API for Sahay."""
