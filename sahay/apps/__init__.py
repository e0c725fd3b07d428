"""Application entrypoints for Sahay."""
