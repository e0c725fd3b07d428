"""Memory fact extraction."""
