"""Journal analysis and persistence."""
