"""Sound therapy analysis and recommendations."""
