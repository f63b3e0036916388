"""Project document persistence."""
