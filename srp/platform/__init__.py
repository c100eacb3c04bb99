"""Process execution helpers."""
