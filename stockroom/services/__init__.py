"""Domain services (no HTTP concerns)."""
