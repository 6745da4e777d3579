"""Route modules mounted under /api."""
