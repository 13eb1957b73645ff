"""Request hooks registered by the application factory."""
