"""Core modules for press-sync: the WordPress publishing client."""
