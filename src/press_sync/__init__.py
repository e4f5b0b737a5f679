"""press-sync: publish a local directory of posts and media to WordPress."""

__version__ = "0.1.0"
