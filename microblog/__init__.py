"""ActivityPub federation for a single-account microblog."""

__version__ = "1.0.0"
