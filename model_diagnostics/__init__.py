"""Statistical diagnostics for trained model review."""

__version__ = "0.1.0"
