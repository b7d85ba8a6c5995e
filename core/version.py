"""Version information for uptimer."""

__version__ = "1.4.0"
