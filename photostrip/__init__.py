"""Photo-strip layout editing and print composition engine."""

__version__ = "1.0.0"
