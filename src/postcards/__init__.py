"""Postcard Creator - Christmas greeting cards from a name, a wish and a message."""

__version__ = "1.0.0"
