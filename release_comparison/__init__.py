"""Web Vitals release comparison for sitespeed.io results."""

__version__ = "1.0.0"
