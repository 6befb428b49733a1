"""
hopen - serve a directory of HTML files on localhost

hopen starts (or reuses) a small loopback HTTP server for the current
directory or a configured site root, and opens the browser at the right URL.
"""

__version__ = "1.0.0"
__all__ = ["__version__"]
