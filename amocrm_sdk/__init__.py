"""
amoCRM SDK
Async REST client and web UI list URL filter translation
"""

__version__ = "1.0.0"
