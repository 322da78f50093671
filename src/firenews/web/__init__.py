"""
Web API for firenews.
"""

from firenews.web.app import create_app

__all__ = ["create_app"]
