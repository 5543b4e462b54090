"""
Sample HTTP server for the recognize.im client
"""

from .app import ROUTES, create_app

__all__ = ['ROUTES', 'create_app']
