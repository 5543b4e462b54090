"""
Client library for the recognize.im image recognition service.
"""

from .api import RecognizeClient, check_image_limits

__version__ = "1.0.0"

__all__ = ['RecognizeClient', 'check_image_limits']
