"""
recognize.im API client package
"""

from .client import RecognizeClient
from .images import check_image_limits
from .models import CallOutcome, Credentials, OutcomeKind
from .soap import normalize_items

__all__ = [
    'RecognizeClient',
    'check_image_limits',
    'CallOutcome',
    'Credentials',
    'OutcomeKind',
    'normalize_items',
]
