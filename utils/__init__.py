"""
Utility modules for MeetingMaestro
"""

from .logger import MeetingMaestroLogger
from .validators import RequestValidator, MeetingFormValidator, SuggestionRequestValidator, DataSanitizer
from .meeting_logger import MeetingLogger
from .notifications import Notification

__all__ = [
    'MeetingMaestroLogger', 'RequestValidator', 'MeetingFormValidator',
    'SuggestionRequestValidator', 'DataSanitizer', 'MeetingLogger', 'Notification'
]
