"""
MeetingMaestro - a single-user meeting scheduling assistant

This package provides a small meeting scheduler that:
- Books meetings into fixed daily time slots
- Persists them in key-value storage
- Shows, copies and emails the meetings of a day
- Asks an LLM to suggest meeting times from attendee availability
"""

__version__ = "1.0.0"
__author__ = "MeetingMaestro Team"
