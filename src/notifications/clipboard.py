"""
Clipboard collaborator

The server cannot reach the user's clipboard, so the API hands the copied
text back to the browser through a ``BufferClipboard``.
"""
import logging
from typing import Optional

logger = logging.getLogger(__name__)


class ClipboardError(Exception):
    """Raised when text cannot be placed on the clipboard"""


class Clipboard:
    """Interface for clipboard writers"""

    def write_text(self, text: str) -> None:
        """Place ``text`` on the clipboard; raises ClipboardError when it cannot"""
        raise NotImplementedError


class BufferClipboard(Clipboard):
    """Holds the last text written to it"""

    def __init__(self):
        self.text: Optional[str] = None

    def write_text(self, text: str) -> None:
        if not isinstance(text, str):
            raise ClipboardError(f"Only text can be copied, got {type(text).__name__}")
        self.text = text
        logger.debug(f"Copied {len(text)} characters")
