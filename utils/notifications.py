"""
User-facing notifications (the API's equivalent of a UI toast)
"""
from dataclasses import dataclass, asdict
from typing import Dict

DEFAULT = "default"
DESTRUCTIVE = "destructive"

RETRY_HINT = "Please try again."


@dataclass(frozen=True)
class Notification:
    title: str
    description: str
    variant: str = DEFAULT

    @property
    def is_error(self) -> bool:
        return self.variant == DESTRUCTIVE

    def to_dict(self) -> Dict[str, str]:
        return asdict(self)

    @classmethod
    def info(cls, title: str, description: str) -> "Notification":
        return cls(title, description, DEFAULT)

    @classmethod
    def error(cls, title: str, description: str) -> "Notification":
        return cls(title, description, DESTRUCTIVE)
