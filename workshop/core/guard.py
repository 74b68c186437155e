# workshop/core/guard.py
from dataclasses import dataclass


@dataclass(frozen=True)
class WriteCapability:
    """Token handed to write calls by the handler of an explicit user action.

    Writes triggered as a side effect (page load, polling) carry a capability
    with ``allowed=False`` and are refused by the ticket service.
    """

    allowed: bool
    source: str = "unknown"

    @classmethod
    def user_action(cls, source: str = "user") -> "WriteCapability":
        return cls(allowed=True, source=source)

    @classmethod
    def automatic(cls, source: str = "automatic") -> "WriteCapability":
        return cls(allowed=False, source=source)
