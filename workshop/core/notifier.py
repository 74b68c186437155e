# workshop/core/notifier.py
import logging
from collections import deque
from dataclasses import dataclass

logger = logging.getLogger(__name__)

MESSAGES = {
    "he": {
        "load_failed": "שגיאה בטעינת הנתונים",
        "connection_failed": "שגיאה בחיבור למסד הנתונים",
        "save_failed": "שגיאה בשמירת התיקון",
        "update_failed": "שגיאה בעדכון התיקון",
        "ticket_created": "כרטיס נפתח בהצלחה",
        "changes_saved": "השינויים נשמרו",
    },
    "en": {
        "load_failed": "Failed to load data",
        "connection_failed": "Database connection error",
        "save_failed": "Failed to save the repair",
        "update_failed": "Failed to update the repair",
        "ticket_created": "Ticket opened",
        "changes_saved": "Changes saved",
    },
}


@dataclass(frozen=True)
class Toast:
    kind: str
    code: str
    message: str


class Notifier:
    """Collects toast notifications for the UI; errors are logged as well."""

    def __init__(self, locale: str = "he", maxlen: int = 50):
        self.catalog = MESSAGES.get(locale, MESSAGES["en"])
        self._pending: deque[Toast] = deque(maxlen=maxlen)

    def _push(self, kind: str, code: str) -> Toast:
        toast = Toast(kind=kind, code=code, message=self.catalog.get(code, code))
        self._pending.append(toast)
        return toast

    def success(self, code: str) -> Toast:
        return self._push("success", code)

    def error(self, code: str, exc: Exception | None = None) -> Toast:
        if exc is not None:
            logger.error("%s: %s", code, exc)
        return self._push("error", code)

    def drain(self) -> list[Toast]:
        items = list(self._pending)
        self._pending.clear()
        return items
