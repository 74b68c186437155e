# workshop/core/clock.py
import uuid
from datetime import datetime, timezone


class Clock:
    """Source of ticket identifiers and ISO-8601 UTC timestamps."""

    def now(self) -> str:
        return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")

    def new_id(self) -> str:
        return str(uuid.uuid4())
