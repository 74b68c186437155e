# workshop/core/state.py
import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any, Callable

from fastapi.concurrency import run_in_threadpool

logger = logging.getLogger(__name__)

Ticket = dict[str, Any]


@dataclass
class AppState:
    """In-memory view state for one signed-in session."""

    tickets: list[Ticket] = field(default_factory=list)
    current_ticket: Ticket | None = None
    user_email: str | None = None
    revision: int = 0

    @property
    def active(self) -> bool:
        return self.user_email is not None

    def start_session(self, user_email: str) -> None:
        self.user_email = user_email
        self.tickets = []
        self.current_ticket = None

    def end_session(self) -> None:
        self.user_email = None
        self.tickets = []
        self.current_ticket = None

    def replace_tickets(self, tickets: list[Ticket]) -> bool:
        """Swap the cache wholesale. Returns True when the ticket count changed."""
        changed = len(tickets) != len(self.tickets)
        self.tickets = tickets
        if changed:
            self.revision += 1
        return changed


class TicketPoller:
    """Re-fetches the full ticket list every ``interval`` seconds while the
    session is active."""

    def __init__(
        self,
        state: AppState,
        fetch: Callable[[], list[Ticket]],
        interval: float,
        on_change: Callable[[list[Ticket]], None] | None = None,
    ):
        self.state = state
        self.fetch = fetch
        self.interval = interval
        self.on_change = on_change
        self._task: asyncio.Task | None = None

    def refresh_once(self) -> bool:
        changed = self.state.replace_tickets(self.fetch())
        if changed and self.on_change is not None:
            self.on_change(self.state.tickets)
        return changed

    async def _run(self) -> None:
        while True:
            await asyncio.sleep(self.interval)
            if not self.state.active:
                continue
            try:
                await run_in_threadpool(self.refresh_once)
            except Exception:
                logger.exception("Ticket refresh failed, retrying in %ss", self.interval)

    def start(self) -> asyncio.Task:
        if self._task is None or self._task.done():
            self._task = asyncio.create_task(self._run())
        return self._task

    async def stop(self) -> None:
        if self._task is None:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None
        logger.debug("Ticket poller stopped")
