# workshop/ticket/record_store.py
import logging
from typing import Any

from sqlalchemy import func, inspect
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from workshop.core.errors import RecordStoreError, TicketNotFoundError
from workshop.ticket.models import TicketRow

logger = logging.getLogger(__name__)


def _as_dict(row: TicketRow) -> dict[str, Any]:
    return {column.name: getattr(row, column.name) for column in TicketRow.__table__.columns}


def _store_error(exc: SQLAlchemyError) -> RecordStoreError:
    orig = getattr(exc, "orig", None)
    return RecordStoreError(str(orig or exc), code=exc.code or type(exc).__name__)


class RecordStore:
    """The authoritative ``tickets`` table. Rows go in and come out as dicts
    keyed by physical column name."""

    def __init__(self, session_factory: sessionmaker):
        self.session_factory = session_factory

    def _get(self, db: Session, ticket_id: str) -> TicketRow:
        row = db.query(TicketRow).filter(TicketRow.id == ticket_id).first()
        if row is None:
            raise TicketNotFoundError(ticket_id)
        return row

    def select_all(self) -> list[dict[str, Any]]:
        try:
            with self.session_factory() as db:
                rows = (
                    db.query(TicketRow)
                    .order_by(TicketRow.created_at.desc(), TicketRow.ticket_number.desc())
                    .all()
                )
                return [_as_dict(r) for r in rows]
        except SQLAlchemyError as exc:
            raise _store_error(exc) from exc

    def select_one(self, ticket_id: str) -> dict[str, Any]:
        try:
            with self.session_factory() as db:
                return _as_dict(self._get(db, ticket_id))
        except SQLAlchemyError as exc:
            raise _store_error(exc) from exc

    def ids(self) -> set[str]:
        try:
            with self.session_factory() as db:
                return {ticket_id for (ticket_id,) in db.query(TicketRow.id).all()}
        except SQLAlchemyError as exc:
            raise _store_error(exc) from exc

    def max_ticket_number(self) -> int | None:
        try:
            with self.session_factory() as db:
                return db.query(func.max(TicketRow.ticket_number)).scalar()
        except SQLAlchemyError as exc:
            raise _store_error(exc) from exc

    def insert(self, payload: dict[str, Any]) -> dict[str, Any]:
        try:
            with self.session_factory() as db:
                row = TicketRow(**payload)
                db.add(row)
                db.commit()
                db.refresh(row)
                return _as_dict(row)
        except SQLAlchemyError as exc:
            raise _store_error(exc) from exc

    def update(self, ticket_id: str, payload: dict[str, Any]) -> dict[str, Any]:
        try:
            with self.session_factory() as db:
                row = self._get(db, ticket_id)
                for column, value in payload.items():
                    setattr(row, column, value)
                db.commit()
                db.refresh(row)
                return _as_dict(row)
        except SQLAlchemyError as exc:
            raise _store_error(exc) from exc

    def columns(self) -> list[dict[str, Any]] | None:
        """Live column list of the table, for diagnostics only."""
        try:
            with self.session_factory() as db:
                found = inspect(db.get_bind()).get_columns(TicketRow.__tablename__)
        except SQLAlchemyError as exc:
            logger.warning("Could not introspect the tickets table: %s", exc)
            return None
        return [
            {
                "column_name": c["name"],
                "data_type": str(c["type"]),
                "is_nullable": c.get("nullable", True),
                "column_default": c.get("default"),
            }
            for c in found
        ]
