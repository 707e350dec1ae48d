import logging
from typing import Protocol

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from boiler_leads.domain.errors import PersistenceError
from boiler_leads.domain.inquiries.db_models import Inquiry, Visit
from boiler_leads.domain.inquiries.schemas import InquiryCreate, VisitCreate

logger = logging.getLogger(__name__)


class InquiryStore(Protocol):
    async def create_inquiry(self, inquiry: InquiryCreate) -> Inquiry: ...

    async def create_visit(self, visit: VisitCreate) -> Visit: ...


class SqlAlchemyInquiryStore:
    """Append-only inserts; each record is written in its own transaction."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def create_inquiry(self, inquiry: InquiryCreate) -> Inquiry:
        record = Inquiry(
            name=inquiry.name,
            phone=inquiry.phone,
            postcode=inquiry.postcode,
            email=inquiry.email,
            selected_model=inquiry.selected_model,
            notes=inquiry.notes,
            ref=inquiry.ref,
            epc=inquiry.epc,
            source=inquiry.source,
        )
        return await self._insert(record, table="inquiries")

    async def create_visit(self, visit: VisitCreate) -> Visit:
        record = Visit(
            page=visit.page,
            ref=visit.ref,
            epc=visit.epc,
            user_agent=visit.user_agent,
            ip=visit.ip,
        )
        return await self._insert(record, table="visits")

    async def _insert(self, record, *, table: str):  # noqa: ANN001
        try:
            async with self._session_factory() as session:
                async with session.begin():
                    session.add(record)
                    await session.flush()
        except SQLAlchemyError as exc:
            logger.error(
                "record_insert_failed",
                extra={"extra": {"table": table, "error_type": type(exc).__name__}},
            )
            raise PersistenceError(f"Failed to insert into {table}") from exc
        return record
