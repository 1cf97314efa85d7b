"""
Record and file operations behind one narrow interface.

Controllers only talk to ``RepairRepository``; the SQLAlchemy implementation
below is the one wired into the application, tests are free to swap in their
own.
"""
import logging
from datetime import datetime, timezone
from typing import Protocol

from sqlalchemy import asc, desc, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from worxnotes.changefeed import ChangeEvent, ChangeFeed, ChangeListener, ChangeType, Subscription
from worxnotes.errors import BackendError, RecordNotFoundError
from worxnotes.models.repair_sheet import RepairSheet as RepairSheetRow
from worxnotes.schemas.compat import CURRENT_SCHEMA_VERSION, upgrade_record
from worxnotes.schemas.repair_sheet import RepairSheet, RepairSheetCreate, RepairSheetUpdate
from worxnotes.storage import AttachmentStorage

logger = logging.getLogger(__name__)

SORTABLE_FIELDS = (
    "customer_first_name",
    "customer_last_name",
    "ro_number",
    "technician_name",
    "created_at",
)


class RepairRepository(Protocol):
    async def create(self, data: RepairSheetCreate) -> RepairSheet: ...

    async def get(self, record_id: str) -> RepairSheet: ...

    async def list(self, order_by: str = "created_at", ascending: bool = False) -> list[RepairSheet]: ...

    async def update(self, record_id: str, data: RepairSheetUpdate) -> RepairSheet: ...

    async def delete(self, record_id: str) -> None: ...

    async def upload_attachment(self, filename: str, data: bytes) -> str: ...

    async def download_attachment(self, key: str) -> str: ...

    async def delete_attachment(self, key: str) -> None: ...

    def subscribe(self, listener: ChangeListener) -> Subscription: ...


def row_to_schema(row: RepairSheetRow) -> RepairSheet:
    """Apply the compat migrations and validate a stored row."""
    return RepairSheet.model_validate(upgrade_record(row.to_dict()))


def _payload(sheet: RepairSheet) -> dict:
    return sheet.model_dump(mode="json")


class SqlRepairRepository:
    """RepairRepository over SQLAlchemy, a local blob directory and an in-process change feed."""

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        storage: AttachmentStorage,
        feed: ChangeFeed,
    ):
        self._session_factory = session_factory
        self._storage = storage
        self._feed = feed

    async def _fetch(self, session: AsyncSession, record_id: str) -> RepairSheetRow:
        result = await session.execute(select(RepairSheetRow).where(RepairSheetRow.id == record_id))
        row = result.scalar_one_or_none()
        if row is None:
            raise RecordNotFoundError(record_id)
        return row

    async def create(self, data: RepairSheetCreate) -> RepairSheet:
        values = data.model_dump(mode="json")
        try:
            async with self._session_factory() as session:
                row = RepairSheetRow(
                    **values,
                    created_at=datetime.now(timezone.utc),
                    schema_version=CURRENT_SCHEMA_VERSION,
                )
                session.add(row)
                await session.commit()
                await session.refresh(row)
                sheet = row_to_schema(row)
        except SQLAlchemyError as exc:
            raise BackendError(f"Failed to save repair sheet: {exc}") from exc

        logger.info("Created repair sheet %s (RO %s)", sheet.id, sheet.ro_number)
        self._feed.publish(ChangeEvent(ChangeType.INSERT, new=_payload(sheet), old={}))
        return sheet

    async def get(self, record_id: str) -> RepairSheet:
        try:
            async with self._session_factory() as session:
                return row_to_schema(await self._fetch(session, record_id))
        except SQLAlchemyError as exc:
            raise BackendError(f"Failed to fetch repair details: {exc}") from exc

    async def list(self, order_by: str = "created_at", ascending: bool = False) -> list[RepairSheet]:
        if order_by not in SORTABLE_FIELDS:
            raise ValueError(f"Cannot sort by {order_by!r}")
        column = getattr(RepairSheetRow, order_by)
        direction = asc if ascending else desc
        try:
            async with self._session_factory() as session:
                result = await session.execute(
                    select(RepairSheetRow).order_by(direction(column), direction(RepairSheetRow.created_at))
                )
                return [row_to_schema(row) for row in result.scalars().all()]
        except SQLAlchemyError as exc:
            raise BackendError(f"Failed to fetch repairs: {exc}") from exc

    async def update(self, record_id: str, data: RepairSheetUpdate) -> RepairSheet:
        values = data.model_dump(mode="json")
        try:
            async with self._session_factory() as session:
                row = await self._fetch(session, record_id)
                old = row_to_schema(row)
                for field, value in values.items():
                    setattr(row, field, value)
                # Overwritten sheets no longer need their legacy fields
                row.customer_name = None
                row.brake_pad_unit = None
                row.vehicle_mileage = None
                row.schema_version = CURRENT_SCHEMA_VERSION
                await session.commit()
                await session.refresh(row)
                sheet = row_to_schema(row)
        except SQLAlchemyError as exc:
            raise BackendError(f"Failed to update repair sheet: {exc}") from exc

        logger.info("Updated repair sheet %s", record_id)
        self._feed.publish(ChangeEvent(ChangeType.UPDATE, new=_payload(sheet), old=_payload(old)))
        return sheet

    async def delete(self, record_id: str) -> None:
        try:
            async with self._session_factory() as session:
                row = await self._fetch(session, record_id)
                old = row_to_schema(row)
                await session.delete(row)
                await session.commit()
        except SQLAlchemyError as exc:
            raise BackendError(f"Failed to delete repair sheet: {exc}") from exc

        logger.info("Deleted repair sheet %s", record_id)
        self._feed.publish(ChangeEvent(ChangeType.DELETE, new={}, old=_payload(old)))

    async def upload_attachment(self, filename: str, data: bytes) -> str:
        return await self._storage.upload(filename, data)

    async def download_attachment(self, key: str) -> str:
        return await self._storage.read_text(key)

    async def delete_attachment(self, key: str) -> None:
        await self._storage.delete(key)

    def subscribe(self, listener: ChangeListener) -> Subscription:
        return self._feed.subscribe(listener)
