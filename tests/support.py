"""
Shared fixtures for the test suite.
"""
import shutil
import tempfile
import uuid
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Optional

from worxnotes.changefeed import ChangeEvent, ChangeFeed, ChangeType
from worxnotes.config import load_settings
from worxnotes.errors import BackendError, RecordNotFoundError
from worxnotes.notifications import Notification, NotificationChannel
from worxnotes.schemas.repair_sheet import RepairSheet, RepairSheetCreate


class TempDirMixin:
    """Gives each test its own scratch directory."""

    def make_tempdir(self) -> Path:
        path = Path(tempfile.mkdtemp(prefix="worxnotes-test-"))
        self.addCleanup(shutil.rmtree, path, ignore_errors=True)
        return path


def make_settings(root: Path, **overrides):
    values = {
        "backend_url": f"sqlite+aiosqlite:///{root / 'worxnotes.db'}",
        "api_key": "test-anon-key",
        "storage_dir": str(root / "diagnostic-files"),
        "preferences_path": str(root / "prefs.json"),
        "_env_file": None,
    }
    values.update(overrides)
    return load_settings(**values)


class RecordingChannel(NotificationChannel):
    """NotificationChannel that keeps everything it was asked to show."""

    def __init__(self):
        super().__init__()
        self.sent: list[Notification] = []
        self.subscribe(self.sent.append)

    def severities(self) -> list[str]:
        return [n.severity.value for n in self.sent]


class InMemoryRepository:
    """RepairRepository kept in a dict; records every call it receives."""

    def __init__(self):
        self.rows: dict[str, RepairSheet] = {}
        self.files: dict[str, str] = {}
        self.calls: list[str] = []
        self.feed = ChangeFeed()
        self.fail_on: set[str] = set()
        self._tick = 0

    def _check(self, name: str) -> None:
        self.calls.append(name)
        if name in self.fail_on:
            raise BackendError(f"{name} failed")

    async def create(self, data: RepairSheetCreate) -> RepairSheet:
        self._check("create")
        self._tick += 1
        sheet = RepairSheet(
            **data.model_dump(),
            id=str(uuid.uuid4()),
            created_at=datetime(2025, 5, 14, tzinfo=timezone.utc) + timedelta(minutes=self._tick),
        )
        self.rows[sheet.id] = sheet
        self.feed.publish(ChangeEvent(ChangeType.INSERT, new=sheet.model_dump(mode="json"), old={}))
        return sheet

    async def get(self, record_id: str) -> RepairSheet:
        self._check("get")
        if record_id not in self.rows:
            raise RecordNotFoundError(record_id)
        return self.rows[record_id]

    async def list(self, order_by: str = "created_at", ascending: bool = False) -> list:
        self._check("list")
        return sorted(
            self.rows.values(),
            key=lambda sheet: getattr(sheet, order_by) or "",
            reverse=not ascending,
        )

    async def update(self, record_id: str, data) -> RepairSheet:
        self._check("update")
        old = await self.get(record_id)
        sheet = RepairSheet(**data.model_dump(), id=old.id, created_at=old.created_at)
        self.rows[record_id] = sheet
        self.feed.publish(ChangeEvent(
            ChangeType.UPDATE, new=sheet.model_dump(mode="json"), old=old.model_dump(mode="json")
        ))
        return sheet

    async def delete(self, record_id: str) -> None:
        self._check("delete")
        old = self.rows.pop(record_id)
        self.feed.publish(ChangeEvent(ChangeType.DELETE, new={}, old=old.model_dump(mode="json")))

    async def upload_attachment(self, filename: str, data: bytes) -> str:
        self._check("upload_attachment")
        key = f"{len(self.files) + 1}-{filename}"
        self.files[key] = data.decode("utf-8")
        return key

    async def download_attachment(self, key: str) -> str:
        self._check("download_attachment")
        return self.files[key]

    async def delete_attachment(self, key: str) -> None:
        self._check("delete_attachment")
        self.files.pop(key, None)

    def subscribe(self, listener):
        return self.feed.subscribe(listener)


def sheet_payload(**overrides) -> RepairSheetCreate:
    values = {"technician_name": "J. Rivera", "ro_number": "RO-1042"}
    values.update(overrides)
    return RepairSheetCreate(**values)


class FakeClock:
    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


def first_error(channel: RecordingChannel) -> Optional[Notification]:
    for notification in channel.sent:
        if notification.severity.value == "error":
            return notification
    return None
