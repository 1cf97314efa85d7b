"""
Detail view for one repair sheet: read-only by default, editable on demand.
"""
import enum
import logging
from typing import Any, Callable, Optional

from worxnotes.controllers.form import AttachedFile, RepairFormController
from worxnotes.errors import RecordNotFoundError, WorxNotesError
from worxnotes.notifications import NotificationChannel
from worxnotes.printing import brake_pad_display, render_print
from worxnotes.repository import RepairRepository
from worxnotes.schemas.repair_sheet import RepairSheet

logger = logging.getLogger(__name__)

COPYABLE_FIELDS = ("customer_concern", "recommendations", "shop_recommendations")
BRAKE_AXLES = ("front", "rear")
DELETE_PROMPT = "Are you sure you want to delete this repair sheet? This cannot be undone."


class ViewMode(str, enum.Enum):
    LOADING = "loading"
    VIEWING = "viewing"
    EDITING = "editing"
    NOT_FOUND = "not_found"
    ERROR = "error"
    DELETED = "deleted"


class RepairDetailView:
    """
    Viewing -> Editing -> Viewing (cancel or save), or Viewing -> Deleted.

    ``confirm`` is the blocking yes/no prompt shown before deleting and
    ``clipboard`` receives copied text; both are supplied by the caller.
    """

    def __init__(
        self,
        repository: RepairRepository,
        notifications: NotificationChannel,
        record_id: str,
        confirm: Optional[Callable[[str], bool]] = None,
        clipboard: Optional[Callable[[str], None]] = None,
        on_back: Optional[Callable[[], None]] = None,
    ):
        self.repository = repository
        self.notifications = notifications
        self.record_id = record_id
        self.confirm = confirm or (lambda message: False)
        self.clipboard = clipboard
        self.on_back = on_back
        self.mode = ViewMode.LOADING
        self.record: Optional[RepairSheet] = None
        self.form: Optional[RepairFormController] = None
        self.diagnostic_text: Optional[str] = None
        self.loading = False
        self.last_error: Optional[WorxNotesError] = None

    async def load(self) -> Optional[RepairSheet]:
        self.loading = True
        self.last_error = None
        try:
            self.record = await self.repository.get(self.record_id)
        except RecordNotFoundError:
            self.record = None
            self.mode = ViewMode.NOT_FOUND
            return None
        except WorxNotesError as exc:
            self.record = None
            self.last_error = exc
            self.mode = ViewMode.ERROR
            self.notifications.error("Error", str(exc))
            return None
        finally:
            self.loading = False

        self.mode = ViewMode.VIEWING
        await self._preload_diagnostic()
        return self.record

    async def _preload_diagnostic(self) -> None:
        self.diagnostic_text = None
        if self.record is None or not self.record.has_attachment:
            return
        try:
            self.diagnostic_text = await self.repository.download_attachment(self.record.diagnostic_file_id)
        except WorxNotesError as exc:
            logger.warning("Could not preload diagnostic file for %s: %s", self.record_id, exc)

    @property
    def can_view_file(self) -> bool:
        return self.record is not None and self.record.has_attachment

    async def view_diagnostic_file(self) -> Optional[tuple[str, str]]:
        """Return ``(filename, text)`` of the attachment, or None when there is none."""
        if not self.can_view_file:
            return None
        name = self.record.diagnostic_file_name or "diagnostic.txt"
        if self.diagnostic_text is not None:
            return name, self.diagnostic_text
        self.loading = True
        try:
            self.diagnostic_text = await self.repository.download_attachment(self.record.diagnostic_file_id)
        except WorxNotesError as exc:
            self.notifications.error("Error", str(exc))
            return None
        finally:
            self.loading = False
        return name, self.diagnostic_text

    # Editing

    def _require(self, mode: ViewMode) -> None:
        if self.mode is not mode:
            raise RuntimeError(f"Not allowed while {self.mode.value}")

    def begin_edit(self) -> RepairFormController:
        self._require(ViewMode.VIEWING)
        self.form = RepairFormController(self.repository, self.notifications, record=self.record)
        self.mode = ViewMode.EDITING
        return self.form

    def cancel_edit(self) -> None:
        self._require(ViewMode.EDITING)
        self.form = None
        self.mode = ViewMode.VIEWING

    def handle_change(self, name: str, value: Any) -> None:
        self._require(ViewMode.EDITING)
        self.form.handle_change(name, value)

    def select_file(self, files: list[AttachedFile]) -> bool:
        self._require(ViewMode.EDITING)
        return self.form.select_file(files)

    def toggle_brake_unit(self, axle: str) -> None:
        """Flip one axle between MM and %; the readings are left alone."""
        self._require(ViewMode.EDITING)
        if axle not in BRAKE_AXLES:
            raise ValueError(f"Unknown axle {axle!r}")
        field = f"{axle}_brake_pad_unit"
        self.form.handle_change(field, self.form.form[field].toggled())

    async def save(self) -> Optional[RepairSheet]:
        self._require(ViewMode.EDITING)
        previous_file = self.record.diagnostic_file_id
        saved = await self.form.submit()
        if saved is None:
            return None
        self.record = saved
        self.form = None
        self.mode = ViewMode.VIEWING
        if saved.diagnostic_file_id != previous_file:
            await self._preload_diagnostic()
        return saved

    # Viewing actions

    def brake_pads_display(self) -> dict[str, str]:
        return brake_pad_display(self.record)

    def copy_to_clipboard(self, field: str) -> bool:
        self._require(ViewMode.VIEWING)
        if field not in COPYABLE_FIELDS:
            raise ValueError(f"Field {field!r} cannot be copied")
        text = getattr(self.record, field) or ""
        try:
            if self.clipboard is None:
                raise RuntimeError("Clipboard is not available")
            self.clipboard(text)
        except Exception as exc:
            logger.debug("Clipboard copy failed: %s", exc)
            self.notifications.error("Error", "Failed to copy to clipboard")
            return False
        self.notifications.success("Copied", "Text copied to clipboard")
        return True

    def render_print(self) -> str:
        if self.record is None:
            raise RecordNotFoundError(self.record_id)
        return render_print(self.record, self.diagnostic_text)

    async def delete(self) -> bool:
        self._require(ViewMode.VIEWING)
        if not self.confirm(DELETE_PROMPT):
            return False

        self.loading = True
        try:
            if self.record.diagnostic_file_id:
                try:
                    await self.repository.delete_attachment(self.record.diagnostic_file_id)
                except WorxNotesError as exc:
                    logger.warning("Could not delete attachment for %s: %s", self.record_id, exc)
            await self.repository.delete(self.record_id)
        except WorxNotesError as exc:
            self.notifications.error("Error", str(exc))
            return False
        finally:
            self.loading = False

        self.notifications.success("Success", "Repair sheet deleted successfully")
        self.mode = ViewMode.DELETED
        if self.on_back is not None:
            self.on_back()
        return True
