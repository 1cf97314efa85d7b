"""
Form controller for creating and editing repair sheets.
"""
import copy
import logging
from dataclasses import dataclass
from typing import Any, Callable, Optional

from pydantic import ValidationError as PydanticValidationError

from worxnotes.errors import ValidationError, WorxNotesError
from worxnotes.notifications import NotificationChannel
from worxnotes.preferences import PreferenceStore
from worxnotes.repository import RepairRepository
from worxnotes.schemas.repair_sheet import (
    MEASUREMENT_GROUPS,
    BrakePadUnit,
    RepairSheet,
    RepairSheetCreate,
    RepairSheetUpdate,
    coerce_measurement,
)

logger = logging.getLogger(__name__)

TEXT_FIELDS = (
    "technician_name",
    "ro_number",
    "customer_first_name",
    "customer_last_name",
    "customer_concern",
    "recommendations",
    "shop_recommendations",
)
MILEAGE_FIELDS = ("vehicle_mileage_in", "vehicle_mileage_out")
UNIT_FIELDS = ("front_brake_pad_unit", "rear_brake_pad_unit")
ALLOWED_CONTENT_TYPE = "text/plain"


@dataclass(frozen=True)
class AttachedFile:
    filename: str
    content_type: str
    data: bytes


def coerce_mileage(value: Any) -> Optional[int]:
    if value is None or str(value).strip() == "":
        return None
    try:
        return int(str(value).strip())
    except ValueError:
        return None


def empty_form(technician_name: str = "") -> dict[str, Any]:
    """Initial values for a new sheet."""
    form: dict[str, Any] = {name: "" for name in TEXT_FIELDS}
    form.update({name: None for name in MILEAGE_FIELDS})
    form.update({name: BrakePadUnit.MM for name in UNIT_FIELDS})
    for group, model in MEASUREMENT_GROUPS.items():
        form[group] = {name: 0 for name in model.model_fields}
    form["technician_name"] = technician_name
    return form


def form_from_record(record: RepairSheet) -> dict[str, Any]:
    form = empty_form()
    for name in TEXT_FIELDS:
        form[name] = getattr(record, name) or ""
    for name in MILEAGE_FIELDS + UNIT_FIELDS:
        form[name] = getattr(record, name)
    for group in MEASUREMENT_GROUPS:
        form[group] = getattr(record, group).model_dump()
    return form


def apply_field_change(form: dict[str, Any], name: str, value: Any) -> dict[str, Any]:
    """
    Return a copy of ``form`` with one field changed.

    Nested measurements are addressed as ``group.field`` (``tire_tread.lf``)
    and always stored as ints.
    """
    updated = copy.deepcopy(form)
    if "." in name:
        group, field = name.split(".", 1)
        model = MEASUREMENT_GROUPS.get(group)
        if model is None or field not in model.model_fields:
            raise KeyError(name)
        updated[group][field] = coerce_measurement(value)
    elif name in MILEAGE_FIELDS:
        updated[name] = coerce_mileage(value)
    elif name in UNIT_FIELDS:
        updated[name] = BrakePadUnit(value)
    elif name in TEXT_FIELDS:
        updated[name] = "" if value is None else str(value)
    else:
        raise KeyError(name)
    return updated


def build_payload(form: dict[str, Any], update: bool = False) -> RepairSheetCreate:
    """Validate required fields and turn form values into a write payload."""
    technician = (form.get("technician_name") or "").strip()
    ro_number = (form.get("ro_number") or "").strip()
    if not technician or not ro_number:
        raise ValidationError("Technician name and RO number are required")

    values = {name: (form.get(name) or "").strip() or None for name in TEXT_FIELDS}
    values["technician_name"] = technician
    values["ro_number"] = ro_number
    for name in MILEAGE_FIELDS + UNIT_FIELDS:
        values[name] = form.get(name)
    for group in MEASUREMENT_GROUPS:
        values[group] = form.get(group) or {}
    values["diagnostic_file_id"] = form.get("diagnostic_file_id")
    values["diagnostic_file_name"] = form.get("diagnostic_file_name")

    schema = RepairSheetUpdate if update else RepairSheetCreate
    try:
        return schema(**values)
    except PydanticValidationError as exc:
        raise ValidationError(str(exc)) from exc


class RepairFormController:
    """
    Collects input for one repair sheet and writes it.

    With ``record`` set the controller edits that sheet, otherwise it creates
    a new one.
    """

    def __init__(
        self,
        repository: RepairRepository,
        notifications: NotificationChannel,
        preferences: Optional[PreferenceStore] = None,
        record: Optional[RepairSheet] = None,
        technician_name: str = "",
    ):
        self.repository = repository
        self.notifications = notifications
        self.preferences = preferences
        self.record = record
        self.form = form_from_record(record) if record else empty_form(technician_name)
        self.file: Optional[AttachedFile] = None
        self.submitting = False
        self.last_error: Optional[WorxNotesError] = None

    @property
    def editing(self) -> bool:
        return self.record is not None

    @property
    def selected_file_name(self) -> Optional[str]:
        return self.file.filename if self.file else None

    def handle_change(self, name: str, value: Any) -> None:
        self.form = apply_field_change(self.form, name, value)

    def select_file(self, files: list[AttachedFile]) -> bool:
        """Attach the first selected file if it is plain text."""
        if not files:
            self.file = None
            return False
        candidate = files[0]
        content_type = (candidate.content_type or "").split(";", 1)[0].strip().lower()
        if content_type != ALLOWED_CONTENT_TYPE:
            self.file = None
            self.notifications.error("Invalid file type", "Please upload a text file (.txt)")
            return False
        self.file = candidate
        return True

    async def _discard_attachment(self, key: str) -> None:
        try:
            await self.repository.delete_attachment(key)
        except WorxNotesError as exc:
            logger.warning("Could not delete superseded attachment %s: %s", key, exc)

    async def submit(self, on_complete: Optional[Callable[[RepairSheet], None]] = None) -> Optional[RepairSheet]:
        """Validate, upload any new file, then create or update the sheet."""
        if self.submitting:
            return None
        self.last_error = None
        try:
            build_payload(self.form, update=self.editing)
        except ValidationError as exc:
            self.last_error = exc
            self.notifications.error("Error", str(exc))
            return None

        self.submitting = True
        try:
            form = dict(self.form)
            if self.record is not None:
                form["diagnostic_file_id"] = self.record.diagnostic_file_id
                form["diagnostic_file_name"] = self.record.diagnostic_file_name
            if self.file is not None:
                if self.record is not None and self.record.diagnostic_file_id:
                    await self._discard_attachment(self.record.diagnostic_file_id)
                form["diagnostic_file_id"] = await self.repository.upload_attachment(
                    self.file.filename, self.file.data
                )
                form["diagnostic_file_name"] = self.file.filename

            payload = build_payload(form, update=self.editing)
            if self.record is not None:
                sheet = await self.repository.update(self.record.id, payload)
            else:
                sheet = await self.repository.create(payload)
                if self.preferences is not None:
                    try:
                        self.preferences.save_technician_name(sheet.technician_name)
                    except OSError as exc:
                        logger.warning("Could not remember technician name: %s", exc)
        except WorxNotesError as exc:
            self.last_error = exc
            self.notifications.error("Error", str(exc))
            return None
        finally:
            self.submitting = False

        if self.record is not None:
            self.notifications.success("Success", "Repair sheet updated successfully")
        else:
            self.notifications.success("Success", "Repair sheet saved successfully")
        if self.editing:
            self.record = sheet
            self.form = form_from_record(sheet)
        self.file = None
        if on_complete is not None:
            on_complete(sheet)
        return sheet
