"""
Pydantic schemas for RepairSheet.
"""
from pydantic import BaseModel, ConfigDict, Field, field_validator
from datetime import datetime
from typing import Any, Optional
import enum

EMPTY_PLACEHOLDER = "—"


class BrakePadUnit(str, enum.Enum):
    """Unit a brake pad reading is recorded in, scoped per axle."""
    MM = "MM"
    PERCENT = "%"

    def toggled(self) -> "BrakePadUnit":
        return BrakePadUnit.PERCENT if self is BrakePadUnit.MM else BrakePadUnit.MM


def coerce_measurement(value: Any) -> int:
    """
    Normalize a raw measurement to an int.

    Empty, missing and unparsable input all become 0.
    """
    if value is None or isinstance(value, bool):
        return 0
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if value == value else 0
    text = str(value).strip()
    if not text:
        return 0
    try:
        return int(text)
    except ValueError:
        return 0


class _MeasurementGroup(BaseModel):
    """Base for the nested measurement groups."""

    @field_validator("*", mode="before")
    @classmethod
    def _coerce(cls, value: Any) -> int:
        return coerce_measurement(value)


class TireTread(_MeasurementGroup):
    """Tread depth in 32nds of an inch."""
    lf: int = 0
    rf: int = 0
    lr: int = 0
    rr: int = 0


class BrakePads(_MeasurementGroup):
    """Brake pad readings; the unit lives on the sheet, one per axle."""
    lf: int = 0
    rf: int = 0
    lr: int = 0
    rr: int = 0


class TirePressure(_MeasurementGroup):
    """Tire pressure in PSI, split left/right coming in, per axle going out."""
    front_left_in: int = 0
    front_right_in: int = 0
    front_out: int = 0
    rear_left_in: int = 0
    rear_right_in: int = 0
    rear_out: int = 0


MEASUREMENT_GROUPS: dict[str, type[_MeasurementGroup]] = {
    "tire_tread": TireTread,
    "brake_pads": BrakePads,
    "tire_pressure": TirePressure,
}


class RepairSheetBase(BaseModel):
    """Base repair sheet schema with common fields."""
    technician_name: str
    ro_number: str
    customer_first_name: Optional[str] = None
    customer_last_name: Optional[str] = None
    vehicle_mileage_in: Optional[int] = None
    vehicle_mileage_out: Optional[int] = None
    customer_concern: Optional[str] = None
    recommendations: Optional[str] = None
    shop_recommendations: Optional[str] = None
    tire_tread: TireTread = Field(default_factory=TireTread)
    brake_pads: BrakePads = Field(default_factory=BrakePads)
    tire_pressure: TirePressure = Field(default_factory=TirePressure)
    front_brake_pad_unit: BrakePadUnit = BrakePadUnit.MM
    rear_brake_pad_unit: BrakePadUnit = BrakePadUnit.MM
    diagnostic_file_id: Optional[str] = None
    diagnostic_file_name: Optional[str] = None

    @field_validator("tire_tread", "brake_pads", "tire_pressure", mode="before")
    @classmethod
    def _missing_group_is_zeroed(cls, value: Any) -> Any:
        return {} if value is None else value

    @property
    def has_attachment(self) -> bool:
        return bool(self.diagnostic_file_id)

    @property
    def customer_display_name(self) -> str:
        return customer_display_name(self.customer_first_name, self.customer_last_name)


class RepairSheetCreate(RepairSheetBase):
    """Schema for creating a repair sheet."""

    @field_validator("technician_name", "ro_number")
    @classmethod
    def _required(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("must not be empty")
        return value


class RepairSheetUpdate(RepairSheetCreate):
    """Schema for updating a repair sheet. Every field is overwritten."""
    pass


class RepairSheet(RepairSheetBase):
    """Schema for repair sheet responses."""
    id: str
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


def customer_display_name(first: Optional[str], last: Optional[str]) -> str:
    """First + last when both are present, whichever exists otherwise."""
    first = (first or "").strip()
    last = (last or "").strip()
    if first and last:
        return f"{first} {last}"
    return first or last or EMPTY_PLACEHOLDER


def format_timestamp(value: datetime) -> str:
    """Render a timestamp the way the sheets display it, e.g. May 14, 2025, 09:05 AM."""
    return f"{value:%B} {value.day}, {value:%Y}, {value:%I:%M %p}"
