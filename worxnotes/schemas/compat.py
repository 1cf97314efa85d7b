"""
Read-time migrations for stored repair sheets.

Rows written by older releases of the form carry fields that have since been
split: a single customer name, a single tire-pressure-in value per axle, and
one brake pad unit for both axles. Every reader runs rows through
``upgrade_record`` so the rest of the code only ever sees the current shape.
"""
from typing import Any, Callable, Mapping

CURRENT_SCHEMA_VERSION = 4

# Fields that only exist on legacy rows and are dropped after upgrading.
LEGACY_FIELDS = ("customer_name", "brake_pad_unit", "vehicle_mileage")


def _absent(record: Mapping[str, Any], key: str) -> bool:
    return record.get(key) in (None, "")


def _split_customer_name(record: dict[str, Any]) -> None:
    legacy = (record.get("customer_name") or "").strip()
    if not legacy:
        return
    if not _absent(record, "customer_first_name") or not _absent(record, "customer_last_name"):
        return
    first, _, last = legacy.partition(" ")
    record["customer_first_name"] = first
    record["customer_last_name"] = last.strip() or None


def _split_mileage(record: dict[str, Any]) -> None:
    if _absent(record, "vehicle_mileage_in") and not _absent(record, "vehicle_mileage"):
        record["vehicle_mileage_in"] = record["vehicle_mileage"]


def _split_tire_pressure(record: dict[str, Any]) -> None:
    pressure = dict(record.get("tire_pressure") or {})
    for axle in ("front", "rear"):
        legacy = pressure.get(f"{axle}_in")
        if legacy is None:
            continue
        for side in ("left", "right"):
            key = f"{axle}_{side}_in"
            if pressure.get(key) is None:
                pressure[key] = legacy
        del pressure[f"{axle}_in"]
    record["tire_pressure"] = pressure


def _split_brake_pad_units(record: dict[str, Any]) -> None:
    legacy = record.get("brake_pad_unit")
    if not legacy:
        return
    for axle in ("front", "rear"):
        key = f"{axle}_brake_pad_unit"
        if _absent(record, key):
            record[key] = legacy


MIGRATIONS: list[tuple[int, Callable[[dict[str, Any]], None]]] = [
    (2, _split_customer_name),
    (2, _split_mileage),
    (3, _split_tire_pressure),
    (4, _split_brake_pad_units),
]


def upgrade_record(raw: Mapping[str, Any]) -> dict[str, Any]:
    """
    Bring a stored row up to the current shape.

    Legacy values are copied into the split fields only where those fields are
    absent; values already present in the new fields always win.
    """
    record = dict(raw)
    version = record.get("schema_version") or 1
    for target, step in MIGRATIONS:
        if version < target:
            step(record)
    for field in LEGACY_FIELDS:
        record.pop(field, None)
    for field in ("front_brake_pad_unit", "rear_brake_pad_unit"):
        if _absent(record, field):
            record.pop(field, None)
    record["schema_version"] = CURRENT_SCHEMA_VERSION
    return record
