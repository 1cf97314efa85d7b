"""
Pydantic schemas for request/response validation.
"""
from worxnotes.schemas.repair_sheet import (
    BrakePadUnit,
    BrakePads,
    RepairSheet,
    RepairSheetBase,
    RepairSheetCreate,
    RepairSheetUpdate,
    TirePressure,
    TireTread,
)
from worxnotes.schemas.compat import CURRENT_SCHEMA_VERSION, upgrade_record
from worxnotes.schemas.suggestion import SuggestionRequest, SuggestionResponse

__all__ = [
    "BrakePadUnit", "BrakePads", "TirePressure", "TireTread",
    "RepairSheetBase", "RepairSheetCreate", "RepairSheetUpdate", "RepairSheet",
    "CURRENT_SCHEMA_VERSION", "upgrade_record",
    "SuggestionRequest", "SuggestionResponse",
]
