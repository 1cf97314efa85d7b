"""
Screen controllers: new-sheet form, sheet list, sheet detail.
"""
from worxnotes.controllers.form import AttachedFile, RepairFormController
from worxnotes.controllers.listing import RepairListView, SortDirection
from worxnotes.controllers.detail import RepairDetailView, ViewMode

__all__ = [
    "AttachedFile", "RepairFormController",
    "RepairListView", "SortDirection",
    "RepairDetailView", "ViewMode",
]
