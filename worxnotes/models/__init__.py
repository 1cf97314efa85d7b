"""
SQLAlchemy database models.
"""
from worxnotes.models.repair_sheet import RepairSheet

__all__ = ["RepairSheet"]
