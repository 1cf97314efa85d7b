"""
RepairSheet model for database.
"""
import uuid

from sqlalchemy import Column, Integer, String, Text, DateTime, JSON
from sqlalchemy.sql import func
from worxnotes.database import Base


def _new_id() -> str:
    return str(uuid.uuid4())


class RepairSheet(Base):
    """Repair sheet database model, one row per shop visit."""

    __tablename__ = "repair_sheets"

    id = Column(String(36), primary_key=True, default=_new_id)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False, index=True)

    technician_name = Column(String, nullable=False, index=True)
    ro_number = Column(String, nullable=False, index=True)
    customer_first_name = Column(String, nullable=True)
    customer_last_name = Column(String, nullable=True)
    vehicle_mileage_in = Column(Integer, nullable=True)
    vehicle_mileage_out = Column(Integer, nullable=True)
    customer_concern = Column(Text, nullable=True)
    recommendations = Column(Text, nullable=True)
    shop_recommendations = Column(Text, nullable=True)

    # Measurement groups
    tire_tread = Column(JSON, nullable=False, default=dict)
    brake_pads = Column(JSON, nullable=False, default=dict)
    tire_pressure = Column(JSON, nullable=False, default=dict)
    front_brake_pad_unit = Column(String(2), nullable=True)
    rear_brake_pad_unit = Column(String(2), nullable=True)

    # Diagnostic attachment
    diagnostic_file_id = Column(String, nullable=True)
    diagnostic_file_name = Column(String, nullable=True)

    # Legacy columns, read through the compat migrations only
    customer_name = Column(String, nullable=True)
    brake_pad_unit = Column(String(2), nullable=True)
    vehicle_mileage = Column(Integer, nullable=True)

    schema_version = Column(Integer, nullable=True)

    def to_dict(self) -> dict:
        return {column.name: getattr(self, column.name) for column in self.__table__.columns}
