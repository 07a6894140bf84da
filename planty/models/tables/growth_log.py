from datetime import date, datetime
from enum import Enum

from sqlalchemy import Column, DateTime, Text
from sqlmodel import Field, SQLModel, Enum as DBEnum

from planty.models.tables.ids import new_id, utc_now

class MeasureType(str, Enum):
    HEIGHT = "height"
    WIDTH = "width"
    LEAF_COUNT = "leafCount"
    OTHER = "other"

class MeasureUnit(str, Enum):
    CM = "cm"
    INCHES = "inches"
    COUNT = "count"
    OTHER = "other"

class GrowthLog(SQLModel, table=True):
    __tablename__ = "growth_log"

    id: str = Field(default_factory=new_id, primary_key=True, max_length=36)
    user_id: str = Field(foreign_key="user.id", ondelete="CASCADE")
    plant_id: str = Field(foreign_key="plant.id", ondelete="CASCADE", index=True)

    log_date: date
    measure_type: MeasureType = Field(sa_column=Column(DBEnum(MeasureType), nullable=False))
    measure_unit: MeasureUnit = Field(sa_column=Column(DBEnum(MeasureUnit), nullable=False))
    value: float
    notes: str | None = Field(default=None, sa_column=Column(Text, nullable=True))

    created_at: datetime = Field(
        default_factory=utc_now,
        sa_column=Column(DateTime(timezone=True), nullable=False),
    )
