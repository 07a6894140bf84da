from datetime import date, datetime

from sqlalchemy import Column, DateTime, Text
from sqlmodel import Field, SQLModel

from planty.models.tables.ids import new_id, utc_now

class Plant(SQLModel, table=True):
    __tablename__ = "plant"

    id: str = Field(default_factory=new_id, primary_key=True, max_length=36)
    user_id: str = Field(foreign_key="user.id", ondelete="CASCADE", index=True)

    name: str = Field(max_length=255)
    species: str = Field(max_length=255)
    location: str = Field(max_length=255)
    acquired_date: date
    # in days
    watering_frequency: int
    last_watered: date | None = Field(default=None)
    notes: str = Field(default="", sa_column=Column(Text, nullable=False, default=""))

    created_at: datetime = Field(
        default_factory=utc_now,
        sa_column=Column(DateTime(timezone=True), nullable=False),
    )
    updated_at: datetime = Field(
        default_factory=utc_now,
        sa_column=Column(DateTime(timezone=True), nullable=False),
    )
