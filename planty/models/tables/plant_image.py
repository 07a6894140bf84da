from datetime import date, datetime

from sqlalchemy import Column, DateTime, Text
from sqlmodel import Field, SQLModel

from planty.models.tables.ids import new_id, utc_now

class PlantImage(SQLModel, table=True):
    __tablename__ = "plant_image"

    id: str = Field(default_factory=new_id, primary_key=True, max_length=36)
    user_id: str = Field(foreign_key="user.id", ondelete="CASCADE")
    plant_id: str = Field(foreign_key="plant.id", ondelete="CASCADE", index=True)

    # reference only, the image itself lives wherever the user keeps it
    filename: str = Field(max_length=512)
    caption: str | None = Field(default=None, sa_column=Column(Text, nullable=True))
    taken_at: date

    created_at: datetime = Field(
        default_factory=utc_now,
        sa_column=Column(DateTime(timezone=True), nullable=False),
    )
