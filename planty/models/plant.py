from datetime import date, datetime
from typing import Any

from pydantic import Field

from planty.models.camel_model import CamelModel


class PlantCreate(CamelModel):
    name: str = Field(min_length=1, max_length=255)
    species: str = Field(min_length=1, max_length=255)
    location: str = Field(min_length=1, max_length=255)
    acquired_date: date
    watering_frequency: int = Field(gt=0)
    notes: str = ""


class PlantUpdate(CamelModel):
    """
    Partial update of a plant. A field left to None is not touched.
    """
    name: str | None = Field(default=None, min_length=1, max_length=255)
    species: str | None = Field(default=None, min_length=1, max_length=255)
    location: str | None = Field(default=None, min_length=1, max_length=255)
    acquired_date: date | None = None
    watering_frequency: int | None = Field(default=None, gt=0)
    notes: str | None = None

    def changes(self) -> dict[str, Any]:
        return {
            column: value
            for column, value in self.model_dump().items()
            if value is not None
        }


class PlantRecord(CamelModel):
    id: str
    name: str
    species: str
    location: str
    acquired_date: date
    watering_frequency: int
    last_watered: date | None
    notes: str
    created_at: datetime
    updated_at: datetime
