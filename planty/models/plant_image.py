from datetime import date, datetime

from pydantic import Field

from planty.models.camel_model import CamelModel


class PlantImageCreate(CamelModel):
    plant_id: str = Field(min_length=1)
    filename: str = Field(min_length=1, max_length=512)
    caption: str | None = None
    taken_at: date


class PlantImageRecord(CamelModel):
    id: str
    plant_id: str
    filename: str
    caption: str | None
    taken_at: date
    created_at: datetime
