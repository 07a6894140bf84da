from datetime import date, datetime

from planty.models.camel_model import CamelModel


class WateringRecord(CamelModel):
    id: str
    plant_id: str
    watered_date: date
    notes: str | None
    created_at: datetime
