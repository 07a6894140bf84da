from datetime import datetime

from planty.models.camel_model import CamelModel


class UserInfo(CamelModel):
    id: str
    email: str | None
    created_at: datetime


class ApiKeyInfo(CamelModel):
    key_prefix: str
    created_at: datetime
    last_used_at: datetime | None
    is_active: bool


class MeResponse(CamelModel):
    user: UserInfo
    api_keys: list[ApiKeyInfo]
