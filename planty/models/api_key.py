from pydantic import BaseModel

from planty.models.camel_model import CamelModel


class IssuedKey(CamelModel):
    api_key: str
    user_id: str


class GenerateKeyRequest(BaseModel):
    email: str | None = None


class GenerateKeyResponse(CamelModel):
    api_key: str
    user_id: str
    message: str = "Save this API key. You won't be able to see it again."


class AddEmailRequest(BaseModel):
    email: str | None = None
