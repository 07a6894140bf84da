import logging
from typing import Annotated, List

from pydantic import field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

DEFAULT_SECRET_KEY = "changethis"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    API_PREFIX: str = "/api"
    # pepper for the api key hashes, changing it invalidates every issued key
    SECRET_KEY: str = DEFAULT_SECRET_KEY

    # api keys look like planty_live_<random>
    API_KEY_PREFIX: str = "planty_live_"
    # number of plaintext characters kept for display
    API_KEY_DISPLAY_LENGTH: int = 16

    # full connection string, takes precedence over the postgres credentials
    DATABASE_URL: str | None = None

    # postgres credentials
    POSTGRES_HOST: str = "127.0.0.1"
    POSTGRES_PORT: int = 5432
    POSTGRES_DB: str = "planty"
    POSTGRES_USER: str = "username"
    POSTGRES_PASSWORD: str = "password"

    # http server
    HOST: str = "127.0.0.1"
    PORT: int = 3000
    LOG_LEVEL: str = "INFO"

    # prevent unauthorized access
    RESTRICT_HOSTS: bool = False
    TRUSTED_HOSTS: Annotated[List[str], NoDecode] = []
    CORS_ORIGINS: Annotated[List[str], NoDecode] = ["*"]

    # identity of the stdio session
    PLANTY_USER_ID: str | None = None
    PLANTY_API_KEY: str | None = None

    @field_validator('TRUSTED_HOSTS', 'CORS_ORIGINS', mode='before')
    @classmethod
    def decode_comma_list(cls, raw: str | list[str]) -> list[str]:
        if type(raw) is str:
            return [item.strip() for item in raw.split(',') if item.strip()]
        else:
            return raw

settings = Settings()  # type: ignore


def warn_if_default_secret(logger: logging.Logger, config: Settings = settings) -> bool:
    if config.SECRET_KEY != DEFAULT_SECRET_KEY:
        return False
    logger.warning("SECRET_KEY is not set, api keys are hashed with the public default secret")
    return True
