from typing import Annotated

from fastapi import Depends, Request

from planty.core.security import CredentialManager
from planty.core.store import PlantStore

def get_store(request: Request) -> PlantStore:
    return request.app.state.store

def get_credentials(request: Request) -> CredentialManager:
    return request.app.state.credentials

StoreDep = Annotated[PlantStore, Depends(get_store)]
CredentialsDep = Annotated[CredentialManager, Depends(get_credentials)]
