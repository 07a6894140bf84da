from fastapi import APIRouter

from planty.api.routes import users

api_router = APIRouter()
api_router.include_router(users.router)
