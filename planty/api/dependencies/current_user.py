from typing import Annotated

from fastapi import Depends, HTTPException, Request
from starlette import status

from planty.models.tables.user import User

async def get_current_user(request: Request) -> User:
    # ApiKeyMiddleware has already authenticated the request
    user: User | None = getattr(request.state, "user", None)
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="API key required",
        )
    return user

CurrentUserDep = Annotated[User, Depends(get_current_user)]
