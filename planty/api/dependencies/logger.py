import logging
from typing import Annotated

from fastapi import Depends, Request

logger = logging.getLogger('uvicorn.error')


class RequestLogger(logging.LoggerAdapter):
    """Prefixes every record with the request path and, once known, the user."""

    def process(self, msg, kwargs):
        user_id = self.extra.get("user_id")
        prefix = f"[{self.extra['path']}]" if user_id is None else f"[{self.extra['path']} user={user_id}]"
        return f"{prefix} {msg}", kwargs


def get_logger(request: Request) -> logging.LoggerAdapter:
    user = getattr(request.state, "user", None)
    return RequestLogger(logger, {
        "path": request.url.path,
        "user_id": user.id if user is not None else None,
    })

LoggerDep = Annotated[logging.LoggerAdapter, Depends(get_logger)]
