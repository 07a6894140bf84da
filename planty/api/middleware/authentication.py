import logging

from starlette import status
from starlette.concurrency import run_in_threadpool
from starlette.datastructures import Headers
from starlette.responses import JSONResponse
from starlette.types import ASGIApp, Receive, Scope, Send

from planty.core.exceptions import StorageError
from planty.core.security import CredentialManager

logger = logging.getLogger('uvicorn.error')


class ApiKeyMiddleware:
    """
    Resolves the bearer api key of every HTTP request.

    Requests to an exempt path go through untouched. Any other request
    either gets its user attached to ``request.state.user`` or is rejected
    here with a 401 (or a 500 when the lookup itself fails). This is the
    only place where a request gets an identity.

    Written as plain ASGI so the event stream is not buffered.
    """

    def __init__(self, app: ASGIApp, exempt_paths: set[str]):
        self.app = app
        self.exempt_paths = frozenset(exempt_paths)

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        # exact match only, /health/anything still needs a key
        if scope["path"] in self.exempt_paths or scope["method"] == "OPTIONS":
            await self.app(scope, receive, send)
            return

        authorization = Headers(scope=scope).get("authorization")
        if authorization is None or not authorization.startswith("Bearer "):
            await self._reject(scope, receive, send, "API key required")
            return

        token = authorization[len("Bearer "):].strip()
        credentials: CredentialManager = scope["app"].state.credentials

        try:
            user = await run_in_threadpool(credentials.resolve, token)
        except StorageError as e:
            logger.error(f"api key lookup failed: {e}")
            response = JSONResponse(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                content={"error": "Internal Server Error", "message": "Authentication failed"},
            )
            await response(scope, receive, send)
            return

        # malformed and unknown keys get the same answer
        if user is None:
            await self._reject(scope, receive, send, "Invalid API key")
            return

        scope.setdefault("state", {})["user"] = user
        await self.app(scope, receive, send)

    @staticmethod
    async def _reject(scope: Scope, receive: Receive, send: Send, message: str) -> None:
        response = JSONResponse(
            status_code=status.HTTP_401_UNAUTHORIZED,
            content={"error": "Unauthorized", "message": message},
            headers={"WWW-Authenticate": "Bearer"},
        )
        await response(scope, receive, send)
