import logging
from dataclasses import dataclass, field
from datetime import datetime

import anyio
from mcp.server.sse import SseServerTransport
from starlette import status
from starlette.requests import Request
from starlette.responses import JSONResponse
from starlette.types import Receive, Scope, Send

from planty.models.tables.ids import utc_now
from planty.tools.dispatcher import ToolDispatcher
from planty.transports.server import build_server

logger = logging.getLogger('uvicorn.error')


@dataclass(eq=False)
class StreamSession:
    """
    The open event stream of one user.

    Each session owns its transport, so a message can only reach the
    session ids handed out on this user's own stream.
    """
    user_id: str
    transport: SseServerTransport
    opened_at: datetime = field(default_factory=utc_now)
    superseded: bool = False
    cancel_scope: anyio.CancelScope | None = None

    def bind(self, cancel_scope: anyio.CancelScope) -> None:
        # the stream may have been replaced before it got to run
        self.cancel_scope = cancel_scope
        if self.superseded:
            cancel_scope.cancel()

    def cancel(self) -> None:
        self.superseded = True
        if self.cancel_scope is not None:
            self.cancel_scope.cancel()


class StreamSessionRegistry:
    """
    One open event stream per user.

    A session is inserted when its stream connects and evicted when it
    disconnects. Opening a second stream for the same user cancels the
    first one before the new session becomes current.
    """

    def __init__(self, message_path: str = "/message"):
        self.message_path = message_path
        self._sessions: dict[str, StreamSession] = {}

    def open(self, user_id: str) -> StreamSession:
        previous = self._sessions.pop(user_id, None)
        if previous is not None:
            logger.info(f"closing superseded stream for user {user_id}")
            previous.cancel()

        session = StreamSession(user_id=user_id, transport=SseServerTransport(self.message_path))
        self._sessions[user_id] = session
        return session

    def close(self, session: StreamSession) -> None:
        # a superseded session must not evict its replacement
        if self._sessions.get(session.user_id) is session:
            del self._sessions[session.user_id]

    def get(self, user_id: str) -> StreamSession | None:
        return self._sessions.get(user_id)

    def __len__(self) -> int:
        return len(self._sessions)


def _unauthorized() -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_401_UNAUTHORIZED,
        content={"error": "Unauthorized", "message": "API key required"},
    )


class SseEndpoint:
    """GET /sse: opens the MCP event stream of the authenticated user."""

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        request = Request(scope, receive)
        user = getattr(request.state, "user", None)
        if user is None:
            await _unauthorized()(scope, receive, send)
            return

        registry: StreamSessionRegistry = request.app.state.sessions
        server = build_server(ToolDispatcher(request.app.state.store, user.id))

        session = registry.open(user.id)
        logger.info(f"SSE client connected: {user.id}")
        try:
            with anyio.CancelScope() as cancel_scope:
                session.bind(cancel_scope)
                async with session.transport.connect_sse(scope, receive, send) as (read_stream, write_stream):
                    await server.run(
                        read_stream,
                        write_stream,
                        server.create_initialization_options(),
                    )
        finally:
            registry.close(session)
            logger.info(f"SSE stream closed for user {user.id}")


class MessageEndpoint:
    """
    POST /message: hands one JSON-RPC message to the user's open stream.

    Only the caller's own transport is consulted, a session id issued to
    another user answers 404.
    """

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        request = Request(scope, receive)
        user = getattr(request.state, "user", None)
        if user is None:
            await _unauthorized()(scope, receive, send)
            return

        registry: StreamSessionRegistry = request.app.state.sessions
        session = registry.get(user.id)
        if session is None:
            logger.error(f"POST /message: no open stream for user {user.id}")
            response = JSONResponse(
                status_code=status.HTTP_404_NOT_FOUND,
                content={"error": "Session not found", "message": "Open /sse before posting messages."},
            )
            await response(scope, receive, send)
            return

        await session.transport.handle_post_message(scope, receive, send)
