import logging

from mcp.server.stdio import stdio_server

from planty.core.exceptions import PlantyError
from planty.core.security import CredentialManager
from planty.core.settings import Settings
from planty.core.store import PlantStore
from planty.tools.dispatcher import ToolDispatcher
from planty.transports.server import build_server

logger = logging.getLogger(__name__)


class IdentityNotConfigured(PlantyError):
    """The stdio session could not be tied to a user."""


def resolve_stdio_identity(store: PlantStore, credentials: CredentialManager, config: Settings) -> str:
    """
    The stdio session belongs to one user, configured through the
    environment: PLANTY_API_KEY is resolved like a bearer token,
    PLANTY_USER_ID must name an existing user.
    """
    if config.PLANTY_API_KEY:
        user = credentials.resolve(config.PLANTY_API_KEY)
        if user is None:
            raise IdentityNotConfigured("PLANTY_API_KEY is not a valid api key")
        return user.id

    if config.PLANTY_USER_ID:
        if store.get_user(config.PLANTY_USER_ID) is None:
            raise IdentityNotConfigured(f"user {config.PLANTY_USER_ID} does not exist")
        return config.PLANTY_USER_ID

    raise IdentityNotConfigured("set PLANTY_API_KEY or PLANTY_USER_ID to run the stdio server")


async def run_stdio(store: PlantStore, user_id: str) -> None:
    server = build_server(ToolDispatcher(store, user_id))
    logger.info(f"stdio session started for user {user_id}")
    async with stdio_server() as (read_stream, write_stream):
        await server.run(
            read_stream,
            write_stream,
            server.create_initialization_options(),
        )
