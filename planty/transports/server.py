from typing import Any

import anyio
from mcp import types
from mcp.server.lowlevel import Server

from planty import __version__
from planty.tools.catalogue import TOOLS
from planty.tools.dispatcher import ToolDispatcher
from planty.tools.results import ToolError, ToolOk, ToolResult

SERVER_NAME = "planty-mcp"


def to_call_tool_result(result: ToolResult) -> types.CallToolResult:
    match result:
        case ToolOk(text=text):
            return types.CallToolResult(
                content=[types.TextContent(type="text", text=text)],
                isError=False,
            )
        case ToolError(message=message):
            return types.CallToolResult(
                content=[types.TextContent(type="text", text=message)],
                isError=True,
            )
        case _:
            raise TypeError(f"Unsupported tool result: {result!r}")


def build_server(dispatcher: ToolDispatcher) -> Server:
    server = Server(SERVER_NAME, version=__version__)

    @server.list_tools()
    async def list_tools() -> list[types.Tool]:
        return TOOLS

    # argument checks belong to the dispatcher so that they come back as tool errors
    @server.call_tool(validate_input=False)
    async def call_tool(name: str, arguments: dict[str, Any] | None) -> types.CallToolResult:
        result = await anyio.to_thread.run_sync(dispatcher.dispatch, name, arguments)
        return to_call_tool_result(result)

    return server
