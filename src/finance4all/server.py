"""
MCP server for Finance4All.

Exposes personal finance data through the Model Context Protocol.
"""

import json
import logging
from typing import Any, Optional

from mcp.server import Server
from mcp.server.stdio import stdio_server
from mcp.types import TextContent, Tool

from finance4all.auth.firebase import AuthenticatedUser
from finance4all.core.database import FinanceDatabase
from finance4all.core.exceptions import Finance4AllError
from finance4all.tools.tools import Finance4AllTools, create_tool_schemas

logger = logging.getLogger(__name__)

TOOL_NAMES = frozenset(schema["name"] for schema in create_tool_schemas())


class Finance4AllServer:
    """MCP server for Finance4All data."""

    def __init__(self, database: FinanceDatabase, caller: Optional[AuthenticatedUser] = None):
        """
        Initialize the MCP server.

        Args:
            database: Database the tools read and write
            caller: Identity every tool call runs as. A stdio server has
                   exactly one client, so it is resolved once at startup.
        """
        self.db = database
        self.tools = Finance4AllTools(self.db, caller)
        self.server = Server("finance4all")

        # Register handlers
        self._register_handlers()

    def _register_handlers(self) -> None:
        """Register MCP protocol handlers."""

        @self.server.list_tools()
        async def list_tools() -> list[Tool]:
            return [
                Tool(
                    name=schema["name"],
                    description=schema["description"],
                    inputSchema=schema["inputSchema"],
                )
                for schema in create_tool_schemas()
            ]

        @self.server.call_tool()
        async def call_tool(name: str, arguments: dict[str, Any]) -> list[TextContent]:
            return await self.handle_call_tool(name, arguments)

    async def handle_call_tool(
        self, name: str, arguments: Optional[dict[str, Any]]
    ) -> list[TextContent]:
        """Run one tool and render its result (or error) as text."""
        if name not in TOOL_NAMES:
            return [TextContent(type="text", text=f"Unknown tool: {name}")]

        if not self.db.is_available():
            error_msg = (
                "Database not available. Check DATABASE_URL or the --db-url option."
            )
            return [TextContent(type="text", text=error_msg)]

        try:
            result = getattr(self.tools, name)(**(arguments or {}))
            return [TextContent(type="text", text=json.dumps(result, indent=2))]

        except Finance4AllError as e:
            return [TextContent(type="text", text=f"Error [{e.code}]: {e}")]
        except (ValueError, TypeError) as e:
            # Bad arguments: unknown period, wrong keyword, ...
            return [TextContent(type="text", text=f"Error: {e}")]
        except Exception as e:
            logger.exception(f"Error executing tool {name}")
            return [TextContent(type="text", text=f"Error executing tool: {e}")]

    async def run(self) -> None:  # pragma: no cover
        """Run the MCP server using stdio transport."""
        async with stdio_server() as (read_stream, write_stream):
            await self.server.run(
                read_stream,
                write_stream,
                self.server.create_initialization_options(),
            )


async def run_server(
    database: FinanceDatabase, caller: Optional[AuthenticatedUser] = None
) -> None:  # pragma: no cover
    """
    Run the Finance4All MCP server.

    Args:
        database: Database to serve
        caller: Identity the tools act for (None means unauthenticated)
    """
    server = Finance4AllServer(database, caller)
    await server.run()
