import asyncio
import json
import logging
import os
from typing import Any, Callable, Dict, TypeVar

import mcp.types as types
from cachetools.func import ttl_cache
from dotenv import load_dotenv
from mcp.server import InitializationOptions, NotificationOptions, Server
from mcp.server.stdio import stdio_server
from pydantic import AnyUrl

from zendesk_api import __version__
from zendesk_api.client import RetryPolicy, ZendeskClient

LOGGER_NAME = "zendesk_api"
logger = logging.getLogger(LOGGER_NAME)

REQUIRED_ENV_VARS: dict[str, str] = {
    "ZENDESK_SUBDOMAIN": "Zendesk subdomain used for API calls",
    "ZENDESK_EMAIL": "Agent email associated with the API token",
    "ZENDESK_API_KEY": "Zendesk API token with ticket and user permissions",
}

OPTIONAL_ENV_VARS: dict[str, str] = {
    "ZENDESK_API_VERSION": "v2",
    "ZENDESK_RETRY_MAX_ATTEMPTS": "10",
    "ZENDESK_RETRY_MAX_WAIT": "3600",
    "ZENDESK_RETRY_UNIFIED_SECONDS": "false",
}

T = TypeVar("T")


async def run_client_call(func: Callable[..., T], *args: Any, **kwargs: Any) -> T:
    """Run blocking Zendesk client calls without stalling the event loop."""
    return await asyncio.to_thread(func, *args, **kwargs)


def load_settings() -> dict[str, str]:
    """Validate required environment variables and return their values, optional ones defaulted."""
    missing: list[str] = []
    values: dict[str, str] = {}

    for key, description in REQUIRED_ENV_VARS.items():
        value = os.getenv(key)
        if value:
            values[key] = value
        else:
            missing.append(f"{key} ({description})")

    if missing:
        detail = ", ".join(missing)
        raise RuntimeError(
            f"Missing required environment variables: {detail}. "
            "Populate .env or export them before launching the server."
        )

    for key, default in OPTIONAL_ENV_VARS.items():
        values[key] = os.getenv(key) or default

    return values


def build_retry_policy(settings: dict[str, str]) -> RetryPolicy:
    try:
        max_attempts = int(settings["ZENDESK_RETRY_MAX_ATTEMPTS"])
        max_wait = float(settings["ZENDESK_RETRY_MAX_WAIT"])
    except ValueError as e:
        raise RuntimeError(f"Invalid retry settings: {e}") from e
    if max_attempts < 1:
        raise RuntimeError("ZENDESK_RETRY_MAX_ATTEMPTS must be at least 1")

    if settings["ZENDESK_RETRY_UNIFIED_SECONDS"].strip().lower() in ("1", "true", "yes"):
        return RetryPolicy.unified(max_attempts=max_attempts, max_total_wait=max_wait)
    return RetryPolicy(max_attempts=max_attempts, max_total_wait=max_wait)


load_dotenv()
_settings_cache: dict[str, str] | None = None
_zendesk_client: ZendeskClient | None = None


def get_settings() -> dict[str, str]:
    """Return cached settings, loading them on first use."""
    global _settings_cache
    if _settings_cache is None:
        _settings_cache = load_settings()
    return _settings_cache


def get_zendesk_client() -> ZendeskClient:
    """Instantiate the Zendesk client lazily so imports succeed in test environments."""
    global _zendesk_client
    if _zendesk_client is None:
        settings = get_settings()
        _zendesk_client = ZendeskClient(
            subdomain=settings["ZENDESK_SUBDOMAIN"],
            email=settings["ZENDESK_EMAIL"],
            token=settings["ZENDESK_API_KEY"],
            api_version=settings["ZENDESK_API_VERSION"],
            retry_policy=build_retry_policy(settings),
        )
    return _zendesk_client


def _reset_client_cache_for_tests() -> None:
    """Clear cached settings/client; intended for use in unit tests."""
    global _settings_cache, _zendesk_client
    _settings_cache = None
    _zendesk_client = None
    get_cached_current_user.cache_clear()


server = Server("Zendesk API Server")


def _id_schema(name: str, description: str) -> Dict[str, Any]:
    return {
        "type": "object",
        "properties": {name: {"type": "integer", "description": description}},
        "required": [name],
    }


TICKET_FIELDS_SCHEMA: Dict[str, Any] = {
    "subject": {"type": "string", "description": "Ticket subject"},
    "description": {"type": "string", "description": "Ticket description (first comment)"},
    "status": {"type": "string", "description": "new, open, pending, hold, solved, closed"},
    "priority": {"type": "string", "description": "low, normal, high, urgent"},
    "type": {"type": "string", "description": "problem, incident, question, task"},
    "requester_id": {"type": "integer"},
    "assignee_id": {"type": "integer"},
    "tags": {"type": "array", "items": {"type": "string"}},
    "custom_fields": {
        "type": "array",
        "items": {"type": "object", "properties": {"id": {"type": "integer"}, "value": {}}},
    },
}

USER_FIELDS_SCHEMA: Dict[str, Any] = {
    "name": {"type": "string"},
    "email": {"type": "string"},
    "role": {"type": "string", "description": "end-user, agent, admin"},
    "organization_id": {"type": "integer"},
    "phone": {"type": "string"},
    "tags": {"type": "array", "items": {"type": "string"}},
}


@server.list_tools()
async def handle_list_tools() -> list[types.Tool]:
    """List available Zendesk tools"""
    return [
        types.Tool(
            name="get_user",
            description="Retrieve a Zendesk user by ID",
            inputSchema=_id_schema("user_id", "The ID of the user to retrieve"),
        ),
        types.Tool(
            name="get_current_user",
            description="Retrieve the user the server is authenticated as",
            inputSchema={"type": "object", "properties": {}},
        ),
        types.Tool(
            name="list_users",
            description="List Zendesk users one page at a time",
            inputSchema={
                "type": "object",
                "properties": {
                    "page": {"type": "integer", "default": 1},
                    "per_page": {"type": "integer", "default": 100, "description": "Max 100"},
                    "role": {"type": "string", "description": "Optional role filter"},
                },
            },
        ),
        types.Tool(
            name="search_users",
            description="Search users by name, email or other attributes",
            inputSchema={
                "type": "object",
                "properties": {"query": {"type": "string"}},
                "required": ["query"],
            },
        ),
        types.Tool(
            name="create_user",
            description="Create a Zendesk user",
            inputSchema={
                "type": "object",
                "properties": USER_FIELDS_SCHEMA,
                "required": ["name"],
            },
        ),
        types.Tool(
            name="update_user",
            description="Update fields on a Zendesk user",
            inputSchema={
                "type": "object",
                "properties": {"user_id": {"type": "integer"}, **USER_FIELDS_SCHEMA},
                "required": ["user_id"],
            },
        ),
        types.Tool(
            name="delete_user",
            description="Delete a Zendesk user",
            inputSchema=_id_schema("user_id", "The ID of the user to delete"),
        ),
        types.Tool(
            name="get_ticket",
            description="Retrieve a Zendesk ticket by its ID",
            inputSchema=_id_schema("ticket_id", "The ID of the ticket to retrieve"),
        ),
        types.Tool(
            name="get_tickets",
            description="Fetch the latest tickets with pagination support",
            inputSchema={
                "type": "object",
                "properties": {
                    "page": {"type": "integer", "default": 1},
                    "per_page": {"type": "integer", "default": 25, "description": "Max 100"},
                    "sort_by": {"type": "string", "default": "created_at"},
                    "sort_order": {"type": "string", "enum": ["asc", "desc"], "default": "desc"},
                },
            },
        ),
        types.Tool(
            name="create_ticket",
            description="Create a new Zendesk ticket",
            inputSchema={
                "type": "object",
                "properties": TICKET_FIELDS_SCHEMA,
                "required": ["subject", "description"],
            },
        ),
        types.Tool(
            name="update_ticket",
            description="Update fields on an existing Zendesk ticket",
            inputSchema={
                "type": "object",
                "properties": {"ticket_id": {"type": "integer"}, **TICKET_FIELDS_SCHEMA},
                "required": ["ticket_id"],
            },
        ),
        types.Tool(
            name="create_ticket_comment",
            description="Add a comment to an existing Zendesk ticket",
            inputSchema={
                "type": "object",
                "properties": {
                    "ticket_id": {"type": "integer"},
                    "comment": {"type": "string"},
                    "public": {"type": "boolean", "default": True},
                },
                "required": ["ticket_id", "comment"],
            },
        ),
        types.Tool(
            name="get_ticket_comments",
            description="Retrieve all comments for a Zendesk ticket",
            inputSchema=_id_schema("ticket_id", "The ID of the ticket"),
        ),
        types.Tool(
            name="delete_ticket",
            description="Delete a Zendesk ticket",
            inputSchema=_id_schema("ticket_id", "The ID of the ticket to delete"),
        ),
    ]


@server.call_tool()
async def handle_call_tool(
        name: str,
        arguments: dict[str, Any] | None
) -> list[types.TextContent]:
    """Handle Zendesk tool execution requests"""
    try:
        from zendesk_api.handlers import TOOL_HANDLERS

        handler = TOOL_HANDLERS.get(name)
        if handler is None:
            raise ValueError(f"Unknown tool: {name}")

        client = get_zendesk_client()
        return await handler(client, arguments)
    except Exception as e:
        logger.error(f"Tool {name} failed: {e}")
        return [types.TextContent(
            type="text",
            text=f"Error: {str(e)}"
        )]


@server.list_resources()
async def handle_list_resources() -> list[types.Resource]:
    logger.debug("Handling list_resources request")
    return [
        types.Resource(
            uri=AnyUrl("zendesk://users/me"),
            name="Current Zendesk user",
            description="The agent the server is authenticated as",
            mimeType="application/json",
        )
    ]


@ttl_cache(ttl=3600)
def get_cached_current_user() -> dict[str, Any]:
    client = get_zendesk_client()
    return client.users().me().model_dump(mode="json", exclude_none=True)


@server.read_resource()
async def handle_read_resource(uri: AnyUrl) -> str:
    logger.debug(f"Handling read_resource request for URI: {uri}")
    if uri.scheme != "zendesk":
        logger.error(f"Unsupported URI scheme: {uri.scheme}")
        raise ValueError(f"Unsupported URI scheme: {uri.scheme}")

    path = str(uri).replace("zendesk://", "")
    if path != "users/me":
        logger.error(f"Unknown resource path: {path}")
        raise ValueError(f"Unknown resource path: {path}")

    try:
        user = await run_client_call(get_cached_current_user)
        return json.dumps({"user": user}, indent=2)
    except Exception as e:
        logger.error(f"Error fetching current user: {e}")
        raise


def configure_logging() -> None:
    """Configure package logging without overriding host configuration."""
    if logger.handlers:
        return

    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(
        fmt="%(asctime)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    ))
    logger.addHandler(handler)
    logger.setLevel(logging.INFO)
    logger.propagate = False


async def main():
    configure_logging()
    logger.info("zendesk api server started")
    # Run the server using stdin/stdout streams
    async with stdio_server() as (read_stream, write_stream):
        await server.run(
            read_stream=read_stream,
            write_stream=write_stream,
            initialization_options=InitializationOptions(
                server_name="Zendesk",
                server_version=__version__,
                capabilities=server.get_capabilities(
                    notification_options=NotificationOptions(),
                    experimental_capabilities={},
                ),
            ),
        )


def run() -> None:
    asyncio.run(main())


if __name__ == "__main__":
    run()
