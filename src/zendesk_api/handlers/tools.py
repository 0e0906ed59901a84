"""Individual tool handler functions."""
import json
from typing import Any

import mcp.types as types
from pydantic import BaseModel

from zendesk_api.server import run_client_call

USER_FIELDS = ("name", "email", "role", "organization_id", "phone", "tags")
TICKET_FIELDS = (
    "subject", "description", "status", "priority", "type",
    "requester_id", "assignee_id", "tags", "custom_fields",
)


def _json_response(data: Any) -> list[types.TextContent]:
    """Helper to format JSON response."""
    if isinstance(data, BaseModel):
        data = data.model_dump(mode="json", exclude_none=True)
    return [types.TextContent(type="text", text=json.dumps(data, indent=2))]


def _require_args(arguments: dict[str, Any] | None, *required_keys: str) -> None:
    """Helper to validate required arguments."""
    if not arguments:
        raise ValueError("Missing arguments")
    missing = [key for key in required_keys if key not in arguments or arguments[key] is None]
    if missing:
        raise ValueError(f"Missing required arguments: {', '.join(missing)}")


def _pick(arguments: dict[str, Any], keys: tuple[str, ...]) -> dict[str, Any]:
    return {key: arguments[key] for key in keys if arguments.get(key) is not None}


async def handle_get_user(client: Any, arguments: dict[str, Any] | None) -> list[types.TextContent]:
    """Handle get_user tool."""
    _require_args(arguments, "user_id")
    user = await run_client_call(client.users().show, arguments["user_id"])
    return _json_response(user)


async def handle_get_current_user(client: Any, arguments: dict[str, Any] | None) -> list[types.TextContent]:
    user = await run_client_call(client.users().me)
    return _json_response(user)


async def handle_list_users(client: Any, arguments: dict[str, Any] | None) -> list[types.TextContent]:
    """Handle list_users tool."""
    arguments = arguments or {}
    users = await run_client_call(
        client.users().list,
        page=arguments.get("page", 1),
        per_page=arguments.get("per_page", 100),
        role=arguments.get("role"),
    )
    return _json_response(users)


async def handle_search_users(client: Any, arguments: dict[str, Any] | None) -> list[types.TextContent]:
    _require_args(arguments, "query")
    users = await run_client_call(client.users().search, arguments["query"])
    return _json_response(users)


async def handle_create_user(client: Any, arguments: dict[str, Any] | None) -> list[types.TextContent]:
    """Handle create_user tool."""
    _require_args(arguments, "name")
    created = await run_client_call(client.users().create, _pick(arguments, USER_FIELDS))
    return _json_response({"message": "User created successfully", "user": created.model_dump(mode="json", exclude_none=True)})


async def handle_update_user(client: Any, arguments: dict[str, Any] | None) -> list[types.TextContent]:
    """Handle update_user tool."""
    _require_args(arguments, "user_id")
    updated = await run_client_call(client.users().update, arguments["user_id"], _pick(arguments, USER_FIELDS))
    return _json_response({"message": "User updated successfully", "user": updated.model_dump(mode="json", exclude_none=True)})


async def handle_delete_user(client: Any, arguments: dict[str, Any] | None) -> list[types.TextContent]:
    _require_args(arguments, "user_id")
    await run_client_call(client.users().delete, arguments["user_id"])
    return [types.TextContent(type="text", text=f"User {arguments['user_id']} deleted")]


async def handle_get_ticket(client: Any, arguments: dict[str, Any] | None) -> list[types.TextContent]:
    """Handle get_ticket tool."""
    _require_args(arguments, "ticket_id")
    ticket = await run_client_call(client.tickets().show, arguments["ticket_id"])
    return _json_response(ticket)


async def handle_get_tickets(client: Any, arguments: dict[str, Any] | None) -> list[types.TextContent]:
    """Handle get_tickets tool."""
    page = arguments.get("page", 1) if arguments else 1
    per_page = arguments.get("per_page", 25) if arguments else 25
    sort_by = arguments.get("sort_by", "created_at") if arguments else "created_at"
    sort_order = arguments.get("sort_order", "desc") if arguments else "desc"
    tickets = await run_client_call(
        client.tickets().list,
        page=page,
        per_page=per_page,
        sort_by=sort_by,
        sort_order=sort_order
    )
    data = tickets.model_dump(mode="json", exclude_none=True)
    data.update({
        "page": page,
        "per_page": min(per_page, 100),
        "has_more": tickets.has_more,
    })
    return _json_response(data)


async def handle_create_ticket(client: Any, arguments: dict[str, Any] | None) -> list[types.TextContent]:
    """Handle create_ticket tool."""
    _require_args(arguments, "subject", "description")
    fields = _pick(arguments, TICKET_FIELDS)
    # The description becomes the first comment on the new ticket
    fields["comment"] = {"body": fields.pop("description")}
    created = await run_client_call(client.tickets().create, fields)
    return _json_response({"message": "Ticket created successfully", "ticket": created.model_dump(mode="json", exclude_none=True)})


async def handle_update_ticket(client: Any, arguments: dict[str, Any] | None) -> list[types.TextContent]:
    """Handle update_ticket tool."""
    _require_args(arguments, "ticket_id")
    fields = _pick(arguments, TICKET_FIELDS)
    fields.pop("description", None)
    updated = await run_client_call(client.tickets().update, arguments["ticket_id"], fields)
    return _json_response({"message": "Ticket updated successfully", "ticket": updated.model_dump(mode="json", exclude_none=True)})


async def handle_create_ticket_comment(client: Any, arguments: dict[str, Any] | None) -> list[types.TextContent]:
    """Handle create_ticket_comment tool."""
    _require_args(arguments, "ticket_id", "comment")
    public = arguments.get("public", True)
    await run_client_call(
        client.tickets().add_comment,
        arguments["ticket_id"],
        arguments["comment"],
        public=public,
    )
    return [types.TextContent(type="text", text=f"Comment created successfully on ticket {arguments['ticket_id']}")]


async def handle_get_ticket_comments(client: Any, arguments: dict[str, Any] | None) -> list[types.TextContent]:
    """Handle get_ticket_comments tool."""
    _require_args(arguments, "ticket_id")
    comments = await run_client_call(client.tickets().comments, arguments["ticket_id"])
    return _json_response(comments)


async def handle_delete_ticket(client: Any, arguments: dict[str, Any] | None) -> list[types.TextContent]:
    _require_args(arguments, "ticket_id")
    await run_client_call(client.tickets().delete, arguments["ticket_id"])
    return [types.TextContent(type="text", text=f"Ticket {arguments['ticket_id']} deleted")]
