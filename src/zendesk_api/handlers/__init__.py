"""Tool handler registry."""
from zendesk_api.handlers import tools

# Registry mapping tool names to handler functions
TOOL_HANDLERS = {
    "get_user": tools.handle_get_user,
    "get_current_user": tools.handle_get_current_user,
    "list_users": tools.handle_list_users,
    "search_users": tools.handle_search_users,
    "create_user": tools.handle_create_user,
    "update_user": tools.handle_update_user,
    "delete_user": tools.handle_delete_user,
    "get_ticket": tools.handle_get_ticket,
    "get_tickets": tools.handle_get_tickets,
    "create_ticket": tools.handle_create_ticket,
    "update_ticket": tools.handle_update_ticket,
    "create_ticket_comment": tools.handle_create_ticket_comment,
    "get_ticket_comments": tools.handle_get_ticket_comments,
    "delete_ticket": tools.handle_delete_ticket,
}

__all__ = ['TOOL_HANDLERS']
