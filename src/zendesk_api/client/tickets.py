"""Tickets API handler."""
from typing import Any, Dict, Iterable

from zendesk_api.client.base import require_id, to_payload
from zendesk_api.exceptions import ZendeskValidationError
from zendesk_api.models import CommentList, Ticket, TicketEnvelope, TicketList


class TicketAPI:
    """Endpoints under /tickets, bound to one client."""

    def __init__(self, client):
        self.client = client

    def list(
        self,
        page: int = 1,
        per_page: int = 100,
        sort_by: str = 'created_at',
        sort_order: str = 'desc',
    ) -> TicketList:
        """List tickets one page at a time.

        Args:
            page: Page number (1-based)
            per_page: Number of tickets per page (max 100)
            sort_by: Field to sort by (created_at, updated_at, priority, status)
            sort_order: Sort order (asc or desc)
        """
        if sort_order not in ('asc', 'desc'):
            raise ZendeskValidationError(f"sort_order must be 'asc' or 'desc', got {sort_order!r}")
        params = {
            'page': str(page),
            'per_page': str(min(per_page, 100)),
            'sort_by': sort_by,
            'sort_order': sort_order,
        }
        return self.client._get_json("tickets.json", TicketList, params)

    def show(self, ticket_id: int) -> Ticket:
        require_id(ticket_id, "ticket_id")
        return self.client._get_json(f"tickets/{ticket_id}.json", TicketEnvelope).ticket

    def show_many(self, ticket_ids: Iterable[int]) -> TicketList:
        ids = [require_id(tid, "ticket_id") for tid in ticket_ids]
        if not ids:
            raise ZendeskValidationError("ticket_ids must not be empty")
        params = {'ids': ",".join(str(tid) for tid in ids)}
        return self.client._get_json("tickets/show_many.json", TicketList, params)

    def create(self, ticket: Ticket | Dict[str, Any]) -> Ticket:
        envelope = self.client.post("tickets.json", {'ticket': to_payload(ticket)}, TicketEnvelope)
        return envelope.ticket

    def update(self, ticket_id: int, ticket: Ticket | Dict[str, Any]) -> Ticket:
        require_id(ticket_id, "ticket_id")
        envelope = self.client.put(f"tickets/{ticket_id}.json", {'ticket': to_payload(ticket)}, TicketEnvelope)
        return envelope.ticket

    def add_comment(self, ticket_id: int, body: str, public: bool = True) -> Ticket:
        """Add a comment to an existing ticket through a ticket update."""
        if not body:
            raise ZendeskValidationError("comment body must not be empty")
        return self.update(ticket_id, {'comment': {'body': body, 'public': public}})

    def comments(self, ticket_id: int) -> CommentList:
        require_id(ticket_id, "ticket_id")
        return self.client._get_json(f"tickets/{ticket_id}/comments.json", CommentList)

    def delete(self, ticket_id: int) -> None:
        require_id(ticket_id, "ticket_id")
        self.client.delete(f"tickets/{ticket_id}.json").raise_for_status()
