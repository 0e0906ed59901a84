"""ZendeskClient - base verb wrappers plus the resource handlers."""
from zendesk_api.client.base import (
    Interceptors,
    RetryPolicy,
    ZendeskClientBase,
    ZendeskResponse,
    build_url,
)
from zendesk_api.client.tickets import TicketAPI
from zendesk_api.client.users import UserAPI


class ZendeskClient(ZendeskClientBase):
    """
    Zendesk client for one tenant.

    Resource handlers are cheap views over the client, so each accessor
    returns a fresh one.
    """

    def users(self) -> UserAPI:
        return UserAPI(self)

    def tickets(self) -> TicketAPI:
        return TicketAPI(self)


__all__ = [
    'Interceptors',
    'RetryPolicy',
    'TicketAPI',
    'UserAPI',
    'ZendeskClient',
    'ZendeskResponse',
    'build_url',
]
