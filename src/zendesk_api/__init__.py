"""Zendesk API client with rate-limit aware verb wrappers."""
from zendesk_api.client import (
    Interceptors,
    RetryPolicy,
    TicketAPI,
    UserAPI,
    ZendeskClient,
    ZendeskResponse,
)
from zendesk_api.exceptions import (
    ZendeskAPIError,
    ZendeskDecodeError,
    ZendeskError,
    ZendeskNetworkError,
    ZendeskNotFoundError,
    ZendeskRateLimitError,
    ZendeskValidationError,
)

__version__ = "0.1.0"

__all__ = [
    'Interceptors',
    'RetryPolicy',
    'TicketAPI',
    'UserAPI',
    'ZendeskAPIError',
    'ZendeskClient',
    'ZendeskDecodeError',
    'ZendeskError',
    'ZendeskNetworkError',
    'ZendeskNotFoundError',
    'ZendeskRateLimitError',
    'ZendeskResponse',
    'ZendeskValidationError',
]
