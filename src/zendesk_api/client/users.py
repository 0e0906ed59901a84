"""Users API handler."""
from typing import Any, Dict

from zendesk_api.client.base import require_id, to_payload
from zendesk_api.models import User, UserEnvelope, UserList


class UserAPI:
    """Endpoints under /users, bound to one client."""

    def __init__(self, client):
        self.client = client

    def list(self, page: int = 1, per_page: int = 100, role: str | None = None) -> UserList:
        """List users one page at a time.

        Args:
            page: Page number (1-based)
            per_page: Number of users per page (max 100)
            role: Optional role filter (end-user, agent, admin)
        """
        params: Dict[str, Any] = {
            'page': str(page),
            'per_page': str(min(per_page, 100)),
            'role': role,
        }
        return self.client._get_json("users.json", UserList, params)

    def show(self, user_id: int) -> User:
        require_id(user_id, "user_id")
        return self.client._get_json(f"users/{user_id}.json", UserEnvelope).user

    def me(self) -> User:
        """The user the client is authenticated as."""
        return self.client._get_json("users/me.json", UserEnvelope).user

    def search(self, query: str) -> UserList:
        return self.client._get_json("users/search.json", UserList, {'query': query})

    def create(self, user: User | Dict[str, Any]) -> User:
        envelope = self.client.post("users.json", {'user': to_payload(user)}, UserEnvelope)
        return envelope.user

    def create_or_update(self, user: User | Dict[str, Any]) -> User:
        """Create a user, or update the existing one matched by email or external_id."""
        envelope = self.client.post("users/create_or_update.json", {'user': to_payload(user)}, UserEnvelope)
        return envelope.user

    def update(self, user_id: int, user: User | Dict[str, Any]) -> User:
        require_id(user_id, "user_id")
        envelope = self.client.put(f"users/{user_id}.json", {'user': to_payload(user)}, UserEnvelope)
        return envelope.user

    def delete(self, user_id: int) -> None:
        require_id(user_id, "user_id")
        self.client.delete(f"users/{user_id}.json").raise_for_status()
