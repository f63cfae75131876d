"""Keycloak user management operations."""
from __future__ import annotations
from typing import List, Optional, TYPE_CHECKING

from .models import FederatedIdentity, User, list_of

if TYPE_CHECKING:
    from .client import AdminAPIClient

USERS_PATH = "/realms/{}/users"
USER_PATH = "/realms/{}/users/{}"
FEDERATED_IDENTITIES_PATH = "/realms/{}/users/{}/federated-identity"
FEDERATED_IDENTITY_PATH = "/realms/{}/users/{}/federated-identity/{}"


class UserService:
    """Service for managing Keycloak users."""

    def __init__(self, client: AdminAPIClient):
        """Initialize user service.

        Args:
            client: Admin API client
        """
        self.client = client

    def create_user(self, realm: str, user: User) -> Optional[str]:
        """Create a user in the realm.

        Args:
            realm: Realm name
            user: User representation

        Returns:
            Server-assigned user ID from the Location header, if sent
        """
        return self.client.execute_create(USERS_PATH, realm, body=user)

    def get_user(self, realm: str, user_id: str) -> User:
        return self.client.execute("GET", USER_PATH, realm, user_id, decode=User.from_dict)

    def update_user(self, realm: str, user: User) -> None:
        if not user.id:
            raise ValueError("User representation must carry an id to be updated")
        self.client.execute("PUT", USER_PATH, realm, user.id, body=user)

    def delete_user(self, realm: str, user_id: str) -> None:
        self.client.execute("DELETE", USER_PATH, realm, user_id)

    def list_users(self, realm: str) -> List[User]:
        return self.client.execute("GET", USERS_PATH, realm, decode=list_of(User))

    def find_user_by_username(self, realm: str, username: str) -> Optional[User]:
        """Return the user that exactly matches the username.

        The server search is a substring match, so results are filtered
        client-side.

        Args:
            realm: Realm name
            username: Username to search for

        Returns:
            User representation or None if not found
        """
        users = self.client.execute(
            "GET",
            USERS_PATH,
            realm,
            params={"username": username},
            decode=list_of(User),
            not_found_ok=True,
        )
        for user in users or []:
            if user.username == username:
                return user
        return None

    def find_user_by_email(self, realm: str, email: str) -> Optional[User]:
        """Return the user whose email exactly matches, or None."""
        users = self.client.execute(
            "GET",
            USERS_PATH,
            realm,
            params={"email": email},
            decode=list_of(User),
            not_found_ok=True,
        )
        for user in users or []:
            if user.email == email:
                return user
        return None

    def list_user_federated_identities(self, realm: str, user_id: str) -> List[FederatedIdentity]:
        return self.client.execute(
            "GET", FEDERATED_IDENTITIES_PATH, realm, user_id, decode=list_of(FederatedIdentity)
        )

    def create_federated_identity(self, realm: str, user_id: str, identity: FederatedIdentity) -> None:
        """Link the user to an account at ``identity.identity_provider``."""
        if not identity.identity_provider:
            raise ValueError("Federated identity must name its identity provider")
        self.client.execute(
            "POST", FEDERATED_IDENTITY_PATH, realm, user_id, identity.identity_provider, body=identity
        )

    def remove_federated_identity(self, realm: str, user_id: str, provider: str) -> None:
        self.client.execute("DELETE", FEDERATED_IDENTITY_PATH, realm, user_id, provider)
