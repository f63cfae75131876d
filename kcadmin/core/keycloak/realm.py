"""Keycloak realm management operations."""
from __future__ import annotations
from typing import List, Optional, TYPE_CHECKING

from .models import Realm, list_of

if TYPE_CHECKING:
    from .client import AdminAPIClient

REALMS_PATH = "/realms"
REALM_PATH = "/realms/{}"


class RealmService:
    """Service for managing Keycloak realms."""

    def __init__(self, client: AdminAPIClient):
        """Initialize realm service.

        Args:
            client: Admin API client
        """
        self.client = client

    def create_realm(self, realm: Realm) -> Optional[str]:
        """Create a realm.

        Args:
            realm: Realm representation (``realm`` is the name)

        Returns:
            Realm name taken from the Location header, if sent
        """
        return self.client.execute_create(REALMS_PATH, body=realm)

    def get_realm(self, realm: str) -> Realm:
        """Fetch a realm by name.

        Callers that are unsure the realm exists should check with
        ``realm_exists`` first; a missing realm raises ``UnexpectedStatus``.
        """
        return self.client.execute("GET", REALM_PATH, realm, decode=Realm.from_dict)

    def list_realms(self) -> List[Realm]:
        return self.client.execute("GET", REALMS_PATH, decode=list_of(Realm))

    def realm_exists(self, realm: str) -> bool:
        """Check whether the given realm already exists."""
        return any(existing.realm == realm for existing in self.list_realms())

    def update_realm(self, realm: Realm) -> None:
        """Replace the realm settings present on ``realm``."""
        if not realm.realm:
            raise ValueError("Realm representation must carry a realm name")
        self.client.execute("PUT", REALM_PATH, realm.realm, body=realm)

    def delete_realm(self, realm: str) -> None:
        self.client.execute("DELETE", REALM_PATH, realm)
