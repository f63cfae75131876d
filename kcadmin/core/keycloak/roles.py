"""Keycloak role mapping operations for users."""
from __future__ import annotations
from typing import List, TYPE_CHECKING

from .models import Role, list_of

if TYPE_CHECKING:
    from .client import AdminAPIClient

USER_REALM_ROLES_PATH = "/realms/{}/users/{}/role-mappings/realm"
USER_AVAILABLE_REALM_ROLES_PATH = "/realms/{}/users/{}/role-mappings/realm/available"
USER_CLIENT_ROLES_PATH = "/realms/{}/users/{}/role-mappings/clients/{}"
USER_AVAILABLE_CLIENT_ROLES_PATH = "/realms/{}/users/{}/role-mappings/clients/{}/available"


class RoleService:
    """Service for granting and revoking user roles.

    Role mapping endpoints take a JSON array of roles; single roles are
    wrapped before sending.
    """

    def __init__(self, client: AdminAPIClient):
        self.client = client

    # -- Realm roles --------------------------------------------------------

    def list_user_realm_roles(self, realm: str, user_id: str) -> List[Role]:
        return self.client.execute("GET", USER_REALM_ROLES_PATH, realm, user_id, decode=list_of(Role))

    def list_available_user_realm_roles(self, realm: str, user_id: str) -> List[Role]:
        return self.client.execute(
            "GET", USER_AVAILABLE_REALM_ROLES_PATH, realm, user_id, decode=list_of(Role)
        )

    def create_user_realm_role(self, realm: str, user_id: str, role: Role) -> None:
        """Grant a realm-level role to the user."""
        self.client.execute("POST", USER_REALM_ROLES_PATH, realm, user_id, body=[role])

    def delete_user_realm_role(self, realm: str, user_id: str, role: Role) -> None:
        """Revoke a realm-level role from the user."""
        self.client.execute("DELETE", USER_REALM_ROLES_PATH, realm, user_id, body=[role])

    # -- Client roles -------------------------------------------------------

    def list_user_client_roles(self, realm: str, client_id: str, user_id: str) -> List[Role]:
        """Client roles mapped to the user.

        Args:
            realm: Realm name
            client_id: Client UUID
            user_id: User ID
        """
        return self.client.execute(
            "GET", USER_CLIENT_ROLES_PATH, realm, user_id, client_id, decode=list_of(Role)
        )

    def list_available_user_client_roles(self, realm: str, client_id: str, user_id: str) -> List[Role]:
        return self.client.execute(
            "GET", USER_AVAILABLE_CLIENT_ROLES_PATH, realm, user_id, client_id, decode=list_of(Role)
        )

    def create_user_client_role(self, realm: str, client_id: str, user_id: str, role: Role) -> None:
        self.client.execute("POST", USER_CLIENT_ROLES_PATH, realm, user_id, client_id, body=[role])

    def delete_user_client_role(self, realm: str, client_id: str, user_id: str, role: Role) -> None:
        self.client.execute("DELETE", USER_CLIENT_ROLES_PATH, realm, user_id, client_id, body=[role])
