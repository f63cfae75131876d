"""Keycloak group management operations."""
from __future__ import annotations
import logging
from typing import Callable, List, Optional, TYPE_CHECKING

from .models import Group, Role, list_of

if TYPE_CHECKING:
    from .client import AdminAPIClient

logger = logging.getLogger(__name__)

GROUPS_PATH = "/realms/{}/groups"
DEFAULT_GROUPS_PATH = "/realms/{}/default-groups"
DEFAULT_GROUP_PATH = "/realms/{}/default-groups/{}"
GROUP_CLIENT_ROLES_PATH = "/realms/{}/groups/{}/role-mappings/clients/{}"
GROUP_AVAILABLE_CLIENT_ROLES_PATH = "/realms/{}/groups/{}/role-mappings/clients/{}/available"
GROUP_REALM_ROLES_PATH = "/realms/{}/groups/{}/role-mappings/realm"
GROUP_AVAILABLE_REALM_ROLES_PATH = "/realms/{}/groups/{}/role-mappings/realm/available"

RolePredicate = Callable[[Role], bool]


def _first_match(roles: List[Role], predicate: RolePredicate) -> Optional[Role]:
    for role in roles:
        if predicate(role):
            return role
    return None


class GroupService:
    """Service for managing Keycloak groups.

    Lookups (``find_*``) report absence as None. Every other operation
    raises on a non-2xx answer.
    """

    def __init__(self, client: AdminAPIClient):
        """Initialize group service.

        Args:
            client: Admin API client
        """
        self.client = client

    def list_groups(self, realm: str) -> List[Group]:
        """Return the realm's top-level groups."""
        return self.client.execute("GET", GROUPS_PATH, realm, decode=list_of(Group))

    def find_group_by_name(self, realm: str, name: str) -> Optional[Group]:
        """Retrieve a group by exact (case-sensitive) name.

        Args:
            realm: Realm name
            name: Group name

        Returns:
            First group with that name, or None if no group matches
        """
        groups = self.client.execute(
            "GET", GROUPS_PATH, realm, decode=list_of(Group), not_found_ok=True
        )
        for group in groups or []:
            if group.name == name:
                return group
        return None

    def create_group(self, realm: str, name: str) -> Optional[str]:
        """Create a group and return its server-assigned ID.

        The create call does not return the ID, so the group list is read
        back after creation.

        Args:
            realm: Realm name
            name: Group name

        Returns:
            Group ID, or None if the new group is not listed yet
        """
        self.client.execute("POST", GROUPS_PATH, realm, body=Group(name=name))
        created = self.find_group_by_name(realm, name)
        if created is None:
            logger.warning("Group '%s' created in realm '%s' but not found on lookup", name, realm)
            return None
        logger.info("Group '%s' created in realm '%s' (id=%s)", name, realm, created.id)
        return created.id

    def list_default_groups(self, realm: str) -> List[Group]:
        return self.client.execute("GET", DEFAULT_GROUPS_PATH, realm, decode=list_of(Group))

    def make_group_default(self, realm: str, group_id: str) -> None:
        """Mark a group as default for new users (idempotent).

        Args:
            realm: Realm name
            group_id: Group ID
        """
        if any(group.id == group_id for group in self.list_default_groups(realm)):
            logger.debug("Group %s is already a default group in realm '%s'", group_id, realm)
            return
        self.client.execute("PUT", DEFAULT_GROUP_PATH, realm, group_id)

    # -- Client role mappings ----------------------------------------------

    def create_group_client_role(self, realm: str, client_id: str, group_id: str, role: Role) -> None:
        """Map a client role onto a group.

        Args:
            realm: Realm name
            client_id: Client UUID (not the ``clientId`` string)
            group_id: Group ID
            role: Client role to grant
        """
        self.client.execute("POST", GROUP_CLIENT_ROLES_PATH, realm, group_id, client_id, body=[role])

    def list_group_client_roles(self, realm: str, client_id: str, group_id: str) -> List[Role]:
        return self.client.execute(
            "GET", GROUP_CLIENT_ROLES_PATH, realm, group_id, client_id, decode=list_of(Role)
        )

    def find_group_client_role(
        self, realm: str, client_id: str, group_id: str, predicate: RolePredicate
    ) -> Optional[Role]:
        """Return the first client role mapped to the group that satisfies ``predicate``."""
        roles = self.client.execute(
            "GET",
            GROUP_CLIENT_ROLES_PATH,
            realm,
            group_id,
            client_id,
            decode=list_of(Role),
            not_found_ok=True,
        )
        return _first_match(roles or [], predicate)

    def list_available_group_client_roles(self, realm: str, client_id: str, group_id: str) -> List[Role]:
        """Client roles that could still be mapped to the group."""
        return self.client.execute(
            "GET", GROUP_AVAILABLE_CLIENT_ROLES_PATH, realm, group_id, client_id, decode=list_of(Role)
        )

    def find_available_group_client_role(
        self, realm: str, client_id: str, group_id: str, predicate: RolePredicate
    ) -> Optional[Role]:
        roles = self.client.execute(
            "GET",
            GROUP_AVAILABLE_CLIENT_ROLES_PATH,
            realm,
            group_id,
            client_id,
            decode=list_of(Role),
            not_found_ok=True,
        )
        return _first_match(roles or [], predicate)

    # -- Realm role mappings -----------------------------------------------

    def create_group_realm_role(self, realm: str, group_id: str, role: Role) -> None:
        self.client.execute("POST", GROUP_REALM_ROLES_PATH, realm, group_id, body=[role])

    def list_group_realm_roles(self, realm: str, group_id: str) -> List[Role]:
        return self.client.execute("GET", GROUP_REALM_ROLES_PATH, realm, group_id, decode=list_of(Role))

    def list_available_group_realm_roles(self, realm: str, group_id: str) -> List[Role]:
        return self.client.execute(
            "GET", GROUP_AVAILABLE_REALM_ROLES_PATH, realm, group_id, decode=list_of(Role)
        )
