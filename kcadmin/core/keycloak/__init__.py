"""Keycloak Admin API client library.

This package provides a typed, testable interface to Keycloak Admin API operations.

Architecture:
- client.py: HTTP client with login, reactive re-authentication and the request pipeline
- models.py: Dataclass representations of realms, users, groups, roles, ...
- realm.py: Realm lifecycle
- users.py: User lifecycle and federated identities
- groups.py: Groups, default groups and group role mappings
- roles.py: User role mappings (realm and client roles)
- clients.py: Registered application management
- identity_providers.py: Identity brokering instances
- authentication.py: Authentication flow executions and authenticator configs
- exceptions.py: Typed exceptions for error handling

Usage:
    from kcadmin.core.keycloak import AdminAPIClient, Credentials, Realm

    client = AdminAPIClient("http://keycloak:8080", Credentials("admin", "password"))
    client.realms.create_realm(Realm(realm="demo", enabled=True))
    group = client.groups.find_group_by_name("demo", "staff")
"""
from .client import (
    AdminAPIClient,
    CallState,
    format_path,
    REQUEST_TIMEOUT,
    DEFAULT_CONTEXT_PATH,
    TOKEN_PATH,
)
from .exceptions import (
    KeycloakError,
    KeycloakAPIError,
    AuthenticationFailed,
    UnexpectedStatus,
    RequestFailed,
    DecodeFailed,
)
from .models import (
    Representation,
    list_of,
    Credentials,
    Realm,
    User,
    UserCredential,
    FederatedIdentity,
    Group,
    Role,
    AuthenticationExecutionInfo,
    AuthenticatorConfig,
    Client,
    ClientSecret,
    IdentityProvider,
    TokenResponse,
)
from .realm import RealmService
from .users import UserService
from .groups import GroupService
from .roles import RoleService
from .clients import ClientService
from .identity_providers import IdentityProviderService
from .authentication import AuthenticationService

__all__ = [
    # Client
    "AdminAPIClient",
    "CallState",
    "format_path",
    "REQUEST_TIMEOUT",
    "DEFAULT_CONTEXT_PATH",
    "TOKEN_PATH",

    # Exceptions
    "KeycloakError",
    "KeycloakAPIError",
    "AuthenticationFailed",
    "UnexpectedStatus",
    "RequestFailed",
    "DecodeFailed",

    # Representations
    "Representation",
    "list_of",
    "Credentials",
    "Realm",
    "User",
    "UserCredential",
    "FederatedIdentity",
    "Group",
    "Role",
    "AuthenticationExecutionInfo",
    "AuthenticatorConfig",
    "Client",
    "ClientSecret",
    "IdentityProvider",
    "TokenResponse",

    # Services
    "RealmService",
    "UserService",
    "GroupService",
    "RoleService",
    "ClientService",
    "IdentityProviderService",
    "AuthenticationService",
]
