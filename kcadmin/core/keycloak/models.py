"""Typed representations of Keycloak Admin API resources.

Each representation is a dataclass whose snake_case fields map onto the
camelCase keys of the JSON the server speaks. The wire name lives in the
field metadata (``{"json": "displayName"}``); nested representations name
their element type (``{"item": "Group"}``) so ``from_dict`` can rebuild
them.

Keys the dataclass does not model are kept in ``extra`` and written back
by ``to_dict``, so a get/update cycle never drops server-side settings.
Fields left as ``None`` are omitted from the encoded body.
"""
from __future__ import annotations
from dataclasses import dataclass, field, fields
from typing import Any, Callable, Dict, List, Optional, Type, TypeVar

R = TypeVar("R", bound="Representation")

_REGISTRY: Dict[str, type] = {}


def _wire(name: str, **extra: Any) -> Dict[str, Any]:
    return {"json": name, **extra}


def _encode_value(value: Any) -> Any:
    if isinstance(value, Representation):
        return value.to_dict()
    if isinstance(value, list):
        return [_encode_value(item) for item in value]
    if isinstance(value, dict):
        return {key: _encode_value(item) for key, item in value.items()}
    return value


def _decode_value(metadata: Any, value: Any) -> Any:
    item_type = metadata.get("item")
    if item_type is None or value is None:
        return value
    target = _REGISTRY[item_type]
    if not isinstance(value, list):
        raise TypeError(f"expected a list of {item_type}, got {type(value).__name__}")
    return [target.from_dict(item) for item in value]


@dataclass
class Representation:
    """Base for every resource record exchanged with the Admin API."""

    extra: Dict[str, Any] = field(default_factory=dict, repr=False, compare=False, kw_only=True)

    def __init_subclass__(cls, **kwargs: Any) -> None:
        super().__init_subclass__(**kwargs)
        _REGISTRY[cls.__name__] = cls

    @classmethod
    def from_dict(cls: Type[R], data: Any) -> R:
        """Build a record from a decoded JSON object.

        Raises:
            TypeError: If ``data`` is not a JSON object or a nested value
                has the wrong shape
        """
        if not isinstance(data, dict):
            raise TypeError(f"{cls.__name__} expects a JSON object, got {type(data).__name__}")
        kwargs: Dict[str, Any] = {}
        known = set()
        for f in fields(cls):
            if f.name == "extra":
                continue
            key = f.metadata.get("json", f.name)
            known.add(key)
            if key in data:
                kwargs[f.name] = _decode_value(f.metadata, data[key])
        kwargs["extra"] = {key: value for key, value in data.items() if key not in known}
        return cls(**kwargs)

    def to_dict(self) -> Dict[str, Any]:
        """Encode the record into the JSON object the server expects."""
        payload = dict(self.extra)
        for f in fields(self):
            if f.name == "extra":
                continue
            value = getattr(self, f.name)
            if value is None:
                continue
            payload[f.metadata.get("json", f.name)] = _encode_value(value)
        return payload


def list_of(cls: Type[R]) -> Callable[[Any], List[R]]:
    """Return a decoder turning a JSON array into a list of ``cls`` records.

    An empty response body (decoded as ``None``) yields an empty list.
    """
    def decode(data: Any) -> List[R]:
        if data is None:
            return []
        if not isinstance(data, list):
            raise TypeError(f"expected a JSON array of {cls.__name__}, got {type(data).__name__}")
        return [cls.from_dict(item) for item in data]

    decode.__name__ = f"list_of_{cls.__name__}"
    return decode


# ─────────────────────────────────────────────────────────────────────────────
# Resource representations
# ─────────────────────────────────────────────────────────────────────────────
@dataclass
class UserCredential(Representation):
    type: Optional[str] = None
    value: Optional[str] = field(default=None, repr=False)
    temporary: Optional[bool] = None


@dataclass
class FederatedIdentity(Representation):
    """Link between a local user and an account at an identity provider."""
    identity_provider: Optional[str] = field(default=None, metadata=_wire("identityProvider"))
    user_id: Optional[str] = field(default=None, metadata=_wire("userId"))
    user_name: Optional[str] = field(default=None, metadata=_wire("userName"))


@dataclass
class User(Representation):
    id: Optional[str] = None
    username: Optional[str] = None
    first_name: Optional[str] = field(default=None, metadata=_wire("firstName"))
    last_name: Optional[str] = field(default=None, metadata=_wire("lastName"))
    email: Optional[str] = None
    email_verified: Optional[bool] = field(default=None, metadata=_wire("emailVerified"))
    enabled: Optional[bool] = None
    attributes: Optional[Dict[str, List[str]]] = None
    required_actions: Optional[List[str]] = field(default=None, metadata=_wire("requiredActions"))
    groups: Optional[List[str]] = None
    realm_roles: Optional[List[str]] = field(default=None, metadata=_wire("realmRoles"))
    client_roles: Optional[Dict[str, List[str]]] = field(default=None, metadata=_wire("clientRoles"))
    credentials: Optional[List[UserCredential]] = field(
        default=None, metadata=_wire("credentials", item="UserCredential")
    )
    federated_identities: Optional[List[FederatedIdentity]] = field(
        default=None, metadata=_wire("federatedIdentities", item="FederatedIdentity")
    )


@dataclass
class Realm(Representation):
    id: Optional[str] = None
    realm: Optional[str] = None
    enabled: Optional[bool] = None
    display_name: Optional[str] = field(default=None, metadata=_wire("displayName"))
    display_name_html: Optional[str] = field(default=None, metadata=_wire("displayNameHtml"))
    login_theme: Optional[str] = field(default=None, metadata=_wire("loginTheme"))
    users: Optional[List[User]] = field(default=None, metadata=_wire("users", item="User"))


@dataclass
class Group(Representation):
    id: Optional[str] = None
    name: Optional[str] = None
    path: Optional[str] = None
    attributes: Optional[Dict[str, List[str]]] = None
    realm_roles: Optional[List[str]] = field(default=None, metadata=_wire("realmRoles"))
    client_roles: Optional[Dict[str, List[str]]] = field(default=None, metadata=_wire("clientRoles"))
    sub_groups: Optional[List[Group]] = field(default=None, metadata=_wire("subGroups", item="Group"))


@dataclass
class Role(Representation):
    """Realm- or client-level role."""
    id: Optional[str] = None
    name: Optional[str] = None
    description: Optional[str] = None
    composite: Optional[bool] = None
    client_role: Optional[bool] = field(default=None, metadata=_wire("clientRole"))
    container_id: Optional[str] = field(default=None, metadata=_wire("containerId"))
    attributes: Optional[Dict[str, List[str]]] = None


@dataclass
class AuthenticationExecutionInfo(Representation):
    """One step of an authentication flow, as listed under the flow alias."""
    id: Optional[str] = None
    requirement: Optional[str] = None
    display_name: Optional[str] = field(default=None, metadata=_wire("displayName"))
    alias: Optional[str] = None
    description: Optional[str] = None
    requirement_choices: Optional[List[str]] = field(default=None, metadata=_wire("requirementChoices"))
    configurable: Optional[bool] = None
    provider_id: Optional[str] = field(default=None, metadata=_wire("providerId"))
    authentication_flow: Optional[bool] = field(default=None, metadata=_wire("authenticationFlow"))
    authentication_config: Optional[str] = field(default=None, metadata=_wire("authenticationConfig"))
    flow_id: Optional[str] = field(default=None, metadata=_wire("flowId"))
    level: Optional[int] = None
    index: Optional[int] = None


@dataclass
class AuthenticatorConfig(Representation):
    id: Optional[str] = None
    alias: Optional[str] = None
    config: Optional[Dict[str, str]] = None


@dataclass
class Client(Representation):
    """A registered application (OIDC/SAML client) within a realm."""
    id: Optional[str] = None
    client_id: Optional[str] = field(default=None, metadata=_wire("clientId"))
    name: Optional[str] = None
    description: Optional[str] = None
    enabled: Optional[bool] = None
    protocol: Optional[str] = None
    secret: Optional[str] = field(default=None, repr=False)
    public_client: Optional[bool] = field(default=None, metadata=_wire("publicClient"))
    bearer_only: Optional[bool] = field(default=None, metadata=_wire("bearerOnly"))
    service_accounts_enabled: Optional[bool] = field(default=None, metadata=_wire("serviceAccountsEnabled"))
    standard_flow_enabled: Optional[bool] = field(default=None, metadata=_wire("standardFlowEnabled"))
    direct_access_grants_enabled: Optional[bool] = field(
        default=None, metadata=_wire("directAccessGrantsEnabled")
    )
    root_url: Optional[str] = field(default=None, metadata=_wire("rootUrl"))
    base_url: Optional[str] = field(default=None, metadata=_wire("baseUrl"))
    redirect_uris: Optional[List[str]] = field(default=None, metadata=_wire("redirectUris"))
    web_origins: Optional[List[str]] = field(default=None, metadata=_wire("webOrigins"))
    default_client_scopes: Optional[List[str]] = field(default=None, metadata=_wire("defaultClientScopes"))
    attributes: Optional[Dict[str, str]] = None


@dataclass
class ClientSecret(Representation):
    type: Optional[str] = None
    value: Optional[str] = field(default=None, repr=False)


@dataclass
class IdentityProvider(Representation):
    alias: Optional[str] = None
    display_name: Optional[str] = field(default=None, metadata=_wire("displayName"))
    provider_id: Optional[str] = field(default=None, metadata=_wire("providerId"))
    internal_id: Optional[str] = field(default=None, metadata=_wire("internalId"))
    enabled: Optional[bool] = None
    trust_email: Optional[bool] = field(default=None, metadata=_wire("trustEmail"))
    store_token: Optional[bool] = field(default=None, metadata=_wire("storeToken"))
    first_broker_login_flow_alias: Optional[str] = field(
        default=None, metadata=_wire("firstBrokerLoginFlowAlias")
    )
    config: Optional[Dict[str, str]] = None


@dataclass
class TokenResponse(Representation):
    """Body returned by the OpenID Connect token endpoint."""
    access_token: Optional[str] = field(default=None, repr=False)
    expires_in: Optional[int] = None
    refresh_expires_in: Optional[int] = None
    refresh_token: Optional[str] = field(default=None, repr=False)
    token_type: Optional[str] = None
    not_before_policy: Optional[int] = field(default=None, metadata=_wire("not-before-policy"))
    session_state: Optional[str] = None
    scope: Optional[str] = None


@dataclass(frozen=True)
class Credentials:
    """Admin credentials for the password grant. Never sent to admin endpoints."""
    username: str
    password: str = field(repr=False)
    client_id: str = "admin-cli"

    def as_form(self) -> Dict[str, str]:
        return {
            "grant_type": "password",
            "client_id": self.client_id,
            "username": self.username,
            "password": self.password,
        }
