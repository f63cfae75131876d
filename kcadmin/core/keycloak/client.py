"""Low-level HTTP client for Keycloak Admin API.

Handles authentication, token management, and the request pipeline that
every resource service is built on.
"""
from __future__ import annotations
import enum
import logging
from string import Formatter
from typing import Any, Callable, Dict, Optional, TYPE_CHECKING
from urllib.parse import quote, unquote

import requests

from .authentication import AuthenticationService
from .clients import ClientService
from .exceptions import AuthenticationFailed, DecodeFailed, RequestFailed, UnexpectedStatus
from .groups import GroupService
from .identity_providers import IdentityProviderService
from .models import Credentials, Representation, TokenResponse
from .realm import RealmService
from .roles import RoleService
from .users import UserService

if TYPE_CHECKING:
    from ...config import AdminConfig

logger = logging.getLogger(__name__)

REQUEST_TIMEOUT = 5
DEFAULT_CONTEXT_PATH = "/auth"
DEFAULT_ADMIN_CLIENT_ID = "admin-cli"
TOKEN_PATH = "/realms/master/protocol/openid-connect/token"
AUTH_FAILURE_STATUSES = frozenset({401, 403})

Decoder = Callable[[Any], Any]


class CallState(enum.Enum):
    """States of a single admin call.

    UNAUTHENTICATED -> AUTHENTICATED -> (RETRYING) -> DONE | FAILED.
    Only AUTHENTICATED may move to RETRYING, so a call sends the request at
    most twice.
    """
    UNAUTHENTICATED = "unauthenticated"
    AUTHENTICATED = "authenticated"
    RETRYING = "retrying"
    DONE = "done"
    FAILED = "failed"


def format_path(template: str, *args: Any) -> str:
    """Substitute ``args`` positionally into a ``{}`` path template.

    Each argument is percent-encoded as a single path segment.

    Raises:
        ValueError: If the template uses named fields, the argument count
            does not match the placeholders, or a segment is empty
    """
    placeholders = [name for _, name, _, _ in Formatter().parse(template) if name is not None]
    if any(placeholders):
        raise ValueError(f"Path template '{template}' must use positional '{{}}' placeholders")
    if len(placeholders) != len(args):
        raise ValueError(
            f"Path template '{template}' expects {len(placeholders)} argument(s), got {len(args)}"
        )
    segments = []
    for arg in args:
        segment = "" if arg is None else str(arg)
        if not segment:
            raise ValueError(f"Empty path segment for template '{template}'")
        segments.append(quote(segment, safe=""))
    return template.format(*segments)


def encode_body(body: Any) -> Any:
    """Turn representations (or lists of them) into JSON-ready values."""
    if isinstance(body, Representation):
        return body.to_dict()
    if isinstance(body, (list, tuple)):
        return [encode_body(item) for item in body]
    return body


def _normalize_context_path(context_path: Optional[str]) -> str:
    path = (context_path or "").strip().strip("/")
    return f"/{path}" if path else ""


class AdminAPIClient:
    """HTTP client for Keycloak Admin API with reactive re-authentication.

    Features:
    - Lazy login on first use when no token is held
    - A single re-login and retry when an admin call answers 401/403
    - Status mapping into typed exceptions (see ``exceptions.py``)
    - Typed resource services: ``realms``, ``users``, ``groups``, ``roles``,
      ``clients``, ``identity_providers``, ``authentication``

    The token is a plain attribute rebound on each login. Concurrent callers
    sharing one client may race two logins; the later assignment wins and no
    state is corrupted.

    Usage:
        client = AdminAPIClient("http://keycloak:8080", Credentials("admin", "secret"))
        client.realms.create_realm(Realm(realm="demo", enabled=True))
        group_id = client.groups.create_group("demo", "staff")
    """

    def __init__(
        self,
        base_url: str,
        credentials: Optional[Credentials] = None,
        *,
        token: Optional[str] = None,
        transport: Optional[requests.Session] = None,
        context_path: Optional[str] = DEFAULT_CONTEXT_PATH,
        timeout: float = REQUEST_TIMEOUT,
        verify: Any = True,
    ):
        """Initialize the admin client.

        Args:
            base_url: Keycloak server root (e.g. ``https://sso.example.com``)
            credentials: Admin credentials used for (re-)login
            token: Pre-obtained bearer token, if any
            transport: Object exposing ``request(method, url, **kwargs)``;
                defaults to a new ``requests.Session``
            context_path: Server context path (``/auth`` on legacy
                distributions, empty on current ones)
            timeout: Per-request timeout handed to the transport
            verify: TLS verification flag or CA bundle path
        """
        if not base_url:
            raise ValueError("base_url is required")
        self.base_url = base_url.rstrip("/")
        self.context_path = _normalize_context_path(context_path)
        self.credentials = credentials
        self.token = token
        self._owns_transport = transport is None
        self.transport = transport if transport is not None else requests.Session()
        self.timeout = timeout
        self.verify = verify

        self.realms = RealmService(self)
        self.users = UserService(self)
        self.groups = GroupService(self)
        self.roles = RoleService(self)
        self.clients = ClientService(self)
        self.identity_providers = IdentityProviderService(self)
        self.authentication = AuthenticationService(self)

    @classmethod
    def from_settings(cls, cfg: AdminConfig, transport: Optional[requests.Session] = None) -> AdminAPIClient:
        """Build a client from loaded settings (see ``kcadmin.config``)."""
        credentials = Credentials(cfg.admin_username, cfg.admin_password, cfg.admin_client_id)
        return cls(
            cfg.keycloak_url,
            credentials,
            transport=transport,
            context_path=cfg.context_path,
            timeout=cfg.request_timeout,
            verify=cfg.tls_verify_option,
        )

    def __enter__(self) -> AdminAPIClient:
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    def close(self) -> None:
        """Close the transport if this client created it."""
        if self._owns_transport:
            self.transport.close()

    # -- URLs ---------------------------------------------------------------

    @property
    def token_endpoint(self) -> str:
        return f"{self.context_path}{TOKEN_PATH}"

    def admin_endpoint(self, path: str) -> str:
        """Server-relative path of an admin resource."""
        return f"{self.context_path}/admin{path}"

    # -- Authentication -----------------------------------------------------

    def login(self, username: Optional[str] = None, password: Optional[str] = None) -> str:
        """Obtain an admin token via direct access grant and store it.

        Explicit arguments replace the held credentials; without them the
        held credentials are reused. Any previous token is overwritten.

        Returns:
            Access token

        Raises:
            AuthenticationFailed: On missing credentials, non-2xx status, or
                a response without an ``access_token``
            RequestFailed: If the token endpoint cannot be reached
        """
        endpoint = self.token_endpoint
        if username is not None or password is not None:
            if not username or not password:
                raise AuthenticationFailed(None, "username and password are both required", endpoint)
            client_id = self.credentials.client_id if self.credentials else DEFAULT_ADMIN_CLIENT_ID
            self.credentials = Credentials(username, password, client_id)
        if self.credentials is None:
            raise AuthenticationFailed(None, "no admin credentials configured", endpoint)

        resp = self._send("POST", endpoint, data=self.credentials.as_form())
        if not 200 <= resp.status_code < 300:
            raise AuthenticationFailed(resp.status_code, resp.text, endpoint)
        try:
            token = TokenResponse.from_dict(resp.json()).access_token
        except (TypeError, ValueError) as exc:
            raise AuthenticationFailed(resp.status_code, f"malformed token response: {exc}", endpoint) from exc
        if not isinstance(token, str) or not token:
            raise AuthenticationFailed(resp.status_code, "token response has no access_token", endpoint)

        self.token = token
        logger.debug("Obtained admin token for '%s'", self.credentials.username)
        return token

    # -- Request pipeline ---------------------------------------------------

    def execute(
        self,
        method: str,
        path_template: str,
        *path_args: Any,
        body: Any = None,
        decode: Optional[Decoder] = None,
        params: Optional[Dict[str, Any]] = None,
        not_found_ok: bool = False,
    ) -> Any:
        """Run one admin operation and map its outcome.

        Args:
            method: HTTP method
            path_template: Admin path with positional ``{}`` placeholders
            *path_args: Segment values, in template order
            body: Representation, list of representations, or JSON value
            decode: Decoder for the success body; ``None`` discards it
            params: Query parameters
            not_found_ok: Return ``None`` instead of raising on 404

        Returns:
            The decoded body, or None

        Raises:
            UnexpectedStatus: Non-2xx status outside the not-found policy
            DecodeFailed: 2xx body that does not fit ``decode``
            RequestFailed: Transport failure
            AuthenticationFailed: A required (re-)login failed
        """
        path = format_path(path_template, *path_args)
        resp = self._perform(method, path, body=body, params=params)
        return self._classify(method, path, resp, decode, not_found_ok)

    def execute_create(self, path_template: str, *path_args: Any, body: Any = None) -> Optional[str]:
        """POST a new resource and return the ID from the ``Location`` header.

        Returns None when the server does not send a ``Location`` header.
        """
        path = format_path(path_template, *path_args)
        resp = self._perform("POST", path, body=body)
        self._classify("POST", path, resp, None, False)
        location = resp.headers.get("Location")
        if not location:
            return None
        return unquote(location.rstrip("/").rsplit("/", 1)[-1])

    def _auth_headers(self) -> Dict[str, str]:
        return {
            "Authorization": f"Bearer {self.token}",
            "Accept": "application/json",
        }

    def _perform(
        self,
        method: str,
        path: str,
        *,
        body: Any = None,
        params: Optional[Dict[str, Any]] = None,
    ) -> requests.Response:
        endpoint = self.admin_endpoint(path)
        kwargs: Dict[str, Any] = {}
        if params:
            kwargs["params"] = params
        if body is not None:
            kwargs["json"] = encode_body(body)

        state = CallState.AUTHENTICATED if self.token else CallState.UNAUTHENTICATED
        resp: Optional[requests.Response] = None
        while state not in (CallState.DONE, CallState.FAILED):
            if state is CallState.UNAUTHENTICATED:
                self.login()
                state = CallState.AUTHENTICATED
                continue

            resp = self._send(method, endpoint, headers=self._auth_headers(), **kwargs)
            logger.debug("%s %s -> %s", method, endpoint, resp.status_code)

            if resp.status_code not in AUTH_FAILURE_STATUSES:
                state = CallState.DONE
            elif state is CallState.AUTHENTICATED and self.credentials is not None:
                logger.info("%s %s answered %s; logging in again", method, endpoint, resp.status_code)
                self.login()
                state = CallState.RETRYING
            else:
                state = CallState.FAILED
        return resp

    def _send(self, method: str, endpoint: str, **kwargs: Any) -> requests.Response:
        url = f"{self.base_url}{endpoint}"
        try:
            return self.transport.request(method, url, timeout=self.timeout, verify=self.verify, **kwargs)
        except requests.RequestException as exc:
            raise RequestFailed(method, endpoint, str(exc)) from exc

    def _classify(
        self,
        method: str,
        path: str,
        resp: requests.Response,
        decode: Optional[Decoder],
        not_found_ok: bool,
    ) -> Any:
        endpoint = self.admin_endpoint(path)
        status = resp.status_code
        if status == 404 and not_found_ok:
            return None
        if not 200 <= status < 300:
            raise UnexpectedStatus(status, resp.text, endpoint, method)
        if decode is None:
            return None
        try:
            payload = resp.json() if resp.content else None
        except ValueError as exc:
            raise DecodeFailed(endpoint, f"invalid JSON: {exc}", resp.text) from exc
        try:
            return decode(payload)
        except (TypeError, ValueError, KeyError) as exc:
            raise DecodeFailed(endpoint, str(exc), resp.text) from exc
