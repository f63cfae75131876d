"""Keycloak authentication flow operations."""
from __future__ import annotations
from typing import List, Optional, TYPE_CHECKING

from .models import AuthenticationExecutionInfo, AuthenticatorConfig, list_of

if TYPE_CHECKING:
    from .client import AdminAPIClient

FLOW_EXECUTIONS_PATH = "/realms/{}/authentication/flows/{}/executions"
EXECUTION_CONFIG_PATH = "/realms/{}/authentication/executions/{}/config"
AUTHENTICATOR_CONFIG_PATH = "/realms/{}/authentication/config/{}"


class AuthenticationService:
    """Service for inspecting and tuning authentication flow executions."""

    def __init__(self, client: AdminAPIClient):
        self.client = client

    def list_authentication_executions_for_flow(
        self, realm: str, flow_alias: str
    ) -> List[AuthenticationExecutionInfo]:
        return self.client.execute(
            "GET", FLOW_EXECUTIONS_PATH, realm, flow_alias, decode=list_of(AuthenticationExecutionInfo)
        )

    def update_authentication_execution_for_flow(
        self, realm: str, flow_alias: str, execution: AuthenticationExecutionInfo
    ) -> None:
        """Update one execution (typically its ``requirement``) of the flow.

        Args:
            realm: Realm name
            flow_alias: Alias of the flow, e.g. ``browser``
            execution: Execution as listed for the flow, with changes applied
        """
        self.client.execute("PUT", FLOW_EXECUTIONS_PATH, realm, flow_alias, body=execution)

    def create_authenticator_config(
        self, realm: str, execution_id: str, config: AuthenticatorConfig
    ) -> Optional[str]:
        """Attach a configuration to an execution and return the config ID."""
        return self.client.execute_create(EXECUTION_CONFIG_PATH, realm, execution_id, body=config)

    def get_authenticator_config(self, realm: str, config_id: str) -> AuthenticatorConfig:
        return self.client.execute(
            "GET", AUTHENTICATOR_CONFIG_PATH, realm, config_id, decode=AuthenticatorConfig.from_dict
        )
