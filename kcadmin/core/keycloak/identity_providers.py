"""Keycloak identity provider (brokering) operations."""
from __future__ import annotations
from typing import List, Optional, TYPE_CHECKING

from .models import IdentityProvider, list_of

if TYPE_CHECKING:
    from .client import AdminAPIClient

IDENTITY_PROVIDERS_PATH = "/realms/{}/identity-provider/instances"
IDENTITY_PROVIDER_PATH = "/realms/{}/identity-provider/instances/{}"


class IdentityProviderService:
    """Service for managing brokered identity providers, addressed by alias."""

    def __init__(self, client: AdminAPIClient):
        self.client = client

    def create_identity_provider(self, realm: str, provider: IdentityProvider) -> Optional[str]:
        return self.client.execute_create(IDENTITY_PROVIDERS_PATH, realm, body=provider)

    def get_identity_provider(self, realm: str, alias: str) -> IdentityProvider:
        return self.client.execute(
            "GET", IDENTITY_PROVIDER_PATH, realm, alias, decode=IdentityProvider.from_dict
        )

    def list_identity_providers(self, realm: str) -> List[IdentityProvider]:
        return self.client.execute("GET", IDENTITY_PROVIDERS_PATH, realm, decode=list_of(IdentityProvider))

    def update_identity_provider(self, realm: str, provider: IdentityProvider) -> None:
        if not provider.alias:
            raise ValueError("Identity provider representation must carry an alias")
        self.client.execute("PUT", IDENTITY_PROVIDER_PATH, realm, provider.alias, body=provider)

    def delete_identity_provider(self, realm: str, alias: str) -> None:
        self.client.execute("DELETE", IDENTITY_PROVIDER_PATH, realm, alias)
