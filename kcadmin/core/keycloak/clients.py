"""Keycloak client (registered application) management operations."""
from __future__ import annotations
from typing import List, Optional, TYPE_CHECKING

from .models import Client, ClientSecret, list_of

if TYPE_CHECKING:
    from .client import AdminAPIClient

CLIENTS_PATH = "/realms/{}/clients"
CLIENT_PATH = "/realms/{}/clients/{}"
CLIENT_SECRET_PATH = "/realms/{}/clients/{}/client-secret"


class ClientService:
    """Service for managing realm clients.

    Keycloak addresses clients by an internal UUID (``Client.id``); the
    human-readable ``clientId`` is only usable as a search parameter.
    """

    def __init__(self, client: AdminAPIClient):
        self.client = client

    def create_client(self, realm: str, client: Client) -> Optional[str]:
        """Create a client and return its UUID from the Location header."""
        return self.client.execute_create(CLIENTS_PATH, realm, body=client)

    def get_client(self, realm: str, client_uuid: str) -> Client:
        return self.client.execute("GET", CLIENT_PATH, realm, client_uuid, decode=Client.from_dict)

    def list_clients(self, realm: str) -> List[Client]:
        return self.client.execute("GET", CLIENTS_PATH, realm, decode=list_of(Client))

    def find_client_by_client_id(self, realm: str, client_id: str) -> Optional[Client]:
        """Return the client representation matching ``clientId``, if it exists."""
        clients = self.client.execute(
            "GET",
            CLIENTS_PATH,
            realm,
            params={"clientId": client_id},
            decode=list_of(Client),
            not_found_ok=True,
        )
        for candidate in clients or []:
            if candidate.client_id == client_id:
                return candidate
        return None

    def update_client(self, realm: str, client: Client) -> None:
        if not client.id:
            raise ValueError("Client representation must carry its UUID in 'id' to be updated")
        self.client.execute("PUT", CLIENT_PATH, realm, client.id, body=client)

    def delete_client(self, realm: str, client_uuid: str) -> None:
        self.client.execute("DELETE", CLIENT_PATH, realm, client_uuid)

    def get_client_secret(self, realm: str, client_uuid: str) -> ClientSecret:
        return self.client.execute(
            "GET", CLIENT_SECRET_PATH, realm, client_uuid, decode=ClientSecret.from_dict
        )
