"""Pytest shared fixtures for the Keycloak admin client tests."""
import pathlib
import sys

# Add project root to Python path
ROOT = pathlib.Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

import pytest

from kcadmin.core.keycloak import AdminAPIClient, Credentials, Realm, User
from tests.mock_keycloak_server import MockKeycloakServer

ADMIN = "/auth/admin"


@pytest.fixture
def server():
    with MockKeycloakServer() as s:
        yield s


@pytest.fixture
def client(server):
    """Client holding a token already, as after an earlier login."""
    kc = AdminAPIClient(server.base_url, Credentials("admin", "admin-pass"), token="dummy")
    yield kc
    kc.close()


@pytest.fixture
def dummy_realm():
    return Realm(id="dummy", realm="dummy", enabled=False, display_name="dummy")


@pytest.fixture
def dummy_user():
    return User(
        id="dummy",
        username="dummy",
        first_name="dummy",
        last_name="dummy",
        email_verified=False,
        enabled=False,
    )


@pytest.fixture(autouse=True)
def _isolate_secrets(monkeypatch, tmp_path):
    """Keep tests away from a real /run/secrets mount and ambient credentials."""
    monkeypatch.setattr("kcadmin.config.settings.SECRETS_DIR", str(tmp_path / "secrets"))
    for var in (
        "KEYCLOAK_URL",
        "KEYCLOAK_CONTEXT_PATH",
        "KEYCLOAK_ADMIN",
        "KEYCLOAK_ADMIN_PASSWORD",
        "KEYCLOAK_ADMIN_CLIENT_ID",
        "KEYCLOAK_REQUEST_TIMEOUT",
        "KEYCLOAK_VERIFY_TLS",
        "KEYCLOAK_CA_BUNDLE",
        "KCADMIN_LOG_LEVEL",
    ):
        monkeypatch.delenv(var, raising=False)
