import json
import logging
import sys
from types import SimpleNamespace

import pytest
import yaml

import scripts.kc_admin as kc_admin
from kcadmin.core.keycloak import AdminAPIClient, Group, Realm, UnexpectedStatus
from tests.mock_keycloak_server import Reply, TOKEN_PATH

ADMIN = "/auth/admin"


@pytest.fixture(autouse=True)
def restore_sys_argv():
    """Make sure every test sees a clean CLI invocation."""
    original = sys.argv[:]
    yield
    sys.argv = original


class FakeClient:
    """Stands in for AdminAPIClient; records the settings it was built from."""

    instances = []

    def __init__(self, cfg):
        self.cfg = cfg
        self.closed = False
        self.realms = SimpleNamespace()
        self.groups = SimpleNamespace()
        self.users = SimpleNamespace()
        FakeClient.instances.append(self)

    @classmethod
    def from_settings(cls, cfg):
        return cls(cfg)

    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        self.closed = True


@pytest.fixture
def fake_client(monkeypatch):
    FakeClient.instances = []
    monkeypatch.setattr(kc_admin, "AdminAPIClient", FakeClient)
    return FakeClient


def test_missing_admin_password_aborts_before_any_call(fake_client):
    """CLI must abort before building a client if no admin password is available."""
    sys.argv = ["kc_admin.py", "--kc-url", "http://kc", "list-realms"]

    with pytest.raises(SystemExit):
        kc_admin.main()

    assert fake_client.instances == []


def test_no_subcommand_prints_help(fake_client, capsys):
    assert kc_admin.main([]) == 0
    assert "Keycloak Admin API helper" in capsys.readouterr().out


def test_admin_password_from_environment(monkeypatch, fake_client, capsys):
    monkeypatch.setenv("KEYCLOAK_ADMIN_PASSWORD", "env-pass")

    def fake_list():
        return [Realm(realm="master"), Realm(realm="demo", enabled=True)]

    def build(cfg):
        client = FakeClient(cfg)
        client.realms.list_realms = fake_list
        return client

    monkeypatch.setattr(FakeClient, "from_settings", staticmethod(build))

    rc = kc_admin.main(["--kc-url", "http://kc/", "--context-path", "", "list-realms"])

    assert rc == 0
    cfg = fake_client.instances[0].cfg
    assert cfg.admin_password == "env-pass"
    assert cfg.keycloak_url == "http://kc"
    assert cfg.context_path == ""
    assert json.loads(capsys.readouterr().out) == [{"realm": "master"}, {"realm": "demo", "enabled": True}]
    assert fake_client.instances[0].closed is True


def test_create_group_with_default_flag(monkeypatch, fake_client, capsys):
    calls = []

    def build(cfg):
        client = FakeClient(cfg)
        client.groups.create_group = lambda realm, name: calls.append(("create", realm, name)) or "g-1"
        client.groups.make_group_default = lambda realm, gid: calls.append(("default", realm, gid))
        return client

    monkeypatch.setattr(FakeClient, "from_settings", staticmethod(build))

    rc = kc_admin.main(["--admin-pass", "pw", "create-group", "--realm", "demo", "--name", "staff", "--default"])

    assert rc == 0
    assert calls == [("create", "demo", "staff"), ("default", "demo", "g-1")]
    assert capsys.readouterr().out.strip() == "g-1"


def test_find_group_not_found_exits_non_zero(monkeypatch, fake_client, capsys):
    def build(cfg):
        client = FakeClient(cfg)
        client.groups.find_group_by_name = lambda realm, name: None
        return client

    monkeypatch.setattr(FakeClient, "from_settings", staticmethod(build))

    rc = kc_admin.main(["--admin-pass", "pw", "find-group", "--realm", "demo", "--name", "ghost"])

    assert rc == 1
    assert "not found" in capsys.readouterr().err


def test_yaml_output(monkeypatch, fake_client, capsys):
    def build(cfg):
        client = FakeClient(cfg)
        client.groups.find_group_by_name = lambda realm, name: Group(id="12345", name=name)
        return client

    monkeypatch.setattr(FakeClient, "from_settings", staticmethod(build))

    rc = kc_admin.main(["--admin-pass", "pw", "--format", "yaml", "find-group", "--name", "staff"])

    assert rc == 0
    assert yaml.safe_load(capsys.readouterr().out) == {"id": "12345", "name": "staff"}


def test_keycloak_error_is_reported_with_exit_code(monkeypatch, fake_client, capsys):
    def boom(realm):
        raise UnexpectedStatus(403, "forbidden", f"{ADMIN}/realms/{realm}", "DELETE")

    def build(cfg):
        client = FakeClient(cfg)
        client.realms.delete_realm = boom
        return client

    monkeypatch.setattr(FakeClient, "from_settings", staticmethod(build))

    rc = kc_admin.main(["--admin-pass", "pw", "delete-realm", "--realm", "demo"])

    assert rc == 1
    assert "[error] [403] DELETE /auth/admin/realms/demo: forbidden" in capsys.readouterr().err


def test_end_to_end_against_mock_server(server, capsys):
    """Full path: CLI args -> settings -> login -> admin call."""
    server.route("GET", f"{ADMIN}/realms/demo/groups", Reply(200, [{"id": "12345", "name": "staff"}]))

    rc = kc_admin.main([
        "--kc-url", server.base_url,
        "--admin-user", "admin",
        "--admin-pass", "pw",
        "find-group", "--realm", "demo", "--name", "staff",
    ])

    assert rc == 0
    assert json.loads(capsys.readouterr().out) == {"id": "12345", "name": "staff"}
    assert [r.path for r in server.requests] == [TOKEN_PATH, f"{ADMIN}/realms/demo/groups"]
    assert server.requests[0].form()["password"] == ["pw"]


@pytest.fixture
def built_clients(monkeypatch):
    """Real clients, recorded as the CLI builds them."""
    built = []

    class RecordingClient(AdminAPIClient):
        @classmethod
        def from_settings(cls, cfg, transport=None):
            client = super().from_settings(cfg, transport)
            built.append(client)
            return client

    monkeypatch.setattr(kc_admin, "AdminAPIClient", RecordingClient)
    return built


def test_environment_settings_reach_the_client(monkeypatch, server, built_clients):
    server.route("GET", f"{ADMIN}/realms", Reply(200, []))
    monkeypatch.setenv("KEYCLOAK_URL", server.base_url)
    monkeypatch.setenv("KEYCLOAK_ADMIN_PASSWORD", "env-pass")
    monkeypatch.setenv("KEYCLOAK_CA_BUNDLE", "/etc/ssl/private-ca.pem")
    monkeypatch.setenv("KEYCLOAK_REQUEST_TIMEOUT", "12.5")

    assert kc_admin.main(["list-realms"]) == 0

    client = built_clients[0]
    assert client.verify == "/etc/ssl/private-ca.pem"
    assert client.timeout == 12.5
    assert server.paths() == [f"{ADMIN}/realms"]


def test_flags_override_environment(monkeypatch, server, built_clients):
    server.route("GET", f"{ADMIN}/realms", Reply(200, []))
    monkeypatch.setenv("KEYCLOAK_URL", "http://unreachable.invalid")
    monkeypatch.setenv("KEYCLOAK_ADMIN_PASSWORD", "env-pass")
    monkeypatch.setenv("KEYCLOAK_REQUEST_TIMEOUT", "12.5")
    monkeypatch.setenv("KEYCLOAK_VERIFY_TLS", "true")

    rc = kc_admin.main(["--kc-url", server.base_url, "--timeout", "3", "--insecure", "list-realms"])

    assert rc == 0
    client = built_clients[0]
    assert client.base_url == server.base_url
    assert client.timeout == 3.0
    assert client.verify is False


def test_verify_tls_env_disables_verification(monkeypatch, server, built_clients):
    server.route("GET", f"{ADMIN}/realms", Reply(200, []))
    monkeypatch.setenv("KEYCLOAK_ADMIN_PASSWORD", "env-pass")
    monkeypatch.setenv("KEYCLOAK_VERIFY_TLS", "false")

    assert kc_admin.main(["--kc-url", server.base_url, "list-realms"]) == 0
    assert built_clients[0].verify is False


def test_invalid_timeout_is_a_usage_error(monkeypatch, fake_client):
    monkeypatch.setenv("KEYCLOAK_ADMIN_PASSWORD", "env-pass")
    monkeypatch.setenv("KEYCLOAK_REQUEST_TIMEOUT", "soon")

    with pytest.raises(SystemExit):
        kc_admin.main(["list-realms"])
    monkeypatch.delenv("KEYCLOAK_REQUEST_TIMEOUT")
    with pytest.raises(SystemExit):
        kc_admin.main(["--timeout", "0", "list-realms"])

    assert fake_client.instances == []


def test_log_level_comes_from_settings(monkeypatch, fake_client):
    levels = []
    monkeypatch.setattr(kc_admin.logging, "basicConfig", lambda **kwargs: levels.append(kwargs["level"]))
    monkeypatch.setenv("KEYCLOAK_ADMIN_PASSWORD", "env-pass")
    monkeypatch.setenv("KCADMIN_LOG_LEVEL", "debug")

    def build(cfg):
        client = FakeClient(cfg)
        client.realms.list_realms = lambda: []
        return client

    monkeypatch.setattr(FakeClient, "from_settings", staticmethod(build))

    kc_admin.main(["list-realms"])
    kc_admin.main(["--log-level", "error", "list-realms"])

    assert levels == [logging.DEBUG, logging.ERROR]
    assert fake_client.instances[0].cfg.log_level == "DEBUG"
