"""Settings loader with environment variable and Docker secrets integration."""
from __future__ import annotations
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

logger = logging.getLogger(__name__)

SECRETS_DIR = "/run/secrets"

_TRUE_VALUES = {"1", "true", "yes", "on"}


def load_secret(secret_name: str, env_var: str | None = None) -> str | None:
    """
    Load secret from /run/secrets (Docker secrets pattern).

    Priority:
    1. /run/secrets/{secret_name} (Docker secrets mount)
    2. Environment variable (fallback)

    Args:
        secret_name: Name of the secret file in /run/secrets
        env_var: Optional environment variable name to check as fallback

    Returns:
        Secret value or None if not found
    """
    secret_file = Path(SECRETS_DIR) / secret_name

    if secret_file.exists() and secret_file.is_file():
        try:
            secret_value = secret_file.read_text().strip()
            if secret_value:
                logger.info("[settings] Loaded %s from %s", secret_name, SECRETS_DIR)
                return secret_value
        except OSError as e:
            logger.warning("[settings] Failed to read %s/%s: %s", SECRETS_DIR, secret_name, e)

    if env_var:
        secret_value = os.getenv(env_var)
        if secret_value:
            logger.info("[settings] Loaded %s from environment (fallback)", env_var)
            return secret_value

    return None


def _env_bool(var_name: str, default: bool) -> bool:
    raw = os.environ.get(var_name)
    if raw is None or not raw.strip():
        return default
    return raw.strip().lower() in _TRUE_VALUES


def _env_float(var_name: str, default: float) -> float:
    raw = os.environ.get(var_name)
    if raw is None or not raw.strip():
        return default
    try:
        value = float(raw)
    except ValueError:
        raise RuntimeError(f"Environment variable {var_name} must be a number, got '{raw}'")
    if value <= 0:
        raise RuntimeError(f"Environment variable {var_name} must be positive, got '{raw}'")
    return value


@dataclass
class AdminConfig:
    """Connection settings for the Keycloak Admin API."""
    # Server
    keycloak_url: str = "http://127.0.0.1:8080"
    context_path: str = "/auth"

    # Admin credentials (password grant against the master realm)
    admin_username: str = "admin"
    admin_password: str = field(default="", repr=False)
    admin_client_id: str = "admin-cli"

    # Transport
    request_timeout: float = 5.0
    verify_tls: bool = True
    ca_bundle: Optional[str] = None

    # Logging
    log_level: str = "WARNING"

    @property
    def tls_verify_option(self) -> bool | str:
        """Value for the ``verify`` argument of requests (CA bundle wins)."""
        if self.ca_bundle:
            return self.ca_bundle
        return self.verify_tls


def load_settings(admin_password: str | None = None) -> AdminConfig:
    """Load admin client settings from environment and /run/secrets.

    Args:
        admin_password: Explicit admin password; skips the secret lookup

    Raises:
        RuntimeError: If the admin password is missing or a numeric
            setting is malformed
    """
    keycloak_url = os.environ.get("KEYCLOAK_URL", "http://127.0.0.1:8080").strip().rstrip("/")
    context_path = os.environ.get("KEYCLOAK_CONTEXT_PATH", "/auth").strip()

    admin_username = os.environ.get("KEYCLOAK_ADMIN", "admin").strip()
    if not admin_password:
        admin_password = load_secret("keycloak_admin_password", "KEYCLOAK_ADMIN_PASSWORD")
    if not admin_password:
        raise RuntimeError(
            "KEYCLOAK_ADMIN_PASSWORD not found in /run/secrets/keycloak_admin_password or environment"
        )
    admin_client_id = os.environ.get("KEYCLOAK_ADMIN_CLIENT_ID", "admin-cli").strip()

    request_timeout = _env_float("KEYCLOAK_REQUEST_TIMEOUT", 5.0)
    verify_tls = _env_bool("KEYCLOAK_VERIFY_TLS", True)
    ca_bundle = os.environ.get("KEYCLOAK_CA_BUNDLE") or None
    if not verify_tls:
        logger.warning("[settings] TLS verification disabled for %s", keycloak_url)

    log_level = os.environ.get("KCADMIN_LOG_LEVEL", "WARNING").strip().upper()

    logger.debug(
        "[settings] keycloak_url=%s; context_path=%s; admin=%s", keycloak_url, context_path, admin_username
    )

    return AdminConfig(
        keycloak_url=keycloak_url,
        context_path=context_path,
        admin_username=admin_username,
        admin_password=admin_password,
        admin_client_id=admin_client_id,
        request_timeout=request_timeout,
        verify_tls=verify_tls,
        ca_bundle=ca_bundle,
        log_level=log_level,
    )
