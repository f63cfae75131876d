"""Configuration module for the Keycloak admin client."""
from .settings import AdminConfig, load_secret, load_settings

__all__ = ["AdminConfig", "load_secret", "load_settings"]
