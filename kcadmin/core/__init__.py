"""Core Keycloak administration logic.

Module Structure:
    - keycloak/ : Keycloak Admin API client, representations and services

Nothing is auto-imported here; import from ``kcadmin.core.keycloak``.
"""
