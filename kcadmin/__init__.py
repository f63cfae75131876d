"""kcadmin: typed client for the Keycloak Admin REST API.

To use the client:
    from kcadmin.core.keycloak import AdminAPIClient, Credentials

To build a client from environment / Docker secrets:
    from kcadmin.config import load_settings
    from kcadmin.core.keycloak import AdminAPIClient

    client = AdminAPIClient.from_settings(load_settings())
"""

__version__ = "0.1.0"
