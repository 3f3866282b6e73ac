from mint.client.api import BackendClient, ClientSettings, DashboardData, parse_response
from mint.client.errors import AuthRequiredError, BackendError, ClientConfigError

__all__ = [
    "AuthRequiredError",
    "BackendClient",
    "BackendError",
    "ClientConfigError",
    "ClientSettings",
    "DashboardData",
    "parse_response",
]
