from clients.rental_api_sdk.accounts_client import AccountsClient
from clients.rental_api_sdk.complexes_client import ComplexesClient
from clients.rental_api_sdk.config import ConfigError, SDKConfig
from clients.rental_api_sdk.errors import ApiError, NetworkError, NotFoundError, UnauthorizedError
from clients.rental_api_sdk.http_client import HttpClient
from clients.rental_api_sdk.listings_client import ListingsClient
from clients.rental_api_sdk.models import FilePayload, PreferencesRecord, UploadedFile
from clients.rental_api_sdk.normalizers import NormalizedPage
from clients.rental_api_sdk.preferences_client import PreferencesClient

__all__ = [
    "SDKConfig",
    "ConfigError",
    "ApiError",
    "NetworkError",
    "NotFoundError",
    "UnauthorizedError",
    "HttpClient",
    "AccountsClient",
    "ListingsClient",
    "ComplexesClient",
    "PreferencesClient",
    "FilePayload",
    "PreferencesRecord",
    "UploadedFile",
    "NormalizedPage",
]
