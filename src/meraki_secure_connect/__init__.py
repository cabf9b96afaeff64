"""meraki_secure_connect package exports."""

from .client import (
    AmbiguousSiteError,
    RetryConfig,
    SecureConnectClient,
    SecureConnectClientError,
    SecureConnectHTTPError,
    SecureConnectParseError,
    SecureConnectTransportError,
    SiteNotFoundError,
    is_retryable_status,
)
from .config import create_client_from_env, load_env_config
from .models import (
    PageShape,
    RegionType,
    SiteEnrollment,
    SitePage,
    SiteRecord,
    decode_site_page,
)

__all__ = [
    # Client
    "SecureConnectClient",
    "RetryConfig",
    "is_retryable_status",
    # Exceptions
    "SecureConnectClientError",
    "SecureConnectTransportError",
    "SecureConnectHTTPError",
    "SecureConnectParseError",
    "SiteNotFoundError",
    "AmbiguousSiteError",
    # Models
    "RegionType",
    "SiteEnrollment",
    "SiteRecord",
    "SitePage",
    "PageShape",
    "decode_site_page",
    # Config helpers
    "create_client_from_env",
    "load_env_config",
]
