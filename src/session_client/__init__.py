from .client import AuthenticatedClient
from .config import ClientConfig
from .credential_store import CredentialPair, CredentialStore
from .errors import CredentialExpiredError, RefreshFailedError
from .refresh_coordinator import RefreshCoordinator, RefreshState
from .replayer import RequestReplayer
from .session import SessionInvalidator
from .token_refresher import TokenRefresher
from .transport import ApiRequest, Transport

__all__ = [
    "AuthenticatedClient",
    "ClientConfig",
    "CredentialPair",
    "CredentialStore",
    "CredentialExpiredError",
    "RefreshFailedError",
    "RefreshCoordinator",
    "RefreshState",
    "RequestReplayer",
    "SessionInvalidator",
    "TokenRefresher",
    "ApiRequest",
    "Transport",
]
