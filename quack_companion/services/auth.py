# quack_companion/services/auth.py
import logging
from typing import Optional

from ..core.config import Settings
from ..schemas.auth import AccessStatus, QuackCredentials, SessionStatus
from ..utils.errors import MissingCredentialsError
from .notifications import Notifier
from .quack import QuackClient
from .session import ENDPOINT_KEY, TOKEN_KEY, VALID_ENDPOINT_KEY, VALID_TOKEN_KEY, SessionStore

logger = logging.getLogger(__name__)


class AuthService:
    def __init__(self, settings: Settings, session: SessionStore, client: QuackClient, notifier: Notifier):
        self.settings = settings
        self.session = session
        self.client = client
        self.notifier = notifier

    @property
    def endpoint_url(self) -> Optional[str]:
        return self.session.get(ENDPOINT_KEY) or self.settings.ENDPOINT or None

    def check_api_access(self) -> bool:
        if not self.endpoint_url:
            self.notifier.show_error("Configure your endpoint first")
            self.session.update(VALID_ENDPOINT_KEY, False)
            return False
        if not self.session.get(TOKEN_KEY):
            self.notifier.show_error("Authenticate first")
            self.session.update(VALID_TOKEN_KEY, False)
            return False
        return True

    def credentials(self) -> QuackCredentials:
        """Credentials for the next API call; raises if the session is not ready."""
        if not self.check_api_access():
            raise MissingCredentialsError("Configure your endpoint and authenticate first")
        return QuackCredentials(endpoint_url=self.endpoint_url, token=self.session.get(TOKEN_KEY))

    async def set_endpoint(self, endpoint_url: str) -> bool:
        endpoint_url = endpoint_url.strip()
        is_valid = await self.client.verify_endpoint(endpoint_url)
        self.session.update(VALID_ENDPOINT_KEY, is_valid)
        if not is_valid:
            self.notifier.show_error("Invalid endpoint")
            return False

        if endpoint_url != self.endpoint_url:
            # A token issued by another endpoint is meaningless here
            self.session.update(TOKEN_KEY, None)
            self.session.update(VALID_TOKEN_KEY, False)
        self.session.update(ENDPOINT_KEY, endpoint_url)
        self.notifier.show_info(f"Endpoint set to {endpoint_url}")
        return True

    async def login(self, github_token: Optional[str] = None) -> None:
        endpoint_url = self.endpoint_url
        if not endpoint_url:
            self.notifier.show_error("Configure your endpoint first")
            raise MissingCredentialsError("Quack endpoint is not configured")
        github_token = github_token or self.settings.GITHUB_TOKEN
        if not github_token:
            self.notifier.show_error("A GitHub token is required to log in")
            raise MissingCredentialsError("GitHub token is missing")

        quack_token = await self.client.get_token(github_token, endpoint_url)
        self.session.update(TOKEN_KEY, quack_token)
        self.session.update(VALID_TOKEN_KEY, True)
        self.notifier.show_info("Authentication successful")

    def logout(self) -> None:
        self.session.update(TOKEN_KEY, None)
        self.session.update(VALID_TOKEN_KEY, False)
        self.notifier.show_info("Logged out")

    async def prepare_api_access(self) -> SessionStatus:
        """Check the endpoint and stored token, and refresh the session flags."""
        endpoint_url = self.endpoint_url
        is_valid_endpoint = bool(endpoint_url) and await self.client.verify_endpoint(endpoint_url)
        self.session.update(VALID_ENDPOINT_KEY, is_valid_endpoint)
        if not is_valid_endpoint:
            self.notifier.show_warning("Quack endpoint is not reachable, configure your endpoint")

        token = self.session.get(TOKEN_KEY)
        if not token or not endpoint_url:
            self.session.update(VALID_TOKEN_KEY, False)
            return self.status()

        access = await self.client.get_access_status(QuackCredentials(endpoint_url=endpoint_url, token=token))
        logger.info(f"API access status: {access.value}")
        if access == AccessStatus.OK:
            self.session.update(VALID_TOKEN_KEY, True)
        elif access == AccessStatus.EXPIRED_TOKEN:
            self.session.update(TOKEN_KEY, None)
            self.session.update(VALID_TOKEN_KEY, False)
            self.notifier.show_warning("Your session has expired, please log in again")
        elif access in (AccessStatus.UNKNOWN_ROUTE, AccessStatus.UNREACHABLE_ENDPOINT):
            self.session.update(VALID_ENDPOINT_KEY, False)
            self.notifier.show_error("Invalid endpoint, please check your configuration")
        else:
            self.notifier.show_warning("Unable to verify API access")
        return self.status()

    def status(self) -> SessionStatus:
        return SessionStatus(
            endpoint_url=self.endpoint_url,
            is_valid_endpoint=bool(self.session.get(VALID_ENDPOINT_KEY, False)),
            is_valid_token=bool(self.session.get(VALID_TOKEN_KEY, False)),
            has_token=bool(self.session.get(TOKEN_KEY))
        )
