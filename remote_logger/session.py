"""
Authentication session for the remote logger.

Holds credentials and the current bearer token, and tracks the terminal
"disabled" flag. Once disabled, a session never becomes usable again.
"""

import logging
from enum import Enum

from .errors import AuthRejected, AuthTransportFault
from .transport import IngestClient

logger = logging.getLogger(__name__)


class SessionState(Enum):
    """Lifecycle states of a session."""

    UNAUTHENTICATED = "unauthenticated"
    ANONYMOUS_ACTIVE = "anonymous_active"  # No password, ships without a token
    AUTHENTICATING = "authenticating"
    AUTHENTICATED = "authenticated"
    DISABLED = "disabled"  # Terminal


class AuthSession:
    """
    Owns credentials and the bearer token for one logger.

    Auth failures never raise to the caller: they disable the session and
    are reported through logging.
    """

    def __init__(
        self,
        client: IngestClient,
        package_name: str,
        password: str | None = None,
        is_new_account: bool = False,
    ):
        self.package_name = package_name
        self.password = password
        self.is_new_account = is_new_account
        self.token: str | None = None
        self._client = client
        self._disabled = False
        self._authenticating = False

    @property
    def disabled(self) -> bool:
        return self._disabled

    @property
    def requires_token(self) -> bool:
        """A password is configured, so shipping waits for a token."""
        return bool(self.password)

    @property
    def state(self) -> SessionState:
        if self._disabled:
            return SessionState.DISABLED
        if not self.password:
            return SessionState.ANONYMOUS_ACTIVE
        if self.token:
            return SessionState.AUTHENTICATED
        if self._authenticating:
            return SessionState.AUTHENTICATING
        return SessionState.UNAUTHENTICATED

    async def authenticate(self) -> bool:
        """
        Run one auth handshake.

        Does nothing without a password, after the session is disabled, or
        while another handshake is in flight.

        Returns:
            True if a token is held afterwards, False otherwise.
        """
        if self._disabled or not self.password or self._authenticating:
            return self.token is not None

        self._authenticating = True
        try:
            token = await self._client.authenticate(
                self.package_name,
                self.password,
                self.is_new_account,
            )
        except AuthRejected as e:
            logger.warning(f"[RemoteLogger] Auth failed: {e.detail}")
            self.disable(f"auth rejected ({e})")
            return False
        except AuthTransportFault as e:
            logger.error(f"[RemoteLogger] Connection error: {e}")
            self.disable(f"auth transport fault ({e})")
            return False
        finally:
            self._authenticating = False

        if self._disabled:
            return False
        self.token = token
        logger.info(f"[RemoteLogger] Authenticated as {self.package_name}")
        return True

    def invalidate_token(self):
        """Forget the current token after the ingest endpoint refused it."""
        if self.token is not None:
            logger.debug("[RemoteLogger] Clearing rejected token")
        self.token = None

    def disable(self, reason: str):
        """Enter the terminal disabled state."""
        if self._disabled:
            return
        self._disabled = True
        self.token = None
        logger.warning(f"[RemoteLogger] Session for {self.package_name} disabled: {reason}")
