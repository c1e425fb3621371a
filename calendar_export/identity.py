"""Access token providers for calendar export."""
import logging
import os
from dataclasses import dataclass
from typing import Optional, Protocol

from processor.models import AuthRequiredError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class UserSession:
    """Signed-in user as returned by the identity provider."""
    display_name: str
    email_address: str
    access_token: str


class AccessTokenProvider(Protocol):
    """Anything that can hand out a bearer token for the calendar API."""

    def obtain_access_token(self) -> str:
        ...


class SessionTokenProvider:
    """
    Token provider backed by the current sign-in session.

    The interactive sign-in itself happens outside this package; the
    caller hands the resulting session to sign_in().
    """

    def __init__(self, session: Optional[UserSession] = None):
        self._session = session

    @property
    def session(self) -> Optional[UserSession]:
        return self._session

    @property
    def is_signed_in(self) -> bool:
        return self._session is not None

    def sign_in(self, session: UserSession) -> None:
        self._session = session
        logger.info(f"Signed in as {session.email_address}")

    def sign_out(self) -> None:
        self._session = None
        logger.info("Signed out")

    def obtain_access_token(self) -> str:
        """
        Return the session's access token.

        Raises:
            AuthRequiredError: If no user is signed in or the token is empty
        """
        if self._session is None:
            raise AuthRequiredError("No user is signed in")

        if not self._session.access_token:
            raise AuthRequiredError("Access token is missing")

        return self._session.access_token


class EnvironmentTokenProvider:
    """Token provider that reads the token from an environment variable."""

    def __init__(self, variable: str = 'CALENDAR_ACCESS_TOKEN'):
        self.variable = variable

    def obtain_access_token(self) -> str:
        token = os.environ.get(self.variable, '')
        if not token:
            raise AuthRequiredError(f"{self.variable} is not set")

        return token
