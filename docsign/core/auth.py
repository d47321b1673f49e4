"""Authentication context passed explicitly to network clients."""

from typing import Any, Callable, Optional

from docsign.config import settings
from docsign.utils.logger import logger

LogoutListener = Callable[[str], None]


class AuthContext:
    """Holds the bearer token issued by the authentication service.

    The token is never read from shared storage; whoever constructs the
    context decides where it comes from. Clearing the context logs the user
    out and notifies listeners with the route of the login entry point.
    """

    def __init__(
        self,
        token: str | None = None,
        user_info: dict[str, Any] | None = None,
        login_route: str | None = None,
    ):
        self.token = token or None
        self.user_info = user_info or {}
        self.login_route = login_route or settings.login_route
        self.logged_out = False
        self._listeners: list[LogoutListener] = []

    @property
    def is_authenticated(self) -> bool:
        return bool(self.token)

    def authorization_header(self) -> dict[str, str]:
        """Return the Authorization header for the current token."""
        if not self.token:
            return {}
        return {"Authorization": f"Bearer {self.token}"}

    def add_logout_listener(self, listener: LogoutListener) -> None:
        self._listeners.append(listener)

    def remove_logout_listener(self, listener: LogoutListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def clear(self) -> None:
        """Drop credentials and route the user to the login entry point."""
        self.token = None
        self.user_info = {}
        self.logged_out = True
        logger.info(f"Session cleared, redirecting to {self.login_route}")
        for listener in list(self._listeners):
            listener(self.login_route)

    @classmethod
    def from_authorization_header(cls, header: Optional[str]) -> "AuthContext":
        """Build a context from an incoming ``Authorization: Bearer`` header."""
        if not header:
            return cls()
        scheme, _, value = header.partition(" ")
        if scheme.lower() != "bearer":
            return cls()
        return cls(token=value.strip())
