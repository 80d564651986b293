import hmac
from typing import Optional

from cryptography.fernet import Fernet, InvalidToken

from core.config import get_settings


class SessionSigner:
    """Issues and checks the opaque admin session token kept in a cookie."""

    def __init__(self, key: Optional[str] = None) -> None:
        self._fernet = Fernet(key or get_settings().secrets_key)

    def issue(self, username: str) -> str:
        return self._fernet.encrypt(username.encode()).decode()

    def verify(self, token: str | None, max_age: int | None = None) -> Optional[str]:
        """Return the username inside ``token`` or ``None`` if it is tampered or expired."""
        if not token:
            return None
        try:
            return self._fernet.decrypt(token.encode(), ttl=max_age).decode()
        except InvalidToken:
            return None


def credentials_match(username: str, password: str, expected_username: str, expected_password: str) -> bool:
    user_ok = hmac.compare_digest(username.encode(), expected_username.encode())
    password_ok = hmac.compare_digest(password.encode(), expected_password.encode())
    return user_ok and password_ok


def get_session_signer() -> SessionSigner:
    return SessionSigner()
