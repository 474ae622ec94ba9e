"""Account lifecycle against Supabase auth: signup, login, password reset, profile."""

import logging
import re
import threading
from dataclasses import dataclass
from typing import Callable, List, Optional

from core.config import AppConfig
from core.errors import BackendError

logger = logging.getLogger(__name__)

MIN_PASSWORD_LENGTH = 6
_EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


@dataclass
class User:
    id: str
    email: str
    name: str = ""


@dataclass
class AuthResult:
    """Outcome of an auth call: a user on success, otherwise an error message."""
    success: bool
    user: Optional[User] = None
    error_message: str = ""

    @classmethod
    def failed(cls, message: str) -> "AuthResult":
        return cls(success=False, error_message=message)


@dataclass
class Profile:
    full_name: str = ""
    phone: str = ""


# --- Validation ---

def validate_email(email: str) -> Optional[str]:
    """Return an error message, or None if the address looks usable."""
    from i18n import t

    if not email or not email.strip():
        return t("auth.email_required")
    if not _EMAIL_RE.match(email.strip()):
        return t("auth.email_invalid")
    return None


def validate_new_password(password: str, confirmation: str) -> Optional[str]:
    """Check length and confirmation match. Returns an error message or None."""
    from i18n import t

    if len(password or "") < MIN_PASSWORD_LENGTH:
        return t("auth.password_too_short", min=MIN_PASSWORD_LENGTH)
    if password != confirmation:
        return t("auth.passwords_dont_match")
    return None


def _error_text(exc: Exception, fallback: str) -> str:
    return str(getattr(exc, "message", "") or exc) or fallback


class AuthService:
    """Wraps the Supabase auth client and caches the signed-in user.

    All methods are safe to call from worker threads. SDK exceptions are
    caught here and returned as AuthResult error messages. Listeners are
    called with the new User (or None) whenever the session changes.
    """

    def __init__(self, client, config: Optional[AppConfig] = None):
        self._client = client
        self._config = config or AppConfig()
        self._user: Optional[User] = None
        self._lock = threading.Lock()
        self._listeners: List[Callable[[Optional[User]], None]] = []

    @property
    def available(self) -> bool:
        """False when no backend is configured (guest-only mode)."""
        return self._client is not None

    def add_listener(self, callback: Callable[[Optional[User]], None]):
        self._listeners.append(callback)

    def _set_user(self, user: Optional[User]):
        with self._lock:
            changed = user != self._user
            self._user = user
        if changed:
            for callback in list(self._listeners):
                callback(user)

    @staticmethod
    def _to_user(sdk_user, fallback_email: str = "", fallback_name: str = "") -> User:
        metadata = getattr(sdk_user, "user_metadata", None) or {}
        return User(
            id=str(sdk_user.id),
            email=getattr(sdk_user, "email", None) or fallback_email,
            name=metadata.get("full_name") or fallback_name,
        )

    # --- Session ---

    def current_user(self) -> Optional[User]:
        with self._lock:
            return self._user

    def current_user_id(self) -> Optional[str]:
        """Identity for the workflow: the cached user's id, or None for guests."""
        user = self.current_user()
        return user.id if user else None

    def restore_session(self) -> Optional[User]:
        """Ask the backend for the user of a persisted session, if any."""
        if not self.available:
            return None
        try:
            response = self._client.auth.get_user()
        except Exception as exc:
            logger.info("No session to restore: %s", exc)
            self._set_user(None)
            return None
        user = self._to_user(response.user) if response and response.user else None
        self._set_user(user)
        return user

    def signup(self, email: str, password: str, name: str) -> AuthResult:
        """Create an account; the backend sends a confirmation email."""
        if not self.available:
            return AuthResult.failed("Accounts are not available offline")
        options = {"data": {"full_name": name}}
        if self._config.signup_redirect_url:
            options["email_redirect_to"] = self._config.signup_redirect_url
        try:
            response = self._client.auth.sign_up(
                {"email": email, "password": password, "options": options}
            )
        except Exception as exc:
            logger.warning("Signup failed for %s: %s", email, exc)
            return AuthResult.failed(_error_text(exc, "Signup failed"))

        if not response.user:
            return AuthResult.failed("Signup failed")
        user = self._to_user(response.user, email, name)
        # Without email confirmation the backend signs the user in directly
        if response.session:
            self._set_user(user)
        logger.info("Signed up %s", email)
        return AuthResult(success=True, user=user)

    def login(self, email: str, password: str) -> AuthResult:
        if not self.available:
            return AuthResult.failed("Accounts are not available offline")
        try:
            response = self._client.auth.sign_in_with_password(
                {"email": email, "password": password}
            )
        except Exception as exc:
            logger.warning("Login failed for %s: %s", email, exc)
            return AuthResult.failed(_error_text(exc, "Login failed"))

        if not response.user:
            return AuthResult.failed("Login failed")
        user = self._to_user(response.user, email)
        self._set_user(user)
        logger.info("Signed in %s", email)
        return AuthResult(success=True, user=user)

    def logout(self) -> AuthResult:
        if self.available:
            try:
                self._client.auth.sign_out()
            except Exception as exc:
                logger.warning("Logout failed: %s", exc)
                return AuthResult.failed(_error_text(exc, "Logout failed"))
        self._set_user(None)
        return AuthResult(success=True)

    # --- Password reset ---

    def request_password_reset(self, email: str) -> AuthResult:
        """Send a recovery email containing a one-time code."""
        if not self.available:
            return AuthResult.failed("Accounts are not available offline")
        options = {}
        if self._config.password_reset_redirect_url:
            options["redirect_to"] = self._config.password_reset_redirect_url
        try:
            self._client.auth.reset_password_for_email(email, options)
        except Exception as exc:
            logger.warning("Password reset request failed for %s: %s", email, exc)
            return AuthResult.failed(_error_text(exc, "Failed to send reset email"))
        return AuthResult(success=True)

    def verify_recovery_code(self, email: str, code: str) -> AuthResult:
        """Exchange the emailed recovery code for a session so the password can be changed."""
        if not self.available:
            return AuthResult.failed("Accounts are not available offline")
        try:
            response = self._client.auth.verify_otp(
                {"email": email, "token": code.strip(), "type": "recovery"}
            )
        except Exception as exc:
            logger.warning("Recovery code rejected for %s: %s", email, exc)
            return AuthResult.failed(_error_text(exc, "Invalid or expired code"))

        if not response.user:
            return AuthResult.failed("Invalid or expired code")
        user = self._to_user(response.user, email)
        self._set_user(user)
        return AuthResult(success=True, user=user)

    def update_password(self, new_password: str) -> AuthResult:
        """Change the signed-in user's password."""
        if not self.current_user():
            return AuthResult.failed("Sign in first")
        try:
            self._client.auth.update_user({"password": new_password})
        except Exception as exc:
            logger.warning("Password update failed: %s", exc)
            return AuthResult.failed(_error_text(exc, "Failed to update password"))
        return AuthResult(success=True, user=self.current_user())

    # --- Profile ---

    def load_profile(self) -> Profile:
        """Read the signed-in user's profile row (empty if none exists).

        Raises:
            BackendError: not signed in, or the query failed.
        """
        user_id = self.current_user_id()
        if not user_id:
            raise BackendError("Sign in first")
        try:
            response = (
                self._client.table("profiles")
                .select("*")
                .eq("user_id", user_id)
                .maybe_single()
                .execute()
            )
        except Exception as exc:
            logger.error("Loading profile failed: %s", exc)
            raise BackendError(_error_text(exc, "Failed to load profile")) from exc

        data = getattr(response, "data", None) if response is not None else None
        if not data:
            return Profile()
        return Profile(full_name=data.get("full_name") or "", phone=data.get("phone") or "")

    def update_profile(self, full_name: str, phone: str) -> AuthResult:
        user = self.current_user()
        if not user:
            return AuthResult.failed("Sign in first")
        try:
            self._client.table("profiles").update({
                "full_name": full_name.strip() or None,
                "phone": phone.strip() or None,
            }).eq("user_id", user.id).execute()
        except Exception as exc:
            logger.error("Updating profile failed: %s", exc)
            return AuthResult.failed(_error_text(exc, "Failed to update profile"))
        return AuthResult(success=True, user=user)
