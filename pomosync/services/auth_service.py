# -*- coding: utf-8 -*-

import logging
from typing import Callable, List, Optional
from urllib.parse import parse_qs, urlparse

from pomosync.domain.models import User
from pomosync.errors import AuthError, CloudError, ValidationError
from pomosync.storage.cloud import CloudUserRepo

logger = logging.getLogger(__name__)

MIN_PASSWORD_LEN = 6


def _to_user(raw) -> Optional[User]:
    if raw is None:
        return None
    return User(id=str(raw.id), email=getattr(raw, "email", "") or "")


class AuthService:
    """
    Email/password + GitHub sign-in through supabase.auth.
    Session storage and token refresh stay inside the SDK.
    """

    def __init__(self, client, redirect_url: Optional[str] = None):
        self.client = client
        self.redirect_url = redirect_url
        self.users = CloudUserRepo(client)
        self.session = None
        self.user: Optional[User] = None
        self._listeners: List[Callable[[Optional[User]], None]] = []

    def add_listener(self, fn: Callable[[Optional[User]], None]) -> None:
        self._listeners.append(fn)

    def _set_session(self, session, raw_user) -> None:
        self.session = session
        self.user = _to_user(raw_user)
        # the public.users row must exist before anyone writes owned rows
        self._ensure_user_row()
        for fn in self._listeners:
            fn(self.user)

    @property
    def current_user(self) -> Optional[User]:
        return self.user

    def is_authenticated(self) -> bool:
        return self.session is not None and self.user is not None

    def sign_up(self, email: str, password: str, confirm_password: str) -> bool:
        """
        Returns True when the project issued a session right away, False
        when the user still has to confirm their email.
        """
        email = (email or "").strip()
        if not email or not password:
            raise ValidationError("Please enter email and password.")
        if password != confirm_password:
            raise ValidationError("Passwords do not match")
        if len(password) < MIN_PASSWORD_LEN:
            raise ValidationError(
                f"Password must be at least {MIN_PASSWORD_LEN} characters"
            )

        try:
            res = self.client.auth.sign_up({"email": email, "password": password})
        except Exception as e:
            raise AuthError(f"Sign-up error: {e}", details=e) from e

        if getattr(res, "session", None):
            self._set_session(res.session, res.user)
            return True
        logger.info("Sign-up for %s awaits email confirmation", email)
        return False

    def sign_in(self, email: str, password: str) -> User:
        email = (email or "").strip()
        if not email or not password:
            raise ValidationError("Please enter email and password.")
        try:
            res = self.client.auth.sign_in_with_password(
                {"email": email, "password": password}
            )
        except Exception as e:
            raise AuthError(str(e), details=e) from e
        if not getattr(res, "session", None):
            raise AuthError("Authentication failed - no session found")

        self._set_session(res.session, res.user)
        return self.user

    def sign_in_with_github(self) -> str:
        """Start the OAuth flow; returns the URL to open in a browser."""
        credentials = {"provider": "github"}
        if self.redirect_url:
            credentials["options"] = {"redirect_to": self.redirect_url}
        try:
            res = self.client.auth.sign_in_with_oauth(credentials)
        except Exception as e:
            raise AuthError(str(e), details=e) from e
        return res.url

    def complete_sign_in(self, callback_url: str) -> User:
        """
        Finish the OAuth (PKCE) flow from the URL the browser was sent back
        to: its ``code`` is exchanged for a session.
        """
        query = parse_qs(urlparse((callback_url or "").strip()).query)
        if "error" in query:
            message = (query.get("error_description") or query["error"])[0]
            logger.error("Auth callback error: %s", message)
            raise AuthError(message)
        code = (query.get("code") or [None])[0]
        if not code:
            raise AuthError("No authorization code in the callback URL.")

        try:
            res = self.client.auth.exchange_code_for_session({"auth_code": code})
        except Exception as e:
            logger.error("Auth callback error: %s", e)
            raise AuthError(str(e), details=e) from e

        if not getattr(res, "session", None):
            logger.info("No session found, authentication failed")
            raise AuthError("Authentication failed - no session found")

        self._set_session(res.session, res.user)
        return self.user

    def sign_out(self) -> None:
        try:
            self.client.auth.sign_out()
        finally:
            self._set_session(None, None)

    def _ensure_user_row(self) -> None:
        if not self.user:
            return
        try:
            self.users.upsert(self.user.id, self.user.email)
        except CloudError:
            # creating tasks will report USER_NOT_FOUND if this really matters
            logger.warning("Could not upsert public.users row for %s", self.user.id)
