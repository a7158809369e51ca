import logging
from typing import Any, Dict, Optional

from synergy_crm.client.api import ApiClient, ApiError

logger = logging.getLogger(__name__)

# Sign-in role -> profile permissions allowed to use it
ROLE_PERMISSIONS = {
    "admin": {"admin", "super_admin"},
    "executive": {"read", "write", "full_access"},
}


class SessionError(Exception):
    """Sign-in was refused."""


class SessionStore:
    """Signed-in user and token for one client."""

    def __init__(self, api: ApiClient):
        self.api = api
        self.user: Optional[Dict[str, Any]] = None
        self.user_loading = True
        self.user_error: Optional[str] = None
        self.sign_in_loading = False
        self.initialized = False

    @property
    def user_id(self) -> Optional[str]:
        return self.user.get("id") if self.user else None

    @property
    def permission(self) -> Optional[str]:
        return self.user.get("permission") if self.user else None

    async def sign_in_with_email(self, email: str, password: str, role: str) -> Dict[str, Any]:
        if role not in ROLE_PERMISSIONS:
            raise SessionError(f"Unknown role '{role}'")

        self.sign_in_loading = True
        try:
            result = await self.api.post(
                "/api/auth/login",
                json={"email": email, "password": password},
                fallback_error="Failed to sign in"
            )
            self.api.token = result["access_token"]
            user = result["user"]

            if user.get("permission") not in ROLE_PERMISSIONS[role]:
                await self.sign_out()
                raise SessionError(f"Your account does not have {role} access")

            self.user = user
            self.user_error = None
            self.initialized = True
            self.user_loading = False
            return user
        finally:
            self.sign_in_loading = False

    async def fetch_user(self) -> Optional[Dict[str, Any]]:
        """Load the current identity once per session."""
        if self.initialized:
            return self.user

        self.user_loading = True
        try:
            if self.api.token:
                self.user = await self.api.get("/api/auth/me")
            else:
                self.user = None
            self.user_error = None
        except ApiError as e:
            logger.error(f"Error fetching user: {e.message}")
            self.user = None
            self.user_error = e.message
        finally:
            self.user_loading = False
            self.initialized = True
        return self.user

    async def refresh_user(self) -> Optional[Dict[str, Any]]:
        self.initialized = False
        return await self.fetch_user()

    async def sign_out(self, scope: str = "local"):
        try:
            if self.api.token:
                await self.api.post("/api/auth/logout", json={"scope": scope})
        except ApiError as e:
            logger.warning(f"Sign-out request failed: {e.message}")
        finally:
            self.clear_user()

    def clear_user(self):
        self.api.token = None
        self.user = None
        self.user_error = None
        self.user_loading = False
        self.initialized = False
