from datetime import datetime, timedelta, timezone
from typing import Optional
from jose import JWTError, jwt
from fastapi import HTTPException, Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from synergy_crm.config import settings

# Missing credentials are answered with our own 401 rather than FastAPI's default
bearer_scheme = HTTPBearer(auto_error=False)


class JWTService:
    """Service for handling JWT tokens."""

    def __init__(self):
        self.secret_key = settings.jwt_secret_key
        self.algorithm = settings.jwt_algorithm
        self.access_token_expire_minutes = settings.access_token_expire_minutes

    def create_access_token(self, data: dict, expires_delta: Optional[timedelta] = None):
        """Create a new JWT access token."""
        to_encode = data.copy()
        if expires_delta:
            expire = datetime.now(timezone.utc) + expires_delta
        else:
            expire = datetime.now(timezone.utc) + timedelta(minutes=self.access_token_expire_minutes)

        to_encode.update({"exp": expire})
        encoded_jwt = jwt.encode(to_encode, self.secret_key, algorithm=self.algorithm)
        return encoded_jwt

    def create_user_token(self, user) -> str:
        return self.create_access_token({
            "sub": user.id,
            "email": user.email,
            "permission": user.permission
        })

    def verify_token(self, token: str):
        """Verify and decode a JWT token."""
        try:
            payload = jwt.decode(token, self.secret_key, algorithms=[self.algorithm])
            return payload
        except JWTError:
            return None

    async def get_current_user(self, credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme)):
        """Get current user from JWT token."""
        if credentials is None:
            raise HTTPException(
                status_code=401,
                detail="Unauthorized",
                headers={"WWW-Authenticate": "Bearer"},
            )

        payload = self.verify_token(credentials.credentials)

        if payload is None:
            raise HTTPException(
                status_code=401,
                detail="Could not validate credentials",
                headers={"WWW-Authenticate": "Bearer"},
            )

        return payload

    async def get_optional_user(self, credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme)):
        """Token payload when a valid bearer token is present, otherwise None."""
        if credentials is None:
            return None
        return self.verify_token(credentials.credentials)


jwt_service = JWTService()
