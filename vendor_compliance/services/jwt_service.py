from typing import Optional
from jose import JWTError, jwt
from fastapi import HTTPException, Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from vendor_compliance.config import settings


class JWTService:
    """Verifies bearer tokens issued by the portal's auth service."""

    def __init__(self):
        self.secret_key = settings.jwt_secret_key
        self.algorithm = settings.jwt_algorithm
        self.security = HTTPBearer()

    def verify_token(self, token: str) -> Optional[dict]:
        """Verify and decode a JWT token."""
        if not self.secret_key:
            return None
        try:
            payload = jwt.decode(token, self.secret_key, algorithms=[self.algorithm])
            return payload
        except JWTError:
            return None

    async def get_current_user(self, credentials: HTTPAuthorizationCredentials = Depends(HTTPBearer())):
        """Get current user claims from JWT token."""
        token = credentials.credentials
        payload = self.verify_token(token)

        if payload is None:
            raise HTTPException(
                status_code=401,
                detail="Could not validate credentials",
                headers={"WWW-Authenticate": "Bearer"},
            )

        return payload

    def require_roles(self, *roles: str):
        """Dependency that lets through only tokens carrying one of the given roles."""
        async def check_role(current_user: dict = Depends(self.get_current_user)) -> dict:
            if current_user.get("role") not in roles:
                raise HTTPException(status_code=403, detail="Not authorized to access this resource")
            return current_user

        return check_role


jwt_service = JWTService()
