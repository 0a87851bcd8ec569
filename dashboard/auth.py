import logging

from fastapi import Depends, HTTPException
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from firebase_admin import auth as firebase_auth

from .config import ADMIN_AUTH_ENABLED, ADMIN_EMAILS
from .database import init_firebase_admin

logger = logging.getLogger(__name__)

security = HTTPBearer(auto_error=False)


def verify_admin_token(token: str) -> dict:
    """
    Verify a Firebase ID token and check that the caller is a dashboard admin.
    Admins carry an `admin` custom claim or have an email listed in ADMIN_EMAILS.
    """
    init_firebase_admin()

    token_parts = token.split(".")
    if len(token_parts) != 3:
        logger.warning(f"⚠️ Malformed token received: {len(token_parts)} parts")
        raise HTTPException(status_code=401, detail="Invalid token format. Expected a valid JWT token.")

    try:
        decoded = firebase_auth.verify_id_token(token)
    except firebase_auth.ExpiredIdTokenError as e:
        raise HTTPException(
            status_code=401,
            detail="Token has expired. Please refresh your session.",
            headers={"X-Token-Expired": "true"},
        ) from e
    except (firebase_auth.InvalidIdTokenError, ValueError) as e:
        logger.error(f"❌ Token verification failed: {str(e)}")
        raise HTTPException(status_code=401, detail="Token verification failed") from e

    email = (decoded.get("email") or "").lower()
    if not decoded.get("admin") and email not in ADMIN_EMAILS:
        logger.warning(f"⚠️ Non-admin {email or decoded.get('uid')} attempted to access the dashboard")
        raise HTTPException(status_code=403, detail="Admin access required")

    logger.debug(f"✅ Admin authenticated: {email}")
    return decoded


async def get_current_admin(
    credentials: HTTPAuthorizationCredentials = Depends(security),
) -> dict:
    """Get the calling admin from the Firebase Bearer token"""
    if not ADMIN_AUTH_ENABLED:
        return {"uid": "dev", "email": "dev@localhost", "admin": True}

    if not credentials:
        raise HTTPException(
            status_code=401,
            detail="Not authenticated. Please provide a valid Bearer token in the Authorization header.",
        )

    return verify_admin_token(credentials.credentials)
