import logging
from typing import Optional

from fastapi import Depends, HTTPException, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import ExpiredSignatureError, JWTError
from jose import jwt as jose_jwt
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from .config import SUPABASE_JWT_AUDIENCE, SUPABASE_JWT_SECRET
from .database import get_db
from .models import Profile
from .security_utils import constant_time_compare

logger = logging.getLogger(__name__)

security = HTTPBearer()
optional_security = HTTPBearer(auto_error=False)

ADMIN_ROLES = ("admin", "super_admin")


def verify_supabase_token(token: str) -> dict:
    """
    Verify a Supabase access token.

    Supabase signs access tokens with the project JWT secret (HS256) and
    sets aud="authenticated" for signed-in users.
    """
    if not SUPABASE_JWT_SECRET:
        logger.error("❌ SUPABASE_JWT_SECRET not configured")
        raise HTTPException(status_code=500, detail="Authentication not configured")

    try:
        payload = jose_jwt.decode(
            token,
            SUPABASE_JWT_SECRET,
            algorithms=["HS256"],
            audience=SUPABASE_JWT_AUDIENCE,
        )
    except ExpiredSignatureError as e:
        raise HTTPException(
            status_code=401,
            detail="Token has expired. Please refresh your session.",
            headers={"X-Token-Expired": "true"},
        ) from e
    except JWTError as e:
        logger.warning(f"⚠️ Token verification failed: {e}")
        raise HTTPException(status_code=401, detail="Invalid token") from e

    if not payload.get("sub"):
        logger.error(f"❌ Token missing user ID claim. Available claims: {list(payload.keys())}")
        raise HTTPException(status_code=401, detail="Invalid token claims")

    return payload


def _get_or_create_profile(db: Session, claims: dict) -> Profile:
    user_id = claims["sub"]
    email = claims.get("email")

    profile = db.query(Profile).filter(Profile.user_id == user_id).first()
    if profile:
        return profile

    metadata = claims.get("user_metadata") or {}
    logger.info(f"🆕 Creating profile for new user: {email}")
    profile = Profile(
        user_id=user_id,
        email=email,
        name=metadata.get("full_name") or metadata.get("name"),
        email_notification_types=[],
    )
    db.add(profile)
    try:
        db.commit()
        db.refresh(profile)
    except IntegrityError as e:
        db.rollback()
        # Another request created the profile between the lookup and the insert
        profile = db.query(Profile).filter(Profile.user_id == user_id).first()
        if not profile:
            raise HTTPException(status_code=409, detail="Unable to create user profile") from e
    return profile


async def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(security),
    db: Session = Depends(get_db),
) -> Profile:
    """Get the caller's profile from the Supabase access token"""
    if not credentials:
        raise HTTPException(
            status_code=401,
            detail="Not authenticated. Please provide a valid Bearer token in the Authorization header.",
        )

    token = credentials.credentials
    if len(token.split(".")) != 3:
        logger.warning(f"⚠️ Malformed token received, length: {len(token)}")
        raise HTTPException(
            status_code=401, detail="Invalid token format. Expected a valid JWT token."
        )

    claims = verify_supabase_token(token)
    profile = _get_or_create_profile(db, claims)
    logger.debug(f"✅ User authenticated: {profile.email}")
    return profile


async def get_optional_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(optional_security),
    db: Session = Depends(get_db),
) -> Optional[Profile]:
    """Like get_current_user, but anonymous callers get None instead of a 401"""
    if not credentials or len(credentials.credentials.split(".")) != 3:
        return None
    try:
        claims = verify_supabase_token(credentials.credentials)
    except HTTPException:
        return None
    return _get_or_create_profile(db, claims)


def is_admin(profile: Optional[Profile]) -> bool:
    return bool(profile and profile.role in ADMIN_ROLES)


def is_super_admin(profile: Optional[Profile]) -> bool:
    return bool(profile and profile.role == "super_admin")


async def require_admin(user: Profile = Depends(get_current_user)) -> Profile:
    if not is_admin(user):
        logger.warning(f"⚠️ Non-admin {user.email} attempted to access an admin route")
        raise HTTPException(status_code=403, detail="Admin access required")
    return user


async def require_super_admin(user: Profile = Depends(get_current_user)) -> Profile:
    if not is_super_admin(user):
        logger.warning(f"⚠️ {user.email} attempted a super admin action")
        raise HTTPException(status_code=403, detail="Super admin access required")
    return user


def has_cron_secret(request: Request, secret: Optional[str]) -> bool:
    """True when the Authorization header is exactly "Bearer <secret>"."""
    if not secret:
        return False
    header = request.headers.get("authorization", "")
    return constant_time_compare(header, f"Bearer {secret}")
