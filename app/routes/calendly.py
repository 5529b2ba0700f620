import logging
from typing import Optional
from urllib.parse import urlencode

import httpx
from fastapi import APIRouter, Depends, Query
from fastapi.responses import RedirectResponse
from pydantic import BaseModel
from sqlalchemy.orm import Session

from ..auth import get_current_user
from ..config import APP_URL, CALENDLY_API_TOKEN
from ..database import get_db
from ..models import Profile
from ..security_utils import decrypt_token, encrypt_token, generate_oauth_state, verify_oauth_state
from ..services.calendly_service import calendly_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/calendly", tags=["Calendly"])
oauth_router = APIRouter(prefix="/auth/calendly", tags=["Calendly"])

CALENDAR_PAGE = f"{APP_URL}/dashboard/calendar"


class CalendlyOAuthResponse(BaseModel):
    authorization_url: str
    state: str


def calendar_redirect(**params) -> RedirectResponse:
    return RedirectResponse(url=f"{CALENDAR_PAGE}?{urlencode(params)}", status_code=302)


def store_tokens(db: Session, profile: Profile, token_data: dict) -> None:
    profile.calendly_access_token = encrypt_token(token_data.get("access_token"))
    refresh_token = token_data.get("refresh_token")
    if refresh_token:
        profile.calendly_refresh_token = encrypt_token(refresh_token)
    db.commit()


@router.get("/connect", response_model=CalendlyOAuthResponse)
async def initiate_calendly_connection(current_user: Profile = Depends(get_current_user)):
    """Start the Calendly OAuth flow; the signed state carries the user id"""
    state = generate_oauth_state(current_user.user_id)
    return CalendlyOAuthResponse(
        authorization_url=calendly_service.get_authorization_url(state), state=state
    )


@oauth_router.get("/callback")
async def calendly_oauth_callback(
    code: Optional[str] = Query(None),
    state: Optional[str] = Query(None),
    error: Optional[str] = Query(None),
    db: Session = Depends(get_db),
):
    if error:
        logger.warning(f"⚠️ Calendly authorization denied: {error}")
        return calendar_redirect(error="calendly_auth_failed")

    user_id = verify_oauth_state(state) if state else None
    if not user_id:
        return RedirectResponse(url=f"{APP_URL}/login", status_code=302)

    if not code:
        return calendar_redirect(error="no_code")
    if not calendly_service.oauth_configured():
        logger.error("❌ CALENDLY_CLIENT_ID / CALENDLY_CLIENT_SECRET not configured")
        return calendar_redirect(error="oauth_not_configured")

    try:
        token_data = await calendly_service.exchange_code_for_token(code)
    except httpx.HTTPError as e:
        logger.error(f"❌ Calendly token exchange failed for user {user_id}: {e}")
        return calendar_redirect(error="token_exchange_failed")

    try:
        profile = db.query(Profile).filter(Profile.user_id == user_id).first()
        if not profile:
            return RedirectResponse(url=f"{APP_URL}/login", status_code=302)
        store_tokens(db, profile, token_data)
    except Exception as e:
        logger.error(f"❌ Calendly callback failed for user {user_id}: {e}")
        db.rollback()
        return calendar_redirect(error="callback_error")

    logger.info(f"✅ Calendly connected for user {user_id}")
    return calendar_redirect(calendly_connected="true")


async def _refresh_profile_token(db: Session, profile: Profile) -> Optional[str]:
    refresh_token = decrypt_token(profile.calendly_refresh_token)
    if not refresh_token or not calendly_service.oauth_configured():
        return None
    try:
        token_data = await calendly_service.refresh_access_token(refresh_token)
    except httpx.HTTPError as e:
        logger.warning(f"⚠️ Calendly token refresh failed for user {profile.user_id}: {e}")
        return None
    store_tokens(db, profile, token_data)
    logger.info(f"🔄 Refreshed Calendly token for user {profile.user_id}")
    return token_data.get("access_token")


@router.get("/events")
async def get_calendly_events(
    current_user: Profile = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Upcoming Calendly bookings shaped like sessions for the calendar view"""
    oauth_token = decrypt_token(current_user.calendly_access_token)
    token = oauth_token or CALENDLY_API_TOKEN
    if not token:
        return {"error": "Calendly is not connected", "events": []}

    try:
        try:
            events = await calendly_service.list_upcoming_events(token)
        except httpx.HTTPStatusError as e:
            if e.response.status_code != 401 or not oauth_token:
                raise
            token = await _refresh_profile_token(db, current_user)
            if not token:
                raise
            events = await calendly_service.list_upcoming_events(token)
    except httpx.HTTPError as e:
        logger.error(f"❌ Failed to load Calendly events for user {current_user.user_id}: {e}")
        return {"error": "Failed to fetch Calendly events", "events": []}

    return {"events": events}


@router.delete("/connection")
async def disconnect_calendly(
    current_user: Profile = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    current_user.calendly_access_token = None
    current_user.calendly_refresh_token = None
    db.commit()
    logger.info(f"🔌 Calendly disconnected for user {current_user.user_id}")
    return {"success": True}
