import logging
import re
from datetime import datetime
from typing import Any, Optional
from urllib.parse import urlencode

import httpx

from ..config import CALENDLY_CLIENT_ID, CALENDLY_CLIENT_SECRET, CALENDLY_REDIRECT_URI
from ..utils.date_utils import parse_iso_datetime

logger = logging.getLogger(__name__)

UPCOMING_EVENTS_LIMIT = 20
ONE_TO_ONE_MARKERS = ("one-to-one", "one-on-one", "1-on-1", "1-to-1")
CALENDLY_USERNAME_PATTERN = re.compile(r"https?://calendly\.com/([^/]+)")


class CalendlyService:
    """Service for interacting with Calendly API"""

    BASE_URL = "https://api.calendly.com"
    AUTH_URL = "https://auth.calendly.com/oauth/authorize"
    TOKEN_URL = "https://auth.calendly.com/oauth/token"  # noqa: S105 - OAuth endpoint URL

    def __init__(self):
        self.client_id = CALENDLY_CLIENT_ID
        self.client_secret = CALENDLY_CLIENT_SECRET
        self.redirect_uri = CALENDLY_REDIRECT_URI

    def oauth_configured(self) -> bool:
        return bool(self.client_id and self.client_secret)

    def get_authorization_url(self, state: str) -> str:
        params = {
            "client_id": self.client_id,
            "response_type": "code",
            "redirect_uri": self.redirect_uri,
            "state": state,
        }
        return f"{self.AUTH_URL}?{urlencode(params)}"

    async def exchange_code_for_token(self, code: str) -> dict[str, Any]:
        async with httpx.AsyncClient(timeout=30) as client:
            response = await client.post(
                self.TOKEN_URL,
                data={
                    "grant_type": "authorization_code",
                    "code": code,
                    "client_id": self.client_id,
                    "client_secret": self.client_secret,
                    "redirect_uri": self.redirect_uri,
                },
            )
            if response.status_code != 200:
                logger.error(
                    f"❌ Calendly token exchange failed: {response.status_code} {response.text}"
                )
            response.raise_for_status()
            return response.json()

    async def refresh_access_token(self, refresh_token: str) -> dict[str, Any]:
        async with httpx.AsyncClient(timeout=30) as client:
            response = await client.post(
                self.TOKEN_URL,
                data={
                    "grant_type": "refresh_token",
                    "refresh_token": refresh_token,
                    "client_id": self.client_id,
                    "client_secret": self.client_secret,
                },
            )
            response.raise_for_status()
            return response.json()

    async def _get(self, access_token: str, url: str, params: Optional[dict] = None) -> dict:
        async with httpx.AsyncClient(timeout=30) as client:
            response = await client.get(
                url, headers={"Authorization": f"Bearer {access_token}"}, params=params
            )
            response.raise_for_status()
            return response.json()

    async def get_user_info(self, access_token: str) -> dict[str, Any]:
        return await self._get(access_token, f"{self.BASE_URL}/users/me")

    async def get_scheduled_events(
        self, access_token: str, user_uri: str, min_start_time: Optional[datetime] = None
    ) -> dict[str, Any]:
        params = {"user": user_uri, "status": "active", "sort": "start_time:asc"}
        if min_start_time:
            params["min_start_time"] = min_start_time.strftime("%Y-%m-%dT%H:%M:%S.000000Z")
        return await self._get(access_token, f"{self.BASE_URL}/scheduled_events", params)

    async def get_event_type(self, access_token: str, event_type_uri: str) -> dict[str, Any]:
        return await self._get(access_token, event_type_uri)

    async def get_event_invitees(self, access_token: str, event_uuid: str) -> dict[str, Any]:
        return await self._get(
            access_token, f"{self.BASE_URL}/scheduled_events/{event_uuid}/invitees"
        )

    async def list_upcoming_events(self, access_token: str) -> list[dict]:
        """
        Upcoming bookings shaped like coaching sessions, for the calendar view.

        Events whose invitees all cancelled are skipped.
        """
        user = (await self.get_user_info(access_token))["resource"]
        events = await self.get_scheduled_events(
            access_token, user["uri"], min_start_time=datetime.utcnow()
        )

        results = []
        for event in events.get("collection", [])[:UPCOMING_EVENTS_LIMIT]:
            event_uuid = event["uri"].rstrip("/").split("/")[-1]

            event_type = None
            if event.get("event_type"):
                try:
                    event_type = (await self.get_event_type(access_token, event["event_type"]))["resource"]
                except httpx.HTTPError as e:
                    logger.warning(f"⚠️ Could not load event type for {event_uuid}: {e}")

            invitees = (await self.get_event_invitees(access_token, event_uuid)).get("collection", [])
            if invitees and all(i.get("status") == "canceled" for i in invitees):
                continue

            memberships = event.get("event_memberships") or []
            host_email = memberships[0].get("user_email") if memberships else None
            results.append(build_calendar_event(event, event_type, pick_invitee(invitees, host_email)))

        logger.info(f"📅 Loaded {len(results)} upcoming Calendly events")
        return results


def infer_session_type(event_type_name: Optional[str]) -> str:
    name = (event_type_name or "").lower()
    if "team" in name or "group" in name:
        return "team"
    if "mentor" in name:
        return "mentor"
    return "individual"


def is_one_to_one_uri(uri: Optional[str]) -> bool:
    uri = (uri or "").lower()
    return any(marker in uri for marker in ONE_TO_ONE_MARKERS)


def name_from_email(email: Optional[str]) -> str:
    """"jane.doe+coaching@x.com" -> "jane.doe" """
    if not email:
        return ""
    return email.split("@")[0].split("+")[0]


def pick_invitee(invitees: list[dict], host_email: Optional[str]) -> Optional[dict]:
    """The active invitee who is not the host, else the first one"""
    active = [i for i in invitees if i.get("status") != "canceled"] or invitees
    for invitee in active:
        if not host_email or (invitee.get("email") or "").lower() != host_email.lower():
            return invitee
    return active[0] if active else None


def extract_calendly_username(uri: Optional[str]) -> Optional[str]:
    match = CALENDLY_USERNAME_PATTERN.search(uri or "")
    return match.group(1) if match else None


def event_duration_minutes(start: Optional[datetime], end: Optional[datetime]) -> int:
    if not start or not end:
        return 0
    return round((end - start).total_seconds() / 60)


def build_calendar_event(event: dict, event_type: Optional[dict], invitee: Optional[dict]) -> dict:
    event_uuid = event["uri"].rstrip("/").split("/")[-1]
    type_name = (event_type or {}).get("name") or event.get("name") or "Meeting"
    start = parse_iso_datetime(event.get("start_time"))
    end = parse_iso_datetime(event.get("end_time"))

    # Event type duration is in minutes
    if event_type and event_type.get("duration"):
        duration = int(event_type["duration"])
    else:
        duration = event_duration_minutes(start, end)

    session_type = infer_session_type(type_name)
    number_in_group = None
    if is_one_to_one_uri(event.get("uri")) or is_one_to_one_uri((event_type or {}).get("uri")):
        session_type = "individual"
        number_in_group = 1

    email = (invitee or {}).get("email")
    client_name = (invitee or {}).get("name") or name_from_email(email)

    result = {
        "id": f"calendly-{event_uuid}",
        "client_name": client_name or f"Calendly Booking - {type_name}",
        "email": email,
        "date": start.isoformat() if start else None,
        "finish_date": end.isoformat() if end else None,
        "duration": duration,
        "notes": f"Scheduled via Calendly - {type_name}",
        "calendly_booking_id": event_uuid,
        "calendly_event_uri": event["uri"],
        "calendly_event_type_name": type_name,
        "session_type": session_type,
        "is_calendly_only": True,
    }
    if number_in_group is not None:
        result["number_in_group"] = number_in_group
    return result


calendly_service = CalendlyService()
