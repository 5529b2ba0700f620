import json
import logging
from typing import Any, Optional

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import JSONResponse
from pydantic import BaseModel
from sqlalchemy.orm import Session

from ..auth import get_current_user
from ..config import VAPID_PUBLIC_KEY
from ..database import get_db
from ..models import Profile, PushSubscription
from ..services import push_service
from ..shared.notification_types import parse_notification_types
from ..shared.validators import filter_notification_types

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/push", tags=["Push"])


class SubscribeRequest(BaseModel):
    subscription: dict[str, Any]
    notificationTypes: list[str] = []


class PushSendRequest(BaseModel):
    userId: Optional[str] = None
    notificationType: Optional[str] = None
    title: str = "ICF Log"
    body: str = ""
    url: str = "/dashboard"


@router.get("/vapid-public-key")
async def get_vapid_public_key():
    if not VAPID_PUBLIC_KEY:
        raise HTTPException(status_code=500, detail="Push notifications are not configured")
    return {"publicKey": VAPID_PUBLIC_KEY}


@router.post("/subscribe")
async def subscribe(
    data: SubscribeRequest,
    current_user: Profile = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Replace the caller's push subscriptions with this browser's"""
    if not data.subscription.get("endpoint"):
        raise HTTPException(status_code=400, detail="Invalid push subscription")

    db.query(PushSubscription).filter(PushSubscription.user_id == current_user.user_id).delete()
    subscription = PushSubscription(
        user_id=current_user.user_id,
        subscription=json.dumps(data.subscription),
        notification_types=filter_notification_types(data.notificationTypes),
    )
    db.add(subscription)
    db.commit()
    logger.info(f"🔔 Push subscription saved for user {current_user.user_id}")
    return {"success": True}


@router.delete("/subscribe")
async def unsubscribe(
    current_user: Profile = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    deleted = (
        db.query(PushSubscription).filter(PushSubscription.user_id == current_user.user_id).delete()
    )
    db.commit()
    logger.info(f"🔕 Removed {deleted} push subscription(s) for user {current_user.user_id}")
    return {"success": True}


@router.post("/send")
async def send_push_notification(
    data: PushSendRequest,
    current_user: Profile = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    if not push_service.vapid_configured():
        raise HTTPException(status_code=500, detail="VAPID keys not configured")
    if not data.notificationType:
        raise HTTPException(status_code=400, detail="notificationType is required")
    if data.userId and data.userId != current_user.user_id:
        raise HTTPException(status_code=403, detail="User mismatch. Please refresh and try again.")

    subscriptions = (
        db.query(PushSubscription).filter(PushSubscription.user_id == current_user.user_id).all()
    )
    if not subscriptions:
        raise HTTPException(status_code=404, detail="No push subscriptions found")

    targets = push_service.subscriptions_for_type(subscriptions, data.notificationType)
    if not targets:
        available = sorted(
            {name for s in subscriptions for name in parse_notification_types(s.notification_types)}
        )
        return JSONResponse(
            status_code=404,
            content={
                "detail": f"No subscriptions enabled for '{data.notificationType}'",
                "availableTypes": available,
            },
        )

    result = await push_service.send_to_subscriptions(
        db, targets, {"title": data.title, "body": data.body, "url": data.url}
    )
    return {"success": True, **result}
