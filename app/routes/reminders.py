import logging
from datetime import datetime

from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy.orm import Session

from ..auth import has_cron_secret
from ..config import REMINDER_CRON_SECRET
from ..database import get_db
from ..services.reminder_service import check_and_send_reminders

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/reminders", tags=["Reminders"])


@router.post("/check-and-send")
async def check_and_send(request: Request, db: Session = Depends(get_db)):
    """Run the automated reminder pass; protected by REMINDER_CRON_SECRET when it is set"""
    if REMINDER_CRON_SECRET and not has_cron_secret(request, REMINDER_CRON_SECRET):
        raise HTTPException(status_code=401, detail="Unauthorized")

    results = await check_and_send_reminders(db)
    return {"success": True, "results": results, "timestamp": datetime.utcnow().isoformat()}
