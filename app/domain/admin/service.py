"""Admin service - user management, dashboard statistics and subscription overrides"""

import logging
from collections import Counter
from datetime import datetime, timedelta

from fastapi import HTTPException
from sqlalchemy import func
from sqlalchemy.orm import Session

from ...cache import ADMIN_STATS_KEY, SUBSCRIPTION_STATS_KEY, cache, invalidate_admin_stats
from ...models import CoachingSession, CPDEntry, Profile
from .repository import AdminRepository

logger = logging.getLogger(__name__)

STATS_CACHE_TTL = 300
ICF_LEVEL_KEYS = ("MCC", "PCC", "ACC")
WEEKDAYS = ["Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday"]


def month_start(moment: datetime) -> datetime:
    return moment.replace(day=1, hour=0, minute=0, second=0, microsecond=0)


def previous_month_start(moment: datetime) -> datetime:
    return month_start(month_start(moment) - timedelta(days=1))


def growth_rate(current: int, previous: int) -> float:
    if not previous:
        return 0
    return round((current - previous) / previous * 100, 1)


def most_active_weekday(dates: list[datetime]) -> str:
    if not dates:
        return "No data"
    counts = Counter(d.weekday() for d in dates if d)
    return WEEKDAYS[counts.most_common(1)[0][0]]


def subscription_counts(profiles: list[Profile]) -> dict:
    stats = {"total": len(profiles), "active": 0, "free": 0, "starter": 0, "pro": 0, "canceled": 0, "trialing": 0}
    for profile in profiles:
        plan = (profile.subscription_plan or "free").lower()
        status = (profile.subscription_status or "").lower()
        if status == "active":
            stats["active"] += 1
        if status == "canceled":
            stats["canceled"] += 1
        if status == "trialing":
            stats["trialing"] += 1
        if plan == "free":
            stats["free"] += 1
        elif "starter" in plan:
            stats["starter"] += 1
        elif "pro" in plan:
            stats["pro"] += 1
    return stats


class AdminService:
    def __init__(self, db: Session):
        self.db = db
        self.repo = AdminRepository()

    def _get_profile(self, user_id: str) -> Profile:
        profile = self.repo.get_profile(self.db, user_id)
        if not profile:
            raise HTTPException(status_code=404, detail="User not found")
        return profile

    # ===================================
    # USERS
    # ===================================

    def list_users(self, search: str = None) -> list[dict]:
        profiles = self.repo.get_profiles(self.db, search)
        session_totals = self.repo.session_totals_by_user(self.db)
        cpd_counts = self.repo.cpd_counts_by_user(self.db)

        users = []
        for profile in profiles:
            count, minutes = session_totals.get(profile.user_id, (0, 0))
            users.append(
                {
                    "id": profile.id,
                    "user_id": profile.user_id,
                    "email": profile.email,
                    "name": profile.name,
                    "role": profile.role,
                    "icf_level": profile.icf_level,
                    "country": profile.country,
                    "subscription_status": profile.subscription_status,
                    "subscription_plan": profile.subscription_plan,
                    "created_at": profile.created_at,
                    "total_sessions": count,
                    "total_cpd_entries": cpd_counts.get(profile.user_id, 0),
                    "total_coaching_hours": round(minutes / 60, 1),
                }
            )
        return users

    def get_user_activity(self, user_id: str) -> dict:
        profile = self._get_profile(user_id)
        sessions = self.repo.recent_sessions(self.db, profile.user_id)
        cpd_entries = self.repo.recent_cpd(self.db, profile.user_id)
        return {
            "user_id": profile.user_id,
            "sessions": [
                {
                    "id": s.id,
                    "client_name": s.client_name,
                    "date": s.date,
                    "duration": s.duration,
                    "types": s.types or [],
                    "payment_type": s.payment_type,
                }
                for s in sessions
            ],
            "cpd_entries": [
                {
                    "id": e.id,
                    "title": e.title,
                    "activity_date": e.activity_date,
                    "hours": e.hours,
                    "cpd_type": e.cpd_type,
                }
                for e in cpd_entries
            ],
        }

    def update_role(self, user_id: str, role: str, admin: Profile) -> Profile:
        profile = self._get_profile(user_id)
        profile.role = role
        self.db.commit()
        self.db.refresh(profile)
        logger.info(f"👑 {admin.user_id} set role of {user_id} to {role}")
        return profile

    # ===================================
    # DASHBOARD STATS
    # ===================================

    def get_stats(self) -> dict:
        cached = cache.get(ADMIN_STATS_KEY)
        if cached:
            return cached

        stats = self._compute_stats(datetime.utcnow())
        cache.set(ADMIN_STATS_KEY, stats, ttl=STATS_CACHE_TTL)
        return stats

    def _compute_stats(self, now: datetime) -> dict:
        db = self.db
        this_month = month_start(now)
        last_month = previous_month_start(now)

        total_users = db.query(func.count(Profile.id)).scalar() or 0
        total_sessions = db.query(func.count(CoachingSession.id)).scalar() or 0
        total_cpd = db.query(func.count(CPDEntry.id)).scalar() or 0
        total_minutes = db.query(func.coalesce(func.sum(CoachingSession.duration), 0)).scalar() or 0
        avg_duration = db.query(func.avg(CoachingSession.duration)).scalar()
        total_cpd_hours = db.query(func.coalesce(func.sum(CPDEntry.hours), 0)).scalar() or 0

        new_this_month = self.repo.count_profiles_created_between(db, this_month)
        new_last_month = self.repo.count_profiles_created_between(db, last_month, this_month)

        levels = dict(db.query(Profile.icf_level, func.count(Profile.id)).group_by(Profile.icf_level).all())
        distribution = {level: levels.get(level, 0) for level in ICF_LEVEL_KEYS}
        distribution["none"] = total_users - sum(distribution.values())

        country_counts = Counter()
        for country, count in db.query(Profile.country, func.count(Profile.id)).group_by(Profile.country).all():
            country_counts[(country or "").strip() or "Unknown"] += count

        session_dates = [row[0] for row in db.query(CoachingSession.date).all()]

        return {
            "total_users": total_users,
            "active_users_30d": self.repo.count_active_users(db, now - timedelta(days=30)),
            "active_users_7d": self.repo.count_active_users(db, now - timedelta(days=7)),
            "users_with_sessions_this_month": self.repo.count_active_users(db, this_month),
            "total_sessions": total_sessions,
            "total_cpd_entries": total_cpd,
            "avg_sessions_per_user": round(total_sessions / total_users, 2) if total_users else 0,
            "new_users_this_month": new_this_month,
            "growth_rate": growth_rate(new_this_month, new_last_month),
            "avg_session_duration": round(avg_duration) if avg_duration else 0,
            "icf_level_distribution": distribution,
            "top_countries": [
                {"country": country, "count": count} for country, count in country_counts.most_common(5)
            ],
            "total_coaching_hours": round(total_minutes / 60),
            "avg_cpd_hours_per_user": round(total_cpd_hours / total_users, 2) if total_users else 0,
            "most_active_day": most_active_weekday(session_dates),
        }

    # ===================================
    # SUBSCRIPTIONS
    # ===================================

    def list_subscriptions(self, search: str = None) -> list[Profile]:
        return self.repo.get_profiles(self.db, search)

    def get_subscription_stats(self) -> dict:
        cached = cache.get(SUBSCRIPTION_STATS_KEY)
        if cached:
            return cached

        stats = subscription_counts(self.repo.get_profiles(self.db))
        cache.set(SUBSCRIPTION_STATS_KEY, stats, ttl=STATS_CACHE_TTL)
        return stats

    def update_subscription(self, user_id: str, plan: str, admin: Profile) -> Profile:
        profile = self._get_profile(user_id)
        profile.subscription_plan = plan
        profile.subscription_status = "inactive" if plan == "free" else "active"
        self.db.commit()
        self.db.refresh(profile)
        invalidate_admin_stats()
        logger.info(f"💳 {admin.user_id} set plan of {user_id} to {plan}")
        return profile
