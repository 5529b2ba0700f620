from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    DateTime,
    Float,
    ForeignKey,
    Integer,
    String,
    Text,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from .database import Base


class Profile(Base):
    __tablename__ = "profiles"

    id = Column(Integer, primary_key=True, index=True)
    # Subject ("sub") of the Supabase access token
    user_id = Column(String(255), unique=True, index=True, nullable=False)
    email = Column(String(255), index=True, nullable=True)
    name = Column(String(255), nullable=True)
    role = Column(String(20), default="user", nullable=False)  # user, admin, super_admin
    icf_level = Column(String(10), nullable=True)  # ACC, PCC, MCC, none
    currency = Column(String(3), default="USD", nullable=False)
    country = Column(String(2), nullable=True)  # ISO country code, drives number formats
    cpd_renewal_date = Column(DateTime, nullable=True)

    # Calendly integration - tokens are Fernet encrypted at rest
    calendly_url = Column(String(500), nullable=True)
    calendly_access_token = Column(Text, nullable=True)
    calendly_refresh_token = Column(Text, nullable=True)

    # Stripe subscription state, written by the Stripe webhook
    stripe_customer_id = Column(String(255), index=True, nullable=True)
    subscription_id = Column(String(255), nullable=True)
    subscription_status = Column(String(50), default="inactive", nullable=True)
    subscription_plan = Column(String(50), default="free", nullable=True)
    subscription_current_period_start = Column(DateTime, nullable=True)
    subscription_current_period_end = Column(DateTime, nullable=True)
    cancel_at_period_end = Column(Boolean, default=False, nullable=False)

    # Notification type names the user opted in to for email delivery
    email_notification_types = Column(JSON, default=list, nullable=True)

    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    clients = relationship("Client", back_populates="profile")
    sessions = relationship("CoachingSession", back_populates="profile")


class Client(Base):
    __tablename__ = "clients"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(String(255), ForeignKey("profiles.user_id"), index=True, nullable=False)
    name = Column(String(255), nullable=False)
    email = Column(String(255), nullable=False)
    phone = Column(String(50), nullable=True)
    notes = Column(Text, nullable=True)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    profile = relationship("Profile", back_populates="clients")
    sessions = relationship("CoachingSession", back_populates="client")


class CoachingSession(Base):
    __tablename__ = "sessions"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(String(255), ForeignKey("profiles.user_id"), index=True, nullable=False)
    client_id = Column(Integer, ForeignKey("clients.id", ondelete="SET NULL"), nullable=True)
    client_name = Column(String(255), nullable=False)
    date = Column(DateTime, nullable=False)
    finish_date = Column(DateTime, nullable=True)
    duration = Column(Integer, nullable=False, default=0)  # minutes
    types = Column(JSON, default=list)  # one-on-one, group, team, mentor
    number_in_group = Column(Integer, nullable=True)
    payment_type = Column(String(20), nullable=True)  # paid, proBono, pro-bono, scheduled
    payment_amount = Column(Float, nullable=True)
    focus_area = Column(String(500), nullable=True)
    key_outcomes = Column(Text, nullable=True)
    client_progress = Column(Text, nullable=True)
    coaching_tools = Column(JSON, default=list)
    icf_competencies = Column(JSON, default=list)
    notes = Column(Text, nullable=True)
    additional_notes = Column(Text, nullable=True)

    # Calendly linkage for sessions booked through the webhook
    calendly_event_uri = Column(String(500), nullable=True)
    calendly_invitee_uri = Column(String(500), index=True, nullable=True)
    calendly_booking_id = Column(String(255), nullable=True)

    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    profile = relationship("Profile", back_populates="sessions")
    client = relationship("Client", back_populates="sessions")


class CPDEntry(Base):
    __tablename__ = "cpd"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(String(255), ForeignKey("profiles.user_id"), index=True, nullable=False)
    title = Column(String(255), nullable=False)
    activity_date = Column(DateTime, nullable=False)
    hours = Column(Float, nullable=False, default=0)
    cpd_type = Column(String(100), nullable=True)
    learning_method = Column(String(100), nullable=True)
    provider_organization = Column(String(255), nullable=True)
    description = Column(Text, nullable=True)
    key_learnings = Column(Text, nullable=True)
    application_to_practice = Column(Text, nullable=True)
    icf_competencies = Column(JSON, default=list)
    # False excludes the entry from ICF CCE hour totals
    icf_cce_hours = Column(Boolean, default=True, nullable=False)
    document_type = Column(String(50), default="Certificate", nullable=True)
    supporting_document = Column(String(500), nullable=True)  # storage key or URL
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())


class MentoringSession(Base):
    __tablename__ = "mentoring_supervision"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(String(255), ForeignKey("profiles.user_id"), index=True, nullable=False)
    session_type = Column(String(20), nullable=False)  # mentoring, supervision
    session_date = Column(DateTime, nullable=False)
    duration = Column(Integer, nullable=False)  # minutes
    provider_name = Column(String(255), nullable=True)
    credential_level = Column(String(50), nullable=True)
    delivery_type = Column(String(50), nullable=True)  # mentoring only
    supervision_type = Column(String(50), nullable=True)  # supervision only
    focus_area = Column(String(500), nullable=True)
    session_notes = Column(Text, nullable=True)
    is_formal_supervision = Column(Boolean, nullable=True)  # supervision only
    uploaded_file_name = Column(String(255), nullable=True)
    uploaded_file_path = Column(String(500), nullable=True)
    uploaded_file_size = Column(Integer, nullable=True)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())


class ScheduledEmail(Base):
    __tablename__ = "scheduled_emails"

    id = Column(Integer, primary_key=True, index=True)
    created_by = Column(String(255), ForeignKey("profiles.user_id"), nullable=False)
    subject = Column(String(500), nullable=False)
    email_content = Column(Text, nullable=False)
    recipient_type = Column(String(20), default="all", nullable=False)  # all, selected
    recipient_user_ids = Column(JSON, nullable=True)
    scheduled_for = Column(DateTime, index=True, nullable=False)
    status = Column(String(20), default="pending", index=True, nullable=False)  # pending, sent, failed
    sent_count = Column(Integer, default=0, nullable=False)
    failed_count = Column(Integer, default=0, nullable=False)
    error_details = Column(JSON, nullable=True)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())


class PushSubscription(Base):
    __tablename__ = "push_subscriptions"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(String(255), ForeignKey("profiles.user_id"), index=True, nullable=False)
    subscription = Column(Text, nullable=False)  # JSON-encoded browser PushSubscription
    notification_types = Column(JSON, default=list)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())
