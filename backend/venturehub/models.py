"""SQLModel data models.

This module defines the application's database tables using SQLModel.
Ids are opaque uuid4 hex strings so that notifications can address
startups, investors and admins through a single `user_id` column.

Array-like fields (social media accounts, co-founders, additional files,
tags, metadata) are stored as JSON text; see `utils/json_fields.py`.
Timestamps are timezone-aware UTC datetimes maintained by plain
assignment on write. Values read back from SQLite may come back naive;
compare them through `as_utc`.
"""

import uuid
from typing import Optional
from sqlmodel import SQLModel, Field
from sqlalchemy import Column, Text
from datetime import datetime, timezone


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Attach UTC to a naive datetime loaded from the database."""
    if value is None or value.tzinfo is not None:
        return value
    return value.replace(tzinfo=timezone.utc)


def new_id() -> str:
    return uuid.uuid4().hex


class Account(SQLModel, table=True):
    """A login identity.

    Fields:
    - `account_type`: `startup`, `individual`, `vc`, `admin` or `user`
      (invited, not yet promoted)
    - `profile_id`: id of the linked `startups`/`investors` row once the
      email has been verified
    - `pending_registration`: JSON signup payload kept until verification
    """
    __tablename__ = "accounts"

    id: str = Field(default_factory=new_id, primary_key=True)
    email: str = Field(index=True, nullable=False, unique=True)
    password_hash: str
    name: str = ""
    account_type: str = Field(default="user", index=True)
    profile_id: Optional[str] = Field(default=None, index=True)
    email_confirmed_at: Optional[datetime] = None
    last_sign_in_at: Optional[datetime] = None
    pending_registration: Optional[str] = Field(default=None, sa_column=Column(Text))
    invite_token: Optional[str] = None
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)


class VerificationCode(SQLModel, table=True):
    """A hashed one-time code for email confirmation or password recovery."""
    __tablename__ = "verification_codes"

    id: str = Field(default_factory=new_id, primary_key=True)
    email: str = Field(index=True)
    purpose: str = Field(default="signup", index=True)
    code_hash: str
    expires_at: datetime
    consumed_at: Optional[datetime] = None
    created_at: datetime = Field(default_factory=utcnow)


class Startup(SQLModel, table=True):
    """A startup profile created after its founder verified their email."""
    __tablename__ = "startups"

    id: str = Field(default_factory=new_id, primary_key=True)
    account_id: Optional[str] = Field(default=None, index=True)
    email: str = Field(index=True)
    name: str
    phone: Optional[str] = None
    founder_info: Optional[str] = None
    startup_name: Optional[str] = Field(default=None, index=True)
    website: Optional[str] = None
    industry: str = Field(default="", index=True)
    stage: Optional[str] = Field(default=None, index=True)
    logo: Optional[str] = None
    social_media_accounts: Optional[str] = Field(default="[]", sa_column=Column(Text))
    problem_solving: Optional[str] = Field(default=None, sa_column=Column(Text))
    solution: Optional[str] = Field(default=None, sa_column=Column(Text))
    uniqueness: Optional[str] = Field(default=None, sa_column=Column(Text))
    previous_financial_year_revenue: Optional[float] = None
    has_received_funding: Optional[bool] = None
    monthly_burn_rate: Optional[float] = None
    investment_instrument: Optional[str] = None
    capital_seeking: Optional[float] = None
    pre_money_valuation: Optional[float] = None
    funding_already_raised: Optional[float] = None
    pitch_deck: Optional[str] = None
    co_founders: Optional[str] = Field(default="[]", sa_column=Column(Text))
    calendly_link: Optional[str] = None
    video_link: Optional[str] = None
    team_size: Optional[int] = None
    achievements: Optional[str] = Field(default=None, sa_column=Column(Text))
    risks: Optional[str] = Field(default=None, sa_column=Column(Text))
    risk_mitigation: Optional[str] = Field(default=None, sa_column=Column(Text))
    exit_strategy: Optional[str] = None
    participated_in_accelerator: Optional[bool] = None
    accelerator_details: Optional[str] = None
    additional_files: Optional[str] = Field(default="[]", sa_column=Column(Text))
    verified: bool = False
    status: str = Field(default="pending", index=True)
    visibility_status: str = "normal"
    admin_notes: Optional[str] = Field(default=None, sa_column=Column(Text))
    verified_at: Optional[datetime] = None
    verified_by: Optional[str] = None
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)


class Investor(SQLModel, table=True):
    """An investor profile (`individual` angel or `vc` fund)."""
    __tablename__ = "investors"

    id: str = Field(default_factory=new_id, primary_key=True)
    account_id: Optional[str] = Field(default=None, index=True)
    email: str = Field(index=True)
    name: str
    investor_type: str = "individual"
    phone: Optional[str] = None
    birthday: Optional[str] = None
    company: Optional[str] = None
    role: Optional[str] = None
    country: Optional[str] = None
    city: Optional[str] = None
    preferred_industries: Optional[str] = None
    preferred_company_stage: Optional[str] = None
    linkedin_profile: Optional[str] = None
    other_social_media_profile: Optional[str] = Field(default="[]", sa_column=Column(Text))
    heard_about_us: Optional[str] = None
    number_of_investments: Optional[int] = None
    average_ticket_size: str = ""
    secured_lead_investor: Optional[bool] = None
    participated_as_advisor: Optional[bool] = None
    strong_candidate_reason: Optional[str] = Field(default=None, sa_column=Column(Text))
    calendly_link: Optional[str] = None
    verified: bool = False
    status: str = Field(default="pending", index=True)
    visibility_status: str = "normal"
    admin_notes: Optional[str] = Field(default=None, sa_column=Column(Text))
    verified_at: Optional[datetime] = None
    verified_by: Optional[str] = None
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)


class Admin(SQLModel, table=True):
    """An administrator; `id` equals the owning account id."""
    __tablename__ = "admins"

    id: str = Field(primary_key=True)
    email: str = Field(index=True, unique=True)
    name: str
    admin_level: str = "standard"
    phone_number: Optional[str] = None
    location: Optional[str] = None
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)


class AdminInvite(SQLModel, table=True):
    """Invitation for a new admin; accepted by setting a password."""
    __tablename__ = "admin_invites"

    id: str = Field(default_factory=new_id, primary_key=True)
    email: str = Field(index=True)
    name: str
    admin_level: str = "standard"
    phone_number: Optional[str] = None
    location: Optional[str] = None
    invite_token: str = Field(index=True, unique=True)
    invited_by: str
    status: str = Field(default="pending", index=True)
    expires_at: datetime
    accepted_at: Optional[datetime] = None
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)


class UserInvite(SQLModel, table=True):
    """Invitation for a plain user who may later be promoted to admin."""
    __tablename__ = "user_invites"

    id: str = Field(default_factory=new_id, primary_key=True)
    email: str = Field(index=True)
    name: str
    invited_by: str
    invite_token: str = Field(index=True, unique=True)
    status: str = Field(default="pending", index=True)
    user_id: Optional[str] = None
    expires_at: datetime
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)


class Notification(SQLModel, table=True):
    """An in-app notification addressed to a startup, investor or admin id."""
    __tablename__ = "notifications"

    id: str = Field(default_factory=new_id, primary_key=True)
    user_id: str = Field(index=True)
    type: str = "other"
    title: str
    content: str = Field(sa_column=Column(Text, nullable=False))
    metadata_json: Optional[str] = Field(default="{}", sa_column=Column(Text))
    priority: str = "normal"
    newsletter_id: Optional[str] = Field(default=None, index=True)
    recipient_type: Optional[str] = None
    action_url: Optional[str] = None
    action_label: Optional[str] = None
    scheduled_for: Optional[datetime] = None
    is_read: bool = False
    read_at: Optional[datetime] = None
    is_archived: bool = False
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)


class NewsletterCampaign(SQLModel, table=True):
    """A newsletter that fans out into `newsletter` notifications when sent."""
    __tablename__ = "newsletter_campaigns"

    id: str = Field(default_factory=new_id, primary_key=True)
    title: str
    subject: str
    content: str = Field(sa_column=Column(Text, nullable=False))
    recipient_type: str = "all"
    specific_recipients: Optional[str] = Field(default="[]", sa_column=Column(Text))
    scheduled_for: Optional[datetime] = None
    metadata_json: Optional[str] = Field(default="{}", sa_column=Column(Text))
    status: str = Field(default="draft", index=True)
    created_by: str
    sent_at: Optional[datetime] = None
    total_recipients: int = 0
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)


class Article(SQLModel, table=True):
    """A blog article."""
    __tablename__ = "articles"

    id: str = Field(default_factory=new_id, primary_key=True)
    title: str
    slug: str = Field(index=True)
    content: str = Field(sa_column=Column(Text, nullable=False))
    excerpt: str = ""
    featured_image_url: Optional[str] = None
    category: str = Field(default="news", index=True)
    tags: Optional[str] = Field(default="[]", sa_column=Column(Text))
    status: str = Field(default="draft", index=True)
    author_id: str
    author_name: str
    published_at: Optional[datetime] = None
    views_count: int = 0
    is_featured: bool = False
    seo_title: Optional[str] = None
    seo_description: Optional[str] = None
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)


class InvestorStartupConnection(SQLModel, table=True):
    """An investor's interest in, or info request about, a startup."""
    __tablename__ = "investor_startup_connections"

    id: str = Field(default_factory=new_id, primary_key=True)
    investor_id: str = Field(index=True)
    startup_id: str = Field(index=True)
    connection_type: str
    investor_name: str
    investor_email: str
    investor_calendly_link: Optional[str] = None
    startup_name: str
    startup_email: str
    message: Optional[str] = Field(default=None, sa_column=Column(Text))
    status: str = Field(default="active", index=True)
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)


class Matchmaking(SQLModel, table=True):
    """An admin-curated suggestion pairing one investor with one startup."""
    __tablename__ = "matchmakings"

    id: str = Field(default_factory=new_id, primary_key=True)
    investor_id: str = Field(index=True)
    investor_name: str
    investor_email: str
    startup_id: str = Field(index=True)
    startup_name: str
    startup_email: str
    expiry_date: datetime
    is_interested: bool = False
    is_archived: bool = False
    matched_by: str
    comment: Optional[str] = Field(default=None, sa_column=Column(Text))
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)
