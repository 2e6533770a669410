"""Pydantic request schemas used by the API.

Schemas keep API input shapes stable and provide validation for
controller handlers and tests. Responses are plain dictionaries built by
the services.
"""

from datetime import datetime
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

Status = Literal["pending", "approved", "rejected", "flagged"]
Visibility = Literal["normal", "featured", "hot"]
AdminLevel = Literal["standard", "super"]
UserType = Literal["startup", "investor"]
Priority = Literal["low", "normal", "high", "urgent"]
NotificationType = Literal[
    "newsletter",
    "admin_action",
    "connection_request",
    "message",
    "profile_update",
    "match_suggestion",
    "investment_interest",
    "meeting_request",
    "system_update",
    "reminder",
    "other",
]
RecipientType = Literal["all", "investors", "startups", "specific"]
CampaignStatus = Literal["draft", "scheduled", "sending", "sent", "cancelled"]
ArticleStatus = Literal["draft", "published", "archived"]
ArticleCategory = Literal[
    "news",
    "industry_insights",
    "startup_tips",
    "investment_guide",
    "company_updates",
    "market_analysis",
    "founder_stories",
    "investor_spotlight",
]


# -- auth ---------------------------------------------------------------

class SignUpIn(BaseModel):
    """Registration form for startups and investors.

    Required fields depend on `main_account_type`; presence checks happen
    in the auth service so every missing field is reported at once.
    Unlisted profile fields are accepted and stored with the profile.
    """
    model_config = ConfigDict(extra="allow")

    email: str
    password: str
    name: str = ""
    main_account_type: UserType
    investor_type: Optional[Literal["individual", "vc"]] = None
    phone: Optional[str] = None
    # startup
    startup_name: Optional[str] = None
    industry: Optional[str] = None
    stage: Optional[str] = None
    website: Optional[str] = None
    # investor
    preferred_industries: Optional[Any] = None
    preferred_stage: Optional[str] = None
    average_ticket_size: Optional[str] = None
    company: Optional[str] = None


class EmailIn(BaseModel):
    email: str


class OtpVerifyIn(BaseModel):
    email: str
    code: str


class SignInIn(BaseModel):
    email: str
    password: str


class PasswordResetIn(BaseModel):
    email: str
    code: str
    new_password: str


class PasswordUpdateIn(BaseModel):
    current_password: str
    new_password: str


class ProfileUpdateIn(BaseModel):
    name: Optional[str] = None
    phone: Optional[str] = None
    location: Optional[str] = None
    bio: Optional[str] = None
    linkedin: Optional[str] = None


class InviteSignUpIn(BaseModel):
    email: str
    password: str
    name: str
    invite_token: str


class InviteVerifyIn(BaseModel):
    email: str
    code: str
    invite_token: str


# -- moderation ---------------------------------------------------------

class StatusUpdateIn(BaseModel):
    status: Status
    visibility_status: Optional[Visibility] = None
    admin_notes: Optional[str] = None


class AdminInviteIn(BaseModel):
    email: str
    name: str
    admin_level: AdminLevel = "standard"
    phone_number: Optional[str] = None
    location: Optional[str] = None


class AcceptAdminInviteIn(BaseModel):
    token: str
    password: str


class UserInviteIn(BaseModel):
    email: str
    name: str


class PromoteIn(BaseModel):
    admin_level: AdminLevel = "standard"


# -- notifications --------------------------------------------------------

class NotificationIn(BaseModel):
    user_id: str
    title: str
    content: str
    type: NotificationType = "other"
    priority: Priority = "normal"
    metadata: Dict[str, Any] = Field(default_factory=dict)
    action_url: Optional[str] = None
    action_label: Optional[str] = None
    scheduled_for: Optional[datetime] = None


class BulkNotificationIn(BaseModel):
    user_ids: List[str]
    title: str
    content: str
    type: NotificationType = "other"
    priority: Priority = "normal"
    metadata: Dict[str, Any] = Field(default_factory=dict)
    action_url: Optional[str] = None
    action_label: Optional[str] = None


class MarkReadIn(BaseModel):
    ids: List[str]


class CampaignIn(BaseModel):
    title: str
    subject: str
    content: str
    recipient_type: RecipientType = "all"
    specific_recipients: List[str] = Field(default_factory=list)
    scheduled_for: Optional[datetime] = None
    metadata: Dict[str, Any] = Field(default_factory=dict)


class CampaignUpdateIn(BaseModel):
    title: Optional[str] = None
    subject: Optional[str] = None
    content: Optional[str] = None
    recipient_type: Optional[RecipientType] = None
    specific_recipients: Optional[List[str]] = None
    scheduled_for: Optional[datetime] = None
    metadata: Optional[Dict[str, Any]] = None
    status: Optional[CampaignStatus] = None


# -- connections / matchmaking -------------------------------------------

class ConnectionIn(BaseModel):
    startup_id: str
    connection_type: Literal["interested", "info_request"]
    message: Optional[str] = None


class MatchmakingIn(BaseModel):
    investor_id: str
    startup_ids: List[str]
    comment: Optional[str] = None
    expiry_days: Optional[int] = Field(default=None, ge=1, le=365)


class MatchmakingStatusIn(BaseModel):
    is_interested: bool


# -- articles --------------------------------------------------------------

class ArticleIn(BaseModel):
    title: str
    content: str
    excerpt: str = ""
    featured_image_url: Optional[str] = None
    category: ArticleCategory = "news"
    tags: List[str] = Field(default_factory=list)
    status: ArticleStatus = "draft"
    is_featured: bool = False
    seo_title: Optional[str] = None
    seo_description: Optional[str] = None


class ArticleUpdateIn(BaseModel):
    title: Optional[str] = None
    content: Optional[str] = None
    excerpt: Optional[str] = None
    featured_image_url: Optional[str] = None
    category: Optional[ArticleCategory] = None
    tags: Optional[List[str]] = None
    status: Optional[ArticleStatus] = None
    is_featured: Optional[bool] = None
    seo_title: Optional[str] = None
    seo_description: Optional[str] = None


# -- scoring ---------------------------------------------------------------

class ScoringInputsIn(BaseModel):
    founders_experience: Optional[float] = Field(default=None, ge=0)
    founders_startups: Optional[int] = Field(default=None, ge=0)
    founders_exits: Optional[int] = Field(default=None, ge=0)
    team_size: Optional[int] = Field(default=None, ge=0)
    market_size: Optional[float] = Field(default=None, ge=0)
    funding_stage: Optional[str] = None
    monthly_revenue: Optional[float] = Field(default=None, ge=0)
    product_stage: Optional[str] = None
    pitch_quality: Optional[float] = Field(default=None, ge=0, le=10)
    competitive_advantage: Optional[str] = None


class ScoreIn(BaseModel):
    inputs: ScoringInputsIn = Field(default_factory=ScoringInputsIn)
    weights: Optional[Dict[str, float]] = None
