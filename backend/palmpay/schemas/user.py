"""
PalmPay Backend — User, Card, Palm Template & Auth Log Schemas
================================================================

What:  Contracts for the /api/v1 account, biometric and audit endpoints.
"""

from datetime import datetime
from typing import Any, List, Optional

from pydantic import Field

from palmpay.schemas.common import ApiModel


# ══════════════════════════════════════════════════════════════════════════
# Users & Cards
# ══════════════════════════════════════════════════════════════════════════


class UserCreate(ApiModel):
    display_name: str
    email: Optional[str] = None


class UserSummary(ApiModel):
    id: str
    display_name: str
    email: Optional[str] = None
    created_at: datetime


class CardCreate(ApiModel):
    last4: str = Field(min_length=4, max_length=4, pattern=r"^\d{4}$")
    cardholder_name: Optional[str] = None
    brand: Optional[str] = None
    exp_month: Optional[int] = Field(default=None, ge=1, le=12)
    exp_year: Optional[int] = None
    is_default: bool = False


class CardResponse(ApiModel):
    id: str
    user_id: str
    cardholder_name: Optional[str] = None
    last4: str
    brand: Optional[str] = None
    exp_month: Optional[int] = None
    exp_year: Optional[int] = None
    is_default: bool
    created_at: datetime


class CardListResponse(ApiModel):
    cards: List[CardResponse]


class CardEnvelope(ApiModel):
    card: CardResponse


class DeleteUserResponse(ApiModel):
    success: bool = True
    message: str


# ══════════════════════════════════════════════════════════════════════════
# Palm Templates & Verification
# ══════════════════════════════════════════════════════════════════════════


class PalmTemplateCreate(ApiModel):
    user_id: str
    sdk_vendor: Optional[str] = None
    feature_version: Optional[str] = None
    left_palmprint: Optional[str] = None
    left_palmvein: Optional[str] = None
    right_palmprint: Optional[str] = None
    right_palmvein: Optional[str] = None


class PalmTemplateResponse(ApiModel):
    id: str
    user_id: str
    sdk_vendor: str
    feature_version: str
    left_palmprint: Optional[str] = None
    left_palmvein: Optional[str] = None
    right_palmprint: Optional[str] = None
    right_palmvein: Optional[str] = None
    active: bool
    created_at: datetime
    updated_at: datetime


class PalmTemplateEnvelope(ApiModel):
    success: bool = True
    template: PalmTemplateResponse


class UserDetail(UserSummary):
    cards: List[CardResponse] = Field(default_factory=list)
    palm_templates: List[PalmTemplateResponse] = Field(default_factory=list)


class UserEnvelope(ApiModel):
    user: UserDetail


class UserSummaryEnvelope(ApiModel):
    user: UserSummary


class VerifyRequest(ApiModel):
    """
    `palmFeatures` is accepted but never compared server-side: the caller
    matches it against the returned templates.
    """
    sdk_vendor: Optional[str] = None
    feature_version: Optional[str] = None
    palm_features: Optional[Any] = None


class TemplateOwner(ApiModel):
    id: str
    display_name: str
    email: Optional[str] = None


class VerifyTemplate(ApiModel):
    id: str
    user_id: str
    sdk_vendor: str
    feature_version: str
    left_palmprint: Optional[str] = None
    left_palmvein: Optional[str] = None
    right_palmprint: Optional[str] = None
    right_palmvein: Optional[str] = None
    user: TemplateOwner


class VerifyResponse(ApiModel):
    success: bool = True
    template_count: int
    templates: List[VerifyTemplate]


class EnrollmentQRRequest(ApiModel):
    palm_features: Optional[Any] = None


class EnrollmentQRResponse(ApiModel):
    success: bool = True
    enrollment_token: str
    expires_in: int = Field(description="Seconds until the token expires")


class EnrollmentPayloadResponse(ApiModel):
    success: bool = True
    palm_features: Any
    created_at: datetime


# ══════════════════════════════════════════════════════════════════════════
# Authentication Logs
# ══════════════════════════════════════════════════════════════════════════


class AuthLogCreate(ApiModel):
    success: bool = False
    method: Optional[str] = None
    device_id: Optional[str] = None
    reason: Optional[str] = None


class AuthLogResponse(ApiModel):
    id: str
    user_id: str
    success: bool
    method: str
    device_id: Optional[str] = None
    reason: Optional[str] = None
    timestamp: datetime


class AuthLogCreated(ApiModel):
    success: bool = True
    log: AuthLogResponse


class AuthLogPage(ApiModel):
    """
    `total` is the number of log rows the user has, not the page length,
    so clients can compute the page count.
    """
    logs: List[AuthLogResponse]
    total: int
    limit: int
    offset: int
