"""
PalmPay Backend — Palm Biometric Service
==========================================

What:  Palm template storage and lookup, the verification candidate list,
       and the enrollment QR token flow.
Who:   Called by routes/palm.py.

Matching Model:
    The server never compares features. /verify returns every active
    template for one (sdk_vendor, feature_version) pair and the kiosk's
    vendor SDK performs the 1:N match locally ("client-side matching").

Enrollment Flow:
    kiosk ──POST generate-enrollment-qr {palmFeatures}──▶ token (QR, 10 min)
    phone ──GET enrollment/{token}─────────────────────▶ palmFeatures
    Tokens live only in the process-local EnrollmentTokenCache.
"""

import logging
from typing import Any, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from palmpay.enrollment import EnrollmentTokenCache, enrollment_cache
from palmpay.exceptions import DatabaseError, NotFoundError, PalmPayError, ValidationError
from palmpay.models.user import (
    DEFAULT_FEATURE_VERSION,
    DEFAULT_SDK_VENDOR,
    PalmTemplate,
    User,
)
from palmpay.schemas.user import (
    EnrollmentPayloadResponse,
    EnrollmentQRResponse,
    PalmTemplateCreate,
    PalmTemplateResponse,
    VerifyResponse,
    VerifyTemplate,
)

logger = logging.getLogger(__name__)


class PalmService:
    """
    Args:
        cache: enrollment token store; the process-wide singleton unless a
               test injects one with a fake clock
    """

    def __init__(self, cache: Optional[EnrollmentTokenCache] = None):
        self.cache = cache if cache is not None else enrollment_cache

    # ── Templates ─────────────────────────────────────────────────────────

    async def get_template(self, db: AsyncSession, user_id: str) -> PalmTemplateResponse:
        """
        First template stored for the user. Users may hold several
        (one per vendor/version); this lookup does not choose between them.

        Raises:
            NotFoundError: the user has no template (→ 404)
        """
        try:
            result = await db.execute(
                select(PalmTemplate)
                .where(PalmTemplate.user_id == user_id)
                .order_by(PalmTemplate.created_at.asc())
                .limit(1)
            )
            template = result.scalar_one_or_none()
            if template is None:
                raise NotFoundError(message="Palm template not found", resource="palm template")
            return PalmTemplateResponse.model_validate(template)
        except PalmPayError:
            raise
        except Exception as e:
            logger.error("Error fetching palm template for %s: %s", user_id, str(e), exc_info=True)
            raise DatabaseError(message="Failed to fetch palm template")

    async def save_template(self, db: AsyncSession, data: PalmTemplateCreate) -> PalmTemplateResponse:
        """Store a new template for an existing user."""
        try:
            user = await db.get(User, data.user_id)
            if user is None:
                raise NotFoundError(message="User not found", resource="user", resource_id=data.user_id)

            template = PalmTemplate(
                user_id=data.user_id,
                sdk_vendor=data.sdk_vendor or DEFAULT_SDK_VENDOR,
                feature_version=data.feature_version or DEFAULT_FEATURE_VERSION,
                left_palmprint=data.left_palmprint,
                left_palmvein=data.left_palmvein,
                right_palmprint=data.right_palmprint,
                right_palmvein=data.right_palmvein,
            )
            db.add(template)
            await db.flush()
            logger.info(
                "Palm template %s stored for user %s (%s %s)",
                template.id,
                data.user_id,
                template.sdk_vendor,
                template.feature_version,
            )
            return PalmTemplateResponse.model_validate(template)
        except PalmPayError:
            raise
        except Exception as e:
            logger.error("Error saving palm template: %s", str(e), exc_info=True)
            raise DatabaseError(message="Failed to save palm template")

    async def verification_candidates(
        self,
        db: AsyncSession,
        sdk_vendor: Optional[str] = None,
        feature_version: Optional[str] = None,
    ) -> VerifyResponse:
        """Every active template for the vendor/version pair, with its owner."""
        vendor = sdk_vendor or DEFAULT_SDK_VENDOR
        version = feature_version or DEFAULT_FEATURE_VERSION
        try:
            result = await db.execute(
                select(PalmTemplate)
                .where(
                    PalmTemplate.sdk_vendor == vendor,
                    PalmTemplate.feature_version == version,
                    PalmTemplate.active.is_(True),
                )
                .options(selectinload(PalmTemplate.user))
            )
            templates = [VerifyTemplate.model_validate(t) for t in result.scalars().all()]
            logger.info(
                "Verification candidates for %s %s: %d templates",
                vendor,
                version,
                len(templates),
            )
            return VerifyResponse(template_count=len(templates), templates=templates)
        except Exception as e:
            logger.error("Error fetching verification templates: %s", str(e), exc_info=True)
            raise DatabaseError(message="Failed to verify palm")

    # ── Enrollment Tokens ─────────────────────────────────────────────────

    def issue_enrollment_token(self, palm_features: Any) -> EnrollmentQRResponse:
        """
        Raises:
            ValidationError: palmFeatures missing (→ 400)
        """
        if palm_features is None:
            raise ValidationError(message="palmFeatures is required", field="palmFeatures")

        entry = self.cache.issue(palm_features)
        return EnrollmentQRResponse(
            enrollment_token=entry.token,
            expires_in=self.cache.remaining(entry),
        )

    def redeem_enrollment_token(self, token: str) -> EnrollmentPayloadResponse:
        """
        Raises:
            NotFoundError: unknown token (→ 404)
            TokenExpiredError: token expired; removed by this call (→ 410)
        """
        entry = self.cache.resolve(token)
        return EnrollmentPayloadResponse(
            palm_features=entry.palm_features,
            created_at=entry.created_at_datetime,
        )


# ── Singleton Instance ────────────────────────────────────────────────────
palm_service = PalmService()
