"""
PalmPay Backend — Palm Biometric Route Handlers (v1)
======================================================

Route Inventory:
    GET  /api/v1/palm/template/{user_id}
    POST /api/v1/palm/template
    POST /api/v1/palm/verify
    POST /api/v1/palm/generate-enrollment-qr
    GET  /api/v1/palm/enrollment/{token}

The enrollment endpoints never touch the database.
"""

import logging

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from palmpay.database import get_db_session
from palmpay.schemas.common import ErrorResponse
from palmpay.schemas.user import (
    EnrollmentPayloadResponse,
    EnrollmentQRRequest,
    EnrollmentQRResponse,
    PalmTemplateCreate,
    PalmTemplateEnvelope,
    PalmTemplateResponse,
    VerifyRequest,
    VerifyResponse,
)
from palmpay.services.palm_service import palm_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/palm", tags=["Palm Biometrics"])


@router.get(
    "/template/{user_id}",
    response_model=PalmTemplateResponse,
    responses={
        404: {"description": "User has no palm template", "model": ErrorResponse},
        500: {"description": "Server error", "model": ErrorResponse},
    },
    summary="Fetch a user's palm template",
)
async def get_template(
    user_id: str,
    db: AsyncSession = Depends(get_db_session),
) -> PalmTemplateResponse:
    return await palm_service.get_template(db, user_id)


@router.post(
    "/template",
    response_model=PalmTemplateEnvelope,
    responses={
        404: {"description": "User not found", "model": ErrorResponse},
        500: {"description": "Server error", "model": ErrorResponse},
    },
    summary="Store a palm template for a user",
)
async def save_template(
    body: PalmTemplateCreate,
    db: AsyncSession = Depends(get_db_session),
) -> PalmTemplateEnvelope:
    template = await palm_service.save_template(db, body)
    return PalmTemplateEnvelope(success=True, template=template)


@router.post(
    "/verify",
    response_model=VerifyResponse,
    responses={500: {"description": "Server error", "model": ErrorResponse}},
    summary="Candidate templates for client-side matching",
    description=(
        "Returns every active template for sdkVendor (default 'veinshine') and "
        "featureVersion (default '1.0'). The server does not compare features."
    ),
)
async def verify(
    body: VerifyRequest,
    db: AsyncSession = Depends(get_db_session),
) -> VerifyResponse:
    return await palm_service.verification_candidates(
        db,
        sdk_vendor=body.sdk_vendor,
        feature_version=body.feature_version,
    )


@router.post(
    "/generate-enrollment-qr",
    response_model=EnrollmentQRResponse,
    responses={400: {"description": "palmFeatures missing", "model": ErrorResponse}},
    summary="Park captured palm features behind a short-lived QR token",
)
async def generate_enrollment_qr(body: EnrollmentQRRequest) -> EnrollmentQRResponse:
    return palm_service.issue_enrollment_token(body.palm_features)


@router.get(
    "/enrollment/{token}",
    response_model=EnrollmentPayloadResponse,
    responses={
        404: {"description": "Unknown token", "model": ErrorResponse},
        410: {"description": "Token expired", "model": ErrorResponse},
    },
    summary="Redeem an enrollment token",
)
async def get_enrollment(token: str) -> EnrollmentPayloadResponse:
    return palm_service.redeem_enrollment_token(token)
