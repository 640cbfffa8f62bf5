# backend/app/routes/v1/certificates.py
"""
Certificate routes - API v1

Versioned certificate endpoints under /api/v1/certificates.

Endpoints:
    GET /user/{user_id}           → A user's certificates, newest first
    POST /                        → Issue a certificate for a completed course or session
    GET /{certificate_id}         → One certificate
"""

import asyncio
import logging
from typing import List

from fastapi import APIRouter, Depends, status

from ...api.dependencies.auth import get_current_user
from ...api.dependencies.services import get_certificate_service
from ...core.exceptions import DomainException
from ...models.user import User
from ...schemas.certificate import CertificateGenerateRequest, CertificateResponse
from ...services.certificate_service import CertificateService

logger = logging.getLogger(__name__)

# V1 router - no prefix here, will be added when mounting in main.py
router = APIRouter(tags=["certificates-v1"])


@router.get("/user/{user_id}", response_model=List[CertificateResponse])
async def user_certificates(
    user_id: str,
    certificate_service: CertificateService = Depends(get_certificate_service),
) -> List[CertificateResponse]:
    certificates = await asyncio.to_thread(certificate_service.list_for_user, user_id)
    return [CertificateResponse.model_validate(c) for c in certificates]


@router.post("", response_model=CertificateResponse, status_code=status.HTTP_201_CREATED)
async def generate_certificate(
    payload: CertificateGenerateRequest,
    current_user: User = Depends(get_current_user),
    certificate_service: CertificateService = Depends(get_certificate_service),
) -> CertificateResponse:
    """
    Issue a certificate for exactly one of ``course_id`` or ``tutoring_id``.

    An existing certificate for the same target is returned as is.
    """
    try:
        certificate = await asyncio.to_thread(
            certificate_service.generate,
            current_user,
            payload.course_id,
            payload.tutoring_id,
            payload.custom_message,
            payload.badge,
        )
    except DomainException as e:
        raise e.to_http_exception()
    return CertificateResponse.model_validate(certificate)


@router.get("/{certificate_id}", response_model=CertificateResponse)
async def get_certificate(
    certificate_id: str,
    certificate_service: CertificateService = Depends(get_certificate_service),
) -> CertificateResponse:
    try:
        certificate = await asyncio.to_thread(certificate_service.get_certificate, certificate_id)
    except DomainException as e:
        raise e.to_http_exception()
    return CertificateResponse.model_validate(certificate)
