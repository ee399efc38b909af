"""
Password Reset Routes

Same three steps for both account kinds:
    /fp/...        job-seeker users
    /admin/fp/...  organizations

POST .../forgot-password - Email a reset code
POST .../verify-otp - Confirm the code
POST .../update-password - Set a new password (code must be verified)
"""

from typing import Callable
from fastapi import APIRouter, HTTPException, Depends

from jobboard.core.auth import hash_password
from jobboard.services.email_service import EmailService, EmailDeliveryError, get_email_service
from jobboard.services.mongo_service import get_organization_service, get_user_service
from jobboard.services.otp_service import OtpService, OtpPurpose, get_otp_service
from jobboard.schemas.schemas import (
    ForgotPasswordRequest, OtpVerifyRequest, UpdatePasswordRequest, MessageResponse
)


def build_reset_router(prefix: str, tag: str, purpose: OtpPurpose, accounts_dependency: Callable,
                       not_found: str, subject: str) -> APIRouter:
    """Create the reset flow for one account collection."""
    router = APIRouter(prefix=prefix, tags=[tag])

    @router.post("/forgot-password", response_model=MessageResponse)
    async def forgot_password(
        request: ForgotPasswordRequest,
        accounts=Depends(accounts_dependency),
        otps: OtpService = Depends(get_otp_service),
        mailer: EmailService = Depends(get_email_service)
    ):
        """Send a password reset code if the account exists."""
        if not accounts.get_by_email(request.email):
            raise HTTPException(status_code=404, detail=not_found)

        code = otps.issue(purpose, request.email)
        try:
            mailer.send_text(request.email, subject, f"Your OTP to reset your password is: {code}")
        except EmailDeliveryError as e:
            raise HTTPException(status_code=500, detail="Error sending OTP") from e

        return MessageResponse(message="OTP sent to your email")

    @router.post("/verify-otp", response_model=MessageResponse)
    async def verify_otp(request: OtpVerifyRequest, otps: OtpService = Depends(get_otp_service)):
        """Verify the reset code."""
        if not otps.verify(purpose, request.email, request.otp):
            raise HTTPException(status_code=400, detail="Invalid OTP")
        return MessageResponse(message="OTP verified successfully")

    @router.post("/update-password", response_model=MessageResponse)
    async def update_password(
        request: UpdatePasswordRequest,
        accounts=Depends(accounts_dependency),
        otps: OtpService = Depends(get_otp_service)
    ):
        """Store the new password. Consumes the verified reset code."""
        if not accounts.get_by_email(request.email):
            raise HTTPException(status_code=404, detail=not_found)
        if not otps.consume(purpose, request.email):
            raise HTTPException(status_code=400, detail="OTP not verified")

        accounts.update_password(request.email, hash_password(request.new_password))
        return MessageResponse(message="Password updated successfully")

    return router


user_reset_router = build_reset_router(
    prefix="/fp", tag="Password Reset", purpose=OtpPurpose.user_password_reset,
    accounts_dependency=get_user_service, not_found="Email not found in the database",
    subject="Password Reset OTP"
)

admin_reset_router = build_reset_router(
    prefix="/admin/fp", tag="Admin Password Reset", purpose=OtpPurpose.admin_password_reset,
    accounts_dependency=get_organization_service, not_found="Admin email not found",
    subject="Admin Password Reset OTP"
)
