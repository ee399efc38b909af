"""
Job-Seeker Account Routes

POST /auth/register - Start registration, email a one-time code
POST /auth/verify-otp - Confirm the code
POST /auth/complete-registration - Create the account (code must be verified)
POST /auth/login - Login
GET /auth/{user_id} - Get user (without password)
"""

from fastapi import APIRouter, HTTPException, Depends

from jobboard.core.auth import hash_password, verify_password
from jobboard.services.email_service import EmailService, EmailDeliveryError, get_email_service
from jobboard.services.mongo_service import UserService, get_user_service, serialize_doc
from jobboard.services.otp_service import OtpService, OtpPurpose, get_otp_service
from jobboard.schemas.schemas import (
    UserRegisterRequest, CompleteRegistrationRequest, OtpVerifyRequest,
    LoginRequest, LoginResponse, MessageResponse
)

router = APIRouter(prefix="/auth", tags=["Users"])


@router.post("/register", response_model=MessageResponse)
async def register(
    request: UserRegisterRequest,
    users: UserService = Depends(get_user_service),
    otps: OtpService = Depends(get_otp_service),
    mailer: EmailService = Depends(get_email_service)
):
    """Check the email is free and send a verification code to it."""
    if request.password != request.confirm_password:
        raise HTTPException(status_code=400, detail="Passwords do not match.")
    if users.get_by_email(request.email):
        raise HTTPException(status_code=400, detail="Email already in use.")

    code = otps.issue(OtpPurpose.registration, request.email)
    try:
        mailer.send_text(request.email, "Email Verification - JobFinder", f"Your OTP is: {code}")
    except EmailDeliveryError as e:
        raise HTTPException(status_code=500, detail="Error sending OTP.") from e

    return MessageResponse(message="OTP sent to email.")


@router.post("/verify-otp", response_model=MessageResponse)
async def verify_otp(request: OtpVerifyRequest, otps: OtpService = Depends(get_otp_service)):
    """Verify the registration code sent to this email."""
    if not otps.verify(OtpPurpose.registration, request.email, request.otp):
        raise HTTPException(status_code=400, detail="Invalid OTP.")
    return MessageResponse(message="OTP verified successfully.")


@router.post("/complete-registration", response_model=MessageResponse, status_code=201)
async def complete_registration(
    request: CompleteRegistrationRequest,
    users: UserService = Depends(get_user_service),
    otps: OtpService = Depends(get_otp_service)
):
    """Create the account once the emailed code has been verified."""
    if users.get_by_email(request.email):
        raise HTTPException(status_code=400, detail="Email already in use.")
    if not otps.consume(OtpPurpose.registration, request.email):
        raise HTTPException(status_code=400, detail="Email not verified. Request and verify an OTP first.")

    users.create(fullname=request.fullname, email=request.email, password_hash=hash_password(request.password))
    return MessageResponse(message="Registration successful!")


@router.post("/login", response_model=LoginResponse)
async def login(request: LoginRequest, users: UserService = Depends(get_user_service)):
    """Login with email and password."""
    user = users.get_by_email(request.email)
    if not user:
        raise HTTPException(status_code=400, detail="Invalid credentials")
    if not user.get("is_email_verified"):
        raise HTTPException(status_code=403, detail="Please verify your email before logging in")
    if not verify_password(request.password, user["password"]):
        raise HTTPException(status_code=400, detail="Invalid credentials")

    return LoginResponse(message="Login successful!", full_name=user.get("fullname"), user_id=str(user["_id"]))


@router.get("/{user_id}")
async def get_user(user_id: str, users: UserService = Depends(get_user_service)):
    """Get a user's public data."""
    user = users.get_public(user_id)
    if not user:
        raise HTTPException(status_code=404, detail="User not found")
    return serialize_doc(user)
