"""
Organization Account Routes

POST /org/register - Register organization, email a verification link
GET /org/verify/{token} - Confirm email (HTML page)
POST /org/login - Login with verified account
"""

import logging
from html import escape
from fastapi import APIRouter, HTTPException, Depends
from fastapi.responses import HTMLResponse

from jobboard.core.auth import hash_password, verify_password, create_verification_token, decode_token
from jobboard.core.config import get_settings
from jobboard.services.email_service import EmailService, EmailDeliveryError, get_email_service
from jobboard.services.mongo_service import OrganizationService, get_organization_service
from jobboard.schemas.schemas import OrganizationRegisterRequest, LoginRequest, LoginResponse, MessageResponse

router = APIRouter(prefix="/org", tags=["Organizations"])
logger = logging.getLogger(__name__)

VERIFY_PAGE = """
<div style="font-family: Arial, sans-serif; text-align: center; padding: 20px;">
  <h2 style="color: {color};">{title}</h2>
  <p>{text}</p>
  {link}
</div>
"""


def _verification_email(fullname: str, link: str) -> str:
    return f"""
    <div style="font-family: Arial, sans-serif; padding: 20px;">
      <h2 style="color: #4CAF50;">Welcome to Our Platform, {escape(fullname)}!</h2>
      <p>Thank you for registering with us. Please verify your email by clicking the button below:</p>
      <a href="{link}" style="display: inline-block; padding: 10px 20px; margin: 20px 0; font-size: 16px; color: #fff; background-color: #4CAF50; text-decoration: none; border-radius: 5px;">Verify Email</a>
      <p>If you did not sign up, you can ignore this email.</p>
    </div>
    """


def _login_button() -> str:
    url = f"{get_settings().frontend_url}/recruiter"
    return (
        f'<a href="{url}" style="display: inline-block; padding: 10px 20px; margin: 20px 0; '
        f'color: #fff; background-color: #008CBA; text-decoration: none; border-radius: 5px;">Login Now</a>'
    )


@router.post("/register", response_model=MessageResponse, status_code=201)
async def register(
    request: OrganizationRegisterRequest,
    orgs: OrganizationService = Depends(get_organization_service),
    mailer: EmailService = Depends(get_email_service)
):
    """Register an organization. The account stays unverified until the emailed link is opened."""
    if request.password != request.confirm_password:
        raise HTTPException(status_code=400, detail="Passwords do not match")

    if orgs.get_by_email(request.email):
        raise HTTPException(status_code=400, detail="Organization already exists")

    token = create_verification_token(request.email.lower())
    orgs.create(
        fullname=request.fullname,
        email=request.email,
        company_name=request.company_name,
        password_hash=hash_password(request.password),
        verification_token=token
    )

    link = f"{get_settings().api_base_url}/api/org/verify/{token}"
    try:
        mailer.send(request.email, "Verify Your Email - Complete Your Registration",
                    _verification_email(request.fullname, link))
    except EmailDeliveryError as e:
        raise HTTPException(status_code=500, detail="Error sending verification email") from e

    return MessageResponse(message="Organization registered. Check your email for verification.")


@router.get("/verify/{token}", response_class=HTMLResponse)
async def verify_email(token: str, orgs: OrganizationService = Depends(get_organization_service)):
    """Open the emailed link to verify the organization's email."""
    payload = decode_token(token)
    if not payload or not payload.get("email"):
        return VERIFY_PAGE.format(
            color="red", title="Invalid or Expired Token",
            text="The verification link is invalid or has expired.", link=""
        )

    organization = orgs.get_by_email(payload["email"])
    if not organization or organization.get("is_verified"):
        return VERIFY_PAGE.format(
            color="red", title="Invalid or Already Verified",
            text="Your email is already verified or the verification link is invalid.",
            link=_login_button()
        )

    orgs.mark_verified(organization["_id"])
    logger.info(f"Organization {organization['_id']} verified")
    return VERIFY_PAGE.format(
        color="#4CAF50", title="Your Email is Verified!",
        text="Thank you for verifying your email. You can now log in to your account.",
        link=_login_button()
    )


@router.post("/login", response_model=LoginResponse)
async def login(request: LoginRequest, orgs: OrganizationService = Depends(get_organization_service)):
    """Login with a verified organization account."""
    organization = orgs.get_by_email(request.email)
    if not organization:
        raise HTTPException(status_code=400, detail="Invalid credentials")
    if not organization.get("is_verified"):
        raise HTTPException(status_code=403, detail="Please verify your email before logging in")
    if not verify_password(request.password, organization["password"]):
        raise HTTPException(status_code=400, detail="Invalid credentials")

    return LoginResponse(
        message="Login successful!",
        full_name=organization.get("fullname"),
        user_id=str(organization["_id"])
    )
