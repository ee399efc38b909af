"""
Company Profile Routes

POST /profiles/create - Create profile (multipart, optional logo)
GET /profiles/by-org/{organization_id} - Get an organization's profile
PUT /profiles/update/{organization_id} - Update profile, replacing the logo if a new one is sent
"""

import json
import logging
from typing import List, Optional
from fastapi import APIRouter, HTTPException, Depends, UploadFile, File, Form

from jobboard.services.mongo_service import ProfileService, get_profile_service, serialize_doc, to_object_id
from jobboard.utils.file_upload import save_upload, delete_file, check_logo

router = APIRouter(prefix="/profiles", tags=["Profiles"])
logger = logging.getLogger(__name__)


def _required_list(raw: Optional[str], message: str) -> List[str]:
    """Departments/locations arrive as a JSON list and must not be empty."""
    try:
        values = json.loads(raw) if raw else []
    except json.JSONDecodeError as e:
        raise HTTPException(status_code=400, detail=message) from e
    if not isinstance(values, list) or not values:
        raise HTTPException(status_code=400, detail=message)
    return [str(v) for v in values]


def _profile_fields(name, phone_no, website, departments, locations,
                    facebook_url, linkedin_url, insta_url, yt_url) -> dict:
    if not name:
        raise HTTPException(status_code=400, detail="Organization name is required")
    if not phone_no:
        raise HTTPException(status_code=400, detail="Phone number is required")
    return {
        "name": name,
        "phone_no": phone_no,
        "website": website or None,
        "departments": _required_list(departments, "At least one department is required"),
        "locations": _required_list(locations, "At least one location is required"),
        "facebook_url": facebook_url or None,
        "linkedin_url": linkedin_url or None,
        "insta_url": insta_url or None,
        "yt_url": yt_url or None,
    }


@router.post("/create", status_code=201)
async def create_profile(
    organization_id: str = Form(...),
    name: str = Form(None),
    phone_no: str = Form(None),
    website: Optional[str] = Form(None),
    departments: str = Form(None, description="JSON list"),
    locations: str = Form(None, description="JSON list"),
    facebook_url: Optional[str] = Form(None),
    linkedin_url: Optional[str] = Form(None),
    insta_url: Optional[str] = Form(None),
    yt_url: Optional[str] = Form(None),
    logo: Optional[UploadFile] = File(None),
    profiles: ProfileService = Depends(get_profile_service)
):
    """Create the company profile of an organization."""
    if to_object_id(organization_id) is None:
        raise HTTPException(status_code=400, detail="Organization ID is required")

    data = _profile_fields(name, phone_no, website, departments, locations,
                           facebook_url, linkedin_url, insta_url, yt_url)
    if profiles.get_by_org(organization_id):
        raise HTTPException(status_code=400, detail="Profile already exists for this organization")
    data["organization_id"] = organization_id
    data["logo"] = None
    if logo is not None and logo.filename:
        data["logo"] = await save_upload(logo, check_logo)

    doc = profiles.create(data)
    return {"success": True, "message": "Profile created successfully", "data": serialize_doc(doc)}


@router.get("/by-org/{organization_id}")
async def get_profile(organization_id: str, profiles: ProfileService = Depends(get_profile_service)):
    """Get an organization's company profile."""
    doc = profiles.get_by_org(organization_id)
    if not doc:
        raise HTTPException(status_code=404, detail="Profile not found")
    return {"success": True, "data": serialize_doc(doc)}


@router.put("/update/{organization_id}")
async def update_profile(
    organization_id: str,
    name: str = Form(None),
    phone_no: str = Form(None),
    website: Optional[str] = Form(None),
    departments: str = Form(None, description="JSON list"),
    locations: str = Form(None, description="JSON list"),
    facebook_url: Optional[str] = Form(None),
    linkedin_url: Optional[str] = Form(None),
    insta_url: Optional[str] = Form(None),
    yt_url: Optional[str] = Form(None),
    logo: Optional[UploadFile] = File(None),
    profiles: ProfileService = Depends(get_profile_service)
):
    """Update the profile. A new logo replaces (and deletes) the old one."""
    fields = _profile_fields(name, phone_no, website, departments, locations,
                             facebook_url, linkedin_url, insta_url, yt_url)

    existing = profiles.get_by_org(organization_id)
    if not existing:
        raise HTTPException(status_code=404, detail="Profile not found")

    if logo is not None and logo.filename:
        fields["logo"] = await save_upload(logo, check_logo)
        if existing.get("logo") and delete_file(existing["logo"]):
            logger.info(f"Deleted old logo: {existing['logo']}")

    doc = profiles.update_by_org(organization_id, fields)
    if not doc:
        raise HTTPException(status_code=404, detail="Profile not found")
    return {"success": True, "message": "Profile updated successfully", "data": serialize_doc(doc)}
