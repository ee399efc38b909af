"""
Candidate Routes

POST /candidates/apply - Submit application (multipart, optional picture and resume)
GET /candidates - All applications
GET /candidates/user/{user_id} - A user's applications
GET /candidates/job/{job_id} - Applications to a job
GET /candidates/{candidate_id} - One application
PUT /candidates/withdraw/{candidate_id} - Withdraw own application
PUT /candidates/{candidate_id}/status - Change status
PUT /candidates/{candidate_id} - Change status and/or interview details
DELETE /candidates/{candidate_id} - Delete application and its files
"""

import json
import logging
from datetime import date, datetime
from typing import List, Optional
from fastapi import APIRouter, HTTPException, Depends, UploadFile, File, Form
from pydantic import EmailStr

from jobboard.services.mongo_service import CandidateService, get_candidate_service, serialize_doc, serialize_docs
from jobboard.services.mongo_service import to_object_id
from jobboard.utils.file_upload import (
    save_upload, delete_file, check_profile_pic, check_resume, CANDIDATE_IMAGES_DIR, CANDIDATE_PDFS_DIR
)
from jobboard.services.notification_service import VALIDATION_MESSAGES, ValidationState, validate_interview_details
from jobboard.schemas.schemas import (
    CandidateStatus, CandidateStatusUpdate, CandidateUpdate, WithdrawRequest, MessageResponse
)

router = APIRouter(prefix="/candidates", tags=["Candidates"])
logger = logging.getLogger(__name__)


def _parse_json_list(raw: Optional[str], field: str) -> List[dict]:
    if not raw:
        return []
    try:
        value = json.loads(raw)
    except json.JSONDecodeError as e:
        raise HTTPException(status_code=400, detail=f"{field} must be a JSON list") from e
    if not isinstance(value, list):
        raise HTTPException(status_code=400, detail=f"{field} must be a JSON list")
    return value


def _as_datetime(value: Optional[date]) -> Optional[datetime]:
    # BSON stores datetimes only
    if value is None:
        return None
    return datetime(value.year, value.month, value.day)


@router.post("/apply", response_model=MessageResponse, status_code=201)
async def apply(
    job_id: str = Form(...),
    user_id: str = Form(...),
    first_name: str = Form(...),
    last_name: str = Form(...),
    email: EmailStr = Form(...),
    phone: Optional[str] = Form(None),
    dob: Optional[date] = Form(None),
    gender: Optional[str] = Form(None),
    address: Optional[str] = Form(None),
    city: Optional[str] = Form(None),
    zip_code: Optional[str] = Form(None),
    linkedin: Optional[str] = Form(None),
    github: Optional[str] = Form(None),
    education: Optional[str] = Form(None, description="JSON list of {institute, level, majors, session_from, session_to}"),
    experience: Optional[str] = Form(None, description="JSON list of {title, duration, company}"),
    profile_pic: Optional[UploadFile] = File(None),
    resume: Optional[UploadFile] = File(None),
    candidates: CandidateService = Depends(get_candidate_service)
):
    """Apply to a job. A user can apply to the same job only once."""
    if to_object_id(job_id) is None or to_object_id(user_id) is None:
        raise HTTPException(status_code=400, detail="Invalid job_id or user_id")

    data = {
        "job_id": job_id, "user_id": user_id, "first_name": first_name, "last_name": last_name,
        "email": email, "phone": phone, "dob": _as_datetime(dob), "gender": gender,
        "address": address, "city": city, "zip_code": zip_code, "linkedin": linkedin, "github": github,
        "education": _parse_json_list(education, "education"),
        "experience": _parse_json_list(experience, "experience"),
    }

    stored: List[str] = []
    try:
        if profile_pic is not None and profile_pic.filename:
            data["profile_pic"] = await save_upload(profile_pic, check_profile_pic, CANDIDATE_IMAGES_DIR)
            stored.append(data["profile_pic"])
        if resume is not None and resume.filename:
            data["resume"] = await save_upload(resume, check_resume, CANDIDATE_PDFS_DIR)
            stored.append(data["resume"])

        if candidates.find_application(job_id, user_id):
            raise HTTPException(status_code=400, detail="Already applied to this job")

        candidates.create(data)
    except Exception:
        # Files of a rejected application are not kept
        for path in stored:
            delete_file(path)
        raise

    return MessageResponse(message="Application submitted successfully")


@router.get("")
async def list_candidates(candidates: CandidateService = Depends(get_candidate_service)):
    """All applications with their job."""
    return serialize_docs(candidates.list_all())


@router.get("/user/{user_id}")
async def list_user_candidates(user_id: str, candidates: CandidateService = Depends(get_candidate_service)):
    """Applications submitted by one user."""
    return serialize_docs(candidates.list_by_user(user_id))


@router.get("/job/{job_id}")
async def list_job_candidates(job_id: str, candidates: CandidateService = Depends(get_candidate_service)):
    """Applications received by one job."""
    return serialize_docs(candidates.list_by_job(job_id))


@router.put("/withdraw/{candidate_id}")
async def withdraw(candidate_id: str, request: WithdrawRequest,
                   candidates: CandidateService = Depends(get_candidate_service)):
    """Withdraw an application. Only the applying user may withdraw."""
    candidate = candidates.get_by_id(candidate_id)
    if not candidate:
        raise HTTPException(status_code=404, detail="Application not found")
    if str(candidate.get("user_id")) != request.user_id:
        raise HTTPException(status_code=403, detail="Unauthorized")
    if candidate.get("status") == CandidateStatus.withdraw.value:
        raise HTTPException(status_code=400, detail="Application already withdrawn")

    doc = candidates.update(candidate_id, {"status": CandidateStatus.withdraw.value})
    return {"message": "Application withdrawn successfully", "candidate": serialize_doc(doc)}


@router.put("/{candidate_id}/status")
async def update_status(candidate_id: str, update: CandidateStatusUpdate,
                        candidates: CandidateService = Depends(get_candidate_service)):
    """Move an application to another status."""
    doc = candidates.update(candidate_id, {"status": update.status.value})
    if not doc:
        raise HTTPException(status_code=404, detail="Candidate not found")
    return {"message": "Status updated successfully", "candidate": serialize_doc(doc)}


@router.put("/{candidate_id}")
async def update_candidate(candidate_id: str, update: CandidateUpdate,
                           candidates: CandidateService = Depends(get_candidate_service)):
    """
    Update status and/or interview details.

    Interview date, time and link are all-or-nothing, checked like the
    ones sent with a template, and stored together in one update.
    """
    validation = validate_interview_details(update.interview_date, update.interview_time, update.interview_link)
    if validation.state is ValidationState.invalid:
        raise HTTPException(status_code=400, detail=VALIDATION_MESSAGES[validation.reason])

    status = update.status.value if update.status is not None else None
    if validation.override is not None:
        if not candidates.update_interview(candidate_id, validation.override, status=status):
            raise HTTPException(status_code=404, detail="Candidate not found")
        doc = candidates.get_by_id(candidate_id)
    elif status is not None:
        doc = candidates.update(candidate_id, {"status": status})
    else:
        doc = candidates.get_by_id(candidate_id)

    if not doc:
        raise HTTPException(status_code=404, detail="Candidate not found")
    return {"message": "Candidate updated successfully", "candidate": serialize_doc(doc)}


@router.delete("/{candidate_id}", response_model=MessageResponse)
async def delete_candidate(candidate_id: str, candidates: CandidateService = Depends(get_candidate_service)):
    """Delete an application together with its uploaded files."""
    candidate = candidates.get_by_id(candidate_id)
    if not candidate:
        raise HTTPException(status_code=404, detail="Candidate not found")

    delete_file(candidate.get("profile_pic"))
    delete_file(candidate.get("resume"))
    candidates.delete(candidate_id)
    return MessageResponse(message="Candidate deleted successfully")


@router.get("/{candidate_id}")
async def get_candidate(candidate_id: str, candidates: CandidateService = Depends(get_candidate_service)):
    """One application with its job."""
    candidate = candidates.get_with_job(candidate_id)
    if not candidate:
        raise HTTPException(status_code=404, detail="Candidate not found")
    return serialize_doc(candidate)
