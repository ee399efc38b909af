"""
Job Routes

POST /jobs/create-job - Create job posting
GET /jobs - List jobs (all, or one organization's with ?organization_id=)
GET /jobs/{job_id} - Get job details
PUT /jobs/{job_id} - Update job
"""

from fastapi import APIRouter, HTTPException, Depends, Query
from typing import Optional

from jobboard.services.mongo_service import JobService, get_job_service, serialize_doc, serialize_docs
from jobboard.schemas.schemas import JobCreate, JobUpdate

router = APIRouter(prefix="/jobs", tags=["Jobs"])


@router.post("/create-job", status_code=201)
async def create_job(job: JobCreate, jobs: JobService = Depends(get_job_service)):
    """Create a new job posting for an organization. New jobs are active."""
    doc = jobs.create(job.model_dump())
    return {"message": "Job created successfully", "job": serialize_doc(doc)}


@router.get("")
async def list_jobs(
    organization_id: Optional[str] = Query(None, description="Only this organization's jobs"),
    jobs: JobService = Depends(get_job_service)
):
    """List job postings, newest first."""
    results = jobs.list_jobs(organization_id)
    if not results:
        detail = "No jobs found for this organization" if organization_id else "No jobs found"
        raise HTTPException(status_code=404, detail=detail)
    return serialize_docs(results)


@router.get("/{job_id}")
async def get_job(job_id: str, jobs: JobService = Depends(get_job_service)):
    """Get details of a specific job."""
    doc = jobs.get_by_id(job_id)
    if not doc:
        raise HTTPException(status_code=404, detail="Job not found")
    return serialize_doc(doc)


@router.put("/{job_id}")
async def update_job(job_id: str, update: JobUpdate, jobs: JobService = Depends(get_job_service)):
    """Update a job posting. Only provided fields are changed."""
    fields = update.model_dump(exclude_none=True, mode="json")
    doc = jobs.update(job_id, fields) if fields else jobs.get_by_id(job_id)
    if not doc:
        raise HTTPException(status_code=404, detail="Job not found")

    return {"success": True, "message": "Job updated successfully", "data": serialize_doc(doc)}
