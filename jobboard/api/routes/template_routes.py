"""
Template Routes

GET /templates?organization_id= - An organization's templates
GET /templates/all - All templates
POST /templates - Create template
PUT /templates/{template_id} - Update template
DELETE /templates/{template_id} - Delete template
POST /templates/send - Send a template to a candidate (optionally with interview details)
"""

from fastapi import APIRouter, HTTPException, Depends, Query
from fastapi.concurrency import run_in_threadpool
from typing import Optional

from jobboard.services.mongo_service import TemplateService, get_template_service, serialize_doc, serialize_docs
from jobboard.services.mongo_service import to_object_id
from jobboard.services.notification_service import (
    NotificationDispatcher, NotificationError, ErrorKind, get_dispatcher
)
from jobboard.schemas.schemas import TemplateCreate, TemplateUpdate, SendTemplateRequest, MessageResponse

router = APIRouter(prefix="/templates", tags=["Templates"])

# Dispatch failure kind -> HTTP status
ERROR_STATUS = {
    ErrorKind.bad_request: 400,
    ErrorKind.not_found: 404,
    ErrorKind.delivery_failed: 500,
}


@router.get("")
async def list_templates(
    organization_id: Optional[str] = Query(None),
    templates: TemplateService = Depends(get_template_service)
):
    """Templates of one organization, with their creator."""
    if to_object_id(organization_id) is None:
        raise HTTPException(status_code=400, detail="Invalid or missing organization_id")
    return serialize_docs(templates.list_by_org(organization_id))


@router.get("/all")
async def list_all_templates(templates: TemplateService = Depends(get_template_service)):
    """Every template, with creator and organization."""
    return serialize_docs(templates.list_all())


@router.post("", status_code=201)
async def create_template(template: TemplateCreate, templates: TemplateService = Depends(get_template_service)):
    """Create a template. Content may use {placeholder} tokens."""
    doc = templates.create(
        name=template.name,
        database=[d.value for d in template.database],
        content=template.content,
        admin_id=template.admin_id,
        organization_id=template.organization_id
    )
    return {"message": "Template created successfully", "template": serialize_doc(doc)}


@router.put("/{template_id}")
async def update_template(template_id: str, update: TemplateUpdate,
                          templates: TemplateService = Depends(get_template_service)):
    """Update name, database list or content."""
    fields = update.model_dump(exclude_none=True, mode="json")
    doc = templates.update(template_id, fields)
    if not doc:
        raise HTTPException(status_code=404, detail="Template not found")
    return {"message": "Template updated", "template": serialize_doc(doc)}


@router.delete("/{template_id}", response_model=MessageResponse)
async def delete_template(template_id: str, templates: TemplateService = Depends(get_template_service)):
    if not templates.delete(template_id):
        raise HTTPException(status_code=404, detail="Template not found")
    return MessageResponse(message="Template deleted")


@router.post("/send", response_model=MessageResponse)
async def send_template(request: SendTemplateRequest, dispatcher: NotificationDispatcher = Depends(get_dispatcher)):
    """
    Resolve a template for a candidate and email it.

    Interview date/time/link are optional but must be sent together; when
    present the candidate must be in "interview" status, and the details are
    saved on the candidate only after the email went out.
    """
    if not request.candidate_id or not request.template_id:
        raise HTTPException(status_code=400, detail="Missing candidate_id or template_id")

    try:
        # Database and SMTP calls block; keep them off the event loop
        result = await run_in_threadpool(
            dispatcher.dispatch,
            request.candidate_id,
            request.template_id,
            request.interview_date,
            request.interview_time,
            request.interview_link
        )
    except NotificationError as e:
        raise HTTPException(status_code=ERROR_STATUS[e.kind], detail=e.message) from e

    return MessageResponse(message=f"Email sent to {result.display_name}")
