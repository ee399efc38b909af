"""
Notification Service - template emails to candidates.

One dispatch runs as a short sequential pipeline:
1. Validate the optional interview override (date, time, link)
2. Load the candidate (job expanded) and the template (creator/organization expanded)
3. Check business rules (email on file, interview status)
4. Resolve {placeholder} tokens in the template content
5. Send through the mail transport
6. Persist the interview override - only after the send succeeded

Every failure is raised as NotificationError before any write happens.
"""

import logging
import re
from dataclasses import dataclass
from datetime import date, datetime
from enum import Enum
from typing import Any, Callable, Dict, Optional

from jobboard.services.email_service import EmailDeliveryError

logger = logging.getLogger(__name__)

NOT_AVAILABLE = "N/A"
INTERVIEW_STATUS = "interview"

TOKEN_PATTERN = re.compile(r"\{(\w+)\}")
TIME_PATTERN = re.compile(r"([01]\d|2[0-3]):[0-5]\d")
LINK_PATTERN = re.compile(r"https?://.+")

EMAIL_ENVELOPE = """
<div style="font-family: Arial, sans-serif; white-space: pre-wrap;">
  <style>p {{ margin: 10px 0; }}</style>
  {body}
</div>
"""


# ============================================================
# ERRORS
# ============================================================

class ErrorKind(str, Enum):
    bad_request = "BadRequest"
    not_found = "NotFound"
    delivery_failed = "DeliveryFailed"


class NotificationError(Exception):
    """A terminal dispatch failure with a machine-readable kind."""

    def __init__(self, kind: ErrorKind, message: str):
        super().__init__(message)
        self.kind = kind
        self.message = message


# ============================================================
# INTERVIEW DETAIL VALIDATION
# ============================================================

class ValidationState(str, Enum):
    absent = "absent"
    valid = "valid"
    invalid = "invalid"


@dataclass(frozen=True)
class InterviewOverride:
    date: date
    time: str
    link: str


@dataclass(frozen=True)
class InterviewValidation:
    state: ValidationState
    override: Optional[InterviewOverride] = None
    reason: Optional[str] = None


VALIDATION_MESSAGES = {
    "group-incomplete": "All interview details (date, time, link) must be provided together",
    "date-format": "Invalid interview_date format",
    "time-format": 'Invalid interview_time format (e.g., "14:30")',
    "link-format": "Invalid interview_link format (must be a valid http(s) URL)",
}


def _is_present(value: Any) -> bool:
    return value is not None and str(value).strip() != ""


def parse_calendar_date(value: Any) -> Optional[date]:
    """Parse YYYY-MM-DD (or an ISO datetime) into a date. None when unparseable."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    text = str(value).strip()
    try:
        return date.fromisoformat(text)
    except ValueError:
        pass
    try:
        return datetime.fromisoformat(text.replace("Z", "+00:00")).date()
    except ValueError:
        return None


def validate_interview_details(interview_date: Any = None, interview_time: Any = None,
                               interview_link: Any = None) -> InterviewValidation:
    """
    Check the interview triple as a group.

    Returns:
        absent  - none supplied
        invalid - some but not all supplied, or a field is malformed (see reason)
        valid   - all supplied and well-formed; override carries the parsed values
    """
    present = [_is_present(v) for v in (interview_date, interview_time, interview_link)]
    if not any(present):
        return InterviewValidation(ValidationState.absent)
    if not all(present):
        return InterviewValidation(ValidationState.invalid, reason="group-incomplete")

    parsed_date = parse_calendar_date(interview_date)
    if parsed_date is None:
        return InterviewValidation(ValidationState.invalid, reason="date-format")

    time_text = str(interview_time).strip()
    if not TIME_PATTERN.fullmatch(time_text):
        return InterviewValidation(ValidationState.invalid, reason="time-format")

    link_text = str(interview_link).strip()
    if not LINK_PATTERN.fullmatch(link_text):
        return InterviewValidation(ValidationState.invalid, reason="link-format")

    return InterviewValidation(
        ValidationState.valid,
        override=InterviewOverride(date=parsed_date, time=time_text, link=link_text)
    )


# ============================================================
# PLACEHOLDER RESOLUTION
# ============================================================

@dataclass
class PlaceholderContext:
    candidate: dict
    job: Optional[dict]
    creator: Optional[dict]
    organization: Optional[dict]
    override: Optional[InterviewOverride]


def format_date(value: date) -> str:
    """Month/day/year without zero padding, e.g. 5/1/2024."""
    return f"{value.month}/{value.day}/{value.year}"


def render_value(value: Any) -> str:
    """Text for one placeholder. Missing or empty values become N/A."""
    if value is None:
        return NOT_AVAILABLE
    if isinstance(value, (datetime, date)):
        return format_date(value)
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value) or NOT_AVAILABLE


def _field(entity: str, key: str) -> Callable[[PlaceholderContext], Any]:
    def resolve(ctx: PlaceholderContext) -> Any:
        source = getattr(ctx, entity)
        return source.get(key) if source else None
    return resolve


def _interview(key: str, attr: str) -> Callable[[PlaceholderContext], Any]:
    # Override wins over whatever the candidate has on record
    def resolve(ctx: PlaceholderContext) -> Any:
        if ctx.override is not None:
            return getattr(ctx.override, attr)
        return ctx.candidate.get(key)
    return resolve


PLACEHOLDERS: Dict[str, Callable[[PlaceholderContext], Any]] = {
    # Candidate
    "candidate_firstName": _field("candidate", "first_name"),
    "candidate_lastName": _field("candidate", "last_name"),
    "candidate_email": _field("candidate", "email"),
    "candidate_phone": _field("candidate", "phone"),
    "candidate_dob": _field("candidate", "dob"),
    "candidate_gender": _field("candidate", "gender"),
    "candidate_address": _field("candidate", "address"),
    "candidate_city": _field("candidate", "city"),
    "candidate_zipCode": _field("candidate", "zip_code"),
    "candidate_appliedAt": _field("candidate", "applied_at"),
    # Job
    "job_position": _field("job", "position"),
    "job_office": _field("job", "office"),
    "job_department": _field("job", "department"),
    "job_jobType": _field("job", "job_type"),
    "job_salaryFrom": _field("job", "salary_from"),
    "job_salaryTo": _field("job", "salary_to"),
    "job_status": _field("job", "status"),
    # Interview
    "interview_date": _interview("interview_date", "date"),
    "interview_time": _interview("interview_time", "time"),
    "interview_link": _interview("interview_link", "link"),
    # Admin / organization
    "admin_fullname": _field("creator", "fullname"),
    "admin_email": _field("creator", "email"),
    "admin_company_name": _field("organization", "company_name"),
}


def resolve_placeholders(content: str, candidate: dict, template: dict,
                         override: Optional[InterviewOverride] = None) -> str:
    """
    Replace every known {token} in content in a single pass.

    Unknown tokens are left exactly as written.
    """
    ctx = PlaceholderContext(
        candidate=candidate,
        job=candidate.get("job"),
        creator=template.get("creator"),
        organization=template.get("organization"),
        override=override
    )

    def replace(match: re.Match) -> str:
        resolver = PLACEHOLDERS.get(match.group(1))
        if resolver is None:
            return match.group(0)
        return render_value(resolver(ctx))

    return TOKEN_PATTERN.sub(replace, content or "")


def render_email_body(text: str) -> str:
    """Wrap resolved text in the HTML envelope sent to candidates."""
    return EMAIL_ENVELOPE.format(body=text)


# ============================================================
# DISPATCH
# ============================================================

@dataclass(frozen=True)
class DispatchResult:
    display_name: str


def display_name(candidate: dict) -> str:
    return f"{candidate.get('first_name') or ''} {candidate.get('last_name') or ''}".strip()


class NotificationDispatcher:
    """
    Sends one template to one candidate.

    Collaborators:
        candidates: get_with_job(id) -> dict | None, update_interview(id, override)
        templates:  get_with_refs(id) -> dict | None
        mailer:     send(to, subject, html_body), raises EmailDeliveryError
    """

    def __init__(self, candidates, templates, mailer):
        self.candidates = candidates
        self.templates = templates
        self.mailer = mailer

    def dispatch(self, candidate_id: str, template_id: str, interview_date: Any = None,
                 interview_time: Any = None, interview_link: Any = None) -> DispatchResult:
        validation = validate_interview_details(interview_date, interview_time, interview_link)
        if validation.state is ValidationState.invalid:
            raise NotificationError(ErrorKind.bad_request, VALIDATION_MESSAGES[validation.reason])
        override = validation.override

        candidate = self.candidates.get_with_job(candidate_id)
        if candidate is None:
            raise NotificationError(ErrorKind.not_found, "Candidate not found")
        template = self.templates.get_with_refs(template_id)
        if template is None:
            raise NotificationError(ErrorKind.not_found, "Template not found")

        recipient = candidate.get("email")
        if not recipient:
            raise NotificationError(ErrorKind.bad_request, "Candidate email is missing")
        if override is not None and candidate.get("status") != INTERVIEW_STATUS:
            raise NotificationError(
                ErrorKind.bad_request,
                'Interview details can only be sent to candidates with "interview" status'
            )

        body = render_email_body(resolve_placeholders(template.get("content"), candidate, template, override))

        try:
            self.mailer.send(recipient, template.get("name") or "", body)
        except EmailDeliveryError as e:
            logger.error(f"Template {template_id} not delivered to candidate {candidate_id}: {e}")
            raise NotificationError(ErrorKind.delivery_failed, f"Failed to send email: {e}") from e

        if override is not None:
            self.candidates.update_interview(candidate_id, override)

        name = display_name(candidate)
        logger.info(f"Template {template_id} sent to candidate {candidate_id}")
        return DispatchResult(display_name=name)


def get_dispatcher() -> NotificationDispatcher:
    """FastAPI dependency wiring the Mongo stores and SMTP transport."""
    from jobboard.services.email_service import EmailService
    from jobboard.services.mongo_service import CandidateService, TemplateService

    return NotificationDispatcher(CandidateService(), TemplateService(), EmailService())
