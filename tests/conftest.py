"""
Shared fixtures: in-memory stand-ins for the candidate/template stores and
the mail transport, plus sample documents.
"""

import copy
import os
import tempfile
from datetime import datetime

# Uploads from route tests go to a throwaway directory (read once by get_settings)
os.environ.setdefault("UPLOAD_DIR", tempfile.mkdtemp(prefix="jobboard-uploads-"))
os.environ.setdefault("SMTP_HOST", "")

import pytest
from bson import ObjectId

from jobboard.services.email_service import EmailDeliveryError
from jobboard.services.notification_service import NotificationDispatcher


class FakeCandidateStore:
    """Candidate store keyed by id string; documents already carry their "job"."""

    def __init__(self):
        self.docs = {}
        self.interview_writes = 0

    def add(self, candidate_id: str, doc: dict):
        self.docs[candidate_id] = doc

    def get_with_job(self, candidate_id):
        doc = self.docs.get(candidate_id)
        return copy.deepcopy(doc) if doc is not None else None

    def update_interview(self, candidate_id, override):
        self.interview_writes += 1
        self.docs[candidate_id].update({
            "interview_date": datetime(override.date.year, override.date.month, override.date.day),
            "interview_time": override.time,
            "interview_link": override.link,
        })
        return True


class FakeTemplateStore:

    def __init__(self):
        self.docs = {}

    def add(self, template_id: str, doc: dict):
        self.docs[template_id] = doc

    def get_with_refs(self, template_id):
        doc = self.docs.get(template_id)
        return copy.deepcopy(doc) if doc is not None else None


class FakeMailer:
    """Records sent mail; set fail=True to simulate a transport error."""

    def __init__(self, fail: bool = False):
        self.fail = fail
        self.sent = []

    def send(self, to, subject, html_body):
        if self.fail:
            raise EmailDeliveryError("SMTP error: 550 mailbox unavailable")
        self.sent.append({"to": to, "subject": subject, "html": html_body})


CANDIDATE_ID = str(ObjectId())
TEMPLATE_ID = str(ObjectId())


@pytest.fixture
def job_doc():
    return {
        "_id": ObjectId(),
        "position": "Backend Engineer",
        "office": "Lisbon",
        "department": "Engineering",
        "job_type": "Full-time",
        "seats": 2,
        "salary_from": 50000.0,
        "salary_to": 70000.0,
        "status": "active",
    }


@pytest.fixture
def candidate_doc(job_doc):
    return {
        "_id": ObjectId(CANDIDATE_ID),
        "first_name": "Ana",
        "last_name": "Silva",
        "email": "ana@example.com",
        "phone": "+351 912 345 678",
        "dob": datetime(1995, 3, 7),
        "gender": "female",
        "address": "Rua Augusta 10",
        "city": "Lisbon",
        "zip_code": "1100-053",
        "applied_at": datetime(2024, 4, 2, 9, 15),
        "status": "interview",
        "job": job_doc,
    }


@pytest.fixture
def template_doc():
    return {
        "_id": ObjectId(TEMPLATE_ID),
        "name": "Interview Invitation",
        "database": ["Candidates", "Job", "Admin"],
        "content": "Hi {candidate_firstName}, your interview is {interview_date} at {interview_time}.",
        "creator": {"fullname": "Maria Costa", "email": "maria@acme.example"},
        "organization": {"company_name": "Acme"},
    }


@pytest.fixture
def candidates(candidate_doc):
    store = FakeCandidateStore()
    store.add(CANDIDATE_ID, candidate_doc)
    return store


@pytest.fixture
def templates(template_doc):
    store = FakeTemplateStore()
    store.add(TEMPLATE_ID, template_doc)
    return store


@pytest.fixture
def mailer():
    return FakeMailer()


@pytest.fixture
def dispatcher(candidates, templates, mailer):
    return NotificationDispatcher(candidates, templates, mailer)


@pytest.fixture
def candidate_id():
    return CANDIDATE_ID


@pytest.fixture
def template_id():
    return TEMPLATE_ID
