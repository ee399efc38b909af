"""HTTP tests for /api/templates, with stores and mail transport replaced."""

from unittest.mock import MagicMock

import pytest
from bson import ObjectId
from fastapi.testclient import TestClient

from conftest import FakeMailer
from jobboard.main import app
from jobboard.services.mongo_service import get_template_service
from jobboard.services.notification_service import NotificationDispatcher, get_dispatcher

LINK = "https://meet.example/abc"


@pytest.fixture
def client():
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def use_dispatcher(dispatcher):
    app.dependency_overrides[get_dispatcher] = lambda: dispatcher
    return dispatcher


@pytest.fixture
def template_store():
    store = MagicMock()
    app.dependency_overrides[get_template_service] = lambda: store
    return store


class TestSendTemplate:

    def test_send_with_interview_details(self, client, use_dispatcher, candidates, mailer,
                                         candidate_id, template_id):
        response = client.post("/api/templates/send", json={
            "candidate_id": candidate_id,
            "template_id": template_id,
            "interview_date": "2024-05-01",
            "interview_time": "14:30",
            "interview_link": LINK,
        })

        assert response.status_code == 200
        assert response.json()["message"] == "Email sent to Ana Silva"
        assert "Hi Ana, your interview is 5/1/2024 at 14:30." in mailer.sent[0]["html"]
        assert candidates.docs[candidate_id]["interview_link"] == LINK

    def test_missing_ids(self, client, use_dispatcher, template_id):
        response = client.post("/api/templates/send", json={"template_id": template_id})

        assert response.status_code == 400
        assert response.json()["detail"] == "Missing candidate_id or template_id"

    def test_incomplete_interview_group(self, client, use_dispatcher, mailer, candidate_id, template_id):
        response = client.post("/api/templates/send", json={
            "candidate_id": candidate_id,
            "template_id": template_id,
            "interview_date": "2024-05-01",
        })

        assert response.status_code == 400
        assert mailer.sent == []

    def test_wrong_status(self, client, use_dispatcher, candidates, candidate_id, template_id):
        candidates.docs[candidate_id]["status"] = "hired"

        response = client.post("/api/templates/send", json={
            "candidate_id": candidate_id,
            "template_id": template_id,
            "interview_date": "2024-05-01",
            "interview_time": "14:30",
            "interview_link": LINK,
        })

        assert response.status_code == 400

    def test_unknown_candidate(self, client, use_dispatcher, template_id):
        response = client.post("/api/templates/send", json={
            "candidate_id": str(ObjectId()),
            "template_id": template_id,
        })

        assert response.status_code == 404
        assert response.json()["detail"] == "Candidate not found"

    def test_delivery_failure(self, client, candidates, templates, candidate_id, template_id):
        app.dependency_overrides[get_dispatcher] = lambda: NotificationDispatcher(
            candidates, templates, FakeMailer(fail=True)
        )

        response = client.post("/api/templates/send", json={
            "candidate_id": candidate_id,
            "template_id": template_id,
            "interview_date": "2024-05-01",
            "interview_time": "14:30",
            "interview_link": LINK,
        })

        assert response.status_code == 500
        assert response.json()["detail"].startswith("Failed to send email")
        assert candidates.interview_writes == 0


class TestTemplateCrud:

    def test_list_requires_organization(self, client, template_store):
        assert client.get("/api/templates").status_code == 400
        assert client.get("/api/templates", params={"organization_id": "bad"}).status_code == 400
        template_store.list_by_org.assert_not_called()

    def test_list_by_organization(self, client, template_store):
        org_id = ObjectId()
        template_store.list_by_org.return_value = [
            {"_id": ObjectId(), "name": "Invite", "organization_id": org_id, "creator": None}
        ]

        response = client.get("/api/templates", params={"organization_id": str(org_id)})

        assert response.status_code == 200
        body = response.json()
        assert body[0]["name"] == "Invite"
        assert body[0]["organization_id"] == str(org_id)

    def test_create(self, client, template_store):
        admin_id, org_id = str(ObjectId()), str(ObjectId())
        template_store.create.return_value = {"_id": ObjectId(), "name": "Invite"}

        response = client.post("/api/templates", json={
            "name": "Invite",
            "database": ["Candidates", "Job"],
            "content": "Hi {candidate_firstName}",
            "admin_id": admin_id,
            "organization_id": org_id,
        })

        assert response.status_code == 201
        kwargs = template_store.create.call_args[1]
        assert kwargs["database"] == ["Candidates", "Job"]
        assert kwargs["organization_id"] == org_id

    def test_create_rejects_unknown_database(self, client, template_store):
        response = client.post("/api/templates", json={
            "name": "Invite",
            "database": ["Payroll"],
            "content": "Hi",
            "admin_id": str(ObjectId()),
            "organization_id": str(ObjectId()),
        })

        assert response.status_code == 422
        template_store.create.assert_not_called()

    def test_multi_line_name_is_rejected(self, client, template_store):
        response = client.post("/api/templates", json={
            "name": "Invite\nBcc: x@evil.example",
            "database": ["Candidates"],
            "content": "Hi",
            "admin_id": str(ObjectId()),
            "organization_id": str(ObjectId()),
        })
        renamed = client.put(f"/api/templates/{ObjectId()}", json={"name": "Invite\r\nX: 1"})

        assert response.status_code == 422
        assert renamed.status_code == 422
        template_store.create.assert_not_called()
        template_store.update.assert_not_called()

    def test_update_missing_template(self, client, template_store):
        template_store.update.return_value = None

        response = client.put(f"/api/templates/{ObjectId()}", json={"name": "New"})

        assert response.status_code == 404

    def test_delete(self, client, template_store):
        template_store.delete.return_value = True

        response = client.delete(f"/api/templates/{ObjectId()}")

        assert response.status_code == 200
        assert response.json()["message"] == "Template deleted"
