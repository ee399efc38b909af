"""
MongoDB Service - CRUD operations for document collections.

Collections in this database:
1. organizations - Recruiter accounts (also the owner of jobs, profiles, templates)
2. users         - Job-seeker accounts
3. jobs          - Job postings
4. candidates    - Applications of users to jobs
5. profiles      - Public company profiles
6. templates     - Notification templates with {placeholder} tokens

References between documents are stored as ObjectId and expanded
("populated") here, so routes receive ready-to-use documents.
"""

from datetime import datetime
from typing import Optional, List, Dict, Any, Iterable
from bson import ObjectId
from pymongo import DESCENDING, ReturnDocument
from pymongo.collection import Collection

from jobboard.db.mongodb import get_collection, COLLECTIONS


# ============================================================
# HELPERS: ObjectId handling and JSON serialization
# ============================================================

def to_object_id(value: Any) -> Optional[ObjectId]:
    """Convert a string id to ObjectId. Returns None for malformed ids."""
    if isinstance(value, ObjectId):
        return value
    if isinstance(value, str) and ObjectId.is_valid(value):
        return ObjectId(value)
    return None


def serialize_doc(doc: Any) -> Any:
    """Convert MongoDB document (including nested refs) to JSON-serializable data."""
    if doc is None:
        return None
    if isinstance(doc, ObjectId):
        return str(doc)
    if isinstance(doc, dict):
        return {key: serialize_doc(value) for key, value in doc.items()}
    if isinstance(doc, list):
        return [serialize_doc(item) for item in doc]
    return doc


def serialize_docs(docs: Iterable[dict]) -> list:
    """Convert list of MongoDB documents to JSON-serializable list."""
    return [serialize_doc(doc) for doc in docs]


def _lookup(collection: Collection, ids: Iterable[Any], projection: dict = None) -> Dict[ObjectId, dict]:
    """Fetch referenced documents in one query, keyed by _id."""
    wanted = list({oid for oid in (to_object_id(i) for i in ids) if oid is not None})
    if not wanted:
        return {}
    return {doc["_id"]: doc for doc in collection.find({"_id": {"$in": wanted}}, projection)}


# ============================================================
# ORGANIZATIONS COLLECTION
# Recruiter accounts
# ============================================================

class OrganizationService:
    """
    Handles organization (recruiter/admin) accounts.
    """

    def __init__(self, collection: Collection = None):
        self.collection: Collection = collection if collection is not None else get_collection(COLLECTIONS["organizations"])

    def get_by_email(self, email: str) -> Optional[dict]:
        return self.collection.find_one({"email": email.lower()})

    def get_by_id(self, org_id: str) -> Optional[dict]:
        oid = to_object_id(org_id)
        if oid is None:
            return None
        return self.collection.find_one({"_id": oid})

    def create(self, fullname: str, email: str, company_name: str, password_hash: str,
               verification_token: str) -> str:
        """Insert an unverified organization. Returns its id."""
        doc = {
            "fullname": fullname,
            "email": email.lower(),
            "company_name": company_name,
            "password": password_hash,
            "is_verified": False,
            "verification_token": verification_token,
            "created_at": datetime.utcnow()
        }
        result = self.collection.insert_one(doc)
        return str(result.inserted_id)

    def mark_verified(self, org_id: ObjectId) -> bool:
        """Mark email as verified and drop the verification token."""
        result = self.collection.update_one(
            {"_id": org_id},
            {"$set": {"is_verified": True, "verification_token": None}}
        )
        return result.modified_count > 0

    def update_password(self, email: str, password_hash: str) -> bool:
        result = self.collection.update_one(
            {"email": email.lower()},
            {"$set": {"password": password_hash}}
        )
        return result.matched_count > 0


# ============================================================
# USERS COLLECTION
# Job-seeker accounts
# ============================================================

class UserService:
    """
    Handles job-seeker accounts.
    """

    def __init__(self, collection: Collection = None):
        self.collection: Collection = collection if collection is not None else get_collection(COLLECTIONS["users"])

    def get_by_email(self, email: str) -> Optional[dict]:
        return self.collection.find_one({"email": email.lower()})

    def get_public(self, user_id: str) -> Optional[dict]:
        """Fetch a user without the password hash."""
        oid = to_object_id(user_id)
        if oid is None:
            return None
        return self.collection.find_one({"_id": oid}, {"password": 0})

    def create(self, fullname: str, email: str, password_hash: str) -> str:
        """Insert a user whose email was confirmed by one-time code."""
        doc = {
            "fullname": fullname,
            "email": email.lower(),
            "password": password_hash,
            "is_email_verified": True,
            "created_at": datetime.utcnow()
        }
        result = self.collection.insert_one(doc)
        return str(result.inserted_id)

    def update_password(self, email: str, password_hash: str) -> bool:
        result = self.collection.update_one(
            {"email": email.lower()},
            {"$set": {"password": password_hash}}
        )
        return result.matched_count > 0


# ============================================================
# JOBS COLLECTION
# ============================================================

class JobService:
    """
    Handles job postings.
    """

    def __init__(self, collection: Collection = None):
        self.collection: Collection = collection if collection is not None else get_collection(COLLECTIONS["jobs"])

    def create(self, data: dict) -> dict:
        """
        Insert a job posting. New postings are always 'active'.

        Returns:
            The stored document (with _id)
        """
        now = datetime.utcnow()
        doc = {
            **data,
            "organization_id": to_object_id(data["organization_id"]),
            "status": "active",
            "created_at": now,
            "updated_at": now
        }
        result = self.collection.insert_one(doc)
        doc["_id"] = result.inserted_id
        return doc

    def list_jobs(self, organization_id: str = None) -> List[dict]:
        """All jobs (or one organization's jobs), newest first."""
        query = {}
        if organization_id is not None:
            query["organization_id"] = to_object_id(organization_id)
        return list(self.collection.find(query).sort("created_at", DESCENDING))

    def get_by_id(self, job_id: str) -> Optional[dict]:
        oid = to_object_id(job_id)
        if oid is None:
            return None
        return self.collection.find_one({"_id": oid})

    def update(self, job_id: str, fields: dict) -> Optional[dict]:
        """Apply a partial update. Returns the updated document or None."""
        oid = to_object_id(job_id)
        if oid is None:
            return None
        return self.collection.find_one_and_update(
            {"_id": oid},
            {"$set": {**fields, "updated_at": datetime.utcnow()}},
            return_document=ReturnDocument.AFTER
        )


# ============================================================
# CANDIDATES COLLECTION
# Applications; the job reference is expanded into "job"
# ============================================================

class CandidateService:
    """
    Handles candidate applications.
    Read methods expand job_id into a "job" sub-document (None when the job is gone).
    """

    def __init__(self, collection: Collection = None, jobs: Collection = None):
        self.collection: Collection = collection if collection is not None else get_collection(COLLECTIONS["candidates"])
        self.jobs: Collection = jobs if jobs is not None else get_collection(COLLECTIONS["jobs"])

    def _with_jobs(self, docs: List[dict]) -> List[dict]:
        jobs = _lookup(self.jobs, [doc.get("job_id") for doc in docs])
        for doc in docs:
            doc["job"] = jobs.get(doc.get("job_id"))
        return docs

    def find_application(self, job_id: str, user_id: str) -> Optional[dict]:
        """Existing application of a user to a job, if any."""
        return self.collection.find_one({
            "job_id": to_object_id(job_id),
            "user_id": to_object_id(user_id)
        })

    def create(self, data: dict) -> str:
        """Insert an application. Status always starts as 'applied'."""
        doc = {
            **data,
            "job_id": to_object_id(data["job_id"]),
            "user_id": to_object_id(data["user_id"]),
            "status": "applied",
            "applied_at": datetime.utcnow()
        }
        result = self.collection.insert_one(doc)
        return str(result.inserted_id)

    def get_by_id(self, candidate_id: str) -> Optional[dict]:
        oid = to_object_id(candidate_id)
        if oid is None:
            return None
        return self.collection.find_one({"_id": oid})

    def get_with_job(self, candidate_id: str) -> Optional[dict]:
        """Fetch one candidate with its job expanded."""
        doc = self.get_by_id(candidate_id)
        if doc is None:
            return None
        return self._with_jobs([doc])[0]

    def list_all(self) -> List[dict]:
        return self._with_jobs(list(self.collection.find()))

    def list_by_user(self, user_id: str) -> List[dict]:
        oid = to_object_id(user_id)
        if oid is None:
            return []
        return self._with_jobs(list(self.collection.find({"user_id": oid})))

    def list_by_job(self, job_id: str) -> List[dict]:
        oid = to_object_id(job_id)
        if oid is None:
            return []
        return self._with_jobs(list(self.collection.find({"job_id": oid})))

    def update(self, candidate_id: str, fields: dict) -> Optional[dict]:
        """Apply a partial update. Returns the updated document or None."""
        oid = to_object_id(candidate_id)
        if oid is None:
            return None
        return self.collection.find_one_and_update(
            {"_id": oid},
            {"$set": fields},
            return_document=ReturnDocument.AFTER
        )

    def update_interview(self, candidate_id: str, override, status: str = None) -> bool:
        """
        Store interview date, time and link (and optionally a new status) as one atomic $set.

        Concurrent writers for the same candidate: last write wins.
        """
        oid = to_object_id(candidate_id)
        if oid is None:
            return False
        fields = {
            "interview_date": datetime(override.date.year, override.date.month, override.date.day),
            "interview_time": override.time,
            "interview_link": override.link
        }
        if status is not None:
            fields["status"] = status
        result = self.collection.update_one({"_id": oid}, {"$set": fields})
        return result.matched_count > 0

    def delete(self, candidate_id: str) -> bool:
        oid = to_object_id(candidate_id)
        if oid is None:
            return False
        result = self.collection.delete_one({"_id": oid})
        return result.deleted_count > 0


# ============================================================
# PROFILES COLLECTION
# One public company profile per organization
# ============================================================

class ProfileService:
    """
    Handles company profiles.
    """

    def __init__(self, collection: Collection = None):
        self.collection: Collection = collection if collection is not None else get_collection(COLLECTIONS["profiles"])

    def create(self, data: dict) -> dict:
        doc = {
            **data,
            "organization_id": to_object_id(data["organization_id"]),
            "created_at": datetime.utcnow()
        }
        result = self.collection.insert_one(doc)
        doc["_id"] = result.inserted_id
        return doc

    def get_by_org(self, organization_id: str) -> Optional[dict]:
        oid = to_object_id(organization_id)
        if oid is None:
            return None
        return self.collection.find_one({"organization_id": oid})

    def update_by_org(self, organization_id: str, fields: dict) -> Optional[dict]:
        oid = to_object_id(organization_id)
        if oid is None:
            return None
        return self.collection.find_one_and_update(
            {"organization_id": oid},
            {"$set": fields},
            return_document=ReturnDocument.AFTER
        )


# ============================================================
# TEMPLATES COLLECTION
# creator / organization references point at organizations
# ============================================================

CREATOR_FIELDS = {"fullname": 1, "email": 1}
ORGANIZATION_FIELDS = {"company_name": 1}


class TemplateService:
    """
    Handles notification templates.
    Read methods expand created_by into "creator" and organization_id into "organization".
    """

    def __init__(self, collection: Collection = None, organizations: Collection = None):
        self.collection: Collection = collection if collection is not None else get_collection(COLLECTIONS["templates"])
        self.organizations: Collection = organizations if organizations is not None else get_collection(COLLECTIONS["organizations"])

    def _expand(self, docs: List[dict], with_organization: bool = True) -> List[dict]:
        creators = _lookup(self.organizations, [d.get("created_by") for d in docs], CREATOR_FIELDS)
        orgs = {}
        if with_organization:
            orgs = _lookup(self.organizations, [d.get("organization_id") for d in docs], ORGANIZATION_FIELDS)
        for doc in docs:
            doc["creator"] = creators.get(doc.get("created_by"))
            if with_organization:
                doc["organization"] = orgs.get(doc.get("organization_id"))
        return docs

    def list_by_org(self, organization_id: str) -> List[dict]:
        docs = list(self.collection.find({"organization_id": to_object_id(organization_id)}))
        return self._expand(docs, with_organization=False)

    def list_all(self) -> List[dict]:
        return self._expand(list(self.collection.find()))

    def get_with_refs(self, template_id: str) -> Optional[dict]:
        """Fetch one template with creator and organization expanded."""
        oid = to_object_id(template_id)
        if oid is None:
            return None
        doc = self.collection.find_one({"_id": oid})
        if doc is None:
            return None
        return self._expand([doc])[0]

    def create(self, name: str, database: List[str], content: str, admin_id: str,
               organization_id: str) -> dict:
        doc = {
            "name": name,
            "database": database,
            "content": content,
            "created_by": to_object_id(admin_id),
            "organization_id": to_object_id(organization_id),
            "last_modified": datetime.utcnow()
        }
        result = self.collection.insert_one(doc)
        doc["_id"] = result.inserted_id
        return doc

    def update(self, template_id: str, fields: dict) -> Optional[dict]:
        oid = to_object_id(template_id)
        if oid is None:
            return None
        return self.collection.find_one_and_update(
            {"_id": oid},
            {"$set": {**fields, "last_modified": datetime.utcnow()}},
            return_document=ReturnDocument.AFTER
        )

    def delete(self, template_id: str) -> bool:
        oid = to_object_id(template_id)
        if oid is None:
            return False
        result = self.collection.delete_one({"_id": oid})
        return result.deleted_count > 0


# ============================================================
# FASTAPI DEPENDENCIES
# ============================================================

def get_organization_service() -> OrganizationService:
    return OrganizationService()


def get_user_service() -> UserService:
    return UserService()


def get_job_service() -> JobService:
    return JobService()


def get_candidate_service() -> CandidateService:
    return CandidateService()


def get_profile_service() -> ProfileService:
    return ProfileService()


def get_template_service() -> TemplateService:
    return TemplateService()
