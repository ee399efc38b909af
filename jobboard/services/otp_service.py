"""
OTP Service - short-lived one-time codes for email confirmation.

Each pending code is its own document keyed by (purpose, email):
- the code is stored as a bcrypt hash, never in clear
- expires_at is enforced on read and purged by a TTL index
- issuing again for the same key replaces the previous code
- a code must be verified before the follow-up step may consume it
- too many wrong guesses revoke the code
"""

import logging
import secrets
from datetime import datetime, timedelta
from enum import Enum
from pymongo.collection import Collection

from jobboard.core.auth import hash_password, verify_password
from jobboard.core.config import get_settings
from jobboard.db.mongodb import get_collection, COLLECTIONS

logger = logging.getLogger(__name__)

MAX_ATTEMPTS = 5


class OtpPurpose(str, Enum):
    registration = "registration"
    user_password_reset = "user_password_reset"
    admin_password_reset = "admin_password_reset"


def generate_code(length: int) -> str:
    """Numeric code of exactly `length` digits (no leading zero)."""
    low = 10 ** (length - 1)
    return str(low + secrets.randbelow(9 * low))


class OtpService:

    def __init__(self, collection: Collection = None, expire_minutes: int = None, length: int = None):
        settings = get_settings()
        self.collection: Collection = collection if collection is not None else get_collection(COLLECTIONS["otps"])
        self.expire_minutes = expire_minutes or settings.otp_expire_minutes
        self.length = length or settings.otp_length

    @staticmethod
    def _key(purpose: OtpPurpose, email: str) -> dict:
        return {"purpose": purpose.value, "email": email.lower()}

    def issue(self, purpose: OtpPurpose, email: str) -> str:
        """Create (or replace) the pending code for this purpose and email. Returns the clear code."""
        code = generate_code(self.length)
        now = datetime.utcnow()
        self.collection.update_one(
            self._key(purpose, email),
            {"$set": {
                "code_hash": hash_password(code),
                "verified": False,
                "attempts": 0,
                "created_at": now,
                "expires_at": now + timedelta(minutes=self.expire_minutes)
            }},
            upsert=True
        )
        logger.info(f"Issued {purpose.value} code for {email.lower()}")
        return code

    def verify(self, purpose: OtpPurpose, email: str, code: str) -> bool:
        """
        Check a submitted code. A match marks the entry verified.

        Every mismatch counts; after MAX_ATTEMPTS the entry is dropped and
        a new code has to be issued.
        """
        doc = self.collection.find_one(self._key(purpose, email))
        if not doc or doc["expires_at"] <= datetime.utcnow():
            return False
        if not verify_password(code.strip(), doc["code_hash"]):
            attempts = doc.get("attempts", 0) + 1
            if attempts >= MAX_ATTEMPTS:
                self.collection.delete_one({"_id": doc["_id"]})
                logger.warning(f"Too many wrong {purpose.value} codes for {email.lower()}, code revoked")
            else:
                self.collection.update_one({"_id": doc["_id"]}, {"$inc": {"attempts": 1}})
            return False
        self.collection.update_one({"_id": doc["_id"]}, {"$set": {"verified": True}})
        return True

    def consume(self, purpose: OtpPurpose, email: str) -> bool:
        """Delete a verified, unexpired entry. False when there is none to consume."""
        result = self.collection.delete_one({
            **self._key(purpose, email),
            "verified": True,
            "expires_at": {"$gt": datetime.utcnow()}
        })
        return result.deleted_count > 0


def get_otp_service() -> OtpService:
    """FastAPI dependency."""
    return OtpService()
