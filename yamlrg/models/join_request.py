"""Join request models"""

from enum import Enum
from typing import Literal, Optional

from yamlrg.models.base import DocumentModel


class JoinRequestStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class JoinRequest(DocumentModel):
    id: Optional[str] = None
    email: str
    name: str
    interests: str = ""
    linkedin_url: str = ""
    status: JoinRequestStatus = JoinRequestStatus.PENDING
    created_at: str
    approved_at: Optional[str] = None
    approved_by: Optional[str] = None

    def to_document(self) -> dict:
        doc = self.model_dump(by_alias=True, exclude={"id"})
        doc["status"] = self.status.value
        return doc

    def to_response(self) -> dict:
        return {"id": self.id, **self.to_document()}


class JoinRequestCreate(DocumentModel):
    """Submission form; validated by the lifecycle service"""

    email: str
    name: str
    interests: str = ""
    linkedin_url: str = ""


class DecisionRequest(DocumentModel):
    outcome: Literal["approved", "rejected"]
