"""Workshop and presentation request models"""

from typing import List, Literal, Optional

from pydantic import Field

from yamlrg.models.base import DocumentModel

WorkshopType = Literal["paper", "startup", "other"]
PresentationType = Literal["paper", "startup", "other", "request"]
PresentationStatus = Literal["pending", "done"]


class Workshop(DocumentModel):
    id: Optional[str] = None
    title: str
    presenter_name: str
    presenter_linked_in: Optional[str] = None
    date: str
    description: str = ""
    youtube_url: Optional[str] = None
    resources: List[str] = Field(default_factory=list)
    type: WorkshopType = "other"

    def to_document(self) -> dict:
        return self.model_dump(by_alias=True, exclude={"id"})

    def to_response(self) -> dict:
        return {"id": self.id, **self.to_document()}


class WorkshopCreate(DocumentModel):
    title: str
    presenter_name: str
    presenter_linked_in: Optional[str] = None
    date: str
    description: str
    youtube_url: Optional[str] = None
    resources: List[str] = Field(default_factory=list)
    type: WorkshopType = "paper"


class WorkshopUpdate(DocumentModel):
    title: Optional[str] = None
    presenter_name: Optional[str] = None
    presenter_linked_in: Optional[str] = None
    date: Optional[str] = None
    description: Optional[str] = None
    youtube_url: Optional[str] = None
    resources: Optional[List[str]] = None
    type: Optional[WorkshopType] = None


class PresentationRequest(DocumentModel):
    id: Optional[str] = None
    user_id: str
    user_name: str = ""
    user_email: str = ""
    title: str
    description: str = ""
    type: PresentationType
    proposed_date: Optional[str] = None
    status: PresentationStatus = "pending"
    created_at: str
    completed_at: Optional[str] = None
    completed_by: Optional[str] = None

    def to_document(self) -> dict:
        return self.model_dump(by_alias=True, exclude={"id"})

    def to_response(self) -> dict:
        return {"id": self.id, **self.to_document()}


class PresentationRequestCreate(DocumentModel):
    title: str
    description: str = ""
    type: PresentationType
    proposed_date: Optional[str] = None


class PresentationStatusUpdate(DocumentModel):
    status: PresentationStatus
