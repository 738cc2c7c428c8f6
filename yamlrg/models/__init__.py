"""Models package - Pydantic models for documents and API payloads"""

from yamlrg.models.join_request import (
    DecisionRequest,
    JoinRequest,
    JoinRequestCreate,
    JoinRequestStatus,
)
from yamlrg.models.user import (
    APPROVAL_FIELDS,
    STATUS_FLAGS,
    JobListing,
    JobListingCreate,
    ProfileCompletedUpdate,
    UserAccount,
    UserProfileUpdate,
    UserStatus,
    VisibilityUpdate,
)
from yamlrg.models.workshop import (
    PresentationRequest,
    PresentationRequestCreate,
    PresentationStatusUpdate,
    Workshop,
    WorkshopCreate,
    WorkshopUpdate,
)

__all__ = [
    # Join requests
    "DecisionRequest",
    "JoinRequest",
    "JoinRequestCreate",
    "JoinRequestStatus",
    # Users
    "APPROVAL_FIELDS",
    "STATUS_FLAGS",
    "JobListing",
    "JobListingCreate",
    "ProfileCompletedUpdate",
    "UserAccount",
    "UserProfileUpdate",
    "UserStatus",
    "VisibilityUpdate",
    # Workshops
    "PresentationRequest",
    "PresentationRequestCreate",
    "PresentationStatusUpdate",
    "Workshop",
    "WorkshopCreate",
    "WorkshopUpdate",
]
