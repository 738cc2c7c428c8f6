"""User account models"""

from typing import List, Optional

from pydantic import Field

from yamlrg.models.base import DocumentModel

# Status flags members can set on their profile, as stored
STATUS_FLAGS = (
    "lookingForCofounder",
    "needsProjectHelp",
    "offeringProjectHelp",
    "isHiring",
    "seekingJob",
    "openToNetworking",
)

APPROVAL_FIELDS = ("isApproved", "approvedAt", "approvedBy")


class UserStatus(DocumentModel):
    looking_for_cofounder: bool = False
    needs_project_help: bool = False
    offering_project_help: bool = False
    is_hiring: bool = False
    seeking_job: bool = False
    open_to_networking: bool = False


class JobListing(DocumentModel):
    title: str
    company: str
    link: str
    posted_at: str


class UserAccount(DocumentModel):
    """Persisted profile document, keyed by the identity uid"""

    uid: str
    email: Optional[str] = None
    display_name: Optional[str] = None
    photo_url: Optional[str] = Field(default=None, alias="photoURL")
    is_approved: bool = False
    is_admin: bool = False  # snapshot taken at creation, never used for authorization
    show_in_members: bool = False
    profile_completed: bool = False
    linkedin_url: str = ""
    status: UserStatus = Field(default_factory=UserStatus)
    joined_at: Optional[str] = None
    approved_at: Optional[str] = None
    approved_by: Optional[str] = None
    last_update: Optional[str] = None
    job_listings: List[JobListing] = Field(default_factory=list)

    @classmethod
    def from_document(cls, doc: dict) -> "UserAccount":
        data = dict(doc)
        if not data.get("uid"):
            data["uid"] = data.get("id")
        return super().from_document(data)

    def public_summary(self) -> dict:
        """Poster details attached to job listings"""
        return {
            "uid": self.uid,
            "displayName": self.display_name,
            "email": self.email,
            "photoURL": self.photo_url,
            "linkedinUrl": self.linkedin_url,
        }


class StatusUpdate(DocumentModel):
    """Partial status flag update; unset flags keep their stored value"""

    looking_for_cofounder: Optional[bool] = None
    needs_project_help: Optional[bool] = None
    offering_project_help: Optional[bool] = None
    is_hiring: Optional[bool] = None
    seeking_job: Optional[bool] = None
    open_to_networking: Optional[bool] = None


class UserProfileUpdate(DocumentModel):
    """Profile update payload.

    Approval fields are accepted here so they can be stripped for non-admin
    actors instead of failing the whole request.
    """

    display_name: Optional[str] = None
    linkedin_url: Optional[str] = None
    status: Optional[StatusUpdate] = None
    show_in_members: Optional[bool] = None
    profile_completed: Optional[bool] = None
    is_approved: Optional[bool] = None
    approved_at: Optional[str] = None
    approved_by: Optional[str] = None

    def to_updates(self) -> dict:
        return self.model_dump(by_alias=True, exclude_unset=True)


class JobListingCreate(DocumentModel):
    title: str
    company: str
    link: str


class VisibilityUpdate(DocumentModel):
    show_in_members: bool


class ProfileCompletedUpdate(DocumentModel):
    profile_completed: bool
