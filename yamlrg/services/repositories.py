"""Entity repositories over the document store.

Each repository owns one collection and converts documents to fully
defaulted models, so callers never deal with missing fields.
"""

from typing import Iterable, List, Optional

from yamlrg.models.join_request import JoinRequest
from yamlrg.models.user import UserAccount
from yamlrg.models.workshop import PresentationRequest, Workshop
from yamlrg.services.database_service import DocumentStore


class JoinRequestRepository:
    collection = DocumentStore.JOIN_REQUESTS

    def __init__(self, store: DocumentStore):
        self.store = store

    def add(self, request: JoinRequest) -> str:
        return self.store.add(self.collection, request.to_document())

    def get(self, request_id: str) -> Optional[JoinRequest]:
        doc = self.store.get(self.collection, request_id)
        return JoinRequest.from_document(doc) if doc else None

    def update(self, request_id: str, fields: dict) -> JoinRequest:
        return JoinRequest.from_document(self.store.update(self.collection, request_id, fields))

    def list_all(self) -> List[JoinRequest]:
        """All requests, newest first"""
        docs = self.store.query(self.collection, order_by="createdAt", descending=True)
        return [JoinRequest.from_document(d) for d in docs]

    def find_by_email(self, email: str) -> List[JoinRequest]:
        """Requests for an email, oldest first"""
        docs = self.store.query(self.collection, {"email": email}, order_by="createdAt")
        return [JoinRequest.from_document(d) for d in docs]


class UserAccountRepository:
    collection = DocumentStore.USERS

    def __init__(self, store: DocumentStore):
        self.store = store

    def get(self, uid: str) -> Optional[UserAccount]:
        doc = self.store.get(self.collection, uid)
        return UserAccount.from_document(doc) if doc else None

    def create(self, account: UserAccount) -> UserAccount:
        return UserAccount.from_document(
            self.store.put(self.collection, account.uid, account.to_document())
        )

    def update(self, uid: str, fields: dict) -> UserAccount:
        return UserAccount.from_document(self.store.update(self.collection, uid, fields))

    def delete(self, uid: str) -> bool:
        return self.store.delete(self.collection, uid)

    def list_all(self) -> List[UserAccount]:
        return [UserAccount.from_document(d) for d in self.store.all(self.collection)]

    def list_visible(self) -> List[UserAccount]:
        docs = self.store.query(self.collection, {"showInMembers": True})
        return [UserAccount.from_document(d) for d in docs]

    def list_by_emails(self, emails: Iterable[str]) -> List[UserAccount]:
        docs = self.store.query_in(self.collection, "email", emails)
        return [UserAccount.from_document(d) for d in docs]


class WorkshopRepository:
    collection = DocumentStore.WORKSHOPS

    def __init__(self, store: DocumentStore):
        self.store = store

    def add(self, workshop: Workshop) -> str:
        return self.store.add(self.collection, workshop.to_document())

    def get(self, workshop_id: str) -> Optional[Workshop]:
        doc = self.store.get(self.collection, workshop_id)
        return Workshop.from_document(doc) if doc else None

    def update(self, workshop_id: str, fields: dict) -> Workshop:
        return Workshop.from_document(self.store.update(self.collection, workshop_id, fields))

    def delete(self, workshop_id: str) -> bool:
        return self.store.delete(self.collection, workshop_id)

    def list_all(self) -> List[Workshop]:
        """All workshops, most recent date first"""
        docs = self.store.query(self.collection, order_by="date", descending=True)
        return [Workshop.from_document(d) for d in docs]


class PresentationRequestRepository:
    collection = DocumentStore.PRESENTATION_REQUESTS

    def __init__(self, store: DocumentStore):
        self.store = store

    def add(self, request: PresentationRequest) -> str:
        return self.store.add(self.collection, request.to_document())

    def get(self, request_id: str) -> Optional[PresentationRequest]:
        doc = self.store.get(self.collection, request_id)
        return PresentationRequest.from_document(doc) if doc else None

    def update(self, request_id: str, fields: dict) -> PresentationRequest:
        return PresentationRequest.from_document(
            self.store.update(self.collection, request_id, fields)
        )

    def list_all(self) -> List[PresentationRequest]:
        docs = self.store.query(self.collection, order_by="createdAt", descending=True)
        return [PresentationRequest.from_document(d) for d in docs]
