"""Shared model configuration for persisted documents"""

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class DocumentModel(BaseModel):
    """Base for models persisted as camelCase documents.

    Attributes are snake_case in Python and camelCase in the store and in
    API payloads.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )

    @classmethod
    def from_document(cls, doc: dict):
        # Explicit nulls fall back to field defaults
        return cls.model_validate({k: v for k, v in doc.items() if v is not None})

    def to_document(self) -> dict:
        return self.model_dump(by_alias=True)
