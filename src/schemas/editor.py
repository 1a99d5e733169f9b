from typing import Any

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from src.services.reconciler import ContactDraft, Relationship, TriState


class EditorRequest(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class OpenDraft(EditorRequest):
    contact_id: str | None = None


class AnswerFlag(EditorRequest):
    draft: ContactDraft
    relationship: Relationship
    answer: TriState


class ChangeCount(EditorRequest):
    draft: ContactDraft
    relationship: Relationship
    count: Any = None


class EditEntry(EditorRequest):
    draft: ContactDraft
    relationship: Relationship
    index: int
    changes: dict[str, str]
