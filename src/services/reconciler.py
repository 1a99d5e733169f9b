"""
Editor-side logic that keeps a contact draft consistent with the user's
yes/no/unsure answers about partner, children and siblings.

Every operation takes a draft and returns a new one; nothing is mutated.
"""
import enum

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from src.schemas.contact import Child, Contact, ContactData, Sibling
from src.services.ids import RecordGenerator

MAX_COUNT = 20


class TriState(str, enum.Enum):
    yes = "yes"
    no = "no"
    unsure = "unsure"
    unanswered = "unanswered"


class Relationship(str, enum.Enum):
    partner = "partner"
    children = "children"
    siblings = "siblings"


def cleared_fields(relationship: Relationship) -> dict:
    """Values a relationship's fields take when its answer is not "yes"."""
    if relationship == Relationship.partner:
        return {"partner_name": "", "partner_notes": ""}
    if relationship == Relationship.children:
        return {"children": [], "children_notes": ""}
    return {"siblings": [], "siblings_notes": ""}


class RelationshipFlags(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    has_partner: TriState = TriState.unanswered
    has_children: TriState = TriState.unanswered
    has_siblings: TriState = TriState.unanswered

    def get(self, relationship: Relationship) -> TriState:
        return getattr(self, f"has_{relationship.value}")

    def with_answer(self, relationship: Relationship, answer: TriState) -> "RelationshipFlags":
        return self.model_copy(update={f"has_{relationship.value}": answer})


class ContactDraft(BaseModel):
    """A contact being edited, together with the answers that gate its family sections."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    contact: ContactData = Field(default_factory=ContactData)
    flags: RelationshipFlags = Field(default_factory=RelationshipFlags)


def infer_flags(contact: ContactData) -> RelationshipFlags:
    """
    Reconstructs the answers for an existing contact from its data.

    Non-empty data means "yes"; anything else is "unanswered", never "no".

    :param contact: The stored contact.
    :type contact: ContactData
    :return: The inferred answers.
    :rtype: RelationshipFlags
    """
    def answer(present: bool) -> TriState:
        return TriState.yes if present else TriState.unanswered

    return RelationshipFlags(
        has_partner=answer(bool(contact.partner_name.strip())),
        has_children=answer(bool(contact.children)),
        has_siblings=answer(bool(contact.siblings)),
    )


def parse_count(raw) -> int | None:
    """Returns ``raw`` as an int in [0, MAX_COUNT], or None if it is not one."""
    if raw is None or isinstance(raw, bool):
        return None
    if isinstance(raw, int):
        value = raw
    elif isinstance(raw, float):
        if not raw.is_integer():
            return None
        value = int(raw)
    else:
        try:
            value = int(str(raw).strip())
        except ValueError:
            return None
    if 0 <= value <= MAX_COUNT:
        return value
    return None


class FormReconciler:
    def __init__(self, generator: RecordGenerator | None = None):
        self.generator = generator or RecordGenerator()

    def open(self, contact: ContactData | None = None) -> ContactDraft:
        """
        Starts editing an existing contact, or a new one when ``contact`` is None.

        A new draft gets its avatar color here, once.

        :param contact: The contact to edit.
        :type contact: ContactData | None
        :return: The initial draft.
        :rtype: ContactDraft
        """
        if contact is None:
            return ContactDraft(contact=ContactData(avatar_color=self.generator.color()))
        data = ContactData.model_validate(contact.model_dump())
        return ContactDraft(contact=data, flags=infer_flags(data))

    def _new_child(self, position: int) -> Child:
        return Child(id=self.generator.new_id(), birth_order=str(position))

    def _new_sibling(self) -> Sibling:
        return Sibling(id=self.generator.new_id())

    def set_flag(self, draft: ContactDraft, relationship: Relationship, answer: TriState) -> ContactDraft:
        """
        Records an answer for one relationship.

        Leaving "yes" clears that relationship's data. Answering "yes" to children
        with none entered yet adds one blank child ranked "1".

        :param draft: The current draft.
        :type draft: ContactDraft
        :param relationship: Which section the answer is for.
        :type relationship: Relationship
        :param answer: The new answer.
        :type answer: TriState
        :return: The updated draft.
        :rtype: ContactDraft
        """
        contact = draft.contact
        if answer != TriState.yes:
            contact = contact.model_copy(update=cleared_fields(relationship))
        elif relationship == Relationship.children and not contact.children:
            contact = contact.model_copy(update={"children": [self._new_child(1)]})
        return ContactDraft(contact=contact, flags=draft.flags.with_answer(relationship, answer))

    def set_count(self, draft: ContactDraft, relationship: Relationship, raw) -> ContactDraft:
        """
        Applies a "how many" input to the children or siblings list.

        Growing appends blank entries, shrinking drops entries from the end.
        Input that is not a whole number in [0, 20] leaves the draft unchanged,
        as does 0 children while children is answered "yes".

        :param draft: The current draft.
        :type draft: ContactDraft
        :param relationship: ``children`` or ``siblings``.
        :type relationship: Relationship
        :param raw: The value typed by the user.
        :type raw: str | int
        :raises ValueError: If called for the partner section.
        :return: The updated draft.
        :rtype: ContactDraft
        """
        if relationship == Relationship.partner:
            raise ValueError("partner has no count")
        count = parse_count(raw)
        if count is None:
            return draft
        if relationship == Relationship.children and count == 0 and draft.flags.has_children == TriState.yes:
            return draft

        field = relationship.value
        entries = list(getattr(draft.contact, field))
        if count < len(entries):
            entries = entries[:count]
        elif relationship == Relationship.children:
            entries += [self._new_child(position) for position in range(len(entries) + 1, count + 1)]
        else:
            entries += [self._new_sibling() for _ in range(count - len(entries))]
        return draft.model_copy(update={"contact": draft.contact.model_copy(update={field: entries})})

    def update_child(self, draft: ContactDraft, index: int, **changes) -> ContactDraft:
        return self._update_entry(draft, "children", index, changes)

    def update_sibling(self, draft: ContactDraft, index: int, **changes) -> ContactDraft:
        return self._update_entry(draft, "siblings", index, changes)

    def _update_entry(self, draft: ContactDraft, field: str, index: int, changes: dict) -> ContactDraft:
        entries = list(getattr(draft.contact, field))
        if not 0 <= index < len(entries):
            return draft
        current = entries[index]
        entries[index] = type(current).model_validate({**current.model_dump(), **changes})
        return draft.model_copy(update={"contact": draft.contact.model_copy(update={field: entries})})

    def update_fields(self, draft: ContactDraft, **changes) -> ContactDraft:
        """
        Applies plain field edits (names, notes, channels...) to the draft.

        ``id`` and ``avatar_color`` are fixed for the life of a record and are not editable here.
        """
        changes = {k: v for k, v in changes.items() if k not in ("id", "avatar_color")}
        contact = ContactData.model_validate({**draft.contact.model_dump(), **changes})
        return draft.model_copy(update={"contact": contact})

    def submit(self, draft: ContactDraft) -> Contact:
        """
        Turns a draft into a record ready for the store.

        Any relationship not answered exactly "yes" has its data emptied, whatever
        the draft still holds.

        :param draft: The draft to submit.
        :type draft: ContactDraft
        :raises pydantic.ValidationError: If first or last name is blank.
        :return: The reconciled contact.
        :rtype: Contact
        """
        data = draft.contact.model_dump()
        for relationship in Relationship:
            if draft.flags.get(relationship) != TriState.yes:
                data.update(cleared_fields(relationship))
        return Contact.model_validate(data)
