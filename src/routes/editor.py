from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import ValidationError
from pydantic.alias_generators import to_snake

from src.conf.dependencies import get_reconciler, get_store, get_view_selector
from src.repository.contacts import ContactStore
from src.schemas.contact import Contact
from src.schemas.editor import AnswerFlag, ChangeCount, EditEntry, OpenDraft
from src.services.navigation import ViewSelector
from src.services.reconciler import ContactDraft, FormReconciler, Relationship

router = APIRouter(prefix="/editor", tags=["editor"])


def validation_detail(err: ValidationError) -> list[dict]:
    return [{"loc": list(e["loc"]), "msg": e["msg"]} for e in err.errors()]


@router.post("/open", response_model=ContactDraft)
def open_draft(body: OpenDraft, store: ContactStore = Depends(get_store), reconciler: FormReconciler = Depends(get_reconciler)):
    """
    Start a draft for a new contact, or for an existing one with its answers inferred from its data.

    :param body: Optionally the ID of the contact to edit.
    :type body: OpenDraft
    :raises HTTPException: 404 Not Found if the contact does not exist.
    :return: The initial draft.
    :rtype: ContactDraft
    """
    if body.contact_id is None:
        return reconciler.open()
    contact = store.get_contact(body.contact_id)
    if contact is None:
        raise HTTPException(status_code=404, detail="Contact not found")
    return reconciler.open(contact)


@router.post("/flag", response_model=ContactDraft)
def answer_flag(body: AnswerFlag, reconciler: FormReconciler = Depends(get_reconciler)):
    """
    Record a yes/no/unsure answer for partner, children or siblings.

    :param body: The draft, the relationship and the answer.
    :type body: AnswerFlag
    :return: The updated draft.
    :rtype: ContactDraft
    """
    return reconciler.set_flag(body.draft, body.relationship, body.answer)


@router.post("/count", response_model=ContactDraft)
def change_count(body: ChangeCount, reconciler: FormReconciler = Depends(get_reconciler)):
    """
    Resize the children or siblings list. Invalid counts return the draft unchanged.

    :param body: The draft, the relationship and the typed count.
    :type body: ChangeCount
    :raises HTTPException: 422 Unprocessable Entity for the partner section.
    :return: The updated draft.
    :rtype: ContactDraft
    """
    try:
        return reconciler.set_count(body.draft, body.relationship, body.count)
    except ValueError as err:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(err))


@router.post("/entry", response_model=ContactDraft)
def edit_entry(body: EditEntry, reconciler: FormReconciler = Depends(get_reconciler)):
    """
    Edit one child or sibling of the draft by position.

    :param body: The draft, the relationship, the entry index and the changed fields.
    :type body: EditEntry
    :raises HTTPException: 422 Unprocessable Entity for the partner section or invalid values.
    :return: The updated draft.
    :rtype: ContactDraft
    """
    changes = {to_snake(k): v for k, v in body.changes.items()}
    try:
        if body.relationship == Relationship.children:
            return reconciler.update_child(body.draft, body.index, **changes)
        if body.relationship == Relationship.siblings:
            return reconciler.update_sibling(body.draft, body.index, **changes)
    except ValidationError as err:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=validation_detail(err))
    raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail="partner has no entries")


@router.post("/submit", response_model=Contact)
def submit_draft(draft: ContactDraft, store: ContactStore = Depends(get_store),
                 reconciler: FormReconciler = Depends(get_reconciler), view: ViewSelector = Depends(get_view_selector)):
    """
    Reconcile the draft against its answers and save it.

    :param draft: The draft to save.
    :type draft: ContactDraft
    :raises HTTPException: 422 Unprocessable Entity if first or last name is blank.
    :return: The saved contact.
    :rtype: Contact
    """
    try:
        contact = reconciler.submit(draft)
    except ValidationError as err:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=validation_detail(err))
    contacts = store.upsert(contact)
    saved = next(c for c in contacts if c.id == contact.id) if contact.id else contacts[-1]
    view.saved(saved.id)
    return saved
