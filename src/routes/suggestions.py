from fastapi import APIRouter, Depends, HTTPException, status

from src.conf.dependencies import get_assistant, get_store
from src.repository.contacts import ContactStore
from src.schemas.contact import Contact
from src.schemas.suggestion import Suggestion
from src.services.assistant import AssistantGateway, SuggestionPending

router = APIRouter(prefix="/contacts/{contact_id}/suggestions", tags=["suggestions"])


def find_contact(contact_id: str, store: ContactStore = Depends(get_store)) -> Contact:
    """Loads the path contact in a sync dependency, so store I/O runs in the threadpool."""
    contact = store.get_contact(contact_id)
    if contact is None:
        raise HTTPException(status_code=404, detail="Contact not found")
    return contact


@router.post("/gifts", response_model=Suggestion)
async def gift_ideas(contact: Contact = Depends(find_contact), assistant: AssistantGateway = Depends(get_assistant)):
    """
    Ask the AI assistant for gift ideas for a contact.

    The text comes from an external service and is returned as-is; render it as plain text.

    :param contact: The contact named in the path, looked up before the handler runs.
    :type contact: Contact
    :raises HTTPException: 404 Not Found if the contact does not exist.
    :raises HTTPException: 409 Conflict if the same request is still running.
    :return: The suggestion text, or a fallback message if the assistant is unavailable.
    :rtype: Suggestion
    """
    try:
        text = await assistant.gift_ideas(contact)
    except SuggestionPending as err:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(err))
    return Suggestion(kind="gifts", text=text)


@router.post("/catch-up", response_model=Suggestion)
async def catch_up_message(contact: Contact = Depends(find_contact), assistant: AssistantGateway = Depends(get_assistant)):
    """
    Ask the AI assistant to draft a "catch up" message to a contact.

    :param contact: The contact named in the path, looked up before the handler runs.
    :type contact: Contact
    :raises HTTPException: 404 Not Found if the contact does not exist.
    :raises HTTPException: 409 Conflict if the same request is still running.
    :return: The drafted messages, or a fallback message if the assistant is unavailable.
    :rtype: Suggestion
    """
    try:
        text = await assistant.catch_up_message(contact)
    except SuggestionPending as err:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(err))
    return Suggestion(kind="catch-up", text=text)
