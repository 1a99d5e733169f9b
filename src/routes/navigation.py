from fastapi import APIRouter, Depends, HTTPException

from src.conf.dependencies import get_store, get_view_selector
from src.repository.contacts import ContactStore
from src.services.navigation import ViewSelector, ViewState

router = APIRouter(prefix="/view", tags=["view"])


@router.get("/", response_model=ViewState)
def current_view(view: ViewSelector = Depends(get_view_selector)):
    return view.state


@router.post("/new", response_model=ViewState)
def create_new(view: ViewSelector = Depends(get_view_selector)):
    return view.create_new()


@router.post("/select/{contact_id}", response_model=ViewState)
def select_contact(contact_id: str, view: ViewSelector = Depends(get_view_selector), store: ContactStore = Depends(get_store)):
    """
    Open a contact's page.

    :param contact_id: The ID of the contact to show.
    :type contact_id: str
    :raises HTTPException: 404 Not Found if the contact does not exist.
    :return: The new navigation state.
    :rtype: ViewState
    """
    if store.get_contact(contact_id) is None:
        raise HTTPException(status_code=404, detail="Contact not found")
    return view.select(contact_id)


@router.post("/back", response_model=ViewState)
def back(view: ViewSelector = Depends(get_view_selector)):
    return view.back()
