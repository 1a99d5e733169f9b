from fastapi import APIRouter, Depends, HTTPException, status
from src.repository.contacts import ContactStore
from src.schemas.contact import Contact, ContactCreate, ContactUpdate
from src.conf.dependencies import get_store, get_view_selector
from src.services.navigation import ViewSelector

router = APIRouter(prefix="/contacts", tags=["contacts"])

@router.post("/", response_model=Contact, status_code=status.HTTP_201_CREATED)
def create_contact(body: ContactCreate, store: ContactStore = Depends(get_store), view: ViewSelector = Depends(get_view_selector)):
    """
    Create a new contact. The store assigns its ID and avatar color.

    :param body: The contact data to create.
    :type body: ContactCreate
    :param store: The contact store.
    :type store: ContactStore
    :param view: The navigation state.
    :type view: ViewSelector
    :return: The newly created contact.
    :rtype: Contact
    """
    contact = Contact.model_validate(body.model_dump(exclude={"id"}))
    created = store.upsert(contact)[-1]
    view.saved(created.id)
    return created

@router.get("/", response_model=list[Contact])
def read_contacts(q: str | None = None, store: ContactStore = Depends(get_store)):
    """
    Retrieve all contacts in stored order, or those matching ``q`` sorted by first name.

    :param q: Optional filter on full name or occupation.
    :type q: str | None
    :param store: The contact store.
    :type store: ContactStore
    :return: A list of contacts.
    :rtype: list[Contact]
    """
    if q is not None:
        return store.search(q)
    return store.list_contacts()

@router.get("/birthdays", response_model=list[Contact])
def upcoming_birthdays(days: int = 7, store: ContactStore = Depends(get_store)):
    """
    Retrieve contacts with a birthday in the next ``days`` days.

    :param days: Size of the window in days.
    :type days: int
    :param store: The contact store.
    :type store: ContactStore
    :return: A list of contacts with upcoming birthdays.
    :rtype: list[Contact]
    """
    return store.upcoming_birthdays(days=days)

@router.get("/{contact_id}", response_model=Contact)
def read_contact(contact_id: str, store: ContactStore = Depends(get_store)):
    """
    Retrieve a single contact by its ID.

    :param contact_id: The ID of the contact to retrieve.
    :type contact_id: str
    :param store: The contact store.
    :type store: ContactStore
    :raises HTTPException: 404 Not Found if the contact does not exist.
    :return: The retrieved contact.
    :rtype: Contact
    """
    contact = store.get_contact(contact_id)
    if contact is None:
        raise HTTPException(status_code=404, detail="Contact not found")
    return contact

@router.put("/{contact_id}", response_model=Contact)
def update_contact(contact_id: str, body: ContactUpdate, store: ContactStore = Depends(get_store), view: ViewSelector = Depends(get_view_selector)):
    """
    Replace an existing contact by its ID. The ID in the path wins over any in the body.

    :param contact_id: The ID of the contact to update.
    :type contact_id: str
    :param body: The full updated contact data.
    :type body: ContactUpdate
    :param store: The contact store.
    :type store: ContactStore
    :param view: The navigation state.
    :type view: ViewSelector
    :raises HTTPException: 404 Not Found if the contact does not exist.
    :return: The updated contact.
    :rtype: Contact
    """
    if store.get_contact(contact_id) is None:
        raise HTTPException(status_code=404, detail="Contact not found")
    contact = Contact.model_validate({**body.model_dump(), "id": contact_id})
    updated = next(c for c in store.upsert(contact) if c.id == contact_id)
    view.saved(contact_id)
    return updated

@router.delete("/{contact_id}", response_model=list[Contact])
def delete_contact(contact_id: str, store: ContactStore = Depends(get_store), view: ViewSelector = Depends(get_view_selector)):
    """
    Delete a contact by its ID. Deleting an unknown ID changes nothing.

    :param contact_id: The ID of the contact to delete.
    :type contact_id: str
    :param store: The contact store.
    :type store: ContactStore
    :param view: The navigation state.
    :type view: ViewSelector
    :return: The remaining contacts.
    :rtype: list[Contact]
    """
    contacts = store.remove(contact_id)
    view.deleted()
    return contacts
