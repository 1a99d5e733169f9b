import json
import logging
from datetime import date, timedelta

from pydantic import ValidationError

from src.schemas.contact import Contact, Child, ContactFrequency, Tier
from src.services.ids import RecordGenerator
from src.services.storage import KeyValueBackend, StorageError

log = logging.getLogger(__name__)

SCHEMA_VERSION = 1
DEFAULT_KEY = "kinship_contacts_v1"

SEED_CONTACTS = [
    Contact(
        id="1",
        first_name="Alice",
        last_name="Rivera",
        birthday=date(1990, 5, 15),
        partner_name="Carlos",
        children=[Child(id="c1", name="Mia", age="5")],
        children_notes="Mia loves dinosaurs and space.",
        siblings_notes="Has a twin sister living in Madrid.",
        education="Masters in Art History, NYU",
        occupation="Gallery Curator",
        interests="Modern art, hiking, ceramic pottery",
        notes="Remember she is allergic to peanuts.",
        avatar_color="bg-indigo-500",
        last_contacted_date=date(2023, 10, 15),
        contact_frequency=ContactFrequency.monthly,
        tier=Tier.close,
        phone_number="555-0123",
        email="alice.rivera@example.com",
        instagram="@alicerivera_art",
    ),
    Contact(
        id="2",
        first_name="David",
        last_name="Chen",
        birthday=date(1988, 11, 20),
        partner_name="Sarah",
        education="BS Computer Science",
        occupation="Software Engineer",
        interests="Sci-fi novels, mechanical keyboards, coffee roasting",
        notes="Met at the conference in 2022.",
        avatar_color="bg-emerald-500",
        last_contacted_date=date(2023, 12, 1),
        contact_frequency=ContactFrequency.quarterly,
        tier=Tier.colleague,
        linkedin="david-chen-dev",
    ),
]


def next_birthday(birthday: date, today: date) -> date:
    """
    Returns the first anniversary of ``birthday`` on or after ``today``.

    Feb 29 birthdays fall on Feb 28 in non-leap years.

    :param birthday: The date of birth.
    :type birthday: date
    :param today: The reference day.
    :type today: date
    :return: The next birthday.
    :rtype: date
    """
    for year in (today.year, today.year + 1):
        try:
            candidate = birthday.replace(year=year)
        except ValueError:
            candidate = date(year, 2, 28)
        if candidate >= today:
            return candidate
    return candidate


class ContactStore:
    """
    All contacts of the address book, persisted as one JSON document under a single key.

    Every mutation rewrites the whole document before returning, so what a caller
    gets back is always what is stored.

    :param backend: Where the JSON document lives.
    :type backend: KeyValueBackend
    :param key: The storage key of the document.
    :type key: str
    :param generator: Source of ids and avatar colors.
    :type generator: RecordGenerator | None
    :param reseed_when_empty: Whether an emptied address book gets the example contacts back on the next read.
    :type reseed_when_empty: bool
    """

    def __init__(self, backend: KeyValueBackend, key: str = DEFAULT_KEY, generator: RecordGenerator | None = None,
                 reseed_when_empty: bool = True):
        self.backend = backend
        self.key = key
        self.generator = generator or RecordGenerator()
        self.reseed_when_empty = reseed_when_empty

    def _read(self) -> list[Contact] | None:
        raw = self.backend.get(self.key)
        if raw is None:
            return None
        try:
            document = json.loads(raw)
        except ValueError as err:
            raise StorageError(f"stored contacts under {self.key!r} are not valid JSON") from err

        # Unversioned documents are a bare array of records.
        if isinstance(document, list):
            records = document
        elif isinstance(document, dict) and isinstance(document.get("contacts"), list):
            records = document["contacts"]
        else:
            raise StorageError(f"unrecognised contacts document under {self.key!r}")

        try:
            return [Contact.model_validate(record) for record in records]
        except ValidationError as err:
            raise StorageError(f"stored contacts under {self.key!r} are malformed") from err

    def _write(self, contacts: list[Contact]) -> None:
        document = {
            "version": SCHEMA_VERSION,
            "contacts": [contact.model_dump(mode="json", by_alias=True) for contact in contacts],
        }
        self.backend.set(self.key, json.dumps(document).encode("utf-8"))

    def list_contacts(self) -> list[Contact]:
        """
        Retrieves all contacts, writing the example contacts on first use.

        :raises StorageError: If the stored document cannot be read.
        :return: All contacts in insertion order.
        :rtype: list[Contact]
        """
        contacts = self._read()
        if contacts is None or (not contacts and self.reseed_when_empty):
            log.info("Seeding %s with %d example contacts", self.key, len(SEED_CONTACTS))
            contacts = list(SEED_CONTACTS)
            self._write(contacts)
        return contacts

    def get_contact(self, contact_id: str) -> Contact | None:
        """
        Retrieves a single contact by its ID.

        :param contact_id: The ID of the contact to retrieve.
        :type contact_id: str
        :return: The contact if found, otherwise None.
        :rtype: Contact | None
        """
        return next((c for c in self.list_contacts() if c.id == contact_id), None)

    def upsert(self, contact: Contact) -> list[Contact]:
        """
        Replaces the contact with the same ID, or appends it as a new one.

        A new contact gets a fresh ID when it has none and an avatar color when it
        has none. An existing contact keeps the avatar color it was created with.

        :param contact: The full record to store.
        :type contact: Contact
        :raises StorageError: If the document cannot be read or written.
        :return: The updated list of contacts.
        :rtype: list[Contact]
        """
        contacts = self._read() or []
        index = next((i for i, c in enumerate(contacts) if contact.id and c.id == contact.id), None)

        if index is not None:
            stored_color = contacts[index].avatar_color
            if stored_color:
                contact = contact.model_copy(update={"avatar_color": stored_color})
            elif not contact.avatar_color:
                contact = contact.model_copy(update={"avatar_color": self.generator.color()})
            contacts = contacts[:index] + [contact] + contacts[index + 1:]
        else:
            update = {}
            if not contact.id:
                update["id"] = self.generator.unique_id({c.id for c in contacts})
            if not contact.avatar_color:
                update["avatar_color"] = self.generator.color()
            contacts = contacts + [contact.model_copy(update=update)]

        self._write(contacts)
        return contacts

    def remove(self, contact_id: str) -> list[Contact]:
        """
        Deletes a contact by its ID. Unknown IDs are ignored.

        :param contact_id: The ID of the contact to delete.
        :type contact_id: str
        :raises StorageError: If the document cannot be read or written.
        :return: The remaining contacts.
        :rtype: list[Contact]
        """
        contacts = [c for c in self._read() or [] if c.id != contact_id]
        self._write(contacts)
        return contacts

    def search(self, term: str | None = None) -> list[Contact]:
        """
        Retrieves contacts whose full name or occupation contains ``term``, sorted by first name.

        :param term: Case-insensitive filter; all contacts when empty.
        :type term: str | None
        :return: Matching contacts.
        :rtype: list[Contact]
        """
        needle = (term or "").casefold()
        matches = [
            c for c in self.list_contacts()
            if needle in f"{c.first_name} {c.last_name}".casefold() or needle in c.occupation.casefold()
        ]
        return sorted(matches, key=lambda c: c.first_name.casefold())

    def upcoming_birthdays(self, days: int = 7, today: date | None = None) -> list[Contact]:
        """
        Retrieves contacts whose next birthday is within ``days`` days, soonest first.

        :param days: Size of the window, today included.
        :type days: int
        :param today: Reference day, defaults to the current date.
        :type today: date | None
        :return: Contacts with upcoming birthdays.
        :rtype: list[Contact]
        """
        today = today or date.today()
        end_date = today + timedelta(days=days)
        upcoming = [
            (next_birthday(c.birthday, today), c) for c in self.list_contacts() if c.birthday is not None
        ]
        return [c for when, c in sorted(upcoming, key=lambda pair: pair[0]) if when <= end_date]
