import pytest
from datetime import date
from unittest.mock import MagicMock

from fastapi.testclient import TestClient

from src.main import app
from src.conf.dependencies import get_store, get_view_selector
from src.repository.contacts import ContactStore
from src.schemas.contact import COLORS, Contact
from src.services.ids import RecordGenerator
from src.services.navigation import View, ViewSelector
from src.services.storage import MemoryBackend, StorageError

client = TestClient(app)


@pytest.fixture()
def store():
    return ContactStore(MemoryBackend(), generator=RecordGenerator(seed=3), reseed_when_empty=False)


@pytest.fixture()
def view():
    return ViewSelector()


@pytest.fixture(autouse=True)
def overrides(store, view):
    app.dependency_overrides[get_store] = lambda: store
    app.dependency_overrides[get_view_selector] = lambda: view
    yield
    app.dependency_overrides.clear()


@pytest.fixture()
def contact_body():
    return {"firstName": "John", "lastName": "Doe", "email": "john.doe@example.com", "phoneNumber": "1234567890",
            "birthday": date(2000, 1, 1).isoformat(), "tier": "2 - Friend/Colleague", "contactFrequency": "monthly"}


@pytest.fixture()
def contact(store):
    return store.upsert(Contact(first_name="Jane", last_name="Smith", occupation="Architect"))[-1]


def test_create_contact(contact_body, store, view):
    response = client.post("/api/contacts/", json=contact_body)
    assert response.status_code == 201
    data = response.json()
    assert data["firstName"] == "John"
    assert data["id"]
    assert data["avatarColor"]
    assert data["children"] == []
    assert store.get_contact(data["id"]) is not None
    assert view.state.current_view == View.EDIT
    assert view.state.selected_contact_id == data["id"]


def test_create_contact_ignores_body_id(contact_body, contact):
    response = client.post("/api/contacts/", json={**contact_body, "id": contact.id})
    assert response.status_code == 201
    assert response.json()["id"] != contact.id


@pytest.mark.parametrize("missing", ["firstName", "lastName"])
def test_create_contact_requires_names(contact_body, missing, store):
    response = client.post("/api/contacts/", json={**contact_body, missing: "  "})
    assert response.status_code == 422
    assert store.backend.data == {}


def test_create_contact_unknown_frequency_is_unset(contact_body):
    response = client.post("/api/contacts/", json={**contact_body, "contactFrequency": "hourly"})
    assert response.status_code == 201
    assert response.json()["contactFrequency"] == ""


def test_create_contact_off_palette_color_is_replaced(contact_body, store):
    response = client.post("/api/contacts/", json={**contact_body, "avatarColor": "not-a-palette-color"})
    assert response.status_code == 201
    data = response.json()
    assert data["avatarColor"] in COLORS
    assert store.get_contact(data["id"]).avatar_color == data["avatarColor"]


def test_create_contact_keeps_palette_color(contact_body):
    response = client.post("/api/contacts/", json={**contact_body, "avatarColor": "bg-teal-500"})
    assert response.json()["avatarColor"] == "bg-teal-500"


def test_read_contacts(contact):
    response = client.get("/api/contacts/")
    assert response.status_code == 200
    data = response.json()
    assert len(data) == 1
    assert data[0]["firstName"] == contact.first_name


def test_read_contacts_first_run_is_seeded():
    app.dependency_overrides[get_store] = lambda: ContactStore(MemoryBackend())
    response = client.get("/api/contacts/")
    assert [c["firstName"] for c in response.json()] == ["Alice", "David"]


def test_search_contacts(contact, store):
    store.upsert(Contact(first_name="Bob", last_name="Stone", occupation="Mason"))
    response = client.get("/api/contacts/", params={"q": "archi"})
    assert [c["firstName"] for c in response.json()] == ["Jane"]


def test_read_contact_found(contact):
    response = client.get(f"/api/contacts/{contact.id}")
    assert response.status_code == 200
    assert response.json()["lastName"] == "Smith"


def test_read_contact_not_found():
    response = client.get("/api/contacts/999")
    assert response.status_code == 404
    assert response.json() == {"detail": "Contact not found"}


def test_update_contact(contact, contact_body, store):
    response = client.put(f"/api/contacts/{contact.id}", json={**contact_body, "id": "spoofed", "avatarColor": "bg-red-500"})
    assert response.status_code == 200
    data = response.json()
    assert data["id"] == contact.id
    assert data["firstName"] == "John"
    assert data["occupation"] == ""
    assert data["avatarColor"] == contact.avatar_color
    assert len(store.list_contacts()) == 1


def test_update_contact_not_found(contact_body):
    response = client.put("/api/contacts/999", json=contact_body)
    assert response.status_code == 404
    assert response.json() == {"detail": "Contact not found"}


def test_delete_contact(contact, view):
    view.select(contact.id)
    response = client.delete(f"/api/contacts/{contact.id}")
    assert response.status_code == 200
    assert response.json() == []
    assert view.state.current_view == View.LIST


def test_delete_unknown_contact_is_noop(contact):
    response = client.delete("/api/contacts/999")
    assert response.status_code == 200
    assert [c["id"] for c in response.json()] == [contact.id]


def test_upcoming_birthdays(store):
    store.upsert(Contact(first_name="Soon", last_name="B", birthday=date.today()))
    store.upsert(Contact(first_name="Never", last_name="B"))
    response = client.get("/api/contacts/birthdays")
    assert response.status_code == 200
    assert [c["firstName"] for c in response.json()] == ["Soon"]


def test_storage_failure_is_reported(contact_body):
    broken = MagicMock(spec=ContactStore)
    broken.upsert.side_effect = StorageError("could not write 'kinship_contacts_v1'")
    app.dependency_overrides[get_store] = lambda: broken
    response = client.post("/api/contacts/", json=contact_body)
    assert response.status_code == 503
    assert response.json()["detail"].startswith("Storage unavailable")
