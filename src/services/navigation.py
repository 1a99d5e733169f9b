import enum

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class View(str, enum.Enum):
    LIST = "LIST"
    CREATE = "CREATE"
    EDIT = "EDIT"


class ViewState(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    current_view: View = View.LIST
    selected_contact_id: str | None = None


class ViewSelector:
    """
    Which screen is showing: the list, the new-contact form, or one contact.

    There is no history; going back always lands on the list.
    """

    def __init__(self):
        self.state = ViewState()

    def create_new(self) -> ViewState:
        self.state = ViewState(current_view=View.CREATE)
        return self.state

    def select(self, contact_id: str) -> ViewState:
        self.state = ViewState(current_view=View.EDIT, selected_contact_id=contact_id)
        return self.state

    def saved(self, contact_id: str) -> ViewState:
        # A new contact opens on its own page; an edited one stays put.
        return self.select(contact_id)

    def deleted(self) -> ViewState:
        return self.back()

    def back(self) -> ViewState:
        self.state = ViewState()
        return self.state
