import enum
from datetime import date

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


COLORS = [
    'bg-red-500', 'bg-orange-500', 'bg-amber-500', 'bg-green-500',
    'bg-emerald-500', 'bg-teal-500', 'bg-cyan-500', 'bg-blue-500',
    'bg-indigo-500', 'bg-violet-500', 'bg-purple-500', 'bg-fuchsia-500',
    'bg-pink-500', 'bg-rose-500',
]


class ContactFrequency(str, enum.Enum):
    weekly = "weekly"
    monthly = "monthly"
    quarterly = "quarterly"
    bi_annually = "bi-annually"
    yearly = "yearly"
    unset = ""


class Tier(str, enum.Enum):
    close = "1 - Close Friend/Family"
    colleague = "2 - Friend/Colleague"
    acquaintance = "3 - Acquaintance"
    unset = ""


# Tier labels written before the ranking prefix was added.
LEGACY_TIERS = {
    "Close Friend/Family": Tier.close,
    "Friend/Colleague": Tier.colleague,
    "Acquaintance": Tier.acquaintance,
}


class SiblingRelation(str, enum.Enum):
    older = "older"
    younger = "younger"
    unset = ""


class CamelModel(BaseModel):
    """
    Base for every stored shape: camelCase on the wire, snake_case in Python,
    unknown keys from older records ignored.
    """
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore", frozen=True)


class Child(CamelModel):
    id: str = ""
    name: str = ""
    age: str = ""
    birth_order: str = ""


class Sibling(CamelModel):
    id: str = ""
    name: str = ""
    relation: SiblingRelation = SiblingRelation.unset


class ContactData(CamelModel):
    """
    Every field of a contact, with nothing required.

    Used as-is for editor drafts; persisted records go through ``Contact``,
    which adds the required-name check.
    """
    id: str = ""
    first_name: str = ""
    last_name: str = ""
    birthday: date | None = None
    partner_name: str = ""
    partner_notes: str = ""
    children: list[Child] = Field(default_factory=list)
    children_notes: str = ""
    siblings: list[Sibling] = Field(default_factory=list)
    siblings_notes: str = ""
    education: str = ""
    occupation: str = ""
    interests: str = ""
    notes: str = ""
    avatar_color: str = ""
    last_contacted_date: date | None = None
    contact_frequency: ContactFrequency = ContactFrequency.unset
    tier: Tier = Tier.unset
    phone_number: str = ""
    email: str = ""
    instagram: str = ""
    linkedin: str = ""

    @field_validator("birthday", "last_contacted_date", mode="before")
    @classmethod
    def blank_date_is_none(cls, value):
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @field_validator("tier", mode="before")
    @classmethod
    def known_tier(cls, value):
        if isinstance(value, Tier):
            return value
        if isinstance(value, str) and value in LEGACY_TIERS:
            return LEGACY_TIERS[value]
        try:
            return Tier(value)
        except ValueError:
            return Tier.unset

    @field_validator("contact_frequency", mode="before")
    @classmethod
    def known_frequency(cls, value):
        try:
            return ContactFrequency(value)
        except ValueError:
            return ContactFrequency.unset

    @field_validator("avatar_color", mode="before")
    @classmethod
    def palette_color(cls, value):
        # Anything off the palette is dropped so the store assigns a real one.
        return value if value in COLORS else ""


class ContactBase(ContactData):
    first_name: str
    last_name: str

    @field_validator("first_name", "last_name")
    @classmethod
    def name_required(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("must not be blank")
        return value


class ContactCreate(ContactBase):
    pass


class ContactUpdate(ContactBase):
    pass


class Contact(ContactBase):
    pass
