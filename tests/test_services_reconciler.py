import pytest
from pydantic import ValidationError

from src.schemas.contact import COLORS, Child, Contact, Sibling, SiblingRelation
from src.services.ids import RecordGenerator
from src.services.reconciler import (
    ContactDraft,
    FormReconciler,
    Relationship,
    RelationshipFlags,
    TriState,
    infer_flags,
    parse_count,
)


@pytest.fixture()
def reconciler():
    return FormReconciler(RecordGenerator(seed=1))


@pytest.fixture()
def contact():
    return Contact(
        id="42",
        first_name="Alice",
        last_name="Rivera",
        partner_name="Carlos",
        partner_notes="Chef",
        children=[Child(id="c1", name="Mia", age="5", birth_order="1")],
        children_notes="Loves space",
        avatar_color="bg-indigo-500",
    )


def children_draft(reconciler, count):
    draft = reconciler.open()
    draft = reconciler.update_fields(draft, first_name="Jane", last_name="Doe")
    draft = reconciler.set_flag(draft, Relationship.children, TriState.yes)
    return reconciler.set_count(draft, Relationship.children, count)


def test_infer_flags_from_data(contact):
    flags = infer_flags(contact)
    assert flags.has_partner == TriState.yes
    assert flags.has_children == TriState.yes
    assert flags.has_siblings == TriState.unanswered


def test_infer_flags_never_no():
    flags = infer_flags(Contact(first_name="A", last_name="B", partner_name="   "))
    assert flags == RelationshipFlags()


def test_open_new_assigns_color(reconciler):
    draft = reconciler.open()
    assert draft.contact.avatar_color in COLORS
    assert draft.flags == RelationshipFlags()


def test_open_existing_keeps_data(reconciler, contact):
    draft = reconciler.open(contact)
    assert draft.contact.id == "42"
    assert draft.contact.children == contact.children
    assert draft.flags.has_partner == TriState.yes


@pytest.mark.parametrize("answer", [TriState.no, TriState.unsure, TriState.unanswered])
def test_leaving_yes_clears_partner(reconciler, contact, answer):
    draft = reconciler.set_flag(reconciler.open(contact), Relationship.partner, answer)
    assert draft.contact.partner_name == ""
    assert draft.contact.partner_notes == ""
    assert draft.flags.has_partner == answer


def test_leaving_yes_clears_children_and_notes(reconciler, contact):
    draft = reconciler.set_flag(reconciler.open(contact), Relationship.children, TriState.no)
    assert draft.contact.children == []
    assert draft.contact.children_notes == ""


def test_children_yes_from_zero_seeds_one_child(reconciler):
    draft = reconciler.set_flag(reconciler.open(), Relationship.children, TriState.yes)
    assert len(draft.contact.children) == 1
    assert draft.contact.children[0].birth_order == "1"
    assert draft.contact.children[0].name == ""


def test_children_yes_keeps_existing_children(reconciler, contact):
    draft = reconciler.set_flag(reconciler.open(contact), Relationship.children, TriState.yes)
    assert draft.contact.children == contact.children


def test_siblings_yes_does_not_seed(reconciler):
    draft = reconciler.set_flag(reconciler.open(), Relationship.siblings, TriState.yes)
    assert draft.contact.siblings == []


def test_count_increase_appends_ranked_children(reconciler):
    draft = children_draft(reconciler, 1)
    draft = reconciler.update_child(draft, 0, name="Mia")
    draft = reconciler.set_count(draft, Relationship.children, "4")
    assert [c.birth_order for c in draft.contact.children] == ["1", "2", "3", "4"]
    assert draft.contact.children[0].name == "Mia"
    assert all(c.name == "" for c in draft.contact.children[1:])
    assert len({c.id for c in draft.contact.children}) == 4


def test_count_decrease_truncates_from_end(reconciler):
    draft = children_draft(reconciler, 3)
    draft = reconciler.update_child(draft, 0, name="First")
    draft = reconciler.update_child(draft, 2, name="Third")
    draft = reconciler.set_count(draft, Relationship.children, 2)
    assert [c.name for c in draft.contact.children] == ["First", ""]


def test_zero_children_rejected_while_yes(reconciler):
    draft = children_draft(reconciler, 2)
    assert reconciler.set_count(draft, Relationship.children, "0") == draft


@pytest.mark.parametrize("raw", ["-1", "21", "abc", "", "2.5", 100, 2.5, None, True, [2]])
def test_invalid_counts_are_noop(reconciler, raw):
    draft = children_draft(reconciler, 2)
    assert reconciler.set_count(draft, Relationship.children, raw) == draft


def test_sibling_count_has_no_default_relation(reconciler):
    draft = reconciler.set_flag(reconciler.open(), Relationship.siblings, TriState.yes)
    draft = reconciler.set_count(draft, Relationship.siblings, 2)
    assert [s.relation for s in draft.contact.siblings] == [SiblingRelation.unset] * 2


def test_sibling_count_can_go_to_zero(reconciler):
    draft = reconciler.set_flag(reconciler.open(), Relationship.siblings, TriState.yes)
    draft = reconciler.set_count(draft, Relationship.siblings, 3)
    draft = reconciler.set_count(draft, Relationship.siblings, 0)
    assert draft.contact.siblings == []


def test_partner_has_no_count(reconciler):
    with pytest.raises(ValueError):
        reconciler.set_count(reconciler.open(), Relationship.partner, 1)


def test_update_sibling_out_of_range_is_noop(reconciler):
    draft = reconciler.open()
    assert reconciler.update_sibling(draft, 3, name="Ghost") == draft


def test_update_sibling_relation(reconciler):
    draft = reconciler.set_count(reconciler.open(), Relationship.siblings, 1)
    draft = reconciler.update_sibling(draft, 0, name="Ana", relation="older")
    assert draft.contact.siblings[0].relation == SiblingRelation.older


def test_update_fields_cannot_change_id_or_color(reconciler, contact):
    draft = reconciler.update_fields(reconciler.open(contact), id="other", avatar_color="bg-red-500", notes="hi")
    assert draft.contact.id == "42"
    assert draft.contact.avatar_color == "bg-indigo-500"
    assert draft.contact.notes == "hi"


def test_submit_clears_stale_partner(reconciler):
    draft = reconciler.update_fields(reconciler.open(), first_name="Jane", last_name="Doe")
    draft = reconciler.set_flag(draft, Relationship.partner, TriState.yes)
    draft = reconciler.update_fields(draft, partner_name="Sam")
    draft = reconciler.set_flag(draft, Relationship.partner, TriState.no)
    # The form field may still show the old name after the flip.
    draft = reconciler.update_fields(draft, partner_name="Sam")
    contact = reconciler.submit(draft)
    assert contact.partner_name == ""
    assert contact.partner_notes == ""


@pytest.mark.parametrize("answer", [TriState.no, TriState.unsure, TriState.unanswered])
def test_submit_forces_empty_unless_yes(reconciler, answer):
    draft = ContactDraft(
        contact=Contact(
            first_name="A", last_name="B", partner_name="P", partner_notes="n",
            children=[Child(name="c")], children_notes="cn",
            siblings=[Sibling(name="s")], siblings_notes="sn",
        ),
        flags=RelationshipFlags(has_partner=answer, has_children=answer, has_siblings=answer),
    )
    contact = reconciler.submit(draft)
    assert (contact.partner_name, contact.partner_notes) == ("", "")
    assert (contact.children, contact.children_notes) == ([], "")
    assert (contact.siblings, contact.siblings_notes) == ([], "")


def test_submit_keeps_data_when_yes(reconciler, contact):
    result = reconciler.submit(reconciler.open(contact))
    assert result.partner_name == "Carlos"
    assert result.children == contact.children


def test_submit_requires_names(reconciler):
    with pytest.raises(ValidationError):
        reconciler.submit(reconciler.update_fields(reconciler.open(), first_name="  ", last_name="Doe"))


def test_parse_count():
    assert parse_count(" 3 ") == 3
    assert parse_count(20) == 20
    assert parse_count(True) is None
    assert parse_count("21") is None
    assert parse_count(False) is None
    assert parse_count(None) is None
    assert parse_count(2.5) is None
    assert parse_count(3.0) == 3
