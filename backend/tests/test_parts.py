import itertools

import pytest
from pydantic import ValidationError

from partquote.models.part import FileDescriptor, LeadTime, Selections
from partquote.services import parts as collection
from partquote.services.parts import PartNotFoundError, PartsManager


@pytest.fixture
def manager():
    counter = itertools.count(1)
    return PartsManager(id_factory=lambda: f"id{next(counter)}")


def _configure(manager, part_id):
    manager.update_selections(
        part_id, process="cnc", material="6061", surface_finish="bead-blast", coating="clear-anodize"
    )


def test_add_from_files_one_part_per_file(manager):
    added = manager.add_from_files([
        FileDescriptor(file_name="bracket.step", file_size=27460),
        FileDescriptor(file_name="housing.v2.stl", file_size=1024),
    ])

    assert [p.name for p in added] == ["bracket", "housing.v2"]
    assert added[0].file_name == "bracket.step"
    assert added[0].file_size == 27460
    assert added[0].current_step == 0
    assert added[0].selections.process == ""
    assert added[0].selections.lead_time == "7"
    assert manager.active_part == added[0].id
    assert added[0].id in manager.expanded


def test_add_empty_names_by_count(manager):
    first = manager.add_empty()
    second = manager.add_empty()

    assert (first.name, second.name) == ("Part 1", "Part 2")
    assert first.file_name is None


def test_duplicate_clears_file_and_copies_selections(manager):
    (src,) = manager.add_from_files([FileDescriptor(file_name="shaft.step", file_size=10)])
    _configure(manager, src.id)
    copy = manager.duplicate(src.id)

    assert copy.id != src.id
    assert copy.name == "shaft Copy"
    assert copy.file_name is None and copy.file_size is None
    assert copy.selections == manager.get(src.id).selections
    assert [p.id for p in manager.parts] == [src.id, copy.id]


def test_variations_are_numbered_and_grouped(manager):
    parent = manager.add_empty()
    other = manager.add_empty()
    v1 = manager.create_variation(parent.id)
    v2 = manager.create_variation(parent.id)

    assert (v1.variation_number, v2.variation_number) == (1, 2)
    assert (v1.name, v2.name) == ("Variant #1", "Variant #2")
    assert v1.parent_id == parent.id and v1.is_variation
    assert [p.id for p in manager.parts] == [parent.id, v1.id, v2.id, other.id]


def test_variation_of_variation_links_to_root(manager):
    parent = manager.add_empty()
    v1 = manager.create_variation(parent.id)
    v2 = manager.create_variation(v1.id)

    assert v2.parent_id == parent.id
    assert v2.variation_number == 2


def test_removing_variation_renumbers_siblings(manager):
    parent = manager.add_empty()
    v1 = manager.create_variation(parent.id)
    v2 = manager.create_variation(parent.id)
    v3 = manager.create_variation(parent.id)

    manager.remove_variation(v2.id)

    remaining = [p for p in manager.parts if p.is_variation]
    assert [p.id for p in remaining] == [v1.id, v3.id]
    assert [p.variation_number for p in remaining] == [1, 2]
    assert [p.name for p in remaining] == ["Variant #1", "Variant #2"]


def test_remove_variation_ignores_regular_parts(manager):
    part = manager.add_empty()
    manager.remove_variation(part.id)
    assert manager.get(part.id) == part


def test_removing_parent_removes_its_variations(manager):
    parent = manager.add_empty()
    manager.create_variation(parent.id)
    keep = manager.add_empty()

    manager.remove(parent.id)

    assert [p.id for p in manager.parts] == [keep.id]


def test_remove_active_falls_back_to_first(manager):
    a = manager.add_empty()
    b = manager.add_empty()
    assert manager.active_part == b.id

    manager.remove(b.id)
    assert manager.active_part == a.id

    manager.remove(a.id)
    assert manager.active_part is None
    assert manager.parts == []


def test_remove_inactive_keeps_focus(manager):
    a = manager.add_empty()
    b = manager.add_empty()
    manager.set_active(a.id)

    manager.remove(b.id)
    assert manager.active_part == a.id


def test_updates_preserve_other_state(manager):
    a = manager.add_empty()
    b = manager.add_empty()
    _configure(manager, a.id)
    before_b = manager.get(b.id)

    manager.rename(a.id, "Bracket")
    manager.update_quantity(a.id, "abc")
    manager.update_lead_time(a.id, "2")

    part = manager.get(a.id)
    assert part.name == "Bracket"
    assert part.selections.quantity == 1
    assert part.selections.lead_time == "2"
    assert part.selections.material == "6061"
    assert manager.get(b.id) is before_b


def test_update_selections_clamps_quantity(manager):
    part = manager.add_empty()
    assert manager.update_selections(part.id, quantity=50000).selections.quantity == 10000


def test_select_through_manager_keeps_part_open(manager):
    part = manager.add_empty()
    manager.toggle_expansion(part.id)
    assert part.id not in manager.expanded

    manager.update_selections(part.id, process="cnc", material="6061", surface_finish="brushed")
    result = manager.select(part.id, "coating", "none")

    assert result.ready_to_price
    assert part.id in manager.expanded


def test_toggle_expansion_resumes_at_incomplete_step(manager):
    part = manager.add_empty()
    manager.update_selections(part.id, process="cnc")
    manager.go_to_step(part.id, 4)
    manager.toggle_expansion(part.id)  # collapse

    assert manager.toggle_expansion(part.id) is True
    assert manager.get(part.id).current_step == 1


def test_on_change_receives_new_lists():
    seen = []
    manager = PartsManager(on_change=seen.append)
    manager.add_empty()
    manager.add_empty()

    assert [len(parts) for parts in seen] == [1, 2]
    assert seen[0] is not seen[1]


def test_functions_do_not_mutate_input(manager):
    part = manager.add_empty()
    original = list(manager.parts)
    collection.rename(original, part.id, "Changed")
    assert original[0].name == "Part 1"


def test_ids_are_never_reused():
    factory = collection.PartIdFactory()
    manager = PartsManager(id_factory=factory)
    ids = set()
    for _ in range(5):
        p = manager.add_empty()
        ids.add(p.id)
        manager.remove(p.id)
    assert len(ids) == 5


def test_unknown_part_raises(manager):
    with pytest.raises(PartNotFoundError):
        manager.duplicate("missing")


def test_drawing_attach_and_remove(manager):
    part = manager.add_empty()
    manager.attach_drawing(part.id, FileDescriptor(file_name="bracket.pdf", file_size=2048))
    assert manager.get(part.id).drawing_file_name == "bracket.pdf"
    manager.remove_drawing(part.id)
    assert manager.get(part.id).drawing_file_name is None


def test_update_selections_keeps_lead_time_in_tiers(manager):
    part = manager.add_empty()
    manager.update_selections(part.id, lead_time="2")

    updated = manager.update_selections(part.id, lead_time="4", process="cnc")

    assert updated.selections.lead_time == "2"
    assert updated.selections.process == "cnc"


def test_selections_reject_unknown_lead_time():
    with pytest.raises(ValidationError):
        Selections(lead_time="4")
    assert Selections(lead_time=LeadTime.ONE_DAY).lead_time == "1"
