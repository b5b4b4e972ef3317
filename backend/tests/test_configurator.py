import pytest

from conftest import make_part
from partquote.models.part import PartExtras, Certificates, ThreadSpec
from partquote.services import configurator
from partquote.services.configurator import Step


def test_selecting_current_step_advances():
    part = make_part()
    result = configurator.select(part, "process", "cnc")

    assert result.advanced is True
    assert result.part.current_step == Step.MATERIAL
    assert result.part.selections.process == "cnc"
    assert result.ready_to_price is False


def test_walkthrough_stops_on_coating():
    part = make_part()
    for field, value in (("process", "cnc"), ("material", "6061"), ("surface_finish", "bead-blast")):
        part = configurator.select(part, field, value).part
    assert part.current_step == Step.COATING

    result = configurator.select(part, "coating", "clear-anodize")
    assert result.advanced is False
    assert result.part.current_step == Step.COATING
    assert result.ready_to_price is True


def test_coating_without_material_is_not_ready():
    part = make_part(process="cnc", surface_finish="bead-blast").model_copy(update={"current_step": 3})
    result = configurator.select(part, "coating", "none")
    assert result.ready_to_price is False


def test_selecting_other_step_field_does_not_advance():
    part = make_part(process="cnc").model_copy(update={"current_step": 2})
    result = configurator.select(part, "process", "3d-printing")

    assert result.advanced is False
    assert result.part.current_step == 2
    assert result.part.selections.process == "3d-printing"


def test_clearing_a_selection_does_not_advance():
    part = make_part(process="cnc")
    result = configurator.select(part, "process", "")
    assert result.part.selections.process == ""
    assert result.part.current_step == 0


def test_select_rejects_non_step_fields():
    with pytest.raises(ValueError):
        configurator.select(make_part(), "quantity", "3")


def test_first_incomplete_step():
    assert configurator.first_incomplete_step(make_part()) == 0
    assert configurator.first_incomplete_step(make_part(process="cnc", material="6061")) == 2
    assert configurator.first_incomplete_step(make_part(process="cnc", surface_finish="brushed")) == 1


def test_first_incomplete_step_keeps_position_when_configured(configured_part):
    at_extras = configured_part.model_copy(update={"current_step": 4})
    assert configurator.first_incomplete_step(at_extras) == 4
    assert configurator.first_incomplete_step(configured_part) == 0


def test_expand_resumes_at_missing_step():
    part = make_part(process="cnc", material="6061").model_copy(update={"current_step": 0})
    assert configurator.expand(part).current_step == 2


def test_steps_are_bounded():
    part = make_part()
    assert configurator.prev_step(part).current_step == 0
    assert configurator.go_to_step(part, 9).current_step == 4
    assert configurator.go_to_step(part, -2).current_step == 0
    last = configurator.go_to_step(part, 4)
    assert configurator.next_step(last).current_step == 4
    assert configurator.next_step(part).current_step == 1


def test_non_linear_navigation_allowed():
    part = configurator.go_to_step(make_part(), 3)
    assert part.current_step == 3
    assert configurator.go_to_step(part, 1).current_step == 1


def test_completion_ignores_extras(configured_part):
    done = configurator.step_completion(configured_part)
    assert done.required_done
    assert configurator.is_complete(configured_part)
    assert configurator.is_complete(make_part(process="cnc", material="6061", surface_finish="brushed")) is False


def test_extras_picked():
    assert configurator.extras_picked(None) is False
    assert configurator.extras_picked(PartExtras()) is False
    assert configurator.extras_picked(PartExtras(inspection="CMM")) is True
    assert configurator.extras_picked(PartExtras(certificates=Certificates(heat_treat=True))) is True
    assert configurator.extras_picked(PartExtras(threads=[ThreadSpec(id="t1", type="UNC", size="1/4-20")])) is True
    # clean room and assembly are recorded but do not count as picked
    assert configurator.extras_picked(PartExtras(clean_room=True)) is False


@pytest.mark.parametrize("raw,expected", [(5, 5), (0, 1), (-3, 1), ("12", 12), ("abc", 1), (None, 1), (25000, 10000)])
def test_quantity_is_clamped(raw, expected):
    assert configurator.update_quantity(make_part(), raw).selections.quantity == expected


def test_unsupported_lead_time_is_ignored():
    part = make_part(lead_time="5")
    assert configurator.update_lead_time(part, "4").selections.lead_time == "5"
    assert configurator.update_lead_time(part, "1").selections.lead_time == "1"
