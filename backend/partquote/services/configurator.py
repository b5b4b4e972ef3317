import logging
from enum import IntEnum
from typing import Any, NamedTuple, Optional

from partquote.models.part import LeadTime, Part, PartExtras, Selections, clamp_quantity

logger = logging.getLogger(__name__)


class Step(IntEnum):
    PROCESS = 0
    MATERIAL = 1
    SURFACE_FINISH = 2
    COATING = 3
    EXTRAS = 4


STEP_FIELDS = {
    Step.PROCESS: "process",
    Step.MATERIAL: "material",
    Step.SURFACE_FINISH: "surface_finish",
    Step.COATING: "coating",
    Step.EXTRAS: "extras",
}
REQUIRED_FIELDS = ("process", "material", "surface_finish", "coating")
FIRST_STEP = Step.PROCESS
LAST_STEP = Step.EXTRAS

# coating is the last gate before quantity/lead time; extras is terminal
_NO_AUTO_ADVANCE = {Step.COATING, Step.EXTRAS}


class StepCompletion(NamedTuple):
    process: bool
    material: bool
    surface_finish: bool
    coating: bool
    extras: bool

    @property
    def required_done(self) -> bool:
        return self.process and self.material and self.surface_finish and self.coating


class SelectionResult(NamedTuple):
    part: Part
    advanced: bool
    ready_to_price: bool


def extras_picked(extras: Optional[PartExtras]) -> bool:
    if extras is None:
        return False
    certs = extras.certificates
    return bool(
        extras.tolerance != "standard"
        or extras.threads
        or extras.inspection != "none"
        or certs.material or certs.finish or certs.heat_treat
        or extras.serialization
        or extras.custom_marking
        or extras.packaging.bag_per_part or extras.packaging.label
    )


def step_completion(part: Part) -> StepCompletion:
    """The one place that decides which configuration steps are done."""
    sel = part.selections
    return StepCompletion(
        process=bool(sel.process),
        material=bool(sel.material),
        surface_finish=bool(sel.surface_finish),
        coating=bool(sel.coating),
        extras=extras_picked(sel.extras),
    )


def is_complete(part: Part) -> bool:
    return step_completion(part).required_done


def first_incomplete_step(part: Part) -> int:
    done = step_completion(part)
    for step in (Step.PROCESS, Step.MATERIAL, Step.SURFACE_FINISH, Step.COATING):
        if not getattr(done, STEP_FIELDS[step]):
            return int(step)
    # extras are optional; stay where the user left off
    return part.current_step


def is_ready_to_price(selections: Selections, field: str) -> bool:
    return bool(
        field == "coating"
        and selections.coating
        and selections.process
        and selections.material
        and selections.surface_finish
    )


def go_to_step(part: Part, step: int) -> Part:
    bounded = max(int(FIRST_STEP), min(int(LAST_STEP), int(step)))
    return part.model_copy(update={"current_step": bounded})


def next_step(part: Part) -> Part:
    if part.current_step < LAST_STEP:
        return go_to_step(part, part.current_step + 1)
    return part


def prev_step(part: Part) -> Part:
    if part.current_step > FIRST_STEP:
        return go_to_step(part, part.current_step - 1)
    return part


def expand(part: Part) -> Part:
    return go_to_step(part, first_incomplete_step(part))


def _with_selections(part: Part, **changes: Any) -> Part:
    return part.model_copy(update={"selections": part.selections.model_copy(update=changes)})


def select(part: Part, field: str, value: str) -> SelectionResult:
    """Record a required selection and apply the step transition rules.

    Selecting a non-empty value for the field of the part's current step
    moves to the next step, except on the coating and extras steps.
    """
    if field not in REQUIRED_FIELDS:
        raise ValueError(f"not a configuration step field: {field}")

    value = getattr(value, "value", value)
    updated = _with_selections(part, **{field: value or ""})
    current = Step(part.current_step)
    advanced = False
    if value and STEP_FIELDS[current] == field and current not in _NO_AUTO_ADVANCE:
        updated = next_step(updated)
        advanced = True

    ready = is_ready_to_price(updated.selections, field)
    logger.debug(
        "part=%s %s=%r step %s->%s ready=%s",
        part.id, field, value, part.current_step, updated.current_step, ready,
    )
    return SelectionResult(updated, advanced, ready)


def update_extras(part: Part, extras: Optional[PartExtras]) -> Part:
    return _with_selections(part, extras=extras)


def update_quantity(part: Part, quantity: Any) -> Part:
    return _with_selections(part, quantity=clamp_quantity(quantity))


def update_lead_time(part: Part, lead_time: str) -> Part:
    token = getattr(lead_time, "value", lead_time)
    if token not in {t.value for t in LeadTime}:
        logger.warning("Ignoring unsupported lead time %r for part=%s", lead_time, part.id)
        return part
    return _with_selections(part, lead_time=token)
