"""Part collection: the list of parts a quote session works on.

The module-level functions never mutate their input; each returns a new
list in which unrelated parts keep their identity and order.
:class:`PartsManager` wraps them with the session state (active part,
expanded parts) and notifies an injected ``on_change`` callback.
"""
import itertools
import logging
from typing import Any, Callable, Iterable, List, Optional, Sequence, Set, Tuple
from uuid import uuid4

from partquote.models.part import FileDescriptor, Part, PartExtras, Selections
from partquote.services import configurator
from partquote.utils.files import strip_extension

logger = logging.getLogger(__name__)

VARIANT_NAME = "Variant #{}"


class PartNotFoundError(KeyError):
    pass


class PartIdFactory:
    """Issues part ids that are never reused within a session."""

    def __init__(self):
        self._counter = itertools.count(1)
        self._issued: Set[str] = set()

    def __call__(self) -> str:
        while True:
            pid = f"part-{next(self._counter)}-{uuid4().hex[:9]}"
            if pid not in self._issued:
                self._issued.add(pid)
                return pid


def new_part(part_id: str, name: str, file_name: Optional[str] = None,
             file_size: Optional[int] = None) -> Part:
    return Part(
        id=part_id,
        name=name,
        file_name=file_name,
        file_size=file_size,
        current_step=0,
        selections=Selections(extras=PartExtras()),
    )


def find(parts: Sequence[Part], part_id: str) -> Part:
    for p in parts:
        if p.id == part_id:
            return p
    raise PartNotFoundError(part_id)


def replace(parts: Sequence[Part], part_id: str, fn: Callable[[Part], Part]) -> List[Part]:
    find(parts, part_id)
    return [fn(p) if p.id == part_id else p for p in parts]


def add_from_files(parts: Sequence[Part], files: Iterable[FileDescriptor],
                   new_id: Callable[[], str]) -> Tuple[List[Part], List[Part]]:
    added = [new_part(new_id(), strip_extension(f.file_name), f.file_name, f.file_size) for f in files]
    return list(parts) + added, added


def add_empty(parts: Sequence[Part], new_id: Callable[[], str]) -> Tuple[List[Part], Part]:
    # count-based naming can repeat a name after deletions; names are labels, ids are identity
    part = new_part(new_id(), f"Part {len(parts) + 1}")
    return list(parts) + [part], part


def duplicate(parts: Sequence[Part], part_id: str,
              new_id: Callable[[], str]) -> Tuple[List[Part], Part]:
    src = find(parts, part_id)
    copy = src.model_copy(
        update={
            "id": new_id(),
            "name": f"{src.name} Copy",
            "file_name": None,
            "file_size": None,
            "selections": src.selections.model_copy(deep=True),
            "parent_id": None,
            "is_variation": False,
            "variation_number": None,
        }
    )
    return list(parts) + [copy], copy


def _root_of(parts: Sequence[Part], part: Part) -> Part:
    if part.is_variation and part.parent_id:
        try:
            return find(parts, part.parent_id)
        except PartNotFoundError:
            return part
    return part


def variations_of(parts: Sequence[Part], parent_id: str) -> List[Part]:
    return [p for p in parts if p.is_variation and p.parent_id == parent_id]


def create_variation(parts: Sequence[Part], part_id: str,
                     new_id: Callable[[], str]) -> Tuple[List[Part], Part]:
    parent = _root_of(parts, find(parts, part_id))
    siblings = variations_of(parts, parent.id)
    number = len(siblings) + 1
    variation = parent.model_copy(
        update={
            "id": new_id(),
            "name": VARIANT_NAME.format(number),
            "selections": parent.selections.model_copy(deep=True),
            "parent_id": parent.id,
            "is_variation": True,
            "variation_number": number,
        }
    )

    anchor = siblings[-1].id if siblings else parent.id
    result: List[Part] = []
    for p in parts:
        result.append(p)
        if p.id == anchor:
            result.append(variation)
    return result, variation


def _renumber(parts: Sequence[Part], parent_id: str) -> List[Part]:
    counter = itertools.count(1)
    result = []
    for p in parts:
        if p.is_variation and p.parent_id == parent_id:
            n = next(counter)
            p = p.model_copy(update={"variation_number": n, "name": VARIANT_NAME.format(n)})
        result.append(p)
    return result


def remove_variation(parts: Sequence[Part], variation_id: str) -> List[Part]:
    variation = find(parts, variation_id)
    if not variation.is_variation:
        logger.debug("remove_variation ignored for non-variation part=%s", variation_id)
        return list(parts)
    remaining = [p for p in parts if p.id != variation_id]
    return _renumber(remaining, variation.parent_id)


def remove(parts: Sequence[Part], part_id: str) -> List[Part]:
    part = find(parts, part_id)
    if part.is_variation:
        return remove_variation(parts, part_id)
    # a variation must reference a live parent, so its variations go with it
    return [p for p in parts if p.id != part_id and not (p.is_variation and p.parent_id == part_id)]


def rename(parts: Sequence[Part], part_id: str, name: str) -> List[Part]:
    return replace(parts, part_id, lambda p: p.model_copy(update={"name": name}))


def update_selections(parts: Sequence[Part], part_id: str, patch: dict) -> List[Part]:
    patch = dict(patch)
    lead_time = patch.pop("lead_time", None)

    def apply(p: Part) -> Part:
        merged = {**p.selections.model_dump(), **patch}
        p = p.model_copy(update={"selections": Selections.model_validate(merged)})
        # same rule as update_lead_time: unsupported tokens leave it unchanged
        return configurator.update_lead_time(p, lead_time) if lead_time is not None else p
    return replace(parts, part_id, apply)


def update_quantity(parts: Sequence[Part], part_id: str, quantity: Any) -> List[Part]:
    return replace(parts, part_id, lambda p: configurator.update_quantity(p, quantity))


def update_lead_time(parts: Sequence[Part], part_id: str, lead_time: str) -> List[Part]:
    return replace(parts, part_id, lambda p: configurator.update_lead_time(p, lead_time))


def attach_drawing(parts: Sequence[Part], part_id: str, drawing: FileDescriptor) -> List[Part]:
    return replace(parts, part_id, lambda p: p.model_copy(
        update={"drawing_file_name": drawing.file_name, "drawing_file_size": drawing.file_size}
    ))


def remove_drawing(parts: Sequence[Part], part_id: str) -> List[Part]:
    return replace(parts, part_id, lambda p: p.model_copy(
        update={"drawing_file_name": None, "drawing_file_size": None}
    ))


class PartsManager:
    def __init__(self, parts: Sequence[Part] = (),
                 on_change: Optional[Callable[[List[Part]], None]] = None,
                 id_factory: Optional[Callable[[], str]] = None):
        self.parts: List[Part] = list(parts)
        self.active_part: Optional[str] = None
        self.expanded: Set[str] = set()
        self.on_change = on_change
        self.new_id = id_factory or PartIdFactory()

    def _commit(self, parts: List[Part]) -> None:
        self.parts = parts
        if self.active_part is not None and all(p.id != self.active_part for p in parts):
            self.active_part = parts[0].id if parts else None
        self.expanded &= {p.id for p in parts}
        if self.on_change is not None:
            self.on_change(list(parts))

    def get(self, part_id: str) -> Part:
        return find(self.parts, part_id)

    def expand_and_focus(self, part_id: str) -> None:
        self.active_part = part_id
        self.expanded.add(part_id)

    def set_active(self, part_id: Optional[str]) -> None:
        if part_id is not None:
            find(self.parts, part_id)
        self.active_part = part_id

    def toggle_expansion(self, part_id: str) -> bool:
        """Collapse an expanded part, or expand it at its first incomplete step."""
        if part_id in self.expanded:
            find(self.parts, part_id)
            self.expanded.discard(part_id)
            return False
        self._commit(replace(self.parts, part_id, configurator.expand))
        self.expanded.add(part_id)
        return True

    def add_from_files(self, files: Iterable[FileDescriptor]) -> List[Part]:
        parts, added = add_from_files(self.parts, files, self.new_id)
        self._commit(parts)
        if added:
            self.expand_and_focus(added[0].id)
        logger.info("Added %s part(s) from files", len(added))
        return added

    def add_empty(self) -> Part:
        parts, part = add_empty(self.parts, self.new_id)
        self._commit(parts)
        self.expand_and_focus(part.id)
        logger.info("Added empty part id=%s name=%s", part.id, part.name)
        return part

    def duplicate(self, part_id: str) -> Part:
        parts, part = duplicate(self.parts, part_id, self.new_id)
        self._commit(parts)
        self.expand_and_focus(part.id)
        logger.info("Duplicated part %s -> %s", part_id, part.id)
        return part

    def create_variation(self, part_id: str) -> Part:
        parts, part = create_variation(self.parts, part_id, self.new_id)
        self._commit(parts)
        self.expand_and_focus(part.id)
        logger.info("Created variation id=%s parent=%s number=%s", part.id, part.parent_id, part.variation_number)
        return part

    def remove(self, part_id: str) -> None:
        self._commit(remove(self.parts, part_id))
        logger.info("Removed part id=%s remaining=%s", part_id, len(self.parts))

    def remove_variation(self, variation_id: str) -> None:
        self._commit(remove_variation(self.parts, variation_id))
        logger.info("Removed variation id=%s", variation_id)

    def rename(self, part_id: str, name: str) -> Part:
        self._commit(rename(self.parts, part_id, name))
        return self.get(part_id)

    def update_selections(self, part_id: str, **patch: Any) -> Part:
        self._commit(update_selections(self.parts, part_id, patch))
        return self.get(part_id)

    def update_quantity(self, part_id: str, quantity: Any) -> Part:
        self._commit(update_quantity(self.parts, part_id, quantity))
        return self.get(part_id)

    def update_lead_time(self, part_id: str, lead_time: str) -> Part:
        self._commit(update_lead_time(self.parts, part_id, lead_time))
        return self.get(part_id)

    def update_extras(self, part_id: str, extras: Optional[PartExtras]) -> Part:
        self._commit(replace(self.parts, part_id, lambda p: configurator.update_extras(p, extras)))
        return self.get(part_id)

    def select(self, part_id: str, field: str, value: str) -> configurator.SelectionResult:
        result = configurator.select(self.get(part_id), field, value)
        self._commit(replace(self.parts, part_id, lambda _: result.part))
        if result.ready_to_price:
            # configuration is functionally done; keep the part open on quantity/lead time
            self.expanded.add(part_id)
        return result

    def go_to_step(self, part_id: str, step: int) -> Part:
        self._commit(replace(self.parts, part_id, lambda p: configurator.go_to_step(p, step)))
        return self.get(part_id)

    def next_step(self, part_id: str) -> Part:
        self._commit(replace(self.parts, part_id, configurator.next_step))
        return self.get(part_id)

    def prev_step(self, part_id: str) -> Part:
        self._commit(replace(self.parts, part_id, configurator.prev_step))
        return self.get(part_id)

    def attach_drawing(self, part_id: str, drawing: FileDescriptor) -> Part:
        self._commit(attach_drawing(self.parts, part_id, drawing))
        return self.get(part_id)

    def remove_drawing(self, part_id: str) -> Part:
        self._commit(remove_drawing(self.parts, part_id))
        return self.get(part_id)
