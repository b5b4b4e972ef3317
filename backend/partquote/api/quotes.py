import logging
import time
from datetime import datetime, timezone
from typing import Any, Dict, List, Literal, Optional, Union
from uuid import uuid4

from fastapi import APIRouter, File, HTTPException, UploadFile
from pydantic import BaseModel, Field

from partquote.models.checkout import Attachment
from partquote.models.part import (
    Coating,
    FileDescriptor,
    LeadTime,
    Material,
    Part,
    PartExtras,
    Process,
    SurfaceFinish,
)
from partquote.services import compatibility, configurator
from partquote.services.catalog import REQUIREMENT_IDS, display_name
from partquote.services.store import QuoteSession, aggregator, quote_sessions
from partquote.services.validation import ISSUE_MESSAGES, MAX_ATTACHMENT_BYTES, validate_attachment
from partquote.utils.files import format_file_size

logger = logging.getLogger(__name__)
router = APIRouter()


SELECTION_TYPES = {
    "process": Process,
    "material": Material,
    "surface_finish": SurfaceFinish,
    "coating": Coating,
}


class AddPartsRequest(BaseModel):
    files: List[FileDescriptor] = Field(default_factory=list)


class PartUpdate(BaseModel):
    name: Optional[str] = None
    quantity: Optional[Union[int, str]] = None
    lead_time: Optional[LeadTime] = None
    extras: Optional[PartExtras] = None


class SelectRequest(BaseModel):
    field: Literal["process", "material", "surface_finish", "coating"]
    value: str = ""


class StepRequest(BaseModel):
    step: int = Field(..., ge=0, le=4)


class LocationUpdate(BaseModel):
    zip_code: str = ""


class RequirementsUpdate(BaseModel):
    requirements: List[str] = Field(default_factory=list)
    notes: Optional[str] = None


def _session(quote_id: str) -> QuoteSession:
    session = quote_sessions.get(quote_id)
    if session is None:
        logger.warning("Unknown quote session quote_id=%s", quote_id)
        raise HTTPException(status_code=404, detail="Quote not found")
    return session


def _part(session: QuoteSession, part_id: str) -> Part:
    for p in session.manager.parts:
        if p.id == part_id:
            return p
    raise HTTPException(status_code=404, detail="Part not found")


def _part_view(session: QuoteSession, part: Part) -> Dict[str, Any]:
    completion = configurator.step_completion(part)
    complete = completion.required_done
    total = aggregator.engine.price(part) if complete else None
    view = part.model_dump()
    view.update({
        "completion": completion._asdict(),
        "is_complete": complete,
        "total_price": total,
        "unit_price": total / part.selections.quantity if total is not None else None,
        "expanded": part.id in session.manager.expanded,
        "active": part.id == session.manager.active_part,
        "stale_selections": compatibility.stale_selections(part),
        "labels": {f: display_name(f, getattr(part.selections, f)) for f in SELECTION_TYPES},
        "file_size_label": format_file_size(part.file_size or 0) if part.file_name else None,
    })
    return view


def _quote_view(session: QuoteSession) -> Dict[str, Any]:
    return {
        "quote_id": session.quote_id,
        "parts": [_part_view(session, p) for p in session.manager.parts],
        "active_part": session.manager.active_part,
        "requirements": sorted(session.requirements),
        "notes": session.notes,
        "totals": session.totals(aggregator).model_dump(),
    }


@router.post("", status_code=201)
def create_quote():
    session = quote_sessions.create()
    return {"quote_id": session.quote_id}


@router.get("/{quote_id}")
def get_quote(quote_id: str):
    session = _session(quote_id)
    with session.lock:
        return _quote_view(session)


@router.get("/{quote_id}/snapshot")
def get_snapshot(quote_id: str):
    session = _session(quote_id)
    with session.lock:
        return session.snapshot(aggregator)


@router.put("/{quote_id}/location")
def update_location(quote_id: str, upd: LocationUpdate):
    session = _session(quote_id)
    with session.lock:
        session.zip_code = upd.zip_code.strip()
        totals = session.totals(aggregator)
    logger.info("Tax location set quote_id=%s status=%s", quote_id, totals.status)
    return totals


@router.put("/{quote_id}/requirements")
def update_requirements(quote_id: str, upd: RequirementsUpdate):
    session = _session(quote_id)
    unknown = sorted(set(upd.requirements) - REQUIREMENT_IDS)
    if unknown:
        raise HTTPException(status_code=400, detail=f"Unknown requirements: {', '.join(unknown)}")
    with session.lock:
        session.requirements = set(upd.requirements)
        if upd.notes is not None:
            session.notes = upd.notes
        return {"requirements": sorted(session.requirements), "notes": session.notes}


@router.post("/{quote_id}/requirements/{requirement_id}/toggle")
def toggle_requirement(quote_id: str, requirement_id: str):
    session = _session(quote_id)
    with session.lock:
        try:
            selected = session.toggle_requirement(requirement_id)
        except KeyError:
            raise HTTPException(status_code=404, detail="Requirement not found")
    return {"requirement_id": requirement_id, "selected": selected}


@router.post("/{quote_id}/parts", status_code=201)
def add_parts(quote_id: str, req: AddPartsRequest):
    session = _session(quote_id)
    with session.lock:
        if req.files:
            added = session.manager.add_from_files(req.files)
        else:
            added = [session.manager.add_empty()]
        return {
            "added": [_part_view(session, p) for p in added],
            "active_part": session.manager.active_part,
        }


@router.patch("/{quote_id}/parts/{part_id}")
def update_part(quote_id: str, part_id: str, upd: PartUpdate):
    session = _session(quote_id)
    with session.lock:
        _part(session, part_id)
        manager = session.manager
        if upd.name is not None:
            manager.rename(part_id, upd.name)
        if upd.quantity is not None:
            manager.update_quantity(part_id, upd.quantity)
        if upd.lead_time is not None:
            manager.update_lead_time(part_id, upd.lead_time.value)
        if upd.extras is not None:
            manager.update_extras(part_id, upd.extras)
        return _part_view(session, manager.get(part_id))


@router.post("/{quote_id}/parts/{part_id}/select")
def select_option(quote_id: str, part_id: str, req: SelectRequest):
    session = _session(quote_id)
    value = req.value.strip()
    if value:
        try:
            value = SELECTION_TYPES[req.field](value).value
        except ValueError:
            logger.warning("Rejected unknown %s selection %r", req.field, value)
            raise HTTPException(status_code=422, detail=f"Unknown {req.field}: {value}")
    with session.lock:
        _part(session, part_id)
        result = session.manager.select(part_id, req.field, value)
        return {
            "part": _part_view(session, result.part),
            "advanced": result.advanced,
            "ready_to_price": result.ready_to_price,
            "totals": session.totals(aggregator).model_dump(),
        }


@router.put("/{quote_id}/parts/{part_id}/step")
def set_step(quote_id: str, part_id: str, req: StepRequest):
    session = _session(quote_id)
    with session.lock:
        _part(session, part_id)
        return _part_view(session, session.manager.go_to_step(part_id, req.step))


@router.post("/{quote_id}/parts/{part_id}/step/next")
def step_forward(quote_id: str, part_id: str):
    session = _session(quote_id)
    with session.lock:
        _part(session, part_id)
        return _part_view(session, session.manager.next_step(part_id))


@router.post("/{quote_id}/parts/{part_id}/step/prev")
def step_back(quote_id: str, part_id: str):
    session = _session(quote_id)
    with session.lock:
        _part(session, part_id)
        return _part_view(session, session.manager.prev_step(part_id))


@router.post("/{quote_id}/parts/{part_id}/expand")
def toggle_expand(quote_id: str, part_id: str):
    session = _session(quote_id)
    with session.lock:
        _part(session, part_id)
        expanded = session.manager.toggle_expansion(part_id)
        session.manager.set_active(part_id)
        return {"expanded": expanded, "part": _part_view(session, session.manager.get(part_id))}


@router.post("/{quote_id}/parts/{part_id}/duplicate", status_code=201)
def duplicate_part(quote_id: str, part_id: str):
    session = _session(quote_id)
    with session.lock:
        _part(session, part_id)
        return _part_view(session, session.manager.duplicate(part_id))


@router.post("/{quote_id}/parts/{part_id}/variations", status_code=201)
def create_variation(quote_id: str, part_id: str):
    session = _session(quote_id)
    with session.lock:
        _part(session, part_id)
        return _part_view(session, session.manager.create_variation(part_id))


@router.delete("/{quote_id}/parts/{part_id}")
def remove_part(quote_id: str, part_id: str):
    session = _session(quote_id)
    with session.lock:
        _part(session, part_id)
        session.manager.remove(part_id)
        session.attachments.pop(part_id, None)
        return {"removed": part_id, "active_part": session.manager.active_part}


@router.get("/{quote_id}/parts/{part_id}/options")
def offered_options(quote_id: str, part_id: str):
    session = _session(quote_id)
    part = _part(session, part_id)
    material = part.selections.material
    return {
        "material": material,
        "material_family": compatibility.material_family(material),
        "surface_finishes": compatibility.offered_finishes(material),
        "coatings": compatibility.offered_coatings(material),
        "stale_selections": compatibility.stale_selections(part),
    }


@router.get("/{quote_id}/parts/{part_id}/price")
def part_price(quote_id: str, part_id: str):
    session = _session(quote_id)
    part = _part(session, part_id)
    estimate = aggregator.engine.estimate(part)
    estimate["is_complete"] = configurator.is_complete(part)
    return estimate


@router.get("/{quote_id}/parts/{part_id}/lead-times")
def lead_time_quotes(quote_id: str, part_id: str):
    session = _session(quote_id)
    return aggregator.engine.lead_time_quotes(_part(session, part_id))


@router.post("/{quote_id}/parts/{part_id}/attachments")
async def upload_attachment(quote_id: str, part_id: str, file: Optional[UploadFile] = File(None)):
    session = _session(quote_id)
    _part(session, part_id)
    if file is None:
        raise HTTPException(status_code=400, detail="No file provided")

    # reject on the declared size before reading, then never read past the ceiling
    issue = validate_attachment(file.content_type, file.size or 0)
    if not issue:
        content = await file.read(MAX_ATTACHMENT_BYTES + 1)
        issue = validate_attachment(file.content_type, len(content))
    if issue:
        logger.warning("Rejected attachment part=%s file=%s issue=%s", part_id, file.filename, issue)
        raise HTTPException(status_code=400, detail=ISSUE_MESSAGES[issue])

    attachment = Attachment(
        id=f"att_{int(time.time() * 1000)}_{uuid4().hex[:6]}",
        part_id=part_id,
        file_name=file.filename,
        file_size=len(content),
        file_type=file.content_type,
        uploaded_at=datetime.now(timezone.utc).isoformat(),
        url=f"/uploads/{file.filename}",
    )
    with session.lock:
        _part(session, part_id)
        session.attachments.setdefault(part_id, []).append(attachment)
        session.manager.attach_drawing(
            part_id, FileDescriptor(file_name=attachment.file_name, file_size=attachment.file_size)
        )
    logger.info("Stored attachment id=%s part=%s size=%s", attachment.id, part_id, attachment.file_size)
    return attachment


@router.get("/{quote_id}/parts/{part_id}/attachments")
def list_attachments(quote_id: str, part_id: str):
    session = _session(quote_id)
    _part(session, part_id)
    return session.attachments.get(part_id, [])


@router.delete("/{quote_id}/parts/{part_id}/attachments/{attachment_id}")
def remove_attachment(quote_id: str, part_id: str, attachment_id: str):
    session = _session(quote_id)
    with session.lock:
        _part(session, part_id)
        existing = session.attachments.get(part_id, [])
        kept = [a for a in existing if a.id != attachment_id]
        if len(kept) == len(existing):
            raise HTTPException(status_code=404, detail="Attachment not found")
        session.attachments[part_id] = kept
        if kept:
            latest = kept[-1]
            session.manager.attach_drawing(
                part_id, FileDescriptor(file_name=latest.file_name, file_size=latest.file_size)
            )
        else:
            session.manager.remove_drawing(part_id)
    return {"success": True}
