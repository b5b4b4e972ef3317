import pytest
from fastapi.testclient import TestClient

from partquote.main import app
from partquote.models.part import Part, Selections
from partquote.services.store import quote_sessions


def make_part(part_id="p1", name="Bracket", **selections) -> Part:
    return Part(id=part_id, name=name, selections=Selections(**selections))


@pytest.fixture
def configured_part() -> Part:
    return make_part(
        process="cnc",
        material="6061",
        surface_finish="bead-blast",
        coating="clear-anodize",
        quantity=1,
        lead_time="7",
    )


@pytest.fixture
def client():
    quote_sessions.clear()
    with TestClient(app) as c:
        yield c
    quote_sessions.clear()
