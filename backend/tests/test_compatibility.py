from conftest import make_part
from partquote.services import compatibility


def _ids(options):
    return [o.id for o in options]


def test_material_family_detection():
    assert compatibility.material_family("6061") == "aluminum"
    assert compatibility.material_family("7075") == "aluminum"
    assert compatibility.material_family("304-stainless") == "stainless"
    assert compatibility.material_family("316-stainless") == "stainless"
    assert compatibility.material_family("titanium") is None
    assert compatibility.material_family("") is None


def test_aluminum_offers_anodize_but_not_passivation():
    finishes = _ids(compatibility.offered_finishes("7075"))
    coatings = _ids(compatibility.offered_coatings("7075"))

    assert "anodized" in finishes
    assert "passivated" not in finishes
    assert {"clear-anodize", "black-anodize"} <= set(coatings)


def test_stainless_offers_passivation_only():
    finishes = _ids(compatibility.offered_finishes("304-stainless"))
    coatings = _ids(compatibility.offered_coatings("304-stainless"))

    assert "passivated" in finishes
    assert "anodized" not in finishes
    assert "clear-anodize" not in coatings


def test_unset_material_hides_restricted_options():
    finishes = _ids(compatibility.offered_finishes(""))
    assert "anodized" not in finishes and "passivated" not in finishes
    assert "as-machined" in finishes


def test_material_change_leaves_selection_and_reports_it():
    part = make_part(process="cnc", material="abs", surface_finish="anodized", coating="black-anodize")

    assert part.selections.coating == "black-anodize"
    assert compatibility.stale_selections(part) == ["surface_finish", "coating"]


def test_compatible_part_has_no_stale_selections(configured_part):
    assert compatibility.stale_selections(configured_part) == []
