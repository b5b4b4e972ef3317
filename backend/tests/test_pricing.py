import pytest

from conftest import make_part
from partquote.services.pricing import PriceEngine, price


def _with(part, **changes):
    return part.model_copy(update={"selections": part.selections.model_copy(update=changes)})


def test_reference_part_prices_at_126(configured_part):
    assert price(configured_part) == pytest.approx(126.00)


def test_rush_quantity_three(configured_part):
    part = _with(configured_part, quantity=3, lead_time="2")
    assert price(part) == pytest.approx(793.8)


def test_price_is_linear_in_quantity(configured_part):
    one = price(_with(configured_part, quantity=1))
    two = price(_with(configured_part, quantity=2))
    assert two == pytest.approx(2 * one)
    assert price(_with(configured_part, quantity=50)) >= two


def test_shorter_lead_time_costs_more(configured_part):
    prices = [price(_with(configured_part, lead_time=lt)) for lt in ("1", "2", "3", "5", "7")]
    assert prices == sorted(prices, reverse=True)
    assert len(set(prices)) == 5


def test_unit_price_round_trip(configured_part):
    engine = PriceEngine()
    part = _with(configured_part, quantity=7, lead_time="3")
    assert engine.unit_price(part) * 7 == pytest.approx(engine.price(part))


def test_unset_selections_are_neutral():
    part = make_part(process="cnc")
    assert price(part) == pytest.approx(75.0)


def test_unknown_selection_is_neutral_but_reported():
    engine = PriceEngine()
    part = make_part(process="cnc", material="unobtainium", surface_finish="bead-blast", coating="none")

    assert engine.multiplier("material", "unobtainium") == 1.0
    estimate = engine.estimate(part)
    assert estimate["unknown_selections"] == ["material"]
    assert estimate["total_price"] == pytest.approx(75 * 1.2)


def test_lookup_distinguishes_unset_from_unknown():
    engine = PriceEngine()
    assert engine.lookup("coating", "") == (1.0, "unset")
    assert engine.lookup("coating", "gold-plate") == (5.0, "known")
    assert engine.lookup("coating", "gold") == (1.0, "unknown")


def test_lookup_rejects_unpriced_field():
    with pytest.raises(ValueError):
        PriceEngine().lookup("extras", "anything")


def test_lead_time_quotes_cover_every_tier(configured_part):
    part = _with(configured_part, quantity=2)
    quotes = PriceEngine().lead_time_quotes(part)

    assert [q["lead_time"] for q in quotes] == ["1", "2", "3", "5", "7"]
    assert [q["selected"] for q in quotes] == [False, False, False, False, True]
    one_day = quotes[0]
    assert one_day["total_price"] == pytest.approx(126.0 * 2.5 * 2)
    assert one_day["unit_price"] == pytest.approx(126.0 * 2.5)
