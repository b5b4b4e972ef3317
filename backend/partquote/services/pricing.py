import logging
from enum import Enum
from typing import Any, Dict, List, Tuple

from partquote.models.part import (
    Coating,
    LeadTime,
    Material,
    Part,
    Process,
    SurfaceFinish,
)

logger = logging.getLogger(__name__)

KNOWN = "known"
UNSET = "unset"
UNKNOWN = "unknown"


class PriceEngine:
    """Multiplier-based pricing engine.

    price = BASE_PRICE x process x material x finish x coating x lead time x quantity

    Every factor is neutral (1.0) when its selection is unset or not in the
    table, so a partially configured part still prices. Callers gate on
    completeness, not on this engine rejecting input.
    """

    BASE_PRICE = 75.0

    PROCESS = {
        Process.CNC: 1.0,
        Process.PRINTING_3D: 0.7,
        Process.SHEET_METAL: 0.6,
    }

    MATERIAL = {
        Material.AL_6061: 1.0,
        Material.AL_7075: 1.2,
        Material.SS_304: 1.3,
        Material.SS_316: 1.5,
        Material.ABS: 0.4,
        Material.PLA: 0.3,
        Material.BRASS: 1.6,
        Material.COPPER: 1.8,
        Material.TITANIUM: 4.5,
        Material.DELRIN: 0.8,
        Material.NYLON: 0.6,
        Material.PEEK: 8.0,
    }

    SURFACE_FINISH = {
        SurfaceFinish.AS_MACHINED: 1.0,
        SurfaceFinish.BEAD_BLAST: 1.2,
        SurfaceFinish.BRUSHED: 1.4,
        SurfaceFinish.ANODIZED: 1.8,
        SurfaceFinish.POLISHED: 2.5,
        SurfaceFinish.SANDBLASTED: 1.3,
        SurfaceFinish.TUMBLED: 1.1,
        SurfaceFinish.PASSIVATED: 1.6,
    }

    COATING = {
        Coating.NONE: 1.0,
        Coating.CLEAR_ANODIZE: 1.4,
        Coating.BLACK_ANODIZE: 1.6,
        Coating.POWDER_COAT: 1.8,
        Coating.ZINC_PLATE: 1.5,
        Coating.NICKEL_PLATE: 2.2,
        Coating.CHROME_PLATE: 2.8,
        Coating.GOLD_PLATE: 5.0,
        Coating.TEFLON_COAT: 3.2,
    }

    # rush premium: fewer days, higher multiplier; no interpolation
    LEAD_TIME = {
        LeadTime.ONE_DAY: 2.5,
        LeadTime.TWO_DAYS: 2.1,
        LeadTime.THREE_DAYS: 1.7,
        LeadTime.FIVE_DAYS: 1.3,
        LeadTime.SEVEN_DAYS: 1.0,
    }

    FIELDS = ("process", "material", "surface_finish", "coating", "lead_time")

    def __init__(self):
        self._tables: Dict[str, Tuple[type, Dict[Enum, float]]] = {
            "process": (Process, self.PROCESS),
            "material": (Material, self.MATERIAL),
            "surface_finish": (SurfaceFinish, self.SURFACE_FINISH),
            "coating": (Coating, self.COATING),
            "lead_time": (LeadTime, self.LEAD_TIME),
        }

    def lookup(self, field: str, key: str) -> Tuple[float, str]:
        """Return ``(multiplier, status)`` where status is known, unset or unknown."""
        if field not in self._tables:
            raise ValueError(f"not a priced selection: {field}")
        if not key:
            return 1.0, UNSET
        enum_cls, table = self._tables[field]
        try:
            member = enum_cls(key)
        except ValueError:
            logger.warning("Unknown %s selection %r priced at neutral multiplier", field, key)
            return 1.0, UNKNOWN
        return table[member], KNOWN

    def multiplier(self, field: str, key: str) -> float:
        return self.lookup(field, key)[0]

    def price(self, part: Part) -> float:
        sel = part.selections
        total = self.BASE_PRICE
        for field in self.FIELDS:
            total *= self.multiplier(field, getattr(sel, field))
        return total * sel.quantity

    def unit_price(self, part: Part) -> float:
        return self.price(part) / part.selections.quantity

    def estimate(self, part: Part) -> Dict[str, Any]:
        sel = part.selections
        multipliers: Dict[str, float] = {}
        unknown: List[str] = []
        for field in self.FIELDS:
            value, status = self.lookup(field, getattr(sel, field))
            multipliers[field] = value
            if status == UNKNOWN:
                unknown.append(field)

        total = self.price(part)
        return {
            "base_price": self.BASE_PRICE,
            "multipliers": multipliers,
            "quantity": sel.quantity,
            "unit_price": total / sel.quantity,
            "total_price": total,
            "unknown_selections": unknown,
        }

    def lead_time_quotes(self, part: Part) -> List[Dict[str, Any]]:
        """Price the part at every lead-time tier, keeping everything else fixed."""
        quotes = []
        for tier in LeadTime:
            variant = part.model_copy(
                update={"selections": part.selections.model_copy(update={"lead_time": tier.value})}
            )
            total = self.price(variant)
            quotes.append({
                "lead_time": tier.value,
                "multiplier": self.LEAD_TIME[tier],
                "total_price": total,
                "unit_price": total / part.selections.quantity,
                "selected": part.selections.lead_time == tier.value,
            })
        return quotes


_default_engine = PriceEngine()


def price(part: Part) -> float:
    return _default_engine.price(part)
