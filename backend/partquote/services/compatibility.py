"""Material restrictions on finishes and coatings.

Restrictions only decide which options are *offered* for the part's
current material. An already-selected option that becomes incompatible
after a material change is left in place and merely reported by
:func:`stale_selections`.
"""
from typing import List, Optional

from partquote.models.part import Part
from partquote.services.catalog import ALUMINUM, COATINGS, STAINLESS, SURFACE_FINISHES, Option

ALUMINUM_MARKERS = ("6061", "7075", "aluminum")
STAINLESS_MARKERS = ("stainless", "304", "316")


def material_family(material: str) -> Optional[str]:
    m = (material or "").lower()
    if not m:
        return None
    if any(marker in m for marker in ALUMINUM_MARKERS):
        return ALUMINUM
    if any(marker in m for marker in STAINLESS_MARKERS):
        return STAINLESS
    return None


def is_offered(option: Option, material: str) -> bool:
    if not option.material_restriction:
        return True
    return material_family(material) == option.material_restriction


def offered_finishes(material: str) -> List[Option]:
    return [o for o in SURFACE_FINISHES if is_offered(o, material)]


def offered_coatings(material: str) -> List[Option]:
    return [o for o in COATINGS if is_offered(o, material)]


def stale_selections(part: Part) -> List[str]:
    """Fields whose current value would no longer be offered for the part's material."""
    sel = part.selections
    stale = []
    checks = (
        ("surface_finish", sel.surface_finish, SURFACE_FINISHES),
        ("coating", sel.coating, COATINGS),
    )
    for field, value, options in checks:
        if not value:
            continue
        option = next((o for o in options if o.id == value), None)
        if option is not None and not is_offered(option, sel.material):
            stale.append(field)
    return stale
