from typing import Dict, List, Optional

from pydantic import BaseModel

from partquote.models.part import Coating, LeadTime, Material, Process, SurfaceFinish
from partquote.services.pricing import PriceEngine

ALUMINUM = "aluminum"
STAINLESS = "stainless"


class Option(BaseModel):
    id: str
    name: str
    multiplier: float
    description: str = ""
    material_restriction: Optional[str] = None


class MaterialOption(Option):
    category: str
    popular: bool = False


class LeadTimeOption(Option):
    days: int
    type: str


class RequirementOption(BaseModel):
    id: str
    name: str


class RequirementCategory(BaseModel):
    id: str
    name: str
    options: List[RequirementOption]


def _opt(member, name, table, description="", restriction=None) -> Option:
    return Option(
        id=member.value,
        name=name,
        multiplier=table[member],
        description=description,
        material_restriction=restriction,
    )


PROCESSES: List[Option] = [
    _opt(Process.CNC, "CNC Machining", PriceEngine.PROCESS, "Precision subtractive machining"),
    _opt(Process.PRINTING_3D, "3D Printing", PriceEngine.PROCESS, "Additive manufacturing"),
    _opt(Process.SHEET_METAL, "Sheet Metal", PriceEngine.PROCESS, "Cut, bent and formed sheet"),
]


def _mat(member, name, category, popular, description) -> MaterialOption:
    return MaterialOption(
        id=member.value,
        name=name,
        multiplier=PriceEngine.MATERIAL[member],
        category=category,
        popular=popular,
        description=description,
    )


MATERIALS: List[MaterialOption] = [
    _mat(Material.AL_6061, "Aluminum 6061", "aluminum", True, "Excellent workability and corrosion resistance"),
    _mat(Material.AL_7075, "Aluminum 7075", "aluminum", True, "High strength aerospace grade aluminum"),
    _mat(Material.SS_304, "304 Stainless Steel", "stainless-steel", True, "Standard corrosion resistant steel"),
    _mat(Material.SS_316, "316 Stainless Steel", "stainless-steel", True, "Superior corrosion resistance"),
    _mat(Material.ABS, "ABS Plastic", "plastics", True, "Durable thermoplastic with good impact resistance"),
    _mat(Material.PLA, "PLA Plastic", "plastics", True, "Easy to machine, biodegradable option"),
    _mat(Material.DELRIN, "Delrin (POM)", "plastics", False, "High precision plastic with low friction"),
    _mat(Material.NYLON, "Nylon PA6", "plastics", False, "Strong, flexible engineering plastic"),
    _mat(Material.PEEK, "PEEK", "plastics", False, "High-performance engineering thermoplastic"),
    _mat(Material.BRASS, "Brass", "metals", False, "Corrosion resistant with antimicrobial properties"),
    _mat(Material.COPPER, "Copper", "metals", False, "Excellent electrical and thermal conductivity"),
    _mat(Material.TITANIUM, "Titanium Grade 2", "metals", False, "Lightweight with exceptional strength-to-weight ratio"),
]

MATERIAL_CATEGORIES = ["all", "aluminum", "stainless-steel", "plastics", "metals"]

SURFACE_FINISHES: List[Option] = [
    _opt(SurfaceFinish.AS_MACHINED, "As Machined", PriceEngine.SURFACE_FINISH, "Standard tool marks visible"),
    _opt(SurfaceFinish.BEAD_BLAST, "Bead Blasted", PriceEngine.SURFACE_FINISH, "Uniform matte texture"),
    _opt(SurfaceFinish.BRUSHED, "Brushed", PriceEngine.SURFACE_FINISH, "Linear satin grain"),
    _opt(SurfaceFinish.ANODIZED, "Anodized", PriceEngine.SURFACE_FINISH, "Hard oxide layer", ALUMINUM),
    _opt(SurfaceFinish.POLISHED, "Polished", PriceEngine.SURFACE_FINISH, "Mirror-like reflective surface"),
    _opt(SurfaceFinish.SANDBLASTED, "Sandblasted", PriceEngine.SURFACE_FINISH, "Coarse matte texture"),
    _opt(SurfaceFinish.TUMBLED, "Tumbled", PriceEngine.SURFACE_FINISH, "Deburred, softened edges"),
    _opt(SurfaceFinish.PASSIVATED, "Passivated", PriceEngine.SURFACE_FINISH, "Improved corrosion resistance", STAINLESS),
]

COATINGS: List[Option] = [
    _opt(Coating.NONE, "No Coating", PriceEngine.COATING, "Raw finished surface"),
    _opt(Coating.CLEAR_ANODIZE, "Clear Anodize", PriceEngine.COATING, "Type II clear anodize", ALUMINUM),
    _opt(Coating.BLACK_ANODIZE, "Black Anodize", PriceEngine.COATING, "Type II black anodize", ALUMINUM),
    _opt(Coating.POWDER_COAT, "Powder Coating", PriceEngine.COATING, "Durable painted finish"),
    _opt(Coating.ZINC_PLATE, "Zinc Plating", PriceEngine.COATING, "Sacrificial corrosion protection"),
    _opt(Coating.NICKEL_PLATE, "Nickel Plating", PriceEngine.COATING, "Hard, wear resistant plating"),
    _opt(Coating.CHROME_PLATE, "Chrome Plating", PriceEngine.COATING, "Decorative bright plating"),
    _opt(Coating.GOLD_PLATE, "Gold Plating", PriceEngine.COATING, "Conductive, corrosion proof plating"),
    _opt(Coating.TEFLON_COAT, "Teflon Coating", PriceEngine.COATING, "Low friction, non-stick coating"),
]

_LEAD_TIME_META = {
    LeadTime.ONE_DAY: ("1 Day", "Express"),
    LeadTime.TWO_DAYS: ("2 Days", "Rush"),
    LeadTime.THREE_DAYS: ("3 Days", "Fast"),
    LeadTime.FIVE_DAYS: ("5 Days", "Quick"),
    LeadTime.SEVEN_DAYS: ("7 Days (Standard)", "Standard"),
}

LEAD_TIMES: List[LeadTimeOption] = [
    LeadTimeOption(
        id=tier.value,
        name=_LEAD_TIME_META[tier][0],
        description=_LEAD_TIME_META[tier][1],
        multiplier=PriceEngine.LEAD_TIME[tier],
        days=int(tier.value),
        type="standard" if tier is LeadTime.SEVEN_DAYS else "expedited",
    )
    for tier in LeadTime
]


def _category(cid: str, name: str, options) -> RequirementCategory:
    return RequirementCategory(
        id=cid, name=name, options=[RequirementOption(id=i, name=n) for i, n in options]
    )


REQUIREMENT_CATEGORIES: List[RequirementCategory] = [
    _category("material-finish-compliance", "Material and Finish Compliance", [
        ("astm", "ASTM"),
        ("reach", "REACH"),
        ("rohs", "ROHS"),
        ("finish-cert", "Finish Certificate"),
        ("coating-cert", "Coating Certificate"),
        ("heat-treat-cert", "Heat Treat Certificate"),
        ("material-cert", "Material Certificate"),
    ]),
    _category("material-drawing", "Material and Drawing Requirements", [
        ("first-article", "First Article Inspection"),
        ("cmm-report", "CMM Report"),
        ("drawing-review", "Drawing Review"),
        ("material-traceability", "Material Traceability"),
    ]),
    _category("government", "Government Restrictions", [
        ("itar", "ITAR Compliance"),
        ("dfar", "DFAR"),
        ("far", "FAR"),
        ("nato", "NATO Compliance"),
    ]),
    _category("quality", "Quality Requirements", [
        ("iso-9001", "ISO 9001"),
        ("as9100", "AS9100"),
        ("iso-13485", "ISO 13485"),
        ("ppap", "PPAP Documentation"),
        ("inspection-report", "Inspection Report"),
    ]),
    _category("shipping", "Shipping Requirements", [
        ("special-packaging", "Special Packaging"),
        ("expedited-shipping", "Expedited Shipping"),
        ("white-glove", "White Glove Delivery"),
        ("international", "International Shipping"),
    ]),
    _category("certificate", "Certificate Requirements", [
        ("coc", "Certificate of Conformance"),
        ("calibration", "Calibration Certificate"),
        ("test-cert", "Test Certificate"),
        ("origin-cert", "Certificate of Origin"),
    ]),
    _category("misc", "Miscellaneous Requirements", [
        ("clean-room", "Clean Room Assembly"),
        ("serialization", "Part Serialization"),
        ("custom-marking", "Custom Marking"),
        ("assembly", "Assembly Services"),
    ]),
]

REQUIREMENT_IDS = {o.id for c in REQUIREMENT_CATEGORIES for o in c.options}

_BY_FIELD: Dict[str, List[Option]] = {
    "process": PROCESSES,
    "material": MATERIALS,
    "surface_finish": SURFACE_FINISHES,
    "coating": COATINGS,
    "lead_time": LEAD_TIMES,
}


def options_for(field: str) -> List[Option]:
    return list(_BY_FIELD[field])


def display_name(field: str, option_id: str) -> str:
    """Human label for a selection id; unlabelled ids are shown as-is."""
    for option in _BY_FIELD.get(field, []):
        if option.id == option_id:
            return option.name
    return option_id


def search_materials(query: str = "", category: str = "all") -> Dict[str, List[MaterialOption]]:
    found = MATERIALS
    if category and category != "all":
        found = [m for m in found if m.category == category]

    q = (query or "").strip().lower()
    if q:
        found = [
            m for m in found
            if q in m.name.lower() or q in m.description.lower() or q in m.category.lower()
        ]

    return {
        "popular": [m for m in found if m.popular],
        "other": [m for m in found if not m.popular],
    }


def search_requirements(query: str = "") -> List[RequirementCategory]:
    q = (query or "").lower()
    if not q:
        return list(REQUIREMENT_CATEGORIES)
    result = []
    for category in REQUIREMENT_CATEGORIES:
        matches = [o for o in category.options if q in o.name.lower()]
        if matches:
            result.append(category.model_copy(update={"options": matches}))
    return result
