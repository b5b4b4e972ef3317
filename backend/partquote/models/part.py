from enum import Enum
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

MIN_QUANTITY = 1
MAX_QUANTITY = 10000
DEFAULT_LEAD_TIME = "7"


class Process(str, Enum):
    CNC = "cnc"
    PRINTING_3D = "3d-printing"
    SHEET_METAL = "sheet-metal"


class Material(str, Enum):
    AL_6061 = "6061"
    AL_7075 = "7075"
    SS_304 = "304-stainless"
    SS_316 = "316-stainless"
    ABS = "abs"
    PLA = "pla"
    BRASS = "brass"
    COPPER = "copper"
    TITANIUM = "titanium"
    DELRIN = "delrin"
    NYLON = "nylon"
    PEEK = "peek"


class SurfaceFinish(str, Enum):
    AS_MACHINED = "as-machined"
    BEAD_BLAST = "bead-blast"
    BRUSHED = "brushed"
    ANODIZED = "anodized"
    POLISHED = "polished"
    SANDBLASTED = "sandblasted"
    TUMBLED = "tumbled"
    PASSIVATED = "passivated"


class Coating(str, Enum):
    NONE = "none"
    CLEAR_ANODIZE = "clear-anodize"
    BLACK_ANODIZE = "black-anodize"
    POWDER_COAT = "powder-coat"
    ZINC_PLATE = "zinc-plate"
    NICKEL_PLATE = "nickel-plate"
    CHROME_PLATE = "chrome-plate"
    GOLD_PLATE = "gold-plate"
    TEFLON_COAT = "teflon-coat"


class LeadTime(str, Enum):
    ONE_DAY = "1"
    TWO_DAYS = "2"
    THREE_DAYS = "3"
    FIVE_DAYS = "5"
    SEVEN_DAYS = "7"


def clamp_quantity(value: Any) -> int:
    """Coerce user input to a quantity in [1, 10000]; garbage becomes 1."""
    try:
        qty = int(value)
    except (TypeError, ValueError):
        return MIN_QUANTITY
    return max(MIN_QUANTITY, min(MAX_QUANTITY, qty))


class ThreadSpec(BaseModel):
    id: str
    type: str
    size: str
    qty: Optional[int] = None


class Certificates(BaseModel):
    material: bool = False
    finish: bool = False
    heat_treat: bool = False


class Packaging(BaseModel):
    bag_per_part: bool = False
    label: str = ""


class PartExtras(BaseModel):
    tolerance: str = "standard"  # standard | tight | custom
    custom_tolerance_note: str = ""
    threads: List[ThreadSpec] = Field(default_factory=list)
    inspection: str = "none"  # none | basic | FAI | CMM
    certificates: Certificates = Field(default_factory=Certificates)
    serialization: bool = False
    custom_marking: str = ""
    clean_room: bool = False
    assembly: bool = False
    packaging: Packaging = Field(default_factory=Packaging)
    notes: str = ""


class Selections(BaseModel):
    model_config = ConfigDict(frozen=True)

    process: str = ""
    material: str = ""
    surface_finish: str = ""
    coating: str = ""
    quantity: int = MIN_QUANTITY
    lead_time: str = DEFAULT_LEAD_TIME
    extras: Optional[PartExtras] = None

    @field_validator("quantity", mode="before")
    @classmethod
    def _clamp_quantity(cls, v):
        return clamp_quantity(v)

    @field_validator("lead_time", mode="before")
    @classmethod
    def _known_lead_time(cls, v):
        token = getattr(v, "value", v)
        if token not in {t.value for t in LeadTime}:
            raise ValueError(f"unsupported lead time: {v!r}")
        return token


class Part(BaseModel):
    """One manufacturable item and its configuration.

    Instances are frozen; every change produces a copy through
    ``model_copy(update=...)`` so part lists can be swapped atomically.
    """

    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    file_name: Optional[str] = None
    file_size: Optional[int] = None
    drawing_file_name: Optional[str] = None
    drawing_file_size: Optional[int] = None
    selections: Selections = Field(default_factory=Selections)
    current_step: int = 0
    parent_id: Optional[str] = None
    is_variation: bool = False
    variation_number: Optional[int] = None

    @field_validator("current_step", mode="before")
    @classmethod
    def _bound_step(cls, v):
        # 0=process .. 4=extras
        try:
            step = int(v)
        except (TypeError, ValueError):
            return 0
        return max(0, min(4, step))


class FileDescriptor(BaseModel):
    """Name and size of an uploaded 3D file as handed over by file intake."""

    file_name: str
    file_size: int = Field(0, ge=0)
