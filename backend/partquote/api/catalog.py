from fastapi import APIRouter, HTTPException

from partquote.services import catalog

router = APIRouter()


@router.get("")
def get_catalog():
    return {
        "processes": catalog.PROCESSES,
        "materials": catalog.MATERIALS,
        "surface_finishes": catalog.SURFACE_FINISHES,
        "coatings": catalog.COATINGS,
        "lead_times": catalog.LEAD_TIMES,
    }


@router.get("/materials")
def search_materials(q: str = "", category: str = "all"):
    if category not in catalog.MATERIAL_CATEGORIES:
        raise HTTPException(status_code=400, detail=f"Unknown material category: {category}")
    return catalog.search_materials(q, category)


@router.get("/requirements")
def search_requirements(q: str = ""):
    return catalog.search_requirements(q)
