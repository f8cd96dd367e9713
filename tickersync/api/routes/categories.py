"""Watch / flag category API routes."""
from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel
from typing import List
import logging

from tickersync.core.container import Container, get_synced_container
from tickersync.models.category import CategoryFamily

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/categories", tags=["categories"])


class RecordRequest(BaseModel):
    """Tickers to toggle in a category."""
    tickers: List[str]


class UniverseRequest(BaseModel):
    """Live ticker universe."""
    universe: List[str]
    dry_run: bool = True


@router.get("/{family}/{index}")
async def get_category(family: CategoryFamily, index: int, container: Container = Depends(get_synced_container)):
    try:
        tickers = container.categories.get_category(family, index)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    return {"family": family.value, "index": index, "tickers": sorted(tickers)}


@router.post("/default")
async def update_default_list(request: UniverseRequest, container: Container = Depends(get_synced_container)):
    """Recompute the derived watch default list."""
    count = container.categories.update_default_list(request.universe)
    await container.save()
    return {"count": count}


@router.post("/{family}/clean")
async def clean_categories(
    family: CategoryFamily,
    request: UniverseRequest,
    container: Container = Depends(get_synced_container)
):
    """Count (dry run) or remove members missing from the universe."""
    if request.dry_run:
        return {"family": family.value, "dryRun": True, "count": container.categories.dry_run_clean(request.universe, family)}
    count = container.categories.clean(request.universe, family)
    await container.save()
    return {"family": family.value, "dryRun": False, "count": count}


@router.post("/{family}/{index}")
async def record_category(
    family: CategoryFamily,
    index: int,
    request: RecordRequest,
    container: Container = Depends(get_synced_container)
):
    """Toggle tickers in a category; members leave every other category of the family."""
    try:
        added = container.categories.record_category(family, index, request.tickers)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    await container.save()
    return {
        "family": family.value,
        "index": index,
        "added": sorted(added),
        "removed": sorted(set(request.tickers) - added),
    }
