"""Ticker identity API routes: search, map, stop tracking, tv-keyed records."""
from fastapi import APIRouter, Depends, HTTPException, Query, status
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field
from typing import List, Optional
import logging

from tickersync.core.config import settings
from tickersync.core.container import Container, get_synced_container
from tickersync.models.category import CategoryFamily
from tickersync.models.pair import PairInfo
from tickersync.models.sequence import SequenceType
from tickersync.providers import ProviderError
from tickersync.utils.time import format_timestamp

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/tickers", tags=["tickers"])


class PairPayload(BaseModel):
    """Alert-platform pair."""
    name: str
    pair_id: str
    exchange: str = ""
    symbol: str
    
    def to_pair_info(self) -> PairInfo:
        return PairInfo(name=self.name, pair_id=self.pair_id, exchange=self.exchange, symbol=self.symbol)


class MapRequest(BaseModel):
    """Map a tv ticker onto a pair; confirm lists the guard-rail codes accepted."""
    tv_ticker: str
    pair: PairPayload
    confirm: List[str] = Field(default_factory=list)


class StopTrackingRequest(BaseModel):
    tv_ticker: Optional[str] = None
    investing_ticker: Optional[str] = None


class VisitRequest(BaseModel):
    tv_ticker: str


class ExchangeRequest(BaseModel):
    tv_ticker: str
    exchange: str


class SequenceRequest(BaseModel):
    tv_ticker: str
    sequence: SequenceType


class CreateAlertRequest(BaseModel):
    investing_ticker: str
    price: float
    ltp: float


@router.get("/search")
async def search_pairs(
    q: str = Query(..., min_length=1),
    container: Container = Depends(get_synced_container)
):
    """Search the alert platform for candidate pairs."""
    try:
        pairs = await container.pairs.search_pairs(q)
    except ProviderError as e:
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(e))
    return [pair.to_dict() for pair in pairs]


@router.get("/resolve")
async def resolve_ticker(
    tv: str = Query(..., min_length=1),
    container: Container = Depends(get_synced_container)
):
    """Every identifier and dependent record known for a tv ticker."""
    investing = container.symbols.tv_to_investing(tv)
    pair = container.pairs.investing_ticker_to_pair_info(investing) if investing else None
    alerts = container.alerts.get_alerts_for_investing_ticker(investing) if investing else None
    watch = container.categories.category_of(CategoryFamily.WATCH, tv)
    flag = container.categories.category_of(CategoryFamily.FLAG, tv)
    sequence = container.sequence_repo.get(tv)
    last_visit = container.recent_repo.get(tv)
    
    return {
        "tv": tv,
        "investing": investing,
        "kite": container.symbols.tv_to_kite(tv),
        "exchange": container.symbols.tv_to_exchange_ticker(tv),
        "pair": pair.to_dict() if pair else None,
        "alerts": [a.to_dict() for a in alerts] if alerts is not None else None,
        "watch": int(watch) if watch is not None else None,
        "flag": int(flag) if flag is not None else None,
        "sequence": sequence.value if sequence else None,
        "lastVisit": last_visit,
        "lastVisitDisplay": format_timestamp(last_visit, settings.display_timezone) if last_visit else None,
    }


@router.post("/map")
async def map_ticker(request: MapRequest, container: Container = Depends(get_synced_container)):
    """
    Map a tv ticker onto a pair.
    
    Returns 409 with the outstanding guard-rail prompts when any of them
    was not confirmed; nothing is written in that case.
    """
    pair = request.pair.to_pair_info()
    confirmed = set(request.confirm)
    check = container.pairs.check_guard_rails(pair, request.tv_ticker)
    
    mapped = container.pairs.map_pair(pair, request.tv_ticker, confirm=lambda p: p.code in confirmed)
    if not mapped:
        return JSONResponse(
            status_code=status.HTTP_409_CONFLICT,
            content={
                "detail": "Confirmation required",
                "prompts": [prompt.to_dict() for prompt in check.prompts],
            }
        )
    
    await container.save()
    return {"tv": request.tv_ticker, "investing": pair.symbol, "pairId": pair.pair_id}


@router.post("/stop")
async def stop_tracking(request: StopTrackingRequest, container: Container = Depends(get_synced_container)):
    """Remove a ticker from every repository."""
    if request.investing_ticker:
        cleaned = container.pairs.stop_tracking_by_investing_ticker(request.investing_ticker)
    elif request.tv_ticker:
        cleaned = container.pairs.stop_tracking_by_tv_ticker(request.tv_ticker)
    else:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="tv_ticker or investing_ticker is required"
        )
    await container.save()
    return {"cleaned": cleaned}


@router.post("/visit")
async def record_visit(request: VisitRequest, container: Container = Depends(get_synced_container)):
    timestamp = container.recent_repo.touch(request.tv_ticker)
    await container.save()
    return {"tv": request.tv_ticker, "lastVisit": timestamp}


@router.put("/exchange")
async def set_exchange(request: ExchangeRequest, container: Container = Depends(get_synced_container)):
    container.symbols.create_tv_to_exchange_ticker_mapping(request.tv_ticker, request.exchange)
    await container.save()
    return {"tv": request.tv_ticker, "exchange": container.symbols.tv_to_exchange_ticker(request.tv_ticker)}


@router.put("/sequence")
async def set_sequence(request: SequenceRequest, container: Container = Depends(get_synced_container)):
    container.sequence_repo.set(request.tv_ticker, request.sequence)
    await container.save()
    return {"tv": request.tv_ticker, "sequence": request.sequence.value}


@router.post("/alerts", status_code=status.HTTP_201_CREATED)
async def create_alert(request: CreateAlertRequest, container: Container = Depends(get_synced_container)):
    """Create an alert on the platform and mirror it locally."""
    try:
        alert = await container.alerts.create_alert(request.investing_ticker, request.price, request.ltp)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except ProviderError as e:
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(e))
    await container.save()
    return {"pairId": alert.pair_id, **alert.to_dict()}
