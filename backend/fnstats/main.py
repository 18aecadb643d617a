# backend/fnstats/main.py
import logging
from typing import Any, Dict, List, Optional

from fastapi import FastAPI, APIRouter, Depends, HTTPException, Query
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from .database import SessionLocal, get_session, init_db
from . import crud
from .config import settings
from .filters import StatFilters
from .schemas import Option, PlayerOut, PlayerStatsRow, TournamentOut
from .stats_engine import get_filtered_stats

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(title="Tournament Stats API")
router = APIRouter()

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.on_event("startup")
def startup():
    init_db()


def get_store() -> crud.SqlStatsStore:
    return crud.SqlStatsStore(SessionLocal)


def _require_tournament(db: Session, tournament_id: str) -> None:
    if crud.get_tournament(db, tournament_id) is None:
        raise HTTPException(status_code=404, detail="unknown tournament")


async def _run_stats(filters: StatFilters, store: crud.SqlStatsStore) -> List[Dict[str, Any]]:
    try:
        rows = await get_filtered_stats(filters, store, store)
    except SQLAlchemyError:
        logger.exception("stats query failed for %s", filters)
        raise HTTPException(status_code=503, detail="stats retrieval failed")
    return [row.to_dict() for row in rows]


# ----- Health -----
@router.get("/health")
def health() -> Dict[str, Any]:
    return {"ok": True}


# ----- Tournament metadata -----
@router.get("/tournaments", response_model=List[TournamentOut])
def tournaments(db: Session = Depends(get_session)) -> List[Dict[str, Any]]:
    return crud.list_tournaments(db)

@router.get("/tournaments/{tournament_id}/matches", response_model=List[Option])
def tournament_matches(tournament_id: str, db: Session = Depends(get_session)) -> List[Dict[str, Any]]:
    _require_tournament(db, tournament_id)
    return crud.list_matches(db, tournament_id)

@router.get("/tournaments/{tournament_id}/weapons", response_model=List[Option])
def tournament_weapons(tournament_id: str, db: Session = Depends(get_session)) -> List[Dict[str, Any]]:
    _require_tournament(db, tournament_id)
    return crud.list_weapon_types(db, tournament_id)

@router.get("/players", response_model=List[PlayerOut])
def players(match_id: List[str] = Query(default=[]),
            db: Session = Depends(get_session)) -> List[Dict[str, Any]]:
    return crud.list_players(db, match_id)


# ----- Stats -----
# sync dependency: FastAPI runs it in the threadpool, off the event loop
def tournament_filters(tournament_id: str, db: Session = Depends(get_session)) -> Optional[StatFilters]:
    _require_tournament(db, tournament_id)
    filters = crud.default_filters(
        db, tournament_id,
        distance_range=settings.DEFAULT_DISTANCE_RANGE_M,
        time_range=settings.DEFAULT_TIME_RANGE_MIN,
    )
    # no matches would lift the match restriction entirely
    if not filters.selected_matches:
        return None
    return filters

@router.get("/tournaments/{tournament_id}/stats", response_model=List[PlayerStatsRow])
async def tournament_stats(filters: Optional[StatFilters] = Depends(tournament_filters),
                           store: crud.SqlStatsStore = Depends(get_store)) -> List[Dict[str, Any]]:
    if filters is None:
        return []
    return await _run_stats(filters, store)

@router.post("/stats", response_model=List[PlayerStatsRow])
async def stats(filters: StatFilters,
                store: crud.SqlStatsStore = Depends(get_store)) -> List[Dict[str, Any]]:
    return await _run_stats(filters, store)


app.include_router(router)

if __name__ == "__main__":
    import uvicorn
    uvicorn.run("fnstats.main:app", host="0.0.0.0", port=8000, reload=False)
