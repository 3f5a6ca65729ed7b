from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from jobboard.database import get_db
from jobboard.dependencies import require_principal
from jobboard.schemas.dashboard import (
    CandidateDashboardResponse,
    DashboardViewResponse,
    PosterDashboardResponse,
)
from jobboard.services.dashboard_service import candidate_dashboard, dashboard_for, poster_dashboard
from jobboard.utils.security import Principal

router = APIRouter(prefix="/dashboard", tags=["dashboard"])


@router.get("", response_model=DashboardViewResponse)
async def my_dashboard(principal: Principal = Depends(require_principal)):
    return dashboard_for(principal.role).describe()


@router.get("/candidate", response_model=CandidateDashboardResponse)
async def candidate_view(principal: Principal = Depends(require_principal), db: Session = Depends(get_db)):
    return candidate_dashboard(db, principal)


@router.get("/poster", response_model=PosterDashboardResponse)
async def poster_view(principal: Principal = Depends(require_principal), db: Session = Depends(get_db)):
    return poster_dashboard(db, principal)
