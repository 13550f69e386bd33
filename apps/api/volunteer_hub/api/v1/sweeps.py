from typing import Annotated

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from volunteer_hub.api.v1.schemas import SweepOut
from volunteer_hub.auth.deps import CurrentOrganizer
from volunteer_hub.db import get_db
from volunteer_hub.services.sweeper import run_sweep

router = APIRouter(prefix="/sweeps", tags=["sweeps"])

DBSession = Annotated[Session, Depends(get_db)]


@router.post("", response_model=SweepOut)
def trigger_sweep(organizer: CurrentOrganizer, db: DBSession):
    result = run_sweep(db)
    return SweepOut(
        events_completed=result.events_completed,
        participations_credited=result.participations_credited,
        failed_event_ids=result.failed_event_ids,
    )
