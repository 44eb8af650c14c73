from dataclasses import asdict
from typing import Annotated

from fastapi import APIRouter, Depends, Query, status

from core.database import transaction
from schemas.common import envelope
from services.counter_ledger import CounterLedger
from utils.deps import db_dependency, require_permission
from utils.logger import get_logger

logger = get_logger(__name__)

router = APIRouter(
    prefix="/admin",
    tags=["admin"]
)


@router.post("/reconcile-counters", status_code=status.HTTP_200_OK)
async def reconcile_counters(db: db_dependency,
                             user: Annotated[dict, Depends(require_permission("admin", "reconcile"))],
                             fix: bool = Query(False)):
    """
    Recount product_count on every parent from live products.

    With fix=false this only reports drift.
    """
    with transaction(db):
        drifts = CounterLedger.reconcile(db, fix=fix)

    logger.info(
        "Counter reconciliation finished",
        extra={"drift_count": len(drifts), "fixed": fix, "user_id": user.get("user_id")}
    )
    return envelope(
        "Counters reconciled" if fix else "Counter drift report",
        [{**asdict(drift), "kind": drift.kind.value} for drift in drifts],
        count=len(drifts)
    )
