# summavoice/routes/analytics_routes.py
from collections import Counter, defaultdict
from datetime import datetime, timedelta

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from summavoice import auth, crud, models, schemas
from summavoice.database import get_db
from summavoice.models import OperationStatus, as_naive_utc, utcnow

router = APIRouter(tags=["analytics"])

DAILY_WINDOW_DAYS = 30


def _day_range(end: datetime, days: int) -> list[str]:
    first = end.date() - timedelta(days=days - 1)
    return [(first + timedelta(days=offset)).isoformat() for offset in range(days)]


def build_usage(rows, now: datetime) -> dict:
    """
    Aggregate (type, status, created_at) rows into per-type totals, a
    zero-filled daily count over the last thirty days and per-type daily series.
    """
    summary = defaultdict(lambda: {"total": 0, "completed": 0, "failed": 0, "pending": 0})
    daily = Counter()
    per_type_daily = defaultdict(Counter)
    window_start = now - timedelta(days=DAILY_WINDOW_DAYS)

    for op_type, op_status, created_at in rows:
        entry = summary[op_type.value]
        entry["total"] += 1
        entry[OperationStatus(op_status).value] += 1
        day = created_at.date().isoformat()
        per_type_daily[op_type.value][day] += 1
        if created_at >= window_start:
            daily[day] += 1

    return {
        "summary": [{"type": op_type, **counts} for op_type, counts in sorted(summary.items())],
        "daily_usage": [{"date": day, "count": daily[day]} for day in _day_range(now, DAILY_WINDOW_DAYS)],
        "type_time_series": {
            op_type: [{"date": day, "count": count} for day, count in sorted(days.items())]
            for op_type, days in sorted(per_type_daily.items())
        },
        "total_operations": sum(counts["total"] for counts in summary.values()),
    }


@router.get("/usage")
def usage_statistics(
    start_date: datetime | None = None,
    end_date: datetime | None = None,
    db: Session = Depends(get_db),
    current_user: models.User = Depends(auth.get_current_user),
):
    rows = crud.operations_in_range(db, current_user.id, as_naive_utc(start_date), as_naive_utc(end_date))
    return {"success": True, "data": build_usage(rows, utcnow())}


@router.get("/operations")
def operation_history(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    db: Session = Depends(get_db),
    current_user: models.User = Depends(auth.get_current_user),
):
    total, operations = crud.list_user_operations(db, current_user.id, page=page, limit=limit)
    return {
        "success": True,
        "data": [
            {
                "id": op.id,
                "type": op.type.value,
                "status": op.status.value,
                "created_at": op.created_at.isoformat(),
                "has_audio": op.audio_file is not None,
            }
            for op in operations
        ],
        "pagination": schemas.Pagination.build(total, page, limit).model_dump(),
    }
