from __future__ import annotations

from fastapi import APIRouter, Depends, Query, status
from sqlmodel import Session

from peiwan.dependencies import get_current_customer_service, get_db
from peiwan.models import AttendanceRecord, User
from peiwan.schemas.attendance import AttendanceRead
from peiwan.services import attendance as attendance_service

router = APIRouter(prefix="/attendance", tags=["attendance"])


@router.post("/clock-in", response_model=AttendanceRead, status_code=status.HTTP_201_CREATED)
def clock_in(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_customer_service),
) -> AttendanceRecord:
    return attendance_service.clock_in(db, current_user.id)


@router.post("/clock-out", response_model=AttendanceRead)
def clock_out(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_customer_service),
) -> AttendanceRecord:
    return attendance_service.clock_out(db, current_user.id)


@router.get("/me", response_model=list[AttendanceRead])
def list_my_attendance(
    limit: int = Query(default=30, ge=1, le=100),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_customer_service),
) -> list[AttendanceRecord]:
    return attendance_service.list_attendance(db, user_id=current_user.id, limit=limit)
