from uuid import UUID
from fastapi import APIRouter, Depends, HTTPException, Body, Query
from sqlalchemy.orm import Session
from app.core.database import get_db
from app.core.exceptions import NotFoundError
from app.core.security import get_current_rider
from app.models.rider_db.rider_db import Rider
from app.models.rider_db.rider_db_crud import create_rider, get_rider_by_id, get_riders_page, \
    count_riders, update_rider, get_rider_by_email
from app.schemas.common.page_response import PageResponse
from app.schemas.rider.rider_base import RiderCreate, RiderOut, RiderUpdate


rider_router = APIRouter(prefix="/api/profile", tags=["Riders"])


@rider_router.post("/register", response_model=RiderOut)
def register_rider(rider: RiderCreate, db: Session = Depends(get_db)):
    if rider.email and get_rider_by_email(db, rider.email):
        raise HTTPException(status_code=400, detail="Email already registered")
    return create_rider(db, rider)


@rider_router.get("/{rider_id}", response_model=RiderOut)
def get_rider(rider_id: UUID, db: Session = Depends(get_db)):
    rider = get_rider_by_id(db, rider_id)
    if not rider:
        raise NotFoundError("Rider", rider_id)
    return rider


@rider_router.get("", response_model=PageResponse[RiderOut])
def list_riders(
    page: int = Query(1, ge=1),
    size: int = Query(10, ge=1),
    db: Session = Depends(get_db)
):
    skip = (page - 1) * size
    total = count_riders(db)
    riders = get_riders_page(db, skip=skip, limit=size)

    has_next = (page * size) < total
    has_prev = page > 1

    return PageResponse[RiderOut](
        page=page,
        size=size,
        total=total,
        has_next=has_next,
        has_prev=has_prev,
        items=riders
    )


@rider_router.patch("", response_model=RiderOut)
def edit_profile(
    updates: RiderUpdate = Body(...),
    db: Session = Depends(get_db),
    current_rider: Rider = Depends(get_current_rider)
):
    if updates.email:
        existing = get_rider_by_email(db, updates.email)
        if existing and existing.id != current_rider.id:
            raise HTTPException(status_code=400, detail="Email already registered")

    return update_rider(db, current_rider, updates)
