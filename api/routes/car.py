"""
api/routes/car.py -- Car catalogue REST endpoints.

Routes:
  GET    /api/car?txt=&maxPrice=  -- list cars (public)
  POST   /api/car                 -- add car (requires login)
  PUT    /api/car                 -- edit car (requires login, owner or admin)
  GET    /api/car/{car_id}        -- car detail (public)
  DELETE /api/car/{car_id}        -- remove car (requires login, owner or admin)

Status mapping kept for the existing browser client:
  A missing car on GET /car/{car_id} is 403, not 404.
  Any failed removal (missing or not yours) is 400 with the reason appended.
  Any failed save is 400.

Body numbers are coerced here, before the directory sees them.
"""

from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request

from api.body import parse_body
from api.models import CarIn, CarOut, CarRemovedResponse
from auth.dependencies import require_login
from auth.models import SessionUser
from cars.directory import CarDirectory
from cars.models import Car, CarFilter
from core.coerce import to_number, to_number_or_nan
from core.errors import DirectoryError, InvalidInputError

logger = logging.getLogger("carshop.api")

# Auth policy:
# - GET    /api/car, /api/car/{car_id}:  public
# - POST   /api/car:                     require_login
# - PUT    /api/car:                     require_login + ownership check in directory
# - DELETE /api/car/{car_id}:            require_login + ownership check in directory
router = APIRouter()


def _car_from_body(body: CarIn) -> Car:
    return Car(
        id=body.id,
        vendor=body.vendor,
        speed=to_number(body.speed, "speed"),
        price=to_number(body.price, "price"),
    )


@router.get("/car", response_model=list[CarOut])
def list_cars(
    request: Request,
    txt: Optional[str] = None,
    max_price: Optional[str] = Query(default=None, alias="maxPrice"),
) -> list[CarOut]:
    """List cars whose vendor contains txt and whose price is at most maxPrice.

    maxPrice is coerced even when absent; absence or junk becomes NaN, which
    the directory reads as "no price filter".
    """
    cars: CarDirectory = request.app.state.car_directory
    car_filter = CarFilter(text=txt, max_price=to_number_or_nan(max_price))
    try:
        found = cars.query(car_filter)
    except DirectoryError as exc:
        logger.error("Cannot get cars: %s", exc)
        raise HTTPException(status_code=400, detail="Cannot load cars") from exc
    return [CarOut.from_car(c) for c in found]


@router.post("/car", response_model=CarOut)
def add_car(
    request: Request,
    current_user: SessionUser = Depends(require_login("Cannot add car")),
    body: CarIn = Depends(parse_body(CarIn, "Cannot add car")),
) -> CarOut:
    """Add a car owned by the caller. Any client-supplied _id or owner is dropped."""
    cars: CarDirectory = request.app.state.car_directory
    try:
        car = _car_from_body(body)
        car.id = None
        saved = cars.save(car, current_user)
    except DirectoryError as exc:
        logger.error("Cannot save car: %s", exc)
        raise HTTPException(status_code=400, detail="Cannot add car") from exc
    return CarOut.from_car(saved)


@router.put("/car", response_model=CarOut)
def update_car(
    request: Request,
    current_user: SessionUser = Depends(require_login("Cannot update car")),
    body: CarIn = Depends(parse_body(CarIn, "Cannot update car")),
) -> CarOut:
    """Edit vendor, speed and price of an existing car."""
    cars: CarDirectory = request.app.state.car_directory
    try:
        if not body.id:
            raise InvalidInputError("_id is required to update a car")
        saved = cars.save(_car_from_body(body), current_user)
    except DirectoryError as exc:
        logger.error("Cannot save car: %s", exc)
        raise HTTPException(status_code=400, detail="Cannot update car") from exc
    return CarOut.from_car(saved)


@router.get("/car/{car_id}", response_model=CarOut)
def get_car(request: Request, car_id: str) -> CarOut:
    cars: CarDirectory = request.app.state.car_directory
    try:
        car = cars.get(car_id)
    except DirectoryError as exc:
        logger.error("Cannot get car: %s", exc)
        raise HTTPException(status_code=403, detail=str(exc)) from exc
    return CarOut.from_car(car)


@router.delete("/car/{car_id}", response_model=CarRemovedResponse)
def remove_car(
    request: Request,
    car_id: str,
    current_user: SessionUser = Depends(require_login("Cannot delete car")),
) -> CarRemovedResponse:
    cars: CarDirectory = request.app.state.car_directory
    try:
        msg = cars.remove(car_id, current_user)
    except DirectoryError as exc:
        logger.error("Cannot remove car: %s", exc)
        raise HTTPException(status_code=400, detail=f"Cannot remove car, {exc}") from exc
    return CarRemovedResponse(msg=msg, car_id=car_id)
