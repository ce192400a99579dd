"""
cars/directory.py -- Car directory: query, get, save and remove with ownership.

Ownership rule: the owner snapshot written at insert time is the only thing
that decides who may edit or remove a car. Admins may edit or remove any car.
Client-supplied owners are ignored on both insert and update.
"""

import logging
import math
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError

from auth.models import SessionUser
from cars.models import Car, CarFilter, Owner
from cars.store import CarStore
from core.coerce import to_text
from core.errors import ForbiddenError, InvalidInputError, NotFoundError, StorageError

logger = logging.getLogger("carshop.cars")

MAX_VENDOR_LENGTH = 255


class CarDirectory:
    def __init__(self, store: CarStore) -> None:
        self.store = store

    def query(self, car_filter: Optional[CarFilter] = None) -> list[Car]:
        """Return cars matching the filter, in insertion order."""
        car_filter = car_filter or CarFilter()
        max_price = car_filter.max_price if car_filter.has_max_price else None
        try:
            return self.store.list_cars(text=car_filter.text or None, max_price=max_price)
        except SQLAlchemyError as exc:
            raise StorageError("Cannot load cars") from exc

    def get(self, car_id: str) -> Car:
        car = self.store.get_car(car_id)
        if car is None:
            raise NotFoundError(f"Cannot find car {car_id}")
        return car

    def save(self, car: Car, acting_user: SessionUser) -> Car:
        """Insert (no id) or update (id set) a car on behalf of acting_user."""
        _validate(car)
        if car.id is None:
            car.owner = Owner(id=acting_user.id, fullname=acting_user.fullname, username=acting_user.username)
            try:
                car_id = self.store.create_car(car)
            except SQLAlchemyError as exc:
                raise StorageError("Cannot save car") from exc
            logger.info("Car %s added by %s", car_id, acting_user.username)
            return self.get(car_id)

        existing = self.get(car.id)
        _check_owner(existing, acting_user)
        try:
            self.store.update_car(car)
        except SQLAlchemyError as exc:
            raise StorageError("Cannot save car") from exc
        return self.get(car.id)

    def remove(self, car_id: str, acting_user: SessionUser) -> str:
        existing = self.get(car_id)
        _check_owner(existing, acting_user)
        try:
            deleted = self.store.delete_car(car_id)
        except SQLAlchemyError as exc:
            raise StorageError("Cannot remove car") from exc
        if not deleted:
            raise NotFoundError(f"Cannot find car {car_id}")
        logger.info("Car %s removed by %s", car_id, acting_user.username)
        return "Car removed"


def _check_owner(car: Car, acting_user: SessionUser) -> None:
    if acting_user.is_admin:
        return
    if car.owner is None or car.owner.id != acting_user.id:
        raise ForbiddenError("Not your car")


def _validate(car: Car) -> None:
    if car.id is not None:
        car.id = to_text(car.id, "_id")
    car.vendor = to_text(car.vendor, "vendor", MAX_VENDOR_LENGTH)
    if not car.vendor:
        raise InvalidInputError("vendor is required")
    for field in ("speed", "price"):
        value = getattr(car, field)
        if isinstance(value, bool) or not isinstance(value, (int, float)) or not math.isfinite(value):
            raise InvalidInputError(f"{field} must be a finite number")
