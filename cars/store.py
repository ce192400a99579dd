"""
cars/store.py -- Cars table and its repository.

Uses SQLAlchemy Core (not ORM) so the dataclasses in cars/models.py stay the
only in-memory representation. Any SQLAlchemy URL works; SQLite is the default
deployment.

CarStore is the repository; _row_to_car is the mapper. Directory and route
code never build queries.

The owner snapshot is stored as a JSON blob. It is never queried, only
round-tripped, so a join table would buy nothing.

Usage:
    store = CarStore("sqlite:///carshop.db")
    car_id = store.create_car(car)
    cars = store.list_cars(text="tes", max_price=10)
    store.close()
"""

import json
from typing import Optional

from sqlalchemy import Column, Float, Integer, MetaData, String, Table, Text

from cars.models import Car, Owner
from core.db import new_id, now_iso, open_engine

_metadata = MetaData()

_cars = Table(
    "cars",
    _metadata,
    # seq keeps insertion order; id is the opaque public identifier
    Column("seq", Integer, primary_key=True, autoincrement=True),
    Column("id", String(32), nullable=False, unique=True),
    Column("vendor", String(255), nullable=False),
    Column("speed", Float, nullable=False),
    Column("price", Float, nullable=False),
    Column("owner", Text),  # JSON: {"id": ..., "fullname": ..., "username": ...}
    Column("created_at", String(32), nullable=False),
)


class CarStore:
    def __init__(self, db_url: str) -> None:
        self.engine = open_engine(db_url, _metadata)

    def create_car(self, car: Car) -> str:
        """Insert a new car and return its assigned id.

        speed and price are bound as floats: sqlite3 refuses Python ints past
        the 64-bit range even for a REAL column.
        """
        car_id = new_id()
        with self.engine.connect() as conn:
            conn.execute(
                _cars.insert().values(
                    id=car_id,
                    vendor=car.vendor,
                    speed=float(car.speed),
                    price=float(car.price),
                    owner=_owner_to_json(car.owner),
                    created_at=now_iso(),
                )
            )
            conn.commit()
        return car_id

    def get_car(self, car_id: str) -> Optional[Car]:
        """Look up a car by id. Returns None if not found."""
        with self.engine.connect() as conn:
            row = conn.execute(_cars.select().where(_cars.c.id == car_id)).fetchone()
        return _row_to_car(row) if row is not None else None

    def list_cars(self, text: Optional[str] = None, max_price: Optional[float] = None) -> list[Car]:
        """Return cars in insertion order, optionally filtered.

        text matches anywhere in vendor, case-insensitively (ASCII only on
        SQLite, whose lower() ignores other letters). LIKE wildcards in
        the search text are escaped so "%" and "_" match literally.
        """
        query = _cars.select()
        if text:
            query = query.where(_cars.c.vendor.icontains(text, autoescape=True))
        if max_price is not None:
            query = query.where(_cars.c.price <= max_price)
        with self.engine.connect() as conn:
            rows = conn.execute(query.order_by(_cars.c.seq)).fetchall()
        return [_row_to_car(r) for r in rows]

    def update_car(self, car: Car) -> bool:
        """Overwrite vendor, speed and price. Owner and created_at never change.

        Returns True if a row was updated, False if the id was not found.
        """
        with self.engine.connect() as conn:
            result = conn.execute(
                _cars.update()
                .where(_cars.c.id == car.id)
                .values(vendor=car.vendor, speed=float(car.speed), price=float(car.price))
            )
            conn.commit()
        return result.rowcount > 0

    def delete_car(self, car_id: str) -> bool:
        """Permanently delete a car. Returns True if deleted, False if not found."""
        with self.engine.connect() as conn:
            result = conn.execute(_cars.delete().where(_cars.c.id == car_id))
            conn.commit()
        return result.rowcount > 0

    def close(self) -> None:
        self.engine.dispose()


# ---------------------------------------------------------------------------
# Row mappers (Data Mapper pattern)
# ---------------------------------------------------------------------------


def _as_number(value: float):
    return int(value) if float(value).is_integer() else value


def _owner_to_json(owner: Optional[Owner]) -> Optional[str]:
    if owner is None:
        return None
    return json.dumps({"id": owner.id, "fullname": owner.fullname, "username": owner.username})


def _owner_from_json(raw: Optional[str]) -> Optional[Owner]:
    if not raw:
        return None
    data = json.loads(raw)
    return Owner(id=data["id"], fullname=data.get("fullname", ""), username=data.get("username", ""))


def _row_to_car(row) -> Car:
    return Car(
        id=row.id,
        vendor=row.vendor,
        speed=_as_number(row.speed),
        price=_as_number(row.price),
        owner=_owner_from_json(row.owner),
        created_at=row.created_at,
    )
