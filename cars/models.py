"""
cars/models.py -- Domain dataclasses for the car catalogue.

These are pure data containers with zero logic. Ownership rules live in
cars/directory.py; SQL lives in cars/store.py.
"""

import math
from dataclasses import dataclass
from typing import Optional, Union

Number = Union[int, float]


@dataclass(frozen=True)
class Owner:
    """Snapshot of the user who created a car.

    Copied from the session at insert time and never refreshed, so renaming a
    user does not rewrite the cars they own.
    """

    id: str
    fullname: str
    username: str = ""


@dataclass
class Car:
    """A car listed in the shop.

    id is None before the record is written to the database. owner is None
    only for cars that have not been saved yet.
    """

    vendor: str
    speed: Number
    price: Number
    id: Optional[str] = None
    owner: Optional[Owner] = None
    created_at: str = ""  # ISO 8601, set by store on insert


@dataclass
class CarFilter:
    """Optional query filters. Unset fields do not restrict the result.

    max_price may be NaN, which is what an absent ?maxPrice= coerces to; it is
    treated the same as None.
    """

    text: Optional[str] = None
    max_price: Optional[float] = None

    @property
    def has_max_price(self) -> bool:
        return self.max_price is not None and not math.isnan(self.max_price)
