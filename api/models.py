"""
API request and response models for carshop REST endpoints.

These Pydantic v2 models define the HTTP transport contract for the API layer.
They are intentionally separate from the dataclasses in auth/models.py and
cars/models.py, which own the internal domain representation. Route handlers
map between the two.

Wire names follow the browser client: ids travel as "_id", the admin flag as
"isAdmin" and the removed car id as "carId". Python attributes keep snake_case
via aliases; FastAPI serializes response_model output by alias.
"""

from typing import Any, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from auth.models import User
from cars.models import Car, Owner

# ---------------------------------------------------------------------------
# Request models
# ---------------------------------------------------------------------------


class CarIn(BaseModel):
    """Request body for POST and PUT /api/car.

    Only _id is typed. Browsers send speed and price as numbers or strings,
    and a wrong-typed vendor must fail as "Cannot add car" (400) rather than a
    framework 422, so the route coerces and the directory validates.
    owner is accepted for compatibility and ignored.
    """

    model_config = ConfigDict(populate_by_name=True)

    id: Optional[str] = Field(default=None, alias="_id")
    vendor: Any = None
    speed: Any = None
    price: Any = None
    owner: Any = None


class LoginRequest(BaseModel):
    """Request body for POST /api/auth/login.

    Untyped so a missing or non-string credential is a 401 from the directory,
    not a 422 from validation.
    """

    username: Any = None
    password: Any = None


class SignupRequest(BaseModel):
    """Request body for POST /api/auth/signup. UserDirectory checks the fields."""

    username: Any = None
    password: Any = None
    fullname: Any = None


class UserScoreUpdate(BaseModel):
    """Request body for PUT /api/user. _id defaults to the caller."""

    model_config = ConfigDict(populate_by_name=True)

    id: Optional[str] = Field(default=None, alias="_id")
    score: Any = None


# ---------------------------------------------------------------------------
# Response models
# ---------------------------------------------------------------------------


class OwnerOut(BaseModel):
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    id: str = Field(alias="_id")
    fullname: str
    username: str = ""

    @classmethod
    def from_owner(cls, owner: Owner) -> "OwnerOut":
        return cls(id=owner.id, fullname=owner.fullname, username=owner.username)


class CarOut(BaseModel):
    """A car as the browser sees it."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    id: str = Field(alias="_id")
    vendor: str
    speed: Union[int, float]
    price: Union[int, float]
    owner: Optional[OwnerOut] = None

    @classmethod
    def from_car(cls, car: Car) -> "CarOut":
        """Factory method -- the mapping lives here, next to the output model."""
        return cls(
            id=car.id,
            vendor=car.vendor,
            speed=car.speed,
            price=car.price,
            owner=OwnerOut.from_owner(car.owner) if car.owner else None,
        )


class UserOut(BaseModel):
    """A user as the browser sees it. The password hash is never included."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    id: str = Field(alias="_id")
    username: str
    fullname: str
    score: int
    is_admin: bool = Field(default=False, alias="isAdmin")

    @classmethod
    def from_user(cls, user: User) -> "UserOut":
        return cls(
            id=user.id,
            username=user.username,
            fullname=user.fullname,
            score=user.score,
            is_admin=user.is_admin,
        )


class CarRemovedResponse(BaseModel):
    """Response for DELETE /api/car/{car_id}."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    msg: str
    car_id: str = Field(alias="carId")


class ErrorDetail(BaseModel):
    """Machine-readable error payload."""

    model_config = ConfigDict(frozen=True)

    code: str
    message: str
    detail: Optional[str] = None


class ErrorResponse(BaseModel):
    """Top-level error envelope returned on 422/429/500 responses."""

    model_config = ConfigDict(frozen=True)

    error: ErrorDetail


class HealthResponse(BaseModel):
    """Response for GET /api/health."""

    model_config = ConfigDict(frozen=True)

    status: str = "ok"
    version: str
