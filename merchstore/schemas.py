"""Request payload models for the JSON API.

Payloads use the camelCase field names of the storefront client; the models
expose snake_case attributes. Update models describe a *patch*: only the
fields present in the request are returned by :func:`patch_fields` and no
field may be explicitly set to ``null``.
"""
from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal
from typing import Annotated, Any, Optional, TypeVar
from urllib.parse import urlparse

from pydantic import (
    AfterValidator,
    BaseModel,
    ConfigDict,
    EmailStr,
    Field,
    ValidationError,
    model_validator,
)
from pydantic.alias_generators import to_camel

from merchstore.services.errors import ServiceError

PositiveId = Annotated[int, Field(strict=True, gt=0)]
PositiveQuantity = Annotated[int, Field(strict=True, gt=0)]
StockQuantity = Annotated[int, Field(strict=True, ge=0)]
CENT = Decimal("0.01")


def to_cents(value: Decimal) -> Decimal:
    """Round a money value to whole cents.

    Float sums from the storefront arrive with binary noise, e.g.
    ``3 * 9.95`` is ``29.849999999999998`` and is stored as ``29.85``.
    """

    return Decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)


def _positive_cents(value: Decimal) -> Decimal:
    rounded = to_cents(value)
    if rounded <= 0:
        raise ValueError("Amount must be at least 0.01")
    return rounded


Price = Annotated[Decimal, Field(gt=0), AfterValidator(_positive_cents)]
Amount = Annotated[Decimal, Field(gt=0), AfterValidator(_positive_cents)]
Name = Annotated[str, Field(min_length=1, max_length=255)]

SchemaT = TypeVar("SchemaT", bound=BaseModel)


class _Payload(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        str_strip_whitespace=True,
        extra="ignore",
    )


class _Patch(_Payload):
    @model_validator(mode="after")
    def reject_nulls(self):
        for field_name in self.model_fields_set:
            if getattr(self, field_name) is None:
                raise ValueError(f"{to_camel(field_name)} cannot be null")
        return self


def _check_image_url(value: Optional[str]) -> Optional[str]:
    if not value:
        return value
    parsed = urlparse(value)
    if parsed.scheme not in {"http", "https"} or not parsed.netloc:
        raise ValueError("Invalid image URL")
    return value


ImageUrl = Annotated[str, AfterValidator(_check_image_url)]


class ItemCreate(_Payload):
    name: Name
    description: str = ""
    price: Price
    item_type_id: PositiveId
    image_url: ImageUrl = ""


class ItemUpdate(_Patch):
    name: Optional[Name] = None
    description: Optional[str] = None
    price: Optional[Price] = None
    item_type_id: Optional[PositiveId] = None
    image_url: Optional[ImageUrl] = None


class NamedPayload(_Payload):
    """Shared shape of item types, sizes and roles."""

    name: Name


class ItemTypeSizeCreate(_Payload):
    item_type_id: PositiveId
    size_id: PositiveId


class ItemAvailabilityCreate(_Payload):
    item_id: PositiveId
    size_id: PositiveId
    quantity_in_stock: StockQuantity


class ItemAvailabilityUpdate(_Patch):
    item_id: Optional[PositiveId] = None
    size_id: Optional[PositiveId] = None
    quantity_in_stock: Optional[StockQuantity] = None


class StockUpdate(_Payload):
    quantity_in_stock: StockQuantity


class UserCreate(_Payload):
    name: Name
    email: EmailStr
    role_id: PositiveId


class UserUpdate(_Patch):
    name: Optional[Name] = None
    email: Optional[EmailStr] = None
    role_id: Optional[PositiveId] = None


class PermissionPayload(_Payload):
    action: Name
    description: str = ""


class RolePermissionCreate(_Payload):
    role_id: PositiveId
    permission_id: PositiveId


class OrderLineCreate(_Payload):
    item_id: PositiveId
    size_id: PositiveId
    quantity: PositiveQuantity
    price_at_time_of_order: Optional[Price] = None


class OrderCreate(_Payload):
    user_id: PositiveId
    order_date: Optional[str] = None
    total_amount: Optional[Amount] = None
    status: Optional[Annotated[str, Field(min_length=1, max_length=64)]] = None
    order_lines: Annotated[list[OrderLineCreate], Field(min_length=1)]


class OrderStatusUpdate(_Payload):
    status: Annotated[str, Field(min_length=1, max_length=64)]


class LocationPayload(_Payload):
    name: Name
    address: Annotated[str, Field(min_length=1, max_length=512)]


def _format_errors(exc: ValidationError) -> list[dict[str, str]]:
    details = []
    for error in exc.errors(include_url=False, include_context=False, include_input=False):
        field = ".".join(str(part) for part in error.get("loc", ()))
        details.append({"field": field, "message": error.get("msg", "Invalid value")})
    return details


def load(schema: type[SchemaT], payload: Any) -> SchemaT:
    """Validate ``payload`` against ``schema`` or raise a validation error."""

    if not isinstance(payload, dict):
        raise ServiceError.validation(
            "Validation failed",
            details=[{"field": "", "message": "Request body must be a JSON object"}],
        )
    try:
        return schema.model_validate(payload)
    except ValidationError as exc:
        raise ServiceError.validation(
            "Validation failed", details=_format_errors(exc)
        ) from exc


def patch_fields(patch: _Patch) -> dict[str, Any]:
    """Return the explicitly supplied fields of an update payload."""

    return patch.model_dump(exclude_unset=True)
