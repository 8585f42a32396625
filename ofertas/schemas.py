"""Request payloads shared by the public and authenticated handlers."""

from __future__ import annotations

import uuid
from decimal import Decimal, InvalidOperation
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ofertas.storage.images import ALLOWED_MIMETYPES

MAX_PRICE = Decimal("1e10")


def _uuid_string(value: Any, empty_message: str) -> str:
    if not isinstance(value, str) or not value.strip():
        raise ValueError(empty_message)
    try:
        return str(uuid.UUID(value))
    except ValueError as exc:
        raise ValueError("Identificador invalido") from exc


class Payload(BaseModel):
    model_config = ConfigDict(populate_by_name=True, frozen=True)


class PostInput(Payload):
    product_id: str = Field(alias="productId")
    commerce_id: str = Field(alias="commerceId")
    image_key: str = Field(alias="imageKey")
    price: Decimal

    @field_validator("product_id", mode="before")
    @classmethod
    def _product(cls, value: Any) -> str:
        return _uuid_string(value, "El producto no debe quedar vacio")

    @field_validator("commerce_id", mode="before")
    @classmethod
    def _commerce(cls, value: Any) -> str:
        return _uuid_string(value, "El comercio no debe quedar vacio")

    @field_validator("image_key", mode="before")
    @classmethod
    def _image(cls, value: Any) -> str:
        if not isinstance(value, str) or not value:
            raise ValueError("La imagen es requerida")
        return value

    @field_validator("price", mode="before")
    @classmethod
    def _price(cls, value: Any) -> Decimal:
        if isinstance(value, bool) or not isinstance(value, (int, float, Decimal)):
            raise ValueError("Debe ingresar el precio")
        try:
            price = value if isinstance(value, Decimal) else Decimal(str(value))
        except InvalidOperation as exc:
            raise ValueError("Debe ingresar el precio") from exc
        # Stored as numeric(12, 2): at most two decimals and ten integer digits.
        if not price.is_finite() or price <= 0 or price >= MAX_PRICE or price.as_tuple().exponent < -2:
            raise ValueError("Ingrese un precio valido")
        return price


class ImageUploadRequest(Payload):
    mimetype: str
    length: int = Field(gt=0)

    @field_validator("mimetype")
    @classmethod
    def _mimetype(cls, value: str) -> str:
        if value not in ALLOWED_MIMETYPES:
            raise ValueError("Tipo de imagen invalido")
        return value


class ProductInput(Payload):
    name: str = Field(min_length=1)
    category_id: str = Field(alias="categoryId")

    @field_validator("category_id", mode="before")
    @classmethod
    def _category(cls, value: Any) -> str:
        return _uuid_string(value, "La categoría es requerida")


class CategoryInput(Payload):
    name: str = Field(min_length=1)
