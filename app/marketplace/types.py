"""
Typed records for Mirakl API payloads.

Mirakl returns loosely structured JSON where most keys are optional.
These records parse it once, with explicit optional fields, so callers
never index into raw dicts.

Usage:
    shop = Shop.from_api(payload)
    if shop.phone:
        ...
    ignored = shop.custom_field_value("stripe-ignored") == "true"
"""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any


def to_decimal(value: Any) -> Decimal:
    """Mirakl amounts are JSON numbers; go through str to keep them exact."""
    if value is None or value == "":
        return Decimal("0")
    return Decimal(str(value))


@dataclass(frozen=True)
class Shop:
    """
    A Mirakl shop (seller).

    Attributes:
        id: Mirakl shop id
        name: Shop name
        is_professional: Seller is a company rather than an individual
        web_site: Contact web site
        email: Contact email
        phone: Contact phone
        additional_fields: Custom field values by field code
        attributes: Top-level shop attributes as returned by Mirakl
    """

    id: int
    name: str | None = None
    is_professional: bool = False
    web_site: str | None = None
    email: str | None = None
    phone: str | None = None
    additional_fields: dict[str, Any] = field(default_factory=dict)
    attributes: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_api(cls, payload: dict[str, Any]) -> Shop:
        contact = payload.get("contact_informations") or {}
        additional_fields = {
            item["code"]: item.get("value")
            for item in payload.get("shop_additional_fields") or []
            if "code" in item
        }
        return cls(
            id=int(payload["shop_id"]),
            name=payload.get("shop_name"),
            is_professional=bool(payload.get("is_professional")),
            web_site=contact.get("web_site"),
            email=contact.get("email"),
            phone=contact.get("phone"),
            additional_fields=additional_fields,
            attributes=dict(payload),
        )

    def has_attribute(self, key: str) -> bool:
        """True if the attribute exists and is not null."""
        return self.attributes.get(key) is not None

    def attribute(self, key: str, default: Any = None) -> Any:
        return self.attributes.get(key, default)

    def custom_field_value(self, code: str) -> str | None:
        """Value of a shop custom field as a string, None if unset."""
        value = self.additional_fields.get(code)
        if value is None:
            return None
        return str(value)


@dataclass(frozen=True)
class Order:
    """
    Settlement-relevant totals of a Mirakl order.

    Attributes:
        id: Mirakl order id
        tax_amount: Sum of all order line taxes
        shipping_tax_amount: Sum of all order line shipping taxes
        operator_commission: Commission kept by the operator
    """

    id: str
    tax_amount: Decimal = Decimal("0")
    shipping_tax_amount: Decimal = Decimal("0")
    operator_commission: Decimal = Decimal("0")

    @classmethod
    def from_api(cls, payload: dict[str, Any]) -> Order:
        lines = payload.get("order_lines") or []
        return cls(
            id=str(payload["order_id"]),
            tax_amount=cls._total_taxes(lines, "taxes"),
            shipping_tax_amount=cls._total_taxes(lines, "shipping_taxes"),
            operator_commission=to_decimal(payload.get("total_commission")),
        )

    @staticmethod
    def _total_taxes(lines: list[dict[str, Any]], tax_type: str) -> Decimal:
        total = Decimal("0")
        for line in lines:
            for tax in line.get(tax_type) or []:
                total += to_decimal(tax.get("amount"))
        return total
