"""
주문 생성/수정 요청 검증

CRUD 경계에서 전달된 필드 값을 검증하고 정규화합니다.
모든 검증은 조회나 쓰기 이전에 수행되며 실패 시 ValidationError를 발생시킵니다.
"""

from dataclasses import dataclass, fields
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Mapping, Optional

from .base import OrderStatus, QuantityUnit, round2, to_decimal
from .exceptions import ValidationError

# Integer 컬럼(processed_quantity, payment_due_days) 범위
INTEGER_MAX = 2 ** 31 - 1

# Numeric(12, 2) 컬럼(rate, quantity) 상한
AMOUNT_LIMIT = 10 ** 10


class _Unset:
    """수정 요청에서 전달되지 않은 필드 표시"""

    def __repr__(self):
        return "UNSET"

    def __bool__(self):
        return False


UNSET: Any = _Unset()

UPDATABLE_FIELDS = (
    "customer_id", "manufacturer_id", "rate", "quantity", "quantity_unit",
    "quality_name", "order_date", "remarks", "payment_due_days",
    "processed_quantity", "processed_quantity_add", "status",
    "manufacturer_display_name",
)


@dataclass(frozen=True)
class OrderCreate:
    """검증된 주문 생성 요청"""
    customer_id: Any
    manufacturer_id: Any
    rate: Decimal
    quantity: Decimal
    quantity_unit: QuantityUnit
    quality_name: str
    order_date: date
    remarks: Optional[str] = None
    payment_due_days: Optional[int] = None


@dataclass(frozen=True)
class OrderUpdate:
    """검증된 주문 수정 요청 (전달되지 않은 필드는 UNSET)"""
    customer_id: Any = UNSET
    manufacturer_id: Any = UNSET
    rate: Any = UNSET
    quantity: Any = UNSET
    quantity_unit: Any = UNSET
    quality_name: Any = UNSET
    order_date: Any = UNSET
    remarks: Any = UNSET
    payment_due_days: Any = UNSET
    processed_quantity: Any = UNSET
    processed_quantity_add: Any = UNSET
    status: Any = UNSET
    manufacturer_display_name: Any = UNSET

    def has(self, name: str) -> bool:
        """필드 전달 여부"""
        return getattr(self, name) is not UNSET

    @property
    def provided_fields(self) -> tuple:
        return tuple(f.name for f in fields(self) if self.has(f.name))

    @property
    def recalculates_amounts(self) -> bool:
        """파생 금액 재계산이 필요한 수정인지 여부"""
        return any(self.has(name) for name in ("rate", "quantity", "quantity_unit", "customer_id"))

    @property
    def touches_processed_quantity(self) -> bool:
        return self.has("processed_quantity") or self.has("processed_quantity_add")


def _money(value: Any, name: str) -> Optional[Decimal]:
    """저장 정밀도(소수 둘째 자리)로 반올림, 0 이하/비숫자는 None"""
    number = to_decimal(value)
    if number is None or not number.is_finite():
        return None
    if number >= AMOUNT_LIMIT:
        raise ValidationError(f"{name} must be less than {AMOUNT_LIMIT}")
    number = round2(number)
    return number if number > 0 else None


def _positive_number(value: Any, name: str) -> Decimal:
    number = _money(value, name)
    if number is None:
        raise ValidationError(f"{name} must be greater than 0")
    return number


def _non_negative_int(value: Any, name: str, message: str) -> int:
    number = to_decimal(value)
    if number is None or not number.is_finite() or number != number.to_integral_value() or number < 0:
        raise ValidationError(message)
    if number > INTEGER_MAX:
        raise ValidationError(f"{name} must not exceed {INTEGER_MAX}")
    return int(number)


def _quantity_unit(value: Any) -> QuantityUnit:
    try:
        return QuantityUnit(str(value).strip().upper())
    except ValueError:
        raise ValidationError("quantity_unit must be one of: TAKKA, LOT, METER") from None


def _status(value: Any) -> OrderStatus:
    try:
        return OrderStatus(str(value).strip().upper())
    except ValueError:
        raise ValidationError("status must be one of: PENDING, COMPLETED, CANCELLED") from None


def _order_date(value: Any) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    text = str(value or "").strip()
    try:
        return datetime.fromisoformat(text.replace("Z", "+00:00")).date()
    except ValueError:
        raise ValidationError("order_date must be a valid date") from None


def _quality_name(value: Any) -> str:
    name = str(value or "").strip()
    if not name:
        raise ValidationError("quality_name is required")
    return name


def _optional_text(value: Any) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def _payment_due_days(value: Any) -> int:
    return _non_negative_int(
        value, "payment_due_days", "payment_due_days must be a whole number of days and cannot be negative"
    )


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def validate_create_payload(payload: Mapping[str, Any]) -> OrderCreate:
    """
    주문 생성 요청 검증

    Args:
        payload: customer_id, manufacturer_id, rate, quantity, quantity_unit,
                 quality_name, order_date, remarks, payment_due_days

    Returns:
        OrderCreate: 검증된 요청
    """
    required = ("customer_id", "manufacturer_id", "rate", "quantity", "order_date")
    if any(_is_blank(payload.get(name)) for name in required):
        raise ValidationError("customer_id, manufacturer_id, rate, quantity, order_date are required")

    quantity = _money(payload.get("quantity"), "quantity")
    rate = _money(payload.get("rate"), "rate")
    if quantity is None or rate is None:
        raise ValidationError("quantity and rate must be greater than 0")

    quantity_unit = QuantityUnit.TAKKA
    if payload.get("quantity_unit") is not None:
        quantity_unit = _quantity_unit(payload["quantity_unit"])

    payment_due_days = None
    if payload.get("payment_due_days") is not None:
        payment_due_days = _payment_due_days(payload["payment_due_days"])

    return OrderCreate(
        customer_id=payload["customer_id"],
        manufacturer_id=payload["manufacturer_id"],
        rate=rate,
        quantity=quantity,
        quantity_unit=quantity_unit,
        quality_name=_quality_name(payload.get("quality_name")),
        order_date=_order_date(payload["order_date"]),
        remarks=_optional_text(payload.get("remarks")),
        payment_due_days=payment_due_days,
    )


def validate_update_payload(payload: Mapping[str, Any]) -> OrderUpdate:
    """
    주문 수정 요청 검증

    전달된 필드만 검증하며 최소 한 개 이상의 필드가 필요합니다.
    processed_quantity(절대값)와 processed_quantity_add(증가분)는 함께 사용할 수 없습니다.
    """
    provided = {name: payload[name] for name in UPDATABLE_FIELDS if name in payload}
    if not provided:
        raise ValidationError("at least one field is required to update order")

    values = {}
    for name in ("customer_id", "manufacturer_id"):
        if name in provided:
            if _is_blank(provided[name]):
                raise ValidationError(f"{name} cannot be empty")
            values[name] = provided[name]

    if "quantity" in provided:
        values["quantity"] = _positive_number(provided["quantity"], "quantity")
    if "rate" in provided:
        values["rate"] = _positive_number(provided["rate"], "rate")
    if "quantity_unit" in provided:
        values["quantity_unit"] = _quantity_unit(provided["quantity_unit"])
    if "payment_due_days" in provided:
        value = provided["payment_due_days"]
        values["payment_due_days"] = None if value is None else _payment_due_days(value)
    if "processed_quantity" in provided:
        values["processed_quantity"] = _non_negative_int(
            provided["processed_quantity"],
            "processed_quantity",
            "processed_quantity must be a whole number and cannot be negative",
        )
    if "processed_quantity_add" in provided:
        values["processed_quantity_add"] = _non_negative_int(
            provided["processed_quantity_add"],
            "processed_quantity_add",
            "processed_quantity_add must be a whole number and cannot be negative",
        )
    if "processed_quantity" in values and "processed_quantity_add" in values:
        raise ValidationError("provide either processed_quantity or processed_quantity_add, not both")
    if "status" in provided:
        values["status"] = _status(provided["status"])
    if "quality_name" in provided:
        values["quality_name"] = _quality_name(provided["quality_name"])
    if "order_date" in provided:
        values["order_date"] = _order_date(provided["order_date"])
    if "remarks" in provided:
        values["remarks"] = _optional_text(provided["remarks"])
    if "manufacturer_display_name" in provided:
        values["manufacturer_display_name"] = _optional_text(provided["manufacturer_display_name"])

    return OrderUpdate(**values)
