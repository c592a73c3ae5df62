"""
주문 요청 검증 단위 테스트
"""

from datetime import date, datetime
from decimal import Decimal

import pytest

from fb.engines.order_engine.base import OrderStatus, QuantityUnit
from fb.engines.order_engine.exceptions import ValidationError
from fb.engines.order_engine.validation import (
    UNSET, OrderUpdate, validate_create_payload, validate_update_payload
)


def create_payload(**overrides):
    payload = {
        "customer_id": "c-1",
        "manufacturer_id": "m-1",
        "rate": "10",
        "quantity": 12,
        "quality_name": "Rayon 60",
        "order_date": "2024-03-15",
    }
    payload.update(overrides)
    return payload


class TestCreatePayload:
    """주문 생성 요청 검증"""

    def test_valid_payload(self):
        request = validate_create_payload(create_payload(remarks="  urgent  ", payment_due_days=30))

        assert request.rate == Decimal("10")
        assert request.quantity == Decimal("12")
        assert request.quantity_unit == QuantityUnit.TAKKA
        assert request.quality_name == "Rayon 60"
        assert request.order_date == date(2024, 3, 15)
        assert request.remarks == "urgent"
        assert request.payment_due_days == 30

    @pytest.mark.parametrize("missing", ["customer_id", "manufacturer_id", "rate", "quantity", "order_date"])
    def test_required_fields(self, missing):
        payload = create_payload()
        del payload[missing]

        with pytest.raises(ValidationError) as exc_info:
            validate_create_payload(payload)
        assert exc_info.value.message == "customer_id, manufacturer_id, rate, quantity, order_date are required"
        assert exc_info.value.status_code == 400

    @pytest.mark.parametrize("field,value", [("quantity", 0), ("quantity", -3), ("rate", "0"), ("rate", "abc")])
    def test_non_positive_amounts(self, field, value):
        with pytest.raises(ValidationError) as exc_info:
            validate_create_payload(create_payload(**{field: value}))
        assert exc_info.value.message == "quantity and rate must be greater than 0"

    def test_unit_is_case_insensitive(self):
        request = validate_create_payload(create_payload(quantity_unit="meter"))
        assert request.quantity_unit == QuantityUnit.METER

    def test_unknown_unit_rejected(self):
        with pytest.raises(ValidationError) as exc_info:
            validate_create_payload(create_payload(quantity_unit="YARD"))
        assert exc_info.value.message == "quantity_unit must be one of: TAKKA, LOT, METER"

    def test_quality_name_required(self):
        with pytest.raises(ValidationError) as exc_info:
            validate_create_payload(create_payload(quality_name="   "))
        assert exc_info.value.message == "quality_name is required"

    def test_order_date_formats(self):
        assert validate_create_payload(create_payload(order_date=date(2024, 1, 2))).order_date == date(2024, 1, 2)
        assert validate_create_payload(
            create_payload(order_date=datetime(2024, 1, 2, 9, 30))
        ).order_date == date(2024, 1, 2)

    def test_invalid_order_date(self):
        with pytest.raises(ValidationError) as exc_info:
            validate_create_payload(create_payload(order_date="15/03/2024"))
        assert exc_info.value.message == "order_date must be a valid date"

    def test_negative_payment_due_days(self):
        with pytest.raises(ValidationError):
            validate_create_payload(create_payload(payment_due_days=-1))


class TestUpdatePayload:
    """주문 수정 요청 검증"""

    def test_empty_payload(self):
        with pytest.raises(ValidationError) as exc_info:
            validate_update_payload({"unknown": 1})
        assert exc_info.value.message == "at least one field is required to update order"

    def test_only_provided_fields_are_set(self):
        update = validate_update_payload({"rate": "12.5", "status": "completed"})

        assert update.rate == Decimal("12.5")
        assert update.status == OrderStatus.COMPLETED
        assert update.quantity is UNSET
        assert update.provided_fields == ("rate", "status")
        assert update.recalculates_amounts is True

    def test_status_only_does_not_recalculate(self):
        update = validate_update_payload({"status": "CANCELLED"})
        assert update.recalculates_amounts is False
        assert update.touches_processed_quantity is False

    def test_invalid_status(self):
        with pytest.raises(ValidationError) as exc_info:
            validate_update_payload({"status": "SHIPPED"})
        assert exc_info.value.message == "status must be one of: PENDING, COMPLETED, CANCELLED"

    @pytest.mark.parametrize("value", [-1, "2.5", "abc"])
    def test_invalid_processed_quantity(self, value):
        with pytest.raises(ValidationError) as exc_info:
            validate_update_payload({"processed_quantity": value})
        assert exc_info.value.message == "processed_quantity must be a whole number and cannot be negative"

    def test_invalid_processed_quantity_add(self):
        with pytest.raises(ValidationError) as exc_info:
            validate_update_payload({"processed_quantity_add": -2})
        assert exc_info.value.message == "processed_quantity_add must be a whole number and cannot be negative"

    def test_processed_forms_are_exclusive(self):
        with pytest.raises(ValidationError) as exc_info:
            validate_update_payload({"processed_quantity": 5, "processed_quantity_add": 2})
        assert exc_info.value.message == "provide either processed_quantity or processed_quantity_add, not both"

    def test_processed_quantity_accepts_integral_decimal(self):
        update = validate_update_payload({"processed_quantity": "40.0"})
        assert update.processed_quantity == 40
        assert update.touches_processed_quantity is True

    def test_non_positive_rate(self):
        with pytest.raises(ValidationError) as exc_info:
            validate_update_payload({"rate": 0})
        assert exc_info.value.message == "rate must be greater than 0"

    def test_blank_reference(self):
        with pytest.raises(ValidationError) as exc_info:
            validate_update_payload({"customer_id": "  "})
        assert exc_info.value.message == "customer_id cannot be empty"

    def test_payment_due_days_can_be_cleared(self):
        update = validate_update_payload({"payment_due_days": None})
        assert update.has("payment_due_days")
        assert update.payment_due_days is None

    def test_text_fields_are_trimmed(self):
        update = validate_update_payload({"remarks": "  ", "manufacturer_display_name": " Shree Textiles "})
        assert update.remarks is None
        assert update.manufacturer_display_name == "Shree Textiles"

    def test_unset_is_falsy(self):
        assert not UNSET
        assert OrderUpdate().provided_fields == ()


class TestStoragePrecision:
    """저장 컬럼 정밀도/범위 검증"""

    def test_create_amounts_rounded_to_cents(self):
        """단가/수량은 소수 둘째 자리로 반올림 (ROUND_HALF_UP)"""
        request = validate_create_payload(create_payload(rate="10.555", quantity="12.345"))

        assert request.rate == Decimal("10.56")
        assert request.quantity == Decimal("12.35")

    def test_create_amount_rounding_to_zero(self):
        """반올림 결과가 0이면 거부"""
        with pytest.raises(ValidationError) as exc_info:
            validate_create_payload(create_payload(quantity="0.004"))
        assert exc_info.value.message == "quantity and rate must be greater than 0"

    def test_update_amounts_rounded_to_cents(self):
        update = validate_update_payload({"rate": "7.125", "quantity": "3.333"})

        assert update.rate == Decimal("7.13")
        assert update.quantity == Decimal("3.33")

    def test_update_rate_rounding_to_zero(self):
        with pytest.raises(ValidationError) as exc_info:
            validate_update_payload({"rate": "0.001"})
        assert exc_info.value.message == "rate must be greater than 0"

    @pytest.mark.parametrize("field", ["processed_quantity", "processed_quantity_add"])
    def test_processed_quantity_upper_bound(self, field):
        """Integer 컬럼 범위를 넘는 값은 거부"""
        with pytest.raises(ValidationError) as exc_info:
            validate_update_payload({field: "1e30"})
        assert exc_info.value.message == f"{field} must not exceed 2147483647"

    def test_processed_quantity_at_upper_bound(self):
        update = validate_update_payload({"processed_quantity": 2147483647})
        assert update.processed_quantity == 2147483647

    def test_payment_due_days_upper_bound(self):
        with pytest.raises(ValidationError) as exc_info:
            validate_create_payload(create_payload(payment_due_days=2 ** 31))
        assert exc_info.value.message == "payment_due_days must not exceed 2147483647"

    @pytest.mark.parametrize("field", ["rate", "quantity"])
    def test_amount_upper_bound(self, field):
        """Numeric(12, 2) 컬럼 범위를 넘는 단가/수량은 거부"""
        with pytest.raises(ValidationError) as exc_info:
            validate_create_payload(create_payload(**{field: "1e30"}))
        assert exc_info.value.message == f"{field} must be less than 10000000000"

        with pytest.raises(ValidationError) as exc_info:
            validate_update_payload({field: "1e30"})
        assert exc_info.value.message == f"{field} must be less than 10000000000"
