"""
주문 금액 엔진 (Order Amount Engine)

단위 변환기와 수수료 계산기를 조합해 주문에 저장되는
파생 필드(단위, 로트당 미터, 미터, 수수료)를 계산합니다.
"""

import logging
from decimal import Decimal
from typing import Any, Optional

from .base import CommissionConfig, OrderAmounts, QuantityUnit, round2, to_decimal
from .commission_calculator import CommissionCalculator
from .unit_converter import UnitConverter

logger = logging.getLogger(__name__)


class OrderAmountEngine:
    """주문 파생 금액 계산 엔진"""

    def __init__(
        self,
        unit_converter: Optional[UnitConverter] = None,
        commission_calculator: Optional[CommissionCalculator] = None,
    ):
        self.unit_converter = unit_converter or UnitConverter()
        self.commission_calculator = commission_calculator or CommissionCalculator(self.unit_converter)

        logger.info("OrderAmountEngine initialized")

    def compute_order_amounts(
        self,
        quantity: Any,
        rate: Any,
        unit: Any,
        config: Optional[CommissionConfig],
        existing_lot_meters: Optional[Any] = None,
    ) -> OrderAmounts:
        """
        주문 파생 금액 계산

        주문 생성 시와, 단가/수량/단위/고객이 바뀌는 수정 시 호출됩니다.
        수수료 기준 수량은 전체 주문 수량입니다.

        Args:
            quantity: 주문 수량
            rate: 미터당 단가
            unit: 수량 단위 (알 수 없는 값은 TAKKA)
            config: 고객 수수료 설정
            existing_lot_meters: 주문에 이미 할당된 로트당 미터

        Returns:
            OrderAmounts: 저장할 파생 필드
        """
        quantity_unit = self.unit_converter.normalize_unit(unit)
        lot_meters = self.resolve_lot_meters(quantity_unit, existing_lot_meters)

        meter = self.unit_converter.to_linear_measure(quantity, quantity_unit, lot_meters)
        commission_amount = self.commission_calculator.calculate_commission(
            quantity, rate, quantity_unit, lot_meters, config
        )

        amounts = OrderAmounts(
            quantity_unit=quantity_unit,
            lot_meters=lot_meters,
            meter=round2(meter),
            commission_amount=round2(commission_amount),
        )
        logger.debug(
            f"Order amounts computed: unit={quantity_unit.value} lot_meters={lot_meters} "
            f"meter={amounts.meter} commission={amounts.commission_amount}"
        )
        return amounts

    def resolve_lot_meters(self, unit: QuantityUnit, existing_lot_meters: Optional[Any]) -> Optional[Decimal]:
        """
        로트당 미터 결정

        - METER 단위: None
        - 이미 할당된 값이 있으면 그대로 재사용
        - 처음으로 METER가 아닌 단위가 되면 새로 할당
        """
        if unit == QuantityUnit.METER:
            return None

        existing = to_decimal(existing_lot_meters)
        if existing is not None and existing > 0:
            return existing
        return self.unit_converter.assign_lot_meters()
