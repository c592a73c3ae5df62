"""
수량 단위 변환기 (Unit Converter)

타카/로트/미터 단위의 주문 수량을 공통 기준인 미터로 환산합니다.
"""

import logging
import random
from decimal import Decimal
from typing import Any, Optional

from .base import OrderAmountConfig, QuantityUnit, round2, to_decimal

logger = logging.getLogger(__name__)


class UnitConverter:
    """주문 수량 단위 변환기"""

    def __init__(self, rng: Optional[random.Random] = None):
        self.rng = rng or random.Random()

    def normalize_unit(self, unit: Any) -> QuantityUnit:
        """
        수량 단위 정규화

        알 수 없는 단위는 오류 대신 TAKKA로 처리합니다.
        """
        if isinstance(unit, QuantityUnit):
            return unit
        try:
            return QuantityUnit(str(unit).strip().upper())
        except ValueError:
            logger.warning(f"Unknown quantity unit {unit!r}, falling back to TAKKA")
            return QuantityUnit.TAKKA

    def to_linear_measure(self, quantity: Any, unit: Any, lot_meters: Optional[Any]) -> Decimal:
        """
        수량을 미터로 환산

        Args:
            quantity: 주문 수량
            unit: 수량 단위
            lot_meters: 로트당 미터 (METER 단위에서는 사용하지 않음)

        Returns:
            Decimal: 미터 환산 값 (반올림 전)
        """
        quantity = to_decimal(quantity)
        if quantity is None:
            raise ValueError("quantity must be a number")

        unit = self.normalize_unit(unit)
        if unit == QuantityUnit.METER:
            return quantity

        lot_meters = to_decimal(lot_meters)
        if lot_meters is None:
            raise ValueError(f"lot_meters is required for {unit.value} quantities")

        if unit == QuantityUnit.LOT:
            return quantity * lot_meters
        return quantity * (lot_meters / OrderAmountConfig.TAKKA_PER_LOT)

    def assign_lot_meters(self) -> Decimal:
        """로트당 미터 값을 [1450, 1550) 구간에서 무작위로 할당"""
        low = OrderAmountConfig.LOT_MIN_METERS
        high = OrderAmountConfig.LOT_MAX_METERS

        drawn = low + Decimal(str(self.rng.random())) * (high - low)
        lot_meters = round2(drawn)
        # 반올림으로 상한에 닿으면 구간 안으로 되돌림
        if lot_meters >= high:
            lot_meters = high - Decimal("0.01")

        logger.debug(f"Lot meters assigned: {lot_meters}")
        return lot_meters
