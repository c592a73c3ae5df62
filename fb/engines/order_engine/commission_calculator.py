"""
수수료 계산기 (Commission Calculator) 구현

원단 중개 주문의 중개 수수료를 계산합니다.
고객별 수수료 기준(거래금액 비율 또는 로트당 정액)에 따라 계산하며
모든 금액은 센트 단위로 반올림합니다.
"""

import logging
from decimal import Decimal
from typing import Any, Dict, Optional

from .base import (
    BaseCommissionCalculator, CommissionConfig, LotCommission, OrderAmountConfig,
    PercentCommission, round2, to_decimal
)
from .unit_converter import UnitConverter

logger = logging.getLogger(__name__)

ZERO = Decimal("0.00")


class CommissionCalculator(BaseCommissionCalculator):
    """
    중개 수수료 계산기

    수수료 체계:
    1. PERCENT 기준: (미터 환산 수량 × 단가) + GST 5% 에 고객 비율(%) 적용
    2. LOT 기준: 수수료 기준 수량 × 로트당 금액 (단가/미터와 무관)
    """

    def __init__(self, unit_converter: Optional[UnitConverter] = None):
        self.unit_converter = unit_converter or UnitConverter()
        self.gst_rate = OrderAmountConfig.GST_RATE

        logger.info("CommissionCalculator initialized")

    def calculate_commission(
        self,
        quantity_for_commission: Any,
        rate: Any,
        unit: Any,
        lot_meters: Optional[Any],
        config: Optional[CommissionConfig],
    ) -> Decimal:
        """
        수수료 계산

        Args:
            quantity_for_commission: 수수료 기준 수량 (주문 수량 또는 처리 수량)
            rate: 미터당 단가
            unit: 수량 단위
            lot_meters: 로트당 미터
            config: 고객 수수료 설정 (None이면 1% 비율 기준)

        Returns:
            Decimal: 수수료 (소수 둘째 자리, 0 이상)
        """
        quantity = to_decimal(quantity_for_commission)
        if quantity is None or not quantity.is_finite() or quantity <= 0:
            return ZERO

        if isinstance(config, LotCommission):
            amount = quantity * config.lot_rate
        else:
            if not isinstance(config, PercentCommission):
                config = PercentCommission()
            base_amount, gst_amount = self._calculate_base_and_gst(quantity, rate, unit, lot_meters)
            amount = (base_amount + gst_amount) * (config.percent / Decimal("100"))

        commission = max(round2(amount), ZERO)
        logger.debug(f"Commission calculated: quantity={quantity} basis={self._basis_name(config)} -> {commission}")
        return commission

    def get_commission_breakdown(
        self,
        quantity_for_commission: Any,
        rate: Any,
        unit: Any,
        lot_meters: Optional[Any],
        config: Optional[CommissionConfig],
    ) -> Dict[str, Any]:
        """수수료 세부 내역"""
        quantity = to_decimal(quantity_for_commission)
        commission = self.calculate_commission(quantity_for_commission, rate, unit, lot_meters, config)

        breakdown: Dict[str, Any] = {
            "basis": self._basis_name(config),
            "commission_amount": float(commission),
        }
        if quantity is None or not quantity.is_finite() or quantity <= 0:
            breakdown.update({"meter": 0.0, "base_amount": 0.0, "gst_amount": 0.0})
            return breakdown

        base_amount, gst_amount = self._calculate_base_and_gst(quantity, rate, unit, lot_meters)
        meter = self.unit_converter.to_linear_measure(quantity, unit, lot_meters)
        breakdown.update({
            "meter": float(round2(meter)),
            "base_amount": float(round2(base_amount)),
            "gst_amount": float(round2(gst_amount)),
        })
        return breakdown

    def _calculate_base_and_gst(self, quantity: Decimal, rate: Any, unit: Any, lot_meters: Optional[Any]):
        """거래금액 및 GST 계산"""
        rate = to_decimal(rate)
        if rate is None:
            raise ValueError("rate must be a number")

        meter = self.unit_converter.to_linear_measure(quantity, unit, lot_meters)
        base_amount = meter * rate
        gst_amount = base_amount * self.gst_rate
        return base_amount, gst_amount

    @staticmethod
    def _basis_name(config: Optional[CommissionConfig]) -> str:
        if isinstance(config, LotCommission):
            return config.basis.value
        return PercentCommission().basis.value
