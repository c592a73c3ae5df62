"""
주문 생명주기 관리자 (Order Lifecycle Manager)

주문 상태 전환(PENDING → COMPLETED/CANCELLED), 부분 처리 수량 추적,
수수료 확정(finalization) 및 진행 수수료(progress commission) 계산을 담당합니다.

수수료 규칙:
- PENDING 동안 저장된 수수료는 전체 주문 수량 기준입니다.
- 상태를 COMPLETED로 바꾸는 수정, 또는 이미 COMPLETED인 주문의 처리 수량 수정은
  저장된 수수료를 처리 수량 기준으로 다시 계산해 확정합니다.
- 진행 수수료는 조회 시에만 계산되며 저장되지 않습니다 (PENDING 주문만).
"""

import logging
from decimal import Decimal
from typing import Any, Dict, Optional

from .amount_engine import OrderAmountEngine
from .base import CommissionConfig, OrderStatus
from .validation import OrderUpdate

logger = logging.getLogger(__name__)


class OrderLifecycleManager:
    """주문 상태 및 수수료 확정 관리자"""

    def __init__(self, amount_engine: Optional[OrderAmountEngine] = None):
        self.amount_engine = amount_engine or OrderAmountEngine()
        self.commission_calculator = self.amount_engine.commission_calculator

        logger.info("OrderLifecycleManager initialized")

    def initialize_order(self, order: Any, config: Optional[CommissionConfig]):
        """신규 주문의 초기 상태와 파생 금액 설정"""
        amounts = self.amount_engine.compute_order_amounts(
            order.quantity, order.rate, order.quantity_unit, config
        )
        self._store_amounts(order, amounts)
        order.status = OrderStatus.PENDING.value
        order.processed_quantity = 0

    def apply_update(self, order: Any, update: OrderUpdate, config: Optional[CommissionConfig]) -> Dict[str, Any]:
        """
        수정 요청의 금액/처리 수량/상태 필드를 주문에 반영

        Args:
            order: 수정할 주문 (ORM 객체)
            update: 검증된 수정 요청
            config: 이번 수정에 적용할 고객 수수료 설정 (고객 변경 시 새 고객 설정)

        Returns:
            Dict[str, Any]: 재계산/확정 여부 요약
        """
        previous_status = OrderStatus(order.status)

        if update.has("rate"):
            order.rate = update.rate
        if update.has("quantity"):
            order.quantity = update.quantity

        processed_quantity = self.resolve_processed_quantity(order, update)
        if processed_quantity is not None:
            order.processed_quantity = processed_quantity

        if update.has("status"):
            self.transition(order, update.status)

        recalculated = False
        if update.recalculates_amounts:
            unit = update.quantity_unit if update.has("quantity_unit") else order.quantity_unit
            amounts = self.amount_engine.compute_order_amounts(
                order.quantity, order.rate, unit, config, existing_lot_meters=order.lot_meters
            )
            self._store_amounts(order, amounts)
            recalculated = True

        finalized = self.should_finalize(previous_status, update)
        if finalized:
            order.commission_amount = self.finalize_commission(order, config)
            logger.info(
                f"Order commission finalized: sequence_no={order.sequence_no} "
                f"processed_quantity={order.processed_quantity} commission={order.commission_amount}"
            )

        return {"recalculated": recalculated, "finalized": finalized}

    def resolve_processed_quantity(self, order: Any, update: OrderUpdate) -> Optional[int]:
        """절대값 또는 증가분으로 전달된 처리 수량 계산"""
        if update.has("processed_quantity"):
            return int(update.processed_quantity)
        if update.has("processed_quantity_add"):
            return int(order.processed_quantity or 0) + int(update.processed_quantity_add)
        return None

    def should_finalize(self, previous_status: OrderStatus, update: OrderUpdate) -> bool:
        """
        저장 수수료를 처리 수량 기준으로 확정할지 여부

        (a) 이번 수정에서 상태를 COMPLETED로 설정
        (b) 수정 전 상태가 COMPLETED이고 처리 수량을 설정/증가
        """
        if update.has("status") and update.status == OrderStatus.COMPLETED:
            return True
        return update.touches_processed_quantity and previous_status == OrderStatus.COMPLETED

    def transition(self, order: Any, new_status: OrderStatus):
        """주문 상태 직접 설정 (암묵적 전환 없음)"""
        new_status = OrderStatus(new_status)
        current = order.status
        if current == new_status.value:
            return

        order.status = new_status.value
        logger.info(f"Order status changed: sequence_no={order.sequence_no} {current} -> {new_status.value}")

    def finalize_commission(self, order: Any, config: Optional[CommissionConfig]) -> Decimal:
        """처리 수량 기준 확정 수수료"""
        return self.commission_calculator.calculate_commission(
            order.processed_quantity or 0,
            order.rate,
            order.quantity_unit,
            order.lot_meters,
            config,
        )

    def progress_commission(self, order: Any, config: Optional[CommissionConfig]) -> Optional[Decimal]:
        """
        진행 수수료 (조회 전용, 저장하지 않음)

        PENDING 주문만 처리 수량(없으면 0) 기준으로 계산하며,
        그 외 상태에서는 None을 반환합니다.
        """
        if order.status != OrderStatus.PENDING.value:
            return None
        return self.commission_calculator.calculate_commission(
            order.processed_quantity or 0,
            order.rate,
            order.quantity_unit,
            order.lot_meters,
            config,
        )

    @staticmethod
    def _store_amounts(order: Any, amounts):
        order.quantity_unit = amounts.quantity_unit.value
        order.lot_meters = amounts.lot_meters
        order.meter = amounts.meter
        order.commission_amount = amounts.commission_amount
