"""
주문 엔진 (Order Engine) 구현

원단 중개 주문의 생성/수정/조회를 하나의 트랜잭션 단위로 처리합니다.
참조 검증, 품질 조회/생성, 계정별 주문 번호 할당, 금액 계산, 주문 저장이
모두 같은 세션에서 수행되며 실패 시 전체가 롤백됩니다.
"""

import logging
import uuid
from typing import Any, Dict, List, Mapping, Optional

from sqlalchemy import select, update as sql_update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, selectinload

from ...database.connection import DatabaseManager
from ...database.models import Account, Customer, Manufacturer, Order, Quality
from .base import CommissionConfig, OrderStatus, parse_commission_config
from .exceptions import ConflictError, ReferenceNotFound, ValidationError, conflict_message
from .lifecycle import OrderLifecycleManager
from .validation import validate_create_payload, validate_update_payload

logger = logging.getLogger(__name__)


class OrderEngine:
    """
    주문 엔진 - 트랜잭션 기반 주문 처리

    주요 기능:
    1. 주문 생성 (참조 검증, 품질 조회/생성, 주문 번호 할당, 금액 계산)
    2. 주문 수정 (금액 재계산, 처리 수량 반영, 상태 변경, 수수료 확정)
    3. 주문 조회 (진행 수수료 포함)
    """

    def __init__(self, db_manager: DatabaseManager, lifecycle: Optional[OrderLifecycleManager] = None):
        self.db_manager = db_manager
        self.lifecycle = lifecycle or OrderLifecycleManager()

        logger.info("OrderEngine initialized")

    def create_order(self, account_id: Any, payload: Mapping[str, Any]) -> Dict[str, Any]:
        """
        주문 생성

        Args:
            account_id: 주문을 생성하는 계정 ID
            payload: 주문 필드 값

        Returns:
            Dict[str, Any]: 생성된 주문 표현
        """
        request = validate_create_payload(payload)

        with self.db_manager.get_session() as session:
            account = self._get_account(session, account_id)
            customer = self._get_customer(session, account.id, request.customer_id)
            manufacturer = self._get_manufacturer(session, account.id, request.manufacturer_id)
            quality = self._resolve_quality(session, account.id, request.quality_name)
            config = self._commission_config(customer)

            order = Order(
                account_id=account.id,
                customer=customer,
                manufacturer=manufacturer,
                quality=quality,
                rate=request.rate,
                quantity=request.quantity,
                quantity_unit=request.quantity_unit.value,
                remarks=request.remarks,
                payment_due_days=request.payment_due_days,
                order_date=request.order_date,
            )
            self.lifecycle.initialize_order(order, config)
            order.sequence_no = self._allocate_sequence_no(session, account.id)

            session.add(order)
            self._flush(session)
            result = self._serialize(order, config)

        logger.info(
            f"Order created: sequence_no={result['sequence_no']} unit={result['quantity_unit']} "
            f"commission={result['commission_amount']}"
        )
        return result

    def update_order(self, account_id: Any, order_id: Any, payload: Mapping[str, Any]) -> Dict[str, Any]:
        """
        주문 수정

        단가/수량/단위/고객이 바뀌면 파생 금액을 다시 계산하고,
        완료 처리 또는 완료 주문의 처리 수량 수정 시 수수료를 처리 수량 기준으로 확정합니다.
        """
        update = validate_update_payload(payload)

        with self.db_manager.get_session() as session:
            account = self._get_account(session, account_id)
            order = self._get_order(session, account.id, order_id)
            customer = order.customer
            current_manufacturer = order.manufacturer

            if update.has("customer_id"):
                customer = self._get_customer(session, account.id, update.customer_id)
                order.customer = customer
            if update.has("manufacturer_id"):
                order.manufacturer = self._get_manufacturer(session, account.id, update.manufacturer_id)
            if update.has("manufacturer_display_name"):
                current_manufacturer.firm_name = update.manufacturer_display_name
            if update.has("quality_name"):
                order.quality = self._resolve_quality(session, account.id, update.quality_name)
            if update.has("order_date"):
                order.order_date = update.order_date
            if update.has("remarks"):
                order.remarks = update.remarks
            if update.has("payment_due_days"):
                order.payment_due_days = update.payment_due_days

            config = self._commission_config(customer)
            summary = self.lifecycle.apply_update(order, update, config)

            self._flush(session)
            result = self._serialize(order, config)

        logger.info(
            f"Order updated: sequence_no={result['sequence_no']} fields={','.join(update.provided_fields)} "
            f"recalculated={summary['recalculated']} finalized={summary['finalized']}"
        )
        return result

    def get_order(self, account_id: Any, order_id: Any) -> Dict[str, Any]:
        """주문 조회 (PENDING 주문은 진행 수수료 포함)"""
        with self.db_manager.get_session() as session:
            account = self._get_account(session, account_id)
            order = self._get_order(session, account.id, order_id)
            return self._serialize(order, self._commission_config(order.customer))

    def list_orders(
        self,
        account_id: Any,
        status: Optional[Any] = None,
        customer_id: Optional[Any] = None,
    ) -> List[Dict[str, Any]]:
        """계정의 주문 목록 조회 (최신 순)"""
        status_filter = None
        if status is not None:
            try:
                status_filter = OrderStatus(str(status).strip().upper())
            except ValueError:
                raise ValidationError("status must be one of: PENDING, COMPLETED, CANCELLED") from None

        with self.db_manager.get_session() as session:
            account = self._get_account(session, account_id)
            query = (
                select(Order)
                .where(Order.account_id == account.id)
                .options(selectinload(Order.customer), selectinload(Order.quality))
                .order_by(Order.sequence_no.desc())
            )
            if status_filter is not None:
                query = query.where(Order.status == status_filter.value)
            if customer_id is not None:
                query = query.where(Order.customer_id == _as_uuid(customer_id))

            orders = session.execute(query).scalars().all()
            return [self._serialize(order, self._commission_config(order.customer)) for order in orders]

    def _serialize(self, order: Order, config: CommissionConfig) -> Dict[str, Any]:
        data = order.to_dict()
        progress = self.lifecycle.progress_commission(order, config)
        data["progress_commission_amount"] = float(progress) if progress is not None else None
        return data

    @staticmethod
    def _commission_config(customer: Customer) -> CommissionConfig:
        return parse_commission_config(customer.commission_settings())

    @staticmethod
    def _get_account(session: Session, account_id: Any) -> Account:
        account_uuid = _as_uuid(account_id)
        account = session.get(Account, account_uuid) if account_uuid else None
        if account is None:
            raise ReferenceNotFound("account not found")
        return account

    @staticmethod
    def _get_customer(session: Session, account_id: uuid.UUID, customer_id: Any) -> Customer:
        customer = _find_owned(session, Customer, account_id, customer_id)
        if customer is None:
            raise ReferenceNotFound("customer not found")
        return customer

    @staticmethod
    def _get_manufacturer(session: Session, account_id: uuid.UUID, manufacturer_id: Any) -> Manufacturer:
        manufacturer = _find_owned(session, Manufacturer, account_id, manufacturer_id)
        if manufacturer is None:
            raise ReferenceNotFound("manufacturer not found")
        return manufacturer

    @staticmethod
    def _get_order(session: Session, account_id: uuid.UUID, order_id: Any) -> Order:
        order = _find_owned(session, Order, account_id, order_id)
        if order is None:
            raise ReferenceNotFound("order not found")
        return order

    def _resolve_quality(self, session: Session, account_id: uuid.UUID, quality_name: str) -> Quality:
        """계정 내 품질 이름 조회, 없으면 생성"""
        quality = session.execute(
            select(Quality).where(Quality.account_id == account_id, Quality.name == quality_name)
        ).scalar_one_or_none()
        if quality is not None:
            return quality

        quality = Quality(account_id=account_id, name=quality_name)
        session.add(quality)
        self._flush(session)
        logger.info(f"Quality created: {quality_name}")
        return quality

    @staticmethod
    def _allocate_sequence_no(session: Session, account_id: uuid.UUID) -> int:
        """
        계정별 주문 번호 할당

        카운터 행에 대한 원자적 증가(UPDATE ... SET order_counter = order_counter + 1)로
        같은 계정의 동시 생성을 직렬화합니다. 트랜잭션이 롤백되면 증가도 함께 취소됩니다.
        """
        result = session.execute(
            sql_update(Account)
            .where(Account.id == account_id)
            .values(order_counter=Account.order_counter + 1)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount == 0:
            raise ReferenceNotFound("account not found")

        return session.execute(
            select(Account.order_counter).where(Account.id == account_id)
        ).scalar_one()

    @staticmethod
    def _flush(session: Session):
        try:
            session.flush()
        except IntegrityError as e:
            raise ConflictError(conflict_message(e)) from e


def _as_uuid(value: Any) -> Optional[uuid.UUID]:
    if isinstance(value, uuid.UUID):
        return value
    try:
        return uuid.UUID(str(value).strip())
    except (TypeError, ValueError, AttributeError):
        return None


def _find_owned(session: Session, model, account_id: uuid.UUID, record_id: Any):
    record_uuid = _as_uuid(record_id)
    if record_uuid is None:
        return None
    return session.execute(
        select(model).where(model.id == record_uuid, model.account_id == account_id)
    ).scalar_one_or_none()
