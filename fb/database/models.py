"""
SQLAlchemy ORM models for the fabric brokerage order system
계정별 고객/제조사/품질/주문 데이터 모델
"""

from decimal import Decimal
from typing import Any, Dict
from uuid import uuid4
from sqlalchemy import (
    BigInteger, CheckConstraint, Column, Date, DateTime, ForeignKey, Index, Integer,
    Numeric, String, Text, UniqueConstraint, Uuid
)
from sqlalchemy.orm import declarative_base, relationship
from sqlalchemy.sql import func

Base = declarative_base()


class Account(Base):
    """중개인 계정 (계정별 주문 번호 카운터 보유)"""
    __tablename__ = 'accounts'

    id = Column(Uuid, primary_key=True, default=uuid4)
    name = Column(String(100), nullable=False)
    email = Column(String(255), unique=True)
    order_counter = Column(BigInteger, nullable=False, default=0)
    created_at = Column(DateTime(timezone=True), default=func.now())

    __table_args__ = (
        CheckConstraint("order_counter >= 0", name='check_account_order_counter'),
    )

    def __repr__(self):
        return f"<Account(name={self.name}, order_counter={self.order_counter})>"


class Customer(Base):
    """고객 (수수료 기준 설정 보유)"""
    __tablename__ = 'customers'

    id = Column(Uuid, primary_key=True, default=uuid4)
    account_id = Column(Uuid, ForeignKey('accounts.id', ondelete='CASCADE'), nullable=False)
    name = Column(String(200), nullable=False)
    gst_no = Column(String(20))
    phone = Column(String(20))
    commission_basis = Column(String(10), nullable=False, default='PERCENT')  # 'PERCENT', 'LOT'
    commission_percent = Column(Numeric(6, 2), default=1)
    commission_lot_rate = Column(Numeric(12, 2))
    created_at = Column(DateTime(timezone=True), default=func.now())

    __table_args__ = (
        CheckConstraint("commission_basis IN ('PERCENT', 'LOT')", name='check_customer_commission_basis'),
        CheckConstraint(
            "commission_basis <> 'LOT' OR (commission_lot_rate IS NOT NULL AND commission_lot_rate > 0)",
            name='check_customer_lot_rate'
        ),
        Index('idx_customers_account', 'account_id'),
    )

    def commission_settings(self) -> Dict[str, Any]:
        """수수료 설정 원본 값"""
        return {
            "commission_basis": self.commission_basis,
            "commission_percent": self.commission_percent,
            "commission_lot_rate": self.commission_lot_rate,
        }

    def __repr__(self):
        return f"<Customer(name={self.name}, commission_basis={self.commission_basis})>"


class Manufacturer(Base):
    """제조사"""
    __tablename__ = 'manufacturers'

    id = Column(Uuid, primary_key=True, default=uuid4)
    account_id = Column(Uuid, ForeignKey('accounts.id', ondelete='CASCADE'), nullable=False)
    name = Column(String(200), nullable=False)
    firm_name = Column(String(200))  # 표시용 상호명
    created_at = Column(DateTime(timezone=True), default=func.now())

    __table_args__ = (
        Index('idx_manufacturers_account', 'account_id'),
    )

    def __repr__(self):
        return f"<Manufacturer(name={self.name}, firm_name={self.firm_name})>"


class Quality(Base):
    """원단 품질 (계정 내 이름 유일)"""
    __tablename__ = 'qualities'

    id = Column(Uuid, primary_key=True, default=uuid4)
    account_id = Column(Uuid, ForeignKey('accounts.id', ondelete='CASCADE'), nullable=False)
    name = Column(String(200), nullable=False)
    created_at = Column(DateTime(timezone=True), default=func.now())

    __table_args__ = (
        UniqueConstraint('account_id', 'name', name='uq_quality_account_name'),
    )

    def __repr__(self):
        return f"<Quality(name={self.name})>"


class Order(Base):
    """중개 주문"""
    __tablename__ = 'orders'

    id = Column(Uuid, primary_key=True, default=uuid4)
    account_id = Column(Uuid, ForeignKey('accounts.id', ondelete='CASCADE'), nullable=False)
    sequence_no = Column(Integer, nullable=False)
    customer_id = Column(Uuid, ForeignKey('customers.id'), nullable=False)
    manufacturer_id = Column(Uuid, ForeignKey('manufacturers.id'), nullable=False)
    quality_id = Column(Uuid, ForeignKey('qualities.id'), nullable=False)
    rate = Column(Numeric(12, 2), nullable=False)
    quantity = Column(Numeric(12, 2), nullable=False)
    quantity_unit = Column(String(10), nullable=False, default='TAKKA')  # 'TAKKA', 'LOT', 'METER'
    lot_meters = Column(Numeric(8, 2))  # METER 단위일 때만 NULL
    meter = Column(Numeric(14, 2))
    processed_quantity = Column(Integer, nullable=False, default=0)
    commission_amount = Column(Numeric(14, 2))
    status = Column(String(10), nullable=False, default='PENDING')  # 'PENDING', 'COMPLETED', 'CANCELLED'
    payment_due_days = Column(Integer)
    remarks = Column(Text)
    order_date = Column(Date, nullable=False)
    created_at = Column(DateTime(timezone=True), default=func.now())
    updated_at = Column(DateTime(timezone=True), default=func.now(), onupdate=func.now())

    customer = relationship(Customer)
    manufacturer = relationship(Manufacturer)
    quality = relationship(Quality)

    __table_args__ = (
        CheckConstraint("quantity_unit IN ('TAKKA', 'LOT', 'METER')", name='check_order_quantity_unit'),
        CheckConstraint("status IN ('PENDING', 'COMPLETED', 'CANCELLED')", name='check_order_status'),
        CheckConstraint("quantity > 0", name='check_order_quantity'),
        CheckConstraint("rate > 0", name='check_order_rate'),
        CheckConstraint("processed_quantity >= 0", name='check_order_processed_quantity'),
        UniqueConstraint('account_id', 'sequence_no', name='uq_order_account_sequence'),
        Index('idx_orders_account_created', 'account_id', 'created_at'),
        Index('idx_orders_status', 'status'),
    )

    def to_dict(self) -> Dict[str, Any]:
        """저장 필드 표현 (숫자 필드는 float)"""
        return {
            "id": str(self.id),
            "sequence_no": self.sequence_no,
            "customer_id": str(self.customer_id),
            "manufacturer_id": str(self.manufacturer_id),
            "quality_id": str(self.quality_id),
            "quality_name": self.quality.name if self.quality is not None else None,
            "rate": _as_float(self.rate),
            "quantity": _as_float(self.quantity),
            "quantity_unit": self.quantity_unit,
            "lot_meters": _as_float(self.lot_meters),
            "meter": _as_float(self.meter),
            "processed_quantity": int(self.processed_quantity or 0),
            "commission_amount": _as_float(self.commission_amount),
            "status": self.status,
            "payment_due_days": self.payment_due_days,
            "remarks": self.remarks,
            "order_date": self.order_date.isoformat() if self.order_date else None,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        }

    def __repr__(self):
        return f"<Order(sequence_no={self.sequence_no}, status={self.status}, commission={self.commission_amount})>"


def _as_float(value: Any):
    if value is None:
        return None
    return float(Decimal(str(value)))
