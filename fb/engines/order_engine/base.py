"""
주문 엔진의 기본 데이터 클래스 및 인터페이스 모듈

원단 중개 주문의 수량 단위, 수수료 기준, 주문 상태와
수수료 계산기 인터페이스를 정의합니다.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from enum import Enum
from typing import Any, Mapping, Optional, Union
import logging

from .exceptions import ValidationError

logger = logging.getLogger(__name__)

MONEY_PRECISION = Decimal("0.01")


class QuantityUnit(Enum):
    """주문 수량 단위 정의"""
    TAKKA = "TAKKA"    # 타카 (12 타카 = 1 로트)
    LOT = "LOT"        # 로트
    METER = "METER"    # 미터


class CommissionBasis(Enum):
    """고객별 수수료 기준"""
    PERCENT = "PERCENT"  # 거래금액(GST 포함) 비율
    LOT = "LOT"          # 로트당 정액


class OrderStatus(Enum):
    """주문 상태 정의"""
    PENDING = "PENDING"        # 대기 (초기 상태)
    COMPLETED = "COMPLETED"    # 완료
    CANCELLED = "CANCELLED"    # 취소됨


@dataclass(frozen=True)
class OrderAmountConfig:
    """주문 금액 계산 상수"""

    TAKKA_PER_LOT = Decimal("12")
    LOT_MIN_METERS = Decimal("1450")
    LOT_MAX_METERS = Decimal("1550")
    GST_RATE = Decimal("0.05")
    DEFAULT_COMMISSION_PERCENT = Decimal("1")


def to_decimal(value: Any) -> Optional[Decimal]:
    """숫자 값을 Decimal로 변환 (변환 불가 시 None)"""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, Decimal):
        return value
    try:
        return Decimal(str(value).strip())
    except (InvalidOperation, ValueError):
        return None


def round2(value: Decimal) -> Decimal:
    """센트 단위 반올림 (ROUND_HALF_UP)"""
    return value.quantize(MONEY_PRECISION, rounding=ROUND_HALF_UP)


@dataclass(frozen=True)
class PercentCommission:
    """거래금액 비율 수수료 설정"""
    percent: Decimal = OrderAmountConfig.DEFAULT_COMMISSION_PERCENT

    def __post_init__(self):
        percent = to_decimal(self.percent)
        if percent is None or not percent.is_finite() or percent <= 0:
            percent = OrderAmountConfig.DEFAULT_COMMISSION_PERCENT
        object.__setattr__(self, "percent", percent)

    @property
    def basis(self) -> CommissionBasis:
        return CommissionBasis.PERCENT


@dataclass(frozen=True)
class LotCommission:
    """로트당 정액 수수료 설정"""
    lot_rate: Decimal

    def __post_init__(self):
        lot_rate = to_decimal(self.lot_rate)
        if lot_rate is None or not lot_rate.is_finite() or lot_rate <= 0:
            raise ValidationError("commission lot rate must be greater than 0 when commission basis is LOT")
        object.__setattr__(self, "lot_rate", lot_rate)

    @property
    def basis(self) -> CommissionBasis:
        return CommissionBasis.LOT


CommissionConfig = Union[PercentCommission, LotCommission]


def parse_commission_config(data: Optional[Mapping[str, Any]]) -> CommissionConfig:
    """
    고객 수수료 설정 딕셔너리를 태그드 설정 객체로 변환

    Keys:
    - commission_basis: "PERCENT" | "LOT" (기본값 PERCENT)
    - commission_percent: PERCENT 기준 비율 (기본값 1)
    - commission_lot_rate: LOT 기준 로트당 금액 (LOT 기준 시 필수)
    """
    if not data:
        return PercentCommission()

    basis = str(data.get("commission_basis") or CommissionBasis.PERCENT.value).strip().upper()
    if basis == CommissionBasis.LOT.value:
        return LotCommission(lot_rate=data.get("commission_lot_rate"))
    return PercentCommission(percent=data.get("commission_percent"))


@dataclass(frozen=True)
class OrderAmounts:
    """주문 생성/수정 시 저장되는 파생 금액 필드"""
    quantity_unit: QuantityUnit
    lot_meters: Optional[Decimal]
    meter: Decimal
    commission_amount: Decimal


class BaseCommissionCalculator(ABC):
    """수수료 계산기 인터페이스"""

    @abstractmethod
    def calculate_commission(
        self,
        quantity_for_commission: Any,
        rate: Any,
        unit: Any,
        lot_meters: Optional[Decimal],
        config: Optional[CommissionConfig],
    ) -> Decimal:
        """수수료 계산"""
        pass
