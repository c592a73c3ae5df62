"""
수량 단위 변환기 단위 테스트
"""

import random
from decimal import Decimal

import pytest

from fb.engines.order_engine.base import QuantityUnit
from fb.engines.order_engine.unit_converter import UnitConverter


class FixedRandom(random.Random):
    """항상 같은 값을 반환하는 난수 생성기"""

    def __init__(self, value: float):
        super().__init__()
        self.value = value

    def random(self):
        return self.value


class TestLinearMeasure:
    """미터 환산 테스트"""

    def setup_method(self):
        self.converter = UnitConverter()

    def test_meter_is_identity(self):
        """METER 단위는 수량 그대로"""
        assert self.converter.to_linear_measure(250, QuantityUnit.METER, None) == Decimal("250")
        assert self.converter.to_linear_measure("12.5", "METER", None) == Decimal("12.5")

    def test_lot_uses_lot_meters(self):
        """LOT 단위: 수량 × 로트당 미터"""
        meters = self.converter.to_linear_measure(5, QuantityUnit.LOT, Decimal("1500"))
        assert meters == Decimal("7500")

    def test_takka_is_twelfth_of_lot(self):
        """TAKKA 단위: 수량 × (로트당 미터 / 12)"""
        meters = self.converter.to_linear_measure(12, QuantityUnit.TAKKA, Decimal("1500"))
        assert meters == Decimal("1500")

        meters = self.converter.to_linear_measure(3, "TAKKA", Decimal("1488"))
        assert meters == Decimal("372")

    def test_unknown_unit_falls_back_to_takka(self):
        """알 수 없는 단위는 TAKKA로 계산"""
        assert self.converter.normalize_unit("BALE") == QuantityUnit.TAKKA
        assert self.converter.normalize_unit(None) == QuantityUnit.TAKKA
        assert self.converter.normalize_unit(" lot ") == QuantityUnit.LOT

        meters = self.converter.to_linear_measure(6, "BALE", Decimal("1500"))
        assert meters == Decimal("750")

    def test_missing_lot_meters_is_rejected(self):
        """LOT/TAKKA 환산에는 로트당 미터가 필요"""
        with pytest.raises(ValueError):
            self.converter.to_linear_measure(5, QuantityUnit.LOT, None)


class TestLotMetersAssignment:
    """로트당 미터 할당 테스트"""

    def test_assigned_value_within_band(self):
        """[1450, 1550) 구간, 소수 둘째 자리"""
        converter = UnitConverter(rng=random.Random(7))

        for _ in range(200):
            lot_meters = converter.assign_lot_meters()
            assert Decimal("1450") <= lot_meters < Decimal("1550")
            assert lot_meters == lot_meters.quantize(Decimal("0.01"))

    def test_midpoint_draw(self):
        """난수 0.5 → 1500.00"""
        converter = UnitConverter(rng=FixedRandom(0.5))
        assert converter.assign_lot_meters() == Decimal("1500.00")

    def test_rounding_never_reaches_upper_bound(self):
        """반올림 결과가 상한이면 구간 안으로 조정"""
        converter = UnitConverter(rng=FixedRandom(0.99999))
        assert converter.assign_lot_meters() == Decimal("1549.99")
