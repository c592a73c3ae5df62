"""
FB - 원단 중개 주문 시스템

주문 금액/수수료 계산 엔진과 주문 생명주기 관리
"""

__version__ = "0.1.0"
