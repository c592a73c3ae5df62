"""
Order Engine Module

Fabric brokerage order amount and lifecycle core.
Converts order quantities into meters, computes broker commission and keeps
the stored commission consistent as orders move through fulfillment.

Main Components:
- UnitConverter: Quantity unit normalization and meter conversion
- CommissionCalculator: Percent / per-lot commission calculator
- OrderAmountEngine: Derived order amounts at creation and amount-affecting edits
- OrderLifecycleManager: Status transitions, fulfillment progress and commission finalization
- OrderEngine: Transactional create/update/read boundary
"""

from .base import (
    QuantityUnit, CommissionBasis, OrderStatus, OrderAmountConfig, OrderAmounts,
    PercentCommission, LotCommission, CommissionConfig, BaseCommissionCalculator,
    parse_commission_config
)
from .exceptions import (
    OrderEngineError, ValidationError, ReferenceNotFound, ConflictError, conflict_message, error_response
)
from .unit_converter import UnitConverter
from .commission_calculator import CommissionCalculator
from .amount_engine import OrderAmountEngine
from .validation import OrderCreate, OrderUpdate, validate_create_payload, validate_update_payload
from .lifecycle import OrderLifecycleManager
from .engine import OrderEngine

__all__ = [
    # Base classes and data types
    'QuantityUnit',
    'CommissionBasis',
    'OrderStatus',
    'OrderAmountConfig',
    'OrderAmounts',
    'PercentCommission',
    'LotCommission',
    'CommissionConfig',
    'BaseCommissionCalculator',
    'parse_commission_config',

    # Errors
    'OrderEngineError',
    'ValidationError',
    'ReferenceNotFound',
    'ConflictError',
    'conflict_message',
    'error_response',

    # Main components
    'UnitConverter',
    'CommissionCalculator',
    'OrderAmountEngine',
    'OrderLifecycleManager',
    'OrderEngine',

    # Requests
    'OrderCreate',
    'OrderUpdate',
    'validate_create_payload',
    'validate_update_payload',
]
