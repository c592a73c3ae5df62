"""
주문 엔진 예외 클래스 및 오류 응답 변환
"""

import logging
import re
from typing import Any, Dict, List, Tuple

from sqlalchemy import UniqueConstraint
from sqlalchemy.exc import IntegrityError

from ...database.models import Base

logger = logging.getLogger(__name__)

GENERIC_CONFLICT_MESSAGE = "This value already exists. Please use a different value."

# 계정 범위 컬럼은 충돌 필드 이름에서 제외
SCOPE_COLUMNS = {"account_id"}

ACRONYM_LABELS = {
    "gst": "GST",
    "gstin": "GSTIN",
    "id": "ID",
    "no": "No",
    "url": "URL",
}

SQLITE_UNIQUE_PATTERN = re.compile(r"UNIQUE constraint failed: (.+)")


class OrderEngineError(Exception):
    """주문 엔진 기본 예외"""
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(OrderEngineError):
    """잘못된 입력 값 (조회/쓰기 이전에 거부)"""
    status_code = 400


class ReferenceNotFound(OrderEngineError):
    """고객/제조사/주문 참조를 찾을 수 없음"""
    status_code = 404


class ConflictError(OrderEngineError):
    """저장소에서 발생한 유일성 위반"""
    status_code = 409


def conflict_message(error: IntegrityError) -> str:
    """
    유일성 위반 예외를 충돌 필드 이름이 포함된 메시지로 변환

    예) uq_quality_account_name → "Name already exists. Please use a different value."
    필드를 알 수 없으면 일반 메시지를 반환합니다.
    """
    fields = [name for name in _conflict_fields(error) if name not in SCOPE_COLUMNS]
    labels = list(dict.fromkeys(_humanize_field(name) for name in fields))

    if not labels:
        return GENERIC_CONFLICT_MESSAGE
    if len(labels) == 1:
        return f"{labels[0]} already exists. Please use a different value."
    return f"{', '.join(labels)} combination already exists. Please use different values."


def _conflict_fields(error: IntegrityError) -> List[str]:
    orig = getattr(error, "orig", None)

    # PostgreSQL (psycopg2): 위반된 제약 조건 이름
    constraint_name = getattr(getattr(orig, "diag", None), "constraint_name", None)
    if constraint_name:
        columns = _constraint_columns(constraint_name)
        return columns or [_field_from_constraint_name(constraint_name)]

    # SQLite: "UNIQUE constraint failed: qualities.account_id, qualities.name"
    match = SQLITE_UNIQUE_PATTERN.search(str(orig if orig is not None else error))
    if match:
        return [target.strip().split(".")[-1] for target in match.group(1).split(",")]
    return []


def _constraint_columns(constraint_name: str) -> List[str]:
    for table in Base.metadata.tables.values():
        for constraint in table.constraints:
            if isinstance(constraint, UniqueConstraint) and constraint.name == constraint_name:
                return [column.name for column in constraint.columns]
    return []


def _field_from_constraint_name(constraint_name: str) -> str:
    # PostgreSQL 기본 이름: accounts_email_key → email
    if constraint_name.endswith("_key"):
        parts = [part for part in constraint_name[:-len("_key")].split("_") if part]
        if len(parts) >= 2:
            return "_".join(parts[1:])
    return constraint_name


def _humanize_field(field_name: str) -> str:
    spaced = re.sub(r"([a-z0-9])([A-Z])", r"\1 \2", field_name)
    words = re.sub(r"[_-]+", " ", spaced).split()
    return " ".join(ACRONYM_LABELS.get(word.lower(), word.lower().capitalize()) for word in words) or "Field"


def error_response(error: Exception) -> Tuple[int, Dict[str, Any]]:
    """
    예외를 (상태 코드, {"message": ...}) 응답 본문으로 변환

    Args:
        error: 처리 중 발생한 예외

    Returns:
        Tuple[int, Dict[str, Any]]: HTTP 상태 코드와 응답 본문
    """
    if isinstance(error, OrderEngineError):
        return error.status_code, {"message": error.message}

    if isinstance(error, IntegrityError):
        return ConflictError.status_code, {"message": conflict_message(error)}

    logger.error(f"Unhandled order engine error: {error}")
    return 500, {"message": "internal server error", "detail": str(error)}
