"""
FB 주문 시스템 실행 스크립트

로깅을 설정하고 데이터베이스 연결을 확인합니다.
--init-db 옵션을 주면 테이블을 생성합니다.
"""

import argparse
import logging
import sys
from typing import List, Optional

from .database.connection import init_database
from .utils.settings import setup_logging

logger = logging.getLogger(__name__)


def parse_arguments(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """명령행 인자 파싱"""
    parser = argparse.ArgumentParser(
        prog="fb-orders",
        description="원단 중개 주문 엔진 데이터베이스 관리"
    )

    parser.add_argument(
        "--database-url",
        default=None,
        help="데이터베이스 URL (기본값: DATABASE_URL 환경변수)"
    )

    parser.add_argument(
        "--init-db",
        action="store_true",
        help="테이블 생성"
    )

    parser.add_argument(
        "--debug",
        action="store_true",
        help="디버그 로그 출력"
    )

    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    """메인 실행 함수 (종료 코드 반환)"""
    args = parse_arguments(argv)
    setup_logging(logging.DEBUG if args.debug else None)

    try:
        db_manager = init_database(args.database_url)
    except RuntimeError as e:
        logger.error(f"Database unavailable: {e}")
        return 1

    try:
        if args.init_db and not db_manager.create_tables():
            return 1

        info = db_manager.get_connection_info()
        logger.info(f"Database {info['status']}: dialect={info['dialect']} database={info['database']}")
        return 0
    finally:
        db_manager.close()


if __name__ == "__main__":
    sys.exit(main())
