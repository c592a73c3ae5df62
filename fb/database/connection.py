"""
Database connection management for the fabric brokerage order system
PostgreSQL 연결 풀 관리 및 트랜잭션 세션 관리
"""

import logging
from contextlib import contextmanager
from typing import Any, Dict, Generator, Optional
from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker, Session
from sqlalchemy.pool import QueuePool

from ..utils.settings import get_database_url
from .models import Base

logger = logging.getLogger(__name__)


class DatabaseManager:
    """데이터베이스 연결 관리 클래스"""

    def __init__(self, database_url: Optional[str] = None):
        """
        DatabaseManager 초기화

        Args:
            database_url: 데이터베이스 연결 URL. None이면 환경변수에서 읽음
        """
        self.database_url = database_url or get_database_url()
        self.engine: Optional[Engine] = None
        self.session_factory: Optional[sessionmaker] = None
        self.logger = logging.getLogger(__name__)

    def initialize(self) -> bool:
        """데이터베이스 연결 및 세션 팩토리 초기화"""
        try:
            if self.database_url.startswith("sqlite"):
                # SQLite (테스트/로컬용): 기본 풀 사용
                self.engine = create_engine(self.database_url, echo=False)
            else:
                self.engine = create_engine(
                    self.database_url,
                    poolclass=QueuePool,
                    pool_size=5,  # 기본 연결 수
                    max_overflow=10,  # 최대 추가 연결 수
                    pool_pre_ping=True,  # 연결 전 ping 테스트
                    pool_recycle=3600,  # 1시간마다 연결 재생성
                    echo=False,
                )

            # 세션 팩토리 생성
            self.session_factory = sessionmaker(
                bind=self.engine,
                autocommit=False,
                autoflush=False,
                expire_on_commit=False
            )

            # 연결 테스트
            with self.engine.connect() as conn:
                conn.execute(text("SELECT 1"))

            self.logger.info("Database connection initialized successfully")
            return True

        except Exception as e:
            self.logger.error(f"Failed to initialize database connection: {e}")
            return False

    @contextmanager
    def get_session(self) -> Generator[Session, None, None]:
        """
        트랜잭션 단위 작업(Unit of Work) 세션 컨텍스트 매니저

        블록이 정상 종료되면 커밋하고, 예외가 발생하면 전체를 롤백합니다.

        Yields:
            Session: SQLAlchemy 세션 객체
        """
        if not self.session_factory:
            raise RuntimeError("Database not initialized. Call initialize() first.")

        session = self.session_factory()
        try:
            yield session
            session.commit()
        except Exception as e:
            session.rollback()
            self.logger.error(f"Database session error: {e}")
            raise
        finally:
            session.close()

    def get_engine(self) -> Engine:
        """SQLAlchemy 엔진 반환"""
        if not self.engine:
            raise RuntimeError("Database not initialized. Call initialize() first.")
        return self.engine

    def ping(self) -> bool:
        """데이터베이스 연결 상태 확인"""
        try:
            with self.get_engine().connect() as conn:
                conn.execute(text("SELECT 1"))
                return True
        except Exception as e:
            self.logger.error(f"Database ping failed: {e}")
            return False

    def get_connection_info(self) -> Dict[str, Any]:
        """데이터베이스 연결 정보 반환"""
        if not self.engine:
            return {"status": "not_initialized"}

        return {
            "status": "connected" if self.ping() else "error",
            "dialect": self.engine.dialect.name,
            "database": self.engine.url.database,
        }

    def create_tables(self) -> bool:
        """테이블 생성 (개발용)"""
        try:
            if not self.engine:
                raise RuntimeError("Database not initialized")

            Base.metadata.create_all(self.engine)
            self.logger.info("Database tables created successfully")
            return True

        except Exception as e:
            self.logger.error(f"Failed to create tables: {e}")
            return False

    def close(self):
        """데이터베이스 연결 종료"""
        if self.engine:
            self.engine.dispose()
            self.logger.info("Database connection closed")


def init_database(database_url: Optional[str] = None) -> DatabaseManager:
    """데이터베이스 초기화 함수"""
    manager = DatabaseManager(database_url)
    if not manager.initialize():
        raise RuntimeError("Failed to initialize database connection")
    return manager
