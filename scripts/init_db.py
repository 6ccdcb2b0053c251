import sys
import os

sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from sqlalchemy import text

from gachaapi.config import get_settings
from gachaapi.database.connection import create_db_engine
from gachaapi.models import Base


def init_db():
    """데이터베이스 초기화"""
    settings = get_settings()
    engine = create_db_engine(settings)
    try:
        # 스키마 생성 (PostgreSQL 만)
        if engine.dialect.name == "postgresql":
            with engine.connect() as conn:
                conn.execute(
                    text(f"CREATE SCHEMA IF NOT EXISTS {settings.POSTGRES_SCHEMA}")
                )
                conn.commit()

        # 테이블 생성
        Base.metadata.create_all(bind=engine)
        print(
            f"Database initialized successfully with schema: {settings.POSTGRES_SCHEMA}"
        )

    except Exception as e:
        print(f"Database initialization failed: {str(e)}")
        raise
    finally:
        engine.dispose()


if __name__ == "__main__":
    init_db()
