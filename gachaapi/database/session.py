from contextlib import contextmanager
from typing import Iterator

from sqlalchemy.orm import Session, sessionmaker


def session_scope(session_factory: sessionmaker) -> Iterator[Session]:
    """요청 단위 세션 (커밋은 호출자 책임)"""
    db = session_factory()
    try:
        yield db
    except Exception:
        if db.in_transaction():
            db.rollback()
        raise
    finally:
        db.close()


@contextmanager
def get_db_context(session_factory: sessionmaker) -> Iterator[Session]:
    """컨텍스트 매니저를 사용한 데이터베이스 세션 관리"""
    db = session_factory()
    try:
        yield db
        db.commit()
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()
