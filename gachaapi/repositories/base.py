from abc import ABC
from typing import TypeVar, Generic, Optional, Dict, Any, Sequence, Type
from sqlalchemy import insert as generic_insert
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from pydantic import BaseModel

T = TypeVar("T")
SchemaType = TypeVar("SchemaType", bound=BaseModel)


class BaseRepository(Generic[T, SchemaType], ABC):
    """모든 리포지토리의 베이스 클래스 - Pydantic 응답 보장

    commit 인자가 False 이면 flush 만 하고 커밋은 호출자(서비스)가 묶어서 처리한다.
    """

    def __init__(
        self, model_class: Type[T], schema_class: Type[SchemaType], db: Session
    ):
        self.model_class = model_class
        self.schema_class = schema_class
        self.db = db

    def _to_schema(self, model_instance: Any) -> Optional[SchemaType]:
        """SQLAlchemy 모델을 Pydantic 스키마로 변환"""
        if model_instance is None:
            return None

        # Pydantic v2의 model_validate를 사용하여 from_attributes 활용
        return self.schema_class.model_validate(model_instance, from_attributes=True)

    def create(self, commit: bool = True, **kwargs) -> Optional[SchemaType]:
        """새 레코드 생성 - Pydantic 스키마 반환"""
        instance = self.model_class(**kwargs)
        self.db.add(instance)
        try:
            self.db.flush()
            self.db.refresh(instance)
            if commit:
                self.db.commit()
        except Exception:
            self.db.rollback()
            raise
        return self._to_schema(instance)

    def count(self, filters: Optional[Dict[str, Any]] = None) -> int:
        """레코드 수 조회"""
        query = self.db.query(self.model_class)

        if filters:
            for key, value in filters.items():
                if hasattr(self.model_class, key):
                    query = query.filter(getattr(self.model_class, key) == value)

        return query.count()

    def insert_ignore(self, conflict_columns: Sequence[str], **values) -> int:
        """유니크 충돌 시 아무것도 하지 않는 INSERT - 삽입된 행 수 반환

        PostgreSQL/SQLite 는 ON CONFLICT DO NOTHING 으로 원자적으로 처리하고,
        그 외 dialect 는 IntegrityError 를 SAVEPOINT 안에서 흡수한다.
        """
        dialect = self.db.get_bind().dialect.name

        if dialect in ("postgresql", "sqlite"):
            insert = postgresql.insert if dialect == "postgresql" else sqlite.insert
            stmt = (
                insert(self.model_class.__table__)
                .values(**values)
                .on_conflict_do_nothing(index_elements=list(conflict_columns))
            )
            return self.db.execute(stmt).rowcount

        try:
            with self.db.begin_nested():
                self.db.execute(generic_insert(self.model_class.__table__).values(**values))
            return 1
        except IntegrityError:
            return 0
