import pytest
from sqlalchemy import create_engine
from sqlalchemy.pool import StaticPool

from gachaapi.config import Settings
from gachaapi.database.connection import create_session_factory
from gachaapi.models import Base, GachaItem, GachaSpinHistory, UserXuBalance

XU_PRODUCT_ID = "1000001"


@pytest.fixture
def engine():
    """모든 세션이 하나의 in-memory 연결을 공유"""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return create_session_factory(engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def settings():
    return Settings(
        _env_file=None,
        DATABASE_URL="sqlite://",
        XU_PRODUCT_ID=XU_PRODUCT_ID,
        XU_EXCHANGE_RATE=100,
        FULFILLMENT_RETRY_QUEUE_URL="https://sqs.ap-southeast-1.amazonaws.com/123/gacha-fulfillment-retry",
    )


@pytest.fixture
def add_item(db):
    def _add_item(
        name="Miku Keychain",
        rank="C",
        weight=1,
        pool_id="pool-1",
        is_active=True,
        haravan_product_id=None,
        base_price=120000,
    ):
        item = GachaItem(
            name=name,
            image_url=f"https://cdn.example.com/{name.lower().replace(' ', '_')}.png",
            rank=rank,
            weight=weight,
            gacha_pool_id=pool_id,
            is_active=is_active,
            haravan_product_id=haravan_product_id,
            base_price=base_price,
        )
        db.add(item)
        db.commit()
        return item

    return _add_item


@pytest.fixture
def set_balance(db):
    def _set_balance(user_id, amount):
        db.add(UserXuBalance(user_id=user_id, amount=amount))
        db.commit()

    return _set_balance


@pytest.fixture
def balance_of(db):
    def _balance_of(user_id):
        return (
            db.query(UserXuBalance.amount)
            .filter(UserXuBalance.user_id == user_id)
            .scalar()
        )

    return _balance_of


@pytest.fixture
def history_rows(db):
    def _history_rows(user_id):
        db.expire_all()
        return (
            db.query(GachaSpinHistory)
            .filter(GachaSpinHistory.user_id == user_id)
            .order_by(GachaSpinHistory.id)
            .all()
        )

    return _history_rows
