"""
데모 가챠 풀 시드 스크립트
등급별 가중치: S=1, A=5, B=10, C=20, D=30, F=50
"""

import sys
import os

sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from gachaapi.config import get_settings
from gachaapi.database.connection import create_db_engine, create_session_factory
from gachaapi.models.gacha import GachaItem

DEMO_POOL_ID = "miku_special_event_2025"

DEFAULT_ITEMS = [
    {"name": "Miku Nendoroid Limited", "rank": "S", "weight": 1, "base_price": 1500000},
    {"name": "Miku Figure 1/7 Scale", "rank": "A", "weight": 5, "base_price": 900000},
    {"name": "Miku Acrylic Stand", "rank": "B", "weight": 10, "base_price": 250000},
    {"name": "Miku Keychain", "rank": "C", "weight": 20, "base_price": 120000},
    {"name": "Miku Sticker Set", "rank": "D", "weight": 30, "base_price": 50000},
    {"name": "Miku Postcard", "rank": "F", "weight": 50, "base_price": 20000},
]


def seed_gacha_items(pool_id: str = DEMO_POOL_ID):
    """데모 풀 아이템 시드 (이미 있는 이름은 건너뜀)"""
    engine = create_db_engine(get_settings())
    db = create_session_factory(engine)()
    try:
        created = 0
        for item_data in DEFAULT_ITEMS:
            existing = (
                db.query(GachaItem)
                .filter(
                    GachaItem.gacha_pool_id == pool_id,
                    GachaItem.name == item_data["name"],
                )
                .first()
            )
            if existing:
                print(f"   건너뜀: {item_data['name']}")
                continue

            slug = item_data["name"].lower().replace(" ", "_").replace("/", "_")
            db.add(
                GachaItem(
                    gacha_pool_id=pool_id,
                    image_url=f"https://cdn.example.com/gacha/{slug}.png",
                    is_active=True,
                    **item_data,
                )
            )
            created += 1

        db.commit()
        print(f"✅ 가챠 아이템 시드 완료: {created}개 생성 (pool: {pool_id})")

    except Exception as e:
        db.rollback()
        print(f"❌ 가챠 아이템 시드 실패: {str(e)}")
        raise
    finally:
        db.close()
        engine.dispose()


if __name__ == "__main__":
    seed_gacha_items()
