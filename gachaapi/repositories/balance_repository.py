"""
xu 잔액 리포지토리

핵심 특징:
- 차감은 "amount >= cost 인 경우에만 amount -= cost" 단일 UPDATE 로 처리하여
  프로세스 간 락 없이도 동시 차감에서 음수 잔액이 생기지 않는다
- 적립은 INSERT .. ON CONFLICT DO NOTHING 후 증가 UPDATE (upsert-or-increment)
- 잔액 조회는 항상 컬럼 단위 SELECT 로 최신 DB 값을 읽는다
"""

from typing import Optional
from sqlalchemy.orm import Session

from gachaapi.models.gacha import UserXuBalance
from gachaapi.schemas.balance import XuBalanceResponse
from gachaapi.repositories.base import BaseRepository


class BalanceRepository(BaseRepository[UserXuBalance, XuBalanceResponse]):
    def __init__(self, db: Session):
        super().__init__(UserXuBalance, XuBalanceResponse, db)

    def get_balance(self, user_id: str) -> Optional[int]:
        """잔액 조회 (레코드가 없으면 None)"""
        return (
            self.db.query(UserXuBalance.amount)
            .filter(UserXuBalance.user_id == user_id)
            .scalar()
        )

    def ensure_balance(self, user_id: str) -> bool:
        """잔액 레코드가 없으면 0 으로 생성 - 새로 만든 경우 True"""
        return self.insert_ignore(["user_id"], user_id=user_id, amount=0) > 0

    def get_or_create_balance(self, user_id: str, commit: bool = True) -> int:
        created = self.ensure_balance(user_id)
        if commit and created:
            self.db.commit()
        return self.get_balance(user_id) or 0

    def try_debit(self, user_id: str, amount: int, commit: bool = True) -> Optional[int]:
        """조건부 차감 - 적용되면 차감 후 잔액, 잔액 부족/레코드 없음이면 None"""
        updated = (
            self.db.query(UserXuBalance)
            .filter(
                UserXuBalance.user_id == user_id,
                UserXuBalance.amount >= amount,
            )
            .update(
                {UserXuBalance.amount: UserXuBalance.amount - amount},
                synchronize_session=False,
            )
        )

        if updated == 0:
            return None

        new_balance = self.get_balance(user_id)
        if commit:
            self.db.commit()
        return new_balance

    def credit(self, user_id: str, amount: int, commit: bool = True) -> int:
        """적립 (레코드가 없으면 생성 후 증가) - 적립 후 잔액 반환"""
        self.ensure_balance(user_id)
        (
            self.db.query(UserXuBalance)
            .filter(UserXuBalance.user_id == user_id)
            .update(
                {UserXuBalance.amount: UserXuBalance.amount + amount},
                synchronize_session=False,
            )
        )

        new_balance = self.get_balance(user_id)
        if commit:
            self.db.commit()
        return new_balance

    def get_balance_response(self, user_id: str) -> XuBalanceResponse:
        """잔액 응답 (없으면 0 으로 생성)"""
        amount = self.get_or_create_balance(user_id)
        return XuBalanceResponse(customer_id=user_id, xu_amount=amount)
