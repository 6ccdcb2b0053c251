from sqlalchemy.orm import Session

from gachaapi.repositories.balance_repository import BalanceRepository
from gachaapi.core.exceptions import (
    BadRequestError,
    InsufficientFundsError,
    ValidationError,
)
from gachaapi.schemas.balance import XuBalanceResponse
import logging

logger = logging.getLogger(__name__)


class BalanceService:
    """xu 잔액 관련 비즈니스 로직을 담당하는 서비스"""

    def __init__(self, db: Session):
        self.db = db
        self.balance_repo = BalanceRepository(db)

    def get_balance(self, user_id: str) -> XuBalanceResponse:
        """사용자 xu 잔액 조회 (레코드가 없으면 0 으로 생성)

        Args:
            user_id: Haravan 고객 ID

        Returns:
            XuBalanceResponse: 잔액 정보
        """
        if not user_id:
            raise BadRequestError("Missing customer_id")

        try:
            balance_response = self.balance_repo.get_balance_response(user_id)
            logger.info(
                f"Retrieved xu balance for user {user_id}: {balance_response.xu_amount}"
            )
            return balance_response
        except Exception as e:
            self.db.rollback()
            logger.error(f"Failed to get xu balance for user {user_id}: {str(e)}")
            raise ValidationError(f"Failed to retrieve balance: {str(e)}")

    def debit(self, user_id: str, amount: int, commit: bool = True) -> int:
        """조건부 차감 - 잔액 부족이면 아무것도 바꾸지 않고 InsufficientFundsError

        Returns:
            int: 차감 후 잔액
        """
        if amount <= 0:
            raise ValidationError("Debit amount must be positive")

        new_balance = self.balance_repo.try_debit(user_id, amount, commit=commit)
        if new_balance is None:
            available = self.balance_repo.get_balance(user_id) or 0
            logger.info(
                f"Debit rejected for user {user_id}: required {amount}, available {available}"
            )
            raise InsufficientFundsError(required=amount, available=available)

        logger.info(f"Debited {amount} xu from user {user_id}, balance {new_balance}")
        return new_balance

    def credit(self, user_id: str, amount: int, commit: bool = True) -> int:
        """적립 (upsert-or-increment)

        Returns:
            int: 적립 후 잔액
        """
        if amount <= 0:
            raise ValidationError("Credit amount must be positive")

        try:
            new_balance = self.balance_repo.credit(user_id, amount, commit=commit)
        except Exception as e:
            logger.error(f"Failed to credit {amount} xu to user {user_id}: {str(e)}")
            raise

        logger.info(f"Credited {amount} xu to user {user_id}, balance {new_balance}")
        return new_balance
