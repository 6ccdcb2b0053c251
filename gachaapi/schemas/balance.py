from pydantic import BaseModel, Field


class XuBalanceResponse(BaseModel):
    """xu 잔액 응답"""

    customer_id: str = Field(..., description="Haravan 고객 ID")
    xu_amount: int = Field(..., description="현재 xu 잔액")

    class Config:
        from_attributes = True
