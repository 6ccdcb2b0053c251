from pydantic import BaseModel


class FulfillmentRetryEvent(BaseModel):
    fulfillment_order_id: int
    user_id: str
    item_id: int
    haravan_product_id: str
    spin_history_id: int
    error_message: str
