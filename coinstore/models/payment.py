from datetime import datetime

from beanie import Document
from pydantic import Field

TX_TYPES = ("cashin", "cashout")


class Payment(Document):
    """Cash received from (cashin) or paid out to (cashout) a payment channel."""
    amount: float
    method: str  # cashapp | paypal | chime | venmo
    tx_type: str = "cashin"
    note: str | None = None
    date: str  # YYYY-MM-DD
    created_at: datetime = Field(default_factory=datetime.utcnow)

    class Settings:
        name = "payments"
        indexes = [[("date", 1), ("created_at", -1)]]
