"""Cash payments in/out per payment channel and their running totals."""

from typing import Iterable

from beanie import PydanticObjectId

from coinstore.core.dates import today_str
from coinstore.core.exceptions import BadRequestError, NotFoundError
from coinstore.core.logging import get_logger
from coinstore.models.game_entry import PAYMENT_METHODS
from coinstore.models.payment import TX_TYPES, Payment

log = get_logger(__name__)


def _check(amount: float, method: str, tx_type: str) -> float:
    if not amount or amount <= 0:
        raise BadRequestError("Invalid amount")
    if method not in PAYMENT_METHODS:
        raise BadRequestError("Invalid method")
    if tx_type not in TX_TYPES:
        raise BadRequestError("Invalid tx_type")
    return round(amount, 2)


def method_totals(payments: Iterable[Payment]) -> dict[str, float]:
    """Net cash per method: cash-in adds, cash-out subtracts."""
    totals = {m: 0.0 for m in PAYMENT_METHODS}
    for p in payments:
        if p.method not in totals:
            continue
        totals[p.method] += -p.amount if p.tx_type == "cashout" else p.amount
    return {m: round(v, 2) for m, v in totals.items()}


async def get_totals() -> dict[str, float]:
    return method_totals(await Payment.find_all().to_list())


async def add_payment(
    amount: float,
    method: str,
    tx_type: str,
    note: str | None = None,
    date: str | None = None,
) -> Payment:
    payment = Payment(
        amount=_check(amount, method, tx_type),
        method=method,
        tx_type=tx_type,
        note=note or None,
        date=date or today_str(),
    )
    await payment.insert()
    log.info("payment_added", payment_id=str(payment.id), method=method, tx_type=tx_type, amount=payment.amount)
    return payment


async def list_payments(date: str | None = None, tx_type: str | None = None) -> list[Payment]:
    query = {}
    if date:
        query["date"] = date
    if tx_type:
        query["tx_type"] = tx_type
    return await Payment.find(query).sort(-Payment.created_at).to_list()


async def get_payment(payment_id: PydanticObjectId) -> Payment:
    payment = await Payment.get(payment_id)
    if not payment:
        raise NotFoundError("Payment not found")
    return payment


async def update_payment(
    payment_id: PydanticObjectId,
    amount: float | None = None,
    method: str | None = None,
    tx_type: str | None = None,
    note: str | None = None,
) -> Payment:
    payment = await get_payment(payment_id)
    amount = payment.amount if amount is None else amount
    method = method or payment.method
    tx_type = tx_type or payment.tx_type
    payment.amount = _check(amount, method, tx_type)
    payment.method = method
    payment.tx_type = tx_type
    if note is not None:
        payment.note = note or None
    await payment.save()
    return payment


async def delete_payment(payment_id: PydanticObjectId) -> None:
    payment = await get_payment(payment_id)
    await payment.delete()
    log.info("payment_deleted", payment_id=str(payment_id))


async def reset_payments() -> dict[str, float]:
    """Delete every payment; totals drop to zero."""
    result = await Payment.get_motor_collection().delete_many({})
    log.warning("payments_reset", deleted=result.deleted_count)
    return method_totals([])
