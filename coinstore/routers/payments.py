from typing import Literal

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, Field, field_validator

from coinstore.core.dates import normalize_date_string
from coinstore.core.exceptions import BadRequestError
from coinstore.deps import parse_object_id, require_admin
from coinstore.models.payment import Payment
from coinstore.models.user import User
from coinstore.services import payments as payments_service

router = APIRouter()

Method = Literal["cashapp", "paypal", "chime", "venmo"]


class PaymentCreate(BaseModel):
    amount: float = Field(gt=0)
    method: Method
    note: str | None = None
    date: str | None = None

    @field_validator("date", mode="before")
    @classmethod
    def _date(cls, v):
        return normalize_date_string(v)


class PaymentUpdate(BaseModel):
    amount: float | None = Field(default=None, gt=0)
    method: Method | None = None
    tx_type: Literal["cashin", "cashout"] | None = None
    note: str | None = None


def payment_to_dict(p: Payment) -> dict:
    return {
        "id": str(p.id),
        "amount": p.amount,
        "method": p.method,
        "tx_type": p.tx_type,
        "note": p.note,
        "date": p.date,
        "created_at": p.created_at.isoformat(),
    }


async def _add(body: PaymentCreate, tx_type: str) -> dict:
    p = await payments_service.add_payment(body.amount, body.method, tx_type, note=body.note, date=body.date)
    return {"ok": True, "payment": payment_to_dict(p), "totals": await payments_service.get_totals()}


@router.get("/payments")
async def payments_list(
    date: str | None = Query(None, description="YYYY-MM-DD"),
    tx_type: Literal["cashin", "cashout"] | None = Query(None),
    user: User = Depends(require_admin),
):
    try:
        date = normalize_date_string(date)
    except ValueError as e:
        raise BadRequestError(str(e))
    items = await payments_service.list_payments(date, tx_type)
    return {"payments": [payment_to_dict(p) for p in items]}


@router.post("/payments/cashin", status_code=201)
async def payment_cashin(body: PaymentCreate, user: User = Depends(require_admin)):
    return await _add(body, "cashin")


@router.post("/payments/cashout", status_code=201)
async def payment_cashout(body: PaymentCreate, user: User = Depends(require_admin)):
    return await _add(body, "cashout")


@router.put("/payments/{payment_id}")
async def payment_update(payment_id: str, body: PaymentUpdate, user: User = Depends(require_admin)):
    p = await payments_service.update_payment(
        parse_object_id(payment_id, "Payment"),
        amount=body.amount,
        method=body.method,
        tx_type=body.tx_type,
        note=body.note,
    )
    return payment_to_dict(p)


@router.delete("/payments/{payment_id}")
async def payment_delete(payment_id: str, user: User = Depends(require_admin)):
    await payments_service.delete_payment(parse_object_id(payment_id, "Payment"))
    return {"ok": True}


@router.get("/totals")
async def payments_totals(user: User = Depends(require_admin)):
    return await payments_service.get_totals()


@router.post("/recalc")
async def payments_recalc(user: User = Depends(require_admin)):
    return {"ok": True, "totals": await payments_service.get_totals()}


@router.post("/reset")
async def payments_reset(user: User = Depends(require_admin)):
    return {"ok": True, "totals": await payments_service.reset_payments()}
