from typing import Annotated
from uuid import UUID
from fastapi import APIRouter, Body, Depends, Path
from pydantic import Field

from api.deps import Admin
from services.payment import (
    CamelModel, PaymentService, InvoiceInfo, PaymentResult, InvoiceDetails, get_payment_service
)


router = APIRouter()


class CreateInvoiceBody(CamelModel):
    course_id: UUID
    user_id: UUID


@router.post(
    path='/payment/create-invoice',
    description=
    'Issues an invoice (a `pending` payment) for the course price<br>'
    'Fails if the user is already enrolled in the course'
)
async def create_invoice(
    body: Annotated[CreateInvoiceBody, Body()],
    payment_service: Annotated[PaymentService, Depends(get_payment_service)]
) -> InvoiceInfo:
    return await payment_service.create_invoice(course_id=body.course_id, user_id=body.user_id)


class ProcessPaymentBody(CamelModel):
    invoice_id: str = Field(min_length=1)
    payment_method: str = Field(min_length=1, description='Any method name, e.g. `bca` or `manual_confirmation`')


@router.post(
    path='/payment/process',
    description=
    'Confirms the payment of an invoice and enrolls the user into the course<br>'
    'Confirming an already completed invoice changes nothing'
)
async def process_payment(
    body: Annotated[ProcessPaymentBody, Body()],
    payment_service: Annotated[PaymentService, Depends(get_payment_service)]
) -> PaymentResult:
    return await payment_service.confirm_payment(invoice_id=body.invoice_id, payment_method=body.payment_method)


class FailPaymentBody(CamelModel):
    invoice_id: str = Field(min_length=1)


@router.post(path='/payment/fail', description='Marks a pending invoice as failed')
async def fail_payment(
    body: Annotated[FailPaymentBody, Body()],
    _: Admin,
    payment_service: Annotated[PaymentService, Depends(get_payment_service)]
) -> PaymentResult:
    return await payment_service.fail_payment(invoice_id=body.invoice_id)


@router.get(path='/invoice/{invoice_id}')
async def get_invoice(
    invoice_id: Annotated[str, Path()],
    payment_service: Annotated[PaymentService, Depends(get_payment_service)]
) -> InvoiceDetails:
    return await payment_service.get_invoice(invoice_id)
