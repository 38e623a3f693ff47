"""
Billing API schemas (invoices and payments).

Money values are accepted as JSON numbers or strings and returned as decimal
strings so totals round-trip exactly.
"""

from decimal import Decimal
from typing import List

from pydantic import BaseModel, Field


# =============================================================================
# Invoice Schemas
# =============================================================================


class InvoiceItemSchema(BaseModel):
    """One invoice line."""

    description: str = Field(
        ...,
        min_length=1,
        description="Description of the invoice item",
        examples=["Engine repair service"],
    )
    price: Decimal = Field(..., ge=1, description="Price per unit", examples=[5000])
    quantity: int = Field(default=1, ge=1, description="Quantity of items")


class InvoiceCreateRequest(BaseModel):
    """
    Request to invoice a DONE job.

    Sub-total and total are always derived from the items and tax.
    """

    items: List[InvoiceItemSchema] = Field(..., min_length=1, description="Ordered line items")
    tax: Decimal = Field(
        default=Decimal("0"),
        ge=0,
        description="Tax percentage applied to the subtotal",
        examples=[10],
    )


class InvoiceItemResponse(BaseModel):
    description: str
    price: str
    quantity: int


class InvoiceResponse(BaseModel):
    """Response representing an Invoice."""

    invoice_id: str
    job_id: str
    invoice_number: str = Field(..., description="INV-<unix ms>-<random suffix>")
    items: List[InvoiceItemResponse] = Field(default_factory=list)
    sub_total: str = Field(..., description="Sum of price * quantity")
    tax: str = Field(..., description="Tax percentage")
    total: str = Field(..., description="sub_total + sub_total * tax / 100")
    created_at: str


class InvoiceListResponse(BaseModel):
    items: List[InvoiceResponse] = Field(default_factory=list)
    total: int
    page: int
    limit: int
    total_pages: int


# =============================================================================
# Payment Schemas
# =============================================================================


class PaymentCreateRequest(BaseModel):
    """Request to settle an invoice in full."""

    amount: Decimal = Field(..., gt=0, description="Amount paid; must equal the invoice total", examples=[5500])
    payment_method: str = Field(..., description="One of: card, bank, cash", examples=["card"])


class PaymentResponse(BaseModel):
    payment_id: str
    invoice_id: str
    amount: str
    method: str
    created_at: str


class PaymentListResponse(BaseModel):
    items: List[PaymentResponse] = Field(default_factory=list)
    total: int
    page: int
    limit: int
    total_pages: int


class ErrorResponse(BaseModel):
    """Body returned for every lifecycle failure."""

    detail: str
    kind: str = Field(..., description="not_found / conflict / bad_request / internal")
