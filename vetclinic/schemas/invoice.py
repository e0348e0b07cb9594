# vetclinic/schemas/invoice.py
import uuid
from datetime import datetime
from typing import Literal

from sqlmodel import SQLModel

PaymentStatus = Literal["pending", "paid", "cancelled"]


class InvoiceRead(SQLModel):
    id: uuid.UUID
    clinic_id: uuid.UUID
    animal_id: uuid.UUID
    appointment_id: uuid.UUID | None
    user_id: uuid.UUID
    total_amount: float
    payment_method: str | None
    payment_status: str
    issued_at: datetime
    created_at: datetime
