# vetclinic/routers/invoices.py
import uuid

from fastapi import APIRouter, Depends
from sqlmodel import Session

from vetclinic.core.auth import require_operator
from vetclinic.core.principal import Principal
from vetclinic.database import get_session
from vetclinic.repositories.invoice_repo import InvoiceRepository
from vetclinic.schemas.invoice import InvoiceRead, PaymentStatus
from vetclinic.services.invoice_service import InvoiceService

router = APIRouter(prefix="/invoices", tags=["Invoices"])

service = InvoiceService(InvoiceRepository())


@router.get(
    "",
    response_model=list[InvoiceRead],
)
def list_invoices(
    session: Session = Depends(get_session),
    principal: Principal = Depends(require_operator),
    payment_status: PaymentStatus | None = None,
    animal_id: uuid.UUID | None = None,
    skip: int = 0,
    limit: int = 50,
):
    """Invoices of the active clinic, most recently issued first."""
    return service.list_invoices(session, principal, payment_status, animal_id, skip, limit)
