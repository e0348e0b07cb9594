# vetclinic/services/invoice_service.py
import uuid

from sqlmodel import Session

from vetclinic.core.principal import Principal
from vetclinic.models.invoice import Invoice
from vetclinic.repositories.invoice_repo import InvoiceRepository


class InvoiceService:
    """Read-only view over the clinic's point-of-sale invoices."""

    def __init__(self, invoice_repo: InvoiceRepository):
        self.invoice_repo = invoice_repo

    def list_invoices(
        self,
        session: Session,
        principal: Principal,
        payment_status: str | None = None,
        animal_id: uuid.UUID | None = None,
        skip: int = 0,
        limit: int = 50,
    ) -> list[Invoice]:
        return self.invoice_repo.list_for_clinic(
            session,
            principal.clinic_id,
            order_by=Invoice.issued_at.desc(),
            skip=skip,
            limit=limit,
            payment_status=payment_status,
            animal_id=animal_id,
        )
