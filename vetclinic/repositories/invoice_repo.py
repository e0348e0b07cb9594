# vetclinic/repositories/invoice_repo.py
from vetclinic.models.invoice import Invoice
from vetclinic.repositories.base import ClinicScopedRepository


class InvoiceRepository(ClinicScopedRepository[Invoice]):
    model = Invoice
