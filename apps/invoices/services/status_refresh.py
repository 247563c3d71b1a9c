"""Bulk re-derivation of cached invoice statuses."""

import logging
from datetime import date
from typing import List, Optional, Tuple

from django.db import transaction

from apps.invoices import ledger
from apps.invoices.models import Invoice, InvoiceStatus

logger = logging.getLogger(__name__)


@transaction.atomic
def refresh_invoice_statuses(
    *,
    as_of: Optional[date] = None,
    dry_run: bool = False
) -> List[Tuple[Invoice, str, str]]:
    """
    Re-derive the status of every non-cancelled invoice.

    Open invoices past their due date become OVERDUE; any stale status is
    corrected.

    Args:
        as_of: Reference date (default: today)
        dry_run: Compute changes without saving

    Returns:
        List of (invoice, old_status, new_status) for changed invoices
    """
    as_of = as_of or date.today()
    changes = []

    invoices = (
        Invoice.objects
        .select_for_update()
        .exclude(status=InvoiceStatus.CANCELLED)
        .order_by('invoice_number')
    )
    for invoice in invoices:
        old_status = invoice.status
        new_status = ledger.refresh_status(invoice.to_ledger(with_items=False), as_of).status
        if new_status == old_status:
            continue

        changes.append((invoice, old_status, new_status))
        if not dry_run:
            invoice.status = new_status
            invoice.save(update_fields=['status', 'updated_at'])

    logger.info(
        "Status refresh as of %s: %d invoice(s) %s",
        as_of, len(changes), 'would change' if dry_run else 'changed'
    )
    return changes
