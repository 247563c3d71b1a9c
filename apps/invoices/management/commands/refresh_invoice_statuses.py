"""
Management command to re-derive cached invoice statuses.

Invoice status is only recomputed when an invoice changes, so an open
invoice does not turn OVERDUE on its own once the due date passes. Run
this daily (cron or similar).

Usage:
    python manage.py refresh_invoice_statuses
    python manage.py refresh_invoice_statuses --as-of 2024-03-31 --dry-run
"""

from datetime import date

from django.core.management.base import BaseCommand, CommandError

from apps.invoices.services import refresh_invoice_statuses


class Command(BaseCommand):
    help = 'Re-derive the status of every non-cancelled invoice'

    def add_arguments(self, parser):
        parser.add_argument(
            '--as-of',
            help='Reference date (YYYY-MM-DD), defaults to today',
        )
        parser.add_argument(
            '--dry-run',
            action='store_true',
            help='Show what would be updated without making changes',
        )

    def handle(self, *args, **options):
        dry_run = options['dry_run']
        as_of = date.today()
        if options['as_of']:
            try:
                as_of = date.fromisoformat(options['as_of'])
            except ValueError:
                raise CommandError(f"Invalid --as-of date: {options['as_of']}")

        changes = refresh_invoice_statuses(as_of=as_of, dry_run=dry_run)

        if not changes:
            self.stdout.write(self.style.SUCCESS(f'All invoice statuses are current as of {as_of}.'))
            return

        self.stdout.write(f'\nFound {len(changes)} invoice(s) with a stale status:\n')
        for invoice, old_status, new_status in changes:
            self.stdout.write(
                f'  - {invoice.invoice_number} | {old_status} -> {new_status} | due {invoice.due_date}'
            )

        if dry_run:
            self.stdout.write(self.style.WARNING('\n--dry-run mode: No changes made.'))
            return

        self.stdout.write(self.style.SUCCESS(f'\nUpdated {len(changes)} invoice(s).'))
