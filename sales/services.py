# sales/services.py

import logging
from decimal import Decimal

from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import transaction

from jobcards.services import get_job_card
from partners.models import Customer
from stock.models import ItemActivity
from stock.services import InventoryLedger, ActivityRecorder
from workshop_system.exceptions import NotFound, Conflict
from workshop_system.numbering import next_sequence_number
from .models import Invoice, SalesReturn, SalesReturnItem

logger = logging.getLogger(__name__)


def get_invoice(invoice_id):
    try:
        return Invoice.objects.select_related('job_card__customer', 'customer').get(pk=invoice_id)
    except Invoice.DoesNotExist:
        raise NotFound('Invoice not found')


def get_customer(customer_id):
    try:
        return Customer.objects.get(pk=customer_id)
    except Customer.DoesNotExist:
        raise NotFound('Customer not found')


def get_sales_return(return_id, lock=False):
    queryset = SalesReturn.objects.select_related('invoice__customer', 'invoice__job_card__customer', 'job_card__customer', 'created_by')
    if lock:
        queryset = SalesReturn.objects.select_for_update()
    try:
        return queryset.get(pk=return_id)
    except SalesReturn.DoesNotExist:
        raise NotFound('Sales return not found')


class InvoiceService:

    @staticmethod
    def create(data, user=None):
        """
        Bills a job card. Parts default to the job card's materials amount;
        the customer comes from the job card unless given explicitly.
        """
        data = dict(data)
        job_card = get_job_card(data['job_card_id']) if data.get('job_card_id') else None
        customer_id = data.get('customer_id')
        if customer_id:
            get_customer(customer_id)

        with transaction.atomic():
            invoice = Invoice(
                job_card=job_card,
                customer_id=customer_id or (job_card.customer_id if job_card else None),
                labour_amount=data.get('labour_amount') or Decimal('0'),
                parts_amount=data['parts_amount'] if data.get('parts_amount') is not None
                else (job_card.materials_amount if job_card else Decimal('0')),
                vat_percentage=data.get('vat_percentage') or Decimal('0'),
                created_by=user,
            )
            if data.get('invoice_date'):
                invoice.invoice_date = data['invoice_date']
            if data.get('status'):
                invoice.status = data['status']
            invoice.invoice_no = next_sequence_number(Invoice, 'invoice_no', settings.WORKSHOP_CONFIG['INVOICE_NUMBER_PREFIX'])
            invoice.save()

        logger.info(f"Invoice {invoice.invoice_no} created for {invoice.grand_total} by {getattr(user, 'username', 'system')}")
        return invoice


class SalesReturnStateMachine:
    """
    Pending -> Approved | Rejected. Approved and Rejected are final.
    Approval puts the returned quantities back into inventory once.
    """

    STATUSES = [choice[0] for choice in SalesReturn.STATUS_CHOICES]

    @staticmethod
    def create(data, user=None):
        data = dict(data)
        items = data.pop('items', None) or []
        invoice = get_invoice(data.pop('invoice_id'))
        job_card_id = data.pop('job_card_id', None)
        if job_card_id:
            get_job_card(job_card_id)

        with transaction.atomic():
            return_no = next_sequence_number(SalesReturn, 'return_no', settings.WORKSHOP_CONFIG['RETURN_NUMBER_PREFIX'])
            sales_return = SalesReturn(
                return_no=return_no,
                invoice=invoice,
                job_card_id=job_card_id,
                return_amount=data.get('return_amount') or Decimal('0'),
                reason=data.get('reason') or None,
                status=SalesReturn.STATUS_PENDING,
                created_by=user,
            )
            if data.get('return_date'):
                sales_return.return_date = data['return_date']
            sales_return.save()

            for item in items:
                if item.get('inventory_item_id') is not None:
                    InventoryLedger.get_item(item['inventory_item_id'])
                unit_price = item.get('unit_price') or Decimal('0')
                total_price = item.get('total_price')
                if total_price is None:
                    total_price = unit_price * item['quantity']
                SalesReturnItem.objects.create(
                    sales_return=sales_return,
                    inventory_item_id=item.get('inventory_item_id'),
                    quantity=item['quantity'],
                    unit_price=unit_price,
                    total_price=total_price,
                )

        logger.info(f"Sales return {return_no} created against {invoice.invoice_no} with {len(items)} item(s)")
        return sales_return

    @staticmethod
    def update_status(return_id, new_status=None, reason=None, user=None):
        """
        Applies a status change and/or a new reason. Moving an Approved or
        Rejected return anywhere else raises Conflict; repeating the same
        status is a no-op. Reaching Approved restocks every linked item
        unless stock_updated is already set.
        """
        if new_status and new_status not in SalesReturnStateMachine.STATUSES:
            raise ValidationError(f"Invalid status '{new_status}'.")

        with transaction.atomic():
            sales_return = get_sales_return(return_id, lock=True)
            previous = sales_return.status

            if new_status and previous in SalesReturn.TERMINAL_STATUSES and new_status != previous:
                raise Conflict(f"Sales return {sales_return.return_no} is already {previous}")

            update_fields = ['updated_at']
            if reason is not None:
                sales_return.reason = reason
                update_fields.append('reason')
            if new_status and new_status != previous:
                sales_return.status = new_status
                update_fields.append('status')
            sales_return.save(update_fields=update_fields)

            restocked = 0
            if sales_return.status == SalesReturn.STATUS_APPROVED and not sales_return.stock_updated:
                restocked = SalesReturnStateMachine._restock(sales_return, user)

        if new_status and new_status != previous:
            logger.info(f"Sales return {sales_return.return_no}: '{previous}' -> '{new_status}'"
                        + (f", {restocked} item(s) restocked" if restocked else ''))
        return sales_return

    @staticmethod
    def _restock(sales_return, user=None):
        invoice_no = sales_return.invoice.invoice_no
        count = 0
        for line in sales_return.items.filter(inventory_item__isnull=False).order_by('id'):
            change = InventoryLedger.adjust_stock(line.inventory_item_id, line.quantity)
            ActivityRecorder.record_stock_in(
                change, line.quantity, ItemActivity.RETURN,
                unit_price=line.unit_price,
                reference_type='Sales Return',
                reference_id=sales_return.pk,
                reference_no=sales_return.return_no,
                notes=f"Sales Return from Invoice {invoice_no}",
                customer_name=sales_return.customer_name,
                created_by=user,
            )
            count += 1

        sales_return.stock_updated = True
        sales_return.save(update_fields=['stock_updated', 'updated_at'])
        return count

    @staticmethod
    def delete(return_id, user=None):
        with transaction.atomic():
            sales_return = get_sales_return(return_id, lock=True)
            if sales_return.status != SalesReturn.STATUS_PENDING:
                raise Conflict('Cannot delete approved or rejected returns')
            return_no = sales_return.return_no
            sales_return.delete()
        logger.info(f"Sales return {return_no} deleted by {getattr(user, 'username', 'system')}")
