# stock/services.py

import logging
from collections import namedtuple
from decimal import Decimal

from django.db import transaction
from django.db.models import Sum
from django.utils import timezone

from inventory.models import InventoryItem, stock_status
from workshop_system.exceptions import NotFound, InsufficientStock
from .models import StockTransaction, ItemActivity

logger = logging.getLogger(__name__)

StockChange = namedtuple('StockChange', ['item', 'previous_stock', 'new_stock'])

__all__ = ['InventoryLedger', 'ActivityRecorder', 'StockChange', 'stock_status']


class InventoryLedger:
    """
    The only code path that writes InventoryItem.available_stock.

    Every method runs in transaction.atomic(); when called from inside a
    larger unit of work the block becomes a savepoint and a failure rolls
    back the caller's transaction too.
    """

    @staticmethod
    def get_item(item_id):
        try:
            return InventoryItem.objects.get(pk=item_id)
        except InventoryItem.DoesNotExist:
            raise NotFound('Inventory item not found')

    @staticmethod
    def lock_item(item_id):
        try:
            return InventoryItem.objects.select_for_update().get(pk=item_id)
        except InventoryItem.DoesNotExist:
            raise NotFound('Inventory item not found')

    @staticmethod
    def adjust_stock(item_id, delta, require_non_negative=True):
        if delta == 0:
            raise ValueError("Stock adjustment must be non-zero.")

        with transaction.atomic():
            item = InventoryLedger.lock_item(item_id)
            previous = item.available_stock
            new = previous + delta

            if require_non_negative and new < 0:
                raise InsufficientStock(item.part_name, previous, -delta)

            item.available_stock = new
            item.save(update_fields=['available_stock', 'updated_at'])

        logger.info(f"Stock of '{item.part_name}' (#{item.pk}) changed by {delta:+d}: {previous} -> {new}")
        return StockChange(item, previous, new)

    @staticmethod
    def create_item(fields, opening_stock=0, user=None):
        """Creates an item at zero and books any opening stock as a Stock In."""
        with transaction.atomic():
            item = InventoryItem.objects.create(**fields)
            if opening_stock:
                change = InventoryLedger.adjust_stock(item.pk, opening_stock)
                ActivityRecorder.record_stock_transaction(
                    change.item, StockTransaction.STOCK_IN, opening_stock,
                    change.previous_stock, change.new_stock,
                    notes='Opening stock', created_by=user,
                )
                item = change.item
        logger.info(f"Inventory item '{item.part_name}' (#{item.pk}) created with stock {item.available_stock}")
        return item

    @staticmethod
    def stock_in(item_id, quantity, user=None, notes=None, bill_no=None,
                 supplier_name=None, purchase_date=None, unit_price=None):
        """Goods received from a supplier: Stock In transaction plus a Purchase activity."""
        with transaction.atomic():
            change = InventoryLedger.adjust_stock(item_id, quantity)
            item = change.item
            price = unit_price if unit_price else item.purchase_price
            supplier = supplier_name or item.supplier
            purchase_date = purchase_date or timezone.localdate()

            ActivityRecorder.record_stock_transaction(
                item, StockTransaction.STOCK_IN, quantity, change.previous_stock, change.new_stock,
                notes=notes, bill_no=bill_no, supplier_name=supplier,
                purchase_date=purchase_date, unit_price=price, created_by=user,
            )
            ActivityRecorder.record_item_activity(
                item, ItemActivity.PURCHASE, quantity, price,
                reference_type='Purchase Bill', reference_no=bill_no,
                activity_date=purchase_date, supplier_name=supplier,
                notes=notes, created_by=user,
            )

            if unit_price:
                item.purchase_price = unit_price
                item.save(update_fields=['purchase_price', 'updated_at'])
        return change

    @staticmethod
    def stock_out(item_id, quantity, user=None, notes=None):
        with transaction.atomic():
            change = InventoryLedger.adjust_stock(item_id, -quantity)
            ActivityRecorder.record_stock_out(change, quantity, ItemActivity.STOCK_OUT,
                                              notes=notes, created_by=user)
        return change


class ActivityRecorder:
    """Appends audit rows. Nothing here updates or deletes them."""

    @staticmethod
    def record_stock_transaction(item, transaction_type, quantity, previous_stock, new_stock, **meta):
        return StockTransaction.objects.create(
            inventory_item=item,
            transaction_type=transaction_type,
            quantity=quantity,
            previous_stock=previous_stock,
            new_stock=new_stock,
            **meta
        )

    @staticmethod
    def record_item_activity(item, activity_type, quantity, unit_price=0,
                             reference_type=None, reference_no=None, **meta):
        unit_price = Decimal(str(unit_price or 0))
        return ItemActivity.objects.create(
            inventory_item=item,
            activity_type=activity_type,
            quantity=quantity,
            unit_price=unit_price,
            total_price=unit_price * quantity,
            reference_type=reference_type,
            reference_no=reference_no,
            **meta
        )

    @staticmethod
    def record_stock_out(change, quantity, activity_type, unit_price=0, reference_type=None,
                         reference_id=None, reference_no=None, notes=None, customer_name=None,
                         created_by=None):
        """Stock Out transaction and the matching activity row for one StockChange."""
        stock_transaction = ActivityRecorder.record_stock_transaction(
            change.item, StockTransaction.STOCK_OUT, quantity, change.previous_stock, change.new_stock,
            reference_no=reference_no, notes=notes, created_by=created_by,
        )
        activity = ActivityRecorder.record_item_activity(
            change.item, activity_type, quantity, unit_price,
            reference_type=reference_type, reference_no=reference_no, reference_id=reference_id,
            customer_name=customer_name, notes=notes, created_by=created_by,
        )
        return stock_transaction, activity

    @staticmethod
    def record_stock_in(change, quantity, activity_type=None, unit_price=0, reference_type=None,
                        reference_id=None, reference_no=None, notes=None, customer_name=None,
                        created_by=None):
        """Stock In transaction, plus an activity row when activity_type is given."""
        stock_transaction = ActivityRecorder.record_stock_transaction(
            change.item, StockTransaction.STOCK_IN, quantity, change.previous_stock, change.new_stock,
            reference_no=reference_no, notes=notes, created_by=created_by,
        )
        activity = None
        if activity_type:
            activity = ActivityRecorder.record_item_activity(
                change.item, activity_type, quantity, unit_price,
                reference_type=reference_type, reference_no=reference_no, reference_id=reference_id,
                customer_name=customer_name, notes=notes, created_by=created_by,
            )
        return stock_transaction, activity

    @staticmethod
    def activity_summary(item):
        activities = ItemActivity.objects.filter(inventory_item=item)

        def total(*types):
            return activities.filter(activity_type__in=types).aggregate(total=Sum('quantity'))['total'] or 0

        purchase_types = [ItemActivity.PURCHASE, ItemActivity.STOCK_IN]
        last_purchase = activities.filter(activity_type__in=purchase_types).order_by('-activity_date', '-created_at', '-id').first()

        return {
            'total_purchased': total(*purchase_types),
            'total_sold': total(ItemActivity.SALE, ItemActivity.JOB_USAGE, ItemActivity.STOCK_OUT),
            'total_returned': total(ItemActivity.RETURN),
            'available_stock': item.available_stock,
            'last_purchase': last_purchase,
        }
