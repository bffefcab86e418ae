# stock/tests.py

import random
from decimal import Decimal
from io import StringIO

from django.core.management import call_command
from django.core.management.base import CommandError
from django.test import TestCase

from accounts.models import User
from inventory.models import InventoryItem, stock_status
from workshop_system.exceptions import Conflict, InsufficientStock, NotFound
from .models import StockTransaction, ItemActivity
from .services import InventoryLedger, ActivityRecorder


def make_item(stock=10, minimum=5, **extra):
    return InventoryItem.objects.create(
        part_name=extra.pop('part_name', 'Fuel filter'), category='Filters',
        available_stock=stock, min_stock_level=minimum, **extra
    )


class StockStatusTest(TestCase):
    def test_boundaries(self):
        self.assertEqual(stock_status(6, 5), 'OK')
        self.assertEqual(stock_status(5, 5), 'Low')
        self.assertEqual(stock_status(0, 0), 'Low')

    def test_item_status_follows_stock(self):
        item = make_item(stock=6, minimum=5)
        self.assertEqual(item.status, 'OK')
        InventoryLedger.adjust_stock(item.pk, -1)
        item.refresh_from_db()
        self.assertEqual(item.status, 'Low')


class InventoryLedgerTest(TestCase):
    def setUp(self):
        self.item = make_item()
        self.user = User.objects.create_user(username='store', role=User.ROLE_STOREKEEPER)

    def test_adjust_stock(self):
        change = InventoryLedger.adjust_stock(self.item.pk, -4)
        self.assertEqual((change.previous_stock, change.new_stock), (10, 6))
        self.item.refresh_from_db()
        self.assertEqual(self.item.available_stock, 6)

    def test_adjust_below_zero_is_refused(self):
        with self.assertRaises(InsufficientStock) as ctx:
            InventoryLedger.adjust_stock(self.item.pk, -11)
        self.assertEqual(ctx.exception.available, 10)
        self.assertEqual(ctx.exception.requested, 11)
        self.item.refresh_from_db()
        self.assertEqual(self.item.available_stock, 10)

    def test_zero_delta(self):
        with self.assertRaises(ValueError):
            InventoryLedger.adjust_stock(self.item.pk, 0)

    def test_unknown_item(self):
        with self.assertRaises(NotFound):
            InventoryLedger.adjust_stock(999, 1)

    def test_stock_never_negative(self):
        rng = random.Random(7)
        expected = self.item.available_stock
        for _ in range(200):
            delta = rng.choice([-5, -3, -1, 1, 2, 4])
            try:
                InventoryLedger.adjust_stock(self.item.pk, delta)
            except InsufficientStock:
                self.assertLess(expected + delta, 0)
            else:
                expected += delta
            self.item.refresh_from_db()
            self.assertEqual(self.item.available_stock, expected)
            self.assertGreaterEqual(self.item.available_stock, 0)

    def test_create_item_books_opening_stock(self):
        item = InventoryLedger.create_item(
            {'part_name': 'Injector nozzle', 'category': 'Nozzle'}, opening_stock=8, user=self.user)
        self.assertEqual(item.available_stock, 8)
        self.assertEqual(len(item.barcode), 12)
        stock_transaction = item.stock_transactions.get()
        self.assertEqual(stock_transaction.transaction_type, StockTransaction.STOCK_IN)
        self.assertEqual((stock_transaction.previous_stock, stock_transaction.new_stock), (0, 8))
        self.assertEqual(stock_transaction.notes, 'Opening stock')

    def test_create_item_without_stock(self):
        item = InventoryLedger.create_item({'part_name': 'Gasket', 'category': 'Seals'})
        self.assertEqual(item.available_stock, 0)
        self.assertFalse(item.stock_transactions.exists())

    def test_stock_in_records_purchase(self):
        InventoryLedger.stock_in(
            self.item.pk, 5, user=self.user, bill_no='B-17', supplier_name='Bosch Dealer',
            unit_price=Decimal('45.00'),
        )
        self.item.refresh_from_db()
        self.assertEqual(self.item.available_stock, 15)
        self.assertEqual(self.item.purchase_price, Decimal('45.00'))

        stock_transaction = StockTransaction.objects.get()
        self.assertEqual(stock_transaction.bill_no, 'B-17')
        self.assertEqual(stock_transaction.created_by, self.user)

        activity = ItemActivity.objects.get()
        self.assertEqual(activity.activity_type, ItemActivity.PURCHASE)
        self.assertEqual(activity.reference_type, 'Purchase Bill')
        self.assertEqual(activity.total_price, Decimal('225.00'))

    def test_stock_out(self):
        change = InventoryLedger.stock_out(self.item.pk, 3, user=self.user, notes='Workshop use')
        self.assertEqual(change.new_stock, 7)
        self.assertEqual(StockTransaction.objects.get().transaction_type, StockTransaction.STOCK_OUT)
        self.assertEqual(ItemActivity.objects.get().activity_type, ItemActivity.STOCK_OUT)

    def test_stock_out_shortage_leaves_no_rows(self):
        with self.assertRaises(InsufficientStock):
            InventoryLedger.stock_out(self.item.pk, 50)
        self.assertFalse(StockTransaction.objects.exists())
        self.assertFalse(ItemActivity.objects.exists())


class AppendOnlyTest(TestCase):
    def setUp(self):
        item = make_item()
        change = InventoryLedger.adjust_stock(item.pk, 2)
        self.stock_transaction, self.activity = ActivityRecorder.record_stock_in(
            change, 2, ItemActivity.STOCK_IN, unit_price=Decimal('10'))

    def test_rows_cannot_be_changed(self):
        self.stock_transaction.notes = 'edited'
        with self.assertRaises(Conflict):
            self.stock_transaction.save()
        with self.assertRaises(Conflict):
            self.activity.delete()

    def test_querysets_cannot_change_rows(self):
        with self.assertRaises(Conflict):
            StockTransaction.objects.all().update(notes='edited')
        with self.assertRaises(Conflict):
            ItemActivity.objects.all().delete()
        self.assertEqual(StockTransaction.objects.count(), 1)


class ActivitySummaryTest(TestCase):
    def test_summary(self):
        item = make_item(stock=0)
        InventoryLedger.stock_in(item.pk, 10, unit_price=Decimal('5'))
        InventoryLedger.stock_out(item.pk, 3)
        change = InventoryLedger.adjust_stock(item.pk, 1)
        ActivityRecorder.record_stock_in(change, 1, ItemActivity.RETURN)

        item.refresh_from_db()
        summary = ActivityRecorder.activity_summary(item)
        self.assertEqual(summary['total_purchased'], 10)
        self.assertEqual(summary['total_sold'], 3)
        self.assertEqual(summary['total_returned'], 1)
        self.assertEqual(summary['available_stock'], 8)
        self.assertEqual(summary['last_purchase'].activity_type, ItemActivity.PURCHASE)

    def test_empty_summary(self):
        summary = ActivityRecorder.activity_summary(make_item())
        self.assertEqual(summary['total_purchased'], 0)
        self.assertIsNone(summary['last_purchase'])


class ReconcileStockCommandTest(TestCase):
    def run_command(self, *args):
        out = StringIO()
        call_command('reconcile_stock', *args, stdout=out)
        return out.getvalue()

    def test_clean_ledger(self):
        item = make_item(stock=0)
        InventoryLedger.stock_in(item.pk, 5)
        make_item(stock=3, part_name='Never moved')
        self.assertIn('No discrepancies', self.run_command())

    def test_reports_discrepancy_without_writing(self):
        item = make_item(stock=0)
        InventoryLedger.stock_in(item.pk, 5)
        InventoryItem.objects.filter(pk=item.pk).update(available_stock=9)

        output = self.run_command('--item', str(item.pk))
        self.assertIn('Discrepancy found for "Fuel filter"', output)
        self.assertIn('1 discrepancies', output)
        item.refresh_from_db()
        self.assertEqual(item.available_stock, 9)

    def test_unknown_item(self):
        with self.assertRaises(CommandError):
            self.run_command('--item', '404')
