# sales/tests.py

from decimal import Decimal

from django.core.exceptions import ValidationError
from django.test import TestCase, TransactionTestCase
from rest_framework.test import APIClient

from accounts.models import User
from inventory.models import InventoryItem
from jobcards.services import JobCardStateMachine, MaterialsLedger
from stock.models import StockTransaction, ItemActivity
from workshop_system.exceptions import Conflict, NotFound
from .models import Invoice, SalesReturn
from .services import InvoiceService, SalesReturnStateMachine


class SalesFixtureMixin:
    def setUp(self):
        self.item = InventoryItem.objects.create(
            part_name='Delivery valve', category='Pump parts', available_stock=20, min_stock_level=2,
            sales_price=Decimal('120.00'),
        )
        self.job_card = JobCardStateMachine.create({
            'customer_name': 'Meena Logistics', 'customer_phone': '9111111111',
            'vehicle_type': 'Bus', 'job_type': 'Pump', 'brand': 'Denso',
        })
        self.invoice = InvoiceService.create({'job_card_id': self.job_card.pk, 'labour_amount': Decimal('500')})

    def create_return(self, quantity=5, **extra):
        data = {
            'invoice_id': self.invoice.pk,
            'return_amount': Decimal('600.00'),
            'items': [{'inventory_item_id': self.item.pk, 'quantity': quantity, 'unit_price': Decimal('120.00')}],
        }
        data.update(extra)
        return SalesReturnStateMachine.create(data)


class InvoiceServiceTest(SalesFixtureMixin, TestCase):
    def test_numbering_and_totals(self):
        self.assertEqual(self.invoice.invoice_no, 'INV-001')
        self.assertEqual(self.invoice.customer, self.job_card.customer)
        self.assertEqual(self.invoice.grand_total, Decimal('500.00'))

        second = InvoiceService.create({
            'job_card_id': self.job_card.pk, 'labour_amount': Decimal('100'),
            'parts_amount': Decimal('100'), 'vat_percentage': Decimal('5'),
        })
        self.assertEqual(second.invoice_no, 'INV-002')
        self.assertEqual(second.grand_total, Decimal('210.00'))

    def test_parts_default_to_materials(self):
        MaterialsLedger.add_material(self.job_card.pk, inventory_item_id=self.item.pk, quantity=2)
        invoice = InvoiceService.create({'job_card_id': self.job_card.pk})
        self.assertEqual(invoice.parts_amount, Decimal('240.00'))

    def test_unknown_job_card(self):
        with self.assertRaises(NotFound):
            InvoiceService.create({'job_card_id': 999})


class SalesReturnStateMachineTest(SalesFixtureMixin, TestCase):
    def test_create(self):
        sales_return = self.create_return()
        self.assertEqual(sales_return.return_no, 'SR-001')
        self.assertEqual(sales_return.status, SalesReturn.STATUS_PENDING)
        self.assertFalse(sales_return.stock_updated)
        self.assertEqual(sales_return.items.get().total_price, Decimal('600.00'))
        self.assertEqual(self.create_return().return_no, 'SR-002')

    def test_approval_restocks(self):
        sales_return = self.create_return()
        SalesReturnStateMachine.update_status(sales_return.pk, 'Approved')

        self.item.refresh_from_db()
        sales_return.refresh_from_db()
        self.assertEqual(self.item.available_stock, 25)
        self.assertTrue(sales_return.stock_updated)

        stock_transaction = StockTransaction.objects.get()
        self.assertEqual(stock_transaction.transaction_type, StockTransaction.STOCK_IN)
        self.assertEqual(stock_transaction.reference_no, 'SR-001')
        self.assertEqual(stock_transaction.notes, 'Sales Return from Invoice INV-001')
        self.assertEqual((stock_transaction.previous_stock, stock_transaction.new_stock), (20, 25))

        activity = ItemActivity.objects.get()
        self.assertEqual(activity.activity_type, ItemActivity.RETURN)
        self.assertEqual(activity.reference_type, 'Sales Return')
        self.assertEqual(activity.reference_id, sales_return.pk)
        self.assertEqual(activity.customer_name, 'Meena Logistics')
        self.assertEqual(activity.total_price, Decimal('600.00'))

    def test_approval_is_idempotent(self):
        sales_return = self.create_return()
        SalesReturnStateMachine.update_status(sales_return.pk, 'Approved')
        SalesReturnStateMachine.update_status(sales_return.pk, 'Approved')
        self.item.refresh_from_db()
        self.assertEqual(self.item.available_stock, 25)
        self.assertEqual(StockTransaction.objects.count(), 1)
        self.assertEqual(ItemActivity.objects.count(), 1)

    def test_terminal_statuses(self):
        approved = self.create_return()
        SalesReturnStateMachine.update_status(approved.pk, 'Approved')
        with self.assertRaises(Conflict):
            SalesReturnStateMachine.update_status(approved.pk, 'Pending')
        with self.assertRaises(Conflict):
            SalesReturnStateMachine.update_status(approved.pk, 'Rejected')

        rejected = self.create_return()
        SalesReturnStateMachine.update_status(rejected.pk, 'Rejected')
        with self.assertRaises(Conflict):
            SalesReturnStateMachine.update_status(rejected.pk, 'Approved')
        self.item.refresh_from_db()
        self.assertEqual(self.item.available_stock, 25)

    def test_reason_can_change_after_approval(self):
        sales_return = self.create_return()
        SalesReturnStateMachine.update_status(sales_return.pk, 'Approved')
        SalesReturnStateMachine.update_status(sales_return.pk, reason='Wrong part supplied')
        sales_return.refresh_from_db()
        self.assertEqual(sales_return.reason, 'Wrong part supplied')
        self.assertEqual(sales_return.status, 'Approved')

    def test_unknown_status(self):
        sales_return = self.create_return()
        with self.assertRaises(ValidationError):
            SalesReturnStateMachine.update_status(sales_return.pk, 'Refunded')

    def test_items_without_inventory_do_not_restock(self):
        sales_return = self.create_return(items=[{'inventory_item_id': None, 'quantity': 1, 'unit_price': Decimal('10')}])
        SalesReturnStateMachine.update_status(sales_return.pk, 'Approved')
        sales_return.refresh_from_db()
        self.assertTrue(sales_return.stock_updated)
        self.assertFalse(StockTransaction.objects.exists())

    def test_delete_only_pending(self):
        pending = self.create_return()
        SalesReturnStateMachine.delete(pending.pk)
        self.assertFalse(SalesReturn.objects.filter(pk=pending.pk).exists())

        approved = self.create_return()
        SalesReturnStateMachine.update_status(approved.pk, 'Approved')
        with self.assertRaises(Conflict):
            SalesReturnStateMachine.delete(approved.pk)


class SalesApiTest(SalesFixtureMixin, TestCase):
    def setUp(self):
        super().setUp()
        self.client = APIClient()
        self.admin = User.objects.create_user(username='admin', role=User.ROLE_ADMIN)
        self.client.force_authenticate(self.admin)

    def test_admin_only(self):
        for role in (User.ROLE_TECHNICIAN, User.ROLE_STOREKEEPER):
            user = User.objects.create_user(username=f'user_{role}', role=role)
            self.client.force_authenticate(user)
            response = self.client.get('/api/sales-returns/')
            self.assertEqual(response.status_code, 403)
            self.assertFalse(response.json()['success'])
            self.assertEqual(self.client.get('/api/invoices/').status_code, 403)

    def test_create_invoice(self):
        response = self.client.post('/api/invoices/', {'jobCardId': self.job_card.pk, 'labourAmount': '300'}, format='json')
        self.assertEqual(response.status_code, 201)
        data = response.json()['data']
        self.assertEqual(data['invoiceNo'], 'INV-002')
        self.assertEqual(data['jobNo'], self.job_card.job_no)
        self.assertEqual(data['customerName'], 'Meena Logistics')

        response = self.client.post('/api/invoices/', {}, format='json')
        self.assertEqual(response.status_code, 400)

    def test_return_lifecycle(self):
        response = self.client.post('/api/sales-returns/', {
            'invoiceId': self.invoice.pk,
            'returnDate': '2024-05-10',
            'returnAmount': '600.00',
            'reason': 'Customer cancelled',
            'items': [{'inventoryItemId': self.item.pk, 'quantity': 5, 'unitPrice': '120.00'}],
        }, format='json')
        self.assertEqual(response.status_code, 201)
        data = response.json()['data']
        self.assertEqual(data['returnNo'], 'SR-001')
        self.assertEqual(data['status'], 'Pending')
        self.assertEqual(data['jobNo'], self.job_card.job_no)
        self.assertEqual(data['items'][0]['totalPrice'], '600.00')
        return_id = data['id']

        response = self.client.put(f'/api/sales-returns/{return_id}/', {'status': 'Approved'}, format='json')
        self.assertEqual(response.status_code, 200)
        self.assertTrue(response.json()['data']['stockUpdated'])
        self.item.refresh_from_db()
        self.assertEqual(self.item.available_stock, 25)

        response = self.client.put(f'/api/sales-returns/{return_id}/', {'status': 'Rejected'}, format='json')
        self.assertEqual(response.status_code, 400)
        self.assertFalse(response.json()['success'])

        response = self.client.delete(f'/api/sales-returns/{return_id}/')
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()['error'], 'Cannot delete approved or rejected returns')

        body = self.client.get('/api/sales-returns/', {'status': 'Approved'}).json()
        self.assertEqual(body['count'], 1)

    def test_create_requires_invoice(self):
        response = self.client.post('/api/sales-returns/', {'returnDate': '2024-05-10', 'returnAmount': '1'}, format='json')
        self.assertEqual(response.status_code, 400)
        self.assertIn('invoiceId', response.json()['error'])

        response = self.client.post('/api/sales-returns/', {
            'invoiceId': 999, 'returnDate': '2024-05-10', 'returnAmount': '1',
        }, format='json')
        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.json()['error'], 'Invoice not found')

    def test_invalid_status(self):
        sales_return = self.create_return()
        response = self.client.put(f'/api/sales-returns/{sales_return.pk}/', {'status': 'Refunded'}, format='json')
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()['error'], "Invalid status 'Refunded'.")

    def test_unknown_return(self):
        response = self.client.get('/api/sales-returns/404/')
        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.json(), {'success': False, 'error': 'Sales return not found'})


class SalesReferenceApiTest(SalesFixtureMixin, TransactionTestCase):
    """Runs outside a wrapping transaction so foreign keys are checked on commit."""

    def setUp(self):
        super().setUp()
        self.client = APIClient()
        self.client.force_authenticate(User.objects.create_user(username='admin', role=User.ROLE_ADMIN))

    def test_return_with_unknown_job_card(self):
        response = self.client.post('/api/sales-returns/', {
            'invoiceId': self.invoice.pk, 'jobCardId': 9999,
            'returnDate': '2024-05-10', 'returnAmount': '10.00',
        }, format='json')
        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.json(), {'success': False, 'error': 'Job card not found'})
        self.assertFalse(SalesReturn.objects.exists())

    def test_invoice_with_unknown_customer(self):
        response = self.client.post('/api/invoices/', {'customerId': 9999}, format='json')
        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.json(), {'success': False, 'error': 'Customer not found'})
        self.assertEqual(Invoice.objects.count(), 1)

    def test_invoice_with_unknown_job_card(self):
        response = self.client.post('/api/invoices/', {'jobCardId': 9999, 'labourAmount': '100'}, format='json')
        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.json()['error'], 'Job card not found')
