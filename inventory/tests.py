# inventory/tests.py

from decimal import Decimal
from io import BytesIO

from django.test import TestCase
from openpyxl import load_workbook
from rest_framework.test import APIClient

from accounts.models import User
from jobcards.services import JobCardStateMachine, MaterialsLedger
from stock.models import StockTransaction, ItemActivity
from .admin import InventoryItemResource
from .models import InventoryCategory, InventoryItem


class InventoryItemModelTest(TestCase):
    def test_barcode_generated(self):
        item = InventoryItem.objects.create(part_name='O-ring', category='Seals')
        self.assertEqual(len(item.barcode), 12)
        self.assertTrue(item.barcode.isdigit())
        self.assertIsNone(item.part_code)

    def test_given_barcode_kept(self):
        item = InventoryItem.objects.create(part_name='O-ring', category='Seals', barcode='ABC123', part_code='')
        self.assertEqual(item.barcode, 'ABC123')
        self.assertIsNone(item.part_code)

    def test_selling_price_falls_back(self):
        item = InventoryItem(part_name='Valve', category='Valves', unit_price=Decimal('30'), sales_price=Decimal('0'))
        self.assertEqual(item.selling_price, Decimal('30'))
        item.sales_price = Decimal('35')
        self.assertEqual(item.selling_price, Decimal('35'))

    def test_low_stock_queryset(self):
        InventoryItem.objects.create(part_name='A', category='X', available_stock=2, min_stock_level=5)
        InventoryItem.objects.create(part_name='B', category='X', available_stock=5, min_stock_level=5)
        InventoryItem.objects.create(part_name='C', category='X', available_stock=9, min_stock_level=5)
        self.assertEqual(InventoryItem.objects.low_stock().count(), 2)
        self.assertEqual(InventoryItem.objects.in_stock().count(), 1)


class InventoryApiTest(TestCase):
    def setUp(self):
        self.client = APIClient()
        self.admin = User.objects.create_user(username='admin', role=User.ROLE_ADMIN)
        self.storekeeper = User.objects.create_user(username='store', role=User.ROLE_STOREKEEPER)
        self.technician = User.objects.create_user(username='tech', role=User.ROLE_TECHNICIAN)
        self.item = InventoryItem.objects.create(
            part_name='Nozzle DLLA', part_code='NZ-1', category='Nozzle', supplier='Bosch',
            available_stock=10, min_stock_level=5, sales_price=Decimal('250'), purchase_price=Decimal('180'),
        )

    def test_technicians_are_refused(self):
        self.client.force_authenticate(self.technician)
        response = self.client.get('/api/inventory/')
        self.assertEqual(response.status_code, 403)
        self.assertEqual(response.json(), {'success': False, 'error': 'Access denied. Admin or storekeeper role required.'})

    def test_purchase_prices_admin_only(self):
        self.client.force_authenticate(self.storekeeper)
        data = self.client.get(f'/api/inventory/{self.item.pk}/').json()['data']
        self.assertNotIn('purchasePrice', data)
        self.assertNotIn('wholesalePrice', data)
        self.assertEqual(data['salesPrice'], '250.00')

        self.client.force_authenticate(self.admin)
        data = self.client.get(f'/api/inventory/{self.item.pk}/').json()['data']
        self.assertEqual(data['purchasePrice'], '180.00')

    def test_create_with_opening_stock(self):
        self.client.force_authenticate(self.storekeeper)
        response = self.client.post('/api/inventory/', {
            'partName': 'Delivery valve', 'partCode': 'DV-9', 'category': 'Pump parts',
            'availableStock': 4, 'minStockLevel': 5,
        }, format='json')
        self.assertEqual(response.status_code, 201)
        data = response.json()['data']
        self.assertEqual(data['availableStock'], 4)
        self.assertEqual(data['status'], 'Low')
        self.assertEqual(StockTransaction.objects.get(inventory_item_id=data['id']).new_stock, 4)

    def test_duplicate_part_code(self):
        self.client.force_authenticate(self.admin)
        response = self.client.post('/api/inventory/', {'partName': 'X', 'partCode': 'NZ-1', 'category': 'Nozzle'}, format='json')
        self.assertEqual(response.status_code, 400)
        self.assertIn('Part code already exists', response.json()['error'])

    def test_filters(self):
        InventoryItem.objects.create(part_name='Filter', category='Filters', available_stock=1, min_stock_level=3)
        self.client.force_authenticate(self.admin)
        self.assertEqual(self.client.get('/api/inventory/', {'status': 'Low'}).json()['count'], 1)
        self.assertEqual(self.client.get('/api/inventory/', {'status': 'OK'}).json()['count'], 1)
        self.assertEqual(self.client.get('/api/inventory/', {'category': 'Filters'}).json()['count'], 1)
        self.assertEqual(self.client.get('/api/inventory/', {'search': 'nz-'}).json()['count'], 1)

    def test_update_cannot_touch_stock(self):
        self.client.force_authenticate(self.admin)
        response = self.client.put(f'/api/inventory/{self.item.pk}/', {'availableStock': 99}, format='json')
        self.assertEqual(response.status_code, 400)

        response = self.client.put(f'/api/inventory/{self.item.pk}/', {'minStockLevel': 12}, format='json')
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()['data']['status'], 'Low')

        response = self.client.put(f'/api/inventory/{self.item.pk}/', {}, format='json')
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()['error'], 'No fields to update')

    def test_stock_in_and_out(self):
        self.client.force_authenticate(self.storekeeper)
        response = self.client.post(f'/api/inventory/{self.item.pk}/stock-in/', {
            'quantity': 5, 'billNo': 'B-1', 'supplierName': 'Bosch', 'unitPrice': '190.00',
        }, format='json')
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()['data']['availableStock'], 15)

        response = self.client.post(f'/api/inventory/{self.item.pk}/stock-out/', {'quantity': 20}, format='json')
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()['error'], 'Insufficient stock for Nozzle DLLA. Available: 15, needed: 20')

        response = self.client.post(f'/api/inventory/{self.item.pk}/stock-out/', {'quantity': 0}, format='json')
        self.assertEqual(response.status_code, 400)

        response = self.client.post(f'/api/inventory/{self.item.pk}/stock-out/', {'quantity': 3}, format='json')
        self.assertEqual(response.json()['data']['availableStock'], 12)

        body = self.client.get(f'/api/inventory/{self.item.pk}/transactions/').json()
        self.assertEqual(body['count'], 2)
        self.assertEqual(body['data'][0]['transactionType'], 'Stock Out')

    def test_activity(self):
        job_card = JobCardStateMachine.create({
            'customer_name': 'Ravi', 'vehicle_type': 'Truck', 'job_type': 'Injector', 'brand': 'Bosch',
        })
        MaterialsLedger.add_material(job_card.pk, inventory_item_id=self.item.pk, quantity=2)

        self.client.force_authenticate(self.admin)
        data = self.client.get(f'/api/inventory/{self.item.pk}/activity/').json()['data']
        self.assertEqual(data['summary']['totalSold'], 2)
        self.assertEqual(data['summary']['availableStock'], 8)
        self.assertIsNone(data['summary']['lastPurchase'])
        self.assertEqual(data['activities'][0]['activityType'], ItemActivity.JOB_USAGE)
        self.assertEqual(data['activities'][0]['referenceNo'], job_card.job_no)

    def test_activity_export(self):
        self.client.force_authenticate(self.admin)
        self.client.post(f'/api/inventory/{self.item.pk}/stock-in/', {'quantity': 5}, format='json')
        response = self.client.get(f'/api/inventory/{self.item.pk}/activity/export/')
        self.assertEqual(response.status_code, 200)
        self.assertIn('item_activity_NZ-1.xlsx', response['Content-Disposition'])

        sheet = load_workbook(BytesIO(response.content)).active
        self.assertEqual(sheet['A3'].value, 'Date')
        self.assertEqual(sheet['B4'].value, ItemActivity.PURCHASE)
        self.assertEqual(sheet['C4'].value, 5)

    def test_barcode_png(self):
        self.client.force_authenticate(self.storekeeper)
        response = self.client.get(f'/api/inventory/{self.item.pk}/barcode/')
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response['Content-Type'], 'image/png')
        self.assertTrue(response.content.startswith(b'\x89PNG'))

    def test_delete(self):
        self.client.force_authenticate(self.admin)
        response = self.client.delete(f'/api/inventory/{self.item.pk}/')
        self.assertEqual(response.status_code, 200)
        self.assertFalse(InventoryItem.objects.exists())

    def test_delete_with_history_is_refused(self):
        self.client.force_authenticate(self.admin)
        self.client.post(f'/api/inventory/{self.item.pk}/stock-out/', {'quantity': 1}, format='json')
        response = self.client.delete(f'/api/inventory/{self.item.pk}/')
        self.assertEqual(response.status_code, 400)
        self.assertTrue(InventoryItem.objects.filter(pk=self.item.pk).exists())

    def test_unknown_item(self):
        self.client.force_authenticate(self.admin)
        response = self.client.get('/api/inventory/999/')
        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.json(), {'success': False, 'error': 'Inventory item not found'})

    def test_categories(self):
        self.client.force_authenticate(self.storekeeper)
        response = self.client.post('/api/inventory/categories/', {'name': 'Nozzle'}, format='json')
        self.assertEqual(response.status_code, 201)
        response = self.client.post('/api/inventory/categories/', {'name': 'nozzle'}, format='json')
        self.assertEqual(response.status_code, 400)
        self.assertEqual(self.client.get('/api/inventory/categories/').json()['count'], 1)
        self.assertEqual(InventoryCategory.objects.count(), 1)


class InventoryItemResourceTest(TestCase):
    def test_export_includes_stock(self):
        InventoryItem.objects.create(part_name='Seal', part_code='S-1', category='Seals', available_stock=7)
        dataset = InventoryItemResource().export()
        self.assertEqual(dataset.dict[0]['part_code'], 'S-1')
        self.assertEqual(str(dataset.dict[0]['available_stock']), '7')
