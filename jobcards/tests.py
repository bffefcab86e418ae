# jobcards/tests.py

from decimal import Decimal

from django.core.exceptions import ValidationError
from django.test import TestCase
from rest_framework.test import APIClient

from accounts.models import User
from inventory.models import InventoryItem
from partners.models import Customer
from stock.models import StockTransaction, ItemActivity
from workshop_system.exceptions import NotFound, Conflict, InsufficientStock
from . import testing_data
from .models import JobCard, JobCardMaterial, TestingRecord
from .services import MaterialsLedger, JobCardStateMachine, resolve_technician


def make_item(name='Nozzle DLLA150', stock=10, minimum=5, **extra):
    extra.setdefault('sales_price', Decimal('250.00'))
    extra.setdefault('purchase_price', Decimal('180.00'))
    return InventoryItem.objects.create(
        part_name=name, category='Nozzle', available_stock=stock, min_stock_level=minimum, **extra
    )


def make_job_card(**extra):
    data = {'customer_name': 'Ravi Transport', 'customer_phone': '9000000001',
            'vehicle_type': 'Truck', 'job_type': 'Injector', 'brand': 'Bosch'}
    data.update(extra)
    return JobCardStateMachine.create(data)


class JobCardCreateTest(TestCase):
    def test_numbers_are_sequential(self):
        first = make_job_card()
        second = make_job_card()
        self.assertEqual(first.job_no, 'JC-001')
        self.assertEqual(second.job_no, 'JC-002')
        self.assertEqual(first.status, JobCard.STATUS_RECEIVED)

    def test_numbering_grows_past_padding(self):
        JobCard.objects.create(job_no='JC-999', vehicle_type='Car', job_type='Pump', brand='Denso')
        self.assertEqual(make_job_card().job_no, 'JC-1000')

    def test_customer_is_found_or_created(self):
        make_job_card()
        make_job_card()
        make_job_card(customer_phone='9000000002')
        self.assertEqual(Customer.objects.count(), 2)

    def test_technician_resolved_by_name(self):
        tech = User.objects.create_user(username='suresh', first_name='Suresh', last_name='Kumar', role=User.ROLE_TECHNICIAN)
        User.objects.create_user(username='store', role=User.ROLE_STOREKEEPER)
        self.assertEqual(resolve_technician('Suresh Kumar'), tech)
        self.assertEqual(resolve_technician('suresh'), tech)
        self.assertEqual(resolve_technician(str(tech.pk)), tech)
        self.assertIsNone(resolve_technician('store'))
        self.assertIsNone(resolve_technician(''))

        job_card = make_job_card(technician='Suresh Kumar')
        self.assertEqual(job_card.technician, tech)


class MaterialsLedgerTest(TestCase):
    def setUp(self):
        self.item = make_item()
        self.job_card = make_job_card()

    def test_scenario_add_deduct_remove(self):
        material = MaterialsLedger.add_material(self.job_card.pk, inventory_item_id=self.item.pk, quantity=4)
        self.item.refresh_from_db()
        self.assertEqual(self.item.available_stock, 6)
        self.assertEqual(self.item.status, 'OK')
        self.assertTrue(material.stock_deducted)
        self.assertEqual(material.unit_price, Decimal('250.00'))
        self.assertEqual(material.total_price, Decimal('1000.00'))
        self.assertEqual(material.total_cost, Decimal('720.00'))

        JobCardStateMachine.update_status(self.job_card.pk, 'Under Repair')
        self.item.refresh_from_db()
        self.assertEqual(self.item.available_stock, 6)

        MaterialsLedger.remove_material(self.job_card.pk, material.pk)
        self.item.refresh_from_db()
        self.assertEqual(self.item.available_stock, 10)
        self.assertFalse(JobCardMaterial.objects.exists())

    def test_add_records_stock_out_and_job_usage(self):
        MaterialsLedger.add_material(self.job_card.pk, inventory_item_id=self.item.pk, quantity=2)
        stock_transaction = StockTransaction.objects.get()
        self.assertEqual(stock_transaction.transaction_type, StockTransaction.STOCK_OUT)
        self.assertEqual((stock_transaction.previous_stock, stock_transaction.new_stock), (10, 8))
        self.assertEqual(stock_transaction.reference_no, self.job_card.job_no)

        activity = ItemActivity.objects.get()
        self.assertEqual(activity.activity_type, ItemActivity.JOB_USAGE)
        self.assertEqual(activity.reference_type, 'Job Card')
        self.assertEqual(activity.reference_id, self.job_card.pk)
        self.assertEqual(activity.customer_name, 'Ravi Transport')
        self.assertEqual(activity.total_price, Decimal('500.00'))

    def test_unit_price_falls_back_to_unit_price(self):
        item = make_item(name='Seal kit', sales_price=Decimal('0'), unit_price=Decimal('40.00'))
        material = MaterialsLedger.add_material(self.job_card.pk, inventory_item_id=item.pk, quantity=1)
        self.assertEqual(material.unit_price, Decimal('40.00'))

    def test_free_text_material_leaves_inventory_alone(self):
        material = MaterialsLedger.add_material(
            self.job_card.pk, material_name='Diesel for flushing', quantity=2, unit_price=Decimal('95.50'))
        self.assertFalse(material.stock_deducted)
        self.assertEqual(material.total_price, Decimal('191.00'))
        self.assertFalse(StockTransaction.objects.exists())

        MaterialsLedger.remove_material(self.job_card.pk, material.pk)
        self.item.refresh_from_db()
        self.assertEqual(self.item.available_stock, 10)

    def test_insufficient_stock_writes_nothing(self):
        with self.assertRaises(InsufficientStock) as ctx:
            MaterialsLedger.add_material(self.job_card.pk, inventory_item_id=self.item.pk, quantity=11)
        self.assertEqual(str(ctx.exception), 'Insufficient stock for Nozzle DLLA150. Available: 10, needed: 11')
        self.item.refresh_from_db()
        self.assertEqual(self.item.available_stock, 10)
        self.assertFalse(JobCardMaterial.objects.exists())
        self.assertFalse(StockTransaction.objects.exists())

    def test_invalid_quantity(self):
        for quantity in (0, -1, 1.5, None, True):
            with self.assertRaises(ValidationError):
                MaterialsLedger.add_material(self.job_card.pk, inventory_item_id=self.item.pk, quantity=quantity)

    def test_unknown_job_card(self):
        with self.assertRaises(NotFound):
            MaterialsLedger.add_material(9999, inventory_item_id=self.item.pk, quantity=1)

    def test_remove_material_of_other_job_card(self):
        other = make_job_card()
        material = MaterialsLedger.add_material(other.pk, inventory_item_id=self.item.pk, quantity=1)
        with self.assertRaises(NotFound):
            MaterialsLedger.remove_material(self.job_card.pk, material.pk)

    def test_removing_undeducted_line_keeps_stock(self):
        material = MaterialsLedger.add_material(
            self.job_card.pk, inventory_item_id=self.item.pk, quantity=3, defer_deduction=True)
        self.assertFalse(material.stock_deducted)
        MaterialsLedger.remove_material(self.job_card.pk, material.pk)
        self.item.refresh_from_db()
        self.assertEqual(self.item.available_stock, 10)
        self.assertFalse(StockTransaction.objects.exists())


class DeductionSweepTest(TestCase):
    def setUp(self):
        self.item = make_item(stock=10, minimum=2)
        self.job_card = make_job_card()

    def test_sweep_runs_exactly_once(self):
        MaterialsLedger.add_material(self.job_card.pk, inventory_item_id=self.item.pk, quantity=3, defer_deduction=True)
        self.item.refresh_from_db()
        self.assertEqual(self.item.available_stock, 10)

        JobCardStateMachine.update_status(self.job_card.pk, 'Under Repair')
        self.item.refresh_from_db()
        self.assertEqual(self.item.available_stock, 7)
        self.assertTrue(JobCardMaterial.objects.get().stock_deducted)

        JobCardStateMachine.update_status(self.job_card.pk, 'Under Repair')
        JobCardStateMachine.update_status(self.job_card.pk, 'Testing')
        JobCardStateMachine.update_status(self.job_card.pk, 'Under Repair')
        self.item.refresh_from_db()
        self.assertEqual(self.item.available_stock, 7)
        self.assertEqual(ItemActivity.objects.filter(activity_type=ItemActivity.JOB_USAGE).count(), 1)

    def test_reentering_only_sweeps_new_lines(self):
        JobCardStateMachine.update_status(self.job_card.pk, 'Under Repair')
        JobCardStateMachine.update_status(self.job_card.pk, 'Testing')
        MaterialsLedger.add_material(self.job_card.pk, inventory_item_id=self.item.pk, quantity=2, defer_deduction=True)
        JobCardStateMachine.update_status(self.job_card.pk, 'Under Repair')
        self.item.refresh_from_db()
        self.assertEqual(self.item.available_stock, 8)

    def test_defer_is_ignored_once_under_repair(self):
        JobCardStateMachine.update_status(self.job_card.pk, 'Under Repair')
        material = MaterialsLedger.add_material(
            self.job_card.pk, inventory_item_id=self.item.pk, quantity=1, defer_deduction=True)
        self.assertTrue(material.stock_deducted)

    def test_shortage_rolls_back_whole_sweep(self):
        item = make_item(name='Plunger', stock=3, minimum=0)
        MaterialsLedger.add_material(self.job_card.pk, inventory_item_id=item.pk, quantity=2, defer_deduction=True)
        MaterialsLedger.add_material(self.job_card.pk, inventory_item_id=item.pk, quantity=2, defer_deduction=True)

        with self.assertRaises(InsufficientStock):
            JobCardStateMachine.update_status(self.job_card.pk, 'Under Repair')

        item.refresh_from_db()
        self.job_card.refresh_from_db()
        self.assertEqual(item.available_stock, 3)
        self.assertEqual(self.job_card.status, JobCard.STATUS_RECEIVED)
        self.assertFalse(JobCardMaterial.objects.filter(stock_deducted=True).exists())
        self.assertFalse(StockTransaction.objects.exists())

    def test_sweep_takes_items_in_id_order(self):
        later = make_item(name='Plunger', stock=5, minimum=0)
        MaterialsLedger.add_material(self.job_card.pk, inventory_item_id=later.pk, quantity=1, defer_deduction=True)
        MaterialsLedger.add_material(self.job_card.pk, inventory_item_id=self.item.pk, quantity=1, defer_deduction=True)
        MaterialsLedger.add_material(self.job_card.pk, inventory_item_id=later.pk, quantity=2, defer_deduction=True)

        JobCardStateMachine.update_status(self.job_card.pk, 'Under Repair')

        swept = list(StockTransaction.objects.order_by('id').values_list('inventory_item_id', 'quantity'))
        self.assertEqual(swept, [(self.item.pk, 1), (later.pk, 1), (later.pk, 2)])

    def test_update_with_status_rolls_back_field_edits(self):
        item = make_item(name='Plunger', stock=1, minimum=0)
        MaterialsLedger.add_material(self.job_card.pk, inventory_item_id=item.pk, quantity=1, defer_deduction=True)
        MaterialsLedger.add_material(self.job_card.pk, inventory_item_id=item.pk, quantity=1, defer_deduction=True)

        with self.assertRaises(InsufficientStock):
            JobCardStateMachine.update(self.job_card.pk, {'brand': 'Delphi', 'status': 'Under Repair'})
        self.job_card.refresh_from_db()
        self.assertEqual(self.job_card.brand, 'Bosch')


class JobCardRollupTest(TestCase):
    def test_profit(self):
        item = make_item()
        job_card = make_job_card(final_amount=Decimal('2000.00'), labour_cost=Decimal('300.00'))
        MaterialsLedger.add_material(job_card.pk, inventory_item_id=item.pk, quantity=2)
        MaterialsLedger.add_material(job_card.pk, material_name='Cleaning', quantity=1, unit_price=Decimal('50'))

        job_card = JobCard.objects.get(pk=job_card.pk)
        self.assertEqual(job_card.materials_count, 2)
        self.assertEqual(job_card.materials_amount, Decimal('550.00'))
        self.assertEqual(job_card.materials_cost, Decimal('360.00'))
        self.assertEqual(job_card.profit, Decimal('1340.00'))


class JobCardDeleteTest(TestCase):
    def test_delete_restores_deducted_stock(self):
        item = make_item()
        job_card = make_job_card()
        MaterialsLedger.add_material(job_card.pk, inventory_item_id=item.pk, quantity=4)
        JobCardStateMachine.delete(job_card.pk)
        item.refresh_from_db()
        self.assertEqual(item.available_stock, 10)
        self.assertFalse(JobCard.objects.exists())

    def test_delete_refused_with_testing_records(self):
        job_card = make_job_card()
        TestingRecord.objects.create(job_card=job_card)
        with self.assertRaises(Conflict):
            JobCardStateMachine.delete(job_card.pk)
        self.assertTrue(JobCard.objects.filter(pk=job_card.pk).exists())

    def test_delete_unknown(self):
        with self.assertRaises(NotFound):
            JobCardStateMachine.delete(12345)


class TestingDataTest(TestCase):
    def test_structured_payload(self):
        normalized = testing_data.normalize({
            'beforeData': {'finalResult': {'passFail': 'Pass'}, 'readings': [1, 2]},
            'afterData': '{"result": {"passFail": "Pass"}}',
        })
        self.assertEqual(normalized['before']['version'], testing_data.STRUCTURED)
        self.assertEqual(testing_data.pass_fail(normalized['before']), 'Pass')
        self.assertEqual(testing_data.pass_fail(normalized['after']), 'Pass')
        self.assertEqual(testing_data.schema_version(normalized), 2)

    def test_legacy_payload(self):
        normalized = testing_data.normalize({
            'beforeRepair': {'pressure': '180', 'leak': 'Yes', 'passFail': 'Fail'},
            'injectorParams': '{"pilotInjection": "2.1", "leakTest": ""}',
        })
        self.assertEqual(normalized['before']['version'], testing_data.LEGACY)
        self.assertIsNone(normalized['after'])
        self.assertEqual(testing_data.schema_version(normalized), 1)

        record = testing_data.apply_to_record(TestingRecord(), normalized)
        self.assertEqual(record.before_pressure, '180')
        self.assertEqual(record.pilot_injection, '2.1')
        self.assertEqual(record.leak_test, 'Fail')
        self.assertEqual(record.schema_version, 1)

    def test_approvals_make_it_structured(self):
        normalized = testing_data.normalize({'approvals': {'testedBy': 'Suresh'}})
        self.assertEqual(testing_data.schema_version(normalized), 2)

    def test_bad_json_is_ignored(self):
        self.assertIsNone(testing_data.parse_json_maybe('{not json'))
        self.assertIsNone(testing_data.parse_json_maybe('[1, 2]'))
        self.assertIsNone(testing_data.parse_json_maybe(42))

    def test_pass_fail_fallback(self):
        self.assertEqual(testing_data.pass_fail(None, 'Fail'), 'Fail')
        self.assertEqual(testing_data.pass_fail(testing_data.structured({}), 'Fail'), 'Fail')

    def test_from_record(self):
        record = TestingRecord(before_pressure='200', before_pass_fail='Pass', after_data={'passFail': 'Pass'})
        before = testing_data.from_record(record, 'before')
        self.assertEqual(before['version'], testing_data.LEGACY)
        self.assertEqual(before['legacy']['pressure'], '200')
        self.assertEqual(testing_data.from_record(record, 'after')['version'], testing_data.STRUCTURED)
        self.assertEqual(testing_data.repair_summary(record, 'after')['passFail'], 'Pass')


class JobCardApiTest(TestCase):
    def setUp(self):
        self.client = APIClient()
        self.admin = User.objects.create_user(username='admin', role=User.ROLE_ADMIN)
        self.tech = User.objects.create_user(username='suresh', first_name='Suresh', role=User.ROLE_TECHNICIAN)
        self.item = make_item()

    def create_job_card(self, **extra):
        payload = {'customerName': 'Ravi Transport', 'customerPhone': '9000000001',
                   'vehicleType': 'Truck', 'jobType': 'Injector', 'brand': 'Bosch'}
        payload.update(extra)
        return self.client.post('/api/job-cards/', payload, format='json')

    def test_create_requires_fields(self):
        self.client.force_authenticate(self.admin)
        response = self.client.post('/api/job-cards/', {'customerName': 'X'}, format='json')
        self.assertEqual(response.status_code, 400)
        body = response.json()
        self.assertFalse(body['success'])
        self.assertIn('vehicleType', body['error'])

    def test_create_list_and_filter(self):
        self.client.force_authenticate(self.admin)
        response = self.create_job_card(technician='suresh', finalAmount='1500.00')
        self.assertEqual(response.status_code, 201)
        data = response.json()['data']
        self.assertEqual(data['jobNumber'], 'JC-001')
        self.assertEqual(data['technician'], 'Suresh')
        self.assertEqual(data['customerName'], 'Ravi Transport')
        self.assertIn('profit', data)

        self.create_job_card(vehicleType='Car')
        self.assertEqual(self.client.get('/api/job-cards/').json()['count'], 2)
        self.assertEqual(self.client.get('/api/job-cards/', {'vehicleType': 'Car'}).json()['count'], 1)
        self.assertEqual(self.client.get('/api/job-cards/', {'technician': str(self.tech.pk)}).json()['count'], 1)
        self.assertEqual(self.client.get('/api/job-cards/', {'search': 'JC-002'}).json()['count'], 1)

    def test_costs_hidden_from_technicians(self):
        self.client.force_authenticate(self.tech)
        data = self.create_job_card().json()['data']
        self.assertNotIn('profit', data)
        self.assertNotIn('materialsCost', data)

    def test_partial_update_and_status_sweep(self):
        self.client.force_authenticate(self.admin)
        job_card_id = self.create_job_card().json()['data']['id']
        response = self.client.post(f'/api/job-cards/{job_card_id}/materials/', {
            'inventoryItemId': self.item.pk, 'quantity': 4, 'deferDeduction': True,
        }, format='json')
        self.assertEqual(response.status_code, 201)
        self.assertFalse(response.json()['data']['stockDeducted'])

        response = self.client.put(f'/api/job-cards/{job_card_id}/', {'status': 'Under Repair', 'vehicleNumber': 'KA01'}, format='json')
        self.assertEqual(response.status_code, 200)
        data = response.json()['data']
        self.assertEqual(data['status'], 'Under Repair')
        self.assertEqual(data['vehicleNumber'], 'KA01')
        self.assertEqual(data['brand'], 'Bosch')
        self.item.refresh_from_db()
        self.assertEqual(self.item.available_stock, 6)

    def test_detail_embeds_materials(self):
        self.client.force_authenticate(self.admin)
        job_card_id = self.create_job_card().json()['data']['id']
        self.client.post(f'/api/job-cards/{job_card_id}/materials/', {
            'inventoryItemId': self.item.pk, 'quantity': 2,
        }, format='json')
        self.client.post(f'/api/job-cards/{job_card_id}/materials/', {
            'materialName': 'Cleaning', 'quantity': 1, 'unitPrice': '50.00',
        }, format='json')

        data = self.client.get(f'/api/job-cards/{job_card_id}/').json()['data']
        self.assertEqual(data['materialsCount'], 2)
        self.assertEqual([m['materialName'] for m in data['materials']], ['Cleaning', 'Nozzle DLLA150'])
        self.assertEqual(data['materials'][1]['unitCost'], '180.00')
        self.assertNotIn('materials', self.client.get('/api/job-cards/').json()['data'][0])

        self.client.force_authenticate(self.tech)
        data = self.client.get(f'/api/job-cards/{job_card_id}/').json()['data']
        self.assertEqual(len(data['materials']), 2)
        self.assertNotIn('unitCost', data['materials'][1])

    def test_empty_update(self):
        self.client.force_authenticate(self.admin)
        job_card_id = self.create_job_card().json()['data']['id']
        response = self.client.put(f'/api/job-cards/{job_card_id}/', {}, format='json')
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()['error'], 'No fields to update')

    def test_sweep_failure_maps_to_400(self):
        self.client.force_authenticate(self.admin)
        item = make_item(name='Plunger', stock=3, minimum=0)
        job_card_id = self.create_job_card().json()['data']['id']
        for _ in range(2):
            self.client.post(f'/api/job-cards/{job_card_id}/materials/', {
                'inventoryItemId': item.pk, 'quantity': 2, 'deferDeduction': True,
            }, format='json')

        response = self.client.put(f'/api/job-cards/{job_card_id}/', {'status': 'Under Repair'}, format='json')
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json(), {
            'success': False,
            'error': 'Insufficient stock for Plunger. Available: 1, needed: 2',
        })
        item.refresh_from_db()
        self.assertEqual(item.available_stock, 3)
        self.assertEqual(JobCard.objects.get(pk=job_card_id).status, 'Received')

    def test_materials_list_and_remove(self):
        self.client.force_authenticate(self.admin)
        job_card_id = self.create_job_card().json()['data']['id']
        material_id = self.client.post(f'/api/job-cards/{job_card_id}/materials/', {
            'inventoryItemId': self.item.pk, 'quantity': 2,
        }, format='json').json()['data']['id']

        body = self.client.get(f'/api/job-cards/{job_card_id}/materials/').json()
        self.assertEqual(body['count'], 1)
        self.assertEqual(body['data'][0]['availableStock'], 8)

        response = self.client.delete(f'/api/job-cards/{job_card_id}/materials/{material_id}/')
        self.assertEqual(response.status_code, 200)
        self.item.refresh_from_db()
        self.assertEqual(self.item.available_stock, 10)

        response = self.client.delete(f'/api/job-cards/{job_card_id}/materials/{material_id}/')
        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.json()['error'], 'Material not found')

    def test_material_needs_item_or_name(self):
        self.client.force_authenticate(self.admin)
        job_card_id = self.create_job_card().json()['data']['id']
        response = self.client.post(f'/api/job-cards/{job_card_id}/materials/', {'quantity': 1}, format='json')
        self.assertEqual(response.status_code, 400)

    def test_pdf(self):
        self.client.force_authenticate(self.admin)
        job_card_id = self.create_job_card(description='Starting trouble').json()['data']['id']
        MaterialsLedger.add_material(job_card_id, inventory_item_id=self.item.pk, quantity=1)
        response = self.client.get(f'/api/job-cards/{job_card_id}/pdf/')
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response['Content-Type'], 'application/pdf')
        self.assertTrue(response.content.startswith(b'%PDF'))

    def test_delete_with_testing_record_is_refused(self):
        self.client.force_authenticate(self.admin)
        job_card_id = self.create_job_card().json()['data']['id']
        TestingRecord.objects.create(job_card_id=job_card_id)
        response = self.client.delete(f'/api/job-cards/{job_card_id}/')
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()['error'], 'Cannot delete job card with existing testing records')

    def test_unknown_job_card(self):
        self.client.force_authenticate(self.admin)
        response = self.client.get('/api/job-cards/999/')
        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.json(), {'success': False, 'error': 'Job card not found'})


class TestingRecordApiTest(TestCase):
    def setUp(self):
        self.client = APIClient()
        self.tech = User.objects.create_user(username='suresh', role=User.ROLE_TECHNICIAN)
        self.other_tech = User.objects.create_user(username='mahesh', role=User.ROLE_TECHNICIAN)
        self.own_card = make_job_card(technician=self.tech.pk)
        self.other_card = make_job_card(technician=self.other_tech.pk)

    def test_create_structured_by_job_number(self):
        self.client.force_authenticate(self.tech)
        response = self.client.post('/api/testing-records/', {
            'jobCardNumber': self.own_card.job_no,
            'beforeData': {'finalResult': {'passFail': 'Fail'}},
            'afterData': {'finalResult': {'passFail': 'Pass'}},
            'approvals': {'testedBy': 'Suresh', 'approvalDate': '2024-03-01'},
            'categoryType': 'Common Rail',
        }, format='json')
        self.assertEqual(response.status_code, 201)
        data = response.json()['data']
        self.assertEqual(data['schemaVersion'], 2)
        self.assertEqual(data['afterRepair']['passFail'], 'Pass')
        self.assertEqual(data['approvals']['testedBy'], 'Suresh')
        self.assertEqual(data['approvals']['approvalDate'], '2024-03-01')
        self.assertEqual(data['jobCardNumber'], self.own_card.job_no)

    def test_create_legacy(self):
        self.client.force_authenticate(self.tech)
        response = self.client.post('/api/testing-records/', {
            'jobCardId': self.own_card.pk,
            'beforeRepair': {'pressure': '150', 'passFail': 'Fail'},
            'afterRepair': {'pressure': '200', 'passFail': 'Pass'},
            'injectorParams': {'pilotInjection': '1.8', 'leakTest': 'Pass'},
        }, format='json')
        self.assertEqual(response.status_code, 201)
        record = TestingRecord.objects.get()
        self.assertEqual(record.schema_version, 1)
        self.assertEqual(record.after_pass_fail, 'Pass')
        self.assertEqual(record.leak_test, 'Pass')

    def test_technician_cannot_touch_other_cards(self):
        self.client.force_authenticate(self.tech)
        response = self.client.post('/api/testing-records/', {'jobCardId': self.other_card.pk}, format='json')
        self.assertEqual(response.status_code, 403)
        self.assertFalse(response.json()['success'])

        record = TestingRecord.objects.create(job_card=self.other_card)
        response = self.client.put(f'/api/testing-records/{record.pk}/', {'categoryType': 'X'}, format='json')
        self.assertEqual(response.status_code, 403)

    def test_technician_lists_own_records(self):
        TestingRecord.objects.create(job_card=self.own_card)
        TestingRecord.objects.create(job_card=self.other_card)
        self.client.force_authenticate(self.tech)
        self.assertEqual(self.client.get('/api/testing-records/').json()['count'], 1)

        admin = User.objects.create_user(username='boss', role=User.ROLE_ADMIN)
        self.client.force_authenticate(admin)
        self.assertEqual(self.client.get('/api/testing-records/').json()['count'], 2)
        self.assertEqual(
            self.client.get('/api/testing-records/', {'jobCardId': self.own_card.pk}).json()['count'], 1)

    def test_update_and_delete(self):
        record = TestingRecord.objects.create(job_card=self.own_card)
        self.client.force_authenticate(self.tech)
        response = self.client.put(f'/api/testing-records/{record.pk}/', {
            'afterData': {'passFail': 'Pass'},
        }, format='json')
        self.assertEqual(response.status_code, 200)
        record.refresh_from_db()
        self.assertEqual(record.after_pass_fail, 'Pass')
        self.assertEqual(record.schema_version, 2)

        response = self.client.delete(f'/api/testing-records/{record.pk}/')
        self.assertEqual(response.status_code, 200)
        self.assertFalse(TestingRecord.objects.exists())

    def test_missing_job_card(self):
        self.client.force_authenticate(self.tech)
        response = self.client.post('/api/testing-records/', {}, format='json')
        self.assertEqual(response.status_code, 400)
        response = self.client.post('/api/testing-records/', {'jobCardNumber': 'JC-404'}, format='json')
        self.assertEqual(response.status_code, 404)
