# partners/tests.py

from django.test import TestCase
from rest_framework.test import APIClient

from accounts.models import User
from .models import Customer


class CustomerModelTest(TestCase):
    def test_customer_creation(self):
        customer = Customer.objects.create(
            name="Test Customer",
            email="test@example.com",
            phone="1234567890",
            company="Test Transport",
            address="123 Test St, Test City"
        )
        self.assertEqual(customer.name, "Test Customer")
        self.assertEqual(customer.company, "Test Transport")
        self.assertEqual(str(customer), "Test Customer")
        self.assertEqual(Customer.objects.count(), 1)

    def test_find_or_create_reuses_name_and_phone(self):
        first = Customer.find_or_create("Ramesh", "9000000001")
        again = Customer.find_or_create("Ramesh", "9000000001")
        other = Customer.find_or_create("Ramesh", "9000000002")
        self.assertEqual(first.pk, again.pk)
        self.assertNotEqual(first.pk, other.pk)
        self.assertEqual(Customer.objects.count(), 2)

    def test_find_or_create_ignores_deleted_customers(self):
        deleted = Customer.objects.create(name="Gone", phone="1", is_deleted=True)
        customer = Customer.find_or_create("Gone", "1")
        self.assertNotEqual(customer.pk, deleted.pk)


class CustomerApiTest(TestCase):
    def setUp(self):
        self.client = APIClient()
        self.user = User.objects.create_user(username="tech1", role=User.ROLE_TECHNICIAN)
        self.client.force_authenticate(self.user)

    def test_create_and_list(self):
        response = self.client.post('/api/customers/', {'name': 'Anil', 'phone': '98765'}, format='json')
        self.assertEqual(response.status_code, 201)
        self.assertTrue(response.json()['success'])

        response = self.client.get('/api/customers/', {'search': 'ani'})
        body = response.json()
        self.assertEqual(body['count'], 1)
        self.assertEqual(body['data'][0]['name'], 'Anil')

    def test_duplicate_email_refused(self):
        Customer.objects.create(name="A", email="a@example.com")
        response = self.client.post('/api/customers/', {'name': 'B', 'email': 'A@example.com'}, format='json')
        self.assertEqual(response.status_code, 400)
        self.assertIn('email', response.json()['error'])

    def test_partial_update(self):
        customer = Customer.objects.create(name="Old Name", phone="1")
        response = self.client.put(f'/api/customers/{customer.pk}/', {'name': 'New Name'}, format='json')
        self.assertEqual(response.status_code, 200)
        customer.refresh_from_db()
        self.assertEqual(customer.name, "New Name")
        self.assertEqual(customer.phone, "1")

    def test_delete_is_soft(self):
        customer = Customer.objects.create(name="Delete Me")
        response = self.client.delete(f'/api/customers/{customer.pk}/')
        self.assertEqual(response.status_code, 200)
        self.assertEqual(Customer.active.count(), 0)
        self.assertEqual(Customer.objects.count(), 1)
        self.assertEqual(self.client.get(f'/api/customers/{customer.pk}/').status_code, 404)

    def test_missing_customer(self):
        response = self.client.get('/api/customers/999/')
        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.json(), {'success': False, 'error': 'Customer not found'})
