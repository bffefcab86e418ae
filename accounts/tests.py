# accounts/tests.py

from django.test import TestCase
from rest_framework.authtoken.models import Token
from rest_framework.test import APIClient

from .models import User
from .permissions import has_role, can_see_purchase_prices, is_restricted_technician


class UserModelTest(TestCase):
    def test_default_role_is_technician(self):
        user = User.objects.create_user(username="tech1", password="s3cret-pass")
        self.assertEqual(user.role, User.ROLE_TECHNICIAN)
        self.assertTrue(user.login_access)
        self.assertTrue(user.is_technician)
        self.assertEqual(str(user), "tech1")

    def test_display_name_prefers_full_name(self):
        user = User.objects.create_user(username="rk", first_name="Ravi", last_name="Kumar")
        self.assertEqual(user.display_name, "Ravi Kumar")
        bare = User.objects.create_user(username="bare")
        self.assertEqual(bare.display_name, "bare")


class RoleHelpersTest(TestCase):
    def setUp(self):
        self.admin = User.objects.create_user(username="admin1", role=User.ROLE_ADMIN)
        self.tech = User.objects.create_user(username="tech1", role=User.ROLE_TECHNICIAN)
        self.store = User.objects.create_user(username="store1", role=User.ROLE_STOREKEEPER)

    def test_has_role(self):
        self.assertTrue(has_role(self.admin, 'admin'))
        self.assertFalse(has_role(self.tech, 'admin', 'storekeeper'))
        self.assertTrue(has_role(self.store, 'admin', 'storekeeper'))

    def test_purchase_prices_only_for_admin(self):
        self.assertTrue(can_see_purchase_prices(self.admin))
        self.assertFalse(can_see_purchase_prices(self.store))

    def test_restricted_technician(self):
        self.assertTrue(is_restricted_technician(self.tech))
        self.assertFalse(is_restricted_technician(self.admin))


class AuthApiTest(TestCase):
    def setUp(self):
        self.client = APIClient()
        self.user = User.objects.create_user(username="store1", password="s3cret-pass", role=User.ROLE_STOREKEEPER)

    def test_login_returns_token_and_role(self):
        response = self.client.post('/api/auth/login/', {'username': 'store1', 'password': 's3cret-pass'}, format='json')
        self.assertEqual(response.status_code, 200)
        body = response.json()
        self.assertTrue(body['success'])
        self.assertEqual(body['data']['user']['role'], 'storekeeper')
        self.assertEqual(body['data']['token'], Token.objects.get(user=self.user).key)

    def test_login_with_wrong_password(self):
        response = self.client.post('/api/auth/login/', {'username': 'store1', 'password': 'nope'}, format='json')
        self.assertEqual(response.status_code, 401)
        self.assertFalse(response.json()['success'])

    def test_login_refused_without_login_access(self):
        self.user.login_access = False
        self.user.save()
        response = self.client.post('/api/auth/login/', {'username': 'store1', 'password': 's3cret-pass'}, format='json')
        self.assertEqual(response.status_code, 401)

    def test_token_rejected_after_login_access_revoked(self):
        token = Token.objects.create(user=self.user)
        self.user.login_access = False
        self.user.save()
        self.client.credentials(HTTP_AUTHORIZATION=f"Token {token.key}")
        response = self.client.get('/api/auth/me/')
        self.assertEqual(response.status_code, 401)
        self.assertFalse(response.json()['success'])

    def test_me_with_token(self):
        token = Token.objects.create(user=self.user)
        self.client.credentials(HTTP_AUTHORIZATION=f"Token {token.key}")
        response = self.client.get('/api/auth/me/')
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()['data']['username'], 'store1')

    def test_me_requires_authentication(self):
        response = self.client.get('/api/auth/me/')
        self.assertEqual(response.status_code, 401)
        self.assertEqual(response.json(), {'success': False, 'error': 'Authentication credentials were not provided.'})


class HealthCheckTest(TestCase):
    def test_health_is_public(self):
        response = APIClient().get('/health/')
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()['database'], 'ok')
