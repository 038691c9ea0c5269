"""Accounts app tests."""

from datetime import timedelta

from django.contrib.auth import get_user_model
from django.test import TestCase, override_settings
from django.utils import timezone
from rest_framework import serializers
from rest_framework.test import APIClient

from accounts.models import PaymentHistory
from accounts.serializers import normalize_phone


class NormalizePhoneTests(TestCase):

	def test_local_digits(self):
		self.assertEqual(normalize_phone('0912-345-678'), '0912345678')
		self.assertEqual(normalize_phone(''), '')

	def test_international_number(self):
		self.assertEqual(normalize_phone('+1 650-253-0000'), '16502530000')
		self.assertEqual(normalize_phone('001 650 253 0000'), '16502530000')

	def test_short_number_rejected(self):
		with self.assertRaises(serializers.ValidationError):
			normalize_phone('12345')


@override_settings(ALLOWED_HOSTS=['testserver', 'localhost', '127.0.0.1'])
class AuthApiTests(TestCase):

	@classmethod
	def setUpTestData(cls):
		User = get_user_model()
		cls.existing = User.objects.create_user(
			username='existing', email='existing@example.com', password='Str0ng-Passw0rd!',
		)

	def setUp(self):
		self.client = APIClient()

	def test_register_creates_user(self):
		res = self.client.post('/api/accounts/register/', {
			'username': 'new.user',
			'password': 'Str0ng-Passw0rd!',
			'email': 'New.User@Example.com',
			'name': 'New User',
			'phone': '0912 345 678',
		}, format='json')
		self.assertEqual(res.status_code, 201)
		self.assertNotIn('password', res.json())

		user = get_user_model().objects.get(username='new.user')
		self.assertEqual(user.email, 'new.user@example.com')
		self.assertEqual(user.phone, '0912345678')
		self.assertEqual(user.role, 'user')
		self.assertTrue(user.check_password('Str0ng-Passw0rd!'))

	def test_register_rejects_duplicate_email_and_weak_password(self):
		res = self.client.post('/api/accounts/register/', {
			'username': 'another',
			'password': '123',
			'email': 'EXISTING@example.com',
		}, format='json')
		self.assertEqual(res.status_code, 400)
		self.assertEqual(res.json()['error'], 'Validation error')
		self.assertIn('email', res.json()['details'])
		self.assertIn('password', res.json()['details'])

	def test_login_returns_token_pair(self):
		res = self.client.post('/api/accounts/login/', {
			'username': 'existing', 'password': 'Str0ng-Passw0rd!',
		}, format='json')
		self.assertEqual(res.status_code, 200)
		self.assertIn('access', res.json())
		self.assertIn('refresh', res.json())

		self.client.credentials(HTTP_AUTHORIZATION=f"Bearer {res.json()['access']}")
		me = self.client.get('/api/accounts/profile/me/')
		self.assertEqual(me.status_code, 200)
		self.assertEqual(me.json()['username'], 'existing')


@override_settings(ALLOWED_HOSTS=['testserver', 'localhost', '127.0.0.1'])
class ProfileApiTests(TestCase):

	@classmethod
	def setUpTestData(cls):
		User = get_user_model()
		cls.user = User.objects.create_user(
			username='customer', email='customer@example.com', password='12345678',
		)

	def setUp(self):
		self.client = APIClient()

	def test_profile_requires_authentication(self):
		self.assertEqual(self.client.get('/api/accounts/profile/me/').status_code, 401)

	def test_profile_update(self):
		self.client.force_authenticate(user=self.user)
		res = self.client.put('/api/accounts/profile/me/', {
			'name': 'Pat',
			'language': 'zh-TW',
			'address': {'en': '1 Main Street', 'coordinates': {'lat': 25.03, 'lng': 121.56}},
			'role': 'admin',
		}, format='json')
		self.assertEqual(res.status_code, 200)
		body = res.json()
		self.assertEqual(body['name'], 'Pat')
		self.assertEqual(body['language'], 'zh-TW')
		self.assertEqual(body['address']['zh-TW'], '')
		self.assertEqual(body['address']['coordinates']['lat'], 25.03)
		self.assertEqual(body['role'], 'user')
		self.assertFalse(body['admin'])
		self.assertEqual(body['notificationPreferences'], {'orderUpdates': True, 'promotions': True})

	def test_profile_rejects_unknown_language(self):
		self.client.force_authenticate(user=self.user)
		res = self.client.put('/api/accounts/profile/me/', {'language': 'fr'}, format='json')
		self.assertEqual(res.status_code, 400)


@override_settings(ALLOWED_HOSTS=['testserver', 'localhost', '127.0.0.1'])
class PeriodUserApiTests(TestCase):

	@classmethod
	def setUpTestData(cls):
		User = get_user_model()
		cls.admin = User.objects.create_user(
			username='admin_user', email='admin@example.com', password='12345678', role='admin',
		)
		cls.accountant = User.objects.create_user(
			username='accountant', email='accounting@example.com', password='12345678', role='accounting',
		)
		cls.period_user = User.objects.create_user(
			username='period_user', email='period@example.com', password='12345678',
			is_period_paid_user=True, payment_period='weekly',
		)
		cls.regular = User.objects.create_user(
			username='regular', email='regular@example.com', password='12345678',
		)
		now = timezone.now()
		PaymentHistory.objects.create(
			user=cls.period_user, period_start=now, period_end=now + timedelta(days=6), amount='80.00',
		)

	def setUp(self):
		self.client = APIClient()

	def test_list_is_admin_only(self):
		self.client.force_authenticate(user=self.accountant)
		self.assertEqual(self.client.get('/api/admin/period-users/').status_code, 403)

	def test_list_period_users(self):
		self.client.force_authenticate(user=self.admin)
		res = self.client.get('/api/admin/period-users/')
		self.assertEqual(res.status_code, 200)
		self.assertEqual([row['email'] for row in res.json()], ['period@example.com'])
		self.assertEqual(res.json()[0]['paymentHistory'][0]['amount'], 80.0)

		res = self.client.get('/api/admin/period-users/', {'all': 'true'})
		self.assertEqual(len(res.json()), 4)

	def test_enable_period_billing(self):
		self.client.force_authenticate(user=self.admin)
		res = self.client.put(
			f'/api/admin/period-users/{self.regular.pk}/',
			{'isPeriodPaidUser': True, 'paymentPeriod': 'monthly'},
			format='json',
		)
		self.assertEqual(res.status_code, 200)
		self.assertTrue(res.json()['success'])
		self.regular.refresh_from_db()
		self.assertTrue(self.regular.is_period_paid_user)
		self.assertEqual(self.regular.payment_period, 'monthly')

	def test_enable_requires_period(self):
		self.client.force_authenticate(user=self.admin)
		res = self.client.put(
			f'/api/admin/period-users/{self.regular.pk}/', {'isPeriodPaidUser': True}, format='json',
		)
		self.assertEqual(res.status_code, 400)
		self.assertIn('paymentPeriod', res.json()['details'])

	def test_disable_clears_period(self):
		self.client.force_authenticate(user=self.admin)
		res = self.client.put(
			f'/api/admin/period-users/{self.period_user.pk}/', {'isPeriodPaidUser': False}, format='json',
		)
		self.assertEqual(res.status_code, 200)
		self.period_user.refresh_from_db()
		self.assertIsNone(self.period_user.payment_period)


@override_settings(ALLOWED_HOSTS=['testserver', 'localhost', '127.0.0.1'])
class AdminUserApiTests(TestCase):

	@classmethod
	def setUpTestData(cls):
		User = get_user_model()
		cls.admin = User.objects.create_user(
			username='admin_user', email='admin@example.com', password='12345678', role='admin',
		)
		cls.logistics = User.objects.create_user(
			username='logistics', email='logistics@example.com', password='12345678', role='logistics',
		)
		cls.customer = User.objects.create_user(
			username='customer', email='customer@example.com', password='12345678', name='Pat',
		)

	def setUp(self):
		self.client = APIClient()
		self.client.force_authenticate(user=self.admin)

	def test_admin_only(self):
		self.client.force_authenticate(user=self.logistics)
		self.assertEqual(self.client.get('/api/admin/users/').status_code, 403)
		self.assertEqual(self.client.delete(f'/api/admin/users/{self.customer.pk}/').status_code, 403)

	def test_list_hides_passwords(self):
		res = self.client.get('/api/admin/users/')
		self.assertEqual(res.status_code, 200)
		users = res.json()['users']
		self.assertEqual(len(users), 3)
		self.assertTrue(all('password' not in row for row in users))

	def test_create_user(self):
		res = self.client.post('/api/admin/users/', {
			'name': 'Sam Accounts', 'email': 'Sam@Example.com', 'password': 'S3cure-pass!', 'role': 'accounting',
		}, format='json')
		self.assertEqual(res.status_code, 201)
		body = res.json()
		self.assertEqual(body['message'], 'User created successfully')
		self.assertEqual(body['user']['role'], 'accounting')
		self.assertNotIn('password', body['user'])

		user = get_user_model().objects.get(email='sam@example.com')
		self.assertTrue(user.check_password('S3cure-pass!'))
		self.assertTrue(user.is_back_office)

	def test_create_requires_fields_and_unique_email(self):
		res = self.client.post('/api/admin/users/', {'email': 'new@example.com'}, format='json')
		self.assertEqual(res.status_code, 400)
		self.assertEqual(res.json()['error'], 'Missing required fields')

		res = self.client.post('/api/admin/users/', {
			'name': 'Dup', 'email': 'CUSTOMER@example.com', 'password': 'S3cure-pass!',
		}, format='json')
		self.assertEqual(res.status_code, 409)
		self.assertEqual(res.json()['error'], 'User already exists')

	def test_change_role(self):
		res = self.client.patch(f'/api/admin/users/{self.customer.pk}/', {'role': 'logistics'}, format='json')
		self.assertEqual(res.status_code, 200)
		self.assertEqual(res.json()['role'], 'logistics')
		self.customer.refresh_from_db()
		self.assertTrue(self.customer.is_back_office)

		res = self.client.patch(f'/api/admin/users/{self.customer.pk}/', {'role': 'owner'}, format='json')
		self.assertEqual(res.status_code, 400)
		self.assertEqual(self.client.patch('/api/admin/users/999999/', {'role': 'user'}, format='json').status_code, 404)

	def test_delete_user(self):
		res = self.client.delete(f'/api/admin/users/{self.admin.pk}/')
		self.assertEqual(res.status_code, 400)
		self.assertEqual(res.json()['error'], 'Cannot delete your own account')

		res = self.client.delete(f'/api/admin/users/{self.customer.pk}/')
		self.assertEqual(res.json(), {'message': 'User deleted successfully'})
		self.assertFalse(get_user_model().objects.filter(pk=self.customer.pk).exists())

		res = self.client.delete(f'/api/admin/users/{self.customer.pk}/')
		self.assertEqual(res.status_code, 404)
		self.assertEqual(res.json()['error'], 'User not found')
