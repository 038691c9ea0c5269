"""Delivery settings tests."""

from django.contrib.auth import get_user_model
from django.test import TestCase, override_settings
from rest_framework.test import APIClient

from delivery.models import DeliverySettings


@override_settings(ALLOWED_HOSTS=['testserver', 'localhost', '127.0.0.1'])
class DeliverySettingsTests(TestCase):

	@classmethod
	def setUpTestData(cls):
		User = get_user_model()
		cls.admin = User.objects.create_user(
			username='admin_user', email='admin@example.com', password='12345678', role='admin',
		)
		cls.customer = User.objects.create_user(
			username='customer', email='customer@example.com', password='12345678',
		)

	def setUp(self):
		self.client = APIClient()

	def test_get_creates_default_settings(self):
		self.assertIsNone(DeliverySettings.load())
		res = self.client.get('/api/delivery/')
		self.assertEqual(res.status_code, 200)
		self.assertEqual(res.json()['deliveryMethods'], [])
		self.assertEqual(res.json()['freeDeliveryThreshold'], 100.0)
		self.assertEqual(DeliverySettings.objects.count(), 1)

	def test_admin_post_normalizes_methods(self):
		self.client.force_authenticate(user=self.admin)
		payload = {
			'deliveryMethods': [
				{'name': {'en': 'Courier'}, 'cost': '60'},
				{'name': {'en': 'Pickup', 'zh-TW': '自取'}},
			],
			'freeDeliveryThreshold': 1500,
		}
		res = self.client.post('/api/delivery/', payload, format='json')
		self.assertEqual(res.status_code, 200)

		settings = DeliverySettings.load()
		self.assertEqual(settings.delivery_methods[0], {'cost': 60, 'name': {'en': 'Courier', 'zh-TW': ''}})
		self.assertEqual(settings.delivery_methods[1]['cost'], 0)
		self.assertEqual(settings.method_at(1)['name']['zh-TW'], '自取')
		self.assertIsNone(settings.method_at(2))
		self.assertIsNone(settings.method_at(-1))

	def test_negative_cost_rejected(self):
		self.client.force_authenticate(user=self.admin)
		payload = {'deliveryMethods': [{'name': {'en': 'Bad'}, 'cost': -5}]}
		res = self.client.post('/api/delivery/', payload, format='json')
		self.assertEqual(res.status_code, 400)

	def test_customer_cannot_change_settings(self):
		self.client.force_authenticate(user=self.customer)
		res = self.client.post('/api/delivery/', {'deliveryMethods': []}, format='json')
		self.assertEqual(res.status_code, 403)
