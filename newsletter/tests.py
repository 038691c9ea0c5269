"""Newsletter tests."""

from django.contrib.auth import get_user_model
from django.test import TestCase, override_settings
from rest_framework.test import APIClient

from newsletter.models import Subscriber


@override_settings(ALLOWED_HOSTS=['testserver', 'localhost', '127.0.0.1'])
class NewsletterApiTests(TestCase):

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

	def subscribe(self, email, **extra):
		return self.client.post('/api/newsletter/subscribe/', {'email': email, **extra}, format='json')

	def test_subscribe_stores_lowercase_email(self):
		res = self.subscribe(' Reader@Example.com ', source='footer')
		self.assertEqual(res.status_code, 201)
		subscriber = Subscriber.objects.get()
		self.assertEqual(subscriber.email, 'reader@example.com')
		self.assertEqual(subscriber.source, 'footer')
		self.assertEqual(subscriber.preferences, {'marketing': True, 'updates': True, 'promotions': True})

	def test_invalid_email(self):
		res = self.subscribe('not-an-email')
		self.assertEqual(res.status_code, 400)
		self.assertEqual(res.json(), {'error': 'Invalid email address'})

	def test_active_duplicate_rejected(self):
		self.subscribe('reader@example.com')
		res = self.subscribe('READER@example.com')
		self.assertEqual(res.status_code, 400)
		self.assertEqual(res.json()['error'], 'Email is already subscribed')

	def test_inactive_subscriber_reactivated(self):
		Subscriber.objects.create(email='reader@example.com', is_active=False)
		res = self.subscribe('reader@example.com')
		self.assertEqual(res.status_code, 200)
		subscriber = Subscriber.objects.get()
		self.assertTrue(subscriber.is_active)
		self.assertIsNone(subscriber.unsubscribed_at)

	def test_admin_manages_subscribers(self):
		subscriber = Subscriber.objects.create(email='reader@example.com')

		self.client.force_authenticate(user=self.customer)
		self.assertEqual(self.client.get('/api/newsletter/subscribers/').status_code, 403)

		self.client.force_authenticate(user=self.admin)
		res = self.client.get('/api/newsletter/subscribers/')
		self.assertEqual([row['email'] for row in res.json()], ['reader@example.com'])

		res = self.client.patch(f'/api/newsletter/subscribers/{subscriber.pk}/', {'isActive': False}, format='json')
		self.assertEqual(res.status_code, 200)
		self.assertFalse(res.json()['isActive'])
		subscriber.refresh_from_db()
		self.assertIsNotNone(subscriber.unsubscribed_at)

		res = self.client.delete(f'/api/newsletter/subscribers/{subscriber.pk}/')
		self.assertEqual(res.json(), {'success': True})
		self.assertFalse(Subscriber.objects.exists())

	def test_unknown_subscriber(self):
		self.client.force_authenticate(user=self.admin)
		res = self.client.delete('/api/newsletter/subscribers/999/')
		self.assertEqual(res.status_code, 404)
