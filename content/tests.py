"""Features section and icon resolution tests."""

from django.contrib.auth import get_user_model
from django.test import SimpleTestCase, TestCase, override_settings
from rest_framework.test import APIClient

from content.models import FeatureItem
from core.icons import IconSource, icon_payload, resolve_icon


class IconSourceTests(SimpleTestCase):

	def test_kinds(self):
		self.assertEqual(resolve_icon('<svg viewBox="0 0 10 10"></svg>').kind, 'svg')
		self.assertEqual(resolve_icon('https://cdn.example.com/a.png'), IconSource('url', 'https://cdn.example.com/a.png'))
		self.assertEqual(resolve_icon('/static/truck.svg').kind, 'url')
		self.assertEqual(resolve_icon('truck-fast').kind, 'named')
		self.assertEqual(resolve_icon('🚚').kind, 'text')
		self.assertIsNone(resolve_icon('   '))

	def test_payload_keys(self):
		self.assertEqual(icon_payload('truck'), {'kind': 'named', 'id': 'truck'})
		self.assertEqual(icon_payload('/a.png'), {'kind': 'url', 'href': '/a.png'})
		self.assertEqual(icon_payload('<svg/>'), {'kind': 'svg', 'markup': '<svg/>'})
		self.assertEqual(icon_payload('2 days'), {'kind': 'text', 'value': '2 days'})
		self.assertIsNone(icon_payload(None))


@override_settings(ALLOWED_HOSTS=['testserver', 'localhost', '127.0.0.1'])
class FeaturesSectionApiTests(TestCase):

	@classmethod
	def setUpTestData(cls):
		User = get_user_model()
		cls.admin = User.objects.create_user(
			username='admin_user', email='admin@example.com', password='12345678', role='admin',
		)
		cls.customer = User.objects.create_user(
			username='customer', email='customer@example.com', password='12345678',
		)
		cls.second = FeatureItem.objects.create(
			icon='truck', order=2,
			title={'en': 'Fast delivery', 'zh-TW': '快速配送'},
			description={'en': 'Two days', 'zh-TW': '兩天'},
		)
		cls.first = FeatureItem.objects.create(
			icon='https://cdn.example.com/shield.png', order=1,
			title={'en': 'Warranty', 'zh-TW': '保固'},
			description={'en': 'One year', 'zh-TW': '一年'},
		)

	def setUp(self):
		self.client = APIClient()

	def test_public_list_is_ordered_and_resolved(self):
		res = self.client.get('/api/features-section/')
		self.assertEqual(res.status_code, 200)
		body = res.json()
		self.assertEqual([item['id'] for item in body], [self.first.pk, self.second.pk])
		self.assertEqual(body[0]['icon'], {'kind': 'url', 'href': 'https://cdn.example.com/shield.png'})
		self.assertEqual(body[1]['icon'], {'kind': 'named', 'id': 'truck'})

	def test_create_requires_admin(self):
		self.client.force_authenticate(user=self.customer)
		res = self.client.post('/api/features-section/', {'icon': 'x'}, format='json')
		self.assertEqual(res.status_code, 403)

	def test_create_validates_translations(self):
		self.client.force_authenticate(user=self.admin)
		res = self.client.post('/api/features-section/', {
			'icon': '<svg></svg>',
			'title': {'en': 'Support'},
			'description': {'en': '24/7', 'zh-TW': '全天候'},
		}, format='json')
		self.assertEqual(res.status_code, 400)
		self.assertIn('title', res.json()['details'])

	def test_create_update_delete(self):
		self.client.force_authenticate(user=self.admin)
		res = self.client.post('/api/features-section/', {
			'icon': '<svg></svg>',
			'title': {'en': 'Support', 'zh-TW': '客服'},
			'description': {'en': '24/7', 'zh-TW': '全天候'},
			'order': 3,
		}, format='json')
		self.assertEqual(res.status_code, 201)
		self.assertEqual(res.json()['icon']['kind'], 'svg')
		item_id = res.json()['id']

		res = self.client.put('/api/features-section/', {'id': item_id, 'icon': '🎧'}, format='json')
		self.assertEqual(res.status_code, 200)
		self.assertEqual(res.json()['icon'], {'kind': 'text', 'value': '🎧'})

		self.assertEqual(self.client.delete('/api/features-section/').status_code, 400)
		res = self.client.delete(f'/api/features-section/?id={item_id}')
		self.assertEqual(res.json(), {'success': True})
		self.assertEqual(self.client.delete(f'/api/features-section/?id={item_id}').status_code, 404)
