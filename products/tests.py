"""Products app tests."""

from io import StringIO

from django.contrib.auth import get_user_model
from django.core.cache import caches
from django.core.management import call_command
from django.test import TestCase, override_settings
from rest_framework.test import APIClient

from core.icons import IconSource, resolve_icon
from delivery.models import DeliverySettings
from products.cache import ProductCache
from products.models import Brand, Category, Product


@override_settings(ALLOWED_HOSTS=['testserver', 'localhost', '127.0.0.1'])
class ProductApiTests(TestCase):

	@classmethod
	def setUpTestData(cls):
		User = get_user_model()
		cls.admin = User.objects.create_user(
			username='admin_user',
			email='admin@example.com',
			password='12345678',
			role='admin',
		)
		cls.customer = User.objects.create_user(
			username='customer',
			email='customer@example.com',
			password='12345678',
		)
		cls.brand = Brand.objects.create(
			name='Acme',
			display_names={'en': 'Acme', 'zh-TW': '頂點'},
			icon='https://cdn.example.com/acme.png',
		)
		cls.other_brand = Brand.objects.create(name='Globex')
		cls.category = Category.objects.create(
			name='Tools',
			display_names={'en': 'Tools', 'zh-TW': '工具'},
			specifications=[
				{'key': 'weight', 'type': 'text', 'displayNames': {'en': 'Weight', 'zh-TW': '重量'}},
			],
		)
		cls.product = Product.objects.create(
			name='Hammer',
			display_names={'en': 'Hammer', 'zh-TW': '鐵鎚'},
			descriptions={'en': 'Hits nails', 'zh-TW': '敲釘子'},
			price='25.00',
			brand=cls.brand,
			category=cls.category,
			stock=5,
		)
		cls.draft = Product.objects.create(
			name='Prototype',
			price='99.00',
			brand=cls.brand,
			category=cls.category,
			draft=True,
		)

	def setUp(self):
		caches['default'].clear()
		self.client = APIClient()

	def test_slug_generated_from_name_with_suffix_on_collision(self):
		self.assertEqual(self.product.slug, 'hammer')
		other = Product.objects.create(name='Hammer', price='1.00', brand=self.brand, category=self.category)
		self.assertEqual(other.slug, 'hammer-1')

	def test_list_hides_drafts_and_localizes_names(self):
		res = self.client.get('/api/products/', {'language': 'zh-TW'})
		self.assertEqual(res.status_code, 200)
		names = [row['name'] for row in res.json()['results']]
		self.assertEqual(names, ['鐵鎚'])

	def test_detail_is_served_from_cache_until_skipped(self):
		res = self.client.get(f'/api/product/{self.product.id}/')
		self.assertEqual(res.status_code, 200)
		self.assertEqual(res.json()['product']['name'], 'Hammer')

		Product.objects.filter(pk=self.product.pk).update(price='30.00')

		cached = self.client.get(f'/api/product/{self.product.id}/')
		self.assertEqual(cached.json()['product']['price'], 25.0)

		fresh = self.client.get(f'/api/product/{self.product.id}/', {'skipCache': 'true'})
		self.assertEqual(fresh.json()['product']['price'], 30.0)

	def test_detail_resolves_language_from_cached_payload(self):
		self.client.get(f'/api/product/{self.product.id}/')
		res = self.client.get(f'/api/product/{self.product.id}/', {'language': 'zh-TW'})
		body = res.json()['product']
		self.assertEqual(body['name'], '鐵鎚')
		self.assertEqual(body['description'], '敲釘子')
		self.assertEqual(body['brand']['name'], '頂點')
		self.assertEqual(body['category']['specifications'][0]['label'], '重量')

	def test_detail_missing_product_returns_404(self):
		res = self.client.get('/api/product/999999/')
		self.assertEqual(res.status_code, 404)

	def test_update_invalidates_cached_detail(self):
		self.client.get(f'/api/product/{self.product.id}/')
		self.client.force_authenticate(user=self.admin)
		res = self.client.put(f'/api/product/{self.product.id}/', {'price': '40.00'}, format='json')
		self.assertEqual(res.status_code, 200)

		self.client.force_authenticate(user=None)
		res = self.client.get(f'/api/product/{self.product.id}/')
		self.assertEqual(res.json()['product']['price'], 40.0)

	def test_customer_cannot_update_product(self):
		self.client.force_authenticate(user=self.customer)
		res = self.client.put(f'/api/product/{self.product.id}/', {'price': '1.00'}, format='json')
		self.assertEqual(res.status_code, 403)

	def test_delete_removes_product(self):
		self.client.force_authenticate(user=self.admin)
		res = self.client.delete(f'/api/product/{self.draft.id}/')
		self.assertEqual(res.status_code, 200)
		self.assertFalse(Product.objects.filter(pk=self.draft.id).exists())

	def test_manage_get_seeds_specifications_from_category(self):
		self.client.force_authenticate(user=self.admin)
		res = self.client.get(f'/api/products/manage/{self.product.id}/')
		self.assertEqual(res.status_code, 200)
		specs = res.json()['product']['specifications']
		self.assertEqual(specs[0]['key'], 'weight')
		self.assertEqual(specs[0]['value'], {'en': '', 'zh-TW': ''})

	def test_manage_requires_authentication(self):
		res = self.client.get(f'/api/products/manage/{self.product.id}/')
		self.assertEqual(res.status_code, 401)

	def test_manage_put_reports_missing_fields(self):
		self.client.force_authenticate(user=self.admin)
		res = self.client.put(f'/api/products/manage/{self.product.id}/', {'name': 'Hammer'}, format='json')
		self.assertEqual(res.status_code, 400)
		self.assertEqual(res.data['error'], 'Missing required fields')
		self.assertTrue(res.data['details']['brand'])
		self.assertFalse(res.data['details']['name'])

	def test_manage_put_rejects_unknown_category(self):
		self.client.force_authenticate(user=self.admin)
		payload = {
			'name': 'Hammer',
			'displayNames': {'en': 'Hammer', 'zh-TW': '鐵鎚'},
			'brand': self.brand.id,
			'category': 999999,
		}
		res = self.client.put(f'/api/products/manage/{self.product.id}/', payload, format='json')
		self.assertEqual(res.status_code, 400)
		self.assertEqual(res.data['error'], 'Invalid category reference')

	def test_manage_put_with_unknown_brand_leaves_product_untouched(self):
		self.client.force_authenticate(user=self.admin)
		original_name = self.product.name
		payload = {
			'name': 'Renamed',
			'displayNames': {'en': 'Renamed', 'zh-TW': '改名'},
			'brand': {'id': 999999},
			'category': self.category.id,
		}
		res = self.client.put(f'/api/products/manage/{self.product.id}/', payload, format='json')
		self.assertEqual(res.status_code, 400)
		self.assertEqual(res.data['error'], 'Invalid brand reference')

		self.product.refresh_from_db()
		self.assertEqual(self.product.name, original_name)
		self.assertEqual(self.product.brand_id, self.brand.id)

	def test_manage_put_unknown_product_is_404(self):
		self.client.force_authenticate(user=self.admin)
		payload = {
			'name': 'Ghost',
			'displayNames': {'en': 'Ghost', 'zh-TW': '幽靈'},
			'brand': self.brand.id,
			'category': self.category.id,
		}
		res = self.client.put('/api/products/manage/999999/', payload, format='json')
		self.assertEqual(res.status_code, 404)

	def test_manage_put_updates_and_regenerates_slug(self):
		self.client.force_authenticate(user=self.admin)
		payload = {
			'name': 'Claw Hammer',
			'displayNames': {'en': 'Claw Hammer', 'zh-TW': '羊角鎚'},
			'brand': {'id': self.other_brand.id},
			'category': self.category.id,
		}
		res = self.client.put(f'/api/products/manage/{self.product.id}/', payload, format='json')
		self.assertEqual(res.status_code, 200)

		self.product.refresh_from_db()
		self.assertEqual(self.product.slug, 'claw-hammer')
		self.assertEqual(self.product.brand_id, self.other_brand.id)
		self.assertEqual(self.product.user_id, self.admin.id)

	def test_brand_list_exposes_resolved_icon(self):
		res = self.client.get('/api/brands/')
		self.assertEqual(res.status_code, 200)
		acme = next(row for row in res.json() if row['name'] == 'Acme')
		self.assertEqual(acme['icon'], {'kind': 'url', 'href': 'https://cdn.example.com/acme.png'})


class ProductCacheTests(TestCase):

	def setUp(self):
		caches['default'].clear()
		self.cache = ProductCache(timeout=60)

	def test_set_get_and_invalidate_single(self):
		self.cache.set(1, {'name': 'a'})
		self.cache.set(2, {'name': 'b'})
		self.cache.invalidate(1)
		self.assertIsNone(self.cache.get(1))
		self.assertEqual(self.cache.get(2), {'name': 'b'})

	def test_invalidate_all(self):
		self.cache.set(1, {'name': 'a'})
		self.cache.set(2, {'name': 'b'})
		self.cache.invalidate()
		self.assertIsNone(self.cache.get(1))
		self.assertIsNone(self.cache.get(2))


class IconSourceTests(TestCase):

	def test_resolution(self):
		self.assertEqual(resolve_icon('<svg viewBox="0 0 1 1"></svg>').kind, 'svg')
		self.assertEqual(resolve_icon('/static/truck.png'), IconSource('url', '/static/truck.png'))
		self.assertEqual(resolve_icon('truck-fast').as_dict(), {'kind': 'named', 'id': 'truck-fast'})
		self.assertEqual(resolve_icon('🚚').as_dict(), {'kind': 'text', 'value': '🚚'})
		self.assertIsNone(resolve_icon('   '))


class SeedDataCommandTests(TestCase):

	def test_seeds_catalog_and_customers(self):
		out = StringIO()
		call_command('seed_data', products=6, customers=2, seed=7, stdout=out)
		self.assertEqual(Brand.objects.count(), 5)
		self.assertEqual(Category.objects.count(), 4)
		self.assertEqual(Product.objects.count(), 6)
		self.assertIn('Seeded', out.getvalue())

		User = get_user_model()
		period_user = User.objects.get(username='customer_1')
		self.assertTrue(period_user.is_period_paid_user)
		self.assertEqual(period_user.payment_period, 'monthly')
		self.assertFalse(User.objects.get(username='customer_2').is_period_paid_user)

		settings = DeliverySettings.load()
		self.assertEqual(len(settings.delivery_methods), 2)

	def test_rerun_keeps_reference_data(self):
		call_command('seed_data', products=1, customers=1, stdout=StringIO())
		call_command('seed_data', products=1, customers=1, stdout=StringIO())
		self.assertEqual(Brand.objects.count(), 5)
		self.assertEqual(get_user_model().objects.filter(username='customer_1').count(), 1)
		self.assertEqual(Product.objects.count(), 2)
