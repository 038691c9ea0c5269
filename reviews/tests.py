"""Review aggregation tests."""

from decimal import Decimal
from unittest import mock

from django.contrib.auth import get_user_model
from django.test import TestCase, override_settings
from rest_framework.test import APIClient

from orders.models import Order, OrderItem
from products.models import Brand, Category, Product
from reviews.models import Review
from reviews.views import ReviewView

ADDRESS = {'en': '1 Main Street', 'zh-TW': '主街1號'}


@override_settings(ALLOWED_HOSTS=['testserver', 'localhost', '127.0.0.1'])
class ReviewApiTests(TestCase):

	@classmethod
	def setUpTestData(cls):
		User = get_user_model()
		cls.buyer = User.objects.create_user(
			username='buyer', email='buyer@example.com', password='12345678', name='Buyer',
		)
		cls.other_buyer = User.objects.create_user(
			username='other_buyer', email='other@example.com', password='12345678',
		)
		cls.browser = User.objects.create_user(
			username='browser', email='browser@example.com', password='12345678',
		)
		cls.brand = Brand.objects.create(name='Acme')
		cls.category = Category.objects.create(name='Tools')
		cls.product = Product.objects.create(
			name='Drill', price='100.00', brand=cls.brand, category=cls.category,
		)
		for user in (cls.buyer, cls.other_buyer):
			order = Order.objects.create(
				user=user, name='Pat', email='pat@example.com', phone='91234567',
				shipping_address=ADDRESS, delivery_method=0, payment_method='online',
				status=Order.Status.DELIVERED, paid=True, total='100.00', subtotal='100.00',
			)
			OrderItem.objects.create(order=order, product=cls.product, quantity=1, price='100.00')

	def setUp(self):
		self.client = APIClient()

	def post_review(self, user, rating=4, comment='Solid drill'):
		self.client.force_authenticate(user=user)
		return self.client.post(
			'/api/review/', {'productId': self.product.pk, 'rating': rating, 'comment': comment}, format='json',
		)

	def test_anonymous_post_cannot_review(self):
		res = self.client.post('/api/review/', {'productId': self.product.pk, 'rating': 5, 'comment': 'x'}, format='json')
		self.assertEqual(res.status_code, 200)
		self.assertEqual(res.json(), {'canReview': False})
		self.assertFalse(Review.objects.exists())

	def test_never_purchased_cannot_review(self):
		res = self.post_review(self.browser)
		self.assertEqual(res.status_code, 200)
		self.assertEqual(res.json(), {'canReview': False})
		self.assertFalse(Review.objects.exists())

	def test_undelivered_order_does_not_count(self):
		Order.objects.filter(user=self.buyer).update(status=Order.Status.SHIPPED)
		res = self.post_review(self.buyer)
		self.assertEqual(res.json(), {'canReview': False})

	def test_create_updates_aggregates(self):
		with mock.patch.object(ReviewView, 'product_cache') as cache:
			res = self.post_review(self.buyer, rating=5)
		self.assertEqual(res.status_code, 201)
		self.assertEqual(res.json()['review']['user']['name'], 'Buyer')
		cache.invalidate.assert_called_once_with()

		self.post_review(self.other_buyer, rating=2)
		self.product.refresh_from_db()
		self.assertEqual(self.product.num_reviews, 2)
		self.assertEqual(self.product.average_rating, Decimal('3.50'))

	def test_duplicate_review_rejected(self):
		self.post_review(self.buyer)
		res = self.post_review(self.buyer)
		self.assertEqual(res.status_code, 400)
		self.assertEqual(Review.objects.count(), 1)

	def test_invalid_rating_rejected(self):
		res = self.post_review(self.buyer, rating=9)
		self.assertEqual(res.status_code, 400)
		self.assertIn('rating', res.json()['details'])

	def test_unknown_product(self):
		self.client.force_authenticate(user=self.buyer)
		res = self.client.post('/api/review/', {'productId': 999999, 'rating': 5, 'comment': 'x'}, format='json')
		self.assertEqual(res.status_code, 404)
		res = self.client.post('/api/review/', {'productId': 'abc', 'rating': 5, 'comment': 'x'}, format='json')
		self.assertEqual(res.status_code, 400)

	def test_can_review_flag(self):
		self.client.force_authenticate(user=self.buyer)
		res = self.client.get('/api/review/can-review/', {'productId': self.product.pk})
		self.assertEqual(res.json(), {'canReview': True})

		self.post_review(self.buyer)
		res = self.client.get('/api/review/can-review/', {'productId': self.product.pk})
		self.assertEqual(res.json(), {'canReview': False})

		self.client.force_authenticate(user=None)
		res = self.client.get('/api/review/can-review/', {'productId': self.product.pk})
		self.assertEqual(res.json(), {'canReview': False})

	def test_update_own_review(self):
		review_id = self.post_review(self.buyer, rating=5).json()['review']['id']

		self.client.force_authenticate(user=self.other_buyer)
		res = self.client.put('/api/review/', {'reviewId': review_id, 'rating': 1}, format='json')
		self.assertEqual(res.status_code, 404)

		self.client.force_authenticate(user=self.buyer)
		res = self.client.put('/api/review/', {'reviewId': review_id, 'rating': 3, 'comment': 'Okay'}, format='json')
		self.assertEqual(res.status_code, 200)
		self.product.refresh_from_db()
		self.assertEqual(self.product.average_rating, Decimal('3.00'))

	def test_delete_resets_aggregates(self):
		review_id = self.post_review(self.buyer).json()['review']['id']
		self.client.force_authenticate(user=self.buyer)
		self.assertEqual(self.client.delete('/api/review/').status_code, 400)

		res = self.client.delete(f'/api/review/?reviewId={review_id}')
		self.assertEqual(res.status_code, 200)
		self.product.refresh_from_db()
		self.assertEqual(self.product.num_reviews, 0)
		self.assertEqual(self.product.average_rating, Decimal('0'))

	def test_delete_with_body(self):
		review_id = self.post_review(self.buyer).json()['review']['id']
		self.client.force_authenticate(user=self.buyer)
		res = self.client.delete('/api/review/', {'reviewId': review_id}, format='json')
		self.assertEqual(res.status_code, 200)
		self.assertFalse(Review.objects.exists())

	def test_list_paginates(self):
		self.post_review(self.buyer)
		self.post_review(self.other_buyer)
		self.client.force_authenticate(user=None)

		res = self.client.get('/api/review/', {'productId': self.product.pk, 'limit': 1})
		self.assertEqual(res.status_code, 200)
		self.assertEqual(len(res.json()['reviews']), 1)
		self.assertTrue(res.json()['hasMore'])

		res = self.client.get('/api/review/', {'productId': self.product.pk, 'limit': 1, 'page': 2})
		self.assertFalse(res.json()['hasMore'])

		self.assertEqual(self.client.get('/api/review/').status_code, 400)

	def test_all_reviews(self):
		self.post_review(self.buyer)
		self.client.force_authenticate(user=None)
		res = self.client.get('/api/review/all/')
		self.assertEqual(res.json()['total'], 1)
		self.assertEqual(res.json()['totalPages'], 1)
		self.assertEqual(res.json()['reviews'][0]['product']['name'], 'Drill')
