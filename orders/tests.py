"""Orders app tests."""

from datetime import timedelta
from decimal import Decimal
from io import StringIO

from django.contrib.auth import get_user_model
from django.core import mail
from django.core.management import call_command
from django.test import TestCase, override_settings
from django.utils import timezone
from rest_framework.test import APIClient

from accounts.models import PaymentHistory
from delivery.models import DeliverySettings
from invoices.models import Invoice
from orders.checkout import coerce_delivery_index, to_money
from orders.emails import build_order_confirmation
from orders.models import Order, OrderItem
from products.models import Brand, Category, Product

ADDRESS = {'en': '1 Main Street', 'zh-TW': '主街1號'}


class CheckoutHelperTests(TestCase):

	def test_delivery_index_coercion(self):
		self.assertEqual(coerce_delivery_index(1), 1)
		self.assertEqual(coerce_delivery_index(2.0), 2)
		self.assertEqual(coerce_delivery_index(' 3 '), 3)
		self.assertEqual(coerce_delivery_index(-1), -1)
		self.assertIsNone(coerce_delivery_index('express'))
		self.assertIsNone(coerce_delivery_index(1.5))
		self.assertIsNone(coerce_delivery_index(None))
		self.assertIsNone(coerce_delivery_index(True))

	def test_to_money(self):
		self.assertEqual(to_money('19.999'), Decimal('20.00'))
		self.assertEqual(to_money(None), Decimal('0'))
		self.assertEqual(to_money('abc'), Decimal('0'))
		self.assertEqual(to_money(float('nan')), Decimal('0'))


@override_settings(ALLOWED_HOSTS=['testserver', 'localhost', '127.0.0.1'])
class CheckoutTests(TestCase):

	@classmethod
	def setUpTestData(cls):
		User = get_user_model()
		cls.customer = User.objects.create_user(
			username='customer', email='customer@example.com', password='12345678', language='zh-TW',
		)
		cls.period_user = User.objects.create_user(
			username='period_user', email='period@example.com', password='12345678',
			is_period_paid_user=True, payment_period='monthly',
		)
		cls.weekly_user = User.objects.create_user(
			username='weekly_user', email='weekly@example.com', password='12345678',
			is_period_paid_user=True, payment_period='weekly',
		)
		cls.brand = Brand.objects.create(name='Acme')
		cls.category = Category.objects.create(name='Tools')
		cls.product = Product.objects.create(
			name='Drill', price='100.00', brand=cls.brand, category=cls.category,
			display_names={'en': 'Drill', 'zh-TW': '電鑽'},
		)
		cls.delivery_settings = DeliverySettings.objects.create(
			delivery_methods=[{'name': {'en': 'Courier', 'zh-TW': '快遞'}, 'cost': 20}],
			free_delivery_threshold=150,
		)

	def setUp(self):
		self.client = APIClient()
		self.client.force_authenticate(user=self.customer)

	def payload(self, **overrides):
		data = {
			'name': 'Pat Customer',
			'email': 'pat@example.com',
			'phone': '91234567',
			'shippingAddress': ADDRESS,
			'cartItems': [{'id': self.product.pk, 'price': 100, 'quantity': 2}],
			'deliveryMethod': 0,
			'paymentMethod': 'online',
		}
		data.update(overrides)
		return data

	def checkout(self, **overrides):
		return self.client.post('/api/checkout/', self.payload(**overrides), format='json')

	def test_requires_authentication(self):
		self.client.force_authenticate(user=None)
		self.assertEqual(self.checkout().status_code, 401)

	def test_free_delivery_over_threshold(self):
		res = self.checkout()
		self.assertEqual(res.status_code, 200)
		self.assertTrue(res.json()['success'])

		order = Order.objects.get(pk=res.json()['orderId'])
		self.assertEqual(order.subtotal, Decimal('200.00'))
		self.assertEqual(order.delivery_cost, Decimal('0.00'))
		self.assertEqual(order.total, Decimal('200.00'))
		self.assertEqual(order.order_type, Order.OrderType.ONE_TIME)
		self.assertEqual(order.status, Order.Status.PENDING)
		self.assertEqual(order.delivery_method_label['en'], 'Courier')
		self.assertTrue(order.order_reference.startswith('ORD-'))

		invoice = Invoice.objects.get(orders=order)
		self.assertEqual(invoice.invoice_number, order.invoice_number)
		self.assertTrue(invoice.invoice_number.startswith('INV-'))
		self.assertEqual(invoice.amount, Decimal('200.00'))
		self.assertEqual(invoice.payment_method, Invoice.PaymentMethod.CREDIT_CARD)
		self.assertEqual(invoice.items.count(), 1)

	def test_delivery_cost_under_threshold(self):
		DeliverySettings.objects.filter(pk=self.delivery_settings.pk).update(free_delivery_threshold=500)
		res = self.checkout()
		self.assertEqual(res.status_code, 200)

		order = Order.objects.get(pk=res.json()['orderId'])
		self.assertEqual(order.delivery_cost, Decimal('20.00'))
		self.assertEqual(order.total, Decimal('220.00'))

	def test_missing_fields(self):
		res = self.checkout(name='', cartItems=None)
		self.assertEqual(res.status_code, 400)
		body = res.json()
		self.assertEqual(body['error'], 'Missing required fields')
		self.assertTrue(body['details']['name'])
		self.assertTrue(body['details']['cartItems'])
		self.assertFalse(body['details']['shippingAddress'])
		self.assertFalse(body['details']['deliveryMethod'])

		data = self.payload()
		del data['deliveryMethod']
		res = self.client.post('/api/checkout/', data, format='json')
		self.assertTrue(res.json()['details']['deliveryMethod'])

	def test_empty_cart_is_invalid_not_missing(self):
		res = self.checkout(cartItems=[])
		self.assertEqual(res.status_code, 400)
		self.assertEqual(res.json(), {
			'error': 'Invalid cart items',
			'details': {'isArray': True, 'length': 0},
		})
		self.assertFalse(Order.objects.exists())

	def test_empty_shipping_address_is_invalid_not_missing(self):
		res = self.checkout(shippingAddress={})
		self.assertEqual(res.status_code, 400)
		self.assertEqual(res.json()['error'], 'Invalid shipping address')
		self.assertEqual(res.json()['details']['missing'], {'en': True, 'zh-TW': True})

	def test_shipping_address_needs_both_languages(self):
		res = self.checkout(shippingAddress={'en': '1 Main Street'})
		self.assertEqual(res.status_code, 400)
		self.assertEqual(res.json()['error'], 'Invalid shipping address')
		self.assertEqual(res.json()['details']['missing'], {'en': False, 'zh-TW': True})

	def test_cart_must_be_a_list(self):
		res = self.checkout(cartItems={'id': self.product.pk})
		self.assertEqual(res.status_code, 400)
		self.assertEqual(res.json()['error'], 'Invalid cart items')
		self.assertFalse(res.json()['details']['isArray'])

	def test_unknown_products_rejected(self):
		res = self.checkout(cartItems=[{'id': 999999, 'price': 10, 'quantity': 1}])
		self.assertEqual(res.status_code, 400)
		self.assertEqual(res.json()['details']['unknownProducts'], [999999])
		self.assertFalse(Order.objects.exists())

	def test_invalid_delivery_method(self):
		cases = [
			('express', {'isNaN': True, 'isNegative': False, 'isOutOfBounds': False}),
			(-1, {'isNaN': False, 'isNegative': True, 'isOutOfBounds': False}),
			(5, {'isNaN': False, 'isNegative': False, 'isOutOfBounds': True}),
		]
		for value, validation in cases:
			with self.subTest(deliveryMethod=value):
				res = self.checkout(deliveryMethod=value)
				self.assertEqual(res.status_code, 400)
				details = res.json()['details']
				self.assertEqual(res.json()['error'], 'Invalid delivery method')
				self.assertEqual(details['validation'], validation)
				self.assertEqual(details['methodsLength'], 1)
		self.assertFalse(Order.objects.exists())

	def test_missing_delivery_settings(self):
		DeliverySettings.objects.all().delete()
		self.assertEqual(self.checkout().status_code, 404)

	def test_invalid_payment_method(self):
		res = self.checkout(paymentMethod='barter')
		self.assertEqual(res.status_code, 400)
		self.assertEqual(res.json()['error'], 'Invalid payment method')

	def test_invalid_phone_maps_to_validation_error(self):
		res = self.checkout(phone='123')
		self.assertEqual(res.status_code, 400)
		self.assertEqual(res.json()['error'], 'Validation error')
		self.assertIn('phone', res.json()['details'])
		self.assertFalse(Order.objects.exists())
		self.assertFalse(Invoice.objects.exists())

	def test_offline_payment_waits_for_verification(self):
		res = self.checkout(
			paymentMethod='offline',
			paymentProofUrl='https://files.example.com/receipt.jpg',
			paymentReference='TX-42',
			paymentDate='2024-03-05',
		)
		self.assertEqual(res.status_code, 200)

		order = Order.objects.get(pk=res.json()['orderId'])
		self.assertEqual(order.status, Order.Status.PENDING_PAYMENT_VERIFICATION)
		self.assertEqual(order.payment_reference, 'TX-42')

		invoice = Invoice.objects.get(invoice_number=order.invoice_number)
		self.assertEqual(invoice.payment_method, Invoice.PaymentMethod.OFFLINE_PAYMENT)
		self.assertEqual(invoice.payment_proof_url, 'https://files.example.com/receipt.jpg')
		self.assertEqual(timezone.localtime(invoice.payment_date).day, 5)

	def test_period_checkout_requires_period_user(self):
		res = self.checkout(paymentMethod='periodInvoice')
		self.assertEqual(res.status_code, 400)
		self.assertEqual(res.json()['error'], 'User is not a period-paid user')
		self.assertFalse(Order.objects.exists())
		self.assertFalse(Invoice.objects.exists())

	def test_period_orders_share_one_invoice(self):
		self.client.force_authenticate(user=self.period_user)
		first = self.checkout(paymentMethod='periodInvoice')
		second = self.checkout(
			paymentMethod='periodInvoice',
			cartItems=[{'id': self.product.pk, 'price': 50, 'quantity': 1}],
		)
		self.assertEqual(first.status_code, 200)
		self.assertEqual(second.status_code, 200)

		invoice = Invoice.objects.get(invoice_type=Invoice.InvoiceType.PERIOD)
		self.assertTrue(invoice.invoice_number.startswith('PER-'))
		self.assertEqual(invoice.orders.count(), 2)
		self.assertEqual(invoice.items.count(), 2)
		self.assertEqual(invoice.amount, Decimal('270.00'))

		order = Order.objects.get(pk=first.json()['orderId'])
		self.assertEqual(order.order_type, Order.OrderType.PERIOD)
		self.assertEqual(order.period_invoice_number, invoice.invoice_number)
		self.assertEqual(order.period_start, invoice.period_start)
		self.assertEqual(order.invoice_number, '')

		history = PaymentHistory.objects.get(user=self.period_user)
		self.assertEqual(history.invoice, invoice)

	def test_weekly_period_orders_share_one_invoice(self):
		self.client.force_authenticate(user=self.weekly_user)
		first = self.checkout(paymentMethod='periodInvoice')
		second = self.checkout(paymentMethod='periodInvoice')
		self.assertEqual(first.status_code, 200)
		self.assertEqual(second.status_code, 200)

		invoice = Invoice.objects.get(user=self.weekly_user)
		self.assertEqual(invoice.invoice_type, Invoice.InvoiceType.PERIOD)
		self.assertIn('-W-', invoice.invoice_number)
		self.assertEqual(invoice.orders.count(), 2)
		self.assertEqual((invoice.period_end - invoice.period_start).days, 6)

	def test_confirmation_email_sent_after_commit(self):
		with self.captureOnCommitCallbacks(execute=True):
			res = self.checkout()
		self.assertEqual(res.status_code, 200)

		order = Order.objects.get(pk=res.json()['orderId'])
		self.assertEqual(len(mail.outbox), 1)
		self.assertEqual(mail.outbox[0].to, ['pat@example.com'])
		self.assertIn(order.order_reference, mail.outbox[0].subject)
		self.assertIn('訂單確認', mail.outbox[0].subject)

	def test_confirmation_email_in_english(self):
		order = Order.objects.create(
			user=self.period_user, name='Pat', email='pat@example.com', phone='91234567',
			shipping_address=ADDRESS, delivery_method=0, payment_method='online',
			order_reference='ORD-202403-0007', total='200.00', subtotal='200.00',
		)
		OrderItem.objects.create(order=order, product=self.product, quantity=2, price='100.00')
		subject, text, html = build_order_confirmation(order, 'en')
		self.assertEqual(subject, 'Order Confirmation #ORD-202403-0007')
		self.assertIn('Drill', text)
		self.assertIn('ORD-202403-0007', html)


@override_settings(ALLOWED_HOSTS=['testserver', 'localhost', '127.0.0.1'])
class OrderApiTests(TestCase):

	@classmethod
	def setUpTestData(cls):
		User = get_user_model()
		cls.customer = User.objects.create_user(
			username='customer', email='customer@example.com', password='12345678',
		)
		cls.stranger = User.objects.create_user(
			username='stranger', email='stranger@example.com', password='12345678',
		)
		cls.logistics = User.objects.create_user(
			username='logistics', email='logistics@example.com', password='12345678', role='logistics',
		)
		cls.period_user = User.objects.create_user(
			username='period_user', email='period@example.com', password='12345678',
			is_period_paid_user=True, payment_period='monthly',
		)
		cls.admin = User.objects.create_user(
			username='admin_user', email='admin@example.com', password='12345678', role='admin',
		)
		cls.brand = Brand.objects.create(name='Acme')
		cls.category = Category.objects.create(name='Tools')
		cls.product = Product.objects.create(
			name='Drill', price='100.00', brand=cls.brand, category=cls.category,
		)
		DeliverySettings.objects.create(
			delivery_methods=[{'name': {'en': 'Courier', 'zh-TW': '快遞'}, 'cost': 20}],
			free_delivery_threshold=150,
		)

	def setUp(self):
		self.client = APIClient()

	def place(self, user=None, payment_method='online'):
		self.client.force_authenticate(user=user or self.customer)
		res = self.client.post('/api/checkout/', {
			'name': 'Pat Customer',
			'email': 'pat@example.com',
			'phone': '91234567',
			'shippingAddress': ADDRESS,
			'cartItems': [{'id': self.product.pk, 'price': 100, 'quantity': 2}],
			'deliveryMethod': 0,
			'paymentMethod': payment_method,
		}, format='json')
		self.assertEqual(res.status_code, 200)
		return Order.objects.get(pk=res.json()['orderId'])

	def test_owner_reads_order(self):
		order = self.place()
		res = self.client.get(f'/api/orders/{order.pk}/')
		self.assertEqual(res.status_code, 200)
		body = res.json()
		self.assertEqual(body['total'], 200.0)
		self.assertEqual(body['deliveryMethodName']['en'], 'Courier')
		self.assertEqual(body['items'][0]['id'], self.product.pk)
		self.assertEqual(body['items'][0]['price'], 100.0)

	def test_stranger_forbidden_back_office_allowed(self):
		order = self.place()
		self.client.force_authenticate(user=self.stranger)
		self.assertEqual(self.client.get(f'/api/orders/{order.pk}/').status_code, 403)
		self.client.force_authenticate(user=self.logistics)
		self.assertEqual(self.client.get(f'/api/orders/{order.pk}/').status_code, 200)

	def test_missing_totals_recomputed_in_response(self):
		order = self.place()
		Order.objects.filter(pk=order.pk).update(subtotal=None, total=None, delivery_cost=None)
		res = self.client.get(f'/api/orders/{order.pk}/')
		self.assertEqual(res.json()['subtotal'], 200.0)
		self.assertEqual(res.json()['total'], 200.0)
		order.refresh_from_db()
		self.assertIsNone(order.total)

	def test_delivery_name_falls_back_to_snapshot(self):
		order = self.place()
		DeliverySettings.objects.update(delivery_methods=[])
		res = self.client.get(f'/api/orders/{order.pk}/')
		self.assertEqual(res.json()['deliveryMethodName'], {'en': 'Courier', 'zh-TW': '快遞'})

	def test_period_linkage_repaired(self):
		now = timezone.now()
		invoice = Invoice.objects.create(
			user=self.customer, invoice_number='PER-202403-M-01-001', name='Pat', email='pat@example.com',
			phone='91234567', invoice_type=Invoice.InvoiceType.PERIOD,
			period_start=now - timedelta(days=3), period_end=now + timedelta(days=3),
		)
		order = Order.objects.create(
			user=self.customer, name='Pat', email='pat@example.com', phone='91234567',
			shipping_address=ADDRESS, delivery_method=0, payment_method='periodInvoice',
			order_type=Order.OrderType.PERIOD, total='100.00', subtotal='100.00',
		)
		invoice.orders.add(order)

		self.client.force_authenticate(user=self.customer)
		res = self.client.get(f'/api/orders/{order.pk}/')
		self.assertEqual(res.status_code, 200)
		self.assertEqual(res.json()['periodInvoiceNumber'], 'PER-202403-M-01-001')

		order.refresh_from_db()
		self.assertEqual(order.period_invoice_number, 'PER-202403-M-01-001')
		self.assertEqual(order.period_end, invoice.period_end)

	def test_payment_proof_forces_verification(self):
		order = self.place()
		res = self.client.put(
			f'/api/orders/{order.pk}/', {'paymentProofUrl': 'https://files.example.com/p.png'}, format='json',
		)
		self.assertEqual(res.status_code, 200)
		self.assertEqual(res.json()['order']['status'], Order.Status.PENDING_PAYMENT_VERIFICATION)
		self.assertEqual(res.json()['order']['paymentProof'], 'https://files.example.com/p.png')

	def test_customer_cannot_change_status(self):
		order = self.place()
		res = self.client.put(f'/api/orders/{order.pk}/', {'status': 'delivered'}, format='json')
		self.assertEqual(res.status_code, 403)

	def test_invalid_status_rejected(self):
		order = self.place()
		self.client.force_authenticate(user=self.logistics)
		res = self.client.put(f'/api/orders/{order.pk}/', {'status': 'lost'}, format='json')
		self.assertEqual(res.status_code, 400)
		self.assertEqual(res.json()['error'], 'Invalid status')

	def test_delivered_status_marks_invoice_paid(self):
		order = self.place()
		self.client.force_authenticate(user=self.logistics)
		res = self.client.put(f'/api/orders/{order.pk}/', {'status': 'delivered'}, format='json')
		self.assertEqual(res.status_code, 200)
		self.assertTrue(res.json()['success'])

		invoice = Invoice.objects.get(invoice_number=order.invoice_number)
		self.assertEqual(invoice.status, Invoice.Status.PAID)
		self.assertIsNotNone(invoice.payment_date)
		order.refresh_from_db()
		self.assertTrue(order.paid)

	def test_admin_delete_detaches_order(self):
		order = self.place()
		invoice = Invoice.objects.get(invoice_number=order.invoice_number)

		self.client.force_authenticate(user=self.logistics)
		self.assertEqual(self.client.delete(f'/api/orders/{order.pk}/').status_code, 403)

		self.client.force_authenticate(user=self.admin)
		res = self.client.delete(f'/api/orders/{order.pk}/')
		self.assertEqual(res.status_code, 200)
		self.assertEqual(res.json()['message'], 'Order and related invoice references deleted successfully')

		self.assertFalse(Order.objects.filter(pk=order.pk).exists())
		invoice.refresh_from_db()
		self.assertEqual(invoice.orders.count(), 0)
		self.assertEqual(invoice.items.count(), 0)
		self.assertEqual(invoice.amount, Decimal('0'))

	def test_admin_delete_removes_emptied_period_invoice(self):
		order = self.place(user=self.period_user, payment_method='periodInvoice')
		invoice_number = order.period_invoice_number
		self.assertTrue(invoice_number.startswith('PER-'))

		self.client.force_authenticate(user=self.admin)
		res = self.client.delete(f'/api/orders/{order.pk}/')
		self.assertEqual(res.status_code, 200)
		self.assertFalse(Order.objects.filter(pk=order.pk).exists())
		self.assertFalse(Invoice.objects.filter(invoice_number=invoice_number).exists())

	def test_order_lists(self):
		mine = self.place()
		self.place(user=self.stranger)

		self.client.force_authenticate(user=self.customer)
		res = self.client.get('/api/orders/')
		self.assertEqual([row['id'] for row in res.json()['results']], [mine.pk])

		self.client.force_authenticate(user=self.customer)
		self.assertEqual(self.client.get('/api/orders/admin/').status_code, 403)

		self.client.force_authenticate(user=self.logistics)
		res = self.client.get('/api/orders/admin/', {'status': 'pending'})
		self.assertEqual(res.json()['count'], 2)

	def test_print_order(self):
		order = self.place()
		res = self.client.get(f'/api/orders/{order.pk}/print/')
		self.assertEqual(res.status_code, 200)
		self.assertEqual(res['Content-Type'], 'text/html; charset=utf-8')
		html = res.content.decode()
		self.assertIn('ORDER DETAILS', html)
		self.assertIn(order.order_reference, html)
		self.assertIn('Drill', html)
		self.assertIn('Courier', html)
		self.assertIn('1 Main Street', html)
		self.assertIn('$200.00', html)

		res = self.client.get(f'/api/orders/{order.pk}/print/', {'language': 'zh-TW'})
		html = res.content.decode()
		self.assertIn('訂單詳情', html)
		self.assertIn('快遞', html)
		self.assertIn('主街1號', html)

	def test_print_order_access(self):
		order = self.place()
		self.client.force_authenticate(user=self.stranger)
		self.assertEqual(self.client.get(f'/api/orders/{order.pk}/print/').status_code, 403)
		self.client.force_authenticate(user=self.logistics)
		self.assertEqual(self.client.get(f'/api/orders/{order.pk}/print/').status_code, 200)
		self.assertEqual(self.client.get('/api/orders/999999/print/').status_code, 404)

	def test_print_period_order_shows_period_invoice(self):
		order = self.place(user=self.period_user, payment_method='periodInvoice')
		res = self.client.get(f'/api/orders/{order.pk}/print/')
		html = res.content.decode()
		self.assertIn('Period Invoice', html)
		self.assertIn(order.period_invoice_number, html)


class RepairOrdersCommandTests(TestCase):

	@classmethod
	def setUpTestData(cls):
		cls.user = get_user_model().objects.create_user(
			username='customer', email='customer@example.com', password='12345678',
		)
		brand = Brand.objects.create(name='Acme')
		category = Category.objects.create(name='Tools')
		cls.product = Product.objects.create(name='Drill', price='100.00', brand=brand, category=category)

	def make_order(self, **kwargs):
		fields = {
			'user': self.user, 'name': 'Pat', 'email': 'pat@example.com', 'phone': '91234567',
			'shipping_address': ADDRESS, 'delivery_method': 0, 'payment_method': 'online',
		}
		fields.update(kwargs)
		return Order.objects.create(**fields)

	def test_backfills_amounts_types_and_links(self):
		legacy = self.make_order(subtotal=None, delivery_cost=None, total='230.00')
		OrderItem.objects.create(order=legacy, product=self.product, quantity=2, price='100.00')

		mistyped = self.make_order(payment_method='periodInvoice', order_type=Order.OrderType.ONE_TIME)
		now = timezone.now()
		invoice = Invoice.objects.create(
			user=self.user, invoice_number='PER-202403-M-01-001', name='Pat', email='pat@example.com',
			phone='91234567', invoice_type=Invoice.InvoiceType.PERIOD,
			period_start=now - timedelta(days=3), period_end=now + timedelta(days=3),
		)
		invoice.orders.add(mistyped)

		out = StringIO()
		call_command('repair_orders', stdout=out)
		self.assertIn('Fixed: 1 order amounts, 1 order types, 1 period invoice links.', out.getvalue())

		legacy.refresh_from_db()
		self.assertEqual(legacy.subtotal, Decimal('200.00'))
		self.assertEqual(legacy.delivery_cost, Decimal('30.00'))
		mistyped.refresh_from_db()
		self.assertEqual(mistyped.order_type, Order.OrderType.PERIOD)
		self.assertEqual(mistyped.period_invoice_number, 'PER-202403-M-01-001')
		self.assertEqual(mistyped.period_start, invoice.period_start)

	def test_dry_run_saves_nothing(self):
		legacy = self.make_order(subtotal=None, delivery_cost=None, total='100.00')
		out = StringIO()
		call_command('repair_orders', dry_run=True, stdout=out)
		self.assertIn('Would fix: 1 order amounts', out.getvalue())
		legacy.refresh_from_db()
		self.assertIsNone(legacy.subtotal)
