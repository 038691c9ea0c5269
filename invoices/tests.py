"""Invoice numbering, bookkeeping and API tests."""

from datetime import datetime, timedelta
from decimal import Decimal
from io import StringIO

from django.contrib.auth import get_user_model
from django.core.management import call_command
from django.test import TestCase, override_settings
from django.utils import timezone
from rest_framework.test import APIClient

from invoices.models import Invoice, InvoiceCounter, InvoiceItem
from invoices.numbering import (
	current_period_number,
	generate_one_time_invoice_number,
	generate_order_reference,
	generate_period_invoice_number,
)
from invoices.services import (
	billing_window,
	cleanup_invoices,
	get_or_create_period_invoice,
	parse_payment_date,
	remove_order_from_invoices,
)
from orders.models import Order, OrderItem
from orders.signals import order_status_changed
from products.models import Brand, Category, Product

ADDRESS = {'en': '1 Main Street', 'zh-TW': '主街1號'}


def make_order(user, product, total='120.00', **extra):
	fields = {
		'user': user,
		'name': 'Pat Customer',
		'email': 'pat@example.com',
		'phone': '91234567',
		'shipping_address': ADDRESS,
		'delivery_method': 0,
		'payment_method': Order.PaymentMethod.ONLINE,
		'subtotal': Decimal(total) - Decimal('20.00'),
		'delivery_cost': Decimal('20.00'),
		'total': Decimal(total),
	}
	fields.update(extra)
	order = Order.objects.create(**fields)
	OrderItem.objects.create(order=order, product=product, quantity=2, price=Decimal('50.00'))
	return order


def make_invoice(user, number, invoice_type=Invoice.InvoiceType.ONE_TIME, amount='0', **extra):
	now = timezone.now()
	fields = {
		'user': user,
		'invoice_number': number,
		'name': 'Pat Customer',
		'email': 'pat@example.com',
		'phone': '91234567',
		'invoice_type': invoice_type,
		'amount': Decimal(amount),
		'period_start': now - timedelta(days=1),
		'period_end': now + timedelta(days=1),
	}
	fields.update(extra)
	return Invoice.objects.create(**fields)


class InvoiceNumberingTests(TestCase):

	def setUp(self):
		self.now = timezone.make_aware(datetime(2024, 3, 10, 12, 0))

	def test_order_references_are_sequential_per_month(self):
		self.assertEqual(generate_order_reference(self.now), 'ORD-202403-0001')
		self.assertEqual(generate_order_reference(self.now), 'ORD-202403-0002')
		next_month = timezone.make_aware(datetime(2024, 4, 2, 12, 0))
		self.assertEqual(generate_order_reference(next_month), 'ORD-202404-0001')

	def test_one_time_counter_is_separate_from_order_counter(self):
		generate_order_reference(self.now)
		self.assertEqual(generate_one_time_invoice_number(self.now), 'INV-202403-0001')

	def test_period_invoice_number_format(self):
		self.assertEqual(generate_period_invoice_number('weekly', 2, self.now), 'PER-202403-W-02-001')
		self.assertEqual(generate_period_invoice_number('weekly', 2, self.now), 'PER-202403-W-02-002')
		self.assertEqual(generate_period_invoice_number('monthly', 1, self.now), 'PER-202403-M-01-001')
		self.assertEqual(InvoiceCounter.objects.filter(period_type='weekly').get().sequence, 2)

	def test_unknown_period_type_rejected(self):
		with self.assertRaises(ValueError):
			generate_period_invoice_number('daily', 1, self.now)

	def test_current_period_number(self):
		self.assertEqual(current_period_number('weekly', datetime(2024, 3, 1)), 1)
		self.assertEqual(current_period_number('weekly', datetime(2024, 3, 15)), 3)
		self.assertEqual(current_period_number('monthly', datetime(2024, 3, 29)), 1)


class InvoiceServiceTests(TestCase):

	@classmethod
	def setUpTestData(cls):
		User = get_user_model()
		cls.user = User.objects.create_user(
			username='period_user', email='period@example.com', password='12345678',
			is_period_paid_user=True, payment_period='monthly',
		)
		cls.brand = Brand.objects.create(name='Acme')
		cls.category = Category.objects.create(name='Tools')
		cls.product = Product.objects.create(
			name='Hammer', price='50.00', brand=cls.brand, category=cls.category,
		)

	def test_monthly_window_covers_calendar_month(self):
		now = timezone.make_aware(datetime(2024, 2, 10, 12, 0))
		start, end = billing_window(self.user, now)
		start, end = timezone.localtime(start), timezone.localtime(end)
		self.assertEqual((start.year, start.month, start.day, start.hour), (2024, 2, 1, 0))
		self.assertEqual((end.month, end.day, end.hour, end.minute), (2, 29, 23, 59))

	def test_weekly_window_starts_today(self):
		self.user.payment_period = 'weekly'
		now = timezone.make_aware(datetime(2024, 2, 10, 12, 0))
		start, end = billing_window(self.user, now)
		self.assertEqual(timezone.localtime(start).day, 10)
		self.assertEqual(timezone.localtime(end).day, 16)

	def test_open_invoice_window_wins_over_calendar_window(self):
		now = timezone.make_aware(datetime(2024, 2, 10, 12, 0))
		open_invoice = make_invoice(
			self.user, 'PER-202401-M-01-001', invoice_type=Invoice.InvoiceType.PERIOD,
			period_start=now - timedelta(days=20), period_end=now + timedelta(days=2),
		)

		start, end = billing_window(self.user, now)
		self.assertEqual(timezone.localtime(start).day, 1)
		self.assertEqual(timezone.localtime(start).month, 2)

		contact = {'name': 'Pat', 'email': 'pat@example.com', 'phone': '91234567', 'shipping_address': ADDRESS}
		invoice, created = get_or_create_period_invoice(self.user, contact, now)
		self.assertFalse(created)
		self.assertEqual(invoice.pk, open_invoice.pk)

	def test_open_period_invoice_is_reused(self):
		contact = {'name': 'Pat', 'email': 'pat@example.com', 'phone': '91234567', 'shipping_address': ADDRESS}
		first, created = get_or_create_period_invoice(self.user, contact)
		self.assertTrue(created)
		self.assertTrue(first.invoice_number.startswith('PER-'))
		self.assertIn('-M-01-', first.invoice_number)

		second, created = get_or_create_period_invoice(self.user, contact)
		self.assertFalse(created)
		self.assertEqual(first.pk, second.pk)

	def test_status_follows_delivered_orders(self):
		first = make_order(self.user, self.product)
		second = make_order(self.user, self.product)
		invoice = make_invoice(self.user, 'INV-TEST-0001', amount='240.00')
		invoice.orders.add(first, second)

		Order.objects.filter(pk=first.pk).update(status=Order.Status.DELIVERED)
		first.refresh_from_db()
		order_status_changed.send(sender=Order, order=first, previous_status='pending', status=first.status)
		invoice.refresh_from_db()
		self.assertEqual(invoice.status, Invoice.Status.PENDING)

		Order.objects.filter(pk=second.pk).update(status=Order.Status.DELIVERED)
		second.refresh_from_db()
		order_status_changed.send(sender=Order, order=second, previous_status='pending', status=second.status)
		invoice.refresh_from_db()
		self.assertEqual(invoice.status, Invoice.Status.PAID)
		self.assertIsNotNone(invoice.payment_date)
		self.assertEqual(Order.objects.filter(pk__in=[first.pk, second.pk], paid=True).count(), 2)

	def test_status_cancelled_when_every_order_cancelled(self):
		order = make_order(self.user, self.product, status=Order.Status.CANCELLED)
		invoice = make_invoice(self.user, 'INV-TEST-0002')
		invoice.orders.add(order)
		order_status_changed.send(sender=Order, order=order, previous_status='pending', status=order.status)
		invoice.refresh_from_db()
		self.assertEqual(invoice.status, Invoice.Status.CANCELLED)

	def test_remove_order_deletes_empty_period_invoice(self):
		order = make_order(self.user, self.product)
		invoice = make_invoice(self.user, 'PER-TEST-M-01-001', Invoice.InvoiceType.PERIOD, amount='120.00')
		invoice.orders.add(order)
		InvoiceItem.objects.create(invoice=invoice, order=order, product=self.product, quantity=2, price='50.00')

		touched = remove_order_from_invoices(order)
		self.assertEqual(touched, ['PER-TEST-M-01-001'])
		self.assertFalse(Invoice.objects.filter(pk=invoice.pk).exists())

	def test_remove_order_reduces_amount(self):
		keep = make_order(self.user, self.product)
		drop = make_order(self.user, self.product, total='80.00')
		invoice = make_invoice(self.user, 'PER-TEST-M-01-002', Invoice.InvoiceType.PERIOD, amount='200.00')
		invoice.orders.add(keep, drop)
		InvoiceItem.objects.create(invoice=invoice, order=drop, product=self.product, quantity=1, price='60.00')

		remove_order_from_invoices(drop)
		invoice.refresh_from_db()
		self.assertEqual(invoice.amount, Decimal('120.00'))
		self.assertEqual(list(invoice.orders.all()), [keep])
		self.assertFalse(invoice.items.exists())

	def test_cleanup_removes_empty_and_recomputes(self):
		make_invoice(self.user, 'PER-EMPTY', Invoice.InvoiceType.PERIOD, amount='50.00')
		order = make_order(self.user, self.product)
		stale = make_invoice(self.user, 'PER-STALE', Invoice.InvoiceType.PERIOD, amount='999.00')
		stale.orders.add(order)
		one_time = make_invoice(self.user, 'INV-LONELY', amount='10.00')

		result = cleanup_invoices()
		self.assertEqual(result['deleted'], ['PER-EMPTY'])
		self.assertEqual(result['updated'], ['PER-STALE'])
		stale.refresh_from_db()
		self.assertEqual(stale.amount, Decimal('120.00'))
		self.assertTrue(Invoice.objects.filter(pk=one_time.pk).exists())

	def test_cleanup_command(self):
		make_invoice(self.user, 'PER-EMPTY-CMD', Invoice.InvoiceType.PERIOD)
		out = StringIO()
		call_command('cleanup_invoices', stdout=out)
		self.assertIn('Deleted PER-EMPTY-CMD', out.getvalue())
		self.assertIn('1 deleted', out.getvalue())

	def test_parse_payment_date(self):
		default = timezone.now()
		self.assertEqual(parse_payment_date('', default=default), default)
		self.assertEqual(parse_payment_date('not a date', default=default), default)
		parsed = parse_payment_date('2024-03-05')
		self.assertEqual((parsed.year, parsed.month, parsed.day), (2024, 3, 5))
		self.assertTrue(timezone.is_aware(parse_payment_date('2024-03-05T10:30:00')))


@override_settings(ALLOWED_HOSTS=['testserver', 'localhost', '127.0.0.1'])
class InvoiceApiTests(TestCase):

	@classmethod
	def setUpTestData(cls):
		User = get_user_model()
		cls.owner = User.objects.create_user(
			username='owner', email='owner@example.com', password='12345678', name='Owner',
		)
		cls.stranger = User.objects.create_user(
			username='stranger', email='stranger@example.com', password='12345678',
		)
		cls.accountant = User.objects.create_user(
			username='accountant', email='accounting@example.com', password='12345678', role='accounting',
		)
		cls.admin = User.objects.create_user(
			username='admin_user', email='admin@example.com', password='12345678', role='admin',
		)
		cls.brand = Brand.objects.create(name='Acme')
		cls.category = Category.objects.create(name='Tools')
		cls.product = Product.objects.create(
			name='Hammer', price='50.00', brand=cls.brand, category=cls.category,
			display_names={'en': 'Hammer', 'zh-TW': '鐵鎚'},
		)

	def setUp(self):
		self.client = APIClient()
		self.order = make_order(self.owner, self.product, subtotal=None, delivery_cost=None)
		self.invoice = make_invoice(self.owner, 'INV-202403-0001', amount='120.00')
		self.invoice.orders.add(self.order)
		InvoiceItem.objects.create(
			invoice=self.invoice, order=self.order, product=self.product, quantity=2, price='50.00',
		)

	def test_requires_authentication(self):
		res = self.client.get('/api/invoices/INV-202403-0001/')
		self.assertEqual(res.status_code, 401)

	def test_owner_gets_recomputed_order_totals(self):
		self.client.force_authenticate(user=self.owner)
		res = self.client.get('/api/invoices/INV-202403-0001/')
		self.assertEqual(res.status_code, 200)

		invoice = res.json()['invoice']
		self.assertEqual(invoice['invoiceNumber'], 'INV-202403-0001')
		self.assertEqual(invoice['user']['email'], 'owner@example.com')
		self.assertEqual(invoice['items'][0]['product']['name'], 'Hammer')

		order = invoice['orders'][0]
		self.assertEqual(order['subtotal'], 100.0)
		self.assertEqual(order['deliveryCost'], 20.0)
		self.assertEqual(order['total'], 120.0)
		self.assertEqual(order['cartProducts'][0]['quantity'], 2)
		self.assertEqual(order['cartProducts'][0]['product']['displayNames']['zh-TW'], '鐵鎚')

	def test_order_with_deleted_product_becomes_placeholder(self):
		broken = make_order(self.owner, self.product)
		OrderItem.objects.filter(order=broken).update(product=None)
		self.invoice.orders.add(broken)

		self.client.force_authenticate(user=self.owner)
		res = self.client.get('/api/invoices/INV-202403-0001/')
		self.assertEqual(res.status_code, 200)

		by_id = {order['id']: order for order in res.json()['invoice']['orders']}
		self.assertEqual(by_id[broken.pk]['total'], 0)
		self.assertEqual(by_id[broken.pk]['cartProducts'], [])
		self.assertEqual(by_id[self.order.pk]['total'], 120.0)

	def test_other_user_gets_404_and_back_office_can_read(self):
		self.client.force_authenticate(user=self.stranger)
		res = self.client.get('/api/invoices/INV-202403-0001/')
		self.assertEqual(res.status_code, 404)
		self.assertEqual(res.json(), {'error': 'Invoice not found'})

		self.client.force_authenticate(user=self.accountant)
		res = self.client.get('/api/invoices/INV-202403-0001/')
		self.assertEqual(res.status_code, 200)

	def test_download_invoice_document(self):
		Invoice.objects.filter(pk=self.invoice.pk).update(shipping_address={'en': '1 Main Street', 'zh-TW': '主街1號'})
		self.client.force_authenticate(user=self.owner)
		res = self.client.get('/api/invoices/INV-202403-0001/download/')
		self.assertEqual(res.status_code, 200)
		self.assertEqual(res['Content-Disposition'], 'attachment; filename="invoice-INV-202403-0001.html"')
		html = res.content.decode()
		self.assertIn('INV-202403-0001', html)
		self.assertIn('Hammer', html)
		self.assertIn('1 Main Street', html)
		self.assertIn('$100.00', html)
		self.assertIn('$120.00', html)

		res = self.client.get('/api/invoices/INV-202403-0001/download/', {'language': 'zh-TW'})
		html = res.content.decode()
		self.assertIn('發票', html)
		self.assertIn('鐵鎚', html)
		self.assertIn('主街1號', html)

	def test_download_is_limited_to_owner_and_back_office(self):
		self.client.force_authenticate(user=self.stranger)
		res = self.client.get('/api/invoices/INV-202403-0001/download/')
		self.assertEqual(res.status_code, 404)
		self.assertEqual(res.json(), {'error': 'Invoice not found'})

		self.client.force_authenticate(user=self.accountant)
		self.assertEqual(self.client.get('/api/invoices/INV-202403-0001/download/').status_code, 200)

	def test_patch_sets_payment_proof(self):
		self.client.force_authenticate(user=self.owner)
		res = self.client.patch(
			'/api/invoices/INV-202403-0001/',
			{'paymentProofUrl': 'https://files.example.com/proof.png', 'paymentDate': '2024-03-05'},
			format='json',
		)
		self.assertEqual(res.status_code, 200)
		self.assertTrue(res.json()['success'])
		self.assertEqual(res.json()['invoice']['paymentProofUrl'], 'https://files.example.com/proof.png')

		self.invoice.refresh_from_db()
		self.assertEqual(timezone.localtime(self.invoice.payment_date).day, 5)

	def test_patch_defaults_payment_date_to_now(self):
		self.client.force_authenticate(user=self.owner)
		res = self.client.patch(
			'/api/invoices/INV-202403-0001/',
			{'paymentProofUrl': 'https://files.example.com/proof.png'},
			format='json',
		)
		self.assertEqual(res.status_code, 200)
		self.invoice.refresh_from_db()
		self.assertLess(timezone.now() - self.invoice.payment_date, timedelta(minutes=1))

	def test_patch_rejects_bad_url(self):
		self.client.force_authenticate(user=self.owner)
		res = self.client.patch('/api/invoices/INV-202403-0001/', {'paymentProofUrl': 'not a url'}, format='json')
		self.assertEqual(res.status_code, 400)
		self.assertEqual(res.json()['error'], 'Validation error')

	def test_user_list_only_shows_own_invoices(self):
		make_invoice(self.stranger, 'INV-202403-0002')
		self.client.force_authenticate(user=self.owner)
		res = self.client.get('/api/invoices/')
		self.assertEqual(res.status_code, 200)
		numbers = [row['invoiceNumber'] for row in res.json()['results']]
		self.assertEqual(numbers, ['INV-202403-0001'])

	def test_admin_list_filters(self):
		make_invoice(self.stranger, 'PER-202403-M-01-001', Invoice.InvoiceType.PERIOD)
		self.client.force_authenticate(user=self.owner)
		self.assertEqual(self.client.get('/api/invoices/admin/').status_code, 403)

		self.client.force_authenticate(user=self.accountant)
		res = self.client.get('/api/invoices/admin/', {'invoiceType': 'period'})
		self.assertEqual(res.status_code, 200)
		numbers = [row['invoiceNumber'] for row in res.json()['results']]
		self.assertEqual(numbers, ['PER-202403-M-01-001'])

	def test_cleanup_endpoint_is_admin_only(self):
		make_invoice(self.stranger, 'PER-EMPTY-API', Invoice.InvoiceType.PERIOD)
		self.client.force_authenticate(user=self.accountant)
		self.assertEqual(self.client.post('/api/invoices/cleanup/').status_code, 403)

		self.client.force_authenticate(user=self.admin)
		res = self.client.post('/api/invoices/cleanup/')
		self.assertEqual(res.status_code, 200)
		self.assertEqual(res.json()['deleted'], ['PER-EMPTY-API'])
