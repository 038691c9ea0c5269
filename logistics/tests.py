"""Fleet, maintenance and delivery assignment tests."""

from decimal import Decimal

from django.contrib.auth import get_user_model
from django.test import TestCase, override_settings
from rest_framework.test import APIClient

from invoices.models import Invoice
from logistics.models import DeliveryAssignment, MaintenanceRecord, Vehicle
from orders.models import Order

ADDRESS = {'en': '1 Main Street', 'zh-TW': '主街1號'}


def vehicle_payload(**overrides):
	data = {
		'registrationNo': 'AB1234',
		'owner': 'Storefront Ltd',
		'makeYear': 2020,
		'make': 'Toyota',
		'model': 'HiAce',
		'chassisNo': 'CH-0001',
		'weight': 1800.5,
		'cylinderCapacity': 2800,
		'bodyType': 'Van',
		'driver': {
			'name': 'Lee Driver',
			'licenseNo': 'L-998',
			'contactNo': '91234567',
			'email': 'Lee@Example.com',
		},
		'assignedLocation': 'Kowloon',
		'assignedDate': '2024-03-01T09:00:00Z',
	}
	data.update(overrides)
	return data


@override_settings(ALLOWED_HOSTS=['testserver', 'localhost', '127.0.0.1'])
class VehicleApiTests(TestCase):

	@classmethod
	def setUpTestData(cls):
		User = get_user_model()
		cls.logistics = User.objects.create_user(
			username='logistics', email='logistics@example.com', password='12345678', role='logistics',
		)
		cls.customer = User.objects.create_user(
			username='customer', email='customer@example.com', password='12345678',
		)

	def setUp(self):
		self.client = APIClient()
		self.client.force_authenticate(user=self.logistics)

	def create_vehicle(self, **overrides):
		res = self.client.post('/api/logistics/', vehicle_payload(**overrides), format='json')
		self.assertEqual(res.status_code, 201, res.content)
		return res.json()

	def test_back_office_only(self):
		self.client.force_authenticate(user=None)
		self.assertEqual(self.client.get('/api/logistics/').status_code, 401)
		self.client.force_authenticate(user=self.customer)
		self.assertEqual(self.client.get('/api/logistics/').status_code, 403)

	def test_create_and_read(self):
		body = self.create_vehicle()
		self.assertEqual(body['status'], 'Available')
		self.assertEqual(body['driver']['email'], 'lee@example.com')
		self.assertEqual(body['assignedOrders'], [])

		vehicle = Vehicle.objects.get(pk=body['id'])
		self.assertEqual(vehicle.driver_license_no, 'L-998')
		self.assertEqual(vehicle.weight, Decimal('1800.50'))

		res = self.client.get(f"/api/logistics/{body['id']}/")
		self.assertEqual(res.status_code, 200)
		self.assertEqual(res.json()['registrationNo'], 'AB1234')
		self.assertEqual(self.client.get('/api/logistics/999999/').status_code, 404)

	def test_duplicate_registration_rejected(self):
		self.create_vehicle()
		res = self.client.post('/api/logistics/', vehicle_payload(chassisNo='CH-0002'), format='json')
		self.assertEqual(res.status_code, 400)
		self.assertIn('registrationNo', res.json()['details'])

	def test_list_filters(self):
		self.create_vehicle()
		self.create_vehicle(registrationNo='XY9', chassisNo='CH-9', bodyType='Truck', assignedLocation='Hong Kong')

		res = self.client.get('/api/logistics/', {'bodyType': 'Truck'})
		self.assertEqual([row['registrationNo'] for row in res.json()], ['XY9'])
		res = self.client.get('/api/logistics/', {'location': 'Kowloon'})
		self.assertEqual([row['registrationNo'] for row in res.json()], ['AB1234'])

	def test_status_only_update(self):
		body = self.create_vehicle()
		res = self.client.put(f"/api/logistics/{body['id']}/", {'status': 'Maintenance'}, format='json')
		self.assertEqual(res.status_code, 200)
		self.assertEqual(res.json()['status'], 'Maintenance')
		self.assertEqual(res.json()['make'], 'Toyota')

	def test_full_update_requires_every_field(self):
		body = self.create_vehicle()
		res = self.client.put(f"/api/logistics/{body['id']}/", {'owner': 'Other', 'make': 'Ford'}, format='json')
		self.assertEqual(res.status_code, 400)

		res = self.client.put(f"/api/logistics/{body['id']}/", vehicle_payload(owner='Other'), format='json')
		self.assertEqual(res.status_code, 200)
		self.assertEqual(res.json()['owner'], 'Other')

	def test_update_by_id_in_body(self):
		body = self.create_vehicle()
		res = self.client.put('/api/logistics/', {'id': body['id'], 'status': 'Out of Service'}, format='json')
		self.assertEqual(res.status_code, 200)
		self.assertEqual(res.json()['status'], 'Out of Service')
		self.assertEqual(self.client.put('/api/logistics/', {'status': 'Available'}, format='json').status_code, 404)

	def test_maintenance_record(self):
		body = self.create_vehicle()
		url = f"/api/logistics/{body['id']}/maintenance/"

		res = self.client.post(url, {'description': 'Oil change'}, format='json')
		self.assertEqual(res.status_code, 400)
		self.assertEqual(res.json()['error'], 'Missing required fields')

		res = self.client.post(url, {
			'date': '2024-03-05T10:00:00Z',
			'description': 'Oil change',
			'cost': 450,
			'nextMaintenanceDate': '2024-09-05T10:00:00Z',
		}, format='json')
		self.assertEqual(res.status_code, 201)
		self.assertEqual(len(res.json()['maintenanceRecords']), 1)
		self.assertEqual(MaintenanceRecord.objects.get().cost, Decimal('450.00'))

		res = self.client.post('/api/logistics/999999/maintenance/', {
			'date': '2024-03-05T10:00:00Z', 'description': 'x', 'cost': 1,
			'nextMaintenanceDate': '2024-09-05T10:00:00Z',
		}, format='json')
		self.assertEqual(res.status_code, 404)


@override_settings(ALLOWED_HOSTS=['testserver', 'localhost', '127.0.0.1'])
class AssignmentApiTests(TestCase):

	@classmethod
	def setUpTestData(cls):
		User = get_user_model()
		cls.logistics = User.objects.create_user(
			username='logistics', email='logistics@example.com', password='12345678', role='logistics',
		)
		cls.customer = User.objects.create_user(
			username='customer', email='customer@example.com', password='12345678',
		)

	def setUp(self):
		self.client = APIClient()
		self.client.force_authenticate(user=self.logistics)
		self.vehicle = Vehicle.objects.create(
			registration_no='AB1234', owner='Storefront Ltd', make_year=2020, make='Toyota', model='HiAce',
			chassis_no='CH-0001', weight='1800', cylinder_capacity=2800, body_type='Van',
			driver_name='Lee', driver_license_no='L-1', driver_contact_no='91234567',
			driver_email='lee@example.com', assigned_location='Kowloon', assigned_date='2024-03-01T09:00:00Z',
		)
		self.order = Order.objects.create(
			user=self.customer, name='Pat', email='pat@example.com', phone='91234567',
			shipping_address=ADDRESS, delivery_method=0, payment_method='online',
			total='200.00', subtotal='200.00',
		)

	def assign(self, **overrides):
		data = {
			'vehicleId': self.vehicle.pk,
			'orderId': self.order.pk,
			'scheduledDeliveryDate': '2024-03-10T09:00:00Z',
		}
		data.update(overrides)
		return self.client.post('/api/logistics/assign/', data, format='json')

	def test_assign_requires_fields(self):
		res = self.client.post('/api/logistics/assign/', {'vehicleId': self.vehicle.pk}, format='json')
		self.assertEqual(res.status_code, 400)
		self.assertEqual(res.json()['error'], 'Vehicle ID, Order ID and delivery date are required')

	def test_assign_marks_vehicle_and_order(self):
		res = self.assign()
		self.assertEqual(res.status_code, 200)
		self.assertEqual(res.json()['status'], 'On Delivery')
		self.assertEqual(res.json()['assignedOrders'][0]['order']['id'], self.order.pk)

		self.order.refresh_from_db()
		self.assertEqual(self.order.status, Order.Status.PROCESSING)

		res = self.client.get('/api/logistics/assign/', {'orderId': self.order.pk})
		self.assertEqual(res.json()['vehicle']['id'], self.vehicle.pk)

	def test_lookup_without_assignment(self):
		self.assertEqual(self.client.get('/api/logistics/assign/').status_code, 400)
		res = self.client.get('/api/logistics/assign/', {'orderId': self.order.pk})
		self.assertEqual(res.json(), {'vehicle': None})

	def test_busy_vehicle_and_assigned_order_rejected(self):
		self.assertEqual(self.assign().status_code, 200)

		res = self.assign()
		self.assertEqual(res.status_code, 400)
		self.assertEqual(res.json()['error'], 'Vehicle is not available for assignment')

		Vehicle.objects.filter(pk=self.vehicle.pk).update(status=Vehicle.Status.AVAILABLE)
		res = self.assign()
		self.assertEqual(res.status_code, 400)
		self.assertEqual(res.json()['error'], 'Order is already assigned to a vehicle')

	def test_unknown_vehicle_or_order(self):
		self.assertEqual(self.assign(vehicleId=999999).status_code, 404)
		res = self.assign(orderId=999999)
		self.assertEqual(res.status_code, 404)
		self.assertEqual(res.json()['error'], 'Order not found')
		self.assertFalse(DeliveryAssignment.objects.exists())

	def test_delivered_run_frees_vehicle_and_pays_invoice(self):
		invoice = Invoice.objects.create(
			user=self.customer, invoice_number='INV-202403-0001', name='Pat', email='pat@example.com',
			phone='91234567', invoice_type=Invoice.InvoiceType.ONE_TIME, amount='200.00',
			period_start=self.order.created_at, period_end=self.order.created_at,
		)
		invoice.orders.add(self.order)
		self.assign()

		res = self.client.put('/api/logistics/assign/', {
			'vehicleId': self.vehicle.pk, 'orderId': self.order.pk,
			'status': 'Delivered', 'deliveryNotes': 'Left at reception',
		}, format='json')
		self.assertEqual(res.status_code, 200)
		self.assertEqual(res.json()['status'], 'Available')
		self.assertEqual(res.json()['assignedOrders'][0]['deliveryNotes'], 'Left at reception')

		self.order.refresh_from_db()
		self.assertEqual(self.order.status, Order.Status.DELIVERED)
		invoice.refresh_from_db()
		self.assertEqual(invoice.status, Invoice.Status.PAID)

	def test_failed_run_cancels_order(self):
		self.assign()
		res = self.client.put('/api/logistics/assign/', {
			'vehicleId': self.vehicle.pk, 'orderId': self.order.pk, 'status': 'Failed',
		}, format='json')
		self.assertEqual(res.status_code, 200)
		self.order.refresh_from_db()
		self.assertEqual(self.order.status, Order.Status.CANCELLED)

	def test_progress_update_errors(self):
		res = self.client.put('/api/logistics/assign/', {'vehicleId': self.vehicle.pk}, format='json')
		self.assertEqual(res.status_code, 400)

		res = self.client.put('/api/logistics/assign/', {
			'vehicleId': self.vehicle.pk, 'orderId': self.order.pk, 'status': 'Lost',
		}, format='json')
		self.assertEqual(res.json()['error'], 'Invalid delivery status')

		res = self.client.put('/api/logistics/assign/', {
			'vehicleId': self.vehicle.pk, 'orderId': self.order.pk, 'status': 'In Transit',
		}, format='json')
		self.assertEqual(res.status_code, 404)

	def test_vehicle_with_open_run_cannot_be_deleted(self):
		self.assign()
		res = self.client.delete(f'/api/logistics/{self.vehicle.pk}/')
		self.assertEqual(res.status_code, 400)

		DeliveryAssignment.objects.update(status=DeliveryAssignment.Status.DELIVERED)
		res = self.client.delete(f'/api/logistics/{self.vehicle.pk}/')
		self.assertEqual(res.json(), {'success': True})
		self.assertFalse(Vehicle.objects.exists())
