"""Checkout: turn a submitted cart into an order and its invoice.

``place_order`` validates the payload, prices the cart against the delivery
settings and then, inside one database transaction, either

- appends a ``period-order`` to the user's open period invoice, or
- creates a ``onetime-order`` with its own one-time invoice.

Validation problems are raised as :class:`CheckoutError` carrying the HTTP
status and the JSON body the view returns.
"""

import logging
import math
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

from django.db import transaction
from django.utils import timezone

from accounts.models import PaymentHistory
from core.i18n import missing_languages
from delivery.models import DeliverySettings
from invoices.models import Invoice, InvoiceItem
from invoices.numbering import generate_one_time_invoice_number, generate_order_reference
from invoices.services import get_or_create_period_invoice, parse_payment_date
from products.models import Product
from .emails import send_order_confirmation
from .models import Order, OrderItem

logger = logging.getLogger(__name__)

CENT = Decimal('0.01')

REQUIRED_FIELDS = ('name', 'email', 'phone', 'shippingAddress', 'cartItems', 'deliveryMethod', 'paymentMethod')

INVOICE_PAYMENT_METHODS = {
    Order.PaymentMethod.OFFLINE: Invoice.PaymentMethod.OFFLINE_PAYMENT,
    Order.PaymentMethod.ONLINE: Invoice.PaymentMethod.CREDIT_CARD,
}


class CheckoutError(Exception):
    def __init__(self, error, details=None, status_code=400):
        super().__init__(error)
        self.error = error
        self.details = details
        self.status_code = status_code

    def as_response_body(self):
        body = {'error': self.error}
        if self.details is not None:
            body['details'] = self.details
        return body


def to_money(value) -> Decimal:
    """Decimal amount rounded to cents; missing or malformed values count as 0."""
    if value is None or isinstance(value, bool):
        return Decimal('0')
    try:
        amount = Decimal(str(value))
    except (InvalidOperation, ValueError):
        return Decimal('0')
    if not amount.is_finite():
        return Decimal('0')
    return amount.quantize(CENT, rounding=ROUND_HALF_UP)


def to_quantity(value) -> int:
    if isinstance(value, bool):
        return 0
    try:
        return int(value)
    except (TypeError, ValueError):
        return 0


def coerce_delivery_index(value):
    """Interpret the submitted delivery method as a list index.

    Integers, integral floats and numeric strings are accepted. Anything else
    (``None``, booleans, fractions, text) yields ``None``, i.e. not a number.
    """

    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        value = value.strip()
        if not value:
            return None
        try:
            value = float(value)
        except ValueError:
            return None
    if isinstance(value, float):
        if math.isfinite(value) and value.is_integer():
            return int(value)
        return None
    return None


def _json_type(value):
    if value is None:
        return 'null'
    if isinstance(value, bool):
        return 'boolean'
    if isinstance(value, (int, float)):
        return 'number'
    if isinstance(value, str):
        return 'string'
    return 'object'


def _is_blank(value):
    """Blank means absent, null, empty text, false or zero. Empty lists and
    objects count as present and fail the shape checks instead."""
    if value is None or value is False or value == '':
        return True
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return value == 0 or value != value
    return False


def _validate_payload(data):
    missing = {field: _is_blank(data.get(field)) for field in REQUIRED_FIELDS}
    missing['deliveryMethod'] = 'deliveryMethod' not in data
    if any(missing.values()):
        raise CheckoutError('Missing required fields', missing)

    address = data['shippingAddress']
    absent = missing_languages(address)
    if any(absent.values()):
        raise CheckoutError('Invalid shipping address', {'missing': absent})

    cart = data['cartItems']
    if not isinstance(cart, list) or not cart:
        raise CheckoutError('Invalid cart items', {
            'isArray': isinstance(cart, list),
            'length': len(cart) if isinstance(cart, (list, str)) else None,
        })


def _cart_lines(cart):
    """Resolve cart entries to ``(product, quantity, price)`` tuples."""

    lines, unknown = [], []
    ids = [item.get('id') or item.get('_id') if isinstance(item, dict) else None for item in cart]
    products = Product.objects.in_bulk([pk for pk in ids if isinstance(pk, int) or str(pk).isdigit()])

    for item, product_id in zip(cart, ids):
        item = item if isinstance(item, dict) else {}
        product = products.get(int(product_id)) if str(product_id).isdigit() else None
        if product is None:
            unknown.append(product_id)
            continue
        lines.append((product, to_quantity(item.get('quantity')), to_money(item.get('price'))))

    if unknown:
        raise CheckoutError('Invalid cart items', {
            'isArray': True,
            'length': len(cart),
            'unknownProducts': unknown,
        })
    return lines


def _resolve_delivery(settings, raw_method, subtotal):
    methods = settings.delivery_methods or []
    index = coerce_delivery_index(raw_method)
    method = settings.method_at(index)
    if method is None:
        raise CheckoutError('Invalid delivery method', {
            'deliveryMethod': raw_method,
            'deliveryMethodIndex': index,
            'type': _json_type(raw_method),
            'methodsLength': len(methods),
            'validation': {
                'isNaN': index is None,
                'isNegative': index is not None and index < 0,
                'isOutOfBounds': index is not None and index >= len(methods),
            },
        })

    cost = to_money(method.get('cost'))
    if subtotal >= settings.free_delivery_threshold:
        cost = Decimal('0.00')
    return index, method, cost


def _subtotal(cart):
    total = Decimal('0')
    for item in cart:
        item = item if isinstance(item, dict) else {}
        total += to_money(item.get('price')) * to_quantity(item.get('quantity'))
    return total.quantize(CENT, rounding=ROUND_HALF_UP)


def _create_lines(order, lines, invoice=None):
    items = []
    for product, quantity, price in lines:
        item = OrderItem(order=order, product=product, quantity=quantity, price=price)
        item.full_clean()
        items.append(item)
    OrderItem.objects.bulk_create(items)

    if invoice is not None:
        InvoiceItem.objects.bulk_create([
            InvoiceItem(invoice=invoice, order=order, product=product, quantity=quantity, price=price)
            for product, quantity, price in lines
        ])


def place_order(user, data) -> Order:
    """Validate ``data`` and write the order; returns the saved order."""

    _validate_payload(data)

    settings = DeliverySettings.load()
    if settings is None:
        raise CheckoutError('Delivery settings not found', status_code=404)

    cart = data['cartItems']
    subtotal = _subtotal(cart)
    delivery_index, method, delivery_cost = _resolve_delivery(settings, data['deliveryMethod'], subtotal)
    total = subtotal + delivery_cost

    payment_method = data['paymentMethod']
    if payment_method not in Order.PaymentMethod.values:
        raise CheckoutError('Invalid payment method', {'paymentMethod': payment_method})

    if payment_method == Order.PaymentMethod.PERIOD_INVOICE:
        if not user.is_period_paid_user or not user.payment_period:
            raise CheckoutError('User is not a period-paid user')

    lines = _cart_lines(cart)

    address = data['shippingAddress']
    shipping_address = {code: address[code] for code in ('en', 'zh-TW')}
    if address.get('coordinates'):
        shipping_address['coordinates'] = address['coordinates']

    order = Order(
        user=user,
        name=str(data['name']).strip(),
        email=str(data['email']).strip(),
        phone=str(data['phone']).strip(),
        shipping_address=shipping_address,
        delivery_method=delivery_index,
        delivery_method_label=method.get('name'),
        delivery_cost=delivery_cost,
        subtotal=subtotal,
        total=total,
        payment_method=payment_method,
    )

    with transaction.atomic():
        order.order_reference = generate_order_reference()
        if payment_method == Order.PaymentMethod.PERIOD_INVOICE:
            _place_period_order(user, order, lines)
        else:
            _place_one_time_order(user, order, lines, data)

        order_id = order.pk
        transaction.on_commit(lambda: send_order_confirmation(order_id))

    logger.info(
        "Checkout by user %s: order %s (%s), total %s",
        user.pk, order.pk, order.order_type, order.total,
    )
    return order


def _place_period_order(user, order, lines):
    now = timezone.now()
    contact = {
        'name': order.name,
        'email': order.email,
        'phone': order.phone,
        'shipping_address': order.shipping_address,
    }
    invoice, _ = get_or_create_period_invoice(user, contact, now)

    order.order_type = Order.OrderType.PERIOD
    order.status = Order.Status.PENDING
    order.paid = False
    order.period_invoice_number = invoice.invoice_number
    order.period_start = invoice.period_start
    order.period_end = invoice.period_end
    order.full_clean()
    order.save()

    _create_lines(order, lines, invoice)
    invoice.orders.add(order)
    invoice.amount = (invoice.amount or Decimal('0')) + order.total
    invoice.save(update_fields=['amount', 'updated_at'])

    PaymentHistory.objects.get_or_create(
        user=user,
        period_start=invoice.period_start,
        period_end=invoice.period_end,
        defaults={'amount': invoice.amount, 'status': 'pending', 'invoice': invoice},
    )


def _place_one_time_order(user, order, lines, data):
    offline = order.payment_method == Order.PaymentMethod.OFFLINE
    now = timezone.now()

    order.order_type = Order.OrderType.ONE_TIME
    if offline:
        order.status = Order.Status.PENDING_PAYMENT_VERIFICATION
        order.payment_proof = data.get('paymentProofUrl') or ''
        order.payment_reference = data.get('paymentReference') or ''
        order.payment_date = str(data.get('paymentDate') or '')
    else:
        order.status = Order.Status.PENDING
    order.full_clean()
    order.save()

    invoice = Invoice(
        user=user,
        invoice_number=generate_one_time_invoice_number(),
        name=order.name,
        email=order.email,
        phone=order.phone,
        invoice_type=Invoice.InvoiceType.ONE_TIME,
        amount=order.total,
        status=Invoice.Status.PENDING,
        shipping_address=order.shipping_address,
        billing_address=order.shipping_address,
        delivery_method=order.delivery_method,
        delivery_cost=order.delivery_cost,
        subtotal=order.subtotal,
        total=order.total,
        period_start=now,
        period_end=now,
        payment_method=INVOICE_PAYMENT_METHODS[order.payment_method],
    )
    if offline:
        invoice.payment_proof_url = order.payment_proof
        invoice.payment_date = parse_payment_date(data.get('paymentDate'), default=now)
    invoice.full_clean()
    invoice.save()

    _create_lines(order, lines, invoice)
    invoice.orders.add(order)

    order.invoice_number = invoice.invoice_number
    order.save(update_fields=['invoice_number', 'updated_at'])
