"""Order confirmation email."""

import logging

from django.conf import settings
from django.core.mail import EmailMultiAlternatives
from django.template.loader import render_to_string
from django.utils import timezone

from core.i18n import DEFAULT_LANGUAGE, localized, resolve_language

logger = logging.getLogger(__name__)

LABELS = {
    'en': {
        'subject': 'Order Confirmation #{reference}',
        'heading': 'Order Confirmation',
        'thanks': 'Thank you for your order!',
        'details': 'Order Details',
        'reference': 'Order Reference',
        'status': 'Status',
        'date': 'Date',
        'items': 'Items',
        'quantity': 'Quantity',
        'price': 'Price',
        'subtotal': 'Subtotal',
        'delivery': 'Delivery Cost',
        'total': 'Total',
        'address': 'Shipping Address',
        'payment': 'Payment Method',
        'closing': 'We will process your order shortly. You can track your order status in your account dashboard.',
        'signature': 'Your Store Team',
        'payment_methods': {'offline': 'Bank Transfer', 'online': 'Credit Card', 'periodInvoice': 'Period Invoice'},
    },
    'zh-TW': {
        'subject': '訂單確認 #{reference}',
        'heading': '訂單確認',
        'thanks': '感謝您的訂購！',
        'details': '訂單詳情',
        'reference': '訂單編號',
        'status': '狀態',
        'date': '日期',
        'items': '商品',
        'quantity': '數量',
        'price': '價格',
        'subtotal': '小計',
        'delivery': '運費',
        'total': '總計',
        'address': '送貨地址',
        'payment': '付款方式',
        'closing': '我們將盡快處理您的訂單。您可以在帳戶儀表板中追蹤訂單狀態。',
        'signature': '您的商店團隊',
        'payment_methods': {'offline': '銀行轉帳', 'online': '信用卡', 'periodInvoice': '月結帳單'},
    },
}


def build_order_confirmation(order, language=DEFAULT_LANGUAGE):
    """Return ``(subject, text, html)`` for ``order`` in ``language``."""

    language = resolve_language(language)
    labels = LABELS[language]
    items = []
    for item in order.items.select_related('product'):
        product = item.product
        fallback = product.name if product else ''
        items.append({
            'name': localized(product.display_names, language, fallback) if product else '',
            'quantity': item.quantity,
            'line_total': item.line_total,
        })

    context = {
        'labels': labels,
        'order': order,
        'items': items,
        'address': localized(order.shipping_address, language),
        'payment_method': labels['payment_methods'].get(order.payment_method, order.payment_method),
        'created': timezone.localtime(order.created_at).date(),
        'store_name': settings.STORE_NAME,
    }
    subject = labels['subject'].format(reference=order.order_reference)
    text = render_to_string('orders/email/confirmation.txt', context)
    html = render_to_string('orders/email/confirmation.html', context)
    return subject, text, html


def send_order_confirmation(order_id):
    """Send the confirmation for ``order_id``; failures are logged only."""

    from .models import Order

    try:
        order = Order.objects.select_related('user').get(pk=order_id)
        subject, text, html = build_order_confirmation(order, order.user.language)
        message = EmailMultiAlternatives(subject, text, settings.DEFAULT_FROM_EMAIL, [order.email])
        message.attach_alternative(html, 'text/html')
        message.send()
        logger.info("Sent order confirmation for order %s", order_id)
    except Exception:
        logger.exception("Failed to send order confirmation email for order %s", order_id)
