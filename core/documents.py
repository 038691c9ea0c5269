"""Printable HTML documents for orders and invoices."""

from decimal import Decimal

from django.conf import settings
from django.template.loader import render_to_string

from .i18n import localized, resolve_language

LABELS = {
    'en': {
        'invoice': 'INVOICE',
        'order': 'ORDER DETAILS',
        'invoice_number': 'Invoice Number',
        'order_reference': 'Order Reference',
        'period_invoice': 'Period Invoice',
        'period': 'Period',
        'date': 'Date',
        'status': 'Status',
        'customer': 'Customer Information',
        'name': 'Name',
        'phone': 'Phone',
        'address': 'Address',
        'payment': 'Payment Information',
        'payment_method': 'Payment Method',
        'payment_reference': 'Payment Reference',
        'payment_date': 'Payment Date',
        'items': 'Items',
        'item': 'Item',
        'quantity': 'Qty',
        'price': 'Price',
        'line_total': 'Total',
        'delivery_method': 'Delivery Method',
        'subtotal': 'Subtotal',
        'delivery': 'Delivery Cost',
        'total': 'Total',
        'missing_product': 'Product not found',
    },
    'zh-TW': {
        'invoice': '發票',
        'order': '訂單詳情',
        'invoice_number': '發票編號',
        'order_reference': '訂單編號',
        'period_invoice': '月結帳單',
        'period': '期間',
        'date': '日期',
        'status': '狀態',
        'customer': '客戶資料',
        'name': '姓名',
        'phone': '電話',
        'address': '地址',
        'payment': '付款資料',
        'payment_method': '付款方式',
        'payment_reference': '付款參考',
        'payment_date': '付款日期',
        'items': '商品',
        'item': '項目',
        'quantity': '數量',
        'price': '價格',
        'line_total': '小計',
        'delivery_method': '運送方式',
        'subtotal': '小計',
        'delivery': '運費',
        'total': '總計',
        'missing_product': '找不到商品',
    },
}


def document_lines(items, language, missing_label):
    """Table rows for order or invoice lines; each item needs ``product``, ``quantity`` and ``price``."""

    lines = []
    for item in items:
        product = item.product
        price = item.price if item.price is not None else (product.price if product else Decimal('0'))
        name = localized(product.display_names, language, product.name) if product else missing_label
        lines.append({
            'name': name,
            'quantity': item.quantity,
            'price': price,
            'total': price * item.quantity,
        })
    return lines


def render_document(template_name, language, **context):
    language = resolve_language(language)
    context.update(labels=LABELS[language], language=language, store_name=settings.STORE_NAME)
    return render_to_string(template_name, context)
