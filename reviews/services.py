"""Review eligibility and product rating aggregates."""

from decimal import ROUND_HALF_UP, Decimal

from django.db.models import Avg, Count

from orders.models import Order
from products.models import Product
from .models import Review


def has_received_product(user, product_id) -> bool:
    """True when ``user`` has a delivered and paid order containing the product."""
    return Order.objects.filter(
        user=user,
        status=Order.Status.DELIVERED,
        paid=True,
        items__product_id=product_id,
    ).exists()


def can_review(user, product_id) -> bool:
    if not user or not user.is_authenticated:
        return False
    if not has_received_product(user, product_id):
        return False
    return not Review.objects.filter(user=user, product_id=product_id).exists()


def refresh_product_rating(product_id):
    """Recompute ``num_reviews`` and ``average_rating`` from the stored reviews."""

    stats = Review.objects.filter(product_id=product_id).aggregate(count=Count('id'), average=Avg('rating'))
    count = stats['count'] or 0
    average = Decimal(str(stats['average'] or 0)).quantize(Decimal('0.01'), rounding=ROUND_HALF_UP)
    Product.objects.filter(pk=product_id).update(num_reviews=count, average_rating=average)
    return count, average
