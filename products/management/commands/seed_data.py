"""Seed sample catalog data for local development.

Creates:
- Delivery settings with a courier and a pickup method
- Brands and categories with bilingual names
- Products with bilingual names, descriptions and placeholder images
- Customers, one of them billed monthly through period invoices

Existing rows are kept; brands, categories and customers are matched by name
or username so the command can be re-run.

Usage:
  python manage.py seed_data
  python manage.py seed_data --products 60 --customers 8 --seed 42
"""

import hashlib
import random
from decimal import ROUND_HALF_UP, Decimal

from django.contrib.auth import get_user_model
from django.contrib.auth.hashers import make_password
from django.core.management.base import BaseCommand, CommandError
from django.db import transaction
from faker import Faker

from delivery.models import DeliverySettings
from products.models import Brand, Category, Product

BRANDS = [
    ('Acme', '頂點', 'wrench'),
    ('Globex', '環球', 'globe'),
    ('Initech', '創新', 'cpu'),
    ('Umbrella', '雨傘', 'umbrella'),
    ('Stark', '斯塔克', 'zap'),
]

CATEGORIES = [
    ('Tools', '工具', 'hammer', [
        {'key': 'weight', 'type': 'text', 'displayNames': {'en': 'Weight', 'zh-TW': '重量'}},
        {'key': 'power', 'type': 'select', 'displayNames': {'en': 'Power', 'zh-TW': '電源'},
         'options': {'en': ['Battery', 'Corded'], 'zh-TW': ['電池', '插電']}},
    ]),
    ('Kitchen', '廚房', 'utensils', [
        {'key': 'material', 'type': 'text', 'displayNames': {'en': 'Material', 'zh-TW': '材質'}},
    ]),
    ('Electronics', '電子產品', 'tv', [
        {'key': 'warranty', 'type': 'text', 'displayNames': {'en': 'Warranty', 'zh-TW': '保固'}},
    ]),
    ('Garden', '園藝', '🌱', []),
]


def _money(value) -> Decimal:
    return Decimal(str(value)).quantize(Decimal('0.01'), rounding=ROUND_HALF_UP)


def _image_url(name: str, index: int) -> str:
    """Deterministic placeholder image for a product name."""
    seed = hashlib.sha1(f"{name}:{index}".encode('utf-8')).hexdigest()[:18]
    return f"https://picsum.photos/seed/{seed}/900/700"


class Command(BaseCommand):
    help = "Seed sample brands, categories, products, customers and delivery settings."

    def add_arguments(self, parser):
        parser.add_argument('--products', type=int, default=30, help='Number of products to generate.')
        parser.add_argument('--customers', type=int, default=5, help='Number of customers to generate.')
        parser.add_argument('--seed', type=int, default=None, help='Random seed for reproducible data.')

    def handle(self, *args, **options):
        products_target = int(options['products'])
        customers_target = int(options['customers'])
        if products_target < 0 or customers_target < 0:
            raise CommandError('--products and --customers must not be negative')

        fake_en = Faker('en_US')
        fake_zh = Faker('zh_TW')
        if options.get('seed') is not None:
            random.seed(options['seed'])
            Faker.seed(options['seed'])

        with transaction.atomic():
            self._seed_delivery()
            brands = self._seed_brands()
            categories = self._seed_categories()
            created = self._seed_products(fake_en, fake_zh, brands, categories, products_target)
            customers = self._seed_customers(fake_en, fake_zh, customers_target)

        self.stdout.write(self.style.SUCCESS(
            f"Seeded {len(brands)} brands, {len(categories)} categories, "
            f"{created} products and {customers} customers."
        ))

    def _seed_delivery(self):
        settings = DeliverySettings.get_or_create_default()
        if not settings.delivery_methods:
            settings.delivery_methods = [
                {'name': {'en': 'Home delivery', 'zh-TW': '宅配'}, 'cost': 80},
                {'name': {'en': 'Store pickup', 'zh-TW': '門市自取'}, 'cost': 0},
            ]
            settings.free_delivery_threshold = Decimal('1000')
            settings.save()

    def _seed_brands(self):
        brands = []
        for order, (name, name_zh, icon) in enumerate(BRANDS):
            brand, _ = Brand.objects.get_or_create(
                name=name,
                defaults={'display_names': {'en': name, 'zh-TW': name_zh}, 'icon': icon, 'order': order},
            )
            brands.append(brand)
        return brands

    def _seed_categories(self):
        categories = []
        for name, name_zh, icon, specs in CATEGORIES:
            category = Category.objects.filter(name=name).first()
            if category is None:
                category = Category.objects.create(
                    name=name,
                    display_names={'en': name, 'zh-TW': name_zh},
                    icon=icon,
                    specifications=specs,
                )
            categories.append(category)
        return categories

    def _seed_products(self, fake_en, fake_zh, brands, categories, count):
        for index in range(count):
            category = random.choice(categories)
            name = f"{fake_en.color_name()} {category.name[:-1] if category.name.endswith('s') else category.name} {fake_en.word().title()}"
            price = _money(random.uniform(50, 3000))
            specifications = [
                {'key': spec['key'], 'value': spec['options']['en'][0] if spec.get('options') else fake_en.word()}
                for spec in category.specifications
            ]
            Product.objects.create(
                name=name,
                display_names={'en': name, 'zh-TW': f"{fake_zh.word()}{category.display_names.get('zh-TW', '')}"},
                description=fake_en.paragraph(nb_sentences=3),
                descriptions={'en': fake_en.paragraph(nb_sentences=3), 'zh-TW': fake_zh.paragraph(nb_sentences=3)},
                price=price,
                original_price=_money(price * Decimal('1.2')) if random.random() < 0.3 else None,
                images=[_image_url(name, 0), _image_url(name, 1)],
                brand=random.choice(brands),
                category=category,
                stock=random.randint(0, 50),
                featured=random.random() < 0.1,
                specifications=specifications,
            )
        return count

    def _seed_customers(self, fake_en, fake_zh, count):
        User = get_user_model()
        password = make_password('password123')
        created = 0
        for index in range(1, count + 1):
            username = f'customer_{index}'
            _, was_created = User.objects.get_or_create(
                username=username,
                defaults={
                    'email': f'customer{index}@example.com',
                    'name': fake_en.name(),
                    'phone': fake_en.numerify('09########'),
                    'address': {'en': fake_en.address().replace('\n', ', '), 'zh-TW': fake_zh.address()},
                    'password': password,
                    'is_period_paid_user': index == 1,
                    'payment_period': 'monthly' if index == 1 else None,
                },
            )
            created += int(was_created)
        return created
