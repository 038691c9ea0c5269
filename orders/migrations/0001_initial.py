import django.core.validators
import django.db.models.deletion
import orders.models
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('products', '0001_initial'),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='Order',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('name', models.CharField(max_length=255)),
                ('email', models.EmailField(max_length=254)),
                ('phone', models.CharField(max_length=20, validators=[django.core.validators.RegexValidator(message='%(value)s is not a valid phone number!', regex='^\\d{8,}$')])),
                ('shipping_address', models.JSONField(validators=[orders.models.validate_shipping_address])),
                ('delivery_method', models.PositiveIntegerField()),
                ('delivery_method_label', models.JSONField(blank=True, null=True)),
                ('delivery_cost', models.DecimalField(blank=True, decimal_places=2, default=0, max_digits=12, null=True)),
                ('subtotal', models.DecimalField(blank=True, decimal_places=2, default=0, max_digits=12, null=True)),
                ('total', models.DecimalField(blank=True, decimal_places=2, default=0, max_digits=12, null=True)),
                ('payment_method', models.CharField(choices=[('online', 'Online'), ('offline', 'Offline'), ('periodInvoice', 'Period invoice')], max_length=20)),
                ('order_type', models.CharField(choices=[('onetime-order', 'One-time order'), ('period-order', 'Period order')], default='onetime-order', max_length=20)),
                ('status', models.CharField(choices=[('pending', 'Pending'), ('pending_payment_verification', 'Pending payment verification'), ('processing', 'Processing'), ('shipped', 'Shipped'), ('delivered', 'Delivered'), ('cancelled', 'Cancelled')], default='pending', max_length=40)),
                ('paid', models.BooleanField(default=False)),
                ('period_invoice_number', models.CharField(blank=True, max_length=50)),
                ('period_start', models.DateTimeField(blank=True, null=True)),
                ('period_end', models.DateTimeField(blank=True, null=True)),
                ('invoice_number', models.CharField(blank=True, max_length=50)),
                ('order_reference', models.CharField(blank=True, db_index=True, max_length=50)),
                ('payment_proof', models.URLField(blank=True, max_length=500)),
                ('payment_reference', models.CharField(blank=True, max_length=255)),
                ('payment_date', models.CharField(blank=True, max_length=50)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('user', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='orders', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'ordering': ['-created_at', '-id'],
                'indexes': [
                    models.Index(fields=['user', 'created_at'], name='order_user_created_idx'),
                    models.Index(fields=['status', 'created_at'], name='order_status_created_idx'),
                ],
            },
        ),
        migrations.CreateModel(
            name='OrderItem',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('quantity', models.PositiveIntegerField(validators=[django.core.validators.MinValueValidator(1)])),
                ('price', models.DecimalField(blank=True, decimal_places=2, max_digits=12, null=True, validators=[django.core.validators.MinValueValidator(0)])),
                ('order', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='items', to='orders.order')),
                ('product', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='+', to='products.product')),
            ],
            options={
                'verbose_name': 'Order Item',
                'verbose_name_plural': 'Order Items',
                'indexes': [
                    models.Index(fields=['order', 'product'], name='orderitem_order_product_idx'),
                ],
            },
        ),
    ]
