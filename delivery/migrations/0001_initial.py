import django.core.validators
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name='DeliverySettings',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('delivery_methods', models.JSONField(blank=True, default=list)),
                ('free_delivery_threshold', models.DecimalField(decimal_places=2, default=100, max_digits=12, validators=[django.core.validators.MinValueValidator(0)])),
                ('bank_account_details', models.TextField(blank=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
            ],
            options={
                'verbose_name_plural': 'Delivery Settings',
            },
        ),
    ]
