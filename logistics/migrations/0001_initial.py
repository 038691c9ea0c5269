import django.core.validators
import django.db.models.deletion
import django.utils.timezone
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('orders', '0001_initial'),
    ]

    operations = [
        migrations.CreateModel(
            name='Vehicle',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('registration_no', models.CharField(max_length=50, unique=True)),
                ('owner', models.CharField(max_length=255)),
                ('make_year', models.PositiveIntegerField()),
                ('make', models.CharField(max_length=100)),
                ('model', models.CharField(max_length=100)),
                ('chassis_no', models.CharField(max_length=100, unique=True)),
                ('weight', models.DecimalField(decimal_places=2, max_digits=10, validators=[django.core.validators.MinValueValidator(0)])),
                ('cylinder_capacity', models.PositiveIntegerField()),
                ('body_type', models.CharField(choices=[('Van', 'Van'), ('Truck', 'Truck'), ('Lorry', 'Lorry'), ('Motorcycle', 'Motorcycle')], max_length=20)),
                ('driver_name', models.CharField(max_length=255)),
                ('driver_license_no', models.CharField(max_length=100)),
                ('driver_contact_no', models.CharField(max_length=50)),
                ('driver_email', models.EmailField(max_length=254)),
                ('assigned_location', models.CharField(choices=[('Hong Kong', 'Hong Kong'), ('Kowloon', 'Kowloon'), ('New Territories', 'New Territories')], max_length=30)),
                ('assigned_date', models.DateTimeField()),
                ('status', models.CharField(choices=[('Available', 'Available'), ('On Delivery', 'On Delivery'), ('Maintenance', 'Maintenance'), ('Out of Service', 'Out of Service')], default='Available', max_length=20)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
            ],
            options={
                'ordering': ['-created_at', '-id'],
                'indexes': [
                    models.Index(fields=['assigned_location'], name='vehicle_location_idx'),
                    models.Index(fields=['status'], name='vehicle_status_idx'),
                ],
            },
        ),
        migrations.CreateModel(
            name='MaintenanceRecord',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('date', models.DateTimeField()),
                ('description', models.TextField()),
                ('cost', models.DecimalField(decimal_places=2, max_digits=12, validators=[django.core.validators.MinValueValidator(0)])),
                ('next_maintenance_date', models.DateTimeField()),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('vehicle', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='maintenance_records', to='logistics.vehicle')),
            ],
            options={
                'ordering': ['-date', '-id'],
            },
        ),
        migrations.CreateModel(
            name='DeliveryAssignment',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('assigned_at', models.DateTimeField(default=django.utils.timezone.now)),
                ('scheduled_delivery_date', models.DateTimeField()),
                ('status', models.CharField(choices=[('Pending', 'Pending'), ('In Transit', 'In Transit'), ('Delivered', 'Delivered'), ('Failed', 'Failed')], default='Pending', max_length=20)),
                ('delivery_notes', models.TextField(blank=True)),
                ('order', models.OneToOneField(on_delete=django.db.models.deletion.CASCADE, related_name='delivery_assignment', to='orders.order')),
                ('vehicle', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='assignments', to='logistics.vehicle')),
            ],
            options={
                'ordering': ['-assigned_at', '-id'],
            },
        ),
    ]
