import django.db.models.deletion
import django.utils.timezone
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('inventory', '0001_initial'),
        ('partners', '0001_initial'),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='JobCard',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('job_no', models.CharField(max_length=20, unique=True, verbose_name='Job Number')),
                ('vehicle_type', models.CharField(max_length=100)),
                ('vehicle_number', models.CharField(blank=True, max_length=50, null=True)),
                ('engine_model', models.CharField(blank=True, max_length=100, null=True)),
                ('job_type', models.CharField(max_length=100)),
                ('job_sub_type', models.CharField(blank=True, max_length=100, null=True)),
                ('brand', models.CharField(max_length=100)),
                ('pump_injector_serial', models.CharField(blank=True, max_length=100, null=True)),
                ('quantity', models.PositiveIntegerField(default=1)),
                ('status', models.CharField(default='Received', max_length=50)),
                ('received_date', models.DateField(default=django.utils.timezone.localdate)),
                ('expected_delivery_date', models.DateField(blank=True, null=True)),
                ('description', models.TextField(blank=True, null=True)),
                ('quotation_amount', models.DecimalField(blank=True, decimal_places=2, max_digits=12, null=True)),
                ('final_amount', models.DecimalField(blank=True, decimal_places=2, max_digits=12, null=True)),
                ('labour_cost', models.DecimalField(decimal_places=2, default=0, max_digits=12)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('customer', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='job_cards', to='partners.customer')),
                ('technician', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='assigned_job_cards', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'ordering': ['-created_at', '-id'],
            },
        ),
        migrations.CreateModel(
            name='JobCardMaterial',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('material_name', models.CharField(max_length=200)),
                ('quantity', models.PositiveIntegerField()),
                ('unit_price', models.DecimalField(decimal_places=2, default=0, max_digits=10)),
                ('unit_cost', models.DecimalField(decimal_places=2, default=0, max_digits=10)),
                ('total_price', models.DecimalField(decimal_places=2, default=0, max_digits=12)),
                ('total_cost', models.DecimalField(decimal_places=2, default=0, max_digits=12)),
                ('stock_deducted', models.BooleanField(default=False)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('inventory_item', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.PROTECT, related_name='job_card_materials', to='inventory.inventoryitem')),
                ('job_card', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='materials', to='jobcards.jobcard')),
            ],
            options={
                'ordering': ['-created_at', '-id'],
                'constraints': [models.CheckConstraint(condition=models.Q(('quantity__gt', 0)), name='job_card_material_quantity_positive')],
            },
        ),
        migrations.CreateModel(
            name='TestingRecord',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('test_date', models.DateField(default=django.utils.timezone.localdate)),
                ('category_type', models.CharField(blank=True, max_length=50, null=True)),
                ('schema_version', models.PositiveSmallIntegerField(default=1)),
                ('before_pressure', models.CharField(blank=True, max_length=50, null=True)),
                ('before_leak', models.CharField(blank=True, max_length=50, null=True)),
                ('before_calibration', models.CharField(blank=True, max_length=50, null=True)),
                ('before_pass_fail', models.CharField(default='Fail', max_length=10)),
                ('after_pressure', models.CharField(blank=True, max_length=50, null=True)),
                ('after_leak', models.CharField(blank=True, max_length=50, null=True)),
                ('after_calibration', models.CharField(blank=True, max_length=50, null=True)),
                ('after_pass_fail', models.CharField(default='Fail', max_length=10)),
                ('pilot_injection', models.CharField(blank=True, max_length=50, null=True)),
                ('main_injection', models.CharField(blank=True, max_length=50, null=True)),
                ('return_flow', models.CharField(blank=True, max_length=50, null=True)),
                ('injector_pressure', models.CharField(blank=True, max_length=50, null=True)),
                ('leak_test', models.CharField(default='Fail', max_length=10)),
                ('before_data', models.JSONField(blank=True, null=True)),
                ('after_data', models.JSONField(blank=True, null=True)),
                ('tested_by', models.CharField(blank=True, max_length=100, null=True)),
                ('approved_by', models.CharField(blank=True, max_length=100, null=True)),
                ('approval_date', models.DateField(blank=True, null=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('job_card', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='testing_records', to='jobcards.jobcard')),
            ],
            options={
                'ordering': ['-created_at', '-id'],
            },
        ),
    ]
