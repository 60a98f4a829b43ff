import uuid

import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name='Consultation',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('patient_id', models.CharField(max_length=64)),
                ('provider_id', models.CharField(max_length=64)),
                ('service_id', models.CharField(blank=True, max_length=64, null=True)),
                ('service_name', models.CharField(blank=True, max_length=200, null=True)),
                ('status', models.CharField(default='completed', max_length=20)),
                ('notes', models.JSONField(blank=True, default=dict)),
                ('medications', models.JSONField(blank=True, default=list)),
                ('follow_up', models.JSONField(blank=True, default=dict)),
                ('resources', models.JSONField(blank=True, default=list)),
                ('is_published_to_patient', models.BooleanField(default=False)),
                ('published_at', models.DateTimeField(blank=True, null=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
            ],
            options={'db_table': 'consultations'},
        ),
        migrations.CreateModel(
            name='PatientContact',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('patient_id', models.CharField(max_length=64, unique=True)),
                ('email', models.EmailField(blank=True, max_length=254, null=True)),
                ('phone', models.CharField(blank=True, max_length=32, null=True)),
                ('notification_channels', models.JSONField(blank=True, default=list)),
            ],
            options={'db_table': 'patient_contacts'},
        ),
        migrations.CreateModel(
            name='PatientNotification',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('patient_id', models.CharField(max_length=64)),
                ('reference_id', models.CharField(max_length=64)),
                ('reference_type', models.CharField(max_length=40)),
                ('type', models.CharField(max_length=40)),
                ('template_id', models.CharField(blank=True, max_length=64, null=True)),
                ('title', models.CharField(max_length=200)),
                ('message', models.TextField()),
                ('is_read', models.BooleanField(default=False)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
            ],
            options={'db_table': 'patient_notifications'},
        ),
        migrations.CreateModel(
            name='Invoice',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('patient_id', models.CharField(max_length=64)),
                ('items', models.JSONField(blank=True, default=list)),
                ('amount', models.DecimalField(decimal_places=2, max_digits=10)),
                ('status', models.CharField(
                    choices=[('pending', 'Pending'), ('paid', 'Paid'), ('void', 'Void')],
                    default='pending',
                    max_length=20,
                )),
                ('due_date', models.DateTimeField()),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('consultation', models.ForeignKey(
                    on_delete=django.db.models.deletion.CASCADE,
                    related_name='invoices',
                    to='consultations.consultation',
                )),
            ],
            options={'db_table': 'invoices'},
        ),
        migrations.CreateModel(
            name='FollowUp',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('patient_id', models.CharField(blank=True, max_length=64, null=True)),
                ('template_id', models.CharField(max_length=64)),
                ('period', models.CharField(blank=True, max_length=20, null=True)),
                ('scheduled_date', models.DateTimeField()),
                ('status', models.CharField(default='scheduled', max_length=20)),
                ('payment_status', models.CharField(default='pending', max_length=20)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('consultation', models.ForeignKey(
                    on_delete=django.db.models.deletion.CASCADE,
                    related_name='follow_ups',
                    to='consultations.consultation',
                )),
                ('invoice', models.ForeignKey(
                    blank=True,
                    null=True,
                    on_delete=django.db.models.deletion.SET_NULL,
                    related_name='follow_ups',
                    to='consultations.invoice',
                )),
            ],
            options={'db_table': 'patient_follow_ups'},
        ),
        migrations.CreateModel(
            name='NotificationDelivery',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('channel', models.CharField(max_length=20)),
                ('recipient', models.CharField(max_length=200)),
                ('status', models.CharField(default='sent', max_length=20)),
                ('sent_at', models.DateTimeField(blank=True, null=True)),
                ('notification', models.ForeignKey(
                    on_delete=django.db.models.deletion.CASCADE,
                    related_name='deliveries',
                    to='consultations.patientnotification',
                )),
            ],
            options={'db_table': 'notification_deliveries'},
        ),
        migrations.CreateModel(
            name='ScheduledNotification',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('patient_id', models.CharField(blank=True, max_length=64, null=True)),
                ('scheduled_date', models.DateTimeField()),
                ('status', models.CharField(
                    choices=[('pending', 'Pending'), ('sent', 'Sent'), ('failed', 'Failed')],
                    default='pending',
                    max_length=20,
                )),
                ('error_message', models.TextField(blank=True, null=True)),
                ('sent_at', models.DateTimeField(blank=True, null=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('follow_up', models.ForeignKey(
                    on_delete=django.db.models.deletion.CASCADE,
                    related_name='reminders',
                    to='consultations.followup',
                )),
            ],
            options={'db_table': 'scheduled_notifications'},
        ),
    ]
