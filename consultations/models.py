import uuid
from django.db import models


class Consultation(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    patient_id = models.CharField(max_length=64)
    provider_id = models.CharField(max_length=64)
    service_id = models.CharField(max_length=64, blank=True, null=True)
    service_name = models.CharField(max_length=200, blank=True, null=True)
    status = models.CharField(max_length=20, default='completed')
    notes = models.JSONField(default=dict, blank=True)
    medications = models.JSONField(default=list, blank=True)
    follow_up = models.JSONField(default=dict, blank=True)
    resources = models.JSONField(default=list, blank=True)
    is_published_to_patient = models.BooleanField(default=False)
    published_at = models.DateTimeField(blank=True, null=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'consultations'


class Invoice(models.Model):
    STATUS_CHOICES = [
        ('pending', 'Pending'),
        ('paid', 'Paid'),
        ('void', 'Void'),
    ]

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    patient_id = models.CharField(max_length=64)
    consultation = models.ForeignKey(Consultation, on_delete=models.CASCADE, related_name='invoices')
    items = models.JSONField(default=list, blank=True)
    amount = models.DecimalField(max_digits=10, decimal_places=2)
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default='pending')
    due_date = models.DateTimeField()
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'invoices'


class FollowUp(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    patient_id = models.CharField(max_length=64, blank=True, null=True)
    consultation = models.ForeignKey(Consultation, on_delete=models.CASCADE, related_name='follow_ups')
    template_id = models.CharField(max_length=64)
    period = models.CharField(max_length=20, blank=True, null=True)
    scheduled_date = models.DateTimeField()
    status = models.CharField(max_length=20, default='scheduled')
    payment_status = models.CharField(max_length=20, default='pending')
    invoice = models.ForeignKey(Invoice, on_delete=models.SET_NULL, blank=True, null=True, related_name='follow_ups')
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'patient_follow_ups'


class PatientContact(models.Model):
    """Where a patient wants to hear from us. Missing row → portal only."""

    patient_id = models.CharField(max_length=64, unique=True)
    email = models.EmailField(blank=True, null=True)
    phone = models.CharField(max_length=32, blank=True, null=True)
    notification_channels = models.JSONField(default=list, blank=True)

    class Meta:
        db_table = 'patient_contacts'


class PatientNotification(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    patient_id = models.CharField(max_length=64)
    reference_id = models.CharField(max_length=64)
    reference_type = models.CharField(max_length=40)
    type = models.CharField(max_length=40)
    template_id = models.CharField(max_length=64, blank=True, null=True)
    title = models.CharField(max_length=200)
    message = models.TextField()
    is_read = models.BooleanField(default=False)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'patient_notifications'


class NotificationDelivery(models.Model):
    notification = models.ForeignKey(PatientNotification, on_delete=models.CASCADE, related_name='deliveries')
    channel = models.CharField(max_length=20)
    recipient = models.CharField(max_length=200)
    status = models.CharField(max_length=20, default='sent')
    sent_at = models.DateTimeField(blank=True, null=True)

    class Meta:
        db_table = 'notification_deliveries'


class ScheduledNotification(models.Model):
    STATUS_CHOICES = [
        ('pending', 'Pending'),
        ('sent', 'Sent'),
        ('failed', 'Failed'),
    ]

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    patient_id = models.CharField(max_length=64, blank=True, null=True)
    follow_up = models.ForeignKey(FollowUp, on_delete=models.CASCADE, related_name='reminders')
    scheduled_date = models.DateTimeField()
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default='pending')
    error_message = models.TextField(blank=True, null=True)
    sent_at = models.DateTimeField(blank=True, null=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'scheduled_notifications'
