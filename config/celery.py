import os
from celery import Celery

os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'config.settings')

app = Celery('consultations')

# every CELERY_* Django setting configures the app
app.config_from_object('django.conf:settings', namespace='CELERY')

# picks up tasks.py from every installed app
app.autodiscover_tasks()
