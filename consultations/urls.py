from django.urls import path
from .views import ConsultationSubmitView, InteractionCheckView, MedicationCatalogView

urlpatterns = [
    path('consultations/', ConsultationSubmitView.as_view(), name='consultation-submit'),
    path('consultations/interactions/', InteractionCheckView.as_view(), name='consultation-interactions'),
    path('medications/', MedicationCatalogView.as_view(), name='medication-catalog'),
]
