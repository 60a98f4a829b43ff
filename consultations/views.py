import logging

from django.http import JsonResponse
from django.utils.decorators import method_decorator
from django.views import View
from django.views.decorators.csrf import csrf_exempt
from rest_framework.response import Response
from rest_framework.views import APIView

from .exception_handler import ExceptionHandlerMixin
from .exceptions import PersistenceError, SafetyBlockError, ValidationError
from .intake import DraftPayloadAdapter
from .interactions import check_interactions
from .medications.catalog import build_catalog
from .serializers import serialize_catalog, serialize_findings, serialize_submission_created
from .submission.orchestrator import SubmissionOrchestrator
from .submission.results import AbortReason

logger = logging.getLogger(__name__)


@method_decorator(csrf_exempt, name='dispatch')
class ConsultationSubmitView(ExceptionHandlerMixin, View):
    """POST /api/consultations/ - Validate, safety-check and submit a consultation draft"""

    async def post(self, request):
        draft = DraftPayloadAdapter(request.body).process()
        result = await SubmissionOrchestrator().submit(draft)

        if result.success:
            return JsonResponse(serialize_submission_created(result), status=201)

        if result.abort_reason is AbortReason.VALIDATION:
            raise ValidationError(
                message='Consultation validation failed',
                code='CONSULTATION_INVALID',
                detail={'errors': result.errors},
            )
        if result.abort_reason is AbortReason.INTERACTION:
            raise SafetyBlockError(
                message=result.error,
                detail={'findings': [finding.to_dict() for finding in result.findings]},
            )
        logger.error("Consultation submission failed for patient %s: %s", draft.patient_id, result.error)
        raise PersistenceError(message='Error submitting consultation')


class MedicationCatalogView(APIView):
    """GET /api/medications/ - Default medication catalog grouped by category"""

    def get(self, request):
        return Response(serialize_catalog(build_catalog()))


class InteractionCheckView(APIView):
    """POST /api/consultations/interactions/ - Preview interaction findings for a medication set"""

    def post(self, request):
        if not isinstance(request.data, dict):
            raise ValidationError(message='Request body must be a JSON object.', code='MALFORMED_PAYLOAD')
        medications = request.data.get('medications') or []
        if not isinstance(medications, list):
            raise ValidationError(
                message='medications must be a list.',
                code='MALFORMED_PAYLOAD',
            )
        findings = check_interactions(medications, request.data.get('contraindications') or '')
        return Response(serialize_findings(findings))
