"""
Unit tests for exception classes, ExceptionHandlerMixin and the DRF handler.

No database:
1. BaseAppException defaults
2. default type / code / http_status of each subclass
3. code / http_status overrides at construction
4. detail is optional
5. ExceptionHandlerMixin turns exceptions into the right JsonResponse (sync and async views)
6. unified_exception_handler formats DRF ValidationError the same way
"""
import json

import pytest
from asgiref.sync import async_to_sync
from django.http import JsonResponse
from django.test import RequestFactory
from django.views import View
from rest_framework.exceptions import NotFound, ValidationError as DRFValidationError

from consultations.exception_handler import ExceptionHandlerMixin, unified_exception_handler
from consultations.exceptions import (
    BaseAppException,
    DegradedCompletionError,
    NotificationError,
    PersistenceError,
    SafetyBlockError,
    ValidationError,
)


# -------------------------------------------------------------------
# Exception classes
# -------------------------------------------------------------------

class TestBaseAppException:

    def test_defaults(self):
        exc = BaseAppException('something broke')
        assert exc.message == 'something broke'
        assert exc.type == 'error'
        assert exc.code == 'UNKNOWN_ERROR'
        assert exc.http_status == 500
        assert exc.detail is None

    def test_override_code_and_status(self):
        exc = BaseAppException('bad', code='CUSTOM_CODE', http_status=418)
        assert exc.code == 'CUSTOM_CODE'
        assert exc.http_status == 418

    def test_detail_preserved(self):
        exc = BaseAppException('bad', detail={'key': 'value'})
        assert exc.detail == {'key': 'value'}


class TestSubclassDefaults:

    @pytest.mark.parametrize('exc_cls, type_, code, status', [
        (ValidationError, 'validation_error', 'VALIDATION_ERROR', 400),
        (SafetyBlockError, 'block', 'HIGH_RISK_INTERACTION', 409),
        (PersistenceError, 'persistence', 'CONSULTATION_NOT_CREATED', 502),
        (DegradedCompletionError, 'degraded', 'DEGRADED_COMPLETION', 200),
        (NotificationError, 'notification', 'NOTIFICATION_FAILED', 200),
    ])
    def test_defaults(self, exc_cls, type_, code, status):
        exc = exc_cls('msg')
        assert exc.type == type_
        assert exc.code == code
        assert exc.http_status == status

    def test_custom_code_keeps_status(self):
        exc = ValidationError('hpi missing', code='CONSULTATION_INVALID')
        assert exc.code == 'CONSULTATION_INVALID'
        assert exc.http_status == 400


# -------------------------------------------------------------------
# ExceptionHandlerMixin
# -------------------------------------------------------------------

class _RaisingView(ExceptionHandlerMixin, View):
    """Raises whatever exc_to_raise holds."""

    exc_to_raise = None

    def get(self, request):
        if self.exc_to_raise:
            raise self.exc_to_raise
        return JsonResponse({'ok': True})


class _AsyncRaisingView(ExceptionHandlerMixin, View):

    exc_to_raise = None

    async def get(self, request):
        if self.exc_to_raise:
            raise self.exc_to_raise
        return JsonResponse({'ok': True})


class TestExceptionHandlerMixin:

    def _make_request(self):
        return RequestFactory().get('/')

    def test_no_exception_passes_through(self):
        _RaisingView.exc_to_raise = None
        response = _RaisingView.as_view()(self._make_request())
        assert response.status_code == 200

    def test_block_error_returns_409(self):
        _RaisingView.exc_to_raise = SafetyBlockError(
            'High-risk drug interaction detected. Please review medications.',
            detail={'findings': [{'severity': 'high', 'message': 'x', 'rule_id': 'r'}]},
        )
        response = _RaisingView.as_view()(self._make_request())

        assert response.status_code == 409
        body = json.loads(response.content)
        assert body['type'] == 'block'
        assert body['code'] == 'HIGH_RISK_INTERACTION'
        assert body['detail']['findings'][0]['severity'] == 'high'

    def test_validation_error_returns_400(self):
        _RaisingView.exc_to_raise = ValidationError('bad input')
        response = _RaisingView.as_view()(self._make_request())

        assert response.status_code == 400
        body = json.loads(response.content)
        assert body['type'] == 'validation_error'

    def test_no_detail_field_when_none(self):
        _RaisingView.exc_to_raise = PersistenceError('db down')
        response = _RaisingView.as_view()(self._make_request())

        assert response.status_code == 502
        body = json.loads(response.content)
        assert 'detail' not in body

    def test_non_app_exception_not_caught(self):
        _RaisingView.exc_to_raise = RuntimeError('unexpected')
        with pytest.raises(RuntimeError):
            _RaisingView.as_view()(self._make_request())

    def test_async_view_error(self):
        _AsyncRaisingView.exc_to_raise = ValidationError('bad input', code='MALFORMED_PAYLOAD')
        response = async_to_sync(_AsyncRaisingView.as_view())(self._make_request())

        assert response.status_code == 400
        assert json.loads(response.content)['code'] == 'MALFORMED_PAYLOAD'

    def test_async_view_success(self):
        _AsyncRaisingView.exc_to_raise = None
        response = async_to_sync(_AsyncRaisingView.as_view())(self._make_request())
        assert response.status_code == 200


# -------------------------------------------------------------------
# DRF exception handler
# -------------------------------------------------------------------

class TestUnifiedExceptionHandler:

    def test_app_exception(self):
        response = unified_exception_handler(SafetyBlockError('blocked'), {})
        assert response.status_code == 409
        assert json.loads(response.content)['type'] == 'block'

    def test_drf_validation_error(self):
        response = unified_exception_handler(DRFValidationError({'medications': ['required']}), {})

        assert response.status_code == 400
        body = json.loads(response.content)
        assert body['code'] == 'VALIDATION_ERROR'
        assert body['detail'] == {'medications': ['required']}

    def test_other_drf_exceptions_use_default_handler(self):
        response = unified_exception_handler(NotFound(), {})
        assert response.status_code == 404
