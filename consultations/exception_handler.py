"""
统一异常处理器。

前端看到的所有错误响应都是同一个格式：

{
    "type":    "validation_error" | "block" | "persistence",
    "code":    "CONSULTATION_INVALID",
    "message": "Consultation validation failed",
    "detail":  { ... }  // 可选
}

没有 type 字段  → 成功

unified_exception_handler 挂到 DRF 的 EXCEPTION_HANDLER 上（APIView 子类）；
ExceptionHandlerMixin 给普通 Django View 用，同步 / 异步都支持。
"""

from django.http import JsonResponse
from rest_framework.exceptions import ValidationError as DRFValidationError
from rest_framework.views import exception_handler as drf_default_handler

from .exceptions import BaseAppException


def error_response(exc: BaseAppException) -> JsonResponse:
    body = {
        'type': exc.type,
        'code': exc.code,
        'message': exc.message,
    }
    if exc.detail is not None:
        body['detail'] = exc.detail
    return JsonResponse(body, status=exc.http_status)


def unified_exception_handler(exc, context):
    """
    DRF exception handler entry point.

    优先级：
    1. BaseAppException 及其子类 → 统一格式
    2. DRF 自带的 ValidationError → 转成统一格式
    3. 其他异常 → 交给 DRF 默认处理
    """
    if isinstance(exc, BaseAppException):
        return error_response(exc)

    if isinstance(exc, DRFValidationError):
        body = {
            'type': 'validation_error',
            'code': 'VALIDATION_ERROR',
            'message': 'Request validation failed',
            'detail': exc.detail,
        }
        return JsonResponse(body, status=400)

    return drf_default_handler(exc, context)


class ExceptionHandlerMixin:
    """普通 Django View 抛出的 BaseAppException → 统一错误格式。"""

    def dispatch(self, request, *args, **kwargs):
        if self.view_is_async:
            return self._async_dispatch(request, *args, **kwargs)
        try:
            return super().dispatch(request, *args, **kwargs)
        except BaseAppException as exc:
            return error_response(exc)

    async def _async_dispatch(self, request, *args, **kwargs):
        try:
            return await super().dispatch(request, *args, **kwargs)
        except BaseAppException as exc:
            return error_response(exc)
