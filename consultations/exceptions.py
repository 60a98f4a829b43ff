"""
统一异常体系。

所有业务异常继承 BaseAppException，包含：
- type:        错误类型标识（validation_error / block / persistence / degraded / notification）
- code:        业务错误码（CONSULTATION_INVALID / HIGH_RISK_INTERACTION / ...）
- message:     人类可读的描述
- detail:      可选的附加信息（dict / list / None）
- http_status: HTTP 状态码

View 层只需 raise，exception_handler 统一捕获并格式化响应。
提交流水线里 DegradedCompletionError / NotificationError 只作为 Err 记录，不会抛到 View。
"""


class BaseAppException(Exception):
    """所有业务异常的基类。"""

    type = 'error'
    code = 'UNKNOWN_ERROR'
    http_status = 500

    def __init__(self, message, code=None, detail=None, http_status=None):
        self.message = message
        if code is not None:
            self.code = code
        if http_status is not None:
            self.http_status = http_status
        self.detail = detail
        super().__init__(message)


class ValidationError(BaseAppException):
    """结构校验失败（必填字段缺失 / payload 格式错误）。400，不写库。"""

    type = 'validation_error'
    code = 'VALIDATION_ERROR'
    http_status = 400


class SafetyBlockError(BaseAppException):
    """高风险药物相互作用。409，提交在任何 I/O 之前中止。"""

    type = 'block'
    code = 'HIGH_RISK_INTERACTION'
    http_status = 409


class PersistenceError(BaseAppException):
    """
    问诊记录创建失败。502。

    提交直接结束：没有任何数据落库，后续步骤都不执行。
    """

    type = 'persistence'
    code = 'CONSULTATION_NOT_CREATED'
    http_status = 502


class DegradedCompletionError(BaseAppException):
    """
    问诊已落库后，下游步骤（invoice / follow-up）失败。

    不中断流水线，只作为 warning 返回给调用方。
    """

    type = 'degraded'
    code = 'DEGRADED_COMPLETION'
    http_status = 200


class NotificationError(BaseAppException):
    """患者通知失败（尽力而为）。只记日志，从不向上抛。"""

    type = 'notification'
    code = 'NOTIFICATION_FAILED'
    http_status = 200
