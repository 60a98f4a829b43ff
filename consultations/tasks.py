import logging
from celery import shared_task
from django.utils import timezone

logger = logging.getLogger(__name__)

REMINDER_TITLE = 'Upcoming Follow-up'
REMINDER_MESSAGE = 'Your follow-up consultation is coming up in 2 days. Please check your patient portal.'


@shared_task(
    bind=True,
    max_retries=3,
    default_retry_delay=10,   # 初始重试延迟（秒），指数退避会乘以 2^retry_count
    acks_late=True,           # 任务执行完才 ack，防止 worker 崩溃时提醒丢失
    reject_on_worker_lost=True,
)
def deliver_scheduled_notification(self, reminder_id: str):
    """
    到达 ETA 时投递复诊提醒。

    重试策略：
      - 最多重试 3 次
      - 指数退避：10s → 20s → 40s
      - 超出次数后将提醒标记为 failed
    """
    from consultations.models import PatientNotification, ScheduledNotification

    logger.info("[Celery][deliver_scheduled_notification] 开始处理 reminder_id=%s (attempt %d/%d)",
                reminder_id, self.request.retries + 1, self.max_retries + 1)

    try:
        reminder = ScheduledNotification.objects.select_related('follow_up').get(id=reminder_id)
    except ScheduledNotification.DoesNotExist:
        logger.error("[Celery] Reminder %s 不存在，跳过", reminder_id)
        return  # 不重试，直接结束

    if reminder.status != 'pending':
        logger.info("[Celery] Reminder %s 已是 %s，跳过", reminder_id, reminder.status)
        return

    try:
        # 写入站内通知，再更新提醒状态
        PatientNotification.objects.create(
            patient_id=reminder.patient_id or '',
            reference_id=str(reminder.follow_up_id),
            reference_type='follow_up',
            type='follow_up_reminder',
            title=REMINDER_TITLE,
            message=REMINDER_MESSAGE,
        )
        reminder.status = 'sent'
        reminder.sent_at = timezone.now()
        reminder.save(update_fields=['status', 'sent_at'])
        logger.info("[Celery] Reminder %s 投递成功", reminder_id)

    except Exception as exc:
        logger.warning(
            "[Celery] Reminder %s 投递失败 (attempt %d): %s",
            reminder_id, self.request.retries + 1, str(exc)
        )

        if self.request.retries < self.max_retries:
            countdown = self.default_retry_delay * (2 ** self.request.retries)
            logger.info("[Celery] %d 秒后重试 (retry %d)", countdown, self.request.retries + 1)
            raise self.retry(exc=exc, countdown=countdown)

        logger.error("[Celery] Reminder %s 重试次数用尽，标记为 failed", reminder_id)
        reminder.status = 'failed'
        reminder.error_message = f"[failed after {self.max_retries} retries] {str(exc)}"
        reminder.save(update_fields=['status', 'error_message'])
