"""
Fixed lookup tables for follow-ups and notifications.

Tables are configuration: each can be replaced through Django settings
(CONSULTATION_FOLLOW_UP_PRICING, CONSULTATION_NOTIFICATION_TEMPLATES,
CONSULTATION_INVOICE_DUE_DAYS). Lookups never raise on unknown keys.
"""

import calendar
from datetime import date, datetime, timedelta
from decimal import Decimal

from django.conf import settings

CUSTOM_PERIOD = 'custom'

DEFAULT_FOLLOW_UP_PRICING = {
    '2w': Decimal('49.99'),
    '4w': Decimal('39.99'),
    '6w': Decimal('29.99'),
    CUSTOM_PERIOD: Decimal('59.99'),
}

DEFAULT_NOTIFICATION_TEMPLATES = {
    '1': 'tpl_weight_management',
    '2': 'tpl_ed',
    '3': 'tpl_hair_loss',
}
DEFAULT_NOTIFICATION_TEMPLATE = 'tpl_standard'

DEFAULT_INVOICE_DUE_DAYS = 7

# period → (days, months)
_PERIOD_OFFSETS = {
    '2w': (14, 0),
    '4w': (28, 0),
    '6w': (42, 0),
    '1m': (0, 1),
    '3m': (0, 3),
    '6m': (0, 6),
}


def follow_up_pricing() -> dict[str, Decimal]:
    table = getattr(settings, 'CONSULTATION_FOLLOW_UP_PRICING', None) or DEFAULT_FOLLOW_UP_PRICING
    return {code: Decimal(str(amount)) for code, amount in table.items()}


def price_for_follow_up(period_code) -> Decimal:
    """Price of the follow-up period; unknown codes cost the same as "custom"."""
    table = follow_up_pricing()
    fallback = table.get(CUSTOM_PERIOD, DEFAULT_FOLLOW_UP_PRICING[CUSTOM_PERIOD])
    return table.get(period_code, fallback)


def notification_template_for(service_id) -> str:
    table = getattr(settings, 'CONSULTATION_NOTIFICATION_TEMPLATES', None) or DEFAULT_NOTIFICATION_TEMPLATES
    default = getattr(settings, 'CONSULTATION_DEFAULT_NOTIFICATION_TEMPLATE', DEFAULT_NOTIFICATION_TEMPLATE)
    if service_id is None:
        return default
    return table.get(str(service_id), default)


def invoice_due_days() -> int:
    return int(getattr(settings, 'CONSULTATION_INVOICE_DUE_DAYS', DEFAULT_INVOICE_DUE_DAYS))


def _add_months(value, months: int):
    month_index = value.month - 1 + months
    year = value.year + month_index // 12
    month = month_index % 12 + 1
    day = min(value.day, calendar.monthrange(year, month)[1])
    return value.replace(year=year, month=month, day=day)


def calculate_follow_up_date(period, base: datetime | date):
    """
    Date the follow-up falls due.

    Week periods add days, month periods add calendar months (clamped to the
    month's last day). "custom" and unknown periods return the base date; the
    actual date is supplied separately.
    """
    days, months = _PERIOD_OFFSETS.get(period, (0, 0))
    result = base + timedelta(days=days)
    if months:
        result = _add_months(result, months)
    return result
