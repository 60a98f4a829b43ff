"""
ServicePanel — the services (programs) a consultation covers.

The first active service is the primary one: it names the draft's service and
selects the follow-up template category and the notification template.
"""

import logging
from dataclasses import dataclass

logger = logging.getLogger(__name__)

DEFAULT_SERVICE_ID = 'wm'
DEFAULT_SERVICE = {'name': 'Weight Management', 'dot_class': 'wm-dot'}
FALLBACK_CATEGORY = 'weight_management'


@dataclass(frozen=True)
class ActiveService:
    id: str
    name: str
    dot_class: str = ''


class ServicePanel:

    def __init__(self, services: dict | None = None):
        if not services:
            services = {DEFAULT_SERVICE_ID: DEFAULT_SERVICE}
        self._services: dict[str, ActiveService] = {}
        for service_id, data in services.items():
            self._services[str(service_id)] = ActiveService(
                id=str(service_id),
                name=data.get('name') or str(service_id),
                dot_class=data.get('dot_class') or data.get('dotClass') or '',
            )

    @property
    def active_services(self) -> list[ActiveService]:
        return list(self._services.values())

    def add_service(self, service_id, name: str, dot_class: str = '') -> ActiveService:
        service_id = str(service_id)
        if service_id in self._services:
            return self._services[service_id]
        service = ActiveService(id=service_id, name=name, dot_class=dot_class or f'{service_id}-dot')
        self._services[service_id] = service
        logger.info("Service %s added to consultation", service_id)
        return service

    def remove_service(self, service_id) -> bool:
        """Drop a service. The last remaining service stays."""
        service_id = str(service_id)
        if service_id not in self._services:
            return False
        if len(self._services) == 1:
            logger.warning("Cannot remove %s: a consultation needs at least one service", service_id)
            return False
        del self._services[service_id]
        return True

    def primary_service(self) -> ActiveService | None:
        return next(iter(self._services.values()), None)

    def primary_category(self) -> str:
        primary = self.primary_service()
        return primary.id if primary else FALLBACK_CATEGORY
