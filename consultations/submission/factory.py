"""
Factory functions: return the collaborators named in settings.

  CONSULTATION_STORE     (default "django")
  CONSULTATION_NOTIFIER  (default "portal")

A new backend is a new BaseConsultationStore / BaseNotifier subclass plus one
line in the matching registry; the orchestrator does not change.
"""

from django.conf import settings

from .base import BaseConsultationStore, BaseNotifier


def _build_store_registry() -> dict[str, type[BaseConsultationStore]]:
    # deferred: the stores import Django models
    from .stores import DjangoConsultationStore

    return {
        "django": DjangoConsultationStore,
    }


def _build_notifier_registry() -> dict[str, type[BaseNotifier]]:
    from .notifiers import PortalNotifier

    return {
        "portal": PortalNotifier,
    }


def get_consultation_store() -> BaseConsultationStore:
    """
    Raises:
        ValueError: CONSULTATION_STORE is unknown
    """
    name = getattr(settings, "CONSULTATION_STORE", "django")
    registry = _build_store_registry()
    store_cls = registry.get(name)

    if store_cls is None:
        raise ValueError(
            f"Unknown CONSULTATION_STORE: {name!r}. "
            f"Known stores: {list(registry.keys())}"
        )

    return store_cls()


def get_notifier() -> BaseNotifier:
    """
    Raises:
        ValueError: CONSULTATION_NOTIFIER is unknown
    """
    name = getattr(settings, "CONSULTATION_NOTIFIER", "portal")
    registry = _build_notifier_registry()
    notifier_cls = registry.get(name)

    if notifier_cls is None:
        raise ValueError(
            f"Unknown CONSULTATION_NOTIFIER: {name!r}. "
            f"Known notifiers: {list(registry.keys())}"
        )

    return notifier_cls()
