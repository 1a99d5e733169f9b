from functools import lru_cache

from src.conf.config import settings
from src.conf.db import SessionLocal
from src.repository.contacts import ContactStore
from src.services.assistant import AssistantGateway, build_gateway
from src.services.navigation import ViewSelector
from src.services.reconciler import FormReconciler
from src.services.storage import build_backend


@lru_cache
def get_store() -> ContactStore:
    backend = build_backend(
        settings.storage_backend,
        session_factory=SessionLocal,
        host=settings.redis_host,
        port=settings.redis_port,
    )
    return ContactStore(backend, key=settings.storage_key, reseed_when_empty=settings.reseed_when_empty)


@lru_cache
def get_reconciler() -> FormReconciler:
    return FormReconciler()


@lru_cache
def get_assistant() -> AssistantGateway:
    return build_gateway()


@lru_cache
def get_view_selector() -> ViewSelector:
    return ViewSelector()
