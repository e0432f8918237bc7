from app.core.config import Settings
from app.core.database import is_document_url
from app.stores.base import GuardedStore, VoucherStore, store_operation
from app.stores.mongo import MongoVoucherStore
from app.stores.sql import SqlVoucherStore


def build_store(settings: Settings) -> VoucherStore:
    """Pick the adapter from the ``DATABASE_URL`` scheme."""
    if is_document_url(settings.DATABASE_URL):
        return MongoVoucherStore.from_settings(settings)
    return SqlVoucherStore.from_settings(settings)


__all__ = [
    "GuardedStore",
    "MongoVoucherStore",
    "SqlVoucherStore",
    "VoucherStore",
    "build_store",
    "store_operation",
]
