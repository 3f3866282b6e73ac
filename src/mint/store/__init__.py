from mint.store.client import (
    Filter,
    SchemaMismatchError,
    StoreError,
    SupabaseStore,
    create_store,
    eq,
    ilike,
    in_,
    is_null,
    not_null,
    select_in,
)

__all__ = [
    "Filter",
    "SchemaMismatchError",
    "StoreError",
    "SupabaseStore",
    "create_store",
    "eq",
    "ilike",
    "in_",
    "is_null",
    "not_null",
    "select_in",
]
