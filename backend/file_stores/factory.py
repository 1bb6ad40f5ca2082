import os
from file_stores.base import FileStore
from file_stores.memory_store import InMemoryFileStore
from file_stores.supabase_store import SupabaseFileStore


def get_file_store() -> FileStore:
    store = os.getenv("FILE_STORE", "supabase").lower().strip()

    if store == "supabase":
        return SupabaseFileStore()

    if store == "memory":
        return InMemoryFileStore()

    raise RuntimeError(f"Unsupported FILE_STORE: {store}")
