import os
import posixpath
from typing import Optional

from supabase import Client, create_client

from file_stores.base import FileHandle, FileLookup


class SupabaseFileStore:
    """
    Resolves attachment ids against a Supabase Storage bucket.

    A file id is the object path inside the bucket, e.g. "reports/2024/q1.pdf".
    Lookups never raise: storage errors come back as a failed FileLookup.
    """

    def __init__(self, client: Optional[Client] = None, bucket: Optional[str] = None):
        self.bucket = bucket or os.getenv("SUPABASE_BUCKET", "attachments")

        if client is None:
            url = os.getenv("SUPABASE_URL")
            key = os.getenv("SUPABASE_SERVICE_KEY")
            if not url or not key:
                raise RuntimeError("SUPABASE_URL and SUPABASE_SERVICE_KEY must be set")
            client = create_client(url, key)

        self.client = client

    def get_file(self, file_id: str) -> FileLookup:
        if not file_id:
            return FileLookup(file_id=file_id, error="file id is empty")

        try:
            content = self.client.storage.from_(self.bucket).download(file_id)
        except Exception as e:
            return FileLookup(file_id=file_id, error=f"Failed to download from storage: {e}")

        if not content:
            return FileLookup(file_id=file_id, error="No content returned from storage")

        return FileLookup(
            file_id=file_id,
            handle=FileHandle(file_id=file_id, name=posixpath.basename(file_id), content=content),
        )
