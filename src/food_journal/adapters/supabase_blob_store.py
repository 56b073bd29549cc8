"""Supabase-backed blob store."""

from dataclasses import dataclass
from datetime import UTC, datetime

from supabase import Client

from food_journal.services.journal import BlobStore

TABLE = "journal_blobs"


@dataclass
class SupabaseBlobStore(BlobStore):
    """Stores each blob as one row of the ``journal_blobs`` table."""

    client: Client

    def load(self, key: str) -> str | None:
        """Return the blob stored under ``key``, if present."""
        response = (
            self.client.table(TABLE)
            .select("key, blob")
            .eq("key", key)
            .limit(1)
            .execute()
        )
        if response.data:
            blob = response.data[0].get("blob")
            return blob if isinstance(blob, str) else None
        return None

    def save(self, key: str, blob: str) -> None:
        """Insert or replace the row for ``key``."""
        response = (
            self.client.table(TABLE)
            .upsert(
                {
                    "key": key,
                    "blob": blob,
                    "updated_at": datetime.now(tz=UTC).isoformat(),
                },
                on_conflict="key",
            )
            .execute()
        )
        if not response.data:
            raise RuntimeError(f"Failed to save blob {key} in Supabase")
