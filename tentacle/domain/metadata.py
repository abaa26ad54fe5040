"""Frontmatter metadata models."""

import uuid
from typing import Any

from pydantic import BaseModel

from tentacle.domain.tags import normalize_tags
from tentacle.utils.time import is_not_before, now_iso, parse_iso

MUTABLE_FIELDS = frozenset({"banner_image_url", "tags"})


class PartialMetadata(BaseModel):
    """Whatever could be read from a frontmatter header; every field may be missing."""

    id: str | None = None
    created_at: str | None = None
    updated_at: str | None = None
    banner_image_url: str | None = None
    tags: list[str] | None = None

    def is_empty(self) -> bool:
        return not self.model_fields_set


class FrontmatterMetadata(BaseModel):
    """Metadata stored in the header of every document file.

    Attributes:
        id: Stable identifier, never changed after creation
        created_at: ISO-8601 creation timestamp
        updated_at: ISO-8601 timestamp of the last save, never earlier than created_at
        banner_image_url: Optional banner image shown above the note
        tags: Normalized tags in display order
    """

    id: str
    created_at: str
    updated_at: str
    banner_image_url: str | None = None
    tags: list[str] = []

    @classmethod
    def create(
        cls,
        *,
        tags: list[str] | None = None,
        banner_image_url: str | None = None,
        document_id: str | None = None,
        now: str | None = None,
    ) -> "FrontmatterMetadata":
        """Metadata for a brand-new document: generated id, matching timestamps."""
        timestamp = now or now_iso()
        return cls(
            id=document_id or str(uuid.uuid4()),
            created_at=timestamp,
            updated_at=timestamp,
            banner_image_url=banner_image_url,
            tags=normalize_tags(tags),
        )

    @classmethod
    def resolve(
        cls, partial: PartialMetadata, *, fallback_id: str, now: str | None = None
    ) -> "FrontmatterMetadata":
        """Fill the gaps of a parsed header.

        Missing or unparseable timestamps fall back to ``now`` (created) and to the
        created timestamp (updated).

        Args:
            partial: Parsed header, possibly empty
            fallback_id: Id to use when the header carries none (the file name stem)
            now: Override for the current time
        """
        timestamp = now or now_iso()
        document_id = (partial.id or "").strip() or fallback_id
        created_at = partial.created_at if parse_iso(partial.created_at) else timestamp
        updated_at = partial.updated_at if parse_iso(partial.updated_at) else created_at
        if not is_not_before(updated_at, created_at):
            updated_at = created_at
        return cls(
            id=document_id,
            created_at=created_at,
            updated_at=updated_at,
            banner_image_url=partial.banner_image_url,
            tags=normalize_tags(partial.tags),
        )

    def touched(self, now: str | None = None, **changes: Any) -> "FrontmatterMetadata":
        """Return a copy saved at ``now`` with the given field changes applied.

        Only ``banner_image_url`` and ``tags`` may change; ``id`` and ``created_at`` are
        fixed at creation.

        Raises:
            ValueError: If a change targets any other field
        """
        unknown = set(changes) - MUTABLE_FIELDS
        if unknown:
            raise ValueError(f"Cannot change metadata field(s): {', '.join(sorted(unknown))}")

        if "tags" in changes:
            changes["tags"] = normalize_tags(changes["tags"])

        updated_at = now or now_iso()
        if not is_not_before(updated_at, self.created_at):
            updated_at = self.created_at
        return self.model_copy(update={**changes, "updated_at": updated_at})
