"""Value objects for sync requests and their outcomes"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Optional

from settings import GOOGLE_DOCS_URL


def google_docs_url(document_id: str) -> str:
    """Browser link for a Google Doc"""
    return f"{GOOGLE_DOCS_URL}{document_id}"


class SyncOutcome(Enum):
    """Terminal outcome of a push or open call"""
    UPDATED = "updated"
    OPENED = "opened"
    OPEN_COMMENTS = "open_comments"


@dataclass(frozen=True)
class SyncRequest:
    """A document to push or open.

    ``title`` is the remote display name and lookup key; ``content`` is the
    full markdown body.
    """
    title: str
    content: str

    @classmethod
    def from_file(cls, path: Path, encoding: str = "utf-8") -> "SyncRequest":
        """Title is the file name without extension, content the file text"""
        path = Path(path)
        return cls(title=path.stem, content=path.read_text(encoding=encoding))


@dataclass
class SyncResult:
    """Result of a sync operation"""
    success: bool
    outcome: SyncOutcome
    document_id: str
    link: str
    completed_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def reason(self) -> Optional[SyncOutcome]:
        """Why the call did not succeed, or None"""
        return None if self.success else self.outcome

    def to_dict(self) -> Dict[str, Any]:
        return {
            "success": self.success,
            "outcome": self.outcome.value,
            "document_id": self.document_id,
            "link": self.link,
            "completed_at": self.completed_at.isoformat(),
        }
