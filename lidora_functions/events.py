from dataclasses import dataclass, field
from enum import Enum
from typing import Optional


class EventKind(str, Enum):
    CREATED = "created"
    UPDATED = "updated"
    DELETED = "deleted"


@dataclass(frozen=True)
class DocumentEvent:
    collection_path: str
    document_id: str
    kind: EventKind
    before: Optional[dict] = None
    after: Optional[dict] = None
    params: dict = field(default_factory=dict)

    @classmethod
    def from_path(cls, path: str, kind, before=None, after=None, params=None):
        collection_path, _, document_id = path.strip("/").rpartition("/")
        if not collection_path or not document_id:
            raise ValueError(f"Not a document path: {path!r}")
        return cls(
            collection_path=collection_path,
            document_id=document_id,
            kind=EventKind(kind),
            before=before,
            after=after,
            params=params or {},
        )

    @property
    def path(self) -> str:
        return f"{self.collection_path}/{self.document_id}"

    @property
    def data(self) -> dict:
        """The current state, or the last known state for deletions."""
        if self.after is not None:
            return self.after
        return self.before or {}

    def changed(self, key: str) -> bool:
        return (self.before or {}).get(key) != (self.after or {}).get(key)

    def became(self, key: str, value) -> bool:
        """True when ``key`` transitions into ``value`` with this event."""
        return (self.after or {}).get(key) == value and (self.before or {}).get(key) != value


@dataclass(frozen=True)
class UserEvent:
    uid: str
    email: Optional[str] = None


@dataclass(frozen=True)
class AnalyticsEvent:
    name: str
    device_model: str = ""
    city: str = ""
    country: str = ""
