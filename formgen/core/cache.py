"""Time-bounded store of generated form instances.

Forms that grow on the client (array items, record entries) and forms that
are validated after a round trip need their schema and options again later.
Instead of keeping them in a server session, each generated instance is
stored under an opaque id that the rendered form carries back.
"""

from collections.abc import Callable, Mapping
from dataclasses import dataclass
import threading
import time
from typing import Any
import uuid

from ..behavior.rules import ConditionalRule, parse_rules
from ..config import FormOptions, get_settings
from .logging import get_logger
from .mapper import DescriptorMapper
from .schema import FieldDescriptor

logger = get_logger(__name__)


class FormInstanceNotFound(KeyError):
    """Raised when a form id is unknown or its entry has expired."""

    def __init__(self, form_id: str):
        super().__init__(form_id)
        self.form_id = form_id

    def __str__(self) -> str:
        return f"Form instance '{self.form_id}' is unknown or has expired"


@dataclass(frozen=True)
class CachedForm:
    """A stored form instance."""

    form_id: str
    schema: Any
    options: FormOptions
    descriptors: Mapping[str, FieldDescriptor]
    stored_at: float

    @property
    def rules(self) -> list[ConditionalRule]:
        """Conditional rules configured for the form."""
        return parse_rules(self.options.conditional_logic)


class FormInstanceCache:
    """Thread-safe cache of form instances with a fixed time-to-live."""

    def __init__(
        self,
        ttl_seconds: float | None = None,
        clock: Callable[[], float] = time.monotonic,
        mapper: DescriptorMapper | None = None,
    ) -> None:
        """Initialize the cache.

        Args:
            ttl_seconds: Entry lifetime (settings default if omitted)
            clock: Monotonic time source, replaceable in tests
            mapper: Mapper used to build descriptors of stored schemas
        """
        self.ttl_seconds = (
            ttl_seconds if ttl_seconds is not None else get_settings().cache_ttl_seconds
        )
        self._clock = clock
        self._mapper = mapper or DescriptorMapper()
        self._entries: dict[str, CachedForm] = {}
        self._lock = threading.Lock()

    def store(
        self, schema: Any, options: FormOptions | Mapping[str, Any] | None = None
    ) -> str:
        """Store a schema and its options and return the new opaque form id.

        Raises:
            SchemaIntrospectionError: If the schema cannot be mapped
        """
        options = FormOptions.coerce(options)
        descriptors = self._mapper.map_schema(schema, field_options=options.field_options)
        now = self._clock()
        entry = CachedForm(
            form_id=uuid.uuid4().hex,
            schema=schema,
            options=options,
            descriptors=descriptors,
            stored_at=now,
        )
        with self._lock:
            self._evict_expired(now)
            self._entries[entry.form_id] = entry
        logger.debug(
            "Stored form instance",
            form_id=entry.form_id,
            schema=getattr(schema, "__name__", None),
        )
        return entry.form_id

    def get(self, form_id: str) -> CachedForm:
        """Return a live entry.

        Raises:
            FormInstanceNotFound: If the id is unknown or the entry has expired
        """
        now = self._clock()
        with self._lock:
            entry = self._entries.get(form_id)
            if entry is not None and self._expired(entry, now):
                del self._entries[form_id]
                entry = None
        if entry is None:
            raise FormInstanceNotFound(form_id)
        return entry

    def discard(self, form_id: str) -> None:
        """Remove an entry if present."""
        with self._lock:
            self._entries.pop(form_id, None)

    def evict_expired(self) -> int:
        """Drop all expired entries and return how many were removed."""
        with self._lock:
            return self._evict_expired(self._clock())

    def _evict_expired(self, now: float) -> int:
        expired = [
            form_id
            for form_id, entry in self._entries.items()
            if self._expired(entry, now)
        ]
        for form_id in expired:
            del self._entries[form_id]
        if expired:
            logger.debug("Evicted expired form instances", count=len(expired))
        return len(expired)

    def _expired(self, entry: CachedForm, now: float) -> bool:
        return now - entry.stored_at >= self.ttl_seconds

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __contains__(self, form_id: object) -> bool:
        with self._lock:
            entry = self._entries.get(form_id)  # type: ignore[arg-type]
            return entry is not None and not self._expired(entry, self._clock())
