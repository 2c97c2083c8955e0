"""
Cache Fingerprinting

Content hashes used by the snapshot cache:
- ``project_hash`` detects that a repository changed since the last scan
  (equal hash == unchanged, nothing else is compared);
- ``search_hash`` keys cached search results.

Both are MD5 over a ``|``-joined, fixed-order field list, rendered as
lowercase hex. They are change detectors, not integrity checks.
"""

import hashlib
from collections.abc import Iterable
from datetime import datetime, timezone

from archmap.shared.models import Library, RepositorySnapshot, SearchCriteria

ZERO_TIMESTAMP = "0001-01-01T00:00:00Z"


def format_rfc3339(value: datetime | None) -> str:
    """RFC3339 with second precision; ``Z`` for UTC, ``±HH:MM`` otherwise."""
    if value is None:
        return ZERO_TIMESTAMP
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    value = value.replace(microsecond=0)
    if value.utcoffset().total_seconds() == 0:
        return value.strftime("%Y-%m-%dT%H:%M:%SZ")
    return value.isoformat()


def libraries_digest(libraries: Iterable[Library]) -> str:
    """``name:version`` entries, sorted so declaration order never matters."""
    return "|".join(sorted(f"{lib.name}:{lib.version}" for lib in libraries))


def _md5_hex(text: str) -> str:
    return hashlib.md5(text.encode("utf-8")).hexdigest()


def project_hash(snapshot: RepositorySnapshot) -> str:
    fields = [
        str(snapshot.id),
        snapshot.name,
        snapshot.path,
        snapshot.go_version,
        format_rfc3339(snapshot.updated_at),
        libraries_digest(snapshot.libraries),
    ]
    return _md5_hex("|".join(fields))


def search_hash(criteria: SearchCriteria) -> str:
    fields = [
        criteria.go_version,
        criteria.go_version_comparison,
        criteria.library,
        criteria.version,
        criteria.version_comparison,
        criteria.group,
        criteria.tag,
    ]
    return _md5_hex("|".join(fields))
