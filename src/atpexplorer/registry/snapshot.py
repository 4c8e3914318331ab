"""Immutable, fully indexed registry snapshots.

A :class:`RegistrySnapshot` bundles every identity read in one load cycle
together with four lookup indexes:

- by fingerprint: full lowercased fingerprint plus its last 16 and last 8
  characters
- by name: lowercased name
- by platform: lowercased platform, then lowercased handle
- by wallet: lowercased address, all chains merged into one namespace

Indexes are filled in read order and the later identity wins on every
duplicate key, so a shared short fingerprint suffix or a duplicate name
resolves to the last document read.

Snapshots are built wholesale by :func:`build_snapshot` and never mutated
afterwards; every query method is a pure read.

Shipped in this module
----------------------
- RegistrySnapshot   - identities + indexes + query operations
- build_snapshot()   - scan a directory and build a snapshot
- NotFound, PlatformUnknown - typed lookup misses
- Page, SearchResult, RegistryStats - query results
"""
from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from types import MappingProxyType
from typing import Union

from atpexplorer.registry.documents import scan_directory
from atpexplorer.registry.normalizer import normalize
from atpexplorer.schema.errors import InvalidQueryError
from atpexplorer.schema.identity import Identity

logger = logging.getLogger(__name__)

DEFAULT_LIST_LIMIT: int = 100
MAX_LIST_LIMIT: int = 1000
DEFAULT_SEARCH_LIMIT: int = 20
MAX_SEARCH_LIMIT: int = 100
MIN_QUERY_LENGTH: int = 2

# Short fingerprint forms accepted as alternate keys.
SHORT_FINGERPRINT_LENGTHS: tuple[int, ...] = (16, 8)


# ---------------------------------------------------------------------------
# Paging helpers
# ---------------------------------------------------------------------------


def _parse_int(value: object) -> int | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        try:
            return int(value.strip())
        except ValueError:
            return None
    return None


def clamp_limit(value: object, default: int, maximum: int) -> int:
    """Resolve a page size.

    Absent, non-integer and non-positive values fall back to *default*;
    values above *maximum* are cut down to it.

    Examples
    --------
    >>> clamp_limit("5000", 100, 1000)
    1000
    >>> clamp_limit("abc", 100, 1000)
    100
    """
    parsed = _parse_int(value)
    if parsed is None or parsed <= 0:
        return default
    return min(parsed, maximum)


def clamp_offset(value: object) -> int:
    """Resolve a page offset; absent, invalid or negative values become 0."""
    parsed = _parse_int(value)
    if parsed is None or parsed < 0:
        return 0
    return parsed


# ---------------------------------------------------------------------------
# Result types
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class NotFound:
    """A point lookup found no identity.

    Attributes
    ----------
    lookup:
        Which index was consulted: ``"fingerprint"``, ``"name"``,
        ``"platform"`` or ``"wallet"``.
    query:
        The key(s) searched for, exactly as the caller supplied them.
    """

    lookup: str
    query: Mapping[str, str]

    def to_dict(self) -> dict[str, object]:
        error = "Identity not found" if self.lookup == "fingerprint" else "No identity found"
        return {"error": error, **self.query}


@dataclass(frozen=True)
class PlatformUnknown:
    """A platform lookup named a platform that no identity declares."""

    platform: str
    known_platforms: tuple[str, ...]

    def to_dict(self) -> dict[str, object]:
        return {
            "error": "Platform not indexed",
            "platform": self.platform,
            "availablePlatforms": list(self.known_platforms),
        }


LookupResult = Union[Identity, NotFound]
PlatformLookupResult = Union[Identity, NotFound, PlatformUnknown]


@dataclass(frozen=True)
class Page:
    """One page of summarised identities plus the unpaged total."""

    total: int
    limit: int
    offset: int
    results: tuple[dict[str, object], ...]

    def to_dict(self) -> dict[str, object]:
        return {
            "total": self.total,
            "limit": self.limit,
            "offset": self.offset,
            "identities": list(self.results),
        }


@dataclass(frozen=True)
class SearchResult:
    """Summarised identities matching a search query, in snapshot order."""

    query: str
    limit: int
    results: tuple[dict[str, object], ...]

    @property
    def count(self) -> int:
        return len(self.results)

    def to_dict(self) -> dict[str, object]:
        return {"query": self.query, "count": self.count, "results": list(self.results)}


@dataclass(frozen=True)
class RegistryStats:
    """Aggregate counts over one snapshot."""

    total_identities: int
    platform_counts: Mapping[str, int]
    chain_counts: Mapping[str, int]
    last_updated: datetime

    def to_dict(self) -> dict[str, object]:
        return {
            "totalIdentities": self.total_identities,
            "platforms": dict(self.platform_counts),
            "chains": dict(self.chain_counts),
            "lastUpdated": self.last_updated.isoformat(),
        }


# ---------------------------------------------------------------------------
# Snapshot
# ---------------------------------------------------------------------------


def _frozen(mapping: dict) -> Mapping:
    return MappingProxyType(mapping)


def _empty_index() -> Mapping:
    return MappingProxyType({})


@dataclass(frozen=True)
class RegistrySnapshot:
    """Immutable view of every identity loaded in one cycle.

    Use :func:`build_snapshot` or :meth:`from_identities` to construct one;
    the index mappings are read-only proxies.

    Examples
    --------
    >>> snap = RegistrySnapshot.from_identities(
    ...     [Identity(name="Shrike", gpg_fingerprint="0123456789ABCDEF0123456789ABCDEF")]
    ... )
    >>> snap.get_by_fingerprint("89abcdef").name
    'Shrike'
    """

    identities: tuple[Identity, ...] = ()
    by_fingerprint: Mapping[str, Identity] = field(default_factory=_empty_index)
    by_name: Mapping[str, Identity] = field(default_factory=_empty_index)
    by_platform: Mapping[str, Mapping[str, Identity]] = field(default_factory=_empty_index)
    by_wallet: Mapping[str, Identity] = field(default_factory=_empty_index)
    source_dir: Path | None = None
    directory_found: bool = False
    skipped_documents: tuple[str, ...] = ()
    loaded_at: datetime = field(default_factory=lambda: datetime.now(tz=timezone.utc))

    # ------------------------------------------------------------------
    # Construction
    # ------------------------------------------------------------------

    @classmethod
    def empty(cls, source_dir: Path | None = None) -> "RegistrySnapshot":
        """Return a snapshot with no identities."""
        return cls(source_dir=source_dir)

    @classmethod
    def from_identities(
        cls,
        identities: Iterable[Identity],
        *,
        source_dir: Path | None = None,
        directory_found: bool = True,
        skipped_documents: Iterable[str] = (),
    ) -> "RegistrySnapshot":
        """Index *identities* in the given order and return the snapshot."""
        ordered = tuple(identities)
        by_fingerprint: dict[str, Identity] = {}
        by_name: dict[str, Identity] = {}
        by_platform: dict[str, dict[str, Identity]] = {}
        by_wallet: dict[str, Identity] = {}

        for identity in ordered:
            if identity.gpg_fingerprint:
                fp = identity.gpg_fingerprint.lower()
                by_fingerprint[fp] = identity
                for length in SHORT_FINGERPRINT_LENGTHS:
                    by_fingerprint[fp[-length:]] = identity

            if identity.name:
                by_name[identity.name.lower()] = identity

            for platform, handle in identity.platforms.items():
                handles = by_platform.setdefault(platform.lower(), {})
                if handle:
                    handles[handle.lower()] = identity

            for address in identity.wallets.values():
                if address:
                    by_wallet[address.lower()] = identity

        return cls(
            identities=ordered,
            by_fingerprint=_frozen(by_fingerprint),
            by_name=_frozen(by_name),
            by_platform=_frozen({p: _frozen(h) for p, h in by_platform.items()}),
            by_wallet=_frozen(by_wallet),
            source_dir=source_dir,
            directory_found=directory_found,
            skipped_documents=tuple(skipped_documents),
        )

    # ------------------------------------------------------------------
    # Listing
    # ------------------------------------------------------------------

    def list_identities(self, limit: object = None, offset: object = None) -> Page:
        """Return one page of summarised identities.

        ``limit`` defaults to 100 and is capped at 1000; ``offset`` defaults
        to 0.  A page past the end is empty, not an error.
        """
        resolved_limit = clamp_limit(limit, DEFAULT_LIST_LIMIT, MAX_LIST_LIMIT)
        resolved_offset = clamp_offset(offset)
        window = self.identities[resolved_offset:resolved_offset + resolved_limit]
        return Page(
            total=len(self.identities),
            limit=resolved_limit,
            offset=resolved_offset,
            results=tuple(identity.summary() for identity in window),
        )

    # ------------------------------------------------------------------
    # Point lookups
    # ------------------------------------------------------------------

    def get_by_fingerprint(self, key: str) -> LookupResult:
        """Look up by full fingerprint or its last 16 or 8 characters."""
        identity = self.by_fingerprint.get(key.lower())
        if identity is None:
            return NotFound("fingerprint", {"fingerprint": key})
        return identity

    def get_by_name(self, name: str) -> LookupResult:
        """Exact, case-insensitive name match."""
        identity = self.by_name.get(name.lower())
        if identity is None:
            return NotFound("name", {"name": name})
        return identity

    def get_by_platform(self, platform: str, handle: str) -> PlatformLookupResult:
        """Look up a handle on a platform.

        Returns :class:`PlatformUnknown` when no identity declares
        *platform* at all, and :class:`NotFound` when the platform is known
        but the handle is not.
        """
        handles = self.by_platform.get(platform.lower())
        if handles is None:
            return PlatformUnknown(platform, self.known_platforms())
        identity = handles.get(handle.lower())
        if identity is None:
            return NotFound("platform", {"platform": platform, "handle": handle})
        return identity

    def get_by_wallet(self, address: str) -> LookupResult:
        """Case-insensitive address match across every chain."""
        identity = self.by_wallet.get(address.lower())
        if identity is None:
            return NotFound("wallet", {"address": address})
        return identity

    def known_platforms(self) -> tuple[str, ...]:
        """Lowercased platform keys, in first-seen order."""
        return tuple(self.by_platform)

    # ------------------------------------------------------------------
    # Search and stats
    # ------------------------------------------------------------------

    def search(self, query: str | None, limit: object = None) -> SearchResult:
        """Case-insensitive substring search.

        An identity matches when its name, description, any platform handle
        or its fingerprint contains *query*.  Results keep snapshot order.

        Raises
        ------
        InvalidQueryError
            If *query* is missing or shorter than two characters.
        """
        if not query or len(query) < MIN_QUERY_LENGTH:
            raise InvalidQueryError(
                f"Query must be at least {MIN_QUERY_LENGTH} characters",
                query=query,
            )
        resolved_limit = clamp_limit(limit, DEFAULT_SEARCH_LIMIT, MAX_SEARCH_LIMIT)
        needle = query.lower()

        results: list[dict[str, object]] = []
        for identity in self.identities:
            if len(results) >= resolved_limit:
                break
            if _matches(identity, needle):
                results.append(identity.summary())

        return SearchResult(query=query, limit=resolved_limit, results=tuple(results))

    def stats(self) -> RegistryStats:
        """Count identities per declared platform and per non-empty chain."""
        platforms: dict[str, int] = {}
        chains: dict[str, int] = {}
        for identity in self.identities:
            for platform in identity.platforms:
                platforms[platform] = platforms.get(platform, 0) + 1
            for chain, address in identity.wallets.items():
                if address:
                    chains[chain] = chains.get(chain, 0) + 1
        return RegistryStats(
            total_identities=len(self.identities),
            platform_counts=_frozen(platforms),
            chain_counts=_frozen(chains),
            last_updated=self.loaded_at,
        )

    def __len__(self) -> int:
        return len(self.identities)

    def __repr__(self) -> str:
        return (
            f"RegistrySnapshot(identities={len(self.identities)}, "
            f"source_dir={str(self.source_dir) if self.source_dir else None!r})"
        )


def _matches(identity: Identity, needle: str) -> bool:
    fields: list[str | None] = [identity.name, identity.description, identity.gpg_fingerprint]
    fields.extend(identity.platforms.values())
    return any(value and needle in value.lower() for value in fields)


def build_snapshot(
    directory: str | Path,
    extensions: Iterable[str] = (".json",),
    ordered: bool = True,
) -> RegistrySnapshot:
    """Scan *directory* and build a fully indexed snapshot.

    A missing directory yields an empty snapshot; unparseable documents are
    skipped.  Neither condition raises.
    """
    scan = scan_directory(directory, extensions, ordered)
    identities = [normalize(raw, source=name) for name, raw in scan.documents]
    snapshot = RegistrySnapshot.from_identities(
        identities,
        source_dir=scan.directory,
        directory_found=scan.found,
        skipped_documents=scan.skipped,
    )
    logger.debug(
        "Built snapshot from %s: %d identities, %d skipped",
        scan.directory,
        len(snapshot),
        len(scan.skipped),
    )
    return snapshot
