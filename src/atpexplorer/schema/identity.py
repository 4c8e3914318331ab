"""Canonical identity schema for atp-explorer.

Registry documents come in several historical shapes; every one of them is
normalised into the single :class:`Identity` shape defined here before it is
indexed.  The JSON representation uses the protocol's camelCase keys.

Shipped in this module
----------------------
- Identity              - frozen dataclass holding one normalised record
- DEFAULT_ATP_VERSION   - protocol version assumed when a document has none
- DEFAULT_RECORD_TYPE   - record kind assumed when a document has none
"""
from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType

DEFAULT_ATP_VERSION: str = "0.4"
DEFAULT_RECORD_TYPE: str = "identity"

# Fields that may hold document-supplied containers; frozen on construction.
_CONTAINER_FIELDS: tuple[str, ...] = (
    "atp",
    "type",
    "platforms",
    "wallets",
    "wallet_proof",
    "binding_proofs",
    "proof_of_existence",
    "created",
    "signature",
)


def _freeze(value: object) -> object:
    """Read-only deep copy of a JSON value: objects to proxies, arrays to tuples."""
    if isinstance(value, Mapping):
        return MappingProxyType({key: _freeze(item) for key, item in value.items()})
    if isinstance(value, (list, tuple)):
        return tuple(_freeze(item) for item in value)
    return value


def _thaw(value: object) -> object:
    """Inverse of :func:`_freeze`, producing plain JSON-encodable values."""
    if isinstance(value, Mapping):
        return {key: _thaw(item) for key, item in value.items()}
    if isinstance(value, tuple):
        return [_thaw(item) for item in value]
    return value


@dataclass(frozen=True)
class Identity:
    """One normalised agent identity record.

    No field is required.  An identity without ``name`` or
    ``gpg_fingerprint`` is still indexed; it is simply unreachable through
    that key.

    Identities are deeply read-only: mappings handed in are copied into
    ``MappingProxyType`` views and lists into tuples, so a record obtained
    from a published snapshot cannot be altered through any of its fields.

    Parameters
    ----------
    atp:
        Protocol version, passed through as published.
    type:
        Record kind, normally ``"identity"``.
    name:
        Optional display name.
    description:
        Optional free text.
    gpg_fingerprint:
        Primary durable identifier, as published (case preserved).
    gpg_keyserver:
        Keyserver the GPG key was published to.
    platforms:
        Platform name (``twitter``, ``github``...) to handle.
    wallets:
        Chain name to address.
    wallet_proof, binding_proofs, proof_of_existence, created, signature:
        Opaque passthrough values; stored and returned, never interpreted.
    source:
        Filename of the document this identity was read from.  Not part of
        the serialised form.

    Examples
    --------
    >>> identity = Identity(name="Shrike", platforms={"twitter": "ShrikeBot"})
    >>> identity.to_dict()["atp"]
    '0.4'
    >>> identity.platforms["twitter"] = "other"
    Traceback (most recent call last):
        ...
    TypeError: 'mappingproxy' object does not support item assignment
    """

    atp: object = DEFAULT_ATP_VERSION
    type: object = DEFAULT_RECORD_TYPE
    name: str | None = None
    description: str | None = None
    gpg_fingerprint: str | None = None
    gpg_keyserver: str | None = None
    platforms: Mapping[str, str] = field(default_factory=dict)
    wallets: Mapping[str, str] = field(default_factory=dict)
    wallet_proof: object = None
    binding_proofs: tuple[object, ...] = ()
    proof_of_existence: object = None
    created: object = None
    signature: object = None
    source: str | None = field(default=None, compare=False)

    def __post_init__(self) -> None:
        for name in _CONTAINER_FIELDS:
            object.__setattr__(self, name, _freeze(getattr(self, name)))

    def __hash__(self) -> int:
        return hash(
            (
                self.name,
                self.gpg_fingerprint,
                tuple(sorted(self.platforms.items())),
                tuple(sorted(self.wallets.items())),
            )
        )

    # ------------------------------------------------------------------
    # Serialisation
    # ------------------------------------------------------------------

    def to_dict(self) -> dict[str, object]:
        """Return the full protocol representation.

        Optional scalar fields that are absent are omitted; ``platforms``,
        ``wallets`` and ``bindingProofs`` are always present.
        """
        payload: dict[str, object] = {
            "atp": _thaw(self.atp),
            "type": _thaw(self.type),
            "name": self.name,
            "description": self.description,
            "gpgFingerprint": self.gpg_fingerprint,
            "gpgKeyserver": self.gpg_keyserver,
            "platforms": dict(self.platforms),
            "wallets": dict(self.wallets),
            "walletProof": _thaw(self.wallet_proof),
            "bindingProofs": [_thaw(proof) for proof in self.binding_proofs],
            "proofOfExistence": _thaw(self.proof_of_existence),
            "created": _thaw(self.created),
            "signature": _thaw(self.signature),
        }
        return {key: value for key, value in payload.items() if value is not None}

    def summary(self) -> dict[str, object]:
        """Return the reduced projection used by listing and search.

        ``proofOfExistence`` is cut down to its ``txid`` and ``network``
        members, or ``None`` when the identity carries no proof.
        """
        proof: dict[str, object] | None = None
        raw_proof = self.proof_of_existence
        if raw_proof:
            members = raw_proof if isinstance(raw_proof, Mapping) else {}
            proof = {
                "txid": _thaw(members.get("txid")),
                "network": _thaw(members.get("network")),
            }
        return {
            "name": self.name,
            "gpgFingerprint": self.gpg_fingerprint,
            "description": self.description,
            "platforms": dict(self.platforms),
            "proofOfExistence": proof,
        }
