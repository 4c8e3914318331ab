"""Normalisation of raw registry documents into :class:`Identity` objects.

The registry document format has grown over time.  Older documents carry
flat fields (``gpgFingerprint``, ``wallets``, ``walletProof``); newer ones
group them under ``gpg`` and ``wallet`` objects.  Both shapes stay
queryable without a migration step: each output field is resolved from the
first source that carries a value, nested form first.

``normalize`` never raises.  Missing or mistyped members simply produce a
sparser identity.
"""
from __future__ import annotations

from collections.abc import Mapping

from atpexplorer.schema.identity import DEFAULT_ATP_VERSION, DEFAULT_RECORD_TYPE, Identity

# Chain assumed for the single address of a nested ``wallet`` object.
NESTED_WALLET_CHAIN: str = "btc"


def _present(value: object) -> bool:
    return value is not None and value != ""


def _first(*candidates: object) -> object:
    """Return the first candidate carrying a value, else ``None``."""
    for candidate in candidates:
        if _present(candidate):
            return candidate
    return None


def _first_str(*candidates: object) -> str | None:
    value = _first(*(c for c in candidates if isinstance(c, str)))
    return value if isinstance(value, str) else None


def _section(raw: Mapping[str, object], key: str) -> Mapping[str, object]:
    """Return the nested object at *key*, or an empty mapping."""
    value = raw.get(key)
    return value if isinstance(value, Mapping) else {}


def _string_map(value: object) -> dict[str, str]:
    """Keep the string-to-string entries of *value*."""
    if not isinstance(value, Mapping):
        return {}
    return {k: v for k, v in value.items() if isinstance(k, str) and isinstance(v, str)}


def _resolve_wallets(raw: Mapping[str, object], wallet: Mapping[str, object]) -> dict[str, str]:
    address = wallet.get("address")
    if isinstance(address, str) and address:
        return {NESTED_WALLET_CHAIN: address}
    return _string_map(raw.get("wallets"))


def _resolve_binding_proofs(raw: Mapping[str, object]) -> tuple[object, ...]:
    proofs = _first(raw.get("binding_proofs"), raw.get("bindingProofs"))
    if isinstance(proofs, (list, tuple)):
        return tuple(proofs)
    return ()


def normalize(raw: object, source: str | None = None) -> Identity:
    """Convert one raw registry document into a canonical :class:`Identity`.

    Parameters
    ----------
    raw:
        Parsed JSON document.  Anything other than an object yields an
        identity carrying only defaults.
    source:
        Filename the document was read from.

    Returns
    -------
    Identity

    Examples
    --------
    >>> normalize({"gpg": {"fingerprint": "ABC"}}).gpg_fingerprint
    'ABC'
    >>> normalize({"gpgFingerprint": "ABC"}).gpg_fingerprint
    'ABC'
    >>> dict(normalize({"wallet": {"address": "1A2B"}}).wallets)
    {'btc': '1A2B'}
    """
    doc: Mapping[str, object] = raw if isinstance(raw, Mapping) else {}
    gpg = _section(doc, "gpg")
    wallet = _section(doc, "wallet")

    return Identity(
        atp=_first(doc.get("atp")) or DEFAULT_ATP_VERSION,
        type=_first(doc.get("type")) or DEFAULT_RECORD_TYPE,
        name=_first_str(doc.get("name")),
        description=_first_str(doc.get("description")),
        gpg_fingerprint=_first_str(gpg.get("fingerprint"), doc.get("gpgFingerprint")),
        gpg_keyserver=_first_str(gpg.get("keyserver"), doc.get("gpgKeyserver")),
        platforms=_string_map(doc.get("platforms")),
        wallets=_resolve_wallets(doc, wallet),
        wallet_proof=_first(wallet.get("proof"), doc.get("walletProof")),
        binding_proofs=_resolve_binding_proofs(doc),
        proof_of_existence=_first(doc.get("proofOfExistence"), doc.get("proof_of_existence")),
        created=doc.get("created"),
        signature=doc.get("signature"),
        source=source,
    )
