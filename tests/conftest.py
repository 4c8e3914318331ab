"""Shared fixtures: small on-disk registries built in ``tmp_path``."""
from __future__ import annotations

import json
from pathlib import Path

import pytest

from atpexplorer.schema.config import ExplorerConfig

SHRIKE_FP = "AAAA1111BBBB2222CCCC3333DDDD4444EEEE5555"
BETA_FP = "FFFF0000FFFF0000FFFF0000FFFF0000ABCD9876"

# Nested gpg/wallet shape
SHRIKE_DOC: dict[str, object] = {
    "atp": "0.4",
    "type": "identity",
    "name": "Shrike_Bot",
    "description": "Autonomous research agent",
    "gpg": {"fingerprint": SHRIKE_FP, "keyserver": "keys.openpgp.org"},
    "platforms": {"twitter": "Shrike_Bot", "github": "shrikebot"},
    "wallet": {"address": "1ShrikeAddr", "proof": {"message": "m", "signature": "s"}},
    "proofOfExistence": {"txid": "abc123", "network": "bitcoin", "blockHeight": 840000},
    "created": 1706745600,
    "signature": "-----BEGIN PGP SIGNATURE-----",
}

# Legacy flat shape
BETA_DOC: dict[str, object] = {
    "name": "Beta",
    "gpgFingerprint": BETA_FP,
    "gpgKeyserver": "keyserver.ubuntu.com",
    "platforms": {"github": "beta-dev"},
    "wallets": {"btc": "", "eth": "0xBetaWallet"},
    "walletProof": {"message": "legacy"},
    "binding_proofs": [{"platform": "github", "url": "https://gist.github.com/x"}],
    "proof_of_existence": {"txid": "def456", "network": "testnet"},
}

GAMMA_DOC: dict[str, object] = {
    "name": "Gamma",
    "description": "An unrelated agent",
    "platforms": {"moltbook": "gamma"},
}


def write_document(directory: Path, filename: str, document: object) -> Path:
    directory.mkdir(parents=True, exist_ok=True)
    path = directory / filename
    path.write_text(json.dumps(document), encoding="utf-8")
    return path


@pytest.fixture()
def registry_root(tmp_path: Path) -> Path:
    """Registry with three valid identity documents, read as a, b, c."""
    identities = tmp_path / "registry" / "identities"
    write_document(identities, "a-shrike.json", SHRIKE_DOC)
    write_document(identities, "b-beta.json", BETA_DOC)
    write_document(identities, "c-gamma.json", GAMMA_DOC)
    return tmp_path / "registry"


@pytest.fixture()
def identities_dir(registry_root: Path) -> Path:
    return registry_root / "identities"


@pytest.fixture()
def config(registry_root: Path) -> ExplorerConfig:
    return ExplorerConfig(registry_path=str(registry_root))
