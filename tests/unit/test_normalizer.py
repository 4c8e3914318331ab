"""Unit tests for atpexplorer.registry.normalizer."""
from __future__ import annotations

import pytest

from atpexplorer.registry.normalizer import normalize
from atpexplorer.schema.identity import Identity

from conftest import BETA_DOC, BETA_FP, SHRIKE_DOC, SHRIKE_FP


# ---------------------------------------------------------------------------
# Defaults
# ---------------------------------------------------------------------------


class TestDefaults:
    def test_empty_document_gets_protocol_defaults(self) -> None:
        identity = normalize({})
        assert identity.atp == "0.4"
        assert identity.type == "identity"

    def test_empty_document_has_empty_collections(self) -> None:
        identity = normalize({})
        assert identity.platforms == {}
        assert identity.wallets == {}
        assert identity.binding_proofs == ()

    def test_empty_document_has_no_optional_fields(self) -> None:
        identity = normalize({})
        assert identity.name is None
        assert identity.gpg_fingerprint is None
        assert identity.proof_of_existence is None

    def test_explicit_atp_and_type_are_kept(self) -> None:
        identity = normalize({"atp": "0.5", "type": "revocation"})
        assert identity.atp == "0.5"
        assert identity.type == "revocation"

    def test_empty_atp_falls_back_to_default(self) -> None:
        assert normalize({"atp": ""}).atp == "0.4"

    def test_non_string_atp_and_type_pass_through(self) -> None:
        identity = normalize({"atp": 0.5, "type": 7})
        assert identity.atp == 0.5
        assert identity.type == 7
        assert identity.to_dict()["atp"] == 0.5

    @pytest.mark.parametrize("falsy", [0, False, None])
    def test_falsy_atp_falls_back_to_default(self, falsy: object) -> None:
        assert normalize({"atp": falsy}).atp == "0.4"

    @pytest.mark.parametrize("raw", [None, [], "text", 42, [{"name": "x"}]])
    def test_non_object_document_never_fails(self, raw: object) -> None:
        identity = normalize(raw)
        assert isinstance(identity, Identity)
        assert identity.name is None

    def test_source_is_recorded(self) -> None:
        assert normalize({}, source="x.json").source == "x.json"


# ---------------------------------------------------------------------------
# GPG fields
# ---------------------------------------------------------------------------


class TestGpgResolution:
    def test_nested_and_flat_fingerprint_are_equivalent(self) -> None:
        nested = normalize({"gpg": {"fingerprint": "ABC"}})
        flat = normalize({"gpgFingerprint": "ABC"})
        assert nested.gpg_fingerprint == flat.gpg_fingerprint == "ABC"

    def test_nested_fingerprint_wins_over_flat(self) -> None:
        identity = normalize({"gpg": {"fingerprint": "NEW"}, "gpgFingerprint": "OLD"})
        assert identity.gpg_fingerprint == "NEW"

    def test_empty_nested_fingerprint_falls_back_to_flat(self) -> None:
        identity = normalize({"gpg": {"fingerprint": ""}, "gpgFingerprint": "OLD"})
        assert identity.gpg_fingerprint == "OLD"

    def test_keyserver_from_nested(self) -> None:
        assert normalize(SHRIKE_DOC).gpg_keyserver == "keys.openpgp.org"

    def test_keyserver_from_flat(self) -> None:
        assert normalize(BETA_DOC).gpg_keyserver == "keyserver.ubuntu.com"

    def test_non_object_gpg_is_ignored(self) -> None:
        identity = normalize({"gpg": "oops", "gpgFingerprint": "ABC"})
        assert identity.gpg_fingerprint == "ABC"

    def test_fingerprint_case_is_preserved(self) -> None:
        assert normalize(SHRIKE_DOC).gpg_fingerprint == SHRIKE_FP
        assert normalize(BETA_DOC).gpg_fingerprint == BETA_FP


# ---------------------------------------------------------------------------
# Wallets
# ---------------------------------------------------------------------------


class TestWalletResolution:
    def test_single_nested_address_becomes_btc(self) -> None:
        assert normalize({"wallet": {"address": "1A2B"}}).wallets == {"btc": "1A2B"}

    def test_nested_address_wins_over_flat_map(self) -> None:
        identity = normalize({"wallet": {"address": "1A2B"}, "wallets": {"eth": "0x1"}})
        assert identity.wallets == {"btc": "1A2B"}

    def test_flat_wallet_map_is_used_without_nested_address(self) -> None:
        identity = normalize({"wallet": {"proof": "p"}, "wallets": {"eth": "0x1"}})
        assert identity.wallets == {"eth": "0x1"}

    def test_non_string_addresses_are_dropped(self) -> None:
        identity = normalize({"wallets": {"btc": None, "eth": "0x1", "sol": 5}})
        assert identity.wallets == {"eth": "0x1"}

    def test_empty_address_is_kept(self) -> None:
        assert normalize(BETA_DOC).wallets == {"btc": "", "eth": "0xBetaWallet"}

    def test_wallet_proof_from_nested(self) -> None:
        assert normalize(SHRIKE_DOC).wallet_proof == {"message": "m", "signature": "s"}

    def test_wallet_proof_from_flat(self) -> None:
        assert normalize(BETA_DOC).wallet_proof == {"message": "legacy"}


# ---------------------------------------------------------------------------
# Proofs and passthrough
# ---------------------------------------------------------------------------


class TestProofResolution:
    def test_snake_case_binding_proofs(self) -> None:
        identity = normalize({"binding_proofs": [{"a": 1}]})
        assert identity.binding_proofs == ({"a": 1},)

    def test_camel_case_binding_proofs(self) -> None:
        identity = normalize({"bindingProofs": [{"b": 2}]})
        assert identity.binding_proofs == ({"b": 2},)

    def test_snake_case_binding_proofs_win(self) -> None:
        identity = normalize({"binding_proofs": [1], "bindingProofs": [2]})
        assert identity.binding_proofs == (1,)

    def test_non_list_binding_proofs_become_empty(self) -> None:
        assert normalize({"bindingProofs": "nope"}).binding_proofs == ()

    def test_camel_case_proof_of_existence_wins(self) -> None:
        identity = normalize(
            {"proofOfExistence": {"txid": "new"}, "proof_of_existence": {"txid": "old"}}
        )
        assert identity.proof_of_existence == {"txid": "new"}

    def test_snake_case_proof_of_existence_fallback(self) -> None:
        identity = normalize(BETA_DOC)
        assert identity.proof_of_existence == {"txid": "def456", "network": "testnet"}

    def test_created_and_signature_pass_through(self) -> None:
        identity = normalize(SHRIKE_DOC)
        assert identity.created == 1706745600
        assert identity.signature.startswith("-----BEGIN")

    def test_non_string_platform_handles_are_dropped(self) -> None:
        identity = normalize({"platforms": {"twitter": None, "github": "x"}})
        assert identity.platforms == {"github": "x"}
