"""
Scheme facade and configuration tests.
"""

import hashlib
import json
import logging

import pytest

from poseidon_eddsa import EdDSAScheme, SchemeConfig
from poseidon_eddsa.config import setup_logging
from poseidon_eddsa.curves import BN254Fr, ED_ON_BN254, ED_ON_BN254_TWIST
from poseidon_eddsa.errors import BadDigestOutput, VerificationFailed
from poseidon_eddsa.keys import SigningKey

from .conftest import FIXTURE_MESSAGE, counter_rng


# =============================================================================
# EdDSAScheme
# =============================================================================

class TestEdDSAScheme:
    """Tests for the high-level API."""

    def test_defaults(self, scheme):
        assert scheme.curve is ED_ON_BN254_TWIST
        assert scheme.digest is hashlib.blake2b
        assert scheme.poseidon.rate == 4
        assert scheme.poseidon.full_rounds == 8
        assert scheme.poseidon.partial_rounds == 60
        assert "ed_on_bn254_twist" in repr(scheme)

    def test_sign_verify(self, scheme):
        key = scheme.generate_key(counter_rng(11))
        sig = scheme.sign(key, FIXTURE_MESSAGE)
        assert scheme.verify(key.public_key, FIXTURE_MESSAGE, sig)
        assert not scheme.verify(key.public_key, FIXTURE_MESSAGE + b"!", sig)

    def test_verify_or_raise(self, scheme):
        key = scheme.signing_key(bytes(32))
        sig = scheme.sign(key, b"a")
        scheme.verify_or_raise(key.public_key, b"a", sig)
        with pytest.raises(VerificationFailed):
            scheme.verify_or_raise(key.public_key, b"b", sig)

    def test_signing_key_from_seed(self, scheme, zero_key):
        assert scheme.signing_key(bytes(32)).public_key == zero_key.public_key

    def test_codecs(self, scheme, zero_key):
        sig = scheme.sign(zero_key, b"codec")
        pk = scheme.public_key_from_bytes(zero_key.public_key.to_bytes())
        again = scheme.signature_from_bytes(sig.to_bytes())
        assert scheme.verify(pk, b"codec", again)

    def test_encode_message(self, scheme):
        assert scheme.encode_message(FIXTURE_MESSAGE) == [
            BN254Fr.from_le_bytes_mod_order(FIXTURE_MESSAGE)
        ]

    def test_key_from_other_curve(self, scheme):
        key = SigningKey.from_bytes(bytes(32), ED_ON_BN254)
        with pytest.raises(ValueError):
            scheme.sign(key, b"x")

    def test_key_with_other_digest(self, scheme):
        key = SigningKey.from_bytes(bytes(32), ED_ON_BN254_TWIST, hashlib.sha512)
        with pytest.raises(ValueError):
            scheme.sign(key, b"x")

    def test_bad_digest(self):
        with pytest.raises(BadDigestOutput):
            EdDSAScheme.setup(digest=hashlib.sha256)

    def test_curve_objects_accepted(self):
        scheme = EdDSAScheme.setup(curve=ED_ON_BN254, digest=hashlib.sha512)
        assert scheme.curve is ED_ON_BN254

    def test_verify_in_circuit(self, scheme, zero_key):
        sig = scheme.sign(zero_key, FIXTURE_MESSAGE)
        cs, ok = scheme.verify_in_circuit(zero_key.public_key, FIXTURE_MESSAGE, sig)
        assert ok.value
        assert cs.is_satisfied()


# =============================================================================
# SchemeConfig
# =============================================================================

class TestSchemeConfig:
    """Tests for configuration handling."""

    def test_defaults_are_valid(self):
        config = SchemeConfig()
        assert config.validate() == []
        assert config.to_dict() == {
            "curve": "ed_on_bn254_twist",
            "digest": "blake2b",
            "rate": 4,
            "full_rounds": 8,
            "partial_rounds": 60,
        }

    def test_validation_errors(self):
        config = SchemeConfig(curve="p256", digest="sha256", rate=0, full_rounds=7)
        errors = config.validate()
        assert len(errors) == 4
        assert any("p256" in e for e in errors)

    def test_save_load(self, tmp_path, caplog):
        path = tmp_path / "scheme.json"
        config = SchemeConfig(curve="bandersnatch", digest="sha512", partial_rounds=57)
        with caplog.at_level(logging.INFO, logger="poseidon_eddsa.config"):
            config.save(str(path))
            loaded = SchemeConfig.load(str(path))
        assert json.loads(path.read_text())["curve"] == "bandersnatch"
        assert loaded == config
        assert f"Configuration saved to {path}" in caplog.messages
        assert f"Configuration loaded from {path}" in caplog.messages

    def test_load_partial_file(self, tmp_path):
        path = tmp_path / "scheme.json"
        path.write_text(json.dumps({"curve": "ed_on_bn254", "unknown": 1}))
        config = SchemeConfig.load(str(path))
        assert config.curve == "ed_on_bn254"
        assert config.rate == 4

    def test_from_env(self):
        config = SchemeConfig.from_env({
            "POSEIDON_EDDSA_CURVE": "ed_on_bls12_381",
            "POSEIDON_EDDSA_PARTIAL_ROUNDS": "57",
            "UNRELATED": "x",
        })
        assert config.curve == "ed_on_bls12_381"
        assert config.partial_rounds == 57
        assert config.digest == "blake2b"

    def test_from_env_bad_integer(self):
        with pytest.raises(ValueError):
            SchemeConfig.from_env({"POSEIDON_EDDSA_RATE": "four"})

    def test_build(self):
        scheme = SchemeConfig().build()
        assert scheme.curve is ED_ON_BN254_TWIST

    def test_build_invalid(self):
        with pytest.raises(ValueError, match="invalid scheme configuration"):
            SchemeConfig(curve="p256").build()

    def test_setup_logging(self):
        setup_logging("debug")
