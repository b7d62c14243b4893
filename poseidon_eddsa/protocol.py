"""
High-level Poseidon-EdDSA orchestration.

Provides a single ``EdDSAScheme`` class that binds a curve, a wide digest
and a Poseidon configuration, so callers never pass mismatched pieces to
the sign / verify / circuit functions.

Usage
-----
::

    from poseidon_eddsa.protocol import EdDSAScheme

    # Setup
    scheme = EdDSAScheme.setup(curve="ed_on_bn254_twist")

    # Keys
    key = scheme.generate_key()

    # Sign
    sig = scheme.sign(key, b"hello world")

    # Verify natively ...
    assert scheme.verify(key.public_key, b"hello world", sig)

    # ... or inside a constraint system
    cs, ok = scheme.verify_in_circuit(key.public_key, b"hello world", sig)
    assert ok.value and cs.is_satisfied()
"""

from __future__ import annotations

import logging
from typing import Any, Callable, List, Optional, Tuple, Union

from . import constraints, signing
from .curve import CurveParameters
from .curves import get_curve
from .field import PrimeField
from .hash import DigestFactory, check_digest, get_digest
from .keys import PublicKey, SecretKey, SigningKey
from .poseidon import PoseidonConfig, poseidon_config
from .r1cs import Boolean, ConstraintSystem
from .signature import Signature

logger = logging.getLogger(__name__)


class EdDSAScheme:
    """
    One configured instance of the scheme.

    Encapsulates:
    1. Setup: curve, digest and Poseidon parameters.
    2. Keys: generation and reconstruction from 32-byte seeds.
    3. Sign / verify: native, deterministic.
    4. Circuit: the same verification as an R1CS gadget.
    """

    def __init__(
        self,
        curve: CurveParameters,
        digest: DigestFactory,
        poseidon: PoseidonConfig,
    ) -> None:
        check_digest(digest)
        if poseidon.field is not curve.base_field:
            raise ValueError("poseidon config must be over the curve's base field")
        self._curve = curve
        self._digest = digest
        self._poseidon = poseidon

    # ── factories ──────────────────────────────────────────────────────

    @classmethod
    def setup(
        cls,
        curve: Union[str, CurveParameters] = "ed_on_bn254_twist",
        digest: Union[str, DigestFactory] = "blake2b",
        rate: int = 4,
        full_rounds: int = 8,
        partial_rounds: int = 60,
    ) -> EdDSAScheme:
        """
        Create a scheme instance.

        Parameters
        ----------
        curve : str or CurveParameters
            Registry name (see :data:`curves.CURVES`) or a curve object.
        digest : str or hashlib constructor
            64-byte digest: ``"blake2b"``, ``"sha512"`` or a callable.
        rate, full_rounds, partial_rounds : int
            Poseidon instance; every party must use the same values.
        """
        if isinstance(curve, str):
            curve = get_curve(curve)
        if isinstance(digest, str):
            digest = get_digest(digest)
        config = poseidon_config(curve.base_field, rate, full_rounds, partial_rounds)
        logger.debug("scheme set up on %s (rate=%d)", curve.name, rate)
        return cls(curve, digest, config)

    # ── keys ───────────────────────────────────────────────────────────

    def generate_key(self, rng: Optional[Callable[[int], bytes]] = None) -> SigningKey:
        return SigningKey.generate(self._curve, self._digest, rng)

    def signing_key(self, seed: Union[bytes, SecretKey]) -> SigningKey:
        """Rebuild a signing key from its 32-byte seed."""
        if not isinstance(seed, SecretKey):
            seed = SecretKey.from_bytes(seed)
        return SigningKey.new(seed, self._curve, self._digest)

    def public_key_from_bytes(self, data: bytes) -> PublicKey:
        return PublicKey.from_bytes(self._curve, data)

    def signature_from_bytes(self, data: bytes) -> Signature:
        return Signature.from_bytes(self._curve, data)

    # ── signing ────────────────────────────────────────────────────────

    def encode_message(self, data: bytes) -> List[PrimeField]:
        """Pack raw bytes into base-field elements."""
        return signing.message_to_field_elements(self._curve.base_field, data)

    def sign(self, key: SigningKey, message: Any) -> Signature:
        self._check_key(key.public_key)
        if key.digest is not self._digest:
            raise ValueError("signing key was expanded with a different digest")
        return signing.sign(key, self._poseidon, message)

    # ── verification ───────────────────────────────────────────────────

    def verify(self, public_key: PublicKey, message: Any, signature: Signature) -> bool:
        self._check_key(public_key)
        return signing.verify_signature(public_key, self._poseidon, message, signature)

    def verify_or_raise(
        self, public_key: PublicKey, message: Any, signature: Signature,
    ) -> None:
        """Raises ``VerificationFailed`` on an invalid signature."""
        self._check_key(public_key)
        signing.verify(public_key, self._poseidon, message, signature)

    def verify_in_circuit(
        self,
        public_key: PublicKey,
        message: Any,
        signature: Signature,
    ) -> Tuple[ConstraintSystem, Boolean]:
        """
        Synthesise the verification gadget over fresh witnesses.

        Returns the constraint system and the unenforced result wire;
        the caller decides whether to enforce it.
        """
        self._check_key(public_key)
        cs = ConstraintSystem(self._curve.base_field)
        pk_var, sig_var, msg_vars = constraints.alloc_verification_inputs(
            cs, public_key, signature, message,
        )
        result = constraints.verify(cs, self._poseidon, pk_var, sig_var, msg_vars)
        return cs, result

    # ── accessors ──────────────────────────────────────────────────────

    @property
    def curve(self) -> CurveParameters:
        return self._curve

    @property
    def digest(self) -> DigestFactory:
        return self._digest

    @property
    def poseidon(self) -> PoseidonConfig:
        return self._poseidon

    def _check_key(self, public_key: PublicKey) -> None:
        if public_key.curve is not self._curve:
            raise ValueError(
                f"key is on {public_key.curve.name}, scheme uses {self._curve.name}"
            )

    def __repr__(self) -> str:
        cfg = self._poseidon
        return (
            f"EdDSAScheme({self._curve.name}, rate={cfg.rate}, "
            f"R_F={cfg.full_rounds}, R_P={cfg.partial_rounds})"
        )
