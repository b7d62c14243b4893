"""
Poseidon-EdDSA: circuit-friendly EdDSA over twisted-Edwards curves.

An EdDSA signature scheme whose challenge is derived with the Poseidon
sponge instead of a bit-oriented hash, so the same verification runs:

- **natively**, on field elements and curve points;
- **in-circuit**, as an R1CS gadget over the curve's base field.

Both paths absorb the same transcript and check the same equation
S·G − k·A == R, and they agree on every valid and invalid input.

Supported curves: Baby-JubJub (``ed_on_bn254`` and its twist),
JubJub (``ed_on_bls12_381``) and Bandersnatch.

Quick start
-----------
::

    from poseidon_eddsa import EdDSAScheme

    scheme = EdDSAScheme.setup(curve="ed_on_bn254_twist")

    key = scheme.generate_key()
    sig = scheme.sign(key, b"transfer 10 tokens to Alice")
    assert scheme.verify(key.public_key, b"transfer 10 tokens to Alice", sig)

    cs, ok = scheme.verify_in_circuit(
        key.public_key, b"transfer 10 tokens to Alice", sig,
    )
    print(f"{cs.num_constraints} constraints, valid={ok.value}")
"""

__version__ = "0.1.0"

# ── core types ──────────────────────────────────────────────────────────
from .field import PrimeField, prime_field
from .curve import CurveParameters, Point
from .curves import (
    CURVES,
    ED_ON_BN254,
    ED_ON_BN254_TWIST,
    ED_ON_BLS12_381,
    BANDERSNATCH,
    get_curve,
    twist,
    untwist,
)

# ── protocol ────────────────────────────────────────────────────────────
from .protocol import EdDSAScheme
from .config import SchemeConfig, setup_logging

# ── keys & signatures ───────────────────────────────────────────────────
from .keys import SecretKey, PublicKey, SigningKey, ExpandedSecret
from .signature import Signature
from .signing import (
    sign,
    verify,
    verify_signature,
    message_to_field_elements,
)

# ── hashing ─────────────────────────────────────────────────────────────
from .hash import get_digest, hash_nonce, prune_buffer
from .poseidon import PoseidonConfig, PoseidonSponge, poseidon_config

# ── circuit ─────────────────────────────────────────────────────────────
from .r1cs import ConstraintSystem, FpVar, Boolean
from .nonnative import NonNativeFieldVar
from .curve_var import AffineVar
from .constraints import alloc_verification_inputs
from .constraints import verify as verify_gadget

# ── errors ──────────────────────────────────────────────────────────────
from .errors import (
    EdDSAError,
    VerificationFailed,
    BadDigestOutput,
    InvalidData,
    SynthesisError,
)

__all__ = [
    # version
    "__version__",
    # core
    "PrimeField", "prime_field", "CurveParameters", "Point",
    "CURVES", "ED_ON_BN254", "ED_ON_BN254_TWIST", "ED_ON_BLS12_381",
    "BANDERSNATCH", "get_curve", "twist", "untwist",
    # protocol
    "EdDSAScheme", "SchemeConfig", "setup_logging",
    # keys & signatures
    "SecretKey", "PublicKey", "SigningKey", "ExpandedSecret", "Signature",
    "sign", "verify", "verify_signature", "message_to_field_elements",
    # hashing
    "get_digest", "hash_nonce", "prune_buffer",
    "PoseidonConfig", "PoseidonSponge", "poseidon_config",
    # circuit
    "ConstraintSystem", "FpVar", "Boolean", "NonNativeFieldVar", "AffineVar",
    "alloc_verification_inputs", "verify_gadget",
    # errors
    "EdDSAError", "VerificationFailed", "BadDigestOutput", "InvalidData",
    "SynthesisError",
]
