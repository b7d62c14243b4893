"""
Native Poseidon-EdDSA signing and verification.

Signing key  (x, prefix),  public key  A = x·G,  message  m₀ … mₙ  over
the curve's base field:

    r = H(prefix ‖ m₀ ‖ … ‖ mₙ)  mod ℓ          (wide digest)
    R = r·G
    k = Poseidon(R.x, R.y, A.x, A.y, m₀, …, mₙ)  (one squeeze)
    S = x·k + r  mod ℓ

Verification recomputes k and accepts iff  S·G − k·A == R.

The squeezed challenge is a *base*-field element; it is used as the
integer it represents, which is also what the circuit gadget does when
it multiplies by the element's bits.  Every point multiplied by k lies
in the order-ℓ subgroup, so reducing k mod ℓ for the scalar arithmetic
gives the same group element in both executions.

The transcript order (R, then A, then the message) is defined once, in
:func:`absorb_challenge_inputs`, and shared with :pymod:`constraints`.
"""

from __future__ import annotations

import logging
from typing import Any, List, Sequence, Type

from .curve import CurveParameters
from .errors import VerificationFailed
from .field import PrimeField
from .hash import hash_nonce
from .keys import PublicKey, SigningKey
from .poseidon import PoseidonConfig, PoseidonSponge
from .signature import Signature

logger = logging.getLogger(__name__)


# ── message representation ──────────────────────────────────────────────
def message_to_field_elements(field: Type[PrimeField], data: bytes) -> List[PrimeField]:
    """
    Pack *data* into field elements: little-endian chunks of
    ``(bit_size − 1) // 8`` bytes, so every chunk is below the modulus.
    """
    chunk = (field.bit_size - 1) // 8
    return [
        field.from_le_bytes_mod_order(data[i:i + chunk])
        for i in range(0, len(data), chunk)
    ]


def normalize_message(field: Type[PrimeField], message: Any) -> List[PrimeField]:
    """
    Accept a field element, an int, raw bytes, or a sequence of field
    elements / ints, and return the list of base-field elements that is
    hashed and absorbed.
    """
    if isinstance(message, (bytes, bytearray)):
        return message_to_field_elements(field, bytes(message))
    if isinstance(message, (int, PrimeField)):
        message = [message]
    out = []
    for m in message:
        if isinstance(m, PrimeField):
            if not isinstance(m, field):
                raise ValueError(
                    f"message element is in {type(m).__name__}, expected {field.__name__}"
                )
            out.append(m)
        elif isinstance(m, int):
            out.append(field(m))
        else:
            raise TypeError(f"cannot embed {type(m).__name__} into {field.__name__}")
    return out


# ── challenge ───────────────────────────────────────────────────────────
def absorb_challenge_inputs(
    sponge: PoseidonSponge,
    r_xy: Sequence[Any],
    pk_xy: Sequence[Any],
    message: Sequence[Any],
) -> None:
    """Feed the challenge transcript: R, then the public key, then m."""
    sponge.absorb(*r_xy)
    sponge.absorb(*pk_xy)
    sponge.absorb(*message)


def derive_challenge(
    config: PoseidonConfig,
    R: Any,
    public_key: PublicKey,
    message: Sequence[PrimeField],
) -> PrimeField:
    """Squeeze the base-field challenge element k̂."""
    sponge = PoseidonSponge(config)
    absorb_challenge_inputs(sponge, R.xy(), public_key.xy(), message)
    return sponge.squeeze_field_elements(1)[0]


def challenge_scalar(curve: CurveParameters, k: PrimeField) -> PrimeField:
    return curve.scalar_field(k.n)


def _check_config(curve: CurveParameters, config: PoseidonConfig) -> None:
    if config.field is not curve.base_field:
        raise ValueError(
            f"poseidon config is over {config.field.__name__}, "
            f"but {curve.name} coordinates live in {curve.base_field.__name__}"
        )


# ── sign / verify ───────────────────────────────────────────────────────
def sign(signing_key: SigningKey, config: PoseidonConfig, message: Any) -> Signature:
    """Deterministic signature of *message* under *signing_key*."""
    curve = signing_key.curve
    _check_config(curve, config)
    m = normalize_message(curve.base_field, message)

    expanded = signing_key.expand()
    r = hash_nonce(signing_key.digest, curve.scalar_field, expanded.prefix, m)
    R = curve.generator * r

    k = challenge_scalar(curve, derive_challenge(config, R, signing_key.public_key, m))
    S = expanded.x * k + r
    return Signature(R=R, S=S)


def verify(
    public_key: PublicKey,
    config: PoseidonConfig,
    message: Any,
    signature: Signature,
) -> None:
    """
    Check  S·G − k·A == R.

    Raises ``VerificationFailed`` on mismatch; returns None on success.
    """
    curve = public_key.curve
    _check_config(curve, config)
    if signature.curve is not curve:
        raise VerificationFailed("signature and public key use different curves")
    m = normalize_message(curve.base_field, message)

    k = challenge_scalar(curve, derive_challenge(config, signature.R, public_key, m))
    recovered = curve.generator * signature.S - public_key.point * k

    if recovered != signature.R:
        logger.debug("signature rejected: recovered R does not match")
        raise VerificationFailed("recovered nonce point does not match R")


def verify_signature(
    public_key: PublicKey,
    config: PoseidonConfig,
    message: Any,
    signature: Signature,
) -> bool:
    """Boolean form of :func:`verify`."""
    try:
        verify(public_key, config, message, signature)
    except VerificationFailed:
        return False
    return True
