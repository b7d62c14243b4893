"""
Poseidon-EdDSA verification as an R1CS gadget.

The circuit is built over the curve's *base* field, so point
coordinates are native variables while the signature scalar *S* (an
element of the scalar field) is carried as a ``NonNativeFieldVar``.

The gadget re-runs :func:`signing.verify` step for step:

1. absorb  R, A, m  with the shared transcript helper;
2. squeeze one native element k and decompose it into bits;
3. compute  S·G − k·A  by bit-driven double-and-add;
4. output  (S·G − k·A == R)  as a ``Boolean``.

It never raises on a bad signature.  The caller either enforces the
result (``res.enforce_equal(TRUE)``) or uses it as a selector.
"""

from __future__ import annotations

import logging
from typing import Any, Sequence, Tuple, Union

from .curve_var import AffineVar
from .keys import PublicKey
from .nonnative import NonNativeFieldVar
from .poseidon import PoseidonConfig, PoseidonSpongeVar
from .r1cs import Boolean, ConstraintSystem, FpVar
from .signature import Signature
from .signing import absorb_challenge_inputs, normalize_message

logger = logging.getLogger(__name__)

MessageVar = Union[FpVar, Sequence[FpVar]]


def verify(
    cs: ConstraintSystem,
    poseidon_config: PoseidonConfig,
    pk: AffineVar,
    sig: Tuple[AffineVar, NonNativeFieldVar],
    msg: MessageVar,
) -> Boolean:
    """Return a circuit boolean that is true iff *sig* verifies."""
    r, s = sig
    curve = pk.curve
    if cs.field is not curve.base_field:
        raise ValueError("circuit field must be the curve's base field")
    if s.target_field is not curve.scalar_field:
        raise ValueError("signature scalar must be emulated over the scalar field")
    messages = [msg] if isinstance(msg, FpVar) else list(msg)

    sponge = PoseidonSpongeVar(cs, poseidon_config)
    absorb_challenge_inputs(
        sponge, r.to_constraint_field(), pk.to_constraint_field(), messages,
    )
    k = sponge.squeeze_field_elements(1)[0]

    kx_b = pk.scalar_mul_le(k.to_bits_le())

    g = AffineVar.new_constant(curve, curve.generator)
    s_b = g.scalar_mul_le(s.to_bits_le())

    r_rec = s_b - kx_b
    result = r_rec.is_eq(r)
    logger.debug(
        "eddsa gadget over %s: %d constraints", curve.name, cs.num_constraints,
    )
    return result


def alloc_verification_inputs(
    cs: ConstraintSystem,
    public_key: PublicKey,
    signature: Signature,
    message: Any,
) -> Tuple[AffineVar, Tuple[AffineVar, NonNativeFieldVar], list]:
    """
    Allocate  (A, (R, S), m)  as witnesses.  *message* takes the same
    forms as the native API and is embedded the same way.
    """
    curve = public_key.curve
    pk_var = AffineVar.new_witness(cs, public_key.point)
    r_var = AffineVar.new_witness(cs, signature.R)
    s_var = NonNativeFieldVar.new_witness(cs, signature.S)
    msg_vars = [
        FpVar.new_witness(cs, m) for m in normalize_message(curve.base_field, message)
    ]
    return pk_var, (r_var, s_var), msg_vars
