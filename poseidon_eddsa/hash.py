"""
Wide-digest helpers: key expansion input, nonce derivation.

The scheme needs a general-purpose hash with exactly 64 bytes of output
(Blake2b-512 or SHA-512); it is passed around as a ``hashlib``-style
constructor such as ``hashlib.blake2b``.  Digest outputs are read
little-endian and reduced modulo the target field, as in RFC 8032.

Challenge derivation does *not* happen here: it uses the Poseidon sponge
(see :pymod:`poseidon`) so that it can be recomputed inside a circuit.
"""

from __future__ import annotations

import hashlib
from typing import Callable, Iterable, Type

from .errors import BadDigestOutput
from .field import PrimeField

WIDE_DIGEST_SIZE = 64

DigestFactory = Callable[[], "hashlib._Hash"]

DIGESTS = {
    "blake2b": hashlib.blake2b,
    "sha512": hashlib.sha512,
}


def check_digest(digest: DigestFactory) -> None:
    """Raise ``BadDigestOutput`` unless *digest* yields 64-byte outputs."""
    size = getattr(digest(), "digest_size", None)
    if size != WIDE_DIGEST_SIZE:
        raise BadDigestOutput(
            f"digest must produce {WIDE_DIGEST_SIZE} bytes, got {size}"
        )


def get_digest(name: str) -> DigestFactory:
    try:
        return DIGESTS[name]
    except KeyError:
        raise BadDigestOutput(
            f"unknown digest {name!r}; expected one of {sorted(DIGESTS)}"
        ) from None


def wide_hash(digest: DigestFactory, *parts: bytes) -> bytes:
    h = digest()
    for part in parts:
        h.update(part)
    return h.digest()


def prune_buffer(buffer: bytes, scalar_field: Type[PrimeField]) -> PrimeField:
    """
    EdDSA clamping: clear the three low bits, clear the top bit, set the
    second-highest bit; then reduce into the scalar field.
    """
    if len(buffer) != 32:
        raise ValueError(f"need 32 bytes, got {len(buffer)}")
    b = bytearray(buffer)
    b[0] &= 0b1111_1000
    b[31] &= 0b0111_1111
    b[31] |= 0b0100_0000
    return scalar_field.from_le_bytes_mod_order(bytes(b))


def hash_nonce(
    digest: DigestFactory,
    scalar_field: Type[PrimeField],
    prefix: bytes,
    message: Iterable[PrimeField],
) -> PrimeField:
    r"""
    Deterministic nonce  r = H(prefix ‖ m₀ ‖ m₁ ‖ …)  mod ℓ.

    Each message element contributes its canonical little-endian
    encoding.  No randomness is mixed in: the same key and message always
    give the same nonce, and therefore the same signature.
    """
    h = digest()
    h.update(prefix)
    for m in message:
        h.update(m.to_bytes())
    return scalar_field.from_le_bytes_mod_order(h.digest())
