"""
Key material: secret seeds, expansion, public keys, signing keys.

A secret key is an opaque 32-byte seed.  It is *expanded* once through
the 64-byte wide digest:

    h = H(seed)            (64 bytes)
    x = prune(h[0:32])     mod ℓ       (signing scalar)
    prefix = h[32:64]                  (nonce-derivation key)

and the public key is  A = x·G.  Because G has prime order ℓ and x is
reduced mod ℓ, A always lies in the prime-order subgroup.
"""

from __future__ import annotations

import hashlib
import secrets
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Callable, Optional, Tuple, Type

from .curve import CurveParameters, Point
from .errors import InvalidData
from .field import PrimeField
from .hash import DigestFactory, check_digest, prune_buffer, wide_hash

if TYPE_CHECKING:
    from .poseidon import PoseidonConfig
    from .signature import Signature

SECRET_KEY_BYTES = 32


# ── secret seed ─────────────────────────────────────────────────────────
@dataclass(frozen=True)
class SecretKey:
    """32-byte EdDSA seed; not itself a field element."""

    seed: bytes = field(repr=False)

    def __post_init__(self) -> None:
        if len(self.seed) != SECRET_KEY_BYTES:
            raise InvalidData(
                f"need {SECRET_KEY_BYTES} bytes, got {len(self.seed)}"
            )

    @classmethod
    def from_bytes(cls, data: bytes) -> SecretKey:
        return cls(bytes(data))

    @classmethod
    def generate(cls, rng: Optional[Callable[[int], bytes]] = None) -> SecretKey:
        """Draw a fresh seed (``secrets.token_bytes`` unless *rng* given)."""
        draw = rng or secrets.token_bytes
        return cls(bytes(draw(SECRET_KEY_BYTES)))

    def to_bytes(self) -> bytes:
        return self.seed


@dataclass(frozen=True)
class ExpandedSecret:
    """Signing scalar *x* and the 32-byte nonce prefix."""

    x: PrimeField
    prefix: bytes = field(repr=False)


def expand(
    secret: SecretKey,
    scalar_field: Type[PrimeField],
    digest: DigestFactory,
) -> ExpandedSecret:
    """Expand *secret* via the wide digest; see module docstring."""
    check_digest(digest)
    h = wide_hash(digest, secret.seed)
    return ExpandedSecret(x=prune_buffer(h[:32], scalar_field), prefix=h[32:64])


def derive_public_key(curve: CurveParameters, x: PrimeField) -> PublicKey:
    return PublicKey(curve.generator * x)


# ── public key ──────────────────────────────────────────────────────────
@dataclass(frozen=True)
class PublicKey:
    """Verification key  A = x·G  (affine, prime-order subgroup)."""

    point: Point

    @property
    def curve(self) -> CurveParameters:
        return self.point.curve

    def xy(self) -> Tuple[PrimeField, PrimeField]:
        return self.point.xy()

    def to_bytes(self) -> bytes:
        """Compressed encoding."""
        return self.point.to_bytes_compressed()

    @classmethod
    def from_bytes(cls, curve: CurveParameters, data: bytes) -> PublicKey:
        return cls(Point.from_bytes_compressed(curve, data))

    def verify(self, config: PoseidonConfig, message: Any, signature: Signature) -> None:
        """Raise ``VerificationFailed`` unless *signature* is valid."""
        from .signing import verify
        verify(self, config, message, signature)

    def is_valid(self, config: PoseidonConfig, message: Any, signature: Signature) -> bool:
        from .signing import verify_signature
        return verify_signature(self, config, message, signature)


# ── signing key ─────────────────────────────────────────────────────────
@dataclass(frozen=True)
class SigningKey:
    """
    Immutable  (SecretKey, PublicKey)  pair bound to one curve and one
    wide digest.  Build it with :meth:`new`, :meth:`generate` or
    :meth:`from_bytes`; the public key is always derived, never supplied.
    """

    secret_key: SecretKey
    public_key: PublicKey
    digest: DigestFactory = field(compare=False, repr=False)

    @classmethod
    def new(
        cls,
        secret_key: SecretKey,
        curve: CurveParameters,
        digest: DigestFactory = hashlib.blake2b,
    ) -> SigningKey:
        """Raises ``BadDigestOutput`` if *digest* is not 64 bytes wide."""
        expanded = expand(secret_key, curve.scalar_field, digest)
        return cls(
            secret_key=secret_key,
            public_key=derive_public_key(curve, expanded.x),
            digest=digest,
        )

    @classmethod
    def generate(
        cls,
        curve: CurveParameters,
        digest: DigestFactory = hashlib.blake2b,
        rng: Optional[Callable[[int], bytes]] = None,
    ) -> SigningKey:
        return cls.new(SecretKey.generate(rng), curve, digest)

    @classmethod
    def from_bytes(
        cls,
        data: bytes,
        curve: CurveParameters,
        digest: DigestFactory = hashlib.blake2b,
    ) -> SigningKey:
        return cls.new(SecretKey.from_bytes(data), curve, digest)

    def to_bytes(self) -> bytes:
        return self.secret_key.to_bytes()

    @property
    def curve(self) -> CurveParameters:
        return self.public_key.curve

    def expand(self) -> ExpandedSecret:
        return expand(self.secret_key, self.curve.scalar_field, self.digest)

    def sign(self, config: PoseidonConfig, message: Any) -> Signature:
        from .signing import sign
        return sign(self, config, message)

    def shared_key(self, recipient: PublicKey) -> bytes:
        """
        Diffie-Hellman key with *recipient*: the first 32 bytes of the
        compressed encoding of  x·B.
        """
        if recipient.curve is not self.curve:
            raise ValueError("recipient key is on a different curve")
        shared = recipient.point * self.expand().x
        return shared.to_bytes_compressed()[:32]
