"""
Signature value and its fixed-width byte codec.

Wire format (no version byte; widths follow from the curve)::

    R.x (|Fq| bytes, LE) ‖ R.y (|Fq| bytes, LE) ‖ S (|Fr| bytes, LE)
"""

from __future__ import annotations

from dataclasses import dataclass

from .curve import CurveParameters, Point
from .errors import InvalidData
from .field import PrimeField


@dataclass(frozen=True)
class Signature:
    """
    EdDSA signature  (R, S).

    Verifiable as:  S·G − k·A == R   where  k = Poseidon(R, A, m).
    """

    R: Point
    S: PrimeField

    @property
    def curve(self) -> CurveParameters:
        return self.R.curve

    @staticmethod
    def size(curve: CurveParameters) -> int:
        return curve.point_size + curve.scalar_field.byte_size

    def to_bytes(self) -> bytes:
        return self.R.to_bytes_uncompressed() + self.S.to_bytes()

    @classmethod
    def from_bytes(cls, curve: CurveParameters, data: bytes) -> Signature:
        expected = cls.size(curve)
        if len(data) != expected:
            raise InvalidData(f"expected {expected} bytes, got {len(data)}")
        off = curve.point_size
        R = Point.from_bytes_uncompressed(curve, data[:off])
        S = curve.scalar_field.from_bytes(data[off:])
        return cls(R=R, S=S)
