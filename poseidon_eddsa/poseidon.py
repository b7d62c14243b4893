"""
Poseidon sponge: parameter generation, native sponge, circuit sponge.

Parameters
----------
Round constants and the MDS matrix are derived with the Grain LFSR from
the Poseidon paper (§F), exactly as arkworks' ``find_poseidon_ark_and_mds``
does, so a config generated here for ``(field, rate, R_F, R_P)`` is the
same config a Rust verifier generates for the same arguments.  Signer,
verifier and circuit must agree on every argument: a mismatch does not
raise, it silently yields a different challenge.

Sponge
------
Duplex sponge with capacity 1 and S-box  x ↦ x⁵.  The permutation is
written once against the arithmetic operators only (``+``, ``*``), so the
same code drives native field elements (:class:`PoseidonSponge`) and
circuit variables (:class:`PoseidonSpongeVar`).

References
----------
- Grassi, Khovratovich, Rechberger, Roy, Schofnegger (2021).
  "Poseidon: A New Hash Function for Zero-Knowledge Proof Systems."
  USENIX Security 2021.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from functools import lru_cache
from typing import Any, List, Sequence, Tuple, Type

from .field import PrimeField
from .r1cs import ConstraintSystem, FpVar

logger = logging.getLogger(__name__)


# ── Grain LFSR ──────────────────────────────────────────────────────────
class GrainLFSR:
    """80-bit self-shrinking Grain LFSR seeded with the instance profile."""

    def __init__(
        self,
        prime_bits: int,
        state_len: int,
        full_rounds: int,
        partial_rounds: int,
        sbox_is_inverse: bool = False,
    ) -> None:
        self.prime_bits = prime_bits
        bits: List[int] = []
        bits += [0, 1]                                  # field: prime
        bits += [0, 0, 0, 1 if sbox_is_inverse else 0]  # S-box
        bits += _to_bits_be(prime_bits, 12)
        bits += _to_bits_be(state_len, 12)
        bits += _to_bits_be(full_rounds, 10)
        bits += _to_bits_be(partial_rounds, 10)
        bits += [1] * 30
        self._state = bits
        self._head = 0
        for _ in range(160):
            self._update()

    def _update(self) -> int:
        s, h = self._state, self._head
        new_bit = (
            s[(h + 62) % 80] ^ s[(h + 51) % 80] ^ s[(h + 38) % 80]
            ^ s[(h + 23) % 80] ^ s[(h + 13) % 80] ^ s[h]
        )
        s[h] = new_bit
        self._head = (h + 1) % 80
        return new_bit

    def get_bits(self, n: int) -> List[int]:
        """Self-shrinking output: keep the second bit of pairs led by 1."""
        out = []
        for _ in range(n):
            while not self._update():
                self._update()
            out.append(self._update())
        return out

    def _next_int(self) -> int:
        v = 0
        for b in self.get_bits(self.prime_bits):   # most significant first
            v = (v << 1) | b
        return v

    def field_elements_rejection_sampling(
        self, field: Type[PrimeField], count: int,
    ) -> List[PrimeField]:
        out = []
        for _ in range(count):
            while True:
                v = self._next_int()
                if v < field.field_modulus:
                    out.append(field(v))
                    break
        return out

    def field_elements_mod_p(
        self, field: Type[PrimeField], count: int,
    ) -> List[PrimeField]:
        return [field(self._next_int()) for _ in range(count)]


def _to_bits_be(value: int, width: int) -> List[int]:
    return [(value >> i) & 1 for i in range(width - 1, -1, -1)]


# ── configuration ───────────────────────────────────────────────────────
@dataclass(frozen=True)
class PoseidonConfig:
    """Immutable Poseidon instance; compare with ``==`` for interop."""

    field: Type[PrimeField]
    full_rounds: int
    partial_rounds: int
    alpha: int
    mds: Tuple[Tuple[PrimeField, ...], ...]
    ark: Tuple[Tuple[PrimeField, ...], ...]
    rate: int
    capacity: int = 1

    @property
    def width(self) -> int:
        return self.rate + self.capacity

    def validate(self) -> None:
        t = self.width
        if self.rate < 1 or self.capacity < 1:
            raise ValueError("rate and capacity must be positive")
        if self.full_rounds % 2 != 0:
            raise ValueError(
                "full_rounds must be even (split before/after partial rounds)"
            )
        if self.alpha < 3 or self.alpha % 2 == 0:
            raise ValueError("alpha must be an odd integer >= 3")
        if len(self.mds) != t or any(len(row) != t for row in self.mds):
            raise ValueError(f"mds must be {t}x{t}")
        rounds = self.full_rounds + self.partial_rounds
        if len(self.ark) != rounds or any(len(row) != t for row in self.ark):
            raise ValueError(f"ark must be {rounds}x{t}")


@lru_cache(maxsize=None)
def poseidon_config(
    field: Type[PrimeField],
    rate: int,
    full_rounds: int,
    partial_rounds: int,
    skip_matrices: int = 0,
) -> PoseidonConfig:
    """
    Generate (or fetch the cached) Poseidon config for *field*.

    Pure function of its arguments; every party that needs to
    interoperate must call it with the same ones.
    """
    t = rate + 1
    lfsr = GrainLFSR(field.bit_size, t, full_rounds, partial_rounds)

    ark = tuple(
        tuple(lfsr.field_elements_rejection_sampling(field, t))
        for _ in range(full_rounds + partial_rounds)
    )

    for _ in range(skip_matrices):
        lfsr.field_elements_mod_p(field, 2 * t)

    # Cauchy matrix  M[i][j] = 1 / (x_i + y_j)
    xs = lfsr.field_elements_mod_p(field, t)
    ys = lfsr.field_elements_mod_p(field, t)
    mds = tuple(tuple((xs[i] + ys[j]).inv() for j in range(t)) for i in range(t))

    config = PoseidonConfig(
        field=field,
        full_rounds=full_rounds,
        partial_rounds=partial_rounds,
        alpha=5,
        mds=mds,
        ark=ark,
        rate=rate,
    )
    config.validate()
    logger.debug(
        "generated poseidon config: field=%s rate=%d R_F=%d R_P=%d",
        field.__name__, rate, full_rounds, partial_rounds,
    )
    return config


# ── sponge ──────────────────────────────────────────────────────────────
class PoseidonSponge:
    """
    Duplex Poseidon sponge over native field elements.

    ``absorb`` and ``squeeze_field_elements`` may be interleaved; the
    sponge tracks whether it is absorbing or squeezing and where the next
    rate slot is, matching arkworks' ``PoseidonSponge``.
    """

    def __init__(self, config: PoseidonConfig) -> None:
        self.config = config
        self.state: List[Any] = [self._zero() for _ in range(config.width)]
        self._absorbing = True
        self._index = 0

    def _zero(self) -> Any:
        return self.config.field.zero()

    def _coerce(self, element: Any) -> Any:
        if isinstance(element, int):
            return self.config.field(element)
        return element

    # permutation ------------------------------------------------------------
    def _sbox(self, x: Any) -> Any:
        if self.config.alpha == 5:
            x2 = x * x
            x4 = x2 * x2
            return x4 * x
        r = x
        for _ in range(self.config.alpha - 1):
            r = r * x
        return r

    def permute(self) -> None:
        cfg = self.config
        half = cfg.full_rounds // 2
        state = list(self.state)
        for rnd in range(cfg.full_rounds + cfg.partial_rounds):
            full = rnd < half or rnd >= half + cfg.partial_rounds
            state = [s + c for s, c in zip(state, cfg.ark[rnd])]
            if full:
                state = [self._sbox(s) for s in state]
            else:
                state[0] = self._sbox(state[0])
            mixed = []
            for row in cfg.mds:
                acc = state[0] * row[0]
                for s, m in zip(state[1:], row[1:]):
                    acc = acc + s * m
                mixed.append(acc)
            state = mixed
        self.state = state

    # absorb / squeeze -------------------------------------------------------
    def absorb(self, *elements: Any) -> None:
        if not elements:
            return
        elements = tuple(self._coerce(e) for e in elements)
        if self._absorbing:
            index = self._index
            if index == self.config.rate:
                self.permute()
                index = 0
        else:
            index = 0
        self._absorb_from(index, elements)

    def _absorb_from(self, index: int, elements: Sequence[Any]) -> None:
        rate, cap = self.config.rate, self.config.capacity
        remaining = list(elements)
        while True:
            if index + len(remaining) <= rate:
                for i, e in enumerate(remaining):
                    self.state[cap + index + i] = self.state[cap + index + i] + e
                self._absorbing = True
                self._index = index + len(remaining)
                return
            taken = rate - index
            for i, e in enumerate(remaining[:taken]):
                self.state[cap + index + i] = self.state[cap + index + i] + e
            self.permute()
            remaining = remaining[taken:]
            index = 0

    def squeeze_field_elements(self, count: int) -> List[Any]:
        rate, cap = self.config.rate, self.config.capacity
        if self._absorbing:
            self.permute()
            index = 0
        else:
            index = self._index
            if index == rate:
                self.permute()
                index = 0

        out: List[Any] = []
        while True:
            need = count - len(out)
            if index + need <= rate:
                out.extend(self.state[cap + index:cap + index + need])
                self._absorbing = False
                self._index = index + need
                return out
            out.extend(self.state[cap + index:cap + rate])
            if len(out) < count:
                self.permute()
            index = 0


class PoseidonSpongeVar(PoseidonSponge):
    """The same sponge over ``FpVar`` circuit variables."""

    def __init__(self, cs: ConstraintSystem, config: PoseidonConfig) -> None:
        if cs.field is not config.field:
            raise ValueError("poseidon config field does not match the circuit field")
        self.cs = cs
        super().__init__(config)

    def _zero(self) -> FpVar:
        return FpVar.constant(self.config.field, 0)

    def _coerce(self, element: Any) -> FpVar:
        if isinstance(element, FpVar):
            return element
        return FpVar.constant(self.config.field, element)
