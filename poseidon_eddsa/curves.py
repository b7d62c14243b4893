"""
Concrete twisted-Edwards curve instances.

Every curve here is embedded over the *scalar* field of a pairing-
friendly curve, so its points can be manipulated natively inside an
R1CS over that pairing curve's scalar field:

========================  ====================  ===========  ========
curve                     base field            a            cofactor
========================  ====================  ===========  ========
``ED_ON_BN254``           BN254 Fr              1            8
``ED_ON_BN254_TWIST``     BN254 Fr              168700       8
``ED_ON_BLS12_381``       BLS12-381 Fr          −1           8
``BANDERSNATCH``          BLS12-381 Fr          −5           4
========================  ====================  ===========  ========

``ED_ON_BN254`` is Baby-JubJub in arkworks' normalisation (a = 1).  The
twist uses the original Baby-JubJub coefficients; the two are isomorphic
via  x ↦ x·√168700  (see :func:`untwist`).

The pairing curves' scalar-field moduli come from ``py_ecc`` so there is
a single source of truth for them.
"""

from __future__ import annotations

from typing import Dict

from py_ecc.bls12_381 import curve_order as BLS12_381_ORDER
from py_ecc.bn128 import curve_order as BN254_ORDER

from .curve import CurveParameters, Point
from .field import prime_field


# ── fields ──────────────────────────────────────────────────────────────
BN254Fr = prime_field(BN254_ORDER, "BN254Fr")
BLS12381Fr = prime_field(BLS12_381_ORDER, "BLS12381Fr")

BabyJubJubFr = prime_field(
    2736030358979909402780800718157159386076813972158567259200215660948447373041,
    "BabyJubJubFr",
)
JubJubFr = prime_field(
    0x0E7DB4EA6533AFA906673B0101343B00A6682093CCC81082D0970E5ED6F72CB7,
    "JubJubFr",
)
BandersnatchFr = prime_field(
    0x1CFB69D4CA675F520CCE760202687600FF8F87007419047174FD06B52876E7E1,
    "BandersnatchFr",
)


# ── Baby-JubJub over BN254 ──────────────────────────────────────────────
ED_ON_BN254 = CurveParameters(
    name="ed_on_bn254",
    base_field=BN254Fr,
    scalar_field=BabyJubJubFr,
    a=BN254Fr(1),
    # 168696 / 168700
    d=BN254Fr(
        9706598848417545097372247223557719406784115219466060233080913168975159366771
    ),
    generator_xy=(
        BN254Fr(
            19698561148652590122159747500897617769866003486955115824547446575314762165298
        ),
        BN254Fr(
            19298250018296453272277890825869354524455968081175474282777126169995084727839
        ),
    ),
    cofactor=8,
)

ED_ON_BN254_TWIST = CurveParameters(
    name="ed_on_bn254_twist",
    base_field=BN254Fr,
    scalar_field=BabyJubJubFr,
    a=BN254Fr(168700),
    d=BN254Fr(168696),
    generator_xy=(
        BN254Fr(
            5299619240641551281634865583518297030282874472190772894086521144482721001553
        ),
        BN254Fr(
            16950150798460657717958625567821834550301663161624707787222815936182638968203
        ),
    ),
    cofactor=8,
)


# ── JubJub and Bandersnatch over BLS12-381 ──────────────────────────────
ED_ON_BLS12_381 = CurveParameters(
    name="ed_on_bls12_381",
    base_field=BLS12381Fr,
    scalar_field=JubJubFr,
    a=BLS12381Fr(-1),
    # −(10240 / 10241)
    d=BLS12381Fr(
        19257038036680949359750312669786877991949435402254120286184196891950884077233
    ),
    generator_xy=(
        BLS12381Fr(
            8076246640662884909881801758704306714034609987455869804520522091855516602923
        ),
        BLS12381Fr(
            13262374693698910701929044844600465831413122818447359594527400194675274060458
        ),
    ),
    cofactor=8,
)

BANDERSNATCH = CurveParameters(
    name="bandersnatch",
    base_field=BLS12381Fr,
    scalar_field=BandersnatchFr,
    a=BLS12381Fr(-5),
    d=BLS12381Fr(
        45022363124591815672509500913686876175488063829319466900776701791074614335719
    ),
    generator_xy=(
        BLS12381Fr(
            18886178867200960497001835917649091219057080094937609519140440539760939937304
        ),
        BLS12381Fr(
            19188667384257783945677642223292697773471335439753913231509108946878080696678
        ),
    ),
    cofactor=4,
)


CURVES: Dict[str, CurveParameters] = {
    c.name: c
    for c in (ED_ON_BN254, ED_ON_BN254_TWIST, ED_ON_BLS12_381, BANDERSNATCH)
}


def get_curve(name: str) -> CurveParameters:
    try:
        return CURVES[name]
    except KeyError:
        raise ValueError(
            f"unknown curve {name!r}; expected one of {sorted(CURVES)}"
        ) from None


# ── twist isomorphism ───────────────────────────────────────────────────
def _sqrt_twist_a():
    s = ED_ON_BN254_TWIST.a.sqrt()
    if s is None:
        raise RuntimeError("168700 is not a square in BN254 Fr")
    return s


def twist(point: Point) -> Point:
    """Map an ``ED_ON_BN254`` point onto ``ED_ON_BN254_TWIST``."""
    if point.curve is not ED_ON_BN254:
        raise ValueError("twist() expects an ed_on_bn254 point")
    return Point(ED_ON_BN254_TWIST, point.x / _sqrt_twist_a(), point.y)


def untwist(point: Point) -> Point:
    """Inverse of :func:`twist`."""
    if point.curve is not ED_ON_BN254_TWIST:
        raise ValueError("untwist() expects an ed_on_bn254_twist point")
    return Point(ED_ON_BN254, point.x * _sqrt_twist_a(), point.y)
