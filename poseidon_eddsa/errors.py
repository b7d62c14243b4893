"""
Exception hierarchy.

Native operations report failure by raising; the circuit gadget never
raises for a bad signature and instead returns a ``Boolean`` wire.
"""

from __future__ import annotations


class EdDSAError(Exception):
    """Base class for every error raised by this package."""


class VerificationFailed(EdDSAError):
    """Recovered nonce point does not match the signature's ``R``."""


class BadDigestOutput(EdDSAError, ValueError):
    """The configured wide digest does not produce exactly 64 bytes."""


class InvalidData(EdDSAError, ValueError):
    """Malformed byte input: wrong length or invalid field/point encoding."""


class SynthesisError(EdDSAError):
    """Misuse of the constraint system (e.g. mixing two systems)."""
