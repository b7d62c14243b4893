"""
Scheme configuration.

Everything two parties must agree on to interoperate: the curve, the wide
digest, and the Poseidon instance.  Settings can be kept in a JSON file or
read from ``POSEIDON_EDDSA_*`` environment variables.
"""

from __future__ import annotations

import json
import logging
import os
from dataclasses import asdict, dataclass
from typing import TYPE_CHECKING, List, Mapping, Optional

from .curves import CURVES
from .hash import DIGESTS

if TYPE_CHECKING:
    from .protocol import EdDSAScheme

logger = logging.getLogger(__name__)

ENV_PREFIX = "POSEIDON_EDDSA_"

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


@dataclass
class SchemeConfig:
    """Curve, digest and Poseidon round numbers for one deployment."""
    curve: str = "ed_on_bn254_twist"
    digest: str = "blake2b"
    rate: int = 4
    full_rounds: int = 8
    partial_rounds: int = 60

    def validate(self) -> List[str]:
        """
        Validate configuration.

        Returns:
            List of validation errors (empty if valid)
        """
        errors = []

        if self.curve not in CURVES:
            errors.append(f"Unknown curve: {self.curve}")

        if self.digest not in DIGESTS:
            errors.append(f"Unknown digest: {self.digest}")

        if self.rate < 1:
            errors.append("rate must be at least 1")

        if self.full_rounds < 2 or self.full_rounds % 2:
            errors.append(f"full_rounds must be a positive even number: {self.full_rounds}")

        if self.partial_rounds < 0:
            errors.append("partial_rounds cannot be negative")

        return errors

    def to_dict(self) -> dict:
        """Export configuration as dictionary."""
        return asdict(self)

    def save(self, path: str) -> None:
        """Save configuration to file."""
        with open(path, "w") as f:
            json.dump(self.to_dict(), f, indent=2)

        logger.info("Configuration saved to %s", path)

    @classmethod
    def load(cls, path: str) -> SchemeConfig:
        """Load configuration from file; missing keys keep their defaults."""
        with open(path, "r") as f:
            data = json.load(f)

        config = cls(**{k: v for k, v in data.items() if k in cls.__dataclass_fields__})
        logger.info("Configuration loaded from %s", path)
        return config

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> SchemeConfig:
        """
        Build a config from ``POSEIDON_EDDSA_CURVE``, ``..._DIGEST``,
        ``..._RATE``, ``..._FULL_ROUNDS`` and ``..._PARTIAL_ROUNDS``.
        """
        env = os.environ if environ is None else environ
        config = cls()
        for name, fld in cls.__dataclass_fields__.items():
            raw = env.get(ENV_PREFIX + name.upper())
            if raw is None:
                continue
            try:
                value = int(raw) if fld.type in (int, "int") else raw
            except ValueError:
                raise ValueError(f"{ENV_PREFIX}{name.upper()} must be an integer, got {raw!r}") from None
            setattr(config, name, value)
        return config

    def build(self) -> EdDSAScheme:
        """Validate and instantiate the scheme."""
        errors = self.validate()
        if errors:
            raise ValueError("invalid scheme configuration: " + "; ".join(errors))

        from .protocol import EdDSAScheme
        return EdDSAScheme.setup(
            curve=self.curve,
            digest=self.digest,
            rate=self.rate,
            full_rounds=self.full_rounds,
            partial_rounds=self.partial_rounds,
        )


def setup_logging(level: str = "INFO", file: Optional[str] = None) -> None:
    """Configure logging for applications embedding the scheme."""
    handlers: List[logging.Handler] = [logging.StreamHandler()]
    if file:
        handlers.append(logging.FileHandler(file))

    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format=LOG_FORMAT,
        handlers=handlers,
    )
