"""
Content digests.

A digest is 'algorithm:hex', e.g. 'sha256:4bc453...'. Parsing lower-cases
both halves so that two spellings of the same hash compare equal.
"""

import hashlib
import re
from dataclasses import dataclass

_ALGORITHM_RE = re.compile(r"^[a-z0-9]+(?:[.+_-][a-z0-9]+)*$")
_HEX_RE = re.compile(r"^[a-f0-9]+$")

# Expected hex lengths for the algorithms hashlib can verify.
HEX_LENGTHS = {
    "sha256": 64,
    "sha384": 96,
    "sha512": 128,
}


@dataclass(frozen=True)
class Digest:
    algorithm: str
    hex: str

    @classmethod
    def parse(cls, value: str) -> "Digest":
        """
        Parse and normalize 'algorithm:hex'.

        Raises:
            ValueError: if the string is not a well-formed digest
        """
        if not isinstance(value, str) or ":" not in value:
            raise ValueError(f"Invalid digest: {value!r}")
        algorithm, hex_value = value.strip().split(":", 1)
        algorithm = algorithm.lower()
        hex_value = hex_value.lower()

        if not _ALGORITHM_RE.match(algorithm) or not _HEX_RE.match(hex_value):
            raise ValueError(f"Invalid digest: {value!r}")
        expected = HEX_LENGTHS.get(algorithm)
        if expected is not None and len(hex_value) != expected:
            raise ValueError(
                f"Invalid {algorithm} digest length {len(hex_value)}, expected {expected}"
            )
        return cls(algorithm, hex_value)

    @classmethod
    def of(cls, data: bytes, algorithm: str = "sha256") -> "Digest":
        """Compute the digest of a byte payload."""
        return cls(algorithm, hashlib.new(algorithm, data).hexdigest())

    def verify(self, data: bytes) -> bool:
        """
        Check that data hashes to this digest.

        Raises:
            ValueError: if the algorithm is not one hashlib supports
        """
        if self.algorithm not in HEX_LENGTHS:
            raise ValueError(f"Unsupported digest algorithm: {self.algorithm}")
        return Digest.of(data, self.algorithm) == self

    def filename(self) -> str:
        return f"{self.algorithm}_{self.hex}"

    def __str__(self) -> str:
        return f"{self.algorithm}:{self.hex}"
