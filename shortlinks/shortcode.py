"""Short code generation utilities."""

import hashlib
import math
import secrets
import string
import threading
from typing import Optional

from .exceptions import GenerationExhaustedError


STRATEGIES = ("sequential", "random")

# Paths the web app serves itself; a generated code must never shadow them.
RESERVED_WORDS = frozenset({
    "api", "health", "metrics", "shorten", "admin", "static", "assets",
    "favicon", "robots", "sitemap", "docs", "redoc", "openapi",
})


class ShortCodeGenerator:
    """Generate short codes for URLs.

    The sequential strategy feeds a counter through an affine permutation of
    the fixed code space (counter * multiplier + offset) mod 62**length, so
    codes are unique by construction without looking sequential. The random
    strategy draws characters from ``secrets`` and relies on the store's
    insert-if-absent to catch the rare collision.
    """

    # Base62 characters, ordered so that BASE62_CHARS[0] is the zero digit
    BASE62_CHARS = string.digits + string.ascii_lowercase + string.ascii_uppercase

    DEFAULT_MULTIPLIER = 1315423911

    def __init__(
        self,
        length: int = 6,
        strategy: str = "sequential",
        start: int = 0,
        salt: str = "shortlinks",
        multiplier: int = DEFAULT_MULTIPLIER,
    ):
        """Initialize short code generator.

        Args:
            length: Length of generated codes
            strategy: "sequential" or "random"
            start: First counter value for the sequential strategy
            salt: Secret mixed into the sequential permutation
            multiplier: Permutation factor, must be coprime with 62**length

        Raises:
            ValueError: On an unknown strategy or invalid parameters
        """
        if strategy not in STRATEGIES:
            raise ValueError(f"Unknown code strategy '{strategy}' (expected one of {STRATEGIES})")
        if length < 1:
            raise ValueError(f"Code length must be positive (given value: {length})")
        if start < 0:
            raise ValueError(f"Counter start must be non-negative (given value: {start})")

        self.length = length
        self.strategy = strategy
        self.space = len(self.BASE62_CHARS) ** length

        if math.gcd(multiplier, self.space) != 1:
            raise ValueError(f"Multiplier must be coprime with {self.space} (given value: {multiplier})")

        self.multiplier = multiplier
        self.offset = int(hashlib.sha256(salt.encode()).hexdigest(), 16) % self.space

        self._counter = start
        self._lock = threading.Lock()

    @property
    def next_counter(self) -> int:
        return self._counter

    def generate(self) -> str:
        """Produce the next code, skipping reserved words.

        Raises:
            GenerationExhaustedError: If the sequential code space is used up
        """
        while True:
            if self.strategy == "sequential":
                code = self.generate_sequential()
            else:
                code = self.generate_random()

            if code.lower() not in RESERVED_WORDS:
                return code

    def generate_random(self, length: Optional[int] = None) -> str:
        """Generate a random short code.

        Args:
            length: Length of the code (uses default if not specified)
        """
        length = length or self.length
        return "".join(secrets.choice(self.BASE62_CHARS) for _ in range(length))

    def generate_sequential(self) -> str:
        """Take the next counter value and encode it."""
        with self._lock:
            counter = self._counter
            if counter >= self.space:
                raise GenerationExhaustedError(
                    f"All {self.space} codes of length {self.length} have been issued"
                )
            self._counter += 1

        return self.encode_counter(counter)

    def encode_counter(self, counter: int) -> str:
        """Map a counter onto its code. Bijective for 0 <= counter < space."""
        permuted = (counter * self.multiplier + self.offset) % self.space
        return self._int_to_base62(permuted).rjust(self.length, self.BASE62_CHARS[0])

    def _int_to_base62(self, num: int) -> str:
        """Convert integer to base62 string."""
        if num == 0:
            return self.BASE62_CHARS[0]

        result = []
        base = len(self.BASE62_CHARS)

        while num > 0:
            num, remainder = divmod(num, base)
            result.append(self.BASE62_CHARS[remainder])

        return "".join(reversed(result))

    def _base62_to_int(self, code: str) -> int:
        """Convert base62 string to integer."""
        result = 0
        base = len(self.BASE62_CHARS)

        for char in code:
            result = result * base + self.BASE62_CHARS.index(char)

        return result

    @staticmethod
    def is_valid_format(code: str, max_length: int = 32) -> bool:
        """Check if code has valid format (alphanumeric, bounded length).

        Args:
            code: Code to validate
            max_length: Longest acceptable code
        """
        if not code or len(code) > max_length:
            return False
        return all(c in ShortCodeGenerator.BASE62_CHARS for c in code)
