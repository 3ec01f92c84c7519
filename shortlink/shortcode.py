"""Short code generation utilities."""

import secrets
import string
from typing import Optional


class ShortCodeGenerator:
    """Generate random short codes for URLs.

    The generator has no knowledge of the store; uniqueness is checked by
    the caller, which may ask for a longer code after repeated collisions.
    """

    # URL-safe characters (alphanumeric, case-sensitive, plus '-' and '_')
    ALPHABET = string.ascii_letters + string.digits + "-_"

    def __init__(self, default_length: int = 7):
        """Initialize short code generator.

        Args:
            default_length: Default length for generated codes
        """
        if default_length < 1:
            raise ValueError("default_length must be positive")
        self.default_length = default_length

    def generate_random(self, length: Optional[int] = None) -> str:
        """Generate a random short code.

        Args:
            length: Length of the code (uses default if not specified)

        Returns:
            Random short code
        """
        length = length or self.default_length
        return ''.join(secrets.choice(self.ALPHABET) for _ in range(length))

    @staticmethod
    def is_valid_format(code: str) -> bool:
        """Check if code only uses the URL-safe alphabet."""
        return bool(code) and all(c in ShortCodeGenerator.ALPHABET for c in code)
