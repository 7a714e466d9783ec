"""
Identifier Generator

Draws short public identifiers and delete tokens from a cryptographically
secure entropy source.
"""

import base64
import secrets
from typing import Callable

from gridbin.domain.errors import IdentifierGenerationError

from .value_objects import SHORT_ID_LENGTH

ENTROPY_BYTES = 4


class IdentifierGenerator:
    """
    Produces short random identifiers for public file ids and delete tokens.

    Each identifier is 4 random bytes, URL-safe base64 encoded without
    padding and truncated to 5 characters. A delete token is two independent
    draws concatenated. Generated values are not checked for prior existence
    here; see TransferService for the collision re-draw.
    """

    def __init__(self, entropy_source: Callable[[int], bytes] = secrets.token_bytes):
        """
        Args:
            entropy_source: Callable returning n random bytes. Must be secure;
                failures are fatal to the calling operation.
        """
        self._entropy_source = entropy_source

    def new_identifier(self) -> str:
        """
        Generate a 5-character identifier.

        Raises:
            IdentifierGenerationError: If the entropy source fails or returns
                fewer bytes than requested
        """
        try:
            raw = self._entropy_source(ENTROPY_BYTES)
        except Exception as e:
            raise IdentifierGenerationError("Entropy source failed", e) from e

        if not isinstance(raw, (bytes, bytearray)) or len(raw) != ENTROPY_BYTES:
            raise IdentifierGenerationError(
                f"Entropy source did not return {ENTROPY_BYTES} bytes"
            )

        encoded = base64.urlsafe_b64encode(bytes(raw)).rstrip(b"=").decode("ascii")
        return encoded[:SHORT_ID_LENGTH]

    def new_short_id(self) -> str:
        return self.new_identifier()

    def new_delete_token(self) -> str:
        """Generate a 10-character delete token from two independent draws."""
        return self.new_identifier() + self.new_identifier()
