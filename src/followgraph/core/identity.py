"""
Identity value type and its text codec.

An identity is a 32-byte public key. Equality and hashing use the raw bytes.
Text forms accepted by `Identity.parse`:

- 64 hexadecimal characters
- bech32 with the ``npub`` prefix (``npub1...``)
- a ``nostr:`` URI wrapping the bech32 form

Example:
    >>> ident = Identity.parse("npub1...")
    >>> ident.to_hex()
    '3bf0c63f...'
"""

from dataclasses import dataclass

from bech32 import bech32_decode, bech32_encode, convertbits

from .exceptions import ParseError

KEY_SIZE = 32
BECH32_PREFIX = "npub"
URI_SCHEME = "nostr:"


@dataclass(frozen=True, order=True)
class Identity:
    """
    Public key identifying a participant.

    Attributes:
        key (bytes): Raw public key, exactly 32 bytes
    """

    key: bytes

    def __post_init__(self):
        """Validate key length after initialization."""
        if not isinstance(self.key, bytes):
            raise TypeError("key must be bytes")
        if len(self.key) != KEY_SIZE:
            raise ParseError(f"public key must be {KEY_SIZE} bytes, got {len(self.key)}")

    @classmethod
    def parse(cls, text: str) -> "Identity":
        """
        Decode an identity from hex, bech32 or a ``nostr:`` URI.

        Args:
            text (str): Textual identity

        Returns:
            Identity: Decoded identity

        Raises:
            ParseError: If the text is not a well-formed identity
        """
        if not isinstance(text, str):
            raise ParseError(f"expected text, got {type(text).__name__}")
        value = text.strip()
        if value.startswith(URI_SCHEME):
            value = value[len(URI_SCHEME) :]
        if value.lower().startswith(BECH32_PREFIX + "1"):
            return cls.from_bech32(value)
        return cls.from_hex(value)

    @classmethod
    def from_hex(cls, text: str) -> "Identity":
        """Decode a 64-character hex public key."""
        if len(text) != KEY_SIZE * 2:
            raise ParseError(f"hex public key must be {KEY_SIZE * 2} characters: {text!r}")
        try:
            return cls(bytes.fromhex(text))
        except ValueError as e:
            raise ParseError(f"invalid hex public key {text!r}") from e

    @classmethod
    def from_bech32(cls, text: str) -> "Identity":
        """Decode an ``npub1...`` bech32 public key."""
        hrp, data = bech32_decode(text)
        if hrp is None or data is None:
            raise ParseError(f"invalid bech32 public key {text!r}")
        if hrp != BECH32_PREFIX:
            raise ParseError(f"unexpected bech32 prefix {hrp!r}, expected {BECH32_PREFIX!r}")
        decoded = convertbits(data, 5, 8, False)
        if decoded is None:
            raise ParseError(f"invalid bech32 padding in {text!r}")
        return cls(bytes(decoded))

    def to_hex(self) -> str:
        """Encode as lowercase hex."""
        return self.key.hex()

    def to_bech32(self) -> str:
        """Encode as ``npub1...``."""
        return bech32_encode(BECH32_PREFIX, convertbits(self.key, 8, 5, True))

    def to_uri(self) -> str:
        """Encode as a ``nostr:npub1...`` URI."""
        return URI_SCHEME + self.to_bech32()

    def __str__(self) -> str:
        return self.to_bech32()

    def __repr__(self) -> str:
        return f"Identity({self.to_hex()[:16]}...)"
