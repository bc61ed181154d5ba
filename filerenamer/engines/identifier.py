"""Identifier generators for identifier-mode naming.

The default generator mints a secp256k1 keypair and renders the public
half as a legacy pay-to-pubkey-hash address and the private half in
wallet import format. The fallback generator needs no key material and
is reproducible when seeded.
"""
from __future__ import annotations

import hashlib
import os
import random
from typing import Optional

import base58
from Crypto.Hash import RIPEMD160
from ecdsa import SECP256k1, SigningKey

from ..core.models import SECRET_UNAVAILABLE


MAINNET_PUBKEY_HASH = b"\x00"
MAINNET_PRIVATE_KEY = b"\x80"
COMPRESSED_FLAG = b"\x01"


def hash160(data: bytes) -> bytes:
    """RIPEMD-160 of SHA-256, as used for pubkey hashes."""
    return RIPEMD160.new(hashlib.sha256(data).digest()).digest()


class Secp256k1IdentifierGenerator:
    """Generates a fresh keypair per call."""

    @property
    def name(self) -> str:
        return "secp256k1 (P2PKH)"

    def generate_identifier_and_secret(self) -> tuple[str, str]:
        signing_key = SigningKey.generate(curve=SECP256k1)
        public_key = signing_key.get_verifying_key().to_string("compressed")

        address = base58.b58encode_check(MAINNET_PUBKEY_HASH + hash160(public_key))
        wif = base58.b58encode_check(
            MAINNET_PRIVATE_KEY + signing_key.to_string() + COMPRESSED_FLAG
        )
        return address.decode("ascii"), wif.decode("ascii")


class FallbackIdentifierGenerator:
    """Random-looking identifier with no usable secret.

    Seeded instances produce the same sequence every time.
    """

    def __init__(self, seed: Optional[int] = None):
        self._rng = random.Random(seed) if seed is not None else None

    @property
    def name(self) -> str:
        return "fallback"

    def _random_bytes(self, count: int) -> bytes:
        if self._rng is not None:
            return self._rng.randbytes(count)
        return os.urandom(count)

    def generate_identifier_and_secret(self) -> tuple[str, str]:
        identifier = "1" + self._random_bytes(20).hex()[:33]
        return identifier, SECRET_UNAVAILABLE
