"""Tests for identifier generators."""
import base58

from filerenamer.core.models import SECRET_UNAVAILABLE
from filerenamer.engines.identifier import (
    FallbackIdentifierGenerator,
    Secp256k1IdentifierGenerator,
    hash160,
)


class TestHash160:

    def test_length(self):
        assert len(hash160(b"anything")) == 20

    def test_known_vector(self):
        # Compressed public key of private key 1
        pubkey = bytes.fromhex(
            "0279be667ef9dcbbac55a06295ce870b07029bfcdb2dce28d959f2815b16f81798"
        )
        assert hash160(pubkey).hex() == "751e76e8199196d454941c45d1b3a323f1433bd6"


class TestSecp256k1IdentifierGenerator:
    """Tests for the keypair-backed generator."""

    def test_address_shape(self):
        identifier, _ = Secp256k1IdentifierGenerator().generate_identifier_and_secret()

        assert identifier.startswith("1")
        assert 26 <= len(identifier) <= 35
        payload = base58.b58decode_check(identifier)
        assert payload[0] == 0
        assert len(payload) == 21

    def test_secret_is_compressed_wif(self):
        _, secret = Secp256k1IdentifierGenerator().generate_identifier_and_secret()

        assert secret[0] in "KL"
        payload = base58.b58decode_check(secret)
        assert payload[0] == 0x80
        assert len(payload) == 34
        assert payload[-1] == 0x01

    def test_fresh_pair_per_call(self):
        generator = Secp256k1IdentifierGenerator()
        first = generator.generate_identifier_and_secret()
        second = generator.generate_identifier_and_secret()

        assert first[0] != second[0]
        assert first[1] != second[1]


class TestFallbackIdentifierGenerator:
    """Tests for the local fallback generator."""

    def test_secret_is_sentinel(self):
        _, secret = FallbackIdentifierGenerator().generate_identifier_and_secret()
        assert secret == SECRET_UNAVAILABLE

    def test_shape(self):
        identifier, _ = FallbackIdentifierGenerator().generate_identifier_and_secret()

        assert identifier.startswith("1")
        assert len(identifier) == 34

    def test_seeded_is_deterministic(self):
        a = FallbackIdentifierGenerator(seed=42)
        b = FallbackIdentifierGenerator(seed=42)

        assert [a.generate_identifier_and_secret() for _ in range(3)] == [
            b.generate_identifier_and_secret() for _ in range(3)
        ]

    def test_unseeded_values_differ(self):
        generator = FallbackIdentifierGenerator()
        assert (
            generator.generate_identifier_and_secret()
            != generator.generate_identifier_and_secret()
        )
