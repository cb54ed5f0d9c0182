"""Unit tests for EVM address grammar, validation, and free-text extraction."""

from __future__ import annotations

import random
import re

import pytest

from recon.address.patterns import (
    BURN_ADDRESS,
    LEADING_ZERO_NIBBLE_THRESHOLD,
    AddressExtractor,
    extract_addresses,
    is_valid_address,
    leading_zero_nibbles,
    validate_address_with_details,
)

VITALIK = "0xd8dA6BF26964aF9D7eEd9e03E53415D37aA96045"
ADDR_B = "0x" + "b" * 40

CANONICAL_RE = re.compile(r"^0x[0-9a-f]{40}$")


class TestIsValidAddress:
    """Grammar-only validation used for user-supplied addresses."""

    @pytest.mark.parametrize("address", [VITALIK, VITALIK.lower(), VITALIK.upper().replace("0X", "0x"), BURN_ADDRESS])
    def test_valid(self, address: str) -> None:
        assert is_valid_address(address) is True

    @pytest.mark.parametrize(
        "address",
        [
            "",
            VITALIK[2:],
            VITALIK[:-1],
            VITALIK + "0",
            "0x" + "g" * 40,
            "0X" + "a" * 40,
            VITALIK + "\n",
            " " + VITALIK,
        ],
    )
    def test_invalid(self, address: str) -> None:
        assert is_valid_address(address) is False

    def test_burn_address_passes_grammar(self) -> None:
        """The noise filter is an extraction concern only."""
        assert is_valid_address(BURN_ADDRESS)


class TestValidateWithDetails:
    """Explanations attached to rejected addresses."""

    def test_valid_returns_lowercase(self) -> None:
        check = validate_address_with_details(VITALIK)
        assert check.is_valid
        assert check.normalized == VITALIK.lower()
        assert check.error is None

    def test_missing(self) -> None:
        assert validate_address_with_details("").error == "Address is required"

    def test_missing_prefix(self) -> None:
        assert validate_address_with_details("a" * 42).error == "Address must start with 0x"

    def test_wrong_length(self) -> None:
        check = validate_address_with_details("0x1234")
        assert not check.is_valid
        assert check.error == "Address must be 42 characters (got 6)"

    def test_non_hex(self) -> None:
        check = validate_address_with_details("0x" + "z" * 40)
        assert check.error == "Address contains invalid characters (must be hexadecimal)"


class TestLeadingZeroNibbles:
    def test_counts_prefix_zeros(self) -> None:
        assert leading_zero_nibbles("0x000abc" + "1" * 34) == 3

    def test_no_zeros(self) -> None:
        assert leading_zero_nibbles(ADDR_B) == 0

    def test_threshold_constant(self) -> None:
        assert LEADING_ZERO_NIBBLE_THRESHOLD == 30


class TestAddressExtractor:
    """Free-text scanning with noise filters and deduplication."""

    def test_extracts_and_lowercases(self) -> None:
        text = f"send to {VITALIK} please"
        assert extract_addresses(text) == [VITALIK.lower()]

    def test_deduplicates_case_variants_first_seen_order(self) -> None:
        text = f"{ADDR_B} then {VITALIK} then {VITALIK.lower()} and {ADDR_B.upper().replace('0X', '0x')}"
        assert extract_addresses(text) == [ADDR_B, VITALIK.lower()]

    def test_burn_address_dropped(self) -> None:
        assert extract_addresses(f"burn {BURN_ADDRESS} here") == []

    def test_zero_padded_candidates_dropped(self) -> None:
        padded = "0x" + "0" * 30 + "1234567890"
        assert extract_addresses(padded) == []

    def test_below_threshold_kept(self) -> None:
        almost = "0x" + "0" * 29 + "12345678901"
        assert extract_addresses(almost) == [almost]

    def test_custom_threshold(self) -> None:
        almost = "0x" + "0" * 29 + "12345678901"
        assert AddressExtractor(zero_nibble_threshold=20).extract(almost) == []

    def test_embedded_in_longer_hex_not_matched(self) -> None:
        """A 64-nibble hash must not yield a 40-nibble address."""
        tx_hash = "0x" + "ab" * 32
        assert extract_addresses(tx_hash) == []

    def test_hex_prefix_glued_to_match_is_rejected(self) -> None:
        assert extract_addresses("f" + VITALIK) == []

    def test_punctuation_boundaries(self) -> None:
        text = f"({VITALIK}), '{ADDR_B}'."
        assert extract_addresses(text) == [VITALIK.lower(), ADDR_B]

    def test_empty_text(self) -> None:
        assert extract_addresses("") == []

    def test_extract_into_shares_state(self) -> None:
        extractor = AddressExtractor()
        seen: set[str] = set()
        results: list[str] = []
        assert extractor.extract_into(f"{VITALIK} {VITALIK}", seen, results) == 1
        assert extractor.extract_into(f"{VITALIK} {ADDR_B}", seen, results) == 2
        assert results == [VITALIK.lower(), ADDR_B]

    def test_random_text_output_is_canonical(self) -> None:
        """Every extracted member is canonical, non-burn, and below the zero threshold."""
        rng = random.Random(1234)
        alphabet = "0123456789abcdefABCDEFxX \n,;:"
        for _ in range(200):
            noise = "".join(rng.choice(alphabet) for _ in range(300))
            planted = "0x" + "".join(rng.choice("0123456789abcdefABCDEF") for _ in range(40))
            for address in extract_addresses(f"{noise} {planted} {noise}"):
                assert CANONICAL_RE.match(address)
                assert address != BURN_ADDRESS
                assert leading_zero_nibbles(address) < LEADING_ZERO_NIBBLE_THRESHOLD
