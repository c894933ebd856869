"""
Input validation utilities for the AlgoSender backend.

Provides reusable validators for Algorand addresses, amounts and notes.
Every check here runs before any network call is made.
"""
import math

from fastapi import Path
from algosdk import encoding, util

from domain.constants import ALGORAND_ADDRESS_LENGTH, MAX_NOTE_BYTES
from domain.errors import InvalidAddressError, InvalidAmountError, ValidationError


def validate_algorand_address(address: str) -> str:
    """
    Validate an Algorand address format and checksum.

    Args:
        address: Algorand wallet address string

    Returns:
        The validated address (unchanged)

    Raises:
        InvalidAddressError (400) if the address is invalid
    """
    if not address:
        raise InvalidAddressError("Address is required")

    if len(address) != ALGORAND_ADDRESS_LENGTH:
        raise InvalidAddressError(
            f"Invalid Algorand address: expected {ALGORAND_ADDRESS_LENGTH} characters, got {len(address)}"
        )

    if not encoding.is_valid_address(address):
        raise InvalidAddressError(f"Invalid Algorand address checksum: {address[:12]}...")

    return address


def validate_amount(amount) -> float:
    """
    Amounts are whole ALGO, finite, and worth at least one microAlgo once
    converted for the network.
    """
    if amount is None:
        raise InvalidAmountError()
    if not math.isfinite(amount):
        raise InvalidAmountError("Amount must be a finite number")
    if amount <= 0:
        raise InvalidAmountError()
    if util.algos_to_microalgos(amount) < 1:
        raise InvalidAmountError("Amount must be at least 0.000001 ALGO (1 microAlgo)")
    return float(amount)


def validate_note(note: str | None) -> str | None:
    """Notes are optional; an empty string counts as no note."""
    if not note:
        return None
    size = len(note.encode("utf-8"))
    if size > MAX_NOTE_BYTES:
        raise ValidationError(
            f"must be at most {MAX_NOTE_BYTES} bytes, got {size}",
            field="note",
        )
    return note


def validated_address(address: str = Path(..., description="Algorand wallet address")) -> str:
    """FastAPI dependency for validating address path parameters."""
    return validate_algorand_address(address)
