# -*- coding: utf-8 -*-
"""Hashing helpers for the gate answers.

This module encapsulates *stateless* helpers: answer normalization and
argon2 hashing/verification. It does **not** read or write the config.
"""
from __future__ import annotations

import logging

from argon2 import PasswordHasher
from argon2.exceptions import InvalidHashError, VerificationError

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------
# Parameters
# ---------------------------------------------------------------------

PH = PasswordHasher(
    time_cost=2,
    memory_cost=102_400,
    parallelism=8,
    hash_len=32,
    salt_len=16,
)


# ---------------------------------------------------------------------
# Normalization
# ---------------------------------------------------------------------

def normalize_year(raw: str) -> str:
    """Step-one answers only lose surrounding whitespace."""
    return raw.strip()


def normalize_place(raw: str) -> str:
    """Step-two answers are trimmed and case-folded."""
    return raw.strip().casefold()


# ---------------------------------------------------------------------
# Hash / verify
# ---------------------------------------------------------------------

def hash_answer(normalized: str) -> str:
    """Return an argon2 hash of an already-normalized answer."""
    if not normalized:
        raise ValueError("Gate answers cannot be empty")
    return PH.hash(normalized)


def verify_answer(stored_hash: str, normalized: str) -> bool:
    """True iff *normalized* matches *stored_hash*.

    A malformed stored hash is logged and counts as a mismatch.
    """
    if not normalized:
        return False
    if not stored_hash.startswith("$argon2"):
        logger.error("Stored gate hash is malformed; treating as mismatch")
        return False
    try:
        return PH.verify(stored_hash, normalized)
    except VerificationError:
        return False
    except InvalidHashError:
        logger.error("Stored gate hash is malformed; treating as mismatch")
        return False
