# -*- coding: utf-8 -*-
"""Two-step knowledge check that unlocks the story.

``Gate.submit`` is a pure function of (step, raw input): it never mutates
session state and never raises for a wrong answer. The navigator owns the
step counter and applies the returned decision.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Mapping, Optional

from .crypto import hash_answer, normalize_place, normalize_year, verify_answer
from .models import Role

YEAR_HINT = "Hmm… try again. Think about when everything changed 🌸"
PLACE_HINT = "Not quite… think about the city where destiny worked overtime 🚲"

ADVANCE = "advance"
UNLOCK = "unlock"
REJECT = "reject"


@dataclass(frozen=True)
class GateResult:
    """Outcome of one submission: advance, unlock(role) or reject(reason)."""

    kind: str
    role: Optional[Role] = None
    reason: str = ""

    @property
    def accepted(self) -> bool:
        return self.kind != REJECT


@dataclass(frozen=True)
class GateSecrets:
    """Hashed answers: the year, and one place answer per role."""

    year_hash: str
    role_hashes: Mapping[Role, str]

    @classmethod
    def from_answers(cls, year: str, standard: str, elevated: str) -> "GateSecrets":
        """Hash plain answers. The two place answers must differ once normalized."""
        std = normalize_place(standard)
        elev = normalize_place(elevated)
        if std == elev:
            raise ValueError("Standard and elevated answers must differ")
        return cls(
            year_hash=hash_answer(normalize_year(year)),
            role_hashes={Role.STANDARD: hash_answer(std), Role.ELEVATED: hash_answer(elev)},
        )

    @classmethod
    def from_config(cls, raw: Mapping[str, object]) -> "GateSecrets":
        """Read stored hashes; raises ValueError unless every hash is present."""
        role_hashes = raw.get("role_hashes") or {}
        if not isinstance(role_hashes, dict):
            raise ValueError("gate.role_hashes must be an object")
        secrets = cls(
            year_hash=str(raw.get("year_hash", "")),
            role_hashes={Role(k): str(v) for k, v in role_hashes.items()},
        )
        hashes = {"year": secrets.year_hash}
        hashes.update({role.value: secrets.role_hashes.get(role, "") for role in Role})
        for name, value in hashes.items():
            if not value.startswith("$argon2"):
                raise ValueError(f"gate hash for {name} is missing or malformed")
        return secrets

    def to_config(self) -> Dict[str, object]:
        return {
            "year_hash": self.year_hash,
            "role_hashes": {role.value: h for role, h in self.role_hashes.items()},
        }


class Gate:
    """Evaluates gate submissions against hashed secrets."""

    def __init__(self, secrets: GateSecrets) -> None:
        self.secrets = secrets

    def submit(self, step: int, raw_input: str) -> GateResult:
        if step == 1:
            if verify_answer(self.secrets.year_hash, normalize_year(raw_input)):
                return GateResult(ADVANCE)
            return GateResult(REJECT, reason=YEAR_HINT)
        if step == 2:
            answer = normalize_place(raw_input)
            # Stable order so a (misconfigured) shared hash resolves to STANDARD.
            for role in (Role.STANDARD, Role.ELEVATED):
                stored = self.secrets.role_hashes.get(role)
                if stored and verify_answer(stored, answer):
                    return GateResult(UNLOCK, role=role)
            return GateResult(REJECT, reason=PLACE_HINT)
        return GateResult(REJECT, reason=f"Unknown gate step {step}")
