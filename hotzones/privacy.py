# hotzones/privacy.py
# Privacy filter for AI-generated scene descriptions
# - four named pattern sets: identity, license-plate, specific-person, agency
# - any match rejects the metadata; redact() is for log output only

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Optional

PRIVACY_PATTERNS: dict[str, list[re.Pattern]] = {
    "identity": [
        re.compile(r"\b(name|named|called|identified as)\b", re.IGNORECASE),
        re.compile(r"\b(face|facial recognition|person identified)\b", re.IGNORECASE),
        re.compile(r"\b(individual|specific person)\b", re.IGNORECASE),
    ],
    "license-plate": [
        # Case-sensitive: plates are upper case
        re.compile(r"\b[A-Z0-9]{2,3}[-\s]?[A-Z0-9]{3,4}\b"),
        re.compile(r"\b(license plate|plate number|vehicle registration)\b", re.IGNORECASE),
    ],
    "specific-person": [
        re.compile(r"\b(wearing|dressed in|person with|individual with)\b", re.IGNORECASE),
        re.compile(r"\b(age \d+|years old|height|weight)\b", re.IGNORECASE),
        re.compile(r"\b(ethnicity|race|skin color|hair color)\b", re.IGNORECASE),
    ],
    "agency": [
        re.compile(r"\b(officer|badge|unit number|department|precinct)\b", re.IGNORECASE),
        re.compile(r"\b(patrol car #|vehicle #)\b", re.IGNORECASE),
    ],
}

REDACTED = "[REDACTED]"


@dataclass(frozen=True)
class PrivacyViolation:
    type: str
    description: str


@dataclass
class PrivacyFilterResult:
    is_clean: bool
    violations: list[PrivacyViolation] = field(default_factory=list)
    cleaned_content: Optional[str] = None


def redact(content: str) -> str:
    """Replace every pattern match with a placeholder."""
    for patterns in PRIVACY_PATTERNS.values():
        for pattern in patterns:
            content = pattern.sub(REDACTED, content)
    return content


def check_privacy(content: str) -> PrivacyFilterResult:
    violations = [
        PrivacyViolation(type=kind, description=f"Matched {kind} pattern: {pattern.pattern}")
        for kind, patterns in PRIVACY_PATTERNS.items()
        for pattern in patterns
        if pattern.search(content)
    ]
    if not violations:
        return PrivacyFilterResult(is_clean=True)
    return PrivacyFilterResult(is_clean=False, violations=violations, cleaned_content=redact(content))


def validate_ai_metadata(summary: str, tags: list[str]) -> PrivacyFilterResult:
    """Check the summary and the space-joined tags; clean only if both are clean."""
    summary_check = check_privacy(summary)
    tag_check = check_privacy(" ".join(tags))

    violations = summary_check.violations + tag_check.violations
    if not violations:
        return PrivacyFilterResult(is_clean=True)
    return PrivacyFilterResult(
        is_clean=False,
        violations=violations,
        cleaned_content=summary_check.cleaned_content,
    )
