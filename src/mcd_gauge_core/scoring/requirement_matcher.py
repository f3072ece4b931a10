"""
Requirement matching

Decides whether a required or prohibited element is present in a response.
Required elements are matched leniently (literal, whitespace-collapsed, domain
synonyms, functional patterns); prohibited elements are matched literally.
"""

from __future__ import annotations

import re

# Canonical requirement term -> accepted synonyms, per domain
DOMAIN_SYNONYMS: dict[str, dict[str, list[str]]] = {
    "D1": {  # Appointment booking
        "confirmed": ["booked", "scheduled", "done", "complete"],
        "missing": ["need", "require", "specify", "provide"],
        "appointment": ["booking", "visit", "meeting", "consultation"],
    },
    "D2": {  # Spatial navigation
        "north": ["up", "forward", "ahead"],
        "avoid": ["bypass", "skip", "around", "exclude"],
        "route": ["path", "way", "direction", "course"],
    },
    "D3": {  # Failure diagnostics
        "check": ["verify", "test", "examine", "inspect"],
        "error": ["problem", "issue", "failure", "fault"],
        "system": ["service", "component", "module", "process"],
    },
}

# Short forms are only accepted as whole words ("mon" must not match "common")
DOMAIN_ABBREVIATIONS: dict[str, dict[str, list[str]]] = {
    "D1": {
        "monday": ["mon"],
        "tuesday": ["tue", "tues"],
        "wednesday": ["wed"],
        "thursday": ["thu", "thur", "thurs"],
        "friday": ["fri"],
        "saturday": ["sat"],
        "sunday": ["sun"],
    },
}

# Concept mentioned by a requirement -> pattern recognizing a functional equivalent
FUNCTIONAL_PATTERNS: dict[str, re.Pattern] = {
    "time": re.compile(r"\d{1,2}[:\s]?\d{0,2}\s*(am|pm|morning|afternoon|evening)"),
    "date": re.compile(r"(monday|tuesday|wednesday|thursday|friday|saturday|sunday|\d{1,2}/\d{1,2}|\d{1,2}-\d{1,2})"),
    "appointment": re.compile(r"(book|schedule|appointment|meeting)"),
    "direction": re.compile(r"(north|south|east|west|left|right|straight)"),
}


def has_functional_equivalent(output: str, requirement: str) -> bool:
    """Check whether the output expresses the requirement's concept in another form"""
    output_lower = output.lower()
    req_lower = requirement.lower()
    for concept, pattern in FUNCTIONAL_PATTERNS.items():
        if concept in req_lower and pattern.search(output_lower):
            return True
    return False


def contains_requirement(output: str, requirement: str, domain_id: str) -> bool:
    """
    Check whether a required element is present in the output

    Strategies, tried in order:
      1. Case-insensitive substring
      2. Substring after removing whitespace from the requirement
      3. Domain synonym table, then whole-word domain abbreviations
      4. Functional-pattern equivalents (domain independent)

    Args:
        output: Model response
        requirement: Required element
        domain_id: Domain identifier (e.g. "D1"); unknown domains have no synonyms

    Returns:
        True if the element (or an accepted equivalent) is present
    """
    if not output or not requirement or not requirement.strip():
        return False

    output_lower = output.lower()
    req_lower = requirement.lower()

    if req_lower in output_lower:
        return True

    if re.sub(r"\s+", "", req_lower) in output_lower:
        return True

    synonyms = DOMAIN_SYNONYMS.get(domain_id, {}).get(req_lower, [])
    if any(synonym in output_lower for synonym in synonyms):
        return True

    abbreviations = DOMAIN_ABBREVIATIONS.get(domain_id, {}).get(req_lower, [])
    if any(re.search(rf"\b{re.escape(short)}\b", output_lower) for short in abbreviations):
        return True

    return has_functional_equivalent(output, requirement)


def contains_prohibited(output: str, element: str) -> bool:
    """Literal, case-insensitive check for a prohibited element"""
    if not output or not element:
        return False
    return element.lower() in output.lower()
