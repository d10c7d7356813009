from __future__ import annotations

import logging
import re
import unicodedata
from collections.abc import Iterable
from typing import Protocol, runtime_checkable

from school_routes.exceptions import AddressNotFoundError
from school_routes.services.types import Coordinate, ResolvedAddress

logger = logging.getLogger(__name__)

STREET_SUFFIXES = {
    "AVENUE": "AVE",
    "BOULEVARD": "BLVD",
    "CIRCLE": "CIR",
    "DRIVE": "DR",
    "ROAD": "RD",
    "STREET": "ST",
}

_MINOR_WORDS = {
    "a", "an", "and", "as", "at", "but", "by", "for", "in", "nor",
    "of", "on", "or", "the", "to", "with",
}

_PUNCTUATION_RE = re.compile(r"[^A-Za-z0-9\s]")
_NON_ALNUM_RE = re.compile(r"[^A-Za-z0-9]")
_WHITESPACE_RE = re.compile(r"\s+")
_SUFFIX_RE = re.compile(r"\b(" + "|".join(STREET_SUFFIXES) + r")$")
_SINGLE_DIGIT_STREET_RE = re.compile(r"(^|\s)(\d(?:ST|ND|RD|TH))\b")
_PADDED_STREET_RE = re.compile(r"\b0(\d(?:ST|ND|RD|TH))\b", re.IGNORECASE)


def remove_accents(text: str) -> str:
    decomposed = unicodedata.normalize("NFD", text)
    return "".join(char for char in decomposed if not unicodedata.combining(char))


def compress_whitespace(text: str) -> str:
    return _WHITESPACE_RE.sub(" ", text).strip()


def replace_street_suffixes(address: str) -> str:
    """Abbreviate a trailing street suffix, e.g. ``3RD STREET`` -> ``3RD ST``."""
    return _SUFFIX_RE.sub(lambda match: STREET_SUFFIXES[match.group(1)], address)


def fix_numbered_streets(address: str) -> str:
    """Pad single-digit numbered streets so they sort with the others: ``3RD ST`` -> ``03RD ST``."""
    return _SINGLE_DIGIT_STREET_RE.sub(r"\g<1>0\g<2>", address)


def normalize_address(address: str) -> str:
    normalized = remove_accents(address)
    normalized = _PUNCTUATION_RE.sub("", normalized)
    normalized = compress_whitespace(normalized).upper()
    normalized = replace_street_suffixes(normalized)
    return fix_numbered_streets(normalized)


def normalize_house_number(number: str) -> str:
    """House number as it appears in a normalized address: ``100-a`` -> ``100A``."""
    return _NON_ALNUM_RE.sub("", remove_accents(number)).upper()


def split_street_address(address: str) -> tuple[str, str]:
    parts = address.strip().split(" ", 1)
    if len(parts) < 2:
        return parts[0], ""
    return parts[0], parts[1].strip()


def compare_addresses(a: str, b: str) -> bool:
    """Whether ``b`` contains ``a`` once both are normalized."""
    return normalize_address(a) in normalize_address(b)


def prettify_address(address: str) -> str:
    words = _PADDED_STREET_RE.sub(r"\1", address).lower().split()
    if not words:
        return ""
    pretty = []
    for index, word in enumerate(words):
        if 0 < index < len(words) - 1 and word in _MINOR_WORDS:
            pretty.append(word)
        else:
            pretty.append(word[:1].upper() + word[1:])
    return " ".join(pretty)


@runtime_checkable
class AddressResolver(Protocol):
    def resolve(self, address: str) -> ResolvedAddress: ...


class AddressBook:
    """In-memory street address lookup: street name -> house number -> coordinate."""

    def __init__(self, streets: dict[str, dict[str, Coordinate]]) -> None:
        self._streets = streets

    @classmethod
    def from_rows(cls, rows: Iterable[tuple[str, str, float, float]]) -> AddressBook:
        streets: dict[str, dict[str, Coordinate]] = {}
        for number, street, latitude, longitude in rows:
            streets.setdefault(street, {})[str(number)] = Coordinate(
                latitude=latitude, longitude=longitude
            )
        return cls(streets)

    def __len__(self) -> int:
        return sum(len(numbers) for numbers in self._streets.values())

    def __contains__(self, address: object) -> bool:
        if not isinstance(address, str):
            return False
        try:
            self.resolve(address)
        except AddressNotFoundError:
            return False
        return True

    def resolve(self, address: str) -> ResolvedAddress:
        canonical = normalize_address(address)
        number, street = split_street_address(canonical)
        numbers = self._streets.get(street)
        if numbers is None:
            logger.info("Cannot find street: %s", street)
            raise AddressNotFoundError(f"Cannot find street: {street or address!r}")
        coordinate = numbers.get(number)
        if coordinate is None:
            logger.info("Cannot find number: %s on %s", number, street)
            raise AddressNotFoundError(f"Cannot find number {number} on {street}")
        return ResolvedAddress(
            address=canonical, number=number, street=street, coordinate=coordinate
        )
