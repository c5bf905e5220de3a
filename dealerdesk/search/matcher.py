"""
Layered field matching for dealer records: exact, word-boundary, fuzzy
"""

from enum import IntEnum
from typing import Iterable, NamedTuple, Optional

from .models import DealerRecord
from .similarity import is_similar


class MatchTier(IntEnum):
    """How strongly a dealer matched; lower values rank higher"""
    EXACT_PREFIX = 1
    EXACT_CONTAINS = 2
    WORD_BOUNDARY = 3
    FUZZY = 4


class MatchOutcome(NamedTuple):
    matched: bool
    tier: Optional[MatchTier] = None


NO_MATCH = MatchOutcome(False, None)

# Word-by-word fuzzy comparison is only meaningful for longer tokens
MIN_FUZZY_WORD_LENGTH = 3


def _lower(value: Optional[str]) -> str:
    return value.lower() if value else ""


def _joined(values: Iterable[str]) -> str:
    return " ".join(v for v in values if v)


class FieldMatcher:
    """
    Decides whether a search term matches a dealer record.

    Tiers are evaluated in order and the first one satisfied wins:
    EXACT_PREFIX (company or contact name starts with the term),
    EXACT_CONTAINS (substring containment), WORD_BOUNDARY (the term matches
    inside a single contact name word) and finally FUZZY (Levenshtein
    similarity at or above ``threshold``). Empty fields are skipped.

    With ``narrow_single_char`` a one-letter term only matches company and
    contact names at the start of the name or of a contact name word,
    and never matches fuzzily.
    """

    def __init__(self, threshold: float = 0.4, narrow_single_char: bool = False):
        self.threshold = threshold
        self.narrow_single_char = narrow_single_char

    def match(self, term: str, record: DealerRecord) -> MatchOutcome:
        """
        Match a term against every searchable field of a record

        Args:
            term: Raw search term
            record: Dealer with its group projections loaded

        Returns:
            MatchOutcome with the best tier achieved, or NO_MATCH
        """
        trimmed = (term or "").strip()
        if not trimmed:
            return NO_MATCH

        term_lower = trimmed.lower()
        narrow = self.narrow_single_char and len(trimmed) == 1

        if self._matches_prefix(term_lower, record):
            return MatchOutcome(True, MatchTier.EXACT_PREFIX)

        if self._matches_contains(trimmed, term_lower, record, narrow):
            return MatchOutcome(True, MatchTier.EXACT_CONTAINS)

        if self._matches_word_boundary(term_lower, record.contact_name, narrow):
            return MatchOutcome(True, MatchTier.WORD_BOUNDARY)

        # Narrowed one-letter terms skip the fuzzy tier
        if not narrow and self._matches_fuzzy(trimmed, record):
            return MatchOutcome(True, MatchTier.FUZZY)

        return NO_MATCH

    def _matches_prefix(self, term_lower: str, record: DealerRecord) -> bool:
        return any(
            _lower(value).startswith(term_lower)
            for value in (record.company_name, record.contact_name)
            if value
        )

    def _matches_contains(self, term: str, term_lower: str, record: DealerRecord, narrow: bool) -> bool:
        fields = [
            record.email,
            record.buying_group,
            _joined(record.group_names),
            _joined(record.active_buying_group_names),
        ]
        if not narrow:
            fields.append(record.company_name)
            # Single-word hits inside a contact name belong to the word-boundary tier
            if " " in term_lower:
                fields.append(record.contact_name)

        if any(term_lower in _lower(value) for value in fields if value):
            return True

        # Phone numbers are compared raw
        return bool(record.phone) and term in record.phone

    def _matches_word_boundary(self, term_lower: str, contact_name: Optional[str], narrow: bool) -> bool:
        if not contact_name:
            return False

        words = contact_name.lower().split()
        if narrow:
            return any(word.startswith(term_lower) for word in words)

        return any(
            word == term_lower or term_lower in word or word in term_lower
            for word in words
        )

    def _matches_fuzzy(self, term: str, record: DealerRecord) -> bool:
        buying_group = record.buying_group or _joined(record.active_buying_group_names)
        fields = [
            record.company_name,
            record.contact_name,
            record.email,
            record.phone,
            buying_group,
            _joined(record.group_names),
        ]

        for value in fields:
            if value and is_similar(term, value, self.threshold):
                return True

        if len(term) < MIN_FUZZY_WORD_LENGTH:
            return False

        # Name fields are also compared word by word ("Skolnik" vs "Donna Skolnick")
        for name in (record.company_name, record.contact_name):
            if not name:
                continue
            for word in name.split():
                if len(word) >= MIN_FUZZY_WORD_LENGTH and is_similar(term, word, self.threshold):
                    return True

        return False


def relevance_rank(term: str, record: DealerRecord) -> int:
    """1 when the company or contact name contains the term, else 0"""
    term_lower = (term or "").strip().lower()
    if not term_lower:
        return 0

    if term_lower in _lower(record.company_name) or term_lower in _lower(record.contact_name):
        return 1
    return 0
