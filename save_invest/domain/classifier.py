"""Necessity classifier - decides whether an expense is necessary or discretionary"""

import math
import threading
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Dict, List, Mapping, Optional, Set, Tuple

from save_invest.domain.categories import CATEGORY_REGISTRY
from save_invest.domain.models import ExpenseCategory

DEFAULT_KEYWORDS: Dict[str, bool] = {
    # Necessary
    "rent": True,
    "mortgage": True,
    "grocery": True,
    "utilities": True,
    "electric": True,
    "water": True,
    "gas": True,
    "internet": True,
    "phone": True,
    "insurance": True,
    "medicine": True,
    "doctor": True,
    "hospital": True,
    "transportation": True,
    "bus": True,
    "train": True,
    "fuel": True,
    # Discretionary
    "restaurant": False,
    "dining": False,
    "cafe": False,
    "coffee": False,
    "bar": False,
    "movie": False,
    "entertainment": False,
    "shopping": False,
    "clothes": False,
    "shoes": False,
    "electronics": False,
    "game": False,
    "subscription": False,
    "travel": False,
    "vacation": False,
    "hotel": False,
}


class ClassificationSource(str, Enum):
    """Which rule produced a classification"""

    OVERRIDE = "override"
    KEYWORD = "keyword"
    AMOUNT_OUTLIER = "amount_outlier"
    CATEGORY_DEFAULT = "category_default"


@dataclass(frozen=True)
class ClassifierConfig:
    """
    Tables driving the heuristic rules.

    keyword_tie_falls_through: when matched keywords cancel out exactly
    (score 0) the keyword rule abstains and the amount/category rules decide.
    Set to False to treat a tie as discretionary instead.
    """

    keywords: Mapping[str, bool]
    high_amount_thresholds: Mapping[ExpenseCategory, float]
    category_defaults: Mapping[ExpenseCategory, bool]
    keyword_tie_falls_through: bool = True


DEFAULT_CLASSIFIER_CONFIG = ClassifierConfig(
    keywords=DEFAULT_KEYWORDS,
    high_amount_thresholds={c: info.high_amount_threshold for c, info in CATEGORY_REGISTRY.items()},
    category_defaults={c: info.typically_necessary for c, info in CATEGORY_REGISTRY.items()},
)


@dataclass
class ClassificationResult:
    is_necessary: bool
    source: ClassificationSource
    normalized_title: str
    keyword_matches: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)


def normalize_title(title) -> str:
    """Lowercase and trim; None becomes an empty string"""
    if title is None:
        return ""
    return str(title).strip().lower()


def parse_amount(amount) -> Tuple[float, Optional[str]]:
    """
    Coerce an amount for classification purposes.

    Returns (value, warning). Missing, unparseable, non-finite or non-positive
    amounts come back as 0.0 with a data-quality warning.
    """
    if amount is None or (isinstance(amount, str) and not amount.strip()):
        return 0.0, "amount missing; treated as 0"
    try:
        value = float(amount)
    except (TypeError, ValueError):
        return 0.0, f"amount {amount!r} is not a number; treated as 0"
    if math.isnan(value) or math.isinf(value):
        return 0.0, f"amount {amount!r} is not finite; treated as 0"
    if value <= 0:
        return 0.0, f"amount {value} is not positive; treated as 0"
    return value, None


class OverrideTable:
    """
    Per-user mapping of normalized title -> user-supplied necessity.

    Reads take no lock. Writes to the same title are serialized through a
    per-title mutex; different titles never contend. Titles recorded here
    but not yet saved are pending and win over values reloaded from storage.
    """

    def __init__(self, entries: Optional[Mapping[str, bool]] = None):
        self._entries: Dict[str, bool] = {}
        self._pending: Set[str] = set()
        self._key_locks: Dict[str, threading.Lock] = {}
        self._locks_guard = threading.Lock()
        if entries:
            self.merge(entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, title) -> bool:
        return normalize_title(title) in self._entries

    def get(self, title) -> Optional[bool]:
        return self._entries.get(normalize_title(title))

    def _lock_for(self, key: str) -> threading.Lock:
        with self._locks_guard:
            lock = self._key_locks.get(key)
            if lock is None:
                lock = self._key_locks[key] = threading.Lock()
            return lock

    def record(self, title, is_necessary: bool) -> str:
        """Store an override and return the normalized key it was stored under"""
        key = normalize_title(title)
        with self._lock_for(key):
            self._entries[key] = bool(is_necessary)
            self._pending.add(key)
        return key

    def merge(self, entries: Mapping[str, bool]) -> None:
        """Add loaded entries without clobbering titles already recorded in memory"""
        for title, value in entries.items():
            key = normalize_title(title)
            with self._lock_for(key):
                self._entries.setdefault(key, bool(value))

    def refresh(self, entries: Mapping[str, bool]) -> None:
        """Apply a fresh storage snapshot; pending titles keep their in-memory value"""
        for title, value in entries.items():
            key = normalize_title(title)
            with self._lock_for(key):
                if key not in self._pending:
                    self._entries[key] = bool(value)

    def flush(self, title, save: Callable[[str, bool], bool]) -> bool:
        """
        Hand the current value for a title to a persistence callback.

        Runs under the title's mutex so concurrent flushes of the same title
        reach storage one at a time and the last one writes the latest value.
        A title stays pending until a save succeeds.
        """
        key = normalize_title(title)
        with self._lock_for(key):
            if key not in self._entries:
                return False
            saved = save(key, self._entries[key])
            if saved:
                self._pending.discard(key)
            return saved


class NecessityClassifier:
    """
    Heuristic expense classifier.

    Decision order (first decisive rule wins):
    1. Exact override for the normalized title
    2. Keyword majority vote over the title
    3. High-amount outlier in a typically-necessary category -> discretionary
    4. Category default
    """

    def __init__(
        self,
        overrides: Optional[OverrideTable] = None,
        config: ClassifierConfig = DEFAULT_CLASSIFIER_CONFIG,
    ):
        self.overrides = overrides if overrides is not None else OverrideTable()
        self.config = config

    def classify(self, title, amount, category) -> bool:
        return self.classify_detailed(title, amount, category).is_necessary

    def classify_detailed(self, title, amount, category) -> ClassificationResult:
        normalized = normalize_title(title)
        value, warning = parse_amount(amount)
        warnings = [warning] if warning else []

        # 1. User override is the strongest signal
        override = self.overrides.get(normalized)
        if override is not None:
            return ClassificationResult(override, ClassificationSource.OVERRIDE, normalized, warnings=warnings)

        # 2. Keyword majority vote
        matches = [kw for kw in self.config.keywords if kw and kw in normalized]
        if matches:
            score = sum(1.0 if self.config.keywords[kw] else -1.0 for kw in matches)
            normalized_score = score / len(matches)
            if normalized_score != 0 or not self.config.keyword_tie_falls_through:
                return ClassificationResult(
                    normalized_score > 0,
                    ClassificationSource.KEYWORD,
                    normalized,
                    keyword_matches=matches,
                    warnings=warnings,
                )

        parsed_category = ExpenseCategory.parse(category)
        default = self.config.category_defaults.get(parsed_category, False) if parsed_category else False

        # 3. Unusually expensive instance of a normally-necessary category
        threshold = self.config.high_amount_thresholds.get(parsed_category) if parsed_category else None
        if default and threshold is not None and value > threshold:
            return ClassificationResult(
                False, ClassificationSource.AMOUNT_OUTLIER, normalized, keyword_matches=matches, warnings=warnings
            )

        # 4. Category default
        return ClassificationResult(
            default, ClassificationSource.CATEGORY_DEFAULT, normalized, keyword_matches=matches, warnings=warnings
        )

    def record_override(self, title, is_necessary: bool) -> str:
        """Remember a manual classification; applies even when it matches the default"""
        return self.overrides.record(title, is_necessary)


class OverrideTableRegistry:
    """
    One OverrideTable per user, shared by all callers in the process.

    A table is (re)loaded from storage on first use, after a failed load, and
    once refresh_seconds have passed since the last good load, so overrides
    written by other processes show up. A loader returns None when storage
    is unavailable; the table then serves what it has and the next call retries.
    """

    def __init__(self, refresh_seconds: Optional[float] = None, clock: Callable[[], float] = time.monotonic):
        self.refresh_seconds = refresh_seconds
        self._clock = clock
        self._tables: Dict[str, OverrideTable] = {}
        self._loaded_at: Dict[str, float] = {}
        self._guard = threading.Lock()

    def _needs_load(self, user_id: str) -> bool:
        loaded_at = self._loaded_at.get(user_id)
        if loaded_at is None:
            return True
        return self.refresh_seconds is not None and self._clock() - loaded_at >= self.refresh_seconds

    def table_for(
        self,
        user_id: str,
        loader: Optional[Callable[[str], Optional[Mapping[str, bool]]]] = None,
    ) -> OverrideTable:
        with self._guard:
            table = self._tables.get(user_id)
            if table is None:
                table = self._tables[user_id] = OverrideTable()
            needs_load = loader is not None and self._needs_load(user_id)

        if needs_load:
            entries = loader(user_id)
            if entries is not None:
                table.refresh(entries)
                with self._guard:
                    self._loaded_at[user_id] = self._clock()
        return table
