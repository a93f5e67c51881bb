"""Builds the compiled rule blob from pre-parsed cosmetic rules.

Input rules are objects like
    {"domains": ["example.com", "~sub.example.com"], "selector": ".ad"}
    {"domains": [], "css": "body{overflow:auto!important}"}
    {"domains": ["example.com"], "selector": ".ad", "exception": true}

Rules sharing the same domain list are combined under one rule key. Joined
strings that occur in more than one slot are moved into the deduplication
table and referenced by index.
"""

import re
from datetime import date
from typing import Dict, Iterable, List, Optional, Set

from rule_table import (
    DEDUPLICATED_STRINGS,
    DEFAULT_KEY,
    EXCEPTIONS,
    INJECTION_EXCEPTIONS,
    INJECTION_RULES,
    RULES,
)


class CombineResult:
    __slots__ = ("domains", "selectors", "exceptions", "injected_css", "injection_exceptions")

    def __init__(self, domains: List[str]):
        self.domains = domains
        self.selectors: List[str] = []
        self.exceptions: List[str] = []
        self.injected_css: List[str] = []
        self.injection_exceptions: List[str] = []


def _add_unique(target: List[str], value: str) -> None:
    if value not in target:
        target.append(value)


def combine(rules: Iterable[dict]) -> Dict[str, CombineResult]:
    lookup: Dict[str, CombineResult] = {}
    for i, rule in enumerate(rules):
        if not isinstance(rule, dict):
            raise ValueError(f"rule {i} is not a JSON object: {rule!r}")
        domains = [str(d).strip().lower() for d in rule.get("domains") or [] if str(d).strip()]
        key = ",".join(domains)
        out = lookup.get(key)
        if out is None:
            out = lookup[key] = CombineResult(domains)

        exception = bool(rule.get("exception"))
        selector = (rule.get("selector") or "").strip()
        css = (rule.get("css") or "").strip()
        if selector:
            _add_unique(out.exceptions if exception else out.selectors, selector)
        if css:
            _add_unique(out.injection_exceptions if exception else out.injected_css, css)
    return lookup


def load_top_domains(path: str, count: int) -> Set[str]:
    """Read a ranked domain list: 'rank,domain' CSV lines or one domain per line."""
    top: Set[str] = set()
    with open(path, "r", encoding="utf-8", errors="ignore") as f:
        for line in f:
            if len(top) >= count:
                break
            s = line.strip()
            if not s or s[0] == "#":
                continue
            domain = s.split(",", 1)[1] if "," in s else s
            top.add(domain.strip().lower())
    return top


def restrict_to_top_domains(lookup: Dict[str, CombineResult], top: Set[str]) -> Dict[str, CombineResult]:
    restricted = {}
    for key, result in lookup.items():
        # all-negated keys are dropped from the lite variant
        if any(not d.startswith("~") and d in top for d in result.domains):
            restricted[key] = result
    if DEFAULT_KEY in lookup:
        restricted[DEFAULT_KEY] = lookup[DEFAULT_KEY]
    return restricted


def _join_sorted(values: List[str], sep: str) -> str:
    return sep.join(sorted(values))


def _join_sorted_escaped(values: List[str], sep: str) -> str:
    return sep.join(re.escape(v) for v in sorted(values))


def _slots(result: CombineResult):
    yield RULES, _join_sorted(result.selectors, ",")
    yield EXCEPTIONS, _join_sorted(result.exceptions, ",")
    yield INJECTION_RULES, _join_sorted(result.injected_css, "")
    yield INJECTION_EXCEPTIONS, _join_sorted_escaped(result.injection_exceptions, "|")


def compile_table(
    lookup: Dict[str, CombineResult],
    version: Optional[str] = None,
    lite: bool = False,
) -> dict:
    duplicate_count: Dict[str, int] = {}
    for result in lookup.values():
        for _, joined in _slots(result):
            if joined:
                duplicate_count[joined] = duplicate_count.get(joined, 0) + 1

    deduplicated = sorted(s for s, n in duplicate_count.items() if n > 1)
    index = {s: i for i, s in enumerate(deduplicated)}

    compiled: Dict[str, Dict[str, object]] = {field: {} for field in (RULES, EXCEPTIONS, INJECTION_RULES, INJECTION_EXCEPTIONS)}
    for key, result in lookup.items():
        for field, joined in _slots(result):
            if not joined:
                continue
            compiled[field][key] = index[joined] if joined in index else joined

    statistics = (
        f"blockers for {len(compiled[RULES])} domains, exceptions for {len(compiled[EXCEPTIONS])} domains, "
        f"injected CSS rules for {len(compiled[INJECTION_RULES])} domains, "
        f"exception for CSS injection for {len(compiled[INJECTION_EXCEPTIONS])} domains"
    )
    return {
        DEDUPLICATED_STRINGS: deduplicated,
        INJECTION_RULES: compiled[INJECTION_RULES],
        INJECTION_EXCEPTIONS: compiled[INJECTION_EXCEPTIONS],
        RULES: compiled[RULES],
        EXCEPTIONS: compiled[EXCEPTIONS],
        "meta": {
            "version": version or date.today().strftime("%Y.%m.%d"),
            "lite": lite,
            "statistics": statistics,
        },
    }
