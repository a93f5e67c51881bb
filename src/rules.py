"""Rules engine mapping a hostname to the cosmetic rules that apply to it."""

from typing import List, Mapping, NamedTuple, Optional, Tuple

from interfaces import ILogger
from rule_table import (
    DEFAULT_KEY,
    EXCEPTIONS,
    INJECTION_EXCEPTIONS,
    INJECTION_RULES,
    RULES,
    RuleTable,
)

SELECTOR = "selector"
EXCEPTION = "exception"
INJECTION = "injection"
INJECTION_EXCEPTION = "injection_exception"

# mapping field -> entry kind, in resolution order
_CATEGORIES = (
    (RULES, SELECTOR),
    (EXCEPTIONS, EXCEPTION),
    (INJECTION_RULES, INJECTION),
    (INJECTION_EXCEPTIONS, INJECTION_EXCEPTION),
)


class ResolvedEntry(NamedTuple):
    kind: str
    value: str
    is_default: bool = False


def host_suffixes(host: str) -> List[str]:
    """Every tail of the host's labels, most specific first, excluding the last label alone.

    'a.b.example.com' -> ['a.b.example.com', 'b.example.com', 'example.com']
    """
    labels = host.split(".")
    return [".".join(labels[k:]).lower() for k in range(len(labels) - 1)]


def match_keys(mapping: Mapping, host: str) -> List[Tuple[str, int]]:
    """Return (rule key, specificity) for every key of mapping matching host.

    Specificity is the label count of the matched suffix, 0 for keys made only
    of negated terms. The result is ordered by descending specificity, ties
    keeping the mapping's order. A key matching several suffixes appears once
    per match.
    """
    suffixes = host_suffixes(host)
    negated = {"~" + s for s in suffixes}
    labels = len(host.split("."))

    matches = []
    for key in mapping:
        if key == DEFAULT_KEY:
            continue
        terms = key.split(",")
        excluded = any(t in negated for t in terms)

        if all(t.startswith("~") for t in terms):
            if not excluded:
                matches.append((key, 0))
            continue

        if excluded:
            continue
        for k, suffix in enumerate(suffixes):
            if suffix in terms:
                matches.append((key, labels - k))

    # sorted() is stable, so equal scores stay in table order
    return sorted(matches, key=lambda m: -m[1])


class RuleResolver:
    def __init__(self, table: RuleTable, logger: Optional[ILogger] = None):
        self.table = table
        self.logger = logger

    def _debug(self, *data) -> None:
        if self.logger:
            self.logger.debug(*data)

    def _resolve_category(self, field: str, kind: str, host: str) -> List[ResolvedEntry]:
        mapping = self.table.mapping(field)
        out = []
        for key, _ in match_keys(mapping, host):
            raw = mapping.get(key)
            if raw is None:
                continue
            if isinstance(raw, int):
                self._debug(f"Found deduplicated {kind}", raw, "for domain", key)
            else:
                self._debug(f"Found normal {kind} for domain", key)
            out.append(ResolvedEntry(kind, self.table.resolve_value(raw)))
        return out

    def resolve(self, host: str) -> List[ResolvedEntry]:
        output: List[ResolvedEntry] = []
        for field, kind in _CATEGORIES:
            output.extend(self._resolve_category(field, kind, host))

        for field, kind in _CATEGORIES:
            value = self.table.resolve_value(self.table.mapping(field).get(DEFAULT_KEY))
            if value:
                output.append(ResolvedEntry(kind, value, True))
        return output
