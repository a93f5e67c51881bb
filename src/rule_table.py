"""Compiled rule table and blob loading."""

import re
from types import MappingProxyType
from typing import Dict, List, Mapping, Optional, Union

from constants import __version__
from json_utils import json_load_file

RuleValue = Union[str, int]

DEFAULT_KEY = ""

# blob field names, in the order they are resolved
RULES = "rules"
EXCEPTIONS = "exceptions"
INJECTION_RULES = "injectionRules"
INJECTION_EXCEPTIONS = "injectionExceptions"
DEDUPLICATED_STRINGS = "deduplicatedStrings"
MAPPING_FIELDS = (RULES, EXCEPTIONS, INJECTION_RULES, INJECTION_EXCEPTIONS)


class RuleTableError(ValueError):
    """The embedded rule blob violates its build-time contract."""


class RuleTable:
    __slots__ = ("_mappings", "_strings", "version", "lite", "statistics")

    def __init__(
        self,
        rules: Optional[Dict[str, RuleValue]] = None,
        exceptions: Optional[Dict[str, RuleValue]] = None,
        injection_rules: Optional[Dict[str, RuleValue]] = None,
        injection_exceptions: Optional[Dict[str, RuleValue]] = None,
        deduplicated_strings: Optional[List[str]] = None,
        version: str = __version__,
        lite: bool = False,
        statistics: str = "",
    ):
        self._strings = tuple(deduplicated_strings or ())
        self._mappings = {
            RULES: MappingProxyType(dict(rules or {})),
            EXCEPTIONS: MappingProxyType(dict(exceptions or {})),
            INJECTION_RULES: MappingProxyType(dict(injection_rules or {})),
            INJECTION_EXCEPTIONS: MappingProxyType(dict(injection_exceptions or {})),
        }
        self.version = version
        self.lite = lite
        self.statistics = statistics
        self._validate()

    @property
    def rules(self) -> Mapping[str, RuleValue]:
        return self._mappings[RULES]

    @property
    def exceptions(self) -> Mapping[str, RuleValue]:
        return self._mappings[EXCEPTIONS]

    @property
    def injection_rules(self) -> Mapping[str, RuleValue]:
        return self._mappings[INJECTION_RULES]

    @property
    def injection_exceptions(self) -> Mapping[str, RuleValue]:
        return self._mappings[INJECTION_EXCEPTIONS]

    @property
    def deduplicated_strings(self) -> tuple:
        return self._strings

    def mapping(self, field: str) -> Mapping[str, RuleValue]:
        return self._mappings[field]

    def resolve_value(self, value: Optional[RuleValue]) -> Optional[str]:
        if value is None:
            return None
        if isinstance(value, int):
            return self._strings[value]
        return value

    def _validate(self) -> None:
        for i, s in enumerate(self._strings):
            if not isinstance(s, str):
                raise RuleTableError(f"{DEDUPLICATED_STRINGS}[{i}] is not a string")
        for field, mapping in self._mappings.items():
            for key, value in mapping.items():
                if not isinstance(key, str):
                    raise RuleTableError(f"{field}: rule key {key!r} is not a string")
                if value is None or isinstance(value, str):
                    continue
                # bool is an int subclass but never a valid index
                if isinstance(value, bool) or not isinstance(value, int):
                    raise RuleTableError(f"{field}[{key!r}]: unsupported value {value!r}")
                if not 0 <= value < len(self._strings):
                    raise RuleTableError(
                        f"{field}[{key!r}]: index {value} outside {DEDUPLICATED_STRINGS} (size {len(self._strings)})"
                    )
        for key, value in self.injection_exceptions.items():
            pattern = self.resolve_value(value)
            if not pattern:
                continue
            try:
                re.compile(pattern)
            except re.error as e:
                raise RuleTableError(f"{INJECTION_EXCEPTIONS}[{key!r}]: invalid pattern: {e}") from e

    @classmethod
    def from_blob(cls, blob) -> "RuleTable":
        if not isinstance(blob, dict):
            raise RuleTableError("rule blob must be a JSON object")
        mappings = {}
        for field in MAPPING_FIELDS:
            value = blob.get(field, {})
            if not isinstance(value, dict):
                raise RuleTableError(f"{field} must be a JSON object")
            mappings[field] = value
        strings = blob.get(DEDUPLICATED_STRINGS, [])
        if not isinstance(strings, list):
            raise RuleTableError(f"{DEDUPLICATED_STRINGS} must be a JSON array")
        meta = blob.get("meta") or {}
        if not isinstance(meta, dict):
            raise RuleTableError("meta must be a JSON object")
        return cls(
            rules=mappings[RULES],
            exceptions=mappings[EXCEPTIONS],
            injection_rules=mappings[INJECTION_RULES],
            injection_exceptions=mappings[INJECTION_EXCEPTIONS],
            deduplicated_strings=strings,
            version=str(meta.get("version") or __version__),
            lite=bool(meta.get("lite", False)),
            statistics=str(meta.get("statistics") or ""),
        )

    def to_blob(self) -> dict:
        return {
            DEDUPLICATED_STRINGS: list(self._strings),
            INJECTION_RULES: dict(self.injection_rules),
            INJECTION_EXCEPTIONS: dict(self.injection_exceptions),
            RULES: dict(self.rules),
            EXCEPTIONS: dict(self.exceptions),
            "meta": {"version": self.version, "lite": self.lite, "statistics": self.statistics},
        }


def load_rule_table(path: str) -> RuleTable:
    try:
        blob = json_load_file(path)
    except OSError as e:
        raise RuleTableError(f"cannot read rule table {path}: {e}") from e
    except ValueError as e:
        raise RuleTableError(f"rule table {path} is not valid JSON: {e}") from e
    return RuleTable.from_blob(blob)
