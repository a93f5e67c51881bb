"""Assembly of the stylesheet text and selectors from resolved rules."""

import re
from typing import Iterable, List

from constants import HIDE_RULES
from rules import EXCEPTION, INJECTION, INJECTION_EXCEPTION, SELECTOR, ResolvedEntry

EMPTY_IS = ":is()"


def _values(entries: Iterable[ResolvedEntry], kind: str, include_default: bool = True) -> List[str]:
    return [e.value for e in entries if e.kind == kind and (include_default or not e.is_default)]


def exception_selector(exceptions: List[str]) -> str:
    # ":not()" is not a valid selector
    if not exceptions:
        return ""
    return ":not(" + ",".join(exceptions) + ")"


def is_selector(selectors: List[str], not_selector: str = "") -> str:
    return ":is(" + ",".join(selectors) + ")" + not_selector


def strip_injection_exceptions(css: str, patterns: List[re.Pattern]) -> str:
    # each pattern stands alone, joining them could clash on group names or inline flags
    for pattern in patterns:
        css = pattern.sub("", css)
    return css


class SelectorSet:
    """Everything the enforcer injects or scans for, built once per page."""

    def __init__(self, entries: List[ResolvedEntry]):
        self.not_selector = exception_selector(_values(entries, EXCEPTION))
        self.hide_selector = is_selector(_values(entries, SELECTOR), self.not_selector)
        self.combined_hide_css = self.hide_selector + HIDE_RULES
        self.page_specific_selector = is_selector(_values(entries, SELECTOR, include_default=False), self.not_selector)

        self.injection_css = "".join(_values(entries, INJECTION))
        self.injection_exception_patterns = [re.compile(p) for p in _values(entries, INJECTION_EXCEPTION) if p]
        self.effective_injection_css = strip_injection_exceptions(self.injection_css, self.injection_exception_patterns)

    @property
    def has_page_specific(self) -> bool:
        return not self.page_specific_selector.startswith(EMPTY_IS)
