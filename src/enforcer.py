"""Applies resolved cosmetic rules to a document and keeps them applied."""

from enum import Enum
from typing import List, Optional, Tuple

from soupsieve import SelectorSyntaxError

from constants import (
    DOM_CONTENT_LOADED,
    DOM_CONTENT_LOADED_RESCANS,
    HEAD_WAIT_TIMEOUT_MS,
    HIDDEN_STYLE,
    LOAD,
    LOAD_RESCAN_COUNT,
    LOAD_RESCAN_STEP,
    UNLOAD,
)
from css_builder import SelectorSet
from interfaces import IDocument, ILogger, IObserver, IScheduler, ITimer
from rules import ResolvedEntry


class EnforcerState(Enum):
    IDLE = "idle"
    RULES_RESOLVED = "rules_resolved"
    STYLE_INJECTED = "style_injected"
    TERMINAL = "terminal"


class Enforcer:
    def __init__(
        self,
        entries: List[ResolvedEntry],
        document: IDocument,
        scheduler: IScheduler,
        logger: ILogger,
        head_timeout_ms: Optional[float] = HEAD_WAIT_TIMEOUT_MS,
    ):
        self.document = document
        self.scheduler = scheduler
        self.logger = logger
        self.head_timeout_ms = head_timeout_ms
        self.selectors = SelectorSet(entries)
        self.state = EnforcerState.IDLE
        self.injected: list = []
        self.scans: List[Tuple[str, int]] = []
        self._observer: Optional[IObserver] = None
        self._timers: List[ITimer] = []

        self.logger.log("Found", len(entries), "rules to inject")
        if self.selectors.injection_exception_patterns:
            self.logger.debug("found injection exception rules:", "|".join(p.pattern for p in self.selectors.injection_exception_patterns))
            self.logger.debug("injection string after exception:", self.selectors.effective_injection_css)
        self.logger.debug("Page specific selectors:", self.selectors.page_specific_selector)

    def start(self) -> None:
        if self.state is not EnforcerState.IDLE:
            return
        self.state = EnforcerState.RULES_RESOLVED
        self.document.add_event_listener(DOM_CONTENT_LOADED, self.on_dom_content_loaded)
        self.document.add_event_listener(LOAD, self.on_load)
        self.document.add_event_listener(UNLOAD, self.teardown)
        self._wait_for_head()

    def _schedule(self, delay_ms: float, callback, *args) -> None:
        if self.state is EnforcerState.TERMINAL:
            return
        self._timers.append(self.scheduler.call_later(delay_ms, callback, *args))

    def _wait_for_head(self) -> None:
        if self.document.head is not None:
            self._inject_styles()
            return

        timeout: List[ITimer] = []

        def on_children(_added) -> None:
            if self.document.head is None:
                return
            self._observer.disconnect()
            self._observer = None
            for t in timeout:
                t.cancel()
            self._inject_styles()

        def on_timeout() -> None:
            if self._observer is None:
                return
            self._observer.disconnect()
            self._observer = None
            self.logger.error(f"No <head> appeared within {self.head_timeout_ms}ms, styles not injected")

        self._observer = self.document.observe_children(on_children)
        if self.head_timeout_ms is not None:
            timer = self.scheduler.call_later(self.head_timeout_ms, on_timeout)
            timeout.append(timer)
            self._timers.append(timer)

    def _inject_styles(self) -> None:
        if self.state is not EnforcerState.RULES_RESOLVED:
            return
        self.injected.append(self.document.inject_style(self.selectors.combined_hide_css))
        self.logger.log("Injected combined style")

        if self.selectors.effective_injection_css:
            self.injected.append(self.document.inject_style(self.selectors.effective_injection_css))
            self.logger.log("Also injected additional styles (usually fixes for scrolling issues)")
        self.state = EnforcerState.STYLE_INJECTED

    def hide_page_specific_elements(self, reason: str) -> int:
        # avoid selecting the whole document when nothing page specific resolved
        if not self.selectors.has_page_specific or self.state is EnforcerState.TERMINAL:
            return 0

        self.logger.debug(f"Searching for elements ({reason})")
        try:
            elems = self.document.select(self.selectors.page_specific_selector)
        except SelectorSyntaxError as e:
            self.logger.error(f"Page specific selector rejected ({reason}): {e}")
            elems = []
        for elem in elems:
            self.document.set_style(elem, HIDDEN_STYLE)
        self.scans.append((reason, len(elems)))
        self.logger.log("Tried hiding", len(elems), "page-specific elements")
        return len(elems)

    def on_dom_content_loaded(self) -> None:
        self.hide_page_specific_elements(DOM_CONTENT_LOADED)
        for delay in DOM_CONTENT_LOADED_RESCANS:
            self._schedule(delay, self.hide_page_specific_elements, f"{DOM_CONTENT_LOADED} + {delay}ms")

    def on_load(self) -> None:
        self.hide_page_specific_elements(f"{LOAD} - initial")
        for i in range(1, LOAD_RESCAN_COUNT + 1):
            ms = i * LOAD_RESCAN_STEP
            self._schedule(ms, self.hide_page_specific_elements, f"{LOAD} + {ms}ms")

    def teardown(self) -> None:
        self.state = EnforcerState.TERMINAL
        if self._observer is not None:
            self._observer.disconnect()
            self._observer = None
        for timer in self._timers:
            timer.cancel()
        self._timers = []
