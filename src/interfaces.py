"""Core interfaces used by the filter components."""

from abc import ABC, abstractmethod


class ILogger(ABC):
    @abstractmethod
    def log(self, *data) -> None:
        ...

    @abstractmethod
    def debug(self, *data) -> None:
        ...

    @abstractmethod
    def error(self, *data) -> None:
        ...


class ITimer(ABC):
    @abstractmethod
    def cancel(self) -> None:
        ...


class IScheduler(ABC):
    @abstractmethod
    def call_later(self, delay_ms: float, callback, *args) -> ITimer:
        ...


class IObserver(ABC):
    @abstractmethod
    def disconnect(self) -> None:
        ...


class IDocument(ABC):
    @property
    @abstractmethod
    def head(self):
        ...

    @abstractmethod
    def observe_children(self, callback) -> IObserver:
        ...

    @abstractmethod
    def inject_style(self, css: str):
        ...

    @abstractmethod
    def select(self, selector: str) -> list:
        ...

    @abstractmethod
    def set_style(self, element, style: str) -> None:
        ...

    @abstractmethod
    def add_event_listener(self, name: str, callback) -> None:
        ...
