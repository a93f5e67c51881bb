"""In-memory HTML document with the primitives the enforcer consumes."""

from typing import Callable, Dict, List, Optional

from bs4 import BeautifulSoup, Tag

from interfaces import IDocument, IObserver


class ChildObserver(IObserver):
    def __init__(self, page: "Page", callback: Callable[[list], None]):
        self.page = page
        self.callback = callback
        self.connected = True

    def disconnect(self) -> None:
        if self.connected:
            self.connected = False
            self.page._observers.remove(self)


class Page(IDocument):
    def __init__(self, html: str, parser: str = "html.parser"):
        self.soup = BeautifulSoup(html, parser)
        self._observers: List[ChildObserver] = []
        self._listeners: Dict[str, List[Callable[[], None]]] = {}

    @classmethod
    def from_file(cls, path: str, parser: str = "html.parser") -> "Page":
        with open(path, "r", encoding="utf-8", errors="replace") as f:
            return cls(f.read(), parser)

    @property
    def root(self):
        return self.soup.find("html", recursive=False) or self.soup

    @property
    def head(self) -> Optional[Tag]:
        return self.root.find("head", recursive=False)

    def observe_children(self, callback: Callable[[list], None]) -> ChildObserver:
        """Watch the root element's direct children; callback gets the added nodes."""
        observer = ChildObserver(self, callback)
        self._observers.append(observer)
        return observer

    def _notify(self, added: list) -> None:
        for observer in list(self._observers):
            if observer.connected:
                observer.callback(added)

    def append_to_root(self, node) -> None:
        if isinstance(node, str):
            node = BeautifulSoup(node, "html.parser")
            added = [c for c in node.contents if isinstance(c, Tag)]
        else:
            added = [node]
        for child in added:
            self.root.append(child)
        self._notify(added)

    def ensure_head(self) -> Tag:
        head = self.head
        if head is not None:
            return head
        head = self.soup.new_tag("head")
        self.root.insert(0, head)
        self._notify([head])
        return head

    def inject_style(self, css: str) -> Tag:
        style = self.soup.new_tag("style", type="text/css")
        style.string = css
        self.head.append(style)
        return style

    def select(self, selector: str) -> List[Tag]:
        return self.soup.select(selector)

    def set_style(self, element: Tag, style: str) -> None:
        element["style"] = style

    def add_event_listener(self, name: str, callback: Callable[[], None]) -> None:
        self._listeners.setdefault(name, []).append(callback)

    def dispatch_event(self, name: str) -> None:
        for callback in list(self._listeners.get(name, [])):
            callback()

    def html(self) -> str:
        return str(self.soup)
