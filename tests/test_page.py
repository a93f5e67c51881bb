import sys
import unittest
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(ROOT / "src"))

from page import Page


class TestPage(unittest.TestCase):
    def test_observer_sees_direct_children_until_disconnected(self):
        page = Page("<html><body></body></html>")
        seen = []
        observer = page.observe_children(lambda added: seen.extend(n.name for n in added))
        page.append_to_root("<script></script><noscript></noscript>")
        page.ensure_head()
        observer.disconnect()
        observer.disconnect()
        page.append_to_root("<footer></footer>")
        self.assertEqual(seen, ["script", "noscript", "head"])
        self.assertEqual(page.root.contents[0].name, "head")

    def test_ensure_head_keeps_existing_head(self):
        page = Page("<html><head><title>x</title></head><body></body></html>")
        head = page.head
        self.assertIs(page.ensure_head(), head)

    def test_fragment_without_html_element(self):
        page = Page('<div class="ad">x</div>')
        self.assertIs(page.root, page.soup)
        page.ensure_head()
        page.inject_style("div{}")
        self.assertEqual(page.head.style.string, "div{}")

    def test_events_run_in_registration_order(self):
        page = Page("<html></html>")
        calls = []
        page.add_event_listener("load", lambda: calls.append(1))
        page.add_event_listener("load", lambda: calls.append(2))
        page.dispatch_event("load")
        page.dispatch_event("unknown")
        self.assertEqual(calls, [1, 2])

    def test_set_style_replaces_attribute(self):
        page = Page('<html><body><span class="ad" style="color:red"></span></body></html>')
        el = page.select(":is(span.ad)")[0]
        page.set_style(el, "display:none")
        self.assertIn('style="display:none"', page.html())


if __name__ == "__main__":
    unittest.main()
