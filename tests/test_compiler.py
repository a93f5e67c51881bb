import os
import re
import sys
import tempfile
import unittest
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(ROOT / "src"))

from compiler import combine, compile_table, load_top_domains, restrict_to_top_domains
from rule_table import RuleTable
from rules import EXCEPTION, INJECTION, SELECTOR, ResolvedEntry, RuleResolver

PARSED = [
    {"domains": ["example.com"], "selector": ".ad"},
    {"domains": ["example.com"], "selector": ".banner"},
    {"domains": ["example.com"], "selector": ".ad"},
    {"domains": ["other.org"], "selector": ".banner"},
    {"domains": ["other.org"], "selector": ".ad"},
    {"domains": ["example.com"], "selector": ".ok", "exception": True},
    {"domains": [], "selector": "#global-ad"},
    {"domains": ["example.com"], "css": "body{overflow:auto!important}"},
    {"domains": ["~example.com"], "selector": ".everywhere-else"},
]


class TestCombine(unittest.TestCase):
    def test_groups_by_domain_key(self):
        lookup = combine(PARSED)
        self.assertEqual(list(lookup), ["example.com", "other.org", "", "~example.com"])
        self.assertEqual(lookup["example.com"].selectors, [".ad", ".banner"])
        self.assertEqual(lookup["example.com"].exceptions, [".ok"])
        self.assertEqual(lookup["example.com"].injected_css, ["body{overflow:auto!important}"])
        self.assertEqual(lookup[""].selectors, ["#global-ad"])

    def test_repeated_exception_stays_an_exception(self):
        lookup = combine([{"domains": ["a.com"], "selector": ".x", "exception": True}] * 2)
        self.assertEqual(lookup["a.com"].exceptions, [".x"])
        self.assertEqual(lookup["a.com"].selectors, [])

    def test_non_object_rule_is_rejected(self):
        with self.assertRaises(ValueError):
            combine([{"domains": ["a.com"], "selector": ".x"}, "x"])

    def test_domains_are_normalized(self):
        lookup = combine([{"domains": [" Example.COM ", ""], "selector": ".x"}])
        self.assertEqual(list(lookup), ["example.com"])


class TestCompileTable(unittest.TestCase):
    def test_shared_strings_are_deduplicated(self):
        blob = compile_table(combine(PARSED), version="2026.10.19")
        self.assertEqual(blob["deduplicatedStrings"], [".ad,.banner"])
        self.assertEqual(blob["rules"], {"example.com": 0, "other.org": 0, "": "#global-ad", "~example.com": ".everywhere-else"})
        self.assertEqual(blob["exceptions"], {"example.com": ".ok"})
        self.assertEqual(blob["injectionRules"], {"example.com": "body{overflow:auto!important}"})
        self.assertEqual(blob["injectionExceptions"], {})
        self.assertEqual(blob["meta"]["version"], "2026.10.19")
        self.assertFalse(blob["meta"]["lite"])
        self.assertIn("blockers for 4 domains", blob["meta"]["statistics"])

    def test_default_version_is_build_date(self):
        blob = compile_table(combine(PARSED))
        self.assertRegex(blob["meta"]["version"], r"^\d{4}\.\d{2}\.\d{2}$")

    def test_injection_exceptions_are_escaped(self):
        blob = compile_table(combine([{"domains": ["a.com"], "css": "a{b:c}", "exception": True}]))
        pattern = blob["injectionExceptions"]["a.com"]
        self.assertEqual(pattern, re.escape("a{b:c}"))
        self.assertEqual(re.sub(pattern, "", "a{b:c}x{y:z}"), "x{y:z}")

    def test_compiled_blob_resolves(self):
        table = RuleTable.from_blob(compile_table(combine(PARSED)))
        self.assertEqual(
            RuleResolver(table).resolve("www.example.com"),
            [
                ResolvedEntry(SELECTOR, ".ad,.banner"),
                ResolvedEntry(EXCEPTION, ".ok"),
                ResolvedEntry(INJECTION, "body{overflow:auto!important}"),
                ResolvedEntry(SELECTOR, "#global-ad", True),
            ],
        )
        self.assertEqual(
            [e.value for e in RuleResolver(table).resolve("other.org")],
            [".ad,.banner", ".everywhere-else", "#global-ad"],
        )


class TestTopDomains(unittest.TestCase):
    def test_load_ranked_csv(self):
        with tempfile.NamedTemporaryFile("w", suffix=".csv", delete=False, encoding="utf-8") as tmp:
            tmp.write("1,google.com\n2,Other.org\n\n3,x.com\n")
        self.addCleanup(os.unlink, tmp.name)
        self.assertEqual(load_top_domains(tmp.name, 2), {"google.com", "other.org"})
        self.assertEqual(load_top_domains(tmp.name, 10), {"google.com", "other.org", "x.com"})

    def test_lite_keeps_top_domains_and_default(self):
        restricted = restrict_to_top_domains(combine(PARSED), {"other.org"})
        self.assertEqual(sorted(restricted), ["", "other.org"])
        blob = compile_table(restricted, lite=True)
        self.assertTrue(blob["meta"]["lite"])
        self.assertEqual(blob["deduplicatedStrings"], [])
        self.assertEqual(blob["rules"], {"other.org": ".ad,.banner", "": "#global-ad"})


if __name__ == "__main__":
    unittest.main()
