"""Application entrypoint for the cosmetic filter engine."""

import argparse
import asyncio
import sys

try:
    import uvloop
    asyncio.set_event_loop_policy(uvloop.EventLoopPolicy())
except Exception:
    pass

from compiler import combine, compile_table, load_top_domains, restrict_to_top_domains
from config import ConfigLoader, FilterConfig
from constants import DOM_CONTENT_LOADED, LOAD, TOP_DOMAIN_COUNT, UNLOAD, __version__
from enforcer import Enforcer
from json_utils import json_dump_file, json_load_file
from logger import FilterLogger
from page import Page
from rule_table import RuleTableError, load_rule_table
from rules import RuleResolver
from scheduler import AsyncioScheduler


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="cosmetic-filter")
    parser.add_argument("--log-file", required=False, help="Path to log file")
    parser.add_argument("--version", required=False, help="Override the version shown in the log tag")
    parser.add_argument("-q", "--quiet", action="store_true", help="Remove console output")
    parser.add_argument("-v", "--verbose", action="store_true", help="Log rule matching diagnostics")
    sub = parser.add_subparsers(dest="command", required=True)

    apply = sub.add_parser("apply", help="Apply the rule table to an HTML document")
    apply.add_argument("--rules", default="rules.json", help="Path to the compiled rule table")
    apply.add_argument("--html", required=True, help="Path to the HTML document")
    apply.add_argument("--host", required=True, help="Hostname or URL of the page")
    apply.add_argument("--output", required=False, help="Where to write the filtered document (default: stdout)")
    apply.add_argument("--lite", action="store_true", help="Tag log output as the lite variant")
    apply.add_argument("--head-timeout", type=float, required=False, help="Max ms to wait for <head>, 0 to wait forever")

    comp = sub.add_parser("compile", help="Compile pre-parsed cosmetic rules into a rule table")
    comp.add_argument("--input", required=True, help="JSON array of parsed cosmetic rules")
    comp.add_argument("--output", default="rules.json", help="Path to output rule table")
    comp.add_argument("--top", required=False, help="Ranked top-domain list, builds the lite variant")
    comp.add_argument("--top-count", type=int, default=TOP_DOMAIN_COUNT, help="Include up to this rank of top domains, only with --top")
    comp.add_argument("--pretty", action="store_true", help="Indent the output JSON")
    return parser


def run_compile(config: FilterConfig) -> None:
    logger = FilterLogger(config.version or __version__, bool(config.top_domains_file), config.log_file, config.quiet, config.verbose)
    try:
        parsed = json_load_file(config.input_file)
    except (OSError, ValueError) as e:
        logger.error(f"cannot load parsed rules from {config.input_file}: {e}")
        raise SystemExit(1)
    if not isinstance(parsed, list):
        logger.error(f"{config.input_file} must contain a JSON array of rules")
        raise SystemExit(1)
    logger.log(f"Found {len(parsed)} filters")

    try:
        lookup = combine(parsed)
    except ValueError as e:
        logger.error(f"{config.input_file}: {e}")
        raise SystemExit(1)
    lite = False
    if config.top_domains_file:
        try:
            top = load_top_domains(config.top_domains_file, config.top_domain_count)
        except OSError as e:
            logger.error(f"cannot load top domains from {config.top_domains_file}: {e}")
            raise SystemExit(1)
        logger.log(f"Read {len(top)} top domains")
        restricted = restrict_to_top_domains(lookup, top)
        logger.log(f"Selected {len(restricted)} top domains from {len(lookup)} domains with available filters")
        lookup = restricted
        lite = True

    blob = compile_table(lookup, version=config.version, lite=lite)
    json_dump_file(config.output_file, blob, config.pretty)
    logger.log(blob["meta"]["statistics"])


async def run_apply(config: FilterConfig) -> None:
    try:
        table = load_rule_table(config.rules_file)
    except RuleTableError as e:
        print(f"\033[91m[ERROR]: {e}\033[0m", file=sys.stderr)
        raise SystemExit(1)

    version = config.version or table.version
    lite = table.lite if config.lite is None else config.lite
    logger = FilterLogger(version, lite, config.log_file, config.quiet, config.verbose)

    try:
        page = Page.from_file(config.html_file)
    except OSError as e:
        logger.error(f"cannot read {config.html_file}: {e}")
        raise SystemExit(1)

    entries = RuleResolver(table, logger).resolve(config.host)
    scheduler = AsyncioScheduler()
    enforcer = Enforcer(entries, page, scheduler, logger, config.head_timeout_ms)
    enforcer.start()

    # the parser always produces a head before the document is interactive
    page.ensure_head()
    page.dispatch_event(DOM_CONTENT_LOADED)
    page.dispatch_event(LOAD)
    await scheduler.drain()
    page.dispatch_event(UNLOAD)

    if config.output_file:
        with open(config.output_file, "w", encoding="utf-8") as f:
            f.write(page.html())
    else:
        sys.stdout.write(page.html())


def main(argv=None) -> None:
    config = ConfigLoader.load_from_args(build_parser().parse_args(argv))
    if config.command == "compile":
        run_compile(config)
        return
    try:
        asyncio.run(run_apply(config))
    except KeyboardInterrupt:
        pass
