"""Filter configuration and CLI loader."""

from urllib.parse import urlsplit

from constants import HEAD_WAIT_TIMEOUT_MS, TOP_DOMAIN_COUNT


def host_from_target(target: str) -> str:
    """Accept either a bare hostname or a URL and return the lower-cased hostname."""
    target = target.strip()
    if "://" not in target:
        target = "//" + target
    return (urlsplit(target).hostname or "").lower()


class FilterConfig:
    def __init__(self):
        self.command = "apply"
        self.rules_file = "rules.json"
        self.html_file = None
        self.host = None
        self.output_file = None
        self.version = None
        self.lite = None
        self.log_file = None
        self.quiet = False
        self.verbose = False
        self.head_timeout_ms = HEAD_WAIT_TIMEOUT_MS
        # compile
        self.input_file = None
        self.top_domains_file = None
        self.top_domain_count = TOP_DOMAIN_COUNT
        self.pretty = False


class ConfigLoader:
    @staticmethod
    def load_from_args(args) -> FilterConfig:
        config = FilterConfig()
        config.command = args.command
        config.log_file = args.log_file
        config.quiet = args.quiet
        config.verbose = args.verbose
        config.version = args.version
        if config.command == "compile":
            config.input_file = args.input
            config.output_file = args.output
            config.top_domains_file = args.top
            config.top_domain_count = args.top_count
            config.pretty = args.pretty
            return config

        config.rules_file = args.rules
        config.html_file = args.html
        config.host = host_from_target(args.host)
        config.output_file = args.output
        if args.lite:
            config.lite = True
        if args.head_timeout is not None:
            config.head_timeout_ms = args.head_timeout if args.head_timeout > 0 else None
        return config
