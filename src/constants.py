"""Constants and tuning values for the cosmetic filter engine."""

__version__ = "1.0"

LOGGER_NAME = "cosmeticfilter"

# inline declaration forced onto page-specific matches
HIDDEN_STYLE = (
    "display:none!important;min-height:0!important;height:0!important;"
    "z-index:-99999!important;visibility:hidden!important;width:0!important;"
    "min-width:0!important;overflow:hidden!important"
)
HIDE_RULES = "{" + HIDDEN_STYLE + "}"

# lifecycle events
DOM_CONTENT_LOADED = "DOMContentLoaded"
LOAD = "load"
UNLOAD = "unload"

# rescan schedule (ms)
DOM_CONTENT_LOADED_RESCANS = (1000,)
LOAD_RESCAN_STEP = 500
LOAD_RESCAN_COUNT = 5
HEAD_WAIT_TIMEOUT_MS = 30000

TOP_DOMAIN_COUNT = 1_000_000
