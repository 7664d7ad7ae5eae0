"""Constants for exporter configuration."""

# Defaults mirror the flags of the original exporter
DEFAULT_PUPPETDB_URL = "https://puppetdb:8081/pdb/query"
DEFAULT_SCRAPE_INTERVAL = "5s"
DEFAULT_UNREPORTED_NODE = "2h"
DEFAULT_CATEGORIES = "resources,time,changes,events"
DEFAULT_LISTEN_ADDRESS = ":9635"
DEFAULT_METRICS_PATH = "/metrics"
DEFAULT_REQUEST_TIMEOUT_SECONDS = 30.0

# Log component names
COMPONENT_CLI = "cli"
COMPONENT_CONFIG = "config"
COMPONENT_EXPORTER = "exporter"
COMPONENT_PUPPETDB = "puppetdb"

# Supported URL schemes
VALID_URL_SCHEMES = ("http://", "https://")

MAX_PORT = 65535
