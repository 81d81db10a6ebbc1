"""Centralized constants for all modules."""

# DNS
DEFAULT_RESOLVER = "8.8.8.8:53"
DEFAULT_DNS_PORT = 53
DEFAULT_DNS_TIMEOUT = 5.0  # seconds

# Cache
DEFAULT_REFRESH = 15 * 60  # seconds

# HTTP
DEFAULT_HTTP_ADDR = ":8080"
DEFAULT_DOC_URL = "https://pkg.go.dev/"
SERVER_NAME = "govanity"
GO_GET_PARAM = "go-get"
HTML_CONTENT_TYPE = "text/html"

# Diagnostics
DEBUG_REQUESTS_PATH = "/debug/requests"
DEBUG_METRICS_PATH = "/debug/metrics"
