# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Prometheus metrics — single source of truth for all metric objects.
Imported by services and middleware. Never instantiated in controllers.
"""
from prometheus_client import Counter, Gauge, Histogram

# ── HTTP Metrics (used by middleware) ──
REQUEST_COUNT = Counter(
    "homecell_requests_total",
    "Total HTTP requests to the home-cell service",
    ["method", "endpoint", "status"],
)
REQUEST_LATENCY = Histogram(
    "homecell_request_duration_seconds",
    "Request latency in seconds",
    ["method", "endpoint"],
)
HTTP_ERRORS = Counter(
    "homecell_http_errors_total",
    "Total HTTP error responses",
    ["method", "endpoint", "status"],
)

# ── Business Metrics (updated by service layer only) ──
HIERARCHY_MUTATIONS = Counter(
    "homecell_hierarchy_mutations_total",
    "District / zone / home-cell writes",
    ["entity", "action"],
)
HIERARCHY_SIZE = Gauge(
    "homecell_hierarchy_size",
    "Number of rows per hierarchy level",
    ["level"],
)
MEMBER_ASSIGNMENTS = Counter(
    "homecell_member_assignments_total",
    "Member assignment changes",
    ["action"],
)
UNASSIGNED_MEMBERS = Gauge(
    "homecell_unassigned_members",
    "Members without a home cell",
)
EXPORTS_TOTAL = Counter(
    "homecell_exports_total",
    "Reports exported",
    ["entity", "format"],
)
