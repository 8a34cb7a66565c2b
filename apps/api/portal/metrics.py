from __future__ import annotations

import re

from prometheus_client import CONTENT_TYPE_LATEST, Counter, Histogram, generate_latest
from starlette.requests import Request


http_requests_total = Counter(
    "http_requests_total",
    "Total HTTP requests",
    ["method", "path", "status"],
)

http_request_duration_seconds = Histogram(
    "http_request_duration_seconds",
    "HTTP request duration in seconds",
    ["method", "path"],
)

login_attempts_total = Counter(
    "login_attempts_total",
    "Login attempts by outcome",
    ["outcome"],
)

token_verifications_total = Counter(
    "token_verifications_total",
    "Bearer token verifications by outcome",
    ["outcome"],
)

navigation_decisions_total = Counter(
    "navigation_decisions_total",
    "Navigation authorization decisions by role type, listing kind and decision",
    ["role_type", "kind", "decision"],
)

company_switches_total = Counter(
    "company_switches_total",
    "Company switch requests by outcome",
    ["outcome"],
)

rate_limited_requests_total = Counter(
    "rate_limited_requests_total",
    "Requests rejected by the rate limiter",
    ["route_group"],
)


_INT_RE = re.compile(r"/\d+\b")


def _sanitize_path(path: str) -> str:
    return _INT_RE.sub("/{id}", path)


def resolve_http_path_label(request: Request) -> str:
    route = request.scope.get("route")
    if route is not None:
        path_format = getattr(route, "path_format", None)
        if isinstance(path_format, str) and path_format:
            return path_format
        route_path = getattr(route, "path", None)
        if isinstance(route_path, str) and route_path:
            return route_path
    return _sanitize_path(request.url.path)


def observe_http_request(method: str, path: str, status: int, duration: float) -> None:
    status_str = str(status)
    http_requests_total.labels(method=method, path=path, status=status_str).inc()
    http_request_duration_seconds.labels(method=method, path=path).observe(duration)


def observe_login_attempt(outcome: str) -> None:
    login_attempts_total.labels(outcome=outcome).inc()


def observe_token_verification(outcome: str) -> None:
    token_verifications_total.labels(outcome=outcome).inc()


def observe_navigation_decision(role_type: str, kind: str, decision: str) -> None:
    navigation_decisions_total.labels(role_type=role_type, kind=kind, decision=decision).inc()


def observe_company_switch(outcome: str) -> None:
    company_switches_total.labels(outcome=outcome).inc()


def observe_rate_limited(route_group: str) -> None:
    rate_limited_requests_total.labels(route_group=route_group).inc()


def generate_metrics_payload() -> bytes:
    return generate_latest()


def metrics_content_type() -> str:
    return CONTENT_TYPE_LATEST
