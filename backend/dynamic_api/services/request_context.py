"""Request Context — the slice of an HTTP request the binder is allowed to see.

Invariants:
    - Query and route lookups are case-insensitive (keys casefolded once, at construction)
    - Repeated query keys are joined with "," into a single raw value, including
      keys that differ only in case (Age=1&age=2 → "1,2")
    - The body stream is consumed at most once, by the binder
    - content_length is None when the header is absent or not an integer
"""

from collections.abc import AsyncIterator, Mapping
from dataclasses import dataclass, field
from typing import Any

from starlette.requests import Request


async def _no_body() -> AsyncIterator[bytes]:
    return
    yield b""


@dataclass(frozen=True)
class RequestContext:
    """Transport-neutral request input consumed by the parameter binder."""
    query: Mapping[str, str] = field(default_factory=dict)
    route_values: Mapping[str, Any] = field(default_factory=dict)
    content_length: int | None = None
    content_type: str | None = None
    body: AsyncIterator[bytes] = field(default_factory=_no_body)
    path: str | None = None

    def __post_init__(self):
        object.__setattr__(self, "query", _fold_query(self.query))
        object.__setattr__(
            self, "route_values",
            {k.casefold(): v for k, v in self.route_values.items()},
        )

    def query_value(self, name: str) -> str | None:
        return self.query.get(name.casefold())

    def route_value(self, name: str) -> Any:
        return self.route_values.get(name.casefold())

    @property
    def is_json(self) -> bool:
        return "application/json" in (self.content_type or "").lower()

    @classmethod
    def from_request(cls, request: Request) -> "RequestContext":
        params = request.query_params
        return cls(
            query={key: ",".join(params.getlist(key)) for key in params.keys()},
            route_values=dict(request.path_params),
            content_length=_parse_content_length(request.headers.get("content-length")),
            content_type=request.headers.get("content-type"),
            body=request.stream(),
            path=request.url.path,
        )


def _fold_query(query: Mapping[str, str]) -> dict[str, str]:
    folded: dict[str, str] = {}
    for key, value in query.items():
        key = key.casefold()
        folded[key] = f"{folded[key]},{value}" if key in folded else value
    return folded


def _parse_content_length(header: str | None) -> int | None:
    if header is None:
        return None
    try:
        return int(header)
    except ValueError:
        return None
