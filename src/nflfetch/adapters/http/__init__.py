"""HTTP transport adapters."""

from nflfetch.adapters.http.client import (
    FetchClient,
    format_http_date,
    parse_response_metadata,
)


__all__ = ["FetchClient", "format_http_date", "parse_response_metadata"]
