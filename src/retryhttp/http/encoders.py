"""Pure request builders: URL + parameters + headers -> ``httpx.Request``."""

import json
from collections.abc import Mapping, Sequence
from typing import Union
from urllib.parse import urlencode

import httpx
from pydantic import BaseModel

from .errors import ConstructionError

JSON_CONTENT_TYPE = "application/json"
FORM_CONTENT_TYPE = "application/x-www-form-urlencoded"

# Ordered multimap accepted for query strings and form bodies
MultiParams = Union[
    httpx.QueryParams,
    Mapping[str, Union[str, Sequence[str]]],
    Sequence[tuple[str, str]],
]
# Record accepted for JSON bodies
JsonParams = Union[Mapping[str, str], BaseModel]
HeaderParams = Union[httpx.Headers, Mapping[str, str], Sequence[tuple[str, str]]]


def parse_url(url: str | httpx.URL) -> httpx.URL:
    """Parse and validate an absolute http(s) URL"""
    try:
        parsed = httpx.URL(url)
    except (httpx.InvalidURL, TypeError) as e:
        raise ConstructionError(f"Invalid URL {url!r}: {e}") from e

    if parsed.scheme not in ("http", "https"):
        raise ConstructionError(f"Invalid URL {url!r}: scheme must be http or https")
    if not parsed.host:
        raise ConstructionError(f"Invalid URL {url!r}: missing host")
    return parsed


def merge_headers(encoder_headers: Mapping[str, str], headers: HeaderParams | None) -> httpx.Headers:
    """Merge caller headers onto encoder headers.

    Caller values are kept verbatim (multi-valued headers included). An
    encoder header survives unless the caller supplies the same name.
    """
    supplied = httpx.Headers(headers or {})
    items = [(key, value) for key, value in encoder_headers.items() if key not in supplied]
    items.extend(supplied.multi_items())
    return httpx.Headers(items)


def _json_payload(params: JsonParams | None) -> dict | None:
    if params is None:
        return None
    if isinstance(params, BaseModel):
        payload = params.model_dump(mode="json")
    else:
        payload = dict(params)
    return payload or None


def _encode_pairs(params: MultiParams | None) -> str:
    """URL-encode parameters as flat key=value pairs in caller order"""
    if not params:
        return ""
    if isinstance(params, httpx.QueryParams):
        pairs = params.multi_items()
    elif isinstance(params, Mapping):
        pairs = []
        for key, value in params.items():
            if isinstance(value, (list, tuple)):
                pairs.extend((key, item) for item in value)
            else:
                pairs.append((key, value))
    else:
        pairs = list(params)
    return urlencode(pairs)


def build_json_request(
    method: str,
    url: str | httpx.URL,
    params: JsonParams | None = None,
    headers: HeaderParams | None = None,
) -> httpx.Request:
    """Build a request with the parameters serialized as a JSON object body.

    Empty or missing parameters produce a request without a body.
    """
    target = parse_url(url)
    payload = _json_payload(params)
    content = json.dumps(payload).encode("utf-8") if payload is not None else None

    return httpx.Request(
        method,
        target,
        headers=merge_headers({"Content-Type": JSON_CONTENT_TYPE}, headers),
        content=content,
    )


def build_form_request(
    method: str,
    url: str | httpx.URL,
    params: MultiParams | None = None,
    headers: HeaderParams | None = None,
) -> httpx.Request:
    """Build a request with the parameters form-encoded into the body"""
    target = parse_url(url)
    body = _encode_pairs(params).encode("ascii")

    return httpx.Request(
        method,
        target,
        headers=merge_headers({"Content-Type": FORM_CONTENT_TYPE}, headers),
        content=body,
    )


def build_query_request(
    url: str | httpx.URL,
    params: MultiParams | None = None,
    headers: HeaderParams | None = None,
    method: str = "GET",
) -> httpx.Request:
    """Build a body-less request with the parameters appended to the query string"""
    target = parse_url(url)
    query = _encode_pairs(params)

    if query:
        existing = target.query.decode("ascii")
        combined = f"{existing}&{query}" if existing else query
        target = target.copy_with(query=combined.encode("ascii"))

    return httpx.Request(method, target, headers=merge_headers({}, headers))
