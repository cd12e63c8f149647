"""
Building the request to send from command line flags.
"""

import dataclasses
from dataclasses import dataclass, field
from typing import Dict, Iterable, Optional, Tuple

from mbucket.errors import MalformedHeaderError, UnknownMethodError
from mbucket.target import RequestTarget

METHODS = ('GET', 'PUT', 'POST', 'HEAD', 'OPTIONS', 'DELETE')


@dataclass(frozen=True)
class RequestSpec:
    method: str
    path: str
    headers: Dict[str, str] = field(default_factory=dict)
    body: Optional[bytes] = None

    def with_headers(self, extra: Dict[str, str]) -> 'RequestSpec':
        """Return a copy with `extra` appended after the existing headers"""
        headers = dict(self.headers)
        headers.update(extra)
        return dataclasses.replace(self, headers=headers)


def resolve_method(method: Optional[str], data: Optional[str]) -> str:
    """An explicit method wins, otherwise PUT when there is data, else GET"""
    if method:
        resolved = method.upper()
    elif data:
        resolved = 'PUT'
    else:
        resolved = 'GET'
    if resolved not in METHODS:
        raise UnknownMethodError(f'unknown HTTP method: "{method}"')
    return resolved


def parse_header(raw: str) -> Tuple[str, str]:
    name, sep, value = raw.partition(':')
    if not sep:
        raise MalformedHeaderError(f'failed to parse header: "{raw}"')
    return name, value.lstrip()


def build(method: Optional[str], headers: Iterable[str], data: Optional[str],
          target: RequestTarget) -> RequestSpec:
    """
    Assemble a RequestSpec from the `raw` flags and a resolved target.

    `data` is sent verbatim (UTF-8), no form encoding is applied.
    """
    resolved = resolve_method(method, data)
    parsed_headers: Dict[str, str] = {}
    for raw in headers or ():
        name, value = parse_header(raw)
        parsed_headers[name] = value
    body = data.encode('utf-8') if data else None
    return RequestSpec(
        method=resolved,
        path=target.request_path,
        headers=parsed_headers,
        body=body,
    )
