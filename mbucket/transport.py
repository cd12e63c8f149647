"""
HTTP transport: sends a signed RequestSpec with `requests` and hands back a
ResponseEnvelope.

Retries and connection pooling live here (urllib3 Retry on the session
adapter), never in the commands.

For error statuses (>= 400) the body is read up front and, like most API
clients, parsed as JSON when possible. The bytes printed for an error
response are therefore not guaranteed to be exactly what the server sent.
"""

import json
import logging
from dataclasses import dataclass
from http import HTTPStatus
from typing import Any, Dict, Iterator, Optional, Union
from urllib.parse import urlsplit

import requests
from requests.adapters import HTTPAdapter
from urllib3.exceptions import HTTPError
from urllib3.util.retry import Retry

from mbucket import __version__
from mbucket.errors import TransportError
from mbucket.logs import timing_decorator
from mbucket.request import RequestSpec

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class StructuredBody:
    """Error body the transport already decoded from JSON"""
    value: Any


@dataclass(frozen=True)
class RawBody:
    data: bytes


ErrorBody = Union[StructuredBody, RawBody]


@dataclass
class ResponseEnvelope:
    http_version: str
    status_code: int
    reason: str
    headers: Dict[str, str]
    # Iterator of raw chunks on success, pre-read ErrorBody for status >= 400,
    # None for HEAD or an empty error body.
    body: Union[Iterator[bytes], ErrorBody, None] = None

    @property
    def is_error(self) -> bool:
        return self.status_code >= 400


def create_session(max_retries: int = 3) -> requests.Session:
    """Create a requests session with retry logic and connection pooling"""
    session = requests.Session()
    retry_strategy = Retry(
        total=max_retries,
        backoff_factor=1,
        status_forcelist=[429, 500, 502, 503, 504],
        allowed_methods=["HEAD", "GET", "PUT", "POST", "DELETE", "OPTIONS"],
        raise_on_status=False,
    )
    adapter = HTTPAdapter(
        max_retries=retry_strategy,
        pool_connections=10,
        pool_maxsize=20
    )
    session.mount("http://", adapter)
    session.mount("https://", adapter)
    session.headers['User-Agent'] = f"mbucket/{__version__}"
    return session


def http_version_string(version: Optional[int]) -> str:
    """Turn urllib3's numeric version (10, 11, 20) into "1.0", "1.1", "2.0" """
    if not version:
        return '1.1'
    return f"{version // 10}.{version % 10}"


def reason_phrase(status_code: int, reason: Optional[str]) -> str:
    if reason:
        return reason
    try:
        return HTTPStatus(status_code).phrase
    except ValueError:
        return ''


def decode_error_body(content: bytes) -> Optional[ErrorBody]:
    if not content:
        return None
    try:
        return StructuredBody(json.loads(content))
    except ValueError:
        return RawBody(content)


def _iter_body(resp: requests.Response) -> Iterator[bytes]:
    # read1 hands back whatever has arrived; read(n) would wait for n bytes
    try:
        while True:
            chunk = resp.raw.read1(decode_content=True)
            if not chunk:
                break
            yield chunk
    except (requests.RequestException, HTTPError) as e:
        raise TransportError(str(e)) from e
    finally:
        resp.close()


class HttpTransport:
    def __init__(self, endpoint: str, session: Optional[requests.Session] = None,
                 timeout: int = 30, max_retries: int = 3):
        parts = urlsplit(endpoint)
        self.origin = f"{parts.scheme}://{parts.netloc}"
        self.session = session if session is not None else create_session(max_retries=max_retries)
        self.timeout = timeout

    @timing_decorator
    def send(self, spec: RequestSpec) -> ResponseEnvelope:
        url = self.origin + spec.path
        log.debug("Sending %s %s", spec.method, url)
        try:
            resp = self.session.request(
                spec.method,
                url,
                headers=spec.headers,
                data=spec.body,
                stream=True,
                timeout=self.timeout,
                allow_redirects=False,
            )
        except requests.RequestException as e:
            raise TransportError(str(e)) from e

        envelope = ResponseEnvelope(
            http_version=http_version_string(getattr(resp.raw, 'version', None)),
            status_code=resp.status_code,
            reason=reason_phrase(resp.status_code, resp.reason),
            headers=dict(resp.headers.items()),
        )
        log.debug("Received %d %s", envelope.status_code, envelope.reason)

        if spec.method == 'HEAD':
            resp.close()
        elif envelope.is_error:
            try:
                content = resp.content
            except requests.RequestException as e:
                raise TransportError(str(e)) from e
            finally:
                resp.close()
            envelope.body = decode_error_body(content)
        else:
            envelope.body = _iter_body(resp)
        return envelope
