"""
`mbucket raw ...`: a curl-like raw request to the storage API.

Some notes/limitations:
- When the response status is >= 400 the transport has already read and
  (when it is JSON) parsed the error body, so the printed body may not be
  byte-for-byte what the server sent.
- A response status >= 400 is reported, not treated as a failure: the
  command still succeeds.
- Body chunks are shown as UTF-8 text. Nothing looks at "Content-Type".
"""

import codecs
import enum
import json
import logging
from typing import List, Optional, Sequence, TextIO

from mbucket import target
from mbucket.request import RequestSpec, build
from mbucket.transport import RawBody, ResponseEnvelope, StructuredBody

log = logging.getLogger(__name__)


class State(enum.Enum):
    BUILDING = 'building'
    SIGNED = 'signed'
    DISPATCHED = 'dispatched'
    HEADERS_RECEIVED = 'headers_received'
    STREAMING_BODY = 'streaming_body'
    ERROR_BODY = 'error_body'
    NO_BODY = 'no_body'
    DONE = 'done'


def format_request_head(spec: RequestSpec) -> List[str]:
    lines = [f"{spec.method} {spec.path} HTTP/1.1"]
    lines.extend(f"{name}: {value}" for name, value in spec.headers.items())
    lines.append('')
    return lines


def format_response_head(res: ResponseEnvelope) -> List[str]:
    """Status line, one line per header and a blank line"""
    lines = [f"HTTP/{res.http_version} {res.status_code} {res.reason}"]
    lines.extend(f"{name}: {value}" for name, value in res.headers.items())
    lines.append('')
    return lines


def _prefixed(prefix: str, line: str) -> str:
    return f"{prefix} {line}" if line else prefix


class RawRequest:
    def __init__(self, client, out: TextIO, trace: TextIO,
                 verbose: bool = False, include: bool = False):
        self.client = client
        self.out = out
        self.trace = trace
        self.verbose = verbose
        self.include = include
        self.state = State.BUILDING
        self.response: Optional[ResponseEnvelope] = None

    def run(self, spec: RequestSpec) -> ResponseEnvelope:
        signed = self.client.sign(spec)
        self.state = State.SIGNED

        if self.verbose:
            self._trace_request(signed)

        self.state = State.DISPATCHED
        res = self.client.send(signed)
        self.response = res
        self.state = State.HEADERS_RECEIVED
        self._write_response_head(signed.method, res)

        if signed.method == 'HEAD':
            self.state = State.NO_BODY
        elif res.is_error:
            self.state = State.ERROR_BODY
            self._write_error_body(res)
        else:
            self.state = State.STREAMING_BODY
            self._stream_body(res)

        self.state = State.DONE
        return res

    def _trace_request(self, spec: RequestSpec) -> None:
        for line in format_request_head(spec):
            self.trace.write(_prefixed('>', line) + '\n')
        if spec.body:
            for line in spec.body.decode('utf-8', errors='replace').split('\n'):
                self.trace.write(_prefixed('>', line) + '\n')
        self.trace.flush()

    def _write_response_head(self, method: str, res: ResponseEnvelope) -> None:
        lines = format_response_head(res)
        if self.verbose:
            for line in lines:
                self.trace.write(_prefixed('<', line) + '\n')
            self.trace.flush()
        # HEAD has no body, so the headers are the output
        if self.include or method == 'HEAD':
            for line in lines:
                self.out.write(line + '\n')
            self.out.flush()

    def _write_error_body(self, res: ResponseEnvelope) -> None:
        body = res.body
        if isinstance(body, StructuredBody):
            self.out.write(json.dumps(body.value, separators=(',', ':'), ensure_ascii=False) + '\n')
        elif isinstance(body, RawBody):
            buffer = getattr(self.out, 'buffer', None)
            if buffer is not None:
                self.out.flush()
                buffer.write(body.data)
                buffer.flush()
                return
            self.out.write(body.data.decode('utf-8', errors='replace'))
        self.out.flush()

    def _stream_body(self, res: ResponseEnvelope) -> None:
        decoder = codecs.getincrementaldecoder('utf-8')(errors='replace')
        for chunk in res.body or ():
            text = decoder.decode(chunk)
            if text:
                self.out.write(text)
                self.out.flush()
        tail = decoder.decode(b'', final=True)
        if tail:
            self.out.write(tail)
        self.out.flush()


def do_raw(client, path: str, out: TextIO, trace: TextIO, method: Optional[str] = None,
           headers: Sequence[str] = (), data: Optional[str] = None,
           verbose: bool = False, include: bool = False) -> ResponseEnvelope:
    """Resolve PATH, build the request from the flags and run it"""
    req_target = target.resolve(path, client.path)
    spec = build(method, headers, data, req_target)
    log.debug("raw request: %s %s", spec.method, spec.path)
    return RawRequest(client, out, trace, verbose=verbose, include=include).run(spec)
