import io

import pytest
import requests
from requests.adapters import BaseAdapter
from requests.structures import CaseInsensitiveDict

from mbucket.config import Config
from mbucket.transport import ResponseEnvelope


class FakeTransport:
    """Records sent specs and answers with canned envelopes"""

    def __init__(self, *envelopes, error=None):
        self.envelopes = list(envelopes)
        self.error = error
        self.sent = []

    def send(self, spec):
        self.sent.append(spec)
        if self.error is not None:
            raise self.error
        return self.envelopes.pop(0)


class FakeSigner:
    def __init__(self, error=None):
        self.error = error
        self.calls = []

    def sign(self, spec):
        self.calls.append(spec)
        if self.error is not None:
            raise self.error
        return spec.with_headers({'Authorization': 'signed'})


class ChunkedRaw:
    """Stand-in for urllib3's raw response that hands out fixed chunks"""

    def __init__(self, chunks):
        self.chunks = list(chunks)

    def read(self, amt=None, **kwargs):
        if not self.chunks:
            return b''
        return self.chunks.pop(0)

    def read1(self, amt=None, **kwargs):
        return self.read(amt, **kwargs)

    def close(self):
        pass


class StubAdapter(BaseAdapter):
    """In-process adapter so a real requests.Session never hits the network"""

    def __init__(self, status=200, headers=None, body=b'', chunks=None, reason='', error=None):
        super().__init__()
        self.status = status
        self.headers = headers or {}
        self.body = body
        self.chunks = chunks
        self.reason = reason
        self.error = error
        self.requests = []

    def send(self, request, **kwargs):
        self.requests.append(request)
        if self.error is not None:
            raise self.error
        resp = requests.Response()
        resp.status_code = self.status
        resp.reason = self.reason
        resp.headers = CaseInsensitiveDict(self.headers)
        resp.raw = ChunkedRaw(self.chunks) if self.chunks is not None else io.BytesIO(self.body)
        resp.url = request.url
        resp.request = request
        return resp

    def close(self):
        pass


def envelope(status=200, headers=None, body=None, reason=None, version='1.1'):
    reasons = {200: 'OK', 204: 'No Content', 404: 'Not Found', 500: 'Internal Server Error'}
    return ResponseEnvelope(
        http_version=version,
        status_code=status,
        reason=reason or reasons.get(status, ''),
        headers=dict(headers or {}),
        body=body,
    )


@pytest.fixture
def config():
    return Config(url='http://storage.test', account='acct', key_id='AKID', secret_key='secret')


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ('MBUCKET_URL', 'MBUCKET_ACCOUNT', 'MBUCKET_KEY_ID',
                 'MBUCKET_SECRET_KEY', 'MBUCKET_REGION'):
        monkeypatch.delenv(name, raising=False)
