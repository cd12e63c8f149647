import dataclasses

import pytest

from mbucket.client import BucketClient
from mbucket.errors import RequestFailedError, UsageError
from mbucket.signing import SigV4Signer
from mbucket.transport import HttpTransport
from tests.conftest import FakeSigner, FakeTransport, envelope


def test_path_expands_account_home(config):
    client = BucketClient(config, transport=FakeTransport(), signer=FakeSigner())
    assert client.path('~~/buckets') == '/acct/buckets'
    assert client.path('buckets') == '/buckets'
    assert client.path('/') == '/'


def test_account_home_needs_an_account(config):
    client = BucketClient(dataclasses.replace(config, account=None),
                          transport=FakeTransport(), signer=FakeSigner())
    with pytest.raises(UsageError, match='--account'):
        client.path('~~/buckets')
    assert client.path('/buckets') == '/buckets'


def test_path_prefixes_service_base_path(config):
    client = BucketClient(dataclasses.replace(config, url='https://gw.test/storage/'),
                          transport=FakeTransport(), signer=FakeSigner())
    assert client.path('~~/b') == '/storage/acct/b'
    assert client.object_path('my bucket', 'dir/a b.txt') == '/storage/my%20bucket/dir/a%20b.txt'


def test_default_collaborators(config):
    client = BucketClient(config)
    assert isinstance(client.transport, HttpTransport)
    assert isinstance(client.signer, SigV4Signer)
    assert client.signer.host == 'storage.test'


def test_head_bucket_object_signs_and_sends_head(config):
    transport = FakeTransport(envelope(200, headers={'Content-Length': '3'}))
    signer = FakeSigner()
    client = BucketClient(config, transport=transport, signer=signer)

    res = client.head_bucket_object('mybucket', 'foo.txt')

    assert res.headers == {'Content-Length': '3'}
    assert signer.calls[0].method == 'HEAD'
    assert transport.sent[0].path == '/mybucket/foo.txt'
    assert transport.sent[0].headers == {'Authorization': 'signed'}


def test_head_bucket_error_status(config):
    client = BucketClient(config, transport=FakeTransport(envelope(404)), signer=FakeSigner())
    with pytest.raises(RequestFailedError) as excinfo:
        client.head_bucket('missing')
    assert excinfo.value.status_code == 404
    assert str(excinfo.value) == 'HEAD /missing failed: 404 Not Found'
