import io
import json

from mbucket.info import format_info, run_info
from mbucket.target import StorageUri
from tests.conftest import envelope


class HeadClient:
    def __init__(self, res):
        self.res = res
        self.calls = []

    def head_bucket(self, bucket):
        self.calls.append(('bucket', bucket))
        return self.res

    def head_bucket_object(self, bucket, obj):
        self.calls.append(('object', bucket, obj))
        return self.res


def test_format_info_keeps_order():
    assert format_info({'Last-Modified': 'Mon', 'Content-Length': '3'}) == \
        'Last-Modified: Mon\nContent-Length: 3\n'


def test_object_uri_heads_object():
    client = HeadClient(envelope(200, headers={'Etag': '"x"', 'Content-Type': 'text/plain'}))
    out = io.StringIO()
    run_info(client, StorageUri.parse('s3:mybucket/foo.txt'), out)
    assert client.calls == [('object', 'mybucket', 'foo.txt')]
    assert out.getvalue() == 'Etag: "x"\nContent-Type: text/plain\n'


def test_bucket_uri_heads_bucket():
    client = HeadClient(envelope(200, headers={'Server': 'storage'}))
    out = io.StringIO()
    run_info(client, StorageUri.parse('s3:mybucket'), out)
    assert client.calls == [('bucket', 'mybucket')]


def test_json_output():
    client = HeadClient(envelope(200, headers={'Server': 'storage'}))
    out = io.StringIO()
    run_info(client, StorageUri('b'), out, as_json=True)
    assert json.loads(out.getvalue()) == {
        'status_code': 200,
        'reason': 'OK',
        'headers': {'Server': 'storage'},
    }
