"""
`mbucket info ...`: show HTTP headers for a bucket or bucket object.
"""

import json
from typing import Dict, TextIO

from mbucket.target import StorageUri
from mbucket.transport import ResponseEnvelope


def format_info(headers: Dict[str, str]) -> str:
    """One "name: value" line per header, in the order they were received"""
    return ''.join(f"{name}: {value}\n" for name, value in headers.items())


def format_info_json(res: ResponseEnvelope) -> str:
    output = {
        'status_code': res.status_code,
        'reason': res.reason,
        'headers': dict(res.headers),
    }
    return json.dumps(output, indent=2) + '\n'


def run_info(client, uri: StorageUri, out: TextIO, as_json: bool = False) -> ResponseEnvelope:
    if uri.object:
        res = client.head_bucket_object(uri.bucket, uri.object)
    else:
        res = client.head_bucket(uri.bucket)

    if as_json:
        out.write(format_info_json(res))
    else:
        out.write(format_info(res.headers))
    out.flush()
    return res
