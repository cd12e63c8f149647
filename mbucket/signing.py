"""
AWS Signature Version 4 request signing.

The signer adds `Host`, `x-amz-content-sha256`, `x-amz-date` and
`Authorization` to a RequestSpec. It runs once per request, before dispatch.
"""

import dataclasses
import datetime
import hashlib
import hmac
import logging
import re
from typing import Callable, Dict, Optional
from urllib.parse import parse_qsl, quote, unquote, urlsplit

from mbucket.errors import SigningError
from mbucket.logs import timing_decorator
from mbucket.request import RequestSpec

log = logging.getLogger(__name__)

ALGORITHM = 'AWS4-HMAC-SHA256'


def sha256_hexdigest(data: bytes) -> str:
    """Calculate SHA256 hex digest of data"""
    return hashlib.sha256(data).hexdigest()


def hmac_sha256(key: bytes, msg: str) -> bytes:
    """Calculate HMAC-SHA256"""
    return hmac.new(key, msg.encode('utf-8'), hashlib.sha256).digest()


def get_signature_key(key: str, date_stamp: str, region_name: str, service_name: str) -> bytes:
    """Derive SigV4 signing key for the given date_stamp, region, and service"""
    k_date = hmac_sha256(('AWS4' + key).encode('utf-8'), date_stamp)
    k_region = hmac_sha256(k_date, region_name)
    k_service = hmac_sha256(k_region, service_name)
    k_signing = hmac_sha256(k_service, 'aws4_request')
    return k_signing


def canonical_uri(path: str) -> str:
    return quote(unquote(path or '/'), safe='/~')


def canonical_query(query: str) -> str:
    pairs = []
    for k, v in parse_qsl(query, keep_blank_values=True):
        pairs.append((quote(k, safe='-_.~'), quote(v, safe='-_.~')))
    pairs.sort()
    return '&'.join(f"{k}={v}" for k, v in pairs)


def canonical_headers(headers: Dict[str, str]):
    """Return (canonical header block, signed header names)"""
    header_list = []
    for hdr_name, hdr_val in headers.items():
        lower_name = hdr_name.lower().strip()
        cleaned_val = re.sub(r'\s+', ' ', str(hdr_val).strip())
        header_list.append((lower_name, cleaned_val))
    header_list.sort(key=lambda x: x[0])

    block = ''.join(f"{name}:{val}\n" for name, val in header_list)
    signed_headers = ';'.join(name for name, _ in header_list)
    return block, signed_headers


class SigV4Signer:
    def __init__(self, endpoint: str, access_key: Optional[str], secret_key: Optional[str],
                 region: str = 'us-east-1', service: str = 's3',
                 clock: Optional[Callable[[], datetime.datetime]] = None):
        self.host = urlsplit(endpoint).netloc
        self.access_key = access_key
        self.secret_key = secret_key
        self.region = region
        self.service = service
        self.clock = clock or (lambda: datetime.datetime.now(datetime.timezone.utc))

    @timing_decorator
    def sign(self, spec: RequestSpec) -> RequestSpec:
        """Return `spec` with SigV4 authentication headers added"""
        if not self.access_key or not self.secret_key:
            raise SigningError('cannot sign request: no access key id and secret key configured')

        now_utc = self.clock()
        amz_date = now_utc.strftime('%Y%m%dT%H%M%SZ')
        date_stamp = now_utc.strftime('%Y%m%d')
        payload_hash = sha256_hexdigest(spec.body or b'')

        # A caller supplied Host (any case) replaces the endpoint host
        host = self.host
        headers = {}
        for name, value in spec.headers.items():
            if name.lower() == 'host':
                host = value
            else:
                headers[name] = value
        signed = dataclasses.replace(spec, headers=headers).with_headers({
            'Host': host,
            'x-amz-content-sha256': payload_hash,
            'x-amz-date': amz_date,
        })

        parts = urlsplit(spec.path)
        header_block, signed_headers_str = canonical_headers(signed.headers)
        canonical_request = (
            f"{spec.method}\n"
            f"{canonical_uri(parts.path)}\n"
            f"{canonical_query(parts.query)}\n"
            f"{header_block}\n"
            f"{signed_headers_str}\n"
            f"{payload_hash}"
        )
        log.debug("CanonicalRequest:\n%s", canonical_request)

        credential_scope = f"{date_stamp}/{self.region}/{self.service}/aws4_request"
        string_to_sign = (
            f"{ALGORITHM}\n"
            f"{amz_date}\n"
            f"{credential_scope}\n"
            f"{sha256_hexdigest(canonical_request.encode('utf-8'))}"
        )
        log.debug("StringToSign:\n%s", string_to_sign)

        signing_key = get_signature_key(self.secret_key, date_stamp, self.region, self.service)
        signature = hmac.new(signing_key, string_to_sign.encode('utf-8'), hashlib.sha256).hexdigest()

        auth_val = (
            f"{ALGORITHM} Credential={self.access_key}/{credential_scope}, "
            f"SignedHeaders={signed_headers_str}, "
            f"Signature={signature}"
        )
        return signed.with_headers({'Authorization': auth_val})
