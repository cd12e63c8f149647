"""
BucketClient groups what the commands need from the service: mapping logical
paths onto API paths, signing, sending, and the bucket/object HEAD calls.
"""

import logging
from urllib.parse import quote, urlsplit

from mbucket.config import Config
from mbucket.errors import RequestFailedError, UsageError
from mbucket.request import RequestSpec
from mbucket.signing import SigV4Signer
from mbucket.transport import HttpTransport, ResponseEnvelope

log = logging.getLogger(__name__)


class BucketClient:
    def __init__(self, config: Config, transport=None, signer=None):
        self.config = config
        self.base_path = urlsplit(config.url).path.rstrip('/')
        self.transport = transport or HttpTransport(
            config.url, timeout=config.timeout, max_retries=config.retries)
        self.signer = signer or SigV4Signer(
            config.url, config.key_id, config.secret_key, region=config.region)

    def path(self, logical: str) -> str:
        """
        Map a logical path onto the physical API path.

        A leading "~~" stands for the account home ("/<account>"), and the
        base path of the service URL (if any) is prepended.
        """
        p = logical
        if p.startswith('~~'):
            if not self.config.account:
                raise UsageError(f'"~~" in "{logical}" needs an account: use --account or MBUCKET_ACCOUNT')
            p = '/' + self.config.account + p[2:]
        if not p.startswith('/'):
            p = '/' + p
        return self.base_path + p

    def bucket_path(self, bucket: str) -> str:
        return self.path('/' + quote(bucket, safe=''))

    def object_path(self, bucket: str, obj: str) -> str:
        return self.path('/' + quote(bucket, safe='') + '/' + quote(obj, safe='/~'))

    def sign(self, spec: RequestSpec) -> RequestSpec:
        return self.signer.sign(spec)

    def send(self, spec: RequestSpec) -> ResponseEnvelope:
        return self.transport.send(spec)

    def _head(self, path: str) -> ResponseEnvelope:
        signed = self.sign(RequestSpec(method='HEAD', path=path))
        res = self.send(signed)
        if res.is_error:
            raise RequestFailedError(res.status_code, res.reason, path)
        return res

    def head_bucket(self, bucket: str) -> ResponseEnvelope:
        log.debug("HEAD bucket %s", bucket)
        return self._head(self.bucket_path(bucket))

    def head_bucket_object(self, bucket: str, obj: str) -> ResponseEnvelope:
        log.debug("HEAD object %s/%s", bucket, obj)
        return self._head(self.object_path(bucket, obj))
