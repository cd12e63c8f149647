"""
Request targets: service-relative paths for `raw` and storage URIs for `info`.
"""

from dataclasses import dataclass
from typing import Callable, Optional
from urllib.parse import urlsplit

from mbucket.errors import InvalidTargetError, StorageUriError

URI_SCHEME = 's3'


@dataclass(frozen=True)
class RequestTarget:
    path: str
    query: str = ''

    @property
    def request_path(self) -> str:
        if self.query:
            return f"{self.path}?{self.query}"
        return self.path


def resolve(raw_path: str, path_func: Callable[[str], str]) -> RequestTarget:
    """
    Parse a user supplied PATH into a physical request path and query string.

    `path_func` maps the logical path onto the API path (see BucketClient.path).
    Fully-qualified URLs are rejected: the API only accepts paths within the
    configured service.
    """
    parsed = urlsplit(raw_path)
    if parsed.scheme:
        raise InvalidTargetError(f'given PATH should not have a scheme: "{parsed.scheme}"')
    if parsed.hostname:
        raise InvalidTargetError(f'given PATH should not have a host: "{parsed.hostname}"')
    if parsed.netloc:
        # Only a port (or userinfo) is left, e.g. "//:8080/foo"
        raise InvalidTargetError(f'given PATH should not have a port: "{parsed.netloc}"')
    return RequestTarget(path=path_func(parsed.path), query=parsed.query)


@dataclass(frozen=True)
class StorageUri:
    bucket: str
    object: Optional[str] = None

    @classmethod
    def parse(cls, text: str) -> 'StorageUri':
        """Parse "s3:BUCKET[/OBJECT]" (or "s3://BUCKET[/OBJECT]")"""
        scheme, sep, rest = text.partition(':')
        if not sep or scheme != URI_SCHEME:
            raise StorageUriError(
                f'invalid storage URI "{text}": expected "{URI_SCHEME}:BUCKET[/OBJECT]"')
        if rest.startswith('//'):
            rest = rest[2:]
        bucket, _, obj = rest.partition('/')
        if not bucket:
            raise StorageUriError(f'invalid storage URI "{text}": missing bucket name')
        return cls(bucket=bucket, object=obj or None)

    def __str__(self) -> str:
        if self.object:
            return f"{URI_SCHEME}:{self.bucket}/{self.object}"
        return f"{URI_SCHEME}:{self.bucket}"
