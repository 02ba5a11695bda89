"""Signer configuration loaded once from the environment"""

import os
import re
from dataclasses import dataclass, replace
from datetime import datetime

from errors import ConfigurationMissing, InvalidConfiguration

AMZ_ALGORITHM = 'AWS4-HMAC-SHA256'
AMZ_DATE_FORMAT = '%Y%m%dT%H%M%SZ'
AMZ_DATE_PATTERN = re.compile(r'\d{8}T\d{6}Z')

REQUIRED_FIELDS = ('access_key', 'secret_key', 'bucket', 'region')


def _get_env(name):
    value = os.getenv(name)
    if value is None:
        return None
    return value.strip() or None


def is_amz_date(value):
    # strptime alone accepts single digit fields, e.g. 2024111T000000Z
    if not AMZ_DATE_PATTERN.fullmatch(value):
        return False
    try:
        datetime.strptime(value, AMZ_DATE_FORMAT)
    except ValueError:
        return False
    return True


def _get_int(name, default):
    value = _get_env(name)
    if value is None:
        return default
    try:
        return int(value)
    except ValueError:
        raise InvalidConfiguration(f"{name} must be an integer, got {value!r}") from None


@dataclass(frozen=True)
class SignerConfig:
    access_key: str | None = None
    secret_key: str | None = None
    bucket: str | None = None
    region: str | None = None
    algorithm: str = AMZ_ALGORITHM
    min_size: int = 0
    max_size: int = 15000000
    acl: str = 'public-read'
    success_url: str | None = None
    content_type_prefix: str | None = None
    # Fixed x-amz-date; when unset every signing call uses the current time
    date: str | None = None
    client_access_key: str | None = None
    storage_domain: str = 's3.amazonaws.com'
    scheme: str = 'https'
    expires_in: int = 300

    @classmethod
    def from_env(cls):
        """Read configuration from S3_* and CLIENT_ACCESS_KEY variables"""
        return cls(
            access_key=_get_env('S3_ACCESS_KEY'),
            secret_key=_get_env('S3_SECRET_KEY'),
            bucket=_get_env('S3_BUCKET'),
            region=_get_env('S3_REGION'),
            min_size=_get_int('S3_MIN_SIZE', 0),
            max_size=_get_int('S3_MAX_SIZE', 15000000),
            acl=_get_env('S3_ACL') or 'public-read',
            success_url=_get_env('S3_SUCCESS_URL'),
            content_type_prefix=_get_env('S3_CONTENT_TYPE_PREFIX'),
            client_access_key=_get_env('CLIENT_ACCESS_KEY'),
            storage_domain=_get_env('S3_DOMAIN') or 's3.amazonaws.com',
            scheme=_get_env('S3_SCHEME') or 'https',
        )

    @property
    def endpoint_url(self):
        return f"{self.scheme}://{self.bucket}.{self.storage_domain}/"

    def with_date(self, amz_date):
        return replace(self, date=amz_date)

    def validate(self):
        """Fail fast on configuration that would produce an unusable signature

        Raises:
            ConfigurationMissing: a required credential or bucket field is unset
            InvalidConfiguration: a value is present but malformed
        """
        missing = [name for name in REQUIRED_FIELDS if not getattr(self, name)]
        if missing:
            raise ConfigurationMissing(missing)

        if self.date is not None and not is_amz_date(self.date):
            raise InvalidConfiguration(
                f"date must be in YYYYMMDDTHHMMSSZ format, got {self.date!r}"
            )

        if self.min_size < 0 or self.max_size < self.min_size:
            raise InvalidConfiguration(
                f"Invalid content length range [{self.min_size}, {self.max_size}]"
            )
        if self.expires_in <= 0:
            raise InvalidConfiguration("expires_in must be positive")
        return self
