"""Helper functions for AWS Signature V4 POST policy signing"""

import hashlib
import hmac

SERVICE = 's3'
TERMINATOR = 'aws4_request'


def date_stamp(amz_date):
    """Return the YYYYMMDD date portion of an AWS date

    Args:
        amz_date: Date in YYYYMMDDTHHMMSSZ format (extended ISO dates with
            '-' separators are accepted as well)

    Returns:
        8 digit date string
    """
    return amz_date.split('T')[0].replace('-', '')


def credential_scope(access_key, amz_date, region):
    """Build the x-amz-credential value: <key>/<date>/<region>/s3/aws4_request"""
    return '/'.join([access_key, date_stamp(amz_date), region, SERVICE, TERMINATOR])


def sign(key, msg):
    return hmac.new(key, msg.encode('utf-8'), hashlib.sha256).digest()


def derive_signing_key(secret_key, datestamp, region):
    """Derive the SigV4 signing key for the s3 service

    Args:
        secret_key: AWS secret key
        datestamp: Date in YYYYMMDD format
        region: AWS region

    Returns:
        Raw signing key bytes
    """
    kDate = sign(('AWS4' + secret_key).encode('utf-8'), datestamp)
    kRegion = sign(kDate, region)
    kService = sign(kRegion, SERVICE)
    return sign(kService, TERMINATOR)


def calculate_policy_signature(secret_key, amz_date, region, string_to_sign):
    """Calculate AWS Signature V4 for a base64 encoded POST policy

    Args:
        secret_key: AWS secret key
        amz_date: Date in YYYYMMDDTHHMMSSZ format, same value as in the
            credential scope
        region: AWS region
        string_to_sign: Base64 encoded policy document

    Returns:
        Hex-encoded signature string
    """
    signing_key = derive_signing_key(secret_key, date_stamp(amz_date), region)
    return hmac.new(signing_key, string_to_sign.encode('utf-8'), hashlib.sha256).hexdigest()
