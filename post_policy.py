"""Build, encode and sign S3 POST policies for browser uploads"""

import base64
import json
import logging
from datetime import datetime, timedelta, timezone

from config import AMZ_DATE_FORMAT
from signature_helpers import calculate_policy_signature, credential_scope

logger = logging.getLogger(__name__)

SERVER_SIDE_ENCRYPTION = 'AES256'
META_TAG_FIELD = 'x-amz-meta-tag'


def format_expiration(moment):
    """ISO8601 with milliseconds and a Z suffix, e.g. 2024-01-01T00:05:00.000Z"""
    return moment.strftime('%Y-%m-%dT%H:%M:%S.') + f"{moment.microsecond // 1000:03d}Z"


def build_conditions(key, content_type, config, credential, amz_date):
    conditions = [
        {'bucket': config.bucket},
        {'key': key},
        {'acl': config.acl},
    ]
    if config.content_type_prefix:
        conditions.append(['starts-with', '$Content-Type', config.content_type_prefix])
    else:
        conditions.append({'Content-Type': content_type})
    conditions += [
        ['content-length-range', config.min_size, config.max_size],
        {'x-amz-server-side-encryption': SERVER_SIDE_ENCRYPTION},
        ['starts-with', f'${META_TAG_FIELD}', ''],
        {'x-amz-credential': credential},
        {'x-amz-algorithm': config.algorithm},
        {'x-amz-date': amz_date},
    ]
    if config.success_url:
        conditions.append({'success_action_redirect': config.success_url})
    return conditions


def build_policy(key, content_type, config, credential, amz_date, now=None):
    """Policy document valid for config.expires_in seconds from now"""
    now = now or datetime.now(timezone.utc)
    expiration = format_expiration(now + timedelta(seconds=config.expires_in))
    logger.debug("Policy for %s expires at %s", key, expiration)
    return {
        'expiration': expiration,
        'conditions': build_conditions(key, content_type, config, credential, amz_date),
    }


def encode_policy(policy):
    return base64.b64encode(json.dumps(policy, indent='\t').encode('utf-8')).decode('utf-8')


def build_fields(key, content_type, config, credential, amz_date, b64policy):
    fields = {
        'key': key,
        'acl': config.acl,
        'policy': b64policy,
        'Content-Type': content_type,
        'x-amz-server-side-encryption': SERVER_SIDE_ENCRYPTION,
        META_TAG_FIELD: '',
        'x-amz-algorithm': config.algorithm,
        'x-amz-credential': credential,
        'x-amz-date': amz_date,
    }
    if config.success_url:
        fields['success_action_redirect'] = config.success_url
    fields['x-amz-signature'] = calculate_policy_signature(
        config.secret_key, amz_date, config.region, b64policy
    )
    return fields


def signature(key, content_type, config):
    """Generate the endpoint and form fields for a direct browser POST upload

    The returned fields carry the same values as the signed policy
    conditions; S3 rejects the upload if any of them differ.

    Args:
        key: Object key the browser will upload to
        content_type: Declared Content-Type of the file
        config: SignerConfig with credentials, bucket and limits

    Returns:
        dict with 'endpoint_url' and 'params' (the form fields)
    """
    now = datetime.now(timezone.utc)
    amz_date = config.date or now.strftime(AMZ_DATE_FORMAT)
    credential = credential_scope(config.access_key, amz_date, config.region)
    logger.debug("Signing %s with credential scope %s", key, credential)

    policy = build_policy(key, content_type, config, credential, amz_date, now=now)
    b64policy = encode_policy(policy)
    return {
        'endpoint_url': config.endpoint_url,
        'params': build_fields(key, content_type, config, credential, amz_date, b64policy),
    }
