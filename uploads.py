"""Request glue around the policy signer: validation, object keys, envelopes"""

import hmac
import logging
import uuid

from errors import ClientAccessDenied, InvalidParameters
from post_policy import signature

logger = logging.getLogger(__name__)

SUCCESS_MESSAGE = 'Request succeed'
ACCESS_DENIED_MESSAGE = 'Client access is denied due to wrong access key'


def get_content_type(params):
    return params.get('Content-Type') or params.get('contentType')


def required_params(config):
    names = ['Content-Type', 'fileExtension']
    if config.client_access_key:
        names.insert(1, 'clientAccessKey')
    return names


def check_client_access_key(params, config):
    """Raise ClientAccessDenied unless the request carries the configured key"""
    if not config.client_access_key:
        return
    provided = params.get('clientAccessKey') or ''
    if not hmac.compare_digest(provided.encode('utf-8'), config.client_access_key.encode('utf-8')):
        raise ClientAccessDenied(ACCESS_DENIED_MESSAGE)


def validate_params(params, config):
    """Check the query parameters of a signing request

    Raises:
        InvalidParameters: a required parameter is missing or malformed
    """
    if not params:
        raise InvalidParameters('Parameters are required')

    for name in required_params(config):
        value = get_content_type(params) if name == 'Content-Type' else params.get(name)
        if not value:
            raise InvalidParameters(f"{name} is required")

    content_type = get_content_type(params)
    if config.content_type_prefix and not content_type.startswith(config.content_type_prefix):
        raise InvalidParameters(
            f"Content-Type must start with {config.content_type_prefix!r}"
        )
    if '/' in params['fileExtension']:
        raise InvalidParameters('fileExtension must not contain "/"')


def generate_filename(file_extension):
    if not file_extension.startswith('.'):
        file_extension = '.' + file_extension
    return f"{uuid.uuid1()}{file_extension}"


def authorize_request(params, config):
    """Run every check a signing request must pass, in the order the handler reports them

    Raises:
        SigningError: the first failed check
    """
    config.validate()
    validate_params(params, config)
    check_client_access_key(params, config)


def sign_upload(params, config):
    """Validate a parameter bag and return the signed POST form for a new object key"""
    authorize_request(params, config)

    filename = generate_filename(params['fileExtension'])
    signed = signature(filename, get_content_type(params), config)
    logger.info("Issued upload policy for %s", filename)
    return signed


def status_code_for(exc):
    if isinstance(exc, ClientAccessDenied):
        return 403
    if isinstance(exc, InvalidParameters):
        return 400
    return 500


def envelope(message, params=None):
    return {'message': message, 'params': params}
