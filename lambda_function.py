# API Gateway proxy entry point. The browser asks this function for a signed
# POST form, then uploads the file straight to the bucket with the returned
# endpoint_url and params.

import json
import logging

from config import SignerConfig
from errors import SigningError
from uploads import envelope, sign_upload, status_code_for, SUCCESS_MESSAGE

logger = logging.getLogger()
if len(logger.handlers) > 0:
    logger.setLevel(logging.INFO)
else:
    logging.basicConfig(level=logging.INFO)

CONFIG = SignerConfig.from_env()


def response(status_code, message, params=None):
    return {
        'statusCode': status_code,
        'headers': {'Content-Type': 'application/json'},
        'body': json.dumps(envelope(message, params)),
    }


def handler(event, context, config=None):
    config = config or CONFIG
    params = (event or {}).get('queryStringParameters') or {}
    try:
        signed = sign_upload(params, config)
    except SigningError as e:
        status_code = status_code_for(e)
        if status_code >= 500:
            logger.error("Cannot sign upload: %s", e)
        else:
            logger.warning("Rejected signing request: %s", e)
        return response(status_code, str(e))

    return response(200, SUCCESS_MESSAGE, signed)
