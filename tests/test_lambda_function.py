import json
from dataclasses import replace

import lambda_function


def _event(**params):
    return {'queryStringParameters': params or None}


def test_handler_signs_request(config):
    event = _event(**{'Content-Type': 'image/jpeg', 'fileExtension': 'jpg', 'clientAccessKey': 'client-key'})

    response = lambda_function.handler(event, None, config=config)

    assert response['statusCode'] == 200
    assert response['headers'] == {'Content-Type': 'application/json'}
    body = json.loads(response['body'])
    assert body['message'] == 'Request succeed'
    assert body['params']['params']['key'].endswith('.jpg')
    assert body['params']['params']['Content-Type'] == 'image/jpeg'


def test_handler_without_parameters(config):
    response = lambda_function.handler(_event(), None, config=config)

    assert response['statusCode'] == 400
    assert json.loads(response['body']) == {'message': 'Parameters are required', 'params': None}


def test_handler_denies_wrong_client_key(config):
    event = _event(**{'Content-Type': 'image/png', 'fileExtension': '.png', 'clientAccessKey': 'bad'})

    response = lambda_function.handler(event, None, config=config)

    assert response['statusCode'] == 403


def test_handler_reports_configuration_errors(config):
    event = _event(**{'Content-Type': 'image/png', 'fileExtension': '.png', 'clientAccessKey': 'client-key'})

    response = lambda_function.handler(event, None, config=replace(config, access_key=None))

    assert response['statusCode'] == 500
    assert json.loads(response['body'])['params'] is None
