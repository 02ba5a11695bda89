from dataclasses import replace

import pytest

import uploads
from errors import ClientAccessDenied, ConfigurationMissing, InvalidParameters

PARAMS = {'Content-Type': 'image/png', 'fileExtension': '.png', 'clientAccessKey': 'client-key'}


@pytest.mark.parametrize('missing', ['Content-Type', 'fileExtension', 'clientAccessKey'])
def test_validate_params_requires_each_parameter(config, missing):
    params = {k: v for k, v in PARAMS.items() if k != missing}
    with pytest.raises(InvalidParameters, match=f'{missing} is required'):
        uploads.validate_params(params, config)


def test_validate_params_requires_parameters(config):
    with pytest.raises(InvalidParameters, match='Parameters are required'):
        uploads.validate_params(None, config)


def test_content_type_alias(config):
    params = dict(PARAMS)
    params['contentType'] = params.pop('Content-Type')
    uploads.validate_params(params, config)
    assert uploads.get_content_type(params) == 'image/png'


def test_client_key_optional_when_not_configured(config):
    config = replace(config, client_access_key=None)
    params = {'Content-Type': 'image/png', 'fileExtension': '.png'}
    uploads.validate_params(params, config)
    uploads.check_client_access_key(params, config)


def test_wrong_client_key_is_denied(config):
    with pytest.raises(ClientAccessDenied):
        uploads.check_client_access_key(dict(PARAMS, clientAccessKey='nope'), config)


def test_content_type_prefix_is_enforced(config):
    config = replace(config, content_type_prefix='image/')
    with pytest.raises(InvalidParameters):
        uploads.validate_params(dict(PARAMS, **{'Content-Type': 'text/html'}), config)


def test_extension_with_slash_is_rejected(config):
    with pytest.raises(InvalidParameters):
        uploads.validate_params(dict(PARAMS, fileExtension='/../x'), config)


def test_generate_filename_adds_dot():
    assert uploads.generate_filename('jpg').endswith('.jpg')
    assert uploads.generate_filename('.jpg').count('.') == 1
    assert uploads.generate_filename('.jpg') != uploads.generate_filename('.jpg')


def test_sign_upload_uses_generated_key(config, monkeypatch):
    monkeypatch.setattr(uploads.uuid, 'uuid1', lambda: 'abc')

    signed = uploads.sign_upload(PARAMS, config)

    assert signed['params']['key'] == 'abc.png'
    assert signed['params']['Content-Type'] == 'image/png'


def test_sign_upload_fails_fast_on_missing_secret(config):
    with pytest.raises(ConfigurationMissing):
        uploads.sign_upload(PARAMS, replace(config, secret_key=None))


def test_sign_upload_checks_client_key(config):
    with pytest.raises(ClientAccessDenied):
        uploads.sign_upload(dict(PARAMS, clientAccessKey='nope'), config)


def test_status_codes():
    assert uploads.status_code_for(InvalidParameters('x')) == 400
    assert uploads.status_code_for(ClientAccessDenied('x')) == 403
    assert uploads.status_code_for(ConfigurationMissing(['secret_key'])) == 500
