import base64

import pytest
import requests

import api.dataforseo_client as dfs
from api.dataforseo_client import (
    DataForSEOCredentialsError,
    DataForSEOError,
    dataforseo_request,
    first_result,
)


class _Response:
    def __init__(self, status_code=200, payload=None, reason='OK', text=''):
        self.status_code = status_code
        self.reason = reason
        self.text = text
        self._payload = payload

    @property
    def ok(self):
        return 200 <= self.status_code < 300

    def json(self):
        if self._payload is None:
            raise ValueError('no json')
        return self._payload


@pytest.fixture
def credentials(monkeypatch):
    monkeypatch.setenv('DATAFORSEO_LOGIN', 'user@example.com')
    monkeypatch.setenv('DATAFORSEO_PASSWORD', 'secret')
    monkeypatch.delenv('DATAFORSEO_API_URL', raising=False)
    monkeypatch.delenv('DATAFORSEO_TIMEOUT', raising=False)


def test_missing_credentials_raise(monkeypatch):
    monkeypatch.delenv('DATAFORSEO_LOGIN', raising=False)
    monkeypatch.setenv('DATAFORSEO_PASSWORD', 'secret')
    monkeypatch.setattr(dfs.requests, 'post', lambda *a, **kw: pytest.fail('should not call'))

    with pytest.raises(DataForSEOCredentialsError, match='DATAFORSEO_LOGIN'):
        dataforseo_request('backlinks/summary/live', [{'target': 'example.com'}])


def test_request_sends_basic_auth_and_payload(monkeypatch, credentials):
    calls = []

    def fake_post(url, headers=None, json=None, timeout=None):
        calls.append({'url': url, 'headers': headers, 'json': json, 'timeout': timeout})
        return _Response(payload={'status_code': 20000, 'tasks': []})

    monkeypatch.setattr(dfs.requests, 'post', fake_post)

    data = dataforseo_request('backlinks/summary/live', [{'target': 'example.com'}])

    assert data == {'status_code': 20000, 'tasks': []}
    call = calls[0]
    assert call['url'] == 'https://api.dataforseo.com/v3/backlinks/summary/live'
    expected = base64.b64encode(b'user@example.com:secret').decode()
    assert call['headers']['Authorization'] == f'Basic {expected}'
    assert call['json'] == [{'target': 'example.com'}]
    assert call['timeout'] == 60.0


def test_http_error_includes_status_and_body(monkeypatch, credentials):
    monkeypatch.setattr(
        dfs.requests, 'post',
        lambda *a, **kw: _Response(status_code=401, reason='Unauthorized', text='bad auth')
    )

    with pytest.raises(DataForSEOError) as exc:
        dataforseo_request('x', [])

    assert str(exc.value) == 'API Error: 401 Unauthorized - bad auth'


def test_api_level_error_uses_status_message(monkeypatch, credentials):
    monkeypatch.setattr(
        dfs.requests, 'post',
        lambda *a, **kw: _Response(payload={'status_code': 40501, 'status_message': 'Invalid Field'})
    )

    with pytest.raises(DataForSEOError, match='Invalid Field'):
        dataforseo_request('x', [])


def test_api_level_error_without_message(monkeypatch, credentials):
    monkeypatch.setattr(dfs.requests, 'post', lambda *a, **kw: _Response(payload={'status_code': 50000}))

    with pytest.raises(DataForSEOError, match='DataForSEO API request failed'):
        dataforseo_request('x', [])


def test_transport_error_is_wrapped(monkeypatch, credentials):
    def boom(*a, **kw):
        raise requests.ConnectionError('connection refused')

    monkeypatch.setattr(dfs.requests, 'post', boom)

    with pytest.raises(DataForSEOError, match='connection refused'):
        dataforseo_request('x', [])


def test_custom_base_url_and_timeout(monkeypatch, credentials):
    monkeypatch.setenv('DATAFORSEO_API_URL', 'https://sandbox.dataforseo.com/v3/')
    monkeypatch.setenv('DATAFORSEO_TIMEOUT', '5')
    seen = {}

    def fake_post(url, headers=None, json=None, timeout=None):
        seen['url'] = url
        seen['timeout'] = timeout
        return _Response(payload={'status_code': 20000})

    monkeypatch.setattr(dfs.requests, 'post', fake_post)

    dataforseo_request('dataforseo_labs/google/ranked_keywords/live', [])

    assert seen['url'] == 'https://sandbox.dataforseo.com/v3/dataforseo_labs/google/ranked_keywords/live'
    assert seen['timeout'] == 5.0


def test_ranked_keywords_payload(monkeypatch):
    captured = {}
    monkeypatch.setattr(
        dfs, 'dataforseo_request',
        lambda endpoint, payload: captured.update(endpoint=endpoint, payload=payload) or {}
    )

    dfs.get_ranked_keywords('example.com')

    assert captured['endpoint'] == 'dataforseo_labs/google/ranked_keywords/live'
    task = captured['payload'][0]
    assert task['limit'] == 15
    assert task['item_types'] == ['organic']
    assert task['order_by'] == ['ranked_serp_element.serp_item.rank_absolute,asc']


def test_keyword_suggestions_payload(monkeypatch):
    captured = {}
    monkeypatch.setattr(
        dfs, 'dataforseo_request',
        lambda endpoint, payload: captured.update(endpoint=endpoint, payload=payload) or {}
    )

    dfs.get_keyword_suggestions('crm', location_code=2826, language_code='en', limit=20)

    assert captured['endpoint'] == 'dataforseo_labs/google/keyword_suggestions/live'
    assert captured['payload'] == [{
        'keyword': 'crm',
        'location_code': 2826,
        'language_code': 'en',
        'include_seed_keyword': True,
        'include_serp_info': True,
        'limit': 20
    }]


def test_first_result_handles_missing_levels():
    assert first_result(None) is None
    assert first_result({}) is None
    assert first_result({'tasks': []}) is None
    assert first_result({'tasks': [{'result': None}]}) is None
    assert first_result({'tasks': [{'result': [{'rank': 5}]}]}) == {'rank': 5}


def test_credentials_configured(monkeypatch):
    monkeypatch.setenv('DATAFORSEO_LOGIN', 'a')
    monkeypatch.delenv('DATAFORSEO_PASSWORD', raising=False)
    assert dfs.credentials_configured() is False

    monkeypatch.setenv('DATAFORSEO_PASSWORD', 'b')
    assert dfs.credentials_configured() is True
