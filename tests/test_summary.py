"""
Backlog summary: prompt building, the proxy -> direct -> prompt fallback chain,
and the summary proxy endpoint.
"""
import json

import pytest
from google.auth.exceptions import RefreshError

from api.exception import UpstreamError, ValidationError
from conftest import FakeResponse, FakeSession, signup
from services import gemini, projects, task_notes, tasks
from services.gemini import GeminiClient, build_upstream_body, load_service_account_info
from services.summary import PROMPT_FALLBACK_MESSAGE, SummaryOrchestrator, build_tasks_prompt

PROXY_URL = 'https://proxy.example.com/api/gemini-summary'
DIRECT_URL = 'https://ai.example.com/v1/models/{model}:generateContent'


def _config(**overrides):
    config = {
        'SUMMARY_PROXY_URL': PROXY_URL,
        'GEMINI_API_URL': DIRECT_URL,
        'GEMINI_API_KEY': 'key-123',
        'GOOGLE_SERVICE_ACCOUNT_JSON': '',
        'GEMINI_MODEL': 'gemini-test',
        'HTTP_TIMEOUT': 5,
    }
    config.update(overrides)
    return config


@pytest.fixture
def backlog(store):
    uid = store.insert('users', {'name': 'Ana', 'email': 'ana@example.com'})['uid']
    kitchen = projects.create_project(store, uid, {'name': 'Kitchen'})
    garden = projects.create_project(store, uid, {'name': 'Garden'})
    tiles = tasks.create_task(store, uid, {'projectId': kitchen['id'], 'title': 'Tiles', 'description': 'Buy'})
    task_notes.create_task_note(store, uid, {'taskId': tiles['id'], 'content': 'White matte'})
    tasks.create_task(store, uid, {'projectId': garden['id'], 'title': 'Fence', 'status': 'Done'})
    return uid, kitchen, garden


def test_prompt_groups_tasks_by_status_with_notes():
    prompt = build_tasks_prompt(
        [{'id': 'p1', 'name': 'Kitchen'}],
        [
            {'id': 't1', 'projectId': 'p1', 'title': 'Tiles', 'description': 'Buy', 'status': 'ToDo'},
            {'id': 't2', 'projectId': 'p1', 'title': 'Sink', 'status': 'Done'},
        ],
        {'t1': [{'content': 'White matte'}]},
    )

    assert "## ToDo (1)\n- [Kitchen] Tiles: Buy\n    - Note: White matte" in prompt
    assert "## Done (1)\n- [Kitchen] Sink" in prompt
    assert "## InProgress" not in prompt
    assert prompt.index("## ToDo") < prompt.index("## Done")
    assert prompt.rstrip().endswith("Prioritized recommendations for the next steps.")


def test_prompt_for_empty_backlog():
    prompt = build_tasks_prompt([], [])
    assert "There are no tasks yet." in prompt


def test_prompt_limited_to_one_project():
    prompt = build_tasks_prompt(
        [{'id': 'p1', 'name': 'Kitchen'}, {'id': 'p2', 'name': 'Garden'}],
        [
            {'id': 't1', 'projectId': 'p1', 'title': 'Tiles', 'status': 'ToDo'},
            {'id': 't2', 'projectId': 'p2', 'title': 'Fence', 'status': 'ToDo'},
        ],
        project_id='p2',
    )
    assert '"Garden"' in prompt
    assert 'Fence' in prompt
    assert 'Tiles' not in prompt


def test_proxy_answer_is_normalized_and_saved(store, backlog):
    uid, _, _ = backlog
    session = FakeSession({PROXY_URL: FakeResponse(200, {'ok': True, 'result': {
        'candidates': [{'content': {'parts': [{'text': 'All good.'}]}}],
    }})})

    outcome = SummaryOrchestrator(store, _config(), session=session).generate(uid)

    assert outcome.source == 'proxy'
    assert outcome.text == 'All good.'
    assert outcome.saved is True
    assert store.get('summaries', uid)['summary'] == 'All good.'

    method, url, kwargs = session.calls[0]
    assert (method, url) == ('POST', PROXY_URL)
    assert kwargs['json']['model'] == 'gemini-test'
    assert '- [Kitchen] Tiles: Buy' in kwargs['json']['prompt']
    assert '    - Note: White matte' in kwargs['json']['prompt']


def test_falls_back_to_direct_call_when_proxy_fails(store, backlog):
    uid, _, _ = backlog
    direct = 'https://ai.example.com/v1/models/gemini-test:generateContent'
    session = FakeSession({
        PROXY_URL: FakeResponse(500, {'error': 'Failed to call Gemini API'}),
        direct: FakeResponse(200, {'choices': [{'message': {'content': 'Direct summary'}}]}),
    })

    outcome = SummaryOrchestrator(store, _config(), session=session).generate(uid)

    assert outcome.source == 'direct'
    assert outcome.text == 'Direct summary'
    assert outcome.attempts == [{'source': 'proxy', 'error': 'Failed to call Gemini API'}]
    _, _, kwargs = session.calls[1]
    assert kwargs['headers']['Authorization'] == 'Bearer key-123'
    assert kwargs['json']['contents'][0]['parts'][0]['text'] == kwargs['json']['prompt']


def test_both_calls_failing_returns_raw_prompt(store, backlog):
    uid, _, _ = backlog
    session = FakeSession({PROXY_URL: FakeResponse(200, ValueError("not json"))})

    outcome = SummaryOrchestrator(store, _config(), session=session).generate(uid)

    assert outcome.source == 'prompt'
    assert outcome.text == outcome.prompt
    assert outcome.error == PROMPT_FALLBACK_MESSAGE
    assert [a['source'] for a in outcome.attempts] == ['proxy', 'direct']
    assert outcome.saved is False
    assert store.get('summaries', uid) is None


def test_nothing_configured_goes_straight_to_prompt(store, backlog):
    uid, _, _ = backlog
    session = FakeSession()

    outcome = SummaryOrchestrator(
        store, _config(SUMMARY_PROXY_URL='', GEMINI_API_URL='', GEMINI_API_KEY=''), session=session,
    ).generate(uid)

    assert outcome.source == 'prompt'
    assert session.calls == []


def test_summary_for_one_project(store, backlog):
    uid, _, garden = backlog
    session = FakeSession({PROXY_URL: FakeResponse(200, {'ok': True, 'result': 'ok'})})

    SummaryOrchestrator(store, _config(), session=session).generate(uid, garden['id'])

    prompt = session.calls[0][2]['json']['prompt']
    assert 'Fence' in prompt
    assert 'Tiles' not in prompt


def test_save_failure_still_returns_text(store, backlog, monkeypatch):
    uid, _, _ = backlog
    session = FakeSession({PROXY_URL: FakeResponse(200, {'ok': True, 'result': {'text': 'Summary'}})})

    def failing_put(collection, record_id, record):
        raise RuntimeError("write failed")

    monkeypatch.setattr(store, 'put', failing_put)
    outcome = SummaryOrchestrator(store, _config(), session=session).generate(uid)

    assert outcome.text == 'Summary'
    assert outcome.saved is False
    assert outcome.error


def test_service_account_json_is_parsed_from_text_or_file(tmp_path):
    raw = json.dumps({'type': 'service_account', 'project_id': 'demo'})
    key_file = tmp_path / 'key.json'
    key_file.write_text(raw, encoding='utf-8')

    assert load_service_account_info(raw)['project_id'] == 'demo'
    assert load_service_account_info(str(key_file))['project_id'] == 'demo'
    assert load_service_account_info('') is None
    with pytest.raises(ValidationError):
        load_service_account_info('{broken')


def test_client_endpoint_substitutes_model_and_project():
    client = GeminiClient(
        'https://ai.example.com/projects/{project}/models/{model}:generate',
        api_key='k', project_id='demo', model='m1', session=FakeSession(),
    )
    assert client.endpoint() == 'https://ai.example.com/projects/demo/models/m1:generate'
    assert client.endpoint('m2').endswith('/models/m2:generate')


def test_client_wraps_upstream_failures():
    session = FakeSession({'https://ai.example.com/m': FakeResponse(503, {'error': 'busy'})})
    client = GeminiClient('https://ai.example.com/m', api_key='k', session=session)
    with pytest.raises(UpstreamError):
        client.generate('hello')


def test_upstream_body_carries_plain_and_contents_shapes():
    assert build_upstream_body('hi') == {
        'prompt': 'hi',
        'contents': [{'role': 'user', 'parts': [{'text': 'hi'}]}],
    }


def _install_client(app, client):
    app.extensions['taskboard']['gemini'] = client


def test_proxy_endpoint_rejects_other_methods(client):
    assert client.get('/api/gemini-summary').status_code == 405
    assert client.put('/api/gemini-summary', json={'prompt': 'x'}).status_code == 405


def test_proxy_endpoint_requires_prompt(client):
    response = client.post('/api/gemini-summary', json={})
    assert response.status_code == 400
    assert response.get_json() == {'error': 'Missing prompt in request body'}


def test_proxy_endpoint_without_configuration(client):
    response = client.post('/api/gemini-summary', json={'prompt': 'x'})
    assert response.status_code == 500
    assert response.get_json() == {'error': 'Gemini API not configured on server'}


def test_proxy_endpoint_passes_result_through(app, client):
    upstream = {'candidates': [{'content': {'parts': [{'text': 'Summary'}]}}]}
    session = FakeSession({'https://ai.example.com/m': FakeResponse(200, upstream)})
    _install_client(app, GeminiClient('https://ai.example.com/m', api_key='k', session=session))

    response = client.post('/api/gemini-summary', json={'prompt': 'Summarize'})

    assert response.status_code == 200
    assert response.get_json() == {'ok': True, 'result': upstream}


def test_proxy_endpoint_reports_upstream_failure(app, client):
    session = FakeSession({'https://ai.example.com/m': FakeResponse(500, {'error': 'boom'})})
    _install_client(app, GeminiClient('https://ai.example.com/m', api_key='k', session=session))

    response = client.post('/api/gemini-summary', json={'prompt': 'Summarize'})

    body = response.get_json()
    assert response.status_code == 502
    assert body['error'] == 'Failed to call Gemini API'
    assert body['details']


def test_generate_route_returns_prompt_when_offline(client):
    _, headers = signup(client)
    response = client.post('/api/summaries/generate', json={}, headers=headers)

    body = response.get_json()
    assert response.status_code == 200
    assert body['source'] == 'prompt'
    assert 'There are no tasks yet.' in body['text']
    assert client.get('/api/summaries/me', headers=headers).status_code == 404


SERVICE_ACCOUNT = json.dumps({
    'type': 'service_account',
    'project_id': 'demo-project',
    'client_email': 'summaries@demo-project.iam.gserviceaccount.com',
})


class FakeCredentials:
    """Stands in for google-auth service-account credentials."""

    def __init__(self, fail=False):
        self.fail = fail
        self.token = None
        self.valid = False
        self.refreshes = 0
        self.info = None
        self.scopes = None

    def refresh(self, request):
        self.refreshes += 1
        if self.fail:
            raise RefreshError("invalid_grant: account disabled")
        self.token = f"sa-token-{self.refreshes}"
        self.valid = True


@pytest.fixture
def credentials(monkeypatch):
    fake = FakeCredentials()

    def from_service_account_info(info, scopes=None):
        fake.info = info
        fake.scopes = scopes
        return fake

    monkeypatch.setattr(gemini.service_account.Credentials, 'from_service_account_info',
                        from_service_account_info)
    return fake


def test_service_account_key_is_exchanged_for_bearer_token(credentials):
    url = 'https://ai.example.com/projects/{project}/models/{model}:generate'
    direct = 'https://ai.example.com/projects/demo-project/models/gemini-1.5-flash:generate'
    session = FakeSession({direct: FakeResponse(200, {'text': 'ok'})})
    client = GeminiClient(url, service_account_json=SERVICE_ACCOUNT, session=session)

    assert client.configured
    assert client.generate('hello') == {'text': 'ok'}

    _, called_url, kwargs = session.calls[0]
    assert called_url == direct
    assert kwargs['headers']['Authorization'] == 'Bearer sa-token-1'
    assert credentials.info['project_id'] == 'demo-project'
    assert credentials.scopes == [gemini.CLOUD_PLATFORM_SCOPE]


def test_valid_token_is_reused(credentials):
    session = FakeSession({'https://ai.example.com/m': FakeResponse(200, {'text': 'ok'})})
    client = GeminiClient('https://ai.example.com/m', service_account_json=SERVICE_ACCOUNT, session=session)

    client.generate('one')
    client.generate('two')

    assert credentials.refreshes == 1
    assert [c[2]['headers']['Authorization'] for c in session.calls] == ['Bearer sa-token-1'] * 2


def test_expired_token_is_refreshed(credentials):
    client = GeminiClient('https://ai.example.com/m', service_account_json=SERVICE_ACCOUNT,
                          session=FakeSession())

    assert client.bearer_token() == 'sa-token-1'
    credentials.valid = False
    assert client.bearer_token() == 'sa-token-2'


def test_api_key_wins_over_service_account(credentials):
    client = GeminiClient('https://ai.example.com/m', api_key='key-123',
                          service_account_json=SERVICE_ACCOUNT, session=FakeSession())

    assert client.bearer_token() == 'key-123'
    assert credentials.refreshes == 0


def test_token_exchange_failure_is_upstream_error(credentials):
    credentials.fail = True
    session = FakeSession({'https://ai.example.com/m': FakeResponse(200, {'text': 'ok'})})
    client = GeminiClient('https://ai.example.com/m', service_account_json=SERVICE_ACCOUNT, session=session)

    with pytest.raises(UpstreamError):
        client.generate('hello')
    assert session.calls == []


def test_token_exchange_failure_falls_back_to_prompt(store, backlog, credentials):
    uid, _, _ = backlog
    credentials.fail = True
    session = FakeSession({'https://ai.example.com/m': FakeResponse(200, {'text': 'unreachable'})})
    config = _config(
        SUMMARY_PROXY_URL='',
        GEMINI_API_URL='https://ai.example.com/m',
        GEMINI_API_KEY='',
        GOOGLE_SERVICE_ACCOUNT_JSON=SERVICE_ACCOUNT,
    )

    outcome = SummaryOrchestrator(store, config, session=session).generate(uid)

    assert outcome.source == 'prompt'
    assert 'Service account token exchange failed' in outcome.attempts[-1]['error']
    assert session.calls == []
