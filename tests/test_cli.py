import json

import pytest

import api.research as research
from api.dataforseo_client import DataForSEOError
from execution import run_research


def _envelope(result):
    return {'status_code': 20000, 'tasks': [{'result': [result]}]}


@pytest.fixture
def stub_provider(monkeypatch):
    monkeypatch.setattr(
        research, 'get_backlinks_summary',
        lambda target, include_subdomains=True: _envelope({'rank': 50, 'backlinks': 10, 'referring_pages': 4})
    )
    monkeypatch.setattr(research, 'get_ranked_keywords', lambda target, limit=15: _envelope({'items': []}))
    monkeypatch.setattr(research, 'get_domain_rank_overview', lambda target: _envelope({'items': []}))


def test_json_only_after_subcommand_prints_bare_json(stub_provider, capsys):
    run_research.main(['domain', 'example.com', '--json-only'])

    out = capsys.readouterr().out
    result = json.loads(out)
    assert result['domainRank'] == 50
    assert 'RESULT' not in out


def test_summary_printed_by_default(stub_provider, capsys):
    run_research.main(['domain', 'https://www.example.com/', '--no-subdomains'])

    out = capsys.readouterr().out
    assert 'Domain rank: 50' in out
    assert 'RESULT' in out


def test_keyword_command_passes_options(monkeypatch, capsys):
    calls = []
    monkeypatch.setattr(
        research, 'get_keyword_suggestions',
        lambda *args: calls.append(args) or _envelope({'items': []})
    )

    run_research.main(['keyword', 'crm', '--location', '2826', '--language', 'de', '--limit', '5', '--json-only'])

    assert calls == [('crm', 2826, 'de', 5)]
    assert json.loads(capsys.readouterr().out)['totalResults'] == 0


def test_provider_error_exits_with_status_one(monkeypatch, capsys):
    def fail(*args):
        raise DataForSEOError('API Error: 401 Unauthorized - ')

    monkeypatch.setattr(research, 'get_ads_by_domain', fail)

    with pytest.raises(SystemExit) as exc:
        run_research.main(['ads', 'nike.com'])

    assert exc.value.code == 1
    assert '401 Unauthorized' in capsys.readouterr().out
