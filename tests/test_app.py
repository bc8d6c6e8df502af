"""
Tests for the Flask HTTP surface
"""

from unittest.mock import MagicMock

import pytest

from app import create_app
from config import Config
from part_search import PartSearchOrchestrator, SearchOutcome
from sample_parts import SamplePartGenerator

KNOWN_SUPPLIERS = {'Grainger', 'McMaster-Carr', 'Fastenal'}


class AppTestConfig(Config):
    RATELIMIT_ENABLED = False
    DEFAULT_MAX_RESULTS = 5
    MAX_RESULTS_LIMIT = 20


@pytest.fixture
def mock_orchestrator(make_record):
    orchestrator = MagicMock()
    orchestrator.search.return_value = SearchOutcome(
        records=[make_record()], strategy='Grainger-Advanced', synthetic=False)
    orchestrator.method_names = ['Grainger-Advanced', 'Smart-Samples']
    return orchestrator


@pytest.fixture
def client_for():
    def _client(orchestrator=None, factory=None):
        app = create_app(AppTestConfig, orchestrator_factory=factory or (lambda: orchestrator))
        app.config['TESTING'] = True
        return app.test_client()
    return _client


class TestSearchValidation:
    @pytest.mark.parametrize('path', ['/api/search?q=x', '/api/search?q=%20%20x%20', '/api/search'])
    def test_short_query_rejected_before_search(self, client_for, path):
        factory = MagicMock()

        response = client_for(factory=factory).get(path)

        assert response.status_code == 400
        body = response.get_json()
        assert 'at least 2 characters' in body['error']
        assert body['example'] == '/api/search?q=6203%20bearing'
        factory.assert_not_called()

    @pytest.mark.parametrize('raw_limit,expected', [
        (None, 5),
        ('abc', 5),
        ('3', 3),
        ('0', 1),
        ('500', 20),
    ])
    def test_limit_parsing(self, client_for, mock_orchestrator, raw_limit, expected):
        path = '/api/search?q=6203%20bearing'
        if raw_limit is not None:
            path += f'&limit={raw_limit}'

        response = client_for(mock_orchestrator).get(path)

        assert response.status_code == 200
        mock_orchestrator.search.assert_called_once_with('6203 bearing', expected)


class TestSearch:
    def test_live_response_shape(self, client_for, mock_orchestrator):
        body = client_for(mock_orchestrator).get('/api/search?q=6203%20bearing').get_json()

        assert body['query'] == '6203 bearing'
        assert body['resultCount'] == 1
        assert body['source'] == 'Grainger'
        assert body['strategy'] == 'Grainger-Advanced'
        assert body['synthetic'] is False
        assert body['methods'] == ['Grainger-Advanced', 'Smart-Samples']
        assert body['timestamp'].endswith('Z')
        result = body['results'][0]
        assert result['partNumber'] == '6203-2Z'
        assert result['inStock'] is True
        assert 'note' not in result

    def test_all_strategies_fail_returns_samples(self, client_for, fake_strategy):
        strategies = [fake_strategy('Grainger-Advanced', error=ConnectionError('blocked')),
                      fake_strategy('McMaster')]
        orchestrator = PartSearchOrchestrator(strategies, fallback=SamplePartGenerator())

        response = client_for(orchestrator).get('/api/search?q=6203%20bearing')

        assert response.status_code == 200
        body = response.get_json()
        assert body['synthetic'] is True
        assert body['resultCount'] >= 1
        for result in body['results']:
            assert 'Sample data' in result['note']
            assert result['supplier'] in KNOWN_SUPPLIERS
            assert result['partNumber']

    def test_cleaned_query_retry_can_find_live_results(self, client_for, fake_strategy, make_record):
        def only_clean_queries(query):
            return [make_record(part_number='6203-2Z')] if query == '6203 2Z' else []

        strategy = fake_strategy('Grainger-Advanced', results=only_clean_queries)
        orchestrator = PartSearchOrchestrator([strategy])

        body = client_for(orchestrator).get('/api/search?q=6203-2Z!').get_json()

        assert [q for q, _ in strategy.calls] == ['6203-2Z!', '6203 2Z']
        assert body['synthetic'] is False
        assert body['results'][0]['partNumber'] == '6203-2Z'
        assert body['query'] == '6203-2Z!'

    def test_no_retry_when_query_already_clean(self, client_for, fake_strategy):
        strategy = fake_strategy('Grainger-Advanced')
        client_for(PartSearchOrchestrator([strategy])).get('/api/search?q=widget')
        assert len(strategy.calls) == 1

    def test_failed_retry_keeps_first_samples(self, client_for, fake_strategy):
        strategy = fake_strategy('Grainger-Advanced')
        body = client_for(PartSearchOrchestrator([strategy])).get('/api/search?q=bearing,').get_json()

        assert len(strategy.calls) == 2
        assert body['synthetic'] is True
        assert body['results'][0]['partNumber'] == '6203-2Z'

    def test_unexpected_error_is_500(self, client_for):
        orchestrator = MagicMock()
        orchestrator.search.side_effect = RuntimeError('parser exploded')

        response = client_for(orchestrator).get('/api/search?q=6203')

        assert response.status_code == 500
        body = response.get_json()
        assert body['error'] == 'Search failed'
        assert body['message'] == 'parser exploded'
        assert body['query'] == '6203'


class TestOtherRoutes:
    def test_health(self, client_for):
        response = client_for(MagicMock()).get('/api/health')

        assert response.status_code == 200
        body = response.get_json()
        assert body['status'] == 'OK'
        assert body['uptime'] >= 0
        assert body['version'] == Config.VERSION

    def test_index(self, client_for):
        body = client_for(MagicMock()).get('/').get_json()
        assert body['endpoints']['search'] == '/api/search?q=YOUR_QUERY'

    def test_unknown_route_keeps_404(self, client_for):
        assert client_for(MagicMock()).get('/api/nope').status_code == 404

    def test_cors_allows_vercel_previews(self, client_for):
        response = client_for(MagicMock()).get(
            '/api/health', headers={'Origin': 'https://my-preview.vercel.app'})
        assert response.headers.get('Access-Control-Allow-Origin') == 'https://my-preview.vercel.app'


def test_rate_limit_returns_json_429():
    class Limited(AppTestConfig):
        RATELIMIT_ENABLED = True
        RATE_LIMIT = '2 per minute'

    app = create_app(Limited, orchestrator_factory=MagicMock())
    client = app.test_client()

    statuses = [client.get('/api/health').status_code for _ in range(3)]

    assert statuses == [200, 200, 429]
    assert client.get('/api/health').get_json()['error'] == 'Too many requests, please try again later'
