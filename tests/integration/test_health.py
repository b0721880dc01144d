"""
Integration tests for health and metrics endpoints.
"""


class TestHealth:

    def test_database_health(self, client):
        response = client.get('/health')

        assert response.status_code == 200
        assert response.get_json()['status'] == 'healthy'

    def test_cache_health_degraded_when_disabled(self, client):
        response = client.get('/health/cache')

        assert response.status_code == 200
        assert response.get_json()['status'] == 'degraded'

    def test_api_health(self, client):
        body = client.get('/api/health').get_json()

        assert body['status'] == 'ok'
        assert body['timestamp'].endswith('Z')

    def test_unknown_route(self, client):
        response = client.get('/api/nowhere')

        assert response.status_code == 404
        assert response.get_json() == {'message': 'Not Found'}


class TestMetrics:

    def test_metrics_exposes_request_counter(self, client):
        client.get('/api/health')

        response = client.get('/metrics')

        assert response.status_code == 200
        assert b'selllocal_http_requests_total' in response.data
