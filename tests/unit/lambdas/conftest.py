import pytest

from shortlinks.service import ShortURLService


@pytest.fixture
def context():
    class _Context:
        function_name = 'shortlinks-test'

    return _Context()


@pytest.fixture
def service(memory_dao, public_resolver) -> ShortURLService:
    """Real service over the in-memory store, with DNS stubbed out."""
    return ShortURLService(memory_dao, base_url='https://sho.rt', ttl_minutes=5, resolver=public_resolver)


@pytest.fixture
def patch_app(monkeypatch, service):
    """Point a lambda module's service factory at the in-memory service."""

    def _patch(app):
        monkeypatch.setattr(app, 'load_config', lambda *a, **kw: {})
        monkeypatch.setattr(app, 'build_service', lambda *a, **kw: service)

    return _patch


@pytest.fixture
def apigw_event():
    def _event(method='GET', path='/', body=None, path_parameters=None):
        return {
            'body': body,
            'resource': path,
            'headers': {'User-Agent': 'pytest'},
            'httpMethod': method,
            'path': path,
            'pathParameters': path_parameters,
            'requestContext': {'resourcePath': path, 'httpMethod': method, 'domainName': 'testhost:1000', 'stage': 'test'},
        }

    return _event
