from rate_proxy.config import Settings


def test_defaults():
    settings = Settings.from_env({})
    assert settings.api_url == "http://localhost:8080"
    assert settings.cache_backend == "memory"
    assert settings.quota_limit == 950
    assert settings.rate_ttl == 300
    assert settings.refresh_interval == 240
    assert settings.refresh_attempts == 3
    assert settings.refresh_backoff == 20
    assert settings.single_timeout == 5
    assert settings.batch_timeout == 20


def test_overrides_from_env():
    settings = Settings.from_env({
        "RATE_API_URL": "http://pricing.internal",
        "RATE_API_TOKEN": "abc",
        "CACHE_BACKEND": "Redis",
        "QUOTA_LIMIT": "500",
        "REFRESH_INTERVAL": "300",
    })
    assert settings.api_url == "http://pricing.internal"
    assert settings.api_token == "abc"
    assert settings.cache_backend == "redis"
    assert settings.quota_limit == 500
    assert settings.refresh_interval == 300.0
