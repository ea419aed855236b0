"""예외 계층 테스트"""
import httpx

from moviecompare.core.exceptions import (
    AggregationExhaustedException,
    CacheConnectionException,
    CacheException,
    ConfigurationException,
    MovieCompareException,
    ProviderException,
    RetryExhaustedException,
)


def test_str_includes_error_code():
    err = AggregationExhaustedException()
    assert str(err) == "[AGGREGATION_EXHAUSTED] Unable to retrieve price from any provider"


def test_provider_exception_keeps_cause():
    cause = httpx.ConnectError("refused")
    err = ProviderException("filmworld", cause)

    assert err.provider_name == "filmworld"
    assert err.cause is cause
    assert err.error_code == "PROVIDER_ERROR"
    assert "ConnectError" in err.message
    assert err.details["provider"] == "filmworld"


def test_retry_exhausted_details():
    err = RetryExhaustedException("cinemaworld:GET /api/cinemaworld/movies", 3, TimeoutError())

    assert err.attempts == 3
    assert err.details == {"operation": "cinemaworld:GET /api/cinemaworld/movies", "attempts": 3}


def test_cache_exceptions_share_base():
    err = CacheConnectionException("refused")

    assert isinstance(err, CacheException)
    assert isinstance(err, MovieCompareException)
    assert err.error_code == "CACHE_CONNECTION_ERROR"


def test_configuration_exception_message():
    err = ConfigurationException("unknown provider 'moviepass'")
    assert err.message == "Invalid configuration: unknown provider 'moviepass'"
    assert err.error_code == "CONFIGURATION_ERROR"
