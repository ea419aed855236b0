"""HTTP 영화 제공자 유닛 테스트

httpx.MockTransport로 제공자 API를 흉내냅니다 (실제 네트워크 없음).
"""

from __future__ import annotations

import httpx
import pytest

from moviecompare.core.exceptions import ConfigurationException, ProviderException, RetryExhaustedException
from moviecompare.providers import (
    CinemaWorldProvider,
    FilmWorldProvider,
    HttpMovieProvider,
    RetryPolicy,
    build_providers,
)
from tests.fixtures.payloads import CINEMAWORLD_DETAIL, CINEMAWORLD_MOVIES


BASE_URL = "https://provider.example.com"
TOKEN = "test-token"


class RecordingTransport:
    """요청 기록 + 스크립트 응답"""

    def __init__(self, *responses):
        self.responses = list(responses)
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        outcome = self.responses[min(len(self.requests) - 1, len(self.responses) - 1)]
        if isinstance(outcome, Exception):
            raise outcome
        return outcome


def make_provider(cls, transport: RecordingTransport, max_attempts: int = 2) -> HttpMovieProvider:
    client = httpx.AsyncClient(transport=httpx.MockTransport(transport))
    return cls(
        BASE_URL,
        TOKEN,
        client=client,
        retry_policy=RetryPolicy(max_attempts=max_attempts, timeout_s=1.0),
    )


# ============================================================================
# ID 변환
# ============================================================================


class TestIdTranslation:

    def test_local_id_adds_prefix(self):
        provider = CinemaWorldProvider(BASE_URL, TOKEN)
        assert provider.to_local_id("0076759") == "cw0076759"

    def test_canonical_id_strips_prefix(self):
        provider = FilmWorldProvider(BASE_URL, TOKEN)
        assert provider.to_canonical_id("fw0076759") == "0076759"

    def test_canonical_id_without_prefix_unchanged(self):
        provider = FilmWorldProvider(BASE_URL, TOKEN)
        assert provider.to_canonical_id("0076759") == "0076759"

    def test_round_trip(self):
        provider = CinemaWorldProvider(BASE_URL, TOKEN)
        assert provider.to_canonical_id(provider.to_local_id("0080684")) == "0080684"

    def test_custom_provider(self):
        provider = HttpMovieProvider(BASE_URL, TOKEN, name="moviepass", id_prefix="mp")
        assert provider.name == "moviepass"
        assert provider.to_local_id("1") == "mp1"

    def test_name_required(self):
        with pytest.raises(ValueError):
            HttpMovieProvider(BASE_URL, TOKEN)


# ============================================================================
# 목록 조회
# ============================================================================


class TestListCatalog:

    @pytest.mark.asyncio
    async def test_request_path_and_token_header(self):
        transport = RecordingTransport(httpx.Response(200, json=CINEMAWORLD_MOVIES))
        provider = make_provider(CinemaWorldProvider, transport)

        await provider.list_catalog()

        request = transport.requests[0]
        assert request.method == "GET"
        assert str(request.url) == f"{BASE_URL}/api/cinemaworld/movies"
        assert request.headers["x-access-token"] == TOKEN

    @pytest.mark.asyncio
    async def test_entries_use_canonical_ids(self):
        transport = RecordingTransport(httpx.Response(200, json=CINEMAWORLD_MOVIES))
        provider = make_provider(CinemaWorldProvider, transport)

        entries = await provider.list_catalog()

        assert [e.id for e in entries] == ["0076759", "0080684"]
        assert entries[0].title == "Star Wars: Episode IV - A New Hope"
        assert entries[0].year == "1977"
        assert entries[0].provider == "cinemaworld"
        assert entries[0].poster.endswith("new-hope.jpg")

    @pytest.mark.asyncio
    async def test_items_without_title_are_skipped(self):
        payload = {"Movies": [{"ID": "fw1", "Title": "  "}, {"ID": "fw2", "Title": "Alien", "Year": 1979}]}
        transport = RecordingTransport(httpx.Response(200, json=payload))
        provider = make_provider(FilmWorldProvider, transport)

        entries = await provider.list_catalog()

        assert [(e.id, e.title, e.year) for e in entries] == [("2", "Alien", "1979")]

    @pytest.mark.asyncio
    async def test_retry_then_success(self):
        transport = RecordingTransport(
            httpx.Response(503),
            httpx.Response(200, json=CINEMAWORLD_MOVIES),
        )
        provider = make_provider(CinemaWorldProvider, transport, max_attempts=3)

        entries = await provider.list_catalog()

        assert len(entries) == 2
        assert len(transport.requests) == 2

    @pytest.mark.asyncio
    async def test_exhausted_retries_raise_provider_exception(self):
        transport = RecordingTransport(httpx.Response(500))
        provider = make_provider(CinemaWorldProvider, transport, max_attempts=3)

        with pytest.raises(ProviderException) as exc_info:
            await provider.list_catalog()

        assert len(transport.requests) == 3
        assert exc_info.value.provider_name == "cinemaworld"
        assert isinstance(exc_info.value.cause, RetryExhaustedException)

    @pytest.mark.asyncio
    async def test_transport_error_raises_provider_exception(self):
        transport = RecordingTransport(httpx.ConnectError("refused"))
        provider = make_provider(FilmWorldProvider, transport)

        with pytest.raises(ProviderException):
            await provider.list_catalog()

    @pytest.mark.asyncio
    async def test_malformed_body_raises_provider_exception(self):
        """디코딩 실패는 재시도하지 않고 제공자 실패로 변환"""
        transport = RecordingTransport(httpx.Response(200, content=b"<html>oops</html>"))
        provider = make_provider(CinemaWorldProvider, transport, max_attempts=3)

        with pytest.raises(ProviderException):
            await provider.list_catalog()

        assert len(transport.requests) == 1

    @pytest.mark.asyncio
    async def test_missing_movies_field_raises_provider_exception(self):
        transport = RecordingTransport(httpx.Response(200, json={"Message": "ok"}))
        provider = make_provider(CinemaWorldProvider, transport)

        with pytest.raises(ProviderException):
            await provider.list_catalog()


# ============================================================================
# 상세 조회
# ============================================================================


class TestGetDetail:

    @pytest.mark.asyncio
    async def test_request_uses_local_id(self):
        transport = RecordingTransport(httpx.Response(200, json=CINEMAWORLD_DETAIL))
        provider = make_provider(CinemaWorldProvider, transport)

        await provider.get_detail("0086190")

        assert str(transport.requests[0].url) == f"{BASE_URL}/api/cinemaworld/movie/cw0086190"
        assert transport.requests[0].headers["x-access-token"] == TOKEN

    @pytest.mark.asyncio
    async def test_detail_record(self):
        transport = RecordingTransport(httpx.Response(200, json=CINEMAWORLD_DETAIL))
        provider = make_provider(CinemaWorldProvider, transport)

        record = await provider.get_detail("0086190")

        assert record.id == "0086190"
        assert record.price == "69.5"
        assert record.provider == "cinemaworld"
        assert record.type == "movie"
        assert record.year == "1983"

    @pytest.mark.asyncio
    async def test_numeric_price_kept_as_string(self):
        payload = {"ID": "fw0086190", "Title": "Jedi", "Price": 25}
        transport = RecordingTransport(httpx.Response(200, json=payload))
        provider = make_provider(FilmWorldProvider, transport)

        record = await provider.get_detail("0086190")

        assert record.price == "25"

    @pytest.mark.asyncio
    async def test_missing_price_is_empty(self):
        payload = {"ID": "fw0086190", "Title": "Jedi"}
        transport = RecordingTransport(httpx.Response(200, json=payload))
        provider = make_provider(FilmWorldProvider, transport)

        record = await provider.get_detail("0086190")

        assert record.price == ""

    @pytest.mark.asyncio
    async def test_not_found_raises_provider_exception(self):
        transport = RecordingTransport(httpx.Response(404, json={"Message": "Not found"}))
        provider = make_provider(FilmWorldProvider, transport)

        with pytest.raises(ProviderException) as exc_info:
            await provider.get_detail("9999999")

        assert exc_info.value.details["id"] == "9999999"


# ============================================================================
# 제공자 구성
# ============================================================================


class TestBuildProviders:

    def test_declaration_order(self):
        providers = build_providers(["filmworld", "cinemaworld"], BASE_URL, TOKEN)

        assert [p.name for p in providers] == ["filmworld", "cinemaworld"]
        assert isinstance(providers[0], FilmWorldProvider)

    def test_shared_retry_policy(self):
        policy = RetryPolicy(max_attempts=5)
        providers = build_providers(["cinemaworld"], BASE_URL, TOKEN, retry_policy=policy)

        assert providers[0].retry_policy is policy

    def test_base_url_trailing_slash(self):
        providers = build_providers(["cinemaworld"], f"{BASE_URL}/", TOKEN)
        assert providers[0].base_url == BASE_URL

    @pytest.mark.parametrize("base_url, token", [("", TOKEN), (BASE_URL, "")])
    def test_missing_credentials(self, base_url, token):
        with pytest.raises(ConfigurationException):
            build_providers(["cinemaworld"], base_url, token)

    def test_empty_names(self):
        with pytest.raises(ConfigurationException):
            build_providers([], BASE_URL, TOKEN)

    def test_unknown_provider(self):
        with pytest.raises(ConfigurationException) as exc_info:
            build_providers(["cinemaworld", "moviepass"], BASE_URL, TOKEN)

        assert exc_info.value.details["provider"] == "moviepass"


# ============================================================================
# 불완전한 항목 / 경로 인코딩
# ============================================================================


class TestLenientPayloads:
    """한 항목의 잘못된 필드가 제공자 전체 실패로 번지지 않아야 함"""

    @pytest.mark.asyncio
    async def test_null_poster_keeps_catalog(self):
        payload = {
            "Movies": [
                {"ID": "cw0076759", "Title": "Star Wars", "Year": "1977", "Poster": "a.jpg"},
                {"ID": "cw0080684", "Title": "Empire", "Year": "1980", "Poster": None, "Type": None},
            ]
        }
        transport = RecordingTransport(httpx.Response(200, json=payload))
        provider = make_provider(CinemaWorldProvider, transport)

        entries = await provider.list_catalog()

        assert [e.id for e in entries] == ["0076759", "0080684"]
        assert entries[1].poster == ""

    @pytest.mark.asyncio
    async def test_numeric_and_null_fields_coerced(self):
        payload = {"Movies": [{"ID": 76759, "Title": 1917, "Year": None, "Poster": None}]}
        transport = RecordingTransport(httpx.Response(200, json=payload))
        provider = make_provider(FilmWorldProvider, transport)

        entries = await provider.list_catalog()

        assert [(e.id, e.title, e.year, e.poster) for e in entries] == [("76759", "1917", "", "")]

    @pytest.mark.asyncio
    async def test_malformed_item_is_skipped(self):
        payload = {
            "Movies": [
                {"ID": "fw1", "Title": {"en": "Alien"}},
                "not-an-object",
                {"ID": "fw2", "Title": "Aliens"},
            ]
        }
        transport = RecordingTransport(httpx.Response(200, json=payload))
        provider = make_provider(FilmWorldProvider, transport)

        entries = await provider.list_catalog()

        assert [(e.id, e.title) for e in entries] == [("2", "Aliens")]

    @pytest.mark.asyncio
    async def test_null_poster_keeps_detail_price(self):
        payload = {"ID": "fw0086190", "Title": "Jedi", "Poster": None, "Type": None, "Price": "12.5"}
        transport = RecordingTransport(httpx.Response(200, json=payload))
        provider = make_provider(FilmWorldProvider, transport)

        record = await provider.get_detail("0086190")

        assert record.price == "12.5"
        assert record.poster == ""
        assert record.type is None

    @pytest.mark.asyncio
    async def test_detail_without_id_uses_requested_id(self):
        payload = {"Title": "Jedi", "Price": "12.5"}
        transport = RecordingTransport(httpx.Response(200, json=payload))
        provider = make_provider(FilmWorldProvider, transport)

        record = await provider.get_detail("0086190")

        assert record.id == "0086190"


class TestDetailPathEncoding:

    @pytest.mark.asyncio
    async def test_id_cannot_escape_path_segment(self):
        """요청 ID의 '/', '?'는 인코딩되어 경로 한 구간에 머문다."""
        transport = RecordingTransport(httpx.Response(200, json=CINEMAWORLD_DETAIL))
        provider = make_provider(CinemaWorldProvider, transport)

        await provider.get_detail("1/../../filmworld/movie/fw1?x=")

        url = transport.requests[0].url
        assert url.raw_path == b"/api/cinemaworld/movie/cw1%2F..%2F..%2Ffilmworld%2Fmovie%2Ffw1%3Fx%3D"
        assert url.query == b""
        assert transport.requests[0].headers["x-access-token"] == TOKEN

    @pytest.mark.asyncio
    async def test_plain_id_unchanged(self):
        transport = RecordingTransport(httpx.Response(200, json=CINEMAWORLD_DETAIL))
        provider = make_provider(CinemaWorldProvider, transport)

        await provider.get_detail("0086190")

        assert transport.requests[0].url.raw_path == b"/api/cinemaworld/movie/cw0086190"
