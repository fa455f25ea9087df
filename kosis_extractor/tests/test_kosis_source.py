"""KOSIS client and source tests"""

import httpx
import pytest

from kosis_extractor.core.exceptions import ApiError, ApiErrorKind, ConfigurationError
from kosis_extractor.ingestion.client import create_api_client
from kosis_extractor.ingestion.kosis_source import KosisSource


def make_source(handler):
    """Build a KosisSource whose client answers through ``handler``"""
    client = create_api_client("test-key", transport=httpx.MockTransport(handler))
    return KosisSource(client)


class TestApiClientFactory:
    """Test client construction"""

    @pytest.mark.parametrize("api_key", [None, "", "   "])
    def test_missing_key_raises(self, api_key):
        """Test a missing credential is a configuration error"""
        with pytest.raises(ConfigurationError):
            create_api_client(api_key)

    def test_client_defaults(self):
        """Test base URL, timeout and default query params"""
        client = create_api_client("abc")
        assert str(client.base_url).rstrip("/") == "https://kosis.kr/openapi"
        assert client.timeout.read == 30.0
        assert client.params["apiKey"] == "abc"
        assert client.params["format"] == "json"


class TestListTables:
    """Test the statistics list call"""

    @pytest.mark.asyncio
    async def test_list_tables_params_and_result(self):
        """Test default params, key injection and descriptor parsing"""
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["path"] = request.url.path
            seen["params"] = dict(request.url.params)
            return httpx.Response(200, json=[{"TBL_ID": "DT_1IN1502", "TBL_NM": "인구총조사", "ORG_ID": 101}])

        source = make_source(handler)
        tables = await source.list_tables({"searchKeyword": "인구"})

        assert seen["path"] == "/openapi/statisticsList.do"
        assert seen["params"]["apiKey"] == "test-key"
        assert seen["params"]["format"] == "json"
        assert seen["params"]["method"] == "getList"
        assert seen["params"]["vwCd"] == "MT_ZTITLE"
        assert seen["params"]["parentId"] == "A"
        assert seen["params"]["searchKeyword"] == "인구"
        assert len(tables) == 1
        assert tables[0].TBL_ID == "DT_1IN1502"
        assert tables[0].ORG_ID == "101"

    @pytest.mark.asyncio
    async def test_caller_params_override_defaults(self):
        """Test caller-supplied params win over defaults"""
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen.update(dict(request.url.params))
            return httpx.Response(200, json=[])

        source = make_source(handler)
        await source.list_tables({"vwCd": "MT_OTITLE", "parentId": "B"})

        assert seen["vwCd"] == "MT_OTITLE"
        assert seen["parentId"] == "B"

    @pytest.mark.asyncio
    async def test_http_error_carries_status(self):
        """Test an HTTP error response becomes a tagged ApiError"""
        source = make_source(lambda request: httpx.Response(401, json={"message": "invalid key"}))

        with pytest.raises(ApiError) as exc_info:
            await source.list_tables()

        err = exc_info.value
        assert err.kind is ApiErrorKind.HTTP
        assert err.status_code == 401
        assert err.is_auth_failure
        assert str(err) == "KOSIS API Error (getStatsList): Status 401 - invalid key"

    @pytest.mark.asyncio
    async def test_http_error_without_message(self):
        """Test a body without a message uses the generic text"""
        source = make_source(lambda request: httpx.Response(500, text="oops"))

        with pytest.raises(ApiError) as exc_info:
            await source.list_tables()

        assert "Status 500 - Unknown API error" in str(exc_info.value)
        assert not exc_info.value.is_auth_failure

    @pytest.mark.asyncio
    async def test_timeout_is_no_response(self):
        """Test a timeout is reported as no response"""

        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectTimeout("timed out", request=request)

        source = make_source(handler)

        with pytest.raises(ApiError) as exc_info:
            await source.list_tables()

        assert exc_info.value.kind is ApiErrorKind.NO_RESPONSE
        assert str(exc_info.value) == "KOSIS API Error (getStatsList): No response received from server."

    @pytest.mark.asyncio
    async def test_request_setup_failure(self):
        """Test a request that cannot be built keeps the transport message"""

        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.InvalidURL("Invalid non-printable ASCII character in URL")

        source = make_source(handler)

        with pytest.raises(ApiError) as exc_info:
            await source.list_tables()

        assert exc_info.value.kind is ApiErrorKind.REQUEST
        assert exc_info.value.operation == "getStatsList"
        assert str(exc_info.value).endswith("Invalid non-printable ASCII character in URL")

    @pytest.mark.asyncio
    async def test_non_array_body_is_invalid(self):
        """Test an object body without an error code is rejected"""
        source = make_source(lambda request: httpx.Response(200, json={"rows": []}))

        with pytest.raises(ApiError) as exc_info:
            await source.list_tables()

        assert exc_info.value.kind is ApiErrorKind.INVALID_RESPONSE
        assert "Invalid response format from KOSIS API" in str(exc_info.value)

    @pytest.mark.asyncio
    async def test_non_json_body_is_invalid(self):
        """Test a body that is not JSON is rejected"""
        source = make_source(lambda request: httpx.Response(200, text="<html></html>"))

        with pytest.raises(ApiError) as exc_info:
            await source.list_tables()

        assert exc_info.value.kind is ApiErrorKind.INVALID_RESPONSE

    @pytest.mark.asyncio
    async def test_unreadable_descriptor_is_invalid(self):
        """Test a list entry with nested fields is rejected as a tagged error"""
        body = [{"TBL_ID": "DT_1", "TBL_NM": {"ko": "인구"}, "ORG_ID": ["101"]}]
        source = make_source(lambda request: httpx.Response(200, json=body))

        with pytest.raises(ApiError) as exc_info:
            await source.list_tables()

        assert exc_info.value.kind is ApiErrorKind.INVALID_RESPONSE
        assert exc_info.value.operation == "getStatsList"
        assert "Invalid response format from KOSIS API" in str(exc_info.value)

    @pytest.mark.asyncio
    async def test_provider_auth_error(self):
        """Test KOSIS key errors reported with HTTP 200"""
        source = make_source(lambda request: httpx.Response(200, json={"err": "11", "errMsg": "인증KEY 기간만료"}))

        with pytest.raises(ApiError) as exc_info:
            await source.list_tables()

        assert exc_info.value.kind is ApiErrorKind.AUTH
        assert exc_info.value.provider_code == "11"
        assert exc_info.value.is_auth_failure

    @pytest.mark.asyncio
    async def test_provider_no_result_is_empty(self):
        """Test the KOSIS 'no result' code yields an empty list"""
        source = make_source(lambda request: httpx.Response(200, json={"err": "30", "errMsg": "조회결과가 없습니다"}))

        assert await source.list_tables() == []


class TestFetchData:
    """Test the per-table data call"""

    @pytest.mark.asyncio
    async def test_fetch_data_default_params(self):
        """Test default classification/period params and the table id"""
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["path"] = request.url.path
            seen["params"] = dict(request.url.params)
            return httpx.Response(200, json=[{"TBL_NM": "인구", "DT": "10"}])

        source = make_source(handler)
        rows = await source.fetch_data("DT_1")

        assert seen["path"] == "/openapi/Param/statisticsParameterData.do"
        assert seen["params"]["tblId"] == "DT_1"
        assert seen["params"]["orgId"] == "101"
        assert seen["params"]["objL1"] == "ALL"
        assert seen["params"]["itmId"] == "T1"
        assert seen["params"]["prdSe"] == "Y"
        assert seen["params"]["newEstPrdCnt"] == "5"
        assert rows == [{"TBL_NM": "인구", "DT": "10"}]

    @pytest.mark.asyncio
    async def test_fetch_data_overrides(self):
        """Test caller params override the defaults"""
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen.update(dict(request.url.params))
            return httpx.Response(200, json=[])

        source = make_source(handler)
        await source.fetch_data("DT_1", {"orgId": "116", "prdSe": "M", "itmId": None})

        assert seen["orgId"] == "116"
        assert seen["prdSe"] == "M"
        assert seen["itmId"] == "T1"

    @pytest.mark.asyncio
    async def test_fetch_data_error_tagged_with_table(self):
        """Test data errors name the table"""
        source = make_source(lambda request: httpx.Response(403, json={"error": "forbidden"}))

        with pytest.raises(ApiError) as exc_info:
            await source.fetch_data("DT_9")

        assert exc_info.value.table_id == "DT_9"
        assert str(exc_info.value) == "KOSIS API Error (getStatsData for DT_9): Status 403 - forbidden"

    @pytest.mark.asyncio
    async def test_fetch_metadata_is_local(self):
        """Test metadata is synthesized without calling the API"""
        calls = []

        def handler(request: httpx.Request) -> httpx.Response:
            calls.append(request)
            return httpx.Response(200, json=[])

        source = make_source(handler)
        metadata = await source.fetch_metadata("DT_1")

        assert calls == []
        assert metadata["tableId"] == "DT_1"
        assert metadata["note"]
        assert metadata["lastUpdated"]
