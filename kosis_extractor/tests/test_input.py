"""Input validation tests"""

import pytest

from kosis_extractor.schemas.input import ExtractionInput, validate_input


class TestValidateInput:
    """Test normalization of raw run input"""

    def test_defaults_for_empty_input(self):
        """Test every field falls back to its default"""
        config = validate_input({})
        assert config.search_keyword == ""
        assert config.vw_cd == "MT_ZTITLE"
        assert config.parent_id == "A"
        assert config.max_items == 10
        assert config.include_metadata is True
        assert config.output_format == "structured"
        assert config.delay_between_requests_ms == 1000

    @pytest.mark.parametrize("raw", [None, "not a mapping", 42, ["maxItems", 5]])
    def test_non_mapping_input(self, raw):
        """Test junk input still yields a full configuration"""
        assert validate_input(raw) == validate_input({})

    def test_keyword_is_trimmed(self):
        """Test search keyword whitespace is stripped"""
        config = validate_input({"searchKeyword": "  인구  "})
        assert config.search_keyword == "인구"

    @pytest.mark.parametrize(
        "value,expected",
        [("200", 100), (0, 10), ("0", 10), (None, 10), ("abc", 10), (-5, 1), ("12abc", 12), (7.9, 7), (100, 100)],
    )
    def test_max_items_clamped(self, value, expected):
        """Test maxItems is parsed leniently and clamped to 1..100"""
        assert validate_input({"maxItems": value}).max_items == expected

    def test_max_items_absent(self):
        """Test missing maxItems uses the default"""
        assert validate_input({"searchKeyword": "x"}).max_items == 10

    @pytest.mark.parametrize("value", ["invalid", "", None, 3, "csv"])
    def test_unknown_output_format_coerced(self, value):
        """Test unrecognized outputFormat becomes structured"""
        assert validate_input({"outputFormat": value}).output_format == "structured"

    @pytest.mark.parametrize("value", ["structured", "raw", "both", " Both "])
    def test_known_output_formats(self, value):
        """Test recognized output formats are kept"""
        assert validate_input({"outputFormat": value}).output_format == value.strip().lower()

    @pytest.mark.parametrize("value,expected", [(False, False), ("false", False), (True, True), (None, True), ("yes", True)])
    def test_include_metadata(self, value, expected):
        """Test only an explicit false disables metadata"""
        assert validate_input({"includeMetadata": value}).include_metadata is expected

    @pytest.mark.parametrize("value,expected", [(100, 500), ("1500", 1500), (None, 1000), ("fast", 1000), (0, 1000)])
    def test_delay_floor(self, value, expected):
        """Test the inter-table delay is floored at 500ms"""
        assert validate_input({"delayBetweenRequestsMs": value}).delay_between_requests_ms == expected

    def test_huge_digit_strings_saturate(self):
        """Test digit runs past the int conversion limit still validate"""
        config = validate_input({"maxItems": "9" * 5000, "delayBetweenRequestsMs": "1" * 5000})
        assert config.max_items == 100
        assert config.delay_between_requests_ms >= 500

    def test_huge_negative_max_items(self):
        """Test a huge negative count clamps to the minimum"""
        assert validate_input({"maxItems": "-" + "9" * 5000}).max_items == 1

    def test_legacy_delay_key(self):
        """Test delayBetweenRequests is accepted as an alias"""
        assert validate_input({"delayBetweenRequests": 2000}).delay_between_requests_ms == 2000

    def test_view_code_aliases(self):
        """Test viewCode maps onto vwCd and blanks fall back"""
        assert validate_input({"viewCode": "MT_OTITLE"}).vw_cd == "MT_OTITLE"
        assert validate_input({"vwCd": "   "}).vw_cd == "MT_ZTITLE"
        assert validate_input({"parentId": " B "}).parent_id == "B"

    def test_combined_input(self):
        """Test the documented example input"""
        config = validate_input({"searchKeyword": "  test  ", "maxItems": "200", "outputFormat": "invalid"})
        assert config.search_keyword == "test"
        assert config.max_items == 100
        assert config.output_format == "structured"
        assert config.include_metadata is True

    def test_output_uses_camel_case(self):
        """Test the configuration is embedded in records with wire names"""
        output = validate_input({"maxItems": 3}).to_output()
        assert output == {
            "searchKeyword": "",
            "vwCd": "MT_ZTITLE",
            "parentId": "A",
            "maxItems": 3,
            "includeMetadata": True,
            "outputFormat": "structured",
            "delayBetweenRequestsMs": 1000,
        }

    def test_configuration_is_frozen(self):
        """Test a validated configuration cannot be modified"""
        config = validate_input({})
        with pytest.raises(Exception):
            config.max_items = 50
        assert isinstance(config, ExtractionInput)

    def test_output_format_helpers(self):
        """Test raw/structured selection for each format"""
        both = validate_input({"outputFormat": "both"})
        raw = validate_input({"outputFormat": "raw"})
        structured = validate_input({})
        assert both.wants_raw and both.wants_structured
        assert raw.wants_raw and not raw.wants_structured
        assert structured.wants_structured and not structured.wants_raw
