"""Tests for template-variable query string parsing."""

import pytest

from tc_monitor.query_parser import parse_metric_query


class TestParseMetricQuery:
    @pytest.mark.parametrize("query", ["", None, "&", "=value", " = x & "])
    def test_empty_or_keyless_input(self, query):
        assert parse_metric_query(query) == {}

    def test_keys_are_lowercased_and_trimmed(self):
        parsed = parse_metric_query(" Namespace = QCE/CVM & Action=DescribeInstances")

        assert parsed == {"namespace": "QCE/CVM", "action": "DescribeInstances"}

    def test_json_values_are_decoded(self):
        parsed = parse_metric_query(
            'Namespace=QCE/CVM&Action=DescribeInstances&Params={"Limit": 10}&Limit=5'
        )

        assert parsed["params"] == {"Limit": 10}
        assert parsed["limit"] == 5

    def test_value_may_contain_equals_sign(self):
        parsed = parse_metric_query("namespace=QCE/CVM&filter=a=b")

        assert parsed["filter"] == "a=b"

    def test_missing_value_is_empty_string(self):
        assert parse_metric_query("action") == {"action": ""}
