"""Tests for the query grammar."""

import pytest

from tsdb_query import Query, QueryFormatError, RateOptions, TagSet, parse_query


class TestParseQuery:
    """Tests for parse_query function."""

    def test_full_query(self) -> None:
        """Test a query using every optional part."""
        q = parse_query("avg:15s-avg:rate:cpu.load{host=web01}")
        assert q.aggregator == "avg"
        assert q.downsample == "15s-avg"
        assert q.rate is True
        assert q.rate_options == RateOptions()
        assert q.metric == "cpu.load"
        assert q.tags == {"host": "web01"}

    def test_minimal_query(self) -> None:
        """Test aggregator and metric only."""
        q = parse_query("sum:os.net/bytes")
        assert q.aggregator == "sum"
        assert q.metric == "os.net/bytes"
        assert q.downsample == ""
        assert q.rate is False
        assert q.tags == {}

    def test_downsample_without_rate(self) -> None:
        """Test a downsample spec without rate."""
        q = parse_query("max:1m-max:mem.free")
        assert q.downsample == "1m-max"
        assert q.rate is False

    def test_counter_rate(self) -> None:
        """Test rate options in braces."""
        q = parse_query("sum:rate{counter,100,0}:cpu")
        assert q.rate is True
        assert q.rate_options.counter is True
        assert q.rate_options.counter_max == 100
        assert q.rate_options.reset_value == 0
        assert q.metric == "cpu"

    def test_counter_only(self) -> None:
        """Test that a second field alone turns on counter mode."""
        q = parse_query("sum:rate{counter}:cpu")
        assert q.rate_options == RateOptions(counter=True)

    def test_counter_max_may_be_empty(self) -> None:
        """Test that an empty counter max is skipped."""
        q = parse_query("sum:rate{counter,,5}:cpu")
        assert q.rate_options == RateOptions(counter=True, counter_max=0, reset_value=5)

    def test_comma_rate_options(self) -> None:
        """Test the comma-separated rate form."""
        q = parse_query("sum:rate,counter,42:cpu")
        assert q.rate_options == RateOptions(counter=True, counter_max=42)

    def test_unknown_rate_suffix_is_plain_rate(self) -> None:
        """Test that other text after rate still means a plain rate."""
        q = parse_query("avg:rates:cpu")
        assert q.rate is True
        assert q.rate_options == RateOptions()
        assert q.metric == "cpu"

    def test_bad_counter_max(self) -> None:
        """Test that a non-integer counter max is an error."""
        with pytest.raises(QueryFormatError, match="counter max"):
            parse_query("sum:rate{counter,abc}:cpu")

    def test_bad_reset_value(self) -> None:
        """Test that a non-integer reset value is an error."""
        with pytest.raises(QueryFormatError, match="reset value"):
            parse_query("sum:rate{counter,1,x}:cpu")

    def test_multiple_tags(self) -> None:
        """Test several tags with filters."""
        q = parse_query("avg:cpu{host=web*,dc=ny|sf}")
        assert q.tags == {"host": "web*", "dc": "ny|sf"}

    def test_duplicate_tag(self) -> None:
        """Test that duplicated tag keys fail the whole query."""
        with pytest.raises(QueryFormatError, match="duplicated tag"):
            parse_query("avg:cpu{a=1,a=2}")

    @pytest.mark.parametrize(
        "text",
        [
            "",
            "cpu",
            "avg:",
            "avg:cpu{}",
            "avg:cpu{host=web 01}",
            "avg:15s:cpu",
            ":cpu",
        ],
    )
    def test_bad_format(self, text: str) -> None:
        """Test that malformed text is rejected with the offending query."""
        with pytest.raises(QueryFormatError, match="bad query format") as exc:
            parse_query(text)
        assert text in str(exc.value)


class TestQueryString:
    """Tests for Query.__str__."""

    def test_full(self) -> None:
        """Test serializing every part."""
        q = Query(
            aggregator="avg",
            metric="cpu",
            rate=True,
            downsample="15s-avg",
            tags=TagSet(host="web01"),
        )
        assert str(q) == "avg:15s-avg:rate:cpu{host=web01}"

    def test_minimal(self) -> None:
        """Test serializing aggregator and metric."""
        assert str(Query(aggregator="sum", metric="cpu")) == "sum:cpu"

    def test_tags_keep_insertion_order(self) -> None:
        """Test that query tags are not sorted, unlike TagSet.tags()."""
        q = Query(aggregator="sum", metric="cpu", tags={"zone": "b", "app": "x"})
        assert str(q) == "sum:cpu{zone=b,app=x}"
        assert q.tags.tags() == "app=x,zone=b"

    def test_reparse(self) -> None:
        """Test that a serialized query parses back to the same query."""
        q = parse_query("avg:15s-avg:rate:cpu.load{host=web01,dc=ny}")
        assert parse_query(str(q)) == q


class TestQueryWire:
    """Tests for the JSON wire form of a query."""

    def test_minimal_omits_optional_fields(self) -> None:
        """Test that unset options are left out."""
        assert Query(aggregator="sum", metric="cpu").to_wire() == {
            "aggregator": "sum",
            "metric": "cpu",
        }

    def test_rate_options(self) -> None:
        """Test that rate options are nested under rateOptions."""
        q = parse_query("sum:5m-avg:rate{counter,100,7}:cpu{host=a}")
        assert q.to_wire() == {
            "aggregator": "sum",
            "metric": "cpu",
            "rate": True,
            "rateOptions": {"counter": True, "counterMax": 100, "resetValue": 7},
            "downsample": "5m-avg",
            "tags": {"host": "a"},
        }

    def test_from_wire(self) -> None:
        """Test decoding a wire query."""
        q = Query.from_wire(
            {
                "aggregator": "sum",
                "metric": "cpu",
                "rate": True,
                "rateOptions": {"counter": True, "counterMax": 10},
                "tags": {"host": "a"},
            }
        )
        assert q == Query(
            aggregator="sum",
            metric="cpu",
            rate=True,
            rate_options=RateOptions(counter=True, counter_max=10),
            tags=TagSet(host="a"),
        )
