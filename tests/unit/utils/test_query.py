"""Unit tests for query string parsing."""

from quiesce.utils.query import QueryParams, extract_query_params


class TestExtractQueryParams:
    """Tests for extract_query_params."""

    def test_url_without_query(self):
        """A URL without ? yields empty params."""
        params = extract_query_params("/api/heroes")

        assert len(params) == 0
        assert params.get("name") is None

    def test_single_values(self):
        """Simple key=value pairs are decoded."""
        params = extract_query_params("/api/heroes?name=Magneta&page=2")

        assert params.get("name") == "Magneta"
        assert params.get("page") == "2"
        assert "name" in params

    def test_repeated_keys_keep_all_values(self):
        """Repeated keys form a multimap in query order."""
        params = extract_query_params("/api?tag=a&x=1&tag=b")

        assert params.get("tag") == "a"
        assert params.get_all("tag") == ["a", "b"]
        assert params.keys() == ["tag", "x"]
        assert params.to_dict() == {"tag": ["a", "b"], "x": ["1"]}

    def test_percent_and_plus_decoding(self):
        """Values are URL-decoded."""
        params = extract_query_params("/api?q=hello+world&s=%2Fpath")

        assert params.get("q") == "hello world"
        assert params.get("s") == "/path"

    def test_blank_values_are_kept(self):
        """Keys with empty values are present."""
        params = extract_query_params("/api?flag=&x=1")

        assert "flag" in params
        assert params.get("flag") == ""

    def test_fragment_is_dropped(self):
        """Anything after # is not part of the query."""
        params = extract_query_params("/api?x=1#section")

        assert params.items() == [("x", "1")]

    def test_absolute_url(self):
        """Scheme and host do not affect parsing."""
        params = extract_query_params("https://example.com/api?x=1")

        assert params.get("x") == "1"


class TestQueryParams:
    """Tests for the QueryParams multimap."""

    def test_get_default(self):
        """get returns the default for missing keys."""
        assert QueryParams().get("x", "fallback") == "fallback"

    def test_iteration_yields_distinct_keys(self):
        """Iterating yields each key once."""
        params = QueryParams([("a", "1"), ("b", "2"), ("a", "3")])

        assert list(params) == ["a", "b"]

    def test_equality(self):
        """QueryParams compare by their ordered pairs."""
        assert QueryParams([("a", "1")]) == QueryParams([("a", "1")])
        assert QueryParams([("a", "1")]) != QueryParams([("a", "2")])
