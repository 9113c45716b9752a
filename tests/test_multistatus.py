"""
Tests for sync-token extraction and status grouping.
"""

import pytest

from carddav_sync.carddav.multistatus import (
    filter_status,
    missing_status,
    parse_sync_token,
)
from carddav_sync.errors import MalformedDocument, MissingSyncToken, ProtocolError


class TestParseSyncToken:
    """Tests for parse_sync_token."""

    def test_returns_token_text(self):
        """Test the token text is returned exactly."""
        body = b'<d:multistatus xmlns:d="DAV:"><d:sync-token>abc123</d:sync-token></d:multistatus>'
        assert parse_sync_token(body) == "abc123"

    def test_default_namespace(self):
        """Test a DAV: default namespace is recognised."""
        body = '<multistatus xmlns="DAV:"><sync-token>abc123</sync-token></multistatus>'
        assert parse_sync_token(body) == "abc123"

    def test_first_match_wins(self):
        """Test only the first sync-token in the document is used."""
        body = b"""<d:multistatus xmlns:d="DAV:">
          <d:response><d:href>/a</d:href><d:sync-token>inner</d:sync-token></d:response>
          <d:sync-token>outer</d:sync-token>
        </d:multistatus>"""
        assert parse_sync_token(body) == "inner"

    def test_wrong_namespace_is_ignored(self):
        """Test a sync-token outside DAV: does not count."""
        body = b'<d:multistatus xmlns:d="DAV:" xmlns:x="urn:x"><x:sync-token>t</x:sync-token></d:multistatus>'
        with pytest.raises(MissingSyncToken):
            parse_sync_token(body)

    def test_missing_token_raises(self):
        """Test a document without a token raises MissingSyncToken."""
        with pytest.raises(MissingSyncToken, match="No sync-token"):
            parse_sync_token(b'<d:multistatus xmlns:d="DAV:"/>')

    def test_missing_token_is_protocol_error(self):
        """Test MissingSyncToken is a ProtocolError."""
        assert issubclass(MissingSyncToken, ProtocolError)

    def test_invalid_xml_raises(self):
        """Test a non-XML body raises MalformedDocument."""
        with pytest.raises(MalformedDocument):
            parse_sync_token(b"not xml at all")


class TestStatusGrouping:
    """Tests for filter_status and missing_status."""

    RESULTS = {
        "A": {200: {"{DAV:}getetag": '"1"'}},
        "B": {404: {}},
        "C": {200: {"{DAV:}getetag": '"3"'}, 404: {"{DAV:}displayname": None}},
    }

    def test_filter_200(self):
        """Test only 200 bags are kept, one per href."""
        assert filter_status({"A": {200: {"x": 1}}, "B": {404: {}}}, 200) == {
            "A": {"x": 1}
        }

    def test_filter_mixed_statuses(self):
        """Test hrefs with several statuses keep only the requested one."""
        assert filter_status(self.RESULTS) == {
            "A": {"{DAV:}getetag": '"1"'},
            "C": {"{DAV:}getetag": '"3"'},
        }

    def test_filter_returns_copies(self):
        """Test callers cannot mutate the source through the result."""
        filtered = filter_status(self.RESULTS)
        filtered["A"]["{DAV:}getetag"] = "changed"
        assert self.RESULTS["A"][200]["{DAV:}getetag"] == '"1"'

    def test_missing_status(self):
        """Test hrefs without a 200 entry are reported as removed."""
        assert missing_status(self.RESULTS) == {"B"}
