"""
Tests for the REPORT request builders.
"""

from lxml import etree

from carddav_sync.carddav.builders import (
    DEFAULT_PROPERTIES,
    build_multiget,
    build_sync_collection,
)
from carddav_sync.dav import namespaces as ns


def _root(request):
    return etree.fromstring(request.body)


class TestBuildMultiget:
    """Tests for build_multiget."""

    def test_request_line_and_headers(self):
        """Test the request is a Depth 1 REPORT on the address book."""
        request = build_multiget("/book/", ["/book/a.vcf"])

        assert request.method == "REPORT"
        assert request.uri == "/book/"
        assert request.headers["Depth"] == "1"
        assert request.headers["Content-Type"].startswith("application/xml")

    def test_body_lists_properties_then_hrefs(self):
        """Test the body requests etag and address-data for each href."""
        root = _root(build_multiget("/book/", ["/book/a.vcf", "/book/b.vcf"]))

        assert root.tag == ns.ADDRESSBOOK_MULTIGET
        assert [el.tag for el in root.find(ns.PROP)] == [ns.ETAG, ns.ADDRESS_DATA]
        assert [el.text for el in root.findall(ns.HREF)] == [
            "/book/a.vcf",
            "/book/b.vcf",
        ]

    def test_empty_uri_list_has_no_hrefs(self):
        """Test the builder performs no discovery for an empty list."""
        root = _root(build_multiget("/book/", []))
        assert root.findall(ns.HREF) == []

    def test_custom_properties(self):
        """Test the property list can be overridden."""
        root = _root(build_multiget("/book/", ["/book/a.vcf"], [ns.ETAG]))
        assert [el.tag for el in root.find(ns.PROP)] == [ns.ETAG]

    def test_is_pure(self):
        """Test identical arguments build identical requests."""
        assert build_multiget("/book/", ["/a"]) == build_multiget("/book/", ["/a"])


class TestBuildSyncCollection:
    """Tests for build_sync_collection."""

    def test_initial_sync_has_empty_token(self):
        """Test a None token produces an empty sync-token element."""
        root = _root(build_sync_collection("/book/"))

        assert root.tag == ns.SYNC_COLLECTION
        token = root.find(ns.SYNC_TOKEN)
        assert token is not None
        assert token.text is None

    def test_empty_string_token_treated_as_initial(self):
        """Test an empty token is sent like None."""
        root = _root(build_sync_collection("/book/", ""))
        assert root.find(ns.SYNC_TOKEN).text is None

    def test_resumed_sync_carries_token(self):
        """Test the given token is sent verbatim."""
        root = _root(build_sync_collection("/book/", "http://example.com/sync/7"))
        assert root.findtext(ns.SYNC_TOKEN) == "http://example.com/sync/7"

    def test_sync_level_defaults_to_one(self):
        """Test sync-level defaults to immediate members."""
        root = _root(build_sync_collection("/book/"))
        assert root.findtext(ns.SYNC_LEVEL) == "1"

    def test_custom_depth(self):
        """Test the depth is written to sync-level."""
        root = _root(build_sync_collection("/book/", None, depth=2))
        assert root.findtext(ns.SYNC_LEVEL) == "2"

    def test_depth_header_is_zero(self):
        """Test the Depth header stays 0 whatever the sync-level."""
        request = build_sync_collection("/book/", "tok", depth=1)
        assert request.method == "REPORT"
        assert request.headers["Depth"] == "0"

    def test_default_properties(self):
        """Test the default property list is requested."""
        root = _root(build_sync_collection("/book/"))
        assert tuple(el.tag for el in root.find(ns.PROP)) == DEFAULT_PROPERTIES
