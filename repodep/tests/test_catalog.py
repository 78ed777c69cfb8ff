"""Tests for the package catalog and capability index"""

from repodep.core.catalog import Catalog
from repodep.core.evr import CapabilityRef, Comparator, Version
from repodep.core.index import CapabilityIndex


class TestPackage:
    """Tests for Package."""

    def test_self_provide(self, make_pkg):
        pkg = make_pkg("foo", "1.0-1")
        assert pkg.provides == ()
        assert pkg.effective_provides() == (
            CapabilityRef("foo", (Comparator.EQ, Version(0, "1.0", "1"))),
        )

    def test_effective_provides_keeps_explicit_first(self, make_pkg):
        pkg = make_pkg("foo", "1.0-1", provides=["libfoo.so.1", "foo-api = 3"])
        names = [cap.name for cap in pkg.effective_provides()]
        assert names == ["libfoo.so.1", "foo-api", "foo"]

    def test_provides_match(self, make_pkg):
        pkg = make_pkg("foo", "1.0-1", provides=["foo-api = 3"])
        assert pkg.provides_match(CapabilityRef.parse("foo-api >= 2"))
        assert not pkg.provides_match(CapabilityRef.parse("foo-api > 3"))
        assert pkg.provides_match(CapabilityRef.parse("foo = 1.0-1"))

    def test_nevra(self, make_pkg):
        assert make_pkg("firefox", "120.0-1.mga9").nevra == "firefox-120.0-1.mga9.x86_64"
        assert make_pkg("foo", "2:1.0-1", arch="noarch").nevra == "foo-2:1.0-1.noarch"

    def test_identity(self, make_pkg):
        a = make_pkg("foo", "1.0-1", arch="x86_64")
        b = make_pkg("foo", "1.0-1", arch="i586")
        assert a.identity == b.identity


class TestCatalog:
    """Tests for Catalog lookups."""

    def test_packages_stored_as_tuple(self, make_pkg):
        catalog = Catalog("core", [make_pkg("a")])
        assert isinstance(catalog.packages, tuple)
        assert len(catalog) == 1

    def test_find_keeps_order(self, make_pkg):
        first = make_pkg("a", "2.0-1")
        second = make_pkg("a", "1.0-1")
        catalog = Catalog("core", [first, make_pkg("b"), second])
        assert catalog.find("a") == [first, second]
        assert catalog.find("zzz") == []

    def test_newest(self, make_pkg):
        old = make_pkg("a", "1.9-1")
        new = make_pkg("a", "1.10-1")
        catalog = Catalog("core", [new, old])
        assert catalog.newest("a") is new

    def test_newest_tie_takes_first(self, make_pkg):
        first = make_pkg("a", "1.0-1", arch="x86_64")
        second = make_pkg("a", "1.0-1", arch="i586")
        catalog = Catalog("core", [first, second])
        assert catalog.newest("a") is first

    def test_newest_missing(self, make_pkg):
        assert Catalog("core", [make_pkg("a")]).newest("b") is None


class TestCapabilityIndex:
    """Tests for CapabilityIndex."""

    def test_buckets_follow_catalog_order(self, make_pkg):
        p1 = make_pkg("p1", provides=["libx = 1.0"])
        p2 = make_pkg("p2", provides=["libx = 2.0"])
        p3 = make_pkg("p3", provides=["libx"])
        index = CapabilityIndex.build(Catalog("core", [p1, p2, p3]))

        providers = index.lookup("libx")
        assert [pkg for pkg, _ in providers] == [p1, p2, p3]
        assert [v for _, v in providers] == [Version(0, "1.0", ""), Version(0, "2.0", ""), None]

    def test_no_deduplication(self, make_pkg):
        pkg = make_pkg("p", provides=["libx = 1.0", "libx = 1.1"])
        index = CapabilityIndex.build(Catalog("core", [pkg]))
        assert len(index.lookup("libx")) == 2

    def test_self_provide_indexed(self, make_pkg):
        pkg = make_pkg("foo", "1.0-1")
        index = CapabilityIndex.build(Catalog("core", [pkg]))
        assert index.lookup("foo") == [(pkg, Version(0, "1.0", "1"))]
        assert "foo" in index

    def test_unknown_capability(self, make_pkg):
        index = CapabilityIndex.build(Catalog("core", [make_pkg("foo")]))
        assert index.lookup("nothing") == []
        assert "nothing" not in index

    def test_whatprovides_filters(self, make_pkg):
        p1 = make_pkg("p1", provides=["libx = 1.0"])
        p2 = make_pkg("p2", provides=["libx = 2.0"])
        index = CapabilityIndex.build(Catalog("core", [p1, p2]))
        result = index.whatprovides(CapabilityRef.parse("libx >= 1.5"))
        assert [pkg for pkg, _ in result] == [p2]

    def test_empty_catalog(self):
        index = CapabilityIndex.build(Catalog("empty"))
        assert len(index) == 0
