from __future__ import annotations

from datetime import date

import pytest

from govcontracts.errors import IdentifierResolutionError
from govcontracts.identifiers import (
    DEFAULT_INCEPTION,
    MapFileResolver,
    StableIdentifier,
    StaticResolver,
    parse_map_file,
)


@pytest.fixture
def map_dir(tmp_path):
    root = tmp_path / "map_files"
    root.mkdir()
    (root / "meta.csv").write_text(
        "20120518,fb,Q\n20220608,fb,Q\n20501231,meta,Q\n", encoding="utf-8"
    )
    (root / "ibm.csv").write_text("19620102,ibm,N\n20501231,ibm,N\n", encoding="utf-8")
    (root / "empty.csv").write_text("\n", encoding="utf-8")
    return root


def test_string_form_sorts_by_symbol_then_inception():
    ids = [
        StableIdentifier("MSFT", date(1998, 1, 2)),
        StableIdentifier("AAPL", date(2001, 5, 1)),
        StableIdentifier("AAPL", date(1999, 1, 4)),
    ]

    assert [str(sid) for sid in sorted(ids)] == sorted(str(sid) for sid in ids)
    assert str(ids[0]) == "MSFT 19980102"


def test_resolves_renamed_ticker_to_first_listing(map_dir):
    resolver = MapFileResolver(map_dir)

    assert resolver.resolve("META", date(2023, 1, 3)) == StableIdentifier("FB", date(2012, 5, 18))
    assert resolver.resolve("fb", date(2020, 1, 2)) == StableIdentifier("FB", date(2012, 5, 18))


def test_ticker_no_longer_active_falls_back_to_default(map_dir):
    resolver = MapFileResolver(map_dir)

    assert resolver.resolve("FB", date(2023, 1, 3)) == StableIdentifier("FB", DEFAULT_INCEPTION)


def test_old_security_keeps_its_inception(map_dir):
    sid = MapFileResolver(map_dir).resolve("IBM", date(2024, 1, 2))

    assert sid.inception.year == 1962


def test_missing_directory_resolves_everything_to_default(tmp_path):
    resolver = MapFileResolver(tmp_path / "nope")

    assert resolver.resolve("AAPL", date(2024, 1, 2)) == StableIdentifier("AAPL", DEFAULT_INCEPTION)


def test_blank_ticker_raises(map_dir):
    with pytest.raises(IdentifierResolutionError):
        MapFileResolver(map_dir).resolve("  ", date(2024, 1, 2))


def test_parse_map_file_skips_bad_rows():
    map_file = parse_map_file(["bogus", "20200101,abc", "2020,xyz", "20100101,old"])

    assert map_file.rows == ((date(2010, 1, 1), "OLD"), (date(2020, 1, 1), "ABC"))
    assert parse_map_file(["", "x"]) is None


def test_static_resolver_unknown_ticker():
    resolver = StaticResolver({"aapl": StableIdentifier("AAPL", date(2000, 1, 3))})

    assert resolver.resolve("AAPL", date(2024, 1, 2)).symbol == "AAPL"
    with pytest.raises(IdentifierResolutionError):
        resolver.resolve("MSFT", date(2024, 1, 2))
