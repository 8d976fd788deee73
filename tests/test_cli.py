"""
Tests for the command line interface.
"""

import asyncio

import pytest

from followgraph import cli
from followgraph.core.models import RankedIdentity


@pytest.fixture
def event_dump(events, ident):
    """Fixture writing a dump where 1 is mutual with 2 and 3, and both are mutual with 4."""
    root, f1, f2, g = ident(1), ident(2), ident(3), ident(4)
    return events.write(
        events.network(
            {
                root: [f1, f2],
                f1: [root, g],
                f2: [root, g],
                g: [f1, f2],
                ident(5): [],
            }
        )
        + [events.metadata(f1, {"name": "alice"})]
    )


def test_sep_degree(event_dump, ident, capsys):
    code = asyncio.run(
        cli.main(["sep-degree", ident(1).to_bech32(), ident(4).to_hex(), "--events", str(event_dump)])
    )

    out = capsys.readouterr().out.splitlines()
    assert code == 0
    assert out[0] == "degrees: 2"
    assert out[1] == ident(1).to_bech32()
    assert out[-1] == ident(4).to_bech32()
    assert len(out) == 4


def test_sep_degree_failure(event_dump, ident, capsys):
    code = asyncio.run(
        cli.main(["sep-degree", ident(1).to_uri(), ident(8).to_uri(), "--events", str(event_dump)])
    )

    assert code == 1
    assert "Missing contact list" in capsys.readouterr().err


def test_rank(event_dump, ident, capsys):
    code = asyncio.run(cli.main(["rank", ident(1).to_bech32(), "--events", str(event_dump)]))

    out = capsys.readouterr().out.splitlines()
    assert code == 0
    assert out[0] == f"None | {ident(4).to_bech32()} | rank: 20"
    assert out[1] == f"    - alice ({ident(2).to_bech32()})"
    assert out[2] == f"    - None ({ident(3).to_bech32()})"


def test_invalid_identity_argument(event_dump):
    parser = cli.create_parser()

    with pytest.raises(SystemExit):
        parser.parse_args(["sep-degree", "npub1nope", "npub1nope", "--events", str(event_dump)])


def test_rank_needs_three_levels(event_dump, ident):
    with pytest.raises(SystemExit):
        asyncio.run(
            cli.main(["rank", ident(1).to_hex(), "--levels", "2", "--events", str(event_dump)])
        )


def test_no_command(capsys):
    assert asyncio.run(cli.main([])) == 1


def test_format_ranking_top(graph, ident):
    ranked = [RankedIdentity(ident(5), 0, ()), RankedIdentity(ident(4), 10, (ident(2),))]

    lines = cli.format_ranking(graph, ranked, top=1)

    assert lines == [
        f"None | {ident(4).to_bech32()} | rank: 10",
        f"    - None ({ident(2).to_bech32()})",
    ]


def test_unreadable_dump_exits_with_error(tmp_path, ident, capsys):
    path = tmp_path / "binary.jsonl"
    path.write_bytes(b"\xff\xfe\n")

    code = asyncio.run(
        cli.main(["sep-degree", ident(1).to_hex(), ident(2).to_hex(), "--events", str(path)])
    )

    assert code == 1
    assert "Event dump loading failed" in capsys.readouterr().err
