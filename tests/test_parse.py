import json

import pytest

from debtor.models import Transfer
from debtor.utils.parse import LedgerFormatError, LedgerRecord, format_transfer, parse_ledger, read_ledger


def test_parse_ledger_lines():
    lines = [
        '{"from": "alice", "to": "bob", "amt": 500}\n',
        "\n",
        '{"from": "bob", "to": "carol", "amt": 0}\n',
    ]
    records = list(parse_ledger(lines))
    assert records == [
        LedgerRecord(from_user="alice", to_user="bob", amount=500),
        LedgerRecord(from_user="bob", to_user="carol", amount=0),
    ]


@pytest.mark.parametrize(
    "line",
    [
        "not json",
        '{"from": "alice", "to": "bob"}',
        '{"from": "alice", "to": "bob", "amt": 1.5}',
        '{"from": "alice", "to": "bob", "amt": "5"}',
        '{"from": "alice", "to": "bob", "amt": -5}',
        '{"from": "", "to": "bob", "amt": 5}',
        '{"from": "alice", "to": "bob", "amt": 5, "memo": "x"}',
        "[1, 2, 3]",
    ],
)
def test_malformed_line(line):
    lines = ['{"from": "alice", "to": "bob", "amt": 5}', line]
    with pytest.raises(LedgerFormatError) as excinfo:
        list(parse_ledger(lines))
    assert excinfo.value.line_no == 2
    assert str(excinfo.value).startswith("line 2:")


def test_read_ledger(tmp_path):
    path = tmp_path / "ledger.jsonl"
    path.write_text('{"from": "a", "to": "b", "amt": 3}\n{"from": "b", "to": "a", "amt": 1}\n')
    records = read_ledger(path)
    assert [record.amount for record in records] == [3, 1]


def test_format_transfer():
    line = format_transfer(Transfer(from_user="bob", to_user="alice", amount=42))
    assert json.loads(line) == {"from": "bob", "to": "alice", "amt": 42}
