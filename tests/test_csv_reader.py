import sys
import os
from decimal import Decimal

import pytest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "src"))

from csv_reader import parse_row, read_transactions
from errors import InputError
from models import Transaction, TransactionType


def write_csv(tmp_path, *lines):
    csv_file = tmp_path / "test.csv"
    csv_file.write_text("\n".join(lines))
    return str(csv_file)


class TestReadTransactions:
    def test_reads_in_file_order(self, tmp_path):
        path = write_csv(
            tmp_path,
            "type, client, tx, amount",
            "deposit, 1, 1, 1.0",
            "withdrawal, 2, 5, 3.0",
            "dispute, 1, 1,",
            "resolve,1,1",
            "chargeback, 1, 1, ",
        )

        transactions = list(read_transactions(path))

        assert transactions == [
            Transaction(TransactionType.DEPOSIT, 1, 1, Decimal("1.0")),
            Transaction(TransactionType.WITHDRAWAL, 2, 5, Decimal("3.0")),
            Transaction(TransactionType.DISPUTE, 1, 1),
            Transaction(TransactionType.RESOLVE, 1, 1),
            Transaction(TransactionType.CHARGEBACK, 1, 1),
        ]

    def test_is_lazy(self, tmp_path):
        path = write_csv(tmp_path, "type,client,tx,amount", "deposit,1,1,1", "bogus,1,2,1")

        transactions = read_transactions(path)
        assert next(transactions).transaction_id == 1
        with pytest.raises(InputError):
            next(transactions)

    def test_header_only(self, tmp_path):
        path = write_csv(tmp_path, "type,client,tx,amount")
        assert list(read_transactions(path)) == []

    def test_empty_file(self, tmp_path):
        path = write_csv(tmp_path)
        assert list(read_transactions(path)) == []

    def test_blank_lines_skipped(self, tmp_path):
        path = write_csv(tmp_path, "type,client,tx,amount", "", "deposit,1,1,2", "")
        assert len(list(read_transactions(path))) == 1

    def test_three_column_header(self, tmp_path):
        path = write_csv(tmp_path, "type,client,tx", "dispute,1,1")
        assert list(read_transactions(path)) == [Transaction(TransactionType.DISPUTE, 1, 1)]

    def test_bad_header(self, tmp_path):
        path = write_csv(tmp_path, "client,type,tx,amount", "deposit,1,1,2")
        with pytest.raises(InputError, match="unexpected header"):
            list(read_transactions(path))

    def test_missing_file(self, tmp_path):
        with pytest.raises(InputError, match="cannot read"):
            list(read_transactions(str(tmp_path / "missing.csv")))

    def test_invalid_utf8(self, tmp_path):
        csv_file = tmp_path / "test.csv"
        csv_file.write_bytes(b"type,client,tx,amount\ndeposit,1,1,\xff\xfe\n")
        with pytest.raises(InputError, match="not valid UTF-8"):
            list(read_transactions(str(csv_file)))

    def test_utf8_byte_order_mark(self, tmp_path):
        csv_file = tmp_path / "test.csv"
        csv_file.write_bytes(b"\xef\xbb\xbftype,client,tx,amount\ndeposit,1,1,2.5\n")

        assert list(read_transactions(str(csv_file))) == [
            Transaction(TransactionType.DEPOSIT, 1, 1, Decimal("2.5")),
        ]

    def test_error_reports_line_number(self, tmp_path):
        path = write_csv(tmp_path, "type,client,tx,amount", "deposit,1,1,2", "deposit,x,2,2")
        with pytest.raises(InputError) as excinfo:
            list(read_transactions(path))
        assert excinfo.value.line == 3
        assert str(excinfo.value).startswith("line 3:")


class TestParseRow:
    def test_amount_ignored_for_dispute(self):
        transaction = parse_row(["dispute", "1", "2", "5.0"])
        assert transaction.amount is None

    def test_type_is_case_insensitive(self):
        assert parse_row(["Deposit", "1", "2", "5"]).transaction_type is TransactionType.DEPOSIT

    def test_boundary_ids(self):
        transaction = parse_row(["deposit", "65535", "4294967295", "1"])
        assert transaction.client_id == 65535
        assert transaction.transaction_id == 4294967295
        assert parse_row(["deposit", "0", "0", "1"]).client_id == 0

    def test_negative_amount_is_decoded(self):
        assert parse_row(["withdrawal", "1", "2", "-3.5"]).amount == Decimal("-3.5")

    def test_four_decimal_places(self):
        assert parse_row(["deposit", "1", "2", "1.2345"]).amount == Decimal("1.2345")
        assert parse_row(["deposit", "1", "2", "1.23450"]).amount == Decimal("1.2345")

    @pytest.mark.parametrize(
        "value",
        [
            "10000000000000000000000000",
            "100000000000000000000000000.5",
            "1234567890123456789012345678901234567890.12340",
            "1E+30",
        ],
    )
    def test_large_amounts_accepted(self, value):
        assert parse_row(["deposit", "1", "2", value]).amount == Decimal(value)

    def test_large_amount_with_too_many_places(self):
        with pytest.raises(InputError, match="at most 4 fractional digits"):
            parse_row(["deposit", "1", "2", "1234567890123456789012345678901234567890.12345"])

    @pytest.mark.parametrize(
        "fields, message",
        [
            (["deposit", "1"], "expected 3 or 4 fields"),
            (["deposit", "1", "2", "3", "4"], "expected 3 or 4 fields"),
            (["transfer", "1", "2", "3"], "unknown transaction type"),
            (["deposit", "one", "2", "3"], "client must be an integer"),
            (["deposit", "1", "2.5", "3"], "tx must be an integer"),
            (["deposit", "65536", "2", "3"], "client 65536 out of range"),
            (["deposit", "-1", "2", "3"], "client -1 out of range"),
            (["deposit", "1", "4294967296", "3"], "tx 4294967296 out of range"),
            (["deposit", "1", "2", ""], "deposit requires an amount"),
            (["withdrawal", "1", "2"], "withdrawal requires an amount"),
            (["deposit", "1", "2", "abc"], "invalid amount"),
            (["deposit", "1", "2", "1.23456"], "at most 4 fractional digits"),
            (["deposit", "1", "2", "NaN"], "at most 4 fractional digits"),
            (["deposit", "1", "2", "Infinity"], "at most 4 fractional digits"),
        ],
    )
    def test_malformed_records(self, fields, message):
        with pytest.raises(InputError, match=message):
            parse_row(fields)
