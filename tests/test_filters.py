from datetime import date

import pytest

from leadboard.domains.dashboard.filters import filter_transactions, parse_filters
from leadboard.domains.dashboard.ingest import prepare_transactions
from leadboard.domains.dashboard.periods import resolve_window
from leadboard.errors import InvalidWindow

JANUARY = resolve_window(date(2024, 1, 31), 31)


def _ids(df):
    return df["txn_id"].tolist()


def test_window_only(transactions, lookup):
    result = filter_transactions(transactions, JANUARY, {}, lookup)
    assert _ids(result) == ["T1", "T2", "T3", "T4", "T5", "T6", "T7", "T8"]


def test_no_window_and_no_filters_is_pass_through(transactions, lookup):
    result = filter_transactions(transactions, None, {}, lookup)
    assert len(result) == len(transactions)


def test_branch_filter_preserves_order(transactions, lookup):
    result = filter_transactions(transactions, JANUARY, {"branch_id": "B1"}, lookup)
    assert _ids(result) == ["T1", "T2", "T3"]


def test_country_filter_joins_through_branch(transactions, lookup):
    result = filter_transactions(transactions, JANUARY, {"country": "Kenya"}, lookup)
    # T8 belongs to a branch missing from the lookup, so it has no country
    assert _ids(result) == ["T1", "T2", "T3", "T4", "T5"]


def test_status_and_agent_filters_combine(transactions, lookup):
    result = filter_transactions(
        transactions, JANUARY, {"status": "Closed", "user_id": "U1"}, lookup
    )
    assert _ids(result) == ["T1", "T8"]


def test_window_bounds_are_inclusive(transactions, lookup):
    last_day = resolve_window(date(2024, 1, 31), 1)
    assert _ids(filter_transactions(transactions, last_day, {}, lookup)) == ["T5"]


def test_time_of_day_is_ignored(lookup):
    df = prepare_transactions([
        {"txn_id": "X1", "status": "Open", "amount": 1, "date": "2024-01-31T23:45:00+03:00"},
        {"txn_id": "X2", "status": "Open", "amount": 1, "date": "2024-02-01T00:10:00"},
    ])
    result = filter_transactions(df, resolve_window(date(2024, 1, 31), 1), {}, lookup)
    assert _ids(result) == ["X1"]


def test_parse_filters_drops_unknown_and_empty_keys():
    request = parse_filters({"branch_id": "B1", "colour": "red", "user_id": "", "status": None})
    assert request.dimensions == {"branch_id": "B1"}
    assert request.applied() == {"branch_id": "B1"}


def test_parse_filters_reference_defaults_to_today():
    request = parse_filters(None)
    assert request.reference(date(2024, 5, 1)) == date(2024, 5, 1)
    assert parse_filters({"date": "2024-01-15"}).reference(date(2024, 5, 1)) == date(2024, 1, 15)


def test_parse_filters_range_reference_is_range_end():
    request = parse_filters({"date_from": "2024-01-01", "date_to": "2024-01-10"})
    assert request.reference(date(2024, 5, 1)) == date(2024, 1, 10)
    assert request.explicit_window().days == 10


@pytest.mark.parametrize(
    "raw",
    [
        {"date": "2024-01-01", "date_from": "2024-01-01", "date_to": "2024-01-02"},
        {"date_from": "2024-01-01"},
        {"date_from": "2024-01-10", "date_to": "2024-01-01"},
        {"date": "31/01/2024"},
    ],
)
def test_parse_filters_rejects_bad_windows(raw):
    with pytest.raises(InvalidWindow):
        parse_filters(raw)
