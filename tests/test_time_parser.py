from datetime import date

import pytest

from classcal.utils.time_parser import minute_of_day, parse_iso_date, start_sort_key


def test_minute_of_day_padded_and_unpadded():
    assert minute_of_day("09:30") == 570
    assert minute_of_day("9:00") == 540
    assert minute_of_day("10:00") == 600
    assert minute_of_day(" 23:59 ") == 23 * 60 + 59


@pytest.mark.parametrize("bad", ["", "  ", "9", "ab:cd", "24:00", "12:60", "10:00:00", None])
def test_minute_of_day_rejects_malformed(bad):
    with pytest.raises(ValueError):
        minute_of_day(bad)


def test_unpadded_sorts_numerically_not_lexically():
    assert "9:00" > "10:00"  # lexical order gets this wrong
    assert start_sort_key("9:00") < start_sort_key("10:00")


def test_unparseable_start_sorts_last():
    assert start_sort_key("23:59") < start_sort_key("later")


def test_parse_iso_date():
    assert parse_iso_date("2024-06-03") == date(2024, 6, 3)
    assert parse_iso_date("2024-6-3") is None
    assert parse_iso_date("") is None
