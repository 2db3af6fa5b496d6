from datetime import date, datetime, timedelta, timezone

import pytest

from organizer_api.errors import ValidationError
from organizer_api.routers.params import parse_date_param, parse_sort, parse_tags
from organizer_api.utils import paginate, parse_datetime

SORT_FIELDS = ("due_date", "title", "priority")


class TestParseDatetime:
    def test_z_suffix(self):
        assert parse_datetime("2025-01-31T13:45:00Z") == datetime(2025, 1, 31, 13, 45, tzinfo=timezone.utc)

    def test_date_only_string_is_midnight_utc(self):
        assert parse_datetime("2025-01-31") == datetime(2025, 1, 31, tzinfo=timezone.utc)

    def test_date_object(self):
        assert parse_datetime(date(2025, 1, 31)) == datetime(2025, 1, 31, tzinfo=timezone.utc)

    def test_naive_datetime_assumed_utc(self):
        assert parse_datetime(datetime(2025, 1, 31, 8)).tzinfo == timezone.utc

    def test_offset_converted_to_utc(self):
        parsed = parse_datetime("2025-01-31T10:00:00+02:00")
        assert parsed == datetime(2025, 1, 31, 8, tzinfo=timezone.utc)
        assert parsed.utcoffset() == timedelta(0)

    def test_none(self):
        assert parse_datetime(None) is None

    @pytest.mark.parametrize("value", ["not-a-date", "2025-13-01", 12345])
    def test_invalid(self, value):
        with pytest.raises(ValueError):
            parse_datetime(value)


class TestPaginate:
    def test_middle_page(self):
        result = paginate(list(range(23)), page=2, limit=10)
        assert result["data"] == list(range(10, 20))
        assert result["pagination"] == {
            "page": 2,
            "limit": 10,
            "total": 23,
            "totalPages": 3,
            "hasNext": True,
            "hasPrev": True,
        }

    def test_empty(self):
        result = paginate([], page=1, limit=10)
        assert result["data"] == []
        assert result["pagination"]["totalPages"] == 0
        assert result["pagination"]["hasNext"] is False
        assert result["pagination"]["hasPrev"] is False

    def test_page_past_the_end(self):
        result = paginate([1, 2, 3], page=5, limit=2)
        assert result["data"] == []
        assert result["pagination"]["totalPages"] == 2
        assert result["pagination"]["hasNext"] is False

    def test_exact_multiple(self):
        assert paginate(list(range(20)), page=2, limit=10)["pagination"]["totalPages"] == 2


class TestParseSort:
    def test_defaults(self):
        assert parse_sort(None, None, SORT_FIELDS, "due_date", False) == ("due_date", False)

    def test_camel_case_and_minus_prefix(self):
        assert parse_sort("-dueDate", None, SORT_FIELDS, "title", False) == ("due_date", True)

    def test_order_overrides_prefix(self):
        assert parse_sort("-title", "asc", SORT_FIELDS, "due_date", False) == ("title", False)
        assert parse_sort("title", "DESC", SORT_FIELDS, "due_date", False) == ("title", True)

    def test_unknown_field_falls_back(self):
        assert parse_sort("-password", None, SORT_FIELDS, "due_date", False) == ("due_date", False)

    def test_invalid_order(self):
        with pytest.raises(ValidationError) as exc_info:
            parse_sort("title", "sideways", SORT_FIELDS, "due_date", False)
        assert exc_info.value.errors[0].field == "order"


class TestQueryParams:
    def test_parse_tags(self):
        assert parse_tags("exam, lab ,,") == ("exam", "lab")
        assert parse_tags(None) == ()
        assert parse_tags("") == ()

    def test_parse_date_param(self):
        assert parse_date_param("due_after", "2025-02-01") == datetime(2025, 2, 1, tzinfo=timezone.utc)
        assert parse_date_param("due_after", "  ") is None

    def test_parse_date_param_invalid(self):
        with pytest.raises(ValidationError) as exc_info:
            parse_date_param("due_before", "soon")
        assert exc_info.value.errors[0].field == "due_before"
