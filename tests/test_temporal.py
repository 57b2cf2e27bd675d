"""
Tests for the date, time and datetime validators

Covers check order, strict before/after, the ``is`` tolerance, sentinels,
derived boundaries and configuration errors.
"""
from datetime import date, datetime, time, timedelta, timezone

import pytest

from field_validation.boundary import Sentinel
from field_validation.context import FieldContext
from field_validation.errors import ConfigurationError
from field_validation.rules.temporal import DATE, DATETIME, TIME, TemporalValidator


class TestDate:
    """Test comparisons on dates."""

    def test_no_options_pass(self, engine):
        """Test that a date without constraints passes."""
        assert engine.validate("date", date(2024, 1, 1)).passed

    def test_after_is_strict(self, engine):
        """Test that a date equal to the after boundary fails."""
        boundary = date(2024, 1, 1)
        outcome = engine.validate("date", boundary, {"after": boundary})

        assert not outcome.passed
        failure = outcome.first
        assert failure.kind == "after"
        assert failure.message == "should be after %{after}."
        assert failure.metadata == {"validation": "date", "kind": "after", "after": boundary}

    def test_before_is_strict(self, engine):
        """Test that a date equal to the before boundary fails."""
        outcome = engine.validate("date", date(2024, 1, 1), {"before": date(2024, 1, 1)})
        assert outcome.first.kind == "before"
        assert outcome.first.metadata["before"] == date(2024, 1, 1)

    def test_inside_range_passes(self, engine):
        """Test that a date strictly between after and before passes."""
        options = {"after": date(2024, 1, 1), "before": date(2024, 1, 31)}
        assert engine.validate("date", date(2024, 1, 15), options).passed

    def test_is_without_delta(self, engine):
        """Test that is without delta requires equality."""
        assert engine.validate("date", date(2024, 1, 1), {"is": date(2024, 1, 1)}).passed
        outcome = engine.validate("date", date(2024, 1, 2), {"is": date(2024, 1, 1)})
        assert outcome.first.kind == "is"
        assert outcome.first.message == "should be %{is}."

    def test_is_delta_is_inclusive_days(self, engine):
        """Test that delta is measured in days and a difference equal to delta passes."""
        options = {"is": date(2024, 1, 1), "delta": 2}
        assert engine.validate("date", date(2024, 1, 3), options).passed
        assert engine.validate("date", date(2023, 12, 30), options).passed
        assert not engine.validate("date", date(2024, 1, 4), options).passed

    def test_is_checked_before_after(self, engine):
        """Test that is is reported when both is and after fail."""
        options = {"is": date(2024, 6, 1), "after": date(2024, 6, 1)}
        outcome = engine.validate("date", date(2024, 1, 1), options)

        assert len(outcome.failures) == 1
        assert outcome.first.kind == "is"

    def test_after_checked_before_before(self, engine):
        """Test that after is reported when both after and before fail."""
        options = {"after": date(2024, 6, 1), "before": date(2024, 1, 1)}
        outcome = engine.validate("date", date(2024, 3, 1), options)
        assert outcome.first.kind == "after"

    def test_iso_string_boundary(self, engine):
        """Test that ISO-8601 string boundaries are parsed."""
        outcome = engine.validate("date", date(1999, 12, 31), {"after": "2000-01-01"})
        assert outcome.first.metadata["after"] == date(2000, 1, 1)

    def test_message_override(self, engine):
        """Test that a message option replaces the default template."""
        outcome = engine.validate(
            "date", date(2024, 1, 1), {"after": date(2024, 2, 1), "message": "too early"}
        )
        assert outcome.first.message == "too early"
        assert outcome.first.render() == "too early"

    def test_render_substitutes_boundary(self, engine):
        """Test that the failure message renders with the boundary value."""
        outcome = engine.validate("date", date(2024, 1, 1), {"after": date(2024, 2, 1)})
        assert outcome.first.render() == "should be after 2024-02-01."


class TestSentinels:
    """Test the current-moment sentinels."""

    def test_utc_today_for_dates(self, engine):
        """Test that utc_today resolves to today's UTC date."""
        today = datetime.now(timezone.utc).date()
        assert engine.validate("date", today - timedelta(days=1), {"before": "utc_today"}).passed
        assert engine.validate("date", today + timedelta(days=1), {"after": Sentinel.UTC_TODAY}).passed

    def test_utc_now_for_datetimes(self, engine):
        """Test that utc_now works for aware and naive datetimes."""
        aware = datetime.now(timezone.utc) + timedelta(days=1)
        naive = datetime.now(timezone.utc).replace(tzinfo=None) - timedelta(days=1)
        assert engine.validate("datetime", aware, {"after": "utc_now"}).passed
        assert engine.validate("datetime", naive, {"before": "utc_now"}).passed

    def test_utc_now_is_within_delta(self, engine):
        """Test that is utc_now with a delta in seconds accepts the current time."""
        value = datetime.now(timezone.utc)
        assert engine.validate("datetime", value, {"is": "utc_now", "delta": 60}).passed

    def test_wrong_sentinel_for_date(self, engine):
        """Test that utc_now cannot be used with dates."""
        with pytest.raises(ConfigurationError, match="utc_today"):
            engine.validate("date", date(2024, 1, 1), {"after": "utc_now"})

    def test_wrong_sentinel_for_time(self, engine):
        """Test that utc_today cannot be used with times."""
        with pytest.raises(ConfigurationError):
            engine.validate("time", time(12, 0), {"before": "utc_today"})


class TestTimeAndDateTime:
    """Test comparisons on times and datetimes."""

    def test_time_bounds(self, engine):
        """Test after and before on times of day."""
        options = {"after": "06:00:00", "before": "23:00:00"}
        assert engine.validate("time", time(12, 30), options).passed
        assert engine.validate("time", time(5, 59), options).first.kind == "after"
        assert engine.validate("time", time(23, 0), options).first.kind == "before"

    def test_time_delta_in_seconds(self, engine):
        """Test that delta is measured in seconds for times."""
        options = {"is": time(12, 0, 0), "delta": 30}
        assert engine.validate("time", time(12, 0, 30), options).passed
        assert not engine.validate("time", time(12, 0, 31), options).passed

    def test_datetime_delta_as_timedelta(self, engine):
        """Test that delta may be given as a timedelta."""
        options = {"is": datetime(2024, 1, 1, 12, 0), "delta": timedelta(hours=1)}
        assert engine.validate("datetime", datetime(2024, 1, 1, 12, 59), options).passed
        assert not engine.validate("datetime", datetime(2024, 1, 1, 13, 1), options).passed

    def test_datetime_iso_with_z(self, engine):
        """Test that a trailing Z is accepted in datetime boundaries."""
        value = datetime(2024, 1, 1, tzinfo=timezone.utc)
        assert engine.validate("datetime", value, {"after": "2023-12-31T23:59:59Z"}).passed

    def test_naive_against_aware_fails(self, engine):
        """Test that a naive value compared with an aware boundary is a failure."""
        boundary = datetime(2023, 1, 1, tzinfo=timezone.utc)
        outcome = engine.validate("datetime", datetime(2024, 1, 1), {"after": boundary})

        assert outcome.first.kind == "after"
        assert outcome.first.metadata["after"] == boundary
        assert "offset-naive" in outcome.first.metadata["reason"]


class TestDerivedBoundaries:
    """Test boundaries computed from the record."""

    def test_finish_after_start(self, engine):
        """Test a cross-field rule reading a sibling through a callable."""
        context = FieldContext({"start": date(2024, 1, 10)}, "finish")
        options = {"after": lambda ctx: ctx.start}

        assert engine.validate("date", date(2024, 1, 11), options, context).passed
        outcome = engine.validate("date", date(2024, 1, 9), options, context)
        assert outcome.first.metadata["after"] == date(2024, 1, 10)

    def test_is_start_plus_thirty_days(self, engine):
        """Test that is resolves a derived boundary and reports it in metadata."""
        context = FieldContext({"start": date(2000, 1, 1)}, "finish")
        options = {"is": lambda ctx: ctx.get_field("start") + timedelta(days=30)}

        assert engine.validate("date", date(2000, 1, 31), options, context).passed
        outcome = engine.validate("date", date(2000, 1, 2), options, context)
        assert outcome.first.kind == "is"
        assert outcome.first.metadata["is"] == date(2000, 1, 31)

    def test_field_reference(self, engine):
        """Test a {"field": name} boundary."""
        context = FieldContext({"check_in": "2024-03-01"}, "check_out")
        options = {"after": {"field": "check_in"}}
        assert not engine.validate("date", date(2024, 2, 1), options, context).passed

    def test_unparsable_sibling_fails(self, engine):
        """Test that a sibling value that is not a date is a failure, not an error."""
        context = FieldContext({"check_in": "10/05/2024"}, "check_out")
        outcome = engine.validate("date", date(2024, 5, 9), {"after": {"field": "check_in"}}, context)

        assert outcome.first.kind == "after"
        assert outcome.first.metadata["after"] == "10/05/2024"
        assert "Cannot parse" in outcome.first.metadata["reason"]

    def test_literal_boundary_still_raises(self, engine):
        """Test that an unparsable configured boundary remains a configuration error."""
        with pytest.raises(ConfigurationError, match="Cannot parse"):
            engine.validate("date", date(2024, 5, 9), {"after": "10/05/2024"})

    def test_empty_sibling_skips_check(self, engine):
        """Test that a boundary read from a missing field is skipped."""
        context = FieldContext({}, "check_out")
        options = {"after": {"field": "check_in"}}
        assert engine.validate("date", date(2024, 2, 1), options, context).passed

    def test_boundary_resolved_each_evaluation(self, engine):
        """Test that derived boundaries are not cached between calls."""
        calls = []

        def boundary(ctx):
            calls.append(ctx.field)
            return date(2024, 1, 1)

        validator = engine.get_validator("date")
        checks = validator.build_checks({"after": boundary})
        for _ in range(3):
            engine.pipeline.run(date(2024, 2, 1), checks, validator.mode, FieldContext())
        assert len(calls) == 3


class TestConfiguration:
    """Test configuration errors raised by temporal validators."""

    def test_negative_delta(self, engine):
        """Test that a negative delta is rejected."""
        with pytest.raises(ConfigurationError, match="negative"):
            engine.validate("date", date(2024, 1, 1), {"is": date(2024, 1, 1), "delta": -1})

    def test_boolean_delta(self, engine):
        """Test that a boolean is not accepted as delta."""
        with pytest.raises(ConfigurationError):
            engine.validate("date", date(2024, 1, 1), {"is": date(2024, 1, 1), "delta": True})

    def test_unparsable_boundary(self, engine):
        """Test that a boundary string that is not ISO-8601 is rejected."""
        with pytest.raises(ConfigurationError, match="Cannot parse"):
            engine.validate("date", date(2024, 1, 1), {"after": "yesterday"})

    def test_unknown_option(self, engine):
        """Test that unknown option keys are rejected."""
        with pytest.raises(ConfigurationError, match="within"):
            engine.validate("date", date(2024, 1, 1), {"within": 3})

    def test_value_of_wrong_type(self, engine):
        """Test that the engine refuses to compare a value of another type."""
        with pytest.raises(ConfigurationError):
            engine.validate("date", datetime(2024, 1, 1), {"after": date(2023, 1, 1)})

    def test_bad_field_reference_mapping(self, engine):
        """Test that boundary mappings must hold exactly a field key."""
        with pytest.raises(ConfigurationError, match="field"):
            engine.validate("date", date(2024, 1, 1), {"after": {"name": "start"}})


class TestCast:
    """Test casting raw record values."""

    @pytest.mark.parametrize(
        "kind,raw,expected",
        [
            (DATE, "2024-01-31", date(2024, 1, 31)),
            (TIME, "08:15:00", time(8, 15)),
            (DATETIME, "2024-01-31T08:15:00", datetime(2024, 1, 31, 8, 15)),
        ],
    )
    def test_iso_strings(self, kind, raw, expected):
        """Test that ISO-8601 strings are cast to the validator's type."""
        assert TemporalValidator(kind).cast(raw) == expected

    def test_invalid_string(self):
        """Test that an invalid string raises ValueError."""
        with pytest.raises(ValueError):
            TemporalValidator(DATE).cast("2024-02-30")

    def test_wrong_type(self):
        """Test that non-string values of the wrong type raise TypeError."""
        with pytest.raises(TypeError):
            TemporalValidator(DATE).cast(20240101)

    def test_no_default_checks(self):
        """Test discovery metadata for temporal validators."""
        described = TemporalValidator(TIME).describe()
        assert described["checks"] == ["is", "after", "before"]
        assert described["default_checks"] == []
        assert described["mode"] == "first_failure"
