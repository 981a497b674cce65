"""
This module computes the derived views shown on the dashboard and reports pages.

All functions are pure: they take lists of records (see `potslog.models`) and
return small result objects. Nothing here touches the store.

Two filtering styles are used on purpose and kept separate:
- Daily and date-range views compare the stored `date` strings (local calendar days).
- The weekly summary compares full timestamps against a rolling 7-day window.
"""
# potslog/aggregator.py

import math
from datetime import datetime, timedelta, timezone

from potslog import config
from potslog.errors import MissingInputError
from potslog.formatting import format_blood_pressure, format_date
from potslog.models import parse_positive_int, parse_timestamp

_EARLIEST = datetime.min.replace(tzinfo=timezone.utc)


def round_half_up(value):
    """Rounds to the nearest integer, with .5 always rounding up."""
    return int(math.floor(value + 0.5))


def _sort_key(timestamp):
    try:
        return parse_timestamp(timestamp)
    except (TypeError, ValueError):
        return _EARLIEST


def _average(values):
    if not values:
        return None
    return round_half_up(sum(values) / len(values))


def _in_range(date, start, end):
    return start <= date <= end


class DailySummary:
    """Totals and the latest reading for one calendar day.

    Attributes:
        day (str): The day summarised (YYYY-MM-DD).
        reading_count (int): Number of vitals readings on that day.
        current_heart_rate (int or None): Heart rate of the last reading, None if no readings.
        current_bp (str or None): "systolic/diastolic" of the last reading.
        sodium_total (int): Sum of sodium (mg) across the day's readings.
        fluid_total (int): Sum of fluid (ml) across the day's readings.
    """
    def __init__(self, day, reading_count=0, current_heart_rate=None, current_bp=None, sodium_total=0, fluid_total=0):
        self.day = day
        self.reading_count = reading_count
        self.current_heart_rate = current_heart_rate
        self.current_bp = current_bp
        self.sodium_total = sodium_total
        self.fluid_total = fluid_total

    @property
    def has_readings(self):
        return self.reading_count > 0

    @property
    def sodium_progress(self):
        """Fraction of the daily sodium target reached, capped at 1.0."""
        return min(self.sodium_total / config.SODIUM_TARGET_MG, 1.0)

    @property
    def fluid_progress(self):
        """Fraction of the daily fluid target reached, capped at 1.0."""
        return min(self.fluid_total / config.FLUID_TARGET_ML, 1.0)


def daily_summary(vitals, day):
    """Summarises the vitals logged on `day`.

    Args:
        vitals (list[VitalReading]): All readings in stored order.
        day (str): Calendar day as YYYY-MM-DD.

    Returns:
        DailySummary: Empty (no current reading, zero totals) if nothing was logged that day.
    """
    todays = [v for v in vitals if v.date == day]
    if not todays:
        return DailySummary(day)
    latest = todays[-1]
    return DailySummary(
        day,
        reading_count=len(todays),
        current_heart_rate=latest.heart_rate,
        current_bp=format_blood_pressure(latest.systolic, latest.diastolic),
        sodium_total=sum(v.sodium for v in todays),
        fluid_total=sum(v.fluid for v in todays),
    )


class Activity:
    """One line of the recent-activity feed."""
    def __init__(self, kind, timestamp, text):
        self.kind = kind
        self.timestamp = timestamp
        self.text = text

    def __repr__(self):
        return f"Activity({self.kind!r}, {self.timestamp!r}, {self.text!r})"


def recent_activity(vitals, symptoms, med_log, limit=None):
    """Merges the latest entries of three collections into one feed.

    The last `limit` records of each collection are taken, merged, sorted
    newest first and cut to `limit`. Entries with equal timestamps keep their
    relative order (vitals, then symptoms, then doses).

    Returns:
        list[Activity]: At most `limit` entries.
    """
    if limit is None:
        limit = config.RECENT_ACTIVITY_LIMIT
    if limit <= 0:
        return []
    activities = []
    for v in vitals[-limit:]:
        text = f"Vitals logged: HR {v.heart_rate}, BP {format_blood_pressure(v.systolic, v.diastolic)}"
        activities.append(Activity("vitals", v.timestamp, text))
    for s in symptoms[-limit:]:
        activities.append(Activity("symptoms", s.timestamp, "Symptoms logged"))
    for m in med_log[-limit:]:
        activities.append(Activity("medication", m.timestamp, f"Took {m.name}"))
    activities.sort(key=lambda a: _sort_key(a.timestamp), reverse=True)
    return activities[:limit]


class WeeklySummary:
    """Averages and adherence over the last seven days.

    `adherence` is None when there are no medications, since there is no
    expected dose count to compare against.
    """
    def __init__(self, window_start, window_end, reading_count, average_heart_rate, average_systolic,
                 average_diastolic, symptom_days, doses_taken, medication_count, adherence):
        self.window_start = window_start
        self.window_end = window_end
        self.reading_count = reading_count
        self.average_heart_rate = average_heart_rate
        self.average_systolic = average_systolic
        self.average_diastolic = average_diastolic
        self.symptom_days = symptom_days
        self.doses_taken = doses_taken
        self.medication_count = medication_count
        self.adherence = adherence

    @property
    def average_bp(self):
        if self.average_systolic is None:
            return None
        return format_blood_pressure(self.average_systolic, self.average_diastolic)


def adherence_rate(doses_taken, medication_count, days=None):
    """Percentage of expected doses taken, or None when no doses are expected."""
    if days is None:
        days = config.WEEKLY_WINDOW_DAYS
    if medication_count <= 0 or days <= 0:
        return None
    return round_half_up(100 * doses_taken / (medication_count * days))


def weekly_summary(vitals, symptoms, med_log, medication_count, now):
    """Summarises the window [now - 7 days, now], inclusive at both ends.

    Args:
        vitals (list[VitalReading]): All readings.
        symptoms (list[SymptomEntry]): All symptom entries.
        med_log (list[MedicationLogEntry]): All doses taken.
        medication_count (int): Number of medications currently scheduled.
        now (datetime): End of the window.

    Returns:
        WeeklySummary
    """
    end = parse_timestamp(now)
    start = end - timedelta(days=config.WEEKLY_WINDOW_DAYS)

    def in_window(record):
        return start <= _sort_key(record.timestamp) <= end

    week_vitals = [v for v in vitals if in_window(v)]
    week_symptoms = [s for s in symptoms if in_window(s)]
    week_doses = [m for m in med_log if in_window(m)]

    return WeeklySummary(
        window_start=start,
        window_end=end,
        reading_count=len(week_vitals),
        average_heart_rate=_average([v.heart_rate for v in week_vitals]),
        average_systolic=_average([v.systolic for v in week_vitals]),
        average_diastolic=_average([v.diastolic for v in week_vitals]),
        symptom_days=len({s.date for s in week_symptoms}),
        doses_taken=len(week_doses),
        medication_count=medication_count,
        adherence=adherence_rate(len(week_doses), medication_count),
    )


class DateRangeReport:
    """Counts and averages for an inclusive range of calendar days."""
    def __init__(self, start, end, reading_count, average_heart_rate, average_systolic, average_diastolic,
                 total_sodium, total_fluid, symptom_log_count, dose_count):
        self.start = start
        self.end = end
        self.reading_count = reading_count
        self.average_heart_rate = average_heart_rate
        self.average_systolic = average_systolic
        self.average_diastolic = average_diastolic
        self.total_sodium = total_sodium
        self.total_fluid = total_fluid
        self.symptom_log_count = symptom_log_count
        self.dose_count = dose_count

    def to_text(self, generated):
        """Renders the plain-text report shown to the user.

        Args:
            generated (datetime or date): When the report was generated.
        """
        lines = [
            "POTS HEALTH REPORT",
            f"Period: {format_date(self.start)} to {format_date(self.end)}",
            f"Generated: {format_date(generated)}",
            "",
            "VITAL SIGNS SUMMARY",
            f"Total Readings: {self.reading_count}",
        ]
        if self.reading_count:
            lines.extend([
                f"Average HR: {self.average_heart_rate} BPM",
                f"Average BP: {self.average_systolic}/{self.average_diastolic} mmHg",
                f"Total Sodium: {self.total_sodium} mg",
                f"Total Fluid: {self.total_fluid} ml",
            ])
        lines.extend([
            "",
            "SYMPTOMS",
            f"Total Symptom Logs: {self.symptom_log_count}",
            "",
            "MEDICATIONS",
            f"Doses Taken: {self.dose_count}",
        ])
        return "\n".join(lines) + "\n"


def require_date_range(start, end):
    """Normalises a start/end pair to YYYY-MM-DD strings.

    Raises:
        MissingInputError: If either date is missing.
    """
    if not start or not end:
        raise MissingInputError("dates", "Please select start and end dates.")
    return str(start), str(end)


def date_range_report(vitals, symptoms, med_log, start, end):
    """Builds a report over `start <= date <= end` (ISO dates compare as strings)."""
    start, end = require_date_range(start, end)
    range_vitals = [v for v in vitals if _in_range(v.date, start, end)]
    range_symptoms = [s for s in symptoms if _in_range(s.date, start, end)]
    range_doses = [m for m in med_log if _in_range(m.date, start, end)]
    return DateRangeReport(
        start=start,
        end=end,
        reading_count=len(range_vitals),
        average_heart_rate=_average([v.heart_rate for v in range_vitals]),
        average_systolic=_average([v.systolic for v in range_vitals]),
        average_diastolic=_average([v.diastolic for v in range_vitals]),
        total_sodium=sum(v.sodium for v in range_vitals),
        total_fluid=sum(v.fluid for v in range_vitals),
        symptom_log_count=len(range_symptoms),
        dose_count=len(range_doses),
    )


class OrthostaticResult:
    """Outcome of an orthostatic (lying vs. standing) heart-rate test."""
    def __init__(self, lying_heart_rate, standing_heart_rate):
        self.lying_heart_rate = lying_heart_rate
        self.standing_heart_rate = standing_heart_rate
        self.delta = standing_heart_rate - lying_heart_rate
        self.meets_pots_criteria = self.delta >= config.POTS_HR_INCREASE_THRESHOLD

    @property
    def interpretation(self):
        if self.meets_pots_criteria:
            return f"Meets POTS criteria (≥{config.POTS_HR_INCREASE_THRESHOLD} BPM increase)"
        return "Normal response"


def classify_orthostatic(lying_heart_rate, standing_heart_rate):
    """Classifies a lying/standing heart-rate pair.

    Raises:
        MissingInputError: If either heart rate is not a positive integer.
    """
    lying = parse_positive_int(lying_heart_rate, "lying heart rate")
    standing = parse_positive_int(standing_heart_rate, "standing heart rate")
    return OrthostaticResult(lying, standing)
