"""Display helpers shared by the reports, exports and Streamlit pages."""
# potslog/formatting.py

import datetime

from potslog.models import parse_timestamp


def format_time(timestamp):
    """Formats a timestamp as local 12-hour clock time, e.g. "02:30 PM".

    Returns the original value if it cannot be parsed.
    """
    if not timestamp:
        return "--"
    try:
        local = parse_timestamp(timestamp).astimezone()
    except ValueError:
        return str(timestamp)
    return local.strftime("%I:%M %p")


def format_date(value):
    """Formats a date or timestamp as e.g. "Oct 5, 2026"."""
    if isinstance(value, datetime.datetime):
        day = value.date()
    elif isinstance(value, datetime.date):
        day = value
    else:
        text = str(value)
        try:
            day = datetime.date.fromisoformat(text)
        except ValueError:
            try:
                day = parse_timestamp(text).astimezone().date()
            except ValueError:
                return text
    return f"{day:%b} {day.day}, {day.year}"


def format_symptoms(symptoms):
    # Severities of 0 are omitted.
    listed = [f"{name}: {value}/5" for name, value in symptoms.items() if value > 0]
    return ", ".join(listed) or "None"


def format_blood_pressure(systolic, diastolic):
    return f"{systolic}/{diastolic}"
