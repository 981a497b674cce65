"""
System-level tests for POTS Log.

These tests simulate a realistic stretch of use, from setting up medications
and contacts through a week of logging, then reporting, exporting, restoring
and clearing, and check the state of the whole system along the way.
"""
import json

from conftest import NOW, TODAY, at, symptom_form
from potslog.service import PotsLogService
from potslog.store import RecordStore
from potslog.wizard import OrthostaticTest


def test_week_of_tracking_end_to_end(service, tmp_path):
    """
    Tests a full week: daily vitals and doses, symptom logs on some days,
    an orthostatic test today, then the dashboard, weekly summary, report,
    CSV export, backup/restore into a new data file, and clearing all data.
    """
    service.save_emergency_contacts("Jordan", "555-0142", "Dr. Chen", "555-0160")
    midodrine = service.add_medication("Midodrine", "5 mg", "Daily", "8am", now=at(days_ago=8))
    salt = service.add_medication("Salt tablets", "1 g", "Daily", "noon", now=at(days_ago=8))

    for days_ago in range(6, 0, -1):
        service.log_vitals("sitting", 70 + days_ago, 115, 75, sodium=3000, fluid=1500, now=at(days_ago=days_ago, hours=1))
        service.take_medication(midodrine.medication_id, now=at(days_ago=days_ago))
        if days_ago % 2 == 0:
            service.take_medication(salt.medication_id, now=at(days_ago=days_ago, minutes=-30))
            service.log_symptoms(symptom_form({"Dizziness": days_ago % 5, "Fatigue": 2}), now=at(days_ago=days_ago, minutes=-45))

    test = OrthostaticTest()
    test.submit_lying(64)
    result = service.complete_orthostatic_test(test, 101, now=at(hours=1))
    assert result.meets_pots_criteria
    service.log_vitals("standing", 98, 108, 70, sodium=6000, fluid=1000, now=at(minutes=20))
    service.quick_add_water(now=at(minutes=10))
    service.quick_add_water(now=at(minutes=5))
    service.quick_add_water(now=NOW)
    service.take_medication(midodrine.medication_id, now=at(minutes=15))

    # Dashboard for today
    summary = service.dashboard(now=NOW)
    assert summary.reading_count == 6
    assert summary.sodium_total == 6000
    assert summary.fluid_total == 1750
    assert summary.fluid_progress == 0.7
    assert summary.current_heart_rate == 0

    feed = service.recent_activity()
    assert len(feed) == 5
    assert [a.text for a in feed[:2]] == ["Vitals logged: HR 0, BP 0/0", "Vitals logged: HR 0, BP 0/0"]
    assert "Took Midodrine" in [a.text for a in feed]

    # Weekly summary: 10 doses of 2 daily medications over 7 days
    weekly = service.weekly_summary(now=NOW)
    assert weekly.doses_taken == 10
    assert weekly.adherence == 71
    assert weekly.symptom_days == 3

    # Report and export for the last three days
    start = at(days_ago=3).date().isoformat()
    report = service.generate_report(start, TODAY)
    assert report.reading_count == 9
    assert report.dose_count == 5
    assert report.symptom_log_count == 1
    assert "Doses Taken: 5" in report.to_text(NOW)

    _, csv_text, row_count = service.export_csv(start, TODAY)
    assert row_count == report.reading_count
    assert csv_text.count("\n") == row_count + 1

    # Deleting a medication does not rewrite history
    service.delete_medication(salt.medication_id)
    assert sum(1 for m in service.get_med_log() if m.name == "Salt tablets") == 3

    # Backup and restore into a separate data file
    _, backup_text = service.backup(now=NOW)
    restored = PotsLogService(RecordStore(str(tmp_path / "second_device.json")))
    restored.restore(backup_text)
    assert restored.store.snapshot() == service.store.snapshot()
    assert json.loads(backup_text)["medications"] == [midodrine.to_dict()]

    # Clearing only affects the original
    service.clear_all_data()
    assert service.get_vitals() == []
    assert service.emergency_alert()[1] is None
    assert restored.emergency_alert()[1] == "tel:555-0142"
    assert len(restored.get_vitals()) == 12
