"""
This module defines the graphical user interface (GUI) for POTS Log using Streamlit.

It includes functions for rendering every page of the app: the dashboard,
vitals logging (with the orthostatic test), symptom tracking, medications, and
reports (weekly summary, date-range report, exports, backups and emergency
contacts), plus the emergency panel in the sidebar.

The main entry point for the UI is `show_main_app`, which renders the sidebar
navigation and routes to the selected page.
"""
# gui.py

import datetime

import pandas as pd
import streamlit as st

from potslog.config import FLUID_TARGET_ML, POSITIONS, SODIUM_TARGET_MG, TRACKED_SYMPTOMS, WATER_QUICK_ADD_ML
from potslog.errors import ImportParseError, MissingInputError
from potslog.formatting import format_symptoms, format_time
from potslog.models import SymptomForm
from potslog.wizard import AWAITING_LYING, AWAITING_STANDING, OrthostaticTest

PAGES = ["Dashboard", "Vitals", "Symptoms", "Medications", "Reports"]

SEVERITY_OPTIONS = [0, 1, 2, 3, 4, 5]


def _flash(message):
    """Stores a success message to show after the next rerun."""
    st.session_state.flash_message = message


def _show_flash():
    message = st.session_state.pop('flash_message', None)
    if message:
        st.success(message)


def go_to_page(page):
    """Navigation callback for buttons that jump to another page."""
    st.session_state.page = page


def _page_title(title):
    st.markdown(f"<h2 style='text-align: center;'>{title}</h2>", unsafe_allow_html=True)


# Sidebar

def _render_emergency_panel(service):
    """Renders the emergency button and, once pressed, the contact details."""
    if st.sidebar.button("🚨 EMERGENCY", key="emergency_btn", type="primary", use_container_width=True):
        st.session_state.show_emergency = True

    if st.session_state.get('show_emergency'):
        message, dial_link = service.emergency_alert()
        st.sidebar.error(message)
        if dial_link:
            st.sidebar.link_button("Call primary contact now", dial_link, use_container_width=True)
        if st.sidebar.button("Close", key="emergency_close"):
            st.session_state.show_emergency = False
            st.rerun()


def show_main_app(service):
    """
    Renders the sidebar and routes to the selected page.

    Args:
        service: The main application service instance.
    """
    if 'page' not in st.session_state:
        st.session_state.page = PAGES[0]

    st.sidebar.title("POTS Log")
    st.sidebar.radio("Go to", PAGES, key="page")
    _render_emergency_panel(service)

    if service.anomalies:
        names = ", ".join(sorted(service.anomalies))
        st.warning(
            f"Some saved data could not be read ({names}). It is shown as empty. "
            "Restore a backup or save new entries to replace it."
        )

    page = st.session_state.page
    if page == "Dashboard":
        _render_dashboard_page(service)
    elif page == "Vitals":
        _render_vitals_page(service)
    elif page == "Symptoms":
        _render_symptoms_page(service)
    elif page == "Medications":
        _render_medications_page(service)
    elif page == "Reports":
        _render_reports_page(service)


# Dashboard

def _render_dashboard_page(service):
    """Renders today's readings, intake progress, quick actions and recent activity.

    Args:
        service: The main application service instance.
    """
    _page_title("Today")
    _show_flash()
    summary = service.dashboard()

    col1, col2 = st.columns(2)
    col1.metric("Heart Rate (BPM)", summary.current_heart_rate or "--")
    col2.metric("Blood Pressure", summary.current_bp or "--/--")

    st.write(f"Sodium: **{summary.sodium_total}** / {SODIUM_TARGET_MG} mg")
    st.progress(summary.sodium_progress)
    st.write(f"Fluid: **{summary.fluid_total}** / {FLUID_TARGET_ML} ml")
    st.progress(summary.fluid_progress)

    st.divider()
    st.subheader("Quick Log")
    q1, q2, q3, q4 = st.columns(4)
    q1.button("Log Vitals", on_click=go_to_page, args=("Vitals",), use_container_width=True)
    q2.button("Log Symptoms", on_click=go_to_page, args=("Symptoms",), use_container_width=True)
    q3.button("Medications", on_click=go_to_page, args=("Medications",), use_container_width=True)
    if q4.button(f"💧 Add {WATER_QUICK_ADD_ML}ml Water", key="quick_water", use_container_width=True):
        service.quick_add_water()
        _flash(f"Added {WATER_QUICK_ADD_ML}ml of water!")
        st.rerun()

    st.divider()
    st.subheader("Recent Activity")
    activities = service.recent_activity()
    if not activities:
        st.info("No recent activity")
        return
    for activity in activities:
        st.markdown(f"**{format_time(activity.timestamp)}** · {activity.text}")


# Vitals

VITALS_FIELDS = ('vitals_hr', 'vitals_systolic', 'vitals_diastolic', 'vitals_sodium', 'vitals_fluid')


def _save_vitals(service):
    values = [st.session_state.get(key, '') for key in VITALS_FIELDS]
    try:
        service.log_vitals(st.session_state.get('vitals_position'), *values)
    except MissingInputError as e:
        # Entered values stay in the form so they can be corrected.
        st.session_state.vitals_error = str(e)
        return
    for key in VITALS_FIELDS:
        st.session_state[key] = ""
    _flash("Vitals saved successfully!")


def _render_vitals_page(service):
    """Renders the vitals form, today's readings and the orthostatic test.

    Args:
        service: The main application service instance.
    """
    _page_title("Log Vitals")
    _show_flash()

    with st.form("vitals_form"):
        st.selectbox("Position", POSITIONS, key="vitals_position")
        col1, col2, col3 = st.columns(3)
        col1.text_input("Heart Rate (BPM)", key="vitals_hr")
        col2.text_input("Systolic", key="vitals_systolic")
        col3.text_input("Diastolic", key="vitals_diastolic")
        col4, col5 = st.columns(2)
        col4.text_input("Sodium (mg)", key="vitals_sodium")
        col5.text_input("Fluid (ml)", key="vitals_fluid")
        st.form_submit_button("Save Vitals", on_click=_save_vitals, args=(service,))

    error = st.session_state.pop('vitals_error', None)
    if error:
        st.error(error)

    st.subheader("Today's Readings")
    todays = service.get_today_vitals()
    if not todays:
        st.info("No vitals logged today")
    else:
        rows = [{
            'Time': format_time(v.timestamp),
            'Position': v.position,
            'HR': v.heart_rate,
            'BP': f"{v.systolic}/{v.diastolic}",
            'Sodium (mg)': v.sodium or None,
            'Fluid (ml)': v.fluid or None,
        } for v in todays]
        st.dataframe(pd.DataFrame(rows), hide_index=True, use_container_width=True)

    st.divider()
    _render_orthostatic_test(service)


def _reset_orthostatic_test():
    test = st.session_state.get('ortho_test')
    if test is not None:
        test.reset()
    else:
        st.session_state.ortho_test = OrthostaticTest()
    for key in ('ortho_lying', 'ortho_standing'):
        st.session_state.pop(key, None)


def _render_orthostatic_test(service):
    """Renders the current step of the orthostatic test.

    Args:
        service: The main application service instance.
    """
    st.subheader("Orthostatic Test")
    test = st.session_state.get('ortho_test')
    if test is None:
        st.caption("Measures how much your heart rate rises when you stand up.")
        st.button("Start Test", key="ortho_start", on_click=_reset_orthostatic_test)
        return

    if test.state == AWAITING_LYING:
        st.markdown("**Step 1: LYING DOWN - ENTER HEART RATE**")
        lying = st.text_input("Lying heart rate (BPM)", key="ortho_lying")
        if st.button("Next", key="ortho_next"):
            try:
                test.submit_lying(lying)
            except MissingInputError:
                st.error("Please enter heart rate")
            else:
                st.rerun()
    elif test.state == AWAITING_STANDING:
        st.markdown("**Step 2: STAND UP - WAIT 1 MINUTE**")
        st.caption("Stand up and wait for 1 minute, then enter your heart rate.")
        standing = st.text_input("Standing heart rate (BPM)", key="ortho_standing")
        if st.button("Complete Test", key="ortho_complete"):
            try:
                service.complete_orthostatic_test(test, standing)
            except MissingInputError:
                st.error("Please enter heart rate")
            else:
                st.rerun()
    else:
        result = test.result
        st.markdown("**✓ TEST COMPLETE**")
        st.write(f"Lying HR: {result.lying_heart_rate} BPM")
        st.write(f"Standing HR: {result.standing_heart_rate} BPM")
        st.markdown(f"**Increase: {result.delta} BPM**")
        if result.meets_pots_criteria:
            st.error(result.interpretation)
        else:
            st.success(result.interpretation)
        st.button("New Test", key="ortho_new", on_click=_reset_orthostatic_test)


# Symptoms

def _symptom_form():
    if 'symptom_form' not in st.session_state:
        st.session_state.symptom_form = SymptomForm()
    return st.session_state.symptom_form


def _save_symptoms(service):
    form = _symptom_form()
    for symptom in TRACKED_SYMPTOMS:
        severity = st.session_state.get(f"severity_{symptom}")
        if severity is not None:
            form.select(symptom, severity)
    service.log_symptoms(form, st.session_state.get('symptom_notes', ''))
    for symptom in TRACKED_SYMPTOMS:
        st.session_state.pop(f"severity_{symptom}", None)
    st.session_state.symptom_notes = ""
    _flash("Symptoms saved successfully!")


def _render_symptoms_page(service):
    """Renders the severity pickers, notes and today's symptom entries.

    Args:
        service: The main application service instance.
    """
    _page_title("Track Symptoms")
    _show_flash()
    st.caption("Rate each symptom from 0 (none) to 5 (severe). Unrated symptoms are not recorded.")

    for symptom in TRACKED_SYMPTOMS:
        st.radio(
            symptom, SEVERITY_OPTIONS, index=None, horizontal=True,
            key=f"severity_{symptom}",
        )
    st.text_area("Notes", key="symptom_notes")
    st.button("Save Symptoms", key="save_symptoms", on_click=_save_symptoms, args=(service,), type="primary")

    st.subheader("Today's Entries")
    todays = service.get_today_symptoms()
    if not todays:
        st.info("No symptoms logged today")
        return
    for entry in todays:
        with st.container(border=True):
            st.caption(format_time(entry.timestamp))
            st.write(f"Symptoms: {format_symptoms(entry.symptoms)}")
            if entry.notes:
                st.write(f"Notes: {entry.notes}")


# Medications

def _render_medications_page(service):
    """Renders the medication list, the add form and today's doses.

    Args:
        service: The main application service instance.
    """
    _page_title("Medications")
    _show_flash()

    medications = service.get_medications()
    st.subheader("My Medications")
    if not medications:
        st.info("No medications added yet")
    for medication in medications:
        with st.container(border=True):
            info, take_col, delete_col = st.columns([4, 1, 1])
            info.markdown(f"**{medication.name}**")
            info.caption(f"{medication.dosage} - {medication.frequency}")
            if medication.times:
                info.caption(medication.times)
            if take_col.button("Take", key=f"take_{medication.medication_id}", use_container_width=True):
                service.take_medication(medication.medication_id)
                _flash(f"Logged: {medication.name} taken")
                st.rerun()
            if delete_col.button("Delete", key=f"delete_{medication.medication_id}", use_container_width=True):
                st.session_state.confirm_delete = medication.medication_id
                st.rerun()
            if st.session_state.get('confirm_delete') == medication.medication_id:
                st.warning(f"Delete {medication.name}? Doses already logged will be kept.")
                yes, no = st.columns(2)
                if yes.button("Yes, delete", key=f"confirm_delete_{medication.medication_id}"):
                    service.delete_medication(medication.medication_id)
                    st.session_state.confirm_delete = None
                    st.rerun()
                if no.button("Cancel", key=f"cancel_delete_{medication.medication_id}"):
                    st.session_state.confirm_delete = None
                    st.rerun()

    st.subheader("Add Medication")
    with st.form("medication_form", clear_on_submit=True):
        name = st.text_input("Name")
        dosage = st.text_input("Dosage")
        frequency = st.text_input("Frequency")
        times = st.text_input("Times (e.g. 8am, 8pm)")
        submitted = st.form_submit_button("Add Medication")
    if submitted:
        try:
            service.add_medication(name, dosage, frequency, times)
        except MissingInputError as e:
            st.error(str(e))
        else:
            _flash("Medication added successfully!")
            st.rerun()

    st.subheader("Taken Today")
    todays = service.get_today_med_log()
    if not todays:
        st.info("No medications taken today")
        return
    for entry in todays:
        st.markdown(f"**{format_time(entry.timestamp)}** · {entry.name}")


# Reports

def _render_reports_page(service):
    """Renders the weekly summary, range reports, exports, contacts and data management.

    Args:
        service: The main application service instance.
    """
    _page_title("Reports")
    _show_flash()

    weekly = service.weekly_summary()
    st.subheader("Last 7 Days")
    c1, c2, c3, c4 = st.columns(4)
    c1.metric("Avg Heart Rate", weekly.average_heart_rate if weekly.average_heart_rate is not None else "--")
    c2.metric("Avg Blood Pressure", weekly.average_bp or "--/--")
    c3.metric("Symptom Days", weekly.symptom_days)
    c4.metric("Med Adherence", f"{weekly.adherence}%" if weekly.adherence is not None else "N/A")

    st.divider()
    _render_range_report_section(service)
    st.divider()
    _render_emergency_contacts_section(service)
    st.divider()
    _render_data_management_section(service)


def _render_range_report_section(service):
    st.subheader("Report & CSV Export")
    today = datetime.date.today()
    col1, col2 = st.columns(2)
    start = col1.date_input("Start date", value=today - datetime.timedelta(days=7), key="report_start")
    end = col2.date_input("End date", value=today, key="report_end")
    start_str = start.isoformat() if start else None
    end_str = end.isoformat() if end else None

    if st.button("Generate Report", key="generate_report"):
        try:
            report = service.generate_report(start_str, end_str)
        except MissingInputError as e:
            st.error(str(e))
        else:
            st.code(report.to_text(datetime.datetime.now()), language=None)

    try:
        file_name, csv_text, row_count = service.export_csv(start_str, end_str)
    except MissingInputError as e:
        st.error(str(e))
        return
    if row_count == 0:
        st.info("No data to export for selected period")
    else:
        st.download_button(
            f"Download Vitals CSV ({row_count} readings)", csv_text.encode('utf-8'),
            file_name, "text/csv", key="download_csv",
        )


def _render_emergency_contacts_section(service):
    st.subheader("Emergency Contacts")
    contacts = service.get_emergency_contacts()
    with st.form("emergency_form"):
        contact_name = st.text_input("Contact Name", value=contacts.contact_name if contacts else "")
        contact_phone = st.text_input("Contact Phone", value=contacts.contact_phone if contacts else "")
        physician_name = st.text_input("Physician Name", value=contacts.physician_name if contacts else "")
        physician_phone = st.text_input("Physician Phone", value=contacts.physician_phone if contacts else "")
        submitted = st.form_submit_button("Save Contacts")
    if submitted:
        service.save_emergency_contacts(contact_name, contact_phone, physician_name, physician_phone)
        _flash("Emergency contacts saved!")
        st.rerun()


def _render_data_management_section(service):
    st.subheader("Backup & Restore")
    file_name, backup_text = service.backup()
    st.download_button("Download Backup (JSON)", backup_text, file_name, "application/json", key="download_backup")

    uploaded = st.file_uploader("Restore from backup", type=["json"], key="restore_file")
    if uploaded is not None:
        confirmed = st.checkbox("I understand this will replace all current data.", key="restore_confirm")
        if st.button("Restore Data", key="restore_btn", disabled=not confirmed):
            try:
                service.restore(uploaded.getvalue())
            except ImportParseError:
                st.error("Error restoring data. Please check the file.")
            else:
                _flash("Data restored successfully!")
                st.rerun()

    st.subheader("Clear All Data")
    first = st.checkbox("Delete ALL data permanently", key="clear_confirm_1")
    second = first and st.checkbox("Really delete everything? This cannot be undone!", key="clear_confirm_2")
    if st.button("Clear All Data", key="clear_btn", disabled=not second):
        service.clear_all_data()
        _flash("All data cleared")
        st.rerun()
