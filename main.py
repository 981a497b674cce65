"""
This is the main entry point for the POTS Log Streamlit application.

This script handles the following key responsibilities:
- Configures logging and the Streamlit page.
- Initializes the `PotsLogService`, which manages all records and derived views.
- Hands rendering over to `gui.show_main_app`.

Run with: streamlit run main.py
"""
# main.py

import logging

import streamlit as st

from potslog import config
from potslog.service import PotsLogService
import gui

logging.basicConfig(
    level=config.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

# Set the basic configuration for the Streamlit page.
st.set_page_config(
    page_title="POTS Log",
    page_icon="❤️",
    layout="wide"
)

# Service Initialization
@st.cache_resource
def get_potslog_service():
    """
    Initializes and returns the main PotsLogService instance.

    Decorated with `@st.cache_resource` so the service (and its loaded store)
    is created once per process and reused across reruns.

    Returns:
        PotsLogService: The shared service instance.
    """
    return PotsLogService()

service = get_potslog_service()

gui.show_main_app(service)
