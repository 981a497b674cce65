"""
Application-wide settings for POTS Log.

Values are plain module-level constants so they can be imported anywhere and
monkeypatched in tests.
"""
# potslog/config.py

# Location of the local key-value store.
DATA_FILE = 'pots_records.json'

LOG_LEVEL = 'INFO'

# Daily intake targets used for the dashboard progress bars.
SODIUM_TARGET_MG = 8000
FLUID_TARGET_ML = 2500

WATER_QUICK_ADD_ML = 250

# A heart-rate rise of at least this many BPM on standing meets POTS criteria.
POTS_HR_INCREASE_THRESHOLD = 30

RECENT_ACTIVITY_LIMIT = 5
WEEKLY_WINDOW_DAYS = 7

POSITIONS = ("sitting", "standing", "lying")

TRACKED_SYMPTOMS = (
    "Dizziness",
    "Fatigue",
    "Brain Fog",
    "Palpitations",
    "Headache",
    "Nausea",
    "Shortness of Breath",
    "Chest Pain",
    "Tremor",
    "Temperature Intolerance",
)
