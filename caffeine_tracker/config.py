"""
Caffeine Tracker Configuration.
All settings via environment variables with sensible defaults.

Half-life, daily limit and sleep cutoff below are the profile-provider
defaults used by the HTTP layer. The engine in caffeine_tracker.core
never falls back to them on its own.
"""

import os

# --- Auth ---
API_KEY = os.getenv("CAFFEINE_API_KEY", "")

# --- Logging ---
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

# --- Timezone ---
TIMEZONE = os.getenv("TZ", "Europe/Zurich")

# --- Profile defaults ---
HALF_LIFE_HOURS: float = float(os.getenv("CAFFEINE_HALF_LIFE_HOURS", "5.0"))
DAILY_LIMIT_MG: float = float(os.getenv("CAFFEINE_DAILY_LIMIT_MG", "400"))
SLEEP_CUTOFF = os.getenv("CAFFEINE_SLEEP_CUTOFF", "23:00")  # HH:MM local time
WAKE_TIME = os.getenv("CAFFEINE_WAKE_TIME", "07:00")  # HH:MM local time

# --- Sampling ---
# 12h comfortably exceeds the time for a standard half-life to decay
# below any meaningful threshold.
RESOLUTION_MINUTES: int = int(os.getenv("CAFFEINE_RESOLUTION_MINUTES", "5"))
HORIZON_HOURS: float = float(os.getenv("CAFFEINE_HORIZON_HOURS", "12"))
EPSILON_MG: float = float(os.getenv("CAFFEINE_EPSILON_MG", "0.01"))
# Upper bound on samples in one timeline or curve.
MAX_SAMPLES: int = int(os.getenv("CAFFEINE_MAX_SAMPLES", "200000"))

# --- Safety bands (percent of daily limit) ---
WARNING_PCT: float = float(os.getenv("CAFFEINE_WARNING_PCT", "80"))
DANGER_PCT: float = float(os.getenv("CAFFEINE_DANGER_PCT", "100"))

# --- Sleep window ---
SLEEP_WINDOW_HOURS: float = float(os.getenv("SLEEP_WINDOW_HOURS", "6"))
SLEEP_SAFE_MG: float = float(os.getenv("SLEEP_SAFE_MG", "30"))      # below: undisrupted
SLEEP_DANGER_MG: float = float(os.getenv("SLEEP_DANGER_MG", "40"))  # above: likely disrupted

# --- Next-dose recommendation ---
MIN_DOSE_MG = 25
MAX_DOSE_MG = 75
DOSE_STEP_MG = 5
MIN_DOSE_GAP_MINUTES = 90
SIMULATION_STEP_MINUTES = 15
DOSE_CUTOFF_HOURS = 6          # no new dose within this many hours of bedtime
DOSE_SLOT_HOURS = 3            # remaining budget is spread over slots this long
PEAK_CAP_FRACTION = 0.6        # combined peak may not exceed this share of the optimum
DOSE_WINDOW_MINUTES = 30

# --- Daily limit recommendation ---
OPTIMAL_MG_PER_KG = 3.0
SAFE_MG_PER_KG = 6.0
OPTIMAL_CAP_MG = 200
SAFE_CAP_MG = 400
OPTIMAL_FLOOR_MG = 50

MEDICATION_MULTIPLIERS = {
    "anxiety_panic": 0.6,
    "adhd_medication": 0.6,
    "insomnia_medication": 0.6,
    "acid_reflux": 0.75,
    "none": 1.0,
}
