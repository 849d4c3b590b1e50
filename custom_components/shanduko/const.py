# File: const.py
"""Constants for the Shanduko Water Watch integration.

This file centralizes configuration keys, defaults, storage keys, signal
suffixes, service names and gamification values so that every module refers
to the same names.
"""

import logging

from homeassistant.const import Platform

# ------------------------------------------------------------------------------------------------
# General / Integration Information
# ------------------------------------------------------------------------------------------------
SHANDUKO_TITLE = "Shanduko Water Watch"

DOMAIN = "shanduko"

# Logger
LOGGER = logging.getLogger(__package__)

PLATFORMS = [Platform.SENSOR]

# hass.data keys
COORDINATOR = "coordinator"
COORDINATOR_SUFFIX = "_coordinator"
DATA_ACCESS = "data_access"
DEMO_STORE = "demo_store"
GAMIFICATION_MANAGER = "gamification_manager"
NOTIFICATION_MANAGER = "notification_manager"

# Storage and Versioning
STORAGE_KEY = "shanduko_data"
STORAGE_VERSION = 1

# ------------------------------------------------------------------------------------------------
# Configuration Keys
# ------------------------------------------------------------------------------------------------
CONF_SUPABASE_URL = "supabase_url"
CONF_SUPABASE_ANON_KEY = "supabase_anon_key"
CONF_ACCESS_TOKEN = "access_token"
CONF_REGION = "region"
CONF_ANNOUNCE_INTERVAL = "announce_interval"
CONF_UPDATE_INTERVAL = "update_interval"
CONF_USE_CLOUD_BACKEND = "use_cloud_backend"

DEFAULT_REGION = "ZW"
DEFAULT_ANNOUNCE_INTERVAL = 3.0
DEFAULT_UPDATE_INTERVAL = 5

CONFIG_FLOW_STEP_USER = "user"
OPTIONS_FLOW_STEP_INIT = "init"

TRANS_KEY_ERROR_SINGLE_INSTANCE = "single_instance_allowed"
TRANS_KEY_ERROR_INCOMPLETE_CLOUD = "incomplete_cloud_credentials"

# ------------------------------------------------------------------------------------------------
# Local demo store collections
# ------------------------------------------------------------------------------------------------
COLLECTION_SENSOR_READINGS = "sensor_readings"
COLLECTION_PREDICTIONS = "predictions"
COLLECTION_REPORTS = "reports"
COLLECTION_PROFILES = "profiles"
COLLECTION_QUIZ_ATTEMPTS = "quiz_attempts"
COLLECTION_SETTINGS = "settings"

DEMO_COLLECTIONS = [
    COLLECTION_SENSOR_READINGS,
    COLLECTION_PREDICTIONS,
    COLLECTION_REPORTS,
    COLLECTION_PROFILES,
    COLLECTION_QUIZ_ATTEMPTS,
]

DEMO_SEED = 20240601
DEMO_USER_ID = "demo-user"
DEMO_USERNAME = "Demo User"
DEMO_LOCATION_NAME = "Lake Chivero"
DEMO_LATITUDE = -17.8292
DEMO_LONGITUDE = 31.0522

# Settings blob keys
SETTINGS_USE_CLOUD_BACKEND = "use_cloud_backend"

# ------------------------------------------------------------------------------------------------
# Cloud (PostgREST) tables and columns
# ------------------------------------------------------------------------------------------------
TABLE_SENSOR_READINGS = "sensor_readings"
TABLE_REPORTS = "reports"
TABLE_PROFILES = "profiles"
TABLE_QUIZ_ATTEMPTS = "quiz_attempts"

CLOUD_REST_PATH = "/rest/v1/"
CLOUD_AUTH_USER_PATH = "/auth/v1/user"
CLOUD_ERROR_NO_ROWS = "PGRST116"

FILTER_EQ = "eq"
FILTER_GTE = "gte"
FILTER_LTE = "lte"

READINGS_LATEST_LIMIT = 5
LEADERBOARD_LIMIT = 50
DEFAULT_HISTORY_HOURS = 24

# ------------------------------------------------------------------------------------------------
# Model keys (application shape)
# ------------------------------------------------------------------------------------------------
DATA_ID = "id"
DATA_TIMESTAMP = "timestamp"
DATA_CREATED_AT = "created_at"
DATA_UPDATED_AT = "updated_at"

DATA_PROFILE_USERNAME = "username"
DATA_PROFILE_AVATAR_EMOJI = "avatar_emoji"
DATA_PROFILE_REGION = "region"
DATA_PROFILE_POINTS = "points"
DATA_PROFILE_STREAK_DAYS = "streak_days"
DATA_PROFILE_BADGES = "badges"
DATA_PROFILE_ALERT_PREFERENCES = "alert_preferences"
DATA_PROFILE_FEATURE_FLAGS = "feature_flags"

PROFILE_UPDATABLE_FIELDS = [
    DATA_PROFILE_USERNAME,
    DATA_PROFILE_AVATAR_EMOJI,
    DATA_PROFILE_REGION,
    DATA_PROFILE_POINTS,
    DATA_PROFILE_STREAK_DAYS,
    DATA_PROFILE_BADGES,
    DATA_PROFILE_ALERT_PREFERENCES,
    DATA_PROFILE_FEATURE_FLAGS,
]

DATA_BADGE_CODE = "code"
DATA_BADGE_TITLE = "title"
DATA_BADGE_EMOJI = "emoji"
DATA_BADGE_DESCRIPTION = "description"
DATA_BADGE_EARNED_AT = "earned_at"

DATA_REPORT_USER_ID = "user_id"
DATA_REPORT_TITLE = "title"
DATA_REPORT_DESCRIPTION = "description"
DATA_REPORT_LOCATION = "location"
DATA_REPORT_LATITUDE = "latitude"
DATA_REPORT_LONGITUDE = "longitude"
DATA_REPORT_IMAGES = "images"
DATA_REPORT_STATUS = "status"
DATA_REPORT_VERIFICATIONS = "verifications"
DATA_REPORT_REACTIONS = "reactions"

DATA_FEEDBACK_USER_ID = "user_id"
DATA_REACTION_TYPE = "type"

DATA_QUIZ_USER_ID = "user_id"
DATA_QUIZ_DATE = "date"
DATA_QUIZ_CORRECT = "correct"
DATA_QUIZ_TOTAL = "total"
DATA_QUIZ_QUESTIONS_ANSWERED = "questions_answered"

DATA_READING_TEMPERATURE = "temperature"
DATA_READING_PH_LEVEL = "ph_level"
DATA_READING_DISSOLVED_OXYGEN = "dissolved_oxygen"
DATA_READING_TURBIDITY = "turbidity"
DATA_READING_E_COLI = "e_coli"
DATA_READING_TOTAL_COLIFORM = "total_coliform"
DATA_READING_BACTERIA_ATP = "bacteria_atp"
DATA_READING_LATITUDE = "latitude"
DATA_READING_LONGITUDE = "longitude"
DATA_READING_LOCATION_NAME = "location_name"
DATA_READING_IS_ANOMALY = "is_anomaly"

# Report status values
REPORT_STATUS_SUBMITTED = "submitted"
REPORT_STATUS_REVIEWING = "reviewing"
REPORT_STATUS_RESOLVED = "resolved"
REPORT_STATUS_CLOSED = "closed"

# Reaction types
REACTION_HELPFUL = "helpful"
REACTION_CONCERNING = "concerning"
REACTION_THANKFUL = "thankful"
REACTION_VERIFIED = "verified"
REACTION_TYPES = [
    REACTION_HELPFUL,
    REACTION_CONCERNING,
    REACTION_THANKFUL,
    REACTION_VERIFIED,
]

# Leaderboard periods
LEADERBOARD_PERIOD_MONTHLY = "monthly"
LEADERBOARD_PERIOD_ALL_TIME = "all-time"

# ------------------------------------------------------------------------------------------------
# Defaults for JSON blobs
# ------------------------------------------------------------------------------------------------
DEFAULT_AVATAR_EMOJI = "👤"

DEFAULT_ALERT_PREFERENCES = {
    "ph_min": 6.5,
    "ph_max": 8.5,
    "turbidity_max": 5.0,
    "dissolved_oxygen_min": 5.0,
    "alert_radius": 5.0,
}

DEFAULT_FEATURE_FLAGS = {
    "gamification": True,
    "community": True,
    "animated_charts": True,
    "heatmap": True,
    "crazy_demo": False,
}

# ------------------------------------------------------------------------------------------------
# Gamification
# ------------------------------------------------------------------------------------------------
XP_REPORT = 25
XP_ANOMALY_REPORT = 50
XP_PERFECT_QUIZ = 30
XP_QUIZ_SCALE = 20
XP_REPORT_SHARED = 15
HIGH_SCORE_THRESHOLD = 0.9

XP_REASON_REPORT = "Water Quality Report"
XP_REASON_ANOMALY_REPORT = "Anomaly Report"
XP_REASON_QUIZ = "Quiz Completion"
XP_REASON_REPORT_SHARED = "Report Shared"

# Celebration styles
CELEBRATION_FIREWORK = "firework"
CELEBRATION_REPORT = "report"
CELEBRATION_STREAK = "streak"
CELEBRATION_XP = "xp"

# Visit pages
VISIT_PAGE_DASHBOARD = "dashboard"
VISIT_PAGE_MAP = "map"

# ------------------------------------------------------------------------------------------------
# Events and Signals
# ------------------------------------------------------------------------------------------------
SIGNAL_SUFFIX_XP_GAINED = "xp_gained"
SIGNAL_SUFFIX_ACHIEVEMENT_EARNED = "achievement_earned"
SIGNAL_SUFFIX_TOAST = "toast"
SIGNAL_SUFFIX_CELEBRATION = "celebration"

EVENT_XP_GAINED = f"{DOMAIN}_{SIGNAL_SUFFIX_XP_GAINED}"
EVENT_ACHIEVEMENT_EARNED = f"{DOMAIN}_{SIGNAL_SUFFIX_ACHIEVEMENT_EARNED}"
EVENT_TOAST = f"{DOMAIN}_{SIGNAL_SUFFIX_TOAST}"
EVENT_CELEBRATION = f"{DOMAIN}_{SIGNAL_SUFFIX_CELEBRATION}"

TOAST_LEVEL_SUCCESS = "success"

# ------------------------------------------------------------------------------------------------
# Services
# ------------------------------------------------------------------------------------------------
SERVICE_SUBMIT_REPORT = "submit_report"
SERVICE_VERIFY_REPORT = "verify_report"
SERVICE_REACT_TO_REPORT = "react_to_report"
SERVICE_COMPLETE_QUIZ = "complete_quiz"
SERVICE_RECORD_VISIT = "record_visit"
SERVICE_SHARE_REPORT = "share_report"
SERVICE_ENABLE_LOCATION = "enable_location"
SERVICE_UPDATE_PROFILE = "update_profile"
SERVICE_SAVE_ALERT_PREFERENCES = "save_alert_preferences"
SERVICE_SAVE_FEATURE_FLAGS = "save_feature_flags"
SERVICE_CHECK_ACHIEVEMENTS = "check_achievements"

SERVICES = [
    SERVICE_SUBMIT_REPORT,
    SERVICE_VERIFY_REPORT,
    SERVICE_REACT_TO_REPORT,
    SERVICE_COMPLETE_QUIZ,
    SERVICE_RECORD_VISIT,
    SERVICE_SHARE_REPORT,
    SERVICE_ENABLE_LOCATION,
    SERVICE_UPDATE_PROFILE,
    SERVICE_SAVE_ALERT_PREFERENCES,
    SERVICE_SAVE_FEATURE_FLAGS,
    SERVICE_CHECK_ACHIEVEMENTS,
]

FIELD_TITLE = "title"
FIELD_DESCRIPTION = "description"
FIELD_LOCATION = "location"
FIELD_LATITUDE = "latitude"
FIELD_LONGITUDE = "longitude"
FIELD_IMAGES = "images"
FIELD_IS_ANOMALY = "is_anomaly"
FIELD_REPORT_ID = "report_id"
FIELD_IS_ACCURATE = "is_accurate"
FIELD_NOTES = "notes"
FIELD_REACTION_TYPE = "reaction_type"
FIELD_CORRECT = "correct"
FIELD_TOTAL = "total"
FIELD_QUESTIONS_ANSWERED = "questions_answered"
FIELD_PAGE = "page"
FIELD_USERNAME = "username"
FIELD_AVATAR_EMOJI = "avatar_emoji"
FIELD_REGION = "region"
FIELD_STREAK_DAYS = "streak_days"

MSG_NO_ENTRY_FOUND = "No Shanduko entry found"
ERROR_REPORT_NOT_FOUND_FMT = "Report '{}' not found"

# ------------------------------------------------------------------------------------------------
# Sensors
# ------------------------------------------------------------------------------------------------
ATTR_ALERTS = "alerts"
ATTR_BADGES = "badges"
ATTR_BACKEND_MODE = "backend_mode"
ATTR_IS_ANOMALY = "is_anomaly"
ATTR_LOCATION_NAME = "location_name"
ATTR_READING_TIMESTAMP = "reading_timestamp"
ATTR_STREAK_DAYS = "streak_days"
ATTR_USERNAME = "username"
ATTR_LEADERBOARD = "leaderboard"

COORDINATOR_DATA_READINGS = "readings"
COORDINATOR_DATA_PREDICTIONS = "predictions"
COORDINATOR_DATA_PROFILE = "profile"
COORDINATOR_DATA_LEADERBOARD = "leaderboard"
COORDINATOR_DATA_MODE = "mode"

# Sensor translation keys and unique_id suffixes
TRANS_KEY_SENSOR_TEMPERATURE = "water_temperature"
TRANS_KEY_SENSOR_PH = "ph_level"
TRANS_KEY_SENSOR_DISSOLVED_OXYGEN = "dissolved_oxygen"
TRANS_KEY_SENSOR_TURBIDITY = "turbidity"
TRANS_KEY_SENSOR_POINTS = "points"
TRANS_KEY_SENSOR_BADGES = "badges"
TRANS_KEY_SENSOR_LEADERBOARD_RANK = "leaderboard_rank"

SENSOR_UID_SUFFIX_POINTS = "_points"
SENSOR_UID_SUFFIX_BADGES = "_badges"
SENSOR_UID_SUFFIX_LEADERBOARD_RANK = "_leaderboard_rank"

UNIT_NTU = "NTU"
UNIT_MG_PER_L = "mg/L"
UNIT_XP = "XP"

DEVICE_MANUFACTURER = "Shanduko"
DEVICE_MODEL = "Water Watch"
