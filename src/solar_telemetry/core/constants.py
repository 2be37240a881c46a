"""
Application-wide constants for solar plant telemetry processing.

This module defines thresholds, validation ranges and canonical field names
used throughout the application.
"""

# Month abbreviations used by the weather date dialect (DD-MMM-YY)
MONTHS = ("Jan", "Feb", "Mar", "Apr", "May", "Jun",
          "Jul", "Aug", "Sep", "Oct", "Nov", "Dec")

# Two-digit years are interpreted within this century
CENTURY_PREFIX = "20"

# Clock
MINUTES_PER_DAY = 1440
DEFAULT_TIME = "00:00"

# Plant operation thresholds (W/m²)
POA_START_THRESHOLD = 10.0  # first sample at or above this starts the plant
POA_STOP_LOWER = 0.0  # stop band is (lower, upper), both exclusive
POA_STOP_UPPER = 50.0

# Spreadsheet row numbers are 1-based and include the header row
ROW_NUMBER_OFFSET = 2

# Weather validation ranges: canonical field -> (label, min, max)
WEATHER_RANGES = {
    "POA": ("POA Pyranometer", 0, 1500),
    "GHI": ("GHI Pyranometer", 0, 1500),
    "AlbedoUp": ("Albedo Up", 0, 1500),
    "AlbedoDown": ("Albedo Down", 0, 1500),
    "AmbientTemp": ("Ambient Temperature", 0, 100),
    "WindSpeed": ("Wind Speed", 0, 200),
    "Rainfall": ("Rainfall", 0, 500),
    "Humidity": ("Humidity", 0, 100),
}

# Module temperature must be strictly positive
MODULE_TEMP_MAX = 100

# Derived meter fields written by the enricher
PLANT_START_FIELD = "Plant Start Time"
PLANT_STOP_FIELD = "Plant Stop Time"
OPERATING_TOTAL_FIELD = "Total"
GSS_EXPORT_FIELD = "GSS Export Total"
GSS_IMPORT_FIELD = "GSS Import Total"
NET_EXPORT_FIELD = "Net Export @GSS"

# Identifier token marking a grid-substation meter
GSS_TOKEN = "gss"

# Record status lifecycle
STATUS_DRAFT = "draft"
STATUS_SUBMITTED = "submitted"

# Daily generation sync
UNKNOWN_SITE = "Unknown Site"
NO_SITE_NAME = "No Site Name"
DEFAULT_SITE_KEY = "default"

# Daily totals export
EXPORT_FORMATS = ("json", "csv")
EXPORT_CSV_HEADER = (
    "Date",
    "Site Name",
    "Daily Generation (kWh)",
    "Plant Start Time",
    "Plant Stop Time",
    "Total Operation Time",
)
