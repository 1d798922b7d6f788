"""Application-wide constants for the Guidebook platform."""

from __future__ import annotations

# Slot scanning
DEFAULT_SLOT_STEP_MINUTES = 30

# Payments
DEFAULT_PAYMENT_DEADLINE_HOURS = 24

# Booking creation under concurrent writers
DEFAULT_BOOKING_CONFLICT_RETRIES = 2

# Two coordinates closer than this (in degrees, ~11 m) are the same place
LOCATION_COORDINATE_TOLERANCE = 0.0001

# Text constraints
MAX_NOTES_LENGTH = 1000
MAX_GUEST_NAME_LENGTH = 100
MAX_GUEST_PHONE_LENGTH = 20
