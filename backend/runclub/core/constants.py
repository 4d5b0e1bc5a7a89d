"""Shared domain constants.

Centralizes the plausibility thresholds used when accepting runs so we can
document and adjust them in one place. Distances are meters, durations are
minutes and speeds/paces are km/h.
"""

# Mean Earth radius used by the haversine formula (meters)
EARTH_RADIUS_M = 6371000.0

# Shortest run we accept (meters)
MIN_DISTANCE_M = 10.0

# Speed envelope for a plausible run (km/h).
# Faster than MAX implies a superhuman pace; slower than MIN usually means
# tracking was left on.
MAX_SPEED_KMH = 15.0
MIN_SPEED_KMH = 0.5

# Accepted range for a reported pace (km/h)
MIN_PACE_KMH = 0.5
MAX_PACE_KMH = 15.0

MAX_LOCATION_LENGTH = 500

# Relative disagreement between GPS path and reported distance that we log
PATH_DISTANCE_TOLERANCE = 0.15

# Goal assigned to new users (meters)
DEFAULT_GOAL_M = 1.0
