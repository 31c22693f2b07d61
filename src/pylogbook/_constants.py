"""Internal constants shared across the library."""

import math

# ------------------------------------------------------------------
# Unit conversion
# ------------------------------------------------------------------

#: 1 m/s expressed in knots.
KNOTS_PER_MPS = 1.943844
METERS_PER_NAUTICAL_MILE = 1852.0
PASCALS_PER_HECTOPASCAL = 100.0
DEGREES_PER_RADIAN = 180.0 / math.pi

# ------------------------------------------------------------------
# Rule thresholds and timers
# ------------------------------------------------------------------

#: Cumulative course change (degrees) that produces a log entry while sailing.
COURSE_CHANGE_THRESHOLD_DEG = 25.0
#: Short-interval record promotion tick, seconds.
RECORD_INTERVAL_S = 120.0
#: Status snapshot tick, seconds.
SNAPSHOT_INTERVAL_S = 3600.0

DEFAULT_CATEGORY = "navigation"
DEFAULT_AUTHOR = "auto"

# ------------------------------------------------------------------
# Signal K paths
# ------------------------------------------------------------------

PATH_NAVIGATION_STATE = "navigation.state"
PATH_POSITION = "navigation.position"
PATH_DATETIME = "navigation.datetime"
PATH_GNSS_TYPE = "navigation.gnss.type"
PATH_SOG = "navigation.speedOverGround"
PATH_STW = "navigation.speedThroughWater"
PATH_COG = "navigation.courseOverGroundTrue"
PATH_HEADING = "navigation.headingTrue"
PATH_ROLL = "navigation.attitude.roll"
PATH_LOG = "navigation.log"
PATH_WIND_SPEED = "environment.wind.speedOverGround"
PATH_WIND_DIRECTION = "environment.wind.directionTrue"
PATH_PRESSURE = "environment.outside.pressure"
PATH_AUTOPILOT = "steering.autopilot.state"
PATH_CREW = "communication.crewNames"

SAIL_INVENTORY_PREFIX = "sails.inventory."

SIGNALK_SELF_ENDPOINT = "/signalk/v1/api/vessels/self"
USER_AGENT = "pylogbook"
