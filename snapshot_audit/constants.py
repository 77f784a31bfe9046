"""
Constants for the snapshot audit.
Event names, sentinel display values and column definitions.
"""

CREATE_SNAPSHOT_EVENT = "CreateSnapshot"
DELETE_SNAPSHOT_EVENT = "DeleteSnapshot"

# Lookup sentinels
DETACHED = "detached"
NO_NAME = "(no name)"
MISSING = "-"

DISPLAY_WIDTH = 20
ELLIPSIS = "..."

# Cache dataset tags
CLOUDTRAIL_TAG = "cloudtrail"
VOLUMES_TAG = "volumes"
INSTANCES_TAG = "instances"
REPORT_TAG = "report"

TABLE_HEADERS = (
    "#",
    "TIME",
    "EVENT",
    "IDENTITY",
    "SNAPSHOT",
    "VOLUME",
    "INSTANCE",
    "NAME",
    "RESULT",
    "EVENT_ID",
)
