"""Status codes and reasons shared across subsystem boundaries."""

from enum import StrEnum


class ReassignmentReason(StrEnum):
    """Why the reassignment policy replaced a work order's field worker.

    The value is embedded verbatim in the description annotation, so
    renaming a member changes the text written upstream.
    """

    UNASSIGNED = "unassigned"
    DEACTIVATED = "deactivated"


class MirrorSyncMethod(StrEnum):
    """HTTP method used to notify the reconciliation pipeline."""

    GET = "GET"
    POST = "POST"
