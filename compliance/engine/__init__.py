"""Change diff engine."""

from .diff import ChangeReport, ConstraintDelta, build_change_report, diff_details

__all__ = [
    "ChangeReport",
    "ConstraintDelta",
    "build_change_report",
    "diff_details",
]
