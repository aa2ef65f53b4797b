"""Environment checks and tessdata provisioning."""

from tesswrap.diagnostics.requirements import RequirementIssue, check_startup_requirements
from tesswrap.diagnostics.tessdata import download_tessdata, looks_like_tessdata_dir

__all__ = [
    "RequirementIssue",
    "check_startup_requirements",
    "download_tessdata",
    "looks_like_tessdata_dir",
]
