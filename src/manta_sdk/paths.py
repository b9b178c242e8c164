"""
Path validation for Manta object and job paths
"""

import re
from typing import Iterable

from .exceptions import ValidationError

OBJ_PATH_REGEX = re.compile(r'^/.+/(?:stor|public|reports)(?:/|$)')
JOB_PATH_REGEX = re.compile(r'^/.+?/jobs/.+?(?:/live|$)')


def validate_object_path(path: str) -> str:
    """Ensure a path lies under /<user>/stor, /<user>/public or /<user>/reports"""
    if not isinstance(path, str) or '\n' in path or not OBJ_PATH_REGEX.match(path):
        raise ValidationError(f"Invalid object path: {path!r}", {"path": path})
    return path


def validate_job_path(path: str) -> str:
    """Ensure a path names a job, /<user>/jobs/<id>"""
    if not isinstance(path, str) or '\n' in path or not JOB_PATH_REGEX.match(path):
        raise ValidationError(f"Invalid job path: {path!r}", {"path": path})
    return path


def validate_object_paths(paths: Iterable[str]) -> list:
    if isinstance(paths, str):
        raise ValidationError("Object paths must be a list of paths, not a string")
    return [validate_object_path(p) for p in paths]
