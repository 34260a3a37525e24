"""
Evidence File Lookup.

Test runs drop their reports (PDF) under a per-platform evidence directory.
On a Jenkins agent (``JENKINS_HOME`` set) the CI path is used instead.
"""

from __future__ import annotations

import os
import platform
from pathlib import Path
from typing import Mapping, Optional

from loguru import logger

from automation_core.connectors.settings import EvidenceSettings

CI_HOME_VARIABLE = "JENKINS_HOME"
EVIDENCE_SUBDIR = "PDF"


def resolve_evidence_dir(
    settings: EvidenceSettings,
    environ: Optional[Mapping[str, str]] = None,
    system: Optional[str] = None,
) -> Path:
    """
    Pick the directory evidence files are read from.

    Args:
        settings: Configured evidence paths.
        environ: Environment to inspect (defaults to ``os.environ``).
        system: Platform name as returned by ``platform.system()``.

    Returns:
        ``<base>/PDF`` for the CI, Windows or Unix base path.
    """
    environ = os.environ if environ is None else environ
    system = system or platform.system()

    if environ.get(CI_HOME_VARIABLE):
        base = settings.jenkins_path
    elif system.upper().startswith("WINDOWS"):
        base = settings.windows_path
    else:
        base = settings.unix_path

    return Path(base) / EVIDENCE_SUBDIR


def latest_file(directory: Path) -> Optional[Path]:
    """Most recently modified regular file in ``directory``, or None."""
    if not directory.is_dir():
        logger.debug(f"Evidence directory does not exist: {directory}")
        return None

    files = [entry for entry in directory.iterdir() if entry.is_file()]
    if not files:
        return None
    return max(files, key=lambda entry: entry.stat().st_mtime)
