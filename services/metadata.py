#!/usr/bin/env python3
"""
Recording metadata written alongside the recording files.
"""

import os
import json
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List

from exceptions import RecordingStorageError

METADATA_FILENAME = 'metadata.json'

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RecordingMetadata:
    """Call URL and the roster as it was when the recording stopped."""
    meeting_url: str
    participants: List[Dict[str, Any]] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'meeting_url': self.meeting_url,
            'participants': list(self.participants),
        }


def write_metadata(directory: str, metadata: RecordingMetadata) -> str:
    """
    Write the metadata side-car file once.

    The file is written to a temporary name and renamed into place, so a
    reader never sees a partial file.

    Args:
        directory: Directory holding the recording files
        metadata: Metadata to write

    Returns:
        Path of the written file

    Raises:
        RecordingStorageError: If the file cannot be written
    """
    path = os.path.join(directory, METADATA_FILENAME)
    tmp_path = path + '.tmp'
    try:
        os.makedirs(directory, exist_ok=True)
        with open(tmp_path, 'w', encoding='utf-8') as f:
            json.dump(metadata.to_dict(), f, indent=2, default=str)
            f.flush()
            os.fsync(f.fileno())
        os.replace(tmp_path, path)
    except (OSError, TypeError, ValueError) as e:
        if os.path.exists(tmp_path):
            try:
                os.remove(tmp_path)
            except OSError as cleanup_error:
                logger.warning(f"Could not remove temporary metadata file {tmp_path}: {cleanup_error}")
        raise RecordingStorageError(path, 'write', str(e)) from e

    logger.info(f"Recording metadata saved to: {path}")
    return path
