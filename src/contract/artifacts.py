"""Build artifact contract definitions."""

from __future__ import annotations

# Schema version for graph manifest records (one JSON object per module).
ARTIFACT_SCHEMA_VERSION = 1
