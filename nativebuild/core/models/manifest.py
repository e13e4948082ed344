"""
Root manifest — the project's package.json metadata.

Read once at startup and shared read-only by every target context.
Every field is a required string; anything else fails fast.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, StrictStr


class RootManifest(BaseModel):
    """Package metadata copied into every per-target package."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    name: StrictStr
    version: StrictStr
    description: StrictStr
    repository: StrictStr
    license: StrictStr
