"""
Domain models for the build orchestrator.

All models are re-exported here for convenient access:

    from nativebuild.core.models import BuildConfig, RootManifest, TargetDescriptor
"""

from nativebuild.core.models.config import BuildConfig
from nativebuild.core.models.manifest import RootManifest
from nativebuild.core.models.target import TargetDescriptor

__all__ = [
    # config.py
    "BuildConfig",
    # manifest.py
    "RootManifest",
    # target.py
    "TargetDescriptor",
]
