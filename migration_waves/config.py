"""
Planner settings resolved from the environment (and a .env file).
"""

import os
from dataclasses import dataclass, field, replace
from typing import Callable, Mapping, Optional

from .exceptions import ConfigurationError
from .models import (
    DEFAULT_THRESHOLDS,
    DEFAULT_WAVE_SIZING,
    ORG_DEDICATED_WAVES_THRESHOLD,
    ClassificationThresholds,
    WaveSizing,
)

ENV_PREFIX = 'MIGRATION_WAVES_'


@dataclass(frozen=True)
class PlannerSettings:
    """Everything the planner can be tuned with."""
    thresholds: ClassificationThresholds = field(default_factory=lambda: DEFAULT_THRESHOLDS)
    sizing: WaveSizing = field(default_factory=lambda: DEFAULT_WAVE_SIZING)
    org_threshold: int = ORG_DEDICATED_WAVES_THRESHOLD

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> 'PlannerSettings':
        """
        Build settings from MIGRATION_WAVES_* environment variables.

        Unset or blank variables keep the built-in defaults.
        """
        env = os.environ if environ is None else environ

        thresholds = ClassificationThresholds(
            small_size_mb=_read(env, 'SMALL_SIZE_MB', float, DEFAULT_THRESHOLDS.small_size_mb),
            large_size_mb=_read(env, 'LARGE_SIZE_MB', float, DEFAULT_THRESHOLDS.large_size_mb),
            small_metadata=_read(env, 'SMALL_METADATA', float, DEFAULT_THRESHOLDS.small_metadata),
            large_metadata=_read(env, 'LARGE_METADATA', float, DEFAULT_THRESHOLDS.large_metadata),
        )
        sizing = WaveSizing(
            small=_read(env, 'WAVE_SIZE_SMALL', int, DEFAULT_WAVE_SIZING.small),
            medium=_read(env, 'WAVE_SIZE_MEDIUM', int, DEFAULT_WAVE_SIZING.medium),
            large=_read(env, 'WAVE_SIZE_LARGE', int, DEFAULT_WAVE_SIZING.large),
        )
        org_threshold = _read(env, 'ORG_THRESHOLD', int, ORG_DEDICATED_WAVES_THRESHOLD)
        return cls(thresholds=thresholds, sizing=sizing, org_threshold=org_threshold)

    def with_overrides(self, **overrides) -> 'PlannerSettings':
        """
        Return a copy with command-line overrides applied.

        Accepted keys are the ClassificationThresholds and WaveSizing field names
        (``wave_size_`` prefixed for the latter) and ``org_threshold``.
        None values are ignored.
        """
        overrides = {key: value for key, value in overrides.items() if value is not None}

        threshold_changes = {
            key: overrides.pop(key)
            for key in ('small_size_mb', 'large_size_mb', 'small_metadata', 'large_metadata')
            if key in overrides
        }
        sizing_changes = {
            key[len('wave_size_'):]: overrides.pop(key)
            for key in ('wave_size_small', 'wave_size_medium', 'wave_size_large')
            if key in overrides
        }
        org_threshold = overrides.pop('org_threshold', self.org_threshold)
        if overrides:
            raise TypeError(f"Unknown settings: {', '.join(sorted(overrides))}")

        return PlannerSettings(
            thresholds=replace(self.thresholds, **threshold_changes),
            sizing=replace(self.sizing, **sizing_changes),
            org_threshold=org_threshold,
        )


def _read(env: Mapping[str, str], name: str, cast: Callable, default):
    raw = env.get(ENV_PREFIX + name, '')
    if raw is None or not str(raw).strip():
        return default
    try:
        return cast(str(raw).strip())
    except ValueError as e:
        raise ConfigurationError(
            f"{ENV_PREFIX}{name} must be a valid {cast.__name__}, got {raw!r}"
        ) from e
