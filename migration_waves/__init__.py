"""
Migration wave planning for GitHub organization/repository exports.
"""

__version__ = "0.1.0"

from .classifier import classify, metadata_record_count, validate_thresholds
from .exceptions import ConfigurationError, IngestionError, MigrationWavesError
from .models import (
    ClassificationThresholds,
    MigrationRepository,
    MigrationWave,
    OrgGroup,
    OrgStats,
    RepositoryExport,
    RepositoryRecord,
    SizeCategory,
    WavePlan,
    WaveSizing,
    WaveStats,
)
from .planner import compute_wave_stats, plan
from .waves import build_waves

__all__ = [
    'ClassificationThresholds',
    'ConfigurationError',
    'IngestionError',
    'MigrationRepository',
    'MigrationWave',
    'MigrationWavesError',
    'OrgGroup',
    'OrgStats',
    'RepositoryExport',
    'RepositoryRecord',
    'SizeCategory',
    'WavePlan',
    'WaveSizing',
    'WaveStats',
    'build_waves',
    'classify',
    'compute_wave_stats',
    'metadata_record_count',
    'plan',
    'validate_thresholds',
]
