"""
Data models for vcfseek.

Provides Pydantic models for regions, variant records and source configuration.
"""

from .core import Region, SourceConfig, VariantRecord, parse_region

__all__ = [
    "Region",
    "SourceConfig",
    "VariantRecord",
    "parse_region",
]
