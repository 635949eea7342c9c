"""Provenance tracking for pipeline artifacts."""

from depmap_hr_pipeline.persistence.provenance import ProvenanceTracker

__all__ = ["ProvenanceTracker"]
