"""Pipeline outcome metrics (CloudWatch EMF via powertools)."""

from aws_lambda_powertools import Metrics
from aws_lambda_powertools.metrics import MetricUnit

from core.models.media import ArtifactRecord, Modality


def record_outcome(metrics: Metrics, modality: Modality, record: ArtifactRecord) -> None:
    metrics.add_dimension(name="modality", value=modality.value)
    if record.cached:
        metrics.add_metric(name="CacheHit", unit=MetricUnit.Count, value=1)
        return

    metrics.add_metric(name="CacheMiss", unit=MetricUnit.Count, value=1)
    metrics.add_metric(name="ArtifactStored", unit=MetricUnit.Count, value=1)


def record_failure(metrics: Metrics, modality: Modality, error_code: str) -> None:
    metrics.add_dimension(name="modality", value=modality.value)
    metrics.add_metadata(key="error_code", value=error_code)
    metrics.add_metric(name="PipelineFailure", unit=MetricUnit.Count, value=1)
