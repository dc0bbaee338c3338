from __future__ import annotations

from decimal import Decimal
from typing import Any, Dict, Tuple

from ..engine.context import DEFAULT_JOB_TYPE, DEFAULT_REGION, normalize_key
from ..engine.tables import PricingTables

D = Decimal


def lookup_regional_average(
    tables: PricingTables, job_type: str, region: str
) -> Tuple[D, Dict[str, Any]]:
    """
    Benchmark margin for (job type, region).
    Fallback order: job type -> "default" job type, then region -> "default" region.
    """
    key = normalize_key(job_type)
    row = tables.benchmarks.get(key)
    job_bucket = key
    if row is None:
        row = tables.benchmarks[DEFAULT_JOB_TYPE]
        job_bucket = DEFAULT_JOB_TYPE

    if region in row:
        return row[region], {"jobBucket": job_bucket, "regionBucket": region}

    if DEFAULT_REGION in row:
        return row[DEFAULT_REGION], {"jobBucket": job_bucket, "regionBucket": DEFAULT_REGION}

    # job-specific row without a default region: use the global default bucket
    fallback = tables.benchmarks[DEFAULT_JOB_TYPE]
    value = fallback.get(region, fallback[DEFAULT_REGION])
    return value, {
        "jobBucket": DEFAULT_JOB_TYPE,
        "regionBucket": region if region in fallback else DEFAULT_REGION,
    }
