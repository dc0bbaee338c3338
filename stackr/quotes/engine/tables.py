from __future__ import annotations

import json
from dataclasses import dataclass
from decimal import Decimal
from pathlib import Path
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional, Tuple

import yaml
from jsonschema import ValidationError, validate

from .context import (
    DEFAULT_INDUSTRY,
    DEFAULT_JOB_TYPE,
    DEFAULT_REGION,
    IndustryParameters,
    Season,
    TierName,
    normalize_key,
)
from .errors import InvalidParametersError, TableError

D = Decimal

TABLE_FILES = (
    "industries",
    "job_types",
    "seasonality",
    "regions",
    "benchmarks",
    "tier_content",
)


def vertical_root() -> Path:
    # .../stackr/quotes/engine/tables.py -> parents[1] = .../stackr/quotes
    return Path(__file__).resolve().parents[1]


def default_tables_dir() -> Path:
    return vertical_root() / "data" / "tables"


def tables_schema_path() -> Path:
    return vertical_root() / "data" / "schemas" / "pricing_tables.schema.json"


@dataclass(frozen=True)
class StateEntry:
    abbr: str
    name: str


@dataclass(frozen=True)
class RegionEntry:
    name: str
    states: Tuple[StateEntry, ...]


@dataclass(frozen=True)
class TierContent:
    description: str
    features: Tuple[str, ...]


@dataclass(frozen=True)
class PricingTables:
    """
    Immutable snapshot of all static lookup tables.
    Safe to share between concurrent calculations.
    """

    version: str
    industries: Mapping[str, IndustryParameters]
    job_types: Mapping[str, str]
    seasonality: Mapping[str, Mapping[Season, D]]
    regions: Tuple[RegionEntry, ...]
    benchmarks: Mapping[str, Mapping[str, D]]
    tier_content: Mapping[str, Mapping[TierName, TierContent]]

    def industry_defaults(self, industry: str) -> IndustryParameters:
        return self.industries.get(industry) or self.industries[DEFAULT_INDUSTRY]

    def industry_for_job_type(self, job_type: str) -> str:
        return self.job_types.get(normalize_key(job_type), DEFAULT_INDUSTRY)

    def tier_content_for(self, industry: str, tier: TierName) -> TierContent:
        by_tier = self.tier_content.get(industry) or self.tier_content[DEFAULT_INDUSTRY]
        return by_tier[tier]

    @staticmethod
    def from_dict(raw: Dict[str, Any], *, version: str = "v1") -> "PricingTables":
        """
        raw = {"industries": {...}, "job_types": {...}, ...}
        Schema validation first, then cross validation of the defaults buckets.
        """
        try:
            validate(instance=raw, schema=_load_schema())
        except ValidationError as e:
            path = "/".join(str(p) for p in e.absolute_path)
            raise TableError(f"pricing tables invalid at '{path}': {e.message}") from e

        industries: Dict[str, IndustryParameters] = {}
        for key, row in raw["industries"].items():
            try:
                industries[key] = IndustryParameters.from_dict(key, row)
            except InvalidParametersError as e:
                raise TableError(f"industries.{key}: {e.message}") from e
        if DEFAULT_INDUSTRY not in industries:
            raise TableError("industries must contain a 'default' bucket")

        job_types = {normalize_key(k): str(v) for k, v in raw["job_types"].items()}

        seasonality = {
            industry: MappingProxyType({Season(s): D(str(f)) for s, f in row.items()})
            for industry, row in raw["seasonality"].items()
        }

        regions = tuple(
            RegionEntry(
                name=str(r["name"]),
                states=tuple(
                    StateEntry(abbr=str(s["abbr"]), name=str(s["name"]))
                    for s in r["states"]
                ),
            )
            for r in raw["regions"]
        )
        names = [r.name for r in regions]
        if len(names) != len(set(names)):
            raise TableError(f"Duplicate region names: {names}")
        if DEFAULT_REGION in names:
            raise TableError("'default' is reserved for the fallback region")

        benchmarks = {
            normalize_key(job_type): MappingProxyType(
                {str(region): D(str(m)) for region, m in row.items()}
            )
            for job_type, row in raw["benchmarks"].items()
        }
        fallback = benchmarks.get(DEFAULT_JOB_TYPE)
        if fallback is None or DEFAULT_REGION not in fallback:
            raise TableError(
                "benchmarks must contain a 'default' job type with a 'default' region"
            )

        tier_content = {
            industry: MappingProxyType(
                {
                    TierName(tier): TierContent(
                        description=str(c["description"]),
                        features=tuple(str(f) for f in c["features"]),
                    )
                    for tier, c in row.items()
                }
            )
            for industry, row in raw["tier_content"].items()
        }
        if DEFAULT_INDUSTRY not in tier_content:
            raise TableError("tier_content must contain a 'default' bucket")

        return PricingTables(
            version=version,
            industries=MappingProxyType(industries),
            job_types=MappingProxyType(job_types),
            seasonality=MappingProxyType(seasonality),
            regions=regions,
            benchmarks=MappingProxyType(benchmarks),
            tier_content=MappingProxyType(tier_content),
        )


def _load_schema() -> Dict[str, Any]:
    with tables_schema_path().open("r", encoding="utf-8") as f:
        return json.load(f)


def table_paths(tables_dir: Path) -> Dict[str, Path]:
    return {name: Path(tables_dir) / f"{name}.yaml" for name in TABLE_FILES}


def read_tables_raw(tables_dir: Optional[Path] = None) -> Dict[str, Any]:
    """
    Every file holds a single top-level key equal to its name:
      industries.yaml -> {"industries": {...}}
    """
    tables_dir = Path(tables_dir or default_tables_dir())
    raw: Dict[str, Any] = {}
    for name, path in table_paths(tables_dir).items():
        if not path.exists():
            raise TableError(f"Missing pricing table: {path}")
        with path.open("r", encoding="utf-8") as f:
            doc = yaml.safe_load(f) or {}
        if not isinstance(doc, dict) or name not in doc:
            raise TableError(f"{path.name}: expected top-level key '{name}'")
        raw[name] = doc[name]
    return raw


def load_tables(tables_dir: Optional[Path] = None) -> PricingTables:
    tables_dir = Path(tables_dir or default_tables_dir())
    return PricingTables.from_dict(read_tables_raw(tables_dir), version=tables_dir.name)
