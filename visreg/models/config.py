"""Configuration models for the visual regression harness."""

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field, field_validator

DEFAULT_CONFIG_PATH = "visreg-config.json"


class ComparisonConfig(BaseModel):
    strategy: Literal["exact", "perceptual"] = "exact"
    # Per-channel delta above which a pixel counts as changed (perceptual only)
    pixel_threshold: int = Field(default=0, ge=0, le=255)
    # Fraction of changed pixels still accepted as matching (perceptual only)
    tolerance: float = Field(default=0.0, ge=0.0, le=1.0)
    generate_diffs: bool = True


class HarnessConfig(BaseModel):
    # Locations
    scenarios_dir: str = "scenarios"
    baseline_root: str = "testdata/golden"
    staging_root: str = "out/visual"
    reports_dir: str = "reports/visual-bugs"

    # Collaborators, as "module:callable" references
    simulation_factory: str = "visreg.demo.world:DemoSimulation"
    renderer_factory: str = "visreg.demo.renderer:DemoRenderer"

    # Comparison
    comparison: ComparisonConfig = Field(default_factory=ComparisonConfig)

    # Reporting
    report_formats: list[str] = Field(default_factory=lambda: ["markdown"])

    @field_validator("scenarios_dir", "baseline_root", "staging_root", "reports_dir", mode="before")
    @classmethod
    def resolve_env_dir(cls, v: str) -> str:
        if isinstance(v, str) and v.startswith("env:"):
            env_var = v[4:]
            resolved = os.environ.get(env_var)
            if resolved is None:
                raise ValueError(f"Environment variable '{env_var}' not set")
            return resolved
        return v

    @field_validator("report_formats")
    @classmethod
    def check_report_formats(cls, v: list[str]) -> list[str]:
        if not v:
            raise ValueError("At least one report format is required")
        unknown = [fmt for fmt in v if fmt not in ("markdown", "json")]
        if unknown:
            raise ValueError(f"Unknown report format(s): {', '.join(unknown)}")
        return v

    @classmethod
    def load(cls, path: str | Path) -> "HarnessConfig":
        """Load config from a JSON file."""
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Config file not found: {path}")
        with open(path) as f:
            data = json.load(f)
        return cls(**data)

    def save(self, path: str | Path) -> None:
        """Save config to a JSON file."""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w") as f:
            json.dump(self.model_dump(), f, indent=2)
