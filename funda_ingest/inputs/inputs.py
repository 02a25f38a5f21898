# funda_ingest/inputs/inputs.py
"""
Inputs loader for batch listing runs.

Goals
-----
- File-first inputs with validation via Pydantic.
- Accept a shorthand shape (a bare list of tiny ids, or an object with
  "tiny_ids"/"urls" at the root) as well as the structured shape.
- Minimal environment-variable overrides for CI/CLI convenience.

Supported JSON shapes
---------------------
1) Shorthand
   ["43117443", "43117444"]
   { "tiny_ids": [...], "urls": [...] }

2) Structured (root = AppInputs)
   {
     "policy": { "min_delay_s": 0.5, "timeout_s": 30 },
     "run": { "tiny_ids": [...], "urls": [...], "out": "results.json", "pretty": true, "benchmark": false }
   }

Environment overrides (optional)
--------------------------------
- FUNDA_DELAY_S    -> AppInputs.policy.min_delay_s (float)
- FUNDA_TIMEOUT_S  -> AppInputs.policy.timeout_s (float)
- FUNDA_BASE_URL   -> AppInputs.policy.base_url
- FUNDA_OUT        -> AppInputs.run.out
- FUNDA_TINY_IDS   -> AppInputs.run.tiny_ids (comma-separated, replaces the file list)

Public API
----------
- class InputsLoader:
    - load(path: str | Path | None) -> AppInputs
    - load_json(text: str) -> AppInputs
    - with_overrides(cfg, **kwargs) -> AppInputs (non-destructive copies)
- function load_inputs(path: str | Path | None) -> AppInputs  (convenience)

Notes
-----
- This module *does not* hit the network; all inputs are local.
"""

from __future__ import annotations

import json
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from funda_ingest.schemas.models import ApiPolicy

# ----------------------------
# Pydantic models for structured inputs
# ----------------------------


class BatchOptions(BaseModel):
    """Runtime options controlling one batch run."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    tiny_ids: list[str] = Field(default_factory=list, description="Listing tiny ids, processed in order.")
    urls: list[str] = Field(default_factory=list, description="Listing URLs; tiny ids are parsed from them.")
    out: str | None = Field(None, description="Path to write the BatchResult JSON (optional).")
    pretty: bool = Field(True, description="Print sample records after the run.")
    benchmark: bool = Field(False, description="Print throughput figures instead of records.")

    @field_validator("tiny_ids", mode="before")
    @classmethod
    def _ids_as_text(cls, v: Any) -> Any:
        if isinstance(v, (list, tuple)):
            return [str(i).strip() for i in v if str(i).strip()]
        return v


class AppInputs(BaseModel):
    """
    Full input payload.

    Attributes:
        policy: Transport/pacing policy for the API client and coordinator.
        run:    Identifiers and output options for the current execution.
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    policy: ApiPolicy = Field(default_factory=ApiPolicy)
    run: BatchOptions = Field(default_factory=BatchOptions)


# ----------------------------
# Loader
# ----------------------------


@dataclass(frozen=True)
class InputsLoader:
    """
    File-first inputs loader with light env overrides.

    Default search (when path=None):
        1) ./funda_ingest.json
        2) ./config.json
    When neither exists, defaults plus env overrides are returned.
    """

    env_prefix: str = "FUNDA_"

    # ---------- Public API ----------

    def load(self, path: str | Path | None = None) -> AppInputs:
        p = self._resolve_path(path)
        raw: Any = self._read_json_file(p) if p is not None else {}
        cfg = self._parse_root(self._maybe_translate_shorthand(raw))
        return self._apply_env_overrides(cfg)

    def load_json(self, text: str) -> AppInputs:
        try:
            raw = json.loads(text)
        except json.JSONDecodeError as e:
            raise ValueError(f"Invalid JSON payload: {e}") from e
        cfg = self._parse_root(self._maybe_translate_shorthand(raw))
        return self._apply_env_overrides(cfg)

    def with_overrides(
        self,
        cfg: AppInputs,
        *,
        tiny_ids: list[str] | None = None,
        urls: list[str] | None = None,
        out: str | None = None,
        pretty: bool | None = None,
        benchmark: bool | None = None,
        min_delay_s: float | None = None,
        timeout_s: float | None = None,
    ) -> AppInputs:
        """
        Return a *new* AppInputs with provided non-null overrides applied.
        Does not mutate the original instance.
        """
        run_updates: dict[str, Any] = {}
        if tiny_ids is not None:
            run_updates["tiny_ids"] = [t.strip() for t in tiny_ids if t.strip()]
        if urls is not None:
            run_updates["urls"] = list(urls)
        if out is not None:
            run_updates["out"] = out
        if pretty is not None:
            run_updates["pretty"] = pretty
        if benchmark is not None:
            run_updates["benchmark"] = benchmark

        policy_updates: dict[str, Any] = {}
        if min_delay_s is not None:
            policy_updates["min_delay_s"] = min_delay_s
        if timeout_s is not None:
            policy_updates["timeout_s"] = timeout_s

        return self._merge(cfg, run_updates, policy_updates)

    # ---------- Internals ----------

    def _merge(self, cfg: AppInputs, run_updates: dict[str, Any], policy_updates: dict[str, Any]) -> AppInputs:
        if not run_updates and not policy_updates:
            return cfg
        try:
            run_new = BatchOptions.model_validate({**cfg.run.model_dump(), **run_updates})
            policy_new = ApiPolicy.model_validate({**cfg.policy.model_dump(), **policy_updates})
        except ValidationError as e:
            raise ValueError(f"Inputs validation failed:\n{e}") from e
        return cfg.model_copy(update={"run": run_new, "policy": policy_new})

    def _resolve_path(self, path: str | Path | None) -> Path | None:
        if path is not None:
            p = Path(path)
            if not p.exists():
                raise FileNotFoundError(f"Inputs file not found: {p}")
            return p

        for candidate in (Path("funda_ingest.json"), Path("config.json")):
            if candidate.exists():
                return candidate
        return None

    def _read_json_file(self, p: Path) -> Any:
        if p.suffix.lower() != ".json":
            raise ValueError(f"Unsupported inputs format for {p.name}; only .json is supported.")
        try:
            return json.loads(p.read_text(encoding="utf-8"))
        except json.JSONDecodeError as e:
            raise ValueError(f"Invalid JSON in {p}: {e}") from e

    def _maybe_translate_shorthand(self, raw: Any) -> dict[str, Any]:
        """
        Accept a bare id list or root-level run fields and lift them into the
        structured {"policy": ..., "run": ...} shape.
        """
        if isinstance(raw, list):
            return {"run": {"tiny_ids": raw}}
        if not isinstance(raw, dict):
            raise ValueError(f"Inputs root must be a JSON object or list, got {type(raw).__name__}")
        if "run" in raw or "policy" in raw:
            return raw
        run_keys = set(BatchOptions.model_fields)
        return {
            "run": {k: v for k, v in raw.items() if k in run_keys},
            "policy": {k: v for k, v in raw.items() if k in ApiPolicy.model_fields},
        }

    def _parse_root(self, data: dict[str, Any]) -> AppInputs:
        try:
            return AppInputs.model_validate(data)
        except ValidationError as e:
            raise ValueError(f"Inputs validation failed:\n{e}") from e

    def _apply_env_overrides(self, cfg: AppInputs) -> AppInputs:
        """
        Apply light, optional overrides from environment variables.
        Unparsable numeric values are ignored.
        """
        prefix = self.env_prefix
        run_updates: dict[str, Any] = {}
        policy_updates: dict[str, Any] = {}

        for env_key, field in (("DELAY_S", "min_delay_s"), ("TIMEOUT_S", "timeout_s")):
            val = os.getenv(f"{prefix}{env_key}")
            if val:
                try:
                    policy_updates[field] = float(val)
                except ValueError:
                    # Ignore bad value; keep validated policy field
                    pass

        base_url = os.getenv(f"{prefix}BASE_URL")
        if base_url:
            policy_updates["base_url"] = base_url.strip()

        out = os.getenv(f"{prefix}OUT")
        if out:
            run_updates["out"] = out

        ids = os.getenv(f"{prefix}TINY_IDS")
        if ids:
            run_updates["tiny_ids"] = [t.strip() for t in ids.split(",") if t.strip()]

        return self._merge(cfg, run_updates, policy_updates)


# ----------------------------
# Convenience function
# ----------------------------


def load_inputs(path: str | Path | None = None) -> AppInputs:
    """Convenience wrapper for one-shot callers."""
    return InputsLoader().load(path)
