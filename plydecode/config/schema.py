from __future__ import annotations

from pathlib import Path
from typing import Literal, Optional

import yaml
from pydantic import BaseModel, Field, model_validator


class InputConfig(BaseModel):
    path: Path
    element: str = "vertex"


class OutputConfig(BaseModel):
    path: Path
    format: Literal["npz", "las", "laz"] = "npz"
    compress: Optional[bool] = None
    point_format: int = 8

    @model_validator(mode="after")
    def _validate_format(self) -> "OutputConfig":
        if self.format == "laz" and self.compress is False:
            raise ValueError("format 'laz' implies compress=True")
        if self.format == "npz" and self.compress:
            raise ValueError("compress only applies to las/laz output")
        return self


class DecodeConfig(BaseModel):
    input: InputConfig
    output: Optional[OutputConfig] = None
    progress: Literal["none", "bar"] = "none"
    log_level: str = Field(default="INFO")


def load_config(path: str | Path) -> DecodeConfig:
    path = Path(path)
    with open(path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f)
    if not isinstance(data, dict):
        raise ValueError("Configuration root must be a mapping.")
    cfg = DecodeConfig.model_validate(data)
    if not cfg.input.path.is_absolute():
        cfg.input.path = (path.parent / cfg.input.path).resolve()
    if cfg.output is not None:
        cfg.output.path = (path.parent / cfg.output.path).resolve()
    return cfg
