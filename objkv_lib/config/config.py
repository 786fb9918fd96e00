from __future__ import annotations
import logging
import os
from pathlib import Path
from typing import Literal, Optional

import yaml
from pydantic import BaseModel, Field, field_validator, model_validator

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path('data/config/objkv.yml')

# Environment variables that override values read from the YAML file
ENV_OVERRIDES = {
    'OBJKV_BACKEND': 'backend',
    'OBJKV_BUCKET': 'bucket',
    'OBJKV_BASEPATH': 'basepath',
    'OBJKV_DATA_DIR': 'data_dir',
    'OBJKV_PROJECT': 'project',
}


class StoreConfig(BaseModel):
    backend: Literal['memory', 'file', 'gcs'] = 'memory'
    bucket: Optional[str] = None
    basepath: str = 'objkv/'
    data_dir: str = './data/objects'
    project: Optional[str] = None
    page_size: int = Field(default=1000, gt=0)
    log_level: str = 'WARNING'

    @field_validator('log_level')
    @classmethod
    def _known_level(cls, v: str) -> str:
        level = v.upper()
        if not isinstance(getattr(logging, level, None), int):
            raise ValueError(f'unknown log level {v!r}')
        return level

    @model_validator(mode='after')
    def _bucket_for_gcs(self) -> 'StoreConfig':
        if self.backend == 'gcs' and not self.bucket:
            raise ValueError("backend 'gcs' requires 'bucket'")
        return self


def load_config(path: Optional[Path] = None, env: Optional[dict] = None) -> StoreConfig:
    """Load a StoreConfig from YAML, then apply environment overrides.

    A missing file yields the defaults. Validation errors propagate as
    pydantic `ValidationError` (a `ValueError`).
    """
    cfg_path = path or DEFAULT_CONFIG_PATH
    raw: dict = {}
    if cfg_path.exists():
        with cfg_path.open('r', encoding='utf-8') as f:
            raw = yaml.safe_load(f) or {}
        if not isinstance(raw, dict):
            raise ValueError(f'{cfg_path}: expected a mapping at top level')
        logger.debug('Loaded store config from %s', cfg_path)
    else:
        logger.debug('No store config at %s, using defaults', cfg_path)

    environ = os.environ if env is None else env
    for var, field in ENV_OVERRIDES.items():
        value = environ.get(var)
        if value:
            raw[field] = value
    return StoreConfig(**raw)
