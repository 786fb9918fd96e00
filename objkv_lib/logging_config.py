from __future__ import annotations
import logging
from pathlib import Path
import yaml
from typing import Optional

LOG_FORMAT = '%(asctime)s %(levelname)s [%(name)s]: %(message)s'


def configure_logging(config_path: Optional[Path] = None) -> logging.Logger:
    """Configure root logging for tools built on the store.

    The level comes from `log_level` in the store's YAML config and
    defaults to WARNING. Returns a module logger for the caller.
    """
    level = logging.WARNING

    cfg_path = config_path or Path('data/config/objkv.yml')
    if cfg_path.exists():
        try:
            with cfg_path.open('r', encoding='utf-8') as _f:
                _cfg = yaml.safe_load(_f) or {}
            _lvl = _cfg.get('log_level') if isinstance(_cfg, dict) else None
            if isinstance(_lvl, str):
                _numeric = getattr(logging, _lvl.upper(), None)
                if isinstance(_numeric, int):
                    level = _numeric
        except (OSError, yaml.YAMLError):
            # Unreadable config still gets default logging
            logging.getLogger(__name__).exception('Failed to read %s for logging setup', cfg_path)

    for handler in logging.root.handlers[:]:
        logging.root.removeHandler(handler)
    logging.basicConfig(level=level, format=LOG_FORMAT)
    logger = logging.getLogger(__name__)

    # Keep known noisy libraries quiet by default
    logging.getLogger('google').setLevel(logging.WARNING)
    logging.getLogger('google.auth').setLevel(logging.WARNING)
    logging.getLogger('urllib3').setLevel(logging.WARNING)
    logging.getLogger('requests').setLevel(logging.WARNING)
    logger.debug('Log level set to %s', logging.getLevelName(level))

    return logger
