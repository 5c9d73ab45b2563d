"""Job loader - YAML serialization and deserialization for JobConfig.

Lets a recurring update (template, workbook, output path) live in a small
version-controlled YAML file instead of a long command line.
"""

from pathlib import Path

import yaml

from sheetdeck.errors import ConfigurationError

from .models import JobConfig


def save_job(job: JobConfig, path: str | Path) -> None:
    """Serialize a JobConfig to a YAML file."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w") as f:
        yaml.dump(job.to_dict(), f, default_flow_style=False, sort_keys=False,
                  allow_unicode=True, width=120)


def load_job(path: str | Path) -> JobConfig:
    """Deserialize a JobConfig from a YAML file."""
    path = Path(path)
    with open(path) as f:
        data = yaml.safe_load(f)
    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ConfigurationError(f"Job file {path} must hold a mapping, "
                                 f"got {type(data).__name__}")
    return JobConfig.from_dict(data)
