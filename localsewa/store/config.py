from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

_DEFAULT_SEED_DIR = Path(__file__).resolve().parent.parent / "data" / "seed"


@dataclass(frozen=True)
class StoreConfig:
    seed_dir: Path = Path(os.getenv("LOCALSEWA_SEED_DIR", str(_DEFAULT_SEED_DIR)))
    providers_filename: str = "providers.csv"
    services_filename: str = "services.csv"
    # cv score assumed when recomputing a smart score for an unevaluated provider
    default_cv_score: float = 0.4
    tag_separator: str = ";"

    @property
    def providers_path(self) -> Path:
        return self.seed_dir / self.providers_filename

    @property
    def services_path(self) -> Path:
        return self.seed_dir / self.services_filename


DEFAULT_STORE_CONFIG = StoreConfig()
