import os
from dataclasses import dataclass
from pathlib import Path

DEFAULT_BUCKET_URL = "https://covid-19-domains.s3.amazonaws.com/"
DEFAULT_KEY_PREFIX = "covid-"
DEFAULT_OUT_DIR = "/var/lib/covidlist"
DEFAULT_TMP_DIR = "/tmp/covidlist"
DEFAULT_OUT_NAME = "covid_domains.txt"


@dataclass
class Settings:
    bucket_url: str = DEFAULT_BUCKET_URL
    key_prefix: str = DEFAULT_KEY_PREFIX
    http_timeout: float = 30.0
    out_dir: Path = Path(DEFAULT_OUT_DIR)
    tmp_dir: Path = Path(DEFAULT_TMP_DIR)


def _env(name: str, default: str) -> str:
    return os.getenv(name, "").strip() or default


def load_settings() -> Settings:
    """
    Lit la configuration depuis l'environnement (le .env est chargé par la CLI).
    """
    bucket_url = _env("COVIDLIST_BUCKET_URL", DEFAULT_BUCKET_URL)
    if not bucket_url.endswith("/"):
        bucket_url += "/"
    timeout_raw = _env("COVIDLIST_HTTP_TIMEOUT", "30")
    try:
        timeout = float(timeout_raw)
    except ValueError:
        raise ValueError(f"COVIDLIST_HTTP_TIMEOUT invalide: {timeout_raw!r}")
    return Settings(
        bucket_url=bucket_url,
        key_prefix=_env("COVIDLIST_KEY_PREFIX", DEFAULT_KEY_PREFIX),
        http_timeout=timeout,
        out_dir=Path(_env("COVIDLIST_OUT_DIR", DEFAULT_OUT_DIR)),
        tmp_dir=Path(_env("COVIDLIST_TMP_DIR", DEFAULT_TMP_DIR)),
    )
