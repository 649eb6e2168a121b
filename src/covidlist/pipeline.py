import logging
from pathlib import Path
from typing import Optional

import httpx

from .config import Settings
from .models import NoMatchingObjectError, RunResult
from .utils import build_lines, ensure_dir, extract_entries, publish, write_lines
from .providers.bucket import download_object, list_objects, select_latest

logger = logging.getLogger(__name__)


async def run(
    settings: Settings,
    out_dir: Path,
    out_name: str,
    tmp_dir: Path,
    with_prefixes: bool = False,
    overwrite: bool = False,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> RunResult:
    ensure_dir(out_dir)
    ensure_dir(tmp_dir)
    timeout = httpx.Timeout(settings.http_timeout)
    async with httpx.AsyncClient(timeout=timeout, transport=transport, follow_redirects=True) as client:
        entries = await list_objects(client, settings.bucket_url)
        latest = select_latest(entries, settings.key_prefix)
        if latest is None:
            raise NoMatchingObjectError(
                f"Aucun objet '{settings.key_prefix}*' trouvé dans {settings.bucket_url}"
            )
        logger.info(f"Fichier le plus récent: {latest.key} ({latest.last_modified.isoformat()})")
        csv_path = await download_object(client, settings.bucket_url, latest.key, tmp_dir)

    res = RunResult(source_key=latest.key)
    matches = extract_entries(csv_path)
    res.entries_extracted = len(matches)
    logger.info(f"{len(matches)} domaine(s) extrait(s) de {csv_path.name}")

    tmp_out = tmp_dir / out_name
    res.lines_written = write_lines(tmp_out, build_lines(matches, with_prefixes))
    res.output_path = publish(tmp_out, out_dir / out_name, overwrite=overwrite)
    return res
