import logging
import re
import xml.etree.ElementTree as ET
from datetime import datetime, timezone
from pathlib import Path
from typing import Iterable, List, Optional

import httpx

from ..models import ListingEntry, ListingError

logger = logging.getLogger(__name__)


def _local(tag: str) -> str:
    # "{http://s3.amazonaws.com/doc/2006-03-01/}Key" -> "Key"
    return tag.rsplit("}", 1)[-1]


def _parse_timestamp(raw: str) -> Optional[datetime]:
    s = raw.strip()
    if s.endswith("Z"):
        s = s[:-1] + "+00:00"
    try:
        ts = datetime.fromisoformat(s)
    except ValueError:
        return None
    if ts.tzinfo is None:
        ts = ts.replace(tzinfo=timezone.utc)
    return ts


def parse_listing(xml_text: str) -> List[ListingEntry]:
    """
    Parse un document ListBucketResult (avec ou sans namespace S3).
    Les entrées sans Key ou avec un LastModified illisible sont ignorées.
    """
    try:
        root = ET.fromstring(xml_text)
    except ET.ParseError as e:
        raise ListingError(f"Listing XML invalide: {e}") from e

    entries: List[ListingEntry] = []
    for elem in root.iter():
        if _local(elem.tag) != "Contents":
            continue
        fields = {_local(child.tag): (child.text or "") for child in elem}
        key = fields.get("Key", "").strip()
        ts = _parse_timestamp(fields.get("LastModified", ""))
        if not key or ts is None:
            logger.debug(f"Entrée ignorée: key={key!r} lastModified={fields.get('LastModified')!r}")
            continue
        entries.append(ListingEntry(key=key, last_modified=ts))
    return entries


async def list_objects(client: httpx.AsyncClient, bucket_url: str) -> List[ListingEntry]:
    r = await client.get(bucket_url)
    r.raise_for_status()
    entries = parse_listing(r.text)
    logger.info(f"{len(entries)} objet(s) listé(s) dans {bucket_url}")
    return entries


def select_latest(entries: Iterable[ListingEntry], prefix: str = "covid-") -> Optional[ListingEntry]:
    """
    Retourne l'entrée la plus récente dont la clé commence par `prefix`, None sinon.
    En cas d'égalité, la première vue est conservée.
    """
    pattern = re.compile("^" + re.escape(prefix))
    latest: Optional[ListingEntry] = None
    for entry in entries:
        if not pattern.match(entry.key):
            continue
        if latest is None or entry.last_modified > latest.last_modified:
            latest = entry
    return latest


async def download_object(
    client: httpx.AsyncClient,
    bucket_url: str,
    key: str,
    out_dir: Path,
) -> Path:
    url = f"{bucket_url}{key}"
    r = await client.get(url)
    r.raise_for_status()
    target = out_dir / Path(key).name
    target.write_bytes(r.content)
    logger.info(f"{url} -> {target} ({len(r.content)} octets)")
    return target
