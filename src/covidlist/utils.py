import csv
import logging
import re
import shutil
from pathlib import Path
from typing import Iterable, List

from .models import ListingError

logger = logging.getLogger(__name__)

# Séquence littérale de 4 caractères laissée par l'export amont à la place d'un espace
ESCAPED_SPACE = "\\032"
IP_FRAGMENT_RE = re.compile(r"\b(?:\d{1,3}\.){0,3}\d{1,3}" + re.escape(ESCAPED_SPACE))
WILDCARD = "*."
URL_PREFIXES = ("http://", "https://")


def is_illegal(entry: str) -> bool:
    return entry.startswith(WILDCARD) or ESCAPED_SPACE in entry


def normalize_entry(raw: str) -> str:
    if not is_illegal(raw):
        return raw
    d = raw
    if d.startswith(WILDCARD):
        d = "www." + d[len(WILDCARD):]
    # fragment d'IP collé au marqueur: on retire les deux
    d = IP_FRAGMENT_RE.sub("", d)
    d = d.replace(ESCAPED_SPACE, "")
    return d


def expand_entry(entry: str, with_prefixes: bool = False) -> List[str]:
    """
    Retourne l'entrée puis, si demandé, ses variantes http:// et https:// (dans cet ordre).
    """
    items = [entry]
    if with_prefixes:
        items.extend(p + entry for p in URL_PREFIXES)
    return items


def build_lines(matches: Iterable[str], with_prefixes: bool = False) -> List[str]:
    lines: List[str] = []
    for m in matches:
        lines.extend(expand_entry(normalize_entry(m), with_prefixes))
    return lines


def extract_entries(path: Path, skip_query: str = "virus") -> List[str]:
    """
    Lit le CSV téléchargé et retourne les valeurs uniques de la colonne "Match",
    en ignorant les lignes dont "Query" vaut `skip_query`. L'ordre d'apparition est conservé.
    """
    seen = {}
    # utf-8-sig: certains exports commencent par un BOM
    with path.open(newline="", encoding="utf-8-sig") as f:
        try:
            reader = csv.DictReader(f)
            fields = reader.fieldnames or []
            if "Query" not in fields or "Match" not in fields:
                raise ListingError(f"Colonnes Query/Match absentes de {path.name}: {fields}")
            for row in reader:
                if row.get("Query") == skip_query:
                    continue
                match = row.get("Match")
                if match:
                    seen.setdefault(match, None)
        except (UnicodeDecodeError, csv.Error) as e:
            raise ListingError(f"CSV illisible {path.name}: {e}") from e
    return list(seen)


def ensure_dir(p: Path) -> None:
    p.mkdir(parents=True, exist_ok=True)


def write_lines(path: Path, lines: Iterable[str]) -> int:
    # repart toujours d'un fichier vide
    path.unlink(missing_ok=True)
    count = 0
    with path.open("a", encoding="utf-8", newline="\n") as f:
        for line in lines:
            f.write(line + "\n")
            count += 1
    return count


def publish(tmp_path: Path, dest: Path, overwrite: bool = False) -> Path:
    # "x": création exclusive, échoue si la destination existe
    mode = "wb" if overwrite else "xb"
    try:
        with tmp_path.open("rb") as src, dest.open(mode) as out:
            shutil.copyfileobj(src, out)
    except FileExistsError as e:
        raise FileExistsError(f"Le fichier de destination existe déjà: {dest}") from e
    logger.info(f"Liste copiée vers {dest}")
    return dest
