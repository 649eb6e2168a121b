import sys
import argparse
import asyncio
import logging
from pathlib import Path

import httpx
from dotenv import load_dotenv

from .config import DEFAULT_OUT_NAME, load_settings
from .models import CovidListError
from .pipeline import run


def parse_args(argv, settings):
    p = argparse.ArgumentParser(description="Liste de domaines malveillants COVID-19 depuis le bucket public")
    p.add_argument("--out-dir", default=str(settings.out_dir), help="Dossier de destination de la liste")
    p.add_argument("--out-name", default=DEFAULT_OUT_NAME, help="Nom du fichier de sortie")
    p.add_argument("--tmp-dir", default=str(settings.tmp_dir), help="Dossier de travail temporaire")
    p.add_argument("--prefixes", action="store_true", help="Ajoute les variantes http:// et https://")
    p.add_argument("--overwrite", action="store_true", help="Remplace le fichier de destination s'il existe")
    p.add_argument("--verbose", action="store_true", help="Logs DEBUG")
    return p.parse_args(argv)


def main(argv=None):
    load_dotenv()
    try:
        settings = load_settings()
    except ValueError as e:
        print(str(e), file=sys.stderr)
        sys.exit(2)

    ns = parse_args(sys.argv[1:] if argv is None else argv, settings)
    logging.basicConfig(
        level=logging.DEBUG if ns.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        res = asyncio.run(run(
            settings=settings,
            out_dir=Path(ns.out_dir),
            out_name=ns.out_name,
            tmp_dir=Path(ns.tmp_dir),
            with_prefixes=ns.prefixes,
            overwrite=ns.overwrite,
        ))
    except KeyboardInterrupt:
        sys.exit(130)
    except (CovidListError, httpx.HTTPError, OSError) as e:
        print(f"Erreur: {e}", file=sys.stderr)
        sys.exit(1)

    logging.getLogger(__name__).info(
        f"{res.lines_written} ligne(s) écrite(s) dans {res.output_path} (source: {res.source_key})"
    )


if __name__ == "__main__":
    main()
