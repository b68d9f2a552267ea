import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any, Dict, List

from memocal.config import PipelineConfig
from memocal.context import extract_title
from memocal.encoders.base import export
from memocal.errors import MemocalError
from memocal.ledger import mention_identity
from memocal.loaders.base import DocumentLoader
from memocal.pipeline import ExtractionSession
from memocal.registry import loaders
from memocal.types import Document

logger = logging.getLogger(__name__)


def process_document(session: ExtractionSession, doc: Document, export_ics: bool) -> Dict[str, Any]:
    result = session.extractor.extract(doc.text)
    default_title = session.synthesizer.default_title
    exported: List[str] = []
    if export_ics:
        for mention in result.mentions:
            candidate = session.synthesizer.from_mention(result.text, mention)
            try:
                exported.append(str(export(session.encoder, candidate, session.output_dir)))
            except MemocalError as exc:
                logger.error(f"Export failed for {candidate.title}: {exc}")

    return {
        "id": doc.id,
        "text": result.text,
        "mentions": [
            {
                "text": m.matched_text,
                "start": m.start,
                "end": m.end,
                "resolved_start": m.resolved_start.isoformat(),
                "resolved_end": m.resolved_end.isoformat() if m.resolved_end else None,
                "title": extract_title(result.text, m.matched_text, default_title),
                "identity": mention_identity(m),
            }
            for m in result.mentions
        ],
        "groups": [
            {
                "id": g.id,
                "context": g.context_text,
                "title": extract_title(result.text, g.context_text, default_title),
                "members": [{"digits": n.digits, "offset": n.offset} for n in g.members],
            }
            for g in result.groups
        ],
        "exported": exported,
        "meta": doc.meta,
    }


def main(argv=None):
    parser = argparse.ArgumentParser(
        description="Find date mentions and ambiguous numbers in notes."
    )
    parser.add_argument(
        "--config",
        type=str,
        help="Path to session config JSON file.",
    )
    parser.add_argument(
        "--input",
        type=str,
        nargs="+",
        required=True,
        help="Input note paths.",
    )
    parser.add_argument(
        "--output",
        type=str,
        help="Optional JSONL output path (defaults to stdout).",
    )
    parser.add_argument(
        "--export-ics",
        action="store_true",
        help="Write a calendar file for every detected mention.",
    )
    parser.add_argument(
        "--log-level",
        type=str,
        default="WARNING",
        help="Logging level.",
    )
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=getattr(logging, args.log_level.upper(), logging.WARNING),
        format="%(asctime)s - %(levelname)s - %(name)s - %(message)s",
    )

    if args.config:
        config_data = json.loads(Path(args.config).read_text(encoding="utf-8"))
        config = PipelineConfig.from_dict(config_data)
    else:
        config = PipelineConfig()

    loader: DocumentLoader = loaders.create(config.loader.name, **config.loader.params)
    writer = Path(args.output).open("w", encoding="utf-8") if args.output else sys.stdout

    try:
        with ExtractionSession.from_config(config) as session:
            for path in args.input:
                for doc in loader.load(path):
                    result = process_document(session, doc, args.export_ics)
                    writer.write(json.dumps(result, ensure_ascii=False) + "\n")
    except MemocalError as exc:
        logger.error(f"Extraction failed: {exc}")
        return 1
    finally:
        if writer is not sys.stdout:
            writer.close()
    return 0


if __name__ == "__main__":
    sys.exit(main())
