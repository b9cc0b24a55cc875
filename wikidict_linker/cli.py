import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any, Dict, Optional, TextIO

from wikidict_linker.config import PipelineConfig
from wikidict_linker.pipeline import LinkingPipeline
from wikidict_linker.types import NO_LINK

logger = logging.getLogger(__name__)


def build_config(args: argparse.Namespace) -> PipelineConfig:
    """Read the JSON config (if any) and apply command-line overrides."""
    data: Dict[str, Any] = {}
    if args.config:
        data = json.loads(Path(args.config).read_text(encoding="utf-8"))

    overrides = {
        "dictionary_path": args.dictionary,
        "score_threshold": args.threshold,
        "threads": args.threads,
        "max_time": args.max_time,
        "model": args.model,
    }
    data.update({k: v for k, v in overrides.items() if v is not None})
    return PipelineConfig.from_dict(data)


def console(pipeline: LinkingPipeline, stdin: TextIO = sys.stdin, stdout: TextIO = sys.stdout) -> None:
    """Link sentences typed at the console and print each token's link."""
    while True:
        stdout.write("sentence> ")
        stdout.flush()
        line = stdin.readline()
        if not line:
            break
        line = line.strip()
        if not line:
            continue
        doc = pipeline.nlp(line)
        stdout.write("  ".join(token._.linked_id or NO_LINK for token in doc) + "\n")


def main(argv: Optional[list] = None) -> int:
    parser = argparse.ArgumentParser(description="Link entity mentions with the Wikidict.")
    parser.add_argument(
        "--config",
        type=str,
        help="Path to pipeline config JSON file.",
    )
    parser.add_argument(
        "--input",
        type=str,
        nargs="+",
        help="Input file paths.",
    )
    parser.add_argument(
        "--output",
        type=str,
        help="Optional JSONL output path.",
    )
    parser.add_argument(
        "--dictionary",
        type=str,
        help="Location of the <text, link, score> TSV file.",
    )
    parser.add_argument(
        "--threshold",
        type=float,
        help="The score threshold under which to discard links.",
    )
    parser.add_argument(
        "--threads",
        type=int,
        help="The number of threads to link sentences on.",
    )
    parser.add_argument(
        "--max-time",
        type=float,
        help="Per-sentence time budget in seconds.",
    )
    parser.add_argument(
        "--model",
        type=str,
        help="spaCy model providing sentences and entities for plain text.",
    )
    parser.add_argument(
        "--console",
        action="store_true",
        help="Link sentences typed at the console instead of reading files.",
    )
    parser.add_argument(
        "--log",
        type=str,
        default="INFO",
        help="Logging level.",
    )
    args = parser.parse_args(argv)
    if not args.console and not args.input:
        parser.error("--input is required unless --console is given")

    logging.basicConfig(level=args.log)

    config = build_config(args)
    pipeline = LinkingPipeline(config)

    if args.console:
        console(pipeline)
        return 0

    results = pipeline.run(args.input, output_path=args.output)
    failed = sum(1 for r in results if r["failed_sentences"])
    logger.info(f"Linked {len(results)} documents ({failed} with failed sentences)")
    if not args.output:
        for result in results:
            print(json.dumps(result))
    return 0


if __name__ == "__main__":
    sys.exit(main())
