#!/usr/bin/env python3

import argparse
import json
import logging
import sys
import time

from cnfmatch.match_errors import RuleSetError
from cnfmatch.match_evaluator import EvaluationStats, evaluate, evaluate_parallel
from cnfmatch.match_loader import RULES_FORMAT_VERSION, load_rules
from cnfmatch.match_tokenizer import TokenizationFlags, Tokenizer
from highlighter import generate_html, highlight

__version__ = "0.1.0"


def show_evaluation_statistics(stats: EvaluationStats, rule_count: int, match_count: int):
    """Display evaluation counters."""
    sys.stderr.write("=== Evaluation Statistics ===\n")
    sys.stderr.write(f"Rules: {rule_count}\n")
    sys.stderr.write(f"Matching rules: {match_count}\n")
    for name, value in stats.as_dict().items():
        sys.stderr.write(f"  {name}: {value}\n")
    sys.stderr.write("=============================\n\n")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Evaluate CNF match rules against a text file."
    )
    parser.add_argument("rules_file", nargs="?", help="Path to JSON rule document")
    parser.add_argument("text_file", nargs="?", help="Path to input text file")
    parser.add_argument(
        "--pretty-print",
        action="store_true",
        help="Emit all results in a single pretty-printed JSON array",
    )
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        default="WARNING",
        help="Set logging level",
    )
    parser.add_argument("--version", action="store_true", help="Show version and exit")
    parser.add_argument(
        "-q",
        "--quiet",
        action="store_true",
        help="Suppress all progress updates",
    )
    parser.add_argument(
        "--parallel",
        action="store_true",
        help="Evaluate rules concurrently on a thread pool",
    )
    parser.add_argument(
        "--workers",
        type=int,
        default=None,
        help="Maximum number of worker threads for --parallel",
    )
    parser.add_argument(
        "--ignore-case",
        action="store_true",
        help="Lowercase the text's words before matching",
    )
    parser.add_argument(
        "--ignore-punctuation",
        action="store_true",
        help="Drop punctuation tokens before matching",
    )
    parser.add_argument(
        "--show-stats",
        action="store_true",
        help="Show evaluation statistics",
    )
    parser.add_argument(
        "--html",
        type=str,
        default=None,
        help="Also write an HTML page with the matches highlighted to this file",
    )
    parser.add_argument(
        "-o",
        "--output",
        type=str,
        default=None,
        help="Write output to this file (UTF-8, LF line endings). If omitted, output goes to stdout.",
    )
    return parser


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.version:
        print("Version information:")
        print(f"  cnf: {__version__}")
        print(f"  rule format: {RULES_FORMAT_VERSION}")
        return 0

    if not args.rules_file or not args.text_file:
        parser.error("the following arguments are required: rules_file, text_file")

    logging.basicConfig(
        level=getattr(logging, args.log_level), format="[%(levelname)s] %(message)s"
    )
    logger = logging.getLogger("cnf")

    start_time = time.time()
    try:
        rule_set = load_rules(args.rules_file)
    except RuleSetError as e:
        parser.error(f"invalid rule document {args.rules_file}: {e}")

    with open(args.text_file, "r", encoding="utf-8") as f:
        text = f.read()

    flags = TokenizationFlags(
        ignore_case=args.ignore_case, ignore_punctuation=args.ignore_punctuation
    )
    tokens = Tokenizer(flags).tokenize(text)
    logger.info("Loaded %d rules and %d tokens", len(rule_set), len(tokens))

    def _status_callback(idx, total):
        pct = (idx / total * 100) if total else 0
        sys.stderr.write(f"\rEvaluating: {idx}/{total} ({pct:.1f}%)")
        sys.stderr.flush()

    progress_callback = None if args.quiet else _status_callback
    stats = EvaluationStats()
    if args.parallel:
        results = evaluate_parallel(
            rule_set, tokens, args.workers, stats, progress_callback=progress_callback
        )
    else:
        results = evaluate(rule_set, tokens, stats, progress_callback=progress_callback)
    if not args.quiet:
        sys.stderr.write("\n")

    output = []
    for match_range in results.values():
        record = match_range.to_dict()
        if match_range.token_end < match_range.token_start:
            logger.debug(
                "Rule '%s' matched with its last clause ending before its first starts: tokens %d-%d",
                match_range.label,
                match_range.token_start,
                match_range.token_end,
            )
        record["match"] = text[match_range.char_start : match_range.char_end]
        output.append(record)

    sys.stderr.write(f"Found {len(output)} matching rules out of {len(rule_set)}\n")
    if args.show_stats:
        show_evaluation_statistics(stats, len(rule_set), len(output))
    logger.info("Evaluation took %.3f seconds", time.time() - start_time)

    if args.html:
        with open(args.html, "w", encoding="utf-8") as f:
            f.write(generate_html(highlight(text, results), results.keys()))

    if args.output:
        output_stream = open(args.output, "w", encoding="utf-8", newline="\n")
    else:
        output_stream = sys.stdout

    try:
        if args.pretty_print:
            json.dump(output, output_stream, indent=2)
            output_stream.write("\n")
        else:
            for item in output:
                output_stream.write(json.dumps(item))
                output_stream.write("\n")
    finally:
        if args.output and output_stream is not sys.stdout:
            output_stream.close()
    return 0


if __name__ == "__main__":
    sys.exit(main())
