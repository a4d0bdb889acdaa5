#!/usr/bin/env python3
"""
Generate a two-variant assessment from a source text file.

Usage:
    python scripts/generate_assessment.py --topic "Козацька доба" --grade 8 \
        --source lesson.txt --single-choice 5 --matching 2

    # HTML preview instead of PDF
    python scripts/generate_assessment.py --topic "Козацька доба" --grade 8 \
        --source lesson.txt --sorting 3 --format html --output-dir storage/preview
"""

import argparse
import sys
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from testgen.config.logger import configure_logging
from testgen.config.settings import settings
from testgen.services.assessment_generator import generate_assessment
from testgen.services.errors import AssessmentGenerationError
from testgen.services.exporter import save_assessment
from testgen.services.question_kinds import QuestionKind


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Generate a two-variant assessment with answer keys.")
    parser.add_argument("--topic", required=True, help="Assessment topic")
    parser.add_argument("--grade", required=True, help="Grade (class)")
    parser.add_argument("--lesson", default=None, help="Lesson number")
    parser.add_argument("--source", required=True, type=Path, help="UTF-8 text file with the learning material")
    parser.add_argument("--single-choice", type=int, default=0, help="Questions with one correct answer")
    parser.add_argument("--multiple-choice", type=int, default=0, help="Questions with two correct answers")
    parser.add_argument("--matching", type=int, default=0, help="Matching questions")
    parser.add_argument("--sorting", type=int, default=0, help="Sorting questions")
    parser.add_argument("--format", choices=["pdf", "html"], default="pdf", dest="output_format")
    parser.add_argument("--output-dir", type=Path, default=settings.output_dir)
    parser.add_argument("--log-level", default=None, help="Loguru level (defaults to LOG_LEVEL)")
    return parser.parse_args(argv)


def print_progress(stage: str, message: str) -> None:
    print(f"[{stage}] {message}")


def main(argv=None) -> int:
    args = parse_args(argv)
    configure_logging(args.log_level)

    try:
        source_text = args.source.read_text(encoding="utf-8")
    except OSError as e:
        print(f"❌ Cannot read {args.source}: {e}", file=sys.stderr)
        return 1

    try:
        result = generate_assessment(
            topic=args.topic,
            source_text=source_text,
            grade=args.grade,
            lesson=args.lesson,
            kind_counts={
                QuestionKind.single_choice: args.single_choice,
                QuestionKind.multiple_choice: args.multiple_choice,
                QuestionKind.matching: args.matching,
                QuestionKind.sorting: args.sorting,
            },
            output_format=args.output_format,
            progress=print_progress,
        )
    except AssessmentGenerationError as e:
        print(f"❌ FAILED: {e}", file=sys.stderr)
        return 1

    path = save_assessment(result.artifact, args.output_dir)
    print(f"✅ Saved: {path}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
