"""
Command line for inspecting and evaluating questionnaire structures.

    qlogic check <structure-file>
    qlogic evaluate <structure-file> <responses-file>
    qlogic example
    qlogic structures [--data-dir DIR]
"""

from __future__ import annotations

import argparse
import sys
from typing import Any, Dict, List, Optional

import yaml

from qlogic.analyzer import StructureConfigError, analyze_structure
from qlogic.config import EngineSettings, get_settings
from qlogic.engine import EvaluationResult, QuestionnaireEngine
from qlogic.examples import build_example_petition
from qlogic.log import setup_logging
from qlogic.progress import estimate_minutes_remaining
from qlogic.serialization import load_responses_file, load_structure_file, structure_to_yaml
from qlogic.store import YamlDirectoryStore


def _result_to_dict(engine: QuestionnaireEngine, result: EvaluationResult,
                    settings: EngineSettings) -> Dict[str, Any]:
    visibility = result.visibility
    progress = result.progress
    return {
        "responses": result.responses,
        "visibility": {
            "sections": {
                sid: {"visible": s.visible, "enabled": s.enabled}
                for sid, s in visibility.sections.items()
            },
            "questions": {
                name: {"visible": q.visible, "enabled": q.enabled}
                for name, q in visibility.questions.items()
            },
        },
        "progress": {
            "currentSection": progress.current_section,
            "totalSections": progress.total_sections,
            "completedSections": progress.completed_sections,
            "answeredQuestions": progress.answered_questions,
            "progressPercentage": progress.progress_percentage,
            "minutesRemaining": estimate_minutes_remaining(
                engine.structure, progress,
                default_minutes_per_section=settings.default_minutes_per_section,
            ),
        },
        "errors": [{"fieldName": e.field_name, "message": e.message} for e in result.errors],
    }


def cmd_check(args: argparse.Namespace, settings: EngineSettings) -> int:
    structure = load_structure_file(args.structure)
    report = analyze_structure(structure)

    print(f"Structure: {structure.id} ({structure.type})")
    print(f"  Sections:          {report.total_sections}")
    print(f"  Questions:         {report.total_questions}")
    print(f"  Required:          {report.required_questions}")
    print(f"  Conditional rules: {report.total_conditional_rules}")
    print(f"  Validation rules:  {report.total_validation_rules}")
    for msg in report.errors:
        print(f"ERROR: {msg}")
    for msg in report.warnings:
        print(f"WARNING: {msg}")
    if report.ok and not report.warnings:
        print("No problems found")
    return 0 if report.ok else 1


def cmd_evaluate(args: argparse.Namespace, settings: EngineSettings) -> int:
    structure = load_structure_file(args.structure)
    responses = load_responses_file(args.responses)
    try:
        engine = QuestionnaireEngine(
            structure,
            strict=settings.strict_structure_check,
            default_minutes_per_section=settings.default_minutes_per_section,
        )
    except StructureConfigError as e:
        print(str(e), file=sys.stderr)
        return 2

    result = engine.run(responses)
    print(yaml.safe_dump(_result_to_dict(engine, result, settings), sort_keys=False), end="")
    return 0 if result.is_valid else 1


def cmd_example(args: argparse.Namespace, settings: EngineSettings) -> int:
    print(structure_to_yaml(build_example_petition()), end="")
    return 0


def cmd_structures(args: argparse.Namespace, settings: EngineSettings) -> int:
    data_dir = args.data_dir or settings.data_dir
    try:
        store = YamlDirectoryStore(data_dir, strict=settings.strict_structure_check)
    except StructureConfigError as e:
        print(str(e), file=sys.stderr)
        return 2

    structures = store.list_structures()
    if not structures:
        print(f"No active structures in {data_dir}")
        return 0
    for structure in sorted(structures, key=lambda s: s.type):
        print(f"{structure.type}: {structure.id} ({structure.name})")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="qlogic", description="Questionnaire logic tools")
    sub = parser.add_subparsers(dest="command", required=True)

    check = sub.add_parser("check", help="Run load-time checks on a structure file")
    check.add_argument("structure", help="Structure document (.yaml, .yml or .json)")
    check.set_defaults(func=cmd_check)

    evaluate = sub.add_parser("evaluate", help="Run one evaluation pass")
    evaluate.add_argument("structure", help="Structure document (.yaml, .yml or .json)")
    evaluate.add_argument("responses", help="Responses mapping (.yaml, .yml or .json)")
    evaluate.set_defaults(func=cmd_evaluate)

    example = sub.add_parser("example", help="Print the example petition structure as YAML")
    example.set_defaults(func=cmd_example)

    structures = sub.add_parser("structures", help="List active structures in a data directory")
    structures.add_argument("--data-dir", default=None, help="Store root (default: QLOGIC_DATA_DIR)")
    structures.set_defaults(func=cmd_structures)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    settings = get_settings()
    setup_logging(settings.log_level)
    args = build_parser().parse_args(argv)
    return args.func(args, settings)
