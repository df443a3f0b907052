from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any, Dict, List

from .definition_loader import DefinitionError
from .input_loader import InputError
from .machine import HaltReport, LeftEdgePolicy, StepTrace, TapeBoundaryError, TuringMachine
from .settings import load_settings


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="tmsim",
        description="Simulador paso a paso de Máquinas de Turing deterministas de una cinta",
    )
    parser.add_argument("definition", type=Path, help="Archivo de texto con la definición de la MT")
    parser.add_argument("inputs", type=Path, help="Archivo con una cadena de entrada por línea")
    parser.add_argument("--config", type=Path, help="Archivo YAML con la configuración de ejecución")
    parser.add_argument(
        "--max-steps",
        type=int,
        help="Número máximo de transiciones por cadena antes de detener la simulación",
    )
    parser.add_argument(
        "--strict",
        dest="strict_transitions",
        action="store_const",
        const=True,
        help="Rechaza definiciones con transiciones duplicadas para un mismo estado y símbolo",
    )
    parser.add_argument(
        "--left-edge",
        choices=[policy.value for policy in LeftEdgePolicy],
        help="Comportamiento al mover la cabeza a la izquierda de la primera celda",
    )
    parser.add_argument(
        "--no-trace",
        dest="show_trace",
        action="store_false",
        help="Muestra solo el veredicto de cada cadena",
    )
    parser.add_argument(
        "--json",
        dest="json_output",
        action="store_true",
        help="Devuelve la salida en formato JSON para facilitar el post-procesamiento",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Activa los mensajes de depuración")
    return parser


def _read_text(parser: argparse.ArgumentParser, path: Path) -> str:
    if not path.is_file():
        parser.error(f"file not found: {path}")
    return path.read_text(encoding="utf-8")


def _tape_payload(report: HaltReport, trace: List[StepTrace], show_trace: bool) -> Dict[str, Any]:
    return {
        "verdict": report.verdict.name,
        "accepted": report.accepted,
        "halted": report.halted,
        "original_tape": report.original_tape,
        "final_tape": report.final_tape,
        "final_state": report.state,
        "steps": report.steps,
        "trace": [
            {
                "state": step.state,
                "read": step.read_symbol,
                "tape": step.tape,
                "head": step.head_position,
            }
            for step in trace
        ]
        if show_trace
        else [],
    }


def main(argv: List[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        settings = load_settings(args.config)
    except (OSError, ValueError, TypeError) as exc:
        parser.error(f"invalid configuration: {exc}")
    settings = settings.override(
        max_steps=args.max_steps,
        strict_transitions=args.strict_transitions,
        left_edge=LeftEdgePolicy(args.left_edge) if args.left_edge else None,
    )
    if settings.max_steps <= 0:
        parser.error("--max-steps must be positive")

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else settings.log_level,
        format="%(levelname)s %(name)s: %(message)s",
    )

    definition_text = _read_text(parser, args.definition)
    inputs_text = _read_text(parser, args.inputs)

    machine = TuringMachine(left_edge=settings.left_edge, strict=settings.strict_transitions)
    try:
        machine.load_definition(definition_text)
        machine.load_inputs(inputs_text)
    except (DefinitionError, InputError) as exc:
        print(f"{type(exc).__name__}: {exc}", file=sys.stderr)
        return 1

    results: List[Dict[str, Any]] = []
    trace: List[StepTrace] = []
    exit_code = 0
    while True:
        try:
            report = machine.step()
        except TapeBoundaryError as exc:
            print(f"TapeBoundaryError: {exc}", file=sys.stderr)
            exit_code = 1
            break
        if report is None:
            break
        if isinstance(report, StepTrace):
            trace.append(report)
            if args.show_trace and not args.json_output:
                print(report.format())
            if report.step < settings.max_steps:
                continue
            print(
                f"Step limit of {settings.max_steps} reached on tape {report.tape_index}; skipping it",
                file=sys.stderr,
            )
            exit_code = 1
            report = machine.skip_tape()

        results.append(_tape_payload(report, trace, args.show_trace))
        trace = []
        if not args.json_output:
            print(report.format(configuration=args.show_trace))
            print()

    if args.json_output:
        print(json.dumps(results, indent=2, ensure_ascii=False))
    return exit_code


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
