from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Sequence, Tuple, Union

from .definition_loader import BLANK_SYMBOL, Direction, MachineDefinition, load_definition
from .input_loader import load_inputs, parse_inputs

logger = logging.getLogger(__name__)


class Verdict(str, Enum):
    ACCEPTED = "ACCEPTED"
    REJECTED = "REJECTED"
    REJECTED_NO_TRANSITION = "REJECTED (NO STATE-INPUT PAIR)"
    # Solo lo produce ``skip_tape``: la cinta se abandonó sin detenerse.
    STEP_LIMIT = "NOT HALTED (STEP LIMIT REACHED)"


class EngineStatus(str, Enum):
    IDLE = "idle"
    READY = "ready"
    FINISHED = "finished"


class LeftEdgePolicy(str, Enum):
    """Qué hacer cuando una transición mueve la cabeza a la izquierda de la celda 0."""

    CLAMP = "clamp"
    ERROR = "error"


class TapeBoundaryError(RuntimeError):
    """La cabeza intentó salir por el extremo izquierdo de la cinta."""


@dataclass(frozen=True)
class StepTrace:
    """Una transición aplicada: estado previo, símbolo leído y la cinta resultante."""

    state: str
    read_symbol: str
    tape: str
    head_position: int
    tape_index: int
    step: int

    def format(self) -> str:
        return _configuration(self.state, self.read_symbol, self.tape, self.head_position)


def _configuration(state: str, symbol: str, tape: str, head_position: int) -> str:
    return f"   {state}    {symbol}\n\n {tape}\n {' ' * head_position}^\n"


@dataclass(frozen=True)
class HaltReport:
    """Resultado final de una cinta."""

    verdict: Verdict
    original_tape: str
    final_tape: str
    state: str
    read_symbol: str
    head_position: int
    tape_index: int
    steps: int

    @property
    def accepted(self) -> bool:
        return self.verdict is Verdict.ACCEPTED

    @property
    def halted(self) -> bool:
        return self.verdict is not Verdict.STEP_LIMIT

    def format(self, configuration: bool = True) -> str:
        """Texto del veredicto, precedido por la configuración final si se pide."""

        header = ""
        if configuration:
            header = _configuration(self.state, self.read_symbol, self.final_tape, self.head_position) + "\n"
        status = "TM is halted now" if self.halted else f"TM was stopped after {self.steps} steps"
        return (
            f"{header}{status}\n"
            f"originalTapeString:  {self.original_tape}\n"
            f"current tapeString:  {self.final_tape}\n\n"
            f"{self.verdict.value}\n"
        )


StepReport = Union[StepTrace, HaltReport]


class Tape:
    """Cinta que solo crece hacia la derecha, al leer más allá de su final."""

    def __init__(self, initial_input: str) -> None:
        self.cells: List[str] = list(initial_input)

    def peek(self, position: int) -> str:
        if position >= len(self.cells):
            return BLANK_SYMBOL
        return self.cells[position]

    def read(self, position: int) -> str:
        if position >= len(self.cells):
            self.cells.append(BLANK_SYMBOL)
        return self.cells[position]

    def write(self, position: int, symbol: str) -> None:
        self.cells[position] = symbol

    def __len__(self) -> int:
        return len(self.cells)

    def __str__(self) -> str:
        return "".join(self.cells)


@dataclass
class RunState:
    """Estado mutable de una ejecución; pertenece a un único ``TuringMachine``."""

    original_tapes: Tuple[str, ...]
    tapes: List[Tape]
    current_state: str
    tape_index: int = 0
    head_position: int = 0
    steps_taken: int = 0

    @classmethod
    def start(cls, definition: MachineDefinition, inputs: Sequence[str]) -> "RunState":
        return cls(
            original_tapes=tuple(inputs),
            tapes=[Tape(tape) for tape in inputs],
            current_state=definition.start_state,
        )

    @property
    def finished(self) -> bool:
        return self.tape_index >= len(self.tapes)

    def tape_strings(self) -> List[str]:
        return [str(tape) for tape in self.tapes]


@dataclass
class TuringMachine:
    """Intérprete paso a paso de Máquinas de Turing deterministas de una cinta.

    No realiza E/S ni tiene noción del tiempo: quien lo usa decide cuándo
    invocar ``step``. Todas las operaciones que modifican el estado se
    serializan con un candado, así que un hilo de ejecución y un hilo de
    interfaz pueden compartir la instancia.
    """

    left_edge: LeftEdgePolicy = LeftEdgePolicy.CLAMP
    strict: bool = False
    definition: Optional[MachineDefinition] = None
    run_state: Optional[RunState] = None
    _lock: threading.RLock = field(default_factory=threading.RLock, init=False, repr=False, compare=False)

    def load_definition(self, text: str) -> MachineDefinition:
        """Sustituye la definición; si falla, la anterior sigue activa."""

        definition = load_definition(text, strict=self.strict)
        with self._lock:
            self.definition = definition
            self.run_state = None
        return definition

    def load_inputs(self, text: str) -> List[str]:
        with self._lock:
            inputs = load_inputs(text, self.definition)
            self.run_state = RunState.start(self.definition, inputs)
        return inputs

    def set_active(self, definition: MachineDefinition, inputs: Sequence[str]) -> List[str]:
        """Activa una definición con sus cintas; si las cintas no son válidas, nada cambia."""

        with self._lock:
            tapes = parse_inputs(inputs, definition)
            self.definition = definition
            self.run_state = RunState.start(definition, tapes)
        return tapes

    @property
    def status(self) -> EngineStatus:
        with self._lock:
            if self.definition is None or self.run_state is None:
                return EngineStatus.IDLE
            if self.run_state.finished:
                return EngineStatus.FINISHED
            return EngineStatus.READY

    def step(self) -> Optional[StepReport]:
        """Aplica una transición, o detiene la cinta activa y pasa a la siguiente.

        Devuelve ``None`` cuando no hay nada que ejecutar.
        """

        with self._lock:
            definition = self.definition
            run = self.run_state
            if definition is None or run is None or run.finished:
                return None

            tape = run.tapes[run.tape_index]
            state = run.current_state
            position = run.head_position
            symbol = tape.peek(position)

            transition = definition.find_transition(state, symbol)
            if transition is None or state in (definition.accept_state, definition.reject_state):
                tape.read(position)
                return self._halt(definition, run, self._verdict(definition, state))

            if transition.direction is Direction.RIGHT:
                next_position = position + 1
            elif position > 0:
                next_position = position - 1
            elif self.left_edge is LeftEdgePolicy.ERROR:
                raise TapeBoundaryError(
                    f"Transition ({transition.to_line()}) moves the head left of cell 0 "
                    f"on tape {run.tape_index}"
                )
            else:
                logger.debug("Head clamped at cell 0 on tape %d", run.tape_index)
                next_position = 0

            tape.read(position)
            tape.write(position, transition.write_symbol)
            run.current_state = transition.to_state
            run.head_position = next_position
            run.steps_taken += 1
            return StepTrace(
                state=state,
                read_symbol=symbol,
                tape=str(tape),
                head_position=next_position,
                tape_index=run.tape_index,
                step=run.steps_taken,
            )

    def skip_tape(self) -> Optional[HaltReport]:
        """Abandona la cinta activa sin detenerla y pasa a la siguiente.

        Pensado para quien impone un límite de pasos. Devuelve ``None`` si no
        hay cinta activa.
        """

        with self._lock:
            definition = self.definition
            run = self.run_state
            if definition is None or run is None or run.finished:
                return None
            return self._halt(definition, run, Verdict.STEP_LIMIT)

    @staticmethod
    def _verdict(definition: MachineDefinition, state: str) -> Verdict:
        if state == definition.accept_state:
            return Verdict.ACCEPTED
        if state == definition.reject_state:
            return Verdict.REJECTED
        return Verdict.REJECTED_NO_TRANSITION

    def _halt(self, definition: MachineDefinition, run: RunState, verdict: Verdict) -> HaltReport:
        tape = run.tapes[run.tape_index]
        report = HaltReport(
            verdict=verdict,
            original_tape=run.original_tapes[run.tape_index],
            final_tape=str(tape),
            state=run.current_state,
            read_symbol=tape.peek(run.head_position),
            head_position=run.head_position,
            tape_index=run.tape_index,
            steps=run.steps_taken,
        )
        logger.info(
            "Tape %d finished in state %s after %d steps: %s",
            run.tape_index,
            run.current_state,
            run.steps_taken,
            verdict.value,
        )

        run.tape_index += 1
        run.head_position = 0
        run.current_state = definition.start_state
        run.steps_taken = 0
        return report

    def run(self, max_steps: Optional[int] = None) -> List[StepReport]:
        """Invoca ``step`` hasta agotar las cintas o ``max_steps`` llamadas."""

        reports: List[StepReport] = []
        while max_steps is None or len(reports) < max_steps:
            report = self.step()
            if report is None:
                break
            reports.append(report)
        return reports
