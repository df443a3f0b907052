from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, List, Optional, Sequence, Tuple

logger = logging.getLogger(__name__)

BLANK_SYMBOL = "_"
MIN_DEFINITION_LINES = 7

_STATE_PATTERN = re.compile(r"[a-z][a-zA-Z]*")
_IGNORABLE_LINE = re.compile(r"^\s*(#.*)?$")


class DefinitionError(ValueError):
    """La definición de la MT no cumple la definición formal."""


class Direction(str, Enum):
    LEFT = "L"
    RIGHT = "R"

    @classmethod
    def from_token(cls, token: str) -> "Direction":
        if "R" in token:
            return cls.RIGHT
        if "L" in token:
            return cls.LEFT
        raise DefinitionError(
            f"Expected transition direction to contain one of the allowed characters L or R; found '{token}'"
        )


@dataclass(frozen=True)
class Transition:
    """Representa una transición de la MT."""

    from_state: str
    read_symbol: str
    to_state: str
    write_symbol: str
    direction: Direction

    def to_line(self) -> str:
        return " ".join(
            (self.from_state, self.read_symbol, self.to_state, self.write_symbol, self.direction.value)
        )


@dataclass(frozen=True)
class MachineDefinition:
    """Estructura de datos inmutable con la definición completa."""

    states: Tuple[str, ...]
    input_alphabet: Tuple[str, ...]
    tape_alphabet: Tuple[str, ...]
    start_state: str
    accept_state: str
    reject_state: str
    transitions: Tuple[Transition, ...]

    def find_transition(self, state: str, symbol: str) -> Optional[Transition]:
        """Devuelve la primera transición declarada para el par (estado, símbolo)."""

        for transition in self.transitions:
            if transition.from_state == state and transition.read_symbol == symbol:
                return transition
        return None

    def duplicate_transition_keys(self) -> List[Tuple[str, str]]:
        seen = set()
        duplicates = []
        for transition in self.transitions:
            key = (transition.from_state, transition.read_symbol)
            if key in seen and key not in duplicates:
                duplicates.append(key)
            seen.add(key)
        return duplicates

    def to_text(self) -> str:
        """Serialización canónica, aceptada de nuevo por ``parse_definition``."""

        lines = [
            " ".join(self.states),
            " ".join(self.input_alphabet),
            " ".join(self.tape_alphabet),
            self.start_state,
            self.accept_state,
            self.reject_state,
        ]
        lines.extend(transition.to_line() for transition in self.transitions)
        return "\n".join(lines) + "\n"


def filter_comments_and_blank_lines(lines: Iterable[str]) -> List[str]:
    """Elimina las líneas vacías y los comentarios que empiezan con '#'."""

    return [line for line in lines if not _IGNORABLE_LINE.match(line)]


def _format_set(values: Sequence[str]) -> str:
    return "[" + ", ".join(values) + "]"


def _require_unique(values: Sequence[str], message: str) -> None:
    seen = set()
    for value in values:
        if value in seen:
            raise DefinitionError(f"{message}; found '{value}' more than once")
        seen.add(value)


def _parse_states(line: str) -> Tuple[str, ...]:
    states = tuple(line.split())
    if not states:
        raise DefinitionError("Expected a TM to contain at least one state; found 0")
    for state in states:
        if not _STATE_PATTERN.fullmatch(state):
            raise DefinitionError(
                "Expected state data line to be identifiers matching [a-z][a-zA-Z]* "
                f"separated by spaces; found '{state}'"
            )
    _require_unique(states, "State set contains duplicate states")
    return states


def _parse_input_alphabet(line: str, states: Sequence[str]) -> Tuple[str, ...]:
    alphabet = tuple(line.split())
    for symbol in alphabet:
        if len(symbol) != 1 or not symbol.isdecimal():
            raise DefinitionError(
                "Expected input alphabet data line to contain single digit characters "
                f"separated by spaces; found '{symbol}'"
            )
    _require_unique(alphabet, "Input alphabet contains duplicate characters")
    if len(alphabet) > len(states):
        raise DefinitionError(
            "Expected input alphabet to be less than or equal to the number of states; "
            f"found {len(states)} states {_format_set(states)} and {len(alphabet)} alphabet characters "
            f"{_format_set(alphabet)}"
        )
    return alphabet


def _parse_tape_alphabet(line: str, input_alphabet: Sequence[str]) -> Tuple[str, ...]:
    alphabet = tuple(line.split())
    for symbol in alphabet:
        if len(symbol) != 1 or not (symbol.isalpha() or symbol.isdecimal() or symbol == BLANK_SYMBOL):
            raise DefinitionError(
                "Expected tape alphabet data line to contain single alpha-numeric characters "
                f"or underscores separated by spaces; found '{symbol}'"
            )
    if BLANK_SYMBOL not in alphabet:
        raise DefinitionError(
            f"Tape alphabet must contain '{BLANK_SYMBOL}'; found {_format_set(alphabet)}"
        )
    _require_unique(alphabet, "Tape alphabet contains duplicate characters")
    missing = [symbol for symbol in input_alphabet if symbol not in alphabet]
    if missing:
        raise DefinitionError(
            f"Input alphabet contains characters not in the tape alphabet {_format_set(alphabet)}; "
            f"found '{missing[0]}'"
        )
    return alphabet


def _parse_named_state(line: str, role: str, states: Sequence[str]) -> str:
    state = line.strip()
    if state not in states:
        raise DefinitionError(
            f"Expected {role} state to be one of the allowed states {_format_set(states)}; found '{state}'"
        )
    return state


def _parse_transition(
    line: str,
    states: Sequence[str],
    tape_alphabet: Sequence[str],
) -> Transition:
    tokens = line.split()
    if len(tokens) < 5:
        raise DefinitionError(
            f"Expected transition to contain at least 5 entries; found {len(tokens)} in '{line.strip()}'"
        )
    from_state, read_symbol, to_state, write_symbol, direction = tokens[:5]
    for state, symbol in ((from_state, read_symbol), (to_state, write_symbol)):
        if state not in states:
            raise DefinitionError(
                f"Expected transition state to be one of the allowed states {_format_set(states)}; found '{state}'"
            )
        if symbol not in tape_alphabet:
            raise DefinitionError(
                "Expected transition symbol to be one of the allowed tape characters "
                f"{_format_set(tape_alphabet)}; found '{symbol}'"
            )
    return Transition(
        from_state=from_state,
        read_symbol=read_symbol,
        to_state=to_state,
        write_symbol=write_symbol,
        direction=Direction.from_token(direction),
    )


def parse_definition(lines: Iterable[str], *, strict: bool = False) -> MachineDefinition:
    """Valida las líneas de una definición y construye la ``MachineDefinition``.

    Las validaciones se aplican en el orden de las líneas: la primera que
    falla aborta la carga con un ``DefinitionError``. Con ``strict`` se
    rechazan además las transiciones duplicadas para un mismo par
    (estado, símbolo leído).
    """

    data = filter_comments_and_blank_lines(lines)
    if len(data) < MIN_DEFINITION_LINES:
        raise DefinitionError(
            f"Expected at least {MIN_DEFINITION_LINES} lines containing TM definition; found {len(data)}"
        )

    states = _parse_states(data[0])
    input_alphabet = _parse_input_alphabet(data[1], states)
    tape_alphabet = _parse_tape_alphabet(data[2], input_alphabet)
    start_state = _parse_named_state(data[3], "start", states)
    accept_state = _parse_named_state(data[4], "accept", states)
    reject_state = _parse_named_state(data[5], "reject", states)
    if accept_state == reject_state:
        raise DefinitionError(f"Accept state cannot equal reject state; found '{accept_state}' for both")

    transitions = tuple(
        _parse_transition(line, states, tape_alphabet) for line in data[MIN_DEFINITION_LINES - 1:]
    )

    definition = MachineDefinition(
        states=states,
        input_alphabet=input_alphabet,
        tape_alphabet=tape_alphabet,
        start_state=start_state,
        accept_state=accept_state,
        reject_state=reject_state,
        transitions=transitions,
    )

    duplicates = definition.duplicate_transition_keys()
    if duplicates:
        state, symbol = duplicates[0]
        if strict:
            raise DefinitionError(
                f"Transition for state '{state}' reading '{symbol}' is declared more than once"
            )
        logger.warning(
            "Transitions shadowed by an earlier declaration: %s",
            ", ".join(f"({state}, {symbol})" for state, symbol in duplicates),
        )

    logger.debug(
        "Loaded definition with %d states, %d tape symbols and %d transitions",
        len(states),
        len(tape_alphabet),
        len(transitions),
    )
    return definition


def load_definition(text: str, *, strict: bool = False) -> MachineDefinition:
    """Carga una definición a partir del texto completo."""

    return parse_definition(text.splitlines(), strict=strict)
