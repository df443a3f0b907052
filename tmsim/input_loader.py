from __future__ import annotations

import logging
from typing import Iterable, List, Optional

from .definition_loader import MachineDefinition, filter_comments_and_blank_lines

logger = logging.getLogger(__name__)


class InputError(ValueError):
    """Las cadenas de entrada no pertenecen al alfabeto de entrada."""


def parse_inputs(lines: Iterable[str], definition: Optional[MachineDefinition]) -> List[str]:
    """Valida las cadenas de entrada contra el alfabeto de la definición.

    Cada línea no vacía es una cinta inicial. Se devuelven tal cual; una
    lista vacía es válida y produce una ejecución sin cintas.
    """

    if definition is None:
        raise InputError("A valid TM definition must be loaded before its inputs")

    inputs = filter_comments_and_blank_lines(lines)
    allowed = "[" + ", ".join(definition.input_alphabet) + "]"
    for input_string in inputs:
        for symbol in input_string:
            if symbol not in definition.input_alphabet:
                raise InputError(
                    f"Expected input to be one of the allowed input characters {allowed}; "
                    f"found '{symbol}' in '{input_string}'"
                )

    logger.debug("Loaded %d input tapes", len(inputs))
    return inputs


def load_inputs(text: str, definition: Optional[MachineDefinition]) -> List[str]:
    return parse_inputs(text.splitlines(), definition)
