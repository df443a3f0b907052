from .definition_loader import (
    DefinitionError,
    Direction,
    MachineDefinition,
    Transition,
    load_definition,
    parse_definition,
)
from .input_loader import InputError, load_inputs, parse_inputs
from .machine import (
    EngineStatus,
    HaltReport,
    LeftEdgePolicy,
    RunState,
    StepTrace,
    TapeBoundaryError,
    TuringMachine,
    Verdict,
)
from .settings import EngineSettings, load_settings

__all__ = [
    "DefinitionError",
    "Direction",
    "MachineDefinition",
    "Transition",
    "load_definition",
    "parse_definition",
    "InputError",
    "load_inputs",
    "parse_inputs",
    "EngineStatus",
    "HaltReport",
    "LeftEdgePolicy",
    "RunState",
    "StepTrace",
    "TapeBoundaryError",
    "TuringMachine",
    "Verdict",
    "EngineSettings",
    "load_settings",
]
