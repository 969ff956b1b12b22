"""Loader for ``kind: Machine`` YAML manifests.

YAML example::

    apiVersion: hexchart/v1
    kind: Machine
    metadata:
      name: toggle
    spec:
      initial: "OFF"
      context:
        count: 0
      events: [FLIP]
      states:
        "OFF":
          on:
            FLIP:
              target: "ON"
              actions:
                - assign: myapp.actions.increment
        "ON":
          entry:
            - log: "switched on at {context[count]}"
          on:
            FLIP: "OFF"          # shorthand for {target: "OFF"}

Action entries take exactly one of ``assign`` (reference), ``assign_values``
(literal mapping), ``effect`` (reference) or ``log`` (message formatted with
``context`` and ``event``). ``cond`` is a guard reference. References are
looked up in the loader's registry first, then imported by dotted path.

Quote state names such as ``ON``/``OFF``/``YES``: YAML reads them as booleans.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from pathlib import Path
from typing import Any, Literal

import yaml
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic import ValidationError as PydanticValidationError

from hexchart.kernel.actions import assign, assign_values, effect, log
from hexchart.kernel.domain.machine import (
    Action,
    Event,
    MachineDefinition,
    StateNode,
    TransitionDefinition,
)
from hexchart.kernel.exceptions import MachineLoadError, ResolveError, ValidationError
from hexchart.kernel.logging import get_logger
from hexchart.kernel.machine import Machine
from hexchart.kernel.resolver import resolve_callable

logger = get_logger(__name__)

__all__ = ["MachineLoader", "MachineManifest", "load_machine"]


# ---------------------------------------------------------------------------
# Pydantic models: parsing and shape validation
# ---------------------------------------------------------------------------


class ActionSpec(BaseModel):
    """One entry of an ``entry``/``exit``/``actions`` list."""

    model_config = ConfigDict(extra="forbid")

    assign: str | None = None
    assign_values: dict[str, Any] | None = None
    effect: str | None = None
    log: str | None = None
    level: str = "INFO"
    type: str | None = Field(default=None, description="Tag for effect and log actions")

    @model_validator(mode="after")
    def _exactly_one_kind(self) -> ActionSpec:
        kinds = [
            name
            for name in ("assign", "assign_values", "effect", "log")
            if getattr(self, name) is not None
        ]
        if len(kinds) != 1:
            msg = f"An action needs exactly one of assign/assign_values/effect/log, got {kinds}"
            raise ValueError(msg)
        return self


class TransitionSpec(BaseModel):
    model_config = ConfigDict(extra="forbid")

    target: str | None = None
    cond: str | None = None
    actions: list[ActionSpec] = Field(default_factory=list)


class StateSpec(BaseModel):
    model_config = ConfigDict(extra="forbid")

    entry: list[ActionSpec] = Field(default_factory=list)
    exit: list[ActionSpec] = Field(default_factory=list)
    on: dict[str, TransitionSpec] = Field(default_factory=dict)

    @model_validator(mode="before")
    @classmethod
    def _restore_on_key(cls, data: Any) -> Any:
        # YAML 1.1 reads a bare ``on:`` key as the boolean True
        if isinstance(data, Mapping) and any(key is True for key in data):
            return {("on" if key is True else key): value for key, value in data.items()}
        return data

    @field_validator("on", mode="before")
    @classmethod
    def _expand_target_shorthand(cls, value: Any) -> Any:
        if isinstance(value, Mapping):
            return {
                event_type: {"target": raw} if isinstance(raw, str) else (raw or {})
                for event_type, raw in value.items()
            }
        return value


class MachineSpec(BaseModel):
    model_config = ConfigDict(extra="forbid")

    initial: str
    context: dict[str, Any] = Field(default_factory=dict)
    events: list[str] | None = None
    states: dict[str, StateSpec]


class MachineManifest(BaseModel):
    """A complete ``kind: Machine`` document."""

    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    api_version: str = Field(default="hexchart/v1", alias="apiVersion")
    kind: Literal["Machine"]
    metadata: dict[str, Any] = Field(default_factory=dict)
    spec: MachineSpec

    @property
    def name(self) -> str:
        return str(self.metadata.get("name", "machine"))


# ---------------------------------------------------------------------------
# Loader
# ---------------------------------------------------------------------------


class MachineLoader:
    """Builds :class:`MachineDefinition` objects from ``kind: Machine`` documents.

    Parameters
    ----------
    registry:
        Name to callable mapping consulted before dotted-path imports.
    """

    def __init__(self, registry: Mapping[str, Callable[..., Any]] | None = None) -> None:
        self._registry = dict(registry) if registry else {}

    def load_file(self, path: str | Path) -> MachineDefinition:
        path = Path(path)
        try:
            text = path.read_text(encoding="utf-8")
        except OSError as e:
            raise MachineLoadError(str(path), str(e)) from e
        return self.load_string(text, source=str(path))

    def load_string(self, text: str, source: str = "<string>") -> MachineDefinition:
        try:
            data = yaml.safe_load(text)
        except yaml.YAMLError as e:
            raise MachineLoadError(source, f"invalid YAML: {e}") from e
        return self.load_data(data, source=source)

    def load_data(self, data: Any, source: str = "<data>") -> MachineDefinition:
        if not isinstance(data, dict):
            raise MachineLoadError(source, f"expected a mapping, got {type(data).__name__}")
        try:
            manifest = MachineManifest.model_validate(data)
        except PydanticValidationError as e:
            raise MachineLoadError(source, str(e)) from e

        try:
            definition = self._build(manifest)
        except (ResolveError, ValidationError) as e:
            raise MachineLoadError(source, str(e)) from e

        logger.debug(
            "Loaded machine {name} from {source} ({count} states)",
            name=definition.name,
            source=source,
            count=len(definition.states),
        )
        return definition

    def _build(self, manifest: MachineManifest) -> MachineDefinition:
        spec = manifest.spec
        states = {
            state: StateNode(
                on={
                    event_type: TransitionDefinition(
                        target=transition.target,
                        cond=self._resolve(transition.cond) if transition.cond else None,
                        actions=self._actions(transition.actions),
                    )
                    for event_type, transition in state_spec.on.items()
                },
                entry=self._actions(state_spec.entry),
                exit=self._actions(state_spec.exit),
            )
            for state, state_spec in spec.states.items()
        }
        return MachineDefinition(
            initial=spec.initial,
            states=states,
            context=spec.context,
            events=frozenset(spec.events) if spec.events is not None else None,
            name=manifest.name,
        )

    def _actions(self, specs: list[ActionSpec]) -> tuple[Action, ...]:
        return tuple(self._action(action_spec) for action_spec in specs)

    def _action(self, spec: ActionSpec) -> Action:
        if spec.assign is not None:
            return assign(self._resolve(spec.assign))
        if spec.assign_values is not None:
            return assign_values(**spec.assign_values)
        if spec.effect is not None:
            return effect(self._resolve(spec.effect), type=spec.type)
        template = spec.log or ""

        def _message(context: Any, event: Event) -> str:
            return template.format(context=context, event=event)

        return log(_message, level=spec.level, type=spec.type or "log")

    def _resolve(self, ref: str) -> Callable[..., Any]:
        return resolve_callable(ref, self._registry)


def load_machine(
    path: str | Path, registry: Mapping[str, Callable[..., Any]] | None = None
) -> Machine:
    """Load a ``kind: Machine`` file and wrap it in a :class:`Machine`."""
    return Machine(MachineLoader(registry).load_file(path))
