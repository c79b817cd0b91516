"""
Action Descriptor Entity

Architectural Intent:
- Declarative description of one NCP management operation exposed as a tool
- Carries the HTTP routing (method, base path, endpoint) and the ordered
  parameter schema the tool accepts
- Renders its own MCP inputSchema and decodes raw argument bags against it

Design Decisions:
- Parameter order is significant: it fixes the query-string order, and the
  query string is part of the signed bytes
- decode() reports every violation in one error, before any network call
- Undeclared argument keys are dropped rather than forwarded
"""

from __future__ import annotations
from dataclasses import dataclass
from enum import Enum
from typing import Any, Mapping, Optional

from ncloud_mcp.domain.errors import InvalidArgumentError, MissingArgumentError

HTTP_METHODS = ("GET", "POST")

VSERVER_PATH = "/vserver/v2"
VLOADBALANCER_PATH = "/vloadbalancer/v2"
CLOUDDB_PATH = "/clouddb/v2"

BASE_PATHS = (VSERVER_PATH, VLOADBALANCER_PATH, CLOUDDB_PATH)


class ParamType(Enum):
    STRING = "string"
    STRING_ARRAY = "string-array"


@dataclass(frozen=True)
class ParameterSpec:
    """One named tool parameter."""

    name: str
    description: str
    type: ParamType = ParamType.STRING
    required: bool = False

    def json_schema(self) -> dict[str, Any]:
        if self.type is ParamType.STRING_ARRAY:
            return {
                "type": "array",
                "items": {"type": "string"},
                "description": self.description,
            }
        return {"type": "string", "description": self.description}

    def decode(self, value: Any) -> tuple[Any, Optional[str]]:
        """Cast a raw value to this parameter's type.

        Returns (decoded value, violation message or None).
        """
        if self.type is ParamType.STRING:
            if isinstance(value, str):
                return value, None
            # Agents often send numeric identifiers unquoted
            if isinstance(value, (int, float)) and not isinstance(value, bool):
                return str(value), None
            return None, f"'{self.name}' must be a string"

        if isinstance(value, str):
            return [value], None
        if isinstance(value, (list, tuple)) and all(isinstance(v, str) for v in value):
            return list(value), None
        return None, f"'{self.name}' must be an array of strings"


@dataclass(frozen=True)
class ActionDescriptor:
    """
    Entity describing one callable NCP action.
    """

    name: str
    http_method: str
    base_path: str
    endpoint: str
    description: str
    parameters: tuple[ParameterSpec, ...] = ()

    def __post_init__(self) -> None:
        if not self.name:
            raise ValueError("Action name cannot be empty")
        if self.http_method not in HTTP_METHODS:
            raise ValueError(f"Unsupported HTTP method: {self.http_method!r}")
        if self.base_path not in BASE_PATHS:
            raise ValueError(f"Unknown API base path: {self.base_path!r}")
        if not self.endpoint.startswith("/"):
            raise ValueError(f"Endpoint must start with '/': {self.endpoint!r}")
        names = [p.name for p in self.parameters]
        if len(names) != len(set(names)):
            raise ValueError(f"Duplicate parameter names in action {self.name!r}")

    @property
    def path(self) -> str:
        return f"{self.base_path}{self.endpoint}"

    @property
    def required(self) -> list[str]:
        return [p.name for p in self.parameters if p.required]

    def parameter(self, name: str) -> Optional[ParameterSpec]:
        for p in self.parameters:
            if p.name == name:
                return p
        return None

    def input_schema(self) -> dict[str, Any]:
        schema: dict[str, Any] = {
            "type": "object",
            "properties": {p.name: p.json_schema() for p in self.parameters},
        }
        if self.required:
            schema["required"] = self.required
        return schema

    def decode(self, arguments: Mapping[str, Any]) -> dict[str, Any]:
        """Validate and cast a raw argument bag.

        Absent optional fields (or ones passed as null) are left out of the
        result. Keys come back in declared parameter order.
        """
        missing: list[str] = []
        invalid: list[str] = []
        decoded: dict[str, Any] = {}

        for spec in self.parameters:
            value = arguments.get(spec.name)
            if value is None:
                if spec.required:
                    missing.append(f"'{spec.name}' is required")
                continue
            cast, problem = spec.decode(value)
            if problem:
                invalid.append(problem)
                continue
            decoded[spec.name] = cast

        violations = missing + invalid
        if missing:
            raise MissingArgumentError(
                f"Invalid arguments for {self.name}: " + "; ".join(violations),
                violations,
            )
        if invalid:
            raise InvalidArgumentError(
                f"Invalid arguments for {self.name}: " + "; ".join(violations),
                violations,
            )
        return decoded
