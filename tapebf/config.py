from __future__ import annotations

import os
from typing import Mapping, Optional

from pydantic import BaseModel, Field, validator

from .bf_interpreter import DEFAULT_MAX_OPERATIONS, BrainfuckInterpreter

ENV_MAX_OPERATIONS = "TAPEBF_MAX_OPERATIONS"
_DISABLED_VALUES = {"", "none", "off", "0"}


class InterpreterConfig(BaseModel):
    max_operations: Optional[int] = Field(default=DEFAULT_MAX_OPERATIONS, ge=1)

    @validator("max_operations", pre=True)
    def parse_max_operations(cls, value):
        if isinstance(value, str):
            normalized = value.strip().lower().replace("_", "")
            if normalized in _DISABLED_VALUES:
                return None
            return int(normalized)
        return value

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "InterpreterConfig":
        env = os.environ if environ is None else environ
        if ENV_MAX_OPERATIONS not in env:
            return cls()
        return cls(max_operations=env[ENV_MAX_OPERATIONS])

    def override(self, max_operations: Optional[int] = None, *, unlimited: bool = False) -> "InterpreterConfig":
        if unlimited:
            return InterpreterConfig(max_operations=None)
        if max_operations is not None:
            return InterpreterConfig(max_operations=max_operations)
        return self

    def create_interpreter(self) -> BrainfuckInterpreter:
        return BrainfuckInterpreter(max_operations=self.max_operations)


__all__ = ["ENV_MAX_OPERATIONS", "InterpreterConfig"]
