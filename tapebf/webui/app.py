from __future__ import annotations

from typing import List, Optional

from fastapi import FastAPI, HTTPException, Response, status
from pydantic import BaseModel, Field, validator

from tapebf.bf_interpreter import ExecutionState
from tapebf.config import InterpreterConfig
from tapebf.debugger import DebugSession
from tapebf.errors import InterpreterError, OperationLimitExceeded
from tapebf.streams import ByteInput, ByteOutput, to_input_bytes

from .session import SessionRecord, SessionStore


def _error_status(exc: InterpreterError) -> int:
    if isinstance(exc, OperationLimitExceeded):
        return status.HTTP_409_CONFLICT
    return status.HTTP_422_UNPROCESSABLE_ENTITY


def _error_detail(exc: InterpreterError, output: bytes) -> dict:
    return {
        "error": exc.kind,
        "message": exc.message,
        "position": exc.position,
        "output": output.decode("latin-1"),
    }


class RunRequest(BaseModel):
    code: str
    input: str = ""
    max_operations: Optional[int] = Field(default=None, ge=1)

    @validator("input")
    def validate_input(cls, value: str) -> str:
        to_input_bytes(value)
        return value


class RunResult(BaseModel):
    output: str
    output_bytes: List[int]
    operations: int


class SessionConfiguration(BaseModel):
    code: str
    input: str = ""
    tape_window: int = Field(default=10, ge=0)
    max_operations: Optional[int] = Field(default=None, ge=1)
    history_limit: int = Field(default=200, ge=1)

    @validator("code")
    def validate_code(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("code must not be empty")
        return value

    @validator("input")
    def validate_input(cls, value: str) -> str:
        to_input_bytes(value)
        return value


class SessionState(BaseModel):
    step: int
    pc: int
    command: Optional[str]
    pointer: int
    tape_start: int
    tape: List[int]
    output: str
    code_length: int

    @classmethod
    def from_state(cls, state: ExecutionState) -> "SessionState":
        return cls(
            step=state.step,
            pc=state.pc,
            command=state.command,
            pointer=state.pointer,
            tape_start=state.tape_start,
            tape=list(state.tape),
            output=state.output.decode("latin-1"),
            code_length=state.code_length,
        )


class SessionError(BaseModel):
    error: str
    message: str
    position: Optional[int]


class SessionPayload(BaseModel):
    session_id: str
    code: str
    state: SessionState
    states: List[SessionState] = Field(default_factory=list)
    history: List[SessionState]
    history_size: int
    finished: bool
    breakpoints: List[int]
    hit_breakpoint: Optional[int]
    error: Optional[SessionError]


class StepRequest(BaseModel):
    count: int = Field(default=1, ge=1)


class RunSessionRequest(BaseModel):
    limit: Optional[int] = Field(default=None, ge=1)
    ignore_breakpoints: bool = False


class BreakpointRequest(BaseModel):
    pc: int = Field(ge=0)


def create_app(
    store: Optional[SessionStore] = None,
    *,
    config: Optional[InterpreterConfig] = None,
) -> FastAPI:
    session_store = store or SessionStore()
    server_config = config or InterpreterConfig.from_env()
    app = FastAPI(title="tapebf API", version="0.1.0")

    def _effective_limit(requested: Optional[int]) -> Optional[int]:
        # Clients may lower the server ceiling but never raise it.
        ceiling = server_config.max_operations
        if requested is None:
            return ceiling
        if ceiling is None:
            return requested
        return min(requested, ceiling)

    def _get_record(session_id: str) -> SessionRecord:
        try:
            return session_store.get(session_id)
        except KeyError as exc:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc

    def _build_payload(record: SessionRecord, states: Optional[List[ExecutionState]] = None) -> SessionPayload:
        session = record.session
        error = None
        if session.error is not None:
            error = SessionError(
                error=session.error.kind,
                message=session.error.message,
                position=session.error.position,
            )
        return SessionPayload(
            session_id=record.session_id,
            code=session.code,
            state=SessionState.from_state(session.current_state()),
            states=[SessionState.from_state(state) for state in states or []],
            history=[SessionState.from_state(state) for state in session.history],
            history_size=len(session.history),
            finished=session.is_finished(),
            breakpoints=session.list_breakpoints(),
            hit_breakpoint=session.hit_breakpoint,
            error=error,
        )

    def _session_failure(session: DebugSession, exc: InterpreterError) -> HTTPException:
        return HTTPException(
            status_code=_error_status(exc),
            detail=_error_detail(exc, session.current_state().output),
        )

    @app.post("/api/run", response_model=RunResult)
    def run_program(payload: RunRequest) -> RunResult:
        interpreter = InterpreterConfig(max_operations=_effective_limit(payload.max_operations)).create_interpreter()
        output = ByteOutput()
        try:
            operations = interpreter.execute(payload.code, ByteInput(to_input_bytes(payload.input)), output)
        except InterpreterError as exc:
            raise HTTPException(
                status_code=_error_status(exc),
                detail=_error_detail(exc, output.getvalue()),
            ) from exc
        data = output.getvalue()
        return RunResult(output=data.decode("latin-1"), output_bytes=list(data), operations=operations)

    @app.post("/api/session", response_model=SessionPayload, status_code=status.HTTP_201_CREATED)
    def create_session(payload: SessionConfiguration) -> SessionPayload:
        record = session_store.create_session(
            code=payload.code,
            input_data=to_input_bytes(payload.input),
            tape_window=payload.tape_window,
            max_operations=_effective_limit(payload.max_operations),
            history_limit=payload.history_limit,
        )
        return _build_payload(record)

    @app.get("/api/session/{session_id}", response_model=SessionPayload)
    def get_session(session_id: str) -> SessionPayload:
        record = _get_record(session_id)
        with record.lock:
            return _build_payload(record)

    @app.post("/api/session/{session_id}/reset", response_model=SessionPayload)
    def reset_session(session_id: str) -> SessionPayload:
        try:
            record = session_store.reset(session_id)
        except KeyError as exc:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
        with record.lock:
            return _build_payload(record)

    @app.post("/api/session/{session_id}/step", response_model=SessionPayload)
    def step_session(session_id: str, payload: StepRequest) -> SessionPayload:
        record = _get_record(session_id)
        with record.lock:
            try:
                states = list(record.session.step_forward(payload.count))
            except InterpreterError as exc:
                raise _session_failure(record.session, exc) from exc
            return _build_payload(record, states)

    @app.post("/api/session/{session_id}/run", response_model=SessionPayload)
    def run_session(session_id: str, payload: RunSessionRequest) -> SessionPayload:
        record = _get_record(session_id)
        session = record.session
        with record.lock:
            saved_breakpoints = set(session.breakpoints)
            if payload.ignore_breakpoints:
                session.clear_breakpoints()
            try:
                states = list(session.run_until_break(payload.limit))
            except InterpreterError as exc:
                raise _session_failure(session, exc) from exc
            finally:
                if payload.ignore_breakpoints:
                    session.breakpoints = saved_breakpoints
            return _build_payload(record, states)

    @app.post("/api/session/{session_id}/breakpoints", response_model=SessionPayload)
    def add_breakpoint(session_id: str, payload: BreakpointRequest) -> SessionPayload:
        record = _get_record(session_id)
        with record.lock:
            record.session.add_breakpoint(payload.pc)
            return _build_payload(record)

    @app.delete("/api/session/{session_id}/breakpoints/{pc}", response_model=SessionPayload)
    def remove_breakpoint(session_id: str, pc: int) -> SessionPayload:
        record = _get_record(session_id)
        with record.lock:
            if not record.session.remove_breakpoint(pc):
                raise HTTPException(
                    status_code=status.HTTP_404_NOT_FOUND,
                    detail=f"Breakpoint not found at pc={pc}",
                )
            return _build_payload(record)

    @app.delete("/api/session/{session_id}", status_code=status.HTTP_204_NO_CONTENT)
    def delete_session(session_id: str) -> Response:
        if not session_store.remove(session_id):
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail=f"Unknown session id: {session_id}",
            )
        return Response(status_code=status.HTTP_204_NO_CONTENT)

    return app


__all__ = ["create_app"]
