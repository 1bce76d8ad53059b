"""
Engine - Dialog Stack Orchestration Layer

The DialogContext is the deterministic state machine that owns a
conversation's call stack for the duration of one turn. It resumes the
active frame with the user's input, pushes frames when a flow delegates,
pops them when a flow completes and hands the child's value back to the
parent.
-----------------------------------------------

Nested completion is synchronous: when a child ends, its parent resumes
inside the same call, and so on up the stack until some step suspends or
the stack is empty. No turn boundary is introduced by a child returning.

Only the active (top) frame is ever resumed. Flows reach the stack through
the DialogContext they are given and never hold on to it between turns.
"""

import logging
from typing import Any, Dict, Iterator, List, Optional

from ..schemas.decisions import DialogTurnResult, DialogTurnStatus
from ..state.models import Frame, SessionState
from .exceptions import DialogStackOverflowError, FlowNotFoundError
from .flow import Flow
from .interrupts import InterruptibleFlow, InterruptLayer
from .turn import TurnContext

logger = logging.getLogger(__name__)

DEFAULT_MAX_DEPTH = 16


class FlowSet:
    """
    Registry of flow definitions, filled once at start-up and shared by
    every conversation. Each flow is composed with the interrupt layer so
    cancel and help work the same whichever frame is active.
    """

    def __init__(self, interrupts: Optional[InterruptLayer] = None):
        self.interrupts = interrupts
        self._flows: Dict[str, Flow] = {}

    def add(self, flow: Flow) -> "FlowSet":
        if flow.id in self._flows:
            raise ValueError(f"Flow '{flow.id}' is already registered.")
        if self.interrupts is not None and not isinstance(flow, InterruptibleFlow):
            flow = InterruptibleFlow(flow, self.interrupts)
        self._flows[flow.id] = flow
        return self

    def find(self, flow_id: str) -> Flow:
        if flow_id not in self._flows:
            raise FlowNotFoundError(f"Flow '{flow_id}' not found.")
        return self._flows[flow_id]

    def __contains__(self, flow_id: str) -> bool:
        return flow_id in self._flows

    def __iter__(self) -> Iterator[Flow]:
        return iter(self._flows.values())


class DialogContext:
    def __init__(
        self,
        flows: FlowSet,
        session: SessionState,
        turn: TurnContext,
        max_depth: int = DEFAULT_MAX_DEPTH,
    ):
        self.flows = flows
        self.session = session
        self.turn = turn
        self.max_depth = max_depth

    # ==========================================================================
    # Stack Inspection
    # ==========================================================================

    @property
    def stack(self) -> List[Frame]:
        return self.session.stack

    @property
    def active_frame(self) -> Optional[Frame]:
        return self.session.active_frame

    @property
    def depth(self) -> int:
        return len(self.stack)

    # ==========================================================================
    # Stack Operations
    # ==========================================================================

    async def continue_dialog(self) -> DialogTurnResult:
        """
        Resumes the active frame with this turn's input.
        Returns EMPTY without doing anything when no flow is running.
        """
        frame = self.active_frame
        if frame is None:
            return DialogTurnResult(status=DialogTurnStatus.EMPTY)

        flow = self.flows.find(frame.flow_id)
        logger.debug(f"Resuming '{frame.flow_id}' at step {frame.step_index}")
        return await flow.continue_turn(self)

    async def begin_dialog(self, flow_id: str, options: Any = None) -> DialogTurnResult:
        """
        Pushes a new frame and runs the flow's first step in the same tick.
        """
        flow = self.flows.find(flow_id)
        if self.depth >= self.max_depth:
            raise DialogStackOverflowError(
                f"Cannot begin '{flow_id}': stack depth {self.depth} reached the limit."
            )

        self.stack.append(Frame(flow_id=flow_id))
        logger.info(f"Begin flow '{flow_id}' (depth {self.depth})")
        return await flow.begin(self, options)

    async def end_dialog(self, result: Any = None) -> DialogTurnResult:
        """
        Pops the active frame and resumes the parent with `result`.
        With no parent left the turn is COMPLETE and `result` is returned.
        """
        if self.stack:
            ended = self.stack.pop()
            logger.info(f"End flow '{ended.flow_id}' (depth {self.depth})")

        parent = self.active_frame
        if parent is None:
            return DialogTurnResult(status=DialogTurnStatus.COMPLETE, result=result)

        flow = self.flows.find(parent.flow_id)
        return await flow.resume(self, result)

    async def replace_dialog(self, flow_id: str, options: Any = None) -> DialogTurnResult:
        """
        Pops the active frame and begins `flow_id` in its place. The parent
        (if any) is not resumed in between.
        """
        # Look up first so an unknown id leaves the stack untouched.
        self.flows.find(flow_id)
        if self.stack:
            replaced = self.stack.pop()
            logger.info(f"Replace flow '{replaced.flow_id}' with '{flow_id}'")
        return await self.begin_dialog(flow_id, options)

    def cancel_all(self) -> DialogTurnResult:
        if self.stack:
            logger.info(f"Cancelling {self.depth} active flow(s)")
        self.stack.clear()
        return DialogTurnResult(status=DialogTurnStatus.CANCELLED)

    async def reprompt(self) -> None:
        frame = self.active_frame
        if frame is not None:
            await self.flows.find(frame.flow_id).reprompt(self)
