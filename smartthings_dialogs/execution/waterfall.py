"""
Waterfall Flow - Ordered Step Execution

A WaterfallFlow runs one step per resumption. Each step receives a
StepContext and returns a StepOutcome built from one of the context's
helpers; the flow then translates that outcome into stack operations.

Frame state layout (all JSON, persisted between turns):
    options:        the flow's typed options, dumped from `options_model`
    values:         scratch dict shared by the flow's steps
    pending_prompt: the PromptSpec the frame is suspended on, if any
    rerun_step:     set while a child started with rerun_step=True is running
"""

import logging
from typing import TYPE_CHECKING, Any, Awaitable, Callable, Dict, Optional, Sequence, Type

from pydantic import BaseModel

from ..domain.models import PromptSpec
from ..schemas.activities import InputHint
from ..schemas.decisions import DialogTurnResult
from ..state.models import Frame
from .choices import recognize_answer, render_prompt
from .flow import Flow, waiting
from .schemas.state_machine import StateMachineTransition, StepOutcome
from .turn import TurnContext

if TYPE_CHECKING:
    from .engine import DialogContext

logger = logging.getLogger(__name__)


class StepContext:
    """
    What a step sees: the turn, the flow's options and scratch values, and
    the result handed over by the previous step, prompt or child flow.
    """

    def __init__(
        self,
        turn: TurnContext,
        index: int,
        options: Any,
        values: Dict[str, Any],
        result: Any = None,
        child_returned: bool = False,
    ):
        self.turn = turn
        self.index = index
        self.options = options
        self.values = values
        self.result = result
        self.child_returned = child_returned

    def prompt(self, spec: PromptSpec) -> StepOutcome:
        return StepOutcome(StateMachineTransition.HOLD, prompt=spec)

    def next(self, value: Any = None) -> StepOutcome:
        return StepOutcome(StateMachineTransition.ADVANCE, value=value)

    def begin_dialog(self, flow_id: str, options: Any = None, *, rerun_step: bool = False) -> StepOutcome:
        return StepOutcome(
            StateMachineTransition.PUSH,
            flow_id=flow_id,
            options=options,
            rerun_step=rerun_step,
        )

    def end_dialog(self, value: Any = None) -> StepOutcome:
        return StepOutcome(StateMachineTransition.POP, value=value)

    def replace_dialog(self, flow_id: str, options: Any = None) -> StepOutcome:
        return StepOutcome(StateMachineTransition.REPLACE, flow_id=flow_id, options=options)


Step = Callable[[StepContext], Awaitable[StepOutcome]]


class WaterfallFlow(Flow):
    def __init__(
        self,
        flow_id: str,
        steps: Sequence[Step],
        options_model: Optional[Type[BaseModel]] = None,
    ):
        super().__init__(flow_id)
        if not steps:
            raise ValueError(f"Waterfall '{flow_id}' needs at least one step.")
        self.steps = tuple(steps)
        self.options_model = options_model

    @property
    def step_count(self) -> int:
        return len(self.steps)

    # ==========================================================================
    # Flow Contract
    # ==========================================================================

    async def begin(self, dc: "DialogContext", options: Any = None) -> DialogTurnResult:
        frame = dc.active_frame
        frame.state = {"options": self._dump_options(self._load_options(options)), "values": {}}
        return await self._run_step(dc, frame, 0, None)

    async def continue_turn(self, dc: "DialogContext") -> DialogTurnResult:
        frame = dc.active_frame
        pending = frame.state.get("pending_prompt")
        if pending is None:
            # Not suspended on a prompt: treat the raw text as the step's answer.
            return await self._run_step(dc, frame, frame.step_index + 1, dc.turn.text)

        spec = PromptSpec.model_validate(pending)
        valid, value = recognize_answer(spec, dc.turn.activity)
        if not valid:
            logger.debug(f"Invalid answer for '{self.id}' step {frame.step_index}")
            dc.turn.send_activity(render_prompt(spec, retry=True), InputHint.EXPECTING_INPUT)
            return waiting()

        del frame.state["pending_prompt"]
        return await self._run_step(dc, frame, frame.step_index + 1, value)

    async def resume(self, dc: "DialogContext", result: Any = None) -> DialogTurnResult:
        frame = dc.active_frame
        if frame.state.pop("rerun_step", False):
            return await self._run_step(dc, frame, frame.step_index, result, child_returned=True)
        return await self._run_step(dc, frame, frame.step_index + 1, result)

    async def reprompt(self, dc: "DialogContext") -> None:
        pending = dc.active_frame.state.get("pending_prompt")
        if pending is not None:
            spec = PromptSpec.model_validate(pending)
            dc.turn.send_activity(render_prompt(spec), InputHint.EXPECTING_INPUT)

    # ==========================================================================
    # Step Execution
    # ==========================================================================

    async def _run_step(
        self,
        dc: "DialogContext",
        frame: Frame,
        index: int,
        result: Any,
        child_returned: bool = False,
    ) -> DialogTurnResult:
        # Running off the end completes the flow with the last result.
        if index >= len(self.steps):
            return await dc.end_dialog(result)

        frame.step_index = index
        step_context = StepContext(
            turn=dc.turn,
            index=index,
            options=self._load_options(frame.state.get("options")),
            values=frame.state.setdefault("values", {}),
            result=result,
            child_returned=child_returned,
        )

        step = self.steps[index]
        logger.debug(f"Running '{self.id}' step {index} ({getattr(step, '__name__', step)})")
        outcome = await step(step_context)

        # Persist before the outcome can push another frame on top of this one.
        frame.state["options"] = self._dump_options(step_context.options)
        return await self._apply_outcome(dc, frame, outcome)

    async def _apply_outcome(self, dc: "DialogContext", frame: Frame, outcome: StepOutcome) -> DialogTurnResult:
        transition = outcome.transition

        if transition == StateMachineTransition.HOLD:
            frame.state["pending_prompt"] = outcome.prompt.model_dump(mode="json")
            dc.turn.send_activity(render_prompt(outcome.prompt), InputHint.EXPECTING_INPUT)
            return waiting()

        if transition == StateMachineTransition.ADVANCE:
            return await self._run_step(dc, frame, frame.step_index + 1, outcome.value)

        if transition == StateMachineTransition.PUSH:
            if outcome.rerun_step:
                frame.state["rerun_step"] = True
            return await dc.begin_dialog(outcome.flow_id, outcome.options)

        if transition == StateMachineTransition.POP:
            return await dc.end_dialog(outcome.value)

        if transition == StateMachineTransition.REPLACE:
            return await dc.replace_dialog(outcome.flow_id, outcome.options)

        raise ValueError(f"Unknown transition {transition}")

    # ==========================================================================
    # Options (de)serialization
    # ==========================================================================

    def _load_options(self, raw: Any) -> Any:
        if self.options_model is None:
            return raw
        if raw is None:
            return self.options_model()
        return self.options_model.model_validate(raw)

    def _dump_options(self, options: Any) -> Any:
        if isinstance(options, BaseModel):
            return options.model_dump(mode="json")
        return options
