from typing import Any, Awaitable, Callable, List, Optional

import structlog

from shared.observability import saga_compensation_total

logger = structlog.get_logger(__name__)

Action = Callable[[Any], Awaitable[None]]


class SagaStep:
    def __init__(self, name: str, action: Action, compensation: Optional[Action] = None):
        self.name = name
        self.action = action
        self.compensation = compensation


class SagaOrchestrator:
    def __init__(self, name: str = "saga"):
        self.name = name
        self.steps: List[SagaStep] = []

    def add_step(self, name: str, action: Action, compensation: Optional[Action] = None):
        """Builder pattern to add a step and its rollback compensation."""
        self.steps.append(SagaStep(name, action, compensation))
        return self

    async def execute(self, ctx: Any):
        """Executes steps strictly in order. Runs compensations, then re-raises, on any failure."""
        executed_steps: List[SagaStep] = []
        step: Optional[SagaStep] = None
        try:
            for step in self.steps:
                await step.action(ctx)
                executed_steps.append(step)
            return ctx
        except Exception as e:
            logger.error(
                "saga_step_failed",
                saga=self.name,
                step=step.name if step else None,
                error=str(e),
            )
            await self._rollback(executed_steps, ctx)
            raise

    async def _rollback(self, executed_steps: List[SagaStep], ctx: Any):
        """Executes compensations in reverse order. Wraps each in a try/except."""
        compensable = [s for s in reversed(executed_steps) if s.compensation]
        if not compensable:
            return
        logger.info("saga_rollback_started", saga=self.name, steps=[s.name for s in compensable])
        for step in compensable:
            try:
                await step.compensation(ctx)
                logger.info("saga_compensation_succeeded", saga=self.name, step=step.name)
                saga_compensation_total.labels(step_name=step.name.split(":")[0]).inc()
            except Exception as ce:
                # A failing compensation MUST NOT block other compensations
                logger.critical(
                    "saga_compensation_failed",
                    saga=self.name,
                    step=step.name,
                    error=str(ce),
                    note="manual intervention may be required",
                )
