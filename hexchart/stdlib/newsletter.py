"""Newsletter signup statechart and its host component.

States and events::

    NOT_SUBMITTED --SUBMIT--> SUBMITTING --LOG_SUCCESS--> SUCCESS
                                  |  \\--LOG_ERROR--> ERROR
                                  \\--CANCEL--> NOT_SUBMITTED
    SUCCESS / ERROR --SUBMIT--> SUBMITTING
    NOT_SUBMITTED / SUCCESS / ERROR --RESET--> NOT_SUBMITTED

Entering SUBMITTING starts the request; leaving SUBMITTING cancels the
request's :class:`~hexchart.kernel.cancellation.CancellationToken`. The
token is created by the host for each submission and carried in on the
``SUBMIT`` event. The request's continuation reads the token and reports
back with ``LOG_SUCCESS`` or ``LOG_ERROR`` only while it is not cancelled.
"""

from __future__ import annotations

import asyncio
import dataclasses
from collections.abc import Callable
from dataclasses import dataclass
from enum import StrEnum
from typing import TYPE_CHECKING, Any, Protocol

from hexchart.drivers.host import MachineHost
from hexchart.drivers.http_client import HttpClientDriver
from hexchart.kernel.actions import assign, effect, log
from hexchart.kernel.cancellation import CancellationToken
from hexchart.kernel.domain.machine import (
    Event,
    MachineDefinition,
    State,
    StateNode,
    TransitionDefinition,
)
from hexchart.kernel.logging import get_logger
from hexchart.kernel.machine import Machine

if TYPE_CHECKING:
    from loguru import Logger

    from hexchart.kernel.config.models import NewsletterConfig
    from hexchart.kernel.domain.machine import EffectFunc

logger = get_logger(__name__)

__all__ = [
    "HttpSignupSubmitter",
    "NewsletterContext",
    "NewsletterEvent",
    "NewsletterForm",
    "NewsletterState",
    "SignupSubmitter",
    "build_newsletter_machine",
]


class NewsletterState(StrEnum):
    NOT_SUBMITTED = "NOT_SUBMITTED"
    SUBMITTING = "SUBMITTING"
    SUCCESS = "SUCCESS"
    ERROR = "ERROR"


class NewsletterEvent(StrEnum):
    SUBMIT = "SUBMIT"
    RESET = "RESET"
    LOG_SUCCESS = "LOG_SUCCESS"
    LOG_ERROR = "LOG_ERROR"
    CANCEL = "CANCEL"


@dataclass(frozen=True, slots=True)
class NewsletterContext:
    email: str = ""
    data: str | None = None
    error: str | None = None
    token: CancellationToken | None = None


class SignupSubmitter(Protocol):
    """Performs the signup request and returns the confirmation message."""

    async def asubmit(self, email: str) -> str: ...


# ---------------------------------------------------------------------------
# Machine
# ---------------------------------------------------------------------------


def _has_email(context: NewsletterContext, event: Event) -> bool:
    email = event.get("email")
    return isinstance(email, str) and bool(email.strip())


def _take_submission(context: NewsletterContext, event: Event) -> NewsletterContext:
    return dataclasses.replace(context, email=event["email"], token=event.get("token"))


def _record_error(context: NewsletterContext, event: Event) -> NewsletterContext:
    return dataclasses.replace(context, data=None, error=event.get("message"))


def _record_success(context: NewsletterContext, event: Event) -> NewsletterContext:
    return dataclasses.replace(context, data=event.get("message"), error=None)


def _clear(context: NewsletterContext, event: Event) -> NewsletterContext:
    return NewsletterContext()


@effect(type="cancelSubmission")
def _cancel_submission(context: NewsletterContext, event: Event) -> None:
    if context.token is not None:
        context.token.cancel(f"left {NewsletterState.SUBMITTING} on {event.type}")


def build_newsletter_machine(
    *,
    start_submission: EffectFunc,
    clear_input: EffectFunc | None = None,
    logger: Logger | None = None,
) -> Machine:
    """Build the signup machine around injected effects.

    Parameters
    ----------
    start_submission:
        Entry effect of SUBMITTING; receives the context holding the email
        and the submission's cancellation token.
    clear_input:
        Effect that clears the host's input field after success or reset.
    logger:
        Logger used by the ``logError`` effect.
    """
    S, E = NewsletterState, NewsletterEvent
    clear_input_action = effect(clear_input or (lambda context, event: None), type="clearInput")
    submit = TransitionDefinition(
        target=S.SUBMITTING, cond=_has_email, actions=(assign(_take_submission),)
    )
    reset = TransitionDefinition(
        target=S.NOT_SUBMITTED, actions=(clear_input_action, assign(_clear))
    )

    definition = MachineDefinition(
        name="newsletter",
        initial=S.NOT_SUBMITTED,
        context=NewsletterContext(),
        events=frozenset(E),
        states={
            S.NOT_SUBMITTED: StateNode(on={E.SUBMIT: submit, E.RESET: reset}),
            S.SUBMITTING: StateNode(
                entry=(effect(start_submission, type="startSubmission"),),
                exit=(_cancel_submission,),
                on={
                    E.LOG_ERROR: TransitionDefinition(
                        target=S.ERROR,
                        actions=(
                            assign(_record_error),
                            log(
                                lambda context, event: f"Signup failed: {context.error}",
                                logger=logger,
                                level="ERROR",
                                type="logError",
                            ),
                        ),
                    ),
                    E.LOG_SUCCESS: TransitionDefinition(
                        target=S.SUCCESS,
                        actions=(clear_input_action, assign(_record_success)),
                    ),
                    E.CANCEL: TransitionDefinition(target=S.NOT_SUBMITTED),
                },
            ),
            S.ERROR: StateNode(on={E.SUBMIT: submit, E.RESET: reset}),
            S.SUCCESS: StateNode(on={E.SUBMIT: submit, E.RESET: reset}),
        },
    )
    return Machine(definition)


# ---------------------------------------------------------------------------
# Collaborators
# ---------------------------------------------------------------------------


class HttpSignupSubmitter:
    """Submits a signup through :class:`HttpClientDriver`.

    The configured endpoint answers with a JSON post whose ``title`` becomes
    the confirmation message.
    """

    def __init__(self, config: NewsletterConfig, http: HttpClientDriver | None = None) -> None:
        self._config = config
        self._http = http or HttpClientDriver(timeout=config.timeout)

    async def asubmit(self, email: str) -> str:
        result = await self._http.aget(self._config.url)
        body = result["body"]
        if isinstance(body, dict):
            return str(body.get("title", ""))
        return str(body)

    async def aclose(self) -> None:
        await self._http.aclose()


class NewsletterForm:
    """Host component for the signup machine.

    Builds one machine and one service per form, keeps the "input field"
    value, and runs submissions as asyncio tasks. Must be driven from a
    running event loop when submitting.

    Examples
    --------
    Usage::

        form = NewsletterForm.from_config(config.newsletter, on_change=render)
        form.submit("cool@cool.com")
        await form.await_pending()
        await form.aclose()
    """

    def __init__(
        self,
        submitter: SignupSubmitter,
        *,
        on_change: Callable[[State], None] | None = None,
        logger: Logger | None = None,
    ) -> None:
        self._submitter = submitter
        self._owned_submitter: HttpSignupSubmitter | None = None
        self._input = ""
        self._tasks: set[asyncio.Task[Any]] = set()
        machine = build_newsletter_machine(
            start_submission=self._start_submission,
            clear_input=self._clear_input,
            logger=logger,
        )
        self._host = MachineHost(machine, on_change=on_change)

    @classmethod
    def from_config(
        cls,
        config: NewsletterConfig,
        *,
        on_change: Callable[[State], None] | None = None,
        http: HttpClientDriver | None = None,
    ) -> NewsletterForm:
        """Build a form whose HTTP submitter is closed by :meth:`aclose`."""
        submitter = HttpSignupSubmitter(config, http=http)
        form = cls(submitter, on_change=on_change)
        form._owned_submitter = submitter
        return form

    @property
    def state(self) -> State:
        return self._host.state

    @property
    def input_value(self) -> str:
        return self._input

    @input_value.setter
    def input_value(self, value: str) -> None:
        self._input = value

    @property
    def is_busy(self) -> bool:
        """True while a submission is in flight; the form's controls are disabled."""
        return self._host.state.matches(NewsletterState.SUBMITTING)

    def submit(self, email: str | None = None) -> State:
        """Submit ``email`` (or the current input value) with a fresh token.

        Raises
        ------
        RuntimeError
            If no event loop is running; the form stays where it was.
        """
        asyncio.get_running_loop()
        token = CancellationToken(name="newsletter-submit")
        return self._host.send(
            Event.of(
                NewsletterEvent.SUBMIT,
                email=self._input if email is None else email,
                token=token,
            )
        )

    def cancel(self) -> State:
        return self._host.send(NewsletterEvent.CANCEL)

    def reset(self) -> State:
        return self._host.send(NewsletterEvent.RESET)

    async def await_pending(self) -> None:
        """Wait until every submission task has finished or been cancelled."""
        while self._tasks:
            await asyncio.gather(*tuple(self._tasks), return_exceptions=True)

    def close(self) -> None:
        """Stop the machine; a submitter built by :meth:`from_config` stays open."""
        self._host.close()

    async def aclose(self) -> None:
        """Stop the machine and close the HTTP submitter the form created."""
        self.close()
        if self._owned_submitter is not None:
            await self._owned_submitter.aclose()

    # ------------------------------------------------------------------
    # Effects
    # ------------------------------------------------------------------

    def _clear_input(self, context: NewsletterContext, event: Event) -> None:
        self._input = ""

    def _start_submission(self, context: NewsletterContext, event: Event) -> None:
        token = context.token or CancellationToken(name="newsletter-submit")
        task = asyncio.get_running_loop().create_task(self._run_submission(context.email, token))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

        def _abort(_token: CancellationToken) -> None:
            # the task itself may be the one reporting back; it finishes on its own
            if task is not asyncio.current_task():
                task.cancel()

        token.add_callback(_abort)

    async def _run_submission(self, email: str, token: CancellationToken) -> None:
        try:
            message = await self._submitter.asubmit(email)
        except Exception as e:
            if token.cancelled:
                return
            logger.debug("Submission for {email} failed: {error}", email=email, error=e)
            self._host.send(Event.of(NewsletterEvent.LOG_ERROR, message=str(e)))
            return
        if not token.cancelled:
            self._host.send(Event.of(NewsletterEvent.LOG_SUCCESS, message=message))
