"""Multi-agent reply orchestration.

A run routes a new post to the best-suited agent, collects that agent's reply,
then asks every other agent in configuration order to follow up on the growing
thread. Each transition is one ``OrchestrationRun.step()`` call:

    ROUTING -> FIRST_REPLY -> SUBSEQUENT_REPLIES* -> IDLE
                    any in-progress state -> FAILED
"""

from __future__ import annotations

import asyncio
import logging
from enum import Enum
from typing import Awaitable, Callable, Optional, Protocol

from ..models.agent import Agent
from ..models.config import APIConfig
from ..models.message import USER_AUTHOR, Message, MessageStore, author_label
from ..providers.base import CompletionBackend
from .errors import OrchestrationBusyError, OrchestrationError
from .prompts import build_agent_prompt, build_router_prompt

logger = logging.getLogger(__name__)

Sleep = Callable[[float], Awaitable[None]]


class RunState(str, Enum):
    IDLE = "idle"
    ROUTING = "routing"
    FIRST_REPLY = "first_reply"
    SUBSEQUENT_REPLIES = "subsequent_replies"
    FAILED = "failed"


IN_PROGRESS = (RunState.ROUTING, RunState.FIRST_REPLY, RunState.SUBSEQUENT_REPLIES)


class OrchestrationListener(Protocol):
    def on_agent_started(self, agent: Agent, parent_id: str) -> None: ...

    def on_agent_replied(self, agent: Agent, message: Message) -> None: ...

    def on_run_failed(self, error: OrchestrationError) -> None: ...


class NullListener:
    def on_agent_started(self, agent: Agent, parent_id: str) -> None:
        pass

    def on_agent_replied(self, agent: Agent, message: Message) -> None:
        pass

    def on_run_failed(self, error: OrchestrationError) -> None:
        pass


def select_agent(router_output: str, agents: list[Agent]) -> Agent:
    """First agent whose name appears in the router output, else the first agent."""
    for agent in agents:
        if agent.name in router_output:
            return agent
    return agents[0]


class OrchestrationRun:
    """One pass of replies to ``newest``, appended to ``store`` as they arrive."""

    def __init__(
        self,
        client: CompletionBackend,
        api_config: APIConfig,
        agents: list[Agent],
        store: MessageStore,
        newest: Message,
        reply_delay: float = 1.0,
        listener: Optional[OrchestrationListener] = None,
        sleep: Sleep = asyncio.sleep,
    ):
        self.client = client
        self.api_config = api_config
        self.agents = list(agents)
        self.store = store
        self.newest = newest
        self.reply_delay = reply_delay
        self.listener = listener or NullListener()
        self._sleep = sleep

        self.state = RunState.ROUTING
        self.thread: list[Message] = store.thread_for(newest.id)
        self.replies: list[Message] = []
        self.first_agent: Optional[Agent] = None
        self.error: Optional[OrchestrationError] = None
        self._pending: list[Agent] = []

    @property
    def done(self) -> bool:
        return self.state not in IN_PROGRESS

    async def step(self) -> RunState:
        """Perform exactly one transition and return the new state."""
        if self.done:
            return self.state

        failed_in = self.state
        try:
            if self.state is RunState.ROUTING:
                await self._route()
            elif self.state is RunState.FIRST_REPLY:
                await self._reply(self.first_agent, is_follow_up=False)
                self.state = RunState.SUBSEQUENT_REPLIES if self._pending else RunState.IDLE
            else:
                await self._reply(self._pending.pop(0), is_follow_up=True)
                if not self._pending:
                    self.state = RunState.IDLE
        except Exception as e:
            self.error = OrchestrationError(e, failed_in.value)
            self.state = RunState.FAILED
            logger.error("Run failed during %s: %s", failed_in.value, e)
            self._notify("on_run_failed", self.error)
            return self.state

        if not self.done and failed_in is not RunState.ROUTING and self.reply_delay > 0:
            await self._sleep(self.reply_delay)
        return self.state

    def _notify(self, event: str, *args) -> None:
        """Deliver a listener event; listener errors never change the run state."""
        try:
            getattr(self.listener, event)(*args)
        except Exception:
            logger.exception("Listener %s failed", event)

    async def run(self) -> list[Message]:
        """Drive the run to completion; raise ``OrchestrationError`` on failure."""
        while not self.done:
            await self.step()
        if self.error is not None:
            raise self.error from self.error.cause
        return list(self.replies)

    async def _route(self) -> None:
        if not self.agents:
            logger.info("No agents configured; nothing to orchestrate")
            self.state = RunState.IDLE
            return

        prompt = build_router_prompt(self.newest.content, self.agents)
        selected = await self.client.complete(self.api_config, [], prompt)
        self.first_agent = select_agent(selected, self.agents)
        self._pending = [a for a in self.agents if a.id != self.first_agent.id]
        logger.info("Router selected %s (raw answer: %r)", self.first_agent.name, selected.strip())
        self.state = RunState.FIRST_REPLY

    async def _reply(self, agent: Agent, is_follow_up: bool) -> Message:
        parent_id = self.thread[-1].id
        self._notify("on_agent_started", agent, parent_id)

        content = await self.client.complete(
            self.api_config,
            list(self.thread),
            build_agent_prompt(agent, is_follow_up),
            agent.model,
        )
        reply = Message.create(
            author=author_label(agent.name),
            role="assistant",
            content=content,
            parent_id=parent_id,
        )
        self.store.append(reply)
        self.thread.append(reply)
        self.replies.append(reply)
        logger.info("%s replied (%d chars)", agent.name, len(content))
        self._notify("on_agent_replied", agent, reply)
        return reply


class Orchestrator:
    """Single-flight entry point for running agent replies against a store."""

    def __init__(
        self,
        client: CompletionBackend,
        api_config: APIConfig,
        agents: list[Agent],
        reply_delay: float = 1.0,
        listener: Optional[OrchestrationListener] = None,
        sleep: Sleep = asyncio.sleep,
    ):
        self.client = client
        self.api_config = api_config
        self.agents = list(agents)
        self.reply_delay = reply_delay
        self.listener = listener
        self._sleep = sleep
        self._active: Optional[OrchestrationRun] = None

    @property
    def busy(self) -> bool:
        return self._active is not None

    def start(self, store: MessageStore, newest: Message) -> OrchestrationRun:
        """Create a run for ``newest`` without executing it."""
        if store.get(newest.id) is None:
            store.append(newest)
        return OrchestrationRun(
            client=self.client,
            api_config=self.api_config,
            agents=self.agents,
            store=store,
            newest=newest,
            reply_delay=self.reply_delay,
            listener=self.listener,
            sleep=self._sleep,
        )

    async def respond(self, store: MessageStore, newest: Message) -> list[Message]:
        """Run every agent against ``newest`` and return the new replies in order."""
        if self._active is not None:
            raise OrchestrationBusyError("An orchestration run is already in progress")
        run = self.start(store, newest)
        self._active = run
        try:
            return await run.run()
        finally:
            self._active = None

    async def post(
        self,
        store: MessageStore,
        content: str,
        parent_id: Optional[str] = None,
        attachment: Optional[str] = None,
    ) -> list[Message]:
        """Append a user post (or reply) to ``store`` and orchestrate replies to it."""
        if self._active is not None:
            raise OrchestrationBusyError("An orchestration run is already in progress")
        message = store.append(
            Message.create(
                author=USER_AUTHOR,
                role="user",
                content=content,
                parent_id=parent_id,
                attachment=attachment,
            )
        )
        return await self.respond(store, message)
