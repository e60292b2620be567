from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

from .agents import AgentState, AgentStatus, BaseAgentController, TieredController
from .blocks import DecisionContext, Thought
from .engine import Decision
from .scheduler import CancellationToken, Scheduler
from .tiers import TierConfig, describe_tiers
from .world import MazeGrid, Position

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SimulationConfig:
    default_speed_ms: float = 500.0
    thinking_pause_ms: float = 300.0
    pause_poll_ms: float = 100.0
    celebration_ms: float = 1000.0
    playback_speeds: Tuple[float, ...] = (0.5, 1.0, 1.5, 2.0, 5.0)
    max_time_ms: float = 600_000.0


@dataclass
class TickEvent:
    time_ms: float
    agent_id: str
    action: str
    position: Position
    direction: Optional[str] = None
    note: str = ""


@dataclass
class SimulationRuntime:
    """Runs spawned agents on their own timers over a shared, read-only maze.

    Each agent tick makes one decision. Corridor moves commit on the spot;
    deliberate choices are announced first (the agent's ``thought`` is set)
    and committed after the thinking pause, unless the agent is stopped or
    paused in between.
    """

    grid: MazeGrid
    entry: Optional[Position]
    exit: Optional[Position]
    config: SimulationConfig = field(default_factory=SimulationConfig)
    scheduler: Scheduler = field(default_factory=Scheduler)
    seed: Optional[int] = None
    agents: List[AgentState] = field(default_factory=list)
    controllers: Dict[str, BaseAgentController] = field(default_factory=dict)
    events: List[TickEvent] = field(default_factory=list)
    playback_speed: float = 1.0
    paused: bool = False
    _tokens: Dict[str, CancellationToken] = field(default_factory=dict, init=False, repr=False)
    _spawned: int = field(default=0, init=False, repr=False)

    @property
    def now_ms(self) -> float:
        return self.scheduler.now_ms

    def agent(self, agent_id: str) -> AgentState:
        for state in self.agents:
            if state.agent_id == agent_id:
                return state
        raise KeyError(f"Unknown agent: {agent_id}")

    def spawn(
        self,
        tiers: TierConfig,
        speed_ms: float | None = None,
        moves_per_second: float | None = None,
        controller: BaseAgentController | None = None,
        agent_id: str | None = None,
    ) -> AgentState:
        if self.entry is None:
            raise ValueError("Cannot spawn an agent before the maze has an entry.")
        if moves_per_second is not None:
            if moves_per_second <= 0:
                raise ValueError("moves_per_second must be positive")
            speed_ms = 1000.0 / moves_per_second
        speed_ms = speed_ms or self.config.default_speed_ms

        self._spawned += 1
        agent_id = agent_id or f"agent-{self._spawned}"
        if agent_id in self.controllers:
            raise ValueError(f"Agent already registered: {agent_id}")
        if controller is None:
            seed = None if self.seed is None else self.seed + self._spawned
            controller = TieredController(tiers, seed=seed)

        state = AgentState(agent_id=agent_id, position=self.entry, tiers=tiers, speed_ms=speed_ms, paused=self.paused)
        self.agents.append(state)
        self.controllers[agent_id] = controller
        self._tokens[agent_id] = CancellationToken()
        logger.info("spawned %s at %s (%.1f moves/s, tiers %s)", agent_id, self.entry, state.moves_per_second, tiers.fingerprint()[:8])
        self._schedule_tick(state, self._move_delay(state))
        return state

    def stop(self, agent_id: str) -> None:
        state = self.agent(agent_id)
        # finished agents keep their token so the celebration still ends in removal
        if state.status != AgentStatus.ACTIVE:
            return
        self._tokens[agent_id].cancel()
        state.status = AgentStatus.STOPPED
        logger.info("stopped %s at %s", agent_id, state.position)

    def stop_all(self) -> None:
        for state in list(self.agents):
            self.stop(state.agent_id)
        for token in self._tokens.values():
            token.cancel()
        self.agents.clear()
        self.controllers.clear()
        self._tokens.clear()
        self.paused = False

    def pause(self, agent_id: str) -> None:
        self.agent(agent_id).paused = True

    def resume(self, agent_id: str) -> None:
        self.agent(agent_id).paused = False

    def toggle_pause(self) -> bool:
        self.paused = not self.paused
        for state in self.agents:
            state.paused = self.paused
        return self.paused

    def cycle_playback_speed(self) -> float:
        speeds = self.config.playback_speeds
        try:
            index = speeds.index(self.playback_speed)
        except ValueError:
            index = -1
        self.playback_speed = speeds[(index + 1) % len(speeds)]
        return self.playback_speed

    def advance(self, delta_ms: float) -> int:
        return self.scheduler.advance(delta_ms)

    def has_active_agents(self) -> bool:
        return any(state.status == AgentStatus.ACTIVE for state in self.agents)

    def run_until_settled(self, max_time_ms: float | None = None) -> float:
        """Run until no agent is active, the queue drains, or the time guard trips."""
        limit = self.now_ms + (max_time_ms if max_time_ms is not None else self.config.max_time_ms)
        while self.has_active_agents():
            due = self.scheduler.next_due()
            if due is None or due > limit:
                break
            self.scheduler.run_next()
        return self.now_ms

    def describe_agent(self, agent_id: str) -> str:
        state = self.agent(agent_id)
        lines = [f"Speed: {state.moves_per_second:.1f}/s", ""]
        lines.extend(describe_tiers(state.tiers))
        return "\n".join(lines).strip()

    def _move_delay(self, state: AgentState) -> float:
        return state.speed_ms / self.playback_speed

    def _schedule_tick(self, state: AgentState, delay_ms: float) -> None:
        self.scheduler.call_later(
            delay_ms,
            lambda: self._tick(state),
            token=self._tokens[state.agent_id],
            label=f"{state.agent_id}:tick",
        )

    def _context(self, state: AgentState) -> DecisionContext:
        return DecisionContext(
            position=state.position,
            grid=self.grid,
            exit=self.exit,
            visited=state.visited,
            visit_counts=state.visit_counts,
            last_direction=state.last_direction,
            agents=self.agents,
            agent_index=next(i for i, a in enumerate(self.agents) if a is state),
        )

    def _tick(self, state: AgentState) -> None:
        if state.status != AgentStatus.ACTIVE:
            return
        if state.paused:
            self._schedule_tick(state, self.config.pause_poll_ms)
            return
        if self.exit is not None and state.position == self.exit:
            self._finish(state)
            return

        decision = self.controllers[state.agent_id].decide(self._context(state))
        if decision.stuck:
            state.status = AgentStatus.STUCK
            state.thought = Thought.STUCK.value
            self._log_event(state, "stuck", note=state.thought)
            logger.info("%s is stuck at %s", state.agent_id, state.position)
            return

        if not decision.deliberated:
            state.thought = None
            self._commit(state, decision)
            return

        state.thought = decision.annotation
        self.scheduler.call_later(
            self.config.thinking_pause_ms / self.playback_speed,
            lambda: self._commit_after_thinking(state, decision),
            token=self._tokens[state.agent_id],
            label=f"{state.agent_id}:commit",
        )

    def _commit_after_thinking(self, state: AgentState, decision: Decision) -> None:
        if state.status != AgentStatus.ACTIVE:
            return
        if state.paused:
            # the pending choice is dropped; a fresh decision is made after resuming
            self._schedule_tick(state, self.config.pause_poll_ms)
            return
        self._commit(state, decision)
        state.thought = None

    def _commit(self, state: AgentState, decision: Decision) -> None:
        move = decision.move
        state.record_move(move)
        self._log_event(state, "move", direction=move.direction.value, note=decision.annotation or "")
        self._schedule_tick(state, self._move_delay(state))

    def _finish(self, state: AgentState) -> None:
        state.status = AgentStatus.FINISHED
        state.thought = Thought.CELEBRATE.value
        self._log_event(state, "finish", note=state.thought)
        logger.info("%s finished after %d moves", state.agent_id, len(state.path) - 1)

        def _remove() -> None:
            state.removed = True

        self.scheduler.call_later(
            self.config.celebration_ms / self.playback_speed,
            _remove,
            token=self._tokens[state.agent_id],
            label=f"{state.agent_id}:remove",
        )

    def _log_event(self, state: AgentState, action: str, direction: Optional[str] = None, note: str = "") -> None:
        self.events.append(
            TickEvent(
                time_ms=self.now_ms,
                agent_id=state.agent_id,
                action=action,
                position=state.position,
                direction=direction,
                note=note,
            )
        )
