import unittest

from maze_agent_sim import (
    AgentState,
    AgentStatus,
    BacktrackMode,
    Backtracking,
    CheckMap,
    DecisionContext,
    Direction,
    LineOfSight,
    MazeGrid,
    RandomGuesser,
    Social,
    SocialMode,
    Thought,
    TowardExit,
    UnknownBlock,
    WallFollowing,
    WallSide,
)
from maze_agent_sim.blocks import agents_in_direction, apply_block, distance_to_uncharted, exit_visible, is_applicable
from maze_agent_sim.moves import exclude_reversal, legal_moves

JUNCTION = MazeGrid.parse(
    """
    #####
    ##.##
    #...#
    ##.##
    ##.##
    """
)
CENTER = (2, 2)


def _context(**kwargs):
    kwargs.setdefault("position", CENTER)
    kwargs.setdefault("grid", JUNCTION)
    return DecisionContext(**kwargs)


def _candidates(ctx):
    return exclude_reversal(legal_moves(ctx.position, ctx.grid), ctx.last_direction)


def _directions(moves):
    return [m.direction for m in moves]


class WallFollowingTests(unittest.TestCase):
    def test_needs_a_heading(self):
        ctx = _context()
        self.assertFalse(is_applicable(WallFollowing(), ctx, _candidates(ctx)))
        ctx = _context(last_direction=Direction.RIGHT)
        self.assertTrue(is_applicable(WallFollowing(), ctx, _candidates(ctx)))

    def test_right_hand_prefers_right_turn(self):
        ctx = _context(last_direction=Direction.RIGHT)
        moves, thought = apply_block(WallFollowing(mode=WallSide.RIGHT), ctx, _candidates(ctx))
        self.assertEqual(_directions(moves), [Direction.DOWN])
        self.assertEqual(thought, Thought.WALL_RIGHT)

    def test_left_hand_prefers_left_turn(self):
        ctx = _context(last_direction=Direction.RIGHT)
        moves, thought = apply_block(WallFollowing(mode=WallSide.LEFT), ctx, _candidates(ctx))
        self.assertEqual(_directions(moves), [Direction.UP])
        self.assertEqual(thought, Thought.WALL_LEFT)

    def test_goes_straight_when_right_turn_is_missing(self):
        ctx = _context(last_direction=Direction.DOWN)
        candidates = [m for m in _candidates(ctx) if m.direction != Direction.LEFT]
        moves, _ = apply_block(WallFollowing(mode=WallSide.RIGHT), ctx, candidates)
        self.assertEqual(_directions(moves), [Direction.DOWN])


class LineOfSightTests(unittest.TestCase):
    def test_heads_for_a_visible_exit(self):
        ctx = _context(exit=(2, 4), visited={CENTER, (2, 3)})
        self.assertTrue(exit_visible(ctx))
        self.assertTrue(is_applicable(LineOfSight(), ctx, _candidates(ctx)))
        moves, thought = apply_block(LineOfSight(), ctx, _candidates(ctx))
        self.assertEqual(_directions(moves), [Direction.DOWN])
        self.assertEqual(thought, Thought.INSIGHT)

    def test_blocked_line_hides_exit(self):
        ctx = _context(position=(1, 2), exit=(1, 4))
        self.assertFalse(exit_visible(ctx))

    def test_prefers_nearest_uncharted_cell(self):
        visited = {CENTER, (2, 1), (3, 2), (1, 2)}
        ctx = _context(visited=visited)
        self.assertEqual(distance_to_uncharted(ctx, Direction.DOWN), 1)
        self.assertEqual(distance_to_uncharted(ctx, Direction.UP), 0)
        moves, _ = apply_block(LineOfSight(), ctx, _candidates(ctx))
        self.assertEqual(_directions(moves), [Direction.DOWN])

    def test_lookahead_sees_past_visited_cells(self):
        ctx = _context(visited={CENTER, (2, 3)})
        self.assertEqual(distance_to_uncharted(ctx, Direction.DOWN), 2)

    def test_inapplicable_when_everything_in_view_is_visited(self):
        visited = {CENTER, (2, 1), (3, 2), (1, 2), (2, 3), (2, 4)}
        ctx = _context(visited=visited)
        self.assertFalse(is_applicable(LineOfSight(), ctx, _candidates(ctx)))


class LookaheadLimitTests(unittest.TestCase):
    row = MazeGrid.parse("..........")
    walled_row = MazeGrid.parse("...#......")

    def test_uncharted_cell_at_the_lookahead_limit_is_seen(self):
        ctx = _context(position=(0, 0), grid=self.row, visited={(x, 0) for x in range(5)})
        self.assertEqual(distance_to_uncharted(ctx, Direction.RIGHT), 5)

    def test_uncharted_cell_past_the_lookahead_limit_is_not_seen(self):
        ctx = _context(position=(0, 0), grid=self.row, visited={(x, 0) for x in range(6)})
        self.assertEqual(distance_to_uncharted(ctx, Direction.RIGHT), 0)

    def test_uncharted_lookahead_stops_at_a_wall(self):
        ctx = _context(position=(0, 0), grid=self.walled_row, visited={(1, 0), (2, 0)})
        self.assertEqual(distance_to_uncharted(ctx, Direction.RIGHT), 0)

    def test_agents_within_seven_cells_are_counted(self):
        me = AgentState(agent_id="me", position=(0, 0))
        at_limit = AgentState(agent_id="near", position=(7, 0))
        past_limit = AgentState(agent_id="far", position=(8, 0))
        ctx = _context(position=(0, 0), grid=self.row, agents=[me, at_limit, past_limit], agent_index=0)
        self.assertEqual(agents_in_direction(ctx, Direction.RIGHT), 1)

    def test_agents_behind_a_wall_are_not_counted(self):
        me = AgentState(agent_id="me", position=(0, 0))
        hidden = AgentState(agent_id="hidden", position=(5, 0))
        ctx = _context(position=(0, 0), grid=self.walled_row, agents=[me, hidden], agent_index=0)
        self.assertEqual(agents_in_direction(ctx, Direction.RIGHT), 0)


class TowardExitTests(unittest.TestCase):
    def test_keeps_the_move_that_gets_closest(self):
        ctx = _context(exit=(2, 4))
        self.assertTrue(is_applicable(TowardExit(), ctx, _candidates(ctx)))
        moves, thought = apply_block(TowardExit(), ctx, _candidates(ctx))
        self.assertEqual(_directions(moves), [Direction.DOWN])
        self.assertEqual(thought, Thought.COMPASS)

    def test_diagonal_exit_keeps_both_closer_moves(self):
        ctx = _context(exit=(4, 4))
        moves, _ = apply_block(TowardExit(), ctx, _candidates(ctx))
        self.assertEqual(_directions(moves), [Direction.RIGHT, Direction.DOWN])

    def test_inapplicable_without_exit(self):
        ctx = _context()
        self.assertFalse(is_applicable(TowardExit(), ctx, _candidates(ctx)))


class CheckMapTests(unittest.TestCase):
    def test_follows_the_shortest_route(self):
        ctx = _context(exit=(2, 4))
        self.assertTrue(is_applicable(CheckMap(), ctx, _candidates(ctx)))
        moves, thought = apply_block(CheckMap(), ctx, _candidates(ctx))
        self.assertEqual(_directions(moves), [Direction.DOWN])
        self.assertEqual(thought, Thought.MAP)

    def test_inapplicable_at_exit_or_without_route(self):
        ctx = _context(position=(2, 4), exit=(2, 4))
        self.assertFalse(is_applicable(CheckMap(), ctx, _candidates(ctx)))
        ctx = _context(exit=(0, 0))
        self.assertFalse(is_applicable(CheckMap(), ctx, _candidates(ctx)))
        ctx = _context()
        self.assertFalse(is_applicable(CheckMap(), ctx, _candidates(ctx)))

    def test_route_behind_the_agent_leaves_candidates_alone(self):
        ctx = _context(exit=(2, 4), last_direction=Direction.UP)
        candidates = _candidates(ctx)
        moves, _ = apply_block(CheckMap(), ctx, candidates)
        self.assertEqual(moves, candidates)


class BacktrackingTests(unittest.TestCase):
    counts = {(2, 1): 0, (3, 2): 2, (2, 3): 2}

    def test_avoid_keeps_least_visited(self):
        ctx = _context(last_direction=Direction.RIGHT, visit_counts=self.counts)
        self.assertTrue(is_applicable(Backtracking(), ctx, _candidates(ctx)))
        moves, thought = apply_block(Backtracking(mode=BacktrackMode.AVOID), ctx, _candidates(ctx))
        self.assertEqual([m.position for m in moves], [(2, 1)])
        self.assertEqual(thought, Thought.AVOID_REVISIT)

    def test_seek_keeps_most_visited(self):
        ctx = _context(last_direction=Direction.RIGHT, visit_counts=self.counts)
        moves, thought = apply_block(Backtracking(mode=BacktrackMode.SEEK), ctx, _candidates(ctx))
        self.assertEqual([m.position for m in moves], [(3, 2), (2, 3)])
        self.assertEqual(thought, Thought.SEEK_REVISIT)

    def test_uniform_counts_are_not_a_reason(self):
        ctx = _context(last_direction=Direction.RIGHT, visit_counts={(2, 1): 1, (3, 2): 1, (2, 3): 1})
        self.assertFalse(is_applicable(Backtracking(), ctx, _candidates(ctx)))


class SocialTests(unittest.TestCase):
    def _agents(self, other_status=AgentStatus.ACTIVE):
        me = AgentState(agent_id="me", position=CENTER)
        other = AgentState(agent_id="other", position=(3, 2), status=other_status)
        return [me, other]

    def test_follow_moves_toward_others(self):
        ctx = _context(agents=self._agents(), agent_index=0)
        self.assertEqual(agents_in_direction(ctx, Direction.RIGHT), 1)
        self.assertTrue(is_applicable(Social(), ctx, _candidates(ctx)))
        moves, thought = apply_block(Social(mode=SocialMode.FOLLOW), ctx, _candidates(ctx))
        self.assertEqual(_directions(moves), [Direction.RIGHT])
        self.assertEqual(thought, Thought.FOLLOW)

    def test_avoid_moves_away_from_others(self):
        ctx = _context(agents=self._agents(), agent_index=0)
        moves, thought = apply_block(Social(mode=SocialMode.AVOID), ctx, _candidates(ctx))
        self.assertEqual(_directions(moves), [Direction.UP, Direction.DOWN, Direction.LEFT])
        self.assertEqual(thought, Thought.SHY)

    def test_ignores_finished_and_removed_agents(self):
        ctx = _context(agents=self._agents(AgentStatus.FINISHED), agent_index=0)
        self.assertFalse(is_applicable(Social(), ctx, _candidates(ctx)))
        agents = self._agents()
        agents[1].removed = True
        ctx = _context(agents=agents, agent_index=0)
        self.assertFalse(is_applicable(Social(), ctx, _candidates(ctx)))

    def test_does_not_count_itself(self):
        me = AgentState(agent_id="me", position=(3, 2))
        ctx = _context(agents=[me, AgentState(agent_id="x", position=(0, 0))], agent_index=0)
        self.assertEqual(agents_in_direction(ctx, Direction.RIGHT), 0)


class RandomAndUnknownTests(unittest.TestCase):
    def test_random_guesser_defers(self):
        ctx = _context()
        candidates = _candidates(ctx)
        self.assertTrue(is_applicable(RandomGuesser(), ctx, candidates))
        moves, thought = apply_block(RandomGuesser(), ctx, candidates)
        self.assertEqual(moves, candidates)
        self.assertEqual(thought, Thought.DICE)

    def test_unknown_kind_never_applies(self):
        ctx = _context()
        self.assertFalse(is_applicable(UnknownBlock(kind="teleport", weight=5), ctx, _candidates(ctx)))


if __name__ == "__main__":
    unittest.main()
