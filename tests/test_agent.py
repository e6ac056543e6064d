"""
Tests for the algorithmic agent and its background runner.
"""

import threading
import time
from unittest import TestCase, main

from agent2048.agent import AgentConfig, AgentRunner, AlgorithmicAgent, HeadlessGame
from agent2048.core import Direction, GameState
from agent2048.strategies import CornerStrategy, GreedyStrategy

TERMINAL = GameState.from_grid([[2, 4, 2, 4], [4, 2, 4, 2], [2, 4, 2, 4], [4, 2, 4, 2]])


class TestAgentConfig(TestCase):
    """Tests for configuration defaults and clamping."""

    def test_defaults(self):
        config = AgentConfig()
        self.assertEqual(config.speed, 2.0)
        self.assertEqual(config.strategy, 'corner')
        self.assertTrue(config.explain_moves)
        self.assertAlmostEqual(config.interval, 0.5)

    def test_speed_is_clamped(self):
        self.assertEqual(AgentConfig(speed=100).speed, 10.0)
        self.assertEqual(AgentConfig(speed=0.1).speed, 0.5)


class TestAlgorithmicAgent(TestCase):
    """Tests for move choice and explanations."""

    def test_strategy_resolved_once(self):
        agent = AlgorithmicAgent(AgentConfig(strategy='greedy'))
        self.assertIsInstance(agent.strategy, GreedyStrategy)

    def test_unknown_strategy(self):
        with self.assertLogs('agent2048.strategies', level='WARNING'):
            agent = AlgorithmicAgent(AgentConfig(strategy='nope'))
        self.assertIsInstance(agent.strategy, CornerStrategy)

    def test_terminal_state(self):
        self.assertIsNone(AlgorithmicAgent().get_next_move(TERMINAL))

    def test_explanation_callback(self):
        received = []
        agent = AlgorithmicAgent(on_explanation=lambda move, text: received.append((move, text)))
        state = GameState.from_grid([[16, 0, 0, 0], [0, 0, 0, 0], [0, 0, 0, 0], [0, 0, 0, 2]])
        with self.assertLogs('agent2048.agent.agent', level='INFO'):
            move = agent.get_next_move(state)
        self.assertEqual(move, Direction.DOWN)
        self.assertEqual(received, [(Direction.DOWN, agent.last_explanation)])

    def test_explanations_disabled(self):
        received = []
        agent = AlgorithmicAgent(AgentConfig(explain_moves=False), on_explanation=lambda *args: received.append(args))
        agent.get_next_move(GameState.from_grid([[2, 2, 0, 0], [0] * 4, [0] * 4, [0] * 4]))
        self.assertEqual(received, [])
        self.assertIsNone(agent.last_explanation)

    def test_alternatives(self):
        state = GameState.from_grid([[2, 2, 0, 0], [0] * 4, [0] * 4, [0] * 4])
        report = AlgorithmicAgent().get_move_alternatives(state)
        self.assertEqual(set(report.evaluations), set(report.valid_moves))


class TestAgentRunner(TestCase):
    """Tests for the background move loop."""

    def setUp(self):
        self.game = HeadlessGame(seed=0)
        self.runner = AgentRunner(AlgorithmicAgent(AgentConfig(speed=10, explain_moves=False)))
        self.moves = []
        self.delivered = threading.Event()

    def tearDown(self):
        self.runner.stop()

    def on_move(self, move):
        self.moves.append(move)
        self.game.make_move(move)
        self.delivered.set()

    def test_plays_until_stopped(self):
        self.runner.start(lambda: self.game.state, self.on_move)
        self.assertTrue(self.runner.is_running)
        self.assertTrue(self.delivered.wait(2.0))

        self.runner.stop()
        self.assertFalse(self.runner.is_running)
        count = len(self.moves)
        time.sleep(0.3)
        self.assertEqual(len(self.moves), count)

    def test_start_and_stop_are_idempotent(self):
        self.runner.start(lambda: self.game.state, self.on_move)
        thread = self.runner._thread
        self.runner.start(lambda: self.game.state, self.on_move)
        self.assertIs(self.runner._thread, thread)
        self.runner.stop()
        self.runner.stop()
        self.assertFalse(self.runner.is_running)

    def test_stops_on_terminal_state(self):
        self.runner.start(lambda: TERMINAL, self.on_move)
        self.runner._thread.join(2.0)
        self.assertFalse(self.runner.is_running)
        self.assertEqual(self.moves, [])

    def test_callback_failure_stops_runner(self):
        def failing(move):
            raise RuntimeError('display went away')

        with self.assertLogs('agent2048.agent.runner', level='ERROR') as logs:
            self.runner.start(lambda: self.game.state, failing)
            self.runner._thread.join(2.0)
        self.assertFalse(self.runner.is_running)
        self.assertIs(logs.records[0].exc_info[0], RuntimeError)

    def test_speed_setter_clamps(self):
        self.runner.speed = 50
        self.assertEqual(self.runner.speed, 10.0)
        self.runner.speed = 0
        self.assertEqual(self.runner.speed, 0.5)

    def test_step(self):
        state = GameState.from_grid([[16, 0, 0, 0], [0, 0, 0, 0], [0, 0, 0, 0], [0, 0, 0, 2]])
        self.assertEqual(self.runner.step(state), Direction.DOWN)
        self.assertIsNone(self.runner.step(TERMINAL))
        self.assertFalse(self.runner.is_running)

    def test_stop_from_callback(self):
        def stop_after_first(move):
            self.on_move(move)
            self.runner.stop()

        self.runner.start(lambda: self.game.state, stop_after_first)
        self.assertTrue(self.delivered.wait(2.0))
        time.sleep(0.3)
        self.assertEqual(len(self.moves), 1)
        self.assertFalse(self.runner.is_running)


if __name__ == '__main__':
    main()
