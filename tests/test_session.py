import os
import random
import tempfile
import unittest

from game import (
    Feedback,
    Generation,
    GameSession,
    MoveResult,
    Notice,
    NoticeKind,
    RecordingHaptics,
    Scheduler,
    ScoreService,
    SettingsStore,
    Status,
    feedback_for,
    tictactoe,
)


class TestScheduler(unittest.TestCase):
    def test_given_callbacks_when_advancing_then_run_in_due_order(self):
        s = Scheduler()
        seen = []
        s.call_later(300, lambda: seen.append("c"))
        s.call_later(100, lambda: seen.append("a"))
        s.call_later(100, lambda: seen.append("b"))
        self.assertEqual(s.advance(150), 2)
        self.assertEqual(seen, ["a", "b"])
        s.advance(150)
        self.assertEqual(seen, ["a", "b", "c"])
        self.assertEqual(s.now_ms, 300)

    def test_given_stale_token_when_due_then_callback_dropped(self):
        s = Scheduler()
        gen = Generation()
        seen = []
        s.call_later(50, lambda: seen.append(1), gen.token())
        gen.bump()
        self.assertEqual(s.pending, 0)
        self.assertEqual(s.advance(100), 0)
        self.assertEqual(seen, [])

    def test_given_repeating_callback_when_generation_bumped_then_stops(self):
        s = Scheduler()
        gen = Generation()
        hits = []
        s.call_every(100, lambda: hits.append(s.now_ms), gen.token())
        s.advance(350)
        self.assertEqual(hits, [100, 200, 300])
        gen.bump()
        s.advance(500)
        self.assertEqual(hits, [100, 200, 300])

    def test_given_bad_delays_when_scheduling_then_value_error(self):
        s = Scheduler()
        with self.assertRaises(ValueError):
            s.call_later(-1, lambda: None)
        with self.assertRaises(ValueError):
            s.call_every(0, lambda: None, Generation().token())

    def test_given_far_future_callback_when_running_pending_then_executed(self):
        s = Scheduler()
        seen = []
        s.call_later(10_000, lambda: seen.append(True))
        self.assertEqual(s.run_pending(), 1)
        self.assertEqual(seen, [True])


class TestFeedbackFor(unittest.TestCase):
    def test_given_outcomes_when_mapping_then_expected_feedback(self):
        playing = Status.PLAYING
        self.assertEqual(feedback_for(playing, MoveResult(_S(Status.PLAYING), Notice(NoticeKind.INVALID_MOVE, "x"))),
                         Feedback.WARNING)
        self.assertEqual(feedback_for(playing, MoveResult(_S(Status.WON))), Feedback.SUCCESS)
        self.assertEqual(feedback_for(playing, MoveResult(_S(Status.LOST))), Feedback.ERROR)
        self.assertEqual(feedback_for(playing, MoveResult(_S(Status.DRAW))), Feedback.WARNING)
        self.assertEqual(feedback_for(playing, MoveResult(_S(Status.PLAYING))), Feedback.LIGHT)
        self.assertEqual(feedback_for(playing, MoveResult(_S(Status.PLAYING), Notice(NoticeKind.INFO, "i"))),
                         Feedback.SUCCESS)
        self.assertEqual(feedback_for(playing, MoveResult(_S(Status.PLAYING), Notice(NoticeKind.PENALTY, "p"))),
                         Feedback.WARNING)


class _S:
    def __init__(self, status):
        self.status = status


class TestGameSession(unittest.TestCase):
    def setUp(self):
        self.tmp = tempfile.TemporaryDirectory()
        self.store = SettingsStore(os.path.join(self.tmp.name, "settings.json"))
        self.store.update(defaultLevelIndex=0)
        self.scores = ScoreService(os.path.join(self.tmp.name, "scores.db"))
        self.haptics = RecordingHaptics(self.store)
        self.scheduler = Scheduler()

    def tearDown(self):
        self.tmp.cleanup()

    def _session(self, game, **kwargs):
        return GameSession(
            game,
            settings=self.store,
            haptics=self.haptics,
            scores=self.scores,
            scheduler=self.scheduler,
            rng=random.Random(1),
            **kwargs,
        )

    def test_given_unknown_game_when_creating_then_value_error(self):
        with self.assertRaises(ValueError):
            GameSession("pong")

    def test_given_sudoku_when_time_passes_and_solved_then_score_recorded(self):
        session = self._session("sudoku", player_name="Ada")
        self.assertEqual(session.state.difficulty, "Easy")
        self.scheduler.advance(3000)
        self.assertEqual(session.seconds, 3)
        session.act("solve")
        res = session.act("check")
        self.assertEqual(res.state.status, Status.WON)
        self.assertEqual(self.haptics.events[-1], Feedback.SUCCESS)
        self.scheduler.advance(5000)
        self.assertEqual(session.seconds, 3)
        top = self.scores.load_top_scores()
        self.assertEqual([(r.name, r.time, r.level) for r in top], [("Ada", 3, "easy")])

    def test_given_incomplete_sudoku_when_checking_then_warning_and_no_score(self):
        session = self._session("sudoku")
        res = session.act("check")
        self.assertEqual(res.notice.kind, NoticeKind.INCOMPLETE)
        self.assertEqual(session.last_notice, res.notice)
        self.assertEqual(self.haptics.events, [Feedback.WARNING])
        self.assertEqual(self.scores.load_top_scores(), [])

    def test_given_timer_disabled_when_time_passes_then_clock_still(self):
        self.store.update(timerEnabled=False)
        session = self._session("sudoku")
        self.scheduler.advance(5000)
        self.assertEqual(session.seconds, 0)

    def test_given_minesweeper_when_ready_then_clock_waits_for_first_move(self):
        session = self._session("minesweeper")
        self.assertEqual(session.state.size, 8)
        self.scheduler.advance(2000)
        self.assertEqual(session.seconds, 0)
        session.act("flag", 0, 0)
        self.scheduler.advance(2000)
        self.assertEqual(session.seconds, 2)
        self.assertEqual(session.state.seconds, 2)

    def test_given_started_minesweeper_when_level_change_rejected_then_clock_untouched(self):
        session = self._session("minesweeper")
        session.act("flag", 0, 0)
        self.scheduler.advance(5000)
        generation = session.generation
        res = session.act("change_level", 2)
        self.assertFalse(res.accepted)
        self.assertEqual(session.seconds, 5)
        self.assertEqual(session.generation, generation)
        self.assertEqual(session.state.size, 8)
        self.assertEqual(self.haptics.events[-1], Feedback.WARNING)
        self.scheduler.advance(1000)
        self.assertEqual(session.seconds, 6)

    def test_given_ready_minesweeper_when_changing_level_then_new_board_and_clock_reset(self):
        session = self._session("minesweeper")
        generation = session.generation
        self.assertTrue(session.act("change_level", 1).accepted)
        self.assertEqual(session.state.size, 10)
        self.assertEqual(session.generation, generation + 1)

    def test_given_out_of_range_level_index_when_starting_then_value_error(self):
        session = self._session("sudoku")
        for index in (-1, 3):
            with self.assertRaises(ValueError):
                session.start(level_index=index)

    def test_given_flag_mode_setting_when_minesweeper_starts_then_flag_mode_on(self):
        self.store.update(flagModeOnStart=True)
        session = self._session("minesweeper")
        self.assertTrue(session.state.flag_mode)

    def test_given_mismatched_memory_pair_when_delay_passes_then_cards_turn_back(self):
        session = self._session("memory")
        cards = session.state.cards
        other = next(i for i, c in enumerate(cards) if c.symbol != cards[0].symbol)
        session.act("flip", 0)
        session.act("flip", other)
        self.assertTrue(session.state.locked)
        self.assertEqual(self.scheduler.pending, 1)
        self.scheduler.advance(599)
        self.assertTrue(session.state.locked)
        self.scheduler.advance(1)
        self.assertFalse(session.state.locked)
        self.assertFalse(session.state.cards[0].flipped)
        self.assertEqual(self.haptics.events, [Feedback.LIGHT, Feedback.LIGHT, Feedback.WARNING])

    def test_given_pending_memory_resolve_when_restarted_then_continuation_dropped(self):
        session = self._session("memory")
        generation = session.generation
        session.act("flip", 0)
        session.act("flip", 1)
        session.act("restart")
        self.assertEqual(session.generation, generation + 1)
        self.assertEqual(self.scheduler.pending, 0)
        self.scheduler.advance(1000)
        self.assertFalse(any(c.flipped for c in session.state.cards))

    def test_given_human_move_when_bot_delay_passes_then_bot_replies(self):
        session = self._session("tictactoe")
        session.start(difficulty="hard")
        session.act("play", 4)
        self.assertEqual(session.state.current, tictactoe.BOT)
        self.scheduler.advance(399)
        self.assertEqual(session.state.board.count(tictactoe.BOT), 0)
        self.scheduler.advance(1)
        self.assertEqual(session.state.board[0], tictactoe.BOT)
        self.assertEqual(session.state.current, tictactoe.HUMAN)

    def test_given_snake_when_ticks_pass_then_moves_and_turns(self):
        session = self._session("snake")
        head = session.state.head
        self.scheduler.advance(200)
        self.assertEqual(session.state.head, (head[0] + 1, head[1]))
        self.assertTrue(session.act("turn", "UP").accepted)
        self.scheduler.advance(200)
        self.assertEqual(session.state.head, (head[0] + 1, head[1] - 1))

    def test_given_disposed_session_when_acting_then_error_and_nothing_pending(self):
        session = self._session("tictactoe")
        session.act("play", 0)
        session.dispose()
        self.assertEqual(self.scheduler.pending, 0)
        with self.assertRaises(RuntimeError):
            session.act("play", 1)

    def test_given_unknown_action_when_acting_then_value_error(self):
        session = self._session("wordle")
        with self.assertRaises(ValueError):
            session.act("fly")
        self.assertTrue(session.act("type", "A").accepted)


if __name__ == '__main__':
    unittest.main()
