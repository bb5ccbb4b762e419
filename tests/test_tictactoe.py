import random
import unittest

from game import Status, tictactoe
from game import best_move, choose_bot_move, minimax

X, O, _ = tictactoe.HUMAN, tictactoe.BOT, tictactoe.EMPTY


class TestTicTacToeBot(unittest.TestCase):
    def _losses_against_hard(self, state):
        """Counts human wins over every line of human play against the hard bot."""
        if not state.running:
            return 1 if state.winner == X else 0
        total = 0
        for move in tictactoe.legal_moves(state.board):
            after = tictactoe.play(state, move).state
            if after.running:
                after = tictactoe.bot_move(after).state
            total += self._losses_against_hard(after)
        return total

    def test_given_hard_bot_when_human_tries_every_line_then_bot_never_loses(self):
        self.assertEqual(self._losses_against_hard(tictactoe.new_game("hard")), 0)

    def test_given_centre_opening_when_hard_bot_answers_then_first_corner(self):
        board = (_, _, _, _, X, _, _, _, _)
        self.assertEqual(best_move(board), 0)

    def test_given_won_and_lost_boards_when_scoring_then_terminal_values(self):
        self.assertEqual(minimax((O, O, O, X, X, _, _, _, _), False), 1)
        self.assertEqual(minimax((X, X, X, O, O, _, _, _, _), True), -1)

    def test_given_bot_can_win_or_block_when_medium_then_win_first(self):
        board = (O, O, _, X, X, _, _, _, _)
        self.assertEqual(choose_bot_move(board, "medium", random.Random(0)), 2)

    def test_given_human_threat_when_medium_then_block(self):
        board = (X, X, _, O, _, _, _, _, _)
        self.assertEqual(choose_bot_move(board, "medium", random.Random(0)), 2)

    def test_given_easy_bot_when_choosing_then_some_free_cell(self):
        board = (X, _, O, _, X, _, _, _, _)
        for seed in range(10):
            self.assertIn(choose_bot_move(board, "easy", random.Random(seed)), tictactoe.legal_moves(board))

    def test_given_full_board_when_random_move_then_none(self):
        self.assertIsNone(tictactoe.random_move((X, O, X, X, O, O, O, X, X)))


class TestTicTacToeRound(unittest.TestCase):
    def test_given_human_completes_line_when_playing_then_won_and_scored(self):
        state = tictactoe.TicTacToeState(board=(X, X, _, O, O, _, _, _, _))
        res = tictactoe.play(state, 2)
        self.assertEqual(res.state.status, Status.WON)
        self.assertEqual(res.state.winning_line, (0, 1, 2))
        self.assertEqual(res.state.scores.x, 1)
        self.assertFalse(tictactoe.play(res.state, 5).accepted)

    def test_given_last_cell_without_line_when_playing_then_draw(self):
        state = tictactoe.TicTacToeState(board=(X, O, X, X, O, O, O, X, _))
        res = tictactoe.play(state, 8)
        self.assertEqual(res.state.winner, "tie")
        self.assertEqual(res.state.status, Status.DRAW)
        self.assertEqual(res.state.scores.draw, 1)
        self.assertEqual(res.state.status_text(), "Draw!")

    def test_given_taken_cell_or_bot_turn_when_playing_then_rejected(self):
        state = tictactoe.play(tictactoe.new_game(), 4).state
        self.assertEqual(state.current, O)
        self.assertFalse(tictactoe.play(state, 0).accepted)
        after_bot = tictactoe.bot_move(state, random.Random(1)).state
        self.assertFalse(tictactoe.play(after_bot, 4).accepted)
        self.assertFalse(tictactoe.bot_move(after_bot).accepted)

    def test_given_bot_wins_when_moving_then_lost_and_o_scored(self):
        state = tictactoe.TicTacToeState(board=(O, O, _, X, X, _, X, _, _), current=O, difficulty="medium")
        res = tictactoe.bot_move(state, random.Random(0))
        self.assertEqual(res.state.status, Status.LOST)
        self.assertEqual(res.state.scores.o, 1)

    def test_given_scores_when_new_round_then_board_cleared_scores_kept(self):
        state = tictactoe.TicTacToeState(board=(X, X, X, O, O, _, _, _, _), running=False, winner=X,
                                         scores=tictactoe.Scoreboard(x=2, o=1))
        fresh = tictactoe.new_round(state)
        self.assertEqual(fresh.board, tictactoe.empty_board())
        self.assertEqual(fresh.scores, state.scores)
        self.assertEqual(tictactoe.reset_scores(state).scores, tictactoe.Scoreboard())

    def test_given_unknown_difficulty_when_setting_then_value_error(self):
        with self.assertRaises(ValueError):
            tictactoe.set_difficulty(tictactoe.new_game(), "impossible")
        self.assertEqual(tictactoe.set_difficulty(tictactoe.new_game(), "hard").difficulty, "hard")


if __name__ == '__main__':
    unittest.main()
