import random
import unittest

from game import NoticeKind, Status, sudoku
from game import (
    GenerationError,
    check_solution,
    generate_full_board,
    give_hint,
    is_safe,
    make_puzzle_from_solution,
    new_sudoku,
    solve_sudoku,
)

DIGITS = set(range(1, 10))


def _assert_valid_solution(case, grid):
    rows = grid.rows()
    for r in range(9):
        case.assertEqual(set(rows[r]), DIGITS, f"row {r}")
    for c in range(9):
        case.assertEqual({rows[r][c] for r in range(9)}, DIGITS, f"col {c}")
    for br in range(0, 9, 3):
        for bc in range(0, 9, 3):
            box = {rows[br + i][bc + j] for i in range(3) for j in range(3)}
            case.assertEqual(box, DIGITS, f"box {br},{bc}")


class TestSudokuGenerator(unittest.TestCase):
    def test_given_seeded_rng_when_generating_then_every_unit_is_a_permutation(self):
        for seed in (1, 2, 3):
            _assert_valid_solution(self, generate_full_board(random.Random(seed)))

    def test_given_same_seed_when_generating_twice_then_boards_equal(self):
        self.assertEqual(generate_full_board(random.Random(5)), generate_full_board(random.Random(5)))

    def test_given_no_attempts_left_when_generating_then_generation_error(self):
        with self.assertRaises(GenerationError):
            generate_full_board(random.Random(1), max_attempts=0)

    def test_given_empty_board_when_solving_then_valid_grid(self):
        board = sudoku.empty_board()
        self.assertTrue(solve_sudoku(board))
        _assert_valid_solution(self, sudoku.Grid.from_rows(board))

    def test_given_contradictory_board_when_solving_then_false(self):
        board = sudoku.empty_board()
        # (0, 0) sees 1..8 in its row and 9 in its column: nothing fits.
        for c in range(1, 9):
            board[0][c] = c
        board[1][0] = 9
        self.assertFalse(solve_sudoku(board))

    def test_given_solution_when_removing_cells_then_exact_count_blanked(self):
        rng = random.Random(11)
        solution = generate_full_board(rng)
        for remove in (0, 30, 40, 50, 81):
            puzzle = make_puzzle_from_solution(solution, remove, rng)
            self.assertEqual(puzzle.count(lambda v: v == 0), remove)
            kept = [i for i, v in enumerate(puzzle.cells) if v != 0]
            self.assertEqual(len(kept), 81 - remove)
            for i in kept:
                self.assertEqual(puzzle.cells[i], solution.cells[i])

    def test_given_out_of_range_remove_count_when_making_puzzle_then_value_error(self):
        solution = generate_full_board(random.Random(1))
        with self.assertRaises(ValueError):
            make_puzzle_from_solution(solution, 82)

    def test_given_board_when_checking_safety_then_row_column_and_box_block(self):
        board = sudoku.empty_board()
        board[0][0] = 5
        self.assertFalse(is_safe(board, 0, 8, 5))  # row
        self.assertFalse(is_safe(board, 8, 0, 5))  # column
        self.assertFalse(is_safe(board, 2, 2, 5))  # box
        self.assertTrue(is_safe(board, 4, 4, 5))
        self.assertTrue(is_safe(board, 0, 8, 6))


class TestSudokuSession(unittest.TestCase):
    def setUp(self):
        self.state = new_sudoku("Easy", random.Random(3))

    def test_given_easy_puzzle_when_created_then_thirty_empty_cells(self):
        self.assertEqual(sudoku.empty_cells(self.state.puzzle), 30)
        self.assertEqual(self.state.status, Status.PLAYING)

    def test_given_easy_puzzle_when_thirty_hints_then_solved(self):
        state = self.state
        for _ in range(30):
            res = give_hint(state)
            self.assertIsNone(res.notice)
            state = res.state
        self.assertEqual(state.puzzle, state.solution)
        extra = give_hint(state)
        self.assertEqual(extra.notice.kind, NoticeKind.INFO)
        self.assertEqual(check_solution(state).state.status, Status.WON)

    def test_given_blank_cells_when_checking_then_incomplete_notice(self):
        res = check_solution(self.state)
        self.assertEqual(res.notice.kind, NoticeKind.INCOMPLETE)
        self.assertIn("There are 30 empty cells", res.notice.message)
        self.assertIs(res.state, self.state)

    def test_given_given_cell_when_entering_number_then_rejected_unchanged(self):
        r, c = next((r, c) for r, c in self.state.puzzle.coords() if self.state.puzzle.at(r, c) != 0)
        res = sudoku.enter_number(self.state, 1, (r, c))
        self.assertFalse(res.accepted)
        self.assertIs(res.state, self.state)

    def test_given_no_selection_when_entering_number_then_rejected(self):
        res = sudoku.enter_number(self.state, 4)
        self.assertFalse(res.accepted)

    def test_given_selected_blank_when_entering_then_cell_written(self):
        r, c = next((r, c) for r, c in self.state.puzzle.coords() if self.state.puzzle.at(r, c) == 0)
        state = sudoku.select_cell(self.state, r, c)
        res = sudoku.enter_number(state, 7)
        self.assertTrue(res.accepted)
        self.assertEqual(res.state.puzzle.at(r, c), 7)
        self.assertEqual(state.puzzle.at(r, c), 0)

    def test_given_wrong_digit_in_full_grid_when_checking_then_only_strict_rejects(self):
        r, c = next((r, c) for r, c in self.state.puzzle.coords() if self.state.puzzle.at(r, c) == 0)
        wrong = self.state.solution.at(r, c) % 9 + 1
        state = sudoku.enter_number(self.state, wrong, (r, c)).state
        while sudoku.empty_cells(state.puzzle):
            state = give_hint(state).state
        self.assertEqual(sudoku.mismatches(state), [(r, c)])
        self.assertFalse(check_solution(state, strict=True).accepted)
        self.assertEqual(check_solution(state).state.status, Status.WON)

    def test_given_solution_filled_when_entering_then_game_over(self):
        state = check_solution(sudoku.fill_solution(self.state)).state
        self.assertEqual(state.status, Status.WON)
        self.assertFalse(sudoku.enter_number(state, 1, (0, 0)).accepted)

    def test_given_unknown_difficulty_when_creating_then_value_error(self):
        with self.assertRaises(ValueError):
            new_sudoku("Expert")


if __name__ == '__main__':
    unittest.main()
