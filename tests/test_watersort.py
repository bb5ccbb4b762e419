import random
import unittest

from game import NoticeKind, Status, watersort
from game import WaterSortState, can_pour, is_level_completed, pour


class TestWaterSortRules(unittest.TestCase):
    def test_given_bottle_pairs_when_checking_pour_then_rules_hold(self):
        bottles = ((0, 1), (), (0, 0, 0, 0), (2, 1), (1,))
        self.assertFalse(can_pour(bottles, 0, 0))  # same bottle
        self.assertFalse(can_pour(bottles, 1, 0))  # empty source
        self.assertFalse(can_pour(bottles, 0, 2))  # full target
        self.assertTrue(can_pour(bottles, 4, 3))   # matching tops
        self.assertFalse(can_pour(bottles, 3, 2))  # full target
        self.assertFalse(can_pour(((0,), (1,)), 0, 1))  # colour mismatch
        self.assertTrue(can_pour(bottles, 0, 1))   # empty target

    def test_given_run_longer_than_space_when_pouring_then_only_free_space_moves(self):
        bottles = ((1, 2, 2, 2), (2, 2))
        out = pour(bottles, 0, 1)
        self.assertEqual(out, ((1, 2), (2, 2, 2, 2)))

    def test_given_run_shorter_than_space_when_pouring_then_whole_run_moves(self):
        out = pour(((1, 2, 2, 2), ()), 0, 1)
        self.assertEqual(out, ((1,), (2, 2, 2)))

    def test_given_random_pours_when_applied_then_colour_totals_preserved(self):
        state = watersort.init_level(7, random.Random(4))
        bottles = state.bottles
        totals = watersort.color_totals(bottles)
        rng = random.Random(9)
        for _ in range(200):
            src, dst = rng.randrange(len(bottles)), rng.randrange(len(bottles))
            if can_pour(bottles, src, dst):
                bottles = pour(bottles, src, dst)
        self.assertEqual(watersort.color_totals(bottles), totals)
        self.assertTrue(all(len(b) <= watersort.ROWS for b in bottles))

    def test_given_sorted_and_mixed_bottles_when_checking_completion_then_detected(self):
        self.assertTrue(is_level_completed(((0, 0, 0, 0), (), (1, 1, 1, 1))))
        self.assertFalse(is_level_completed(((0, 0, 0), (0,), (1, 1, 1, 1))))
        self.assertFalse(is_level_completed(((0, 0, 1, 0), (), (1, 1, 1, 0))))

    def test_given_levels_when_configuring_then_colours_grow_and_bottles_capped(self):
        self.assertEqual(watersort.level_config(1), watersort.LevelConfig(rows=4, colors=2, bottles=4))
        self.assertEqual(watersort.level_config(6).colors, 4)
        self.assertEqual(watersort.level_config(60).bottles, watersort.MAX_BOTTLES)

    def test_given_level_one_when_dealt_then_full_colour_bottles_and_two_empty(self):
        state = watersort.init_level(1, random.Random(2))
        self.assertEqual(len(state.bottles), 4)
        self.assertEqual([len(b) for b in state.bottles], [4, 4, 0, 0])
        self.assertEqual(watersort.color_totals(state.bottles), {0: 4, 1: 4})


class TestWaterSortSession(unittest.TestCase):
    def test_given_selection_when_tapping_target_then_pour_and_history(self):
        state = WaterSortState(level=1, bottles=((0, 0, 1, 1), (1, 0, 0), (), ()))
        state = watersort.select(state, 0).state
        self.assertEqual(state.selected, 0)
        res = watersort.select(state, 2)
        self.assertTrue(res.accepted)
        self.assertEqual(res.state.bottles, ((0, 0), (1, 0, 0), (1, 1), ()))
        self.assertEqual(res.state.selected, -1)
        self.assertEqual(res.state.history, (state.bottles,))

    def test_given_same_bottle_when_tapped_twice_then_deselected(self):
        state = watersort.select(WaterSortState(level=1, bottles=((0,), ())), 0).state
        self.assertEqual(watersort.select(state, 0).state.selected, -1)

    def test_given_empty_bottle_when_selected_first_then_rejected(self):
        state = WaterSortState(level=1, bottles=((0,), ()))
        self.assertFalse(watersort.select(state, 1).accepted)

    def test_given_illegal_pour_when_tapped_then_selection_cleared_board_kept(self):
        state = WaterSortState(level=1, bottles=((0, 0), (1, 1, 1, 1), (), ()))
        state = watersort.select(state, 0).state
        res = watersort.select(state, 1)
        self.assertEqual(res.notice.kind, NoticeKind.INVALID_MOVE)
        self.assertEqual(res.state.bottles, state.bottles)
        self.assertEqual(res.state.selected, -1)
        self.assertEqual(res.state.history, ())

    def test_given_last_pour_when_sorted_then_won_with_message(self):
        state = WaterSortState(level=3, bottles=((0, 0, 0, 0), (1, 1, 1), (1,), ()))
        state = watersort.select(state, 2).state
        res = watersort.select(state, 1)
        self.assertEqual(res.state.status, Status.WON)
        self.assertEqual(res.notice.kind, NoticeKind.INFO)
        self.assertIn("Level 3 completed", res.notice.message)
        self.assertFalse(watersort.select(res.state, 0).accepted)

    def test_given_moves_when_undoing_then_previous_bottles_restored(self):
        start = WaterSortState(level=1, bottles=((0, 0, 1, 1), (1, 0, 0), (), ()))
        moved = watersort.select(watersort.select(start, 0).state, 2).state
        undone = watersort.undo(moved).state
        self.assertEqual(undone.bottles, start.bottles)
        self.assertEqual(undone.history, ())
        self.assertFalse(watersort.undo(undone).accepted)

    def test_given_level_when_shuffling_then_units_preserved(self):
        state = watersort.init_level(5, random.Random(1))
        shuffled = watersort.shuffle(state, random.Random(2))
        self.assertEqual(watersort.color_totals(shuffled.bottles), watersort.color_totals(state.bottles))
        self.assertEqual(shuffled.history, ())
        self.assertEqual(watersort.next_level(state, random.Random(1)).level, 6)


if __name__ == '__main__':
    unittest.main()
