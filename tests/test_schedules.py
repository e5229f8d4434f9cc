import unittest

from academicsync.errors import MalformedContentError
from academicsync.model import Day, ScheduleSlot, Turn
from academicsync.schedules import UNDEFINED_SCHEDULES, decode_schedules


class TestDecodeSchedules(unittest.TestCase):
    def test_two_tokens_in_order(self) -> None:
        slots = decode_schedules("Lu(n)1:5 Mi(n)0:2")
        self.assertEqual(
            slots,
            (
                ScheduleSlot(day=Day.MON, turn=Turn.NIGHT, start_slot=1, end_slot=5),
                ScheduleSlot(day=Day.WED, turn=Turn.NIGHT, start_slot=0, end_slot=2),
            ),
        )

    def test_every_day_and_turn(self) -> None:
        slots = decode_schedules("Ma(m)1:2 Ju(t)3:4 Vi(n)0:1 Sa(m)2:6")
        assert slots is not None
        self.assertEqual([s.day for s in slots], [Day.TUE, Day.THU, Day.FRI, Day.SAT])
        self.assertEqual([s.turn for s in slots], [Turn.MORNING, Turn.AFTERNOON, Turn.NIGHT, Turn.MORNING])

    def test_token_count_matches_slot_count(self) -> None:
        text = " ".join(["Lu(m)0:1"] * 5)
        slots = decode_schedules(text)
        assert slots is not None
        self.assertEqual(len(slots), 5)

    def test_undefined_sentinels_return_none(self) -> None:
        for sentinel in ["Do(m)0:0", "Do(t)0:0", "Do(n)0:0", "Sin definir"]:
            with self.subTest(sentinel=sentinel):
                self.assertIn(sentinel, UNDEFINED_SCHEDULES)
                self.assertIsNone(decode_schedules(sentinel))

    def test_sunday_anywhere_returns_none(self) -> None:
        # never a partial list
        self.assertIsNone(decode_schedules("Lu(n)1:5 Do(m)2:3"))

    def test_extra_whitespace_is_ignored(self) -> None:
        slots = decode_schedules("  Lu(n)1:5   Mi(n)0:2 ")
        assert slots is not None
        self.assertEqual(len(slots), 2)

    def test_garbage_token_fails(self) -> None:
        with self.assertRaises(MalformedContentError):
            decode_schedules("Lu(x)1:5")

    def test_empty_string_fails(self) -> None:
        with self.assertRaises(MalformedContentError):
            decode_schedules("")


if __name__ == "__main__":
    unittest.main()
