"""Tests for trace2_flamegraph/decoder.py"""

import json
import unittest

from trace2_flamegraph.decoder import decode_line, read_events, resolve_time
from trace2_flamegraph.models import ProcessExit, ProcessStart, RegionEnter, RegionLeave

T0 = 1709287200000  # 2024-03-01T10:00:00Z


def _line(event, time="2024-03-01T10:00:00.000000Z", **fields) -> str:
    return json.dumps({"event": event, "sid": "test-sid", "thread": "main", "time": time, **fields})


class TestResolveTime(unittest.TestCase):
    def test_utc_suffix(self):
        self.assertEqual(resolve_time("2024-03-01T10:00:00.000000Z"), T0)

    def test_truncates_microseconds(self):
        self.assertEqual(resolve_time("2024-03-01T10:00:00.123999Z"), T0 + 123)

    def test_explicit_offset(self):
        self.assertEqual(resolve_time("2024-03-01T12:00:00.000+02:00"), T0)

    def test_naive_timestamp_is_utc(self):
        self.assertEqual(resolve_time("2024-03-01T10:00:00.500000"), T0 + 500)

    def test_invalid_timestamp(self):
        with self.assertRaises(ValueError):
            resolve_time("yesterday")


class TestDecodeLine(unittest.TestCase):
    def test_start(self):
        event = decode_line(_line("start", argv=["git", "status"]))
        self.assertIsInstance(event, ProcessStart)
        self.assertEqual(event.argv, ("git", "status"))
        self.assertEqual(event.time_ms, T0)

    def test_region_enter(self):
        event = decode_line(_line("region_enter", category="index", label="do_read_index"))
        self.assertIsInstance(event, RegionEnter)

    def test_region_leave(self):
        event = decode_line(_line("region_leave", category="index", label="do_read_index"))
        self.assertIsInstance(event, RegionLeave)
        self.assertEqual(event.region_name, "index:do_read_index")

    def test_exit(self):
        event = decode_line(_line("exit", time="2024-03-01T10:00:01.000000Z", code=0))
        self.assertIsInstance(event, ProcessExit)
        self.assertEqual(event.time_ms, T0 + 1000)

    def test_irrelevant_events_ignored(self):
        for kind in ("version", "cmd_name", "data", "child_start", "atexit"):
            self.assertIsNone(decode_line(_line(kind)), kind)

    def test_blank_line(self):
        self.assertIsNone(decode_line("   \n"))

    def test_invalid_json(self):
        with self.assertLogs("trace2_flamegraph.decoder", level="WARNING") as cm:
            self.assertIsNone(decode_line("{not json", line_number=7))
        self.assertIn("line 7", cm.output[0])

    def test_non_object_json(self):
        with self.assertLogs("trace2_flamegraph.decoder", level="WARNING"):
            self.assertIsNone(decode_line("[1, 2, 3]"))

    def test_missing_time(self):
        line = json.dumps({"event": "exit", "code": 0})
        with self.assertLogs("trace2_flamegraph.decoder", level="WARNING"):
            self.assertIsNone(decode_line(line))

    def test_leave_missing_label(self):
        with self.assertLogs("trace2_flamegraph.decoder", level="WARNING"):
            self.assertIsNone(decode_line(_line("region_leave", category="index")))

    def test_start_with_non_list_argv(self):
        with self.assertLogs("trace2_flamegraph.decoder", level="WARNING"):
            self.assertIsNone(decode_line(_line("start", argv="git status")))


class TestReadEvents(unittest.TestCase):
    def test_keeps_order_and_drops_noise(self):
        lines = [
            _line("version", evt="3"),
            _line("start", argv=["git", "fetch"]),
            "",
            "garbage",
            _line("region_enter", time="2024-03-01T10:00:00.010000Z"),
            _line("region_leave", time="2024-03-01T10:00:00.020000Z", category="a", label="b"),
            _line("exit", time="2024-03-01T10:00:00.030000Z"),
        ]
        with self.assertLogs("trace2_flamegraph.decoder", level="WARNING"):
            events = read_events(lines)
        self.assertEqual([e.kind for e in events], ["start", "region_enter", "region_leave", "exit"])
        self.assertEqual([e.time_ms - T0 for e in events], [0, 10, 20, 30])

    def test_empty_input(self):
        self.assertEqual(read_events([]), [])


if __name__ == "__main__":
    unittest.main()
