"""Unit tests for worker output classification."""
import pytest

from warden.engine.models import Finding, Statistics
from warden.toolkit.output_classifier import (
    RawLine,
    classify_line,
    strip_ansi,
)

STATS_LINE = "... tasks=5 mem=120MB targets=10 attempts=50 done=25 (50.0%) errors=2 speed=12.5 reqs/s"
FINDING_LINE = "... [2024-01-01T00:00:00] (sql-injection) <http://target> found admin:admin123"


class TestStatistics:
    def test_full_statistics_line(self):
        stats = classify_line(STATS_LINE)
        assert stats == Statistics(
            tasks=5,
            memory="120MB",
            targets=10,
            attempts=50,
            errors=2,
            done=25,
            done_percent=50.0,
            reqs_per_sec=12.5,
        )

    def test_errors_default_to_zero(self):
        stats = classify_line("tasks=1 mem=3 MiB targets=2 attempts=4 done=0 (0.00%) speed=0 reqs/s")
        assert isinstance(stats, Statistics)
        assert stats.errors == 0
        assert stats.memory == "3 MiB"
        assert stats.reqs_per_sec == 0.0

    def test_statistics_inside_colored_log_line(self):
        line = "\x1b[2m[10:00:00]\x1b[0m \x1b[34mINFO\x1b[0m tasks=3 mem=9MB targets=1 attempts=7 done=7 (100.0%) speed=1.5 reqs/s"
        stats = classify_line(line)
        assert isinstance(stats, Statistics)
        assert stats.done_percent == 100.0
        assert stats.reqs_per_sec == 1.5

    def test_unparseable_percent_falls_back_to_raw(self):
        line = "tasks=1 mem=1MB targets=1 attempts=1 done=1 (n/a%) speed=1 reqs/s"
        assert classify_line(line) == RawLine(line)

    def test_unparseable_speed_falls_back_to_raw(self):
        line = "tasks=1 mem=1MB targets=1 attempts=1 done=1 (10%) speed=fast reqs/s"
        assert classify_line(line) == RawLine(line)

    def test_partial_statistics_is_raw(self):
        line = "tasks=1 mem=1MB targets=1"
        assert classify_line(line) == RawLine(line)


class TestFindings:
    def test_finding_with_target(self):
        finding = classify_line(FINDING_LINE)
        assert finding == Finding(
            found_at="2024-01-01T00:00:00",
            plugin="sql-injection",
            target="http://target",
            data="found admin:admin123",
        )

    def test_finding_without_target(self):
        finding = classify_line("[2023-11-06 17:36:11] (dns) www.example.com -> 10.0.0.1")
        assert isinstance(finding, Finding)
        assert finding.found_at == "2023-11-06 17:36:11"
        assert finding.plugin == "dns"
        assert finding.target is None
        assert finding.data == "www.example.com -> 10.0.0.1"

    def test_statistics_take_priority_over_findings(self):
        line = "[12:00:00] (ssh) tasks=1 mem=1MB targets=1 attempts=1 done=1 (1.0%) speed=1 reqs/s"
        assert isinstance(classify_line(line), Statistics)

    def test_bracket_without_plugin_is_raw(self):
        line = "[INFO] starting 8 workers"
        assert classify_line(line) == RawLine(line)


class TestRawAndBlank:
    @pytest.mark.parametrize("line", ["", "   ", "\t\n", "\x1b[0m", "  \x1b[1;31m \x1b[0m  "])
    def test_blank_lines_produce_nothing(self, line):
        assert classify_line(line) is None

    def test_raw_line_is_trimmed_and_stripped(self):
        assert classify_line("  \x1b[1;32mhello\x1b[0m world \n") == RawLine("hello world")

    def test_osc_sequences_are_removed(self):
        assert strip_ansi("\x1b]0;title\x07text") == "text"
        assert strip_ansi("\x1b]8;;http://x\x1b\\link\x1b]8;;\x1b\\") == "link"

    def test_mixed_lines_keep_order_and_drop_blanks(self):
        lines = ["one", "", STATS_LINE, "two", FINDING_LINE]
        records = [r for r in map(classify_line, lines) if r is not None]
        assert [type(r) for r in records] == [RawLine, Statistics, RawLine, Finding]
        assert records[0].text == "one"
        assert records[2].text == "two"
