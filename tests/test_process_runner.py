"""
Tests for the process runner — line reassembly, prefixes, exit codes.

Streaming tests spawn the current interpreter with small inline scripts.
"""

import io
import sys
import textwrap

import pytest

from nativebuild.core.errors import CommandFailed, SpawnFailed
from nativebuild.core.services.cancellation import CancellationRegistry
from nativebuild.core.services.process_runner import LineBuffer, ProcessRunner


def _script(body: str) -> list[str]:
    return ["-c", textwrap.dedent(body)]


class TestLineBuffer:
    def test_split_mid_line(self):
        buf = LineBuffer()
        assert buf.feed("li") == []
        assert buf.feed("ne1\nline2\n") == ["line1", "line2"]
        assert buf.flush() is None

    def test_carry_over(self):
        buf = LineBuffer()
        assert buf.feed("a\nb") == ["a"]
        assert buf.pending == "b"
        assert buf.feed("c\n") == ["bc"]

    def test_crlf(self):
        buf = LineBuffer()
        assert buf.feed("one\r\ntwo\r\n") == ["one", "two"]

    def test_empty_lines_kept(self):
        assert LineBuffer().feed("\n\nx\n") == ["", "", "x"]

    def test_flush_remainder(self):
        buf = LineBuffer()
        buf.feed("done\ntail")
        assert buf.flush() == "tail"
        assert buf.flush() is None


class TestRun:
    def test_split_write_yields_two_lines(self):
        out, err = io.StringIO(), io.StringIO()
        runner = ProcessRunner(stdout=out, stderr=err)
        runner.run(sys.executable, _script("""
            import sys, time
            sys.stdout.write("li"); sys.stdout.flush()
            time.sleep(0.2)
            sys.stdout.write("ne1\\nline2\\n"); sys.stdout.flush()
        """), "linux-x64 ")
        assert out.getvalue() == "linux-x64 line1\nlinux-x64 line2\n"
        assert err.getvalue() == ""

    def test_streams_routed_separately(self):
        out, err = io.StringIO(), io.StringIO()
        runner = ProcessRunner(stdout=out, stderr=err)
        runner.run(sys.executable, _script("""
            import sys
            print("to-out")
            print("to-err", file=sys.stderr)
        """), "[p] ")
        assert out.getvalue() == "[p] to-out\n"
        assert err.getvalue() == "[p] to-err\n"

    def test_unterminated_line_flushed_on_close(self):
        out = io.StringIO()
        runner = ProcessRunner(stdout=out, stderr=io.StringIO())
        runner.run(sys.executable, _script("""
            import sys
            sys.stdout.write("first\\nlast")
        """), "> ")
        assert out.getvalue() == "> first\n> last\n"

    def test_utf8_split_across_chunks(self):
        out = io.StringIO()
        runner = ProcessRunner(stdout=out, stderr=io.StringIO())
        runner.run(sys.executable, _script("""
            import sys, time
            data = "✓ ok\\n".encode("utf-8")
            sys.stdout.buffer.write(data[:1]); sys.stdout.buffer.flush()
            time.sleep(0.1)
            sys.stdout.buffer.write(data[1:]); sys.stdout.buffer.flush()
        """))
        assert out.getvalue() == "✓ ok\n"

    def test_nonzero_exit(self):
        runner = ProcessRunner(stdout=io.StringIO(), stderr=io.StringIO())
        with pytest.raises(CommandFailed) as exc_info:
            runner.run(sys.executable, ["-c", "import sys; sys.exit(1)"])
        assert exc_info.value.exit_code == 1

    def test_output_drained_before_failure(self):
        out = io.StringIO()
        runner = ProcessRunner(stdout=out, stderr=io.StringIO())
        with pytest.raises(CommandFailed) as exc_info:
            runner.run(sys.executable, _script("""
                import sys
                print("before exit")
                sys.exit(3)
            """))
        assert exc_info.value.exit_code == 3
        assert out.getvalue() == "before exit\n"

    def test_spawn_failure(self):
        runner = ProcessRunner()
        with pytest.raises(SpawnFailed) as exc_info:
            runner.run("definitely-not-a-real-command-xyz", [])
        assert exc_info.value.command == ["definitely-not-a-real-command-xyz"]


class TestRegistration:
    def test_unregistered_after_success(self):
        registry = CancellationRegistry()
        runner = ProcessRunner(registry, stdout=io.StringIO(), stderr=io.StringIO())
        runner.run(sys.executable, ["-c", "pass"])
        assert len(registry) == 0

    def test_unregistered_after_failure(self):
        registry = CancellationRegistry()
        runner = ProcessRunner(registry, stdout=io.StringIO(), stderr=io.StringIO())
        with pytest.raises(CommandFailed):
            runner.run(sys.executable, ["-c", "raise SystemExit(2)"])
        assert len(registry) == 0

    def test_unregistered_after_spawn_error(self):
        registry = CancellationRegistry()
        runner = ProcessRunner(registry)
        with pytest.raises(SpawnFailed):
            runner.run("definitely-not-a-real-command-xyz", [])
        assert len(registry) == 0
