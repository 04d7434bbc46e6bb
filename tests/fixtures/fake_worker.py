"""
Stand-in worker for the session tests.

Invoked as: fake_worker.py <plugin> -T <target> [...]
The plugin name selects what gets printed and how the process exits.
"""
import os
import signal
import sys
import time

STATS_1 = "[2024-01-01 10:00:00] INFO tasks=5 mem=120MB targets=10 attempts=50 done=25 (50.0%) errors=2 speed=12.5 reqs/s"
STATS_2 = "[2024-01-01 10:00:01] INFO tasks=8 mem=130 MiB targets=10 attempts=50 done=40 (80.00%) speed=20 reqs/s"
FINDING = "[2024-01-01T00:00:00] (sql-injection) <http://target> found admin:admin123"


def out(line, stream=sys.stdout):
    stream.write(line + "\n")
    stream.flush()


def main(argv):
    plugin = argv[0] if argv else ""

    if plugin == "stats":
        out(STATS_1)
        out(STATS_2)
        return 0

    if plugin == "loot":
        out("\x1b[1;32mstarting session\x1b[0m")
        out("")
        out("   \x1b[0m   ")
        out(FINDING)
        out("  plain line with padding  ")
        return 0

    if plugin == "stderr":
        out("first error line", sys.stderr)
        out("second error line", sys.stderr)
        return 3

    if plugin == "sleep":
        out("ready")
        time.sleep(30)
        return 0

    if plugin == "flood":
        limit = 1024 * 1024
        out("A" * (3 * limit) + " TAILMARK")
        out("B" * (limit + 16))
        out("after flood")
        return 0

    if plugin == "crash":
        out("about to crash")
        os.kill(os.getpid(), signal.SIGKILL)

    out(f"unknown plugin {plugin!r}", sys.stderr)
    return 64


if __name__ == "__main__":
    sys.exit(main(sys.argv[1:]))
