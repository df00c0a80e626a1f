from __future__ import annotations

from vbuilder.config import VersionRange
from vbuilder.scanner import CommitDescriptor, fetch_version_log, scan_commits, scan_log

from .conftest import FakeRunner

LOG = """commit:ccc
@@ -1 +1 @@
-MAJOR=34
+MAJOR=35
commit:bbb
@@ -1 +1 @@
-MAJOR=33
+MAJOR=34
@@ -3 +3 @@
-BUILD=1800
+BUILD=0
commit:aaa
@@ -1 +1 @@
-MAJOR=28
+MAJOR=29
"""


def test_in_range_addition_is_attributed_to_its_header() -> None:
    text = "commit:aaa\n+MAJOR=30\ncommit:bbb\n+MAJOR=40\n"
    assert scan_log(text, VersionRange(29, 35)) == [CommitDescriptor(commit="aaa", major=30)]


def test_no_matching_lines_yields_empty_list() -> None:
    text = "commit:aaa\n+BUILD=12\ncommit:bbb\n-MAJOR=30\n"
    assert scan_log(text, VersionRange(29, 35)) == []


def test_log_order_is_preserved_and_removals_ignored() -> None:
    assert scan_log(LOG, VersionRange(29, 35)) == [
        CommitDescriptor("ccc", 35),
        CommitDescriptor("bbb", 34),
        CommitDescriptor("aaa", 29),
    ]


def test_bounds_are_inclusive() -> None:
    assert [c.major for c in scan_log(LOG, VersionRange(34, 34))] == [34]
    assert [c.major for c in scan_log(LOG, VersionRange(36, 40))] == []


def test_several_additions_under_one_header_are_not_deduplicated() -> None:
    text = "commit:aaa\n+MAJOR=30\n+MAJOR=31\n"
    assert scan_log(text, VersionRange(29, 35)) == [
        CommitDescriptor("aaa", 30),
        CommitDescriptor("aaa", 31),
    ]


def test_addition_before_any_header_is_skipped() -> None:
    assert scan_log("+MAJOR=30\ncommit:aaa\n+MAJOR=31\n", VersionRange(29, 35)) == [CommitDescriptor("aaa", 31)]


def test_fetch_runs_git_log_for_the_version_file(checkout) -> None:
    runner = FakeRunner(outputs={"git log": LOG})
    assert fetch_version_log(checkout, runner) == LOG
    step, argv = runner.calls[0]
    assert step == "git log"
    assert argv == [
        "git",
        "--no-pager",
        "log",
        "--color=never",
        "--pretty=format:commit:%H",
        "-U0",
        "origin/lkgr",
        "chrome/VERSION",
    ]


def test_scan_commits_uses_configured_range(checkout) -> None:
    runner = FakeRunner(outputs={"git log": LOG})
    assert [c.commit for c in scan_commits(checkout, runner)] == ["ccc", "bbb", "aaa"]
