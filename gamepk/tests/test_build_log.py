from datetime import datetime

from ..build_log import BuildLogger


def fixed_clock():
    return datetime(2026, 1, 2, 9, 5, 7)


def test_lines_are_timestamped_and_ordered():
    build_log = BuildLogger(clock=fixed_clock)
    build_log.log("first")
    build_log.log("second", {"exitCode": 0})

    assert build_log.snapshot() == [
        "[09:05:07] first",
        '[09:05:07] second {"exitCode": 0}',
    ]
    assert len(build_log) == 2


def test_snapshot_is_a_copy():
    build_log = BuildLogger()
    build_log.log("one")
    snapshot = build_log.snapshot()
    snapshot.append("tampered")
    build_log.log("two")

    assert len(build_log.snapshot()) == 2
    assert "tampered" not in build_log.snapshot()


def test_details_that_are_not_json_are_stringified(tmp_path):
    build_log = BuildLogger(clock=fixed_clock)
    build_log.log("path", {"cwd": tmp_path})
    assert str(tmp_path) in build_log.snapshot()[0]


def test_never_trimmed():
    build_log = BuildLogger()
    for i in range(500):
        build_log.log(f"line {i}")
    lines = build_log.snapshot()
    assert len(lines) == 500
    assert lines[0].endswith("line 0")
