import io
import logging
import sys
from pathlib import Path

import clusterbox.common.dev_logging as dev_logging


def test_init_dev_logging_creates_log_and_mirrors(tmp_path):
    original_stdout = sys.stdout
    original_stderr = sys.stderr
    env = {
        "CLUSTERBOX_CLUSTER_COUNT": "4",
        "CLUSTERBOX_BM25K": "20",
        "CLUSTERBOX_LOG_DIR": str(tmp_path / "logs"),
    }

    try:
        log_path = dev_logging.init_dev_logging(env=env)
        assert log_path is not None
        log_files = list((Path(tmp_path) / "logs").glob("*_clusterbox.log"))
        assert log_files == [log_path]

        print("hello stdout")
        print("한글")
        sys.stderr.write("stderr-line\n")
        logging.getLogger("clusterbox.test").info("round 0: sum of distance 12.0")
        sys.stdout.flush()
        sys.stderr.flush()

        contents = log_path.read_text(encoding="utf-8")
        assert "hello stdout" in contents
        assert "한글" in contents
        assert "stderr-line" in contents
        assert "round 0: sum of distance 12.0" in contents
        assert "CLUSTERBOX_CLUSTER_COUNT: 4" in contents
    finally:
        dev_logging.close_dev_logging()

    assert sys.stdout is original_stdout
    assert sys.stderr is original_stderr


def test_init_dev_logging_respects_disable_flag(tmp_path):
    original_stdout = sys.stdout
    env = {"CLUSTERBOX_DEV_LOGGING_ENABLED": "false", "CLUSTERBOX_LOG_DIR": str(tmp_path / "logs")}

    try:
        assert dev_logging.init_dev_logging(env=env) is None
        assert sys.stdout is original_stdout
        assert not (Path(tmp_path) / "logs").exists()
    finally:
        dev_logging.close_dev_logging()


def test_second_init_is_ignored(tmp_path):
    env = {"CLUSTERBOX_LOG_DIR": str(tmp_path / "logs")}
    try:
        assert dev_logging.init_dev_logging(env=env) is not None
        assert dev_logging.init_dev_logging(env=env) is None
    finally:
        dev_logging.close_dev_logging()


def test_tee_stream_disables_log_after_first_failure():
    original = io.StringIO()

    class FailingWriter(io.StringIO):
        def write(self, s: str) -> int:  # type: ignore[override]
            raise IOError("boom")

    tee = dev_logging.TeeStream(original, FailingWriter())
    tee.write("first\n")
    tee.write("second\n")
    tee.flush()

    output = original.getvalue()
    assert "first" in output
    assert "second" in output
    assert output.count("Logging to file disabled") == 1
