import os
import subprocess
import sys
import pytest

REPO_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), "..", ".."))
PARSER = os.path.join(REPO_ROOT, "json_parser.py")

TEST_DIR = os.path.dirname(__file__)

# List all .json files in this directory
json_files = sorted(f for f in os.listdir(TEST_DIR) if f.endswith(".json"))

VALID_FILES = [f for f in json_files if f.startswith("pass")]
INVALID_FILES = [f for f in json_files if f.startswith("fail")]
RELAXED_VALID_FILES = [f for f in json_files if f.startswith("relaxed_pass")]
RELAXED_INVALID_FILES = [f for f in json_files if f.startswith("relaxed_fail")]

# Hard fail if test files are missing
if not VALID_FILES:
    raise RuntimeError("No pass*.json files found in conformance directory")
if not INVALID_FILES:
    raise RuntimeError("No fail*.json files found in conformance directory")


def _run(path, *flags):
    return subprocess.run([sys.executable, PARSER, path, *flags],
                          capture_output=True, text=True, cwd=REPO_ROOT)


@pytest.mark.parametrize("filename", VALID_FILES)
def test_valid_json_returns_0(filename):
    result = _run(os.path.join(TEST_DIR, filename))
    assert result.returncode == 0, f"Expected 0 from {filename}, got {result.returncode}: {result.stderr}"


@pytest.mark.parametrize("filename", INVALID_FILES)
def test_invalid_json_returns_1(filename):
    path = os.path.join(TEST_DIR, filename)
    result = _run(path)
    assert result.returncode == 1, f"Expected 1 from {filename}, got {result.returncode}"
    # every rejection is located as path:line:column
    assert result.stderr.startswith(f"SyntaxError: {path}:")


@pytest.mark.parametrize("filename", RELAXED_VALID_FILES)
def test_relaxed_valid_json_returns_0(filename):
    path = os.path.join(TEST_DIR, filename)
    assert _run(path).returncode == 1
    assert _run(path, "--relaxed").returncode == 0


@pytest.mark.parametrize("filename", RELAXED_INVALID_FILES)
def test_relaxed_invalid_json_returns_1(filename):
    result = _run(os.path.join(TEST_DIR, filename), "--relaxed")
    assert result.returncode == 1
