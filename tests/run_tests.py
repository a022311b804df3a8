#!/usr/bin/env python3
"""
Run the test suite, or a single test module.

    python tests/run_tests.py            # everything
    python tests/run_tests.py spinor     # tests/test_spinor.py only
"""
import subprocess
import sys
import os


def _pytest(*args):
    test_dir = os.path.dirname(os.path.abspath(__file__))
    result = subprocess.run(
        [sys.executable, "-m", "pytest", "-v", "--tb=short", *args],
        cwd=test_dir,
        capture_output=True,
        text=True,
    )
    print(result.stdout)
    if result.stderr:
        print("STDERR:")
        print(result.stderr)
    return result.returncode == 0


def run_tests():
    """Run every test module in this directory."""
    return _pytest(".")


def run_specific_test(test_name):
    """Run ``test_<test_name>.py``."""
    return _pytest(f"test_{test_name}.py")


if __name__ == "__main__":
    if len(sys.argv) > 1:
        success = run_specific_test(sys.argv[1])
    else:
        success = run_tests()

    sys.exit(0 if success else 1)
