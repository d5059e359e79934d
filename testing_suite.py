#!/usr/bin/env python3
import os
import subprocess
import sys
import time


def run_command_with_logging(cmd, env=None):
    """Run a command and return its exit code."""
    try:
        result = subprocess.run(
            cmd,
            env=env,
            check=False,
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
            text=True
        )
        if result.returncode != 0:
            print(result.stdout)
            print(result.stderr)
        return result.returncode
    except OSError as e:
        print(f"Error running command: {e}")
        return 1


STEPS = [
    ("Ruff (Linting)", [sys.executable, "-m", "ruff", "check", "scribefix", "tests"]),
    ("MyPy (Type Safety)", [sys.executable, "-m", "mypy", "--config-file", "pyproject.toml", "scribefix"]),
    ("Scanners (print / broad except)", [sys.executable, "tests/scanners/code_scanners.py"]),
    ("Pytest (Unit, E2E, Golden)", [sys.executable, "-m", "pytest"]),
]


def run_steps():
    env = os.environ.copy()
    env.setdefault("LOG_CONSOLE", "false")
    for name, cmd in STEPS:
        print(f"--> Running {name}...")
        start = time.time()
        ret = run_command_with_logging(cmd, env=env)
        dur = time.time() - start
        if ret != 0:
            print(f"!!! {name} FAILED ({dur:.2f}s) !!!")
            return False
        print(f"    {name} clean ({dur:.2f}s)")
    return True


if __name__ == "__main__":
    print("\n" + "=" * 80)
    print("SCRIBEFIX PRE-FLIGHT")
    print("=" * 80)
    if not run_steps():
        sys.exit(1)
    print("\nPRE-FLIGHT CHECKS & TESTS COMPLETE")
    sys.exit(0)
