#!/usr/bin/env python3
"""Run repository checks: ruff, pyright, and optional tests.

Exits non-zero when a check fails so CI and local tooling can observe status.
Set IMAGE_CONVERSION_LOG_LEVEL=debug to see pipeline logging during tests.
"""

from __future__ import annotations

import argparse
import subprocess
import sys


def run(cmd: list[str]) -> int:
    print("=>", " ".join(cmd))
    res = subprocess.run(cmd, check=False)
    return res.returncode


def main() -> int:
    parser = argparse.ArgumentParser()
    parser.add_argument("--no-tests", action="store_true", help="Skip running pytest")
    parser.add_argument("--fix", action="store_true", help="Let ruff apply fixes")
    args = parser.parse_args()

    ruff = [sys.executable, "-m", "ruff", "check", "."]
    if args.fix:
        ruff.append("--fix")
    rc = run(ruff)
    if rc != 0:
        print("ruff failed")
        return rc

    rc = run([sys.executable, "-m", "pyright"]) if sys.platform != "win32" else run(["pyright"])
    if rc != 0:
        print("pyright failed")
        return rc

    if not args.no_tests:
        rc = run([sys.executable, "-m", "pytest", "-q"])
        if rc != 0:
            print("pytest failed")
            return rc

    print("All checks passed")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
