#!/usr/bin/env python3
"""
Prerequisite checker for broadside.

Run from repo root (after activating your venv):

    python3 scripts/check_prereqs.py
"""

import sys
import traceback
from pathlib import Path


def add_src_to_syspath() -> None:
    """Ensure `src/` is on sys.path so `import broadside` works from a checkout."""
    repo_root = Path(__file__).resolve().parents[1]
    src = repo_root / "src"
    if str(src) not in sys.path:
        sys.path.insert(0, str(src))


def header(title: str) -> None:
    print("\n" + "=" * 72)
    print(title)
    print("=" * 72)


def check_python_version() -> bool:
    header("1) Python version")
    v = sys.version_info
    print(f"Detected Python: {v.major}.{v.minor}.{v.micro}")
    ok = (v.major == 3 and v.minor >= 10) or (v.major > 3)
    if ok:
        print("OK: Python 3.10 or newer is available.")
    else:
        print("FAIL: Python 3.10+ required for this project.")
    return ok


def check_core_imports() -> bool:
    header("2) Core library imports (numpy, pydantic, opentelemetry)")
    libs = ["numpy", "pydantic", "opentelemetry.sdk", "opentelemetry.instrumentation.logging"]
    all_ok = True
    for name in libs:
        try:
            __import__(name)
            print(f"OK: imported {name}")
        except Exception as exc:  # noqa: BLE001
            all_ok = False
            print(f"FAIL: could not import {name}: {exc}")
            traceback.print_exc(limit=1)
    return all_ok


def check_broadside_imports() -> bool:
    header("3) Broadside engine / AI imports")
    add_src_to_syspath()
    ok = True
    try:
        from broadside.ai.evaluation import evaluate_difficulty  # noqa: F401
        from broadside.engine.game import Match  # noqa: F401
        from broadside.leaderboard import Leaderboard  # noqa: F401

        print("OK: imported Match, evaluate_difficulty, Leaderboard")
    except Exception as exc:  # noqa: BLE001
        ok = False
        print(f"FAIL: could not import broadside modules: {exc}")
        traceback.print_exc(limit=1)
    return ok


def check_match_smoke_test() -> bool:
    header("4) Match smoke test (random fleet, first volley)")
    add_src_to_syspath()
    try:
        from broadside.engine.game import Match

        match = Match(rng_seed=0)
        match.randomize_player_fleet()
        match.start()
        report = match.fire(match.valid_moves()[0])
        print("OK: match started and one turn was played.")
        print(f"    Player shot: {report.result.outcome.value}")
        if report.ai_move is None:
            print("FAIL: the opponent did not reply")
            return False
        print(f"    Opponent shot: {report.ai_move.result.outcome.value}")
        return True
    except Exception as exc:  # noqa: BLE001
        print(f"FAIL: match smoke test failed: {exc}")
        traceback.print_exc(limit=1)
        return False


def check_benchmark_smoke_test() -> bool:
    header("5) Difficulty benchmark smoke test (3 games per tier)")
    add_src_to_syspath()
    try:
        from broadside.ai.evaluation import compare_difficulties

        for result in compare_difficulties(games=3, seed=0):
            print(
                f"    {result.difficulty:<7} mean={result.mean_shots:.1f} "
                f"min={result.min_shots} max={result.max_shots}"
            )
        print("OK: benchmark completed.")
        return True
    except Exception as exc:  # noqa: BLE001
        print(f"FAIL: benchmark smoke test failed: {exc}")
        traceback.print_exc(limit=1)
        return False


def main() -> None:
    checks = [
        ("Python version", check_python_version),
        ("Core imports", check_core_imports),
        ("Broadside imports", check_broadside_imports),
        ("Match smoke test", check_match_smoke_test),
        ("Benchmark smoke test", check_benchmark_smoke_test),
    ]

    overall_ok = True
    results: list[tuple[str, bool]] = []

    for name, fn in checks:
        ok = fn()
        results.append((name, ok))
        overall_ok = overall_ok and ok

    header("Summary")
    for name, ok in results:
        status = "OK  " if ok else "FAIL"
        print(f"{status} - {name}")

    print("\n" + "=" * 72)
    if overall_ok:
        print("ALL CHECKS PASSED: you are ready to play.")
        print("Next step example:")
        print("    broadside --difficulty hard")
    else:
        print("Some checks FAILED. Review the messages above and fix them before playing.")
    print("=" * 72)


if __name__ == "__main__":
    main()
