#!/usr/bin/env python3
"""
Test runner for the What2Watch social-signal recommender.

Runs each component's test module on its own and prints one result row per
component, so a failing stage of the buzz pipeline is visible at a glance.

    python test_runner.py                      all components
    python test_runner.py forum_client ranker  selected components
    python test_runner.py --deps               dependency check only
"""

import argparse
import os
import sys
import time
import unittest
from importlib import metadata

ROOT = os.path.dirname(os.path.abspath(__file__))
TESTS_DIR = os.path.join(ROOT, 'tests')

sys.path.insert(0, os.path.join(ROOT, 'src'))
sys.path.insert(0, TESTS_DIR)

# Pipeline order: fetch -> analyze -> classify -> score -> rank -> feedback
COMPONENTS = [
    ("forum_client", "Forum fetch client"),
    ("comment_sentiment", "Comment sentiment"),
    ("buzz_classifier", "Buzz classifier"),
    ("social_signal", "Social signal assembly"),
    ("quiz_catalog", "Quiz answers"),
    ("content_catalog", "TMDB catalog"),
    ("content_scoring", "Content scorer / A-B variants"),
    ("ranker", "Ranker"),
    ("feedback_system", "Feedback accuracy"),
    ("social_signal_api", "HTTP API"),
    ("utils", "Configuration"),
]

# Distribution name on the index -> import name
RUNTIME_DEPENDENCIES = [
    ("streamlit", "streamlit"),
    ("requests", "requests"),
    ("nltk", "nltk"),
    ("pandas", "pandas"),
    ("gspread", "gspread"),
    ("google-auth", "google.oauth2"),
    ("pydantic", "pydantic"),
    ("fastapi", "fastapi"),
    ("uvicorn", "uvicorn"),
]
TEST_DEPENDENCIES = [
    ("httpx", "httpx"),
]


def check_dependencies():
    """Import every declared dependency; print its installed version."""
    print("🔧 Dependencies")
    missing = []
    for group, packages in (("runtime", RUNTIME_DEPENDENCIES), ("test", TEST_DEPENDENCIES)):
        for dist, import_name in packages:
            try:
                __import__(import_name)
                version = metadata.version(dist)
                print(f"  ✅ {dist:<12} {version:<10} ({group})")
            except (ImportError, metadata.PackageNotFoundError):
                print(f"  ❌ {dist:<12} {'-':<10} ({group})")
                missing.append(dist)

    if missing:
        print(f"\n💡 Install with: pip install -e '.[test]'  (missing: {', '.join(missing)})")
        return False
    return True


def run_component(module, failfast=False):
    """Run one test module; returns (TestResult, seconds) or (None, 0) if it can't load."""
    loader = unittest.TestLoader()
    try:
        suite = loader.loadTestsFromName(f"test_{module}")
    except ImportError as e:
        print(f"  💥 test_{module} failed to import: {e}")
        return None, 0.0

    start = time.time()
    with open(os.devnull, 'w') as devnull:
        runner = unittest.TextTestRunner(stream=devnull, buffer=True, failfast=failfast)
        result = runner.run(suite)
    return result, time.time() - start


def print_problems(module, result):
    for label, problems in (("FAIL", result.failures), ("ERROR", result.errors)):
        for test, traceback in problems:
            print(f"\n--- {label} [{module}] {test.id()}")
            print(traceback.rstrip())


def run_components(modules, failfast=False, verbose=False):
    """Run the given components and print a per-component summary table."""
    descriptions = dict(COMPONENTS)
    rows = []

    for module in modules:
        result, seconds = run_component(module, failfast)
        rows.append((module, result, seconds))
        if result is not None and verbose:
            print_problems(module, result)
        if failfast and (result is None or not result.wasSuccessful()):
            break

    print(f"\n{'Component':<32}{'Tests':>7}{'Fail':>6}{'Err':>5}{'Skip':>6}{'Time':>8}")
    print("-" * 64)
    totals = [0, 0, 0, 0]
    ok = True
    for module, result, seconds in rows:
        name = descriptions.get(module, module)
        if result is None:
            print(f"💥 {name:<29}{'import error':>32}")
            ok = False
            continue
        counts = [result.testsRun, len(result.failures), len(result.errors), len(result.skipped)]
        totals = [t + c for t, c in zip(totals, counts)]
        mark = "✅" if result.wasSuccessful() else "❌"
        ok = ok and result.wasSuccessful()
        print(f"{mark} {name:<29}{counts[0]:>7}{counts[1]:>6}{counts[2]:>5}{counts[3]:>6}{seconds:>7.2f}s")
    print("-" * 64)
    print(f"   {'Total':<29}{totals[0]:>7}{totals[1]:>6}{totals[2]:>5}{totals[3]:>6}")

    if not ok and not verbose:
        for module, result, _ in rows:
            if result is not None:
                print_problems(module, result)
    return ok


def parse_args(argv=None):
    known = [module for module, _ in COMPONENTS]
    parser = argparse.ArgumentParser(description="Run the What2Watch test suite by component.")
    parser.add_argument("components", nargs="*", metavar="component",
                        help=f"components to run (default: all). One of: {', '.join(known)}")
    parser.add_argument("--deps", action="store_true", help="only check dependencies")
    parser.add_argument("--failfast", action="store_true", help="stop at the first failing component")
    parser.add_argument("-v", "--verbose", action="store_true",
                        help="print failures as each component finishes")
    args = parser.parse_args(argv)

    unknown = [c for c in args.components if c not in known]
    if unknown:
        parser.error(f"unknown component(s): {', '.join(unknown)}")
    return args


def main(argv=None):
    args = parse_args(argv)
    deps_ok = check_dependencies()
    if args.deps:
        return deps_ok
    if not deps_ok:
        print("\n❌ Cannot run tests with missing dependencies")
        return False

    modules = args.components or [module for module, _ in COMPONENTS]
    print(f"\n🎬 Running {len(modules)} component(s) from {TESTS_DIR}")
    return run_components(modules, failfast=args.failfast, verbose=args.verbose)


if __name__ == "__main__":
    sys.exit(0 if main() else 1)
