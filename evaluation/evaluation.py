#!/usr/bin/env python3
"""
Evaluation runner for the Shannon codec.

This evaluation script:
- Round-trips every file of a corpus directory through encode/decode
- Records sizes, compression ratio, entropy and average code length per file
- Optionally runs the pytest suite on the tests/ folder and collects results
- Generates a structured JSON report with environment metadata

Run with:
    python evaluation/evaluation.py --corpus path/to/files [--with-tests] [--output report.json]
"""
import os
import sys
import json
import math
import uuid
import platform
import subprocess
import time
from datetime import datetime
from pathlib import Path

from shannon_codec import ShannonCodecError, ShannonService, count_frequencies, get_codec_config


def generate_run_id():
    """Generate a short unique run ID."""
    return uuid.uuid4().hex[:8]


def get_git_info():
    """Get git commit and branch information."""
    git_info = {"git_commit": "unknown", "git_branch": "unknown"}
    try:
        result = subprocess.run(
            ["git", "rev-parse", "HEAD"],
            capture_output=True,
            text=True,
            timeout=5
        )
        if result.returncode == 0:
            git_info["git_commit"] = result.stdout.strip()[:8]
    except (OSError, subprocess.SubprocessError):
        pass

    try:
        result = subprocess.run(
            ["git", "rev-parse", "--abbrev-ref", "HEAD"],
            capture_output=True,
            text=True,
            timeout=5
        )
        if result.returncode == 0:
            git_info["git_branch"] = result.stdout.strip()
    except (OSError, subprocess.SubprocessError):
        pass

    return git_info


def get_environment_info():
    """Collect environment information for the report."""
    git_info = get_git_info()

    return {
        "python_version": platform.python_version(),
        "platform": platform.platform(),
        "os": platform.system(),
        "os_release": platform.release(),
        "architecture": platform.machine(),
        "hostname": platform.node(),
        "git_commit": git_info["git_commit"],
        "git_branch": git_info["git_branch"],
    }


def entropy_bits(freqs):
    """Shannon entropy of a histogram, in bits per byte."""
    total = sum(freqs.values())
    if not total:
        return 0.0
    return -sum((count / total) * math.log2(count / total) for count in freqs.values())


def average_code_length(freqs, codes):
    total = sum(freqs.values())
    if not total:
        return 0.0
    return sum(count * len(codes[symbol]) for symbol, count in freqs.items()) / total


def evaluate_file(path, service):
    """Round-trip one file and return its statistics."""
    data = Path(path).read_bytes()
    freqs = count_frequencies(data)
    codes = service.logic.build_codes(freqs)

    t0 = time.perf_counter()
    result = service.encode(data)
    encode_seconds = time.perf_counter() - t0

    t0 = time.perf_counter()
    decoded = service.decode(result.encoded, result.table)
    decode_seconds = time.perf_counter() - t0

    encoded_size = len(result.encoded)
    return {
        "file": Path(path).name,
        "original_size": len(data),
        "table_size": len(result.table),
        "encoded_size": encoded_size,
        "ratio": round(encoded_size / len(data), 6) if data else 0.0,
        "distinct_symbols": len(freqs),
        "entropy_bits": round(entropy_bits(freqs), 6),
        "average_code_length": round(average_code_length(freqs, codes), 6),
        "encode_seconds": round(encode_seconds, 6),
        "decode_seconds": round(decode_seconds, 6),
        "roundtrip_ok": decoded == data,
    }


def evaluate_corpus(corpus_dir, profile=None):
    """
    Round-trip every regular file in *corpus_dir*.

    Args:
        corpus_dir: Directory holding the files to evaluate
        profile: Codec profile name (see shannon_codec.config)

    Returns:
        dict with per-file results and a summary
    """
    print(f"\n{'=' * 60}")
    print("EVALUATING CORPUS")
    print(f"{'=' * 60}")
    print(f"Corpus directory: {corpus_dir}")

    service = ShannonService(get_codec_config(profile))
    files = sorted(p for p in Path(corpus_dir).iterdir() if p.is_file())
    results = []
    for path in files:
        try:
            entry = evaluate_file(path, service)
        except (OSError, ShannonCodecError) as e:
            entry = {"file": path.name, "roundtrip_ok": False, "error": str(e)}
        results.append(entry)

        status_icon = "✅" if entry.get("roundtrip_ok") else "❌"
        detail = entry["error"] if "error" in entry else f"ratio {entry['ratio']}"
        print(f"  {status_icon} {entry['file']}: {detail}")

    original_total = sum(r.get("original_size", 0) for r in results)
    encoded_total = sum(r.get("encoded_size", 0) for r in results)
    failed = sum(1 for r in results if not r.get("roundtrip_ok"))

    return {
        "success": failed == 0,
        "files": results,
        "summary": {
            "total": len(results),
            "failed": failed,
            "original_bytes": original_total,
            "encoded_bytes": encoded_total,
            "ratio": round(encoded_total / original_total, 6) if original_total else 0.0,
        },
    }


def run_pytest(tests_dir, label="tests"):
    """
    Run pytest on the tests/ folder.

    Args:
        tests_dir: Path to the tests directory
        label: Label for this test run

    Returns:
        dict with test results
    """
    print(f"\n{'=' * 60}")
    print(f"RUNNING TESTS: {label.upper()}")
    print(f"{'=' * 60}")
    print(f"Tests directory: {tests_dir}")

    cmd = [
        sys.executable, "-m", "pytest",
        str(tests_dir),
        "-v",
        "--tb=short",
    ]

    try:
        result = subprocess.run(
            cmd,
            capture_output=True,
            text=True,
            cwd=str(Path(tests_dir).parent),
            env=os.environ.copy(),
            timeout=600
        )
    except subprocess.TimeoutExpired:
        print("❌ Test execution timed out")
        return {
            "success": False,
            "exit_code": -1,
            "tests": [],
            "summary": {"error": "Test execution timed out"},
            "stdout": "",
            "stderr": "",
        }

    stdout = result.stdout
    stderr = result.stderr
    tests = parse_pytest_verbose_output(stdout)

    passed = sum(1 for t in tests if t.get("outcome") == "passed")
    failed = sum(1 for t in tests if t.get("outcome") == "failed")
    errors = sum(1 for t in tests if t.get("outcome") == "error")
    skipped = sum(1 for t in tests if t.get("outcome") == "skipped")
    total = len(tests)

    print(f"\nResults: {passed} passed, {failed} failed, {errors} errors, {skipped} skipped (total: {total})")

    return {
        "success": result.returncode == 0,
        "exit_code": result.returncode,
        "tests": tests,
        "summary": {
            "total": total,
            "passed": passed,
            "failed": failed,
            "errors": errors,
            "skipped": skipped,
        },
        "stdout": stdout[-3000:] if len(stdout) > 3000 else stdout,
        "stderr": stderr[-1000:] if len(stderr) > 1000 else stderr,
    }


def parse_pytest_verbose_output(output):
    """Parse pytest verbose output to extract test results."""
    tests = []

    for line in output.split('\n'):
        line_stripped = line.strip()

        # Match lines like: tests/test_service.py::test_empty_input PASSED
        if '::' not in line_stripped:
            continue
        for status_word, outcome in ((' PASSED', 'passed'), (' FAILED', 'failed'),
                                     (' ERROR', 'error'), (' SKIPPED', 'skipped')):
            if status_word in line_stripped:
                nodeid = line_stripped.split(status_word)[0].strip()
                tests.append({
                    "nodeid": nodeid,
                    "name": nodeid.split("::")[-1],
                    "outcome": outcome,
                })
                break

    return tests


def generate_output_path():
    """Generate output path in format: evaluation/YYYY-MM-DD/HH-MM-SS/report.json"""
    now = datetime.now()
    date_str = now.strftime("%Y-%m-%d")
    time_str = now.strftime("%H-%M-%S")

    project_root = Path(__file__).parent.parent
    output_dir = project_root / "evaluation" / date_str / time_str
    output_dir.mkdir(parents=True, exist_ok=True)

    return output_dir / "report.json"


def main(argv=None):
    """Main entry point for evaluation."""
    import argparse

    parser = argparse.ArgumentParser(description="Run Shannon codec evaluation")
    parser.add_argument("--corpus", type=str, required=True, help="Directory of files to round-trip")
    parser.add_argument("--profile", type=str, default=None, help="Codec profile (default or legacy)")
    parser.add_argument("--with-tests", action="store_true", help="Also run the pytest suite")
    parser.add_argument(
        "--output",
        type=str,
        default=None,
        help="Output JSON file path (default: evaluation/YYYY-MM-DD/HH-MM-SS/report.json)"
    )

    args = parser.parse_args(argv)

    run_id = generate_run_id()
    started_at = datetime.now()

    print(f"Run ID: {run_id}")
    print(f"Started at: {started_at.isoformat()}")

    try:
        results = {"corpus": evaluate_corpus(args.corpus, args.profile)}
        if args.with_tests:
            results["tests"] = run_pytest(Path(__file__).parent.parent / "tests")
        success = all(section.get("success", False) for section in results.values())
        error_message = None if success else "Evaluation found failures"
    except (OSError, ValueError) as e:
        print(f"\nERROR: {str(e)}")
        results = None
        success = False
        error_message = str(e)

    finished_at = datetime.now()
    duration = (finished_at - started_at).total_seconds()

    report = {
        "run_id": run_id,
        "started_at": started_at.isoformat(),
        "finished_at": finished_at.isoformat(),
        "duration_seconds": round(duration, 6),
        "success": success,
        "error": error_message,
        "environment": get_environment_info(),
        "results": results,
    }

    if args.output:
        output_path = Path(args.output)
    else:
        output_path = generate_output_path()

    output_path.parent.mkdir(parents=True, exist_ok=True)

    with open(output_path, "w") as f:
        json.dump(report, f, indent=2)
    print(f"\n✅ Report saved to: {output_path}")

    print(f"\n{'=' * 60}")
    print("EVALUATION COMPLETE")
    print(f"{'=' * 60}")
    print(f"Run ID: {run_id}")
    print(f"Duration: {duration:.2f}s")
    print(f"Success: {'✅ YES' if success else '❌ NO'}")

    return 0 if success else 1


if __name__ == "__main__":
    sys.exit(main())
