"""Command-line tempo estimation.

Usage:
    tempometer analyze song.wav
    tempometer analyze a.wav b.flac --summary-csv bpm_results.csv
    tempometer analyze song.wav --per-window --curve-csv tempo_curve.csv
    tempometer demo --bpm 128
    tempometer tap
    tempometer serve
"""

import argparse
import logging
import math
import sys
import time
from pathlib import Path

from tempometer.analysis.engine import TempoEngine
from tempometer.analysis.models import AnalysisResult
from tempometer.analysis.tap_tempo import TapTempo
from tempometer.audio.synth import DEMO_BPM, DEMO_SECONDS, demo_buffer
from tempometer.config import clamp_window, settings
from tempometer.export import batch_results_csv, tempo_curve_csv, write_csv


def _fmt(value: float, digits: int = 0) -> str:
    return f"{value:.{digits}f}" if math.isfinite(value) else "—"


def _positive_float(text: str) -> float:
    value = float(text)
    if not (math.isfinite(value) and value > 0):
        raise argparse.ArgumentTypeError(f"must be a positive number, got {text}")
    return value


def _add_analysis_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--min-bpm", type=float, default=None, help="lower search bound (default 60)")
    parser.add_argument("--max-bpm", type=float, default=None, help="upper search bound (default 180)")
    parser.add_argument("--per-window", action="store_true", help="also estimate tempo over time")
    parser.add_argument("--win-secs", type=float, default=None, help="tempo-curve window length")
    parser.add_argument("--hop-secs", type=float, default=None, help="tempo-curve window advance")
    parser.add_argument("--workers", type=int, default=None, help="threads for tempo-curve windows")
    parser.add_argument("--curve-csv", type=Path, default=None,
                        help="write the last file's tempo curve here (implies --per-window)")


def _build_engine(args) -> TempoEngine:
    win, hop = clamp_window(args.win_secs or settings.win_secs, args.hop_secs or settings.hop_secs)
    return TempoEngine(
        config=settings.estimation_config(args.min_bpm, args.max_bpm),
        sample_rate=settings.sample_rate,
        per_window=args.per_window or args.curve_csv is not None,
        win_secs=win,
        hop_secs=hop,
        window_workers=args.workers or settings.window_workers,
    )


def _print_result(name: str, result: AnalysisResult) -> None:
    est = result.estimate
    bpm = f"{round(est.bpm)} BPM" if est.is_valid else "—"
    print(f"{name}: {bpm}  confidence {_fmt(est.confidence, 2)}  "
          f"({_fmt(result.duration, 1)}s @ {result.sample_rate}Hz)")
    top = "  •  ".join(f"{round(c.bpm)} ({c.strength:.2f})" for c in est.candidates[:3])
    if top:
        print(f"  candidates: {top}")
    if result.tempo_curve:
        print(f"  tempo curve: {len(result.tempo_curve)} points")


def cmd_analyze(args) -> int:
    engine = _build_engine(args)
    rows = engine.analyze_batch([str(p) for p in args.files])
    for row in rows:
        bpm = f"{round(row.bpm)} BPM" if row.is_valid else "—"
        print(f"{row.filename}: {bpm}  confidence {_fmt(row.confidence, 3)}  ({_fmt(row.duration, 2)}s)")

    if args.summary_csv:
        write_csv(batch_results_csv(rows), args.summary_csv)
        print(f"Wrote {args.summary_csv}")
    if args.curve_csv and rows:
        write_csv(tempo_curve_csv(rows[-1].curve), args.curve_csv)
        print(f"Wrote {args.curve_csv} ({len(rows[-1].curve)} points)")

    return 0 if any(r.is_valid for r in rows) else 1


def cmd_demo(args) -> int:
    engine = _build_engine(args)
    result = engine.analyze_buffer(demo_buffer(bpm=args.bpm, duration_seconds=args.seconds))
    _print_result(f"demo ({args.bpm:g} BPM clicks)", result)
    if args.curve_csv:
        write_csv(tempo_curve_csv(result.tempo_curve), args.curve_csv)
        print(f"Wrote {args.curve_csv}")
    return 0


def cmd_tap(args, stdin=None, clock=time.monotonic) -> int:
    stdin = stdin or sys.stdin
    tapper = TapTempo()
    print("Press Enter on each beat; 'r' resets, 'q' quits.")
    for line in stdin:
        command = line.strip().lower()
        if command == "q":
            break
        if command == "r":
            tapper.reset()
            print("0 taps")
            continue
        bpm = tapper.tap(clock() * 1000.0)
        shown = f"{round(bpm)} BPM" if bpm is not None else "—"
        print(f"{tapper.count} taps  {shown}")
    return 0


def cmd_serve(args) -> int:
    from tempometer.main import run
    run(reload=args.reload)
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="tempometer", description="Estimate tempo (BPM) of audio")
    parser.add_argument("-v", "--verbose", action="store_true", help="debug logging")
    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser("analyze", help="analyze audio files")
    p.add_argument("files", nargs="+", type=Path)
    p.add_argument("--summary-csv", type=Path, default=None, help="write a per-file summary CSV")
    _add_analysis_args(p)
    p.set_defaults(func=cmd_analyze)

    p = sub.add_parser("demo", help="analyze a synthetic click track")
    p.add_argument("--bpm", type=_positive_float, default=DEMO_BPM)
    p.add_argument("--seconds", type=float, default=DEMO_SECONDS)
    _add_analysis_args(p)
    p.set_defaults(func=cmd_demo)

    p = sub.add_parser("tap", help="tap tempo from the keyboard")
    p.set_defaults(func=cmd_tap)

    p = sub.add_parser("serve", help="run the HTTP API")
    p.add_argument("--reload", action="store_true")
    p.set_defaults(func=cmd_serve)

    return parser


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(name)s %(levelname)s: %(message)s",
    )
    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
