from __future__ import annotations

import argparse
import random
from pathlib import Path

from .config import SchedulerConfig, load_config
from .data_io import (
    merge_employment,
    read_breaks,
    read_exclusions,
    read_placements,
    read_presets,
    read_skills,
    read_workers,
    write_breaks,
    write_placements,
)
from .engine.orchestrator import Orchestrator
from .services.timeline import build_person_matrix
from .validator import summarize_placements


def _config(args: argparse.Namespace) -> SchedulerConfig:
    return load_config(args.config) if args.config else SchedulerConfig()


def _rng(args: argparse.Namespace):
    return random.Random(args.seed).random if args.seed is not None else random.random


def _load_day(args: argparse.Namespace, cfg: SchedulerConfig):
    for path in (args.workers, args.skills, args.presets):
        if not Path(path).exists():
            raise SystemExit(f"Input file not found: {path}")
    skills, employment = read_skills(args.skills)
    workers = merge_employment(read_workers(args.workers, cfg.shift_times), employment)
    if not workers:
        raise SystemExit(f"No workers found in {args.workers}")
    presets = read_presets(args.presets)
    if not presets:
        raise SystemExit(f"No presets found in {args.presets}")
    exclusions = read_exclusions(args.exclusions)
    return presets, workers, skills, exclusions


def _cmd_generate(args: argparse.Namespace) -> None:
    cfg = _config(args)
    presets, workers, skills, exclusions = _load_day(args, cfg)
    schedule = Orchestrator(cfg, _rng(args)).build_schedule(presets, workers, skills, exclusions)
    write_placements(args.out, schedule.placements)
    print("Placements written to", args.out)
    if args.breaks_out:
        write_breaks(args.breaks_out, schedule.break_assignments)
        print("Breaks written to", args.breaks_out)
    print(summarize_placements(schedule.placements))


def _cmd_repair(args: argparse.Namespace) -> None:
    cfg = _config(args)
    presets, workers, skills, exclusions = _load_day(args, cfg)
    absent = [name.strip() for name in args.absent.split(",") if name.strip()]
    if not absent:
        raise SystemExit("No absent workers given")
    placements = read_placements(args.placements)
    break_assignments = read_breaks(args.breaks) if args.breaks else None

    result = Orchestrator(cfg, _rng(args)).repair_schedule(
        placements, absent, presets, workers, skills, exclusions, break_assignments
    )
    repaired = sorted(result.remaining + result.filled, key=lambda p: (p.time_min, p.post_name))
    write_placements(args.out, repaired)
    print("Repaired placements written to", args.out)
    for gap in result.unfilled:
        print(f"[WARN] Unfilled: {gap.post_name} row {gap.row_number}")


def _cmd_summarize(args: argparse.Namespace) -> None:
    print(summarize_placements(read_placements(args.placements)))


def _cmd_timeline(args: argparse.Namespace) -> None:
    cfg = _config(args)
    skills, employment = read_skills(args.skills)
    workers = merge_employment(read_workers(args.workers, cfg.shift_times), employment)
    exclusions = read_exclusions(args.exclusions)
    break_assignments = read_breaks(args.breaks) if args.breaks else []
    matrix = build_person_matrix(
        workers,
        read_placements(args.placements),
        break_assignments,
        cfg.breaks.duration,
        exclusions,
        cfg.time_rows(),
        cfg.row_minutes,
    )
    if args.out:
        matrix.to_csv(args.out, index_label="name")
        print("Timeline written to", args.out)
    else:
        print(matrix.to_string())


def _add_day_inputs(p: argparse.ArgumentParser) -> None:
    p.add_argument("--workers", required=True)
    p.add_argument("--skills", required=True)
    p.add_argument("--presets", required=True)
    p.add_argument("--exclusions")
    p.add_argument("--config")
    p.add_argument("--seed", type=int)


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(prog="dutyroster")
    sub = parser.add_subparsers(dest="command", required=True)

    g = sub.add_parser("generate", help="Generate placements for a day")
    _add_day_inputs(g)
    g.add_argument("--out", required=True)
    g.add_argument("--breaks-out")
    g.set_defaults(func=_cmd_generate)

    r = sub.add_parser("repair", help="Refill placements left by absent workers")
    _add_day_inputs(r)
    r.add_argument("--placements", required=True)
    r.add_argument("--absent", required=True, help="Comma-separated worker names")
    r.add_argument("--breaks")
    r.add_argument("--out", required=True)
    r.set_defaults(func=_cmd_repair)

    s = sub.add_parser("summarize", help="Summarize a placements CSV")
    s.add_argument("--placements", required=True)
    s.set_defaults(func=_cmd_summarize)

    t = sub.add_parser("timeline", help="Per-person timeline of a placements CSV")
    t.add_argument("--placements", required=True)
    t.add_argument("--workers", required=True)
    t.add_argument("--skills", required=True)
    t.add_argument("--exclusions")
    t.add_argument("--breaks")
    t.add_argument("--config")
    t.add_argument("--out")
    t.set_defaults(func=_cmd_timeline)

    args = parser.parse_args(argv)
    args.func(args)


if __name__ == "__main__":
    main()
