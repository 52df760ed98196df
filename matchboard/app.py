import argparse
import asyncio

from . import __version__
from .config import Settings, load_env
from .dashboard import FOUND, Dashboard
from .errors import LoadFailure
from .fetcher import MatchFetcher
from .logger import get_logger
from .sink import ConsoleSink, RecordingSink
from .schema import skill_list
from .stats import summarize
from .tables import (
    FILTER_MODES,
    filter_matches,
    match_details,
    match_list,
    matched_rows,
    search_matches,
    unmatched_freelancers,
)


def non_negative_int(value: str) -> int:
    try:
        number = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"expected a whole number, got {value!r}")
    if number < 0:
        raise argparse.ArgumentTypeError(f"must not be negative, got {value}")
    return number


def build_dashboard(settings: Settings, args: argparse.Namespace, sink=None) -> Dashboard:
    fetcher = MatchFetcher(
        base_url=args.backend or settings.backend_url,
        timeout=settings.timeout,
        max_retries=settings.max_retries if args.retries is None else args.retries,
        base_delay=settings.base_delay,
    )
    dwell_ms = getattr(args, "dwell_ms", None)
    dwell = settings.dwell if dwell_ms is None else dwell_ms / 1000
    return Dashboard(fetcher, sink or RecordingSink(), dwell=dwell)


def print_failure(failure: LoadFailure) -> None:
    print("Error Loading Data")
    print(f"  {failure.message}")
    print(f"  Server Status: {failure.server_status}")
    print(f"  Attempted {failure.attempts} times")


def _checked(result):
    if isinstance(result, LoadFailure):
        print_failure(result)
        raise SystemExit(1)
    return result


def cmd_stats(args: argparse.Namespace, settings: Settings) -> None:
    dashboard = build_dashboard(settings, args)
    match_set = _checked(asyncio.run(dashboard.refresh()))
    summary = summarize(match_set)
    print(f"Freelancers: {summary.total_freelancers}")
    print(f"Projects: {summary.total_projects}")
    print(f"Matched pairs: {summary.matched_pairs}")
    print(f"Success rate: {summary.success_rate}%")
    print(f"Valid matches: {summary.valid_matches}/{summary.total_matches}")
    for chart_id, (labels, values) in dashboard.sink.series.items():
        print(f"\n[{chart_id}]")
        for label, value in zip(labels, values):
            print(f"  {label}: {value}")


def print_match_list(match_set, term: str, mode: str) -> None:
    items = filter_matches(search_matches(match_list(match_set), term), mode)
    print(f"Matches ({len(items)}):")
    for a in items:
        details = match_details(a)
        print(
            f"  {details['freelancer']['name']} <-> {details['project']['name']}"
            f" | score {details['score']}"
            f" | matched: {', '.join(details['matched_skills']) or '-'}"
            f" | missing: {', '.join(details['missing_skills']) or '-'}"
        )


def cmd_matches(args: argparse.Namespace, settings: Settings) -> None:
    dashboard = build_dashboard(settings, args)
    match_set = _checked(asyncio.run(dashboard.refresh()))
    if args.search or args.filter != "all":
        print_match_list(match_set, args.search or "", args.filter)
        return
    rows = matched_rows(match_set)
    print(f"Matched ({len(rows)}):")
    for freelancer, project, score, skills, experience in rows:
        print(f"  {freelancer} <-> {project} | score {score} | {skills} | {experience}y")
    unmatched = unmatched_freelancers(match_set)
    print(f"\nUnmatched freelancers ({len(unmatched)}):")
    for f in unmatched:
        print(f"  {f.get('name', 'Unnamed')} | {', '.join(skill_list(f))} | {f.get('experience', 0)}y")


def cmd_skill(args: argparse.Namespace, settings: Settings) -> None:
    dashboard = build_dashboard(settings, args)
    lookup = asyncio.run(dashboard.search_skill(args.name))
    print(lookup.message)
    if lookup.state == FOUND:
        for f in lookup.freelancers:
            print(f"  {f.get('id')} | {f.get('name')} | {f.get('experience')} | {', '.join(skill_list(f))}")
    else:
        raise SystemExit(2)


def cmd_animate(args: argparse.Namespace, settings: Settings) -> None:
    async def run():
        dashboard = build_dashboard(settings, args, sink=ConsoleSink())
        result = await dashboard.refresh()
        if isinstance(result, LoadFailure):
            return result
        dashboard.toggle_animation()
        await dashboard.animation.wait()
        return result

    _checked(asyncio.run(run()))


def main():
    load_env()
    settings = Settings.from_env()

    parser = argparse.ArgumentParser(prog="matchboard", description="Match dashboard console")
    parser.add_argument("--version", action="store_true", help="Show version")
    parser.add_argument("--backend", help=f"Scoring backend base URL (default: {settings.backend_url})")
    parser.add_argument("--retries", type=non_negative_int, help=f"Retries after the first failed fetch (default: {settings.max_retries})")
    parser.add_argument("--verbose", action="store_true", help="Log at DEBUG level")

    subparsers = parser.add_subparsers(dest="command")
    st = subparsers.add_parser("stats", help="Fetch matches and print summary statistics and chart series")
    st.set_defaults(func=cmd_stats)

    mt = subparsers.add_parser("matches", help="Print the matched and unmatched tables")
    mt.add_argument("--search", help="Only list matches whose names or skills contain this text")
    mt.add_argument("--filter", choices=FILTER_MODES, default="all", help="Score filter for the match list (default: all)")
    mt.set_defaults(func=cmd_matches)

    sk = subparsers.add_parser("skill", help="Look up freelancers with a given skill")
    sk.add_argument("--name", required=True, help="Skill to search for")
    sk.set_defaults(func=cmd_skill)

    an = subparsers.add_parser("animate", help="Walk the valid matches one pair at a time")
    an.add_argument("--dwell-ms", type=non_negative_int, help=f"Pause per pair in milliseconds (default: {settings.dwell_ms})")
    an.set_defaults(func=cmd_animate)

    args = parser.parse_args()

    if args.version:
        print(__version__)
        return

    get_logger().configure(
        level="DEBUG" if args.verbose else settings.log_level,
        log_dir=settings.log_dir,
        enable_file=settings.log_dir is not None,
    )

    if hasattr(args, "func"):
        args.func(args, settings)
        get_logger().log_metrics_summary()
        return

    parser.print_help()


if __name__ == "__main__":
    main()
