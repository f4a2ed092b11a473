"""questcal CLI - calendar occupancy and free-slot search."""

import json
import logging
import sys
from datetime import date, datetime, timedelta

import click

from .adapters.json_snapshot import JsonSnapshotSource, SnapshotError
from .config import Config, load_config
from .core.aggregate import DailyFreeTime, FreeSlot, summarize_day
from .core.commitments import Commitment, build_commitments
from .core.conflicts import ConflictState, conflict_states, detect_conflicts
from .core.free_slots import SlotPolicy, find_free_slots
from .core.interval import ActivityWindow, Interval, InvalidInterval, clamp_to_day, same_awareness
from .core.segments import ClassificationContext, Segment, SegmentClass, segment_day, segment_range

CLASS_LABELS = {
    SegmentClass.OVERLAP: "overlap",
    SegmentClass.CURRENT_TASK: "current task",
    SegmentClass.SAME_CATEGORY: "same category",
    SegmentClass.OWN_EVENT: "own",
    SegmentClass.EXTERNAL_EVENT: "external",
    SegmentClass.FREE: "free",
}

BAR_CHARS = {
    SegmentClass.OVERLAP: "X",
    SegmentClass.CURRENT_TASK: "*",
    SegmentClass.SAME_CATEGORY: "+",
    SegmentClass.OWN_EVENT: "#",
    SegmentClass.EXTERNAL_EVENT: "=",
    SegmentClass.FREE: ".",
}


@click.group()
@click.version_option(package_name="questcal")
@click.option("--debug", is_flag=True, help="Enable debug logging")
@click.option("--config", "config_path", default=None, type=click.Path(dir_okay=False),
              help="Config file (defaults to $QUESTCAL_HOME/config/questcal.conf)")
@click.option("--snapshot", default=None, type=click.Path(dir_okay=False),
              help="JSON snapshot of events and tasks")
@click.pass_context
def main(ctx, debug: bool, config_path: str | None, snapshot: str | None):
    """questcal - calendar occupancy and free-slot search."""
    if debug:
        logging.basicConfig(
            format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            level=logging.DEBUG,
        )
    config = load_config(config_path)
    if snapshot:
        config.snapshot_file = snapshot
    ctx.obj = config


def _load_commitments(config: Config) -> list[Commitment]:
    """Load the snapshot and build the commitment corpus, exiting on failure."""
    source = JsonSnapshotSource(config.snapshot_file)
    try:
        events = source.fetch_all_events()
        tasks = source.fetch_tasks()
    except FileNotFoundError:
        click.echo(f"Error: snapshot not found: {source.path}", err=True)
        sys.exit(1)
    except SnapshotError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)
    return build_commitments(events, tasks, default_minutes=config.default_task_minutes)


def _parse_date(value: str | None) -> date:
    if not value:
        return date.today()
    try:
        return date.fromisoformat(value)
    except ValueError:
        raise click.BadParameter(f"Expected YYYY-MM-DD, got {value!r}")


def _parse_datetime(value: str) -> datetime:
    try:
        return datetime.fromisoformat(value)
    except ValueError:
        raise click.BadParameter(f"Expected an ISO-8601 datetime, got {value!r}")


def _serialize_interval(interval: Interval) -> dict:
    return {"start": interval.start.isoformat(), "end": interval.end.isoformat()}


def _serialize_segment(segment: Segment) -> dict:
    return {
        **_serialize_interval(segment.interval),
        "class": segment.classification.name.lower(),
        "occupied": segment.is_occupied,
        "weight": segment.weight_in_day,
        "titles": [c.title for c in segment.commitments],
    }


def _serialize_slot(slot: FreeSlot) -> dict:
    return {
        **_serialize_interval(slot.interval),
        "duration_minutes": slot.duration_minutes,
        "duration_hours": slot.duration_hours,
    }


def _serialize_day(day: DailyFreeTime) -> dict:
    return {
        "date": day.date.isoformat(),
        "free_slots": [_serialize_slot(s) for s in day.free_slots],
        "total_free_hours": day.total_free_hours,
        "has_free_time": day.has_free_time,
    }


def occupancy_bar(segments: list[Segment], width: int = 24) -> str:
    """Render a day as fixed-width cells, each showing its highest-priority class."""
    if not segments:
        return ""
    day = segments[0].day
    cell = day.duration / width
    chars = []
    for i in range(width):
        cell_iv = Interval(day.start + cell * i, day.start + cell * (i + 1))
        classes = [
            s.classification for s in segments
            if s.interval.start < cell_iv.end and cell_iv.start < s.interval.end
        ]
        top = max(classes, key=lambda c: c.priority, default=SegmentClass.FREE)
        chars.append(BAR_CHARS[top])
    return "".join(chars)


@main.command()
@click.option("--date", "-d", "target_date", default=None,
              help="Date to view (YYYY-MM-DD), defaults to today")
@click.option("--task", "task_id", default=None, help="Current task id to highlight")
@click.option("--category", "category_id", default=None, help="Current category id to highlight")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.pass_obj
def day(config: Config, target_date: str | None, task_id: str | None, category_id: str | None, as_json: bool):
    """Show a day's occupancy segments."""
    target = _parse_date(target_date)
    commitments = _load_commitments(config)
    context = ClassificationContext(current_task_id=task_id, current_category_id=category_id)
    segments = segment_day(target, commitments, context)

    if as_json:
        click.echo(json.dumps([_serialize_segment(s) for s in segments], indent=2))
        return

    click.echo(f"### {target.strftime('%A, %B %d')}")
    click.echo(f"  [{occupancy_bar(segments)}]")
    for segment in segments:
        end = "24:00" if segment.end_hour == 24 else segment.interval.end.strftime("%H:%M")
        span = f"{segment.interval.start.strftime('%H:%M')}-{end}"
        titles = ", ".join(c.title for c in segment.commitments if c.title)
        suffix = f"  {titles}" if titles else ""
        click.echo(f"  {span:11} {CLASS_LABELS[segment.classification]:13}{suffix}")

    todays = [c for c in commitments if clamp_to_day(c.interval, target) is not None]
    flagged = [
        (c, state)
        for c, state in conflict_states(todays, config.conflict_tolerance_minutes)
        if state is not ConflictState.NO_CONFLICT
    ]
    if flagged:
        click.echo("\nTimeline:")
        for commitment, state in sorted(flagged, key=lambda pair: pair[0].interval.start):
            label = "overlap" if state is ConflictState.OVERLAP else "too close"
            title = commitment.title or "(untitled)"
            click.echo(f"  {commitment.interval.format()}  {label:9}  {title}")

    summary = summarize_day(target, segments)
    click.echo(f"\nFree: {summary.total_free_hours:.1f}h")


@main.command()
@click.option("--month", "-m", "month_str", default=None, help="Month to view (YYYY-MM), defaults to this month")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.pass_obj
def month(config: Config, month_str: str | None, as_json: bool):
    """Show free hours for every day of a month."""
    if month_str:
        try:
            first = datetime.strptime(month_str, "%Y-%m").date()
        except ValueError:
            raise click.BadParameter(f"Expected YYYY-MM, got {month_str!r}")
    else:
        first = date.today().replace(day=1)
    next_month = (first + timedelta(days=32)).replace(day=1)
    days = (next_month - first).days

    commitments = _load_commitments(config)
    by_day = segment_range(first, days, commitments)
    summaries = [summarize_day(d, segments) for d, segments in by_day.items()]

    if as_json:
        click.echo(json.dumps([_serialize_day(s) for s in summaries], indent=2))
        return

    click.echo(f"### {first.strftime('%B %Y')}")
    for summary in summaries:
        bar = occupancy_bar(by_day[summary.date])
        click.echo(f"  {summary.date.strftime('%a %d')}  [{bar}]  {summary.total_free_hours:5.1f}h free")


@main.command()
@click.argument("start")
@click.argument("end")
@click.option("--task", "task_id", default=None, help="Task being edited (excluded from conflicts)")
@click.option("--event", "event_id", default=None, help="Event being edited (excluded from conflicts)")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.pass_obj
def conflicts(config: Config, start: str, end: str, task_id: str | None, event_id: str | None, as_json: bool):
    """Check a proposed START-END interval for conflicts."""
    try:
        candidate = Interval(_parse_datetime(start), _parse_datetime(end))
    except InvalidInterval as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    commitments = _load_commitments(config)
    if commitments and not same_awareness(candidate.start, commitments[0].interval.start):
        tz = commitments[0].interval.start.tzinfo
        if tz is None:
            click.echo("Error: snapshot times have no UTC offset; give START and END without one", err=True)
            sys.exit(1)
        # Naive input is read in the snapshot's zone
        candidate = Interval(candidate.start.replace(tzinfo=tz), candidate.end.replace(tzinfo=tz))

    report = detect_conflicts(candidate, commitments, exclude_task_id=task_id, exclude_event_id=event_id)

    if as_json:
        click.echo(
            json.dumps(
                [
                    {
                        "title": c.commitment.title,
                        "task_id": c.commitment.task_id,
                        "event_id": c.commitment.event_id,
                        "external": c.commitment.is_external,
                        "overlap": _serialize_interval(c.overlap),
                        "overlap_minutes": c.overlap_minutes,
                    }
                    for c in report
                ],
                indent=2,
            )
        )
        return

    if not report.has_conflicts:
        click.echo("No conflicts.")
        return

    click.echo(f"{report.count} conflict(s):")
    for conflict in report:
        title = conflict.commitment.title or "(untitled)"
        click.echo(f"  {conflict.overlap.format()}  {conflict.overlap_minutes:3} min  {title}")


@main.command()
@click.argument("minutes", type=int)
@click.option("--from", "from_date", default=None, help="First day to search (YYYY-MM-DD), defaults to today")
@click.option("--days", type=int, default=None, help="Days to search (default from config)")
@click.option("--window", default=None, help="Daily window HH:MM-HH:MM (default from config)")
@click.option("--limit", type=int, default=None, help="Maximum suggestions (default from config)")
@click.option("--centered", is_flag=True, help="Center suggestions in their free block")
@click.option("--task", "task_id", default=None, help="Task being rescheduled (its time counts as free)")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.pass_obj
def suggest(
    config: Config,
    minutes: int,
    from_date: str | None,
    days: int | None,
    window: str | None,
    limit: int | None,
    centered: bool,
    task_id: str | None,
    as_json: bool,
):
    """Suggest free slots of MINUTES length."""
    start = _parse_date(from_date)
    try:
        activity_window = ActivityWindow.parse(window) if window else config.activity_window
    except ValueError as e:
        raise click.BadParameter(str(e), param_hint="--window")

    commitments = _load_commitments(config)
    try:
        result = find_free_slots(
            minutes,
            start,
            days=days if days is not None else config.search_days,
            commitments=commitments,
            window=activity_window,
            policy=SlotPolicy.CENTERED if centered else SlotPolicy.EARLIEST,
            max_suggestions=limit if limit is not None else config.max_suggestions,
            exclude_task_id=task_id,
        )
    except InvalidInterval as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    if as_json:
        click.echo(
            json.dumps(
                {
                    "suggestions": [_serialize_slot(s) for s in result.suggestions],
                    "daily": [_serialize_day(d) for d in result.daily],
                },
                indent=2,
            )
        )
        return

    if result.suggestions:
        click.echo("Suggestions:")
        for slot in result.suggestions:
            click.echo(f"  {slot.start.strftime('%a %d %b')}  {slot.format()}")
    else:
        click.echo(f"No free slot of {minutes} min found.")

    click.echo("\nFree time:")
    for summary in result.daily:
        marker = "" if summary.has_free_time else "  (fully booked)"
        click.echo(f"  {summary.date.strftime('%a %d %b')}  {summary.total_free_hours:5.1f}h{marker}")


if __name__ == "__main__":
    main()
