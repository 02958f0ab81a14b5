"""
CLI for the schedule board.

Month view in the style of cal(1), Sunday first. Rest days are shown in brackets,
Saturdays in parentheses.
"""

from __future__ import annotations

import logging
import sys
from datetime import date
from typing import List, Optional

import click

from . import BoardConfig, ImportMode, Mode, ScheduleBoard, ScheduleBoardError, default_export_name

WEEKDAYS = ['Su', 'Mo', 'Tu', 'We', 'Th', 'Fr', 'Sa']

DEFAULT_STORE = 'schedules.json'


def render_month(board: ScheduleBoard, year: int, month: int) -> str:
    """
    Render a single month board.

    Args:
        board: Board providing the cells
        year: Year to render
        month: Month to render (1-12)

    Returns:
        String representation of the month, followed by one line per day
        carrying a holiday label or schedules
    """
    lines = [f'{year}. {month:02d}'.center(28).rstrip()]
    lines.append(''.join(f' {day} ' for day in WEEKDAYS).rstrip())

    cells = board.get_grid(date(year, month, 1))
    for week_start in range(0, len(cells), 7):
        row = ''
        for cell in cells[week_start:week_start + 7]:
            if not cell.is_current_month:
                row += '    '
            elif cell.color_category == 'rest':
                row += f'[{cell.date.day:2}]'
            elif cell.color_category == 'saturday':
                row += f'({cell.date.day:2})'
            else:
                row += f' {cell.date.day:2} '
        lines.append(row.rstrip())

    notes = []
    for cell in cells:
        if not cell.is_current_month:
            continue
        parts = []
        if cell.holiday_label:
            parts.append(cell.holiday_label)
        if cell.schedules:
            n = len(cell.schedules)
            parts.append(f'{n} schedule' + ('s' if n > 1 else ''))
        if parts:
            notes.append(f'{cell.key}  ' + ' | '.join(parts))
    if notes:
        lines.append('')
        lines.extend(notes)

    return '\n'.join(lines)


def _fail(message: str) -> None:
    click.echo(f'Error: {message}', err=True)
    sys.exit(1)


def _month_args(year: Optional[int], month: Optional[int]) -> date:
    today = date.today()
    return date(year or today.year, month or today.month, 1)


@click.group()
@click.option('--config', 'config_path', type=click.Path(dir_okay=False), default=None,
              help='JSON configuration file')
@click.option('--store', 'store_path', type=click.Path(dir_okay=False), envvar='SCHEDULE_BOARD_STORE',
              default=None, help=f'JSON file holding the schedules (default: {DEFAULT_STORE})')
@click.option('-v', '--verbose', is_flag=True, help='Log every store change')
@click.pass_context
def main(ctx: click.Context, config_path: Optional[str], store_path: Optional[str], verbose: bool):
    """
    Monthly schedule board.

    Examples:

        # Show May 2026 with holidays and schedule counts
        schedule-board show 2026 5

        # Add a schedule
        schedule-board add 2026-05-05 "Team lunch" --start 12:00 --end 13:00

        # Copy the schedules of May 5th to May 6th and 7th
        schedule-board copy 2026-05-05 2026-05-06 2026-05-07

        # Export May 2026 to 2026-05_일정관리.xlsx
        schedule-board export 2026 5
    """
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format='%(levelname)s %(name)s: %(message)s',
        stream=sys.stderr,
    )
    try:
        config = BoardConfig.from_file(config_path) if config_path else BoardConfig()
        if store_path or not config.storage_path:
            config.storage_path = store_path or DEFAULT_STORE
        ctx.obj = ScheduleBoard.default(config)
    except ScheduleBoardError as e:
        _fail(str(e))


@main.command()
@click.argument('year', type=int, required=False)
@click.argument('month', type=click.IntRange(1, 12), required=False)
@click.pass_obj
def show(board: ScheduleBoard, year: Optional[int], month: Optional[int]):
    """Display the board of one month (current month by default)."""
    first = _month_args(year, month)
    click.echo(render_month(board, first.year, first.month))


@main.command('list')
@click.argument('year', type=int, required=False)
@click.argument('month', type=click.IntRange(1, 12), required=False)
@click.pass_obj
def list_schedules(board: ScheduleBoard, year: Optional[int], month: Optional[int]):
    """List the schedules of one month, in date and start time order."""
    first = _month_args(year, month)
    schedules = sorted(board.store.in_month(first), key=lambda s: (s.date, s.start_time))
    if not schedules:
        click.echo(f'No schedules in {first:%Y-%m}.')
        return
    for s in schedules:
        click.echo(f'{s.date}  {s.start_time}-{s.end_time}  {s.title}')


@main.command()
@click.argument('day')
@click.argument('title')
@click.option('--start', default=None, help='Start time (HH:MM)')
@click.option('--end', default=None, help='End time (HH:MM)')
@click.pass_obj
def add(board: ScheduleBoard, day: str, title: str, start: Optional[str], end: Optional[str]):
    """Add one schedule on DAY (YYYY-MM-DD)."""
    try:
        s = board.add_schedule(day, title, start, end)
    except (ScheduleBoardError, ValueError) as e:
        _fail(str(e))
    click.echo(f'Added {s.title!r} on {s.date} {s.start_time}-{s.end_time}')


@main.command()
@click.argument('source')
@click.argument('targets', nargs=-1, required=True)
@click.pass_obj
def copy(board: ScheduleBoard, source: str, targets: List[str]):
    """
    Copy the schedules of SOURCE into each of TARGETS.

    Behaves like copy-mode clicks: a target that already has schedules
    becomes the new source instead of receiving a copy.
    """
    try:
        board.set_mode(Mode.COPY)
        outcome = board.on_cell_click(source)
        if outcome.action != 'captured':
            _fail(f'Nothing to copy on {outcome.date}.')
        click.echo(f'Captured {len(outcome.schedules)} schedules from {outcome.date}')
        for target in targets:
            outcome = board.on_cell_click(target)
            if outcome.action == 'pasted':
                click.echo(f'Pasted {len(outcome.schedules)} schedules into {outcome.date}')
            else:
                click.echo(f'Captured {len(outcome.schedules)} schedules from {outcome.date}')
    except (ScheduleBoardError, ValueError) as e:
        _fail(str(e))


@main.command()
@click.argument('days', nargs=-1, required=True)
@click.pass_obj
def delete(board: ScheduleBoard, days: List[str]):
    """
    Delete every schedule of each of DAYS.

    Each day with schedules becomes one undo step, kept in the store file
    and restored by the undo command.
    """
    try:
        board.set_mode(Mode.DELETE)
        for day in days:
            outcome = board.on_cell_click(day)
            if outcome.action == 'deleted':
                click.echo(f'Deleted {len(outcome.schedules)} schedules on {outcome.date}')
            else:
                click.echo(f'No schedules on {outcome.date}')
    except (ScheduleBoardError, ValueError) as e:
        _fail(str(e))


@main.command()
@click.pass_obj
def undo(board: ScheduleBoard):
    """Restore the schedules removed by the latest delete."""
    if board.undo_depth == 0:
        click.echo('Nothing to undo.')
        return
    try:
        restored = board.undo()
    except ScheduleBoardError as e:
        _fail(str(e))
    click.echo(f'Restored {len(restored)} schedules ({board.undo_depth} more to undo)')


@main.command()
@click.argument('year', type=int)
@click.argument('month', type=click.IntRange(1, 12))
@click.option('-o', '--out', 'out_path', type=click.Path(dir_okay=False), default=None,
              help='Destination .xlsx file (default: YYYY-MM_일정관리.xlsx)')
@click.pass_obj
def export(board: ScheduleBoard, year: int, month: int, out_path: Optional[str]):
    """Export the schedules of one month to an .xlsx file."""
    first = date(year, month, 1)
    target = out_path or default_export_name(first)
    try:
        written = board.write_month(first, target)
    except ScheduleBoardError as e:
        _fail(str(e))
    if written is None:
        click.echo(f'No schedules in {first:%Y-%m}, nothing to export.')
        return
    click.echo(f'Exported {len(board.export_month(first))} schedules to {target}')


@main.command('import')
@click.argument('path', type=click.Path(exists=True, dir_okay=False))
@click.option('--overwrite', is_flag=True, help='Replace every existing schedule instead of appending')
@click.pass_obj
def import_(board: ScheduleBoard, path: str, overwrite: bool):
    """Import schedules from an .xlsx / .xls file."""
    mode = ImportMode.OVERWRITE if overwrite else ImportMode.APPEND
    try:
        imported = board.import_file(path, mode)
    except ScheduleBoardError as e:
        _fail(str(e))
    click.echo(f'Imported {len(imported)} schedules ({mode.value})')


if __name__ == '__main__':
    main()
