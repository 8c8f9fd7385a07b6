import time
from datetime import datetime

import click
from rich.console import Console
from rich.live import Live
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from station.constants import WEEKDAYS, STATION_NAME, MAX_STREAM_RETRIES
from station.log import setup_logging
from station.models import PlayerContent, PlaybackState
from player.audio_service import AudioService, PLATFORM_NATIVE
from player.catalog import ShowDirectory, EpisodeCatalog
from player.client import IndigoClient, ApiError
from player.player_context import PlayerContext
from player.remote_control import RemoteControl
from player.schedule import ProgrammeSchedule
from player.universal_player import UniversalPlayer, format_time

console = Console()


def _fail(message: str):
    console.print(f"[red]{message}[/red]")
    raise SystemExit(1)


@click.group()
@click.option('--api-url', envvar='INDIGO_API_URL', default=None, help="Station API base URL.")
@click.option('--debug', is_flag=True, help="Verbose logging.")
@click.pass_context
def cli(ctx, api_url, debug):
    """📻 Indigo FM"""
    setup_logging(debug)
    ctx.obj = IndigoClient(base_url=api_url)


@cli.command()
@click.option('--day', type=click.Choice(WEEKDAYS, case_sensitive=False), default=None,
              help="Weekday to show (defaults to today).")
@click.pass_obj
def schedule(client, day):
    """Show the programme schedule for a day."""
    try:
        programmes = ProgrammeSchedule(client.get_programmes())
    except ApiError as e:
        _fail(e.message)

    entries = programmes.for_day(day) if day else programmes.today()
    title_day = (day or WEEKDAYS[datetime.now().weekday()]).capitalize()
    if not entries:
        console.print(f"[yellow]Nothing scheduled on {title_day}.[/yellow]")
        return

    table = Table(title=f"{STATION_NAME} - {title_day}")
    table.add_column("Start", style="cyan", no_wrap=True)
    table.add_column("End", style="cyan", no_wrap=True)
    table.add_column("Programme", style="bold white")
    table.add_column("Host", style="green")
    for p in entries:
        table.add_row(p.start_time, p.end_time, p.name, p.host or "")
    console.print(table)


@cli.command()
@click.pass_obj
def now(client):
    """What is on air right now."""
    try:
        schedule = ProgrammeSchedule(client.get_programmes())
    except ApiError as e:
        _fail(e.message)

    current = schedule.current()
    if not current:
        console.print(f"[yellow]No scheduled programme right now. {STATION_NAME} Live is on air.[/yellow]")
    else:
        console.print(Panel.fit(
            f"[bold]{current.name}[/bold]\n"
            f"[cyan]{current.start_time} - {current.end_time}[/cyan]"
            + (f"\nHosted by {current.host}" if current.host else ""),
            title="On Air"
        ))

    upcoming = schedule.next()
    if upcoming:
        console.print(f"Up next: [bold]{upcoming.name}[/bold] ({upcoming.day.capitalize()} {upcoming.start_time})")


@cli.command()
@click.option('--search', default=None, help="Filter by name or description.")
@click.option('--genre', default=None, help="Filter by genre.")
@click.pass_obj
def shows(client, search, genre):
    """List the show directory."""
    try:
        definitions = client.get_show_definitions(search=search, genre=genre)
    except ApiError as e:
        _fail(e.message)

    if not definitions:
        console.print("[yellow]No shows found.[/yellow]")
        return

    table = Table(title=f"Shows ({len(definitions)})")
    table.add_column("ID", style="cyan", no_wrap=True)
    table.add_column("Name", style="bold white")
    table.add_column("Frequency", style="yellow")
    table.add_column("Hosts", style="green")
    table.add_column("Genres", style="magenta")
    for s in definitions:
        table.add_row(s.show_id, s.name, s.frequency or "", ", ".join(s.hosts), ", ".join(s.genres))
    console.print(table)


@cli.command()
@click.option('--show', 'show_name', default=None, help="Only episodes of this show.")
@click.option('--search', default=None, help="Search titles, descriptions and shows.")
@click.pass_obj
def episodes(client, show_name, search):
    """List podcast episodes."""
    try:
        catalog = EpisodeCatalog(client.get_podcast_episodes())
    except ApiError as e:
        _fail(e.message)

    items = catalog.episodes
    if show_name:
        items = catalog.for_show(show_name)
    if search:
        items = EpisodeCatalog(items).search(search)

    if not items:
        console.print("[yellow]No episodes found.[/yellow]")
        return

    table = Table(title=f"Podcasts ({len(items)} episodes)")
    table.add_column("ID", style="cyan", no_wrap=True)
    table.add_column("Show", style="green")
    table.add_column("Title", style="bold white")
    for e in items:
        table.add_row(e.id, e.show, e.title)
    console.print(table)


@cli.command(name='radio-address')
@click.pass_obj
def radio_address(client):
    """Show the live stream address."""
    address = client.get_radio_address()
    console.print(f"[bold]{address}[/bold]")
    if client.last_error:
        console.print(f"[yellow]{client.last_error}[/yellow]")


def _run_player(client, content: PlayerContent):
    """Play content through the native engine until it stops or Ctrl+C."""
    audio = AudioService(PLATFORM_NATIVE)
    try:
        engine = audio.engine
    except OSError as e:
        _fail(f"Missing system dependency libmpv: {e}")

    RemoteControl(engine)
    context = PlayerContext()
    try:
        directory = ShowDirectory(client.get_show_definitions())
    except ApiError:
        directory = ShowDirectory()

    player = UniversalPlayer(
        context, audio,
        shows=directory,
        stream_url=client.get_radio_address(),
    )
    context.set_current_content(content)
    context.set_player_visible(True)

    data = player.content_data()
    console.clear()
    console.print(f"[bold green]{data.icon} {data.title}[/bold green]")
    console.print(f"[cyan]{data.subtitle}[/cyan]")

    retries = 0
    try:
        with Live(refresh_per_second=4) as live:
            while True:
                state = engine.get_state()
                if player.stream_error:
                    # retry_stream() resets its counter on success, so cap here too
                    if retries < MAX_STREAM_RETRIES and player.retry_stream():
                        retries += 1
                        continue
                    live.update(Panel(Text(player.stream_error, style="red"), title="Error"))
                    break
                if state == PlaybackState.STOPPED:
                    break

                position, duration = player.progress()
                status = Text()
                status.append(f"{format_time(position)} ", style="cyan")
                if content.is_live:
                    status.append("LIVE", style="bold red")
                else:
                    percent = min(100, (position / duration) * 100) if duration else 0
                    status.append("━" * int(percent / 2), style="blue")
                    status.append(" " * (50 - int(percent / 2)), style="gray")
                    status.append(f" {format_time(duration)}", style="cyan")
                if state == PlaybackState.BUFFERING or player.is_loading:
                    status.append("  buffering...", style="yellow")

                live.update(Panel(status, title="Now Playing"))
                time.sleep(0.25)
    except KeyboardInterrupt:
        console.print("\n[yellow]Stopped.[/yellow]")
    finally:
        engine.stop()
        player.close()
        engine.terminate()


@cli.command()
@click.pass_obj
def live(client):
    """Listen to the live stream."""
    try:
        programme = ProgrammeSchedule(client.get_programmes()).current()
    except ApiError:
        programme = None
    _run_player(client, PlayerContent.live(programme))


@cli.command()
@click.argument('episode_id')
@click.pass_obj
def play(client, episode_id):
    """Play a podcast episode by ID."""
    try:
        catalog = EpisodeCatalog(client.get_podcast_episodes())
    except ApiError as e:
        _fail(e.message)

    episode = catalog.find_by_id(episode_id)
    if not episode:
        _fail(f"Episode {episode_id} not found.")
    _run_player(client, PlayerContent.podcast(episode))


if __name__ == '__main__':
    cli()
