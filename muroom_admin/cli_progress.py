"""Console rendering and progress helpers for the muroom-admin CLI."""
from __future__ import annotations

import time
from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from .models import UploadItem, UploadState
from .schemas import FilterOptions, NearbyStations, StudioDetail, StudioPage, TermContent, TermItem
from .utils.events import ITEM_COMPLETE, ITEM_FAIL, ITEM_START, EventEmitter

console = Console()

_STATE_STYLES = {
    UploadState.PENDING: "dim",
    UploadState.IN_FLIGHT: "cyan",
    UploadState.SUCCEEDED: "green",
    UploadState.FAILED: "red",
}


def _echo(message: str) -> None:
    console.print(message)


def _human_size(value: int) -> str:
    size = float(max(value, 0))
    units = ["B", "KB", "MB", "GB", "TB"]
    unit_idx = 0
    while size >= 1024.0 and unit_idx < len(units) - 1:
        size /= 1024.0
        unit_idx += 1
    if unit_idx == 0:
        return f"{int(size)} {units[unit_idx]}"
    return f"{size:.2f} {units[unit_idx]}"


def format_price(price: Optional[int]) -> str:
    if price is None:
        return "-"
    return f"{price:,}원"


def format_datetime(value: Optional[datetime]) -> str:
    if value is None:
        return "-"
    return value.strftime("%Y-%m-%d %H:%M")


def _yes_no(value: Optional[bool]) -> str:
    if value is None:
        return "-"
    return "yes" if value else "no"


def _code(value: Any) -> str:
    if value is None:
        return "-"
    return getattr(value, "description", None) or str(value)


def render_configuration_summary(config: Dict[str, Any]) -> None:
    """Render startup configuration summary."""
    table = Table.grid(padding=(0, 2))
    table.add_column(style="bold cyan", justify="right")
    table.add_column(style="white")

    for key, value in config.items():
        rendered = "-" if value is None else str(value)
        table.add_row(key, rendered)

    panel = Panel(
        table,
        title="[bold green]muroom-admin[/bold green]",
        subtitle="[dim]studio admin CLI[/dim]",
        border_style="blue",
    )
    console.print(panel)


def render_problems(title: str, problems: Iterable[str]) -> None:
    _echo(f"[red]{title}[/red]")
    for problem in problems:
        _echo(f"  [red]-[/red] {escape(problem)}")


def render_filter_options(options: FilterOptions) -> None:
    groups = {
        "Floor": options.floor_options,
        "Restroom": options.restroom_options,
        "Parking fee": options.parking_fee_options,
        "Common options": options.studio_common_options,
        "Individual options": options.studio_individual_options,
        "Forbidden instruments": options.unavailable_instrument_options,
    }
    for title, items in groups.items():
        table = Table(title=title, title_justify="left")
        table.add_column("Code", style="bold cyan")
        table.add_column("Description")
        for item in items:
            table.add_row(item.code, item.description)
        console.print(table)


def render_stations(result: NearbyStations) -> None:
    if not result.stations:
        _echo("[yellow]No nearby stations found.[/yellow]")
        return
    table = Table(title="Nearby stations", title_justify="left")
    table.add_column("ID", justify="right", style="bold cyan")
    table.add_column("Station")
    table.add_column("Lines")
    table.add_column("Distance", justify="right")
    for station in result.stations:
        distance = f"{station.distance_meters:.0f} m" if station.distance_meters is not None else "-"
        table.add_row(
            str(station.station_id),
            station.station_name,
            ", ".join(line.line_name for line in station.lines) or "-",
            distance,
        )
    console.print(table)


def render_studio_page(page: StudioPage) -> None:
    info = page.pagination
    table = Table(
        title=f"Studios (page {info.page_number + 1}/{max(info.total_pages, 1)}, {info.total_elements} total)",
        title_justify="left",
    )
    table.add_column("ID", justify="right", style="bold cyan")
    table.add_column("Name")
    table.add_column("Price")
    table.add_column("Nearest station")
    for studio in page.content:
        station = studio.nearby_subway_station_info
        if station is not None:
            walk = station.walking_time_minutes
            nearest = station.station_name + (f" ({walk} min)" if walk is not None else "")
        else:
            nearest = "-"
        table.add_row(
            str(studio.studio_id),
            studio.studio_name,
            f"{format_price(studio.min_price)} ~ {format_price(studio.max_price)}",
            nearest,
        )
    console.print(table)


def render_studio_detail(detail: StudioDetail) -> None:
    base = detail.studio_base_info
    building = detail.studio_building_info
    notice = detail.studio_notice

    summary = Table.grid(padding=(0, 2))
    summary.add_column(style="bold cyan", justify="right")
    summary.add_column()
    summary.add_row("Address", f"{base.road_name_address or base.lot_number_address or '-'} {base.detailed_address or ''}")
    summary.add_row("Price", f"{format_price(base.studio_min_price)} ~ {format_price(base.studio_max_price)}")
    summary.add_row("Deposit", format_price(base.deposit_amount))
    summary.add_row(
        "Stations",
        ", ".join(
            f"{s.station_name} ({s.walking_time_minutes} min)" if s.walking_time_minutes is not None else s.station_name
            for s in base.nearby_subway_stations
        ) or "-",
    )
    summary.add_row("Floor", f"{_code(building.floor_type)} {building.floor_number if building.floor_number is not None else ''}")
    summary.add_row("Restroom", f"{_code(building.restroom_location)} / {_code(building.restroom_gender)}")
    summary.add_row("Parking", f"{_code(building.parking_fee_type)} {building.parking_fee_info or ''}")
    summary.add_row("Lodging", _yes_no(building.is_lodging_available))
    summary.add_row("Fire insurance", _yes_no(building.has_fire_insurance))
    summary.add_row("Owner", f"{notice.owner_nickname or '-'} {notice.owner_phone_number or ''}")
    summary.add_row("Verified", _yes_no(notice.is_identity_verified))
    summary.add_row("Forbidden", ", ".join(detail.studio_forbidden_instruments.instruments) or "-")
    summary.add_row(
        "Options",
        ", ".join(o.description for o in detail.studio_options.common_options + detail.studio_options.individual_options) or "-",
    )
    console.print(Panel(summary, title=f"[bold]{base.studio_name}[/bold] #{base.studio_id}", border_style="blue"))

    rooms = Table(title="Rooms", title_justify="left")
    rooms.add_column("Name")
    rooms.add_column("Available")
    rooms.add_column("Size (mm)")
    rooms.add_column("Base price", justify="right")
    for room in detail.studio_rooms.rooms:
        size = f"{room.width_mm or '-'} x {room.height_mm or '-'}"
        available = _yes_no(room.is_available) + (f" from {room.available_at}" if room.available_at else "")
        rooms.add_row(room.room_name, available, size, format_price(room.room_base_price))
    console.print(rooms)

    images = detail.studio_images
    _echo(
        f"[dim]images: main={len(images.main_image_keys)} building={len(images.building_image_keys)} "
        f"room={len(images.room_image_keys)} blueprint={'1' if images.blueprint_image_key else '0'} "
        f"common={len(images.common_option_image_keys)} individual={len(images.individual_option_image_keys)}[/dim]"
    )


def render_terms(terms: List[TermItem]) -> None:
    if not terms:
        _echo("[yellow]No terms found.[/yellow]")
        return
    table = Table(title="Terms", title_justify="left")
    table.add_column("ID", justify="right", style="bold cyan")
    table.add_column("Type")
    table.add_column("Title")
    table.add_column("Version")
    table.add_column("Mandatory")
    table.add_column("Effective")
    for term in terms:
        table.add_row(
            str(term.term_id),
            term.code.description,
            term.title or "-",
            term.version,
            _yes_no(term.is_mandatory),
            format_datetime(term.effective_at),
        )
    console.print(table)


def render_term_content(term: TermContent) -> None:
    console.print(Panel(term.content, title=f"Terms #{term.term_id}", border_style="blue"))


def render_upload_report(items: Iterable[UploadItem]) -> None:
    """Per-file status table; failed files are listed with their own cause."""
    table = Table(title="Uploads", title_justify="left")
    table.add_column("File")
    table.add_column("Category")
    table.add_column("Size", justify="right")
    table.add_column("State")
    table.add_column("Key / error")
    for item in items:
        style = _STATE_STYLES[item.state]
        detail = item.assigned_key if item.succeeded else (item.error or "")
        table.add_row(
            escape(item.file.name),
            item.category.value,
            _human_size(item.file.size),
            f"[{style}]{item.state.value}[/{style}]",
            escape(detail or "-"),
        )
    console.print(table)


class UploadProgressDisplay:
    """Event-based timeline for coordinator uploads."""

    def __init__(self):
        self._stats: Dict[str, int] = {"started": 0, "uploaded": 0, "failed": 0}

    def attach(self, events: EventEmitter) -> None:
        events.on(ITEM_START, self.on_item_start)
        events.on(ITEM_COMPLETE, self.on_item_complete)
        events.on(ITEM_FAIL, self.on_item_fail)

    @property
    def stats(self) -> Dict[str, int]:
        return dict(self._stats)

    def _emit_timeline(self, status: str, item: UploadItem, detail: Optional[str] = None) -> None:
        stamp = time.strftime("%H:%M:%S")
        palette = {"DONE": "green", "FAIL": "red", "SEND": "cyan"}
        color = palette.get(status, "white")
        suffix = f" {escape(detail)}" if detail else ""
        _echo(
            f"[dim]{stamp}[/dim] [{color}]{status:<4}[/{color}] "
            f"{item.category.value}: {escape(item.file.name)} {_human_size(item.file.size)}{suffix}"
        )

    def on_item_start(self, item: UploadItem) -> None:
        self._stats["started"] += 1
        self._emit_timeline("SEND", item)

    def on_item_complete(self, item: UploadItem) -> None:
        self._stats["uploaded"] += 1
        self._emit_timeline("DONE", item)

    def on_item_fail(self, item: UploadItem) -> None:
        self._stats["failed"] += 1
        self._emit_timeline("FAIL", item, f"cause={item.error}")
