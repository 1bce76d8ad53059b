"""
Card payload builders.

Cards are built here and rendered by the channel adapter.
"""

from ..schemas.activities import Card, CardField
from ..services.device_queries import AverageReading, OccupancyReport, failure_note


def _format_state(value, unit) -> str:
    return f"{value}{unit or ''}"


def average_reading_card(report: AverageReading) -> Card:
    fields = [
        CardField(label=r.device.display_name, value=_format_state(r.state.value, r.state.unit))
        for r in report.result.succeeded
    ]
    fields += [CardField(label=f.device.display_name, value="unavailable") for f in report.result.failed]

    text = report.message
    note = failure_note(report.result)
    if note:
        text = f"{text}\n{note}"
    return Card(title=report.room.name, text=text, fields=fields)


def occupancy_card(report: OccupancyReport) -> Card:
    fields = [
        CardField(label=r.device.display_name, value=str(r.state.value))
        for r in report.result.succeeded
    ]
    text = report.message
    note = failure_note(report.result)
    if note:
        text = f"{text}\n{note}"
    return Card(title=report.room.name, text=text, fields=fields)
