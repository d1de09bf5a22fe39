"""Prometheus text exposition of rollup results."""

from dataclasses import dataclass

from makogc.rollup.models import RollupResult

METRIC_PREFIX = "mako_"


@dataclass(frozen=True, slots=True)
class GaugeFamily:
    """A gauge with its help text and rendered samples."""

    name: str
    help: str
    samples: list[tuple[dict[str, str], int]]

    def render(self) -> list[str]:
        lines = [f"# HELP {self.name} {self.help}", f"# TYPE {self.name} gauge"]
        for labels, value in self.samples:
            lines.append(f"{self.name}{_format_labels(labels)} {value}")
        return lines


def _escape_label_value(value: str) -> str:
    return value.replace("\\", "\\\\").replace("\n", "\\n").replace('"', '\\"')


def _format_labels(labels: dict[str, str]) -> str:
    if not labels:
        return ""
    inner = ",".join(f'{k}="{_escape_label_value(v)}"' for k, v in labels.items())
    return "{" + inner + "}"


def build_families(result: RollupResult, prefix: str = METRIC_PREFIX) -> list[GaugeFamily]:
    """Build the gauge families for a rollup result.

    Durations and timestamps are truncated to whole seconds.
    """
    accounts = result.accounts
    return [
        GaugeFamily(
            name=f"{prefix}used_bytes",
            help="The current number of bytes used on a mako",
            samples=[({"account": a}, u.bytes) for a, u in accounts.items()],
        ),
        GaugeFamily(
            name=f"{prefix}object_count",
            help="The current number of objects on a mako",
            samples=[({"account": a}, u.objects) for a, u in accounts.items()],
        ),
        GaugeFamily(
            name=f"{prefix}rollup_duration_seconds",
            help="Duration in seconds of the mako rollup process",
            samples=[({}, int(result.duration_seconds))],
        ),
        GaugeFamily(
            name=f"{prefix}rollup_last_run_time",
            help="Last run of the mako rollup process expressed as a UNIX timestamp",
            samples=[({}, int(result.completed_at))],
        ),
    ]


def render_metrics(result: RollupResult, prefix: str = METRIC_PREFIX) -> str:
    """Render a rollup result as a newline-terminated exposition document."""
    lines: list[str] = []
    for family in build_families(result, prefix):
        lines.extend(family.render())
    return "\n".join(lines) + "\n"
