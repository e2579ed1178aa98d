"""Operation-specific Rich renderers for ServiceResult.

Each renderer writes to a Rich Console (backed by StringIO). The caller
extracts the rendered text via ``get_output(console)``.

Renderers are dispatched by ``result.op`` in :func:`render_result`.
Unknown ops fall through to a generic key-value renderer.
"""

from __future__ import annotations

import json as _json
from typing import TYPE_CHECKING, Any

from rich.table import Table
from rich.text import Text

from profsplit.output.console import create_console, get_output, style_for_action, style_for_mode

if TYPE_CHECKING:
    from rich.console import Console

    from profsplit.services.result import ServiceResult


# ── Public API ────────────────────────────────────────────────────────


def render_result(result: ServiceResult, *, verbose: bool = False) -> str:
    """Render a ServiceResult to a styled string via Rich.

    Returns plain text (no ANSI) when Rich detects no terminal,
    which is the case inside Click's CliRunner and piped output.
    """
    console = create_console()

    if result.ok:
        renderer = _OP_RENDERERS.get(result.op, _render_generic)
        renderer(result, console, verbose=verbose)
    else:
        _render_error(result, console, verbose=verbose)

    return get_output(console).rstrip("\n")


def render_quiet(result: ServiceResult) -> str:
    """Render minimal output for ``--quiet`` mode."""
    if not result.ok:
        msg = result.error.message if result.error else "Unknown error"
        return f"ERROR: {result.op} — {msg}"

    if result.op == "migrate":
        d = result.data
        return f"OK: migrate {len(d.get('succeeded', []))} ok, {len(d.get('failed', []))} failed"

    items = result.data.get("items")
    if items and isinstance(items, list):
        return "\n".join(
            str(item["id"]) for item in items if isinstance(item, dict) and "id" in item
        )

    return f"OK: {result.op}"


# ── Helpers ───────────────────────────────────────────────────────────


def _status_line(console: Console, result: ServiceResult) -> None:
    """Print the OK/ERROR status line."""
    label = Text("OK", style="ps.ok")
    op = Text(f"  {result.op}", style="ps.op")
    console.print(label, op, end="")
    console.print()


def _field(console: Console, key: str, value: Any) -> None:
    """Print a single indented key-value field."""
    k = Text(f"  {key}: ", style="ps.key")
    if key == "id" or key.endswith("_id"):
        v = Text(str(value), style="ps.id")
    elif key.endswith("path"):
        v = Text(str(value), style="ps.path")
    elif key == "label":
        v = Text(str(value), style="ps.label")
    elif key == "mode":
        v = Text(str(value), style=style_for_mode(str(value)))
    else:
        v = Text(str(value))
    console.print(k, v, end="")
    console.print()


def _ids(values: list[int], limit: int = 20) -> str:
    shown = ", ".join(str(v) for v in values[:limit])
    if len(values) > limit:
        shown += f", … (+{len(values) - limit})"
    return shown or "-"


def _render_meta(console: Console, result: ServiceResult) -> None:
    """Print meta block including telemetry span tree (verbose only)."""
    if not result.meta:
        return

    console.print()
    console.print(Text("  meta:", style="dim"))

    for k, v in result.meta.items():
        if k == "telemetry":
            _render_telemetry_tree(console, v, indent=4)
        else:
            console.print(f"    {k}: {v}")


def _render_telemetry_tree(
    console: Console,
    span_data: dict[str, Any],
    indent: int = 4,
) -> None:
    """Render a hierarchical span tree with color-coded timing."""
    prefix = " " * indent
    name = span_data.get("name", "?")
    duration = span_data.get("duration_ms", 0.0)

    if duration > 1000:
        style = "bold red"
    elif duration > 100:
        style = "yellow"
    else:
        style = "dim"

    line = f"{prefix}[{style}]{duration:>8.2f}ms[/{style}]  {name}"
    details = {**(span_data.get("annotations") or {}), **(span_data.get("counters") or {})}
    if details:
        line += f"  ({', '.join(f'{k}={v}' for k, v in details.items())})"
    console.print(line)

    for child in span_data.get("children", []):
        _render_telemetry_tree(console, child, indent=indent + 4)


# ── Error renderer ────────────────────────────────────────────────────


def _render_error(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    err = result.error
    msg = err.message if err else "Unknown error"
    label = Text("ERROR", style="ps.error")
    op = Text(f"  {result.op}", style="ps.op")
    code = Text(f" [{err.code}]", style="ps.key") if err else Text("")
    console.print(label, op, code, Text(" — "), msg)

    if err and err.code == "PARTIAL_MIGRATION":
        report = err.detail.get("report", {})
        _render_failures(console, report.get("failed", []))

    if verbose and err and err.detail:
        console.print(Text("  detail:", style="dim"))
        for k, v in err.detail.items():
            console.print(f"    {k}: {v}")


# ── Migration renderers ───────────────────────────────────────────────


def _render_failures(console: Console, failed: list[dict[str, Any]]) -> None:
    if not failed:
        return
    table = Table(show_header=True, show_lines=False, pad_edge=False, expand=False)
    table.add_column("Order", style="ps.id", no_wrap=True)
    table.add_column("Code", style="ps.error")
    table.add_column("Message")
    for f in failed:
        table.add_row(str(f.get("order_id", "")), str(f.get("code", "")), str(f.get("message", "")))
    console.print()
    console.print(table)


def _render_migrate(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    """Render a migration report."""
    d = result.data
    _status_line(console, result)
    if d.get("dry_run"):
        console.print(Text("  dry run — nothing was written", style="ps.warning"))
    _field(console, "order_type", d.get("order_type", ""))
    succeeded = d.get("succeeded", [])
    failed = d.get("failed", [])
    _field(console, "succeeded", len(succeeded))
    _field(console, "failed", len(failed))
    _field(console, "created_profiles", len(d.get("created_profiles", [])))
    _field(console, "repointed_shipments", len(d.get("repointed_shipments", [])))
    _field(console, "writes", d.get("writes", 0))
    _field(console, "chunks", d.get("chunks", 0))
    if d.get("backup_path"):
        _field(console, "backup_path", d["backup_path"])
    if verbose:
        _field(console, "succeeded_ids", _ids(succeeded))
        _field(console, "created_ids", _ids(d.get("created_profiles", [])))
    _render_failures(console, failed)
    if verbose:
        _render_meta(console, result)


def _render_plan(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    """Render one order's plan as a step table."""
    d = result.data
    console.print(
        f"Plan for order [ps.id]{d.get('order_id')}[/ps.id] "
        f"({d.get('order_type')}: {d.get('target_billing')} / {d.get('target_shipping')})"
    )
    action = str(d.get("billing_action", "noop"))
    style = style_for_action(action)
    label = d.get("billing_label") or ""
    console.print(
        Text.assemble(
            "  billing profile ",
            (str(d.get("billing_profile_id") or "-"), "ps.id"),
            f" {label}  ",
            (action, style),
        )
    )

    steps = d.get("steps", [])
    if steps:
        table = Table(show_header=True, show_lines=False, pad_edge=False, expand=False)
        table.add_column("Shipment", style="ps.id", no_wrap=True)
        table.add_column("Profile", style="ps.id")
        table.add_column("Category")
        table.add_column("Action")
        table.add_column("Label", style="ps.label")
        if verbose:
            table.add_column("Reason", style="dim")
        for step in steps:
            step_action = str(step.get("action", ""))
            row: list[Any] = [
                str(step.get("shipment_id", "")),
                str(step.get("shipping_profile_id") or "-"),
                str(step.get("current_category") or "-"),
                Text(step_action, style=style_for_action(step_action)),
                str(step.get("label") or ""),
            ]
            if verbose:
                row.append(str(step.get("reason", "")))
            table.add_row(*row)
        console.print(table)

    if d.get("is_noop"):
        console.print("\nNothing to do.")
    else:
        console.print(f"\n{d.get('duplicates', 0)} duplicate(s) would be created")


def _render_provision(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    d = result.data
    _status_line(console, result)
    _field(console, "source", d.get("source", ""))
    for entry in d.get("types", []):
        state = "created" if entry.get("created") else "exists"
        console.print(f"  [ps.label]{entry.get('profile_type')}[/ps.label] ({state})")
        if entry.get("fields_copied"):
            console.print(f"    fields: {', '.join(entry['fields_copied'])}")
        if entry.get("displays_synced"):
            console.print(f"    displays: {', '.join(entry['displays_synced'])}")
    _field(console, "writes", d.get("writes", 0))
    if verbose:
        _render_meta(console, result)


# ── Order type renderers ──────────────────────────────────────────────


def _render_order_type(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    d = result.data
    _status_line(console, result)
    for key in ("id", "label", "mode", "billing_category", "shipping_category", "order_count"):
        if key in d:
            _field(console, key, d[key])
    if d.get("split_enabled_at"):
        _field(console, "split_enabled_at", d["split_enabled_at"])
    console.print(f"  {d.get('description', '')}")
    if not d.get("can_enable_split", True):
        console.print(Text("  Split profiles are enabled; this cannot be undone.", style="dim"))


def _render_order_types(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    items = result.data.get("items", [])
    table = Table(show_header=True, show_lines=False, pad_edge=False, expand=False)
    table.add_column("ID", style="ps.id", no_wrap=True)
    table.add_column("Label", style="ps.label")
    table.add_column("Mode")
    table.add_column("Orders", justify="right")
    if verbose:
        table.add_column("Split Enabled", style="dim")
    for item in items:
        mode = str(item.get("mode", ""))
        row: list[Any] = [
            str(item.get("id", "")),
            str(item.get("label", "")),
            Text(mode, style=style_for_mode(mode)),
            str(item.get("order_count", 0)),
        ]
        if verbose:
            row.append(str(item.get("split_enabled_at") or ""))
        table.add_row(*row)
    console.print(table)
    console.print(f"\n{result.data.get('count', len(items))} order types")


def _render_enable_split(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    d = result.data
    _status_line(console, result)
    _field(console, "order_type", d.get("order_type", ""))
    _field(console, "mode", d.get("mode", ""))
    _field(console, "split_enabled_at", d.get("split_enabled_at", ""))
    report = d.get("migration", {})
    _field(console, "migrated", len(report.get("succeeded", [])))
    _field(console, "created_profiles", len(report.get("created_profiles", [])))
    if d.get("partial"):
        console.print(Text("  accepted a partial migration", style="ps.warning"))
        _render_failures(console, report.get("failed", []))
    if verbose:
        _render_meta(console, result)


# ── Analysis renderers ────────────────────────────────────────────────


def _render_analyze(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    d = result.data
    console.print(f"Fan-out analysis for [ps.label]{d.get('order_type')}[/ps.label]")
    _field(console, "orders", d.get("order_count", 0))
    _field(console, "shared_identities", len(d.get("shared_identities", [])))
    _field(console, "cross_order_profiles", len(d.get("cross_order_profiles", [])))
    _field(console, "ownership_conflicts", len(d.get("ownership_conflicts", [])))
    _field(console, "expected_duplicates", d.get("expected_duplicates", 0))
    _field(console, "groups", d.get("group_count", 0))
    _field(console, "disjoint", d.get("disjoint", False))

    conflicts = d.get("ownership_conflicts", [])
    if conflicts:
        table = Table(show_header=True, show_lines=False, pad_edge=False, expand=False)
        table.add_column("Profile", style="ps.id", no_wrap=True)
        table.add_column("Billing Orders")
        table.add_column("Shipping Orders")
        for c in conflicts:
            table.add_row(
                str(c["profile_id"]),
                _ids(c.get("billing_orders", [])),
                _ids(c.get("shipping_orders", [])),
            )
        console.print()
        console.print(table)

    if verbose:
        for group in d.get("groups", []):
            if len(group) > 1:
                console.print(f"  group: {_ids(group)}")


def _render_verify(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    """Render verification issues grouped by category."""
    issues = result.data.get("issues", [])
    count = result.data.get("count", len(issues))

    if count == 0:
        console.print("[ps.ok]OK[/ps.ok]  No issues found.")
        return

    severity_styles = {"error": "ps.error", "warning": "ps.warning"}

    by_category: dict[str, list[dict[str, Any]]] = {}
    for issue in issues:
        by_category.setdefault(str(issue.get("category", "unknown")), []).append(issue)

    for cat, cat_issues in by_category.items():
        console.print(f"\n[bold]{cat}[/bold]")
        for issue in cat_issues:
            sev = str(issue.get("severity", "warning"))
            style = severity_styles.get(sev, "")
            prefix = f"[{style}]{sev}[/{style}]" if style else sev
            console.print(f"  {prefix}: {issue.get('message', '')}")

    errors = result.data.get("error_count", 0)
    warnings = result.data.get("warning_count", count - errors)
    console.print(f"\n{errors} errors, {warnings} warnings")


# ── Upgrade renderers ────────────────────────────────────────────────


def _render_upgrade(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    """Render upgrade/migration results."""
    _status_line(console, result)
    d = result.data
    for key in ("applied_count", "pending_count", "current", "head", "backup_path", "message"):
        if key in d:
            _field(console, key, d[key])
    if verbose and d.get("pending"):
        console.print()
        for p in d["pending"]:
            console.print(f"  {p['revision']}: {p['description']}")


# ── Generic fallback ──────────────────────────────────────────────────


def _render_generic(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    """Fallback renderer: status line + all data as key-value pairs."""
    _status_line(console, result)
    for key, value in result.data.items():
        if isinstance(value, (dict, list)):
            _field(console, key, _json.dumps(value, separators=(",", ":")))
        else:
            _field(console, key, value)
    if verbose:
        _render_meta(console, result)


# ── Dispatch table ────────────────────────────────────────────────────

_OP_RENDERERS: dict[str, Any] = {
    # Migration
    "migrate": _render_migrate,
    "plan": _render_plan,
    "provision": _render_provision,
    # Order types
    "show_order_type": _render_order_type,
    "list_order_types": _render_order_types,
    "enable_split": _render_enable_split,
    # Analysis
    "analyze": _render_analyze,
    "verify": _render_verify,
    # Upgrade
    "upgrade": _render_upgrade,
}
