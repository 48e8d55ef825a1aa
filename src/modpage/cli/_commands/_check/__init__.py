# pyright: reportUnusedCallResult=false
"""Check that layouts and modules compile."""

from cyclopts import App
from rich.table import Table
from rich.text import Text

from modpage.cli._commands._shared import ExitCode, exit_with_error
from modpage.cli._context import CLIContext
from modpage.composition import BuildReport, Site
from modpage.exceptions import TemplateError

app = App(
    name="check", help="Build all templates and report problems", help_on_error=True
)


def report_table(site: Site, report: BuildReport) -> Table:
    table = Table(title="Modules")
    table.add_column("Module")
    table.add_column("Slug")
    table.add_column("Status")
    table.add_column("Detail", overflow="fold")

    for module in site.modules:
        if module.id in report.failed:
            status, detail = "[red]failed[/red]", report.failed[module.id]
        elif module.id in report.skipped:
            status, detail = "[dim]inactive[/dim]", ""
        else:
            status, detail = "[green]ok[/green]", ""
        table.add_row(module.id, module.slug, status, Text(detail))
    return table


@app.default
def check() -> None:
    """Load layouts, build every active module and check slugs are unique.

    Exits with code 2 when any module fails to build or two active modules
    share a slug.
    """
    ctx = CLIContext.get_current()
    try:
        site = Site.from_config(ctx.config, logger=ctx.logger)
    except TemplateError as e:
        exit_with_error(str(e), ExitCode.LOAD_ERROR, console=ctx.error_console)

    report = site.initialize()
    ctx.console.print(f"Layout blocks: {', '.join(site.base_set.names())}")
    ctx.console.print(report_table(site, report))

    duplicates = site.duplicate_slugs()
    for slug, ids in sorted(duplicates.items()):
        ctx.error_console.print(
            f"[red]Duplicate slug[/red] {slug!r}: {', '.join(ids)}", highlight=False
        )

    if report.failed or duplicates:
        raise SystemExit(ExitCode.VALIDATION_ERROR)
    ctx.console.print(
        f"[green]OK[/green]: {len(report.built)} built, {len(report.skipped)} inactive"
    )
