# cli/main.py
import sys

import click
from rich import print
from rich.markup import escape
from rich.table import Table

from bench.throughput import BATCH_SIZE, ROUNDS, run_all
from util.storage import save_report
from watermarkset.errors import WatermarkError
from watermarkset.numeric import KINDS, kind_by_name
from watermarkset.wmset import BUCKET_BITS, WatermarkSet


@click.group()
def cli():
    """[bold green]Watermark Set CLI[/bold green] - seen-id tracking for mostly ordered streams"""
    pass


@cli.command()
def status():
    """Check current project and environment status"""
    print(f"[cyan]Watermark set:[/cyan] {BUCKET_BITS}-bit buckets, default kind int")
    print("[yellow]Modules:[/yellow] watermarkset/, sync/, bench/, util/, cli/")
    print(f"[green]Integer kinds:[/green] {', '.join(sorted(KINDS))}")


@cli.command()
@click.option("--batch", default=BATCH_SIZE, show_default=True, help="Ids inserted per round.")
@click.option("--rounds", default=ROUNDS, show_default=True, help="Fresh sets timed per case.")
@click.option("--out", "out_path", type=click.Path(dir_okay=False), default=None, help="Write results as JSON.")
def bench(batch, rounds, out_path):
    """Measure insert/contains throughput"""
    results = run_all(batch=batch, rounds=rounds)
    table = Table(title=f"WatermarkSet throughput (batch={batch}, rounds={rounds})")
    table.add_column("group")
    table.add_column("case")
    table.add_column("elements", justify="right")
    table.add_column("elements/sec", justify="right")
    for r in results:
        table.add_row(r.group, r.name, str(r.elements), f"{r.elements_per_sec:,.0f}")
    print(table)
    if out_path:
        save_report(out_path, [r.to_dict() for r in results])
        print(f"[green]wrote[/green] {out_path}")


@cli.command()
@click.argument("source", type=click.File("r"), default="-")
@click.option("--kind", default="int", show_default=True, help="Integer kind of the ids.")
@click.option("--start", default=0, show_default=True, help="Initial watermark.")
@click.option("--max-gap", default=None, type=int, help="Largest allowed distance above the watermark.")
def scan(source, kind, start, max_gap):
    """Feed whitespace separated ids from SOURCE (default stdin) into a set"""
    try:
        ws = WatermarkSet(start, kind=kind_by_name(kind), max_gap=max_gap)
    except (ValueError, TypeError) as e:
        raise click.BadParameter(str(e))

    total = dups = 0
    for lineno, line in enumerate(source, 1):
        for tok in line.split():
            try:
                elem = int(tok)
            except ValueError:
                print(f"[red]line {lineno}: not an integer: {escape(repr(tok))}[/red]")
                sys.exit(2)
            total += 1
            try:
                if ws.contains(elem):
                    dups += 1
                    continue
                ws.insert(elem)
            except (WatermarkError, TypeError) as e:
                print(f"[red]line {lineno}: {escape(str(e))}[/red]")
                sys.exit(1)

    stats = ws.stats()
    table = Table(title="scan")
    table.add_column("field")
    table.add_column("value", justify="right")
    for k in ("kind", "watermark", "buckets", "tracked", "size"):
        table.add_row(k, str(stats[k]))
    table.add_row("read", str(total))
    table.add_row("duplicates", str(dups))
    print(table)


if __name__ == "__main__":
    cli()
