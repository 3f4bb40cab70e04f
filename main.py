#!/usr/bin/env python3
"""mappergen - Go struct mapper generator entry point."""
import logging

import click
from colorama import Fore, Style, init

from config import app_settings
from mappergen import __version__
from mappergen.exceptions import MapperGenError
from mappergen.generator import MapperGenerator

# Initialize colorama
init(autoreset=True)


def print_banner():
    """Print application banner."""
    click.echo(f"{Fore.CYAN}{'=' * 44}")
    click.echo(f"{Fore.CYAN}║   {Fore.WHITE}mappergen{Fore.CYAN}                            ║")
    click.echo(f"{Fore.CYAN}║   {Fore.WHITE}Go struct mapper generator{Fore.CYAN}           ║")
    click.echo(f"{Fore.CYAN}{'=' * 44}{Style.RESET_ALL}")
    click.echo()


def setup_logging(verbose: bool):
    """Configure root logging from settings or --verbose."""
    level = logging.DEBUG if verbose else getattr(logging, app_settings.log_level, logging.WARNING)
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")


@click.group()
@click.version_option(version=__version__)
def cli():
    """mappergen - generate field-by-field mappers between Go structs."""
    pass


@cli.command()
@click.option(
    "-c",
    "--config",
    "config_path",
    default=app_settings.config_path,
    show_default=True,
    help="Mapping configuration file",
)
@click.option(
    "-o",
    "--out",
    "out_path",
    default=app_settings.out_path,
    show_default=True,
    help="Generated Go file",
)
@click.option("--plan-json", type=click.Path(), help="Also dump resolved plans as JSON")
@click.option("--timestamp", is_flag=True, default=app_settings.timestamp, help="Add generation time to the header")
@click.option("-v", "--verbose", is_flag=True, help="Debug logging")
@click.option("-q", "--quiet", is_flag=True, help="Only print errors")
@click.pass_context
def generate(ctx, config_path, out_path, plan_json, timestamp, verbose, quiet):
    """Generate mappers from a configuration file."""
    setup_logging(verbose)
    if not quiet:
        print_banner()

    generator = MapperGenerator(gopath=app_settings.gopath, timestamp=timestamp)

    try:
        result = generator.generate(config_path, out_path, plan_json=plan_json)
    except MapperGenError as e:
        click.echo(f"{Fore.RED}❌ {e}", err=True)
        ctx.exit(1)

    if quiet:
        return

    for warning in result.warnings:
        click.echo(f"{Fore.YELLOW}⚠ {warning}")

    click.echo(f"{Fore.GREEN}✅ Generated {len(result.plans)} mappers into {out_path}")
    click.echo(f"{Fore.GREEN}   Fields mapped: {result.resolved_count}")
    if result.unresolved_count:
        click.echo(f"{Fore.YELLOW}   Fields left as comments: {result.unresolved_count}")


@cli.command()
@click.option(
    "-c",
    "--config",
    "config_path",
    default=app_settings.config_path,
    show_default=True,
    help="Mapping configuration file",
)
@click.option("-v", "--verbose", is_flag=True, help="Debug logging")
@click.pass_context
def plan(ctx, config_path, verbose):
    """Show how every destination field would be mapped, without writing."""
    setup_logging(verbose)

    generator = MapperGenerator(gopath=app_settings.gopath)
    try:
        _, plans, _ = generator.plan(config_path)
    except MapperGenError as e:
        click.echo(f"{Fore.RED}❌ {e}", err=True)
        ctx.exit(1)

    for mapping_plan in plans:
        spec = mapping_plan.spec
        sources = ", ".join(f"{b.alias} {b.struct.display_name}" for b in spec.sources)
        click.echo(f"\n{Fore.CYAN}{spec.mapper_name}{Style.RESET_ALL}"
                   f"({sources}) -> {spec.destination.struct.display_name}")

        for rule in mapping_plan.rules:
            if not rule.resolved:
                click.echo(f"  {Fore.YELLOW}{rule.dest_field:<20} unmapped: {rule.reason}")
                continue
            guard = f" [nil check {rule.source_reference}]" if rule.source_is_pointer and rule.has_provenance else ""
            origin = "relation" if rule.manual else "auto"
            click.echo(f"  {Fore.GREEN}{rule.dest_field:<20}{Style.RESET_ALL} "
                       f"= {rule.expression}  ({origin}){guard}")

        for warning in mapping_plan.warnings:
            click.echo(f"  {Fore.YELLOW}⚠ {warning}")


if __name__ == "__main__":
    cli()
