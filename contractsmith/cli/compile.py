#!/usr/bin/env python3
"""
Contractsmith Compile CLI

Runs the compilation pipeline once, outside the HTTP service.

Usage:
    contractsmith-compile [--config FILE]
    contractsmith-compile --output-dir build/
    contractsmith-compile --install-solc
"""

import json
from pathlib import Path
from typing import Optional

import click

from ..compiler import CompilationPipeline
from ..config import load_config
from ..constants import SERVICE_VERSION
from ..exceptions import ConfigurationError


@click.command()
@click.version_option(version=SERVICE_VERSION, prog_name="contractsmith-compile")
@click.option("--config", "-c", "config_path", type=click.Path(dir_okay=False), default=None,
              help="Path to config.toml (defaults to $CONTRACTSMITH_CONFIG or ./config.toml)")
@click.option("--output-dir", "-o", type=click.Path(file_okay=False, path_type=Path), default=None,
              help="Write <Contract>.abi and <Contract>.bin here instead of printing JSON")
@click.option("--install-solc", is_flag=True, help="Download the configured solc version if missing")
def cli(config_path: Optional[str], output_dir: Optional[Path], install_solc: bool):
    """Compile the configured contract template into ABI and bytecode.

    Examples:

        contractsmith-compile

        contractsmith-compile --config deploy.toml --output-dir build/
    """
    try:
        config = load_config(config_path)
        config.validate()
    except ConfigurationError as e:
        raise click.ClickException(e.message)

    if install_solc:
        config.compiler.install_missing = True

    pipeline = CompilationPipeline.from_config(config)
    result = pipeline.run()

    if not result.ok:
        click.echo(click.style(f"✗ {result.error.kind}: {result.error.message}", fg="red"), err=True)
        for diagnostic in result.error.details.get("diagnostics", []):
            click.echo(diagnostic.get("formattedMessage") or diagnostic.get("message"), err=True)
        raise SystemExit(1)

    artifact = result.artifact
    if output_dir is None:
        click.echo(json.dumps(artifact.to_dict(), indent=2))
        return

    output_dir.mkdir(parents=True, exist_ok=True)
    abi_path = output_dir / f"{pipeline.contract_name}.abi"
    bin_path = output_dir / f"{pipeline.contract_name}.bin"
    abi_path.write_text(json.dumps(artifact.abi, indent=2), encoding="utf-8")
    bin_path.write_text(artifact.bytecode, encoding="utf-8")

    click.echo(click.style("✅ Compiled successfully!", fg="green", bold=True))
    click.echo(f"   Bytecode: {(len(artifact.bytecode) - 2) // 2} bytes")
    click.echo(f"   Saved to {abi_path} and {bin_path}")


if __name__ == "__main__":
    cli()
