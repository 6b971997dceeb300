"""CLI entry point for inline-require."""

from __future__ import annotations

import json
import logging
from pathlib import Path

import click

from inline_require import __version__
from inline_require.config import InlineRequireOptions, load_options
from inline_require.errors import InlineRequireError
from inline_require.host import Compilation, Compiler
from inline_require.plugin import InlineRequirePlugin
from inline_require.utils import load_assets, load_modules


@click.command()
@click.argument("build_dir", type=click.Path(exists=True, file_okay=False, resolve_path=True))
@click.option(
    "-m", "--modules", "modules_path",
    type=click.Path(exists=True, dir_okay=False, resolve_path=True),
    required=True,
    help="JSON list of bundled modules: id, ident and optional side_effect_free.",
)
@click.option(
    "-c", "--config", "config_path",
    type=click.Path(exists=True, dir_okay=False, resolve_path=True),
    default=None,
    help="YAML options file.",
)
@click.option(
    "--context",
    type=click.Path(file_okay=False, resolve_path=True),
    default=None,
    help="Base directory for module identities (default: current directory).",
)
@click.option(
    "--source-map/--no-source-map", default=None,
    help="Read and write <file>.map source maps (default: if any exist).",
)
@click.option("-j", "--concurrency", type=click.IntRange(min=1), default=None,
              help="Files processed in parallel (default: cores - 1).")
@click.option(
    "--parallel",
    type=click.Choice(["inline", "threads", "processes"], case_sensitive=False),
    default=None,
    help="How files are processed in parallel (default: threads).",
)
@click.option("-v", "--verbose", is_flag=True, default=False, help="Verbose logging.")
@click.version_option(version=__version__)
def main(
    build_dir: str,
    modules_path: str,
    config_path: str | None,
    context: str | None,
    source_map: bool | None,
    concurrency: int | None,
    parallel: str | None,
    verbose: bool,
) -> None:
    """Inline side-effect-free require bindings in a bundler's output directory."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(name)s %(levelname)s: %(message)s",
    )

    overrides = {"source_map": source_map, "concurrency": concurrency, "parallel": parallel}
    try:
        if config_path:
            options = load_options(Path(config_path), **overrides)
        else:
            options = InlineRequireOptions(**{k: v for k, v in overrides.items() if v is not None})

        out_dir = Path(build_dir)
        assets = load_assets(out_dir)
        compilation = Compilation(modules=load_modules(Path(modules_path)), assets=assets)
        has_maps = any(a.map() is not None for a in assets.values())
        compiler = Compiler(context=context or str(Path.cwd()), devtool=has_maps)

        with InlineRequirePlugin(options) as plugin:
            plugin.apply(compiler)
            report = plugin.run(compilation)
    except InlineRequireError as exc:
        raise click.ClickException(str(exc)) from exc

    for name in report.rewritten:
        _write_asset(out_dir, name, compilation.assets[name])

    click.echo(
        f"Rewrote {len(report.rewritten)} of {len(report.files)} files "
        f"({len(report.unchanged)} unchanged, {len(report.skipped)} skipped)"
    )


def _write_asset(out_dir: Path, name: str, asset) -> None:
    text, source_map = asset.source_and_map()
    path = out_dir / name
    if isinstance(text, bytes):
        path.write_bytes(text)
    else:
        path.write_text(text, encoding="utf-8")
    if source_map is not None:
        path.with_name(path.name + ".map").write_text(json.dumps(source_map), encoding="utf-8")


if __name__ == "__main__":
    main()
