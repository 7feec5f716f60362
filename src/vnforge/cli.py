"""Command-line interface for vnforge."""

from __future__ import annotations

import json
import logging
import sys
from pathlib import Path

import click
from pydantic import ValidationError

from vnforge import __version__
from vnforge.config import (
    ProjectConfig,
    find_project_root,
    get_vnforge_dir,
    load_config,
    save_config,
    set_config_value,
)
from vnforge.exceptions import UnknownSceneError, VNForgeError
from vnforge.ui.console import Console

console = Console()


def _load_project_config(path: str | None = None) -> ProjectConfig:
    """Load the project config, or defaults when no project is found."""
    root = Path(path).resolve() if path else find_project_root()
    if root is None:
        return ProjectConfig()
    try:
        return load_config(root)
    except VNForgeError as e:
        console.error(str(e))
        sys.exit(1)


def _read_json(path: str) -> object:
    try:
        return json.loads(Path(path).read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        console.error(f"Could not read {path}: {e}")
        sys.exit(1)


def _parse_budgets(pairs: tuple[str, ...]) -> dict[str, int]:
    """Parse ``type=N`` budget overrides."""
    from vnforge.context.models import ChunkType

    budgets: dict[str, int] = {}
    for pair in pairs:
        kind, _, amount = pair.partition("=")
        try:
            tokens = int(amount)
            if tokens < 0:
                raise ValueError(amount)
            budgets[ChunkType(kind.strip()).value] = tokens
        except ValueError:
            raise click.BadParameter(
                f"Expected TYPE=TOKENS with TYPE in local/character/story/global "
                f"and TOKENS >= 0, got '{pair}'",
                param_hint="--budget",
            ) from None
    return budgets


@click.group()
@click.version_option(version=__version__, prog_name="vnforge")
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging.")
def main(verbose: bool):
    """vnforge - context selection and story skeletons for branching visual novels."""
    if verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(name)s: %(message)s")


@main.command()
@click.option("--path", "-p", default=None, help="Path to the project root.")
def init(path: str | None):
    """Create a .vnforge directory with the default configuration."""
    root = Path(path or ".").resolve()
    if not root.exists():
        console.error(f"Path does not exist: {root}")
        sys.exit(1)

    console.banner()
    console.info(f"Initializing vnforge for: {root}")
    config = _load_project_config(str(root))
    config.name = root.name
    config.root_path = str(root)
    save_config(root, config)
    console.success(f"Configuration saved to {get_vnforge_dir(root)}")


# =========================================================================
# Narrative context
# =========================================================================

@main.command()
@click.argument("story_file", type=click.Path(exists=True, dir_okay=False))
@click.argument("target")
@click.option("--path", "-p", default=None, help="Path to the project root.")
@click.option(
    "--budget", "-b", multiple=True,
    help="Budget override as TYPE=TOKENS (repeatable). Unnamed types keep config budgets.",
)
@click.option("--exact", is_flag=True, help="Use exact knapsack packing instead of greedy.")
@click.option("--table", "show_table", is_flag=True, help="Show a chunk table instead of text.")
@click.option("--no-metadata", is_flag=True, help="Render chunk text only.")
def context(
    story_file: str, target: str, path: str | None, budget: tuple[str, ...],
    exact: bool, show_table: bool, no_metadata: bool,
):
    """Select budgeted narrative context for TARGET scene of STORY_FILE.

    Collects recent dialogue, checkpoint summaries from ancestor scenes and
    character facts, ranks them, and packs each category into its budget.
    """
    from vnforge.context.engine import ContextAssembler
    from vnforge.context.models import ContextBudgets
    from vnforge.story.loader import load_story

    config = _load_project_config(path)
    try:
        story = load_story(story_file)
        if target not in story.scenes:
            raise UnknownSceneError(target)
    except VNForgeError as e:
        console.error(str(e))
        sys.exit(1)

    budgets = config.context.budgets
    if budget:
        merged = budgets.as_dict()
        merged.update(_parse_budgets(budget))
        budgets = ContextBudgets.from_mapping(merged)

    assembler = ContextAssembler(story, config.context)
    package = assembler.assemble(target, budgets=budgets, exact=exact)

    if show_table:
        console.show_package(package)
    else:
        click.echo(package.render(include_metadata=not no_metadata))


@main.command()
@click.argument("story_file", type=click.Path(exists=True, dir_okay=False))
def graph(story_file: str):
    """Show scene graph statistics, unreachable scenes and dead ends."""
    from vnforge.graph.builder import SceneGraphBuilder
    from vnforge.graph.query import SceneGraphQuery
    from vnforge.story.loader import load_story

    try:
        story = load_story(story_file)
    except VNForgeError as e:
        console.error(str(e))
        sys.exit(1)

    builder = SceneGraphBuilder()
    scene_graph = builder.build(story)
    console.show_graph_stats(builder.get_stats())

    query = SceneGraphQuery(story, scene_graph)
    unreachable = query.unreachable_scenes()
    dead_ends = query.dead_ends()
    missing = query.missing_targets()
    if unreachable:
        console.warning(f"Unreachable from start: {', '.join(unreachable)}")
    if dead_ends:
        console.warning(f"Dead ends: {', '.join(dead_ends)}")
    if missing:
        console.warning(f"Links to missing scenes: {', '.join(missing)}")
    if not (unreachable or dead_ends or missing):
        console.success("Every scene is reachable and every path ends cleanly")


# =========================================================================
# Skeleton scheduling
# =========================================================================

@main.command()
@click.option("--path", "-p", default=None, help="Path to the project root.")
@click.option("--main", "main_size", type=int, default=None, help="Main branch length.")
@click.option("--split", "split_size", type=int, default=None, help="Sub-branch length.")
@click.option("--split-prob", type=float, default=None, help="Split probability (0-1).")
@click.option("--decision-prob", type=float, default=None, help="Decision probability (0-1).")
@click.option("--seed", type=int, default=None, help="Random seed for a reproducible shape.")
@click.option("--prompt", default="", help="Story theme, passed through to content filling.")
@click.option("--json", "as_json", is_flag=True, help="Output realized scenes as JSON.")
def skeleton(
    path: str | None, main_size: int | None, split_size: int | None,
    split_prob: float | None, decision_prob: float | None, seed: int | None,
    prompt: str, as_json: bool,
):
    """Generate a branching story skeleton from structural parameters."""
    from vnforge.scheduler.skeleton import (
        generate_story_skeleton,
        skeleton_to_story,
        validate_skeleton,
    )

    defaults = _load_project_config(path).scheduler
    overrides = {
        "main_branch_size": main_size,
        "split_branch_size": split_size,
        "split_probability": split_prob,
        "decision_probability": decision_prob,
        "seed": seed,
    }
    config = defaults.model_copy(
        update={k: v for k, v in overrides.items() if v is not None} | {"prompt": prompt}
    )

    nodes = generate_story_skeleton(config)

    if as_json:
        story = skeleton_to_story(nodes, name=prompt or "Skeleton")
        click.echo(json.dumps(story.model_dump(by_alias=True), indent=2))
        return

    console.show_skeleton(nodes)
    console.show_report(validate_skeleton(nodes))


# =========================================================================
# Story state
# =========================================================================

@main.command()
@click.argument("state_file", type=click.Path(exists=True, dir_okay=False))
@click.argument("delta_files", nargs=-1, type=click.Path(exists=True, dir_okay=False))
@click.option("--json", "as_json", is_flag=True, help="Output the resulting state as JSON.")
def state(state_file: str, delta_files: tuple[str, ...], as_json: bool):
    """Apply DELTA_FILES to STATE_FILE in order and show the result."""
    from vnforge.state.delta import apply_state_delta, render_state_to_text
    from vnforge.state.models import StateDelta, StoryState

    try:
        current = StoryState.model_validate(_read_json(state_file))
        for delta_file in delta_files:
            delta = StateDelta.model_validate(_read_json(delta_file))
            current = apply_state_delta(current, delta)
    except ValidationError as e:
        console.error(f"Invalid state data: {e}")
        sys.exit(1)

    if as_json:
        click.echo(json.dumps(current.model_dump(by_alias=True), indent=2))
    else:
        console.show_state(render_state_to_text(current))


# =========================================================================
# Configuration
# =========================================================================

@main.group()
def config():
    """View or change project configuration."""


@config.command("show")
@click.option("--path", "-p", default=None, help="Path to the project root.")
def config_show(path: str | None):
    """Print the effective configuration."""
    cfg = _load_project_config(path)
    click.echo(json.dumps(cfg.model_dump(by_alias=True), indent=2))


@config.command("set")
@click.argument("key")
@click.argument("value")
@click.option("--path", "-p", default=None, help="Path to the project root.")
def config_set(key: str, value: str, path: str | None):
    """Set a config value using dot notation (e.g. context.budgets.local 300)."""
    root = Path(path).resolve() if path else find_project_root()
    if root is None:
        console.error("No vnforge project found. Run 'vnforge init' first.")
        sys.exit(1)

    try:
        parsed = json.loads(value)
    except json.JSONDecodeError:
        parsed = value

    try:
        cfg = set_config_value(load_config(root), key, parsed)
    except KeyError as e:
        console.error(str(e.args[0]) if e.args else str(e))
        sys.exit(1)
    except VNForgeError as e:
        console.error(str(e))
        sys.exit(1)

    save_config(root, cfg)
    console.success(f"Set {key} = {parsed!r}")
