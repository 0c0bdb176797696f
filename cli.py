import asyncio
import sys
from typing import Optional

import click
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel

from config.logic import load_and_merge_configs, load_environment
from config.models import Config
from core.contracts.models import StepFinish, TextDelta, ToolCallEvent, ToolResultEvent
from core.pipeline import ReviewAgent
from utils.errors import AIReviewException
from utils.logger import setup_logger, logger


def apply_cli_overrides(config: Config, provider: Optional[str], model: Optional[str], max_steps: Optional[int]) -> Config:
    """Applies command line options on top of the loaded configuration."""
    if provider:
        config.model.provider = provider
        logger.info(f"Overriding provider from the command line: {provider}")
    if model:
        config.model.name = model
        logger.info(f"Overriding model from the command line: {model}")
    if max_steps:
        config.review.max_steps = max_steps
        logger.info(f"Overriding step limit from the command line: {max_steps}")
    return config


async def run_review(config: Config, target_dir: str, console: Console) -> int:
    """
    Runs the review agent and streams its text to the console as it arrives.

    Returns:
        The number of steps the agent took.
    """
    agent = ReviewAgent(config)
    at_line_start = True
    try:
        async for event in agent.review(target_dir):
            if isinstance(event, TextDelta):
                console.out(event.text, end="", highlight=False)
                at_line_start = event.text.endswith("\n")
            elif isinstance(event, ToolCallEvent):
                if not at_line_start:
                    console.out("")
                    at_line_start = True
                console.print(f"[dim]> {escape(event.call.name)}[/dim]")
            elif isinstance(event, ToolResultEvent):
                status = "[green]ok[/green]" if event.outcome.success else "[red]failed[/red]"
                console.print(f"[dim]< {escape(event.outcome.name)}[/dim] {status}")
            elif isinstance(event, StepFinish):
                logger.debug(f"Step {event.step} finished: {event.finish_reason}, {event.tool_calls} tool call(s)")
    finally:
        await agent.aclose()
    if not at_line_start:
        console.out("")
    return agent.steps_taken


@click.command()
@click.argument("target_dir", required=False, type=click.Path(file_okay=False))
@click.option(
    "-c", "--config",
    "config_path",
    type=click.Path(exists=True, dir_okay=False),
    help="Path to a configuration file that replaces all other configuration layers",
)
@click.option("--provider", type=str, help="Override the LLM provider (e.g. 'gemini', 'openai', 'claude')")
@click.option("--model", type=str, help="Override the model name (e.g. 'gemini-2.5-flash')")
@click.option("--max-steps", type=click.IntRange(min=1), help="Override the maximum number of model steps")
@click.option(
    "-v", "--verbose",
    is_flag=True,
    help="Enable debug logging",
)
def cli(target_dir: Optional[str], config_path: Optional[str], provider: Optional[str], model: Optional[str], max_steps: Optional[int], verbose: bool):
    """
    Ask a language model to review the uncommitted changes in TARGET_DIR.

    The model can read the diffs, write a markdown report and create a
    conventional commit. TARGET_DIR defaults to review.default_target_dir.
    """
    setup_logger(log_level="DEBUG" if verbose else "INFO", log_file=None)
    console = Console()

    try:
        load_environment()
        config = load_and_merge_configs(custom_config_path=config_path)
        setup_logger(
            log_level="DEBUG" if verbose else config.logging.level,
            log_file=config.logging.file,
        )
        config = apply_cli_overrides(config, provider, model, max_steps)

        target = target_dir or config.review.default_target_dir
        console.print(Panel(
            f"Reviewing uncommitted changes in [bold]{escape(target)}[/bold]",
            title="[bold cyan]aireview[/bold cyan]",
            subtitle=escape(f"{config.model.provider} / {config.model.name}"),
            border_style="cyan",
            expand=False,
        ))

        steps = asyncio.run(run_review(config, target, console))
        logger.info(f"Review finished after {steps} step(s)")
    except AIReviewException as e:
        logger.opt(exception=verbose).error(f"Review failed: {e}")
        console.print(f"[bold red]Error:[/bold red] {escape(str(e))}")
        sys.exit(1)


if __name__ == "__main__":
    cli()
