"""CLI entry point for layoutforge.

This module acts as the central entry point for the project's CLI tools.
It delegates commands to the appropriate submodules or runs specific tasks.
"""

import argparse
import asyncio
import json
import sys
from pathlib import Path

from dotenv import load_dotenv

from layoutforge.config import (
    EnvVar,
    get_available_llm_providers,
    get_environment,
    get_environment_info,
    list_environment_variables,
)
from layoutforge.core import get_logger, setup_logging

# Load environment variables from .env file
load_dotenv()

logger = get_logger("cli")

PROVIDER_CHOICES = ["schema-native", "chat-completion"]
LAYOUT_CHOICES = ["auto", "single-container", "seamless", "multi-container-grid"]


# =============================================================================
# Generate Command
# =============================================================================


def _provider_config(args: argparse.Namespace):
    from layoutforge.llm import provider_config_from_environment

    return provider_config_from_environment(
        args.provider,
        api_key=args.api_key,
        model=args.model,
        base_url=args.base_url,
    )


def _client_options(args: argparse.Namespace) -> dict:
    options = {}
    if args.timeout is not None:
        options["timeout"] = args.timeout
    return options


def cmd_generate_layout(args: argparse.Namespace) -> int:
    """Handle the generate layout command."""
    from layoutforge.llm import LLMError, ProgressKind, generate
    from layoutforge.schema import DesignSystem

    try:
        full_text = args.input.read_text(encoding="utf-8")

        existing_design = None
        if args.design:
            existing_design = DesignSystem.model_validate_json(
                args.design.read_text(encoding="utf-8")
            )
            logger.info(f"Loaded design '{existing_design.theme_name}' from {args.design}")

        def on_progress(kind, payload):
            if kind == ProgressKind.DESIGN:
                logger.info(f"Design: {payload.theme_name} ({payload.layout_type})")
            else:
                logger.info(f"Content: {len(payload)} chars")

        logger.info(f"Styling {args.input} as: {args.style}")
        result = asyncio.run(
            generate(
                _provider_config(args),
                args.style,
                full_text,
                layout_preference=args.layout,
                on_progress=on_progress,
                existing_design=existing_design,
                **_client_options(args),
            )
        )

        if args.output:
            args.output.write_text(result.content, encoding="utf-8")
            logger.info(f"Content saved to {args.output}")
        else:
            print(result.content)

        if args.design_output:
            args.design_output.write_text(
                result.design.model_dump_json(indent=2), encoding="utf-8"
            )
            logger.info(f"Design saved to {args.design_output}")

        return 0

    except (LLMError, OSError, ValueError) as e:
        logger.error(f"Generation failed: {e}")
        return 1


def cmd_generate_variations(args: argparse.Namespace) -> int:
    """Handle the generate variations command."""
    from layoutforge.llm import LLMError, generate_design_variations

    try:
        designs = asyncio.run(
            generate_design_variations(
                _provider_config(args),
                args.style,
                layout_preference=args.layout,
                count=args.count,
                **_client_options(args),
            )
        )
    except (LLMError, ValueError) as e:
        logger.error(f"Variation generation failed: {e}")
        return 1

    payload = [design.model_dump() for design in designs]
    result_text = json.dumps(payload, indent=2, ensure_ascii=False)

    if args.output:
        args.output.write_text(result_text, encoding="utf-8")
        logger.info(f"{len(designs)} design(s) saved to {args.output}")
    else:
        print(result_text)
    return 0


def cmd_list_providers(_args: argparse.Namespace) -> int:
    """Handle the list providers command."""
    available = get_available_llm_providers()
    default = get_environment(EnvVar.LLM_PROVIDER)

    logger.info("LLM Providers:")
    for kind in PROVIDER_CHOICES:
        status = "configured" if kind in available else "no credentials"
        default_tag = " (default)" if kind == default else ""
        logger.info(f"  {kind}{default_tag}: {status}")
    return 0


def _add_provider_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--provider",
        "-p",
        type=str,
        default=None,
        choices=PROVIDER_CHOICES,
        help="Provider kind (uses LLM_PROVIDER if not provided)",
    )
    parser.add_argument(
        "--api-key",
        "-k",
        type=str,
        default=None,
        help="API key (uses env var if not provided)",
    )
    parser.add_argument(
        "--model",
        "-m",
        type=str,
        default=None,
        help="Model name (e.g. gemini-3-flash-preview, gpt-4.1-mini)",
    )
    parser.add_argument(
        "--base-url",
        type=str,
        default=None,
        help="OpenAI-compatible endpoint (chat-completion only)",
    )
    parser.add_argument(
        "--layout",
        "-l",
        type=str,
        default="auto",
        choices=LAYOUT_CHOICES,
        help="Layout preference (default: auto)",
    )
    parser.add_argument(
        "--timeout",
        type=float,
        default=None,
        help="Request timeout in seconds (uses LLM_TIMEOUT if not provided)",
    )


def handle_generate_command(argv: list[str]) -> int:
    """Handle generate-specific commands."""
    parser = argparse.ArgumentParser(
        prog="python . generate",
        description="Generate design systems and restyled documents",
    )
    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    # layout command
    layout_parser = subparsers.add_parser(
        "layout",
        help="Generate a design and restyle a document",
    )
    layout_parser.add_argument(
        "style",
        type=str,
        help="Free-form style request (e.g. 'tech blog, dark theme')",
    )
    layout_parser.add_argument(
        "--input",
        "-i",
        type=Path,
        required=True,
        help="Source text file",
    )
    layout_parser.add_argument(
        "--design",
        "-d",
        type=Path,
        default=None,
        help="Design JSON to reuse instead of generating one",
    )
    layout_parser.add_argument(
        "--output",
        "-o",
        type=Path,
        default=None,
        help="Markdown output path (prints to stdout if not specified)",
    )
    layout_parser.add_argument(
        "--design-output",
        type=Path,
        default=None,
        help="Path to write the design JSON",
    )
    _add_provider_arguments(layout_parser)
    layout_parser.set_defaults(func=cmd_generate_layout)

    # variations command
    variations_parser = subparsers.add_parser(
        "variations",
        help="Generate several distinct design systems",
    )
    variations_parser.add_argument(
        "style",
        type=str,
        help="Free-form style request",
    )
    variations_parser.add_argument(
        "--count",
        "-n",
        type=int,
        default=2,
        help="Number of variations (default: 2)",
    )
    variations_parser.add_argument(
        "--output",
        "-o",
        type=Path,
        default=None,
        help="JSON output path (prints to stdout if not specified)",
    )
    _add_provider_arguments(variations_parser)
    variations_parser.set_defaults(func=cmd_generate_variations)

    # providers command
    providers_parser = subparsers.add_parser(
        "providers",
        help="List providers with credentials present",
    )
    providers_parser.set_defaults(func=cmd_list_providers)

    if not argv:
        parser.print_help()
        return 1

    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 1

    return args.func(args)


# =============================================================================
# Config Command
# =============================================================================


def cmd_config_list(args: argparse.Namespace) -> int:
    """Handle the config list command."""
    variables = list_environment_variables(args.category)
    if not variables:
        logger.error(f"No variables in category: {args.category}")
        return 1

    for var in variables:
        info = get_environment_info(var)
        print(f"{info.name} [{info.category}] (default: {info.default})")
        if info.description:
            print(f"    {info.description}")
    return 0


def handle_config_command(argv: list[str]) -> int:
    """Handle config-specific commands."""
    parser = argparse.ArgumentParser(
        prog="python . config",
        description="Inspect layoutforge configuration",
    )
    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    list_parser = subparsers.add_parser(
        "list",
        help="List environment variables",
    )
    list_parser.add_argument(
        "--category",
        "-c",
        type=str,
        default=None,
        choices=["llm", "generation", "logging"],
        help="Only show one category",
    )
    list_parser.set_defaults(func=cmd_config_list)

    if not argv:
        parser.print_help()
        return 1

    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 1

    return args.func(args)


# =============================================================================
# Main
# =============================================================================


def show_help() -> None:
    """Display CLI help message."""
    print("Usage: python . {command} [args]")
    print("\n=== Generation ===")
    print("  generate   Generate design systems and restyled documents")
    print("\n=== Configuration ===")
    print("  config     Inspect environment configuration")
    print("\nExamples:")
    print("  python . generate layout 'tech blog, dark theme' -i notes.md -o out.md")
    print("  python . generate layout 'warm editorial' -i notes.md -d design.json")
    print("  python . generate variations 'minimal paper' -n 3")
    print("  python . generate providers")
    print("  python . config list --category llm")


def main() -> int:
    """Main entry point for the CLI."""
    if len(sys.argv) < 2:
        show_help()
        return 1

    command = sys.argv[1]
    rest_args = sys.argv[2:]

    if command in ("-h", "--help"):
        show_help()
        return 0

    commands = {
        "generate": lambda: handle_generate_command(rest_args),
        "config": lambda: handle_config_command(rest_args),
    }

    if command in commands:
        setup_logging()
        return commands[command]()

    logger.error(f"Unknown command: {command}")
    show_help()
    return 1


if __name__ == "__main__":
    sys.exit(main())
