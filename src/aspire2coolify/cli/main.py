#!/usr/bin/env python3
"""
ASPIRE2COOLIFY CLI
------------------
Command line front-end: parse a .NET Aspire Program.cs, generate a Coolify
deployment script, or deploy straight through the Coolify API.

Author: Aspire2Coolify Team
Date: 2026-10-19
"""

import sys
import logging
import argparse
from pathlib import Path
from typing import List, Optional

# Rich library components for terminal UI
from rich.panel import Panel

from aspire2coolify.core.models import GenerateOptions
from aspire2coolify.core.engine import DeployConfig, deploy
from aspire2coolify.parser.pipeline import parse_file
from aspire2coolify.generators.coolify import generate
from aspire2coolify.generators.exporter import PlanExporter
from aspire2coolify.api.client import CoolifyApiClient
from aspire2coolify.api.token import resolve_token, resolve_api_url, validate_credentials
from aspire2coolify.config.loader import (
    AppConfig, ConfigError, load_config, load_config_file, create_config_template, DEFAULT_CONFIG_NAME,
)
from aspire2coolify.cli.formatter import ReportFormatter, console, err_console

VERSION = "0.1.0"
DEFAULT_ENVIRONMENT = "production"
DRY_RUN_PROJECT = "dry-run-project"
DRY_RUN_SERVER = "dry-run-server"

logger = logging.getLogger("aspire2coolify.cli")


def derive_project_name(file_path: Path) -> str:
    """`VibeCode.AppHost/Program.cs` -> `VibeCode`; falls back to the parent directory."""
    directory = Path(file_path).resolve().parent
    apphost = directory.name or "AspireApp"
    parent = directory.parent.name

    if ".AppHost" in apphost:
        return apphost.replace(".AppHost", "")
    if "AppHost" in apphost:
        return apphost.replace("AppHost", "") or parent or "AspireApp"
    return parent or apphost


class Aspire2CoolifyCLI:
    """
    CLI wrapper that translates user commands into pipeline, generator and
    engine calls. Every command returns a process exit code.
    """

    def __init__(self):
        self.parser = argparse.ArgumentParser(
            prog="aspire2coolify",
            description="aspire2coolify - Convert .NET Aspire AppHost configurations to Coolify deployments",
            formatter_class=argparse.RawDescriptionHelpFormatter,
        )
        self.formatter = ReportFormatter()
        self.exporter = PlanExporter()
        self._setup_args()

    def _setup_args(self):
        """Configures the command-line flags and subcommands."""
        self.parser.add_argument("--version", action="version", version=f"aspire2coolify v{VERSION}")
        self.parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
        subparsers = self.parser.add_subparsers(dest="command", metavar="Command")

        # 'parse' - show the extracted model
        parse_parser = subparsers.add_parser("parse", help="Parse a Program.cs and display the extracted model")
        parse_parser.add_argument("file", help="Path to the AppHost Program.cs")
        parse_parser.add_argument("-o", "--output", help="Write the JSON model to this file")
        parse_parser.add_argument("--compact", action="store_true", help="Emit single-line JSON")

        # 'generate' - emit a deployment script or operation plan
        gen_parser = subparsers.add_parser("generate", help="Generate Coolify API calls from a Program.cs")
        gen_parser.add_argument("file", help="Path to the AppHost Program.cs")
        gen_parser.add_argument("-o", "--output", help="Write the output to this file")
        gen_parser.add_argument("-c", "--config", help="Config file path")
        gen_parser.add_argument("--no-comments", action="store_true", help="Exclude comments from output")
        gen_parser.add_argument("--format", choices=("shell", "json", "yaml"), help="Output format (default: shell)")
        self._add_target_args(gen_parser)

        # 'deploy' - create everything through the API
        dep_parser = subparsers.add_parser("deploy", help="Deploy a Program.cs to Coolify through the API")
        dep_parser.add_argument("file", help="Path to the AppHost Program.cs")
        dep_parser.add_argument("-c", "--config", help="Config file path")
        dep_parser.add_argument("--dry-run", action="store_true", help="Show what would be created without calling the API")
        dep_parser.add_argument("--api-url", help="Coolify API URL (or COOLIFY_API_URL)")
        dep_parser.add_argument("--token", help="Coolify API token (or COOLIFY_TOKEN)")
        dep_parser.add_argument("--skip-existing", action="store_true", help="Skip resources that already exist")
        self._add_target_args(dep_parser)

        # 'init' - write a config template
        init_parser = subparsers.add_parser("init", help="Create an aspire2coolify.yaml config file")
        init_parser.add_argument("-f", "--force", action="store_true", help="Overwrite an existing config file")

    @staticmethod
    def _add_target_args(sub: argparse.ArgumentParser):
        sub.add_argument("--project-id", help="Coolify project UUID (created from --project-name when missing)")
        sub.add_argument("--project-name", help="Name for a new project (defaults to the AppHost directory name)")
        sub.add_argument("--server-id", help="Coolify server UUID")
        sub.add_argument("--environment-name", help="Coolify environment name (e.g., production)")
        sub.add_argument("--instant-deploy", action="store_true", default=None,
                         help="Start resources right after creation")
        sub.add_argument("--build-pack", choices=("nixpacks", "dockerfile", "static", "dockercompose"),
                         help="Build pack for repository-sourced applications")

    def print_header(self, subtitle: str):
        err_console.print(Panel.fit(
            f"[bold cyan]aspire2coolify v{VERSION}[/bold cyan]",
            title=f"[bold white]{subtitle}[/bold white]",
            border_style="cyan"
        ))

    # --- helpers ---

    def _require_file(self, file: str) -> Optional[Path]:
        path = Path(file).resolve()
        if not path.is_file():
            err_console.print(f"[bold red]Error:[/bold red] File not found: {path}")
            return None
        return path

    @staticmethod
    def _load_config(config_path: Optional[str]) -> AppConfig:
        return load_config_file(config_path) if config_path else load_config()

    def _write_or_emit(self, text: str, output: Optional[str], what: str):
        if output:
            Path(output).write_text(text, encoding="utf-8")
            err_console.print(f"[green]{what} saved to:[/green] {output}")
        else:
            self.formatter.emit(text.rstrip("\n"))

    # --- commands ---

    def cmd_parse(self, args: argparse.Namespace) -> int:
        path = self._require_file(args.file)
        if path is None:
            return 1

        err_console.print(f"Parsing: {path}")
        result = parse_file(path)
        self.formatter.show_messages(result.errors, result.warnings)

        json_text = self.exporter.export_model(result.app, "json", compact=args.compact)
        self._write_or_emit(json_text, args.output, "Model")
        self.formatter.print_model_summary(result.app)
        return 0

    def cmd_generate(self, args: argparse.Namespace) -> int:
        path = self._require_file(args.file)
        if path is None:
            return 1
        config = self._load_config(args.config)

        result = parse_file(path)
        self.formatter.show_messages(result.errors, result.warnings, title="Parse Errors")

        project_id = args.project_id or config.coolify.project_id
        options = GenerateOptions(
            include_comments=config.output.include_comments and not args.no_comments,
            project_id=project_id,
            project_name=None if project_id else (
                args.project_name or config.coolify.project_name or derive_project_name(path)
            ),
            server_id=args.server_id or config.coolify.server_id,
            environment_name=args.environment_name or config.coolify.environment_name,
            instant_deploy=args.instant_deploy if args.instant_deploy is not None else config.coolify.instant_deploy,
            repository=config.github,
            build_pack=args.build_pack or config.defaults.build_pack,
        )
        generated = generate(result.app, options)
        self.formatter.show_messages(generated.errors, generated.warnings, title="Generation Errors")

        fmt = args.format or config.output.format
        if fmt == "shell":
            text = generated.script
        else:
            text = self.exporter.export_operations(generated.operations, fmt)
        self._write_or_emit(text, args.output, "Output")
        self.formatter.print_operations(generated.operations)
        return 1 if generated.errors else 0

    def cmd_deploy(self, args: argparse.Namespace) -> int:
        path = self._require_file(args.file)
        if path is None:
            return 1
        config = self._load_config(args.config)

        # 1. Credentials (prompting only for real runs)
        api_url = resolve_api_url(args.api_url, config.coolify.api_url, prompt=not args.dry_run)
        token = resolve_token(args.token, config.coolify.token, prompt=not args.dry_run)
        if not args.dry_run:
            valid, errors = validate_credentials(api_url, token)
            if not valid:
                self.formatter.show_messages(errors, [], title="Configuration errors")
                return 1

        # 2. Deployment target
        project_uuid = args.project_id or config.coolify.project_id
        server_uuid = args.server_id or config.coolify.server_id
        environment_name = args.environment_name or config.coolify.environment_name or DEFAULT_ENVIRONMENT
        if not args.dry_run and not server_uuid:
            err_console.print("\n[bold red]Missing required configuration:[/bold red]")
            err_console.print("  - server-id (Coolify server UUID)")
            return 1
        project_name = args.project_name or config.coolify.project_name or derive_project_name(path)

        # 3. Model
        console.print(f"Parsing: {path}")
        result = parse_file(path)
        if result.errors:
            self.formatter.show_messages(result.errors, [], title="Parse Errors")
            return 1
        self.formatter.show_messages([], result.warnings)
        self.formatter.print_model_summary(result.app)

        with CoolifyApiClient(api_url or "http://localhost", token or "dry-run-token") as client:
            # 4. Connectivity
            if not args.dry_run:
                console.print("\nTesting API connection...")
                connection = client.test_connection()
                if not connection.success:
                    err_console.print(f"  ✗ Failed to connect to Coolify API: {connection.error}", markup=False)
                    return 1
                console.print("  ✓ Connected to Coolify API")

            # 5. Project bootstrap
            if not project_uuid:
                if args.dry_run:
                    console.print(f'\n[DRY RUN] Would create project: "{project_name}"', markup=False)
                    project_uuid = DRY_RUN_PROJECT
                else:
                    console.print(f'\nCreating project: "{project_name}"...', markup=False)
                    created = client.create_project(project_name)
                    if not created.success or not isinstance(created.data, dict) or not created.data.get("uuid"):
                        err_console.print(f"  ✗ Failed to create project: {created.error}", markup=False)
                        return 1
                    project_uuid = created.data["uuid"]
                    console.print(f'  ✓ Created project "{project_name}" (uuid: {project_uuid})', markup=False)

            # 6. Resources
            deploy_config = DeployConfig(
                project_uuid=project_uuid,
                server_uuid=server_uuid or DRY_RUN_SERVER,
                environment_name=environment_name,
                instant_deploy=args.instant_deploy if args.instant_deploy is not None else config.coolify.instant_deploy,
                skip_existing=args.skip_existing or config.coolify.skip_existing,
                repository=config.github,
                build_pack=args.build_pack or config.defaults.build_pack,
            )
            summary = deploy(
                client, result.app, deploy_config, dry_run=args.dry_run,
                on_progress=lambda msg: console.print(msg, markup=False, highlight=False),
            )

        self.formatter.show_messages([], summary.warnings)
        self.formatter.print_deploy_report(summary)
        if summary.failed_count:
            return 1
        console.print("\n[bold green]Deployment complete![/bold green]")
        return 0

    def cmd_init(self, args: argparse.Namespace) -> int:
        target = Path.cwd() / DEFAULT_CONFIG_NAME
        if target.exists() and not args.force:
            err_console.print("Config file already exists. Use --force to overwrite.")
            return 1
        target.write_text(create_config_template(), encoding="utf-8")
        console.print(f"Created: {target}")
        return 0

    def run(self, argv: Optional[List[str]] = None) -> int:
        """Primary routing entry point."""
        argv = sys.argv[1:] if argv is None else argv
        if not argv:
            self.print_header("Aspire -> Coolify")
            self.parser.print_help()
            return 0

        args = self.parser.parse_args(argv)
        logging.basicConfig(
            level=logging.DEBUG if args.verbose else logging.INFO,
            format="%(levelname)s %(name)s: %(message)s",
        )

        commands = {
            "parse": self.cmd_parse,
            "generate": self.cmd_generate,
            "deploy": self.cmd_deploy,
            "init": self.cmd_init,
        }
        handler = commands.get(args.command)
        if handler is None:
            self.parser.print_help()
            return 1

        try:
            return handler(args)
        except ConfigError as e:
            err_console.print(f"[bold red]Config error:[/bold red] {e}", markup=True)
            return 1


def main():
    """Application entry point with interrupt handling."""
    try:
        sys.exit(Aspire2CoolifyCLI().run())
    except KeyboardInterrupt:
        err_console.print("\n[bold red]Terminated by user.[/bold red]")
        sys.exit(1)


if __name__ == "__main__":
    main()
