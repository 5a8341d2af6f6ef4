"""
Visual Studio Settings Configuration Controller.

Prints the VS Code settings and extension tables that the other controllers
write into projects, and manages the user configuration stored in
`~/.vscode-team/settings.json`.

Usage:
    $ configctl inspect deno settings
    $ configctl inspect deno extensions [--recommended]
    $ configctl inspect template python
    $ configctl configure
    $ configctl show
"""

from typing import Annotated, Optional

import typer
from rich import print as pr
from rich.markup import escape

from core.config import CONFIG_FILE, get_config_file
from core.templates import DENO_EXTENSIONS, DENO_SETTINGS, TEMPLATES, ext_recommendations
from models import TemplateKind
from ui.display import print_json
from ui.messages import error_boundary
from ui.prompts import edit_tool_config
from utils import determine_version

app = typer.Typer(
    help="Visual Studio Settings Configuration Controller.", no_args_is_help=True
)
inspect_app = typer.Typer(help="Show settings templates.", no_args_is_help=True)
inspect_deno_app = typer.Typer(help="Show the Deno settings templates.", no_args_is_help=True)
app.add_typer(inspect_app, name="inspect")
inspect_app.add_typer(inspect_deno_app, name="deno")


def version_callback(value: bool) -> None:
    if value:
        pr(determine_version())
        raise typer.Exit()


@app.callback()
def main(
    version: Annotated[
        Optional[bool],
        typer.Option(
            "--version",
            callback=version_callback,
            is_eager=True,
            help="Show version.",
        ),
    ] = None,
) -> None:
    """Visual Studio Settings Configuration Controller."""


@inspect_deno_app.command("settings")
def inspect_deno_settings() -> None:
    """Show the VS Code settings written into Deno projects."""
    print_json(dict(DENO_SETTINGS))


@inspect_deno_app.command("extensions")
def inspect_deno_extensions(
    recommended: Annotated[
        bool,
        typer.Option("--recommended", help="Show them as extensions.json recommendations."),
    ] = False,
) -> None:
    """Show the VS Code extensions recommended for Deno projects."""
    if recommended:
        print_json(ext_recommendations(DENO_EXTENSIONS))
    else:
        print_json(DENO_EXTENSIONS)


@inspect_app.command("template")
def inspect_template(
    kind: Annotated[TemplateKind, typer.Argument(help="The project kind.")],
    recommended: Annotated[
        bool,
        typer.Option("--recommended", help="Show extensions as recommendations."),
    ] = False,
) -> None:
    """Show the VS Code settings and extensions written for a project kind."""
    settings, extensions = TEMPLATES[kind.value]
    print_json(
        {
            "settings": dict(settings),
            "extensions": ext_recommendations(extensions) if recommended else extensions,
        }
    )


@app.command()
def configure() -> None:
    """Edit the configuration interactively (current values are prefilled)."""
    with error_boundary():
        edit_tool_config()


@app.command()
def show() -> None:
    """Show the current configuration."""
    with error_boundary():
        config = get_config_file()
        pr(f"[dim]{escape(str(CONFIG_FILE))}[/dim]")
        print_json(dict(config))


if __name__ == "__main__":
    app()
