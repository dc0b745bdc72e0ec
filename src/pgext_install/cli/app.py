import typer

from pgext_install.cli.install import install

app = typer.Typer(
    name="pgext-install",
    help="Build a PostgreSQL extension from a native library and its SQL definition.",
    context_settings={"help_option_names": ["-h", "--help"]},
)

app.command("install")(install)


def main() -> None:
    app()
