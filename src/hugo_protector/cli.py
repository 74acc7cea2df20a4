"""Command-line interface for hugo-protector."""

import logging
from pathlib import Path

import click
import yaml

from . import __version__
from .config import (
    CONFIG_FILENAME,
    ENV_PASSWORD,
    TemplateConfig,
    config_to_dict,
    create_default_config,
    find_config_file,
    load_config,
)
from .crypto import AuthenticationError, FormatError, ProtectorError
from .markdown import CONTENT_FORMATS, markdown_to_html, render_content
from .page import FAILURE_MESSAGE, ProtectedDocument
from .payload import decode, encode, inspect_payload
from .snippet import MODES, OUTPUT_FORMATS, render_output


@click.group()
@click.version_option(version=__version__, prog_name="hugo-protector")
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging")
def main(verbose):
    """Password-protect content blocks of static Hugo sites.

    hugo-protector encrypts text at build time into a self-contained
    payload that the browser decrypts in place once the reader enters
    the password.

    \b
    Quick start:
      hugo-protector config init                  # Create .hugo-protector.yaml
      hugo-protector encrypt -i secret.md         # Print a shortcode snippet
      hugo-protector encrypt -t "<p>x</p>" --format raw
      hugo-protector decrypt @payload.txt         # Check a payload
      hugo-protector unlock public/post/index.html
    """
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


def _read_password_file(password_file: str | None) -> str | None:
    if password_file is None:
        return None
    try:
        return Path(password_file).read_text(encoding="utf-8").strip()
    except OSError as e:
        raise click.ClickException(f"Cannot read password file: {e}")


def _read_plaintext(text: str | None, input_path: str | None) -> str:
    if text is not None:
        return text
    if input_path:
        try:
            return Path(input_path).read_text(encoding="utf-8")
        except OSError as e:
            raise click.ClickException(f"Cannot read {input_path}: {e}")
    return click.get_text_stream("stdin").read()


def _read_payload_argument(payload: str) -> str:
    """Accept a payload string, or @file to read it from a file."""
    if not payload.startswith("@"):
        return payload
    try:
        return Path(payload[1:]).read_text(encoding="utf-8").strip()
    except OSError as e:
        raise click.ClickException(f"Cannot read payload file: {e}")


def _shortcode_attrs(template: TemplateConfig, content_format, prompt, hint, button):
    """Collect shortcode parameters, leaving out values equal to the defaults."""
    defaults = TemplateConfig()
    if prompt is None and template.prompt != defaults.prompt:
        prompt = template.prompt
    if hint is None and template.hint:
        hint = template.hint
    if button is None and template.button_text != defaults.button_text:
        button = template.button_text
    return {
        "format": content_format if content_format != "html" else None,
        "prompt": prompt,
        "hint": hint,
        "button": button,
    }


def _write_output(output_path: str | None, content: str) -> None:
    if output_path is None:
        click.echo(content)
        return
    try:
        Path(output_path).write_text(content + "\n", encoding="utf-8")
    except OSError as e:
        raise click.ClickException(f"Cannot write {output_path}: {e}")


@main.command()
@click.option(
    "-i",
    "--input",
    "input_path",
    type=click.Path(exists=True, dir_okay=False),
    help="Read plaintext from a file (defaults to stdin)",
)
@click.option(
    "-t", "--text", help="Use provided string as plaintext (overrides --input)"
)
@click.option("-p", "--password", help="Provide password directly (discouraged)")
@click.option(
    "--password-file",
    type=click.Path(exists=True, dir_okay=False),
    help="Read password from file (preferred)",
)
@click.option(
    "-m",
    "--mode",
    type=click.Choice(MODES),
    help="Helper snippet mode (default: shortcode)",
)
@click.option(
    "--iterations", type=click.IntRange(min=1), help="Override PBKDF2 iterations"
)
@click.option(
    "-o",
    "--output",
    "output_path",
    type=click.Path(dir_okay=False),
    help="Write payload/snippet to file instead of stdout",
)
@click.option(
    "--format",
    "output_format",
    type=click.Choice(OUTPUT_FORMATS),
    help="raw = payload only, helper = mode-specific snippet (default: helper)",
)
@click.option(
    "--content-format",
    type=click.Choice(CONTENT_FORMATS),
    help="How the browser renders the decrypted text (default: html)",
)
@click.option("--prompt", help="Prompt shown above the password field")
@click.option("--hint", help="Password hint shown to readers")
@click.option("--button", help="Unlock button text")
@click.option(
    "-c",
    "--config",
    "config_path",
    type=click.Path(exists=True),
    help="Config file path",
)
def encrypt(
    input_path,
    text,
    password,
    password_file,
    mode,
    iterations,
    output_path,
    output_format,
    content_format,
    prompt,
    hint,
    button,
    config_path,
):
    """Encrypt text into a payload for a Hugo page.

    \b
    Examples:
      hugo-protector encrypt -i secret.html --password-file .pwd
      hugo-protector encrypt -i notes.md --content-format markdown
      hugo-protector encrypt --text "<p>snippet</p>" -p mypass -m page --format raw
    """
    if password is None:
        password = _read_password_file(password_file)

    try:
        config = load_config(
            config_path=Path(config_path) if config_path else None,
            start_path=Path(input_path) if input_path else None,
            password_override=password,
            iterations_override=iterations,
        )
    except ProtectorError as e:
        raise click.ClickException(str(e))

    plaintext = _read_plaintext(text, input_path).strip()
    if not plaintext:
        raise click.ClickException("No plaintext provided.")
    if not config.password:
        raise click.ClickException(
            f"Password not provided. Use --password-file or set {ENV_PASSWORD}."
        )

    content_format = content_format or config.content_format
    attrs = _shortcode_attrs(config.template, content_format, prompt, hint, button)

    try:
        payload = encode(plaintext, config.password, iterations=config.iterations)
        content = render_output(
            output_format or config.format, mode or config.mode, payload, **attrs
        )
    except ProtectorError as e:
        raise click.ClickException(str(e))

    _write_output(output_path, content)


@main.command()
@click.argument("payload")
@click.option("-p", "--password", help="Decryption password (or use config/env)")
@click.option(
    "--password-file",
    type=click.Path(exists=True, dir_okay=False),
    help="Read password from file",
)
@click.option(
    "--render",
    "content_format",
    type=click.Choice(CONTENT_FORMATS),
    default="html",
    help="Render decrypted text (markdown) or print it unchanged (html)",
)
@click.option(
    "-c",
    "--config",
    "config_path",
    type=click.Path(exists=True),
    help="Config file path",
)
def decrypt(payload, password, password_file, content_format, config_path):
    """Decrypt a payload (string, or @file) and print its content.

    \b
    Examples:
      hugo-protector decrypt @payload.txt --password-file .pwd
      hugo-protector decrypt eyJ2Ijox... --render markdown
    """
    if password is None:
        password = _read_password_file(password_file)

    try:
        config = load_config(
            config_path=Path(config_path) if config_path else None,
            password_override=password,
        )
    except ProtectorError as e:
        raise click.ClickException(str(e))

    pwd = config.password
    if not pwd:
        pwd = click.prompt("Enter decryption password", hide_input=True)

    try:
        plaintext = decode(_read_payload_argument(payload), pwd)
    except AuthenticationError:
        raise click.ClickException(FAILURE_MESSAGE)
    except FormatError:
        raise click.ClickException("Cannot read payload")
    except ProtectorError as e:
        raise click.ClickException(str(e))

    click.echo(render_content(plaintext, content_format))


@main.command()
@click.argument("payload")
def inspect(payload):
    """Show payload parameters without decrypting (string, or @file)."""
    try:
        info = inspect_payload(_read_payload_argument(payload))
    except ProtectorError as e:
        raise click.ClickException(f"Cannot read payload: {e}")
    click.echo(yaml.dump(info, default_flow_style=False, sort_keys=False))


@main.command()
@click.argument("path", type=click.Path(exists=True, dir_okay=False))
@click.option(
    "-o",
    "--output",
    "output_path",
    type=click.Path(dir_okay=False),
    help="Write HTML to file instead of stdout",
)
def render(path, output_path):
    """Render a markdown file to HTML the way the browser does.

    Useful for previewing content before encrypting it with
    --content-format markdown.
    """
    try:
        source = Path(path).read_text(encoding="utf-8")
    except OSError as e:
        raise click.ClickException(f"Cannot read {path}: {e}")
    _write_output(output_path, markdown_to_html(source))


@main.command()
@click.argument("path", type=click.Path(exists=True, dir_okay=False))
@click.option("-p", "--password", help="Decryption password (or use config/env)")
@click.option(
    "--password-file",
    type=click.Path(exists=True, dir_okay=False),
    help="Read password from file",
)
@click.option(
    "-o",
    "--output",
    "output_path",
    type=click.Path(dir_okay=False),
    help="Write unlocked HTML to file instead of stdout",
)
@click.option(
    "-c",
    "--config",
    "config_path",
    type=click.Path(exists=True),
    help="Config file path",
)
def unlock(path, password, password_file, output_path, config_path):
    """Decrypt the protected regions of a rendered HTML page.

    \b
    Examples:
      hugo-protector unlock public/post/index.html -o /tmp/post.html
    """
    if password is None:
        password = _read_password_file(password_file)

    try:
        config = load_config(
            config_path=Path(config_path) if config_path else None,
            start_path=Path(path),
            password_override=password,
        )
    except ProtectorError as e:
        raise click.ClickException(str(e))

    try:
        html = Path(path).read_text(encoding="utf-8")
    except OSError as e:
        raise click.ClickException(f"Cannot read {path}: {e}")

    document = ProtectedDocument(html)
    if not document.mount():
        raise click.ClickException(f"No protected regions found in {path}")

    pwd = config.password
    if not pwd:
        pwd = click.prompt("Enter decryption password", hide_input=True)

    results = document.unlock(pwd)
    unlocked = sum(1 for r in results if r.ok)
    if not unlocked:
        raise click.ClickException(FAILURE_MESSAGE)

    _write_output(output_path, str(document))
    failed = len(results) - unlocked
    click.echo(f"{unlocked} region(s) unlocked, {failed} failed", err=True)


@main.group()
def config():
    """Manage hugo-protector configuration."""
    pass


@config.command("init")
@click.option(
    "-d",
    "--directory",
    type=click.Path(),
    default=".",
    help="Directory to create config in",
)
def config_init(directory):
    """Create a new .hugo-protector.yaml configuration file.

    Remember to add .hugo-protector.yaml to your .gitignore!
    """
    try:
        config_path = create_default_config(Path(directory))
        click.echo(f"Created: {config_path}")
        click.echo("\nNext steps:")
        click.echo(f"  1. Edit the password in {CONFIG_FILENAME}")
        click.echo(f"  2. Add {CONFIG_FILENAME} to .gitignore")
        click.echo("  3. Run: hugo-protector encrypt -i <file>")
    except ProtectorError as e:
        raise click.ClickException(str(e))


@config.command("show")
@click.option(
    "-c",
    "--config",
    "config_path",
    type=click.Path(exists=True),
    help="Config file path",
)
def config_show(config_path):
    """Display current configuration.

    Shows merged configuration from file, environment, and defaults.
    Password is masked for security.
    """
    try:
        cfg = load_config(config_path=Path(config_path) if config_path else None)
        data = config_to_dict(cfg)
        click.echo(yaml.dump(data, default_flow_style=False, sort_keys=False))
    except ProtectorError as e:
        raise click.ClickException(str(e))


@config.command("where")
@click.option(
    "-d",
    "--directory",
    type=click.Path(exists=True),
    help="Directory to search from",
)
def config_where(directory):
    """Show which config file would be used.

    Searches up the directory tree for .hugo-protector.yaml.
    """
    start = Path(directory) if directory else Path.cwd()
    config_path = find_config_file(start)

    if config_path:
        click.echo(f"Config file: {config_path}")
    else:
        click.echo(f"No {CONFIG_FILENAME} found (searched from {start})")


if __name__ == "__main__":
    main()
