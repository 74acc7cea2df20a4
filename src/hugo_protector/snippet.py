"""Helper snippets for embedding payloads in Hugo content.

The shortcode form goes into a page body; the page form is a front
matter line picked up by the full-page layout partial.
"""

from .crypto import InvalidInputError

MODES = ("shortcode", "page")
OUTPUT_FORMATS = ("helper", "raw")

# Optional shortcode parameters, in the order they are emitted
SHORTCODE_ATTRIBUTES = ("format", "prompt", "hint", "button")


def _quote(value: str) -> str:
    """Quote a value for a double-quoted Hugo shortcode/YAML string."""
    return '"' + str(value).replace("\\", "\\\\").replace('"', '\\"') + '"'


def render_helper(mode: str, payload: str, **attrs: str | None) -> str:
    """Render the mode-specific snippet wrapping a payload.

    Args:
        mode: "shortcode" or "page".
        payload: Transport string from payload.encode().
        **attrs: Optional shortcode parameters (format, prompt, hint,
            button). Ignored in page mode. None or empty values are skipped.

    Returns:
        Snippet text ready to paste into a content file.
    """
    if mode == "page":
        return f"# front matter snippet\nprotector_full_page_payload: {_quote(payload)}"
    if mode != "shortcode":
        raise InvalidInputError(
            f"Invalid mode: {mode}. Must be one of: {', '.join(MODES)}"
        )

    unknown = set(attrs) - set(SHORTCODE_ATTRIBUTES)
    if unknown:
        raise InvalidInputError(
            f"Unknown shortcode parameter(s): {', '.join(sorted(unknown))}"
        )

    params = [f"payload={_quote(payload)}"]
    for name in SHORTCODE_ATTRIBUTES:
        value = attrs.get(name)
        if value:
            params.append(f"{name}={_quote(value)}")
    return "{{< protector " + " ".join(params) + " >}}"


def render_output(
    output_format: str, mode: str, payload: str, **attrs: str | None
) -> str:
    """Render command output: the bare payload or a helper snippet."""
    if output_format == "raw":
        return payload
    if output_format != "helper":
        raise InvalidInputError(
            f"Invalid format: {output_format}. "
            f"Must be one of: {', '.join(OUTPUT_FORMATS)}"
        )
    return render_helper(mode, payload, **attrs)
