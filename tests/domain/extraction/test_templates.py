from __future__ import annotations

from unionwatch.domain.extraction import placeholders, render_template


def test_render_replaces_known_placeholders() -> None:
    rendered = render_template(
        "Investigá {{name}} en {{currentYear}}.", {"name": "Sindicato X", "currentYear": 2025}
    )

    assert rendered == "Investigá Sindicato X en 2025."


def test_render_leaves_unknown_placeholders_verbatim() -> None:
    assert render_template("Hola {{name}} {{missing}}", {"name": "SX"}) == "Hola SX {{missing}}"


def test_render_does_not_expand_substituted_values() -> None:
    rendered = render_template("{{a}} {{b}}", {"a": "{{b}}", "b": "B"})

    assert rendered == "{{b}} B"


def test_placeholders_lists_names() -> None:
    assert placeholders("{{url}} y {{todayString}} y {{url}}") == {"url", "todayString"}
