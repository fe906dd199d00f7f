from __future__ import annotations

import pytest

from plotmath.Blueprint import AxisSpec, Blueprint
from plotmath.defaults import DEFAULT_COLOR, DEFAULT_EQUATION, DEFAULT_STEPS
from plotmath.ParseBlueprint import coerce_literal_value, parse_blueprint, parse_object_literal


def test_full_blueprint_sections(impedance_text: str) -> None:
    bp = parse_blueprint(impedance_text)

    assert bp.title == "Impedance"
    assert bp.equation == "Z * x / 10"
    assert bp.steps == 100
    assert bp.color == DEFAULT_COLOR
    assert list(bp.parameters) == ["R", "X"]
    assert list(bp.variables.items()) == [("Z", "sqrt(R**2 + X**2)"), ("phase", "Z / R")]

    r = bp.parameters["R"]
    assert (r.label, r.value, r.min, r.max, r.step) == ("Resistance", 10.0, 0.0, 50.0, 1.0)

    assert bp.axis.x == AxisSpec(title="Frequency", min=0.0, max=10.0)
    assert bp.axis.y == AxisSpec(title="|Z|", min=0.0, max=50.0)
    assert not bp.is_implicit


def test_implicit_equation_is_detected(circle_text: str) -> None:
    bp = parse_blueprint(circle_text)
    assert bp.is_implicit
    assert bp.split_equation() == ("x**2 + y**2", "r**2")
    assert bp.color == "rgb(0, 200, 255)"


def test_unrecognized_text_yields_all_defaults() -> None:
    bp = parse_blueprint("this is not a blueprint\n   just words\n\n!!!")

    assert bp == Blueprint()
    assert bp.title == ""
    assert bp.equation == DEFAULT_EQUATION
    assert bp.steps == DEFAULT_STEPS
    assert bp.axis.x == AxisSpec()
    assert dict(bp.parameters) == {}
    assert dict(bp.variables) == {}


def test_empty_text_parses() -> None:
    assert parse_blueprint("") == Blueprint()


def test_comments_and_blank_lines_are_skipped() -> None:
    text = "# title: nope\n\n   # equation: nope\nequation: sin(x)\n"
    bp = parse_blueprint(text)
    assert bp.title == ""
    assert bp.equation == "sin(x)"


def test_section_keys_are_case_insensitive_and_aliased() -> None:
    text = (
        "PARAMETERS:\n"
        "  a: { value: 1, min: 0, max: 2 }\n"
        "Variables:\n"
        "  b: a * 2\n"
    )
    bp = parse_blueprint(text)
    assert list(bp.parameters) == ["a"]
    assert dict(bp.variables) == {"b": "a * 2"}


def test_root_key_resets_section() -> None:
    text = (
        "vars:\n"
        "  a: 1\n"
        "title: T\n"
        "  b: 2\n"
    )
    bp = parse_blueprint(text)
    assert dict(bp.variables) == {"a": "1"}


def test_unknown_root_keys_are_ignored() -> None:
    bp = parse_blueprint("author: someone\nequation: x")
    assert bp.equation == "x"


def test_equation_keeps_everything_after_first_colon() -> None:
    bp = parse_blueprint("title: Ratio: a over b")
    assert bp.title == "Ratio: a over b"


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("250", 250),
        ("12.7", 12),
        ("0", DEFAULT_STEPS),
        ("-5", DEFAULT_STEPS),
        ("lots", DEFAULT_STEPS),
        ("", DEFAULT_STEPS),
    ],
)
def test_steps_parsing(raw: str, expected: int) -> None:
    assert parse_blueprint(f"steps: {raw}").steps == expected


def test_malformed_parameter_literal_is_not_declared() -> None:
    text = "params:\n  a: { value: 1, min: 0\n  b: { value: 2 }\n"
    bp = parse_blueprint(text)
    assert list(bp.parameters) == ["b"]


def test_parameter_defaults_fill_missing_fields() -> None:
    bp = parse_blueprint("params:\n  k: {}\n")
    k = bp.parameters["k"]
    assert k.label == "k"
    assert (k.min, k.max, k.value) == (-10.0, 10.0, 0.0)
    assert k.step == pytest.approx(0.2)


def test_non_numeric_parameter_fields_fall_back() -> None:
    bp = parse_blueprint('params:\n  k: { value: "lots", min: 1, max: 3, step: -1 }\n')
    k = bp.parameters["k"]
    assert k.value == 1.0  # default 0 clamped into [1, 3]
    assert k.step == pytest.approx(0.02)


def test_axis_other_keys_are_ignored_and_malformed_axis_keeps_defaults() -> None:
    text = "axis:\n  z: { min: 0, max: 1 }\n  x: { min: 0, max: 1\n  y: { max: 5 }\n"
    bp = parse_blueprint(text)
    assert bp.axis.x == AxisSpec()
    assert bp.axis.y == AxisSpec(max=5.0)


def test_variables_store_raw_text_verbatim() -> None:
    bp = parse_blueprint("vars:\n  w: 2*PI*  f  \n")
    assert bp.variables["w"] == "2*PI*  f"


def test_crlf_line_endings() -> None:
    bp = parse_blueprint("title: A\r\nequation: x + 1\r\n")
    assert (bp.title, bp.equation) == ("A", "x + 1")


def test_object_literal_respects_quoted_commas_and_strips_quotes() -> None:
    props = parse_object_literal("{ label: 'Gain, dB', value: '3', min: -1e1 }")
    assert props == {"label": "Gain, dB", "value": 3.0, "min": -10.0}


def test_object_literal_without_braces_returns_none() -> None:
    assert parse_object_literal("value: 3") is None


def test_object_literal_drops_empty_entries() -> None:
    assert parse_object_literal("{ a: , : 3, b: 4, }") == {"b": 4.0}


def test_coerce_literal_value_keeps_words() -> None:
    assert coerce_literal_value("inf") == "inf"
    assert coerce_literal_value("  12 ") == 12.0


def test_blueprint_is_immutable(impedance_text: str) -> None:
    bp = parse_blueprint(impedance_text)
    with pytest.raises(AttributeError):
        bp.equation = "x"  # type: ignore[misc]
    with pytest.raises(TypeError):
        bp.variables["Q"] = "1"  # type: ignore[index]
