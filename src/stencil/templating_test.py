from dataclasses import dataclass
from textwrap import dedent

import pytest

from stencil.errors import MissingValueError, TemplateSyntaxError
from stencil.sources import Asset
from stencil.templating import Renderer, values_to_context

HELPERS = dedent(
    """
    {% macro fullname() -%}
    {{ .Values.prefix }}-{{ .Values.name }}
    {%- endmacro %}

    {% macro labels(component) -%}
    app: {{ fullname() }}
    component: {{ component }}
    {%- endmacro %}
    """
).encode()


@dataclass
class ClusterValues:
    ManagedClusterName: str
    ManagedClusterNamespace: str


def test__Renderer__substitutes_leading_dot_and_plain_references() -> None:
    template = b"name: {{ .ManagedClusterName }}\nnamespace: {{ ManagedClusterNamespace }}\n"
    values = {"ManagedClusterName": "c1", "ManagedClusterNamespace": "ns1"}
    assert Renderer().render(template, values) == b"name: c1\nnamespace: ns1\n"


def test__Renderer__accepts_objects_as_values() -> None:
    template = b"{{ .ManagedClusterName }}/{{ .ManagedClusterNamespace }}"
    assert Renderer().render(template, ClusterValues("c1", "ns1")) == b"c1/ns1"


def test__Renderer__resolves_nested_paths() -> None:
    template = b"{{ .Values.image.tag }} {% if .Values.enabled %}on{% endif %}"
    values = {"Values": {"image": {"tag": "1.0"}, "enabled": True}}
    assert Renderer().render(template, values) == b"1.0 on"


def test__Renderer__leaves_literal_content_untouched() -> None:
    content = b"kind: ConfigMap\ndata:\n  key: .value\n  other: 'x.y'\n\n"
    assert Renderer().render(content, {}) == content


def test__Renderer__leaves_raw_sections_untouched() -> None:
    content = b"data:\n  alert: '{% raw %}{{ .Labels.instance }}{% endraw %}'\n"
    assert Renderer().render(content, {}) == b"data:\n  alert: '{{ .Labels.instance }}'\n"


def test__Renderer__leaves_string_literals_untouched() -> None:
    assert Renderer().render(b'{{ "see .docs" }} {{ .Name ~ ".yaml" }}', {"Name": "a"}) == b"see .docs a.yaml"


def test__Renderer__hash_brace_is_literal_text() -> None:
    content = b"data:\n  run.sh: |\n    echo ${#ARGS[@]} {#x}\n"
    assert Renderer().render(content, {}) == content


def test__Renderer__strips_go_style_comments() -> None:
    assert Renderer().render(b"a: {{/* the name */}}{{ .Name }}\n", {"Name": "x"}) == b"a: x\n"


def test__Renderer__leading_dot_after_keywords_and_operators() -> None:
    template = b"{% if not .Off and .On %}{{ .A ~ .B }}{% endif %}{% for h in .Hosts %},{{ h }}{% endfor %}"
    values = {"Off": False, "On": True, "A": "a", "B": "b", "Hosts": ["x", "y"]}
    assert Renderer().render(template, values) == b"ab,x,y"


def test__Renderer__strict_mode_raises_missing_value_error() -> None:
    with pytest.raises(MissingValueError) as excinfo:
        Renderer().render(b"name: {{ .BootstrapServiceAccountName }}\n", {}, name="sa.yaml")
    assert excinfo.value.asset == "sa.yaml"
    assert excinfo.value.path == "BootstrapServiceAccountName"
    assert "sa.yaml" in str(excinfo.value)


def test__Renderer__strict_mode_reports_missing_nested_member() -> None:
    with pytest.raises(MissingValueError) as excinfo:
        Renderer().render(b"{{ .Values.missing }}", {"Values": {"name": "x"}}, name="t.yaml")
    assert excinfo.value.path == "Values.missing"


def test__Renderer__missing_value_names_the_full_path_and_line() -> None:
    template = b"a: {{ .Values.a.name }}\nb: {{ .Values.b.name }}\n"
    values = {"Values": {"a": {"name": "x"}, "b": {}}}
    with pytest.raises(MissingValueError) as excinfo:
        Renderer().render(template, values, name="t.yaml")
    assert excinfo.value.path == "Values.b.name"
    assert excinfo.value.lineno == 2
    assert "t.yaml:2" in str(excinfo.value)


def test__Renderer__missing_list_element_names_the_index() -> None:
    with pytest.raises(MissingValueError) as excinfo:
        Renderer().render(b"{{ .Values.hosts[2] }}", {"Values": {"hosts": ["a", "b"]}})
    assert excinfo.value.path == "Values.hosts[2]"


def test__Renderer__lenient_mode_renders_missing_values_empty() -> None:
    renderer = Renderer(strict=False)
    assert renderer.render(b"a: '{{ .Missing }}'\nb: '{{ .Values.x.y }}'\n", {}) == b"a: ''\nb: ''\n"


def test__Renderer__syntax_errors_carry_asset_and_line() -> None:
    with pytest.raises(TemplateSyntaxError) as excinfo:
        Renderer().render(b"a: 1\nb: {{ .Name \n", {"Name": "x"}, name="broken.yaml")
    assert excinfo.value.asset == "broken.yaml"
    assert excinfo.value.lineno == 2


def test__Renderer__rejects_invalid_utf8() -> None:
    with pytest.raises(TemplateSyntaxError, match="UTF-8"):
        Renderer().render(b"\xff\xfe", {}, name="binary")


def test__Renderer__helpers_are_callable_by_name_and_via_include() -> None:
    renderer = Renderer()
    values = {"Values": {"prefix": "system", "name": "test"}}
    helpers = renderer.collect_helpers([Asset("_helpers.tpl", HELPERS)], values)
    assert sorted(helpers.macros) == ["fullname", "labels"]

    template = b'name: {{ fullname() }}\nalias: {{ include("fullname") }}\nlabels:\n  {{ labels("web") | indent(2) }}\n'
    assert renderer.render(template, values, helpers=helpers) == (
        b"name: system-test\nalias: system-test\nlabels:\n  app: system-test\n  component: web\n"
    )


def test__Renderer__include_of_unknown_helper_is_a_missing_value() -> None:
    renderer = Renderer()
    helpers = renderer.collect_helpers([], {})
    with pytest.raises(MissingValueError) as excinfo:
        renderer.render(b'{{ include("nope") }}', {}, name="t.yaml", helpers=helpers)
    assert excinfo.value.path == "nope"


def test__Renderer__later_helpers_override_earlier_ones() -> None:
    renderer = Renderer()
    helpers = renderer.collect_helpers(
        [
            Asset("a_helpers.tpl", b"{% macro name() %}first{% endmacro %}"),
            Asset("b_helpers.tpl", b"{% macro name() %}second{% endmacro %}"),
        ]
    )
    assert renderer.render(b"{{ name() }}", helpers=helpers) == b"second"


def test__Renderer__helper_syntax_errors_name_the_helper_asset() -> None:
    with pytest.raises(TemplateSyntaxError) as excinfo:
        Renderer().collect_helpers([Asset("_helpers.tpl", b"{% macro broken( %}")])
    assert excinfo.value.asset == "_helpers.tpl"


def test__values_to_context() -> None:
    class Plain:
        def __init__(self) -> None:
            self.Name = "x"
            self._hidden = "y"

    assert values_to_context(None) == {}
    assert values_to_context({"a": 1}) == {"a": 1}
    assert values_to_context(ClusterValues("c", "n")) == {"ManagedClusterName": "c", "ManagedClusterNamespace": "n"}
    assert values_to_context(Plain()) == {"Name": "x"}
