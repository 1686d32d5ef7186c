"""
Rendering of template assets with Jinja2.

Templates reference values with `{{ ValueName }}` or, in the style of Go and Helm templates, with a leading dot as
in `{{ .Values.name }}`. Comments use the Go template syntax `{{/* ... */}}`, so `{#` has no special meaning in
literal content. Reusable fragments are defined as Jinja2 macros in helper assets; they are collected into a
#HelperRegistry before the primary template is rendered and can be invoked by name (`{{ fullname() }}`) or via
`{{ include("fullname") }}`.
"""

import dataclasses
import re
from collections.abc import Iterable, Iterator, Mapping
from contextlib import contextmanager
from types import TracebackType
from typing import Any

import jinja2
from jinja2.ext import Extension
from jinja2.lexer import (
    TOKEN_DOT,
    TOKEN_FLOAT,
    TOKEN_INTEGER,
    TOKEN_NAME,
    TOKEN_RBRACE,
    TOKEN_RBRACKET,
    TOKEN_RPAREN,
    TOKEN_STRING,
    Token,
    TokenStream,
)
from jinja2.runtime import Macro
from loguru import logger

from stencil.errors import MissingValueError, TemplateSyntaxError
from stencil.sources import Asset

_UNDEFINED_NAME_PATTERN = re.compile(r"^'(?P<path>.+)' is undefined$")
_UNDEFINED_MEMBER_PATTERN = re.compile(r"has no (?:attribute|element) '?(?P<path>[^']+)'?$")

# Keywords after which a dot starts a new expression rather than accessing a member.
_EXPRESSION_KEYWORDS = frozenset({"if", "elif", "else", "not", "and", "or", "in", "is", "for", "set", "with", "do"})
_VALUE_END_TOKENS = frozenset({TOKEN_RPAREN, TOKEN_RBRACKET, TOKEN_RBRACE, TOKEN_STRING, TOKEN_INTEGER, TOKEN_FLOAT})


def _ends_value(token: Token | None) -> bool:
    if token is None:
        return False
    if token.type == TOKEN_NAME:
        return token.value not in _EXPRESSION_KEYWORDS
    return token.type in _VALUE_END_TOKENS


class LeadingDotExtension(Extension):
    """
    Drops the leading dot of Go-style field references (`.Values.name`) in expressions and statements, turning them
    into plain Jinja2 variable references (`Values.name`).

    Works on the token stream, so literal text, `{% raw %}` sections and string literals are never touched.
    """

    def filter_stream(self, stream: TokenStream) -> Iterator[Token]:
        previous: Token | None = None
        pending: Token | None = None
        for token in stream:
            if pending is not None:
                if token.type != TOKEN_NAME:
                    yield pending
                pending = None
            if token.type == TOKEN_DOT and not _ends_value(previous):
                pending = token
            else:
                yield token
            previous = token
        if pending is not None:
            yield pending


class _ValueMapping(dict[Any, Any]):
    """
    A mapping of values that remembers where it is located in the template context.
    """

    def __init__(self, items: Mapping[Any, Any], value_path: str) -> None:
        super().__init__(items)
        self._value_path = value_path


class _ValueList(list[Any]):
    """
    A list of values that remembers where it is located in the template context.
    """

    def __init__(self, items: Iterable[Any], value_path: str) -> None:
        super().__init__(items)
        self._value_path = value_path


def _with_paths(value: Any, path: str) -> Any:
    if isinstance(value, Mapping):
        return _ValueMapping({key: _with_paths(item, f"{path}.{key}") for key, item in value.items()}, path)
    if isinstance(value, (list, tuple)):
        return _ValueList((_with_paths(item, f"{path}[{idx}]") for idx, item in enumerate(value)), path)
    return value


class PathUndefined(jinja2.StrictUndefined):
    """
    A #jinja2.StrictUndefined that names the full path of the missing value, e.g. `'Values.b.name' is undefined`,
    when the value was looked up on a mapping or list from the template context.
    """

    __slots__ = ()

    @property
    def _undefined_message(self) -> str:
        parent = getattr(self._undefined_obj, "_value_path", None)
        if self._undefined_hint or parent is None:
            return super()._undefined_message
        if isinstance(self._undefined_name, str):
            return f"'{parent}.{self._undefined_name}' is undefined"
        return f"'{parent}[{self._undefined_name!r}]' is undefined"


def values_to_context(values: Any) -> dict[str, Any]:
    """
    Convert a value set into a template context. Mappings are used as-is, dataclasses contribute their fields and
    any other object contributes its public attributes. Nested mappings and lists are copied so that a missing
    value can be reported by its full path.
    """

    if values is None:
        return {}
    if isinstance(values, Mapping):
        items = dict(values)
    elif dataclasses.is_dataclass(values) and not isinstance(values, type):
        items = {field.name: getattr(values, field.name) for field in dataclasses.fields(values)}
    else:
        items = {key: getattr(values, key) for key in dir(values) if not key.startswith("_")}
    return {key: _with_paths(value, str(key)) for key, value in items.items()}


def _missing_path(exc: jinja2.UndefinedError) -> str:
    message = exc.message or ""
    match = _UNDEFINED_NAME_PATTERN.search(message) or _UNDEFINED_MEMBER_PATTERN.search(message)
    return match.group("path") if match else message


def _template_lineno(tb: TracebackType | None) -> int | None:
    """
    Returns the template line of the outermost template frame in *tb*. Jinja2 rewrites tracebacks so that template
    frames point at the template source.
    """

    while tb is not None:
        if "__jinja_exception__" in tb.tb_frame.f_globals:
            return tb.tb_lineno
        tb = tb.tb_next
    return None


@contextmanager
def _template_errors(asset: str) -> Iterator[None]:
    """
    Translates Jinja2 errors into Stencil errors that name the offending asset.
    """

    try:
        yield
    except jinja2.TemplateSyntaxError as exc:
        raise TemplateSyntaxError(asset, exc.lineno, exc.message or str(exc)) from exc
    except jinja2.UndefinedError as exc:
        raise MissingValueError(asset, _missing_path(exc), exc.message, _template_lineno(exc.__traceback__)) from exc


class HelperRegistry:
    """
    A registry of named helper macros, bound to the Jinja2 environment that the primary templates are rendered in.
    """

    def __init__(self, environment: jinja2.Environment) -> None:
        self.environment = environment
        self.macros: dict[str, Macro] = {}
        environment.globals["include"] = self.include

    def register(self, name: str, macro: Macro) -> None:
        if name in self.macros:
            logger.debug("Helper '{}' is redefined", name)
        self.macros[name] = macro
        self.environment.globals[name] = macro

    def include(self, name: str, *args: Any, **kwargs: Any) -> str:
        """
        Invoke the helper with the given *name*. Exposed to templates as `include()`.
        """

        if name not in self.macros:
            raise jinja2.UndefinedError(f"'{name}' is undefined")
        return str(self.macros[name](*args, **kwargs))


class Renderer:
    """
    Renders template assets against a value set.

    Args:
        strict: If enabled, referencing an undefined value raises a #MissingValueError. Otherwise, undefined values
                render as empty strings.
    """

    def __init__(self, strict: bool = True) -> None:
        self.strict = strict

    def environment(self) -> jinja2.Environment:
        return jinja2.Environment(
            undefined=PathUndefined if self.strict else jinja2.ChainableUndefined,
            comment_start_string="{{/*",
            comment_end_string="*/}}",
            keep_trailing_newline=True,
            autoescape=False,
            extensions=[LeadingDotExtension],
        )

    def _source(self, content: bytes, asset: str) -> str:
        try:
            return content.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise TemplateSyntaxError(asset, None, f"not valid UTF-8: {exc}") from exc

    def collect_helpers(self, helpers: Iterable[Asset], values: Any = None) -> HelperRegistry:
        """
        Compile the given helper assets and register every macro they define. The macros see the same values as the
        templates they are invoked from and may invoke each other.
        """

        registry = HelperRegistry(self.environment())
        context = values_to_context(values)
        for asset in helpers:
            with _template_errors(asset.name):
                module = registry.environment.from_string(self._source(asset.content, asset.name)).make_module(context)
            for name, value in vars(module).items():
                if isinstance(value, Macro):
                    registry.register(name, value)
            logger.trace("Collected helpers from '{}': {}", asset.name, sorted(registry.macros))
        return registry

    def render(
        self,
        content: bytes,
        values: Any = None,
        *,
        name: str = "<string>",
        helpers: HelperRegistry | None = None,
    ) -> bytes:
        """
        Render the template *content* with the given *values*.

        Args:
            content: The template source.
            values: A mapping or object whose members are available to the template.
            name: The name of the asset, for error reporting.
            helpers: Helpers to make available to the template, see #collect_helpers().
        Raises:
            TemplateSyntaxError: If the template is malformed.
            MissingValueError: If in strict mode and the template references an undefined value.
        """

        environment = helpers.environment if helpers is not None else self.environment()
        source = self._source(content, name)
        with _template_errors(name):
            template = environment.from_string(source)
            result = template.render(values_to_context(values))
        return result.encode("utf-8")
