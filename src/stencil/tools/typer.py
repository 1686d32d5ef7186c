from typing import Any

from typer import Typer


def new_typer(**kwargs: Any) -> Typer:
    return Typer(no_args_is_help=True, pretty_exceptions_enable=False, rich_markup_mode="rich", **kwargs)
