"""
Package version: installed metadata first, then the source tree's pyproject.toml.
"""
import importlib.metadata
import pathlib

import tomli

DISTRIBUTION = "harmony-lib"
FALLBACK_VERSION = "0.3.0"


def _source_tree_version() -> str:
    pyproject = pathlib.Path(__file__).resolve().parent.parent / "pyproject.toml"
    try:
        with pyproject.open("rb") as f:
            return tomli.load(f)["project"]["version"]
    except (FileNotFoundError, KeyError, tomli.TOMLDecodeError):
        return FALLBACK_VERSION


def get_version() -> str:
    try:
        return importlib.metadata.version(DISTRIBUTION)
    except importlib.metadata.PackageNotFoundError:
        return _source_tree_version()


__version__ = get_version()
