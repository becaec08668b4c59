"""Sybil configuration for testing documentation examples."""

from sybil import Sybil
from sybil.parsers.markdown import PythonCodeBlockParser

# Every python block in examples.md runs, in order, in one namespace
pytest_collect_file = Sybil(
    parsers=[PythonCodeBlockParser()],
    patterns=["examples.md"],
).pytest()
