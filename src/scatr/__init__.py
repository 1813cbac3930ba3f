"""scatr: static code analysis testing runner.

Runs an analyzer over fixture files annotated with expected-issue comments
("pragmas") and reports issues that were raised but not expected, or expected
but not raised.  Autofix output is checked against golden files.
"""

__version__ = "0.3.0"
