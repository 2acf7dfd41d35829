"""tablebook: compile declarative table books into resolved spreadsheet books."""

__version__ = "0.1.0"

from tablebook.engine.generate import generate
from tablebook.engine.process import process_book as process
from tablebook.io.parser import parse
from tablebook.validation.validators import validate

__all__ = ["__version__", "generate", "parse", "process", "validate"]
