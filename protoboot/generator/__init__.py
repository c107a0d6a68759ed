"""protoboot code generator."""

from .loader import ValidationError as ValidationError
from .loader import load as load
from .loader import validate as validate
from .python import GenerationError as GenerationError
from .python import render as render
from .types import *
