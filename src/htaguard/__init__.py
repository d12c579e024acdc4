"""htaguard - structural validation and scoring for hierarchical task analysis trees."""

import logging
from importlib.metadata import version, PackageNotFoundError

try:
    __version__ = version("htaguard")
except PackageNotFoundError:
    # Package not installed (development mode without editable install)
    __version__ = "0.3.0"

from htaguard.core.tree import AnalysisNode, TreeFormatError
from htaguard.core.validation import ValidationResult, validate_tree

# Silent until configure_logging() attaches a real handler
logging.getLogger("htaguard").addHandler(logging.NullHandler())

__all__ = [
    "__version__",
    "AnalysisNode",
    "TreeFormatError",
    "ValidationResult",
    "validate_tree",
]
