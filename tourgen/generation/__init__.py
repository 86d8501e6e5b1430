"""Tour step generation: batches, the welcome step and response parsing."""

from .batches import BatchOutcome, BatchTourGenerator
from .parsing import decode_steps, extract_json_array, parse_steps
from .welcome import ProjectDocs, WelcomeSynthesizer, read_project_docs

__all__ = [
    "BatchOutcome",
    "BatchTourGenerator",
    "ProjectDocs",
    "WelcomeSynthesizer",
    "decode_steps",
    "extract_json_array",
    "parse_steps",
    "read_project_docs",
]
