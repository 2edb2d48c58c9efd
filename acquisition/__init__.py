"""Exercise acquisition for Vježbajmo.

Decides where each exercise set a learner sees comes from:
- StaticWorksheetRotator: pre-authored worksheets, served first
- ExerciseOrchestrator: the shared cache of generated sets, falling back to
  fresh generation through an LLM provider
- serve_next_exercise: the static-first policy tying the two together
"""

from acquisition.completion import filter_available
from acquisition.orchestrator import Credentials, ExerciseOrchestrator, resolve_credentials
from acquisition.progress import CompletionRecord, InMemoryProgressStore
from acquisition.request import ExerciseRequest
from acquisition.service import ServedExercise, serve_next_exercise
from acquisition.worksheets import StaticWorksheetRotator, WorksheetProgress

__all__ = [
    "CompletionRecord",
    "Credentials",
    "ExerciseOrchestrator",
    "ExerciseRequest",
    "InMemoryProgressStore",
    "ServedExercise",
    "StaticWorksheetRotator",
    "WorksheetProgress",
    "filter_available",
    "resolve_credentials",
    "serve_next_exercise",
]
