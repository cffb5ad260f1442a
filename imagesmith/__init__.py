"""Imagesmith: continuous container image build agent.

Watches source repositories for new commits and, for each newly observed
commit, clones the repository, builds a container image, pushes it to a
registry and reports the outcome to the configured notification channels.

  - Poll loop with persisted last-built commit per repository (SQLite)
  - Strict clone -> build -> publish pipeline, one build in flight at a time
  - Fire-and-forget notifiers: console, chat webhook, success webhook, JSON log
  - Graceful stop between stages and during the poll sleep
"""

__version__ = "0.2.0"
__description__ = "Continuous container image build agent"

from imagesmith.core.orchestrator import Orchestrator
from imagesmith.core.pipeline import BuildPipeline
from imagesmith.core.state_store import BuildStateStore

__all__ = ["Orchestrator", "BuildPipeline", "BuildStateStore", "__version__"]
