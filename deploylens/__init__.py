"""deploylens: deployment log interpretation and live viewing.

- StageClassifier: reconstructs the Prepare -> Health Check timeline from
  free-text deployment logs using an injectable rule table
- LogBuffer: bounded FIFO store with level inference and filtering
- AutoscrollController: follow/detach state machine with a persisted seed
- LogSession: serialized event queue wiring the three together
"""

__version__ = "0.1.0"
__description__ = "Deployment log stage timelines and live log viewing"

from deploylens.core.autoscroll import AutoscrollController
from deploylens.core.classifier import StageClassifier, classify
from deploylens.core.log_buffer import LogBuffer
from deploylens.core.session import LogSession

__all__ = [
    "AutoscrollController",
    "LogBuffer",
    "LogSession",
    "StageClassifier",
    "classify",
    "__version__",
]
