"""shellforge: terminal environment provisioning (Python-first, step-driven).

Core design goals:
- Idempotent steps guarded by existence checks
- Bounded retries for network and package manager actions
- Never overwrite user configuration without a backup
- Centralized logging with a per-run log file
- A session banner that degrades instead of failing
"""

import logging

__version__ = "1.0.0"

logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = ["__version__"]
