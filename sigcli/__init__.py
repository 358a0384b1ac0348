"""
sigcli: command-line interfaces derived from Python signatures.

Annotate parameters with the markers (Alias, Description, PrettyName, Option),
register the callables on an Application, and run it:

    app = Application("tool", "what the tool does", version="1.0.0")

    @app.command
    def build(target, jobs: Annotated[int, Option(), Alias("-j")] = 1): ...

    app.run()
"""
__title__ = 'sigcli'
__author__ = 'Eiko Reishin (影皇嶺臣)'
__license__ = 'MIT'
# Placeholder, modified by dynamic-versioning.
__version__ = "0.0.0"

import logging
from collections import namedtuple

from . import arguments, commands, dispatch, faults, markers, naming
from .arguments import *
from .commands import *
from .dispatch import *
from .faults import *
from .markers import *
from .naming import *

VersionInfo = namedtuple("VersionInfo", ("major", "minor", "micro", "releaselevel", "serial", "metadata"))

# Placeholder, modified by dynamic-versioning.
version_info = VersionInfo(0, 0, 0, "final", 0, "")

# Silent unless the host application configures logging.
logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = (
    "__title__",
    "__author__",
    "__license__",
    "__version__",
    "version_info",
    *markers.__all__,
    *naming.__all__,
    *arguments.__all__,
    *commands.__all__,
    *dispatch.__all__,
    *faults.__all__,
)
