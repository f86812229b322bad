"""fxprofile: parameter profiling for audio plugin hosts.

Samples a plugin parameter's display strings across its normalized range,
classifies the parameter (binary, enumerated or continuous with a scaling
curve) and caches the resulting profile per plugin for value translation.
"""

# Export the public API
from .api import *  # noqa: F403, F401
from .api import __all__, __version__  # noqa: F401
