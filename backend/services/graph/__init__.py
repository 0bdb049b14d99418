# Graph service submodules. Public functions are re-exported through the services_graph facade.
from . import concepts
from . import maps
from . import paths
from . import relationships
from . import store

__all__ = [
    "concepts",
    "maps",
    "paths",
    "relationships",
    "store",
]
