"""Error kinds raised while building a terrain."""


class TerrainError(Exception):
    """Base class for every terrain construction failure."""


class InvalidInput(TerrainError, ValueError):
    """Sites or configuration values cannot produce a decomposition."""


class TopologyInconsistency(TerrainError):
    """The decomposition breaks the winding or index contract."""


class DependencyFailure(TerrainError):
    """The tessellation engine or the noise function failed."""
