from config.models import Config
from core.contracts.source import CommitSource
from core.registry import source_registry
from utils.errors import SourceError

# Importing the package registers the GitHub source.
import core.github  # noqa: F401


def get_source(config: Config) -> CommitSource:
    """
    Factory function to get a commit source instance based on the config.

    Raises:
        SourceError: If the source is not registered or fails to be created.
    """
    if config.source not in source_registry:
        available = list(source_registry.keys())
        raise SourceError(
            f"Unknown source '{config.source}'. "
            f"Available sources: {available}"
        )

    # Each source reads its own section of the config, named after the source.
    source_config = getattr(config, config.source, None)
    try:
        return source_registry.create(config.source, config=source_config)
    except Exception as e:
        raise SourceError(f"Failed to create source '{config.source}': {e}") from e
