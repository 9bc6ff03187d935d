from __future__ import annotations

from ..models.config import MigrationConfig
from ..stores.base import ContentStore


class PreFlightCheckError(Exception):
    """Custom exception for pre-flight check failures."""
    pass


def run_pre_flight_checks(store: ContentStore, config: MigrationConfig) -> None:
    """
    Verifies that the content store is ready for the requested migration.

    Args:
        store: The content store the job will run against.
        config: The run configuration.

    Raises:
        PreFlightCheckError: If any check fails.
    """
    if not store.has_schema():
        raise PreFlightCheckError(
            "The content store has no posts/terms tables. Run scripts/initialize_database.py first."
        )

    if config.assigns_term and not store.has_taxonomy(config.taxonomy):
        raise PreFlightCheckError(f'Taxonomy "{config.taxonomy}" is not registered in the content store.')
