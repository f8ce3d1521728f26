"""Composition root for wiring CLI dependencies."""

from __future__ import annotations

from pathlib import Path

from .cli import CliDependencies, create_app
from .config import MatchingConfig
from .exceptions import ProfileApiNotConfiguredError
from .infrastructure import (
    CsvFeedbackStore,
    HttpProfileStore,
    InMemoryFeedbackStore,
    JsonProfileStore,
    LocalFileSystem,
    SystemClock,
    build_profile_api_client,
)
from .protocols import FeedbackStore, ProfileStore


def build_cli_dependencies(*, config: MatchingConfig) -> CliDependencies:
    """Build concrete dependencies for CLI commands.

    Args:
        config: Engine configuration (profile source and feedback log wiring).

    Raises:
        ProfileApiNotConfiguredError: If the API source is selected without a URL.
    """
    fs = LocalFileSystem()
    profile_store: ProfileStore
    if config.profile_source_type == "api":
        if not config.profile_api_url:
            raise ProfileApiNotConfiguredError()
        http_client = build_profile_api_client(
            api_key=config.profile_api_key,
            cache_dir=config.profile_cache_dir,
            max_rpm=config.profile_api_max_rpm,
            min_delay_seconds=config.profile_api_min_delay_seconds,
            circuit_breaker_threshold=config.profile_api_circuit_breaker_threshold,
            circuit_breaker_timeout_seconds=config.profile_api_circuit_breaker_timeout_seconds,
            max_retries=config.profile_api_max_retries,
            backoff_factor=config.profile_api_backoff_factor,
            timeout_seconds=config.profile_api_timeout_seconds,
        )
        profile_store = HttpProfileStore(base_url=config.profile_api_url, http_client=http_client)
    else:
        profile_store = JsonProfileStore(path=Path(config.profiles_path), fs=fs)

    feedback_store: FeedbackStore
    if config.feedback_log_path:
        feedback_store = CsvFeedbackStore(path=Path(config.feedback_log_path), fs=fs)
    else:
        feedback_store = InMemoryFeedbackStore()

    return CliDependencies(
        fs=fs,
        clock=SystemClock(),
        profile_store=profile_store,
        feedback_store=feedback_store,
    )


app = create_app(build_cli_dependencies)
