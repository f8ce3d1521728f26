"""CLI for the matching engine.

Commands:
- sectors: List the sector taxonomy
- recommend: Rank professionals for a training requirement
- suggest: Live suggestions for a partially specified requirement
- feedback: Record an engagement outcome for a recommended professional
- adjust-weights: Run one weight-adjustment cycle over recent feedback
- weights: Show the current dimension weights
- match-jobs: Match job postings to professionals, or one professional to jobs
"""

from __future__ import annotations

import json
from dataclasses import dataclass, replace
from datetime import timedelta
from pathlib import Path
from typing import Annotated, Any, NoReturn, Protocol

import typer
from rich import print as rprint
from rich.table import Table

from . import __version__
from .application.engine import MatchingEngine
from .application.job_matching import load_job_postings
from .application.payloads import (
    parse_partial_requirement,
    parse_requirement,
    recommendation_set_to_dict,
    suggestion_to_dict,
)
from .config import MatchingConfig
from .config_file import load_matching_config_file
from .domain.models import RecommendationSet
from .domain.weights import WeightVector
from .exceptions import (
    ConfigFileNotFoundError,
    ConfigFileParseError,
    ConfigFileValidationError,
    DataUnavailableError,
    MatchingError,
    ValidationError,
)
from .protocols import Clock, FeedbackStore, FileSystem, ProfileStore


class DependenciesBuilder(Protocol):
    """Protocol for constructing CLI dependencies."""

    def __call__(self, *, config: MatchingConfig) -> CliDependencies:
        """Build dependencies for CLI commands."""
        ...


@dataclass(frozen=True)
class CliDependencies:
    """Concrete dependencies required by the CLI."""

    fs: FileSystem
    clock: Clock
    profile_store: ProfileStore
    feedback_store: FeedbackStore


@dataclass(frozen=True)
class CliContext:
    """Runtime CLI context for a single command invocation."""

    config: MatchingConfig
    deps_builder: DependenciesBuilder
    config_path: Path | None = None

    def resolve_config(self) -> MatchingConfig:
        """Environment config with the ``--config`` file applied on top."""
        if self.config_path is None:
            return self.config
        # Only the filesystem is needed to read the file; the profile source may be incomplete.
        fs = self.deps_builder(config=replace(self.config, profile_source_type="file")).fs
        try:
            file_config = load_matching_config_file(path=self.config_path, fs=fs)
        except (ConfigFileNotFoundError, ConfigFileParseError, ConfigFileValidationError) as exc:
            raise typer.BadParameter(str(exc)) from exc
        return self.config.with_file_overrides(file_config)

    def build_engine(self, config: MatchingConfig) -> tuple[MatchingEngine, CliDependencies]:
        try:
            deps = self.deps_builder(config=config)
            engine = MatchingEngine.from_config(
                config,
                profile_store=deps.profile_store,
                feedback_store=deps.feedback_store,
                fs=deps.fs,
                clock=deps.clock,
            )
        except MatchingError as exc:
            _fail(exc)
        return engine, deps


class CliContextNotInitialisedError(typer.BadParameter):
    """Raised when CLI context is missing."""

    def __init__(self) -> None:
        super().__init__("CLI context is not initialised. Use the nexus-match entry point.")


def _get_context(ctx: typer.Context) -> CliContext:
    if not isinstance(ctx.obj, CliContext):
        raise CliContextNotInitialisedError()
    return ctx.obj


def _fail(exc: Exception) -> NoReturn:
    rprint(f"[red]✗ {exc}[/red]")
    raise typer.Exit(code=1)


def _load_index(engine: MatchingEngine) -> None:
    try:
        engine.index.refresh()
    except DataUnavailableError as exc:
        rprint(f"[yellow]! Candidate data unavailable: {exc}[/yellow]")


def _requirement_payload(
    *,
    sector: str,
    training_type: str | None,
    language: str | None,
    training_format: str | None,
    experience: str | None,
    location: str | None,
    budget: float | None,
    skills: list[str] | None,
) -> dict[str, Any]:
    payload: dict[str, Any] = {
        "sector": sector,
        "trainingType": training_type,
        "preferredLanguage": language,
        "format": training_format,
        "experienceLevel": experience,
        "location": location,
        "budgetPerHour": budget,
    }
    if skills:
        payload["specificSkills"] = list(skills)
    return payload


def _print_recommendations(result: RecommendationSet) -> None:
    if result.degraded:
        rprint("[yellow]! Candidate data is unavailable; showing no recommendations[/yellow]")
    table = Table(title=f"{len(result.recommendations)} of {result.total_found} matches")
    table.add_column("#", justify="right")
    table.add_column("Professional")
    table.add_column("Title")
    table.add_column("Score", justify="right")
    table.add_column("Strength")
    table.add_column("Reasons")
    for position, item in enumerate(result.recommendations, start=1):
        table.add_row(
            str(position),
            f"{item.candidate.name} ({item.candidate.id})",
            item.candidate.title,
            f"{item.score.overall_score:.3f}",
            item.match_strength,
            "; ".join(item.score.reasons),
        )
    rprint(table)
    rprint(f"Requirement signature: {result.signature}")


def _print_weights(weights: WeightVector) -> None:
    table = Table(title="Dimension weights")
    table.add_column("Dimension")
    table.add_column("Weight", justify="right")
    for name, value in weights.as_dict().items():
        table.add_row(name, f"{value:.4f}")
    rprint(table)


def _version_callback(value: bool) -> None:
    if value:
        rprint(f"nexus-match {__version__}")
        raise typer.Exit()


SectorOption = Annotated[str, typer.Option("--sector", "-s", help="Sector id (see `sectors`)")]
TrainingTypeOption = Annotated[
    str | None, typer.Option("--training-type", "-t", help="Training topic, e.g. 'Safety Training'")
]
LanguageOption = Annotated[
    str | None, typer.Option("--language", "-l", help="ENGLISH, ARABIC or BILINGUAL")
]
FormatOption = Annotated[
    str | None, typer.Option("--format", "-f", help="ONLINE, IN_PERSON or HYBRID")
]
ExperienceOption = Annotated[
    str | None,
    typer.Option("--experience", "-e", help="entry, junior, intermediate, senior or expert"),
]
LocationOption = Annotated[str | None, typer.Option("--location", help="Training location")]
BudgetOption = Annotated[float | None, typer.Option("--budget", help="Budget per hour")]
SkillOption = Annotated[
    list[str] | None, typer.Option("--skill", help="Specific skill (repeatable)")
]
JsonOption = Annotated[bool, typer.Option("--json", help="Print JSON instead of a table")]


def create_app(deps_builder: DependenciesBuilder) -> typer.Typer:
    """Create a Typer app wired with the provided dependencies builder."""
    app = typer.Typer(
        add_completion=False,
        help="Training-requirement matching engine: recommend → suggest → feedback → adapt",
    )

    @app.callback()
    def main(
        ctx: typer.Context,
        config_path: Annotated[
            Path | None,
            typer.Option("--config", "-c", help="TOML config file with a [matching] section"),
        ] = None,
        version: Annotated[
            bool,
            typer.Option(
                "--version",
                callback=_version_callback,
                is_eager=True,
                help="Show the package version and exit",
            ),
        ] = False,
    ) -> None:
        """Initialise CLI context."""
        _ = version
        ctx.obj = CliContext(
            config=MatchingConfig.from_env(),
            deps_builder=deps_builder,
            config_path=config_path,
        )

    @app.command()
    def sectors(ctx: typer.Context) -> None:
        """List sectors with English and Arabic names."""
        state = _get_context(ctx)
        engine, _deps = state.build_engine(state.resolve_config())
        table = Table(title="Sectors")
        table.add_column("ID")
        table.add_column("English")
        table.add_column("Arabic")
        for sector in engine.list_sectors():
            table.add_row(sector.id, sector.name_en, sector.name_ar)
        rprint(table)

    @app.command()
    def recommend(
        ctx: typer.Context,
        sector: SectorOption,
        training_type: TrainingTypeOption = None,
        language: LanguageOption = "ENGLISH",
        training_format: FormatOption = "HYBRID",
        experience: ExperienceOption = "intermediate",
        location: LocationOption = None,
        budget: BudgetOption = None,
        skill: SkillOption = None,
        top_k: Annotated[int | None, typer.Option("--top-k", "-k", help="Results to return")] = None,
        min_score: Annotated[
            float | None, typer.Option("--min-score", help="Drop matches scoring below this")
        ] = None,
        profiles_path: Annotated[
            str | None, typer.Option("--profiles", help="Override PROFILES_PATH")
        ] = None,
        as_json: JsonOption = False,
    ) -> None:
        """Rank professionals for a training requirement."""
        state = _get_context(ctx)
        config = state.resolve_config().with_overrides(
            profiles_path=profiles_path, min_score=min_score
        )
        engine, _deps = state.build_engine(config)
        try:
            requirement = parse_requirement(
                _requirement_payload(
                    sector=sector,
                    training_type=training_type,
                    language=language,
                    training_format=training_format,
                    experience=experience,
                    location=location,
                    budget=budget,
                    skills=skill,
                )
            )
            _load_index(engine)
            result = engine.recommend(requirement, top_k=top_k)
        except ValidationError as exc:
            _fail(exc)
        if as_json:
            typer.echo(json.dumps(recommendation_set_to_dict(result), ensure_ascii=False, indent=2))
            return
        _print_recommendations(result)

    @app.command()
    def suggest(
        ctx: typer.Context,
        sector: SectorOption,
        training_type: TrainingTypeOption = None,
        language: LanguageOption = None,
        training_format: FormatOption = None,
        experience: ExperienceOption = None,
        location: LocationOption = None,
        as_json: JsonOption = False,
    ) -> None:
        """Top live suggestions for a partially specified requirement."""
        state = _get_context(ctx)
        engine, _deps = state.build_engine(state.resolve_config())
        try:
            requirement = parse_partial_requirement(
                _requirement_payload(
                    sector=sector,
                    training_type=training_type,
                    language=language,
                    training_format=training_format,
                    experience=experience,
                    location=location,
                    budget=None,
                    skills=None,
                )
            )
            _load_index(engine)
            suggestions = engine.suggest(requirement)
        except ValidationError as exc:
            _fail(exc)
        if as_json:
            typer.echo(json.dumps([suggestion_to_dict(item) for item in suggestions], indent=2))
            return
        if not suggestions:
            rprint("[yellow]No suggestions yet[/yellow]")
        for item in suggestions:
            rprint(f"[green]{item.score:.3f}[/green] {item.name} ({item.candidate_id}) {item.title}")

    @app.command()
    def feedback(
        ctx: typer.Context,
        sector: SectorOption,
        candidate_id: Annotated[str, typer.Option("--candidate-id", help="Professional id")],
        booked: Annotated[
            bool, typer.Option("--booked/--not-booked", help="Whether the engagement was booked")
        ],
        training_type: TrainingTypeOption = None,
        language: LanguageOption = "ENGLISH",
        training_format: FormatOption = "HYBRID",
        experience: ExperienceOption = "intermediate",
        location: LocationOption = None,
        rating: Annotated[float | None, typer.Option("--rating", help="Rating 0-5")] = None,
        comment: Annotated[str | None, typer.Option("--comment", help="Free-text feedback")] = None,
    ) -> None:
        """Record the outcome of an engagement found for the given requirement.

        The requirement is ranked again so the feedback carries the dimension
        scores the professional was served with.
        """
        state = _get_context(ctx)
        config = state.resolve_config()
        engine, _deps = state.build_engine(config)
        try:
            requirement = parse_requirement(
                _requirement_payload(
                    sector=sector,
                    training_type=training_type,
                    language=language,
                    training_format=training_format,
                    experience=experience,
                    location=location,
                    budget=None,
                    skills=None,
                )
            )
            _load_index(engine)
            engine.recommend(requirement, top_k=config.max_shortlist)
            ack = engine.record_feedback(
                {
                    "candidateId": candidate_id,
                    "bookingSuccess": booked,
                    "rating": rating,
                    "feedback": comment,
                }
            )
        except ValidationError as exc:
            _fail(exc)
        rprint(f"[green]✓ Feedback recorded for {ack.candidate_id}[/green]")
        if not ack.scores_attached:
            rprint("[yellow]  Professional was not in the ranked results; scores not attached[/yellow]")

    @app.command(name="adjust-weights")
    def adjust_weights(
        ctx: typer.Context,
        window_days: Annotated[
            int | None, typer.Option("--window-days", help="Override FEEDBACK_WINDOW_DAYS")
        ] = None,
    ) -> None:
        """Run one weight-adjustment cycle over recent feedback."""
        state = _get_context(ctx)
        engine, _deps = state.build_engine(state.resolve_config())
        before = engine.current_weights()
        window = timedelta(days=window_days) if window_days else None
        after = engine.adjust_weights(window)
        if after == before:
            rprint("[yellow]Weights unchanged (not enough scored feedback in window)[/yellow]")
        else:
            rprint("[green]✓ Weights adjusted[/green]")
        _print_weights(after)

    @app.command()
    def weights(ctx: typer.Context) -> None:
        """Show the current dimension weights."""
        state = _get_context(ctx)
        engine, _deps = state.build_engine(state.resolve_config())
        _print_weights(engine.current_weights())

    @app.command(name="match-jobs")
    def match_jobs(
        ctx: typer.Context,
        jobs_path: Annotated[Path, typer.Option("--jobs", help='JSON file: {"jobs": [...]}')],
        professional_id: Annotated[
            str | None,
            typer.Option("--professional-id", help="Rank jobs for this professional"),
        ] = None,
        job_id: Annotated[
            str | None, typer.Option("--job-id", help="Rank professionals for this job")
        ] = None,
        top_k: Annotated[int | None, typer.Option("--top-k", "-k", help="Results to return")] = None,
    ) -> None:
        """Match jobs to a professional, or professionals to one job."""
        if (professional_id is None) == (job_id is None):
            raise typer.BadParameter("Pass exactly one of --professional-id or --job-id.")
        state = _get_context(ctx)
        engine, deps = state.build_engine(state.resolve_config())
        try:
            jobs = load_job_postings(path=jobs_path, fs=deps.fs)
            _load_index(engine)
            if professional_id is not None:
                matches = engine.jobs_for_professional(professional_id, jobs, top_k=top_k)
                table = Table(title=f"Jobs for {professional_id}")
                table.add_column("Job")
                table.add_column("Score", justify="right")
                table.add_column("Strength")
                table.add_column("To improve")
                for match in matches:
                    table.add_row(
                        f"{match.job.title} ({match.job.id})",
                        f"{match.score:.3f}",
                        match.match_strength,
                        "; ".join(match.improvement_hints),
                    )
                rprint(table)
                return
            job = next((item for item in jobs if item.id == job_id), None)
            if job is None:
                raise typer.BadParameter(f"Job {job_id!r} not found in {jobs_path}.")
            _print_recommendations(engine.professionals_for_job(job, top_k=top_k))
        except (ValidationError, DataUnavailableError) as exc:
            _fail(exc)

    return app
