import logging
import queue
import uuid
from concurrent.futures import Executor, Future, ThreadPoolExecutor
from dataclasses import dataclass, field, replace
from datetime import datetime, timedelta
from typing import Callable, Dict, Iterable, List, Optional

# Ensure component registration by importing modules with registry decorators.
from memocal import encoders as _encoders_pkg  # noqa: F401
from memocal import grammars as _grammars_pkg  # noqa: F401
from memocal import loaders as _loaders_pkg  # noqa: F401
from memocal import sync as _sync_pkg  # noqa: F401

from .config import PipelineConfig
from .debounce import Debouncer
from .encoders.base import CalendarEncoder, export
from .errors import EncodingError, InputValidationError, MemocalError, SyncError
from .grammars.base import TemporalGrammarAdapter
from .ledger import DedupLedger, group_member_identity, mention_identity, numeral_identity
from .normalize import normalize
from .numerals import detect_ambiguous_numerals, group_adjacent
from .registry import encoders, grammars, sync_services
from .reminders import reminder_offsets
from .suggestions import suggest
from .synthesis import EventSynthesizer
from .types import (
    AmbiguousGroup,
    AmbiguousNumeral,
    DateField,
    EventCandidate,
    ExtractionResult,
    ParsedMention,
    Suggestion,
    SyncTarget,
)
from .sync.base import CalendarSyncService

logger = logging.getLogger(__name__)

MISSING_INPUT_MESSAGE = "日付と内容を入力してください。"
UNRECOGNIZED_DATE_MESSAGE = "日付を認識できませんでした。「明日10時」のように入力してください。"
MANUAL_REMOVAL_NOTICE = (
    "アプリ上からは削除されましたが、カレンダー本体の予定はご自身で手動削除をお願いします。"
)
REMOTE_WINDOW = timedelta(days=31)


class TemporalExtractor:
    """One extraction pass: normalize, parse, detect, group, filter."""

    def __init__(self, adapter: TemporalGrammarAdapter) -> None:
        self.adapter = adapter

    def extract(
        self,
        text: str,
        ledger: Optional[DedupLedger] = None,
        now: Optional[datetime] = None,
    ) -> ExtractionResult:
        normalized = normalize(text)
        mentions = self.adapter.parse(normalized, now)
        numerals = detect_ambiguous_numerals(normalized, mentions, ledger)
        groups = group_adjacent(normalized, numerals)
        if ledger is not None:
            mentions = [m for m in mentions if not ledger.is_suppressed(mention_identity(m))]
        return ExtractionResult(text=normalized, mentions=mentions, groups=groups)


@dataclass
class DispatchOutcome:
    """Result of a background sync or export job."""

    operation: str
    candidate_id: Optional[str] = None
    remote_id: Optional[str] = None
    path: Optional[str] = None
    events: List[EventCandidate] = field(default_factory=list)
    error: Optional[MemocalError] = None

    @property
    def ok(self) -> bool:
        return self.error is None


class ExtractionSession:
    """
    Editing session around the extraction engine.

    Owns the dedup ledger and the accepted candidates. Text changes are
    debounced into extraction passes; acceptance, resolution and removal
    update the ledger and hand candidates to the file encoder or the remote
    calendar on a background executor. Background outcomes are queued and
    applied on the session's thread by ``apply_outcomes``.
    """

    def __init__(
        self,
        grammar,
        encoder: CalendarEncoder,
        sync: Optional[CalendarSyncService] = None,
        locale: str = "ja",
        debounce_seconds: float = 0.5,
        default_duration: timedelta = timedelta(hours=1),
        default_title: str = "予定なし",
        output_dir: str = ".memocal",
        executor: Optional[Executor] = None,
        clock: Optional[Callable[[], float]] = None,
    ) -> None:
        self.adapter = TemporalGrammarAdapter(grammar, locale=locale)
        self.extractor = TemporalExtractor(self.adapter)
        self.synthesizer = EventSynthesizer(default_duration, default_title)
        self.encoder = encoder
        self.sync = sync
        self.output_dir = output_dir
        self.ledger = DedupLedger()
        self.candidates: Dict[str, EventCandidate] = {}
        self.result = ExtractionResult(text="")
        self.faults: List[DispatchOutcome] = []
        self.exports: Dict[str, str] = {}
        debounce_kwargs = {"clock": clock} if clock is not None else {}
        self.debouncer = Debouncer(self.run_pass, debounce_seconds, **debounce_kwargs)
        self._executor = executor or ThreadPoolExecutor(
            max_workers=1, thread_name_prefix="memocal-dispatch"
        )
        self._owns_executor = executor is None
        self._outcomes: "queue.Queue[DispatchOutcome]" = queue.Queue()

    @classmethod
    def from_config(cls, config: PipelineConfig, **kwargs) -> "ExtractionSession":
        grammar = grammars.create(config.grammar.name, **config.grammar.params)
        encoder = encoders.create(config.encoder.name, **config.encoder.params)
        sync = None
        if config.sync:
            sync = sync_services.create(config.sync.name, **config.sync.params)
        return cls(
            grammar=grammar,
            encoder=encoder,
            sync=sync,
            locale=config.locale,
            debounce_seconds=config.debounce_seconds,
            default_duration=timedelta(minutes=config.default_duration_minutes),
            default_title=config.default_title,
            output_dir=config.output_dir,
            **kwargs,
        )

    def __enter__(self) -> "ExtractionSession":
        return self

    def __exit__(self, *exc) -> None:
        self.close()

    def close(self) -> None:
        if self._owns_executor:
            self._executor.shutdown(wait=True)

    @property
    def can_sync(self) -> bool:
        return self.sync is not None and self.sync.is_authenticated

    # ------------------------------------------------------------------
    # Detection
    # ------------------------------------------------------------------

    def on_text_changed(self, text: str) -> None:
        """Schedule a pass over ``text`` once typing goes quiet."""
        self.debouncer.schedule(text)

    def poll(self) -> Optional[ExtractionResult]:
        """Apply finished background work and run a due pass, if any."""
        self.apply_outcomes()
        return self.debouncer.poll()

    def run_pass(self, text: str, now: Optional[datetime] = None) -> ExtractionResult:
        """Run one extraction pass; a GrammarError leaves session state untouched."""
        result = self.extractor.extract(text, self.ledger, now)
        self.result = result
        logger.info(
            f"Extraction pass: {len(result.mentions)} mentions, "
            f"{len(result.groups)} ambiguous groups"
        )
        return result

    def suggest(self, raw: str, now: Optional[datetime] = None) -> List[Suggestion]:
        """Completions for the explicit date input field."""
        return suggest(raw, self.adapter, now)

    # ------------------------------------------------------------------
    # Acceptance
    # ------------------------------------------------------------------

    def accept(
        self,
        mention: ParsedMention,
        reminders: Iterable[str] = (),
        sync_target: SyncTarget = SyncTarget.GOOGLE,
    ) -> EventCandidate:
        candidate = self.synthesizer.from_mention(
            self.result.text, mention, reminders, sync_target
        )
        self.ledger.record_accepted(candidate.id)
        return self._commit(candidate, editing=False)

    def resolve_group(
        self,
        group: AmbiguousGroup,
        field: DateField,
        now: Optional[datetime] = None,
        sync_target: SyncTarget = SyncTarget.GOOGLE,
    ) -> List[EventCandidate]:
        candidates = self.synthesizer.from_group(
            self.result.text, group, field, now, sync_target
        )
        committed = []
        for candidate in candidates:
            self.ledger.record_accepted(candidate.id)
            committed.append(self._commit(candidate, editing=False))
        return committed

    def resolve_member(
        self,
        group: AmbiguousGroup,
        numeral: AmbiguousNumeral,
        field: DateField,
        now: Optional[datetime] = None,
        sync_target: SyncTarget = SyncTarget.GOOGLE,
    ) -> EventCandidate:
        candidate = self.synthesizer.from_group_member(
            self.result.text, group, numeral, field, now, sync_target
        )
        self.ledger.record_accepted(candidate.id)
        return self._commit(candidate, editing=False)

    def dismiss_mention(self, mention: ParsedMention) -> None:
        self.ledger.record_dismissed(mention_identity(mention))

    def dismiss_group(self, group: AmbiguousGroup) -> None:
        for numeral in group.members:
            self.ledger.record_dismissed(group_member_identity(group, numeral))

    def dismiss_numeral(self, numeral: AmbiguousNumeral) -> None:
        """Hide one number wherever it is grouped in later passes."""
        self.ledger.record_dismissed(numeral_identity(numeral))

    def save(
        self,
        date_input: str,
        content: str,
        reminders: Iterable[str] = (),
        sync_target: SyncTarget = SyncTarget.GOOGLE,
        editing_id: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> EventCandidate:
        """Save a candidate typed into the explicit date/content form.

        Raises:
            InputValidationError: if a field is empty or the date is not recognized
        """
        if not date_input.strip() or not content.strip():
            raise InputValidationError(MISSING_INPUT_MESSAGE)

        mentions = self.adapter.parse(normalize(date_input), now)
        if not mentions:
            raise InputValidationError(UNRECOGNIZED_DATE_MESSAGE)

        start = mentions[0].resolved_start
        labels = tuple(reminders)
        previous = self.candidates.get(editing_id) if editing_id else None
        candidate = EventCandidate(
            id=editing_id or f"manual:{uuid.uuid4().hex}",
            title=content,
            source_text=date_input,
            start=start,
            end=start + self.synthesizer.default_duration,
            reminder_offsets=reminder_offsets(labels),
            reminders=labels,
            raw_date=date_input,
            sync_target=sync_target,
            remote_id=previous.remote_id if previous else None,
        )
        return self._commit(candidate, editing=editing_id is not None)

    def _commit(self, candidate: EventCandidate, editing: bool) -> EventCandidate:
        if candidate.sync_target is SyncTarget.GOOGLE and self.can_sync:
            if editing and candidate.remote_id:
                self._submit("update", self._update_job, candidate)
            else:
                self._submit("create", self._create_job, candidate)
        elif not editing:
            # Edited file events are not re-exported.
            self._submit("export", self._export_job, candidate)
            if candidate.sync_target is SyncTarget.GOOGLE:
                candidate = replace(candidate, sync_target=SyncTarget.FILE)
        self.candidates[candidate.id] = candidate
        return candidate

    # ------------------------------------------------------------------
    # Removal and remote listing
    # ------------------------------------------------------------------

    def remove(self, candidate_id: str) -> Optional[str]:
        """Remove a candidate and release its ledger entry.

        Returns a notice for the user when the external calendar entry has
        to be removed by hand.
        """
        candidate = self.candidates.pop(candidate_id, None)
        if candidate is None:
            return None
        self.ledger.record_removed(candidate_id)
        if candidate.sync_target is SyncTarget.GOOGLE and candidate.remote_id and self.can_sync:
            self._submit("delete", self._delete_job, candidate)
            return None
        if candidate.sync_target is SyncTarget.FILE:
            return MANUAL_REMOVAL_NOTICE
        return None

    def refresh_remote(self, now: Optional[datetime] = None) -> Optional[Future]:
        """Fetch upcoming remote events; no-op without credentials."""
        if not self.can_sync:
            return None
        now = now or datetime.now()
        return self._submit("list", self._list_job, now, now + REMOTE_WINDOW)

    # ------------------------------------------------------------------
    # Background work
    # ------------------------------------------------------------------

    def _submit(self, operation: str, job: Callable[..., DispatchOutcome], *args) -> Future:
        candidate_id = args[0].id if args and isinstance(args[0], EventCandidate) else None
        future = self._executor.submit(job, *args)
        future.add_done_callback(lambda f: self._collect(operation, candidate_id, f))
        return future

    def _collect(self, operation: str, candidate_id: Optional[str], future: Future) -> None:
        exc = future.exception()
        if exc is None:
            self._outcomes.put(future.result())
            return
        # Jobs only return expected failures; anything else still becomes a fault.
        logger.error(f"Unexpected {operation} failure: {exc!r}")
        detail = f"{type(exc).__name__}: {exc}"
        error = EncodingError(detail) if operation == "export" else SyncError(operation, detail)
        self._outcomes.put(DispatchOutcome(operation, candidate_id, error=error))

    def _create_job(self, candidate: EventCandidate) -> DispatchOutcome:
        try:
            remote_id = self.sync.create(candidate)
        except SyncError as exc:
            return DispatchOutcome("create", candidate.id, error=exc)
        return DispatchOutcome("create", candidate.id, remote_id=remote_id)

    def _update_job(self, candidate: EventCandidate) -> DispatchOutcome:
        try:
            self.sync.update(candidate.remote_id, candidate)
        except SyncError as exc:
            return DispatchOutcome("update", candidate.id, candidate.remote_id, error=exc)
        return DispatchOutcome("update", candidate.id, remote_id=candidate.remote_id)

    def _delete_job(self, candidate: EventCandidate) -> DispatchOutcome:
        try:
            self.sync.delete(candidate.remote_id)
        except SyncError as exc:
            return DispatchOutcome("delete", candidate.id, candidate.remote_id, error=exc)
        return DispatchOutcome("delete", candidate.id, remote_id=candidate.remote_id)

    def _list_job(self, time_min: datetime, time_max: datetime) -> DispatchOutcome:
        try:
            events = self.sync.list(time_min, time_max)
        except SyncError as exc:
            return DispatchOutcome("list", error=exc)
        return DispatchOutcome("list", events=events)

    def _export_job(self, candidate: EventCandidate) -> DispatchOutcome:
        try:
            path = export(self.encoder, candidate, self.output_dir)
        except MemocalError as exc:
            return DispatchOutcome("export", candidate.id, error=exc)
        return DispatchOutcome("export", candidate.id, path=str(path))

    def apply_outcomes(self) -> List[DispatchOutcome]:
        """Fold finished background results into session state."""
        applied: List[DispatchOutcome] = []
        while True:
            try:
                outcome = self._outcomes.get_nowait()
            except queue.Empty:
                break
            applied.append(outcome)
            if not outcome.ok:
                logger.warning(f"{outcome.operation} failed: {outcome.error}")
                self.faults.append(outcome)
                continue
            if outcome.operation == "create" and outcome.candidate_id in self.candidates:
                current = self.candidates[outcome.candidate_id]
                self.candidates[outcome.candidate_id] = replace(
                    current, remote_id=outcome.remote_id
                )
            elif outcome.operation == "export":
                self.exports[outcome.candidate_id] = outcome.path
            elif outcome.operation == "list":
                for event in outcome.events:
                    self.candidates[event.id] = event
        return applied
