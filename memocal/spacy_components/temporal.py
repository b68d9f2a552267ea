"""
spaCy component exposing temporal mentions and ambiguous numerals.

Mentions become ``doc.ents`` labelled DATE; ambiguous numeral groups go
to ``doc.spans["ambiguous"]`` labelled AMBIGUOUS. Each span carries its
extracted title in ``span._.context`` and its dedup key in
``span._.identity``.
"""

import logging

from spacy.language import Language
from spacy.tokens import Doc, Span

from memocal.context import DEFAULT_TITLE, extract_title
from memocal.grammars.base import TemporalGrammarAdapter
from memocal.ledger import mention_identity
from memocal.pipeline import TemporalExtractor
from memocal.registry import grammars
from memocal.utils import ensure_context_extension, ensure_identity_extension, filter_spans

logger = logging.getLogger(__name__)

AMBIGUOUS_KEY = "ambiguous"


@Language.factory(
    "memocal_temporal",
    default_config={
        "grammar": "dateparser",
        "locale": "ja",
        "default_title": DEFAULT_TITLE,
    },
)
def create_temporal_component(
    nlp: Language,
    name: str,
    grammar: str,
    locale: str,
    default_title: str,
):
    """Factory for the temporal mention component."""
    return TemporalMentionComponent(
        nlp=nlp,
        grammar=grammar,
        locale=locale,
        default_title=default_title,
    )


class TemporalMentionComponent:
    """Annotates a Doc with temporal mentions and ambiguous numeral groups."""

    def __init__(
        self,
        nlp: Language,
        grammar: str = "dateparser",
        locale: str = "ja",
        default_title: str = DEFAULT_TITLE,
    ):
        self.nlp = nlp
        self.default_title = default_title
        ensure_context_extension()
        ensure_identity_extension()
        adapter = TemporalGrammarAdapter(grammars.create(grammar), locale=locale)
        self.extractor = TemporalExtractor(adapter)

    def _span(self, doc: Doc, start: int, end: int, label: str):
        span = doc.char_span(start, end, alignment_mode="expand")
        if span is None:
            return None
        return Span(doc, span.start, span.end, label=label)

    def __call__(self, doc: Doc) -> Doc:
        text = doc.text
        if not text or not text.strip():
            doc.spans[AMBIGUOUS_KEY] = []
            return doc

        result = self.extractor.extract(text)

        ents = []
        for mention in result.mentions:
            span = self._span(doc, mention.start, mention.end, "DATE")
            if span is None:
                continue
            span._.context = extract_title(result.text, mention.matched_text, self.default_title)
            span._.identity = mention_identity(mention)
            ents.append(span)
        doc.ents = filter_spans(ents)

        groups = []
        for group in result.groups:
            span = self._span(doc, group.members[0].offset, group.members[-1].end, "AMBIGUOUS")
            if span is None:
                continue
            span._.context = extract_title(result.text, group.context_text, self.default_title)
            span._.identity = group.id
            groups.append(span)
        doc.spans[AMBIGUOUS_KEY] = groups

        logger.debug(f"Annotated {len(doc.ents)} mentions and {len(groups)} groups")
        return doc
