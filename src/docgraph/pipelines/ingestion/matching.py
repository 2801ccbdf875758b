"""Entity matching used when deciding to reuse an ENTITY node."""

from docgraph.core.models.graph import KnowledgeNode


def normalize_entity_text(text: str) -> str:
    return " ".join(text.split()).casefold()


class NormalizedNameMatcher:
    """Same entity when the normalised text equals the candidate's name.

    Case and runs of whitespace are ignored; anything else (plurals,
    abbreviations, typos) counts as a different entity.
    """

    def is_same_entity(self, candidate: KnowledgeNode, text: str, category: str) -> bool:
        return normalize_entity_text(candidate.name) == normalize_entity_text(text)
