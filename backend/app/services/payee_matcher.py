"""
Payee matching service.

Two jobs:
- Learned mappings: a confirmed reconciliation teaches "this bank
  description belongs to this entity", scoped per bank.
- Text hints: case-insensitive containment of an entity name or posting
  note in a bank description.
"""

import re
import unicodedata

from ..stores.base import PayeeMappingStore

# Legal-form suffixes that banks usually truncate from descriptions
_COMPANY_SUFFIX = re.compile(
    r"[\s,.\-]+(ltda|me|epp|eireli|mei|s\.?/?a)\.?$", re.IGNORECASE
)


def fold_text(text: str) -> str:
    """Lowercase, strip accents and collapse whitespace."""
    decomposed = unicodedata.normalize("NFKD", text)
    stripped = "".join(c for c in decomposed if not unicodedata.combining(c))
    return " ".join(stripped.lower().split())


def entity_search_name(name: str | None) -> str:
    """Entity name reduced to what a bank description would show."""
    if not name:
        return ""
    folded = fold_text(name)
    while True:
        shorter = _COMPANY_SUFFIX.sub("", folded)
        if shorter == folded:
            break
        folded = shorter
    return folded


def normalize_payee_key(description: str | None) -> str:
    """
    Key used to store and look up learned mappings.

    Surrounding whitespace is dropped and internal runs of whitespace are
    collapsed; case and accents are kept as the bank sent them.
    """
    if not description:
        return ""
    return " ".join(description.split())


def mentions(description: str | None, text: str | None) -> bool:
    """True if text appears inside description, ignoring case and accents."""
    if not description or not text:
        return False
    needle = fold_text(text)
    if not needle:
        return False
    return needle in fold_text(description)


def mentions_entity(description: str | None, entity_name: str | None) -> bool:
    """True if the entity name (without its legal-form suffix) appears in description."""
    return mentions(description, entity_search_name(entity_name))


def mapped_entity_id(store: PayeeMappingStore, bank_id: str, description: str | None) -> str | None:
    """
    Entity previously confirmed for this bank + description.

    Returns None if nothing was learned yet.
    """
    key = normalize_payee_key(description)
    if not key:
        return None
    mapping = store.find_by_bank_and_description(bank_id, key)
    return mapping.entity_id if mapping else None


def learn_payee(store: PayeeMappingStore, bank_id: str, description: str | None, entity_id: str) -> bool:
    """
    Remember that description belongs to entity_id for this bank.

    Blank descriptions are not learned. Returns True if a mapping was written.
    """
    key = normalize_payee_key(description)
    if not key:
        return False
    store.upsert(bank_id, key, entity_id)
    return True
