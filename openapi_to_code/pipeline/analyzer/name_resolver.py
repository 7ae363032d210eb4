"""
Name registry for case conversion and collision handling.

Converts raw schema, property and enum value names into target-language
identifiers and hands out unique names when several raw names collapse
onto the same identifier.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Iterable

from ..config import CS_RESERVED_KEYWORDS, GeneratorConfig, NameStyle
from .errors import NameExhaustionError

# Word separators: runs of -, _, ., whitespace, and lower->upper camelCase boundaries
_SPLIT_WORDS = re.compile(r"[-_.\s]+|(?<=[a-z])(?=[A-Z])")

# A minus sign in front of a number (negative literal, not a hyphen separator)
_LEADING_MINUS = re.compile(r"(?:^|(?<=\s))-(?=\d)")

_INVALID_IDENTIFIER_CHARS = re.compile(r"[^a-zA-Z0-9_]")

# Symbols spelled out when differentiating colliding names
SYMBOL_WORDS = {
    "_": "Underscore",
    "-": "Dash",
    ".": "Dot",
    "@": "At",
    "#": "Hash",
    "$": "Dollar",
    "%": "Percent",
    "&": "And",
    "+": "Plus",
    "~": "Tilde",
    "!": "Bang",
    "*": "Star",
    "/": "Slash",
    "\\": "Backslash",
    ":": "Colon",
    "^": "Caret",
    "|": "Pipe",
}

# Canonicalization is repeated until stable; two rounds suffice in practice
_MAX_NORMALIZE_ROUNDS = 4


@dataclass
class CollisionResolution:
    """Outcome of resolving one group of colliding raw names."""

    canonical: str = ""
    winner: str | None = None  # Raw name that kept the canonical identifier
    others: list[tuple[str, str]] = field(default_factory=list)  # (raw name, differentiated name)
    names: list[str] = field(default_factory=list)  # Final names, positionally matching the group


class NameRegistry:
    """Allocates unique identifiers for one generation run.

    A registry is created per run and passed to whoever needs names; member
    and enum value names are allocated in child scopes obtained from scope().
    """

    def __init__(
        self,
        style: NameStyle = NameStyle.PASCAL,
        reserved_words: Iterable[str] = CS_RESERVED_KEYWORDS,
        max_numeric_suffix: int | None = None,
    ):
        """
        Initialize the registry.

        Args:
            style: Casing style of produced identifiers
            reserved_words: Identifiers escaped with an "@" prefix
            max_numeric_suffix: Upper bound for numeric suffixes (None = unbounded)
        """
        self.style = style
        self.reserved_words = frozenset(reserved_words)
        self.max_numeric_suffix = max_numeric_suffix
        self.enclosing_name: str | None = None

        # Allocated name -> raw name it was allocated for
        self._allocated: dict[str, str] = {}

    @classmethod
    def from_config(cls, config: GeneratorConfig) -> NameRegistry:
        return cls(style=config.name_style, reserved_words=config.reserved_words)

    def scope(self, enclosing_name: str | None = None) -> NameRegistry:
        """Create an empty registry with the same settings.

        Args:
            enclosing_name: Name of the type owning the scope; no allocated
                name may equal it (a member named like its type gets a
                "Value" suffix)
        """
        child = NameRegistry(self.style, self.reserved_words, self.max_numeric_suffix)
        if enclosing_name:
            child.enclosing_name = enclosing_name
            child._allocated[enclosing_name] = enclosing_name
        return child

    # ------------------------------------------------------------------
    # Bookkeeping
    # ------------------------------------------------------------------

    def reserve(self, name: str, raw: str | None = None) -> None:
        """Mark a name as taken without going through collision resolution."""
        self._allocated.setdefault(name, raw if raw is not None else name)

    def is_allocated(self, name: str) -> bool:
        return name in self._allocated

    def origin(self, name: str) -> str | None:
        """Raw name an identifier was allocated for."""
        return self._allocated.get(name)

    @property
    def allocated(self) -> dict[str, str]:
        return dict(self._allocated)

    # ------------------------------------------------------------------
    # Canonicalization
    # ------------------------------------------------------------------

    def canonicalize(self, raw: str | None, fallback: str = "Unknown") -> str:
        """Convert a raw name into an identifier in the configured style.

        Examples (PascalCase):
            "user_status" -> "UserStatus"
            "USER_STATUS" -> "UserStatus"
            "myAPIResponse" -> "MyAPIResponse"
            "123invalid" -> "_123invalid"
        """
        text = "" if raw is None else str(raw)
        if not text.strip():
            text = fallback

        result = self._canonical_form(text, fallback)
        for _ in range(_MAX_NORMALIZE_ROUNDS):
            again = self._canonical_form(result, fallback)
            if again == result:
                break
            result = again
        return result

    def _canonical_form(self, text: str, fallback: str) -> str:
        words = self._split_words(text)
        result = _INVALID_IDENTIFIER_CHARS.sub("", self._join_words(words))

        if not result:
            result = _INVALID_IDENTIFIER_CHARS.sub("", self._join_words(self._split_words(fallback)))
            if not result:
                return ""

        if result[0].isdigit():
            result = "_" + result

        if result in self.reserved_words:
            result = "@" + result

        return result

    def _split_words(self, text: str) -> list[str]:
        text = text.replace("+", "Plus")
        text = _LEADING_MINUS.sub("Minus", text)
        return [self._capitalize(part) for part in _SPLIT_WORDS.split(text) if part]

    @staticmethod
    def _capitalize(word: str) -> str:
        # "USER" -> "User", but "APIResponse" keeps its acronym
        if all(c.isupper() for c in word):
            return word[0].upper() + word[1:].lower()
        return word[0].upper() + word[1:]

    def _join_words(self, words: list[str]) -> str:
        if not words:
            return ""
        if self.style == NameStyle.SNAKE:
            return "_".join(word.lower() for word in words)
        joined = "".join(words)
        if self.style == NameStyle.CAMEL:
            return joined[0].lower() + joined[1:]
        return joined

    def _append_word(self, name: str, word: str) -> str:
        if self.style == NameStyle.SNAKE:
            return f"{name}_{self.canonicalize(word)}"
        return name + word

    def _allocation_name(self, raw: str) -> str:
        canonical = self.canonicalize(raw)
        if self.enclosing_name and canonical == self.enclosing_name:
            canonical = self._append_word(canonical, "Value")
        return canonical

    # ------------------------------------------------------------------
    # Collision handling
    # ------------------------------------------------------------------

    @staticmethod
    def naturalness_score(raw: str, canonical: str) -> int:
        """Score how close a raw name already is to its canonical form.

        Lower is more natural; the most natural name of a collision group
        keeps the canonical identifier.
        """
        if raw == canonical:
            return 0

        if raw.casefold() == canonical.casefold():
            return 1

        special_count = sum(1 for c in raw if not c.isalnum())
        if special_count > 0:
            return 10 + special_count

        # Other transformations (camelCase -> PascalCase, etc.)
        return 2

    def differentiate(self, raw: str, canonical: str) -> str:
        """
        Produce a unique name for a raw name that lost its canonical identifier.

        Args:
            raw: The raw name
            canonical: The identifier it collided on

        Returns:
            A name that is neither allocated nor equal to the canonical one
            (not yet recorded as allocated)

        Raises:
            NameExhaustionError: If every candidate is taken
        """
        # Spell out leading symbols: "_id" -> "UnderscoreId"
        expanded = self._expand_leading_symbols(raw)
        if expanded is not None:
            candidate = self.canonicalize(expanded, fallback="")
            if self._is_free(candidate, canonical):
                return candidate

        # Spell out every symbol: "my_string" -> "MyUnderscoreString"
        fully_expanded = self._expand_all_symbols(raw)
        if fully_expanded != raw:
            candidate = self.canonicalize(fully_expanded, fallback="")
            if self._is_free(candidate, canonical):
                return candidate

        # Keep the naming convention as a suffix: "name" -> "NameLowercase"
        style_suffix = self.detect_naming_style(raw)
        if style_suffix is not None:
            candidate = self._append_word(canonical, style_suffix)
            if self._is_free(candidate, canonical):
                return candidate

        limit = self.max_numeric_suffix if self.max_numeric_suffix is not None else len(self._allocated) + 2
        for suffix in range(2, limit + 1):
            candidate = f"{canonical}{suffix}"
            if self._is_free(candidate, canonical):
                return candidate

        raise NameExhaustionError(raw, canonical)

    def _is_free(self, candidate: str, canonical: str) -> bool:
        return bool(candidate) and candidate != canonical and candidate not in self._allocated

    @staticmethod
    def _expand_leading_symbols(name: str) -> str | None:
        words = []
        i = 0
        while i < len(name) and not name[i].isalnum():
            word = SYMBOL_WORDS.get(name[i])
            if word is not None:
                words.append(word)
            i += 1

        if not words:
            return None

        return " ".join(words) + " " + name[i:]

    @staticmethod
    def _expand_all_symbols(name: str) -> str:
        parts = []
        for c in name:
            if c.isalnum():
                parts.append(c)
            elif c in SYMBOL_WORDS:
                parts.append(f" {SYMBOL_WORDS[c]} ")
            else:
                parts.append(" ")
        return "".join(parts)

    @staticmethod
    def detect_naming_style(name: str) -> str | None:
        """Describe the naming convention of a raw name."""
        if not name:
            return None
        if "_" in name:
            return "SnakeCase"
        if "-" in name:
            return "KebabCase"
        if "." in name:
            return "DotNotation"
        if name[0].islower() and any(c.isupper() for c in name):
            return "CamelCase"
        if name[0].isupper() and any(c.islower() for c in name):
            return "PascalCase"
        if all(c.islower() or not c.isalpha() for c in name):
            return "Lowercase"
        if all(c.isupper() or not c.isalpha() for c in name):
            return "Uppercase"
        return None

    def _pick_winner(self, group: list[str], canonical: str) -> int | None:
        if canonical in self._allocated:
            return None
        # min() keeps the first of equal scores
        return min(range(len(group)), key=lambda i: self.naturalness_score(group[i], canonical))

    def resolve_collision(self, group: list[str], canonical: str | None = None) -> CollisionResolution:
        """
        Resolve raw names whose canonical forms collide.

        Args:
            group: Colliding raw names, in input order
            canonical: The shared identifier (computed from the first name if omitted)

        Returns:
            CollisionResolution; all names are recorded as allocated
        """
        if canonical is None:
            canonical = self._allocation_name(group[0])

        winner = self._pick_winner(group, canonical)
        resolution = CollisionResolution(canonical=canonical, names=[""] * len(group))

        if winner is not None:
            resolution.winner = group[winner]
            resolution.names[winner] = canonical
            self._allocated[canonical] = group[winner]

        for i, raw in enumerate(group):
            if i == winner:
                continue
            name = self.differentiate(raw, canonical)
            self._allocated[name] = raw
            resolution.names[i] = name
            resolution.others.append((raw, name))

        return resolution

    def allocate(self, raws: list[str]) -> list[str]:
        """
        Allocate unique names for a batch of raw names.

        Colliding raw names are grouped by canonical form; each group's most
        natural member keeps the canonical identifier before any loser is
        differentiated, so a differentiated name never steals an identifier
        another raw name maps to naturally.

        Args:
            raws: Raw names in document order (duplicates allowed)

        Returns:
            Allocated names, positionally matching raws
        """
        groups: dict[str, list[int]] = {}
        for i, raw in enumerate(raws):
            groups.setdefault(self._allocation_name(raw), []).append(i)

        names = [""] * len(raws)
        losers: list[tuple[int, str]] = []

        for canonical, indexes in groups.items():
            group = [raws[i] for i in indexes]
            winner = self._pick_winner(group, canonical)
            for position, index in enumerate(indexes):
                if position == winner:
                    names[index] = canonical
                    self._allocated[canonical] = raws[index]
                else:
                    losers.append((index, canonical))

        for index, canonical in losers:
            name = self.differentiate(raws[index], canonical)
            self._allocated[name] = raws[index]
            names[index] = name

        return names

    def allocate_one(self, raw: str) -> str:
        return self.allocate([raw])[0]
