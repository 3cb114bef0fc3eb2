"""Creator name parsing and rendering according to BibTeX rules."""

import re
from collections.abc import Callable
from typing import Any

import msgspec

from .chars import is_punctuation
from .config import Dialect
from .models import Creator, ProtectedText

# Suffixes BibLaTeX should separate from the family name with a comma
COMMA_SUFFIXES = {"sr", "sr.", "jr", "jr.", "snr", "snr.", "jnr", "jnr."}

APOSTROPHE_PARTICLE = re.compile(r"^([a-z]{1,3}['’])(\S+)$")


class ParticleParser:
    """Split name particles off family and given names.

    A non-dropping particle (``van`` in ``van Gogh``) leads the family
    name; a dropping particle (``von`` in ``Ludwig von``) trails the
    given name. Particles are recognized the way BibTeX recognizes the
    von part: words starting with a lowercase letter.
    """

    @staticmethod
    def _starts_with_lowercase(word: str) -> bool:
        """Check if word starts with lowercase letter.

        Braced words are never particles; the first letter decides.
        """
        if word.startswith("{") and word.endswith("}"):
            return False

        for char in word:
            if char.isalpha():
                return char.islower()

        return False

    def parse(self, creator: Creator) -> Creator:
        """Return a copy of ``creator`` with particles and suffix split off.

        Parsing an already parsed name again only moves particles that
        the previous pass left in place.
        """
        family = creator.family_name.strip()
        given = creator.given_name.strip()
        suffix = creator.suffix.strip()
        non_dropping = creator.non_dropping_particle
        dropping = creator.dropping_particle

        if not suffix and "," in given:
            given, suffix = (part.strip() for part in given.split(",", 1))

        if family.startswith('"'):
            return msgspec.structs.replace(creator, given_name=given, suffix=suffix)

        tokens = family.split()
        particles = []
        while len(tokens) > 1 and self._starts_with_lowercase(tokens[0]):
            particles.append(tokens.pop(0))
        if tokens and (match := APOSTROPHE_PARTICLE.match(tokens[0])):
            if not match.group(2)[0].islower():
                particles.append(match.group(1))
                tokens[0] = match.group(2)
        if particles:
            joined = " ".join(p for p in particles if not p.endswith(("'", "’")))
            apostrophe = "".join(p for p in particles if p.endswith(("'", "’")))
            extra = f"{joined} {apostrophe}".strip() if joined else apostrophe
            non_dropping = f"{non_dropping} {extra}".strip() if non_dropping else extra
            family = " ".join(tokens)

        given_tokens = given.split()
        trailing = []
        while len(given_tokens) > 1 and self._starts_with_lowercase(given_tokens[-1]):
            trailing.insert(0, given_tokens.pop())
        if trailing:
            extra = " ".join(trailing)
            dropping = f"{extra} {dropping}".strip() if dropping else extra
            given = " ".join(given_tokens)

        return msgspec.structs.replace(
            creator,
            family_name=family,
            given_name=given,
            suffix=suffix,
            dropping_particle=dropping,
            non_dropping_particle=non_dropping,
        )


def pad_particle(particle: str) -> str:
    """Append the space that separates a particle from the next name part.

    ``van`` becomes ``van ``; ``d'`` stays as it is; ``St.`` becomes
    ``St. `` with exactly one space.
    """
    if particle.endswith("."):
        return particle + " "
    if not particle or particle[-1].isspace() or is_punctuation(particle[-1]):
        return particle
    return particle + " "


def quote_separators(family: str) -> list[Any]:
    """Split a family name so that ``and`` and commas are brace-protected."""
    fragments: list[Any] = []
    for i, fragment in enumerate(re.split(r"(\s+and\s+|,)", family, flags=re.IGNORECASE)):
        if i % 2 == 0:
            if fragment:
                fragments.append(fragment)
            continue
        lead, core, trail = re.match(r"^(\s*)(.*?)(\s*)$", fragment).groups()
        fragments.extend(f for f in (lead, ProtectedText(core), trail) if f)
    return fragments


class NameResolver:
    """Render creators as BibTeX name strings.

    Personal names render as ``von Last, Jr, First``. The dialects
    differ in where the non-dropping particle goes: BibTeX joins it onto
    the family name, BibLaTeX encodes it as its own leading fragment.
    """

    def __init__(
        self,
        dialect: Dialect,
        encode: Callable[..., str],
        particle_parser: ParticleParser | None = None,
    ):
        self.dialect = dialect
        self.encode = encode
        self.particle_parser = particle_parser or ParticleParser()

    def render(self, creator: Creator, raw: bool = False) -> tuple[str | None, bool]:
        """Render one creator.

        Args:
            creator: The creator to render.
            raw: Render without LaTeX escaping.

        Returns:
            The rendered name, or None if the creator has no name at all,
            and whether the name needs a comma before its suffix.
        """
        if creator.is_literal:
            if raw:
                return "{" + creator.single_name + "}", False
            return self.encode(ProtectedText(creator.single_name)), False

        if not creator.has_name_parts:
            return None, False

        if raw:
            return f"{creator.family_name}, {creator.given_name}".strip(" ,"), False

        name = self.particle_parser.parse(creator)
        name = self.particle_parser.parse(name)

        family = name.family_name
        quoted = len(family) > 1 and family.startswith('"') and family.endswith('"')
        particle = name.non_dropping_particle

        if quoted:
            fragments: list[Any] = [ProtectedText(family[1:-1])]
        elif particle and self.dialect is Dialect.BIBTEX:
            fragments = quote_separators(pad_particle(particle) + family)
            particle = ""
        else:
            fragments = quote_separators(family)

        latex = ""
        if name.dropping_particle:
            latex += self.encode(pad_particle(name.dropping_particle))
        if particle:
            latex += self.encode(pad_particle(particle))
        latex += self.encode(fragments, separator="")
        for part in (name.suffix, name.given_name):
            if part:
                encoded = self.encode(part)
                latex = f"{latex}, {encoded}" if latex.strip() else encoded

        junior_comma = name.suffix.lower() in COMMA_SUFFIXES
        return latex.strip(), junior_comma
