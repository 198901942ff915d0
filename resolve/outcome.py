#/project/resolve/outcome.py

"""
ISC License

Copyright (c) 2023 Eric Chickering <eric.chickering@gmail.com>

Permission to use, copy, modify, and/or distribute this software for any
purpose with or without fee is hereby granted, provided that the above
copyright notice and this permission notice appear in all copies.

THE SOFTWARE IS PROVIDED "AS IS" AND THE AUTHOR DISCLAIMS ALL WARRANTIES
WITH REGARD TO THIS SOFTWARE INCLUDING ALL IMPLIED WARRANTIES OF
MERCHANTABILITY AND FITNESS. IN NO EVENT SHALL THE AUTHOR BE LIABLE FOR
ANY SPECIAL, DIRECT, INDIRECT, OR CONSEQUENTIAL DAMAGES OR ANY DAMAGES
WHATSOEVER RESULTING FROM LOSS OF USE, DATA OR PROFITS, WHETHER IN AN ACTION
OF CONTRACT, NEGLIGENCE OR OTHER TORTIOUS ACTION, ARISING OUT OF OR IN
CONNECTION WITH THE USE OR PERFORMANCE OF THIS SOFTWARE.

"""
from collections import Counter
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, List, Tuple

ANY = 'any'

UNKNOWN_PREFIX = 'UNKNOWN:'
DYNAMIC_PREFIX = 'DAG:'
CYCLE_PREFIX = 'CYCLE:'

MARKER_PREFIXES = (UNKNOWN_PREFIX, DYNAMIC_PREFIX, CYCLE_PREFIX)


def unknown(name):
    return f"{UNKNOWN_PREFIX}{name}"


def dynamic(name):
    return f"{DYNAMIC_PREFIX}{name}"


def cycle(name):
    return f"{CYCLE_PREFIX}{name}"


def is_marker(value):
    return isinstance(value, str) and value.startswith(MARKER_PREFIXES)


class OutcomeKind(str, Enum):
    RESOLVED = 'resolved'
    PASSTHROUGH = 'passthrough'
    UNKNOWN = 'unknown'
    DYNAMIC = 'dynamic'
    CYCLE = 'cycle'
    INVALID = 'invalid'
    ERROR = 'error'


@dataclass(frozen=True)
class Outcome:
    """What one referenced name turned into."""

    name: Any
    kind: OutcomeKind
    values: Tuple[str, ...] = ()


@dataclass
class Resolution:
    """Outcomes of one batch call plus the flattened, de-duplicated values."""

    category: str
    scope: str
    outcomes: List[Outcome] = field(default_factory=list)

    @property
    def values(self) -> List[str]:
        flattened = []
        for outcome in self.outcomes:
            flattened.extend(outcome.values)
        return list(dict.fromkeys(flattened))

    def counts(self) -> Counter:
        """Outcome kinds, counting markers found inside expanded groups as well."""
        counts = Counter(outcome.kind for outcome in self.outcomes)
        for outcome in self.outcomes:
            if outcome.kind != OutcomeKind.RESOLVED:
                continue
            for value in outcome.values:
                if value.startswith(UNKNOWN_PREFIX):
                    counts[OutcomeKind.UNKNOWN] += 1
                elif value.startswith(DYNAMIC_PREFIX):
                    counts[OutcomeKind.DYNAMIC] += 1
                elif value.startswith(CYCLE_PREFIX):
                    counts[OutcomeKind.CYCLE] += 1
        return counts
