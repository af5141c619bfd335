"""Word supply for the game.

Rooms only need something with a ``next()`` method returning a
``(plain, scrambled)`` pair.  ``WordScrambler`` is the implementation used by
the server; tests usually plug in a provider with a fixed word instead.

"""
import os
from typing import List, Optional, Sequence, Tuple

import numpy as np


DEFAULT_WORDS = [
    "abracadabra",
    "delphi",
    "dinosaur",
    "automaton",
    "python",
    "sleep",
    "thread",
    "posix",
    "windows",
    "ubuntu",
    "oracle",
    "variable",
]


class WordProvider(object):
    """Supplies a random (plain, scrambled) word pair on demand.

    ``scrambled`` is a permutation of the characters of ``plain``.  For words
    longer than one letter it usually differs from ``plain``, but an identity
    permutation is a legal outcome and callers must not treat it as an error.

    """

    def next(self) -> Tuple[str, str]:
        raise NotImplementedError


class WordScrambler(WordProvider):
    """Picks words from a list and shuffles their letters.

    Parameters
    ----------
    words : Sequence[str], optional
        Candidate words. Defaults to ``DEFAULT_WORDS``.
    seed : int, optional
        Seed for the random generator, so a game can be replayed.

    """

    def __init__(self, words: Optional[Sequence[str]] = None, seed: Optional[int] = None):
        if words is None:
            words = DEFAULT_WORDS
        self.words = [w for w in words if w]
        if not self.words:
            raise ValueError("Word list must contain at least one word")
        self._rng = np.random.default_rng(seed)

    @classmethod
    def from_file(cls, path: str, seed: Optional[int] = None) -> 'WordScrambler':
        """Build a scrambler from a newline-delimited word file."""
        return cls(load_word_list(path), seed=seed)

    def scramble(self, word: str) -> str:
        """Return a random permutation of the letters of word."""
        order = self._rng.permutation(len(word))
        return "".join(word[i] for i in order)

    def next(self) -> Tuple[str, str]:
        plain = self.words[int(self._rng.integers(len(self.words)))]
        return plain, self.scramble(plain)


def load_word_list(path: str) -> List[str]:
    """Loads a word list file into a list of lower-case words.

    Empty lines are skipped.  Raises FileNotFoundError if the file doesn't
    exist.

    """
    if not os.path.exists(path):
        raise FileNotFoundError(f"Word list file not found: {path}")

    words = []
    with open(path, 'r', encoding='utf-8') as f:
        for line in f:
            word = line.strip().lower()
            if word:  # Skip empty lines
                words.append(word)

    return words
