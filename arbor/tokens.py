# python
"""
Token cursor shared by one parse call.

This module exposes the `TokenReader` cursor and the `end` sentinel it returns
once the input is exhausted. The sentinel is falsy, pretty-prints as "(end)" and
renders with colors in Rich. Compare against it by identity (`token is end`):
an empty-string token is falsy too.

A reader starts past token 0 (the program name) and moves strictly forward,
with a single exception: `rewind()` un-consumes the token returned by the last
successful `next()`. Calling `rewind()` twice in a row, or before anything was
consumed, is a programming error and raises RuntimeError.
"""
import functools

from rich.text import Text

# Returned by TokenReader.next() when no tokens remain.
end = type("end-type", (), {
    "__module__": None,
    "__slots__": (),
    "__rich__": lambda self: Text.assemble(("(", "yellow"), ("end", "red"), (")", "yellow")),
    "__repr__": lambda self: "(end)",
    "__bool__": lambda self: False,
    "__doc__": "end-of-input marker returned by TokenReader.next()",
    "__new__": functools.cache(lambda cls: object.__new__(cls)),
})()


class TokenReader:
    """
    Forward cursor over an argv-like token sequence.

    Parameters
    - tokens: Iterable[str]
      The full vector, including the program name at index 0.
    """

    __slots__ = ("_tokens", "_index", "_rewindable")

    def __init__(self, tokens, /):
        self._tokens = tuple(tokens)
        for token in self._tokens:
            if not isinstance(token, str):
                raise TypeError("TokenReader() argument must be an iterable of strings")
        self._index = 1
        self._rewindable = False

    def next(self):
        """
        Return the token under the cursor and advance, or `end` when exhausted.
        """
        if self._index >= len(self._tokens):
            self._rewindable = False
            return end
        token = self._tokens[self._index]
        self._index += 1
        self._rewindable = True
        return token

    def rewind(self):
        """
        Move the cursor back exactly one position.
        """
        if not self._rewindable:
            raise RuntimeError("rewind() must follow a successful next()")
        self._index -= 1
        self._rewindable = False

    @property
    def position(self):
        """
        1-based ordinal of the most recently consumed token (0 before any).
        """
        return self._index - 1

    @property
    def remaining(self):
        return list(self._tokens[self._index:])

    def __repr__(self):
        return f"{type(self).__name__}(position={self.position!r}, remaining={self.remaining!r})"


__all__ = ("end", "TokenReader")
