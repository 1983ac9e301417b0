"""Interactive fuzzy search and selection.

- fuzzy: greedy subsequence matcher with match spans and scores
- query: editable query buffer
- results: ranked result list and bounded selection set
- controller: the EDITING / CONFIRMING / DONE selection flow
- keys: terminal key decoding
- render: rich renderer for the selection flow
"""

from .controller import CatalogueView, SelectionController, State, run_interactive_selection
from .fuzzy import MatchResult, MatchSpan, match, rank
from .keys import Key, KeyEvent

__all__ = [
    "CatalogueView",
    "Key",
    "KeyEvent",
    "MatchResult",
    "MatchSpan",
    "SelectionController",
    "State",
    "match",
    "rank",
    "run_interactive_selection",
]
