"""
Whole-sheet recalculation.

After every content-affecting mutation the store runs one sweep over the
entire cell map:

1. Mark every formula cell dirty.
2. Walk the map in its iteration order and re-evaluate each dirty cell
   against the map as it stands at that moment, clearing the flag.

There is no dependency graph. A formula that reads another formula visited
later in the same sweep sees that cell's value from the previous sweep, and
cycles are simply evaluated once per sweep rather than detected.
"""

import logging

from gridsheet.formula.evaluator import evaluate_formula
from gridsheet.spreadsheet.model import CellMap

logger = logging.getLogger(__name__)


def recalculate(cells: CellMap) -> int:
    """Re-evaluate every formula cell in *cells* in place.

    Returns:
        The number of formula cells evaluated
    """
    for cell in cells.values():
        if cell.is_formula:
            cell.needs_recalculation = True

    evaluated = 0
    for _, cell in cells.key_items():
        if cell.needs_recalculation:
            cell.computed = evaluate_formula(cell.value[1:], cells)
            cell.needs_recalculation = False
            evaluated += 1

    logger.debug("Recalculated %d formula cells", evaluated)
    return evaluated
