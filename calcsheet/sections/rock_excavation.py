from __future__ import annotations

import logging

from calcsheet.classifiers import rock_excavation as rock
from calcsheet.models.calculation_row import CalculationRow
from calcsheet.models.item_type import ItemType
from calcsheet.services.context import PipelineContext

from .base import SectionProcessor, SheetItem

"""Rock excavation section.

Layout:

    Rock excavation
      piers / pit slabs / rock areas / sump pits
      [Sump pit, 2 EA]          when no sump pit was taken off
      subtotal
      Havg
    Line drill
      one reference row per pier, pit slab and sump pit above
      standalone line drilling rows
      subtotal (FT x 2 faces)

Reference rows carry no geometry of their own; their formulas read the row they
point at.
"""

__all__ = ["RockExcavationSection"]

logger = logging.getLogger(__name__)

MANUAL_SUMP_PIT = "Sump pit"
HAVG_LABEL = "Havg"


class RockExcavationSection(SectionProcessor):
    key = rock.SECTION
    title = "Rock Excavation"
    table = rock.TABLE
    subsection_order = rock.SUBSECTION_ORDER
    header_labels = {"K": "CY", "L": "1.3*CY"}

    def build(self, ctx: PipelineContext, items: list[SheetItem]) -> list[CalculationRow]:
        rock_items = [i for i in items if i.subsection == rock.ROCK]
        drill_items = [i for i in items if i.subsection == rock.LINE_DRILL]
        rows: list[CalculationRow] = []
        rock_rows: list[CalculationRow] = []

        if rock_items:
            rows.append(self.subsection_header(ctx, rock.ROCK))
            rock_rows = [self.data_row(ctx, item) for item in rock_items]
            if not any(r.item_type is ItemType.ROCK_SUMP_PIT for r in rock_rows):
                logger.debug("%s: no sump pit taken off, adding %g EA", self.key, rock.MANUAL_SUMP_PIT_COUNT)
                rock_rows.append(
                    self.synthetic_row(
                        ctx,
                        rock.ROCK,
                        MANUAL_SUMP_PIT,
                        ItemType.ROCK_SUMP_PIT,
                        takeoff=rock.MANUAL_SUMP_PIT_COUNT,
                        unit="EA",
                    )
                )
            total = self.sum_row(ctx, rock.ROCK, rock_rows)
            rows.extend(rock_rows)
            rows.append(total)
            rows.append(self.synthetic_row(ctx, rock.ROCK, HAVG_LABEL, ItemType.ROCK_HAVG, ref_id=total.row_id))

        sources = [r for r in rock_rows if r.item_type in rock.LINE_DRILL_REFERENCES]
        if not sources and not drill_items:
            return rows
        rows.append(self.subsection_header(ctx, rock.LINE_DRILL))
        drill_rows = [
            self.synthetic_row(
                ctx,
                rock.LINE_DRILL,
                f"Line drill - {source.particulars}",
                rock.LINE_DRILL_REFERENCES[source.item_type],
                ref_id=source.row_id,
            )
            for source in sources
        ]
        drill_rows.extend(self.data_row(ctx, item) for item in drill_items)
        total = self.sum_row(ctx, rock.LINE_DRILL, drill_rows)
        rows.extend(drill_rows)
        rows.append(total)
        return rows
