from __future__ import annotations

from enum import Enum

"""Item type and row kind enums for the calculation sheet.

Every classified take-off row carries exactly one ItemType. The derivation table
in calcsheet.derivation.formulas has one entry per member, so adding a member
without a formula entry fails at import time.
"""

__all__ = [
    "ItemType",
    "RowKind",
]


class RowKind(Enum):
    """Kind of a calculation row.

    - SECTION_HEADER / SUBSECTION_HEADER: banners, no geometry
    - DATA: one classified input row, or a synthetic row derived from one
    - SUM: subtotal over a contiguous range of preceding DATA rows
    """
    SECTION_HEADER = "section_header"
    SUBSECTION_HEADER = "subsection_header"
    DATA = "data"
    SUM = "sum"


class ItemType(Enum):
    # Demolition
    DEMO_SLAB = "demo_slab"
    DEMO_RAMP = "demo_ramp"
    DEMO_STAIR = "demo_stair"
    DEMO_STRIP_FOOTING = "demo_strip_footing"
    DEMO_FOUNDATION_WALL = "demo_foundation_wall"
    DEMO_RETAINING_WALL = "demo_retaining_wall"
    DEMO_ISOLATED_FOOTING = "demo_isolated_footing"
    DEMO_PILASTER = "demo_pilaster"

    # Excavation
    EXC_UNDERGROUND_PIPING = "exc_underground_piping"
    EXC_STRIP_FOOTING = "exc_strip_footing"
    EXC_WALL_FOOTING = "exc_wall_footing"
    EXC_STAIR_FOOTING = "exc_stair_footing"
    EXC_HEEL_BLOCK = "exc_heel_block"
    EXC_PILE_CAP = "exc_pile_cap"
    EXC_FOOTING = "exc_footing"
    EXC_AREA = "exc_area"
    EXC_SLOPE = "exc_slope"
    EXC_AND_BACKFILL = "exc_and_backfill"
    EXC_PIT_SLAB = "exc_pit_slab"
    EXC_HAVG = "exc_havg"
    BACKFILL_PIPING = "backfill_piping"
    BACKFILL_AREA = "backfill_area"
    MUD_SLAB = "mud_slab"

    # Rock excavation
    ROCK_CONCRETE_PIER = "rock_concrete_pier"
    ROCK_PIT_SLAB = "rock_pit_slab"
    ROCK_EXCAVATION = "rock_excavation"
    ROCK_SUMP_PIT = "rock_sump_pit"
    ROCK_HAVG = "rock_havg"
    LINE_DRILLING = "line_drilling"
    LINE_DRILL_PIER = "line_drill_pier"
    LINE_DRILL_PIT = "line_drill_pit"
    LINE_DRILL_SUMP = "line_drill_sump"

    # SOE
    SOLDIER_PILE_DRILLED = "soldier_pile_drilled"
    SOLDIER_PILE_HP = "soldier_pile_hp"
    PRIMARY_SECANT_PILE = "primary_secant_pile"
    SECONDARY_SECANT_PILE = "secondary_secant_pile"
    TANGENT_PILE = "tangent_pile"
    SHEET_PILE = "sheet_pile"
    TIMBER_LAGGING = "timber_lagging"
    TIMBER_SHEETING = "timber_sheeting"
    BACKPACKING = "backpacking"
    WALER = "waler"
    RAKER = "raker"
    UPPER_RAKER = "upper_raker"
    LOWER_RAKER = "lower_raker"
    STAND_OFF = "stand_off"
    KICKER = "kicker"
    CHANNEL = "channel"
    ROLL_CHOCK = "roll_chock"
    STUD_BEAM = "stud_beam"
    INNER_CORNER_BRACE = "inner_corner_brace"
    KNEE_BRACE = "knee_brace"

    # Foundation
    DRILLED_FOUNDATION_PILE = "drilled_foundation_pile"
    HELICAL_FOUNDATION_PILE = "helical_foundation_pile"
    DRIVEN_FOUNDATION_PILE = "driven_foundation_pile"
    STELCOR_PILE = "stelcor_pile"
    CFA_PILE = "cfa_pile"
    PILE_CAP = "pile_cap"
    STRIP_FOOTING = "strip_footing"
    STAIR_FOOTING = "stair_footing"
    ISOLATED_FOOTING = "isolated_footing"
    PILASTER = "pilaster"
    PIER = "pier"
    GRADE_BEAM = "grade_beam"
    TIE_BEAM = "tie_beam"
    STRAP_BEAM = "strap_beam"
    THICKENED_SLAB = "thickened_slab"
    BUTTRESS = "buttress"
    CORBEL = "corbel"
    FOUNDATION_WALL = "foundation_wall"
    RETAINING_WALL = "retaining_wall"
    BARRIER_WALL = "barrier_wall"
    STEM_WALL = "stem_wall"
    PIT_SUMP = "pit_sump"
    PIT_SLAB = "pit_slab"
    PIT_WALL = "pit_wall"
    MAT_SLAB = "mat_slab"
    MUD_SLAB_FOUNDATION = "mud_slab_foundation"
    SOG = "sog"
    ROG = "rog"
    STAIRS_ON_GRADE = "stairs_on_grade"
    ELECTRIC_CONDUIT = "electric_conduit"

    # Waterproofing
    WP_EXTERIOR_WALL = "wp_exterior_wall"
    WP_EXTERIOR_PIT_WALL = "wp_exterior_pit_wall"
    WP_NEGATIVE_WALL = "wp_negative_wall"
    WP_NEGATIVE_SLAB = "wp_negative_slab"
    WP_HORIZONTAL = "wp_horizontal"
    WP_INSULATION = "wp_insulation"

    # Superstructure
    CIP_SLAB = "cip_slab"
    SLAB_STEP = "slab_step"
    LW_CONCRETE_FILL = "lw_concrete_fill"
    SLAB_ON_METAL_DECK = "slab_on_metal_deck"
    TOPPING_SLAB = "topping_slab"
    PATCH_SLAB = "patch_slab"
    RAISED_SLAB = "raised_slab"
    BUILT_UP_SLAB = "built_up_slab"
    SHEAR_WALL = "shear_wall"
    PARAPET_WALL = "parapet_wall"
    BEAM = "beam"
    COLUMN = "column"
    CONCRETE_POST = "concrete_post"
    DROP_PANEL = "drop_panel"
    CURB = "curb"
    CONCRETE_PAD = "concrete_pad"
    NON_SHRINK_GROUT = "non_shrink_grout"
    REPAIR_SCOPE = "repair_scope"

    # Site / civil
    CIVIL_DEMO_AREA = "civil_demo_area"
    CIVIL_DEMO_LINEAR = "civil_demo_linear"
    CIVIL_DEMO_EACH = "civil_demo_each"
    CIVIL_FENCE = "civil_fence"
    CIVIL_STABILIZED_ENTRANCE = "civil_stabilized_entrance"
    CIVIL_SILT_FENCE = "civil_silt_fence"
    CIVIL_INLET_FILTER = "civil_inlet_filter"
    CIVIL_EXCAVATION = "civil_excavation"
    CIVIL_TRANSFORMER_PAD = "civil_transformer_pad"
    CIVIL_ASPHALT = "civil_asphalt"
    CIVIL_CONCRETE_PAVEMENT = "civil_concrete_pavement"
    CIVIL_GRAVEL = "civil_gravel"
    CIVIL_BOLLARD = "civil_bollard"
    CIVIL_DRAIN = "civil_drain"
    CIVIL_UTILITY_CONNECTION = "civil_utility_connection"
