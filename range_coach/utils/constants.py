"""Constants for the range coach engine."""

from enum import IntEnum, StrEnum


class Suit(StrEnum):
    HEARTS = "h"
    DIAMONDS = "d"
    CLUBS = "c"
    SPADES = "s"


class Rank(StrEnum):
    TWO = "2"
    THREE = "3"
    FOUR = "4"
    FIVE = "5"
    SIX = "6"
    SEVEN = "7"
    EIGHT = "8"
    NINE = "9"
    TEN = "T"
    JACK = "J"
    QUEEN = "Q"
    KING = "K"
    ACE = "A"


RANK_VALUES: dict[Rank, int] = {
    Rank.TWO: 2,
    Rank.THREE: 3,
    Rank.FOUR: 4,
    Rank.FIVE: 5,
    Rank.SIX: 6,
    Rank.SEVEN: 7,
    Rank.EIGHT: 8,
    Rank.NINE: 9,
    Rank.TEN: 10,
    Rank.JACK: 11,
    Rank.QUEEN: 12,
    Rank.KING: 13,
    Rank.ACE: 14,
}


class Seat(StrEnum):
    """Table seats of a full ring game, listed in preflop acting order."""

    UTG = "UTG"
    UTG1 = "UTG1"
    LJ = "LJ"
    HJ = "HJ"
    CO = "CO"
    BTN = "BTN"
    SB = "SB"
    BB = "BB"


BLIND_SEATS: frozenset[Seat] = frozenset({Seat.SB, Seat.BB})


class GameFormat(StrEnum):
    CASH = "CASH"
    TOURNAMENT = "TOURNAMENT"


class TournamentStage(StrEnum):
    EARLY = "EARLY"
    MIDDLE = "MIDDLE"
    NEAR_BUBBLE = "NEAR_BUBBLE"
    IN_THE_MONEY = "IN_THE_MONEY"
    FINAL_TABLE_BUBBLE = "FINAL_TABLE_BUBBLE"
    FINAL_TABLE = "FINAL_TABLE"


class RiskTier(IntEnum):
    """Risk tolerance, ordered from least tolerant to normal."""

    LOW = 0
    CAUTIOUS = 1
    NORMAL = 2


class Spot(StrEnum):
    RFI = "RFI"                # Raise first in
    VS_OPEN = "VS_OPEN"
    VS_3BET = "VS_3BET"
    VS_4BET = "VS_4BET"
    VS_ALL_IN = "VS_ALL_IN"
    VS_LIMP = "VS_LIMP"
    BVB = "BVB"                # Blind vs blind


# Spots where the opponent has already acted before hero
FACING_SPOTS: frozenset[Spot] = frozenset({
    Spot.VS_OPEN, Spot.VS_3BET, Spot.VS_4BET, Spot.VS_ALL_IN, Spot.VS_LIMP,
})


class Tendency(StrEnum):
    GTO = "GTO"        # Balanced / unknown
    TAG = "TAG"        # Tight aggressive
    LAG = "LAG"        # Loose aggressive
    NIT = "NIT"        # Very tight
    FISH = "FISH"      # Loose passive
    MANIAC = "MANIAC"  # Hyper aggressive


TIGHT_TENDENCIES: frozenset[Tendency] = frozenset({Tendency.NIT, Tendency.TAG})
PASSIVE_TENDENCIES: frozenset[Tendency] = frozenset({Tendency.FISH})
AGGRESSIVE_TENDENCIES: frozenset[Tendency] = frozenset({Tendency.LAG, Tendency.MANIAC})


class StackBucket(StrEnum):
    SHALLOW = "<=20bb"
    MID = "21-40bb"
    STANDARD = "41-80bb"
    DEEP = ">80bb"


class PotCategory(StrEnum):
    SRP = "SRP"
    THREE_BET = "3BET"
    FOUR_BET = "4BET"
    LIMPED = "LIMPED"


class Street(StrEnum):
    FLOP = "FLOP"
    TURN = "TURN"
    RIVER = "RIVER"


class Actor(StrEnum):
    HERO = "Hero"
    VILLAIN = "Villain"

    @property
    def other(self) -> "Actor":
        return Actor.VILLAIN if self is Actor.HERO else Actor.HERO


class PostflopAction(StrEnum):
    CHECK = "Check"
    BET_33 = "Bet_33"
    BET_50 = "Bet_50"
    BET_75 = "Bet_75"
    BET_100 = "Bet_100"
    CALL = "Call"
    FOLD = "Fold"
    RAISE = "Raise"
    CHECK_RAISE = "Check_Raise"

    @property
    def is_bet(self) -> bool:
        return self.value.startswith("Bet_")

    @property
    def is_aggressive(self) -> bool:
        return self.is_bet or self in (PostflopAction.RAISE, PostflopAction.CHECK_RAISE)


class RangeCategory(StrEnum):
    """Preflop grid categories, declared in tie-break priority order."""

    ALL_IN = "AllIn_Red"
    RAISE = "Raise_Orange"
    BLUFF = "Bluff_Purple"
    CALL = "Call_Green"
    LIMP = "Limp_Yellow"
    FOLD = "Fold_Gray"


# Highest priority first; used to break exact frequency ties
CATEGORY_PRIORITY: tuple[RangeCategory, ...] = tuple(RangeCategory)

CATEGORY_DESCRIPTIONS: dict[RangeCategory, str] = {
    RangeCategory.ALL_IN: "All-in for value",
    RangeCategory.RAISE: "Raise for value",
    RangeCategory.BLUFF: "Raise as a bluff",
    RangeCategory.CALL: "Call / flat",
    RangeCategory.LIMP: "Limp / complete",
    RangeCategory.FOLD: "Fold",
}
