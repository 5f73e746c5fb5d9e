"""
덱 분석기

(카드, 수량) 목록과 덱의 게임/포맷을 받아 통계, 시너지, 약점, 제안,
포맷 적합성(legality)을 계산합니다. DB 접근 없이 순수 계산만 수행합니다.
"""
from __future__ import annotations

import logging
from typing import Any, Dict, List, NamedTuple, Optional, Tuple

logger = logging.getLogger(__name__)

MAX_CURVE_BIN = 7

BASIC_LAND_NAMES = {"Plains", "Island", "Swamp", "Mountain", "Forest", "Wastes"}

# 게임별 덱 구성 규칙: (최소 장수, 최대 장수, 카드당 최대 매수)
GAME_RULES: Dict[str, Tuple[int, Optional[int], int]] = {
    "mtg": (60, None, 4),
    "pokemon": (60, 60, 4),
    "yugioh": (40, 60, 3),
    "lorcana": (60, None, 4),
    "one_piece": (50, 50, 4),
}
COMMANDER_RULES: Tuple[int, Optional[int], int] = (100, 100, 1)


class DeckEntry(NamedTuple):
    card: Any          # Card 모델 (name, card_type, rules_text, attributes)
    quantity: int


def _to_number(value: Any) -> float:
    try:
        return float(value)
    except (TypeError, ValueError):
        return 0.0


def card_cost(card) -> float:
    """convertedManaCost -> cost -> 0"""
    attributes = card.attributes or {}
    if attributes.get("convertedManaCost") is not None:
        return _to_number(attributes["convertedManaCost"])
    if attributes.get("cost") is not None:
        return _to_number(attributes["cost"])
    return 0.0


def card_colors(card) -> List[str]:
    attributes = card.attributes or {}
    colors = attributes.get("colors")
    if isinstance(colors, list) and colors:
        return [str(c) for c in colors]
    color = attributes.get("color")
    if isinstance(color, str) and color:
        return [color]
    return ["Colorless"]


def card_type(card) -> str:
    if card.card_type:
        return card.card_type
    supertypes = (card.attributes or {}).get("supertypes")
    if isinstance(supertypes, list) and supertypes:
        return str(supertypes[0])
    return "Unknown"


def _type_text(card) -> str:
    attributes = card.attributes or {}
    parts = [card.card_type or "", str(attributes.get("type_line") or "")]
    for key in ("supertypes", "subtypes"):
        values = attributes.get(key)
        if isinstance(values, list):
            parts.extend(str(v) for v in values)
    return " ".join(parts).lower()


def is_copy_limit_exempt(card, game: str) -> bool:
    """매수 제한 예외 (MTG 기본 대지, 포켓몬 기본 에너지)"""
    type_text = _type_text(card)
    if game == "mtg":
        return card.name in BASIC_LAND_NAMES or ("basic" in type_text and "land" in type_text)
    if game == "pokemon":
        return "energy" in type_text and ("basic" in type_text or card.name.lower().startswith("basic "))
    return False


class DeckAnalyzer:
    """
    entries: DeckEntry 목록
    game: TCG 게임 값 (pokemon, mtg ...)
    format: 덱 포맷 (Standard, Commander ...)
    """

    def __init__(self, entries: List[DeckEntry], game: str, format: str):
        self.entries = [e for e in entries if e.quantity > 0]
        self.game = getattr(game, "value", game)
        self.format = format or ""
        self.total_cards = sum(e.quantity for e in self.entries)

    # ---------- public ----------
    def analyze(self) -> Dict[str, Any]:
        color_distribution = self._color_distribution()
        type_distribution = self._type_distribution()
        mana_curve = self._mana_curve()

        return {
            "game": self.game,
            "format": self.format,
            "total_cards": self.total_cards,
            "unique_cards": len(self.entries),
            "average_cost": self._average_cost(),
            "color_distribution": color_distribution,
            "type_distribution": type_distribution,
            "mana_curve": mana_curve,
            "synergies": self._synergies(color_distribution, type_distribution),
            "weaknesses": self._weaknesses(color_distribution, mana_curve),
            "suggestions": self._suggestions(color_distribution),
            "legality": self._legality(),
        }

    # ---------- stats ----------
    def _average_cost(self) -> float:
        if self.total_cards == 0:
            return 0.0
        total_cost = sum(card_cost(e.card) * e.quantity for e in self.entries)
        return round(total_cost / self.total_cards, 2)

    def _color_distribution(self) -> Dict[str, int]:
        distribution: Dict[str, int] = {}
        for e in self.entries:
            for color in card_colors(e.card):
                distribution[color] = distribution.get(color, 0) + e.quantity
        return distribution

    def _type_distribution(self) -> Dict[str, int]:
        distribution: Dict[str, int] = {}
        for e in self.entries:
            key = card_type(e.card)
            distribution[key] = distribution.get(key, 0) + e.quantity
        return distribution

    def _mana_curve(self) -> Dict[int, int]:
        curve = {cost: 0 for cost in range(MAX_CURVE_BIN + 1)}
        for e in self.entries:
            cost = int(max(0, min(card_cost(e.card), MAX_CURVE_BIN)))
            curve[cost] += e.quantity
        return curve

    @staticmethod
    def _count_types(type_distribution: Dict[str, int], *keywords: str) -> int:
        return sum(
            count for type_name, count in type_distribution.items()
            if any(k in type_name.lower() for k in keywords)
        )

    # ---------- insights ----------
    def _synergies(self, colors: Dict[str, int], types: Dict[str, int]) -> List[str]:
        synergies: List[str] = []

        if len(colors) == 1:
            synergies.append("Mono-color deck for focused strategy")
        elif len(colors) == 2:
            synergies.append("Dual-color deck with strong synergies")
        elif len(colors) >= 5:
            synergies.append("Five+ color deck offers flexibility")

        creature_count = self._count_types(types, "creature")
        spell_count = self._count_types(types, "instant", "sorcery")
        if self.total_cards and creature_count > self.total_cards * 0.6:
            synergies.append("Creature-heavy deck with strong board presence")
        if self.total_cards and spell_count > self.total_cards * 0.4:
            synergies.append("Spell-based deck with strong interaction")

        return synergies

    def _weaknesses(self, colors: Dict[str, int], curve: Dict[int, int]) -> List[str]:
        weaknesses: List[str] = []

        if self.format.lower() == "commander" and self.total_cards < 100:
            weaknesses.append(f"Commander deck needs 100 cards (currently {self.total_cards})")

        high_cost = sum(count for cost, count in curve.items() if cost >= 5)
        if self.total_cards and high_cost > self.total_cards * 0.3:
            weaknesses.append("High number of expensive cards may cause mana flood")

        if colors:
            main_color = max(colors.values())
            splash = [c for c, count in colors.items() if count < main_color * 0.3]
            if splash:
                weaknesses.append("Splash colors may cause mana fixing issues")

        return weaknesses

    def _suggestions(self, colors: Dict[str, int]) -> List[str]:
        suggestions: List[str] = []

        if len(colors) >= 3:
            suggestions.append("Consider adding mana fixing cards for multi-color deck")

        has_draw = any(
            "draw" in (e.card.rules_text or "").lower() or "brainstorm" in e.card.name.lower()
            for e in self.entries
        )
        if not has_draw and self.total_cards >= 60:
            suggestions.append("Consider adding card draw engines for consistency")

        removal_count = sum(
            e.quantity for e in self.entries
            if any(word in (e.card.rules_text or "").lower() for word in ("destroy", "exile", "counter"))
        )
        if removal_count < self.total_cards * 0.1:
            suggestions.append("Consider adding more removal/interaction")

        win_conditions = [
            e for e in self.entries
            if "planeswalker" in (e.card.card_type or "").lower()
            or "emblem" in e.card.name.lower()
            or "commander" in (e.card.rules_text or "").lower()
        ]
        if not win_conditions and self.format.lower() != "standard":
            suggestions.append("Consider adding clear win conditions")

        return suggestions

    # ---------- legality ----------
    def _rules(self) -> Optional[Tuple[int, Optional[int], int]]:
        if self.game == "mtg" and self.format.lower() == "commander":
            return COMMANDER_RULES
        return GAME_RULES.get(self.game)

    def _legality(self) -> Dict[str, Any]:
        rules = self._rules()
        if rules is None:
            return {"is_legal": True, "issues": []}

        min_size, max_size, max_copies = rules
        issues: List[str] = []

        if min_size == max_size and self.total_cards != min_size:
            issues.append(f"Deck must contain exactly {min_size} cards (currently {self.total_cards})")
        else:
            if self.total_cards < min_size:
                issues.append(f"Deck must contain at least {min_size} cards (currently {self.total_cards})")
            if max_size is not None and self.total_cards > max_size:
                issues.append(f"Deck can contain at most {max_size} cards (currently {self.total_cards})")

        # 같은 이름은 합산 (다른 세트의 동일 카드)
        copies: Dict[str, int] = {}
        for e in self.entries:
            if is_copy_limit_exempt(e.card, self.game):
                continue
            copies[e.card.name] = copies.get(e.card.name, 0) + e.quantity
        for name, count in copies.items():
            if count > max_copies:
                issues.append(f"Too many copies of {name}: {count} (max {max_copies})")

        return {"is_legal": not issues, "issues": issues}


def analyze_deck(entries: List[DeckEntry], game: str, format: str) -> Dict[str, Any]:
    return DeckAnalyzer(entries, game, format).analyze()
