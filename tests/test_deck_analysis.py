from types import SimpleNamespace

from cardloom.services.deck_analysis import (DeckEntry, analyze_deck, card_colors,
                                             card_cost, card_type, is_copy_limit_exempt)


def card(name, card_type=None, rules_text=None, **attributes):
    return SimpleNamespace(name=name, card_type=card_type, rules_text=rules_text, attributes=attributes)


BOLT = card("Lightning Bolt", "Instant", "Lightning Bolt deals 3 damage to any target.",
            convertedManaCost=1, colors=["Red"])
GOBLIN = card("Goblin Guide", "Creature — Goblin Scout", None, convertedManaCost=1, colors=["Red"])
MOUNTAIN = card("Mountain", "Land")


def test_card_attribute_helpers():
    assert card_cost(BOLT) == 1
    assert card_cost(card("Dragon", cost="7")) == 7
    assert card_cost(card("Weird", cost="X")) == 0
    assert card_cost(MOUNTAIN) == 0

    assert card_colors(BOLT) == ["Red"]
    assert card_colors(card("Mickey", color="Amber")) == ["Amber"]
    assert card_colors(MOUNTAIN) == ["Colorless"]

    assert card_type(BOLT) == "Instant"
    assert card_type(card("Pikachu", supertypes=["Pokémon"])) == "Pokémon"
    assert card_type(card("???")) == "Unknown"


def test_basic_lands_and_energy_are_exempt_from_copy_limit():
    assert is_copy_limit_exempt(MOUNTAIN, "mtg")
    assert is_copy_limit_exempt(card("Snow-Covered Island", "Basic Snow Land — Island"), "mtg")
    assert not is_copy_limit_exempt(BOLT, "mtg")
    assert is_copy_limit_exempt(card("Basic Fire Energy", "Energy"), "pokemon")
    assert not is_copy_limit_exempt(card("Double Colorless Energy", "Special Energy"), "pokemon")
    assert not is_copy_limit_exempt(MOUNTAIN, "yugioh")


def test_burn_deck_statistics():
    result = analyze_deck(
        [DeckEntry(BOLT, 4), DeckEntry(GOBLIN, 4), DeckEntry(MOUNTAIN, 20)], "mtg", "Modern")

    assert result["total_cards"] == 28
    assert result["unique_cards"] == 3
    assert result["average_cost"] == 0.29
    assert result["color_distribution"] == {"Red": 8, "Colorless": 20}
    assert result["type_distribution"] == {"Instant": 4, "Creature — Goblin Scout": 4, "Land": 20}
    assert result["mana_curve"] == {0: 20, 1: 8, 2: 0, 3: 0, 4: 0, 5: 0, 6: 0, 7: 0}
    assert "Dual-color deck with strong synergies" in result["synergies"]
    assert result["legality"] == {
        "is_legal": False,
        "issues": ["Deck must contain at least 60 cards (currently 28)"],
    }


def test_zero_quantity_entries_are_ignored():
    result = analyze_deck([DeckEntry(BOLT, 0), DeckEntry(GOBLIN, 2)], "mtg", "Modern")

    assert result["unique_cards"] == 1
    assert result["total_cards"] == 2


def test_mana_curve_caps_expensive_cards():
    huge = card("Emrakul", "Creature", convertedManaCost=15)
    result = analyze_deck([DeckEntry(huge, 1)], "mtg", "Legacy")

    assert result["mana_curve"][7] == 1


def test_copy_limit_counts_same_name_across_printings():
    reprint = card("Lightning Bolt", "Instant", "Deals 3 damage.", convertedManaCost=1, colors=["Red"])
    result = analyze_deck(
        [DeckEntry(BOLT, 3), DeckEntry(reprint, 2), DeckEntry(MOUNTAIN, 55)], "mtg", "Modern")

    assert result["legality"]["issues"] == ["Too many copies of Lightning Bolt: 5 (max 4)"]


def test_commander_rules():
    result = analyze_deck([DeckEntry(GOBLIN, 2)], "mtg", "Commander")

    assert result["legality"]["issues"] == [
        "Deck must contain exactly 100 cards (currently 2)",
        "Too many copies of Goblin Guide: 2 (max 1)",
    ]
    assert "Commander deck needs 100 cards (currently 2)" in result["weaknesses"]


def test_fixed_size_games():
    charizard = card("Charizard", "Pokémon", cost=4)
    result = analyze_deck([DeckEntry(charizard, 4)], "pokemon", "Standard")
    assert result["legality"]["issues"] == ["Deck must contain exactly 60 cards (currently 4)"]

    monster = card("Blue-Eyes White Dragon", "Normal Monster")
    result = analyze_deck([DeckEntry(monster, 4)], "yugioh", "Advanced")
    assert result["legality"]["issues"] == [
        "Deck must contain at least 40 cards (currently 4)",
        "Too many copies of Blue-Eyes White Dragon: 4 (max 3)",
    ]


def test_unknown_game_is_always_legal():
    result = analyze_deck([DeckEntry(BOLT, 99)], "digimon", "Standard")
    assert result["legality"] == {"is_legal": True, "issues": []}


def test_weaknesses():
    dragon = card("Shivan Dragon", "Creature", convertedManaCost=6, colors=["Red"])
    counterspell = card("Counterspell", "Instant", "Counter target spell.", convertedManaCost=2, colors=["Blue"])
    result = analyze_deck(
        [DeckEntry(dragon, 4), DeckEntry(GOBLIN, 4), DeckEntry(counterspell, 2)], "mtg", "Modern")

    # 5+ 코스트 4/10 > 30%
    assert "High number of expensive cards may cause mana flood" in result["weaknesses"]
    # Blue 2 < Red 8 * 0.3
    assert "Splash colors may cause mana fixing issues" in result["weaknesses"]


def test_mana_flood_needs_more_than_thirty_percent():
    dragon = card("Shivan Dragon", "Creature", convertedManaCost=6, colors=["Red"])
    result = analyze_deck([DeckEntry(dragon, 6), DeckEntry(GOBLIN, 14)], "mtg", "Modern")

    assert "High number of expensive cards may cause mana flood" not in result["weaknesses"]


def test_suggestions_for_vanilla_creature_deck():
    bear = card("Grizzly Bears", "Creature — Bear", None, convertedManaCost=2, colors=["Green"])
    result = analyze_deck([DeckEntry(bear, 60)], "mtg", "Standard")

    assert "Mono-color deck for focused strategy" in result["synergies"]
    assert "Creature-heavy deck with strong board presence" in result["synergies"]
    assert result["suggestions"] == [
        "Consider adding card draw engines for consistency",
        "Consider adding more removal/interaction",
    ]


def test_empty_deck():
    result = analyze_deck([], "yugioh", "Advanced")

    assert result["total_cards"] == 0
    assert result["average_cost"] == 0.0
    assert result["color_distribution"] == {}
    assert set(result["mana_curve"].values()) == {0}
    assert result["synergies"] == []
    assert result["weaknesses"] == []
    assert result["suggestions"] == ["Consider adding clear win conditions"]
    assert result["legality"]["issues"] == ["Deck must contain at least 40 cards (currently 0)"]
