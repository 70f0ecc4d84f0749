#!/usr/bin/env python3
"""
HexArena - Entry Point
═══════════════════════════════════════════════════════════════════════════

Ustawia przykładowe drużyny na arenie i pokazuje cele umiejętności.

Użycie:
    python main.py                    # Domyślna arena i seed
    python main.py --arena arena_2    # Konkretna arena
    python main.py --seed 12345       # Konkretny seed
    python main.py --verbose          # Szczegółowy output

Wynik:
    - Wypisuje planszę i cele umiejętności na konsolę
    - Zapisuje pełny log do output/setup_{seed}.json
"""

import argparse
import sys
from pathlib import Path

# Dodaj katalog projektu do path
sys.path.insert(0, str(Path(__file__).parent))

from hexarena.core.tile import Team
from hexarena.events.event_logger import EventType
from hexarena.simulation.setup import SetupSimulator


# (klucz postaci, preferowane pole na arena_1)
DEMO_ALLY = [
    ("nara", 12),
    ("phraesto", 4),
    ("cassadee", 9),
    ("aliceth", 6),
]
DEMO_ENEMY = [
    ("bonnie", 40),
    ("vala", 37),
    ("reinier", 39),
    ("korin", 44),
]


def place_lineup(sim: SetupSimulator, lineup, team: Team) -> None:
    """Stawia postacie; gdy pole nie pasuje do areny - losowe wolne pole."""
    for key, hex_id in lineup:
        if sim.place_character(key, hex_id, team):
            placed = hex_id
        else:
            placed = sim.auto_place_character(key, team)
        if placed is None:
            print(f"  ✗ {key}: brak miejsca")
            continue
        character_id = sim.resolve_character(key)
        print(f"  - {sim.character_name(character_id)} ({character_id}) @ {placed}")


def main():
    """Główna funkcja."""
    parser = argparse.ArgumentParser(
        description="HexArena team setup demo",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--arena",
        type=str,
        default=None,
        help="Klucz areny z data/arenas.yaml (domyślnie: z defaults.yaml)"
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=12345,
        help="Ziarno losowości (domyślnie: 12345)"
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Szczegółowy output"
    )
    parser.add_argument(
        "--no-save",
        action="store_true",
        help="Nie zapisuj logu do pliku"
    )

    args = parser.parse_args()

    sim = SetupSimulator(arena=args.arena, seed=args.seed, data_path="data/")

    print("=" * 60)
    print("HEXARENA SETUP")
    print("=" * 60)
    print(f"Arena: {sim.arena.name} ({sim.arena.key})")
    print(f"Seed: {args.seed}")
    print()

    # ─────────────────────────────────────────────────────────────────────────
    # DRUŻYNY
    # ─────────────────────────────────────────────────────────────────────────
    print("Ally:")
    place_lineup(sim, DEMO_ALLY, Team.ALLY)
    print("Enemy:")
    place_lineup(sim, DEMO_ENEMY, Team.ENEMY)

    print()
    print(sim.grid.debug_print())
    print()

    # ─────────────────────────────────────────────────────────────────────────
    # CELE
    # ─────────────────────────────────────────────────────────────────────────
    print("-" * 60)
    print("CELE UMIEJĘTNOŚCI")
    print("-" * 60)
    for target in sim.targets():
        caster = sim.character_name(target["character_id"])
        target_name = (
            sim.character_name(target["target_character_id"])
            if target["target_character_id"] is not None else "-"
        )
        print(
            f"  {caster} [{target['team']}] -> {target_name} "
            f"@ {target['target_hex_id']}"
        )

    # ─────────────────────────────────────────────────────────────────────────
    # NAJBLIŻSI PRZECIWNICY
    # ─────────────────────────────────────────────────────────────────────────
    print()
    print("-" * 60)
    print("NAJBLIŻSI PRZECIWNICY")
    print("-" * 60)
    for team, entries in sim.closest_targets().items():
        for entry in entries:
            source = sim.character_name(entry["character_id"])
            target_name = sim.character_name(sim.grid.character_at(entry["target_hex_id"]))
            line = f"  {source} [{team}] -> {target_name} (ruch: {entry['distance']})"
            if args.verbose:
                line += f" ścieżka: {entry['path']}"
            print(line)

    # Zapisz log
    if not args.no_save:
        output_path = f"output/setup_{args.seed}.json"
        sim.save_log(output_path)
        print()
        print(f"📄 Log zapisany: {output_path}")

    # Verbose: pokaż statystyki
    if args.verbose:
        print()
        print("-" * 60)
        print("STATYSTYKI ZDARZEŃ")
        print("-" * 60)

        for event_type in EventType:
            count = len(sim.logger.get_events_by_type(event_type))
            if count > 0:
                print(f"  {event_type.name}: {count}")

        violations = sim.grid.invariant_violations()
        print(f"  Naruszenia niezmienników: {len(violations)}")

    print()
    print("Ustawienie zakończone!")

    return 0


if __name__ == "__main__":
    sys.exit(main())
