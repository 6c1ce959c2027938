import argparse
import os
import sys
import yaml
from americano.exceptions import FixtureError
from americano.fixture import generate_fixture, matches_by_slot
from americano.state import parse_courts_text

DEFAULT_ROUNDS = 5
DEFAULT_SLOTS = 3
DEFAULT_COURTS = 'Saha 1, Saha 2'


def load_players(file_path):
    """Load the roster from a YAML list (or a mapping with a 'players' list)."""
    with open(file_path, mode='r', encoding='utf-8') as file:
        data = yaml.safe_load(file)
    if isinstance(data, dict):
        data = data.get('players', [])
    if not data:
        return []
    return list(dict.fromkeys(str(name).strip() for name in data if str(name).strip()))


def format_fixture(fixture):
    """Render a fixture as text, one block per round/slot."""
    lines = []
    for (round_number, slot), matches in matches_by_slot(fixture).items():
        if lines:
            lines.append("")
        lines.append(f"# Round {round_number}, Slot {slot}")
        for match in matches:
            line = f"{match.court}: {' & '.join(match.team_a)} vs {' & '.join(match.team_b)}"
            if match.benched:
                line += f" (bench: {' & '.join(match.benched)})"
            lines.append(line)
    return "\n".join(lines)


def build_parser():
    parser = argparse.ArgumentParser(description="Print an Americano fixture for a roster.")
    parser.add_argument('players_file', nargs='?', help="YAML file with the player list (default: data/players.yaml)")
    parser.add_argument('--rounds', type=int, default=DEFAULT_ROUNDS, help="Number of rounds")
    parser.add_argument('--slots', type=int, default=DEFAULT_SLOTS, help="Slots per round")
    parser.add_argument('--courts', default=DEFAULT_COURTS, help="Comma separated court names")
    return parser


def main(argv=None):
    args = build_parser().parse_args(argv)

    script_dir = os.path.dirname(__file__)
    base_dir = os.path.dirname(script_dir)
    players_file = args.players_file or os.path.join(base_dir, 'data', 'players.yaml')

    if not os.path.exists(players_file):
        print(f"Players file not found: {players_file}", file=sys.stderr)
        return 1

    players = load_players(players_file)
    try:
        fixture = generate_fixture(players, args.rounds, args.slots, parse_courts_text(args.courts))
    except FixtureError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    print(format_fixture(fixture))
    return 0


if __name__ == '__main__':
    sys.exit(main())
