#!/usr/bin/env python3
"""
Archery Team Tournament CLI

Runs a tournament against the configured store (data/tournament_config.json).
Admin commands need the shared admin password, passed with --password or
the ARCHERY_ADMIN_PASSWORD environment variable.

Usage:
    python tournament_cli.py teams add "Golden Arrows" --members Ana Ben
    python tournament_cli.py setup "Club Cup" --teams 1 2 3 4 5 6 7
    python tournament_cli.py score 3 --a X 10 9 9 8 8 7 7 6 M --b 10 10 9 9 9 8 8 7 6 5
    python tournament_cli.py ranking
    python tournament_cli.py finals
    python tournament_cli.py export --xlsx results.xlsx
"""

import argparse
import json
import logging
import os
import sys
from pathlib import Path

from archery import (
    ArcheryError,
    ContinueMatch,
    DeleteLastSet,
    EditSet,
    GenerateFinals,
    ResetTournament,
    ScoringSession,
    SetupTournament,
    TournamentController,
    build_set,
    compute_rankings,
    create_store,
    final_placings,
    find_match,
    results_csv,
    score_link,
    teams_csv,
    write_results_workbook,
)
from archery.backup import backup_filename, save_backup
from archery.config import get_backup_dir, get_config
from archery.export import results_filename
from archery.logging_config import get_logger, setup_logging
from archery.match import match_status
from archery.utils import load_json
from archery.validators import find_duplicate_members


def build_controller(args) -> TournamentController:
    """Load the tournament from the configured store and log in if asked."""
    controller = TournamentController(create_store(get_config()))
    controller.load()
    password = args.password or os.environ.get('ARCHERY_ADMIN_PASSWORD')
    if password and not controller.login(password):
        print("❌ Incorrect admin password")
        sys.exit(1)
    return controller


def print_write_status(controller: TournamentController) -> None:
    if controller.write_error:
        print(f"⚠️  {controller.write_error} Run the command again to retry.")


def cmd_teams(args, controller: TournamentController) -> None:
    if args.teams_command == 'add':
        teams = controller.add_team(args.name, args.members)
        print(f"Registered team {teams[-1].id}: {teams[-1].name}")
    elif args.teams_command == 'update':
        controller.update_team(args.team_id, name=args.name, members=args.members, color=args.color)
        print(f"Updated team {args.team_id}")
    elif args.teams_command == 'remove':
        controller.remove_team(args.team_id)
        print(f"Removed team {args.team_id}")

    if args.teams_command == 'list' or args.csv:
        if args.csv:
            print(teams_csv(controller.registered_teams), end='')
            return
        for team in controller.registered_teams:
            members = ', '.join(team.members) if team.members else 'No members'
            print(f"  {team.id:>3}. {team.name} [{team.color or '-'}] - {members}")
        for warning in find_duplicate_members(controller.registered_teams):
            print(f"⚠️  Duplicate member: {warning}")


def cmd_setup(args, controller: TournamentController) -> None:
    by_id = {t.id: t for t in controller.registered_teams}
    missing = [i for i in args.teams if i not in by_id]
    if missing:
        print(f"❌ Unknown team ids: {', '.join(str(i) for i in missing)}")
        sys.exit(1)

    state = controller.dispatch(
        SetupTournament(
            name=args.name,
            teams=tuple(by_id[i] for i in args.teams),
            date=args.date,
        )
    )
    print(f"Tournament '{state.name}' created with {len(state.teams)} teams")
    print(f"  {len(state.group_matches)} group matches generated")


def cmd_score(args, controller: TournamentController) -> None:
    session = ScoringSession.open(controller, args.match_id)
    for value in args.a:
        session.add_arrow('A', value)
    for value in args.b:
        session.add_arrow('B', value)

    totals = session.current_totals()
    print(
        f"{session.team_a_name} {totals['team_a_total']} ({totals['team_a_x10s']} X+10) vs "
        f"{session.team_b_name} {totals['team_b_total']} ({totals['team_b_x10s']} X+10)"
    )
    match = session.save_set()
    print(f"Set saved. Match {match.id}: {match.team_a_set_points_total}-{match.team_b_set_points_total}")
    print_match_status(controller, match)


def print_match_status(controller: TournamentController, match) -> None:
    status = match_status(match)
    if status == 'completed':
        print(f"✅ Match completed, winner: {controller.team_name(match.winner_id)}")
    elif status == 'shoot_off_required':
        print("⚠️  Tied 4-4 after four sets: record a shoot-off")


def cmd_edit_set(args, controller: TournamentController) -> None:
    state = controller.dispatch(
        EditSet(match_id=args.match_id, set_index=args.set - 1, set_score=build_set(args.a, args.b))
    )
    print(f"Set {args.set} of match {args.match_id} updated")
    print_match_status(controller, find_match(state, args.match_id))


def cmd_delete_set(args, controller: TournamentController) -> None:
    controller.dispatch(DeleteLastSet(match_id=args.match_id))
    print(f"Last set of match {args.match_id} deleted")


def cmd_shootoff(args, controller: TournamentController) -> None:
    session = ScoringSession.open(controller, args.match_id)
    match = session.record_shoot_off(args.winner, args.a_score, args.b_score)
    print_match_status(controller, match)


def cmd_continue(args, controller: TournamentController) -> None:
    controller.dispatch(ContinueMatch(match_id=args.match_id))
    print(f"Match {args.match_id} reopened")


def cmd_ranking(args, controller: TournamentController) -> None:
    rankings = compute_rankings(controller.state)
    if not rankings:
        print("No ranking yet")
        return

    print("\n" + "=" * 60)
    print("RANKING")
    print("=" * 60)
    for rank, r in enumerate(rankings, 1):
        print(
            f"  {rank}. {r.team_name}: {r.match_points} pts, "
            f"avg {r.arrow_average:.2f}, {r.total_x10s} X+10 ({r.matches_played} played)"
        )


def cmd_matches(args, controller: TournamentController) -> None:
    state = controller.state
    if state is None:
        print("No tournament has been set up")
        return

    matches = state.playoff_matches if args.playoffs else state.group_matches
    for match in matches:
        print(
            f"  [{match.id:>3}] {match.label}: {controller.team_name(match.team_a_id)} vs "
            f"{controller.team_name(match.team_b_id)} "
            f"{match.team_a_set_points_total}-{match.team_b_set_points_total} "
            f"({match_status(match)}, {len(match.sets)} sets)"
        )


def cmd_finals(args, controller: TournamentController) -> None:
    state = controller.dispatch(GenerateFinals())
    print("Semifinals generated:")
    for match in state.playoff_matches:
        print(f"  {match.label}: {controller.team_name(match.team_a_id)} vs {controller.team_name(match.team_b_id)}")


def cmd_bracket(args, controller: TournamentController) -> None:
    state = controller.state
    if state is None or not state.playoff_matches:
        print("No playoff matches yet")
        return

    for match in state.playoff_matches:
        winner = controller.team_name(match.winner_id) if match.completed else 'TBD'
        print(
            f"  {match.label}: {controller.team_name(match.team_a_id)} vs "
            f"{controller.team_name(match.team_b_id)} -> {winner}"
        )

    if state.stage == 'finished':
        medals = final_placings(state)
        print("\nMedals:")
        print(f"  🥇 {controller.team_name(medals.gold)}")
        print(f"  🥈 {controller.team_name(medals.silver)}")
        print(f"  🥉 {controller.team_name(medals.bronze)}")


def cmd_export(args, controller: TournamentController) -> None:
    state = controller.state
    if state is None:
        print("❌ No tournament to export")
        sys.exit(1)

    rankings = compute_rankings(state)
    output_path = Path(args.output or results_filename())
    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_text(results_csv(state, rankings), encoding='utf-8')
    print(f"Results written to {output_path}")

    if args.xlsx:
        print(f"Workbook written to {write_results_workbook(args.xlsx, state, rankings)}")


def cmd_backup(args, controller: TournamentController) -> None:
    directory = args.dir or get_backup_dir()
    path = save_backup(controller.backup(), directory, args.filename or backup_filename())
    print(f"Backup written to {path}")


def cmd_restore(args, controller: TournamentController) -> None:
    controller.restore(load_json(args.path))
    print_write_status(controller)
    print(f"Backup restored from {args.path}")


def cmd_reset(args, controller: TournamentController) -> None:
    if not args.yes:
        print("❌ Reset clears the whole tournament; pass --yes to confirm")
        sys.exit(1)
    controller.dispatch(ResetTournament())
    print("Tournament reset")


def cmd_link(args, controller: TournamentController) -> None:
    print(score_link(args.base_url or get_config().score_link_base_url, args.match_id))


def add_arrow_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--a", nargs=10, required=True, metavar="ARROW", help="Team A arrows (X, 10-5, M)")
    parser.add_argument("--b", nargs=10, required=True, metavar="ARROW", help="Team B arrows (X, 10-5, M)")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Archery team tournament manager")
    parser.add_argument("--password", "-p", default=None, help="Admin password")
    parser.add_argument("--verbose", "-v", action="store_true", help="Debug logging")
    parser.add_argument("--no-log-file", action="store_true", help="Log to the console only")
    sub = parser.add_subparsers(dest="command", required=True)

    teams = sub.add_parser("teams", help="Manage registered teams")
    teams.add_argument("--csv", action="store_true", help="Print the team list as CSV")
    teams_sub = teams.add_subparsers(dest="teams_command", required=True)
    add = teams_sub.add_parser("add", help="Register a team")
    add.add_argument("name")
    add.add_argument("--members", nargs="*", default=None)
    update = teams_sub.add_parser("update", help="Edit a registered team")
    update.add_argument("team_id", type=int)
    update.add_argument("--name", default=None)
    update.add_argument("--members", nargs="*", default=None)
    update.add_argument("--color", default=None)
    teams_sub.add_parser("list", help="List registered teams")
    remove = teams_sub.add_parser("remove", help="Remove a registered team")
    remove.add_argument("team_id", type=int)

    setup = sub.add_parser("setup", help="Create a tournament from registered teams")
    setup.add_argument("name")
    setup.add_argument("--teams", nargs="+", type=int, required=True, help="Team ids in seeding order")
    setup.add_argument("--date", default=None, help="Tournament date (YYYY-MM-DD)")

    score = sub.add_parser("score", help="Score one set of a match")
    score.add_argument("match_id", type=int)
    add_arrow_args(score)

    edit = sub.add_parser("edit-set", help="Replace a saved set")
    edit.add_argument("match_id", type=int)
    edit.add_argument("set", type=int, help="Set number (1-based)")
    add_arrow_args(edit)

    delete = sub.add_parser("delete-set", help="Delete the last set of a match")
    delete.add_argument("match_id", type=int)

    shootoff = sub.add_parser("shootoff", help="Record a shoot-off winner")
    shootoff.add_argument("match_id", type=int)
    shootoff.add_argument("winner", choices=["A", "B", "a", "b"])
    shootoff.add_argument("--a-score", default=None, help="Team A shoot-off arrow")
    shootoff.add_argument("--b-score", default=None, help="Team B shoot-off arrow")

    cont = sub.add_parser("continue", help="Reopen a completed match")
    cont.add_argument("match_id", type=int)

    sub.add_parser("ranking", help="Show the group ranking")

    matches = sub.add_parser("matches", help="List matches")
    matches.add_argument("--playoffs", action="store_true", help="List playoff matches")

    sub.add_parser("finals", help="Close the group stage and create the semifinals")
    sub.add_parser("bracket", help="Show the playoff bracket and medals")

    export = sub.add_parser("export", help="Export results as CSV")
    export.add_argument("--output", "-o", default=None)
    export.add_argument("--xlsx", default=None, help="Also write an Excel workbook")

    backup = sub.add_parser("backup", help="Write a backup file")
    backup.add_argument("--dir", default=None)
    backup.add_argument("--filename", default=None)

    restore = sub.add_parser("restore", help="Restore from a backup file")
    restore.add_argument("path")

    reset = sub.add_parser("reset", help="Clear the tournament")
    reset.add_argument("--yes", action="store_true")

    link = sub.add_parser("link", help="Print the scoring link of a match")
    link.add_argument("match_id", type=int)
    link.add_argument("--base-url", default=None)

    return parser


COMMANDS = {
    "teams": cmd_teams,
    "setup": cmd_setup,
    "score": cmd_score,
    "edit-set": cmd_edit_set,
    "delete-set": cmd_delete_set,
    "shootoff": cmd_shootoff,
    "continue": cmd_continue,
    "ranking": cmd_ranking,
    "matches": cmd_matches,
    "finals": cmd_finals,
    "bracket": cmd_bracket,
    "export": cmd_export,
    "backup": cmd_backup,
    "restore": cmd_restore,
    "reset": cmd_reset,
    "link": cmd_link,
}


def main(argv=None):
    args = build_parser().parse_args(argv)

    setup_logging(
        level=logging.DEBUG if args.verbose else None,
        log_to_file=not args.no_log_file,
    )
    get_logger('archery.cli').debug(f'Running command: {args.command}')

    try:
        controller = build_controller(args)
        COMMANDS[args.command](args, controller)
    except (ArcheryError, ValueError, json.JSONDecodeError, FileNotFoundError) as e:
        print(f"❌ {e}")
        sys.exit(1)

    print_write_status(controller)


if __name__ == "__main__":
    main()
