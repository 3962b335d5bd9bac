"""
Prompt builders for generated league content.
"""

from typing import Optional

from ..league.league_state import PlayerStats, SkaterStats


def draft_commentary_prompt(pick_number: int, prospect: str, team: str, position: str) -> str:
    return (
        "You are a draft analyst for a major sports network.\n\n"
        "Provide a multi-paragraph analysis of the following draft pick:\n\n"
        f"Pick Number: {pick_number}\n"
        f"Player Name: {prospect}\n"
        f"Team: {team}\n"
        f"Position: {position}\n\n"
        "Discuss the player's strengths, how they fit with the team, "
        "and the overall value of the pick."
    )


def scouting_report_prompt(player_name: str, position: str, stats: Optional[PlayerStats]) -> str:
    lines = [
        "You are an expert hockey scout. Generate a scouting report for the following player:",
        "",
        f"Player Name: {player_name}",
        f"Position: {position}",
    ]
    if stats is not None:
        lines += ["", "Statistics:"]
        if isinstance(stats, SkaterStats):
            lines += [
                f"- Games Played: {stats.games_played}",
                f"- Goals: {stats.goals}",
                f"- Assists: {stats.assists}",
                f"- Points: {stats.points}",
                f"- Plus/Minus: {stats.plus_minus}",
                f"- Penalty Minutes: {stats.penalty_minutes}",
                f"- Hits: {stats.hits}",
                f"- Blocks: {stats.blocks}",
                f"- Shots on Goal: {stats.shots_on_goal}",
            ]
        else:
            lines += [
                f"- Games Played: {stats.games_played}",
                f"- Record: {stats.wins}-{stats.losses}-{stats.ot_losses}",
                f"- Save Percentage: {stats.save_percentage:.3f}",
                f"- Goals Against Average: {stats.goals_against_average:.2f}",
                f"- Shutouts: {stats.shutouts}",
            ]
    lines += [
        "",
        "Write a concise scouting report (approximately 3-4 paragraphs) highlighting "
        "the player's strengths and weaknesses based on the provided statistics.",
    ]
    return "\n".join(lines)


def news_recap_prompt(game_results: str, key_players: str) -> str:
    return (
        "You are an expert sports news writer. Generate a weekly news recap based "
        "on the following information:\n\n"
        f"Game Results: {game_results}\n"
        f"Key Players: {key_players}\n\n"
        "Write a compelling and informative recap of the past week's events, "
        "including key developments, performances, trades, injuries, and other notable news."
    )


def hall_of_fame_prompt(player_name: str) -> str:
    return (
        "You are a sports journalist specializing in hockey, and are writing a career "
        "retrospective for a Hall of Fame player.\n\n"
        "Write a multi-paragraph career retrospective for the following player:\n\n"
        f"Player Name: {player_name}\n\n"
        "Focus on their career achievements, impact on the sport, memorable moments, "
        "and lasting legacy."
    )


def player_headshot_prompt(player_name: str, position: str, team_name: str) -> str:
    return (
        f"photorealistic headshot of a hockey player named {player_name}, {position} "
        f"for the {team_name}, looking at the camera, professional sports photography style"
    )
