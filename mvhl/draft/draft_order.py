"""
Draft order construction.

The team sequence for round one is a configuration input. Straight order
repeats it every round; snake order reverses it on even rounds.
"""

from typing import List, Sequence

from .draft_models import DraftOrderStyle, DraftPick


def build_draft_order(
    team_order: Sequence[str],
    total_rounds: int,
    style: DraftOrderStyle = DraftOrderStyle.STRAIGHT,
    pick_time_limit: int = 300
) -> List[List[DraftPick]]:
    """
    Build the draft slots round by round.

    Args:
        team_order: Team ids in round-one pick order
        total_rounds: Number of rounds
        style: Straight or snake ordering
        pick_time_limit: Initial countdown for every slot

    Returns:
        One list of DraftPick per round; overall pick numbers run 1..N

    Raises:
        ValueError: On an empty or duplicated team order
    """
    if not team_order:
        raise ValueError("Draft order needs at least one team")
    if len(set(team_order)) != len(team_order):
        raise ValueError("Draft order lists a team more than once")

    style = DraftOrderStyle(style)
    picks_per_round = len(team_order)
    rounds = []

    for round_number in range(1, total_rounds + 1):
        sequence = list(team_order)
        if style is DraftOrderStyle.SNAKE and round_number % 2 == 0:
            sequence.reverse()

        rounds.append([
            DraftPick(
                pick_number=(round_number - 1) * picks_per_round + index,
                round=round_number,
                team_id=team_id,
                time_remaining=pick_time_limit,
            )
            for index, team_id in enumerate(sequence, 1)
        ])

    return rounds
